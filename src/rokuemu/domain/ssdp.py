import random
from dataclasses import dataclass

MULTICAST_GROUP = "239.255.255.250"
MULTICAST_PORT = 1900
MULTICAST_TTL_S = 300
MULTICAST_MAX_DELAY_S = 5
ECP_SEARCH_TARGET = "roku:ecp"
ALL_SEARCH_TARGET = "ssdp:all"
SERVER_TOKEN = "Roku/12.0.0 UPnP/1.0 Roku/12.0.0"

_SEARCH_REQUEST_LINE = "M-SEARCH * HTTP/1.1"
_NEWLINE = "\r\n"


@dataclass(frozen=True)
class SearchRequest:
    search_target: str
    mx: int | None = None


def parse_ssdp_headers(payload: bytes) -> tuple[str, dict[str, str]]:
    text = payload.decode("utf-8", errors="ignore")
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines:
        return "", {}
    headers: dict[str, str] = {}
    for line in lines[1:]:
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        headers[key.strip().lower()] = value.strip()
    return lines[0], headers


def _parse_mx(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


def parse_search_request(payload: bytes) -> SearchRequest | None:
    """Return the search if ``payload`` is an M-SEARCH this device answers."""
    request_line, headers = parse_ssdp_headers(payload)
    if request_line.upper() != _SEARCH_REQUEST_LINE:
        return None
    st = headers.get("st", "")
    if st not in (ALL_SEARCH_TARGET, ECP_SEARCH_TARGET):
        return None
    return SearchRequest(search_target=st, mx=_parse_mx(headers.get("mx")))


def reply_delay_bound(mx: int | None) -> int:
    if mx is None:
        return MULTICAST_MAX_DELAY_S + 1
    return mx % (MULTICAST_MAX_DELAY_S + 1) + 1


def reply_delay(mx: int | None, rng: random.Random) -> float:
    # random() is in [0, 1), so the delay never reaches the bound.
    return rng.random() * reply_delay_bound(mx)


def render_search_response(advertise_ip: str, advertise_port: int, usn: str) -> bytes:
    lines = [
        "HTTP/1.1 200 OK",
        f"Cache-Control: max-age = {MULTICAST_TTL_S}",
        f"ST: {ECP_SEARCH_TARGET}",
        f"SERVER: {SERVER_TOKEN}",
        "Ext: ",
        f"Location: http://{advertise_ip}:{advertise_port}/",
        f"USN: uuid:{ECP_SEARCH_TARGET}:{usn}",
    ]
    return (_NEWLINE.join(lines) + _NEWLINE * 2).encode("utf-8")


def render_notify(advertise_ip: str, advertise_port: int, usn: str) -> bytes:
    lines = [
        "NOTIFY * HTTP/1.1",
        f"HOST: {MULTICAST_GROUP}:{MULTICAST_PORT}",
        f"Cache-Control: max-age = {MULTICAST_TTL_S}",
        "NT: upnp:rootdevice",
        "NTS: ssdp:alive",
        f"Location: http://{advertise_ip}:{advertise_port}/",
        f"USN: uuid:{ECP_SEARCH_TARGET}:{usn}",
    ]
    return (_NEWLINE.join(lines) + _NEWLINE * 2).encode("utf-8")
