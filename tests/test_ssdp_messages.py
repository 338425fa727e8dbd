import random

from rokuemu.domain import ssdp


def _search(st: str, mx: str | None = None, request_line: str = "M-SEARCH * HTTP/1.1") -> bytes:
    lines = [request_line, "HOST: 239.255.255.250:1900", 'MAN: "ssdp:discover"']
    if mx is not None:
        lines.append(f"MX: {mx}")
    lines.append(f"ST: {st}")
    return ("\r\n".join(lines) + "\r\n\r\n").encode("ascii")


class FixedRandom(random.Random):
    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


def test_parse_search_request_accepts_ecp_and_all_targets() -> None:
    ecp = ssdp.parse_search_request(_search("roku:ecp", mx="3"))
    assert ecp == ssdp.SearchRequest(search_target="roku:ecp", mx=3)
    everything = ssdp.parse_search_request(_search("ssdp:all"))
    assert everything == ssdp.SearchRequest(search_target="ssdp:all", mx=None)


def test_parse_search_request_rejects_unrelated_target() -> None:
    assert ssdp.parse_search_request(_search("urn:schemas-upnp-org:device:MediaRenderer:1")) is None
    assert ssdp.parse_search_request(_search("roku:ecp:extra")) is None


def test_parse_search_request_rejects_non_search_and_garbage() -> None:
    assert ssdp.parse_search_request(_search("roku:ecp", request_line="NOTIFY * HTTP/1.1")) is None
    assert ssdp.parse_search_request(b"") is None
    assert ssdp.parse_search_request(b"\xff\xfe\x00garbage") is None
    assert ssdp.parse_search_request(b"M-SEARCH * HTTP/1.1\r\n\r\n") is None


def test_parse_search_request_header_names_are_case_insensitive() -> None:
    payload = b"M-SEARCH * HTTP/1.1\r\nst: roku:ecp\r\nmx: 12\r\n\r\n"
    assert ssdp.parse_search_request(payload) == ssdp.SearchRequest("roku:ecp", 12)


def test_non_integer_mx_is_treated_as_absent() -> None:
    req = ssdp.parse_search_request(_search("roku:ecp", mx="soon"))
    assert req is not None and req.mx is None


def test_reply_delay_bound_follows_mx_modulo_six() -> None:
    assert ssdp.reply_delay_bound(7) == 2
    assert ssdp.reply_delay_bound(0) == 1
    assert ssdp.reply_delay_bound(5) == 6
    assert ssdp.reply_delay_bound(6) == 1
    assert ssdp.reply_delay_bound(120) == 1
    assert ssdp.reply_delay_bound(None) == 6


def test_reply_delay_stays_inside_half_open_window() -> None:
    assert ssdp.reply_delay(7, FixedRandom(0.0)) == 0.0
    assert ssdp.reply_delay(7, FixedRandom(0.5)) == 1.0
    assert ssdp.reply_delay(7, FixedRandom(0.999999)) < 2.0
    assert ssdp.reply_delay(None, FixedRandom(0.999999)) < 6.0

    rng = random.Random(1234)
    delays = [ssdp.reply_delay(7, rng) for _ in range(500)]
    assert all(0.0 <= d < 2.0 for d in delays)


def test_render_search_response_headers() -> None:
    payload = ssdp.render_search_response("192.168.1.10", 8060, "ABC123")
    status, headers = ssdp.parse_ssdp_headers(payload)
    assert status == "HTTP/1.1 200 OK"
    assert headers["cache-control"] == "max-age = 300"
    assert headers["st"] == "roku:ecp"
    assert headers["location"] == "http://192.168.1.10:8060/"
    assert headers["usn"] == "uuid:roku:ecp:ABC123"
    assert payload.endswith(b"\r\n\r\n")


def test_render_notify_headers() -> None:
    payload = ssdp.render_notify("10.0.0.5", 18060, "ABC123")
    status, headers = ssdp.parse_ssdp_headers(payload)
    assert status == "NOTIFY * HTTP/1.1"
    assert headers["host"] == "239.255.255.250:1900"
    assert headers["nts"] == "ssdp:alive"
    assert headers["nt"] == "upnp:rootdevice"
    assert headers["location"] == "http://10.0.0.5:18060/"
    assert headers["usn"] == "uuid:roku:ecp:ABC123"
