import logging
import re
import socket
import time
from typing import Iterable
from urllib.parse import urlparse

import httpx  # type: ignore[reportMissingImports]

from rokuemu.application.ports import DiscoveryPort, Target
from rokuemu.domain.ssdp import (
    ECP_SEARCH_TARGET,
    MULTICAST_GROUP,
    MULTICAST_PORT,
    parse_ssdp_headers,
)

_SSDP_ADDR = (MULTICAST_GROUP, MULTICAST_PORT)
_DEFAULT_PORT = 8060
_USN_PREFIX = f"uuid:{ECP_SEARCH_TARGET}:"
LOG = logging.getLogger(__name__)


def _iter_ssdp_responses(timeout_s: float, mx: int = 1) -> Iterable[dict[str, str]]:
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP) as sock:
        sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, 2)
        sock.settimeout(max(0.2, min(timeout_s, 1.0)))
        msg = "\r\n".join(
            [
                "M-SEARCH * HTTP/1.1",
                f"HOST: {MULTICAST_GROUP}:{MULTICAST_PORT}",
                'MAN: "ssdp:discover"',
                f"MX: {mx}",
                f"ST: {ECP_SEARCH_TARGET}",
                "",
                "",
            ]
        ).encode("ascii")
        LOG.debug("SSDP M-SEARCH start st=%s timeout_s=%.2f", ECP_SEARCH_TARGET, timeout_s)
        sock.sendto(msg, _SSDP_ADDR)

        deadline = time.monotonic() + max(0.1, timeout_s)
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                LOG.debug("SSDP M-SEARCH finished (timeout reached)")
                return
            sock.settimeout(max(0.05, min(remaining, 0.5)))
            try:
                payload, _ = sock.recvfrom(8192)
            except TimeoutError:
                continue
            except OSError:
                LOG.debug("SSDP receive aborted due to socket error")
                return
            status_line, headers = parse_ssdp_headers(payload)
            if not status_line.startswith("HTTP/") or not headers:
                continue
            LOG.debug(
                "SSDP response location=%s st=%s usn=%s",
                headers.get("location", ""),
                headers.get("st", ""),
                headers.get("usn", ""),
            )
            yield headers


def _is_roku_manufacturer(location: str, timeout_s: float) -> bool:
    timeout = max(0.3, min(timeout_s, 1.5))
    try:
        with httpx.Client(timeout=timeout) as client:
            response = client.get(location)
        response.raise_for_status()
        xml_text = response.text
    except Exception as exc:
        LOG.debug("UPnP XML fetch failed location=%s err=%s", location, exc)
        return False

    if not re.search(r"<manufacturer>\s*Roku\s*</manufacturer>", xml_text, flags=re.IGNORECASE):
        LOG.debug("UPnP XML rejected location=%s manufacturer_tag_not_found", location)
        return False

    LOG.debug("UPnP XML accepted location=%s manufacturer=Roku", location)
    return True


def _usn_serial(usn: str) -> str:
    if usn.startswith(_USN_PREFIX):
        return usn[len(_USN_PREFIX) :]
    return usn


class EcpDiscoveryGateway(DiscoveryPort):
    def discover(self, timeout_s: float = 3.0) -> list[Target]:
        uniq: dict[str, Target] = {}
        LOG.debug("ECP discovery begin timeout_s=%.2f target=%s", timeout_s, ECP_SEARCH_TARGET)
        for headers in _iter_ssdp_responses(timeout_s):
            location = headers.get("location", "")
            parsed = urlparse(location)
            host = parsed.hostname
            if not host:
                LOG.debug("SSDP response ignored (missing host in location): %s", location)
                continue
            if host in uniq:
                continue
            if not _is_roku_manufacturer(location=location, timeout_s=timeout_s):
                continue

            serial = _usn_serial(headers.get("usn", ""))
            uniq[host] = Target(
                address=host,
                port=parsed.port or _DEFAULT_PORT,
                name=f"Roku:{serial or host}",
                usn=serial,
            )
            LOG.debug("ECP device accepted host=%s usn=%s", host, serial)

        targets = list(uniq.values())
        LOG.debug("ECP discovery done found=%d", len(targets))
        return targets
