import ipaddress
from dataclasses import dataclass
from typing import AbstractSet

_PRIVATE_NETWORKS = (
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("127.0.0.0/8"),
)


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: str = ""


ALLOW = AccessDecision(allowed=True)


def normalize_remote_ipv4(remote: str | None) -> ipaddress.IPv4Address | None:
    if not remote:
        return None
    try:
        addr = ipaddress.ip_address(remote.strip())
    except ValueError:
        return None
    if isinstance(addr, ipaddress.IPv6Address):
        return addr.ipv4_mapped
    return addr


def is_private_ipv4(addr: ipaddress.IPv4Address) -> bool:
    return any(addr in net for net in _PRIVATE_NETWORKS)


def authorize(
    host: str | None,
    remote: str | None,
    allowed_hosts: AbstractSet[str],
) -> AccessDecision:
    """Decide whether an ECP request may reach its route.

    Only the advertised or bound ``ip[:port]`` is accepted as ``Host`` so a
    rebound DNS name cannot drive the API from a browser, then the peer must
    be a private or loopback IPv4 address.
    """
    if not host or host not in allowed_hosts:
        return AccessDecision(allowed=False, reason=f"Rejected non-advertised access by host {host}")

    addr = normalize_remote_ipv4(remote)
    if addr is None or not is_private_ipv4(addr):
        return AccessDecision(allowed=False, reason=f"Rejected non-local access from remote {remote}")
    return ALLOW
