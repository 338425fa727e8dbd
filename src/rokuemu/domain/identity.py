import sys
import uuid
from dataclasses import dataclass, field


def derive_device_id(usn: str) -> str:
    """Stable UPnP UDN for a device serial (same usn, same id, every run)."""
    return str(uuid.uuid5(uuid.NAMESPACE_OID, usn))


def default_bind_multicast(platform: str | None = None) -> bool:
    # Windows refuses to bind the multicast socket to a unicast interface address.
    return (platform or sys.platform) == "win32"


@dataclass(frozen=True)
class DeviceConfiguration:
    usn: str
    host_ip: str
    listen_port: int = 8060
    advertise_ip: str | None = None
    advertise_port: int | None = None
    bind_multicast: bool | None = None
    device_id: str = field(init=False)
    allowed_hosts: frozenset[str] = field(init=False)

    def __post_init__(self) -> None:
        # frozen dataclass: derived fields are filled through object.__setattr__
        if self.advertise_ip is None:
            object.__setattr__(self, "advertise_ip", self.host_ip)
        if self.advertise_port is None:
            object.__setattr__(self, "advertise_port", self.listen_port)
        if self.bind_multicast is None:
            object.__setattr__(self, "bind_multicast", default_bind_multicast())
        object.__setattr__(self, "device_id", derive_device_id(self.usn))
        object.__setattr__(
            self,
            "allowed_hosts",
            frozenset(
                {
                    self.host_ip,
                    f"{self.host_ip}:{self.listen_port}",
                    str(self.advertise_ip),
                    f"{self.advertise_ip}:{self.advertise_port}",
                }
            ),
        )

    @property
    def location(self) -> str:
        return f"http://{self.advertise_ip}:{self.advertise_port}/"
