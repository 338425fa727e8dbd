from .access import AccessDecision, authorize
from .errors import DiscoveryStartupError, RokuEmuError
from .identity import DeviceConfiguration, derive_device_id
from .keys import RokuKey, lookup_key

__all__ = [
    "AccessDecision",
    "authorize",
    "DiscoveryStartupError",
    "RokuEmuError",
    "DeviceConfiguration",
    "derive_device_id",
    "RokuKey",
    "lookup_key",
]
