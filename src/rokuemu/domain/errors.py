class RokuEmuError(Exception):
    """Base class for emulator errors."""


class DiscoveryStartupError(RokuEmuError):
    """The SSDP socket could not be opened, bound or joined to the group."""
