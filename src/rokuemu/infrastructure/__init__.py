from .config import DeviceSettings, EmulatorConfig, build_device, load_config
from .ecp_gateway import EcpHttpGateway
from .ecp_http import CommandServer
from .ssdp_discovery import DiscoveryEngine, EngineState, open_multicast_socket
from .upnp_gateway import EcpDiscoveryGateway

__all__ = [
    "DeviceSettings",
    "EmulatorConfig",
    "build_device",
    "load_config",
    "EcpHttpGateway",
    "CommandServer",
    "DiscoveryEngine",
    "EngineState",
    "open_multicast_socket",
    "EcpDiscoveryGateway",
]
