import argparse
import dataclasses
import logging
import os
import sys

from rokuemu.api import EcpClient
from rokuemu.application.handlers import LoggingCommandHandler
from rokuemu.application.ports import Target
from rokuemu.application.server import EmulatedRokuServer
from rokuemu.domain.identity import DeviceConfiguration
from rokuemu.infrastructure.config import DeviceSettings, build_device, load_config
from rokuemu.infrastructure.upnp_gateway import EcpDiscoveryGateway

LOG = logging.getLogger(__name__)

_DEVICE_INFO_FIELDS = (
    "device-id",
    "serial-number",
    "udn",
    "vendor-name",
    "model-name",
    "model-number",
    "software-version",
    "power-mode",
)
_SERVE_OVERRIDES = (
    "usn",
    "host_ip",
    "listen_port",
    "advertise_ip",
    "advertise_port",
    "bind_multicast",
)


def _format_target(index: int, target: Target) -> str:
    return f"[{index}] {target.name} -> {target.address}:{target.port}"


def _discover_targets(timeout_s: float) -> list[Target]:
    return EcpDiscoveryGateway().discover(timeout_s=timeout_s)


def _device_from_args(args, settings: DeviceSettings) -> DeviceConfiguration:
    overrides = {
        name: getattr(args, name)
        for name in _SERVE_OVERRIDES
        if getattr(args, name, None) is not None
    }
    device = build_device(dataclasses.replace(settings, **overrides))
    if device is None:
        raise RuntimeError("A usn and a host IP are required (--usn/--host-ip or config).")
    return device


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        force=True,
    )


def main() -> None:
    p = argparse.ArgumentParser(
        prog="rokuemu", description="Emulated Roku device (SSDP discovery + ECP API)"
    )
    p.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Override log level (e.g. DEBUG, INFO, WARNING).",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    serve = sub.add_parser("serve")
    serve.add_argument("--config", type=str, default=None)
    serve.add_argument("--usn", type=str, default=None)
    serve.add_argument("--host-ip", type=str, default=None)
    serve.add_argument("--listen-port", type=int, default=None)
    serve.add_argument("--advertise-ip", type=str, default=None)
    serve.add_argument("--advertise-port", type=int, default=None)
    serve.add_argument(
        "--bind-multicast",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Bind the SSDP socket to the wildcard address instead of --host-ip.",
    )

    list_parser = sub.add_parser("list")
    list_parser.add_argument("--discover-timeout", type=float, default=3.0)

    info = sub.add_parser("info")
    keypress = sub.add_parser("keypress")
    keypress.add_argument("key", type=str)
    launch = sub.add_parser("launch")
    launch.add_argument("app_id", type=str)
    for client_parser in (info, keypress, launch):
        client_parser.add_argument("--ip", type=str, required=True)
        client_parser.add_argument("--port", type=int, default=8060)

    args = p.parse_args()
    requested_log_level = args.log_level or os.getenv("ROKUEMU_LOG_LEVEL")
    if requested_log_level is not None:
        _configure_logging(requested_log_level)

    if args.cmd == "list":
        targets = _discover_targets(timeout_s=args.discover_timeout)
        if not targets:
            print("No device detected.")
            return
        for i, t in enumerate(targets):
            print(_format_target(i, t))
        return

    if args.cmd == "serve":
        try:
            cfg = load_config(args.config)
            if requested_log_level is None:
                _configure_logging(cfg.log_level)
            device = _device_from_args(args, cfg.device)
            LOG.debug("serve usn=%s host=%s:%s", device.usn, device.host_ip, device.listen_port)
            server = EmulatedRokuServer(
                config=device,
                handler=LoggingCommandHandler(),
                announce_interval_s=cfg.announce_interval_s,
            )
            server.run_forever()
            return
        except KeyboardInterrupt:
            return
        except Exception as exc:
            print(f"Serve error: {exc}", file=sys.stderr)
            raise SystemExit(2)

    client = EcpClient(args.ip, args.port)
    try:
        if args.cmd == "info":
            data = client.device_info()
            for field in _DEVICE_INFO_FIELDS:
                if field in data:
                    print(f"{field}: {data[field]}")
        elif args.cmd == "keypress":
            client.keypress(args.key)
            print("OK")
        elif args.cmd == "launch":
            client.launch(args.app_id)
            print("OK")
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(2)
