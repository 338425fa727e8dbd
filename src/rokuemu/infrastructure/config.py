import ipaddress
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from rokuemu.domain.identity import DeviceConfiguration

try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib


@dataclass(frozen=True)
class DeviceSettings:
    usn: str | None = None
    host_ip: str | None = None
    listen_port: int = 8060
    advertise_ip: str | None = None
    advertise_port: int | None = None
    bind_multicast: bool | None = None


@dataclass(frozen=True)
class EmulatorConfig:
    device: DeviceSettings = field(default_factory=DeviceSettings)
    log_level: str = "INFO"
    announce_interval_s: float = 300.0


def _toml_error_type():
    return getattr(tomllib, "TOMLDecodeError", ValueError)


class _DeviceConfigModel(BaseModel):
    usn: str | None = None
    host_ip: str | None = None
    listen_port: int = 8060
    advertise_ip: str | None = None
    advertise_port: int | None = None
    bind_multicast: bool | None = None

    @field_validator("listen_port", "advertise_port", mode="before")
    @classmethod
    def _reject_bool_numbers(cls, value):
        if isinstance(value, bool):
            raise ValueError("boolean values are not valid for numeric fields")
        return value

    @field_validator("listen_port", "advertise_port")
    @classmethod
    def _check_port_range(cls, value):
        if value is not None and not 1 <= value <= 65535:
            raise ValueError("port must be within 1..65535")
        return value

    @field_validator("host_ip", "advertise_ip")
    @classmethod
    def _check_ipv4(cls, value):
        if value is None:
            return value
        try:
            ipaddress.IPv4Address(value.strip())
        except ValueError as exc:
            raise ValueError(f"not an IPv4 address: {value}") from exc
        return value.strip()

    @field_validator("usn")
    @classmethod
    def _strip_usn(cls, value):
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("usn must not be empty")
        return value


class _EmulatorConfigModel(BaseModel):
    device: _DeviceConfigModel = Field(default_factory=_DeviceConfigModel)
    log_level: str = "INFO"
    announce_interval_s: float = 300.0

    @field_validator("announce_interval_s", mode="before")
    @classmethod
    def _reject_bool_floats(cls, value):
        if isinstance(value, bool):
            raise ValueError("boolean values are not valid for numeric fields")
        return value

    @field_validator("announce_interval_s")
    @classmethod
    def _positive_interval(cls, value):
        if value <= 0:
            raise ValueError("announce_interval_s must be positive")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _uppercase_log_level(cls, value):
        return str(value).upper()


def _default_config_path() -> Path:
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "rokuemu" / "config.toml"
    return Path.home() / ".config" / "rokuemu" / "config.toml"


def _load_toml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    if not path.is_file():
        raise ValueError(f"Config path is not a file: {path}")
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except OSError as exc:
        raise ValueError(f"Cannot read config file: {path}") from exc
    except _toml_error_type() as exc:
        raise ValueError(f"Invalid TOML in config file: {path}") from exc
    return data if isinstance(data, dict) else {}


_DEVICE_ENV = {
    "ROKUEMU_USN": "usn",
    "ROKUEMU_HOST_IP": "host_ip",
    "ROKUEMU_LISTEN_PORT": "listen_port",
    "ROKUEMU_ADVERTISE_IP": "advertise_ip",
    "ROKUEMU_ADVERTISE_PORT": "advertise_port",
}


def _merge_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    merged = dict(data)
    device_data = dict(merged.get("device")) if isinstance(merged.get("device"), dict) else {}

    for env_name, key in _DEVICE_ENV.items():
        value = os.getenv(env_name)
        if value is not None:
            device_data[key] = value
    env_log_level = os.getenv("ROKUEMU_LOG_LEVEL")
    if env_log_level is not None:
        merged["log_level"] = env_log_level

    merged["device"] = device_data
    return merged


def build_device(settings: DeviceSettings) -> DeviceConfiguration | None:
    if not settings.usn or not settings.host_ip:
        return None
    return DeviceConfiguration(
        usn=settings.usn,
        host_ip=settings.host_ip,
        listen_port=settings.listen_port,
        advertise_ip=settings.advertise_ip,
        advertise_port=settings.advertise_port,
        bind_multicast=settings.bind_multicast,
    )


def load_config(path: str | None = None) -> EmulatorConfig:
    cfg_path = Path(path) if path else _default_config_path()
    data = _merge_env_overrides(_load_toml(cfg_path))
    try:
        parsed = _EmulatorConfigModel.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid config values: {exc}") from exc

    dev = parsed.device
    return EmulatorConfig(
        device=DeviceSettings(
            usn=dev.usn,
            host_ip=dev.host_ip,
            listen_port=dev.listen_port,
            advertise_ip=dev.advertise_ip,
            advertise_port=dev.advertise_port,
            bind_multicast=dev.bind_multicast,
        ),
        log_level=parsed.log_level,
        announce_interval_s=parsed.announce_interval_s,
    )
