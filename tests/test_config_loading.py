import pytest

from rokuemu.infrastructure.config import DeviceSettings, build_device, load_config

_ENV = (
    "ROKUEMU_USN",
    "ROKUEMU_HOST_IP",
    "ROKUEMU_LISTEN_PORT",
    "ROKUEMU_ADVERTISE_IP",
    "ROKUEMU_ADVERTISE_PORT",
    "ROKUEMU_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)


def test_load_config_rejects_directory_path(tmp_path) -> None:
    with pytest.raises(ValueError, match="not a file"):
        load_config(str(tmp_path))


def test_load_config_missing_file_uses_defaults(tmp_path) -> None:
    cfg = load_config(str(tmp_path / "absent.toml"))
    assert cfg.device == DeviceSettings()
    assert cfg.log_level == "INFO"
    assert cfg.announce_interval_s == 300.0
    assert build_device(cfg.device) is None


def test_load_config_reads_device_table(tmp_path) -> None:
    cfg_file = tmp_path / "config.toml"
    cfg_file.write_text(
        'log_level = "debug"\n'
        "announce_interval_s = 30\n"
        "[device]\n"
        'usn = "ABC123"\n'
        'host_ip = "192.168.1.10"\n'
        "listen_port = 8061\n"
        'advertise_ip = "10.0.0.5"\n'
        "bind_multicast = true\n",
        encoding="utf-8",
    )
    cfg = load_config(str(cfg_file))
    assert cfg.log_level == "DEBUG"
    assert cfg.announce_interval_s == 30.0
    device = build_device(cfg.device)
    assert device is not None
    assert device.usn == "ABC123"
    assert device.listen_port == 8061
    assert device.advertise_ip == "10.0.0.5"
    assert device.advertise_port == 8061
    assert device.bind_multicast is True


def test_load_config_rejects_invalid_env_port(monkeypatch, tmp_path) -> None:
    cfg_file = tmp_path / "config.toml"
    cfg_file.write_text("", encoding="utf-8")
    monkeypatch.setenv("ROKUEMU_LISTEN_PORT", "abc")
    with pytest.raises(ValueError, match="device.listen_port"):
        load_config(str(cfg_file))


def test_load_config_rejects_out_of_range_port(tmp_path) -> None:
    cfg_file = tmp_path / "config.toml"
    cfg_file.write_text("[device]\nadvertise_port = 70000\n", encoding="utf-8")
    with pytest.raises(ValueError, match="device.advertise_port"):
        load_config(str(cfg_file))


def test_load_config_rejects_invalid_toml(tmp_path) -> None:
    cfg_file = tmp_path / "config.toml"
    cfg_file.write_text("device = [", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid TOML"):
        load_config(str(cfg_file))


def test_load_config_rejects_boolean_numbers(tmp_path) -> None:
    cfg_file = tmp_path / "config.toml"
    cfg_file.write_text("[device]\nlisten_port = true\n", encoding="utf-8")
    with pytest.raises(ValueError, match="device.listen_port"):
        load_config(str(cfg_file))


def test_load_config_rejects_non_ipv4_host(tmp_path) -> None:
    cfg_file = tmp_path / "config.toml"
    cfg_file.write_text('[device]\nhost_ip = "roku.local"\n', encoding="utf-8")
    with pytest.raises(ValueError, match="device.host_ip"):
        load_config(str(cfg_file))


def test_load_config_rejects_non_positive_interval(tmp_path) -> None:
    cfg_file = tmp_path / "config.toml"
    cfg_file.write_text("announce_interval_s = 0\n", encoding="utf-8")
    with pytest.raises(ValueError, match="announce_interval_s"):
        load_config(str(cfg_file))


def test_load_config_env_overrides_device_and_log_level(monkeypatch, tmp_path) -> None:
    cfg_file = tmp_path / "config.toml"
    cfg_file.write_text(
        '[device]\nusn = "FROMFILE"\nhost_ip = "192.168.1.10"\n', encoding="utf-8"
    )
    monkeypatch.setenv("ROKUEMU_USN", "FROMENV")
    monkeypatch.setenv("ROKUEMU_ADVERTISE_PORT", "18060")
    monkeypatch.setenv("ROKUEMU_LOG_LEVEL", "warning")
    cfg = load_config(str(cfg_file))
    assert cfg.device.usn == "FROMENV"
    assert cfg.device.host_ip == "192.168.1.10"
    assert cfg.device.advertise_port == 18060
    assert cfg.log_level == "WARNING"


def test_load_config_uses_xdg_config_home(monkeypatch, tmp_path) -> None:
    cfg_dir = tmp_path / "rokuemu"
    cfg_dir.mkdir()
    (cfg_dir / "config.toml").write_text('[device]\nusn = "XDG"\n', encoding="utf-8")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert load_config().device.usn == "XDG"
