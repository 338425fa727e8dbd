import logging

from rokuemu.application.handlers import LoggingCommandHandler, NullCommandHandler
from rokuemu.domain.keys import RokuKey, lookup_key


def test_null_handler_accepts_everything() -> None:
    h = NullCommandHandler()
    assert h.on_keydown("ABC123", "Home") is None
    assert h.on_keyup("ABC123", "Home") is None
    assert h.on_keypress("ABC123", "Home") is None
    assert h.launch("ABC123", "12") is None


def test_logging_handler_logs_each_command(caplog) -> None:
    h = LoggingCommandHandler()
    with caplog.at_level(logging.INFO, logger="rokuemu.application.handlers"):
        h.on_keypress("ABC123", "Home")
        h.on_keydown("ABC123", "Lit_x")
        h.launch("ABC123", "837")
    assert "keypress usn=ABC123 key=Home known=True" in caplog.text
    assert "keydown usn=ABC123 key=Lit_x known=False" in caplog.text
    assert "launch usn=ABC123 app_id=837" in caplog.text


def test_lookup_key_is_case_insensitive() -> None:
    assert lookup_key("home") is RokuKey.HOME
    assert lookup_key("InputHDMI2") is RokuKey.INPUT_HDMI2
    assert lookup_key("Lit_a") is None
