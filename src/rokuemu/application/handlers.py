import logging

from rokuemu.application.ports import CommandHandler
from rokuemu.domain.keys import lookup_key

LOG = logging.getLogger(__name__)


class NullCommandHandler(CommandHandler):
    """Accepts every command and does nothing."""

    def on_keydown(self, usn: str, key: str) -> None:
        return None

    def on_keyup(self, usn: str, key: str) -> None:
        return None

    def on_keypress(self, usn: str, key: str) -> None:
        return None

    def launch(self, usn: str, app_id: str) -> None:
        return None


class LoggingCommandHandler(CommandHandler):
    def __init__(self, level: int = logging.INFO) -> None:
        self.level = level

    def _log_key(self, action: str, usn: str, key: str) -> None:
        known = lookup_key(key)
        LOG.log(
            self.level,
            "ecp %s usn=%s key=%s known=%s",
            action,
            usn,
            key,
            known is not None,
        )

    def on_keydown(self, usn: str, key: str) -> None:
        self._log_key("keydown", usn, key)

    def on_keyup(self, usn: str, key: str) -> None:
        self._log_key("keyup", usn, key)

    def on_keypress(self, usn: str, key: str) -> None:
        self._log_key("keypress", usn, key)

    def launch(self, usn: str, app_id: str) -> None:
        LOG.log(self.level, "ecp launch usn=%s app_id=%s", usn, app_id)
