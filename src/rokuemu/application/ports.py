from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class Target:
    address: str
    port: int
    name: str = ""
    usn: str = ""


class CommandHandler(Protocol):
    def on_keydown(self, usn: str, key: str) -> None:
        ...

    def on_keyup(self, usn: str, key: str) -> None:
        ...

    def on_keypress(self, usn: str, key: str) -> None:
        ...

    def launch(self, usn: str, app_id: str) -> None:
        ...


class DiscoveryPort(Protocol):
    def discover(self, timeout_s: float) -> list[Target]:
        ...
