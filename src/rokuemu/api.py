import asyncio
from dataclasses import dataclass

from rokuemu.infrastructure.ecp_gateway import EcpHttpGateway


@dataclass
class EcpClient:
    address: str
    port: int = 8060
    timeout_s: float = 2.5

    def __post_init__(self) -> None:
        self._gateway = EcpHttpGateway(
            address=self.address,
            port=self.port,
            timeout_s=self.timeout_s,
        )

    @staticmethod
    def _run(coro):
        return asyncio.run(coro)

    # ---- queries ----
    def device_info(self) -> dict[str, str]:
        return self._run(self._gateway.device_info_async())

    def apps(self) -> list[dict[str, str]]:
        return self._run(self._gateway.apps_async())

    def active_app(self) -> str:
        return self._run(self._gateway.active_app_async())

    # ---- commands ----
    def keydown(self, key: str) -> None:
        self._run(self._gateway.keydown_async(key))

    def keyup(self, key: str) -> None:
        self._run(self._gateway.keyup_async(key))

    def keypress(self, key: str) -> None:
        self._run(self._gateway.keypress_async(key))

    def launch(self, app_id: str) -> None:
        self._run(self._gateway.launch_async(app_id))
