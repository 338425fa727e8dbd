import asyncio
import logging
import random

from rokuemu.application.handlers import NullCommandHandler
from rokuemu.application.ports import CommandHandler
from rokuemu.domain.identity import DeviceConfiguration
from rokuemu.domain.ssdp import MULTICAST_TTL_S
from rokuemu.infrastructure.ecp_http import CommandServer
from rokuemu.infrastructure.ssdp_discovery import DiscoveryEngine

LOG = logging.getLogger(__name__)


class EmulatedRokuServer:
    """Runs the ECP API and SSDP discovery of one emulated Roku."""

    def __init__(
        self,
        config: DeviceConfiguration,
        handler: CommandHandler | None = None,
        rng: random.Random | None = None,
        announce_interval_s: float = MULTICAST_TTL_S,
    ) -> None:
        self.config = config
        self.handler = handler or NullCommandHandler()
        self.rng = rng
        self.announce_interval_s = announce_interval_s
        self.api: CommandServer | None = None
        self.discovery: DiscoveryEngine | None = None

    @property
    def running(self) -> bool:
        return self.discovery is not None and self.discovery.connected

    def _make_api(self) -> CommandServer:
        return CommandServer(self.config, self.handler)

    def _make_discovery(self) -> DiscoveryEngine:
        return DiscoveryEngine(
            self.config,
            rng=self.rng,
            announce_interval_s=self.announce_interval_s,
        )

    async def start(self) -> None:
        LOG.debug(
            "roku_api starting server %s:%s usn=%s",
            self.config.host_ip,
            self.config.listen_port,
            self.config.usn,
        )
        api = self._make_api()
        await api.start()
        self.api = api

        discovery = self._make_discovery()
        try:
            await discovery.start()
        except Exception:
            LOG.debug("discovery failed to start, closing ECP listener")
            await self.close()
            raise
        self.discovery = discovery
        LOG.info(
            "emulated roku usn=%s serving on %s:%s advertised as %s",
            self.config.usn,
            self.config.host_ip,
            self.config.listen_port,
            self.config.location,
        )

    async def close(self) -> None:
        LOG.debug("roku_api closing server %s:%s", self.config.host_ip, self.config.listen_port)
        discovery, self.discovery = self.discovery, None
        if discovery is not None:
            discovery.stop()
        api, self.api = self.api, None
        if api is not None:
            await api.close()

    async def serve_forever(self, stop_event: asyncio.Event | None = None) -> None:
        stop_event = stop_event or asyncio.Event()
        await self.start()
        try:
            await stop_event.wait()
        finally:
            await self.close()

    def run_forever(self) -> None:
        asyncio.run(self.serve_forever())
