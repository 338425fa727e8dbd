import asyncio
import logging
import random
import socket
from enum import Enum
from typing import Callable

from rokuemu.domain.errors import DiscoveryStartupError
from rokuemu.domain.identity import DeviceConfiguration
from rokuemu.domain.ssdp import (
    MULTICAST_GROUP,
    MULTICAST_PORT,
    MULTICAST_TTL_S,
    parse_search_request,
    render_notify,
    render_search_response,
    reply_delay,
)

LOG = logging.getLogger(__name__)


class EngineState(str, Enum):
    STOPPED = "stopped"
    LISTENING = "listening"


def open_multicast_socket(host_ip: str, bind_multicast: bool) -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.setsockopt(
            socket.IPPROTO_IP,
            socket.IP_ADD_MEMBERSHIP,
            socket.inet_aton(MULTICAST_GROUP) + socket.inet_aton(host_ip),
        )
        if bind_multicast:
            sock.bind(("", MULTICAST_PORT))
        else:
            sock.bind((host_ip, MULTICAST_PORT))
        sock.setblocking(False)
    except OSError:
        sock.close()
        raise
    return sock


class DiscoveryEngine(asyncio.DatagramProtocol):
    """SSDP responder and presence announcer for one emulated device.

    All state changes happen on the event loop thread: datagram callbacks,
    the announce timer, scheduled replies and ``stop()`` never run
    concurrently, so the state needs no lock. ``stop()`` is the only place
    that invalidates pending work.
    """

    def __init__(
        self,
        config: DeviceConfiguration,
        rng: random.Random | None = None,
        announce_interval_s: float = MULTICAST_TTL_S,
        socket_factory: Callable[[str, bool], socket.socket] = open_multicast_socket,
    ) -> None:
        self.config = config
        self.rng = rng or random.Random()
        self.announce_interval_s = announce_interval_s
        self._socket_factory = socket_factory
        self.state = EngineState.STOPPED
        self.transport: asyncio.DatagramTransport | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._announce_handle: asyncio.TimerHandle | None = None
        self._pending_replies: set[asyncio.TimerHandle] = set()
        self._search_response = render_search_response(
            str(config.advertise_ip), int(config.advertise_port), config.usn
        )
        self._notify_broadcast = render_notify(
            str(config.advertise_ip), int(config.advertise_port), config.usn
        )

    @property
    def connected(self) -> bool:
        return self.state is EngineState.LISTENING

    @property
    def pending_replies(self) -> int:
        return len(self._pending_replies)

    async def start(self) -> None:
        if self.connected:
            return
        loop = asyncio.get_running_loop()
        try:
            sock = self._socket_factory(self.config.host_ip, bool(self.config.bind_multicast))
        except OSError as exc:
            raise DiscoveryStartupError(
                f"Cannot open SSDP socket on {self.config.host_ip}:{MULTICAST_PORT}: {exc}"
            ) from exc
        try:
            await loop.create_datagram_endpoint(lambda: self, sock=sock)
        except OSError as exc:
            sock.close()
            raise DiscoveryStartupError(f"Cannot attach SSDP socket to event loop: {exc}") from exc
        LOG.debug(
            "SSDP discovery bound host=%s port=%d wildcard=%s",
            self.config.host_ip,
            MULTICAST_PORT,
            self.config.bind_multicast,
        )

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.transport = transport  # type: ignore[assignment]
        self._loop = asyncio.get_running_loop()
        LOG.debug(
            "multicast started group=%s advertise=%s:%s usn=%s",
            MULTICAST_GROUP,
            self.config.advertise_ip,
            self.config.advertise_port,
            self.config.usn,
        )
        self._cancel_announce()
        self.state = EngineState.LISTENING
        self._announce()

    def error_received(self, exc: Exception) -> None:
        LOG.debug("SSDP send/receive error: %s", exc)

    def connection_lost(self, exc: Exception | None) -> None:
        if exc is not None:
            LOG.warning("SSDP socket closed with error: %s", exc)
        LOG.debug("multicast connection lost usn=%s", self.config.usn)
        self.stop()

    def _announce(self) -> None:
        if not self.connected or self.transport is None or self._loop is None:
            return
        LOG.debug("multicast NOTIFY broadcast usn=%s", self.config.usn)
        self.transport.sendto(self._notify_broadcast, (MULTICAST_GROUP, MULTICAST_PORT))
        self._announce_handle = self._loop.call_later(self.announce_interval_s, self._announce)

    def _cancel_announce(self) -> None:
        if self._announce_handle is not None:
            self._announce_handle.cancel()
            self._announce_handle = None

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        if not self.connected or self._loop is None:
            return
        request = parse_search_request(data)
        if request is None:
            return
        delay = reply_delay(request.mx, self.rng)
        LOG.debug(
            "multicast M-SEARCH addr=%s st=%s mx=%s delay_s=%.3f",
            addr,
            request.search_target,
            request.mx,
            delay,
        )
        handle: asyncio.TimerHandle | None = None

        def _fire() -> None:
            if handle is not None:
                self._pending_replies.discard(handle)
            self._send_reply(addr)

        handle = self._loop.call_later(delay, _fire)
        self._pending_replies.add(handle)

    def _send_reply(self, addr: tuple[str, int]) -> None:
        if not self.connected or self.transport is None:
            LOG.debug("SSDP reply to %s suppressed (engine stopped)", addr)
            return
        self.transport.sendto(self._search_response, addr)

    def stop(self) -> None:
        """Stop announcing and replying. Safe to call any number of times."""
        if self.state is EngineState.STOPPED and self.transport is None:
            return
        self.state = EngineState.STOPPED
        self._cancel_announce()
        for handle in self._pending_replies:
            handle.cancel()
        self._pending_replies.clear()
        transport, self.transport = self.transport, None
        if transport is not None:
            transport.close()
        LOG.debug("SSDP discovery stopped usn=%s", self.config.usn)
