import logging
from typing import Awaitable, Callable

from aiohttp import web

from rokuemu.application.ports import CommandHandler
from rokuemu.domain.access import authorize
from rokuemu.domain.identity import DeviceConfiguration
from rokuemu.infrastructure.templates import (
    ACTIVE_APP_TEMPLATE,
    APP_PLACEHOLDER_ICON,
    APPS_TEMPLATE,
    format_device_info,
    format_root_info,
)

LOG = logging.getLogger(__name__)

_Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def _xml(body: str) -> web.Response:
    return web.Response(text=body, content_type="text/xml")


class CommandServer:
    """ECP HTTP surface of one emulated device."""

    def __init__(self, config: DeviceConfiguration, handler: CommandHandler) -> None:
        self.config = config
        self.handler = handler
        self._root_info = format_root_info(config.device_id, config.usn)
        self._device_info = format_device_info(config.device_id, config.usn)
        self._runner: web.AppRunner | None = None

    @web.middleware
    async def check_remote_and_host(self, request: web.Request, handler: _Handler):
        decision = authorize(
            request.headers.get("Host"),
            request.remote,
            self.config.allowed_hosts,
        )
        if not decision.allowed:
            LOG.warning("%s", decision.reason)
            raise web.HTTPForbidden(text=decision.reason)
        return await handler(request)

    async def root_handler(self, request: web.Request) -> web.Response:
        return _xml(self._root_info)

    async def device_info_handler(self, request: web.Request) -> web.Response:
        return _xml(self._device_info)

    async def apps_handler(self, request: web.Request) -> web.Response:
        return _xml(APPS_TEMPLATE)

    async def active_app_handler(self, request: web.Request) -> web.Response:
        return _xml(ACTIVE_APP_TEMPLATE)

    async def app_icon_handler(self, request: web.Request) -> web.Response:
        return web.Response(body=APP_PLACEHOLDER_ICON, content_type="image/png")

    async def noop_handler(self, request: web.Request) -> web.Response:
        return web.Response()

    async def keydown_handler(self, request: web.Request) -> web.Response:
        self.handler.on_keydown(self.config.usn, request.match_info["key"])
        return web.Response()

    async def keyup_handler(self, request: web.Request) -> web.Response:
        self.handler.on_keyup(self.config.usn, request.match_info["key"])
        return web.Response()

    async def keypress_handler(self, request: web.Request) -> web.Response:
        self.handler.on_keypress(self.config.usn, request.match_info["key"])
        return web.Response()

    async def launch_handler(self, request: web.Request) -> web.Response:
        self.handler.launch(self.config.usn, request.match_info["id"])
        return web.Response()

    def build_app(self) -> web.Application:
        app = web.Application(middlewares=[self.check_remote_and_host])
        app.router.add_get("/", self.root_handler)
        app.router.add_post("/keydown/{key}", self.keydown_handler)
        app.router.add_post("/keyup/{key}", self.keyup_handler)
        app.router.add_post("/keypress/{key}", self.keypress_handler)
        app.router.add_post("/launch/{id}", self.launch_handler)
        app.router.add_post("/input", self.noop_handler)
        app.router.add_post("/search", self.noop_handler)
        app.router.add_get("/query/apps", self.apps_handler)
        app.router.add_get("/query/icon/{id}", self.app_icon_handler)
        app.router.add_get("/query/active-app", self.active_app_handler)
        app.router.add_get("/query/device-info", self.device_info_handler)
        return app

    async def start(self) -> None:
        if self._runner is not None:
            return
        runner = web.AppRunner(self.build_app())
        await runner.setup()
        site = web.TCPSite(runner, self.config.host_ip, self.config.listen_port)
        try:
            await site.start()
        except OSError:
            await runner.cleanup()
            raise
        self._runner = runner
        LOG.debug("ECP listening on %s:%s", self.config.host_ip, self.config.listen_port)

    async def close(self) -> None:
        runner, self._runner = self._runner, None
        if runner is not None:
            await runner.cleanup()
