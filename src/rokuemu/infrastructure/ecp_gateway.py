import xml.etree.ElementTree as ET
from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote

import httpx


def _segment(value: object) -> str:
    if isinstance(value, Enum):
        value = value.value
    return quote(str(value), safe="")


def _parse_xml(text: str) -> ET.Element:
    try:
        return ET.fromstring(text)
    except ET.ParseError as exc:
        raise ValueError(f"Unexpected response: {text[:80]!r}") from exc


@dataclass
class EcpHttpGateway:
    address: str
    port: int = 8060
    timeout_s: float = 2.5

    def __post_init__(self) -> None:
        self.base_url = f"http://{self.address}:{self.port}"

    async def _aget(self, path: str) -> str:
        async with httpx.AsyncClient(timeout=self.timeout_s) as client:
            r = await client.get(self.base_url + path)
        r.raise_for_status()
        return r.text

    async def _apost(self, path: str) -> None:
        async with httpx.AsyncClient(timeout=self.timeout_s) as client:
            r = await client.post(self.base_url + path)
        r.raise_for_status()

    async def device_info_async(self) -> dict[str, str]:
        root = _parse_xml(await self._aget("/query/device-info"))
        if root.tag != "device-info":
            raise ValueError(f"Unexpected response root: {root.tag}")
        return {child.tag: (child.text or "").strip() for child in root}

    async def apps_async(self) -> list[dict[str, str]]:
        root = _parse_xml(await self._aget("/query/apps"))
        return [
            {"id": app.get("id", ""), "version": app.get("version", ""), "name": (app.text or "").strip()}
            for app in root.iter("app")
        ]

    async def active_app_async(self) -> str:
        root = _parse_xml(await self._aget("/query/active-app"))
        app = root.find("app")
        return (app.text or "").strip() if app is not None else ""

    async def keydown_async(self, key: str) -> None:
        await self._apost(f"/keydown/{_segment(key)}")

    async def keyup_async(self, key: str) -> None:
        await self._apost(f"/keyup/{_segment(key)}")

    async def keypress_async(self, key: str) -> None:
        await self._apost(f"/keypress/{_segment(key)}")

    async def launch_async(self, app_id: str) -> None:
        await self._apost(f"/launch/{_segment(app_id)}")
