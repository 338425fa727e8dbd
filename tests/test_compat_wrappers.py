from rokuemu.api import EcpClient


def test_ecp_client_delegates_to_gateway(monkeypatch) -> None:
    calls = []

    class FakeGateway:
        def __init__(self, address, port, timeout_s):
            calls.append(("init", address, port, timeout_s))

        async def device_info_async(self):
            return {"device-id": "ABC123"}

        async def apps_async(self):
            return [{"id": "1"}]

        async def active_app_async(self):
            return "Roku"

        async def keydown_async(self, key):
            calls.append(("keydown", key))

        async def keyup_async(self, key):
            calls.append(("keyup", key))

        async def keypress_async(self, key):
            calls.append(("keypress", key))

        async def launch_async(self, app_id):
            calls.append(("launch", app_id))

    monkeypatch.setattr("rokuemu.api.EcpHttpGateway", FakeGateway)
    c = EcpClient("127.0.0.1")
    assert c.device_info() == {"device-id": "ABC123"}
    assert c.apps() == [{"id": "1"}]
    assert c.active_app() == "Roku"
    c.keydown("Up")
    c.keyup("Up")
    c.keypress("Select")
    c.launch("12")
    assert calls == [
        ("init", "127.0.0.1", 8060, 2.5),
        ("keydown", "Up"),
        ("keyup", "Up"),
        ("keypress", "Select"),
        ("launch", "12"),
    ]
