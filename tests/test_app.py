import pytest

pytest.importorskip("fastapi")

from fastapi.testclient import TestClient

import pironman5_lite.server.routes as routes
from pironman5_lite.config import AppSettings, default_config
from pironman5_lite.server.app import create_application


@pytest.fixture()
def client(board: AppSettings) -> TestClient:
    app = create_application(board)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def immediate_to_thread(monkeypatch: pytest.MonkeyPatch) -> None:
    async def immediate(func, *args, **kwargs):
        return func(*args, **kwargs)

    monkeypatch.setattr(routes.asyncio, "to_thread", immediate)


def messages(client: TestClient) -> list[str]:
    return [entry["message"] for entry in client.get("/api/logs").json()]


def test_create_application(board: AppSettings) -> None:
    app = create_application(board)
    assert app.title == "Pironman5 Lite API"
    paths = {route.path for route in app.routes}
    assert {"/api/status", "/api/config", "/api/config/reset", "/api/logs", "/api/health"} <= paths


def test_startup_is_logged(client: TestClient) -> None:
    logged = messages(client)
    assert logged[-1] == "Pironman5 Lite addon initialized"
    assert "Polling interval: 5s" in logged
    assert "Fan mode: balanced" in logged
    assert "Fan control accessible via" in " ".join(logged)


def test_status_endpoint(client: TestClient) -> None:
    response = client.get("/api/status")
    assert response.status_code == 200
    payload = response.json()
    assert payload["cpuTemperature"] == pytest.approx(55.0)
    assert payload["cpuPercent"] == 20
    assert payload["memoryPercent"] == 60
    assert payload["fanSpeed"] == 0
    assert payload["fanState"] == "off"
    assert isinstance(payload["uptime"], int)
    assert isinstance(payload["timestamp"], int)


def test_status_endpoint_without_hardware(bare_board: AppSettings) -> None:
    with TestClient(create_application(bare_board)) as client:
        payload = client.get("/api/status").json()
        hardware = client.get("/api/hardware").json()
    assert payload["cpuTemperature"] is None
    assert payload["fanSpeed"] is None
    assert payload["fanState"] == "unavailable"
    assert payload["networkUpload"] is None
    assert not any(hardware.values())


def test_hardware_endpoint(client: TestClient) -> None:
    response = client.get("/api/hardware")
    assert response.status_code == 200
    assert response.json()["fan"] is True


def test_read_configuration(client: TestClient) -> None:
    response = client.get("/api/config")
    assert response.status_code == 200
    assert response.json() == default_config().to_dict()


def test_patch_configuration(client: TestClient) -> None:
    before = client.get("/api/config").json()
    response = client.patch("/api/config", json={"rgbBrightness": 80})
    assert response.status_code == 200
    assert response.json() == {**before, "rgbBrightness": 80}
    assert client.get("/api/config").json()["rgbBrightness"] == 80


def test_patch_configuration_rejects_invalid_merge(client: TestClient) -> None:
    before = client.get("/api/config").json()
    response = client.patch("/api/config", json={"rgbColor": "notacolor", "pollingInterval": 10})
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["error"] == "Invalid configuration"
    assert [item["field"] for item in detail["details"]] == ["rgbColor"]
    assert client.get("/api/config").json() == before


@pytest.mark.parametrize("body", [b"not json", b"[1, 2]"])
def test_patch_configuration_rejects_malformed_body(client: TestClient, body: bytes) -> None:
    response = client.patch("/api/config", content=body, headers={"Content-Type": "application/json"})
    assert response.status_code == 400


def test_reset_configuration(client: TestClient) -> None:
    client.patch("/api/config", json={"fanMode": "quiet", "oledRotation": 180})
    response = client.post("/api/config/reset")
    assert response.status_code == 200
    assert response.json() == default_config().to_dict()
    assert messages(client)[0] == "Configuration reset to defaults"


def test_logs_are_newest_first(client: TestClient) -> None:
    response = client.post("/api/logs", json={"level": "ERROR", "message": "UI failure", "source": "ui"})
    assert response.status_code == 200
    assert response.json() == {"success": True}

    newest = client.get("/api/logs").json()[0]
    assert newest["level"] == "ERROR"
    assert newest["message"] == "UI failure"
    assert newest["source"] == "ui"
    assert newest["id"]


@pytest.mark.parametrize(
    "payload",
    [
        {"message": "missing level", "source": "ui"},
        {"level": "INFO", "source": "ui"},
        {"level": "INFO", "message": "missing source"},
        {"level": "TRACE", "message": "bad level", "source": "ui"},
    ],
)
def test_log_requests_require_fields(client: TestClient, payload: dict) -> None:
    count = len(client.get("/api/logs").json())
    response = client.post("/api/logs", json=payload)
    assert response.status_code == 400
    assert len(client.get("/api/logs").json()) == count


def test_fan_control(client: TestClient) -> None:
    response = client.post("/api/fan/control", json={"mode": "performance"})
    assert response.status_code == 200
    assert response.json() == {"success": True, "mode": "performance"}
    assert client.get("/api/config").json()["fanMode"] == "performance"
    logged = messages(client)
    assert logged[0] == "Fan mode changed to performance"
    assert "Fan mode set to performance (trigger: 50C)" in logged
    # 55°C is inside the first performance step.
    assert client.get("/api/status").json()["fanSpeed"] == 50


@pytest.mark.parametrize("payload", [{}, {"mode": "turbo"}, {"mode": 3}])
def test_fan_control_rejects_bad_mode(client: TestClient, payload: dict) -> None:
    response = client.post("/api/fan/control", json=payload)
    assert response.status_code == 400
    assert client.get("/api/config").json()["fanMode"] == "balanced"


def test_rgb_control(client: TestClient) -> None:
    response = client.post(
        "/api/rgb/control",
        json={"enabled": True, "color": "#00FF00", "brightness": 30, "style": "solid", "speed": 10},
    )
    assert response.status_code == 200
    assert response.json() == {"success": True}
    config = client.get("/api/config").json()
    assert (config["rgbColor"], config["rgbBrightness"], config["rgbStyle"], config["rgbSpeed"]) == (
        "#00FF00",
        30,
        "solid",
        10,
    )
    logged = messages(client)
    assert logged[0] == "RGB settings updated"
    assert "RGB LEDs updated: color=#00FF00, brightness=30%, style=solid" in logged


def test_rgb_control_rejects_invalid_values(client: TestClient) -> None:
    response = client.post("/api/rgb/control", json={"brightness": 150})
    assert response.status_code == 400
    assert response.json()["detail"]["details"][0]["field"] == "rgbBrightness"
    assert client.get("/api/config").json()["rgbBrightness"] == 50


def test_health(client: TestClient) -> None:
    response = client.get("/api/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "healthy"
    assert isinstance(payload["timestamp"], int)
    assert isinstance(payload["version"], str)
