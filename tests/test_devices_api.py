"""HTTP tests for the device registry routes."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.main import app
from app.services import device_registry


def register(client, headers, serial_no="BC9001", name="Lobby", mode=0):
    return client.post(
        "/api/device",
        json={"serialNo": serial_no, "deviceName": name, "authMode": mode, "isActive": True},
        headers=headers,
    )


class TestGetAuthMode:
    def test_registered_device_needs_no_login(self, client, super_headers):
        assert register(client, super_headers, mode=2).status_code == 201

        response = client.post("/api/device/getAuthMode", json={"serialNo": "BC9001"})

        assert response.status_code == 200
        assert response.json() == {"authMode": 2, "deviceName": "Lobby", "isActive": True}

    def test_unknown_device(self, client):
        response = client.post("/api/device/getAuthMode", json={"serialNo": "NOPE"})

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "not_found"
        assert body["detail"] == "Device not registered"

    def test_missing_serial_is_validation_error(self, client):
        response = client.post("/api/device/getAuthMode", json={})

        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"


class TestDeviceCrud:
    def test_requires_login(self, client):
        assert client.get("/api/device").status_code == 401
        assert register(client, {}).status_code == 401

    def test_register_and_list(self, client, super_headers):
        response = register(client, super_headers)

        assert response.status_code == 201
        device = response.json()["data"]
        assert device["serialNo"] == "BC9001"
        assert device["authMode"] == 0
        assert "lastUpdated" in device

        listed = client.get("/api/device", headers=super_headers).json()["data"]
        assert [d["serialNo"] for d in listed] == ["BC9001"]

    def test_duplicate_serial_conflict(self, client, super_headers):
        register(client, super_headers)

        response = register(client, super_headers, name="Other")

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"
        device = client.get("/api/device/BC9001", headers=super_headers).json()["data"]
        assert device["deviceName"] == "Lobby"

    def test_plain_admin_can_manage_devices(self, client, admin_headers):
        assert register(client, admin_headers).status_code == 201

        logs = client.get("/api/device/logs/BC9001", headers=admin_headers).json()["data"]
        assert logs[0]["adminUser"] == "manager"

    def test_update_ignores_serial_in_body(self, client, super_headers):
        register(client, super_headers)

        response = client.put(
            "/api/device/BC9001",
            json={"serialNo": "CHANGED", "authMode": 2},
            headers=super_headers,
        )

        assert response.status_code == 200
        device = response.json()["data"]
        assert device["serialNo"] == "BC9001"
        assert device["authMode"] == 2
        assert device["deviceName"] == "Lobby"

    def test_search(self, client, super_headers):
        register(client, super_headers, "BC9001", "Lobby")
        register(client, super_headers, "ZZ0002", "Server Room")

        response = client.get("/api/device", params={"search": "Server"}, headers=super_headers)

        assert [d["serialNo"] for d in response.json()["data"]] == ["ZZ0002"]

    @pytest.mark.parametrize("method", ["get", "put", "delete"])
    def test_unknown_serial(self, client, super_headers, method):
        kwargs = {"headers": super_headers}
        if method == "put":
            kwargs["json"] = {"deviceName": "x"}

        response = getattr(client, method)("/api/device/NOPE", **kwargs)

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_invalid_mode_rejected(self, client, super_headers):
        response = register(client, super_headers, mode=9)

        assert response.status_code == 422


class TestDeviceLogs:
    def test_mode_change_history(self, client, super_headers):
        register(client, super_headers, mode=0)
        client.put("/api/device/BC9001", json={"authMode": 2}, headers=super_headers)

        mode = client.post("/api/device/getAuthMode", json={"serialNo": "BC9001"}).json()
        logs = client.get("/api/device/logs/BC9001", headers=super_headers).json()["data"]

        assert mode["authMode"] == 2
        assert [entry["changeType"] for entry in logs] == ["UPDATE", "CREATE"]
        assert logs[0]["adminUser"] == "admin"

    def test_history_after_delete(self, client, super_headers):
        register(client, super_headers)

        response = client.delete("/api/device/BC9001", headers=super_headers)
        assert response.status_code == 200
        assert response.json()["data"] == {"serialNo": "BC9001"}

        assert client.get("/api/device/BC9001", headers=super_headers).status_code == 404
        logs = client.get("/api/device/logs/BC9001", headers=super_headers).json()["data"]
        assert [entry["changeType"] for entry in logs] == ["DELETE", "CREATE"]


class TestSampleDevices:
    def test_seeded_on_startup_when_enabled(self, db_url, monkeypatch):
        monkeypatch.setattr(settings, "SEED_SAMPLE_DEVICES", True)
        with TestClient(app) as client:
            response = client.post("/api/device/getAuthMode", json={"serialNo": "222222"})
            assert response.json()["authMode"] == 2

            token = client.post(
                "/api/auth/login",
                json={"username": "admin", "password": settings.BOOTSTRAP_ADMIN_PASSWORD},
            ).json()["data"]["access_token"]
            devices = client.get("/api/device", headers={"Authorization": f"Bearer {token}"}).json()["data"]
            logs = client.get(
                "/api/device/logs/BC0004", headers={"Authorization": f"Bearer {token}"}
            ).json()["data"]

        assert {d["serialNo"] for d in devices} == {"BC0001", "222222", "KF5KW2124062200091", "BC0004"}
        assert [entry["changeType"] for entry in logs] == ["CREATE"]


class TestStoreErrors:
    def test_failed_commit_answers_503_and_writes_nothing(self, client, super_headers, monkeypatch):
        async def _failing_commit(self):
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        with monkeypatch.context() as m:
            m.setattr(AsyncSession, "commit", _failing_commit)
            response = register(client, super_headers)

        assert response.status_code == 503
        assert response.json()["error"] == "transport_error"
        assert client.get("/api/device/BC9001", headers=super_headers).status_code == 404
        assert client.get("/api/device/logs/BC9001", headers=super_headers).json()["data"] == []

    def test_unexpected_store_error_answers_503(self, client, super_headers, monkeypatch):
        async def _unreachable(session, search=None):
            raise OperationalError("SELECT", {}, Exception("connection refused"))

        monkeypatch.setattr(device_registry, "list_devices", _unreachable)
        response = client.get("/api/device", headers=super_headers)

        assert response.status_code == 503
        assert response.json()["error"] == "transport_error"
