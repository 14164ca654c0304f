"""
Tests for the shared API key authentication helpers.
"""

from types import SimpleNamespace

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from services.common.api_key_auth import (
    APIKeyConfig,
    build_api_key_mapping,
    has_permissions,
    make_service_permission_required,
)
from services.common.http_errors import register_exception_handlers

API_KEY_CONFIGS = {
    "api_reader_key": APIKeyConfig(
        client="reader",
        service="events-service-access",
        permissions=["read_events"],
        settings_key="api_reader_key",
    ),
    "api_writer_key": APIKeyConfig(
        client="writer",
        service="events-service-access",
        permissions=["read_events", "write_events"],
        settings_key="api_writer_key",
    ),
    "api_unset_key": APIKeyConfig(
        client="unset",
        service="events-service-access",
        permissions=["read_events"],
        settings_key="api_unset_key",
    ),
}


def get_settings():
    return SimpleNamespace(
        api_reader_key="reader-secret",
        api_writer_key="writer-secret",
        api_unset_key=None,
    )


@pytest.fixture
def client():
    app = FastAPI()
    register_exception_handlers(app)

    write_required = make_service_permission_required(
        ["write_events"], API_KEY_CONFIGS, get_settings
    )

    @app.post("/events")
    async def create(service_name: str = Depends(write_required)):
        return {"service": service_name}

    return TestClient(app)


class TestAPIKeyMapping:
    def test_unset_keys_are_skipped(self):
        mapping = build_api_key_mapping(API_KEY_CONFIGS, get_settings)
        assert set(mapping) == {"reader-secret", "writer-secret"}

    def test_has_permissions(self):
        mapping = build_api_key_mapping(API_KEY_CONFIGS, get_settings)
        assert has_permissions("writer-secret", ["write_events"], mapping)
        assert not has_permissions("reader-secret", ["write_events"], mapping)
        assert not has_permissions("unknown", ["read_events"], mapping)


class TestServicePermissionRequired:
    def test_missing_key(self, client):
        response = client.post("/events")
        assert response.status_code == 401
        assert response.json()["message"] == "API key required"

    def test_invalid_key(self, client):
        response = client.post("/events", headers={"X-API-Key": "guess"})
        assert response.status_code == 403

    def test_insufficient_permissions(self, client):
        response = client.post("/events", headers={"X-API-Key": "reader-secret"})
        assert response.status_code == 403
        assert "write_events" in response.json()["message"]

    @pytest.mark.parametrize(
        "headers",
        [
            {"X-API-Key": "writer-secret"},
            {"Authorization": "Bearer writer-secret"},
            {"X-Service-Key": "writer-secret"},
        ],
    )
    def test_accepted_headers(self, client, headers):
        response = client.post("/events", headers=headers)
        assert response.status_code == 200
        assert response.json() == {"service": "events-service-access"}
