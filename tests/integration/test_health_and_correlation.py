from __future__ import annotations

import uuid

import pytest

pytestmark = pytest.mark.integration


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["services"]["database"]["status"] == "up"
    assert body["services"]["cache"]["status"] == "up"


def test_request_id_is_echoed(client):
    response = client.get("/health", HTTP_X_REQUEST_ID="req-4711")
    assert response["X-Request-ID"] == "req-4711"


def test_request_id_is_generated(client):
    response = client.get("/health")
    assert uuid.UUID(response["X-Request-ID"]).version == 4
