"""Smoke tests for the Flask application factory."""

from __future__ import annotations

import pytest

from studio_app import create_app


@pytest.fixture(scope="module")
def app():
    app = create_app("test")
    yield app


def test_app_creation(app):
    assert app is not None
    assert app.config["TESTING"] is True
    assert app.config["BACKGROUND_TASKS_INLINE"] is True


@pytest.mark.parametrize(
    "endpoint",
    [
        "/api/auth/ping",
        "/api/admin/ping",
    ],
)
def test_ping_endpoints(app, endpoint):
    client = app.test_client()
    response = client.get(endpoint)
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["status"] == "ok"


def test_sweep_cli_command_registered(app):
    assert "sweep-expired" in app.cli.commands
    assert "seed-admin" in app.cli.commands
