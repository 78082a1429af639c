"""Tests for logging/metrics hardening."""

from __future__ import annotations

import json
import logging

from studio_app.logging_config import JsonFormatter


def test_metrics_endpoint(client):
    client.get("/api/auth/ping")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert b"studio_requests_total" in resp.data


def test_request_id_header(client):
    resp = client.get("/api/auth/ping")
    assert resp.status_code == 200
    assert "X-Request-ID" in resp.headers


def test_request_id_propagated(client):
    resp = client.get("/api/auth/ping", headers={"X-Request-ID": "req-abc"})
    assert resp.headers["X-Request-ID"] == "req-abc"


def test_healthz_reports_database(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_json_log_lines_carry_order_context():
    record = logging.LogRecord("studio", logging.INFO, __file__, 1, "Order accepted", None, None)
    record.order_id = 42
    record.producer_id = 7
    line = json.loads(JsonFormatter().format(record))
    assert line["message"] == "Order accepted"
    assert line["order_id"] == 42
    assert line["producer_id"] == 7
    assert "session_id" not in line
