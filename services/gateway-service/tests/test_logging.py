"""
Tests for shared logging setup and the per-request log events
"""

import logging

import httpx
import pytest
import structlog
from structlog.testing import capture_logs

import app.main
import app.services.proxy_service
from shared.utils.logger import DEFAULT_LOGGING_CONFIG, load_logging_config, setup_logging


def test_default_config_when_no_file():
    config = load_logging_config(None)

    assert config == DEFAULT_LOGGING_CONFIG
    assert config is not DEFAULT_LOGGING_CONFIG


def test_yaml_config_loaded(tmp_path):
    path = tmp_path / "logging.yml"
    path.write_text(
        "version: 1\n"
        "handlers:\n"
        "  console:\n"
        "    class: logging.StreamHandler\n"
        "root:\n"
        "  level: INFO\n"
        "  handlers: [console]\n"
    )

    config = load_logging_config(str(path))

    assert config["handlers"]["console"]["class"] == "logging.StreamHandler"


def test_setup_logging_sets_level():
    setup_logging(log_level="debug", log_format="console")

    assert logging.getLogger().level == logging.DEBUG
    assert DEFAULT_LOGGING_CONFIG["root"]["level"] == "INFO"

    setup_logging(log_level="INFO", log_format="json")


class TestRequestLogging:
    """Events emitted while a request goes through the gateway"""

    @pytest.fixture
    def captured(self, client, monkeypatch):
        # create_app reconfigures structlog; fresh proxies bind to the capturing chain
        monkeypatch.setattr(app.main, "logger", structlog.get_logger("app.main"))
        monkeypatch.setattr(
            app.services.proxy_service,
            "logger",
            structlog.get_logger("app.services.proxy_service"),
        )
        with capture_logs() as logs:
            yield logs

    def test_success_events_in_order(self, client, backend, captured):
        backend.respond(201, {"id": 7})

        client.post("/api/products?draft=1", json={"name": "Lamp"})

        assert [entry["event"] for entry in captured] == [
            "Request received",
            "Proxying request",
            "Proxy response",
        ]
        received, proxying, replied = captured
        assert received["method"] == "POST"
        assert received["path"] == "/api/products?draft=1"
        assert "client_ip" in received
        assert proxying["target_url"] == "http://backend.test:3847/api/products"
        assert proxying["path"] == "/api/products"
        assert replied["status_code"] == 201
        assert isinstance(replied["duration_ms"], int)
        assert replied["log_level"] == "info"

    def test_backend_error_status_logged_as_response(self, client, backend, captured):
        backend.respond(404, {"error": "Product not found"})

        client.get("/api/products/9")

        events = [entry["event"] for entry in captured]
        assert events[-1] == "Proxy response"
        assert captured[-1]["status_code"] == 404
        assert "Proxy error" not in events

    def test_unreachable_backend(self, client, backend, captured):
        backend.fail_with(httpx.ConnectError, "[Errno 111] Connection refused")

        client.get("/api/products")

        assert [entry["event"] for entry in captured] == [
            "Request received",
            "Proxying request",
            "Proxy error",
            "Connection refused",
        ]
        error = captured[2]
        assert error["error_type"] == "Unreachable"
        assert error["url"] == "http://backend.test:3847/api/products"
        assert isinstance(error["duration_ms"], int)
        assert error["log_level"] == "error"
        assert captured[3]["url"] == error["url"]

    def test_backend_timeout(self, client, backend, captured):
        backend.fail_with(httpx.ReadTimeout, "read timed out")

        client.get("/api/products")

        events = [entry["event"] for entry in captured]
        assert events[-2:] == ["Proxy error", "Backend timeout"]
        assert captured[-2]["error_type"] == "Timeout"
        assert captured[-1]["reason"] == "timeout"

    def test_rejected_body_never_proxied(self, client, backend, captured):
        client.post(
            "/api/products",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        events = [entry["event"] for entry in captured]
        assert events[0] == "Request received"
        assert "Proxying request" not in events
