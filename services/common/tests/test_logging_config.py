"""
Unit tests for logging configuration.

Covers the context processors, rendered output in both formats, the request
logging middleware and HTTP error logging.
"""

import json
import logging
from unittest.mock import MagicMock, patch

import pytest
import structlog
from fastapi import FastAPI
from fastapi.testclient import TestClient

from services.common.logging_config import (
    add_request_context,
    create_request_logging_middleware,
    get_logger,
    log_http_error,
    request_id_var,
    service_stamper,
    setup_service_logging,
    user_id_var,
)


@pytest.fixture(autouse=True)
def reset_logging():
    request_id_var.set(None)
    user_id_var.set(None)
    yield
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()


class TestLoggingProcessors:
    def test_add_request_context(self):
        request_id_var.set("req-123")
        user_id_var.set("student-1")

        result = add_request_context(MagicMock(), "info", {"event": "x"})

        assert result["request_id"] == "req-123"
        assert result["user_id"] == "student-1"

    def test_add_request_context_outside_request(self):
        result = add_request_context(MagicMock(), "info", {"event": "x"})
        assert "request_id" not in result
        assert "user_id" not in result

    def test_explicit_request_id_wins(self):
        request_id_var.set("req-123")
        result = add_request_context(MagicMock(), "info", {"request_id": "other"})
        assert result["request_id"] == "other"

    def test_service_stamper(self):
        stamp = service_stamper("events")
        assert stamp(MagicMock(), "info", {"event": "x"})["service"] == "events"
        assert stamp(MagicMock(), "info", {"service": "gateway"})["service"] == "gateway"


class TestRenderedOutput:
    def test_json_lines_carry_context(self, capsys):
        setup_service_logging("events", log_level="INFO", log_format="json")
        request_id_var.set("req-123")

        get_logger("services.events.main").info("Scheduled meeting", canceled=0)

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "Scheduled meeting"
        assert record["service"] == "events"
        assert record["request_id"] == "req-123"
        assert record["level"] == "info"
        assert record["canceled"] == 0

    def test_text_format(self, capsys):
        setup_service_logging("events", log_level="INFO", log_format="text")

        get_logger("services.events.main").warning("Meeting had no counterpart")

        out = capsys.readouterr().out
        assert "Meeting had no counterpart" in out
        assert "service=events" in out

    def test_level_filtering(self, capsys):
        setup_service_logging("events", log_level="WARNING", log_format="json")

        get_logger("services.events.main").info("hidden")

        assert "hidden" not in capsys.readouterr().out


class TestLogHttpError:
    def test_level_follows_status(self):
        mock_logger = MagicMock()
        with patch("services.common.logging_config.logger", mock_logger):
            log_http_error("not_found", "Event not found", 404, request_id="r-1")
            log_http_error("service_error", "A database error occurred", 500)

        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.kwargs["status_code"] == 404
        assert mock_logger.warning.call_args.kwargs["request_id"] == "r-1"
        mock_logger.error.assert_called_once()
        assert "request_id" not in mock_logger.error.call_args.kwargs


class TestRequestLoggingMiddleware:
    def setup_method(self):
        app = FastAPI()
        app.middleware("http")(create_request_logging_middleware())

        @app.get("/whoami")
        async def whoami():
            return {"request_id": request_id_var.get(), "user_id": user_id_var.get()}

        self.client = TestClient(app)

    def test_propagates_request_id_and_user(self):
        response = self.client.get(
            "/whoami", headers={"X-Request-Id": "req-9", "X-User-Id": "student-1"}
        )

        assert response.headers["X-Request-Id"] == "req-9"
        assert response.json() == {"request_id": "req-9", "user_id": "student-1"}

    def test_generates_request_id(self):
        response = self.client.get("/whoami")

        generated = response.headers["X-Request-Id"]
        assert generated
        assert response.json() == {"request_id": generated, "user_id": None}
