"""
Unit tests for HTTP error handling.

Covers request ID correlation, the error taxonomy status codes, and the
FastAPI handlers' rendering of each error family.
"""

import re

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field

from services.common.http_errors import (
    AcademicAPIException,
    AuthError,
    ErrorCode,
    InvalidReferenceKindError,
    NotFoundError,
    PersistenceError,
    ValidationError,
    exception_to_response,
    register_exception_handlers,
)
from services.common.logging_config import request_id_var

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


class TestRequestIDCorrelation:
    """Test request ID correlation across exception handlers."""

    def setup_method(self):
        request_id_var.set(None)

    def test_request_id_from_context(self):
        request_id_var.set("test-request-123")

        response = exception_to_response(
            HTTPException(status_code=422, detail={"message": "Validation failed"})
        )

        assert response.request_id == "test-request-123"
        assert response.message == "Validation failed"

    def test_request_id_generated_outside_context(self):
        for exc in [
            HTTPException(status_code=404, detail="Not found"),
            ValueError("Something went wrong"),
            NotFoundError("Event"),
        ]:
            response = exception_to_response(exc)
            assert UUID_PATTERN.match(response.request_id)


class TestErrorTaxonomy:
    def test_not_found(self):
        error = NotFoundError("Subject")
        assert error.status_code == 404
        assert error.message == "Subject not found"
        assert error.error_code == ErrorCode.NOT_FOUND

    def test_not_found_with_identifier(self):
        assert NotFoundError("Event", "evt-1").message == "Event evt-1 not found"

    def test_invalid_reference_kind(self):
        error = InvalidReferenceKindError("Course", allowed=["Subject", "User"])
        assert error.status_code == 400
        assert error.message == "Invalid related model"
        assert error.details["value"] == "Course"
        assert error.details["allowed"] == ["Subject", "User"]

    def test_validation_error_details(self):
        error = ValidationError("Time must be HH:MM", field="time", value="25:99")
        response = error.to_error_response()

        assert error.status_code == 422
        assert response.type == "validation_error"
        assert response.details == {
            "field": "time",
            "value": "25:99",
            "code": "VALIDATION_FAILED",
        }

    def test_persistence_error_is_generic(self):
        error = PersistenceError("create_event")
        assert error.status_code == 500
        assert error.message == "A database error occurred"
        assert error.details == {"operation": "create_event"}
        assert error.error_code == ErrorCode.DATABASE_ERROR

    def test_not_found_details(self):
        assert NotFoundError("Meeting").details == {"resource": "Meeting"}
        assert NotFoundError("Event", "evt-1").details == {
            "resource": "Event",
            "identifier": "evt-1",
        }

    def test_overrides_apply_to_one_instance(self):
        error = AcademicAPIException("upstream down", status_code=503)
        assert error.status_code == 503
        assert error.error_type == "internal_error"
        assert AcademicAPIException("other").status_code == 500

    def test_forbidden_auth_error(self):
        error = AuthError("nope", code=ErrorCode.ACCESS_DENIED, status_code=403)
        assert error.status_code == 403
        assert AuthError("missing").status_code == 401
        assert AuthError.status_code == 401

    def test_generic_exception_hides_message(self):
        response = exception_to_response(RuntimeError("password=hunter2"))
        assert response.message == "Internal server error"
        assert "hunter2" not in str(response.model_dump())


class _Payload(BaseModel):
    name: str = Field(..., min_length=1)
    count: int


@pytest.fixture
def client():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/not-found")
    async def not_found():
        raise NotFoundError("Event")

    @app.get("/forbidden")
    async def forbidden():
        raise AuthError("nope", code=ErrorCode.ACCESS_DENIED, status_code=403)

    @app.get("/teapot")
    async def teapot():
        raise HTTPException(status_code=418, detail="short and stout")

    @app.get("/custom")
    async def custom():
        raise AcademicAPIException("upstream down", status_code=503)

    @app.get("/boom")
    async def boom():
        raise RuntimeError("driver exploded")

    @app.post("/payload")
    async def payload(body: _Payload):
        return body

    return TestClient(app, raise_server_exceptions=False)


class TestExceptionHandlers:
    def test_academic_exception(self, client):
        response = client.get("/not-found")
        assert response.status_code == 404
        body = response.json()
        assert body["type"] == "not_found"
        assert body["message"] == "Event not found"
        assert set(body) == {"type", "message", "details", "timestamp", "request_id"}

    def test_auth_error(self, client):
        response = client.get("/forbidden")
        assert response.status_code == 403
        assert response.json()["details"]["code"] == "ACCESS_DENIED"

    def test_http_exception(self, client):
        response = client.get("/teapot")
        assert response.status_code == 418
        assert response.json()["message"] == "short and stout"

    def test_custom_status(self, client):
        assert client.get("/custom").status_code == 503

    def test_unhandled_exception(self, client):
        response = client.get("/boom")
        assert response.status_code == 500
        assert response.json()["message"] == "Internal server error"
        assert "driver exploded" not in response.text

    def test_request_validation(self, client):
        response = client.post("/payload", json={"name": "", "count": "many"})
        assert response.status_code == 422
        body = response.json()
        assert body["type"] == "validation_error"
        fields = [error["field"] for error in body["details"]["errors"]]
        assert fields == ["name", "count"]
