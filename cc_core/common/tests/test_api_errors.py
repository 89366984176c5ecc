# cc_core/common/tests/test_api_errors.py
import pytest
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.test import APIRequestFactory

from cc_core.common.api.exceptions import (
    InvalidStateError,
    SequenceCollisionError,
    api_exception_handler,
)


def _handle(exc):
    request = APIRequestFactory().get("/api/v1/anything/")
    request.request_id = "rid-123"
    return api_exception_handler(exc, {"request": request})


def test_validation_error_envelope():
    resp = _handle(ValidationError({"amount": ["Amount must be > 0."]}))
    assert resp.status_code == 400
    assert resp.data == {
        "error": {
            "code": "validation_error",
            "message": "Request failed.",
            "details": {"amount": ["Amount must be > 0."]},
            "request_id": "rid-123",
        }
    }


def test_state_error_envelope():
    resp = _handle(InvalidStateError("Only a final invoice can be voided."))
    assert resp.status_code == 400
    assert resp.data["error"]["code"] == "invalid_state"
    assert resp.data["error"]["message"] == "Only a final invoice can be voided."
    assert resp.data["error"]["details"] is None


def test_not_found_envelope():
    resp = _handle(NotFound("Invoice not found."))
    assert resp.status_code == 404
    assert resp.data["error"]["code"] == "not_found"


def test_sequence_collision_is_500():
    resp = _handle(SequenceCollisionError())
    assert resp.status_code == 500
    assert resp.data["error"]["code"] == "sequence_collision"


def test_unexpected_error_is_500_server_error():
    resp = _handle(RuntimeError("boom"))
    assert resp.status_code == 500
    assert resp.data["error"]["code"] == "server_error"
    assert resp.data["error"]["request_id"] == "rid-123"


@pytest.mark.django_db
def test_request_id_header_is_echoed(api_client):
    resp = api_client.get("/api/v1/audit/events/", HTTP_X_REQUEST_ID="abc-123")
    assert resp.status_code == 200
    assert resp["X-Request-Id"] == "abc-123"
