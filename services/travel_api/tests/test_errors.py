"""Tests for the application error taxonomy."""

from __future__ import annotations

from services.travel_api.errors import (
    AppError,
    NotFoundError,
    UpstreamUnavailableError,
    ValidationError,
)


class TestErrors:
    def test_status_codes_and_codes(self):
        assert (ValidationError("x").status_code, ValidationError("x").code) == (400, "VALIDATION_ERROR")
        assert (NotFoundError("x").status_code, NotFoundError("x").code) == (404, "NOT_FOUND")
        upstream = UpstreamUnavailableError("x")
        assert (upstream.status_code, upstream.code) == (502, "WEATHER_API_ERROR")

    def test_all_are_app_errors(self):
        for err in (ValidationError("x"), NotFoundError("x"), UpstreamUnavailableError("x")):
            assert isinstance(err, AppError)

    def test_invalid_input_message_and_details(self):
        err = ValidationError.invalid_input("days", 30, "must be between 1 and 16")
        assert err.message == "Invalid days: must be between 1 and 16"
        assert err.details == {"field": "days", "value": 30}

    def test_not_found_city(self):
        err = NotFoundError.city(42)
        assert err.message == "City not found: 42"
        assert err.details == {"resourceType": "city", "resourceId": 42}

    def test_upstream_records_original_error(self):
        cause = TimeoutError("slow")
        err = UpstreamUnavailableError("Failed to search cities", cause, "search")
        assert err.original_error is cause
        assert err.details == {"originalMessage": "slow", "originalName": "TimeoutError", "endpoint": "search"}

    def test_to_dict_omits_empty_details(self):
        assert AppError("boom").to_dict() == {
            "message": "boom",
            "code": "INTERNAL_SERVER_ERROR",
            "statusCode": 500,
        }

    def test_public_message_defaults_to_none(self):
        assert UpstreamUnavailableError("x").public_message is None

    def test_not_found_resource(self):
        err = NotFoundError.resource("route", "/v1/api/nope")
        assert err.message == "route not found: /v1/api/nope"
        assert err.details == {"resourceType": "route", "resourceId": "/v1/api/nope"}
