"""
Application error taxonomy.

Every error carries a stable machine-readable ``code`` and an HTTP-style
``status_code``. Services raise these; the serving layer (main.py) turns them
into the error envelope. The cache layer never raises any of them.

  ValidationError          400  VALIDATION_ERROR
  NotFoundError            404  NOT_FOUND
  UpstreamUnavailableError 502  WEATHER_API_ERROR
"""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base class for all application-specific errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: str = "INTERNAL_SERVER_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details or None
        # Caller-facing wording set by the serving layer; `message` stays diagnostic.
        self.public_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "message": self.message,
            "code": self.code,
            "statusCode": self.status_code,
        }
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    """Raised when caller-supplied input fails validation."""

    def __init__(self, message: str, field: str | None = None, value: Any = None) -> None:
        details: dict[str, Any] = {}
        if field is not None:
            details["field"] = field
        if value is not None:
            details["value"] = value
        super().__init__(message, 400, "VALIDATION_ERROR", details)
        self.field = field
        self.value = value

    @classmethod
    def invalid_input(cls, field: str, value: Any, reason: str) -> "ValidationError":
        return cls(f"Invalid {field}: {reason}", field, value)

    @classmethod
    def invalid_coordinates(cls, latitude: float, longitude: float) -> "ValidationError":
        return cls(
            "Invalid coordinates: latitude must be between -90 and 90, "
            "longitude must be between -180 and 180",
            "coordinates",
            {"latitude": latitude, "longitude": longitude},
        )


class NotFoundError(AppError):
    """Raised when a domain entity does not exist by identifier."""

    def __init__(
        self,
        message: str,
        resource_type: str | None = None,
        resource_id: str | int | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if resource_type is not None:
            details["resourceType"] = resource_type
        if resource_id is not None:
            details["resourceId"] = resource_id
        super().__init__(message, 404, "NOT_FOUND", details)
        self.resource_type = resource_type
        self.resource_id = resource_id

    @classmethod
    def city(cls, city_id: int) -> "NotFoundError":
        return cls(f"City not found: {city_id}", "city", city_id)

    @classmethod
    def resource(cls, resource_type: str, resource_id: str | int) -> "NotFoundError":
        return cls(f"{resource_type} not found: {resource_id}", resource_type, resource_id)


class UpstreamUnavailableError(AppError):
    """Raised when the weather/geocoding provider cannot serve a request.

    Covers network errors, timeouts, non-success responses and malformed
    payloads. Never cached, never retried inside the service layer.
    """

    def __init__(
        self,
        message: str,
        original_error: BaseException | None = None,
        endpoint: str | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if original_error is not None:
            details["originalMessage"] = str(original_error)
            details["originalName"] = type(original_error).__name__
        if endpoint:
            details["endpoint"] = endpoint
        super().__init__(message, 502, "WEATHER_API_ERROR", details)
        self.original_error = original_error
        self.endpoint = endpoint

    @classmethod
    def timeout(cls, endpoint: str, timeout_s: float) -> "UpstreamUnavailableError":
        return cls(
            f"OpenMeteo API request timed out after {int(timeout_s * 1000)}ms",
            endpoint=endpoint,
        )

    @classmethod
    def network_error(cls, original_error: BaseException, endpoint: str) -> "UpstreamUnavailableError":
        return cls("Unable to connect to OpenMeteo API", original_error, endpoint)

    @classmethod
    def api_error(cls, status_code: int, message: str, endpoint: str) -> "UpstreamUnavailableError":
        return cls(f"OpenMeteo API returned error {status_code}: {message}", endpoint=endpoint)

    @classmethod
    def malformed_response(cls, endpoint: str, reason: str) -> "UpstreamUnavailableError":
        return cls(f"OpenMeteo API returned malformed response: {reason}", endpoint=endpoint)
