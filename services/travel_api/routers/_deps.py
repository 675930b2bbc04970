"""Shared helpers for the versioned API routers."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import Request

from services.travel_api.errors import UpstreamUnavailableError

API_PREFIX = "/v1/api"


def envelope(request: Request, data: Any) -> dict:
    return {
        "success": True,
        "data": data,
        "requestId": getattr(request.state, "request_id", None),
    }


@contextmanager
def upstream_message(message: str) -> Iterator[None]:
    """Give provider failures raised inside the block a caller-facing message.

    Code, status and details are untouched, so clients can still tell
    "search unavailable" apart from "no matches".
    """
    try:
        yield
    except UpstreamUnavailableError as exc:
        exc.public_message = message
        raise
