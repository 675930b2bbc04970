"""CORS for the browser front-end."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from services.travel_api.config import settings


def setup_cors(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
