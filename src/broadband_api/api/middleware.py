"""CORS configuration for the HTTP API."""

from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from broadband_api.core.config import Settings


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Configure CORS middleware on the FastAPI app.

    With no configured origins any origin may call the API (without
    credentials), which is what browser extensions need.

    Args:
        app: The FastAPI application.
        settings: Application settings.
    """
    kwargs: dict[str, Any] = {
        "allow_methods": ["GET", "POST", "OPTIONS"],
        "allow_headers": ["*"],
    }
    if settings.cors_origin_list:
        kwargs["allow_origins"] = settings.cors_origin_list
        kwargs["allow_credentials"] = True
    else:
        kwargs["allow_origins"] = ["*"]
    app.add_middleware(CORSMiddleware, **kwargs)
