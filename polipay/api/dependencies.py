"""Shared FastAPI dependencies for gateway access."""

from typing import Any

from polipay.config import settings
from polipay.gateway.client import Credentials


def get_credentials() -> Credentials:
    return settings.credentials


def get_client_options() -> dict[str, Any]:
    """Connection options passed to every gateway interface (overridden in tests)."""
    return {
        "base_url": settings.poli_base_url,
        "timeout": settings.poli_timeout_seconds,
    }
