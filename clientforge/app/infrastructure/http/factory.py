"""Client builder factory: selects the transport engine adapter from settings."""
from __future__ import annotations

from clientforge.app.config.settings import Settings
from clientforge.app.constants import TRANSPORT_BACKEND_HTTPX
from clientforge.app.infrastructure.http.httpx_builder import HttpxClientBuilder
from clientforge.app.ports.client_builder import ClientBuilder


def create_client_builder(settings: Settings) -> ClientBuilder:
    """Return a fresh builder for the configured backend (one per construction)."""
    backend = settings.transport_backend.strip().lower()

    if backend == TRANSPORT_BACKEND_HTTPX:
        return HttpxClientBuilder()

    raise ValueError(f"Unsupported transport backend: {backend}")
