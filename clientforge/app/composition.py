"""Composition root: the one place that wires the pipeline to a concrete builder.

The application layer only knows the ClientBuilder port; the builder comes
from the infrastructure factory selected by Settings.
"""
from __future__ import annotations

from clientforge.app.application.client_construction import ClientConstructionPipeline
from clientforge.app.config.settings import Settings
from clientforge.app.domain.models import ClientSettings
from clientforge.app.domain.request_client import RequestClient
from clientforge.app.infrastructure.http.factory import create_client_builder


def create_pipeline(config: Settings | None = None) -> ClientConstructionPipeline:
    config = config or Settings()
    return ClientConstructionPipeline(lambda: create_client_builder(config))


def create_client(settings: ClientSettings, config: Settings | None = None) -> RequestClient:
    """Build a client from an explicit settings model."""
    return create_pipeline(config).build(settings)


def create_default_client() -> RequestClient:
    """Build a client with ClientSettings() defaults."""
    return create_client(ClientSettings())


def create_client_from_env(config: Settings | None = None) -> RequestClient:
    """Build a client from CLIENT_* environment variables (and .env)."""
    config = config or Settings()
    return create_pipeline(config).build(config.to_client_settings())
