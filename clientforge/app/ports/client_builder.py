"""Client builder port: capability interface of the underlying transport engine.

The construction pipeline depends on this port only; infrastructure (httpx)
implements it. Tests drive the pipeline with a recording fake.

Durations are plain seconds. Methods that parse material (certificates,
identities) raise ValueError on invalid input. build() may raise anything;
the pipeline reports it as an engine build failure.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Sequence, runtime_checkable

from clientforge.app.domain.models import TlsVersion
from clientforge.app.domain.static_resolver import IPAddress, OverrideTable, StaticResolver


@dataclass(frozen=True)
class EngineClients:
    """What a builder produces: sync and async clients plus their DNS bindings."""

    client: Any
    async_client: Any
    overrides: OverrideTable


@runtime_checkable
class ClientBuilder(Protocol):
    """Port: configure and build a network client. Implementations live in infrastructure."""

    def no_proxy(self) -> None: ...

    def redirect_none(self) -> None: ...

    def redirect_limited(self, max_redirects: int) -> None: ...

    def timeout(self, seconds: float) -> None: ...

    def connect_timeout(self, seconds: float) -> None: ...

    def tcp_keepalive(self, seconds: float) -> None: ...

    def http2_keep_alive_while_idle(self, enabled: bool) -> None: ...

    def http2_keep_alive_timeout(self, seconds: float) -> None: ...

    def http2_keep_alive_interval(self, seconds: float) -> None: ...

    def tls_built_in_root_certs(self, enabled: bool) -> None: ...

    def add_root_certificate(self, pem: bytes) -> None:
        """Parse pem and trust it; raise ValueError when it is not a PEM certificate."""
        ...

    def danger_accept_invalid_certs(self, accept: bool) -> None: ...

    def identity(self, pem: bytes) -> None:
        """Parse a certificate+key PEM blob as client identity; raise ValueError on failure."""
        ...

    def min_tls_version(self, version: TlsVersion) -> None: ...

    def max_tls_version(self, version: TlsVersion) -> None: ...

    def http1_only(self) -> None: ...

    def http2_prior_knowledge(self) -> None: ...

    def http3_prior_knowledge(self) -> None: ...

    def dns_resolver(self, resolver: StaticResolver) -> None:
        """Install resolver as catch-all for hostnames without their own binding."""
        ...

    def resolve_to_addrs(self, hostname: str, addresses: Sequence[IPAddress]) -> None:
        """Bind hostname to exactly these addresses."""
        ...

    def build(self) -> EngineClients: ...
