"""Concrete ClientBuilder using httpx (sync and async clients built together).

Mapping notes:
  - no_proxy() sets trust_env=False. Otherwise httpx reads HTTP(S)_PROXY and
    ALL_PROXY, and those proxy mounts win over the default transport. Hosts
    matched by NO_PROXY still use the default transport.
  - Redirect policy maps to follow_redirects/max_redirects.
  - timeout() is the default for every httpx timeout phase. connect_timeout()
    overrides only the connect phase.
  - h2 does not send keep-alive PINGs, so tcp_keepalive and the HTTP/2
    keep-alive settings become TCP keepalive socket options: idle time from
    tcp_keepalive, probe interval from http2_keep_alive_interval.
  - httpx has no HTTP/3; http3_prior_knowledge() makes build() fail.
  - DNS bindings live in an OverrideTable read by the network backends of the
    default transports.
"""
from __future__ import annotations

import socket
from typing import Sequence

import httpcore
import httpx

from clientforge.app.constants import (
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_TIMEOUT_SECONDS,
)
from clientforge.app.domain.models import TlsVersion
from clientforge.app.domain.static_resolver import IPAddress, OverrideTable, StaticResolver
from clientforge.app.infrastructure.http.network_backend import (
    AsyncOverrideNetworkBackend,
    OverrideNetworkBackend,
)
from clientforge.app.infrastructure.http.tls import (
    TlsOptions,
    build_ssl_context,
    parse_certificate,
    parse_identity,
)
from clientforge.app.infrastructure.http.transport import (
    AsyncOverrideHTTPTransport,
    OverrideHTTPTransport,
)
from clientforge.app.ports.client_builder import ClientBuilder, EngineClients

# Linux names the idle option TCP_KEEPIDLE, macOS TCP_KEEPALIVE.
_TCP_KEEPIDLE = getattr(socket, "TCP_KEEPIDLE", getattr(socket, "TCP_KEEPALIVE", None))
_TCP_KEEPINTVL = getattr(socket, "TCP_KEEPINTVL", None)


def _whole_seconds(seconds: float) -> int:
    return max(1, int(round(seconds)))


class HttpxClientBuilder(ClientBuilder):
    """ClientBuilder implementation producing httpx.Client and httpx.AsyncClient."""

    def __init__(
        self,
        *,
        network_backend: httpcore.NetworkBackend | None = None,
        async_network_backend: httpcore.AsyncNetworkBackend | None = None,
        limits: httpx.Limits | None = None,
    ) -> None:
        self._network_backend = network_backend
        self._async_network_backend = async_network_backend
        self._limits = limits or httpx.Limits()

        self._trust_env = True
        self._follow_redirects = False
        self._max_redirects = DEFAULT_MAX_REDIRECTS
        self._timeout: float | None = DEFAULT_TIMEOUT_SECONDS
        self._connect_timeout: float | None = None

        self._tcp_keepalive: float | None = None
        self._http2_keep_alive_while_idle = False
        self._http2_keep_alive_timeout: float | None = None
        self._http2_keep_alive_interval: float | None = None

        self._tls = TlsOptions()

        self._http1 = True
        self._http2 = True
        self._http3 = False

        self._overrides = OverrideTable()

    @property
    def keep_alive_while_idle(self) -> bool:
        return self._http2_keep_alive_while_idle

    @property
    def keep_alive_timeout(self) -> float | None:
        return self._http2_keep_alive_timeout

    @property
    def overrides(self) -> OverrideTable:
        return self._overrides

    def no_proxy(self) -> None:
        self._trust_env = False

    def redirect_none(self) -> None:
        self._follow_redirects = False
        self._max_redirects = 0

    def redirect_limited(self, max_redirects: int) -> None:
        self._follow_redirects = True
        self._max_redirects = max_redirects

    def timeout(self, seconds: float) -> None:
        self._timeout = seconds

    def connect_timeout(self, seconds: float) -> None:
        self._connect_timeout = seconds

    def tcp_keepalive(self, seconds: float) -> None:
        self._tcp_keepalive = seconds

    def http2_keep_alive_while_idle(self, enabled: bool) -> None:
        self._http2_keep_alive_while_idle = enabled

    def http2_keep_alive_timeout(self, seconds: float) -> None:
        self._http2_keep_alive_timeout = seconds

    def http2_keep_alive_interval(self, seconds: float) -> None:
        self._http2_keep_alive_interval = seconds

    def tls_built_in_root_certs(self, enabled: bool) -> None:
        self._tls.built_in_root_certs = enabled

    def add_root_certificate(self, pem: bytes) -> None:
        self._tls.root_certificates.append(parse_certificate(pem))

    def danger_accept_invalid_certs(self, accept: bool) -> None:
        self._tls.accept_invalid_certs = accept

    def identity(self, pem: bytes) -> None:
        self._tls.identity = parse_identity(pem)

    def min_tls_version(self, version: TlsVersion) -> None:
        self._tls.min_version = version

    def max_tls_version(self, version: TlsVersion) -> None:
        self._tls.max_version = version

    def http1_only(self) -> None:
        self._http1, self._http2, self._http3 = True, False, False

    def http2_prior_knowledge(self) -> None:
        self._http1, self._http2, self._http3 = False, True, False

    def http3_prior_knowledge(self) -> None:
        self._http1, self._http2, self._http3 = False, False, True

    def dns_resolver(self, resolver: StaticResolver) -> None:
        self._overrides.set_fallback(resolver)

    def resolve_to_addrs(self, hostname: str, addresses: Sequence[IPAddress]) -> None:
        self._overrides.bind(hostname, StaticResolver.for_addresses(addresses))

    def socket_options(self) -> list[httpcore.SOCKET_OPTION]:
        """TCP keepalive socket options derived from the keep-alive settings."""
        if self._tcp_keepalive is None and self._http2_keep_alive_interval is None:
            return []
        options: list[httpcore.SOCKET_OPTION] = [(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)]
        if self._tcp_keepalive is not None and _TCP_KEEPIDLE is not None:
            options.append((socket.IPPROTO_TCP, _TCP_KEEPIDLE, _whole_seconds(self._tcp_keepalive)))
        if self._http2_keep_alive_interval is not None and _TCP_KEEPINTVL is not None:
            options.append(
                (socket.IPPROTO_TCP, _TCP_KEEPINTVL, _whole_seconds(self._http2_keep_alive_interval))
            )
        return options

    def _httpx_timeout(self) -> httpx.Timeout:
        if self._connect_timeout is None:
            return httpx.Timeout(self._timeout)
        return httpx.Timeout(self._timeout, connect=self._connect_timeout)

    def build(self) -> EngineClients:
        if self._http3:
            raise RuntimeError("HTTP/3 is not supported by the httpx transport")

        ssl_context = build_ssl_context(self._tls)
        socket_options = self.socket_options()
        transport = OverrideHTTPTransport(
            network_backend=OverrideNetworkBackend(self._overrides, self._network_backend),
            ssl_context=ssl_context,
            http1=self._http1,
            http2=self._http2,
            limits=self._limits,
            socket_options=socket_options,
        )
        async_transport = AsyncOverrideHTTPTransport(
            network_backend=AsyncOverrideNetworkBackend(self._overrides, self._async_network_backend),
            ssl_context=ssl_context,
            http1=self._http1,
            http2=self._http2,
            limits=self._limits,
            socket_options=socket_options,
        )

        common = {
            "verify": ssl_context,
            "http1": self._http1,
            "http2": self._http2,
            "timeout": self._httpx_timeout(),
            "follow_redirects": self._follow_redirects,
            "max_redirects": self._max_redirects,
            "limits": self._limits,
            "trust_env": self._trust_env,
        }
        client = httpx.Client(transport=transport, **common)
        async_client = httpx.AsyncClient(transport=async_transport, **common)
        return EngineClients(client=client, async_client=async_client, overrides=self._overrides)
