"""httpx transports whose connection pools use the overriding network backends."""
from __future__ import annotations

import ssl
import typing

import httpcore
import httpx


class OverrideHTTPTransport(httpx.HTTPTransport):
    """httpx.HTTPTransport with a caller-supplied httpcore network backend."""

    def __init__(
        self,
        *,
        network_backend: httpcore.NetworkBackend,
        ssl_context: ssl.SSLContext,
        http1: bool,
        http2: bool,
        limits: httpx.Limits,
        socket_options: typing.Iterable[httpcore.SOCKET_OPTION] | None = None,
    ) -> None:
        super().__init__(
            verify=ssl_context,
            http1=http1,
            http2=http2,
            limits=limits,
            socket_options=socket_options,
        )
        self._pool = httpcore.ConnectionPool(
            ssl_context=ssl_context,
            max_connections=limits.max_connections,
            max_keepalive_connections=limits.max_keepalive_connections,
            keepalive_expiry=limits.keepalive_expiry,
            http1=http1,
            http2=http2,
            socket_options=socket_options,
            network_backend=network_backend,
        )


class AsyncOverrideHTTPTransport(httpx.AsyncHTTPTransport):
    """httpx.AsyncHTTPTransport with a caller-supplied httpcore network backend."""

    def __init__(
        self,
        *,
        network_backend: httpcore.AsyncNetworkBackend,
        ssl_context: ssl.SSLContext,
        http1: bool,
        http2: bool,
        limits: httpx.Limits,
        socket_options: typing.Iterable[httpcore.SOCKET_OPTION] | None = None,
    ) -> None:
        super().__init__(
            verify=ssl_context,
            http1=http1,
            http2=http2,
            limits=limits,
            socket_options=socket_options,
        )
        self._pool = httpcore.AsyncConnectionPool(
            ssl_context=ssl_context,
            max_connections=limits.max_connections,
            max_keepalive_connections=limits.max_keepalive_connections,
            keepalive_expiry=limits.keepalive_expiry,
            http1=http1,
            http2=http2,
            socket_options=socket_options,
            network_backend=network_backend,
        )
