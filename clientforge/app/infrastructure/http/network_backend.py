"""httpcore network backends that apply static DNS bindings before connecting.

httpcore hands the origin hostname to connect_tcp and passes the TLS server
name separately, so replacing the connect address keeps SNI and certificate
hostname checks on the original name. Bound addresses are tried in order with
the request's own port. Hostnames without a binding go to the wrapped backend,
which uses the system resolver, and so do hosts given as IP literals.
"""
from __future__ import annotations

import ipaddress
import typing

import httpcore

from clientforge.app.domain.static_resolver import OverrideTable, StaticResolver

_CONNECT_ERRORS = (httpcore.ConnectError, httpcore.ConnectTimeout)


def _lookup(overrides: OverrideTable, host: str) -> StaticResolver | None:
    # IP-literal hosts never go through name resolution.
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return overrides.lookup(host)
    return None


class OverrideNetworkBackend(httpcore.NetworkBackend):
    def __init__(
        self,
        overrides: OverrideTable,
        backend: httpcore.NetworkBackend | None = None,
    ) -> None:
        self._overrides = overrides
        self._backend = backend if backend is not None else httpcore.SyncBackend()

    def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: float | None = None,
        local_address: str | None = None,
        socket_options: typing.Iterable[httpcore.SOCKET_OPTION] | None = None,
    ) -> httpcore.NetworkStream:
        resolver = _lookup(self._overrides, host)
        if resolver is None:
            return self._backend.connect_tcp(
                host,
                port,
                timeout=timeout,
                local_address=local_address,
                socket_options=socket_options,
            )

        options = list(socket_options) if socket_options is not None else None
        last_error: Exception | None = None
        for address, _ in resolver.resolve(host):
            try:
                return self._backend.connect_tcp(
                    address,
                    port,
                    timeout=timeout,
                    local_address=local_address,
                    socket_options=options,
                )
            except _CONNECT_ERRORS as exc:
                last_error = exc
        if last_error is not None:
            raise last_error
        raise httpcore.ConnectError(f"no addresses bound for {host}")

    def connect_unix_socket(
        self,
        path: str,
        timeout: float | None = None,
        socket_options: typing.Iterable[httpcore.SOCKET_OPTION] | None = None,
    ) -> httpcore.NetworkStream:
        return self._backend.connect_unix_socket(path, timeout=timeout, socket_options=socket_options)

    def sleep(self, seconds: float) -> None:
        self._backend.sleep(seconds)


class AsyncOverrideNetworkBackend(httpcore.AsyncNetworkBackend):
    def __init__(
        self,
        overrides: OverrideTable,
        backend: httpcore.AsyncNetworkBackend | None = None,
    ) -> None:
        self._overrides = overrides
        self._backend = backend if backend is not None else httpcore.AnyIOBackend()

    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: float | None = None,
        local_address: str | None = None,
        socket_options: typing.Iterable[httpcore.SOCKET_OPTION] | None = None,
    ) -> httpcore.AsyncNetworkStream:
        resolver = _lookup(self._overrides, host)
        if resolver is None:
            return await self._backend.connect_tcp(
                host,
                port,
                timeout=timeout,
                local_address=local_address,
                socket_options=socket_options,
            )

        options = list(socket_options) if socket_options is not None else None
        last_error: Exception | None = None
        for address, _ in await resolver.aresolve(host):
            try:
                return await self._backend.connect_tcp(
                    address,
                    port,
                    timeout=timeout,
                    local_address=local_address,
                    socket_options=options,
                )
            except _CONNECT_ERRORS as exc:
                last_error = exc
        if last_error is not None:
            raise last_error
        raise httpcore.ConnectError(f"no addresses bound for {host}")

    async def connect_unix_socket(
        self,
        path: str,
        timeout: float | None = None,
        socket_options: typing.Iterable[httpcore.SOCKET_OPTION] | None = None,
    ) -> httpcore.AsyncNetworkStream:
        return await self._backend.connect_unix_socket(path, timeout=timeout, socket_options=socket_options)

    async def sleep(self, seconds: float) -> None:
        await self._backend.sleep(seconds)
