"""Static name resolution: fixed answers for hostnames, no network I/O.

A StaticResolver is bound to one address set and answers every lookup with it,
whatever name is asked for. Scoping is done by OverrideTable, which keeps
exact-hostname bindings and one catch-all binding as separate entries, so a
hostname override always wins over the fallback for that hostname without any
precedence logic at lookup time.
"""
from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Iterable, Union

from loguru import logger

from clientforge.app.constants import PLACEHOLDER_PORT
from clientforge.app.core import SERVICE_NAME

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


def _log(event: str, **kwargs: object) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


@dataclass(frozen=True)
class StaticResolver:
    """Resolution strategy returning its bound addresses for any hostname."""

    addresses: tuple[IPAddress, ...]

    @classmethod
    def for_addresses(cls, addresses: Iterable[IPAddress]) -> "StaticResolver":
        return cls(tuple(addresses))

    def resolve(self, name: str) -> tuple[tuple[str, int], ...]:
        return tuple((str(address), PLACEHOLDER_PORT) for address in self.addresses)

    async def aresolve(self, name: str) -> tuple[tuple[str, int], ...]:
        # Completes without suspending.
        return self.resolve(name)


def _normalize(hostname: str) -> str:
    return hostname.strip().lower()


class OverrideTable:
    """Hostname-scoped and catch-all resolver bindings.

    Filled once while a client is built, read concurrently afterwards.
    """

    def __init__(self) -> None:
        self._bindings: dict[str, StaticResolver] = {}
        self._fallback: StaticResolver | None = None

    @property
    def fallback(self) -> StaticResolver | None:
        return self._fallback

    @property
    def hostnames(self) -> tuple[str, ...]:
        return tuple(self._bindings)

    def bind(self, hostname: str, resolver: StaticResolver) -> None:
        self._bindings[_normalize(hostname)] = resolver
        _log(
            "dns_override_bound",
            hostname=hostname,
            addresses=[str(a) for a in resolver.addresses],
        )

    def set_fallback(self, resolver: StaticResolver) -> None:
        self._fallback = resolver
        _log("dns_fallback_bound", addresses=[str(a) for a in resolver.addresses])

    def lookup(self, hostname: str) -> StaticResolver | None:
        """Resolver for hostname, or None when the system resolver should be used."""
        resolver = self._bindings.get(_normalize(hostname))
        if resolver is not None:
            return resolver
        return self._fallback

    def __bool__(self) -> bool:
        return bool(self._bindings) or self._fallback is not None
