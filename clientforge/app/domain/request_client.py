"""Client handle: the built, shareable result of client construction."""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from clientforge.app.domain.cancellation import CancellationToken
from clientforge.app.domain.models import HttpVersionPref
from clientforge.app.domain.static_resolver import OverrideTable

if TYPE_CHECKING:
    import httpx


@dataclass(frozen=True)
class RequestClient:
    """Immutable handle around the engine clients.

    Clones share the engine clients (and so their connection pools) and the
    very same CancellationToken instance. http_version_pref and
    throw_on_status_code are kept for the code that issues requests.
    """

    client: "httpx.Client"
    async_client: "httpx.AsyncClient"
    http_version_pref: HttpVersionPref
    throw_on_status_code: bool
    cancel_token: CancellationToken = field(default_factory=CancellationToken)
    overrides: OverrideTable = field(default_factory=OverrideTable)

    def clone(self) -> "RequestClient":
        return dataclasses.replace(self)

    def cancel(self) -> None:
        self.cancel_token.cancel()

    @property
    def is_cancelled(self) -> bool:
        return self.cancel_token.is_cancelled

    def resolve(self, hostname: str) -> tuple[str, ...] | None:
        """Addresses statically bound for hostname; None means the system resolver is used."""
        resolver = self.overrides.lookup(hostname)
        if resolver is None:
            return None
        return tuple(address for address, _ in resolver.resolve(hostname))

    def close(self) -> None:
        """Close the sync engine client. Affects every clone."""
        self.client.close()

    async def aclose(self) -> None:
        await self.async_client.aclose()
