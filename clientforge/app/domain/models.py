"""Settings model: declarative description of the client a caller wants built.

Pure values. Every group on ClientSettings is optional and absence means
"keep the transport engine's default", never "disabled". Interpretation and
validation of derived values (durations, PEM material, IP literals) happen in
the construction pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Mapping, Sequence, Union


class HttpVersionPref(str, Enum):
    HTTP10 = "http10"
    HTTP11 = "http11"
    HTTP2 = "http2"
    HTTP3 = "http3"
    ALL = "all"


class TlsVersion(str, Enum):
    TLS1_2 = "tls1_2"
    TLS1_3 = "tls1_3"


@dataclass(frozen=True)
class TimeoutSettings:
    """Per-client timeouts. A zero keep_alive_timeout means keep-alive is disabled."""

    timeout: timedelta | None = None
    connect_timeout: timedelta | None = None
    keep_alive_timeout: timedelta | None = None
    keep_alive_ping: timedelta | None = None


@dataclass(frozen=True)
class ClientCertificate:
    """PEM certificate and PEM private key used for mutual TLS."""

    certificate: bytes
    private_key: bytes

    def identity_pem(self) -> bytes:
        return self.certificate + b"\n" + self.private_key

    def __repr__(self) -> str:
        return f"ClientCertificate(certificate=<{len(self.certificate)} bytes>, private_key=<redacted>)"


@dataclass(frozen=True)
class TlsSettings:
    trust_root_certificates: bool = True
    trusted_root_certificates: Sequence[bytes] = ()
    verify_certificates: bool = True
    client_certificate: ClientCertificate | None = None
    min_tls_version: TlsVersion | None = None
    max_tls_version: TlsVersion | None = None


@dataclass(frozen=True)
class DnsSettings:
    """Static name resolution.

    overrides maps a hostname to the IP literals it must resolve to; fallback
    is a single IP literal used for every hostname without an override.
    """

    overrides: Mapping[str, Sequence[str]] = field(default_factory=dict)
    fallback: str | None = None


@dataclass(frozen=True)
class NoProxy:
    """Disable every proxy, including ones taken from the environment."""


ProxySettings = NoProxy


@dataclass(frozen=True)
class NoRedirect:
    """Do not follow redirect responses."""


@dataclass(frozen=True)
class LimitedRedirects:
    """Follow at most max_redirects redirects. The value is passed to the engine as is."""

    max_redirects: int


RedirectSettings = Union[NoRedirect, LimitedRedirects]


@dataclass(frozen=True)
class ClientSettings:
    """Aggregate root consumed once by the construction pipeline."""

    http_version_pref: HttpVersionPref = HttpVersionPref.ALL
    timeout_settings: TimeoutSettings | None = None
    throw_on_status_code: bool = True
    proxy_settings: ProxySettings | None = None
    redirect_settings: RedirectSettings | None = None
    tls_settings: TlsSettings | None = None
    dns_settings: DnsSettings | None = None
