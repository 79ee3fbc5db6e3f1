from __future__ import annotations

from datetime import timedelta

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from clientforge.app.domain.models import (
    ClientSettings,
    DnsSettings,
    HttpVersionPref,
    LimitedRedirects,
    NoProxy,
    NoRedirect,
    RedirectSettings,
    TimeoutSettings,
    TlsSettings,
)


def _duration(seconds: float | None) -> timedelta | None:
    return None if seconds is None else timedelta(seconds=seconds)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    transport_backend: str = Field("httpx", validation_alias="CLIENT_TRANSPORT_BACKEND")

    http_version: HttpVersionPref = Field(HttpVersionPref.ALL, validation_alias="CLIENT_HTTP_VERSION")
    throw_on_status_code: bool = Field(True, validation_alias="CLIENT_THROW_ON_STATUS_CODE")

    timeout_seconds: float | None = Field(None, validation_alias="CLIENT_TIMEOUT_SECONDS")
    connect_timeout_seconds: float | None = Field(None, validation_alias="CLIENT_CONNECT_TIMEOUT_SECONDS")
    # 0 disables keep-alive.
    keep_alive_timeout_seconds: float | None = Field(None, validation_alias="CLIENT_KEEP_ALIVE_TIMEOUT_SECONDS")
    keep_alive_ping_seconds: float | None = Field(None, validation_alias="CLIENT_KEEP_ALIVE_PING_SECONDS")

    no_proxy: bool = Field(False, validation_alias="CLIENT_NO_PROXY")
    # 0 turns redirects off; unset keeps the engine default.
    max_redirects: int | None = Field(None, validation_alias="CLIENT_MAX_REDIRECTS")

    verify_certificates: bool = Field(True, validation_alias="CLIENT_VERIFY_CERTIFICATES")
    dns_fallback: str | None = Field(None, validation_alias="CLIENT_DNS_FALLBACK")

    def _timeout_settings(self) -> TimeoutSettings | None:
        values = (
            self.timeout_seconds,
            self.connect_timeout_seconds,
            self.keep_alive_timeout_seconds,
            self.keep_alive_ping_seconds,
        )
        if all(value is None for value in values):
            return None
        return TimeoutSettings(
            timeout=_duration(self.timeout_seconds),
            connect_timeout=_duration(self.connect_timeout_seconds),
            keep_alive_timeout=_duration(self.keep_alive_timeout_seconds),
            keep_alive_ping=_duration(self.keep_alive_ping_seconds),
        )

    def _redirect_settings(self) -> RedirectSettings | None:
        if self.max_redirects is None:
            return None
        if self.max_redirects == 0:
            return NoRedirect()
        return LimitedRedirects(self.max_redirects)

    def to_client_settings(self) -> ClientSettings:
        """Translate environment configuration into the settings model."""
        return ClientSettings(
            http_version_pref=self.http_version,
            timeout_settings=self._timeout_settings(),
            throw_on_status_code=self.throw_on_status_code,
            proxy_settings=NoProxy() if self.no_proxy else None,
            redirect_settings=self._redirect_settings(),
            tls_settings=None if self.verify_certificates else TlsSettings(verify_certificates=False),
            dns_settings=DnsSettings(fallback=self.dns_fallback) if self.dns_fallback else None,
        )
