"""Client construction pipeline: ClientSettings -> ClientBuilder -> RequestClient.

Groups are applied in a fixed order:

  1. proxy
  2. redirects
  3. timeouts (keep-alive coupling included)
  4. TLS
  5. HTTP version forcing
  6. DNS (fallback, then per-hostname overrides)
  7. engine build

HTTP version forcing comes after proxy, redirect, timeout and TLS setup so a
prior-knowledge mode is the final word on the wire protocol. DNS bindings do
not interact with version forcing.

A strictly positive keep-alive timeout turns on three settings together: TCP
keepalive, HTTP/2 keep-alive while idle, and the HTTP/2 keep-alive timeout.
This stops intermediaries from dropping idle pooled HTTP/2 connections.
Durations below one millisecond count as zero and change nothing.

Construction is fail-fast. The first invalid value raises a ClientBuildError
subclass and no client is returned.

Known gaps, left to the engine: inverted min/max TLS bounds and non-positive
redirect limits are passed through unchecked.
"""
from __future__ import annotations

import ipaddress
from datetime import timedelta
from typing import Any, Callable, Sequence

from loguru import logger

from clientforge.app.core import SERVICE_NAME
from clientforge.app.domain.cancellation import CancellationToken
from clientforge.app.domain.errors import (
    ClientBuildError,
    EngineBuildError,
    InvalidAddressError,
    InvalidCertificateError,
    InvalidDurationError,
)
from clientforge.app.domain.models import (
    ClientSettings,
    DnsSettings,
    HttpVersionPref,
    LimitedRedirects,
    NoProxy,
    NoRedirect,
    ProxySettings,
    RedirectSettings,
    TimeoutSettings,
    TlsSettings,
)
from clientforge.app.domain.request_client import RequestClient
from clientforge.app.domain.static_resolver import IPAddress, StaticResolver
from clientforge.app.ports.client_builder import ClientBuilder, EngineClients

_ONE_MILLISECOND = timedelta(milliseconds=1)


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def _to_seconds(value: timedelta, field_name: str) -> float:
    if not isinstance(value, timedelta):
        raise InvalidDurationError(f"{field_name} must be a timedelta, got {type(value).__name__}")
    if value < timedelta(0):
        raise InvalidDurationError(f"{field_name} must not be negative, got {value}")
    return value.total_seconds()


def _parse_address(literal: str) -> IPAddress:
    try:
        return ipaddress.ip_address(literal)
    except (ValueError, AttributeError) as exc:
        raise InvalidAddressError(str(literal), str(exc)) from exc


class ClientConstructionPipeline:
    """Applies ClientSettings to a fresh builder per call and returns a RequestClient."""

    def __init__(self, builder_factory: Callable[[], ClientBuilder]) -> None:
        self._builder_factory = builder_factory

    def build(self, settings: ClientSettings) -> RequestClient:
        builder = self._builder_factory()
        _log(
            "client_build_started",
            http_version=settings.http_version_pref.value,
            throw_on_status_code=settings.throw_on_status_code,
        )
        try:
            self._apply_proxy(builder, settings.proxy_settings)
            self._apply_redirects(builder, settings.redirect_settings)
            self._apply_timeouts(builder, settings.timeout_settings)
            self._apply_tls(builder, settings.tls_settings)
            self._apply_http_version(builder, settings.http_version_pref)
            self._apply_dns(builder, settings.dns_settings)
            engine = self._build_engine(builder)
        except ClientBuildError as exc:
            logger.warning("client construction failed: {}", exc)
            _log("client_build_failed", error_type=type(exc).__name__, error=str(exc))
            raise

        _log("client_built", http_version=settings.http_version_pref.value)
        return RequestClient(
            client=engine.client,
            async_client=engine.async_client,
            http_version_pref=settings.http_version_pref,
            throw_on_status_code=settings.throw_on_status_code,
            cancel_token=CancellationToken(),
            overrides=engine.overrides,
        )

    def _apply_proxy(self, builder: ClientBuilder, proxy: ProxySettings | None) -> None:
        if proxy is None:
            return
        if isinstance(proxy, NoProxy):
            builder.no_proxy()
        _log("client_group_applied", group="proxy", value=type(proxy).__name__)

    def _apply_redirects(self, builder: ClientBuilder, redirects: RedirectSettings | None) -> None:
        if redirects is None:
            return
        if isinstance(redirects, NoRedirect):
            builder.redirect_none()
        elif isinstance(redirects, LimitedRedirects):
            builder.redirect_limited(redirects.max_redirects)
        _log("client_group_applied", group="redirects", value=repr(redirects))

    def _apply_timeouts(self, builder: ClientBuilder, timeouts: TimeoutSettings | None) -> None:
        if timeouts is None:
            return

        if timeouts.timeout is not None:
            builder.timeout(_to_seconds(timeouts.timeout, "timeout"))
        if timeouts.connect_timeout is not None:
            builder.connect_timeout(_to_seconds(timeouts.connect_timeout, "connect_timeout"))

        if timeouts.keep_alive_timeout is not None:
            seconds = _to_seconds(timeouts.keep_alive_timeout, "keep_alive_timeout")
            if timeouts.keep_alive_timeout >= _ONE_MILLISECOND:
                builder.tcp_keepalive(seconds)
                builder.http2_keep_alive_while_idle(True)
                builder.http2_keep_alive_timeout(seconds)

        if timeouts.keep_alive_ping is not None:
            builder.http2_keep_alive_interval(_to_seconds(timeouts.keep_alive_ping, "keep_alive_ping"))
        _log("client_group_applied", group="timeouts")

    def _apply_tls(self, builder: ClientBuilder, tls: TlsSettings | None) -> None:
        if tls is None:
            return

        if not tls.trust_root_certificates:
            builder.tls_built_in_root_certs(False)

        for index, pem in enumerate(tls.trusted_root_certificates):
            try:
                builder.add_root_certificate(pem)
            except ValueError as exc:
                raise InvalidCertificateError(
                    f"Error adding trusted certificate #{index}: {exc}"
                ) from exc

        if not tls.verify_certificates:
            logger.warning("certificate verification is disabled for this client")
            builder.danger_accept_invalid_certs(True)

        if tls.client_certificate is not None:
            try:
                builder.identity(tls.client_certificate.identity_pem())
            except ValueError as exc:
                raise InvalidCertificateError(f"Error parsing client identity: {exc}") from exc

        if tls.min_tls_version is not None:
            builder.min_tls_version(tls.min_tls_version)
        if tls.max_tls_version is not None:
            builder.max_tls_version(tls.max_tls_version)
        _log(
            "client_group_applied",
            group="tls",
            trusted_certificates=len(tls.trusted_root_certificates),
            verify_certificates=tls.verify_certificates,
            client_certificate=tls.client_certificate is not None,
        )

    def _apply_http_version(self, builder: ClientBuilder, pref: HttpVersionPref) -> None:
        if pref in (HttpVersionPref.HTTP10, HttpVersionPref.HTTP11):
            builder.http1_only()
        elif pref == HttpVersionPref.HTTP2:
            builder.http2_prior_knowledge()
        elif pref == HttpVersionPref.HTTP3:
            builder.http3_prior_knowledge()

    def _apply_dns(self, builder: ClientBuilder, dns: DnsSettings | None) -> None:
        if dns is None:
            return

        if dns.fallback is not None:
            builder.dns_resolver(StaticResolver.for_addresses([_parse_address(dns.fallback)]))

        for hostname, literals in dns.overrides.items():
            addresses = self._parse_addresses(literals)
            builder.resolve_to_addrs(hostname, addresses)
        _log(
            "client_group_applied",
            group="dns",
            overrides=len(dns.overrides),
            fallback=dns.fallback is not None,
        )

    @staticmethod
    def _parse_addresses(literals: Sequence[str]) -> list[IPAddress]:
        # All literals are parsed before anything is bound for the hostname.
        return [_parse_address(literal) for literal in literals]

    @staticmethod
    def _build_engine(builder: ClientBuilder) -> EngineClients:
        try:
            return builder.build()
        except Exception as exc:
            raise EngineBuildError(str(exc) or type(exc).__name__) from exc
