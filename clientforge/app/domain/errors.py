"""Errors raised while constructing a client. Every failure aborts construction."""
from __future__ import annotations


class ClientBuildError(Exception):
    """Base for client construction failures."""


class InvalidDurationError(ClientBuildError):
    """Raised when a duration cannot be converted to what the engine accepts."""


class InvalidCertificateError(ClientBuildError):
    """Raised when a PEM certificate or a certificate+key identity fails to parse."""


class InvalidAddressError(ClientBuildError):
    """Raised when a DNS override or fallback is not a literal IP address."""

    def __init__(self, address: str, reason: str) -> None:
        super().__init__(f"Invalid IP address: {address}. {reason}")
        self.address = address
        self.reason = reason


class EngineBuildError(ClientBuildError):
    """Raised when the transport engine rejects the fully configured builder."""
