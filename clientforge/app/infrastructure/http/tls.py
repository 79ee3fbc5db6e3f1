"""TLS context assembly for the httpx adapter (stdlib ssl + certifi trust store).

Certificates and identities are parsed when they are added, so bad material is
reported at the step that supplied it. The SSLContext itself is built once,
when the client is built.
"""
from __future__ import annotations

import ssl
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

import certifi

from clientforge.app.domain.models import TlsVersion

_SSL_VERSIONS = {
    TlsVersion.TLS1_2: ssl.TLSVersion.TLSv1_2,
    TlsVersion.TLS1_3: ssl.TLSVersion.TLSv1_3,
}


@dataclass
class TlsOptions:
    built_in_root_certs: bool = True
    root_certificates: list[str] = field(default_factory=list)
    accept_invalid_certs: bool = False
    identity: bytes | None = None
    min_version: TlsVersion | None = None
    max_version: TlsVersion | None = None


def parse_certificate(pem: bytes) -> str:
    """Validate a PEM certificate and return it as text. Raises ValueError."""
    try:
        text = bytes(pem).decode("ascii")
    except UnicodeDecodeError as exc:
        raise ValueError("certificate is not PEM encoded") from exc
    scratch = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    try:
        scratch.load_verify_locations(cadata=text)
    except ssl.SSLError as exc:
        raise ValueError(f"invalid PEM certificate: {exc}") from exc
    return text


def _refuse_password() -> bytes:
    raise ValueError("encrypted private keys are not supported")


def _load_identity(context: ssl.SSLContext, identity: bytes) -> None:
    # ssl only loads chains from files. Without a password callback OpenSSL
    # prompts on the terminal for encrypted keys.
    with tempfile.TemporaryDirectory(prefix="clientforge-") as tmp:
        path = Path(tmp) / "identity.pem"
        path.write_bytes(identity)
        context.load_cert_chain(certfile=str(path), password=_refuse_password)


def parse_identity(identity: bytes) -> bytes:
    """Validate a certificate+private key PEM blob. Raises ValueError."""
    scratch = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    try:
        _load_identity(scratch, identity)
    except (ssl.SSLError, ValueError) as exc:
        raise ValueError(f"invalid client identity: {exc}") from exc
    return bytes(identity)


def build_ssl_context(options: TlsOptions) -> ssl.SSLContext:
    if options.built_in_root_certs:
        context = ssl.create_default_context(cafile=certifi.where())
    else:
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)

    for pem in options.root_certificates:
        context.load_verify_locations(cadata=pem)

    if options.accept_invalid_certs:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

    if options.identity is not None:
        _load_identity(context, options.identity)

    # Inverted bounds are not rejected here; the handshake fails instead.
    if options.min_version is not None:
        context.minimum_version = _SSL_VERSIONS[options.min_version]
    if options.max_version is not None:
        context.maximum_version = _SSL_VERSIONS[options.max_version]
    return context
