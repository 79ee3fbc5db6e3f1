"""Library-level constants shared across modules."""
from __future__ import annotations

# Static resolution ignores ports; the connection port comes from the request URL.
PLACEHOLDER_PORT = 0

# httpx defaults, kept here so the builder can reproduce them when only some
# timeout fields are overridden.
DEFAULT_TIMEOUT_SECONDS = 5.0
DEFAULT_MAX_REDIRECTS = 20

TRANSPORT_BACKEND_HTTPX = "httpx"
