"""Best-effort submitter identity from transport-level origin.

Used only for quota bookkeeping. Headers are client-controlled, so the
identity is spoofable; it is never used for authentication.
"""

from __future__ import annotations

from collections.abc import Mapping

UNKNOWN_IDENTITY = "unknown"


def derive_identity(headers: Mapping[str, str], client_host: str | None = None) -> str:
    """x-forwarded-for (first hop) → x-real-ip → socket peer → "unknown"."""
    forwarded = headers.get("x-forwarded-for", "")
    if forwarded.strip():
        return forwarded.split(",")[0].strip()
    real_ip = headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip
    if client_host:
        return client_host
    return UNKNOWN_IDENTITY
