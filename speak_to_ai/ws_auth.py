"""Token checks and client address lookup for WebSocket requests."""

from __future__ import annotations

from typing import Mapping

_BEARER_PREFIX = "Bearer "


def _header(headers: Mapping[str, str], name: str) -> str:
    """Look a header up by name, ignoring case."""
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return ""


def authenticate(auth_token: str, query: Mapping[str, str], headers: Mapping[str, str]) -> bool:
    """Check a request's token, given in the query or as a bearer header.

    With no configured token every request is allowed.
    """
    if not auth_token:
        return True
    query_token = query.get("token", "")
    header_token = _header(headers, "Authorization")
    if len(header_token) > len(_BEARER_PREFIX) and header_token.startswith(_BEARER_PREFIX):
        header_token = header_token[len(_BEARER_PREFIX):]
    return query_token == auth_token or header_token == auth_token


def validate_token(auth_token: str, token: str) -> bool:
    """Compare a token, trimmed of whitespace, with the configured one.

    With no configured token every token is invalid.
    """
    if not auth_token:
        return False
    return token.strip() == auth_token


def get_client_ip(headers: Mapping[str, str], remote_addr: str) -> str:
    """Return the client's address, preferring proxy headers."""
    forwarded_for = _header(headers, "X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0]
    real_ip = _header(headers, "X-Real-IP")
    if real_ip:
        return real_ip
    return remote_addr.split(":")[0]