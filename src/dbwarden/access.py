"""Access control: only local development requests reach the database tools.

Three gates run in a fixed order and the first failure wins:

    1. environment must be "development"
    2. MCP_DEV_ONLY_DB_ACCESS must be enabled
    3. the request must come from a loopback origin

Every denial is written to the audit log before the decision is returned.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from dbwarden import audit, messages
from dbwarden.config import GatewayConfig

_LOOPBACK_HOST_PREFIXES = ("localhost", "127.0.0.1", "[::1]")
_LOOPBACK_ADDRESSES = frozenset({"127.0.0.1", "::1", "localhost"})


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    error_message: str | None = None
    request_ip: str | None = None


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is None:
        for key, candidate in headers.items():
            if key.lower() == name:
                value = candidate
                break
    return value or None


def _forwarded_address(headers: Mapping[str, str]) -> str | None:
    forwarded_for = _header(headers, "x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    return _header(headers, "x-real-ip")


def is_localhost(headers: Mapping[str, str]) -> bool:
    """True when both the Host header and any forwarding headers are loopback."""
    host = _header(headers, "host") or ""
    is_local_host = host.startswith(_LOOPBACK_HOST_PREFIXES)

    if _header(headers, "x-forwarded-for") or _header(headers, "x-real-ip"):
        forwarded = _forwarded_address(headers)
        return is_local_host and forwarded in _LOOPBACK_ADDRESSES

    return is_local_host


def get_request_ip(headers: Mapping[str, str]) -> str:
    return _forwarded_address(headers) or "unknown"


def check_access(config: GatewayConfig, headers: Mapping[str, str]) -> AccessDecision:
    """Evaluate the gates for one tool invocation."""
    if not config.is_development:
        audit.log_access_denied("Not in development environment")
        return AccessDecision(allowed=False, error_message=messages.NOT_DEVELOPMENT)

    if not config.enabled:
        audit.log_access_denied("MCP_DEV_ONLY_DB_ACCESS is not enabled")
        return AccessDecision(allowed=False, error_message=messages.NOT_ENABLED)

    if not is_localhost(headers):
        ip = get_request_ip(headers)
        audit.log_access_denied("Non-localhost access attempt", ip)
        return AccessDecision(
            allowed=False, error_message=messages.NOT_LOCALHOST, request_ip=ip,
        )

    return AccessDecision(allowed=True)
