"""Kernel security – default sensitive field names."""
from __future__ import annotations

# Cursor values are redacted alongside secrets.
DEFAULT_SENSITIVE_FIELDS: frozenset[str] = frozenset({
    "password", "secret", "token", "api_key", "authorization",
    "cursor_secret", "previous_cursor_secrets", "cursor", "after", "before",
    "next_cursor", "previous_cursor",
})

__all__ = ["DEFAULT_SENSITIVE_FIELDS"]
