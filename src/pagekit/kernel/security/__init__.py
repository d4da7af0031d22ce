"""Kernel security – sensitive field names shared by logging redaction."""
from pagekit.kernel.security.sensitive import DEFAULT_SENSITIVE_FIELDS

__all__ = ["DEFAULT_SENSITIVE_FIELDS"]
