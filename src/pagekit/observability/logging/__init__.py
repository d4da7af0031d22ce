"""Observability – structured logging helpers."""
from pagekit.observability.logging.filters import SensitiveFieldsFilter
from pagekit.observability.logging.factory import JsonLoggerFactory
from pagekit.observability.logging.processors import get_logger

__all__ = [
    "JsonLoggerFactory",
    "SensitiveFieldsFilter",
    "get_logger",
]
