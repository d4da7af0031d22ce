"""FastAPI adapter – FastAPIExceptionMapper."""
from __future__ import annotations

from typing import Any, Callable

from fastapi.responses import JSONResponse

from pagekit.kernel.errors import (
    ApplicationError,
    BaseError,
    DomainError,
    InfrastructureError,
    ValidationError,
)
from pagekit.observability.logging import get_logger

_log = get_logger(__name__)


class FastAPIExceptionMapper:
    """Register pagekit error → HTTP status-code mappings on a FastAPI app.

    Error body schema::

        {"code": "INVALID_CURSOR", "message": "...", "detail": {...}, "errors": [...]}

    Mappings
    --------
    ``ValidationError``     → 400  (``InvalidCursorError``, ``SortFieldNotAllowedError``)
    ``DomainError``         → 422
    ``InfrastructureError`` → 503  (``QueryFailedError``)
    ``ApplicationError``    → 500  (``CursorKeyUnavailableError``, ``ConfigError``)
    """

    def __init__(self) -> None:
        # ORDER MATTERS: more-specific subtypes first
        self._map: list[tuple[type[Exception], int]] = [
            (ValidationError, 400),
            (DomainError, 422),
            (InfrastructureError, 503),
            (ApplicationError, 500),
        ]

    def status_for(self, exc: BaseException) -> int:
        for exc_type, status in self._map:
            if isinstance(exc, exc_type):
                return status
        return 500

    def register(self, app: Any) -> None:
        """Register all error handlers on a ``FastAPI`` or ``Starlette`` app."""

        def make_handler(code: int) -> Callable[[Any, Any], Any]:
            def handler(request: Any, exc: Any) -> Any:  # noqa: ARG001
                if isinstance(exc, BaseError):
                    body = exc.to_dict()
                    body.pop("cause", None)
                else:
                    body = {"code": "error", "message": str(exc)}
                if code >= 500:
                    _log.error("http.error", status=code, code=body["code"])
                return JSONResponse(status_code=code, content=body)

            return handler

        for exc_type, status in self._map:
            app.add_exception_handler(exc_type, make_handler(status))


__all__ = ["FastAPIExceptionMapper"]
