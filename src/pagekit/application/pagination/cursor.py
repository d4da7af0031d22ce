"""Application pagination – CursorToken and HMAC-SHA256 cursor signing.

Wire format::

    base64url( {"m": base64url(HMAC-SHA256(secret, p)), "p": p} )
    p = base64url( {"f": fingerprint, "k": [[field, value], ...], "v": 1} )

Both JSON documents are serialised canonically (sorted keys, compact
separators) and every base64 layer must be canonical, so altering any single
character of a cursor makes :meth:`HmacCursorSigner.verify` fail.
"""
from __future__ import annotations

import base64
import dataclasses
import hashlib
import hmac
import json
from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Protocol, runtime_checkable
from uuid import UUID

from pagekit.application.pagination.types import SortParam
from pagekit.config.settings import PaginationSettings
from pagekit.config.validation import InvalidSettingValueError
from pagekit.kernel.errors import CursorKeyUnavailableError, InvalidCursorError
from pagekit.observability.logging import get_logger

_log = get_logger(__name__)

_PAYLOAD_VERSION = 1


def _decimal(text: str) -> Decimal:
    try:
        return Decimal(text)
    except InvalidOperation as exc:
        raise ValueError("invalid decimal") from exc


_TAGS: dict[str, Any] = {
    "$dt": datetime.fromisoformat,
    "$date": date.fromisoformat,
    "$uuid": UUID,
    "$dec": _decimal,
}


@dataclasses.dataclass(frozen=True)
class CursorToken:
    """Last-seen composite sort key: ordered ``(field, value)`` pairs.

    ``fingerprint`` identifies the sort spec that produced the token; see
    :func:`sort_fingerprint`.
    """

    keys: tuple[tuple[str, Any], ...]
    fingerprint: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "keys", tuple((str(f), v) for f, v in self.keys))

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(f for f, _ in self.keys)

    @property
    def values(self) -> tuple[Any, ...]:
        return tuple(v for _, v in self.keys)


def sort_fingerprint(sorts: Iterable[SortParam]) -> str:
    """Short stable digest of a normalised sort spec (fields and directions)."""
    spec = ",".join(f"{s.field}:{s.direction.value}" for s in sorts)
    return hashlib.sha256(spec.encode()).hexdigest()[:16]


@runtime_checkable
class CursorSigner(Protocol):
    """Port: turn a :class:`CursorToken` into an opaque string and back."""

    def sign(self, token: CursorToken) -> str: ...

    def verify(self, cursor: str) -> CursorToken: ...


# ---------------------------------------------------------------------------
# Canonical encoding helpers
# ---------------------------------------------------------------------------


def _dumps(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True, allow_nan=False)


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii")


def _b64decode(data: str) -> bytes:
    raw = base64.urlsafe_b64decode(data.encode("ascii"))
    if _b64encode(raw) != data:
        raise ValueError("non-canonical base64")
    return raw


def _encode_value(field: str, value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            raise CursorKeyUnavailableError(field, f"Cursor key '{field}' is not a finite number")
        return value
    if isinstance(value, datetime):
        return {"$dt": value.isoformat()}
    if isinstance(value, date):
        return {"$date": value.isoformat()}
    if isinstance(value, UUID):
        return {"$uuid": str(value)}
    if isinstance(value, Decimal):
        return {"$dec": str(value)}
    raise CursorKeyUnavailableError(
        field, f"Cursor key '{field}' has unsupported type {type(value).__name__}"
    )


def _decode_value(raw: Any) -> Any:
    if raw is None or isinstance(raw, (bool, int, float, str)):
        return raw
    if isinstance(raw, dict) and len(raw) == 1:
        ((tag, text),) = raw.items()
        if tag in _TAGS and isinstance(text, str):
            return _TAGS[tag](text)
    raise ValueError("unsupported cursor value")


def encode_token(token: CursorToken) -> str:
    """Canonical payload string ``p`` for *token*."""
    document = {
        "f": token.fingerprint,
        "k": [[field, _encode_value(field, value)] for field, value in token.keys],
        "v": _PAYLOAD_VERSION,
    }
    return _b64encode(_dumps(document).encode("utf-8"))


def decode_token(payload: str) -> CursorToken:
    """Parse and shape-check a payload produced by :func:`encode_token`.

    Raises ``ValueError`` (or a subclass) on any structural problem.
    """
    document = json.loads(_b64decode(payload))
    if not isinstance(document, dict) or set(document) != {"f", "k", "v"}:
        raise ValueError("unexpected payload keys")
    if document["v"] != _PAYLOAD_VERSION:
        raise ValueError("unsupported payload version")
    fingerprint = document["f"]
    if fingerprint is not None and not isinstance(fingerprint, str):
        raise ValueError("fingerprint must be a string")
    entries = document["k"]
    if not isinstance(entries, list) or not entries:
        raise ValueError("cursor keys must be a non-empty list")
    keys: list[tuple[str, Any]] = []
    for entry in entries:
        if not isinstance(entry, list) or len(entry) != 2 or not isinstance(entry[0], str):
            raise ValueError("cursor key entries must be [field, value] pairs")
        keys.append((entry[0], _decode_value(entry[1])))
    return CursorToken(keys=tuple(keys), fingerprint=fingerprint)


# ---------------------------------------------------------------------------
# Signers
# ---------------------------------------------------------------------------


class HmacCursorSigner:
    """Sign and verify cursors with HMAC-SHA256 under a process-wide secret."""

    def __init__(self, secret: str | bytes) -> None:
        key = secret.encode() if isinstance(secret, str) else bytes(secret)
        if not key.strip():
            raise InvalidSettingValueError("cursor_secret", "must be a non-empty string")
        self._key = key

    def __repr__(self) -> str:
        return f"{type(self).__name__}(secret=***)"

    def _mac(self, payload: str) -> str:
        return _b64encode(hmac.new(self._key, payload.encode("utf-8"), hashlib.sha256).digest())

    def sign(self, token: CursorToken) -> str:
        if not token.keys:
            raise ValueError("cannot sign a cursor without keys")
        payload = encode_token(token)
        wrapper = _dumps({"m": self._mac(payload), "p": payload})
        return _b64encode(wrapper.encode("ascii"))

    def verify(self, cursor: str) -> CursorToken:
        if not isinstance(cursor, str) or not cursor:
            raise InvalidCursorError("Cursor must be a non-empty string")
        try:
            text = _b64decode(cursor).decode("ascii")
            wrapper = json.loads(text)
            if (
                not isinstance(wrapper, dict)
                or set(wrapper) != {"m", "p"}
                or not all(isinstance(v, str) for v in wrapper.values())
                or _dumps(wrapper) != text
            ):
                raise ValueError("unexpected cursor envelope")
        except ValueError as exc:
            _log.debug("cursor.rejected", reason="malformed")
            raise InvalidCursorError("Cursor could not be decoded", reason="malformed", cause=exc) from exc

        if not hmac.compare_digest(self._mac(wrapper["p"]).encode(), wrapper["m"].encode()):
            _log.debug("cursor.rejected", reason="signature_mismatch")
            raise InvalidCursorError("Cursor signature mismatch", reason="signature_mismatch")

        try:
            return decode_token(wrapper["p"])
        except ValueError as exc:
            _log.debug("cursor.rejected", reason="invalid_payload")
            raise InvalidCursorError("Cursor payload is invalid", reason="invalid_payload", cause=exc) from exc


class RotatingCursorSigner:
    """Sign with the current secret epoch; accept cursors from any listed epoch."""

    def __init__(self, current: CursorSigner, *previous: CursorSigner) -> None:
        self._current = current
        self._all = (current, *previous)

    def sign(self, token: CursorToken) -> str:
        return self._current.sign(token)

    def verify(self, cursor: str) -> CursorToken:
        error: InvalidCursorError | None = None
        for signer in self._all:
            try:
                return signer.verify(cursor)
            except InvalidCursorError as exc:
                if exc.reason != "signature_mismatch":
                    raise
                error = exc
        raise error  # type: ignore[misc]


def build_cursor_signer(settings: PaginationSettings) -> CursorSigner:
    """Construct the process-wide signer from loaded settings."""
    current = HmacCursorSigner(settings.cursor_secret)
    if not settings.previous_cursor_secrets:
        return current
    return RotatingCursorSigner(current, *(HmacCursorSigner(s) for s in settings.previous_cursor_secrets))


__all__ = [
    "CursorSigner",
    "CursorToken",
    "HmacCursorSigner",
    "RotatingCursorSigner",
    "build_cursor_signer",
    "decode_token",
    "encode_token",
    "sort_fingerprint",
]
