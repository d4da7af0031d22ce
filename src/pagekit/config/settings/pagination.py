"""Config settings – PaginationSettings."""
from __future__ import annotations

import dataclasses
from typing import ClassVar

from pagekit.config.settings.base import Settings
from pagekit.config.validation import InvalidSettingValueError


@dataclasses.dataclass
class PaginationSettings(Settings):
    """Process-wide pagination configuration, loaded once at startup.

    ``cursor_secret`` signs every cursor handed to clients and must be
    non-empty. ``previous_cursor_secrets`` keeps cursors issued under older
    secrets verifiable during a rotation.
    """

    _prefix: ClassVar[str] = "PAGEKIT"

    cursor_secret: str = dataclasses.field(repr=False)
    previous_cursor_secrets: list[str] = dataclasses.field(default_factory=list, repr=False)
    default_page_size: int = 20
    max_page_size: int = 100
    min_query_length: int = 1

    def _validate(self) -> None:
        if not self.cursor_secret or not self.cursor_secret.strip():
            raise InvalidSettingValueError("cursor_secret", "must be a non-empty string")
        if any(not s for s in self.previous_cursor_secrets):
            raise InvalidSettingValueError("previous_cursor_secrets", "must not contain empty secrets")
        if self.default_page_size < 1:
            raise InvalidSettingValueError("default_page_size", "must be >= 1")
        if self.max_page_size < 0:
            raise InvalidSettingValueError("max_page_size", "must be >= 0 (0 disables the cap)")
        if self.min_query_length < 0:
            raise InvalidSettingValueError("min_query_length", "must be >= 0")


__all__ = ["PaginationSettings"]
