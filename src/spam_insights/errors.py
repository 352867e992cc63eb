from __future__ import annotations

from typing import Any


class InvalidRecord(ValueError):
    """A classification record violates the basic record contract."""


class InvalidTimestamp(InvalidRecord):
    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"Invalid timestamp: {value!r}")
