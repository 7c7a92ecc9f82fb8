"""Errors raised by repository lookups."""

from __future__ import annotations


class RecordNotFoundError(LookupError):
    """A lookup that requires a row found none."""

    def __init__(self, model: str, key: object) -> None:
        super().__init__(f"{model} {key!r} not found")
        self.model = model
        self.key = key
