"""Inclusive integer ranges parsed from strings such as ``5-10``."""

from __future__ import annotations

import re
from dataclasses import dataclass

_INT = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class Range:
    """An inclusive range of integers."""

    min: int = 0
    max: int = 0

    def __str__(self) -> str:
        if self.min == self.max == 0:
            return ""
        if self.min == self.max:
            return str(self.min)
        return f"{self.min}-{self.max}"


def _atoi(text: str, what: str) -> int:
    if not _INT.fullmatch(text):
        raise ValueError(f"unable to parse {what}: invalid syntax {text!r}")
    return int(text)


def range_from_string(text: str) -> Range:
    """Parse a single value like ``5`` or a span like ``5-10``."""
    if "-" not in text:
        value = _atoi(text, "range")
        return Range(value, value)

    parts = text.split("-")
    if len(parts) != 2:
        raise ValueError("unexpected format for range")

    low = _atoi(parts[0], "range min")
    high = _atoi(parts[1], "range max")
    if low > high:
        raise ValueError("invalid range. min is not lower than max")
    return Range(low, high)