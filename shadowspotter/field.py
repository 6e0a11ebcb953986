"""Path and header fields used when building requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum


class FieldType(IntEnum):
    """The kind of value a field holds."""

    STRING = 0
    UUID = 1
    INT = 2
    DATE = 3
    TIMESTAMP = 4
    FORMAT = 5


@dataclass
class Field:
    """A single named element of a path or header."""

    key: str = ""
    type: FieldType = FieldType.STRING

    def to_bytes(self) -> bytes:
        """Return the key as bytes; empty when the key is empty."""
        return self.key.encode("utf-8")


@dataclass
class HeaderField:
    """A header made of a key field and a value field."""

    key: Field = field(default_factory=Field)
    value: Field = field(default_factory=Field)


def string_to_fields(text: str) -> list[Field]:
    """Break a URL path such as ``/foo/bar`` into one field per segment."""
    return [Field(key=part) for part in text.split("/")]