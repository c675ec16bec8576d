from dataclasses import dataclass
from typing import Any


@dataclass
class Item:
    """A decoded pair returned by batch and range reads."""
    key: Any
    value: Any = None


@dataclass(frozen=True)
class KeyRange:
    """
    Canonical closed interval produced by selector normalization.
    Both bounds are encoded keys, ready to be bound to a BETWEEN clause.
    """
    start: bytes
    end: bytes
    reverse: bool
    limit: int
    return_values: bool
