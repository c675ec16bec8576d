from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class GetOptions:
    error_if_missing: bool = True
    """
    Raise NotFound when the key is absent. When False, a miss returns None.
    """


@dataclass(frozen=True)
class PutOptions:
    """
    Selects one of three write modes:

    - error_if_exists=True: insert only, AlreadyExists on collision
    - create_if_missing=True (default): insert or overwrite
    - both False: update an existing row only, NotFound otherwise

    error_if_exists takes precedence over create_if_missing.
    """
    create_if_missing: bool = True
    error_if_exists: bool = False


@dataclass(frozen=True)
class DeleteOptions:
    error_if_missing: bool = True
    """
    Raise NotFound when no row was removed.
    """


@dataclass(frozen=True)
class GetManyOptions:
    error_if_missing: bool = True
    """
    Raise PartialNotFound when at least one requested key is absent.
    """

    return_values: bool = True
    """
    When False, only keys are fetched and Item.value stays None.
    """


@dataclass(frozen=True)
class KeySelector:
    """
    Describes a key range plus the modifiers of a scan.

    At most one lower bound (start, start_after, start_before) and at most
    one upper bound (end, end_before, end_after) may be given. A prefix can
    be combined with explicit bounds, in which case the range is the
    intersection of both. Without any bound the whole key space is covered.
    """
    prefix: Any = None
    start: Any = None
    """Inclusive lower bound."""

    start_after: Any = None
    """Exclusive lower bound."""

    start_before: Any = None
    """Lower bound admitting the key itself."""

    end: Any = None
    """Inclusive upper bound."""

    end_before: Any = None
    """Exclusive upper bound."""

    end_after: Any = None
    """Upper bound admitting the key and every key nested under it."""

    reverse: bool = False
    """Return keys in descending order."""

    limit: int | None = None
    """
    Maximum number of items. None selects the store's default limit.
    """

    return_values: bool = True
    """When False, only keys are fetched."""
