from typing import Any

from tablekv.core.errors import InvalidArgument
from tablekv.core.models.item import KeyRange
from tablekv.core.models.options import KeySelector
from tablekv.core.ports.codec import Codec

LOWER_BOUNDS = ("start", "start_after", "start_before")
UPPER_BOUNDS = ("end", "end_before", "end_after")


def normalize_selector(
    selector: KeySelector | None,
    codec: Codec,
    default_limit: int,
) -> KeyRange:
    """
    Translate a KeySelector into a closed interval of encoded keys.

    The backend only understands an inclusive BETWEEN, so exclusive bounds
    are turned into the nearest inclusive encoded bound by the codec:

        start_after=k   ->  start = codec.key_after(k)
        end_before=k    ->  end   = codec.key_before(k)
        end_after=k     ->  end   = codec.subtree_end(k)

    A prefix contributes its own (low, high) pair; explicit bounds narrow
    it further. Missing bounds default to the whole key space.

    An inverted interval is returned as is: it simply matches nothing.
    """
    if selector is None:
        selector = KeySelector()

    lower = _pick_bound(selector, LOWER_BOUNDS)
    upper = _pick_bound(selector, UPPER_BOUNDS)

    if selector.prefix is not None:
        prefix = _normalize(codec, selector.prefix, "prefix")
        start, end = codec.prefix_bounds(prefix)
    else:
        start, end = codec.min_key(), codec.max_key()

    if lower is not None:
        name, key = lower
        key = _normalize(codec, key, name)
        if name == "start_after":
            bound = codec.key_after(key)
        else:
            bound = codec.encode_key(key)
        start = max(start, bound)

    if upper is not None:
        name, key = upper
        key = _normalize(codec, key, name)
        if name == "end_before":
            bound = codec.key_before(key)
        elif name == "end_after":
            bound = codec.subtree_end(key)
        else:
            bound = codec.encode_key(key)
        end = min(end, bound)

    return KeyRange(
        start=start,
        end=end,
        reverse=bool(selector.reverse),
        limit=_check_limit(selector.limit, default_limit),
        return_values=bool(selector.return_values),
    )


def _pick_bound(
    selector: KeySelector,
    names: tuple[str, ...]
) -> tuple[str, Any] | None:
    given = [
        (name, getattr(selector, name))
        for name in names
        if getattr(selector, name) is not None
    ]
    if len(given) > 1:
        conflicting = ", ".join(name for name, _ in given)
        raise InvalidArgument(f"conflicting key selectors: {conflicting}")

    return given[0] if given else None


def _normalize(codec: Codec, key: Any, name: str) -> Any:
    try:
        return codec.normalize_key(key)
    except InvalidArgument as ex:
        raise InvalidArgument(f"invalid {name}: {ex}") from ex


def _check_limit(limit: Any, default_limit: int) -> int:
    if limit is None:
        return default_limit

    # bool is an int subclass
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
        raise InvalidArgument(f"invalid limit: {limit!r}")

    return limit
