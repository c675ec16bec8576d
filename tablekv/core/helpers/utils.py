import asyncio
import logging
from typing import Iterator, Sequence, TypeVar

T = TypeVar("T")


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)-8s [%(name)s:%(funcName)s] : %(message)s',
    )


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    if size <= 0:
        raise ValueError(f"chunk size must be positive, got {size}")

    for i in range(0, len(items), size):
        yield items[i:i + size]


class Respirator:
    """
    Voluntarily yields to the event loop every `every` processed items so
    that a long decode loop does not starve other tasks.

    It never changes results or ordering. A period of 0 disables it.
    """

    def __init__(self, every: int) -> None:
        if every < 0:
            raise ValueError(f"respiration period must be >= 0, got {every}")
        self._every = every
        self._count = 0

    @property
    def count(self) -> int:
        return self._count

    async def tick(self) -> None:
        self._count += 1
        if self._every and self._count % self._every == 0:
            await asyncio.sleep(0)
