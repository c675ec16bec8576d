import logging
from dataclasses import replace
from typing import Any, AsyncIterator, Sequence

from tablekv.core.errors import (
    AlreadyExists,
    ConstraintViolation,
    InvalidArgument,
    InvalidResult,
    NotFound,
    PartialNotFound,
)
from tablekv.core.helpers.utils import Respirator, chunked
from tablekv.core.models.item import Item, KeyRange
from tablekv.core.models.options import (
    DeleteOptions,
    GetManyOptions,
    GetOptions,
    KeySelector,
    PutOptions,
)
from tablekv.core.ports.codec import Codec
from tablekv.core.ports.connection import Connection, QueryResult
from tablekv.core.storage.selectors import normalize_selector
from tablekv.core.storage.statements import Statements


class SQLStore:
    """
    Ordered key–value store on top of a two-column SQL table.

    Every operation awaits `initialize_database()`, normalizes and encodes
    its keys through the codec, issues bounded parameterized statements on
    the connection and decodes the rows it gets back. The store keeps no
    state between calls besides its collaborators.

    Batch reads are split into chunks of `batch_size` keys, processed one
    after the other. Long decode loops yield to the event loop every
    `respire_every` rows.
    """
    BATCH_SIZE = 500
    DEFAULT_LIMIT = 50000
    RESPIRE_EVERY = 250

    def __init__(
        self,
        connection: Connection,
        codec: Codec,
        batch_size: int = BATCH_SIZE,
        default_limit: int = DEFAULT_LIMIT,
        respire_every: int = RESPIRE_EVERY,
    ) -> None:
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        if default_limit <= 0:
            raise ValueError(f"default_limit must be positive, got {default_limit}")
        if respire_every < 0:
            raise ValueError(f"respire_every must be >= 0, got {respire_every}")

        self._connection = connection
        self._codec = codec
        self._batch_size = batch_size
        self._default_limit = default_limit
        self._respire_every = respire_every
        self._statements = Statements(connection.table)
        self._logger = logging.getLogger("core.storage.sqlstore")

    async def __aenter__(self) -> "SQLStore":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def get(self, key: Any, options: GetOptions | None = None) -> Any:
        options = options or GetOptions()
        key = self._codec.normalize_key(key)

        res = await self._query(self._statements.get, [self._codec.encode_key(key)])
        if not res.rows:
            if options.error_if_missing:
                raise NotFound(key=key)
            return None

        return self._codec.decode_value(res.rows[0]["value"])

    async def put(
        self,
        key: Any,
        value: Any,
        options: PutOptions | None = None
    ) -> None:
        options = options or PutOptions()
        key = self._codec.normalize_key(key)
        encoded_key = self._codec.encode_key(key)
        encoded_value = self._codec.encode_value(value)

        if options.error_if_exists:
            try:
                await self._query(
                    self._statements.insert, [encoded_key, encoded_value]
                )
            except ConstraintViolation as ex:
                raise AlreadyExists(key) from ex
        elif options.create_if_missing:
            await self._query(self._statements.upsert, [encoded_key, encoded_value])
        else:
            res = await self._query(
                self._statements.update, [encoded_value, encoded_key]
            )
            if not res.affected_rows:
                raise NotFound(key=key)

    async def delete(self, key: Any, options: DeleteOptions | None = None) -> bool:
        options = options or DeleteOptions()
        key = self._codec.normalize_key(key)

        res = await self._query(self._statements.delete, [self._codec.encode_key(key)])
        if not res.affected_rows and options.error_if_missing:
            raise NotFound(key=key)

        return bool(res.affected_rows)

    async def get_many(
        self,
        keys: Sequence[Any],
        options: GetManyOptions | None = None,
    ) -> list[Item]:
        if not isinstance(keys, (list, tuple)):
            raise InvalidArgument(
                f"invalid keys (should be a list or a tuple, got {type(keys).__name__})"
            )
        if not keys:
            return []

        options = options or GetManyOptions()
        keys = [self._codec.normalize_key(key) for key in keys]
        encoded_keys = [self._codec.encode_key(key) for key in keys]

        found: dict[bytes, Item] = {}
        respirator = Respirator(self._respire_every)
        chunks = list(chunked(encoded_keys, self._batch_size))

        for index, some_keys in enumerate(chunks, start=1):
            sql = self._statements.get_many(len(some_keys), options.return_values)
            res = await self._query(sql, list(some_keys))
            self._logger.debug(
                f"Chunk {index}/{len(chunks)}: {len(res.rows)} of "
                f"{len(some_keys)} keys found"
            )
            for row in res.rows:
                found[bytes(row["key"])] = self._decode_row(row, options.return_values)
                await respirator.tick()

        results = []
        missing = []
        for key, encoded_key in zip(keys, encoded_keys):
            item = found.get(encoded_key)
            if item is None:
                missing.append(key)
            else:
                results.append(replace(item))

        if missing and options.error_if_missing:
            raise PartialNotFound(missing)

        return results

    async def get_range(self, selector: KeySelector | None = None) -> list[Item]:
        key_range = self._normalize(selector)
        return [item async for item in self._scan(key_range)]

    async def get_count(self, selector: KeySelector | None = None) -> int:
        key_range = self._normalize(selector)

        res = await self._query(
            self._statements.count, [key_range.start, key_range.end]
        )
        if len(res.rows) != 1:
            raise InvalidResult(
                f"invalid result (expected one row, got {len(res.rows)})"
            )
        if "count" not in res.rows[0]:
            raise InvalidResult("invalid result (missing count column)")

        return int(res.rows[0]["count"])

    async def delete_range(self, selector: KeySelector | None = None) -> int:
        key_range = self._normalize(selector)

        res = await self._query(
            self._statements.delete_range, [key_range.start, key_range.end]
        )
        return res.affected_rows

    async def iterate(
        self,
        selector: KeySelector | None = None,
        batch_size: int | None = None,
    ) -> AsyncIterator[Item]:
        """
        Stream a range page by page instead of materializing it.

        Each page is one bounded range query of `batch_size` rows. The next
        page resumes strictly after the last key seen (strictly before it
        when reversed), so keys are neither skipped nor duplicated as long
        as the range is not modified concurrently. An explicit selector limit
        caps the total number of items. Without one the whole range is
        streamed and the default limit does not apply.
        """
        if batch_size is None:
            batch_size = self._batch_size
        if batch_size <= 0:
            raise InvalidArgument(f"invalid batch size: {batch_size!r}")

        key_range = self._normalize(selector)
        remaining = None
        if selector is not None and selector.limit is not None:
            remaining = key_range.limit

        while remaining is None or remaining > 0:
            limit = batch_size if remaining is None else min(batch_size, remaining)
            page = replace(key_range, limit=limit)
            last_key = None
            count = 0

            async for item in self._scan(page):
                yield item
                last_key = item.key
                count += 1

            if remaining is not None:
                remaining -= count
            if count < page.limit:
                break

            # pagination strict
            if key_range.reverse:
                key_range = replace(key_range, end=self._codec.key_before(last_key))
            else:
                key_range = replace(key_range, start=self._codec.key_after(last_key))

    async def close(self) -> None:
        await self._connection.close()

    async def _scan(self, key_range: KeyRange) -> AsyncIterator[Item]:
        sql = self._statements.get_range(
            key_range.reverse,
            key_range.limit,
            key_range.return_values,
        )
        res = await self._query(sql, [key_range.start, key_range.end])

        respirator = Respirator(self._respire_every)
        for row in res.rows:
            yield self._decode_row(row, key_range.return_values)
            await respirator.tick()

    def _normalize(self, selector: KeySelector | None) -> KeyRange:
        return normalize_selector(selector, self._codec, self._default_limit)

    def _decode_row(self, row: dict[str, Any], return_values: bool) -> Item:
        item = Item(key=self._codec.decode_key(bytes(row["key"])))
        if return_values:
            item.value = self._codec.decode_value(row["value"])
        return item

    async def _query(self, sql: str, params: list[Any]) -> QueryResult:
        await self._connection.initialize_database()
        self._logger.debug(f"Executing {sql!r} with {len(params)} parameter(s)")
        return await self._connection.query(sql, params)
