from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence


@dataclass
class QueryResult:
    """
    Outcome of a single SQL statement.
    """
    rows: list[dict[str, Any]] = field(default_factory=list)
    """
    Records returned by a SELECT, one mapping per row keyed by column name.
    Empty for mutations.
    """

    affected_rows: int = 0
    """
    Number of rows changed by an INSERT/UPDATE/DELETE/REPLACE.
    Meaningless for a SELECT.
    """

    def __len__(self) -> int:
        return len(self.rows)


class Connection(Protocol):
    """
    Minimal asynchronous interface to the relational backend holding the
    two-column `key`/`value` table.

    A Connection is reused sequentially by one store: statements issued by
    a single logical call never overlap. The interface does not prescribe
    pooling, isolation or transactional semantics beyond the atomicity of
    one statement.
    """

    @property
    def table(self) -> str:
        """
        Name of the table holding the pairs. Statements are built against
        this name.
        """

    async def initialize_database(self) -> None:
        """
        Make sure the database and the pairs table exist.

        Must be idempotent: the store awaits it before every statement, so
        implementations are expected to do the actual work once and return
        immediately afterwards.
        """

    async def query(self, sql: str, params: Sequence[Any]) -> QueryResult:
        """
        Execute one parameterized statement and return its rows or its
        affected-row count.

        A violation of the table's uniqueness constraint must surface as
        `ConstraintViolation`. Any other backend failure propagates as the
        driver raised it.
        """

    async def close(self) -> None:
        """
        Release the underlying database handle. After close(), the
        connection must not be used again.
        """
