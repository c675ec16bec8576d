import re

IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class Statements:
    """
    Builds the parameterized statements issued against the pairs table.

    Identifiers are backquoted, which both MySQL and SQLite accept. Only
    the table name is interpolated; every key and value goes through a
    placeholder. The LIMIT of a range scan is an int validated upstream.
    """

    def __init__(self, table: str = "pairs") -> None:
        if not IDENTIFIER.match(table):
            raise ValueError(f"invalid table name: {table!r}")
        self._table = f"`{table}`"

    @property
    def get(self) -> str:
        return f"SELECT `value` FROM {self._table} WHERE `key`=?"

    @property
    def insert(self) -> str:
        return f"INSERT INTO {self._table} (`key`, `value`) VALUES(?,?)"

    @property
    def upsert(self) -> str:
        return f"REPLACE INTO {self._table} (`key`, `value`) VALUES(?,?)"

    @property
    def update(self) -> str:
        return f"UPDATE {self._table} SET `value`=? WHERE `key`=?"

    @property
    def delete(self) -> str:
        return f"DELETE FROM {self._table} WHERE `key`=?"

    def get_many(self, count: int, return_values: bool) -> str:
        placeholders = ",".join("?" * count)
        return (
            f"SELECT {self._columns(return_values)} FROM {self._table} "
            f"WHERE `key` IN ({placeholders})"
        )

    def get_range(self, reverse: bool, limit: int, return_values: bool) -> str:
        order = " DESC" if reverse else ""
        return (
            f"SELECT {self._columns(return_values)} FROM {self._table} "
            f"WHERE `key` BETWEEN ? AND ? "
            f"ORDER BY `key`{order} LIMIT {int(limit)}"
        )

    @property
    def count(self) -> str:
        return (
            f"SELECT COUNT(*) AS `count` FROM {self._table} "
            f"WHERE `key` BETWEEN ? AND ?"
        )

    @property
    def delete_range(self) -> str:
        return f"DELETE FROM {self._table} WHERE `key` BETWEEN ? AND ?"

    @staticmethod
    def _columns(return_values: bool) -> str:
        return "`key`, `value`" if return_values else "`key`"
