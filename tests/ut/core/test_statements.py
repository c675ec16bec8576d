import pytest

from tablekv.core.storage.statements import Statements


@pytest.mark.ut
def test_statements_use_table_name():
    statements = Statements("kv_items")

    assert statements.get == "SELECT `value` FROM `kv_items` WHERE `key`=?"
    assert statements.insert == "INSERT INTO `kv_items` (`key`, `value`) VALUES(?,?)"
    assert statements.upsert == "REPLACE INTO `kv_items` (`key`, `value`) VALUES(?,?)"
    assert statements.update == "UPDATE `kv_items` SET `value`=? WHERE `key`=?"
    assert statements.delete == "DELETE FROM `kv_items` WHERE `key`=?"


@pytest.mark.ut
def test_get_many_placeholders():
    statements = Statements()

    assert statements.get_many(3, return_values=True) == (
        "SELECT `key`, `value` FROM `pairs` WHERE `key` IN (?,?,?)"
    )
    assert statements.get_many(1, return_values=False) == (
        "SELECT `key` FROM `pairs` WHERE `key` IN (?)"
    )


@pytest.mark.ut
def test_range_statements():
    statements = Statements()

    assert statements.get_range(reverse=False, limit=10, return_values=True) == (
        "SELECT `key`, `value` FROM `pairs` WHERE `key` BETWEEN ? AND ? "
        "ORDER BY `key` LIMIT 10"
    )
    assert statements.get_range(reverse=True, limit=0, return_values=False) == (
        "SELECT `key` FROM `pairs` WHERE `key` BETWEEN ? AND ? "
        "ORDER BY `key` DESC LIMIT 0"
    )
    assert statements.count == (
        "SELECT COUNT(*) AS `count` FROM `pairs` WHERE `key` BETWEEN ? AND ?"
    )
    assert statements.delete_range == "DELETE FROM `pairs` WHERE `key` BETWEEN ? AND ?"


@pytest.mark.ut
@pytest.mark.parametrize("table", ["", "1pairs", "pairs; DROP TABLE x", "a-b", "`pairs`"])
def test_invalid_table_name(table):
    with pytest.raises(ValueError):
        Statements(table)
