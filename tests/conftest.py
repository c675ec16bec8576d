import pytest
import pytest_asyncio
from tests.fake.fake_connection import FakeConnection

from tablekv.core.storage.sqlstore import SQLStore
from tablekv.infra.ordered_codec import OrderedCodec
from tablekv.infra.sqlite.connection import SQLiteConnection


@pytest.fixture
def codec():
    return OrderedCodec()


@pytest.fixture
def connection():
    return FakeConnection()


@pytest.fixture
def store(connection, codec):
    return SQLStore(connection, codec)


@pytest_asyncio.fixture
async def sqlite_store(tmp_path, codec):
    connection = SQLiteConnection(str(tmp_path / "pairs.db"))
    store = SQLStore(connection, codec)
    try:
        yield store
    finally:
        await store.close()
