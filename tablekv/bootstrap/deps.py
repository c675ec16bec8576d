import json
from functools import lru_cache

from pydantic import ValidationError

from tablekv.bootstrap.config.settings import TableKVConfig
from tablekv.core.errors import ConfigurationError
from tablekv.core.helpers.utils import setup_logging
from tablekv.core.ports.codec import Codec
from tablekv.core.ports.connection import Connection
from tablekv.core.storage.sqlstore import SQLStore
from tablekv.infra.ordered_codec import OrderedCodec
from tablekv.infra.sqlite.connection import SQLiteConnection


@lru_cache
def get_store() -> SQLStore:
    config = get_config()
    setup_logging(config.logging.level)

    return SQLStore(
        connection=get_connection(),
        codec=get_codec(),
        batch_size=config.store.batch_size,
        default_limit=config.store.default_limit,
        respire_every=config.store.respire_every,
    )


@lru_cache
def get_connection() -> Connection:
    config = get_config()
    return SQLiteConnection(
        path=config.database.path,
        table=config.database.table,
    )


@lru_cache
def get_codec() -> Codec:
    return OrderedCodec()


@lru_cache
def get_config() -> TableKVConfig:
    try:
        return TableKVConfig()
    except ValidationError as ex:
        msg = ["Configuration validation failed:"]
        errs = json.loads(ex.json())
        for err in errs:
            msg.append(f"  {'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}")
        raise ConfigurationError("\n".join(msg)) from ex
