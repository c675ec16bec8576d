import pytest
import yaml

from tablekv.bootstrap import deps
from tablekv.bootstrap.config.loader import CONFIG_ENV, get_configfile
from tablekv.bootstrap.config.settings import TableKVConfig
from tablekv.core.errors import ConfigurationError
from tablekv.core.storage.sqlstore import SQLStore


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    def write(data: dict):
        file = tmp_path / "tablekv.yaml"
        file.write_text(yaml.dump(data))
        monkeypatch.setenv(CONFIG_ENV, str(file))
        return file

    return write


@pytest.fixture(autouse=True)
def clear_deps_cache():
    yield
    deps.get_store.cache_clear()
    deps.get_connection.cache_clear()
    deps.get_codec.cache_clear()
    deps.get_config.cache_clear()


@pytest.mark.ut
def test_configfile_resolution(tmp_path, monkeypatch):
    monkeypatch.delenv(CONFIG_ENV, raising=False)
    monkeypatch.chdir(tmp_path)

    with pytest.raises(ConfigurationError, match="not found"):
        get_configfile()

    default = tmp_path / "tablekv.yaml"
    default.write_text("{}")
    assert get_configfile() == default

    other = tmp_path / "other.yaml"
    other.write_text("{}")
    monkeypatch.setenv(CONFIG_ENV, str(other))
    assert get_configfile() == other

    explicit = tmp_path / "explicit.yaml"
    explicit.write_text("{}")
    assert get_configfile(explicit) == explicit


@pytest.mark.ut
def test_defaults(config_file):
    config_file({})

    config = TableKVConfig()

    assert config.database.path == "tablekv.db"
    assert config.database.table == "pairs"
    assert config.store.batch_size == 500
    assert config.store.default_limit == 50000
    assert config.store.respire_every == 250
    assert config.logging.level == "INFO"


@pytest.mark.ut
def test_yaml_values(config_file, tmp_path):
    config_file({
        "database": {"path": str(tmp_path / "kv.db"), "table": "items"},
        "store": {"batch_size": 100, "default_limit": 10, "respire_every": 0},
        "logging": {"level": "DEBUG"},
    })

    config = TableKVConfig()

    assert config.database.table == "items"
    assert config.store.batch_size == 100
    assert config.store.respire_every == 0
    assert config.logging.level == "DEBUG"


@pytest.mark.ut
def test_environment_overrides_yaml(config_file, monkeypatch):
    config_file({"store": {"batch_size": 100}})
    monkeypatch.setenv("TABLEKV_STORE__BATCH_SIZE", "42")

    assert TableKVConfig().store.batch_size == 42


@pytest.mark.ut
@pytest.mark.parametrize(
    "data",
    [
        {"database": {"table": "bad name"}},
        {"store": {"batch_size": 0}},
        {"store": {"respire_every": -1}},
        {"logging": {"level": "VERBOSE"}},
    ],
)
def test_invalid_config_is_reported(config_file, data):
    config_file(data)

    with pytest.raises(ConfigurationError, match="Configuration validation failed"):
        deps.get_config()


@pytest.mark.ut
def test_get_store(config_file, tmp_path):
    config_file({
        "database": {"path": str(tmp_path / "kv.db"), "table": "items"},
        "store": {"batch_size": 10},
    })

    store = deps.get_store()

    assert isinstance(store, SQLStore)
    assert deps.get_connection().table == "items"
    assert deps.get_store() is store
