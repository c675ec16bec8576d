from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource, YamlConfigSettingsSource

from tablekv.bootstrap.config.loader import get_configfile
from tablekv.core.storage.statements import IDENTIFIER


class DatabaseSettings(BaseModel):
    path: Annotated[
        str,
        Field(
            description=(
                "Path of the SQLite database file holding the pairs table.\n"
                "Use ':memory:' for a throwaway in-memory database."
            ),
            default="tablekv.db"
        )
    ]

    table: Annotated[
        str,
        Field(
            description=(
                "Name of the two-column table (`key`, `value`).\n"
                "Must be a plain SQL identifier."
            ),
            default="pairs"
        )
    ]

    @field_validator("table")
    @classmethod
    def validate_table(cls, v: str) -> str:
        if not IDENTIFIER.match(v):
            raise ValueError(f"'{v}' is not a valid SQL identifier")
        return v


class StoreSettings(BaseModel):
    batch_size: Annotated[
        int,
        Field(
            description=(
                "Maximum number of keys bound to a single `key IN (...)` query.\n"
                "Larger batch reads are split into chunks of this size.\n"
                "Also the default page size of streamed range iteration."
            ),
            default=500,
            gt=0
        )
    ]

    default_limit: Annotated[
        int,
        Field(
            description="Row cap applied to range scans that do not set a limit.",
            default=50000,
            gt=0
        )
    ]

    respire_every: Annotated[
        int,
        Field(
            description=(
                "Yield to the event loop every N decoded rows during batch and\n"
                "range reads. 0 disables the voluntary yield."
            ),
            default=250,
            ge=0
        )
    ]


class LoggingSettings(BaseModel):
    level: Annotated[
        Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        Field(
            description="Logging verbosity.",
            default="INFO"
        )
    ]


class TableKVConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TABLEKV_",
        env_nested_delimiter="__",
        extra="allow"
    )

    database: Annotated[
        DatabaseSettings,
        Field(
            description="Location of the database and name of the pairs table.",
            default_factory=DatabaseSettings
        )
    ]

    store: Annotated[
        StoreSettings,
        Field(
            description=(
                "Tuning of the key-value layer: batch size of multi-key reads,\n"
                "default range limit, and cooperative yield period."
            ),
            default_factory=StoreSettings
        )
    ]

    logging: Annotated[
        LoggingSettings,
        Field(
            description="Logging configuration.",
            default_factory=LoggingSettings
        )
    ]

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=get_configfile()),
        )
