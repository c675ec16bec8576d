import os
from pathlib import Path

from tablekv.core.errors import ConfigurationError

CONFIG_ENV = "TABLEKVCONFIG"
CONFIG_FILENAME = "tablekv.yaml"


def get_configfile(path: str | Path | None = None) -> Path:
    # Priority: argument > ENV > default file in current working directory
    raw = path or os.getenv(CONFIG_ENV)

    if raw is None:
        file = Path.cwd() / CONFIG_FILENAME
    else:
        file = Path(raw)

    if not file.is_file():
        raise ConfigurationError(
            f"[config] Configuration file not found: '{file}'.\n"
            f"  - Pass the file path explicitly\n"
            f"  - Or set the {CONFIG_ENV} environment variable\n"
            f"  - Or place a '{CONFIG_FILENAME}' file in the current working directory."
        )

    return file
