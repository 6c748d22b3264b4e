# storefront/config.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional, Union

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from storefront.errors import ConfigError

DEFAULT_CONFIG_PATH = Path("config.properties")

# settings key -> Settings field
ENV_KEYS = {
    "DB_URL": "db_url",
    "DB_USER": "db_user",
    "DB_PASSWORD": "db_password",
    "DB_TIMEOUT": "db_timeout",
}
REQUIRED_KEYS = ("DB_URL", "DB_USER", "DB_PASSWORD")


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    db_url: str = Field(..., min_length=1, description="Connection endpoint, e.g. sqlite:///data/store.db")
    db_user: str = Field(..., min_length=1)
    db_password: str = Field(..., min_length=1, repr=False)
    db_timeout: float = Field(default=5.0, gt=0, description="Per-call backend timeout in seconds")


def _read_file(path: Path) -> Dict[str, Optional[str]]:
    try:
        with path.open("r", encoding="utf-8") as fh:
            return dict(dotenv_values(stream=fh))
    except OSError as e:
        raise ConfigError(f"Error loading database credentials: {e}") from e


def load_settings(path: Union[str, Path] = DEFAULT_CONFIG_PATH) -> Settings:
    """
    Read DB_URL / DB_USER / DB_PASSWORD (and optional DB_TIMEOUT) from a
    properties file. Environment variables of the same name win over the file.
    """
    raw = _read_file(Path(path))

    values: Dict[str, str] = {}
    for key, field in ENV_KEYS.items():
        v = os.getenv(key) or raw.get(key)
        if v is not None and v.strip() != "":
            values[field] = v.strip()

    missing = [k for k in REQUIRED_KEYS if ENV_KEYS[k] not in values]
    if missing:
        raise ConfigError(f"Missing setting(s) in {path}: {', '.join(missing)}")

    try:
        return Settings(**values)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid settings in {path}: {e}") from e
