"""
Settings for sprintrack.

Settings come from an optional YAML file and are then overridden by
environment variables. FIREBASE_DATABASEURL keeps the name used by the
original web deployment. FIREBASE_AUTH holds a database secret or an ID
token for the REST `auth` parameter; a web API key is not accepted there,
so FIREBASE_APIKEY is not read.
"""
import os
from pathlib import Path
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError, model_validator

from sprintrack.io import load_yaml_file
from sprintrack.logs import get_logger
from sprintrack.recovery import FatalError

log = get_logger("config")

USER_DATA_DIR = Path.home() / ".local" / "share" / "sprintrack"
DEFAULT_CONFIG_FILE = USER_DATA_DIR / "config.yml"
DEFAULT_DATA_FILE = USER_DATA_DIR / "data" / "store.yml"

ENV_OVERRIDES = {
    "SPRINTRACK_BACKEND": ("backend",),
    "SPRINTRACK_DATA_FILE": ("data_file",),
    "FIREBASE_DATABASEURL": ("firebase", "database_url"),
    "FIREBASE_AUTH": ("firebase", "auth_token"),
}

class FirebaseSettings(BaseModel):
    database_url: Optional[str] = Field(default=None, description="Realtime Database URL, e.g. https://<db>.firebaseio.com")
    auth_token: Optional[str] = Field(default=None, description="Database secret or ID token sent as the auth query parameter")
    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")

class Settings(BaseModel):
    backend: Literal["memory", "file", "firebase"] = Field(default="file", description="Which reference store to use")
    data_file: Path = Field(default=DEFAULT_DATA_FILE, description="Snapshot file for the file backend")
    memory_latency: float = Field(default=0.0, ge=0, description="Simulated round trip for the memory backend")
    firebase: FirebaseSettings = Field(default_factory=FirebaseSettings)

    @model_validator(mode='after')
    def validate_backend(self):
        if self.backend == "firebase" and not self.firebase.database_url:
            raise ValueError("the firebase backend needs firebase.database_url")
        return self

def load_settings(config_file: Union[Path, str, None] = None) -> Settings:
    """
    Load settings from a YAML file and the environment.

    Args:
        config_file: Explicit config file. When omitted the default file is
            used if it exists.

    Returns:
        The validated Settings.

    Raises:
        FatalError: the configuration is invalid.
    """
    path = Path(config_file) if config_file else DEFAULT_CONFIG_FILE
    raw = load_yaml_file(path)
    if raw is None:
        if config_file:
            raise FatalError(f"Config file not found: {path}")
        raw = {}
    else:
        log.info(f"Loaded settings from {path}")

    for env_name, keys in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if not value:
            continue
        target = raw
        for key in keys[:-1]:
            # An empty section such as `firebase:` loads as None
            if not isinstance(target.get(key), dict):
                target[key] = {}
            target = target[key]
        target[keys[-1]] = value
        log.debug(f"{env_name} overrides {'.'.join(keys)}")

    try:
        return Settings.model_validate(raw)
    except ValidationError as e:
        log.error(f"Invalid configuration: {e}")
        raise FatalError(f"Invalid configuration: {e}") from e
