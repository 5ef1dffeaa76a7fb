# Copyright (c) 2025 Trae AI. All rights reserved.

import os
import yaml
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, field_validator


class ConfigError(Exception):
    """
    Raised when the configuration cannot be used to serve requests.
    """


ENV_PREFIX = "BONARR_"


class Config(BaseModel):
    library_root: Path
    torrent_filter_path: Optional[str] = None
    tmdb_api_key: Optional[str] = None
    tmdb_read_access_token: Optional[str] = None  # v4 token, sent as a Bearer header
    transmission_url: str = "http://localhost:9091/transmission/rpc"
    transmission_username: Optional[str] = None
    transmission_password: Optional[str] = None
    server_port: int = 5000
    server_host: str = "0.0.0.0"
    verbose: bool = False

    @field_validator("library_root", mode="before")
    @classmethod
    def _require_library_root(cls, value):
        if value is None or str(value).strip() == "":
            raise ValueError("library_root must be set")
        return value

    @classmethod
    def load(cls, path: str = "config.yaml", environ: Optional[dict] = None) -> "Config":
        """
        Loads config.yaml (if present) and overlays BONARR_* environment variables.
        Fails fast with ConfigError when the library root is missing.
        """
        data = {}
        config_file = Path(path)
        if config_file.exists():
            with open(config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

        environ = os.environ if environ is None else environ
        for field_name in cls.model_fields:
            env_value = environ.get(ENV_PREFIX + field_name.upper())
            if env_value is not None:
                data[field_name] = env_value

        if not data.get("library_root"):
            raise ConfigError(
                f"Library root is not configured. Set library_root in {path} "
                f"or the {ENV_PREFIX}LIBRARY_ROOT environment variable."
            )

        try:
            return cls(**data)
        except ValueError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e
