"""Runtime settings: YAML file plus environment overrides."""

import os
from pathlib import Path
from typing import Optional

try:
    import yaml
except ModuleNotFoundError as e:
    raise ModuleNotFoundError(
        "PyYAML is required for settings loading. Run: poetry install"
    ) from e
from pydantic import BaseModel, Field

ENV_PREFIX = "OPPORTUNITY_DIRECTORY_"

# env suffix -> settings field
_ENV_FIELDS = {
    "DB": "db_path",
    "DB_TIMEOUT": "db_timeout",
    "AUTH_URL": "auth_url",
    "AUTH_API_KEY": "auth_api_key",
    "AUTH_TIMEOUT": "auth_timeout",
    "LOG_LEVEL": "log_level",
}


class Settings(BaseModel):
    """Where data lives, how identities are resolved, how loud logging is."""

    db_path: Path = Field(default=Path("opportunity_directory.db"))
    db_timeout: float = Field(default=5.0, gt=0, description="Seconds to wait on a locked database")

    auth_url: Optional[str] = Field(
        default=None,
        description="Hosted auth base URL; None uses the local session provider",
    )
    auth_api_key: Optional[str] = None
    auth_timeout: float = Field(default=10.0, gt=0)

    log_level: str = "WARNING"

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from YAML. Supports nested (database/auth/logging) or flat structure."""
        data = yaml.safe_load(Path(path).read_text()) or {}
        database = data.get("database", {}) or {}
        auth = data.get("auth", {}) or {}
        logging_cfg = data.get("logging", {}) or {}

        def _get(key: str, nested: dict, top: dict, nested_key: Optional[str] = None):
            return nested.get(nested_key or key, top.get(key))

        flat = {
            "db_path": _get("db_path", database, data, "path"),
            "db_timeout": _get("db_timeout", database, data, "timeout"),
            "auth_url": _get("auth_url", auth, data, "url"),
            "auth_api_key": _get("auth_api_key", auth, data, "api_key"),
            "auth_timeout": _get("auth_timeout", auth, data, "timeout"),
            "log_level": _get("log_level", logging_cfg, data, "level"),
        }
        return cls.model_validate({k: v for k, v in flat.items() if v is not None})

    @classmethod
    def load(cls, path: Optional[str | Path] = None, environ: Optional[dict] = None) -> "Settings":
        """YAML file (if given) first, then OPPORTUNITY_DIRECTORY_* environment variables on top."""
        settings = cls.from_yaml(path) if path else cls()
        env = os.environ if environ is None else environ
        overrides = {
            field: env[ENV_PREFIX + suffix]
            for suffix, field in _ENV_FIELDS.items()
            if env.get(ENV_PREFIX + suffix)
        }
        if not overrides:
            return settings
        return cls.model_validate({**settings.model_dump(), **overrides})
