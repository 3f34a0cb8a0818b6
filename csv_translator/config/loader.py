from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Config loader.

Responsibilities:
- Load the optional YAML file (default `config/translate.yml`)
- Validate it against `config_schema.json` (unknown keys rejected)
- Apply defaults for missing keys
- Merge CLI overrides (see `with_overrides`)

The Google Cloud project id is resolved by the CLI: the GOOGLE_CLOUD_PROJECT
environment variable (optionally from `.env`) wins over `project_id` here.
"""

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/translate.yml")

DEFAULT_LOCATION = "global"
DEFAULT_TARGET_LANGUAGE = "en"
DEFAULT_OUTPUT_SUFFIX = "_translated"
DEFAULT_MAX_WORKERS = 1
DEFAULT_REQUEST_TIMEOUT = 30.0


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class TranslateConfig:
    project_id: str | None = None
    location: str = DEFAULT_LOCATION
    target_language: str = DEFAULT_TARGET_LANGUAGE
    exclude_columns: list[str] = field(default_factory=list)
    output_suffix: str = DEFAULT_OUTPUT_SUFFIX
    max_workers: int = DEFAULT_MAX_WORKERS
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def with_overrides(self, **overrides: Any) -> TranslateConfig:
        """Return a copy with every non-None override applied (CLI > YAML)."""
        values = {k: v for k, v in overrides.items() if v is not None}
        for k, v in values.items():
            if k == "max_workers" and v < 1:
                raise ConfigError(f"max_workers must be >= 1 (got {v})")
            if k == "request_timeout" and v <= 0:
                raise ConfigError(f"request_timeout must be > 0 (got {v})")
        return replace(self, **values)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: schema file missing / not valid JSON, or the config data
            violates the schema (wrong types, unknown keys, ...)
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path = DEFAULT_CONFIG_PATH, *, required: bool = False) -> TranslateConfig:
    """Load configuration from YAML.

    Args:
        path: YAML file path
        required: When False a missing file yields the defaults; when True
            (explicit ``--config``) a missing file is an error

    Raises:
        ConfigError: file missing (required), invalid YAML, schema violation
    """
    if not path.exists():
        if required:
            raise ConfigError(f"config file not found: {path}")
        return TranslateConfig()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)

    return TranslateConfig(
        project_id=data.get("project_id"),
        location=data.get("location", DEFAULT_LOCATION),
        target_language=data.get("target_language", DEFAULT_TARGET_LANGUAGE),
        exclude_columns=list(data.get("exclude_columns", [])),
        output_suffix=data.get("output_suffix", DEFAULT_OUTPUT_SUFFIX),
        max_workers=data.get("max_workers", DEFAULT_MAX_WORKERS),
        request_timeout=float(data.get("request_timeout", DEFAULT_REQUEST_TIMEOUT)),
    )
