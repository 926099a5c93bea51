"""YAML configuration loader with environment variable overrides.

Configuration is layered (later layers win):

  1. config/config.yaml  -- static defaults checked into the repo
  2. .env file           -- local developer overrides (not committed)
  3. Environment vars    -- set at deploy time

``load_config()`` reads the YAML file, then deep-merges the values
pydantic-settings resolved from ``.env`` and the environment on top:

    base      = {"ingestion": {"duplicate_threshold": 0.95, "max_records": 1}}
    overrides = {"ingestion": {"duplicate_threshold": 0.98}}
    result    = {"ingestion": {"duplicate_threshold": 0.98, "max_records": 1}}
"""

from pathlib import Path

import yaml

from src.config.settings import Settings


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.  A missing file is treated
            as an empty config.
        settings: Pre-built settings; a fresh ``Settings()`` is read otherwise.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    s = settings or Settings()
    env_overrides = {
        "app": {
            "host": s.app_host,
            "port": s.app_port,
            "env": s.app_env,
        },
        "llm": {
            "available_providers": s.get_available_llm_providers(),
            "extraction_temperature": s.extraction_temperature,
            "summary_temperature": s.summary_temperature,
        },
        "record_store": {
            "persist_dir": s.chromadb_persist_dir,
            "collection": s.chromadb_collection,
            "host": s.chromadb_host,
            "port": s.chromadb_port,
        },
        "ingestion": {
            "duplicate_threshold": s.duplicate_threshold,
            "summary_mode": s.summary_mode,
            "max_upload_bytes": s.max_upload_bytes,
        },
        "logging": {
            "level": s.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
