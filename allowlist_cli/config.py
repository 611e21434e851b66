"""
Module 06 - CLI Configuration

Configuration loading for the allow-list CLI.
Supports configuration files (JSON or YAML) and environment variables.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.config.runtime import RuntimeConfig
from core.schemas.errors import ConfigurationException


DEFAULT_CONFIG_PATHS = (
    Path("allowlist.json"),
    Path(".allowlist.json"),
    Path.home() / ".config" / "allowlist" / "config.json",
)


def load_config_from_file(path: Path) -> RuntimeConfig:
    """Load configuration from a JSON or YAML file."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    if path.suffix.lower() in (".yaml", ".yml"):
        return RuntimeConfig.from_yaml(path)

    with open(path, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationException(f"Invalid JSON in {path}: {e.msg}") from e

    return RuntimeConfig.from_dict(data)


def load_config(config_path: Path | None = None) -> RuntimeConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings.

    Args:
        config_path: Optional path to config file

    Returns:
        Merged configuration
    """
    config = RuntimeConfig()

    if config_path is not None:
        config = load_config_from_file(config_path)
    else:
        for default_path in DEFAULT_CONFIG_PATHS:
            if default_path.exists():
                config = load_config_from_file(default_path)
                break

    return config.with_env_overrides()


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return """{
  "storage": {
    "tree_path": "Target/tree.json",
    "proof_path": "Target/proof.json",
    "allowlist_path": null
  },
  "tree": {
    "leaf_encoding": ["address"]
  },
  "signing": {
    "name": "MedicineSupplyChain",
    "version": "1.0",
    "chain_id": null,
    "verifying_contract": null
  },
  "logging": {
    "level": "INFO",
    "file": null
  },
  "api": {
    "host": "127.0.0.1",
    "port": 8000
  }
}
"""
