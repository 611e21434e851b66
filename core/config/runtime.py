"""
Runtime Configuration

Central configuration for tree storage, leaf encoding, transfer signing
and service setup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Optional
from pathlib import Path

from dotenv import load_dotenv

from core.crypto.signatures import (
    DEFAULT_DOMAIN_NAME,
    DEFAULT_DOMAIN_VERSION,
    SigningDomain,
)
from core.schemas.errors import ConfigurationException, SignatureException

load_dotenv()


@dataclass
class StorageConfig:
    """Where the builder writes and the proof service reads artifacts."""
    tree_path: str = "Target/tree.json"
    proof_path: str = "Target/proof.json"
    allowlist_path: Optional[str] = None


@dataclass
class TreeConfig:
    """Leaf encoding used when building a tree."""
    leaf_encoding: list[str] = field(default_factory=lambda: ["address"])


@dataclass
class SigningDomainConfig:
    """
    EIP-712 domain and signer for transfer signatures.

    chain_id and verifying_contract have no defaults; signing fails with a
    ConfigurationException until both are set.
    """
    name: str = DEFAULT_DOMAIN_NAME
    version: str = DEFAULT_DOMAIN_VERSION
    chain_id: Optional[int] = None
    verifying_contract: Optional[str] = None
    private_key: Optional[str] = None

    def require_domain(self) -> SigningDomain:
        """Build the signing domain, raising if it is incomplete."""
        if self.chain_id is None:
            raise ConfigurationException(
                "Signing requires a chain id (ALLOWLIST_CHAIN_ID)",
                setting="signing.chain_id",
            )
        if not self.verifying_contract:
            raise ConfigurationException(
                "Signing requires a verifying contract (ALLOWLIST_VERIFYING_CONTRACT)",
                setting="signing.verifying_contract",
            )
        try:
            return SigningDomain(
                name=self.name,
                version=self.version,
                chain_id=self.chain_id,
                verifying_contract=self.verifying_contract,
            )
        except SignatureException as e:
            raise ConfigurationException(e.message, setting="signing") from e

    def require_private_key(self) -> str:
        if not self.private_key:
            raise ConfigurationException(
                "Signing requires a private key (ALLOWLIST_SIGNER_PRIVATE_KEY)",
                setting="signing.private_key",
            )
        return self.private_key


@dataclass
class LoggingConfig:
    """Logging level and optional log file."""
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class ApiConfig:
    """Configuration for the proof HTTP service."""
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw, 0)
    except ValueError:
        raise ConfigurationException(
            f"{name} must be an integer, got {raw!r}",
            setting=name,
        ) from None


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration for allow-list commitments.

    Can be loaded from:
    - Environment variables
    - YAML or JSON file
    - Programmatic construction
    """
    storage: StorageConfig = field(default_factory=StorageConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    signing: SigningDomainConfig = field(default_factory=SigningDomainConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - ALLOWLIST_TREE_PATH: Tree dump path
        - ALLOWLIST_PROOF_PATH: Proof output path
        - ALLOWLIST_LEAF_ENCODING: Comma-separated ABI types (e.g. "address,uint256")
        - ALLOWLIST_DOMAIN_NAME / ALLOWLIST_DOMAIN_VERSION: EIP-712 name/version
        - ALLOWLIST_CHAIN_ID: EIP-712 chain id
        - ALLOWLIST_VERIFYING_CONTRACT: EIP-712 verifying contract
        - ALLOWLIST_SIGNER_PRIVATE_KEY: Transfer signer key
        - ALLOWLIST_LOG_LEVEL / ALLOWLIST_LOG_FILE: Logging
        - ALLOWLIST_API_HOST / ALLOWLIST_API_PORT: HTTP service bind address
        """
        overrides: dict[str, Any] = {}

        # Storage
        if os.getenv("ALLOWLIST_TREE_PATH"):
            overrides.setdefault("storage", {})["tree_path"] = os.getenv("ALLOWLIST_TREE_PATH")
        if os.getenv("ALLOWLIST_PROOF_PATH"):
            overrides.setdefault("storage", {})["proof_path"] = os.getenv("ALLOWLIST_PROOF_PATH")

        # Tree
        if os.getenv("ALLOWLIST_LEAF_ENCODING"):
            overrides.setdefault("tree", {})["leaf_encoding"] = [
                t.strip() for t in os.getenv("ALLOWLIST_LEAF_ENCODING", "").split(",") if t.strip()
            ]

        # Signing
        if os.getenv("ALLOWLIST_DOMAIN_NAME"):
            overrides.setdefault("signing", {})["name"] = os.getenv("ALLOWLIST_DOMAIN_NAME")
        if os.getenv("ALLOWLIST_DOMAIN_VERSION"):
            overrides.setdefault("signing", {})["version"] = os.getenv("ALLOWLIST_DOMAIN_VERSION")
        if os.getenv("ALLOWLIST_CHAIN_ID"):
            overrides.setdefault("signing", {})["chain_id"] = _parse_int(
                "ALLOWLIST_CHAIN_ID", os.getenv("ALLOWLIST_CHAIN_ID", "")
            )
        if os.getenv("ALLOWLIST_VERIFYING_CONTRACT"):
            overrides.setdefault("signing", {})["verifying_contract"] = os.getenv(
                "ALLOWLIST_VERIFYING_CONTRACT"
            )
        if os.getenv("ALLOWLIST_SIGNER_PRIVATE_KEY"):
            overrides.setdefault("signing", {})["private_key"] = os.getenv(
                "ALLOWLIST_SIGNER_PRIVATE_KEY"
            )

        # Logging
        if os.getenv("ALLOWLIST_LOG_LEVEL"):
            overrides.setdefault("logging", {})["level"] = os.getenv("ALLOWLIST_LOG_LEVEL", "").upper()
        if os.getenv("ALLOWLIST_LOG_FILE"):
            overrides.setdefault("logging", {})["file"] = os.getenv("ALLOWLIST_LOG_FILE")

        # API
        if os.getenv("ALLOWLIST_API_HOST"):
            overrides.setdefault("api", {})["host"] = os.getenv("ALLOWLIST_API_HOST")
        if os.getenv("ALLOWLIST_API_PORT"):
            overrides.setdefault("api", {})["port"] = _parse_int(
                "ALLOWLIST_API_PORT", os.getenv("ALLOWLIST_API_PORT", "")
            )

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        try:
            storage = StorageConfig(**data.get("storage", {}))
            tree = TreeConfig(**data.get("tree", {}))
            signing = SigningDomainConfig(**data.get("signing", {}))
            logging_conf = LoggingConfig(**data.get("logging", {}))
            api = ApiConfig(**data.get("api", {}))
        except TypeError as e:
            raise ConfigurationException(f"Invalid configuration: {e}") from e

        if isinstance(tree.leaf_encoding, str):
            tree.leaf_encoding = [t.strip() for t in tree.leaf_encoding.split(",") if t.strip()]

        return cls(
            storage=storage,
            tree=tree,
            signing=signing,
            logging=logging_conf,
            api=api,
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        import copy
        new_config = copy.deepcopy(self)

        for section, values in overrides.items():
            target = getattr(new_config, section)
            for key, value in values.items():
                setattr(target, key, value)

        return new_config

    def to_dict(self, include_secrets: bool = False) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        private_key = self.signing.private_key
        if private_key and not include_secrets:
            private_key = "***"
        return {
            "storage": {
                "tree_path": self.storage.tree_path,
                "proof_path": self.storage.proof_path,
                "allowlist_path": self.storage.allowlist_path,
            },
            "tree": {
                "leaf_encoding": list(self.tree.leaf_encoding),
            },
            "signing": {
                "name": self.signing.name,
                "version": self.signing.version,
                "chain_id": self.signing.chain_id,
                "verifying_contract": self.signing.verifying_contract,
                "private_key": private_key,
            },
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
            },
            "api": {
                "host": self.api.host,
                "port": self.api.port,
                "cors_origins": list(self.api.cors_origins),
            },
            "extra": self.extra,
        }


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: RuntimeConfig) -> None:
    """Set the default runtime configuration."""
    global _default_config
    _default_config = config
