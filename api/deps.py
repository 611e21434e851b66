"""
Module 07 - API Dependencies

Dependency injection for the API.
Provides the runtime config, the proof service and the signing domain.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from fastapi import Request

from api.errors import InternalError, TreeUnavailableError
from core.config.runtime import RuntimeConfig
from core.crypto.signatures import SigningDomain
from core.merkle.merkle_proofs import ProofService
from core.schemas.errors import AllowlistException, ConfigurationException

from orchestrator.artifacts.io import load_tree

logger = logging.getLogger(__name__)

_load_lock = threading.Lock()


def load_runtime_config() -> RuntimeConfig:
    """Load RuntimeConfig from config file, then overlay environment variables.

    Search order for config file:
      1. ./allowlist.json
      2. ./.allowlist.json
      3. ~/.config/allowlist/config.json

    Environment variables ALWAYS override config file values.
    The .env file is loaded automatically by core.config.runtime on import.
    """
    search_paths = [
        Path.cwd() / "allowlist.json",
        Path.cwd() / ".allowlist.json",
        Path.home() / ".config" / "allowlist" / "config.json",
    ]

    config: RuntimeConfig | None = None

    for path in search_paths:
        if path.exists():
            try:
                with open(path) as f:
                    data = json.load(f)
                logger.info(f"Loaded config from {path}")
                config = RuntimeConfig.from_dict(data)
                break
            except (OSError, ValueError, AllowlistException) as e:
                logger.warning(f"Failed to parse {path}: {e}")

    if config is None:
        config = RuntimeConfig()

    return config.with_env_overrides()


def get_config(request: Request) -> RuntimeConfig:
    """Runtime config attached to the app."""
    return request.app.state.config


def get_proof_service(request: Request) -> ProofService:
    """
    Proof service attached to the app.

    The tree dump at ``storage.tree_path`` is loaded on first use when the
    app was created without a service.

    Raises:
        TreeUnavailableError: If no dump can be loaded
    """
    state = request.app.state
    if state.proof_service is not None:
        return state.proof_service

    with _load_lock:
        if state.proof_service is None:
            path = state.config.storage.tree_path
            try:
                state.proof_service = ProofService(load_tree(path))
            except AllowlistException as e:
                logger.error(f"Cannot load tree from {path}: {e.message}")
                raise TreeUnavailableError(
                    f"Tree dump is not available: {e.message}",
                    details={"code": e.code, **e.details},
                ) from e
    return state.proof_service


def get_signing_domain(request: Request) -> SigningDomain:
    """
    EIP-712 domain from configuration.

    Raises:
        InternalError: If chain id or verifying contract is not configured
    """
    try:
        return get_config(request).signing.require_domain()
    except ConfigurationException as e:
        raise InternalError(
            f"Signing domain is not configured: {e.message}",
            details=e.details,
        ) from e
