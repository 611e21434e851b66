"""
Pytest configuration and shared fixtures for allow-list tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import json
import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_common = importlib.import_module("fixtures.common")

make_tree = _common.make_tree
make_dump = _common.make_dump
make_proof_service = _common.make_proof_service
make_signing_domain = _common.make_signing_domain


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep ALLOWLIST_* variables from the developer's shell out of tests."""
    import os
    for key in list(os.environ):
        if key.startswith("ALLOWLIST_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def allowlist_tree():
    """Provide the tree for allow-list A."""
    return make_tree()


@pytest.fixture
def proof_service():
    """Provide a ProofService over allow-list A."""
    return make_proof_service()


@pytest.fixture
def signing_domain():
    """Provide a local-chain signing domain."""
    return make_signing_domain()


@pytest.fixture
def tree_file(tmp_path):
    """Write the allow-list A dump to a temp file and return its path."""
    path = tmp_path / "Target" / "tree.json"
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps(make_dump()))
    return path


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
