"""
Pytest configuration and shared fixtures for Lean IMT tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

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

make_field_leaves = _common.make_field_leaves
make_byte_leaves = _common.make_byte_leaves
make_field_tree = _common.make_field_tree
make_byte_tree = _common.make_byte_tree


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def field_leaves():
    """Field elements 0..4."""
    return make_field_leaves(5)


@pytest.fixture
def field_tree():
    """Five-leaf tree over field elements hashed with field_hash."""
    return make_field_tree(5)


@pytest.fixture
def byte_leaves():
    """Five SHA-256 digests."""
    return make_byte_leaves(5)


@pytest.fixture
def byte_tree():
    """Five-leaf tree over byte digests hashed with hash_concat."""
    return make_byte_tree(5)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove LEANIMT_* variables so config tests start from defaults."""
    for name in ("HASH_SCHEME", "JSON_INDENT", "LOG_LEVEL", "LOG_FILE"):
        monkeypatch.delenv(f"LEANIMT_{name}", raising=False)
    return monkeypatch


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
