"""
Pytest configuration and shared fixtures for swarmproof tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import os
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

make_agents = _common.make_agents
make_scenario_a = _common.make_scenario_a
make_scenario_b = _common.make_scenario_b

from chain.contract import SwarmChallengeContract
from chain.ledger import Ledger
from swarm.sources import FixedClock, SeededRandomSource


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def agents():
    """Five agents at http://agent-N.test."""
    return make_agents(5)


@pytest.fixture
def scenario_a():
    """Responses of a genuine-looking swarm."""
    return make_scenario_a()


@pytest.fixture
def scenario_b():
    """Responses of a human-looking swarm."""
    return make_scenario_b()


@pytest.fixture
def seeded_random():
    return SeededRandomSource(seed=42)


@pytest.fixture
def fixed_clock():
    return FixedClock(_common.FIXED_NOW)


@pytest.fixture
def ledger():
    """A ledger starting at block 100."""
    return Ledger(start_block=100)


@pytest.fixture
def contract(ledger):
    return SwarmChallengeContract(ledger)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep SWARMPROOF_* variables from the host out of every test."""
    for key in list(os.environ):
        if key.startswith("SWARMPROOF_"):
            monkeypatch.delenv(key, raising=False)


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
