"""
Module 09D - API Dependencies

Dependency injection for the API.
Provides the process-wide configuration, repository and verifier.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path

from core.config.runtime import RuntimeConfig
from orchestrator.pipeline import SwarmVerifier
from orchestrator.store import InMemoryVerificationRepository, VerificationRepository

logger = logging.getLogger(__name__)


def config_search_paths() -> list[Path]:
    return [
        Path.cwd() / "swarmproof.json",
        Path.cwd() / ".swarmproof.json",
        Path.home() / ".config" / "swarmproof" / "config.json",
    ]


def _load_runtime_config() -> RuntimeConfig:
    """Load RuntimeConfig from config file, then overlay environment variables.

    Search order for config file:
      1. ./swarmproof.json
      2. ./.swarmproof.json
      3. ~/.config/swarmproof/config.json

    Environment variables ALWAYS override config file values.
    The .env file is loaded automatically by core.config.runtime on import.
    """
    config: RuntimeConfig | None = None

    for path in config_search_paths():
        if path.exists():
            try:
                with open(path) as f:
                    data = json.load(f)
                logger.info(f"Loaded config from {path}")
                config = RuntimeConfig.from_dict(data)
                break
            except Exception as e:
                logger.warning(f"Failed to parse {path}: {e}")

    if config is None:
        # No config file found, start with defaults
        config = RuntimeConfig()

    # Always apply environment variable overrides
    return config.with_env_overrides()


@lru_cache(maxsize=1)
def get_config() -> RuntimeConfig:
    """Process-wide configuration, resolved once."""
    return _load_runtime_config()


@lru_cache(maxsize=1)
def get_repository() -> VerificationRepository:
    """Process-wide verification store."""
    return InMemoryVerificationRepository()


def get_verifier() -> SwarmVerifier:
    """
    Create a SwarmVerifier bound to the shared config and repository.

    Cheap to build per request; all state lives in the repository.
    """
    return SwarmVerifier(config=get_config(), repository=get_repository())


def reset_dependencies() -> None:
    """Drop cached config and repository (tests)."""
    get_config.cache_clear()
    get_repository.cache_clear()
