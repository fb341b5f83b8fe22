"""
Runtime Configuration Module

Provides configuration loading and management for swarm verification.
"""

from .runtime import (
    ApiConfig,
    ChainConfig,
    DispatchConfig,
    RuntimeConfig,
    ScoringPolicy,
    get_default_config,
    set_default_config,
)

__all__ = [
    "ApiConfig",
    "ChainConfig",
    "DispatchConfig",
    "RuntimeConfig",
    "ScoringPolicy",
    "get_default_config",
    "set_default_config",
]
