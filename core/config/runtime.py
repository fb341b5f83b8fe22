"""
Runtime Configuration

Central configuration for challenge dispatch, scoring policy, the on-chain
commit-reveal machine, and the API service.

The scoring bands are heuristic policy, not physics: every constant the
scoring engine and the block-spread scorer use lives here so it can be
recalibrated without touching the algorithms.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from core.schemas.errors import ScoringPolicyException
from core.schemas.versioning import PROTOCOL_VERSION, assert_supported_protocol_version

load_dotenv()


Breakpoints = tuple[tuple[float, float], ...]


def _as_breakpoints(raw: Any) -> Breakpoints:
    """Coerce YAML/JSON lists of pairs into a tuple of float pairs."""
    return tuple((float(x), float(y)) for x, y in raw)


def _validate_breakpoints(name: str, points: Breakpoints) -> None:
    if not points:
        raise ScoringPolicyException(f"{name} must contain at least one breakpoint")
    for x, y in points:
        if not 0.0 <= y <= 100.0:
            raise ScoringPolicyException(
                f"{name} score {y} outside [0, 100]", details={"breakpoint": [x, y]}
            )
    for (x0, y0), (x1, y1) in zip(points, points[1:]):
        if x1 <= x0:
            raise ScoringPolicyException(
                f"{name} breakpoints must be strictly increasing", details={"at": x1}
            )
        if y1 > y0:
            raise ScoringPolicyException(
                f"{name} scores must be non-increasing", details={"at": x1}
            )


@dataclass
class ScoringPolicy:
    """
    Calibratable constants of the off-chain scoring engine.

    Breakpoints are (x, score) pairs joined by straight lines. Below the first
    x the first score applies, beyond the last x the last score applies.
    """
    # Mean latency (ms) -> response-time score
    response_time_bands: Breakpoints = (
        (500.0, 100.0),
        (1000.0, 80.0),
        (2000.0, 50.0),
        (3500.0, 20.0),
        (5200.0, 0.0),
    )
    # Latency coefficient of variation -> time-variance score
    variance_bands: Breakpoints = (
        (0.1, 100.0),
        (0.2, 70.0),
        (0.35, 40.0),
        (0.5, 15.0),
        (1.0, 0.0),
    )
    length_weight: float = 0.4
    overlap_weight: float = 0.6
    neutral_score: float = 50.0
    genuine_threshold: float = 70.0
    suspicious_threshold: float = 40.0

    def __post_init__(self) -> None:
        self.response_time_bands = _as_breakpoints(self.response_time_bands)
        self.variance_bands = _as_breakpoints(self.variance_bands)
        _validate_breakpoints("response_time_bands", self.response_time_bands)
        _validate_breakpoints("variance_bands", self.variance_bands)
        if abs(self.length_weight + self.overlap_weight - 1.0) > 1e-9:
            raise ScoringPolicyException(
                "length_weight + overlap_weight must equal 1",
                details={"length_weight": self.length_weight, "overlap_weight": self.overlap_weight},
            )
        if not 0.0 <= self.neutral_score <= 100.0:
            raise ScoringPolicyException("neutral_score outside [0, 100]")
        if not 0.0 < self.suspicious_threshold < self.genuine_threshold <= 100.0:
            raise ScoringPolicyException(
                "thresholds must satisfy 0 < suspicious < genuine <= 100",
                details={
                    "suspicious_threshold": self.suspicious_threshold,
                    "genuine_threshold": self.genuine_threshold,
                },
            )


# Tried in order for every agent; the empty string is the bare endpoint.
DEFAULT_ENDPOINT_PATHS: tuple[str, ...] = (
    "/.well-known/svp-challenge",
    "/api/svp/challenge",
    "/challenge",
    "/verify",
    "",
)

# Fields that may carry the answer text in an agent's success payload
DEFAULT_RESPONSE_FIELDS: tuple[str, ...] = ("response", "answer", "message", "text", "content")


@dataclass
class DispatchConfig:
    """Configuration for challenge delivery."""
    endpoint_paths: tuple[str, ...] = DEFAULT_ENDPOINT_PATHS
    response_fields: tuple[str, ...] = DEFAULT_RESPONSE_FIELDS
    default_timeout_ms: int = 10_000
    protocol_version: str = PROTOCOL_VERSION
    verifier_id: str = "swarmproof-verifier"
    user_agent: str = "swarmproof/0.1"

    def __post_init__(self) -> None:
        self.endpoint_paths = tuple(self.endpoint_paths)
        self.response_fields = tuple(self.response_fields)
        assert_supported_protocol_version(self.protocol_version)
        if self.default_timeout_ms <= 0:
            raise ValueError("default_timeout_ms must be positive")
        if not self.endpoint_paths:
            raise ValueError("endpoint_paths must not be empty")


@dataclass
class ChainConfig:
    """
    Configuration for commit-reveal scoring.

    Spread bands assume a block interval of roughly two seconds; a ledger
    with a different interval needs them rescaled.
    """
    spread_bands: tuple[tuple[int, int], ...] = ((2, 100), (5, 80), (10, 60))
    spread_fallback_score: int = 40
    spread_weight: float = 0.5
    reveal_weight: float = 0.5
    default_commit_blocks: int = 10
    default_reveal_blocks: int = 10

    def __post_init__(self) -> None:
        self.spread_bands = tuple((int(s), int(v)) for s, v in self.spread_bands)
        for (s0, v0), (s1, v1) in zip(self.spread_bands, self.spread_bands[1:]):
            if s1 <= s0 or v1 > v0:
                raise ScoringPolicyException(
                    "spread_bands must be increasing in spread and non-increasing in score"
                )
        if self.spread_bands and self.spread_fallback_score > self.spread_bands[-1][1]:
            raise ScoringPolicyException("spread_fallback_score exceeds the last band score")
        if abs(self.spread_weight + self.reveal_weight - 1.0) > 1e-9:
            raise ScoringPolicyException("spread_weight + reveal_weight must equal 1")


@dataclass
class ApiConfig:
    """Configuration for the verification service."""
    default_challenge_type: str = "parallel"
    min_agents: int = 2
    max_agents: int = 100
    max_timeout_ms: int = 60_000
    log_level: str = "INFO"


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables
    - YAML file
    - Programmatic construction
    """
    scoring: ScoringPolicy = field(default_factory=ScoringPolicy)
    dispatch: DispatchConfig = field(default_factory=DispatchConfig)
    chain: ChainConfig = field(default_factory=ChainConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - SWARMPROOF_LOG_LEVEL: Log level name
        - SWARMPROOF_DEFAULT_TIMEOUT_MS: Default per-challenge timeout
        - SWARMPROOF_VERIFIER_ID: Verifier identity sent to agents
        - SWARMPROOF_GENUINE_THRESHOLD: Overall score for a genuine verdict
        - SWARMPROOF_SUSPICIOUS_THRESHOLD: Overall score for a suspicious verdict
        """
        overrides: dict[str, Any] = {}

        if os.getenv("SWARMPROOF_LOG_LEVEL"):
            overrides.setdefault("api", {})["log_level"] = os.getenv("SWARMPROOF_LOG_LEVEL")

        if os.getenv("SWARMPROOF_DEFAULT_TIMEOUT_MS"):
            overrides.setdefault("dispatch", {})["default_timeout_ms"] = int(
                os.getenv("SWARMPROOF_DEFAULT_TIMEOUT_MS", "10000")
            )
        if os.getenv("SWARMPROOF_VERIFIER_ID"):
            overrides.setdefault("dispatch", {})["verifier_id"] = os.getenv("SWARMPROOF_VERIFIER_ID")

        if os.getenv("SWARMPROOF_GENUINE_THRESHOLD"):
            overrides.setdefault("scoring", {})["genuine_threshold"] = float(
                os.getenv("SWARMPROOF_GENUINE_THRESHOLD", "70")
            )
        if os.getenv("SWARMPROOF_SUSPICIOUS_THRESHOLD"):
            overrides.setdefault("scoring", {})["suspicious_threshold"] = float(
                os.getenv("SWARMPROOF_SUSPICIOUS_THRESHOLD", "40")
            )

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        scoring_data = data.get("scoring", {})
        dispatch_data = data.get("dispatch", {})
        chain_data = data.get("chain", {})
        api_data = data.get("api", {})

        return cls(
            scoring=ScoringPolicy(**scoring_data) if scoring_data else ScoringPolicy(),
            dispatch=DispatchConfig(**dispatch_data) if dispatch_data else DispatchConfig(),
            chain=ChainConfig(**chain_data) if chain_data else ChainConfig(),
            api=ApiConfig(**api_data) if api_data else ApiConfig(),
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        Sections are rebuilt so their validation runs on the merged values.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        merged = self.to_dict()
        for section, values in overrides.items():
            merged.setdefault(section, {}).update(values)
        merged["extra"] = copy.deepcopy(self.extra)
        return self.from_dict(merged)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "scoring": {
                "response_time_bands": [list(p) for p in self.scoring.response_time_bands],
                "variance_bands": [list(p) for p in self.scoring.variance_bands],
                "length_weight": self.scoring.length_weight,
                "overlap_weight": self.scoring.overlap_weight,
                "neutral_score": self.scoring.neutral_score,
                "genuine_threshold": self.scoring.genuine_threshold,
                "suspicious_threshold": self.scoring.suspicious_threshold,
            },
            "dispatch": {
                "endpoint_paths": list(self.dispatch.endpoint_paths),
                "response_fields": list(self.dispatch.response_fields),
                "default_timeout_ms": self.dispatch.default_timeout_ms,
                "protocol_version": self.dispatch.protocol_version,
                "verifier_id": self.dispatch.verifier_id,
                "user_agent": self.dispatch.user_agent,
            },
            "chain": {
                "spread_bands": [list(b) for b in self.chain.spread_bands],
                "spread_fallback_score": self.chain.spread_fallback_score,
                "spread_weight": self.chain.spread_weight,
                "reveal_weight": self.chain.reveal_weight,
                "default_commit_blocks": self.chain.default_commit_blocks,
                "default_reveal_blocks": self.chain.default_reveal_blocks,
            },
            "api": {
                "default_challenge_type": self.api.default_challenge_type,
                "min_agents": self.api.min_agents,
                "max_agents": self.api.max_agents,
                "max_timeout_ms": self.api.max_timeout_ms,
                "log_level": self.api.log_level,
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
