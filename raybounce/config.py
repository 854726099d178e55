"""
config.py - Simulation settings for the bounce simulator

Settings:
    - max_steps:   number of bounce steps per simulation
    - epsilon:     smallest ray parameter accepted as a hit
    - miss_length: length of the escape segment drawn for a miss
    - policy:      "nearest" or "first" sphere resolution

Project: Ray Bounce Simulator
"""

import logging
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Mapping

import numpy as np

from .spheres import HIT_EPSILON, POLICIES, POLICY_NEAREST

logger = logging.getLogger(__name__)


def _is_positive_finite(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
        return False
    return bool(np.isfinite(value)) and value > 0


@dataclass
class BounceConfig:
    """
    Settings shared by every simulation call.

    Attributes
    ----------
    max_steps : int
        Number of bounce steps (default: 3)
    epsilon : float
        Minimum ray parameter for a hit (default: 1e-3)
    miss_length : float
        Escape segment length (default: 1000)
    policy : str
        Sphere resolution policy, "nearest" or "first"

    Raises
    ------
    ValueError
        If any setting is out of range or of the wrong type
    """
    max_steps: int = 3
    epsilon: float = HIT_EPSILON
    miss_length: float = 1000.0
    policy: str = POLICY_NEAREST

    def __post_init__(self):
        if self.policy not in POLICIES:
            raise ValueError(f"Unknown hit policy {self.policy!r}, expected one of {POLICIES}")
        if (
            isinstance(self.max_steps, bool)
            or not isinstance(self.max_steps, (int, np.integer))
            or self.max_steps < 0
        ):
            raise ValueError(f"max_steps must be a non-negative integer, got {self.max_steps!r}")
        if not _is_positive_finite(self.epsilon):
            raise ValueError(f"epsilon must be positive and finite, got {self.epsilon!r}")
        if not _is_positive_finite(self.miss_length):
            raise ValueError(f"miss_length must be positive and finite, got {self.miss_length!r}")
        self.max_steps = int(self.max_steps)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BounceConfig":
        """Build a config from a plain mapping, e.g. a parsed JSON file."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
