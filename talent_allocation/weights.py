"""Weight vectors used by the scoring agents."""

from collections.abc import Mapping
from typing import Dict, Iterator, Sequence

import numpy as np

from .exceptions import ConfigurationError

WEIGHT_TOLERANCE = 1e-6


class AgentWeights(Mapping):
    """Immutable named weight vector whose factors sum to 1.0.

    The invariant is checked once at construction. Use ``normalized`` to build
    a vector from raw, unnormalized factors.
    """

    __slots__ = ("_factors",)

    def __init__(self, factors: Mapping, tolerance: float = WEIGHT_TOLERANCE):
        if not factors:
            raise ConfigurationError("Weight vector must name at least one factor")

        values: Dict[str, float] = {}
        for name, value in factors.items():
            value = float(value)
            if not np.isfinite(value) or value < 0:
                raise ConfigurationError(f"Weight '{name}' must be a non-negative number, got {value}")
            values[str(name)] = value

        total = sum(values.values())
        if abs(total - 1.0) > tolerance:
            raise ConfigurationError(f"Weights must sum to 1.0 (got {total:.6f})")

        self._factors = values

    @classmethod
    def normalized(cls, raw: Mapping) -> "AgentWeights":
        """Build weights by dividing every factor by the total."""
        total = sum(float(v) for v in raw.values())
        if total <= 0:
            raise ConfigurationError("Cannot normalize a weight vector with a non-positive total")
        return cls({name: float(value) / total for name, value in raw.items()})

    def __getitem__(self, name: str) -> float:
        return self._factors[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._factors)

    def __len__(self) -> int:
        return len(self._factors)

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v:.4f}" for k, v in self._factors.items())
        return f"AgentWeights({inner})"

    @property
    def total(self) -> float:
        return float(sum(self._factors.values()))

    def as_array(self, order: Sequence[str]) -> np.ndarray:
        """Weights as a float64 array in the given factor order."""
        return np.array([self._factors[name] for name in order], dtype=np.float64)

    def to_dict(self) -> Dict[str, float]:
        return dict(self._factors)


# Role compatibility weights
# Experience and trajectory (30%), technical skills (40%),
# role and specialization (20%), versatility (10%)
DEFAULT_ROLE_WEIGHTS = AgentWeights(
    {
        "tenure": 0.10,
        "completed_projects": 0.10,
        "prior_client": 0.10,
        "skill_match": 0.15,
        "skill_level": 0.15,
        "complementary_skills": 0.10,
        "similar_role": 0.10,
        "certifications": 0.10,
        "versatility": 0.05,
        "skill_corroboration": 0.05,
    }
)

# Certificate ranking weights
# Skill coverage and relevance (40%), certificate properties (30%),
# path optimization (20%), strategic value (10%)
DEFAULT_CERTIFICATE_WEIGHTS = AgentWeights(
    {
        "skill_coverage": 0.15,
        "skill_relevance": 0.15,
        "skill_depth": 0.10,
        "difficulty": 0.10,
        "prerequisites": 0.10,
        "duration": 0.10,
        "path_coherence": 0.08,
        "level_distribution": 0.06,
        "progression_logic": 0.06,
        "market_demand": 0.05,
        "career_impact": 0.05,
    }
)
