"""
Per-agent weight perturbation for the certificate ensemble.

Agent ``i`` takes the specialization ``i mod 5`` (multipliers applied to the
base weights), then every factor receives uniform jitter and the vector is
renormalized.
"""

from typing import Dict, List, Tuple

import numpy as np

from ..weights import AgentWeights

SPECIALIZATIONS: List[Tuple[str, Dict[str, float]]] = [
    ("coverage", {"skill_coverage": 1.3, "skill_relevance": 1.2, "difficulty": 0.8}),
    ("progression", {"progression_logic": 1.5, "level_distribution": 1.4, "path_coherence": 1.3}),
    ("difficulty", {"difficulty": 1.4, "prerequisites": 1.3, "skill_depth": 1.2}),
    ("market", {"market_demand": 1.6, "career_impact": 1.4, "skill_relevance": 1.1}),
    ("efficiency", {"duration": 1.4, "path_coherence": 1.2, "prerequisites": 1.1}),
]


def specialization_for(agent_index: int) -> Tuple[str, Dict[str, float]]:
    return SPECIALIZATIONS[agent_index % len(SPECIALIZATIONS)]


def perturb_weights(
    base: AgentWeights,
    agent_index: int,
    rng: np.random.Generator,
    jitter: float = 0.1,
) -> AgentWeights:
    """
    Specialize and jitter a base weight vector for one agent.

    Args:
        base: Base weights
        agent_index: Agent position in the ensemble
        rng: Generator supplying the jitter
        jitter: Half-width of the uniform multiplicative jitter

    Returns:
        Renormalized AgentWeights
    """
    _, multipliers = specialization_for(agent_index)
    names = list(base)
    values = base.as_array(names)
    values *= np.array([multipliers.get(name, 1.0) for name in names])
    values *= 1 + rng.uniform(-jitter, jitter, size=len(names))
    return AgentWeights.normalized(dict(zip(names, values)))
