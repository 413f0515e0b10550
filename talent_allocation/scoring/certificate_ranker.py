"""
Certificate ranking against a career path.

A certificate is scored on the skills it teaches that the path requires
("matched" skills). Prerequisite skills never count as taught. Held,
inactive and unmatched certificates are not ranked.
"""

import logging
import math
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..exceptions import CandidateEvaluationError, ConfigurationError
from ..models.certificates import CareerPath, Certificate, CertificateRanking
from ..weights import DEFAULT_CERTIFICATE_WEIGHTS, AgentWeights

logger = logging.getLogger(__name__)

CERTIFICATE_FACTORS = (
    "skill_coverage",
    "skill_relevance",
    "skill_depth",
    "difficulty",
    "prerequisites",
    "duration",
    "path_coherence",
    "level_distribution",
    "progression_logic",
    "market_demand",
    "career_impact",
)

IDEAL_DIFFICULTY = 0.6  # on the 0-1 scale (3 out of 5)
IDEAL_DURATION = 0.5  # 50 hours out of a 100 hour cap
DURATION_CAP_HOURS = 100.0
PREREQUISITE_READINESS = 0.7
DEFAULT_MARKET_DEMAND = 0.5


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


class CertificateRanker:
    """
    Weighted ranking model for certificates.

    Args:
        weights: Certificate factor weights (every name must be a known factor)
        default_duration: Hours assumed for certificates without a duration
        default_market_demand: Demand assumed for skills without market data
    """

    def __init__(
        self,
        weights: AgentWeights = DEFAULT_CERTIFICATE_WEIGHTS,
        default_duration: float = 40.0,
        default_market_demand: float = DEFAULT_MARKET_DEMAND,
    ):
        unknown = [name for name in weights if name not in CERTIFICATE_FACTORS]
        if unknown:
            raise ConfigurationError(f"No certificate factor implements: {', '.join(unknown)}")

        self.weights = weights
        self.factor_names = list(weights)
        self._weight_array = weights.as_array(self.factor_names)
        self.default_duration = default_duration
        self.default_market_demand = default_market_demand

    def suggested_level(
        self,
        certificate: Certificate,
        matched_skill_ids: Sequence[str],
        user_levels: Mapping[str, float],
        num_levels: int,
    ) -> int:
        """Level the certificate proposes for itself, nudged by learner experience."""
        level = math.ceil(certificate.difficulty)
        recorded = [user_levels[skill_id] for skill_id in matched_skill_ids if skill_id in user_levels]
        if recorded:
            mean_level = sum(recorded) / len(recorded)
            if mean_level >= 3:
                level -= 1
            elif mean_level <= 1:
                level += 1
        return int(_clamp(level, 1, num_levels))

    def evaluate(
        self,
        certificate: Certificate,
        path: CareerPath,
        user_levels: Mapping[str, float],
        market_demand: Mapping[str, float],
        num_levels: int,
    ) -> Optional[Tuple[Dict[str, float], int, int]]:
        """
        Factor values, suggested level and matched-skill count of a certificate.

        Returns None if the certificate teaches nothing the path needs.
        """
        required = path.required_skill_map()
        taught = certificate.taught_skills
        matched = [(skill, required[skill.skill_id]) for skill in taught if skill.skill_id in required]
        if not matched:
            return None

        matched_weight = sum(req.weight for _, req in matched)
        coverage = sum(
            min(skill.level, req.required_level) / req.required_level * req.weight for skill, req in matched
        ) / matched_weight

        depth_values = []
        progression_values = []
        for skill, _ in matched:
            gap = skill.level - user_levels.get(skill.skill_id, 0)
            depth_values.append(min(gap / 2, 1.0) if gap > 0 else 0.1)
            if 1 <= gap <= 2:
                progression_values.append(1.0)
            elif gap > 2:
                progression_values.append(0.5)
            else:
                progression_values.append(0.1)

        prerequisites = certificate.prerequisite_skills
        if prerequisites:
            ready = sum(
                1
                for skill in prerequisites
                if user_levels.get(skill.skill_id, 0) >= PREREQUISITE_READINESS * skill.level
            )
            prerequisite_score = ready / len(prerequisites)
        else:
            prerequisite_score = 1.0

        duration = certificate.duration if certificate.duration is not None else self.default_duration
        duration_ratio = min(duration, DURATION_CAP_HOURS) / DURATION_CAP_HOURS
        duration_score = max(0.0, 1 - abs(duration_ratio - IDEAL_DURATION) / IDEAL_DURATION)
        difficulty_score = max(0.0, 1 - abs(certificate.difficulty / 5 - IDEAL_DIFFICULTY) / IDEAL_DIFFICULTY)

        demand = [
            _clamp(market_demand.get(skill.skill_id, self.default_market_demand)) for skill, _ in matched
        ]

        max_path_priority = max(req.priority for req in path.required_skills)
        max_matched_priority = max(req.priority for _, req in matched)
        career_impact = max_matched_priority / max_path_priority if max_path_priority > 0 else 0.0

        matched_ids = [skill.skill_id for skill, _ in matched]
        suggested = self.suggested_level(certificate, matched_ids, user_levels, num_levels)
        natural = _clamp(math.ceil(certificate.difficulty), 1, num_levels)
        level_distribution = 1 - abs(suggested - natural) / max(num_levels - 1, 1)

        factors = {
            "skill_coverage": coverage,
            "skill_relevance": len(matched) / len(required),
            "skill_depth": float(np.mean(depth_values)),
            "difficulty": difficulty_score,
            "prerequisites": prerequisite_score,
            "duration": duration_score,
            "path_coherence": len(matched) / len(taught),
            "level_distribution": level_distribution,
            "progression_logic": float(np.mean(progression_values)),
            "market_demand": float(np.mean(demand)),
            "career_impact": career_impact,
        }
        return factors, suggested, len(matched)

    def rank(
        self,
        certificate: Certificate,
        path: CareerPath,
        user_levels: Optional[Mapping[str, float]] = None,
        market_demand: Optional[Mapping[str, float]] = None,
        num_levels: int = 5,
    ) -> Optional[CertificateRanking]:
        """Rank one certificate; None when it matches no required skill."""
        evaluation = self.evaluate(certificate, path, user_levels or {}, market_demand or {}, num_levels)
        if evaluation is None:
            return None

        values, suggested, relevance = evaluation
        breakdown = {name: _clamp(value) for name, value in values.items()}
        vector = np.array([breakdown[name] for name in self.factor_names], dtype=np.float64)
        score = _clamp(float(np.dot(vector, self._weight_array)))

        return CertificateRanking(
            certificate=certificate,
            score=score,
            coverage=breakdown["skill_coverage"],
            difficulty=certificate.difficulty,
            relevance=relevance,
            suggested_level=suggested,
            breakdown=breakdown,
        )

    def rank_all(
        self,
        certificates: Iterable[Certificate],
        path: CareerPath,
        held_certificate_ids: Iterable[str] = (),
        user_levels: Optional[Mapping[str, float]] = None,
        market_demand: Optional[Mapping[str, float]] = None,
        num_levels: int = 5,
    ) -> List[CertificateRanking]:
        """Rank every eligible certificate, best first."""
        held = set(held_certificate_ids)
        rankings: List[CertificateRanking] = []

        for certificate in certificates:
            if certificate.certificate_id in held or not certificate.active:
                continue
            try:
                ranking = self.rank(certificate, path, user_levels, market_demand, num_levels)
            except Exception as e:
                error = CandidateEvaluationError(certificate.certificate_id, e)
                logger.warning(str(error), extra={"path_id": path.path_id})
                continue
            if ranking is not None:
                rankings.append(ranking)

        rankings.sort(key=lambda r: r.score, reverse=True)
        return rankings
