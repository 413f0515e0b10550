"""
Role compatibility scoring.

Each factor of the compatibility model is a ``ScoreFactor``: a small object
with a ``name`` and a ``compute`` method returning a value in ``[0, 1]``.
``RoleScoringModel`` combines the factors named by an ``AgentWeights``
vector into one weighted score.

Factor groups:
- Experience and trajectory: tenure, completed_projects, prior_client
- Technical skills: skill_match, skill_level, complementary_skills
- Role and specialization: similar_role, certifications
- Versatility: versatility, skill_corroboration
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Optional

import numpy as np

from ..exceptions import ConfigurationError
from ..models.employees import CandidateProfile, RoleRequirement, SkillSource
from ..weights import DEFAULT_ROLE_WEIGHTS, AgentWeights

TENURE_SATURATION_DAYS = 1095  # 3 years
PROJECTS_SATURATION = 10
CERTIFICATIONS_SATURATION = 3
VERSATILITY_SATURATION = 15
SKILL_LEVEL_CAP = 1.5


@dataclass(frozen=True)
class ScoringContext:
    """Values shared by every factor during one evaluation."""
    as_of: date = field(default_factory=lambda: datetime.now(timezone.utc).date())


class ScoreFactor(ABC):
    """A named sub-factor of the compatibility score."""

    name: str = ""

    @abstractmethod
    def compute(self, profile: CandidateProfile, role: RoleRequirement, context: ScoringContext) -> float:
        """Return the factor value normalized to [0, 1]."""


class TenureFactor(ScoreFactor):
    name = "tenure"

    def compute(self, profile, role, context):
        return min(profile.tenure_days(context.as_of) / TENURE_SATURATION_DAYS, 1.0)


class CompletedProjectsFactor(ScoreFactor):
    name = "completed_projects"

    def compute(self, profile, role, context):
        return min(profile.completed_projects / PROJECTS_SATURATION, 1.0)


class PriorClientFactor(ScoreFactor):
    name = "prior_client"

    def compute(self, profile, role, context):
        if not role.client_id:
            return 0.0
        return 1.0 if any(p.client_id == role.client_id for p in profile.projects) else 0.0


class SkillMatchFactor(ScoreFactor):
    """Weighted fraction of the required skills the candidate holds."""

    name = "skill_match"

    def compute(self, profile, role, context):
        if not role.required_skills:
            return 0.0
        held = profile.skill_map()
        total = sum(req.weight for req in role.required_skills)
        matched = sum(req.weight for req in role.required_skills if req.skill_id in held)
        return matched / total if total > 0 else 0.0


class SkillLevelFactor(ScoreFactor):
    """How far the candidate's levels reach the required ones, capped at 150%."""

    name = "skill_level"

    def compute(self, profile, role, context):
        held = profile.skill_map()
        achieved = 0.0
        possible = 0.0
        for req in role.required_skills:
            skill = held.get(req.skill_id)
            if skill is None:
                continue
            achieved += min(skill.level / req.required_level, SKILL_LEVEL_CAP) * req.weight
            possible += SKILL_LEVEL_CAP * req.weight
        return achieved / possible if possible > 0 else 0.0


class ComplementarySkillsFactor(ScoreFactor):
    name = "complementary_skills"

    def compute(self, profile, role, context):
        if not role.required_skills:
            return 0.0
        required = role.required_skill_map()
        extra = sum(1 for s in profile.skills if s.validated and s.skill_id not in required)
        return min(extra / len(required), 1.0)


class SimilarRoleFactor(ScoreFactor):
    name = "similar_role"

    def compute(self, profile, role, context):
        return 1.0 if any(r.role_id == role.role_id for r in profile.roles) else 0.0


class CertificationsFactor(ScoreFactor):
    name = "certifications"

    def compute(self, profile, role, context):
        certified = sum(
            1 for s in profile.skills if s.validated and s.source == SkillSource.CERTIFICATION
        )
        return min(certified / CERTIFICATIONS_SATURATION, 1.0)


class VersatilityFactor(ScoreFactor):
    name = "versatility"

    def compute(self, profile, role, context):
        validated = sum(1 for s in profile.skills if s.validated)
        return min(validated / VERSATILITY_SATURATION, 1.0)


class SkillCorroborationFactor(ScoreFactor):
    """Share of validated skills reported by more than one source."""

    name = "skill_corroboration"

    def compute(self, profile, role, context):
        validated = [s for s in profile.skills if s.validated]
        if not validated:
            return 0.0
        return sum(1 for s in validated if s.source_count > 1) / len(validated)


DEFAULT_ROLE_FACTORS: List[ScoreFactor] = [
    TenureFactor(),
    CompletedProjectsFactor(),
    PriorClientFactor(),
    SkillMatchFactor(),
    SkillLevelFactor(),
    ComplementarySkillsFactor(),
    SimilarRoleFactor(),
    CertificationsFactor(),
    VersatilityFactor(),
    SkillCorroborationFactor(),
]


class RoleScoringModel:
    """
    Weighted compatibility model between a candidate and a role.

    Every factor named by the weights must have an implementation; extra
    implementations without a weight are ignored.
    """

    def __init__(
        self,
        weights: AgentWeights = DEFAULT_ROLE_WEIGHTS,
        factors: Optional[Iterable[ScoreFactor]] = None,
    ):
        available = {f.name: f for f in (factors if factors is not None else DEFAULT_ROLE_FACTORS)}
        missing = [name for name in weights if name not in available]
        if missing:
            raise ConfigurationError(f"No scoring factor implements: {', '.join(missing)}")

        self.weights = weights
        self.factor_names = list(weights)
        self.factors = [available[name] for name in self.factor_names]
        self._weight_array = weights.as_array(self.factor_names)

    def breakdown(
        self,
        profile: CandidateProfile,
        role: RoleRequirement,
        context: Optional[ScoringContext] = None,
    ) -> Dict[str, float]:
        """Normalized value of every weighted factor."""
        context = context or ScoringContext()
        return {
            factor.name: float(np.clip(factor.compute(profile, role, context), 0.0, 1.0))
            for factor in self.factors
        }

    def score(
        self,
        profile: CandidateProfile,
        role: RoleRequirement,
        context: Optional[ScoringContext] = None,
    ) -> float:
        values = np.fromiter(self.breakdown(profile, role, context).values(), dtype=np.float64)
        return float(np.clip(np.dot(values, self._weight_array), 0.0, 1.0))
