import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np
from mesa import Agent, Model

from ..exceptions import CandidateEvaluationError
from ..models.certificates import (
    CareerPath,
    Certificate,
    CertificateRanking,
    LearningLevel,
    OptimizationRequest,
)
from ..models.employees import Employee, RoleRequirement
from ..scoring.certificate_ranker import CertificateRanker
from ..scoring.role_factors import RoleScoringModel, ScoreFactor
from ..weights import DEFAULT_CERTIFICATE_WEIGHTS, DEFAULT_ROLE_WEIGHTS, AgentWeights
from .level_assignment import LevelAssigner, LevelCandidate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateScore:
    employee: Employee
    score: float


@dataclass(frozen=True)
class CertificateEvaluation:
    """A certificate an agent placed, with the level it placed it in."""
    certificate: Certificate
    assigned_level: int
    score: float


@dataclass
class AgentProposal:
    """Everything one path agent proposes for a learner."""
    agent_id: int
    rankings: List[CertificateRanking]
    levels: List[LearningLevel]
    evaluations: List[CertificateEvaluation]
    total_score: float
    certificates_analyzed: int
    elapsed_seconds: float = 0.0
    weights: Dict[str, float] = field(default_factory=dict)


class SelectionAgent(Agent):
    """Scores one partition of candidates for a role and proposes its best."""

    def __init__(
        self,
        model: Model,
        agent_id: int,
        weights: AgentWeights = DEFAULT_ROLE_WEIGHTS,
        factors: Optional[Iterable[ScoreFactor]] = None,
    ):
        super().__init__(model)
        self.agent_id = agent_id
        self.weights = weights
        self.scoring_model = RoleScoringModel(weights, factors)

    async def evaluate_group(
        self,
        candidates: Sequence[Employee],
        role: RoleRequirement,
    ) -> Optional[CandidateScore]:
        """
        Best candidate of the group for the role.

        Candidates that fail to score are logged and dropped. Ties keep the
        first candidate seen.
        """
        best: Optional[CandidateScore] = None

        for employee in candidates:
            try:
                profile = await self.model.candidate_profile(employee)
                score = self.scoring_model.score(profile, role, self.model.scoring_context)
            except Exception as e:
                error = CandidateEvaluationError(employee.employee_id, e)
                logger.warning(
                    str(error),
                    extra={"agent_id": self.agent_id, "role_id": role.role_id},
                )
                continue

            if best is None or score > best.score:
                best = CandidateScore(employee=employee, score=score)

        return best


class PathAgent(Agent):
    """Ranks every certificate for a path and proposes its own level placement."""

    def __init__(
        self,
        model: Model,
        agent_id: int,
        weights: AgentWeights = DEFAULT_CERTIFICATE_WEIGHTS,
        min_score: float = 0.3,
        default_duration: float = 40.0,
    ):
        super().__init__(model)
        self.agent_id = agent_id
        self.weights = weights
        self.ranker = CertificateRanker(weights, default_duration=default_duration)
        self.level_assigner = LevelAssigner(min_score=min_score)

    async def analyze(
        self,
        certificates: Sequence[Certificate],
        path: CareerPath,
        request: OptimizationRequest,
        held_certificate_ids: Iterable[str] = (),
        user_levels: Optional[Mapping[str, float]] = None,
        market_demand: Optional[Mapping[str, float]] = None,
    ) -> AgentProposal:
        start_time = time.perf_counter()

        rankings = self.ranker.rank_all(
            certificates,
            path,
            held_certificate_ids=held_certificate_ids,
            user_levels=user_levels,
            market_demand=market_demand,
            num_levels=request.num_levels,
        )
        levels = self.level_assigner.assign(
            [LevelCandidate.from_ranking(r) for r in rankings],
            request.num_levels,
            request.max_per_level,
        )

        placed = {cert_id: level.level for level in levels for cert_id in level.certificate_ids}
        evaluations = [
            CertificateEvaluation(
                certificate=r.certificate,
                assigned_level=placed[r.certificate_id],
                score=r.score,
            )
            for r in rankings
            if r.certificate_id in placed
        ]

        return AgentProposal(
            agent_id=self.agent_id,
            rankings=rankings,
            levels=levels,
            evaluations=evaluations,
            total_score=self.total_optimization_score(rankings, levels, path),
            certificates_analyzed=len(certificates),
            elapsed_seconds=time.perf_counter() - start_time,
            weights=self.weights.to_dict(),
        )

    def total_optimization_score(
        self,
        rankings: List[CertificateRanking],
        levels: List[LearningLevel],
        path: CareerPath,
    ) -> float:
        """
        Overall quality of the proposal.

        40% mean certificate score, 20% level balance, 25% weighted skill
        coverage of the path, 15% difficulty progression.
        """
        if not rankings:
            return 0.0

        mean_score = float(np.mean([r.score for r in rankings]))
        difficulties = {r.certificate_id: r.difficulty for r in rankings}
        return (
            mean_score * 0.4
            + self.level_balance(levels) * 0.2
            + self.coverage_completeness(rankings, path) * 0.25
            + self.progression_score(levels, difficulties) * 0.15
        )

    @staticmethod
    def level_balance(levels: List[LearningLevel]) -> float:
        counts = np.array([len(level.certificate_ids) for level in levels], dtype=np.float64)
        if counts.sum() == 0:
            return 0.0
        average = counts.mean()
        variance = float(np.mean((counts - average) ** 2))
        return max(0.0, 1 - variance / (average + 1))

    @staticmethod
    def coverage_completeness(rankings: List[CertificateRanking], path: CareerPath) -> float:
        """Share of the path's skill weight taught by at least one ranked certificate."""
        covered = {skill.skill_id for r in rankings for skill in r.certificate.taught_skills}
        total = sum(skill.weight for skill in path.required_skills)
        matched = sum(skill.weight for skill in path.required_skills if skill.skill_id in covered)
        return matched / total if total > 0 else 0.0

    @staticmethod
    def progression_score(levels: List[LearningLevel], difficulties: Mapping[str, float]) -> float:
        if len(levels) < 2:
            return 1.0

        total = 0.0
        comparisons = 0
        for previous, current in zip(levels, levels[1:]):
            if not previous.certificate_ids or not current.certificate_ids:
                continue
            previous_mean = np.mean([difficulties.get(c, 3.0) for c in previous.certificate_ids])
            current_mean = np.mean([difficulties.get(c, 3.0) for c in current.certificate_ids])
            if current_mean >= previous_mean:
                total += 1.0
            else:
                total += max(0.0, 1 - (previous_mean - current_mean) / 2)
            comparisons += 1

        return float(total / comparisons) if comparisons else 1.0
