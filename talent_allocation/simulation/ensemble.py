"""
Certificate path ensemble.

``PathOptimizationModel`` runs a set of differently weighted ``PathAgent`` s
over the full certificate catalogue, and ``EnsembleAggregator`` merges their
proposals: certificates placed by at least ``consensus_threshold`` agents
are kept, each at the level most agents chose, and re-placed by the level
engine in order of mean score.
"""

import asyncio
import logging
import time
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
from mesa import Model

from ..config.settings import Settings, get_settings
from ..exceptions import GroupEvaluationError, PathAlreadyOptimized, PathNotFoundError
from ..models.certificates import (
    CareerPath,
    Certificate,
    LearningLevel,
    OptimizationRequest,
    PathOptimizationResult,
)
from ..providers.base import DataProvider
from ..weights import DEFAULT_CERTIFICATE_WEIGHTS, AgentWeights
from .agent import AgentProposal, PathAgent
from .cache import RunCache
from .level_assignment import LevelAssigner, LevelCandidate
from .perturbation import perturb_weights

logger = logging.getLogger(__name__)

CONSENSUS_BONUS_CAP = 0.1
CONSENSUS_BONUS_DIVISOR = 20


@dataclass(frozen=True)
class ConsensusCertificate:
    certificate: Certificate
    mean_score: float
    consensus_level: int
    frequency: int

    @property
    def certificate_id(self) -> str:
        return self.certificate.certificate_id


class EnsembleAggregator:
    def __init__(self, consensus_threshold: int = 3):
        self.consensus_threshold = consensus_threshold

    @staticmethod
    def collect_votes(proposals: Sequence[AgentProposal]) -> pd.DataFrame:
        """One row per placed certificate per agent, in agent order."""
        rows = [
            {
                "agent_id": proposal.agent_id,
                "certificate_id": evaluation.certificate.certificate_id,
                "score": evaluation.score,
                "level": evaluation.assigned_level,
            }
            for proposal in proposals
            for evaluation in proposal.evaluations
        ]
        return pd.DataFrame(rows, columns=["agent_id", "certificate_id", "score", "level"])

    @staticmethod
    def consensus_level(levels: Sequence[int]) -> int:
        """Most proposed level; the first proposed wins ties."""
        if not levels:
            return 1
        return Counter(levels).most_common(1)[0][0]

    def consensus(self, proposals: Sequence[AgentProposal]) -> List[ConsensusCertificate]:
        """Certificates placed by enough agents, best mean score first."""
        votes = self.collect_votes(proposals)
        if votes.empty:
            return []

        certificates: Dict[str, Certificate] = {
            evaluation.certificate.certificate_id: evaluation.certificate
            for proposal in proposals
            for evaluation in proposal.evaluations
        }
        summary = votes.groupby("certificate_id", sort=False).agg(
            frequency=("score", "size"),
            mean_score=("score", "mean"),
            levels=("level", list),
        )
        agreed = summary[summary["frequency"] >= self.consensus_threshold]

        consensus = [
            ConsensusCertificate(
                certificate=certificates[row.Index],
                mean_score=float(row.mean_score),
                consensus_level=int(self.consensus_level(row.levels)),
                frequency=int(row.frequency),
            )
            for row in agreed.itertuples()
        ]
        consensus.sort(key=lambda c: c.mean_score, reverse=True)
        return consensus

    @staticmethod
    def aggregate_score(proposals: Sequence[AgentProposal], consensus_count: int) -> float:
        """Mean agent score plus a consensus bonus, capped at 1."""
        if not proposals:
            return 0.0
        mean_score = float(np.mean([p.total_score for p in proposals]))
        bonus = min(CONSENSUS_BONUS_CAP, consensus_count / CONSENSUS_BONUS_DIVISOR)
        return min(1.0, mean_score + bonus)


class PathOptimizationModel(Model):
    def __init__(
        self,
        provider: DataProvider,
        request: OptimizationRequest,
        settings: Optional[Settings] = None,
        seed: Optional[int] = None,
        cache: Optional[RunCache] = None,
        base_weights: AgentWeights = DEFAULT_CERTIFICATE_WEIGHTS,
        num_agents: Optional[int] = None,
    ):
        super().__init__(seed=seed)

        self.provider = provider
        self.request = request
        self.settings = settings or get_settings()
        self.cache = cache if cache is not None else RunCache()
        self.aggregator = EnsembleAggregator(self.settings.consensus_threshold)
        self.level_assigner = LevelAssigner(self.settings.min_ranking_score)

        # Weight jitter is drawn from the model's seeded RNG
        rng = np.random.default_rng(self.random.getrandbits(32))
        self.path_agents: List[PathAgent] = [
            PathAgent(
                self,
                agent_id,
                perturb_weights(base_weights, agent_id, rng, self.settings.weight_jitter),
                min_score=self.settings.min_ranking_score,
                default_duration=self.settings.default_certificate_duration,
            )
            for agent_id in range(num_agents or self.settings.certificate_agent_count)
        ]
        self.proposals: List[AgentProposal] = []

    @property
    def log_extra(self) -> Dict[str, str]:
        return {"path_id": self.request.path_id, "user_id": self.request.user_id}

    async def career_path(self) -> CareerPath:
        paths = await self.cache.get_or_fetch("career_paths", self.provider.get_career_paths)
        for path in paths:
            if path.path_id == self.request.path_id:
                return path
        raise PathNotFoundError(self.request.path_id)

    async def run(self) -> PathOptimizationResult:
        """
        Optimize the learner's path.

        Raises:
            PathNotFoundError: Requested path does not exist
            PathAlreadyOptimized: The path already has persisted levels
        """
        start_time = time.perf_counter()
        request = self.request
        path = await self.career_path()

        existing = await self.provider.get_existing_levels(path.path_id)
        if existing:
            raise PathAlreadyOptimized(path.path_id, existing, path_name=path.name)

        certificates, held, user_levels, market_demand = await asyncio.gather(
            self.cache.get_or_fetch("certificates", self.provider.get_available_certificates),
            self.cache.get_or_fetch(
                f"held_certificates:{request.user_id}",
                lambda: self.provider.get_held_certificates(request.user_id),
            ),
            self.cache.get_or_fetch(
                f"skill_levels:{request.user_id}",
                lambda: self.provider.get_user_skill_levels(request.user_id),
            ),
            self.cache.get_or_fetch(
                f"market_demand:{path.path_id}",
                lambda: self.provider.get_market_demand([s.skill_id for s in path.required_skills]),
            ),
        )

        logger.info(
            f"Running {len(self.path_agents)} path agents over {len(certificates)} certificates",
            extra=self.log_extra,
        )
        results = await asyncio.gather(
            *(
                self._analyze(agent, certificates, path, held, user_levels, market_demand)
                for agent in self.path_agents
            )
        )
        self.proposals = [proposal for proposal in results if proposal is not None]
        if not self.proposals:
            logger.warning("Every path agent failed, returning an empty path", extra=self.log_extra)

        consensus = self.aggregator.consensus(self.proposals)
        levels = self.level_assigner.assign(
            [
                LevelCandidate(
                    certificate_id=c.certificate_id,
                    score=c.mean_score,
                    target_level=c.consensus_level,
                    difficulty=c.certificate.difficulty,
                )
                for c in consensus
            ],
            request.num_levels,
            request.max_per_level,
        )
        catalogue = {c.certificate_id: c.certificate for c in consensus}
        time_estimate, cost_estimate = self.estimates(levels, catalogue)

        result = PathOptimizationResult(
            path_id=path.path_id,
            path_name=path.name,
            levels=levels,
            total_score=self.aggregator.aggregate_score(self.proposals, len(consensus)),
            evaluation_count=sum(len(p.evaluations) for p in self.proposals),
            time_estimate=time_estimate if request.consider_time else None,
            cost_estimate=cost_estimate if request.consider_cost else None,
        )
        logger.info(
            f"Path optimization completed in {time.perf_counter() - start_time:.2f}s: "
            f"{result.total_certificates} certificates, {len(consensus)} with consensus",
            extra=self.log_extra,
        )
        return result

    async def _analyze(
        self,
        agent: PathAgent,
        certificates: List[Certificate],
        path: CareerPath,
        held: List[str],
        user_levels: Dict[str, float],
        market_demand: Dict[str, float],
    ) -> Optional[AgentProposal]:
        try:
            return await asyncio.wait_for(
                agent.analyze(certificates, path, self.request, held, user_levels, market_demand),
                timeout=self.settings.agent_timeout_seconds,
            )
        except Exception as e:
            error = GroupEvaluationError(agent.agent_id, e)
            logger.warning(str(error), extra={**self.log_extra, "agent_id": agent.agent_id})
            return None

    def estimates(self, levels: List[LearningLevel], certificates: Dict[str, Certificate]):
        """Total hours and cost of the placed certificates, rounded."""
        total_time = 0.0
        total_cost = 0.0
        for level in levels:
            for certificate_id in level.certificate_ids:
                certificate = certificates[certificate_id]
                total_time += (
                    certificate.duration
                    if certificate.duration is not None
                    else self.settings.default_certificate_duration
                )
                total_cost += (
                    certificate.cost if certificate.cost is not None else self.settings.default_certificate_cost
                )
        return float(round(total_time)), float(round(total_cost))
