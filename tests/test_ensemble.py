"""
Tests for the certificate path ensemble.

Run with:
    pytest tests/test_ensemble.py -v
"""

from unittest.mock import patch

import pytest

from talent_allocation.exceptions import PathAlreadyOptimized, PathNotFoundError
from talent_allocation.models import (
    CareerPath,
    Certificate,
    CertificateSkill,
    LearningLevel,
    OptimizationRequest,
    RequiredPathSkill,
)
from talent_allocation.providers import InMemoryDataProvider
from talent_allocation.simulation.agent import AgentProposal, CertificateEvaluation, PathAgent
from talent_allocation.simulation.ensemble import EnsembleAggregator, PathOptimizationModel


def make_certificate(cert_id, difficulty=2.0):
    return Certificate(
        certificate_id=cert_id,
        name=cert_id.upper(),
        difficulty=difficulty,
        skills=[CertificateSkill(skill_id="python", level=2)],
    )


def make_proposal(agent_id, placements, total_score=0.5):
    """placements: list of (certificate, level, score)."""
    return AgentProposal(
        agent_id=agent_id,
        rankings=[],
        levels=[],
        evaluations=[CertificateEvaluation(cert, level, score) for cert, level, score in placements],
        total_score=total_score,
        certificates_analyzed=len(placements),
    )


# ============================================================================
# Aggregation Tests
# ============================================================================

class TestEnsembleAggregator:
    """Tests for consensus voting and the aggregate score."""

    def setup_method(self):
        self.aggregator = EnsembleAggregator(consensus_threshold=3)
        self.x = make_certificate("x")
        self.y = make_certificate("y")

    def test_consensus_threshold_and_level(self):
        """Test X (3 votes) is kept at its modal level and Y (2 votes) is dropped."""
        proposals = [
            make_proposal(0, [(self.x, 2, 0.8), (self.y, 1, 0.9)]),
            make_proposal(1, [(self.x, 2, 0.6), (self.y, 1, 0.9)]),
            make_proposal(2, [(self.x, 3, 0.7)]),
            make_proposal(3, []),
        ]

        consensus = self.aggregator.consensus(proposals)

        assert [c.certificate_id for c in consensus] == ["x"]
        assert consensus[0].consensus_level == 2
        assert consensus[0].frequency == 3
        assert consensus[0].mean_score == pytest.approx(0.7)

    def test_consensus_sorted_by_mean_score(self):
        proposals = [
            make_proposal(i, [(self.x, 1, 0.4), (self.y, 2, 0.9)]) for i in range(3)
        ]
        consensus = self.aggregator.consensus(proposals)
        assert [c.certificate_id for c in consensus] == ["y", "x"]

    def test_no_proposals(self):
        assert self.aggregator.consensus([]) == []
        assert self.aggregator.consensus([make_proposal(0, [])]) == []

    def test_consensus_level_ties_keep_first_proposed(self):
        assert EnsembleAggregator.consensus_level([3, 2, 2, 3]) == 3
        assert EnsembleAggregator.consensus_level([1, 4, 4]) == 4
        assert EnsembleAggregator.consensus_level([]) == 1

    def test_collect_votes(self):
        votes = EnsembleAggregator.collect_votes(
            [make_proposal(0, [(self.x, 2, 0.8)]), make_proposal(1, [(self.x, 3, 0.6)])]
        )
        assert list(votes.columns) == ["agent_id", "certificate_id", "score", "level"]
        assert votes["level"].tolist() == [2, 3]

    def test_aggregate_score(self):
        proposals = [make_proposal(0, [], 0.5), make_proposal(1, [], 0.7)]
        # mean 0.6 plus 1/20
        assert EnsembleAggregator.aggregate_score(proposals, 1) == pytest.approx(0.65)

    def test_aggregate_score_bonus_and_total_are_capped(self):
        assert EnsembleAggregator.aggregate_score([make_proposal(0, [], 0.5)], 10) == pytest.approx(0.6)
        assert EnsembleAggregator.aggregate_score([make_proposal(0, [], 0.95)], 5) == 1.0
        assert EnsembleAggregator.aggregate_score([], 5) == 0.0


# ============================================================================
# Path Optimization Model Tests
# ============================================================================

class TestPathOptimizationModel:
    """Tests for PathOptimizationModel.run."""

    @pytest.mark.asyncio
    async def test_optimizes_learning_path(self, learning_provider, settings):
        """Test the consensus path honours held and unrelated certificates."""
        request = OptimizationRequest(user_id="u1", path_id="path-data")
        model = PathOptimizationModel(learning_provider, request, settings=settings, seed=7)

        result = await model.run()

        placed = [cert for level in result.levels for cert in level.certificate_ids]
        assert "c1" not in placed
        assert "c7" not in placed
        assert set(placed) <= {"c2", "c3", "c4", "c5", "c6", "c8"}
        assert len(placed) == len(set(placed))
        assert [level.level for level in result.levels] == [1, 2, 3, 4, 5]
        assert result.path_name == "Data Engineer"
        assert 0.0 < result.total_score <= 1.0
        assert result.evaluation_count == sum(len(p.evaluations) for p in model.proposals)
        assert result.time_estimate is not None
        assert result.cost_estimate is not None
        assert not result.already_optimized

    @pytest.mark.asyncio
    async def test_same_seed_same_path(self, learning_provider, settings):
        """Test a seeded run is reproducible."""
        request = OptimizationRequest(user_id="u1", path_id="path-data", num_levels=3, max_per_level=2)

        first = await PathOptimizationModel(learning_provider, request, settings=settings, seed=21).run()
        second = await PathOptimizationModel(learning_provider, request, settings=settings, seed=21).run()

        assert [lvl.certificate_ids for lvl in first.levels] == [lvl.certificate_ids for lvl in second.levels]
        assert first.total_score == second.total_score

    @pytest.mark.asyncio
    async def test_agent_weights_differ(self, learning_provider, settings):
        request = OptimizationRequest(user_id="u1", path_id="path-data")
        model = PathOptimizationModel(learning_provider, request, settings=settings, seed=3, num_agents=4)

        assert len(model.path_agents) == 4
        weights = [agent.weights.to_dict() for agent in model.path_agents]
        assert weights[0] != weights[1]
        assert all(agent.weights.total == pytest.approx(1.0) for agent in model.path_agents)

    @pytest.mark.asyncio
    async def test_estimates_use_defaults(self, settings):
        """Test missing duration and cost fall back to the configured defaults."""
        path = CareerPath(
            path_id="p",
            name="Python",
            required_skills=[RequiredPathSkill(skill_id="python", required_level=3)],
        )
        certificate = Certificate(
            certificate_id="only",
            name="Python Pro",
            difficulty=3,
            skills=[CertificateSkill(skill_id="python", level=3)],
        )
        provider = InMemoryDataProvider(certificates=[certificate], career_paths=[path])

        result = await PathOptimizationModel(
            provider, OptimizationRequest(user_id="u", path_id="p"), settings=settings, seed=1
        ).run()

        assert result.total_certificates == 1
        assert result.levels[2].certificate_ids == ["only"]
        assert result.time_estimate == 40.0
        assert result.cost_estimate == 500.0

    @pytest.mark.asyncio
    async def test_estimates_omitted_when_not_considered(self, learning_provider, settings):
        request = OptimizationRequest(
            user_id="u1", path_id="path-data", consider_time=False, consider_cost=False
        )
        result = await PathOptimizationModel(learning_provider, request, settings=settings, seed=1).run()

        assert result.time_estimate is None
        assert result.cost_estimate is None

    @pytest.mark.asyncio
    async def test_unknown_path(self, learning_provider, settings):
        request = OptimizationRequest(user_id="u1", path_id="missing")
        with pytest.raises(PathNotFoundError):
            await PathOptimizationModel(learning_provider, request, settings=settings).run()

    @pytest.mark.asyncio
    async def test_already_optimized_path(self, certificates, career_path, settings):
        """Test persisted levels stop the run before any agent works."""
        existing = [LearningLevel.create(1), LearningLevel.create(2)]
        existing[0].certificate_ids = ["c2"]
        provider = InMemoryDataProvider(
            certificates=certificates,
            career_paths=[career_path],
            path_levels={"path-data": existing},
        )
        request = OptimizationRequest(user_id="u1", path_id="path-data")

        with pytest.raises(PathAlreadyOptimized) as exc_info:
            await PathOptimizationModel(provider, request, settings=settings).run()

        assert exc_info.value.existing_levels[0].certificate_ids == ["c2"]
        assert exc_info.value.path_name == "Data Engineer"

    @pytest.mark.asyncio
    async def test_every_agent_failing_gives_empty_path(self, learning_provider, settings):
        """Test agent failures degrade to an empty result instead of an error."""

        async def broken(self, *args, **kwargs):
            raise RuntimeError("ranking crashed")

        request = OptimizationRequest(user_id="u1", path_id="path-data")
        with patch.object(PathAgent, "analyze", broken):
            result = await PathOptimizationModel(learning_provider, request, settings=settings).run()

        assert result.total_certificates == 0
        assert result.total_score == 0.0
        assert result.evaluation_count == 0
        assert len(result.levels) == 5
