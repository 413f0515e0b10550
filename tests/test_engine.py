"""
End-to-end tests for the allocation engine.

Run with:
    pytest tests/test_engine.py -v
"""

import pytest

from talent_allocation import AllocationEngine
from talent_allocation.config.retry_policies import get_no_retry_policy
from talent_allocation.exceptions import DataProviderError, PathNotFoundError
from talent_allocation.models import OptimizationRequest
from talent_allocation.providers import InMemoryDataProvider


class UnreachableStaffing(InMemoryDataProvider):
    async def get_available_candidates(self):
        raise ConnectionError("staffing service unreachable")


class UnreachableCatalogue(InMemoryDataProvider):
    async def get_available_certificates(self):
        raise ConnectionError("catalogue unreachable")


class FailingSecondWrite(InMemoryDataProvider):
    """Stores the first assignment and rejects every later one."""

    async def persist_assignment(self, project_id, employee_id, role_id):
        if self.persisted_assignments:
            raise ConnectionError("database unavailable")
        await super().persist_assignment(project_id, employee_id, role_id)


# ============================================================================
# Role Assignment
# ============================================================================

@pytest.mark.integration
class TestAssignProjectRoles:
    """Tests for AllocationEngine.assign_project_roles."""

    @pytest.mark.asyncio
    async def test_assigns_and_persists(self, staffing_provider, settings):
        """Test every role is filled and persisted once."""
        engine = AllocationEngine(staffing_provider, settings=settings, seed=1)

        results = await engine.assign_project_roles("proj-1")

        assert {(r.role_id, r.employee_id) for r in results} == {
            ("r-backend", "e1"),
            ("r-frontend", "e2"),
            ("r-devops", "e3"),
        }
        assert sorted(staffing_provider.persisted_assignments) == [
            ("proj-1", "e1", "r-backend"),
            ("proj-1", "e2", "r-frontend"),
            ("proj-1", "e3", "r-devops"),
        ]
        assert engine.last_report.agents_used == 12

    @pytest.mark.asyncio
    async def test_unknown_project(self, staffing_provider, settings):
        engine = AllocationEngine(staffing_provider, settings=settings)

        assert await engine.assign_project_roles("proj-404") == []
        assert staffing_provider.persisted_assignments == []

    @pytest.mark.asyncio
    async def test_provider_failure_returns_empty_list(self, project_roles, settings):
        """Test a failing provider never raises out of role assignment."""
        provider = UnreachableStaffing(project_roles={"proj-1": project_roles})
        engine = AllocationEngine(provider, settings=settings, read_policy=get_no_retry_policy())

        assert await engine.assign_project_roles("proj-1") == []
        assert provider.persisted_assignments == []

    @pytest.mark.asyncio
    async def test_failed_write_returns_persisted_assignments(
        self, employees, employee_skills, employee_projects, employee_roles, project_roles, settings
    ):
        """Test a write failure reports only the rows that were stored."""
        provider = FailingSecondWrite(
            project_roles={"proj-1": project_roles},
            employees=employees,
            employee_skills=employee_skills,
            employee_projects=employee_projects,
            employee_roles=employee_roles,
        )
        engine = AllocationEngine(provider, settings=settings, seed=1, write_policy=get_no_retry_policy())

        results = await engine.assign_project_roles("proj-1")

        assert [(r.role_id, r.employee_id) for r in results] == [("r-backend", "e1")]
        assert provider.persisted_assignments == [("proj-1", "e1", "r-backend")]
        assert len(engine.last_report.assignments) == 3

    @pytest.mark.asyncio
    async def test_rerun_does_not_duplicate_stored_assignments(self, staffing_provider, settings):
        """Test pairs already stored for the project are not written again."""
        engine = AllocationEngine(staffing_provider, settings=settings, seed=1)

        first = await engine.assign_project_roles("proj-1")
        second = await engine.assign_project_roles("proj-1")

        assert len(first) == len(second) == 3
        assert len(staffing_provider.persisted_assignments) == 3
        assert await staffing_provider.get_project_assignments("proj-1") == [
            (r.employee_id, r.role_id) for r in first
        ]


# ============================================================================
# Certificate Paths
# ============================================================================

@pytest.mark.integration
class TestOptimizeCertificatePath:
    """Tests for AllocationEngine.optimize_certificate_path."""

    @pytest.mark.asyncio
    async def test_optimizes_and_persists(self, learning_provider, settings):
        engine = AllocationEngine(learning_provider, settings=settings, seed=5)
        request = OptimizationRequest(user_id="u1", path_id="path-data")

        result = await engine.optimize_certificate_path(request)

        assert not result.already_optimized
        assert learning_provider.persisted_optimizations == [result]
        assert len(learning_provider.path_levels["path-data"]) == 5

    @pytest.mark.asyncio
    async def test_second_run_returns_existing_levels(self, learning_provider, settings):
        """Test an optimized path is returned as-is and not persisted again."""
        engine = AllocationEngine(learning_provider, settings=settings, seed=5)
        request = OptimizationRequest(user_id="u1", path_id="path-data")

        first = await engine.optimize_certificate_path(request)
        second = await engine.optimize_certificate_path(request)

        assert second.already_optimized
        assert second.path_name == "Data Engineer"
        assert [lvl.certificate_ids for lvl in second.levels] == [lvl.certificate_ids for lvl in first.levels]
        assert len(learning_provider.persisted_optimizations) == 1

    @pytest.mark.asyncio
    async def test_unknown_path_raises(self, learning_provider, settings):
        engine = AllocationEngine(learning_provider, settings=settings)

        with pytest.raises(PathNotFoundError):
            await engine.optimize_certificate_path(OptimizationRequest(user_id="u1", path_id="nope"))

    @pytest.mark.asyncio
    async def test_provider_failure_raises(self, certificates, career_path, settings):
        provider = UnreachableCatalogue(certificates=certificates, career_paths=[career_path])
        engine = AllocationEngine(provider, settings=settings)

        with pytest.raises(DataProviderError) as exc_info:
            await engine.optimize_certificate_path(OptimizationRequest(user_id="u1", path_id="path-data"))

        assert exc_info.value.operation == "get_available_certificates"
        assert provider.persisted_optimizations == []

    @pytest.mark.asyncio
    async def test_batch_skips_failed_requests(self, learning_provider, settings):
        engine = AllocationEngine(learning_provider, settings=settings, seed=5)

        results = await engine.optimize_certificate_paths(
            [
                OptimizationRequest(user_id="u1", path_id="missing"),
                OptimizationRequest(user_id="u1", path_id="path-data", num_levels=3),
            ]
        )

        assert [r.path_id for r in results] == ["path-data"]
        assert len(results[0].levels) == 3

    @pytest.mark.asyncio
    async def test_summary(self, learning_provider, settings):
        engine = AllocationEngine(learning_provider, settings=settings, seed=5)
        result = await engine.optimize_certificate_path(
            OptimizationRequest(user_id="u1", path_id="path-data")
        )

        summary = result.summary()

        total = result.total_certificates
        assert summary["summary"] == f"Optimized learning path with {total} certificates across 5 levels"
        assert summary["details"]["total_certificates"] == total
        assert summary["details"]["optimization_score"].endswith("%")
        assert [level["level"] for level in summary["levels"]] == [1, 2, 3, 4, 5]
