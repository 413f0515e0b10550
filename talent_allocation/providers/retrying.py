import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from ..config.retry_policies import RetryConfig, get_persistence_retry_policy, get_provider_retry_policy
from ..exceptions import DataProviderError
from ..models.certificates import CareerPath, Certificate, LearningLevel, PathOptimizationResult
from ..models.employees import (
    Employee,
    EmployeeProjectRecord,
    EmployeeRoleRecord,
    EmployeeSkill,
    RoleRequirement,
    SkillRequirement,
)
from .base import DataProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryingDataProvider(DataProvider):
    """
    Wraps a provider and retries every call with linear backoff.

    Reads use ``read_policy`` and writes use ``write_policy``. Non-retryable
    errors are raised as-is; anything else that survives every attempt is
    raised as ``DataProviderError``.
    """

    def __init__(
        self,
        inner: DataProvider,
        read_policy: Optional[RetryConfig] = None,
        write_policy: Optional[RetryConfig] = None,
    ):
        self.inner = inner
        self.read_policy = read_policy or get_provider_retry_policy()
        self.write_policy = write_policy or get_persistence_retry_policy()

    async def _call(
        self,
        operation: str,
        func: Callable[..., Awaitable[T]],
        *args: Any,
        policy: Optional[RetryConfig] = None,
    ) -> T:
        policy = policy or self.read_policy
        last_error: Optional[Exception] = None

        for attempt in range(policy.maximum_attempts):
            try:
                return await func(*args)
            except Exception as e:
                last_error = e
                if not policy.is_retryable(e):
                    logger.error(
                        f"Non-retryable error in {operation}: {e}",
                        extra={"error_type": type(e).__name__},
                    )
                    raise

                if attempt < policy.maximum_attempts - 1:
                    wait_time = policy.delay(attempt)
                    logger.warning(
                        f"Retry {attempt + 1}/{policy.maximum_attempts} "
                        f"for {operation} after {wait_time:.1f}s: {e}"
                    )
                    await asyncio.sleep(wait_time)

        raise DataProviderError(operation, str(last_error), attempts=policy.maximum_attempts) from last_error

    # Role assignment

    async def get_open_roles(self, project_id: str) -> List[RoleRequirement]:
        return await self._call("get_open_roles", self.inner.get_open_roles, project_id)

    async def get_available_candidates(self) -> List[Employee]:
        return await self._call("get_available_candidates", self.inner.get_available_candidates)

    async def get_candidate_projects(self, employee_id: str) -> List[EmployeeProjectRecord]:
        return await self._call("get_candidate_projects", self.inner.get_candidate_projects, employee_id)

    async def get_candidate_skills(self, employee_id: str) -> List[EmployeeSkill]:
        return await self._call("get_candidate_skills", self.inner.get_candidate_skills, employee_id)

    async def get_required_skills_for_role(self, role_id: str) -> List[SkillRequirement]:
        return await self._call(
            "get_required_skills_for_role", self.inner.get_required_skills_for_role, role_id
        )

    async def get_candidate_role_history(self, employee_id: str) -> List[EmployeeRoleRecord]:
        return await self._call(
            "get_candidate_role_history", self.inner.get_candidate_role_history, employee_id
        )

    async def get_role_details(self, role_id: str) -> Optional[RoleRequirement]:
        return await self._call("get_role_details", self.inner.get_role_details, role_id)

    async def persist_assignment(self, project_id: str, employee_id: str, role_id: str) -> None:
        await self._call(
            "persist_assignment",
            self.inner.persist_assignment,
            project_id,
            employee_id,
            role_id,
            policy=self.write_policy,
        )

    async def get_project_assignments(self, project_id: str) -> List[Tuple[str, str]]:
        return await self._call("get_project_assignments", self.inner.get_project_assignments, project_id)

    # Certificate paths

    async def get_available_certificates(self) -> List[Certificate]:
        return await self._call("get_available_certificates", self.inner.get_available_certificates)

    async def get_career_paths(self) -> List[CareerPath]:
        return await self._call("get_career_paths", self.inner.get_career_paths)

    async def get_held_certificates(self, user_id: str) -> List[str]:
        return await self._call("get_held_certificates", self.inner.get_held_certificates, user_id)

    async def get_user_skill_levels(self, user_id: str) -> Dict[str, float]:
        return await self._call("get_user_skill_levels", self.inner.get_user_skill_levels, user_id)

    async def get_market_demand(self, skill_ids: Sequence[str]) -> Dict[str, float]:
        return await self._call("get_market_demand", self.inner.get_market_demand, skill_ids)

    async def get_existing_levels(self, path_id: str) -> List[LearningLevel]:
        return await self._call("get_existing_levels", self.inner.get_existing_levels, path_id)

    async def persist_path_optimization(self, result: PathOptimizationResult) -> None:
        await self._call(
            "persist_path_optimization",
            self.inner.persist_path_optimization,
            result,
            policy=self.write_policy,
        )
