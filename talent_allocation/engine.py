"""
Top-level operations of the allocation engine.

- assign_project_roles: fill the open roles of a project. Never raises;
  failures are logged and the assignments persisted so far are returned.
- optimize_certificate_path: build a learner's learning path. Errors
  propagate, except for an already optimized path, which returns the
  persisted levels.
- optimize_certificate_paths: batch variant that skips failed requests.

Every run gets its own cache and its own seeded mesa model.
"""

import logging
from typing import Iterable, List, Optional, Set, Tuple

from .config.retry_policies import RetryConfig, create_custom_retry_policy
from .config.settings import Settings, get_settings
from .exceptions import PathAlreadyOptimized
from .models.certificates import OptimizationRequest, PathOptimizationResult
from .models.employees import AssignmentResult
from .providers.base import DataProvider
from .providers.retrying import RetryingDataProvider
from .simulation.cache import RunCache
from .simulation.ensemble import PathOptimizationModel
from .simulation.role_assignment import RoleAssignmentModel, RoleAssignmentReport
from .weights import DEFAULT_CERTIFICATE_WEIGHTS, DEFAULT_ROLE_WEIGHTS, AgentWeights

logger = logging.getLogger(__name__)


class AllocationEngine:
    """
    Entry point for role assignment and certificate path optimization.

    Args:
        provider: Data provider (wrapped with retries)
        settings: Engine settings (defaults to environment settings)
        seed: Seed for reproducible runs (defaults to ``settings.random_seed``)
        read_policy: Retry policy for provider reads
        write_policy: Retry policy for provider writes
        role_weights: Weights of the role compatibility model
        certificate_weights: Base weights of the path agents
    """

    def __init__(
        self,
        provider: DataProvider,
        settings: Optional[Settings] = None,
        seed: Optional[int] = None,
        read_policy: Optional[RetryConfig] = None,
        write_policy: Optional[RetryConfig] = None,
        role_weights: AgentWeights = DEFAULT_ROLE_WEIGHTS,
        certificate_weights: AgentWeights = DEFAULT_CERTIFICATE_WEIGHTS,
    ):
        self.settings = settings or get_settings()
        self.seed = seed if seed is not None else self.settings.random_seed
        self.provider = RetryingDataProvider(
            provider,
            read_policy=read_policy
            or create_custom_retry_policy(
                max_attempts=self.settings.provider_max_attempts,
                initial_interval_seconds=self.settings.provider_retry_interval_seconds,
                non_retryable_errors=["ValidationError", "PathNotFoundError"],
            ),
            write_policy=write_policy,
        )
        self.role_weights = role_weights
        self.certificate_weights = certificate_weights
        self.last_report: Optional[RoleAssignmentReport] = None

    async def assign_project_roles(self, project_id: str) -> List[AssignmentResult]:
        """
        Assign employees to the open roles of a project and persist the result.

        Pairs already stored for the project are not written again. When a
        write fails the assignments persisted before it are returned.
        """
        persisted: List[AssignmentResult] = []
        try:
            model = RoleAssignmentModel(
                self.provider,
                project_id,
                settings=self.settings,
                seed=self.seed,
                cache=RunCache(),
                weights=self.role_weights,
            )
            report = await model.run()
            self.last_report = report

            stored: Set[Tuple[str, str]] = {
                tuple(pair) for pair in await self.provider.get_project_assignments(project_id)
            }
            for assignment in report.assignments:
                key = (assignment.employee_id, assignment.role_id)
                if key not in stored:
                    await self.provider.persist_assignment(project_id, *key)
                    stored.add(key)
                persisted.append(assignment)
        except Exception as e:
            logger.error(
                f"Role assignment failed for project {project_id} after "
                f"{len(persisted)} persisted assignment(s): {e}",
                extra={"project_id": project_id},
                exc_info=True,
            )
        return persisted

    async def optimize_certificate_path(self, request: OptimizationRequest) -> PathOptimizationResult:
        """
        Optimize a learner's certificate path and persist the result.

        Raises:
            PathNotFoundError: Requested path does not exist
            DataProviderError: Provider failure after retries
        """
        log_extra = {"path_id": request.path_id, "user_id": request.user_id}
        model = PathOptimizationModel(
            self.provider,
            request,
            settings=self.settings,
            seed=self.seed,
            cache=RunCache(),
            base_weights=self.certificate_weights,
        )
        try:
            result = await model.run()
        except PathAlreadyOptimized as signal:
            logger.info(f"Path {request.path_id} already optimized", extra=log_extra)
            return PathOptimizationResult(
                path_id=signal.path_id,
                path_name=signal.path_name,
                levels=list(signal.existing_levels),
                already_optimized=True,
            )
        except Exception as e:
            logger.error(f"Path optimization failed: {e}", extra=log_extra)
            raise

        await self.provider.persist_path_optimization(result)
        return result

    async def optimize_certificate_paths(
        self, requests: Iterable[OptimizationRequest]
    ) -> List[PathOptimizationResult]:
        """Optimize several paths; failed requests are logged and skipped."""
        results = []
        for request in requests:
            try:
                results.append(await self.optimize_certificate_path(request))
            except Exception as e:
                logger.warning(
                    f"Skipping path {request.path_id} for user {request.user_id}: {e}",
                    extra={"path_id": request.path_id, "user_id": request.user_id},
                )
        return results
