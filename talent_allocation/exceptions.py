"""
Error taxonomy for the allocation engine.

Recovered locally (reduce the candidate pool of one decision only):
- CandidateEvaluationError: one candidate failed to score
- GroupEvaluationError: one agent / partition failed or timed out
- NoCandidateError: a role had no eligible candidate

Propagated:
- ConfigurationError: invalid weight vector or scoring setup
- DataProviderError: failure at the data provider boundary
- PathNotFoundError: requested career path does not exist

Signals (not errors):
- PathAlreadyOptimized: the path already has persisted levels
"""

from typing import Any, List, Optional


class AllocationError(Exception):
    """Base class for all allocation engine errors."""


class ConfigurationError(AllocationError):
    """Raised when weights or scoring factors are misconfigured."""


class CandidateEvaluationError(AllocationError):
    def __init__(self, candidate_id: str, cause: Optional[BaseException] = None):
        self.candidate_id = candidate_id
        self.cause = cause
        super().__init__(f"Failed to evaluate candidate {candidate_id}: {cause}")


class GroupEvaluationError(AllocationError):
    def __init__(self, agent_id: int, cause: Optional[BaseException] = None):
        self.agent_id = agent_id
        self.cause = cause
        super().__init__(f"Agent {agent_id} failed to evaluate its group: {cause!r}")


class NoCandidateError(AllocationError):
    def __init__(self, role_id: str, reason: str = "no valid candidate"):
        self.role_id = role_id
        self.reason = reason
        super().__init__(f"Role {role_id} skipped: {reason}")


class DataProviderError(AllocationError):
    def __init__(self, operation: str, message: str, attempts: int = 1):
        self.operation = operation
        self.attempts = attempts
        super().__init__(f"{operation} failed after {attempts} attempt(s): {message}")


class PathNotFoundError(AllocationError):
    def __init__(self, path_id: str):
        self.path_id = path_id
        super().__init__(f"Career path {path_id} not found")


class PathAlreadyOptimized(AllocationError):
    """
    Raised internally when a path already has learning levels.

    Caught by the top-level operation and turned into a successful no-op
    result; never surfaces to callers.
    """

    def __init__(self, path_id: str, existing_levels: List[Any], path_name: str = ""):
        self.path_id = path_id
        self.path_name = path_name
        self.existing_levels = existing_levels
        super().__init__(f"Path {path_id} already has {len(existing_levels)} level(s)")
