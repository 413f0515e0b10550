"""
Talent Allocation - Multi-Agent Scoring and Consensus Engine

Allocates people and learning resources to fixed slots with an ensemble of
weighted multi-criteria scoring agents, run concurrently and merged by
consensus:

- Role assignment: match available employees to open project roles
- Certificate paths: place certificates into ordered learning levels

Architecture:
    - models/: Shared data models (Pydantic)
    - scoring/: Role compatibility and certificate ranking models
    - simulation/: Mesa agents and models, partitioning, level engine, ensemble
    - providers/: Data provider contract and implementations
    - config/: Settings, retry policies and logging
    - engine.py: Top-level operations

Usage:
    from talent_allocation import AllocationEngine, InMemoryDataProvider
    engine = AllocationEngine(InMemoryDataProvider.from_json_file("data.json"))
    assignments = await engine.assign_project_roles("project-1")
"""

__version__ = "0.1.0"

from talent_allocation.engine import AllocationEngine
from talent_allocation.exceptions import (
    AllocationError,
    CandidateEvaluationError,
    ConfigurationError,
    DataProviderError,
    GroupEvaluationError,
    NoCandidateError,
    PathAlreadyOptimized,
    PathNotFoundError,
)
from talent_allocation.models import (
    AssignmentResult,
    OptimizationRequest,
    PathOptimizationResult,
)
from talent_allocation.providers import DataProvider, InMemoryDataProvider, RetryingDataProvider
from talent_allocation.weights import DEFAULT_CERTIFICATE_WEIGHTS, DEFAULT_ROLE_WEIGHTS, AgentWeights

__all__ = [
    # Engine
    "AllocationEngine",
    # Weights
    "AgentWeights",
    "DEFAULT_ROLE_WEIGHTS",
    "DEFAULT_CERTIFICATE_WEIGHTS",
    # Results
    "AssignmentResult",
    "OptimizationRequest",
    "PathOptimizationResult",
    # Providers
    "DataProvider",
    "InMemoryDataProvider",
    "RetryingDataProvider",
    # Errors
    "AllocationError",
    "CandidateEvaluationError",
    "ConfigurationError",
    "DataProviderError",
    "GroupEvaluationError",
    "NoCandidateError",
    "PathAlreadyOptimized",
    "PathNotFoundError",
]
