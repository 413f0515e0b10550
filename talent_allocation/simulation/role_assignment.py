"""
Role assignment orchestration.

Open roles of a project are filled one at a time, in provider order. For
each role the still-available employees are shuffled and dealt to a set of
``SelectionAgent`` s; each agent proposes the best candidate of its group
and the best averaged proposal wins. A winner is never considered again
within the run.

Role lifecycle:
    PENDING -> PROCESSING -> ASSIGNED | SKIPPED

The run itself ends in DONE.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Set

from mesa import Model

from ..config.settings import Settings, get_settings
from ..exceptions import GroupEvaluationError, NoCandidateError
from ..models.employees import (
    AssignmentResult,
    CandidateProfile,
    Employee,
    RoleRequirement,
)
from ..providers.base import DataProvider
from ..scoring.role_factors import ScoreFactor, ScoringContext
from ..weights import DEFAULT_ROLE_WEIGHTS, AgentWeights
from .agent import CandidateScore, SelectionAgent
from .cache import RunCache
from .partitioner import agent_count, partition

logger = logging.getLogger(__name__)


class AssignmentState(str, Enum):
    """State of a role (or of the run, for DONE)."""
    PENDING = "pending"
    PROCESSING = "processing"
    ASSIGNED = "assigned"
    SKIPPED = "skipped"
    DONE = "done"


@dataclass
class RoleAssignmentReport:
    """
    Outcome of a role assignment run.

    Attributes:
        run_id: Identifier used in log records of the run
        project_id: Project whose roles were filled
        assignments: Winners, in role order
        role_states: Final state of every role
        skipped_roles: Roles left unfilled with the reason
        agents_used: Total selection agents spawned over all roles
        elapsed_seconds: Wall time of the run
    """
    run_id: str
    project_id: str
    assignments: List[AssignmentResult] = field(default_factory=list)
    role_states: Dict[str, AssignmentState] = field(default_factory=dict)
    skipped_roles: Dict[str, str] = field(default_factory=dict)
    agents_used: int = 0
    elapsed_seconds: float = 0.0


class RoleAssignmentModel(Model):
    def __init__(
        self,
        provider: DataProvider,
        project_id: str,
        settings: Optional[Settings] = None,
        seed: Optional[int] = None,
        cache: Optional[RunCache] = None,
        weights: AgentWeights = DEFAULT_ROLE_WEIGHTS,
        factors: Optional[Iterable[ScoreFactor]] = None,
        as_of: Optional[date] = None,
    ):
        super().__init__(seed=seed)

        self.provider = provider
        self.project_id = project_id
        self.settings = settings or get_settings()
        self.cache = cache if cache is not None else RunCache()
        self.weights = weights
        self.factors = list(factors) if factors is not None else None
        self.scoring_context = ScoringContext(as_of=as_of or datetime.now(timezone.utc).date())

        self.run_id = uuid.uuid4().hex[:12]
        self.state = AssignmentState.PENDING
        self.role_states: Dict[str, AssignmentState] = {}
        self.assigned_employees: Set[str] = set()
        self.agents_used = 0

    # Data access (cached for the run)

    async def candidate_profile(self, employee: Employee) -> CandidateProfile:
        employee_id = employee.employee_id
        projects, skills, roles = await asyncio.gather(
            self.cache.get_or_fetch(
                f"candidate_projects:{employee_id}",
                lambda: self.provider.get_candidate_projects(employee_id),
            ),
            self.cache.get_or_fetch(
                f"candidate_skills:{employee_id}",
                lambda: self.provider.get_candidate_skills(employee_id),
            ),
            self.cache.get_or_fetch(
                f"candidate_roles:{employee_id}",
                lambda: self.provider.get_candidate_role_history(employee_id),
            ),
        )
        return CandidateProfile(employee=employee, skills=skills, projects=projects, roles=roles)

    async def role_requirement(self, role: RoleRequirement) -> RoleRequirement:
        """Role enriched with its details and required skills."""
        details, required_skills = await asyncio.gather(
            self.cache.get_or_fetch(
                f"role_details:{role.role_id}",
                lambda: self.provider.get_role_details(role.role_id),
            ),
            self.cache.get_or_fetch(
                f"role_skills:{role.role_id}",
                lambda: self.provider.get_required_skills_for_role(role.role_id),
            ),
        )
        update = {"required_skills": list(required_skills) or role.required_skills}
        if details is not None:
            update["client_id"] = role.client_id or details.client_id
            update["description"] = role.description or details.description
        return role.model_copy(update=update)

    # Orchestration

    async def run(self) -> RoleAssignmentReport:
        """Fill every open role of the project."""
        start_time = time.perf_counter()
        log_extra = {"run_id": self.run_id, "project_id": self.project_id}

        roles, candidates = await asyncio.gather(
            self.provider.get_open_roles(self.project_id),
            self.provider.get_available_candidates(),
        )
        pool = [employee for employee in candidates if employee.active]
        report = RoleAssignmentReport(run_id=self.run_id, project_id=self.project_id)
        self.role_states = {role.role_id: AssignmentState.PENDING for role in roles}
        self.state = AssignmentState.PROCESSING

        logger.info(
            f"Assigning {len(roles)} role(s) from a pool of {len(pool)} employee(s)",
            extra=log_extra,
        )

        # Profiles are fetched lazily by the agents, so an unreachable
        # employee only drops out of the pool of each decision
        for role in roles:
            if pool and len(self.assigned_employees) >= len(pool):
                logger.info("Every employee is assigned, stopping early", extra=log_extra)
                break

            self.role_states[role.role_id] = AssignmentState.PROCESSING
            try:
                requirement = await self.role_requirement(role)
                result = await self.assign_role(requirement, pool)
            except NoCandidateError as e:
                self.role_states[role.role_id] = AssignmentState.SKIPPED
                report.skipped_roles[role.role_id] = e.reason
                logger.warning(str(e), extra={**log_extra, "role_id": role.role_id})
                continue

            self.assigned_employees.add(result.employee_id)
            self.role_states[role.role_id] = AssignmentState.ASSIGNED
            report.assignments.append(result)
            logger.info(
                f"Assigned {result.employee_name} to {result.role_name} (score {result.score:.3f})",
                extra={**log_extra, "role_id": role.role_id},
            )

        for role_id, state in self.role_states.items():
            if state == AssignmentState.PENDING:
                self.role_states[role_id] = AssignmentState.SKIPPED
                report.skipped_roles[role_id] = "no employees left"

        self.state = AssignmentState.DONE
        report.role_states = dict(self.role_states)
        report.agents_used = self.agents_used
        report.elapsed_seconds = time.perf_counter() - start_time
        logger.info(
            f"Role assignment finished: {len(report.assignments)} assigned, "
            f"{len(report.skipped_roles)} skipped in {report.elapsed_seconds:.2f}s",
            extra=log_extra,
        )
        return report

    async def assign_role(self, role: RoleRequirement, pool: Sequence[Employee]) -> AssignmentResult:
        """
        Pick the winner of one role among the still available employees.

        Raises:
            NoCandidateError: When the pool is empty or no group proposes a candidate
        """
        available = [e for e in pool if e.employee_id not in self.assigned_employees]
        if not available:
            raise NoCandidateError(role.role_id, "no available employees")

        num_agents = agent_count(len(available), self.settings.min_agents, self.settings.max_agents)
        groups = [group for group in partition(available, num_agents, self.random) if group]
        agents = [SelectionAgent(self, i, self.weights, self.factors) for i in range(len(groups))]
        self.agents_used += len(agents)

        try:
            proposals = await asyncio.gather(
                *(self._evaluate_group(agent, group, role) for agent, group in zip(agents, groups))
            )
        finally:
            for agent in agents:
                agent.remove()

        winner = self.select_winner([p for p in proposals if p is not None])
        if winner is None:
            raise NoCandidateError(role.role_id)

        employee, score, evaluations = winner
        return AssignmentResult(
            role_id=role.role_id,
            role_name=role.name,
            employee_id=employee.employee_id,
            employee_name=employee.display_name,
            score=score,
            num_evaluations=evaluations,
        )

    async def _evaluate_group(
        self,
        agent: SelectionAgent,
        group: List[Employee],
        role: RoleRequirement,
    ) -> Optional[CandidateScore]:
        try:
            return await asyncio.wait_for(
                agent.evaluate_group(group, role),
                timeout=self.settings.agent_timeout_seconds,
            )
        except Exception as e:
            error = GroupEvaluationError(agent.agent_id, e)
            logger.warning(
                str(error),
                extra={"run_id": self.run_id, "role_id": role.role_id, "agent_id": agent.agent_id},
            )
            return None

    @staticmethod
    def select_winner(proposals: List[CandidateScore]):
        """
        Average proposals per employee and return (employee, score, count) of the best.

        Ties keep the employee proposed first.
        """
        grouped: Dict[str, List[CandidateScore]] = {}
        for proposal in proposals:
            grouped.setdefault(proposal.employee.employee_id, []).append(proposal)

        best = None
        for entries in grouped.values():
            average = sum(p.score for p in entries) / len(entries)
            if best is None or average > best[1]:
                best = (entries[0].employee, average, len(entries))
        return best
