import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

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


class InMemoryDataProvider(DataProvider):
    """
    Data provider backed by dictionaries.

    Persisted assignments and path optimizations are kept in memory;
    a persisted optimization becomes the path's existing levels.
    """

    def __init__(
        self,
        project_roles: Optional[Dict[str, List[RoleRequirement]]] = None,
        employees: Optional[List[Employee]] = None,
        employee_projects: Optional[Dict[str, List[EmployeeProjectRecord]]] = None,
        employee_skills: Optional[Dict[str, List[EmployeeSkill]]] = None,
        employee_roles: Optional[Dict[str, List[EmployeeRoleRecord]]] = None,
        certificates: Optional[List[Certificate]] = None,
        career_paths: Optional[List[CareerPath]] = None,
        held_certificates: Optional[Dict[str, List[str]]] = None,
        user_skill_levels: Optional[Dict[str, Dict[str, float]]] = None,
        market_demand: Optional[Dict[str, float]] = None,
        path_levels: Optional[Dict[str, List[LearningLevel]]] = None,
    ) -> None:
        """Initialize the in-memory data provider"""
        self.project_roles = project_roles or {}
        self.employees = employees or []
        self.employee_projects = employee_projects or {}
        self.employee_skills = employee_skills or {}
        self.employee_roles = employee_roles or {}
        self.certificates = certificates or []
        self.career_paths = career_paths or []
        self.held_certificates = held_certificates or {}
        self.user_skill_levels = user_skill_levels or {}
        self.market_demand = market_demand or {}
        self.path_levels = path_levels or {}

        self.persisted_assignments: List[Tuple[str, str, str]] = []
        self.persisted_optimizations: List[PathOptimizationResult] = []

        self._roles_by_id = {
            role.role_id: role for roles in self.project_roles.values() for role in roles
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InMemoryDataProvider":
        """
        Build a provider from a plain document.

        Expected keys (all optional): ``projects`` (project id -> list of
        roles), ``employees`` (list, each with optional ``skills``,
        ``projects`` and ``roles`` history), ``certificates``,
        ``career_paths``, ``users`` (user id -> ``held_certificates`` and
        ``skill_levels``), ``market_demand`` and ``path_levels``.
        """
        employees = []
        employee_projects = {}
        employee_skills = {}
        employee_roles = {}
        for raw in data.get("employees", []):
            employee = Employee.model_validate(
                {k: v for k, v in raw.items() if k not in ("skills", "projects", "roles")}
            )
            employees.append(employee)
            employee_skills[employee.employee_id] = [
                EmployeeSkill.model_validate(s) for s in raw.get("skills", [])
            ]
            employee_projects[employee.employee_id] = [
                EmployeeProjectRecord.model_validate(p) for p in raw.get("projects", [])
            ]
            employee_roles[employee.employee_id] = [
                EmployeeRoleRecord.model_validate(r) for r in raw.get("roles", [])
            ]

        users = data.get("users", {})
        return cls(
            project_roles={
                project_id: [RoleRequirement.model_validate(r) for r in roles]
                for project_id, roles in data.get("projects", {}).items()
            },
            employees=employees,
            employee_projects=employee_projects,
            employee_skills=employee_skills,
            employee_roles=employee_roles,
            certificates=[Certificate.model_validate(c) for c in data.get("certificates", [])],
            career_paths=[CareerPath.model_validate(p) for p in data.get("career_paths", [])],
            held_certificates={
                user_id: list(user.get("held_certificates", [])) for user_id, user in users.items()
            },
            user_skill_levels={
                user_id: dict(user.get("skill_levels", {})) for user_id, user in users.items()
            },
            market_demand=dict(data.get("market_demand", {})),
            path_levels={
                path_id: [LearningLevel.model_validate(level) for level in levels]
                for path_id, levels in data.get("path_levels", {}).items()
            },
        )

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "InMemoryDataProvider":
        with open(path, encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    # Role assignment

    async def get_open_roles(self, project_id: str) -> List[RoleRequirement]:
        return list(self.project_roles.get(project_id, []))

    async def get_available_candidates(self) -> List[Employee]:
        return [employee for employee in self.employees if employee.active]

    async def get_candidate_projects(self, employee_id: str) -> List[EmployeeProjectRecord]:
        return list(self.employee_projects.get(employee_id, []))

    async def get_candidate_skills(self, employee_id: str) -> List[EmployeeSkill]:
        return list(self.employee_skills.get(employee_id, []))

    async def get_required_skills_for_role(self, role_id: str) -> List[SkillRequirement]:
        role = self._roles_by_id.get(role_id)
        return list(role.required_skills) if role else []

    async def get_candidate_role_history(self, employee_id: str) -> List[EmployeeRoleRecord]:
        return list(self.employee_roles.get(employee_id, []))

    async def get_role_details(self, role_id: str) -> Optional[RoleRequirement]:
        return self._roles_by_id.get(role_id)

    async def persist_assignment(self, project_id: str, employee_id: str, role_id: str) -> None:
        self.persisted_assignments.append((project_id, employee_id, role_id))

    async def get_project_assignments(self, project_id: str) -> List[Tuple[str, str]]:
        return [
            (employee_id, role_id)
            for stored_project, employee_id, role_id in self.persisted_assignments
            if stored_project == project_id
        ]

    # Certificate paths

    async def get_available_certificates(self) -> List[Certificate]:
        return [certificate for certificate in self.certificates if certificate.active]

    async def get_career_paths(self) -> List[CareerPath]:
        return list(self.career_paths)

    async def get_held_certificates(self, user_id: str) -> List[str]:
        return list(self.held_certificates.get(user_id, []))

    async def get_user_skill_levels(self, user_id: str) -> Dict[str, float]:
        return dict(self.user_skill_levels.get(user_id, {}))

    async def get_market_demand(self, skill_ids: Sequence[str]) -> Dict[str, float]:
        wanted = set(skill_ids)
        return {skill_id: demand for skill_id, demand in self.market_demand.items() if skill_id in wanted}

    async def get_existing_levels(self, path_id: str) -> List[LearningLevel]:
        return list(self.path_levels.get(path_id, []))

    async def persist_path_optimization(self, result: PathOptimizationResult) -> None:
        self.persisted_optimizations.append(result)
        self.path_levels[result.path_id] = [level.model_copy(deep=True) for level in result.levels]
