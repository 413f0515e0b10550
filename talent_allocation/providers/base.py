from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple

from ..models.certificates import CareerPath, Certificate, LearningLevel, PathOptimizationResult
from ..models.employees import (
    Employee,
    EmployeeProjectRecord,
    EmployeeRoleRecord,
    EmployeeSkill,
    RoleRequirement,
    SkillRequirement,
)


class DataProvider(ABC):
    """
    Boundary between the engine and the system of record.

    Every call is async. ``get_project_assignments`` defaults to no stored
    assignments; ``get_user_skill_levels`` and ``get_market_demand`` are
    optional and default to empty maps.
    """

    # Role assignment

    @abstractmethod
    async def get_open_roles(self, project_id: str) -> List[RoleRequirement]:
        pass

    @abstractmethod
    async def get_available_candidates(self) -> List[Employee]:
        pass

    @abstractmethod
    async def get_candidate_projects(self, employee_id: str) -> List[EmployeeProjectRecord]:
        pass

    @abstractmethod
    async def get_candidate_skills(self, employee_id: str) -> List[EmployeeSkill]:
        pass

    @abstractmethod
    async def get_required_skills_for_role(self, role_id: str) -> List[SkillRequirement]:
        pass

    @abstractmethod
    async def get_candidate_role_history(self, employee_id: str) -> List[EmployeeRoleRecord]:
        pass

    @abstractmethod
    async def get_role_details(self, role_id: str) -> Optional[RoleRequirement]:
        pass

    @abstractmethod
    async def persist_assignment(self, project_id: str, employee_id: str, role_id: str) -> None:
        pass

    async def get_project_assignments(self, project_id: str) -> List[Tuple[str, str]]:
        """(employee_id, role_id) pairs already stored for the project."""
        return []

    # Certificate paths

    @abstractmethod
    async def get_available_certificates(self) -> List[Certificate]:
        pass

    @abstractmethod
    async def get_career_paths(self) -> List[CareerPath]:
        pass

    @abstractmethod
    async def get_held_certificates(self, user_id: str) -> List[str]:
        pass

    async def get_user_skill_levels(self, user_id: str) -> Dict[str, float]:
        return {}

    async def get_market_demand(self, skill_ids: Sequence[str]) -> Dict[str, float]:
        return {}

    @abstractmethod
    async def get_existing_levels(self, path_id: str) -> List[LearningLevel]:
        pass

    @abstractmethod
    async def persist_path_optimization(self, result: PathOptimizationResult) -> None:
        pass
