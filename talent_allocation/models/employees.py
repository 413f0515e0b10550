"""
Role-assignment models for the allocation engine.

These models describe the candidates (employees and their history), the
open roles they are matched against, and the assignment results handed
back to the data provider.

Entities are loaded at the start of a run and treated as read-only while
agents score them.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SkillSource(str, Enum):
    """Where an employee skill was observed."""
    CERTIFICATION = "certification"
    PROJECT = "project"
    EXPERIENCE = "experience"
    SELF_REPORTED = "self_reported"


class Employee(BaseModel):
    """
    Available employee.

    Attributes:
        employee_id: Unique employee identifier
        name: First name (display)
        last_name: Optional last name
        email: Optional contact email
        hire_date: Date the employee joined (drives tenure)
        active: Whether the employee is active
    """
    model_config = ConfigDict(frozen=True)

    employee_id: str
    name: str
    last_name: Optional[str] = None
    email: Optional[str] = None
    hire_date: Optional[date] = None
    active: bool = True

    @property
    def display_name(self) -> str:
        """Full name when a last name is known."""
        return f"{self.name} {self.last_name}" if self.last_name else self.name


class EmployeeSkill(BaseModel):
    """
    A skill an employee has been observed to hold.

    Attributes:
        skill_id: Skill identifier
        level: Experience level (1-3)
        validated: Whether the skill has been validated
        source: Source the skill was observed in
        source_count: Number of independent sources reporting the skill
    """
    model_config = ConfigDict(frozen=True)

    skill_id: str
    level: int = Field(ge=1, le=3)
    validated: bool = True
    source: Optional[SkillSource] = None
    source_count: int = Field(default=1, ge=1)


class EmployeeProjectRecord(BaseModel):
    """A project the employee has taken part in."""
    model_config = ConfigDict(frozen=True)

    project_id: str
    client_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class EmployeeRoleRecord(BaseModel):
    """A role the employee has held."""
    model_config = ConfigDict(frozen=True)

    role_id: str
    name: Optional[str] = None


class SkillRequirement(BaseModel):
    """
    Skill required by a role.

    Attributes:
        skill_id: Skill identifier
        required_level: Minimum expected level (>= 1)
        weight: Relative importance within the role
    """
    model_config = ConfigDict(frozen=True)

    skill_id: str
    required_level: int = Field(default=1, ge=1)
    weight: float = Field(default=1.0, gt=0)


class RoleRequirement(BaseModel):
    """
    Open role of a project.

    Attributes:
        role_id: Role identifier
        name: Display name
        description: Optional description
        client_id: Client owning the project (for prior-client experience)
        required_skills: Ordered list of required skills
    """
    model_config = ConfigDict(frozen=True)

    role_id: str
    name: str
    description: Optional[str] = None
    client_id: Optional[str] = None
    required_skills: List[SkillRequirement] = Field(default_factory=list)

    def required_skill_map(self) -> Dict[str, SkillRequirement]:
        """Required skills keyed by skill id."""
        return {skill.skill_id: skill for skill in self.required_skills}


class CandidateProfile(BaseModel):
    """
    Everything the scoring model needs to know about one candidate.

    Assembled by the agents from cached data provider lookups.
    """
    model_config = ConfigDict(frozen=True)

    employee: Employee
    skills: List[EmployeeSkill] = Field(default_factory=list)
    projects: List[EmployeeProjectRecord] = Field(default_factory=list)
    roles: List[EmployeeRoleRecord] = Field(default_factory=list)

    @property
    def employee_id(self) -> str:
        return self.employee.employee_id

    @property
    def completed_projects(self) -> int:
        return len(self.projects)

    def tenure_days(self, as_of: Optional[date] = None) -> int:
        """Days since the hire date (0 when unknown or in the future)."""
        if self.employee.hire_date is None:
            return 0
        as_of = as_of or datetime.now(timezone.utc).date()
        return max((as_of - self.employee.hire_date).days, 0)

    def skill_map(self) -> Dict[str, EmployeeSkill]:
        """Skills keyed by skill id."""
        return {skill.skill_id: skill for skill in self.skills}


class AssignmentResult(BaseModel):
    """
    Winner of one role.

    Attributes:
        role_id: Role identifier
        role_name: Role display name
        employee_id: Chosen employee
        employee_name: Chosen employee display name
        score: Final (averaged) compatibility score
        num_evaluations: Number of agent evaluations behind the score
    """
    role_id: str
    role_name: str
    employee_id: str
    employee_name: str
    score: float
    num_evaluations: int = 1
