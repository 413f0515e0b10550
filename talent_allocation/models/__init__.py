"""
Data models for the allocation engine.
"""

from talent_allocation.models.certificates import (
    LEVEL_DESCRIPTIONS,
    LEVEL_NAMES,
    CareerPath,
    Certificate,
    CertificateRanking,
    CertificateSkill,
    LearningLevel,
    OptimizationRequest,
    PathOptimizationResult,
    RequiredPathSkill,
)
from talent_allocation.models.employees import (
    AssignmentResult,
    CandidateProfile,
    Employee,
    EmployeeProjectRecord,
    EmployeeRoleRecord,
    EmployeeSkill,
    RoleRequirement,
    SkillRequirement,
    SkillSource,
)

__all__ = [
    # Role assignment
    "AssignmentResult",
    "CandidateProfile",
    "Employee",
    "EmployeeProjectRecord",
    "EmployeeRoleRecord",
    "EmployeeSkill",
    "RoleRequirement",
    "SkillRequirement",
    "SkillSource",
    # Certificate paths
    "CareerPath",
    "Certificate",
    "CertificateRanking",
    "CertificateSkill",
    "LearningLevel",
    "OptimizationRequest",
    "PathOptimizationResult",
    "RequiredPathSkill",
    "LEVEL_NAMES",
    "LEVEL_DESCRIPTIONS",
]
