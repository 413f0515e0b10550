"""
Pytest configuration and shared fixtures for the allocation engine tests.

This file provides:
- Fast engine settings
- A staffing data set (employees, project roles)
- A learning data set (certificates, career path, learner)
- In-memory providers built from those data sets
"""

from datetime import date
from typing import Dict, List

import pytest

from talent_allocation.config.retry_policies import get_no_retry_policy
from talent_allocation.config.settings import Settings
from talent_allocation.models import (
    CareerPath,
    Certificate,
    CertificateSkill,
    Employee,
    EmployeeProjectRecord,
    EmployeeRoleRecord,
    EmployeeSkill,
    RequiredPathSkill,
    RoleRequirement,
    SkillRequirement,
    SkillSource,
)
from talent_allocation.providers import InMemoryDataProvider

# ============================================================================
# Settings Fixtures
# ============================================================================

@pytest.fixture
def settings() -> Settings:
    """Settings with short timeouts and no log forwarding."""
    return Settings(
        environment="test",
        agent_timeout_seconds=5.0,
        provider_max_attempts=1,
        provider_retry_interval_seconds=0.0,
        datadog_api_key=None,
    )


@pytest.fixture
def no_retry():
    return get_no_retry_policy()


# ============================================================================
# Staffing Data Fixtures
# ============================================================================

@pytest.fixture
def employees() -> List[Employee]:
    return [
        Employee(employee_id="e1", name="Ana", last_name="Lopez", hire_date=date(2018, 1, 1)),
        Employee(employee_id="e2", name="Bruno", last_name="Diaz", hire_date=date(2019, 3, 1)),
        Employee(employee_id="e3", name="Carla", hire_date=date(2020, 5, 1)),
        Employee(employee_id="e4", name="Diego", hire_date=date(2023, 6, 1)),
        Employee(employee_id="e5", name="Elena", hire_date=date(2024, 1, 1)),
    ]


@pytest.fixture
def employee_skills() -> Dict[str, List[EmployeeSkill]]:
    return {
        "e1": [
            EmployeeSkill(skill_id="python", level=3, source=SkillSource.CERTIFICATION, source_count=2),
            EmployeeSkill(skill_id="sql", level=2, source=SkillSource.PROJECT),
        ],
        "e2": [
            EmployeeSkill(skill_id="react", level=3, source=SkillSource.CERTIFICATION),
            EmployeeSkill(skill_id="javascript", level=2, source=SkillSource.EXPERIENCE),
        ],
        "e3": [
            EmployeeSkill(skill_id="aws", level=2, source=SkillSource.CERTIFICATION),
            EmployeeSkill(skill_id="docker", level=2, source=SkillSource.PROJECT, source_count=2),
        ],
        "e4": [EmployeeSkill(skill_id="excel", level=1)],
        "e5": [EmployeeSkill(skill_id="sql", level=1, source=SkillSource.SELF_REPORTED)],
    }


@pytest.fixture
def employee_projects() -> Dict[str, List[EmployeeProjectRecord]]:
    return {
        "e1": [
            EmployeeProjectRecord(project_id="p-old-1", client_id="acme"),
            EmployeeProjectRecord(project_id="p-old-2", client_id="beta"),
        ],
        "e2": [EmployeeProjectRecord(project_id="p-old-3", client_id="gamma")],
        "e3": [EmployeeProjectRecord(project_id="p-old-4")],
    }


@pytest.fixture
def employee_roles() -> Dict[str, List[EmployeeRoleRecord]]:
    return {
        "e1": [EmployeeRoleRecord(role_id="r-backend", name="Backend Developer")],
        "e2": [EmployeeRoleRecord(role_id="r-frontend", name="Frontend Developer")],
        "e3": [EmployeeRoleRecord(role_id="r-devops", name="DevOps Engineer")],
    }


@pytest.fixture
def project_roles() -> List[RoleRequirement]:
    return [
        RoleRequirement(
            role_id="r-backend",
            name="Backend Developer",
            client_id="acme",
            required_skills=[
                SkillRequirement(skill_id="python", required_level=2, weight=2.0),
                SkillRequirement(skill_id="sql", required_level=1),
            ],
        ),
        RoleRequirement(
            role_id="r-frontend",
            name="Frontend Developer",
            required_skills=[SkillRequirement(skill_id="react", required_level=2)],
        ),
        RoleRequirement(
            role_id="r-devops",
            name="DevOps Engineer",
            required_skills=[
                SkillRequirement(skill_id="aws", required_level=2),
                SkillRequirement(skill_id="docker", required_level=1),
            ],
        ),
    ]


@pytest.fixture
def staffing_provider(employees, employee_skills, employee_projects, employee_roles, project_roles):
    """Provider with 5 employees and 3 open roles on project proj-1."""
    return InMemoryDataProvider(
        project_roles={"proj-1": project_roles},
        employees=employees,
        employee_skills=employee_skills,
        employee_projects=employee_projects,
        employee_roles=employee_roles,
    )


# ============================================================================
# Learning Data Fixtures
# ============================================================================

@pytest.fixture
def career_path() -> CareerPath:
    return CareerPath(
        path_id="path-data",
        name="Data Engineer",
        required_skills=[
            RequiredPathSkill(skill_id="python", required_level=3, weight=2.0, priority=3.0),
            RequiredPathSkill(skill_id="sql", required_level=2, weight=1.0, priority=2.0),
            RequiredPathSkill(skill_id="spark", required_level=3, weight=2.0, priority=3.0),
            RequiredPathSkill(skill_id="airflow", required_level=2, weight=1.0, priority=1.0),
        ],
    )


@pytest.fixture
def certificates() -> List[Certificate]:
    return [
        Certificate(
            certificate_id="c1", name="Python Basics", difficulty=1.5, duration=20, cost=100,
            skills=[CertificateSkill(skill_id="python", level=1)],
        ),
        Certificate(
            certificate_id="c2", name="SQL Fundamentals", difficulty=2, duration=30, cost=150,
            skills=[CertificateSkill(skill_id="sql", level=2)],
        ),
        Certificate(
            certificate_id="c3", name="Advanced Python", difficulty=3, duration=50,
            skills=[
                CertificateSkill(skill_id="python", level=3),
                CertificateSkill(skill_id="python", level=1, is_prerequisite=True),
            ],
        ),
        Certificate(
            certificate_id="c4", name="Spark Essentials", difficulty=3, duration=40, cost=400,
            skills=[
                CertificateSkill(skill_id="spark", level=2),
                CertificateSkill(skill_id="python", level=2, is_prerequisite=True),
            ],
        ),
        Certificate(
            certificate_id="c5", name="Spark Performance", difficulty=4.5, duration=60, cost=800,
            skills=[
                CertificateSkill(skill_id="spark", level=3),
                CertificateSkill(skill_id="spark", level=2, is_prerequisite=True),
            ],
        ),
        Certificate(
            certificate_id="c6", name="Airflow Pipelines", difficulty=3.5, duration=45, cost=300,
            skills=[CertificateSkill(skill_id="airflow", level=2)],
        ),
        Certificate(
            certificate_id="c7", name="Marketing 101", difficulty=1,
            skills=[CertificateSkill(skill_id="marketing", level=1)],
        ),
        Certificate(
            certificate_id="c8", name="Data Engineering Capstone", difficulty=5, duration=120, cost=2000,
            skills=[
                CertificateSkill(skill_id="python", level=3),
                CertificateSkill(skill_id="sql", level=2),
                CertificateSkill(skill_id="spark", level=3),
                CertificateSkill(skill_id="airflow", level=2),
            ],
        ),
    ]


@pytest.fixture
def learning_provider(certificates, career_path):
    """Provider where learner u1 holds c1 and has a recorded python level of 1."""
    return InMemoryDataProvider(
        certificates=certificates,
        career_paths=[career_path],
        held_certificates={"u1": ["c1"]},
        user_skill_levels={"u1": {"python": 1}},
        market_demand={"spark": 0.9, "python": 0.8},
    )


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as end-to-end engine tests"
    )
