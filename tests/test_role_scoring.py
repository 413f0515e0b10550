import warnings
from datetime import date, datetime, timezone
from unittest import TestCase

from talent_allocation.exceptions import ConfigurationError
from talent_allocation.models import (
    CandidateProfile,
    Employee,
    EmployeeProjectRecord,
    EmployeeRoleRecord,
    EmployeeSkill,
    RoleRequirement,
    SkillRequirement,
    SkillSource,
)
from talent_allocation.scoring.role_factors import (
    DEFAULT_ROLE_FACTORS,
    RoleScoringModel,
    ScoreFactor,
    ScoringContext,
)
from talent_allocation.weights import AgentWeights

AS_OF = date(2026, 1, 1)


class ConstantFactor(ScoreFactor):
    def __init__(self, name, value):
        self.name = name
        self.value = value

    def compute(self, profile, role, context):
        return self.value


class TestRoleScoringModel(TestCase):
    def setUp(self):
        self.role = RoleRequirement(
            role_id="r-backend",
            name="Backend Developer",
            client_id="acme",
            required_skills=[
                SkillRequirement(skill_id="python", required_level=2, weight=2.0),
                SkillRequirement(skill_id="sql", required_level=1),
            ],
        )
        self.profile = CandidateProfile(
            employee=Employee(employee_id="e1", name="Ana", hire_date=date(2020, 1, 1)),
            skills=[
                EmployeeSkill(skill_id="python", level=3, source=SkillSource.CERTIFICATION, source_count=2),
                EmployeeSkill(skill_id="go", level=2, source=SkillSource.PROJECT),
                EmployeeSkill(skill_id="rust", level=1, validated=False),
            ],
            projects=[
                EmployeeProjectRecord(project_id="p1", client_id="acme"),
                EmployeeProjectRecord(project_id="p2"),
            ],
            roles=[EmployeeRoleRecord(role_id="r-backend")],
        )
        self.context = ScoringContext(as_of=AS_OF)
        self.model = RoleScoringModel()

    def test_breakdown_values(self):
        breakdown = self.model.breakdown(self.profile, self.role, self.context)

        self.assertEqual(breakdown["tenure"], 1.0)
        self.assertAlmostEqual(breakdown["completed_projects"], 0.2)
        self.assertEqual(breakdown["prior_client"], 1.0)
        # python (weight 2) held, sql (weight 1) missing
        self.assertAlmostEqual(breakdown["skill_match"], 2 / 3)
        # python 3/2 capped at 1.5, over 1.5 possible
        self.assertAlmostEqual(breakdown["skill_level"], 1.0)
        # go is the only validated extra skill, over 2 required
        self.assertAlmostEqual(breakdown["complementary_skills"], 0.5)
        self.assertEqual(breakdown["similar_role"], 1.0)
        self.assertAlmostEqual(breakdown["certifications"], 1 / 3)
        self.assertAlmostEqual(breakdown["versatility"], 2 / 15)
        self.assertAlmostEqual(breakdown["skill_corroboration"], 0.5)

    def test_score_is_weighted_sum(self):
        breakdown = self.model.breakdown(self.profile, self.role, self.context)
        expected = sum(self.model.weights[name] * value for name, value in breakdown.items())

        self.assertAlmostEqual(self.model.score(self.profile, self.role, self.context), expected)

    def test_score_within_unit_interval(self):
        empty = CandidateProfile(employee=Employee(employee_id="e9", name="New"))
        score = self.model.score(empty, self.role, self.context)
        self.assertGreaterEqual(score, 0.0)
        self.assertLessEqual(score, 1.0)
        self.assertEqual(score, 0.0)

    def test_tenure_partial(self):
        profile = CandidateProfile(
            employee=Employee(employee_id="e2", name="Bea", hire_date=date(2025, 1, 1))
        )
        breakdown = self.model.breakdown(profile, self.role, self.context)
        self.assertAlmostEqual(breakdown["tenure"], 365 / 1095)

    def test_missing_factor_raises(self):
        weights = AgentWeights({"tenure": 0.5, "charisma": 0.5})
        with self.assertRaises(ConfigurationError):
            RoleScoringModel(weights)

    def test_pluggable_factors(self):
        factors = [f for f in DEFAULT_ROLE_FACTORS if f.name != "tenure"]
        factors.append(ConstantFactor("tenure", 0.0))
        model = RoleScoringModel(factors=factors)

        breakdown = model.breakdown(self.profile, self.role, self.context)
        self.assertEqual(breakdown["tenure"], 0.0)

    def test_factor_values_are_clipped(self):
        weights = AgentWeights({"tenure": 1.0})
        model = RoleScoringModel(weights, factors=[ConstantFactor("tenure", 3.0)])
        self.assertEqual(model.score(self.profile, self.role, self.context), 1.0)

    def test_default_reference_date_is_utc_today(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            today = datetime.now(timezone.utc).date()
            context = ScoringContext()
            tenure = self.profile.tenure_days()

        self.assertEqual(context.as_of, today)
        self.assertEqual(tenure, (today - date(2020, 1, 1)).days)
