"""
Certificate-path models for the allocation engine.

Describes the certificate catalogue, the career paths a learner targets,
the learning levels certificates are placed into, and the optimization
request / result exchanged with callers.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

LEVEL_NAMES = ["Fundamentals", "Intermediate", "Advanced", "Expert", "Specialist"]

LEVEL_DESCRIPTIONS = [
    "Foundation skills and basic concepts",
    "Building on fundamentals with practical applications",
    "Advanced techniques and complex problem solving",
    "Expert-level skills and leadership capabilities",
    "Specialized knowledge and cutting-edge practices",
]


class CertificateSkill(BaseModel):
    """
    Skill taught (or presupposed) by a certificate.

    Attributes:
        skill_id: Skill identifier
        level: Level the certificate brings the skill to
        is_prerequisite: The skill is required before taking the certificate
    """
    model_config = ConfigDict(frozen=True)

    skill_id: str
    level: int = Field(default=1, ge=1)
    is_prerequisite: bool = False


class Certificate(BaseModel):
    """
    A certificate available in the catalogue.

    Attributes:
        certificate_id: Certificate identifier
        name: Course name
        provider: Optional issuing provider
        difficulty: Difficulty on a 1-5 scale
        duration: Estimated duration in hours
        cost: Estimated cost
        active: Whether the certificate can be taken
        skills: Skills taught or presupposed
    """
    model_config = ConfigDict(frozen=True)

    certificate_id: str
    name: str
    provider: Optional[str] = None
    difficulty: float = Field(ge=1, le=5)
    duration: Optional[float] = Field(default=None, ge=0)
    cost: Optional[float] = Field(default=None, ge=0)
    active: bool = True
    skills: List[CertificateSkill] = Field(default_factory=list)

    @property
    def taught_skills(self) -> List[CertificateSkill]:
        return [skill for skill in self.skills if not skill.is_prerequisite]

    @property
    def prerequisite_skills(self) -> List[CertificateSkill]:
        return [skill for skill in self.skills if skill.is_prerequisite]


class RequiredPathSkill(BaseModel):
    """
    Skill required by a career path.

    Attributes:
        skill_id: Skill identifier
        required_level: Target level
        weight: Relative importance
        priority: Career priority (higher = more impactful)
    """
    model_config = ConfigDict(frozen=True)

    skill_id: str
    required_level: int = Field(default=1, ge=1)
    weight: float = Field(default=1.0, gt=0)
    priority: float = Field(default=1.0, ge=0)


class CareerPath(BaseModel):
    """A target career path and the skill profile it requires."""
    model_config = ConfigDict(frozen=True)

    path_id: str
    name: str
    target: Optional[str] = None
    description: Optional[str] = None
    required_skills: List[RequiredPathSkill] = Field(default_factory=list)

    def required_skill_map(self) -> Dict[str, RequiredPathSkill]:
        return {skill.skill_id: skill for skill in self.required_skills}


class LearningLevel(BaseModel):
    """
    An ordered bucket of certificates.

    Attributes:
        level: Ordinal (1..N)
        name: Display name
        description: Display description
        certificate_ids: Certificates placed in this level (ordered)
        prerequisites: Level numbers that must be completed first
    """
    level: int = Field(ge=1)
    name: str
    description: Optional[str] = None
    certificate_ids: List[str] = Field(default_factory=list)
    prerequisites: Optional[List[int]] = None

    @classmethod
    def create(cls, level: int) -> "LearningLevel":
        """Empty level with its default name, description and prerequisites."""
        index = level - 1
        return cls(
            level=level,
            name=LEVEL_NAMES[index] if index < len(LEVEL_NAMES) else f"Level {level}",
            description=(
                LEVEL_DESCRIPTIONS[index] if index < len(LEVEL_DESCRIPTIONS) else f"Learning level {level}"
            ),
            certificate_ids=[],
            prerequisites=[level - 1] if level > 1 else None,
        )


class CertificateRanking(BaseModel):
    """
    Score of one certificate against one career path for one learner.

    Attributes:
        certificate: The ranked certificate
        score: Composite weighted score in [0, 1]
        coverage: Skill coverage metric
        difficulty: Certificate difficulty
        relevance: Number of matched required skills
        suggested_level: Level the certificate proposes for itself
        breakdown: Normalized value of every scoring factor
    """
    certificate: Certificate
    score: float
    coverage: float
    difficulty: float
    relevance: int
    suggested_level: int
    breakdown: Dict[str, float] = Field(default_factory=dict)

    @property
    def certificate_id(self) -> str:
        return self.certificate.certificate_id


class OptimizationRequest(BaseModel):
    """
    Request to optimize a learner's certificate path.

    Attributes:
        user_id: Learner identifier
        path_id: Career path identifier
        num_levels: Number of learning levels (2-10)
        max_per_level: Certificate cap per level
        consider_time: Report time estimates
        consider_cost: Report cost estimates
    """
    user_id: str
    path_id: str
    num_levels: int = Field(default=5, ge=2, le=10)
    max_per_level: int = Field(default=4, ge=1)
    consider_time: bool = True
    consider_cost: bool = True


class PathOptimizationResult(BaseModel):
    """
    Final learning path for a learner.

    Attributes:
        path_id: Career path identifier
        path_name: Career path name
        levels: Learning levels with their certificates
        total_score: Aggregate optimization score
        evaluation_count: Evaluations performed across agents
        time_estimate: Total hours (when time is considered)
        cost_estimate: Total cost (when cost is considered)
        already_optimized: True when the path had persisted levels and
            no optimization was performed
    """
    path_id: str
    path_name: str
    levels: List[LearningLevel] = Field(default_factory=list)
    total_score: float = 0.0
    evaluation_count: int = 0
    time_estimate: Optional[float] = None
    cost_estimate: Optional[float] = None
    already_optimized: bool = False

    @property
    def total_certificates(self) -> int:
        return sum(len(level.certificate_ids) for level in self.levels)

    def summary(self) -> Dict:
        """Human-oriented overview of the result."""
        total = self.total_certificates
        average = total / len(self.levels) if self.levels else 0.0
        return {
            "summary": (
                f"Optimized learning path with {total} certificates "
                f"across {len(self.levels)} levels"
            ),
            "details": {
                "total_certificates": total,
                "average_certificates_per_level": round(average, 1),
                # 40 study hours per month
                "estimated_time_months": round((self.time_estimate or 0) / 40),
                "estimated_cost": self.cost_estimate or 0,
                "optimization_score": f"{round(self.total_score * 100)}%",
            },
            "levels": [
                {
                    "level": level.level,
                    "name": level.name,
                    "certificate_count": len(level.certificate_ids),
                    "description": level.description,
                }
                for level in self.levels
            ],
        }
