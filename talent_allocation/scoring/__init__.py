from .certificate_ranker import CERTIFICATE_FACTORS, CertificateRanker
from .role_factors import (
    DEFAULT_ROLE_FACTORS,
    RoleScoringModel,
    ScoreFactor,
    ScoringContext,
)

__all__ = [
    "CERTIFICATE_FACTORS",
    "CertificateRanker",
    "DEFAULT_ROLE_FACTORS",
    "RoleScoringModel",
    "ScoreFactor",
    "ScoringContext",
]
