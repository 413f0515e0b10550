from .agent import AgentProposal, CandidateScore, CertificateEvaluation, PathAgent, SelectionAgent
from .cache import RunCache
from .ensemble import ConsensusCertificate, EnsembleAggregator, PathOptimizationModel
from .level_assignment import LevelAssigner, LevelCandidate
from .partitioner import agent_count, partition
from .perturbation import SPECIALIZATIONS, perturb_weights
from .role_assignment import AssignmentState, RoleAssignmentModel, RoleAssignmentReport

__all__ = [
    "AgentProposal",
    "AssignmentState",
    "CandidateScore",
    "CertificateEvaluation",
    "ConsensusCertificate",
    "EnsembleAggregator",
    "LevelAssigner",
    "LevelCandidate",
    "PathAgent",
    "PathOptimizationModel",
    "RoleAssignmentModel",
    "RoleAssignmentReport",
    "RunCache",
    "SPECIALIZATIONS",
    "SelectionAgent",
    "agent_count",
    "partition",
    "perturb_weights",
]
