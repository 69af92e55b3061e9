"""
Data Models Layer.

This package contains the Pydantic configuration model and the value types
that flow through the install pipeline.
"""

from .config import PipelineConfig
from .results import (
    AppDetails,
    CandidateMatch,
    DeploymentTargets,
    MultipleMatches,
    NoMatch,
    PipelineResult,
    ResolvedTarget,
    SingleMatch,
)

__all__ = [
    "AppDetails",
    "CandidateMatch",
    "DeploymentTargets",
    "MultipleMatches",
    "NoMatch",
    "PipelineConfig",
    "PipelineResult",
    "ResolvedTarget",
    "SingleMatch",
]
