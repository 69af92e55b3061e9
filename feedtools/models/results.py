"""
Value types passed between the resolver, the pipeline stages and the caller.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class CandidateMatch:
    """A disambiguation entry offered when a query is not uniquely resolvable."""

    name: str
    app_id: int
    url: Optional[str] = None


@dataclass(frozen=True)
class SingleMatch:
    """The query resolved to exactly one App ID."""

    app_id: int


@dataclass(frozen=True)
class MultipleMatches:
    """The query matched several titles; the caller has to pick one."""

    candidates: Tuple[CandidateMatch, ...]

    def __post_init__(self):
        if not self.candidates:
            raise ValueError("MultipleMatches requires at least one candidate.")


@dataclass(frozen=True)
class NoMatch:
    """Nothing matched the query."""


ResolvedTarget = Union[SingleMatch, MultipleMatches, NoMatch]


@dataclass(frozen=True)
class AppDetails:
    """Store metadata for an App ID, as returned by the appdetails endpoint."""

    app_id: int
    name: str
    data: Mapping[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, app_id: int, data: Mapping[str, Any]) -> "AppDetails":
        return cls(app_id=app_id, name=data.get("name") or "Unknown", data=data)


@dataclass(frozen=True)
class DeploymentTargets:
    """Absolute paths of the installation root and its two deployment folders."""

    root: Path
    plugin_dir: Path
    manifest_dir: Path


@dataclass(frozen=True)
class PipelineResult:
    """The single terminal outcome of a pipeline run."""

    success: bool
    message: str
