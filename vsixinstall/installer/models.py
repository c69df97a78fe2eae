"""Data models for the resolve and install pipeline."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class VersionInfo:
    identifier: str
    version: str
    pre_release: bool = False


@dataclass
class ArtifactHandle:
    identifier: str
    version: str
    path: Path
    dependencies: list[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        return self.identifier.lower()


@dataclass
class InstallOutcome:
    identifier: str
    version: str
    status: str
    output: str = ""


@dataclass
class ResolutionPlan:
    root: str
    artifacts: list[ArtifactHandle]
    diagnostics: list[str] = field(default_factory=list)

    @property
    def discovery_order(self) -> list[str]:
        return [a.identifier for a in self.artifacts]

    @property
    def install_order(self) -> list[str]:
        return [a.identifier for a in reversed(self.artifacts)]

    def is_empty(self) -> bool:
        return len(self.artifacts) == 0


@dataclass
class InstallReport:
    root: str
    discovery_order: list[str]
    outcomes: list[InstallOutcome]
    diagnostics: list[str] = field(default_factory=list)

    @property
    def install_order(self) -> list[str]:
        return [o.identifier for o in self.outcomes]


__all__ = [
    "VersionInfo",
    "ArtifactHandle",
    "InstallOutcome",
    "ResolutionPlan",
    "InstallReport",
]
