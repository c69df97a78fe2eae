"""Resolve and install engine."""

from .installation import Installer
from .models import (
    ArtifactHandle,
    InstallOutcome,
    InstallReport,
    ResolutionPlan,
    VersionInfo,
)
from .planning import render_plan
from .resolution import Resolver
from .worklist import WorkList

__all__ = [
    "VersionInfo",
    "ArtifactHandle",
    "InstallOutcome",
    "InstallReport",
    "ResolutionPlan",
    "WorkList",
    "Resolver",
    "Installer",
    "render_plan",
]
