"""Checker Framework invocation planning and execution."""

from checker_runner.planner.command import CommandBuilder, InvocationPlan, Section
from checker_runner.planner.compatibility import CompatibilityDecision, decide
from checker_runner.planner.executor import ProcessExecutor, ProcessResult
from checker_runner.planner.lombok import LombokIntegration, LombokState
from checker_runner.planner.planner import (
    CheckResult,
    InvocationPlanner,
    PlanningContext,
    resolve_checker_version,
    resolve_executable,
)
from checker_runner.planner.resolver import ArtifactResolver, ResolutionReport, ResolvedArtifact
from checker_runner.planner.versions import VersionDetector, VersionPair

__all__ = [
    "ArtifactResolver",
    "CheckResult",
    "CommandBuilder",
    "CompatibilityDecision",
    "InvocationPlan",
    "InvocationPlanner",
    "LombokIntegration",
    "LombokState",
    "PlanningContext",
    "ProcessExecutor",
    "ProcessResult",
    "ResolutionReport",
    "ResolvedArtifact",
    "Section",
    "VersionDetector",
    "VersionPair",
    "decide",
    "resolve_checker_version",
    "resolve_executable",
]
