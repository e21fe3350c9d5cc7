"""Data models for checker-runner."""

from checker_runner.models.build import (
    BuildContext,
    BuildPlugin,
    DeclaredArtifact,
    JdkToolchain,
    PluginExecution,
    Toolchain,
    VersionedToolchain,
)
from checker_runner.models.options import CheckerOptions

__all__ = [
    "BuildContext",
    "BuildPlugin",
    "CheckerOptions",
    "DeclaredArtifact",
    "JdkToolchain",
    "PluginExecution",
    "Toolchain",
    "VersionedToolchain",
]
