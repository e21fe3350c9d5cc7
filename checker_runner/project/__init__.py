"""Build-tool adapters producing a BuildContext."""

from checker_runner.project.pom import (
    PomReader,
    load_build_context,
    probe_java_version,
    read_plugin_options,
)

__all__ = [
    "PomReader",
    "load_build_context",
    "probe_java_version",
    "read_plugin_options",
]
