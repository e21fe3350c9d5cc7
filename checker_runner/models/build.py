"""Read-only view of the Maven build a checker run operates on."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

# Plugin configuration values: plain text, or a list for repeated child elements
ConfigValue = str | list[str]


@runtime_checkable
class Toolchain(Protocol):
    """A JDK toolchain able to locate its tools."""

    def find_tool(self, name: str) -> str | None:
        """Return the path of the named tool, or None if the toolchain lacks it."""
        ...


@runtime_checkable
class VersionedToolchain(Toolchain, Protocol):
    """A toolchain that also knows the Java version it provides."""

    @property
    def java_version(self) -> str | None:
        """Raw Java version string of the toolchain, if known."""
        ...


@dataclass(frozen=True)
class JdkToolchain:
    """Toolchain backed by a JDK installation directory.

    Attributes:
        home: JDK home directory.
        java_version: Raw version string, if known.
    """

    home: Path
    java_version: str | None = None

    def find_tool(self, name: str) -> str | None:
        for candidate in (name, f"{name}.exe"):
            tool = self.home / "bin" / candidate
            if tool.exists():
                return str(tool)
        return None


@dataclass(frozen=True)
class DeclaredArtifact:
    """A dependency declared by the project.

    Attributes:
        group: Maven groupId.
        name: Maven artifactId.
        version: Declared (or inherited) version.
        file: Materialized jar location, None if not resolved locally.
        scope: Maven dependency scope.
    """

    group: str
    name: str
    version: str
    file: Path | None = None
    scope: str = "compile"

    @property
    def coordinates(self) -> str:
        return f"{self.group}:{self.name}:{self.version}"

    def matches(self, group: str, name: str) -> bool:
        return self.group == group and self.name == name


@dataclass(frozen=True)
class PluginExecution:
    """One <execution> block of a build plugin."""

    id: str = "default"
    goals: tuple[str, ...] = ()
    configuration: dict[str, ConfigValue] = field(default_factory=dict)


@dataclass(frozen=True)
class BuildPlugin:
    """A build plugin declared under <build><plugins>."""

    group: str
    name: str
    version: str | None = None
    executions: tuple[PluginExecution, ...] = ()
    configuration: dict[str, ConfigValue] = field(default_factory=dict)

    def matches(self, group: str, name: str) -> bool:
        return self.group == group and self.name == name


@dataclass(frozen=True)
class BuildContext:
    """Snapshot of everything a checker run reads from the build.

    Attributes:
        base_dir: Project root directory.
        build_dir: Build output directory (usually ``target``).
        packaging: Project packaging type (``jar``, ``pom``, ...).
        main_source_roots: Ordered main source directories.
        test_source_roots: Ordered test source directories.
        artifacts: Declared dependencies.
        plugins: Declared build plugins.
        properties: Build properties.
        compile_classpath: Ordered compile classpath elements.
        toolchain: Optional JDK toolchain.
        java_version: Java version of the runtime executing the build.
    """

    base_dir: Path
    build_dir: Path
    packaging: str = "jar"
    main_source_roots: tuple[Path, ...] = ()
    test_source_roots: tuple[Path, ...] = ()
    artifacts: tuple[DeclaredArtifact, ...] = ()
    plugins: tuple[BuildPlugin, ...] = ()
    properties: dict[str, str] = field(default_factory=dict)
    compile_classpath: tuple[str, ...] = ()
    toolchain: Toolchain | None = None
    java_version: str | None = None

    def find_artifact(self, group: str, name: str) -> DeclaredArtifact | None:
        """Return the first declared dependency matching group and name."""
        for artifact in self.artifacts:
            if artifact.matches(group, name):
                return artifact
        return None

    def find_plugin(self, group: str, name: str) -> BuildPlugin | None:
        """Return the first declared build plugin matching group and name."""
        for plugin in self.plugins:
            if plugin.matches(group, name):
                return plugin
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "base_dir": str(self.base_dir),
            "build_dir": str(self.build_dir),
            "packaging": self.packaging,
            "main_source_roots": [str(p) for p in self.main_source_roots],
            "test_source_roots": [str(p) for p in self.test_source_roots],
            "artifacts": [a.coordinates for a in self.artifacts],
            "plugins": [f"{p.group}:{p.name}" for p in self.plugins],
            "java_version": self.java_version,
        }
