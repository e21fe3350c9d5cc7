"""Maven pom.xml adapter producing a BuildContext."""

import asyncio
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any

from checker_runner.core.config.settings import Settings
from checker_runner.core.exceptions import ConfigurationError
from checker_runner.core.logger.logger import get_logger
from checker_runner.models.build import (
    BuildContext,
    BuildPlugin,
    ConfigValue,
    DeclaredArtifact,
    JdkToolchain,
    PluginExecution,
)
from checker_runner.planner.resolver import local_repository_path

logger = get_logger(__name__)

POM_FILE = "pom.xml"
DEFAULT_PLUGIN_GROUP = "org.apache.maven.plugins"
RUNNER_PLUGIN_NAME = "checkerframework-maven-plugin"

DEFAULT_BUILD_DIRECTORY = "target"
DEFAULT_SOURCE_DIRECTORY = "src/main/java"
DEFAULT_TEST_SOURCE_DIRECTORY = "src/test/java"

# Scopes visible on the compile classpath
COMPILE_SCOPES = ("compile", "provided", "system")

# POM configuration key -> CheckerOptions field
PLUGIN_OPTION_KEYS = {
    "annotationProcessors": "processors",
    "checkerFrameworkVersion": "checker_version",
    "extraJavacArgs": "extra_args",
    "skip": "skip",
    "procOnly": "proc_only",
    "failOnError": "fail_on_error",
    "excludeTests": "exclude_tests",
    "suppressLombokWarnings": "suppress_lombok_warnings",
    "includes": "includes",
    "excludes": "excludes",
}

_PROPERTY_PATTERN = re.compile(r"\$\{([^}]+)\}")
_JAVA_VERSION_PATTERN = re.compile(r'version "([^"]+)"')

# Bounds recursive ${...} expansion
_MAX_SUBSTITUTION_PASSES = 10


def _local_tag(tag: str) -> str:
    return tag.split("}")[-1] if "}" in tag else tag


def _child(parent: ET.Element, tag: str) -> ET.Element | None:
    for child in parent:
        if _local_tag(child.tag) == tag:
            return child
    return None


def _children(parent: ET.Element, tag: str) -> list[ET.Element]:
    return [child for child in parent if _local_tag(child.tag) == tag]


def _text(parent: ET.Element, tag: str) -> str:
    child = _child(parent, tag)
    return (child.text or "").strip() if child is not None else ""


class PomReader:
    """Parses a single pom.xml into build facts.

    Only the file itself is read: parent POMs are not merged and profiles
    are not activated.
    """

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = base_dir.resolve()
        self.pom_file = self.base_dir / POM_FILE
        self.root = self._parse()
        self.properties = self._extract_properties()

    def _parse(self) -> ET.Element:
        try:
            content = self.pom_file.read_text(encoding="utf-8")
            # Remove XML declaration and comments for parsing
            content = re.sub(r"<\?xml[^>]*\?>", "", content)
            content = re.sub(r"<!--.*?-->", "", content, flags=re.DOTALL)
            return ET.fromstring(content.strip())
        except ET.ParseError as e:
            raise ConfigurationError(
                f"Failed to parse {self.pom_file}: {e}",
                config_key=POM_FILE,
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read {self.pom_file}: {e}",
                config_key=POM_FILE,
            ) from e

    def _extract_properties(self) -> dict[str, str]:
        """Collect <properties> plus the project.* values used in expressions."""
        properties: dict[str, str] = {}

        parent = _child(self.root, "parent")
        if parent is not None:
            for child in parent:
                if child.text:
                    properties[f"project.parent.{_local_tag(child.tag)}"] = child.text.strip()

        for key in ("groupId", "artifactId", "version", "packaging"):
            value = _text(self.root, key)
            if not value and parent is not None and key in ("groupId", "version"):
                value = _text(parent, key)
            if value:
                properties[f"project.{key}"] = value

        properties["project.basedir"] = str(self.base_dir)
        properties["basedir"] = str(self.base_dir)

        props_elem = _child(self.root, "properties")
        if props_elem is not None:
            for child in props_elem:
                if child.text:
                    properties[_local_tag(child.tag)] = child.text.strip()

        build = _child(self.root, "build")
        directory = _text(build, "directory") if build is not None else ""
        build_dir = self._anchor(self.substitute(directory or DEFAULT_BUILD_DIRECTORY, properties))
        properties["project.build.directory"] = str(build_dir)
        return properties

    def substitute(self, value: str, properties: dict[str, str] | None = None) -> str:
        """Expand ``${name}`` references; unknown names are left as is."""
        properties = self.properties if properties is None else properties

        def replacer(match: re.Match) -> str:
            name = match.group(1)
            if name in properties:
                return properties[name]
            if not name.startswith("project.") and f"project.{name}" in properties:
                return properties[f"project.{name}"]
            return match.group(0)

        for _ in range(_MAX_SUBSTITUTION_PASSES):
            expanded = _PROPERTY_PATTERN.sub(replacer, value)
            if expanded == value:
                break
            value = expanded
        return value

    def _anchor(self, value: str) -> Path:
        path = Path(value)
        return path if path.is_absolute() else self.base_dir / path

    @property
    def packaging(self) -> str:
        return self.substitute(_text(self.root, "packaging")) or "jar"

    @property
    def build_dir(self) -> Path:
        return Path(self.properties["project.build.directory"])

    def source_root(self, tag: str, default: str) -> Path:
        build = _child(self.root, "build")
        configured = _text(build, tag) if build is not None else ""
        return self._anchor(self.substitute(configured or default))

    def _managed_versions(self) -> dict[tuple[str, str], str]:
        versions: dict[tuple[str, str], str] = {}
        management = _child(self.root, "dependencyManagement")
        dependencies = _child(management, "dependencies") if management is not None else None
        if dependencies is None:
            return versions
        for dep in _children(dependencies, "dependency"):
            group = self.substitute(_text(dep, "groupId"))
            name = self.substitute(_text(dep, "artifactId"))
            version = self.substitute(_text(dep, "version"))
            if group and name and version:
                versions[(group, name)] = version
        return versions

    def dependencies(self, repository: Path) -> list[DeclaredArtifact]:
        """Direct dependencies, located in the local repository where present.

        Args:
            repository: Local Maven repository.

        Returns:
            Declared artifacts in POM order.
        """
        artifacts: list[DeclaredArtifact] = []
        dependencies = _child(self.root, "dependencies")
        if dependencies is None:
            return artifacts

        managed = self._managed_versions()
        for dep in _children(dependencies, "dependency"):
            group = self.substitute(_text(dep, "groupId"))
            name = self.substitute(_text(dep, "artifactId"))
            if not group or not name:
                continue
            version = self.substitute(_text(dep, "version")) or managed.get((group, name), "")
            scope = self.substitute(_text(dep, "scope")) or "compile"

            file: Path | None = None
            system_path = self.substitute(_text(dep, "systemPath"))
            if system_path:
                file = self._anchor(system_path)
            elif version and "${" not in version:
                candidate = local_repository_path(repository, group, name, version)
                if candidate.is_file():
                    file = candidate
            if file is None:
                logger.debug(f"No local file for dependency {group}:{name}:{version}")

            artifacts.append(
                DeclaredArtifact(group=group, name=name, version=version, file=file, scope=scope)
            )
        return artifacts

    def _parse_configuration(self, config_elem: ET.Element | None) -> dict[str, ConfigValue]:
        config: dict[str, ConfigValue] = {}
        if config_elem is None:
            return config

        for child in config_elem:
            tag = _local_tag(child.tag)
            text = (child.text or "").strip()

            # Repeated child elements become a list
            if len(child) > 0:
                config[tag] = [
                    self.substitute((nested.text or "").strip())
                    for nested in child
                    if (nested.text or "").strip()
                ]
            elif text:
                config[tag] = self.substitute(text)
        return config

    def _parse_execution(self, exec_elem: ET.Element) -> PluginExecution:
        goals_elem = _child(exec_elem, "goals")
        goals: tuple[str, ...] = ()
        if goals_elem is not None:
            goals = tuple(
                (goal.text or "").strip() for goal in goals_elem if (goal.text or "").strip()
            )
        return PluginExecution(
            id=_text(exec_elem, "id") or "default",
            goals=goals,
            configuration=self._parse_configuration(_child(exec_elem, "configuration")),
        )

    def plugins(self) -> list[BuildPlugin]:
        """Plugins declared under build/plugins."""
        result: list[BuildPlugin] = []
        build = _child(self.root, "build")
        plugins = _child(build, "plugins") if build is not None else None
        if plugins is None:
            return result

        for plugin_elem in _children(plugins, "plugin"):
            name = self.substitute(_text(plugin_elem, "artifactId"))
            if not name:
                continue
            executions_elem = _child(plugin_elem, "executions")
            executions = (
                tuple(
                    self._parse_execution(e) for e in _children(executions_elem, "execution")
                )
                if executions_elem is not None
                else ()
            )
            result.append(
                BuildPlugin(
                    group=self.substitute(_text(plugin_elem, "groupId")) or DEFAULT_PLUGIN_GROUP,
                    name=name,
                    version=self.substitute(_text(plugin_elem, "version")) or None,
                    executions=executions,
                    configuration=self._parse_configuration(_child(plugin_elem, "configuration")),
                )
            )
        return result


def load_build_context(
    base_dir: Path,
    settings: Settings,
    java_version: str | None = None,
) -> BuildContext:
    """Build a BuildContext from the project's pom.xml.

    Args:
        base_dir: Project directory containing pom.xml.
        settings: Runner settings (local repository, java_home).
        java_version: Version of the Java runtime that will run the compiler.

    Returns:
        BuildContext snapshot of the project.

    Raises:
        ConfigurationError: If pom.xml is missing or malformed.
    """
    reader = PomReader(base_dir)
    artifacts = reader.dependencies(settings.repository.local)
    build_dir = reader.build_dir

    classpath = [str(build_dir / "classes")]
    classpath.extend(
        str(artifact.file)
        for artifact in artifacts
        if artifact.file is not None and artifact.scope in COMPILE_SCOPES
    )

    toolchain = None
    if settings.checker.java_home is not None:
        toolchain = JdkToolchain(home=settings.checker.java_home)

    context = BuildContext(
        base_dir=reader.base_dir,
        build_dir=build_dir,
        packaging=reader.packaging,
        main_source_roots=(reader.source_root("sourceDirectory", DEFAULT_SOURCE_DIRECTORY),),
        test_source_roots=(
            reader.source_root("testSourceDirectory", DEFAULT_TEST_SOURCE_DIRECTORY),
        ),
        artifacts=tuple(artifacts),
        plugins=tuple(reader.plugins()),
        properties=dict(reader.properties),
        compile_classpath=tuple(classpath),
        toolchain=toolchain,
        java_version=java_version,
    )
    logger.debug(f"Loaded build context: {context.to_dict()}")
    return context


def find_runner_plugin(context: BuildContext) -> BuildPlugin | None:
    """Return the checker plugin declaration, whatever its groupId."""
    for plugin in context.plugins:
        if plugin.name == RUNNER_PLUGIN_NAME:
            return plugin
    return None


def read_plugin_options(context: BuildContext) -> dict[str, Any]:
    """Extract checker options from the plugin declaration in the POM.

    Plugin-level configuration is read first; execution configuration
    overrides it.

    Args:
        context: Loaded build context.

    Returns:
        CheckerOptions field overrides, empty when the plugin is not declared.
    """
    plugin = find_runner_plugin(context)
    if plugin is None:
        return {}

    merged: dict[str, ConfigValue] = dict(plugin.configuration)
    for execution in plugin.executions:
        merged.update(execution.configuration)

    return {
        field_name: merged[key]
        for key, field_name in PLUGIN_OPTION_KEYS.items()
        if key in merged
    }


def parse_java_version_output(output: str) -> str | None:
    """Extract the quoted version from ``java -version`` output."""
    match = _JAVA_VERSION_PATTERN.search(output)
    return match.group(1) if match else None


async def probe_java_version(executable: str, timeout: float = 30.0) -> str | None:
    """Ask a Java launcher for its version.

    Args:
        executable: Java launcher path or name.
        timeout: Seconds to wait for the launcher.

    Returns:
        Raw version string (``17.0.2``, ``1.8.0_292``), or None if unavailable.
    """
    try:
        process = await asyncio.create_subprocess_exec(
            executable,
            "-version",
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except OSError as e:
        logger.warning(f"Could not run {executable} -version: {e}")
        return None

    try:
        stdout, _ = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        logger.warning(f"{executable} -version timed out after {timeout} seconds")
        return None

    version = parse_java_version_output(stdout.decode("utf-8", errors="replace"))
    logger.debug(f"Java runtime version reported by {executable}: {version}")
    return version
