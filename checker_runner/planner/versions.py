"""Java version detection for the build source level and the build runtime."""

import re
from dataclasses import dataclass

from checker_runner.core.exceptions import ConfigurationError
from checker_runner.core.logger.logger import get_logger
from checker_runner.models.build import BuildContext, VersionedToolchain

logger = get_logger(__name__)

# Returned when a version string is missing or cannot be parsed
UNKNOWN_VERSION = -1

# Oldest Java release the Checker Framework supports
MINIMUM_JAVA_VERSION = 8

SOURCE_VERSION_PROPERTIES = ("maven.compiler.source", "maven.compiler.target")

_LEADING_INT = re.compile(r"^(\d+)(?:[.\-+]|$)")


def parse_java_version(raw: str | None) -> int:
    """Normalize a Java version string to its major version.

    Handles the legacy ``1.N`` scheme (and its bare ``N`` shorthand for
    N <= 8) as well as modern ``17.0.1``, ``11-ea`` and ``9+10`` forms.

    Args:
        raw: Version string as found in build properties or a runtime.

    Returns:
        Major version number, or UNKNOWN_VERSION if unparseable.
    """
    if raw is None:
        return UNKNOWN_VERSION

    version = raw.strip()
    if not version:
        return UNKNOWN_VERSION

    if version.isdigit() and int(version) <= 8:
        version = f"1.{version}"

    if version.startswith("1."):
        version = version[2:]

    match = _LEADING_INT.match(version)
    if not match:
        return UNKNOWN_VERSION
    return int(match.group(1))


@dataclass(frozen=True)
class VersionPair:
    """Source and runtime major versions of one run."""

    source_version: int
    runtime_version: int

    def to_dict(self) -> dict[str, int]:
        return {
            "source_version": self.source_version,
            "runtime_version": self.runtime_version,
        }


class VersionDetector:
    """Determines the configured source level and the executing runtime version."""

    def __init__(self, context: BuildContext) -> None:
        self.context = context

    def source_version(self) -> int:
        """Return the configured source level, or UNKNOWN_VERSION."""
        for key in SOURCE_VERSION_PROPERTIES:
            raw = self.context.properties.get(key)
            if raw:
                return parse_java_version(raw)
        return UNKNOWN_VERSION

    def runtime_version(self) -> int:
        """Return the major version of the Java runtime running the compiler."""
        toolchain = self.context.toolchain
        if isinstance(toolchain, VersionedToolchain) and toolchain.java_version:
            return parse_java_version(toolchain.java_version)
        return parse_java_version(self.context.java_version)

    def detect(self) -> VersionPair:
        """Resolve both versions once for a run.

        Returns:
            VersionPair with both versions verified to be at least 8.

        Raises:
            ConfigurationError: If the runtime version is unknown or either
                version is below the supported minimum.
        """
        runtime = self.runtime_version()
        if runtime == UNKNOWN_VERSION:
            raise ConfigurationError(
                "Unable to determine the Java runtime version",
                config_key="java.version",
                details={"java_version": self.context.java_version},
            )

        source = self.source_version()
        if source == UNKNOWN_VERSION:
            logger.warning(
                "No usable maven.compiler.source/target property found; "
                f"assuming the runtime version ({runtime})"
            )
            source = runtime

        for label, value in (("source", source), ("runtime", runtime)):
            if value < MINIMUM_JAVA_VERSION:
                raise ConfigurationError(
                    f"Java {label} version {value} is not supported; "
                    f"the Checker Framework requires Java {MINIMUM_JAVA_VERSION} or later",
                    config_key=f"{label}_version",
                )

        versions = VersionPair(source_version=source, runtime_version=runtime)
        logger.debug(f"Detected Java versions: {versions.to_dict()}")
        return versions
