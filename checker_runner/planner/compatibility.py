"""Version-compatibility rules deciding which compiler overlays a run needs.

All functions here are pure: they only look at the detected Java versions
and the Checker Framework version.
"""

from dataclasses import dataclass

from checker_runner.planner.versions import VersionPair

# javac internals the checker needs on runtimes with a module system
MODULE_EXPORTS = (
    "jdk.compiler/com.sun.tools.javac.api=ALL-UNNAMED",
    "jdk.compiler/com.sun.tools.javac.code=ALL-UNNAMED",
    "jdk.compiler/com.sun.tools.javac.file=ALL-UNNAMED",
    "jdk.compiler/com.sun.tools.javac.main=ALL-UNNAMED",
    "jdk.compiler/com.sun.tools.javac.model=ALL-UNNAMED",
    "jdk.compiler/com.sun.tools.javac.parser=ALL-UNNAMED",
    "jdk.compiler/com.sun.tools.javac.processing=ALL-UNNAMED",
    "jdk.compiler/com.sun.tools.javac.tree=ALL-UNNAMED",
    "jdk.compiler/com.sun.tools.javac.util=ALL-UNNAMED",
)
MODULE_OPENS = "jdk.compiler/com.sun.tools.javac.comp=ALL-UNNAMED"

BOOTCLASSPATH_PREPEND = "-Xbootclasspath/p:"


@dataclass(frozen=True)
class CheckerVersion:
    """Major/minor components of a Checker Framework version."""

    major: int
    minor: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


@dataclass(frozen=True)
class CompatibilityDecision:
    """Which overlays and flags a run must add to the compiler invocation."""

    needs_alternate_frontend: bool
    needs_annotated_stdlib: bool
    needs_module_visibility_flags: bool

    def to_dict(self) -> dict[str, bool]:
        return {
            "needs_alternate_frontend": self.needs_alternate_frontend,
            "needs_annotated_stdlib": self.needs_annotated_stdlib,
            "needs_module_visibility_flags": self.needs_module_visibility_flags,
        }


def parse_checker_version(version: str | None) -> CheckerVersion | None:
    """Extract major and minor numbers from a version such as ``3.53.0``.

    Args:
        version: Version string.

    Returns:
        CheckerVersion, or None when fewer than two numeric components exist.
    """
    if not version:
        return None
    parts = version.split(".")
    if len(parts) < 2:
        return None
    try:
        return CheckerVersion(major=int(parts[0]), minor=int(parts[1]))
    except ValueError:
        return None


def _is_java8_build(versions: VersionPair) -> bool:
    return versions.runtime_version == 8 and versions.source_version == 8


def needs_module_visibility_flags(versions: VersionPair) -> bool:
    """Runtimes with a module system hide javac internals unless exported."""
    return versions.runtime_version >= 9


def needs_alternate_frontend(versions: VersionPair, checker_version: str | None) -> bool:
    """Whether the Error Prone javac jar must replace the JDK 8 compiler.

    An unparseable checker version counts as requiring the frontend.
    """
    if not _is_java8_build(versions):
        return False
    parsed = parse_checker_version(checker_version)
    if parsed is None:
        return True
    return parsed.major >= 3 or (parsed.major == 2 and parsed.minor >= 11)


def needs_annotated_stdlib(versions: VersionPair, checker_version: str | None) -> bool:
    """Whether the annotated JDK 8 jar must be prepended to the boot classpath.

    An unparseable checker version counts as not requiring the jar: releases
    that shipped it are old enough to be assumed absent.
    """
    if not _is_java8_build(versions):
        return False
    parsed = parse_checker_version(checker_version)
    if parsed is None:
        return False
    return parsed.major < 3 or (parsed.major == 3 and parsed.minor <= 3)


def decide(versions: VersionPair, checker_version: str | None) -> CompatibilityDecision:
    """Derive the full compatibility decision for a run."""
    return CompatibilityDecision(
        needs_alternate_frontend=needs_alternate_frontend(versions, checker_version),
        needs_annotated_stdlib=needs_annotated_stdlib(versions, checker_version),
        needs_module_visibility_flags=needs_module_visibility_flags(versions),
    )


def module_visibility_flags() -> list[str]:
    """Launcher flags exposing javac internals, exports first then the opens."""
    flags = [f"--add-exports={export}" for export in MODULE_EXPORTS]
    flags.append(f"--add-opens={MODULE_OPENS}")
    return flags


def bootclasspath_prepend(path: str) -> str:
    """Argument prepending a jar to the bootstrap search path."""
    return f"{BOOTCLASSPATH_PREPEND}{path}"
