"""Lombok integration: delombok output detection and false-positive suppression.

When a project uses Lombok the checker should analyze delomboked sources,
which the lombok-maven-plugin writes to a configurable directory.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from checker_runner.core.logger.logger import get_logger
from checker_runner.models.build import BuildContext, BuildPlugin, ConfigValue
from checker_runner.models.options import CheckerOptions

logger = get_logger(__name__)

LOMBOK_GROUP = "org.projectlombok"
LOMBOK_ARTIFACT = "lombok"
LOMBOK_PLUGIN = "lombok-maven-plugin"

DELOMBOK_GOAL = "delombok"
TEST_DELOMBOK_GOAL = "testDelombok"
OUTPUT_DIRECTORY_KEY = "outputDirectory"
TEST_DELOMBOK_CONVENTION = Path("generated-test-sources") / "delombok"

BUILD_DIRECTORY_PLACEHOLDER = "${project.build.directory}"
BASEDIR_PLACEHOLDER = "${project.basedir}"

SUPPRESS_WARNINGS_PREFIX = "-AsuppressWarnings"
LOMBOK_SUPPRESSION_KEY = "type.anno.before.modifier"

# Checkers whose builder analysis depends on @Generated annotations from Lombok
BUILDER_SENSITIVE_CHECKERS = ("ObjectConstructionChecker", "CalledMethodsChecker")


@dataclass(frozen=True)
class LombokState:
    """Lombok facts sampled once per run."""

    is_used: bool = False
    delombok_output_dir: Path | None = None
    test_delombok_output_dir: Path | None = None

    @property
    def has_delombok_output(self) -> bool:
        return self.delombok_output_dir is not None and self.delombok_output_dir.is_dir()

    @property
    def has_test_delombok_output(self) -> bool:
        return (
            self.test_delombok_output_dir is not None
            and self.test_delombok_output_dir.is_dir()
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_used": self.is_used,
            "delombok_output_dir": str(self.delombok_output_dir) if self.delombok_output_dir else None,
            "test_delombok_output_dir": (
                str(self.test_delombok_output_dir) if self.test_delombok_output_dir else None
            ),
        }


def add_suppress_warnings(
    args: list[str],
    key: str = LOMBOK_SUPPRESSION_KEY,
) -> list[str]:
    """Merge a warning key into the ``-AsuppressWarnings`` argument.

    The first existing suppression argument is extended in place (comma
    separated) unless it already names the key; otherwise a new argument is
    appended.

    Args:
        args: Existing compiler arguments.
        key: Warning key to suppress.

    Returns:
        New argument list.
    """
    merged = list(args)
    for index, arg in enumerate(merged):
        if not arg.startswith(SUPPRESS_WARNINGS_PREFIX):
            continue
        _, _, value = arg.partition("=")
        if key in value:
            return merged
        merged[index] = f"{arg},{key}" if value else f"{SUPPRESS_WARNINGS_PREFIX}={key}"
        logger.debug(f"Appended {key} to existing suppressWarnings: {merged[index]}")
        return merged

    merged.append(f"{SUPPRESS_WARNINGS_PREFIX}={key}")
    logger.debug(f"Added {SUPPRESS_WARNINGS_PREFIX}={key} for Lombok-generated code")
    return merged


def _config_text(configuration: dict[str, ConfigValue], key: str) -> str | None:
    value = configuration.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class LombokIntegration:
    """Detects Lombok usage and adapts the checker run to it."""

    def __init__(self, context: BuildContext, options: CheckerOptions) -> None:
        self.context = context
        self.options = options
        self._state: LombokState | None = None

    def detect(self) -> LombokState:
        """Compute the Lombok state once; later calls reuse it."""
        if self._state is None:
            used = self.is_lombok_used()
            self._state = LombokState(
                is_used=used,
                delombok_output_dir=self._find_output_directory(DELOMBOK_GOAL) if used else None,
                test_delombok_output_dir=self._find_test_output_directory() if used else None,
            )
        return self._state

    def is_lombok_used(self) -> bool:
        """Lombok is used when declared as a dependency or through its Maven plugin."""
        if self.context.find_artifact(LOMBOK_GROUP, LOMBOK_ARTIFACT) is not None:
            return True
        return self._lombok_plugin() is not None

    def has_builder_sensitive_checker(self) -> bool:
        return any(
            marker in processor
            for processor in self.options.processors
            for marker in BUILDER_SENSITIVE_CHECKERS
        )

    def handle_integration(self) -> LombokState:
        """Detect Lombok and log what the run will do about it."""
        state = self.detect()
        if not state.is_used:
            return state

        logger.info("Lombok detected in project. Checking for delombok output directory.")

        if self.has_builder_sensitive_checker():
            logger.warning(
                "The Object Construction or Called Methods Checker is enabled on a Lombok project. "
                "Ensure that lombok.config contains 'lombok.addLombokGeneratedAnnotation = true', "
                "or all warnings related to misuse of Lombok builders will be disabled."
            )

        if state.has_delombok_output:
            logger.info(f"Found delombok output directory: {state.delombok_output_dir}")
            logger.info(
                "Make sure delombok is configured to generate @Generated annotations."
            )
        else:
            logger.warning(
                "Lombok is detected but the delombok output directory was not found. "
                "Checking original source files, which may contain Lombok annotations."
            )

        if state.has_test_delombok_output:
            logger.info(f"Found test delombok output directory: {state.test_delombok_output_dir}")
        return state

    def select_source_roots(
        self,
        main_roots: list[Path],
        test_roots: list[Path],
    ) -> tuple[list[Path], list[Path]]:
        """Swap original source roots for delombok output where available.

        Args:
            main_roots: Main source roots.
            test_roots: Test source roots.

        Returns:
            Effective (main, test) source roots.
        """
        state = self.detect()
        if state.has_delombok_output and state.delombok_output_dir is not None:
            main_roots = [state.delombok_output_dir]
        if test_roots and state.has_test_delombok_output and state.test_delombok_output_dir is not None:
            test_roots = [state.test_delombok_output_dir]
        return main_roots, test_roots

    def add_suppress_warnings_if_needed(self, args: list[str]) -> list[str]:
        """Suppress ``type.anno.before.modifier`` for Lombok projects when enabled."""
        if not self.options.suppress_lombok_warnings or not self.detect().is_used:
            return list(args)
        return add_suppress_warnings(args)

    def _lombok_plugin(self) -> BuildPlugin | None:
        return self.context.find_plugin(LOMBOK_GROUP, LOMBOK_PLUGIN)

    def _find_output_directory(self, goal: str) -> Path | None:
        plugin = self._lombok_plugin()
        if plugin is None:
            return None

        for execution in plugin.executions:
            if goal in execution.goals:
                configured = _config_text(execution.configuration, OUTPUT_DIRECTORY_KEY)
                if configured:
                    return self.resolve_path(configured)

        if goal != DELOMBOK_GOAL:
            return None
        configured = _config_text(plugin.configuration, OUTPUT_DIRECTORY_KEY)
        return self.resolve_path(configured) if configured else None

    def _find_test_output_directory(self) -> Path | None:
        configured = self._find_output_directory(TEST_DELOMBOK_GOAL)
        if configured is not None:
            return configured
        convention = self.context.build_dir / TEST_DELOMBOK_CONVENTION
        return convention if convention.is_dir() else None

    def resolve_path(self, path: str) -> Path:
        """Substitute build placeholders and anchor relative paths at the base directory."""
        base_dir = self.context.base_dir.resolve()
        resolved = path.replace(BUILD_DIRECTORY_PLACEHOLDER, str(self.context.build_dir))
        resolved = resolved.replace(BASEDIR_PLACEHOLDER, str(base_dir))
        candidate = Path(resolved)
        if not candidate.is_absolute():
            candidate = base_dir / candidate
        return candidate
