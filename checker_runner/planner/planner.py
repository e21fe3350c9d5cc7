"""Invocation planner: turns a build into a Checker Framework compiler run.

A run goes through these steps:

1. Decide whether to run at all (skip flag, aggregator packaging, no checkers)
2. Detect source and runtime Java versions
3. Decide the compatibility branch and resolve the support jars it needs
4. Detect Lombok and pick the effective source roots
5. Assemble the ordered invocation, with classpath and sources in @files
6. Execute it and turn the exit code into a pass/fail result
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from checker_runner.core.config.settings import RepositorySettings, get_settings
from checker_runner.core.exceptions import (
    CheckerExecutionError,
    CheckerFailureError,
)
from checker_runner.core.logger.logger import get_logger
from checker_runner.models.build import BuildContext
from checker_runner.models.options import CheckerOptions
from checker_runner.planner.argfiles import ReferenceFiles
from checker_runner.planner.command import (
    JAVAC_MAIN_CLASS,
    PROCESS_ONLY_FLAG,
    CommandBuilder,
    InvocationPlan,
    Section,
)
from checker_runner.planner.compatibility import (
    CompatibilityDecision,
    bootclasspath_prepend,
    decide,
    module_visibility_flags,
)
from checker_runner.planner.executor import CommandExecutor, ProcessExecutor, ProcessResult
from checker_runner.planner.lombok import LombokIntegration, LombokState
from checker_runner.planner.resolver import (
    ANNOTATED_JDK_NAME,
    CHECKER_GROUP,
    CHECKER_NAME,
    CHECKER_QUAL_NAME,
    ERRORPRONE_GROUP,
    ERRORPRONE_JAVAC_NAME,
    ERRORPRONE_JAVAC_VERSION,
    ArtifactResolver,
    ResolutionReport,
    ResolvedArtifact,
)
from checker_runner.planner.sources import scan_for_sources
from checker_runner.planner.versions import VersionDetector, VersionPair

logger = get_logger(__name__)

DEFAULT_CHECKER_FRAMEWORK_VERSION = "3.53.0"

# Aggregator projects carry no code of their own
AGGREGATOR_PACKAGING = "pom"


@dataclass
class CheckResult:
    """Result of a checker run.

    Attributes:
        success: Whether the checker passed (or its failure was tolerated).
        return_code: Exit code of the compiler process.
        lines: Captured compiler output.
        error_lines: Output lines flagged as errors.
        command: Shell rendering of the executed command.
        duration_seconds: Time taken by the compiler.
        skipped: Whether the run was skipped.
        skip_reason: Why the run was skipped.
    """

    success: bool
    return_code: int = 0
    lines: list[str] = field(default_factory=list)
    error_lines: list[str] = field(default_factory=list)
    command: str | None = None
    duration_seconds: float = 0.0
    skipped: bool = False
    skip_reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "success": self.success,
            "return_code": self.return_code,
            "error_count": len(self.error_lines),
            "duration_seconds": self.duration_seconds,
            "command": self.command,
            "skipped": self.skipped,
            "skip_reason": self.skip_reason,
        }


@dataclass(frozen=True)
class PlanningContext:
    """Values resolved once for a run and threaded through planning."""

    executable: str
    versions: VersionPair
    checker_version: str
    decision: CompatibilityDecision
    processor_path: ResolutionReport
    alternate_frontend: ResolvedArtifact | None
    annotated_stdlib: ResolvedArtifact | None
    lombok: LombokState
    source_files: tuple[Path, ...]
    extra_args: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "executable": self.executable,
            "versions": self.versions.to_dict(),
            "checker_version": self.checker_version,
            "decision": self.decision.to_dict(),
            "processor_path": [str(p) for p in self.processor_path.files],
            "alternate_frontend": self.alternate_frontend.to_dict() if self.alternate_frontend else None,
            "annotated_stdlib": self.annotated_stdlib.to_dict() if self.annotated_stdlib else None,
            "lombok": self.lombok.to_dict(),
            "source_count": len(self.source_files),
        }


def resolve_executable(executable: str, context: BuildContext) -> str:
    """Locate the Java launcher.

    An existing path is used directly; otherwise the toolchain is asked, and
    finally the bare name is left for PATH lookup.
    """
    candidate = Path(executable)
    if candidate.exists():
        return str(candidate.resolve())
    if context.toolchain is not None:
        tool = context.toolchain.find_tool(executable)
        if tool:
            return tool
    return executable


def resolve_checker_version(context: BuildContext, options: CheckerOptions) -> str:
    """Pick the Checker Framework version.

    Priority: explicit option, checker-qual dependency version, default.
    """
    if options.checker_version:
        return options.checker_version
    qual = context.find_artifact(CHECKER_GROUP, CHECKER_QUAL_NAME)
    if qual is not None and qual.version:
        return qual.version
    return DEFAULT_CHECKER_FRAMEWORK_VERSION


def default_resolver(
    context: BuildContext,
    repository: RepositorySettings | None = None,
    offline: bool = False,
) -> ArtifactResolver:
    """Resolver configured from repository settings (global settings by default)."""
    repository = repository or get_settings().repository
    return ArtifactResolver.for_build(
        context,
        local_repository=repository.local,
        remote_url=None if offline or repository.offline else repository.remote_url,
        timeout=repository.timeout,
        plugin_classpath=repository.plugin_classpath,
    )


class InvocationPlanner:
    """Plans and runs the Checker Framework for one build."""

    def __init__(
        self,
        context: BuildContext,
        options: CheckerOptions,
        resolver: ArtifactResolver | None = None,
        executor: CommandExecutor | None = None,
    ) -> None:
        """Initialize the planner.

        Args:
            context: Build being checked.
            options: User-facing checker options.
            resolver: Artifact resolver for this run, built from settings by default.
            executor: Command executor, a ProcessExecutor by default.
        """
        self.context = context
        self.options = options
        self.resolver = resolver or default_resolver(context)
        self.executor = executor or ProcessExecutor(timeout=options.timeout)
        self.lombok = LombokIntegration(context, options)

    def skip_reason(self) -> str | None:
        """Return why the run should be skipped, or None to run."""
        if self.options.skip:
            return "Execution is skipped"
        if self.context.packaging == AGGREGATOR_PACKAGING:
            return f"Execution is skipped for project with packaging '{AGGREGATOR_PACKAGING}'"
        if not self.options.processors:
            return "Skipping Checker Framework: No checkers configured."
        return None

    async def prepare(self) -> PlanningContext:
        """Resolve everything the invocation depends on.

        Raises:
            ConfigurationError: If the Java versions are unusable.
        """
        versions = VersionDetector(self.context).detect()
        checker_version = resolve_checker_version(self.context, self.options)
        logger.info(f"Starting Checker Framework analysis with version: {checker_version}")

        decision = decide(versions, checker_version)
        logger.debug(f"Compatibility decision: {decision.to_dict()}")

        processor_path = await self.resolver.resolve_all(
            [
                (CHECKER_GROUP, CHECKER_NAME, checker_version),
                (CHECKER_GROUP, CHECKER_QUAL_NAME, checker_version),
            ]
        )
        if not processor_path.found:
            logger.warning("Could not find Checker Framework JAR. Trying to use classpath instead.")

        alternate_frontend = None
        if decision.needs_alternate_frontend:
            alternate_frontend = await self.resolver.resolve(
                ERRORPRONE_GROUP, ERRORPRONE_JAVAC_NAME, ERRORPRONE_JAVAC_VERSION
            )
        annotated_stdlib = None
        if decision.needs_annotated_stdlib:
            annotated_stdlib = await self.resolver.resolve(
                CHECKER_GROUP, ANNOTATED_JDK_NAME, checker_version
            )

        lombok = self.lombok.handle_integration()
        main_roots, test_roots = self.lombok.select_source_roots(
            list(self.context.main_source_roots),
            [] if self.options.exclude_tests else list(self.context.test_source_roots),
        )
        source_files = scan_for_sources(
            [*main_roots, *test_roots], self.options.includes, self.options.excludes
        )

        extra_args = self.lombok.add_suppress_warnings_if_needed(self.options.extra_args)

        return PlanningContext(
            executable=resolve_executable(self.options.executable, self.context),
            versions=versions,
            checker_version=checker_version,
            decision=decision,
            processor_path=processor_path,
            alternate_frontend=alternate_frontend,
            annotated_stdlib=annotated_stdlib,
            lombok=lombok,
            source_files=tuple(source_files),
            extra_args=tuple(extra_args),
        )

    def plan(self, planning: PlanningContext, references: ReferenceFiles) -> InvocationPlan:
        """Assemble the compiler invocation.

        Args:
            planning: Values resolved by :meth:`prepare`.
            references: Scope receiving the classpath and source argument files.

        Returns:
            Ordered InvocationPlan.
        """
        builder = CommandBuilder()
        builder.set(Section.EXECUTABLE, planning.executable)

        if planning.decision.needs_module_visibility_flags:
            builder.extend(Section.MODULE_FLAGS, module_visibility_flags())

        frontend = planning.alternate_frontend
        if frontend is not None and frontend.file is not None:
            builder.set(Section.FRONTEND_OVERRIDE, bootclasspath_prepend(str(frontend.file)))

        processor_path = os.pathsep.join(str(p) for p in planning.processor_path.files)
        if processor_path:
            builder.set(Section.LAUNCHER_CLASSPATH, "-classpath", processor_path)
        builder.set(Section.MAIN_CLASS, JAVAC_MAIN_CLASS)

        if self.context.compile_classpath:
            builder.set(
                Section.CLASSPATH_REFERENCE,
                references.write_classpath(list(self.context.compile_classpath)),
            )

        if processor_path:
            builder.set(Section.PROCESSOR_PATH, "-processorpath", processor_path)
            logger.debug(f"Using processorpath: {processor_path}")

        builder.set(Section.PROCESSOR, "-processor", ",".join(self.options.processors))

        if self.options.proc_only:
            builder.set(Section.PROCESSING_MODE, PROCESS_ONLY_FLAG)

        stdlib = planning.annotated_stdlib
        if stdlib is not None and stdlib.file is not None:
            builder.set(Section.STDLIB_OVERLAY, bootclasspath_prepend(str(stdlib.file)))

        builder.extend(Section.EXTRA_ARGS, list(planning.extra_args))
        builder.set(
            Section.SOURCES_REFERENCE,
            references.write_sources(list(planning.source_files)),
        )
        return builder.build()

    async def execute(self, plan: InvocationPlan) -> ProcessResult:
        """Run a plan through the executor."""
        return await self.executor.execute(plan.to_list())

    async def run(self) -> CheckResult:
        """Plan and execute the checker.

        Returns:
            CheckResult of the run.

        Raises:
            ConfigurationError: If the Java versions are unusable.
            CheckerFailureError: If the checker reports errors and
                fail_on_error is set.
            CheckerExecutionError: If the compiler could not be run.
        """
        reason = self.skip_reason()
        if reason:
            logger.info(reason)
            return CheckResult(success=True, skipped=True, skip_reason=reason)

        logger.info(f"Running processor(s): {','.join(self.options.processors)}")
        planning = await self.prepare()
        if not planning.source_files:
            logger.info("No source files found to check.")
            return CheckResult(success=True, skipped=True, skip_reason="No source files found")

        with ReferenceFiles() as references:
            try:
                plan = self.plan(planning, references)
            except OSError as e:
                raise CheckerExecutionError(
                    f"Could not write compiler argument files: {e}",
                    command=planning.executable,
                ) from e
            command = plan.to_shell()
            logger.info(f"Executing command:\n{command}")
            outcome = await self.execute(plan)

        return self._interpret(outcome, command)

    def _interpret(self, outcome: ProcessResult, command: str) -> CheckResult:
        result = CheckResult(
            success=outcome.success,
            return_code=outcome.return_code,
            lines=outcome.lines,
            error_lines=outcome.error_lines,
            command=command,
            duration_seconds=outcome.duration_seconds,
        )
        if outcome.success:
            logger.info("Checker Framework analysis completed successfully.")
            return result

        if self.options.fail_on_error:
            raise CheckerFailureError(
                "Checker Framework found errors.",
                return_code=outcome.return_code,
                details={"error_count": len(outcome.error_lines)},
            )

        logger.warning(
            f"Checker Framework found errors (exit code {outcome.return_code}); "
            "not failing because fail_on_error is disabled."
        )
        result.success = True
        return result
