"""Tests for Lombok integration."""

from pathlib import Path

import pytest

from checker_runner.models.build import BuildPlugin, DeclaredArtifact, PluginExecution
from checker_runner.models.options import CheckerOptions
from checker_runner.planner.lombok import (
    LOMBOK_ARTIFACT,
    LOMBOK_GROUP,
    LOMBOK_PLUGIN,
    LombokIntegration,
    add_suppress_warnings,
)

LOMBOK_DEPENDENCY = DeclaredArtifact(LOMBOK_GROUP, LOMBOK_ARTIFACT, "1.18.30")


def _lombok_plugin(*executions: PluginExecution, **configuration) -> BuildPlugin:
    return BuildPlugin(
        group=LOMBOK_GROUP,
        name=LOMBOK_PLUGIN,
        executions=executions,
        configuration=configuration,
    )


class TestAddSuppressWarnings:
    """Tests for the -AsuppressWarnings merge."""

    def test_appends_when_absent(self) -> None:
        assert add_suppress_warnings(["-Awarns"]) == [
            "-Awarns",
            "-AsuppressWarnings=type.anno.before.modifier",
        ]

    def test_merges_into_existing(self) -> None:
        args = ["-AsuppressWarnings=nullness", "-Awarns"]
        assert add_suppress_warnings(args) == [
            "-AsuppressWarnings=nullness,type.anno.before.modifier",
            "-Awarns",
        ]

    def test_unchanged_when_key_present(self) -> None:
        args = ["-AsuppressWarnings=nullness,type.anno.before.modifier"]
        assert add_suppress_warnings(args) == args

    def test_only_first_occurrence_is_extended(self) -> None:
        args = ["-AsuppressWarnings=a", "-AsuppressWarnings=b"]
        assert add_suppress_warnings(args) == [
            "-AsuppressWarnings=a,type.anno.before.modifier",
            "-AsuppressWarnings=b",
        ]

    def test_input_is_not_mutated(self) -> None:
        args = ["-AsuppressWarnings=nullness"]
        add_suppress_warnings(args)
        assert args == ["-AsuppressWarnings=nullness"]


class TestLombokDetection:
    """Tests for Lombok usage detection."""

    def test_not_used(self, make_context) -> None:
        integration = LombokIntegration(make_context(), CheckerOptions())
        assert integration.is_lombok_used() is False
        assert integration.detect().is_used is False

    def test_used_via_dependency(self, make_context) -> None:
        integration = LombokIntegration(make_context(artifacts=(LOMBOK_DEPENDENCY,)), CheckerOptions())
        assert integration.is_lombok_used() is True

    def test_used_via_plugin(self, make_context) -> None:
        integration = LombokIntegration(make_context(plugins=(_lombok_plugin(),)), CheckerOptions())
        assert integration.is_lombok_used() is True

    def test_state_is_cached(self, make_context) -> None:
        integration = LombokIntegration(make_context(), CheckerOptions())
        assert integration.detect() is integration.detect()


class TestDelombokDirectories:
    """Tests for delombok output directory discovery."""

    def test_execution_output_directory(self, make_context) -> None:
        """Test placeholders are substituted in the delombok execution config."""
        plugin = _lombok_plugin(
            PluginExecution(
                id="delombok",
                goals=("delombok",),
                configuration={"outputDirectory": "${project.build.directory}/delombok"},
            )
        )
        context = make_context(plugins=(plugin,))
        state = LombokIntegration(context, CheckerOptions()).detect()
        assert state.delombok_output_dir == context.build_dir / "delombok"

    def test_plugin_level_output_directory(self, make_context) -> None:
        """Test relative paths are anchored at the base directory."""
        context = make_context(plugins=(_lombok_plugin(outputDirectory="generated/delombok"),))
        state = LombokIntegration(context, CheckerOptions()).detect()
        assert state.delombok_output_dir == context.base_dir.resolve() / "generated" / "delombok"

    def test_basedir_placeholder(self, make_context) -> None:
        context = make_context(plugins=(_lombok_plugin(outputDirectory="${project.basedir}/out"),))
        state = LombokIntegration(context, CheckerOptions()).detect()
        assert state.delombok_output_dir == context.base_dir.resolve() / "out"

    def test_no_configured_directory(self, make_context) -> None:
        context = make_context(artifacts=(LOMBOK_DEPENDENCY,))
        state = LombokIntegration(context, CheckerOptions()).detect()
        assert state.is_used is True
        assert state.delombok_output_dir is None
        assert state.has_delombok_output is False

    def test_test_delombok_execution(self, make_context) -> None:
        plugin = _lombok_plugin(
            PluginExecution(
                id="test-delombok",
                goals=("testDelombok",),
                configuration={"outputDirectory": "${project.build.directory}/test-delombok"},
            )
        )
        context = make_context(plugins=(plugin,))
        state = LombokIntegration(context, CheckerOptions()).detect()
        assert state.test_delombok_output_dir == context.build_dir / "test-delombok"

    def test_test_delombok_convention(self, make_context) -> None:
        """Test the conventional test delombok directory is used only if it exists."""
        context = make_context(artifacts=(LOMBOK_DEPENDENCY,))
        assert LombokIntegration(context, CheckerOptions()).detect().test_delombok_output_dir is None

        convention = context.build_dir / "generated-test-sources" / "delombok"
        convention.mkdir(parents=True)
        state = LombokIntegration(context, CheckerOptions()).detect()
        assert state.test_delombok_output_dir == convention
        assert state.has_test_delombok_output is True


class TestSourceSelection:
    """Tests for select_source_roots."""

    def test_delombok_output_replaces_main_roots(self, make_context) -> None:
        context = make_context(plugins=(_lombok_plugin(outputDirectory="target/delombok"),))
        delombok = context.base_dir.resolve() / "target" / "delombok"
        delombok.mkdir(parents=True)
        test_root = context.test_source_roots[0]

        main, test = LombokIntegration(context, CheckerOptions()).select_source_roots(
            list(context.main_source_roots), [test_root]
        )

        assert main == [delombok]
        assert test == [test_root]

    def test_missing_output_keeps_original_roots(self, make_context) -> None:
        context = make_context(plugins=(_lombok_plugin(outputDirectory="target/delombok"),))
        roots = list(context.main_source_roots)
        main, _ = LombokIntegration(context, CheckerOptions()).select_source_roots(roots, [])
        assert main == roots

    def test_excluded_tests_stay_excluded(self, make_context) -> None:
        context = make_context(artifacts=(LOMBOK_DEPENDENCY,))
        (context.build_dir / "generated-test-sources" / "delombok").mkdir(parents=True)
        _, test = LombokIntegration(context, CheckerOptions()).select_source_roots([], [])
        assert test == []


class TestSuppressionOption:
    """Tests for add_suppress_warnings_if_needed."""

    @pytest.mark.parametrize(
        "artifacts, suppress, expected",
        [
            ((LOMBOK_DEPENDENCY,), True, ["-AsuppressWarnings=type.anno.before.modifier"]),
            ((LOMBOK_DEPENDENCY,), False, []),
            ((), True, []),
        ],
    )
    def test_conditions(self, make_context, artifacts, suppress: bool, expected: list[str]) -> None:
        integration = LombokIntegration(
            make_context(artifacts=artifacts),
            CheckerOptions(suppress_lombok_warnings=suppress),
        )
        assert integration.add_suppress_warnings_if_needed([]) == expected


class TestHandleIntegration:
    """Tests for handle_integration logging."""

    def test_warns_for_builder_checkers(self, make_context, caplog: pytest.LogCaptureFixture) -> None:
        options = CheckerOptions(
            processors=["org.checkerframework.checker.calledmethods.CalledMethodsChecker"]
        )
        integration = LombokIntegration(make_context(artifacts=(LOMBOK_DEPENDENCY,)), options)

        with caplog.at_level("WARNING"):
            state = integration.handle_integration()

        assert state.is_used is True
        assert "lombok.addLombokGeneratedAnnotation" in caplog.text
        assert "delombok output directory was not found" in caplog.text

    def test_silent_without_lombok(self, make_context, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("INFO"):
            LombokIntegration(make_context(), CheckerOptions()).handle_integration()
        assert "Lombok" not in caplog.text

    def test_resolve_path_absolute(self, make_context, temp_dir: Path) -> None:
        integration = LombokIntegration(make_context(), CheckerOptions())
        assert integration.resolve_path(str(temp_dir / "abs")) == temp_dir / "abs"
