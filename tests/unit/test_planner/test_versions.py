"""Tests for Java version detection."""

from pathlib import Path

import pytest

from checker_runner.core.exceptions import ConfigurationError
from checker_runner.models.build import JdkToolchain
from checker_runner.planner.versions import (
    UNKNOWN_VERSION,
    VersionDetector,
    VersionPair,
    parse_java_version,
)


class TestParseJavaVersion:
    """Tests for parse_java_version."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("1.8", 8),
            ("1.8.0_292", 8),
            ("8", 8),
            ("7", 7),
            ("11", 11),
            ("17.0.1", 17),
            ("11-ea", 11),
            ("9+10", 9),
            ("21", 21),
        ],
    )
    def test_known_forms(self, raw: str, expected: int) -> None:
        """Test legacy and modern version strings."""
        assert parse_java_version(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "abc", "x.8", "17abc"])
    def test_unparseable(self, raw: str | None) -> None:
        """Test that garbage yields the unknown marker."""
        assert parse_java_version(raw) == UNKNOWN_VERSION


class _VersionedToolchain:
    def __init__(self, version: str | None) -> None:
        self._version = version

    def find_tool(self, name: str) -> str | None:
        return None

    @property
    def java_version(self) -> str | None:
        return self._version


class _PlainToolchain:
    def find_tool(self, name: str) -> str | None:
        return None


class TestVersionDetector:
    """Tests for VersionDetector."""

    def test_source_from_source_property(self, make_context) -> None:
        """Test maven.compiler.source takes priority."""
        context = make_context(
            properties={"maven.compiler.source": "11", "maven.compiler.target": "17"}
        )
        assert VersionDetector(context).source_version() == 11

    def test_source_falls_back_to_target(self, make_context) -> None:
        """Test maven.compiler.target is used when source is absent."""
        context = make_context(properties={"maven.compiler.target": "1.8"})
        assert VersionDetector(context).source_version() == 8

    def test_source_unknown(self, make_context) -> None:
        """Test missing properties give the unknown marker."""
        context = make_context(properties={})
        assert VersionDetector(context).source_version() == UNKNOWN_VERSION

    def test_runtime_from_versioned_toolchain(self, make_context) -> None:
        """Test a toolchain reporting its version wins over the build runtime."""
        context = make_context(toolchain=_VersionedToolchain("1.8.0_202"), java_version="17")
        assert VersionDetector(context).runtime_version() == 8

    def test_runtime_ignores_plain_toolchain(self, make_context) -> None:
        """Test a toolchain without version capability falls back to the runtime."""
        context = make_context(toolchain=_PlainToolchain(), java_version="21.0.1")
        assert VersionDetector(context).runtime_version() == 21

    def test_runtime_versioned_toolchain_without_version(self, make_context) -> None:
        """Test a JDK toolchain of unknown version falls back to the runtime."""
        context = make_context(toolchain=JdkToolchain(home=Path("/opt/jdk")), java_version="11")
        assert VersionDetector(context).runtime_version() == 11

    def test_detect(self, make_context) -> None:
        """Test both versions are resolved together."""
        context = make_context(properties={"maven.compiler.source": "8"}, java_version="1.8.0")
        assert VersionDetector(context).detect() == VersionPair(8, 8)

    def test_detect_unknown_source_uses_runtime(self, make_context) -> None:
        """Test an unknown source level assumes the runtime version."""
        context = make_context(properties={}, java_version="17")
        assert VersionDetector(context).detect() == VersionPair(17, 17)

    def test_detect_unknown_runtime_is_fatal(self, make_context) -> None:
        """Test an unknown runtime version is rejected."""
        context = make_context(java_version=None)
        with pytest.raises(ConfigurationError):
            VersionDetector(context).detect()

    def test_detect_rejects_old_source(self, make_context) -> None:
        """Test source levels below 8 are rejected."""
        context = make_context(properties={"maven.compiler.source": "1.7"}, java_version="11")
        with pytest.raises(ConfigurationError) as exc_info:
            VersionDetector(context).detect()
        assert exc_info.value.details["config_key"] == "source_version"

    def test_detect_rejects_old_runtime(self, make_context) -> None:
        """Test runtimes below 8 are rejected."""
        context = make_context(properties={"maven.compiler.source": "8"}, java_version="1.7.0_80")
        with pytest.raises(ConfigurationError):
            VersionDetector(context).detect()
