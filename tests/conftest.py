"""Pytest configuration and shared fixtures."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest

from checker_runner.models.build import BuildContext
from checker_runner.planner.resolver import local_repository_path

SAMPLE_POM = """<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <modelVersion>4.0.0</modelVersion>
  <groupId>com.example</groupId>
  <artifactId>sample</artifactId>
  <version>1.0.0</version>
  <properties>
    <maven.compiler.source>17</maven.compiler.source>
    <cf.version>3.42.0</cf.version>
  </properties>
  <dependencies>
    <dependency>
      <groupId>org.checkerframework</groupId>
      <artifactId>checker-qual</artifactId>
      <version>${cf.version}</version>
    </dependency>
    <dependency>
      <groupId>junit</groupId>
      <artifactId>junit</artifactId>
      <version>4.13.2</version>
      <scope>test</scope>
    </dependency>
  </dependencies>
  <build>
    <plugins>
      <plugin>
        <groupId>org.checkerframework</groupId>
        <artifactId>checkerframework-maven-plugin</artifactId>
        <configuration>
          <annotationProcessors>
            <annotationProcessor>org.checkerframework.checker.nullness.NullnessChecker</annotationProcessor>
          </annotationProcessors>
          <extraJavacArgs>
            <arg>-Awarns</arg>
          </extraJavacArgs>
          <failOnError>false</failOnError>
        </configuration>
      </plugin>
    </plugins>
  </build>
</project>
"""


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory that is cleaned up after the test.

    Yields:
        Path to the temporary directory.
    """
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def local_repo(temp_dir: Path) -> Path:
    """Empty local Maven repository."""
    repo = temp_dir / "m2"
    repo.mkdir()
    return repo


@pytest.fixture
def install_jar(local_repo: Path) -> Callable[[str, str, str], Path]:
    """Factory placing a dummy jar in the local repository.

    Returns:
        Function (group, name, version) -> jar path.
    """

    def _install(group: str, name: str, version: str) -> Path:
        jar = local_repository_path(local_repo, group, name, version)
        jar.parent.mkdir(parents=True, exist_ok=True)
        jar.write_bytes(b"PK\x05\x06" + b"\x00" * 18)
        return jar

    return _install


@pytest.fixture
def sample_project(temp_dir: Path) -> Path:
    """Create a Maven project with one main and one test source file.

    Returns:
        Project directory.
    """
    project = temp_dir / "project"
    main_dir = project / "src" / "main" / "java" / "com" / "example"
    test_dir = project / "src" / "test" / "java" / "com" / "example"
    main_dir.mkdir(parents=True)
    test_dir.mkdir(parents=True)
    (project / "pom.xml").write_text(SAMPLE_POM, encoding="utf-8")
    (main_dir / "App.java").write_text("package com.example;\nclass App {}\n")
    (test_dir / "AppTest.java").write_text("package com.example;\nclass AppTest {}\n")
    return project


@pytest.fixture
def make_context(temp_dir: Path) -> Callable[..., BuildContext]:
    """Factory creating a BuildContext rooted in the temporary directory.

    Source roots default to ``src/main/java`` and ``src/test/java`` under the
    base directory; keyword arguments override any field.
    """

    def _make(**overrides) -> BuildContext:
        base_dir = overrides.pop("base_dir", temp_dir / "project")
        base_dir.mkdir(parents=True, exist_ok=True)
        values = {
            "base_dir": base_dir,
            "build_dir": base_dir / "target",
            "main_source_roots": (base_dir / "src" / "main" / "java",),
            "test_source_roots": (base_dir / "src" / "test" / "java",),
            "properties": {"maven.compiler.source": "17"},
            "java_version": "17.0.2",
        }
        values.update(overrides)
        return BuildContext(**values)

    return _make
