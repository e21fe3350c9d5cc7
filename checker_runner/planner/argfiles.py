"""Compiler argument files (``@file``) used to dodge command-line length limits."""

import os
import tempfile
from pathlib import Path
from types import TracebackType

from checker_runner.core.logger.logger import get_logger

logger = get_logger(__name__)

REFERENCE_PREFIX = "@"


def quote_argument(arg: str) -> str:
    """Quote an argument for javac's argument-file syntax when it contains whitespace."""
    if not any(ch.isspace() for ch in arg) and '"' not in arg:
        return arg
    escaped = arg.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def reference_argument(path: Path) -> str:
    """The compiler token that reads arguments from ``path``."""
    return f"{REFERENCE_PREFIX}{path.resolve()}"


class ReferenceFiles:
    """Scope owning the temporary argument files of one run.

    Every file written through this object is deleted when the scope exits,
    whether the run succeeded, the checker failed or an exception escaped.
    """

    def __init__(self, prefix: str = "checker-runner-", directory: Path | None = None) -> None:
        self.prefix = prefix
        self.directory = directory
        self._files: list[Path] = []

    def __enter__(self) -> "ReferenceFiles":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.cleanup()

    @property
    def files(self) -> list[Path]:
        return list(self._files)

    def write_lines(self, lines: list[str], suffix: str) -> str:
        """Write lines to a new temporary file.

        Args:
            lines: Argument-file lines, already quoted.
            suffix: File name suffix.

        Returns:
            ``@``-prefixed reference to the file.
        """
        fd, name = tempfile.mkstemp(prefix=self.prefix, suffix=suffix, dir=self.directory)
        path = Path(name)
        self._files.append(path)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            for line in lines:
                f.write(line)
                f.write("\n")
        return reference_argument(path)

    def write_classpath(self, elements: list[str]) -> str:
        """Write a ``-cp`` entry holding the joined classpath."""
        classpath = os.pathsep.join(elements)
        return self.write_lines([f"-cp {quote_argument(classpath)}"], suffix=".classpath")

    def write_sources(self, sources: list[Path]) -> str:
        """Write one absolute source path per line."""
        lines = [quote_argument(str(source.resolve())) for source in sources]
        return self.write_lines(lines, suffix=".src_files")

    def cleanup(self) -> None:
        """Delete every file created in this scope."""
        while self._files:
            path = self._files.pop()
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not delete temporary file {path}: {e}")
