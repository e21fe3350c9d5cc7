"""Source file discovery under compile source roots."""

from fnmatch import fnmatchcase
from pathlib import Path

DEFAULT_INCLUSION_PATTERN = "**/*.java"

# Version-control and editor files never passed to the compiler
DEFAULT_EXCLUDES = (
    "**/*~",
    "**/#*#",
    "**/.#*",
    "**/%*%",
    "**/._*",
    "**/.DS_Store",
    "**/CVS/**",
    "**/.svn/**",
    "**/.git/**",
    "**/.hg/**",
    "**/.bzr/**",
)


def _match_segments(path_parts: list[str], pattern_parts: list[str]) -> bool:
    if not pattern_parts:
        return not path_parts
    head, rest = pattern_parts[0], pattern_parts[1:]
    if head == "**":
        return any(_match_segments(path_parts[i:], rest) for i in range(len(path_parts) + 1))
    if not path_parts:
        return False
    return fnmatchcase(path_parts[0], head) and _match_segments(path_parts[1:], rest)


def matches_pattern(relative_path: str, pattern: str) -> bool:
    """Ant-style match of a ``/``-separated relative path.

    ``*`` and ``?`` stay within one path segment, ``**`` matches zero or
    more whole segments and a trailing ``/`` is shorthand for ``/**``.
    """
    pattern = pattern.replace("\\", "/")
    if pattern.endswith("/"):
        pattern += "**"
    pattern_parts = [part for part in pattern.split("/") if part]
    path_parts = [part for part in relative_path.split("/") if part]
    return _match_segments(path_parts, pattern_parts)


def scan_for_sources(
    source_roots: list[Path],
    includes: list[str] | None = None,
    excludes: list[str] | None = None,
) -> list[Path]:
    """Collect files under the source roots that pass the include/exclude filters.

    Args:
        source_roots: Directories to scan; missing ones are skipped.
        includes: Inclusion patterns, DEFAULT_INCLUSION_PATTERN when empty.
        excludes: Exclusion patterns, combined with DEFAULT_EXCLUDES.

    Returns:
        Absolute source paths, ordered by root then path, without duplicates.
    """
    include_patterns = list(includes) if includes else [DEFAULT_INCLUSION_PATTERN]
    exclude_patterns = [*DEFAULT_EXCLUDES, *(excludes or [])]

    sources: list[Path] = []
    seen: set[Path] = set()
    for root in source_roots:
        if not root.is_dir():
            continue
        root = root.resolve()
        for candidate in sorted(root.rglob("*")):
            if not candidate.is_file():
                continue
            relative = candidate.relative_to(root).as_posix()
            if not any(matches_pattern(relative, p) for p in include_patterns):
                continue
            if any(matches_pattern(relative, p) for p in exclude_patterns):
                continue
            if candidate not in seen:
                seen.add(candidate)
                sources.append(candidate)
    return sources
