"""Artifact resolution through an ordered chain of sources.

Tiers, tried in order until one yields a file:

1. Declared dependencies of the project (a pinned version always wins)
2. The local Maven repository cache (no network)
3. A remote Maven repository, downloading into the local cache
4. A marker-resource lookup on the runner's own classpath (checker jar only)
"""

import os
import zipfile
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import unquote

import httpx

from checker_runner.core.exceptions import ArtifactResolutionError
from checker_runner.core.logger.logger import get_logger
from checker_runner.models.build import BuildContext

logger = get_logger(__name__)

CHECKER_GROUP = "org.checkerframework"
CHECKER_NAME = "checker"
CHECKER_QUAL_NAME = "checker-qual"
ANNOTATED_JDK_NAME = "jdk8"
ERRORPRONE_GROUP = "com.google.errorprone"
ERRORPRONE_JAVAC_NAME = "javac"
ERRORPRONE_JAVAC_VERSION = "9+181-r4173-1"

# A class known to live inside the checker jar
CHECKER_MARKER_RESOURCE = "org/checkerframework/checker/nullness/NullnessChecker.class"


@dataclass(frozen=True)
class ResolvedArtifact:
    """Outcome of resolving one artifact.

    Attributes:
        group: Maven groupId.
        name: Maven artifactId.
        version: Version actually resolved (declared version when pinned).
        file: Jar location, None when every tier failed.
        source: Name of the tier that produced the file.
    """

    group: str
    name: str
    version: str
    file: Path | None = None
    source: str | None = None

    @property
    def found(self) -> bool:
        return self.file is not None

    @property
    def coordinates(self) -> str:
        return f"{self.group}:{self.name}:{self.version}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "coordinates": self.coordinates,
            "file": str(self.file) if self.file else None,
            "source": self.source,
        }


@dataclass
class ResolutionReport:
    """Result of resolving a group of co-required artifacts."""

    found: list[ResolvedArtifact] = field(default_factory=list)
    missing: list[ResolvedArtifact] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.missing

    @property
    def is_degraded(self) -> bool:
        """Some, but not all, artifacts were found."""
        return bool(self.found) and bool(self.missing)

    @property
    def files(self) -> list[Path]:
        return [artifact.file for artifact in self.found if artifact.file is not None]


def local_repository_path(repository: Path, group: str, name: str, version: str) -> Path:
    """Conventional Maven repository layout path of a jar."""
    return (
        repository.joinpath(*group.split("."))
        / name
        / version
        / f"{name}-{version}.jar"
    )


def location_to_path(location: str) -> Path:
    """Convert a code-source location URL into a filesystem path.

    Handles ``jar:file:/a/b.jar!/pkg/Cls.class`` and ``file:/a%20b/c.jar``
    forms as well as plain paths.
    """
    decoded = unquote(location)
    if decoded.startswith("jar:"):
        decoded = decoded[len("jar:"):]
    if "!/" in decoded:
        decoded = decoded.split("!/", 1)[0]
    if decoded.startswith("file://"):
        decoded = decoded[len("file://"):]
    elif decoded.startswith("file:"):
        decoded = decoded[len("file:"):]
    # file:///C:/x on Windows leaves a leading slash before the drive letter
    if os.name == "nt" and len(decoded) > 2 and decoded[0] == "/" and decoded[2] == ":":
        decoded = decoded[1:]
    return Path(decoded)


class MarkerLocator(Protocol):
    """Finds the location backing a known resource."""

    def locate(self, resource: str) -> str | None:
        """Return the location URL of the entry containing the resource."""
        ...


class ClasspathMarkerLocator:
    """Searches a list of jars and directories for a resource."""

    def __init__(self, entries: list[Path]) -> None:
        self.entries = entries

    def locate(self, resource: str) -> str | None:
        for entry in self.entries:
            if entry.is_dir():
                if (entry / resource).exists():
                    return entry.resolve().as_uri()
                continue
            if not entry.is_file():
                continue
            try:
                with zipfile.ZipFile(entry) as archive:
                    archive.getinfo(resource)
            except (KeyError, zipfile.BadZipFile, OSError):
                continue
            return f"jar:{entry.resolve().as_uri()}!/{resource}"
        return None


class ResolutionTier(ABC):
    """One source of artifacts in the resolution chain."""

    name: str = "base"

    def applies_to(self, group: str, name: str) -> bool:
        """Whether this tier is consulted for the given artifact."""
        return True

    @abstractmethod
    async def find(self, group: str, name: str, version: str) -> ResolvedArtifact | None:
        """Return a resolved artifact with a file, or None."""


class DeclaredDependencyTier(ResolutionTier):
    """Uses jars the build already resolved for the project."""

    name = "declared-dependency"

    def __init__(self, context: BuildContext) -> None:
        self.context = context

    async def find(self, group: str, name: str, version: str) -> ResolvedArtifact | None:
        declared = self.context.find_artifact(group, name)
        if declared is None or declared.file is None or not declared.file.exists():
            return None
        if declared.version != version:
            logger.debug(
                f"Using project-declared {declared.coordinates} instead of requested {version}"
            )
        return ResolvedArtifact(
            group=group,
            name=name,
            version=declared.version,
            file=declared.file,
            source=self.name,
        )


class LocalCacheTier(ResolutionTier):
    """Looks the jar up in the local Maven repository."""

    name = "local-cache"

    def __init__(self, repository: Path) -> None:
        self.repository = repository

    async def find(self, group: str, name: str, version: str) -> ResolvedArtifact | None:
        candidate = local_repository_path(self.repository, group, name, version)
        if not candidate.is_file():
            return None
        return ResolvedArtifact(
            group=group, name=name, version=version, file=candidate, source=self.name
        )


class RemoteRepositoryTier(ResolutionTier):
    """Downloads the jar from a remote Maven repository into the local cache."""

    name = "remote"

    def __init__(
        self,
        base_url: str,
        repository: Path,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the remote tier.

        Args:
            base_url: Remote repository root URL.
            repository: Local repository the download is stored in.
            timeout: Download timeout in seconds.
            client: Optional preconfigured HTTP client.
        """
        self.base_url = base_url.rstrip("/")
        self.repository = repository
        self.timeout = timeout
        self._client = client

    def artifact_url(self, group: str, name: str, version: str) -> str:
        group_path = group.replace(".", "/")
        return f"{self.base_url}/{group_path}/{name}/{version}/{name}-{version}.jar"

    async def find(self, group: str, name: str, version: str) -> ResolvedArtifact | None:
        try:
            target = await self._download(group, name, version)
        except ArtifactResolutionError as e:
            logger.warning(f"Remote resolution failed: {e}")
            return None
        return ResolvedArtifact(
            group=group, name=name, version=version, file=target, source=self.name
        )

    async def _download(self, group: str, name: str, version: str) -> Path:
        url = self.artifact_url(group, name, version)
        target = local_repository_path(self.repository, group, name, version)
        partial = target.with_name(target.name + ".part")
        coordinates = f"{group}:{name}:{version}"
        logger.info(f"Downloading {coordinates} from {url}")

        client = self._client or httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
        try:
            response = await client.get(url)
            response.raise_for_status()
            target.parent.mkdir(parents=True, exist_ok=True)
            partial.write_bytes(response.content)
            partial.replace(target)
        except httpx.HTTPError as e:
            raise ArtifactResolutionError(
                f"Could not download {coordinates}",
                coordinates=coordinates,
                tier=self.name,
                details={"url": url, "error": str(e)},
            ) from e
        except OSError as e:
            partial.unlink(missing_ok=True)
            raise ArtifactResolutionError(
                f"Could not store {coordinates}",
                coordinates=coordinates,
                tier=self.name,
                details={"path": str(target), "error": str(e)},
            ) from e
        finally:
            if self._client is None:
                await client.aclose()
        return target


class MarkerResourceTier(ResolutionTier):
    """Finds the jar backing a known resource. Serves a single artifact."""

    name = "marker-resource"

    def __init__(
        self,
        locator: MarkerLocator,
        group: str = CHECKER_GROUP,
        artifact: str = CHECKER_NAME,
        resource: str = CHECKER_MARKER_RESOURCE,
    ) -> None:
        self.locator = locator
        self.group = group
        self.artifact = artifact
        self.resource = resource

    def applies_to(self, group: str, name: str) -> bool:
        return group == self.group and name == self.artifact

    async def find(self, group: str, name: str, version: str) -> ResolvedArtifact | None:
        location = self.locator.locate(self.resource)
        if not location:
            return None
        path = location_to_path(location)
        if not path.exists():
            logger.debug(f"Marker resource location does not exist: {path}")
            return None
        return ResolvedArtifact(
            group=group, name=name, version=version, file=path, source=self.name
        )


class ArtifactResolver:
    """Resolves artifacts through ordered tiers, caching per (group, name).

    One resolver serves one run; nothing is shared between runs.
    """

    def __init__(self, tiers: list[ResolutionTier]) -> None:
        self.tiers = tiers
        self._cache: dict[tuple[str, str], ResolvedArtifact] = {}

    @classmethod
    def for_build(
        cls,
        context: BuildContext,
        local_repository: Path,
        remote_url: str | None = None,
        timeout: float = 60.0,
        plugin_classpath: list[Path] | None = None,
    ) -> "ArtifactResolver":
        """Create a resolver with the standard tier chain.

        Args:
            context: Build being checked.
            local_repository: Local Maven repository directory.
            remote_url: Remote repository URL, None for offline resolution.
            timeout: Download timeout in seconds.
            plugin_classpath: Jars searched by the marker-resource tier.

        Returns:
            Configured ArtifactResolver.
        """
        tiers: list[ResolutionTier] = [
            DeclaredDependencyTier(context),
            LocalCacheTier(local_repository),
        ]
        if remote_url:
            tiers.append(RemoteRepositoryTier(remote_url, local_repository, timeout=timeout))
        tiers.append(MarkerResourceTier(ClasspathMarkerLocator(plugin_classpath or [])))
        return cls(tiers)

    async def resolve(self, group: str, name: str, version: str) -> ResolvedArtifact:
        """Resolve one artifact.

        Args:
            group: Maven groupId.
            name: Maven artifactId.
            version: Requested version.

        Returns:
            ResolvedArtifact; ``file`` is None when every tier failed.
        """
        key = (group, name)
        if key in self._cache:
            return self._cache[key]

        result: ResolvedArtifact | None = None
        for tier in self.tiers:
            if not tier.applies_to(group, name):
                continue
            result = await tier.find(group, name, version)
            if result is not None:
                logger.debug(f"Resolved {result.coordinates} via {tier.name}: {result.file}")
                break
            logger.debug(f"{group}:{name}:{version} not found via {tier.name}")

        if result is None:
            logger.warning(f"Could not resolve {group}:{name}:{version} from any source")
            result = ResolvedArtifact(group=group, name=name, version=version)

        self._cache[key] = result
        return result

    async def resolve_all(self, coordinates: list[tuple[str, str, str]]) -> ResolutionReport:
        """Resolve co-required artifacts, reporting partial success.

        Args:
            coordinates: (group, name, version) tuples.

        Returns:
            ResolutionReport separating found from missing artifacts.
        """
        report = ResolutionReport()
        for group, name, version in coordinates:
            artifact = await self.resolve(group, name, version)
            (report.found if artifact.found else report.missing).append(artifact)

        if report.is_degraded:
            missing = ", ".join(a.coordinates for a in report.missing)
            logger.warning(f"Continuing without {missing}; some classes may not be found")
        return report
