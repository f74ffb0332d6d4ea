"""Infer Maven coordinates from archive paths.

Bazel hands over plain filesystem paths, so identity has to be recovered
from the repository layout the archives were fetched into::

    .../maven2/<group>/.../<name>/<version>/<name>-<version>.jar

When no repository anchor is present the filename alone is used
(``<name>-<version>.jar``) and the group becomes ``unknown``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from augmentor.modules.bootstrap.domain import UNKNOWN_GROUP, ArtifactCoordinate
from augmentor.modules.bootstrap.util.exceptions import CoordinateInferenceError
from augmentor.settings import AugmentorSettings

log = logging.getLogger(__name__)

DEFAULT_ANCHORS: Tuple[str, ...] = ("maven2", "repository", "repo")
DEFAULT_ARCHIVE_EXTENSIONS: Tuple[str, ...] = (".jar", ".war", ".ear", ".zip")
DEFAULT_PREFIXES: Tuple[str, ...] = ("processed_",)

_SEPARATORS = re.compile(r"[\\/]+")


def split_path(path: Path | str) -> List[str]:
    return [segment for segment in _SEPARATORS.split(str(path)) if segment]


def split_version(stem: str) -> Optional[Tuple[str, str]]:
    """Split ``name-1.2.3`` at the rightmost dash that precedes a digit."""
    for index in range(len(stem) - 1, 0, -1):
        if stem[index] == "-" and index + 1 < len(stem) and stem[index + 1].isdigit():
            return stem[:index], stem[index + 1 :]
    return None


def strip_archive_name(
    filename: str,
    extensions: Sequence[str] = DEFAULT_ARCHIVE_EXTENSIONS,
    prefixes: Sequence[str] = DEFAULT_PREFIXES,
) -> str:
    stem = filename
    for prefix in prefixes:
        if prefix and stem.startswith(prefix):
            stem = stem[len(prefix) :]
            break
    lowered = stem.lower()
    for extension in extensions:
        if lowered.endswith(extension.lower()):
            return stem[: -len(extension)]
    return stem


def extract_version(
    filename: str,
    extensions: Sequence[str] = DEFAULT_ARCHIVE_EXTENSIONS,
    prefixes: Sequence[str] = DEFAULT_PREFIXES,
) -> str:
    """Return the version token of an archive filename, or ``unknown``."""
    parts = split_version(strip_archive_name(filename, extensions, prefixes))
    return parts[1] if parts else "unknown"


class CoordinateInference:
    """Derive ``group:name:version`` for archives handed over by the build tool."""

    def __init__(
        self,
        anchors: Iterable[str] = DEFAULT_ANCHORS,
        archive_extensions: Iterable[str] = DEFAULT_ARCHIVE_EXTENSIONS,
        prefixes: Iterable[str] = DEFAULT_PREFIXES,
    ) -> None:
        self.anchors = frozenset(anchors)
        self.archive_extensions = tuple(archive_extensions)
        self.prefixes = tuple(prefixes)

    @classmethod
    def from_settings(cls, settings: AugmentorSettings) -> "CoordinateInference":
        return cls(
            anchors=settings.repository_anchors,
            archive_extensions=settings.archive_extensions,
            prefixes=settings.archive_prefixes,
        )

    def infer(self, path: Path | str) -> Optional[ArtifactCoordinate]:
        coords = self.from_repository_layout(path)
        if coords is None:
            coords = self.from_filename(path)
        if coords is None:
            log.debug("No coordinates for %s", path)
        return coords

    def infer_or_raise(self, path: Path | str) -> ArtifactCoordinate:
        coords = self.infer(path)
        if coords is None:
            raise CoordinateInferenceError(Path(path))
        return coords

    def from_repository_layout(self, path: Path | str) -> Optional[ArtifactCoordinate]:
        segments = split_path(path)
        if len(segments) < 2:
            return None
        directories = segments[:-1]
        # rightmost anchor that still leaves group, name and version segments
        for index in range(len(directories) - 1, -1, -1):
            if directories[index] not in self.anchors:
                continue
            between = directories[index + 1 :]
            if len(between) < 3:
                continue
            return ArtifactCoordinate(
                group=".".join(between[:-2]),
                name=between[-2],
                version=between[-1],
                extension=self._extension_of(segments[-1]),
            )
        return None

    def from_filename(self, path: Path | str) -> Optional[ArtifactCoordinate]:
        segments = split_path(path)
        if not segments:
            return None
        filename = segments[-1]
        parts = split_version(strip_archive_name(filename, self.archive_extensions, self.prefixes))
        if parts is None:
            return None
        name, version = parts
        return ArtifactCoordinate(
            group=UNKNOWN_GROUP,
            name=name,
            version=version,
            extension=self._extension_of(filename),
        )

    def extract_version(self, filename: str) -> str:
        return extract_version(filename, self.archive_extensions, self.prefixes)

    def _extension_of(self, filename: str) -> str:
        lowered = filename.lower()
        for extension in self.archive_extensions:
            if lowered.endswith(extension.lower()):
                return extension.lstrip(".").lower()
        return "jar"
