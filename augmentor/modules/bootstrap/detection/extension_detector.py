"""Detect Quarkus extensions by their embedded metadata entry."""

from __future__ import annotations

import logging
import zipfile
import zlib
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from augmentor.modules.bootstrap.coordinates import CoordinateInference, strip_archive_name
from augmentor.modules.bootstrap.domain import UNKNOWN_GROUP, ArtifactCoordinate, ExtensionDescriptor
from augmentor.settings import AugmentorSettings

EXTENSION_METADATA_ENTRY = "META-INF/quarkus-extension.properties"
DEPLOYMENT_ARTIFACT_KEY = "deployment-artifact"


_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def _unescape(value: str) -> str:
    chars: List[str] = []
    index = 0
    while index < len(value):
        char = value[index]
        if char == "\\" and index + 1 < len(value):
            following = value[index + 1]
            chars.append(_ESCAPES.get(following, following))
            index += 2
            continue
        chars.append(char)
        index += 1
    return "".join(chars)


def _separator_index(line: str) -> int:
    escaped = False
    for index, char in enumerate(line):
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char in "=:":
            return index
    return -1


def decode_metadata(data: bytes) -> str:
    """UTF-8 when valid, otherwise ISO-8859-1 like the JVM properties loader."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def parse_properties(text: str) -> Dict[str, str]:
    """Parse the subset of the Java properties format extensions use.

    Handles ``=`` and ``:`` separators, ``#``/``!`` comments and backslash
    escapes (``io.quarkus\\:quarkus-arc-deployment\\:3.2.0``). Line
    continuations are not supported.
    """
    result: Dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith(("#", "!")):
            continue
        split_at = _separator_index(line)
        if split_at < 0:
            result[_unescape(line)] = ""
            continue
        key = _unescape(line[:split_at].strip())
        if key:
            result[key] = _unescape(line[split_at + 1 :].strip())
    return result


class ExtensionDetector:
    """Open archives and read the extension metadata entry when present."""

    def __init__(
        self,
        inference: CoordinateInference | None = None,
        metadata_entry: str = EXTENSION_METADATA_ENTRY,
        companion_suffix: str = "-deployment",
        workers: int = 1,
    ) -> None:
        self.inference = inference or CoordinateInference()
        self.metadata_entry = metadata_entry
        self.companion_suffix = companion_suffix
        self.workers = max(1, workers)
        self.log = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_settings(
        cls, settings: AugmentorSettings, inference: CoordinateInference | None = None
    ) -> "ExtensionDetector":
        return cls(
            inference=inference or CoordinateInference.from_settings(settings),
            metadata_entry=settings.extension_metadata_entry,
            companion_suffix=settings.companion_suffix,
            workers=settings.scan_workers,
        )

    def detect(self, archive_path: Path | str) -> Optional[ExtensionDescriptor]:
        archive_path = Path(archive_path)
        try:
            text = self._read_metadata(archive_path)
        except (OSError, zipfile.BadZipFile, zlib.error, EOFError, RuntimeError) as exc:
            self.log.warning("Skipping unreadable archive %s: %s", archive_path, exc)
            return None
        if text is None:
            return None
        properties = parse_properties(text)
        descriptor = ExtensionDescriptor(
            archive_path=archive_path,
            coordinate=self._coordinate_for(archive_path, properties),
            declared_companion=properties.get(DEPLOYMENT_ARTIFACT_KEY) or None,
            companion_suffix=self.companion_suffix,
            properties=properties,
        )
        self.log.debug("Detected extension %s in %s", descriptor, archive_path.name)
        return descriptor

    def is_extension(self, archive_path: Path | str) -> bool:
        return self.detect(archive_path) is not None

    def detect_all(self, archive_paths: Iterable[Path | str]) -> List[ExtensionDescriptor]:
        paths = [Path(path) for path in archive_paths]
        if self.workers > 1 and len(paths) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                results = list(pool.map(self.detect, paths))
        else:
            results = [self.detect(path) for path in paths]
        extensions = [descriptor for descriptor in results if descriptor is not None]
        self.log.info("Detected %d extensions in %d archives", len(extensions), len(paths))
        return extensions

    def _read_metadata(self, archive_path: Path) -> Optional[str]:
        if archive_path.is_dir():
            entry = archive_path.joinpath(*self.metadata_entry.split("/"))
            if not entry.is_file():
                return None
            return decode_metadata(entry.read_bytes())
        with zipfile.ZipFile(archive_path) as zf:
            try:
                data = zf.read(self.metadata_entry)
            except KeyError:
                return None
        return decode_metadata(data)

    def _coordinate_for(self, archive_path: Path, properties: Dict[str, str]) -> ArtifactCoordinate:
        coords = self.inference.infer(archive_path)
        if coords is not None:
            return coords
        name = properties.get("artifactId") or strip_archive_name(
            archive_path.name, self.inference.archive_extensions, self.inference.prefixes
        )
        return ArtifactCoordinate(
            group=properties.get("groupId") or UNKNOWN_GROUP,
            name=name,
            version=properties.get("version") or "unknown",
        )
