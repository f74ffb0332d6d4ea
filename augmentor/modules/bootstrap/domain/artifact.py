"""Artifact identity and classpath roles."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Flag, auto
from pathlib import Path
from typing import List, Tuple

UNKNOWN_GROUP = "unknown"


@dataclass(frozen=True)
class ArtifactCoordinate:
    """Represents a Maven artifact coordinate."""

    group: str
    name: str
    version: str
    extension: str = "jar"

    @property
    def key(self) -> str:
        return f"{self.group}:{self.name}"

    @property
    def path_segments(self) -> List[str]:
        group_path = self.group.replace(".", "/")
        filename = f"{self.name}-{self.version}.{self.extension}"
        return [group_path, self.name, self.version, filename]

    @classmethod
    def parse(cls, value: str) -> "ArtifactCoordinate":
        """Parse ``group:name[:version]``; extra segments are ignored."""
        parts = [part.strip() for part in (value or "").split(":")]
        if len(parts) < 2 or not parts[0] or not parts[1]:
            raise ValueError(f"not an artifact coordinate: {value!r}")
        version = parts[2] if len(parts) > 2 and parts[2] else "unknown"
        return cls(group=parts[0], name=parts[1], version=version)

    def __str__(self) -> str:
        return f"{self.group}:{self.name}:{self.version}"


class ClasspathRole(Flag):
    NONE = 0
    RUNTIME_VISIBLE = auto()
    AUGMENTATION_VISIBLE = auto()
    IS_EXTENSION = auto()

    def describe(self) -> str:
        names = [
            label
            for flag, label in (
                (ClasspathRole.RUNTIME_VISIBLE, "runtime"),
                (ClasspathRole.AUGMENTATION_VISIBLE, "augmentation"),
                (ClasspathRole.IS_EXTENSION, "extension"),
            )
            if flag in self
        ]
        return "|".join(names) or "none"


@dataclass
class ArtifactEntry:
    coordinate: ArtifactCoordinate
    resolved_paths: Tuple[Path, ...]
    role: ClasspathRole = ClasspathRole.NONE

    @property
    def key(self) -> str:
        return self.coordinate.key

    @property
    def path(self) -> Path:
        return self.resolved_paths[0]

    def add_role(self, role: ClasspathRole) -> None:
        self.role |= role
