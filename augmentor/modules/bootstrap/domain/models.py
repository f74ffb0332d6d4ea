"""Dataclasses describing extensions, the dependency model and run results."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from augmentor.modules.bootstrap.util.exceptions import ModelBuildError

from .artifact import ArtifactCoordinate, ArtifactEntry, ClasspathRole


@dataclass(frozen=True)
class ExtensionDescriptor:
    """A runtime archive carrying extension metadata."""

    archive_path: Path
    coordinate: ArtifactCoordinate
    declared_companion: Optional[str] = None
    companion_coordinate: Optional[ArtifactCoordinate] = None
    companion_suffix: str = "-deployment"
    properties: Dict[str, str] = field(default_factory=dict, compare=False, hash=False, repr=False)

    @property
    def convention_companion_name(self) -> str:
        return f"{self.coordinate.name}{self.companion_suffix}"

    @property
    def declared_companion_name(self) -> Optional[str]:
        if not self.declared_companion:
            return None
        parts = self.declared_companion.split(":")
        if len(parts) >= 2 and parts[1].strip():
            return parts[1].strip()
        return None

    @property
    def expected_companion_name(self) -> str:
        return self.declared_companion_name or self.convention_companion_name

    def __str__(self) -> str:
        return f"{self.coordinate} (deployment={self.declared_companion or '-'})"


@dataclass
class MappingConflict:
    """Declared companion and naming convention point at different modules."""

    extension: ExtensionDescriptor
    declared_name: str
    convention_name: str


@dataclass
class MappingResult:
    mapped: Dict[ExtensionDescriptor, Path] = field(default_factory=dict)
    unmapped: List[ExtensionDescriptor] = field(default_factory=list)
    conflicts: List[MappingConflict] = field(default_factory=list)
    duplicate_names: List[str] = field(default_factory=list)

    @property
    def has_unmapped(self) -> bool:
        return bool(self.unmapped)

    def companion_paths(self) -> List[Path]:
        return list(self.mapped.values())


@dataclass
class DependencyModel:
    application_artifact: ArtifactEntry
    dependencies: List[ArtifactEntry] = field(default_factory=list)

    def __iter__(self) -> Iterator[ArtifactEntry]:
        return iter(self.dependencies)

    def __len__(self) -> int:
        return len(self.dependencies)

    def find(self, key: str) -> Optional[ArtifactEntry]:
        for entry in self.dependencies:
            if entry.key == key:
                return entry
        return None

    def with_role(self, role: ClasspathRole) -> List[ArtifactEntry]:
        return [entry for entry in self.dependencies if role in entry.role]

    def runtime_entries(self) -> List[ArtifactEntry]:
        return self.with_role(ClasspathRole.RUNTIME_VISIBLE)

    def augmentation_entries(self) -> List[ArtifactEntry]:
        return self.with_role(ClasspathRole.AUGMENTATION_VISIBLE)

    def extension_entries(self) -> List[ArtifactEntry]:
        return self.with_role(ClasspathRole.IS_EXTENSION)

    def validate(self) -> None:
        seen = {self.application_artifact.key}
        for entry in self.dependencies:
            if entry.key in seen:
                raise ModelBuildError(f"duplicate artifact in model: {entry.key}")
            if not entry.role:
                raise ModelBuildError(f"artifact without classpath role: {entry.key}")
            seen.add(entry.key)


@dataclass(frozen=True)
class AugmentedOutput:
    """Runnable archive produced by the framework and its layered directory."""

    jar: Path
    root: Path

    @classmethod
    def from_jar(cls, jar: Path) -> "AugmentedOutput":
        jar = Path(jar)
        return cls(jar=jar, root=jar.parent)


@dataclass
class PipelineSummary:
    application_archives: int = 0
    runtime_archives: int = 0
    deployment_archives: int = 0
    archives_classified: int = 0
    archives_skipped: int = 0
    extensions_detected: int = 0
    extensions_mapped: int = 0
    extensions_unmapped: int = 0
    mapping_conflicts: int = 0
    runtime_entries: int = 0
    augmentation_entries: int = 0
    extension_entries: int = 0

    def as_rows(self) -> List[tuple[str, int]]:
        return [
            ("Application archives", self.application_archives),
            ("Runtime archives", self.runtime_archives),
            ("Deployment archives", self.deployment_archives),
            ("Archives classified", self.archives_classified),
            ("Archives skipped", self.archives_skipped),
            ("Extensions detected", self.extensions_detected),
            ("Extensions mapped", self.extensions_mapped),
            ("Extensions unmapped", self.extensions_unmapped),
            ("Mapping conflicts", self.mapping_conflicts),
            ("Runtime classpath", self.runtime_entries),
            ("Augmentation classpath", self.augmentation_entries),
            ("Extension artifacts", self.extension_entries),
        ]
