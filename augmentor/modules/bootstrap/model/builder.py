"""Assemble the role-flagged dependency model handed to the framework.

Runtime archives receive ``RUNTIME_VISIBLE``; archives that also appear on
the deployment list additionally receive ``AUGMENTATION_VISIBLE``; archives
matching a detected extension receive ``IS_EXTENSION``. Deployment-only
archives are ``AUGMENTATION_VISIBLE`` only. Entries are unique by
``group:name`` and repeated keys union their flags onto the first entry.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from augmentor.modules.bootstrap.coordinates import CoordinateInference
from augmentor.modules.bootstrap.domain import (
    ArtifactCoordinate,
    ArtifactEntry,
    AugmentationConfig,
    ClasspathRole,
    DependencyModel,
    ExtensionDescriptor,
)
from augmentor.settings import AugmentorSettings

SYNTHETIC_GROUP = "io.quarkus.bazel"
SYNTHETIC_VERSION = "1.0.0-SNAPSHOT"


class DependencyModelBuilder:
    """Classify the flat archive lists into a DependencyModel."""

    def __init__(
        self,
        inference: CoordinateInference | None = None,
        synthetic_group: str = SYNTHETIC_GROUP,
        synthetic_version: str = SYNTHETIC_VERSION,
    ) -> None:
        self.inference = inference or CoordinateInference()
        self.synthetic_group = synthetic_group
        self.synthetic_version = synthetic_version
        self.last_skipped: List[Path] = []
        self.log = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_settings(
        cls, settings: AugmentorSettings, inference: CoordinateInference | None = None
    ) -> "DependencyModelBuilder":
        return cls(
            inference=inference or CoordinateInference.from_settings(settings),
            synthetic_group=settings.synthetic_group,
            synthetic_version=settings.synthetic_version,
        )

    def build(
        self,
        config: AugmentationConfig,
        extensions: Iterable[ExtensionDescriptor] = (),
    ) -> DependencyModel:
        self.last_skipped = []
        application = self._application_entry(config)
        extension_keys = {extension.coordinate.key for extension in extensions}
        deployment_keys = {
            coords.key
            for coords in (self.inference.infer(path) for path in config.deployment_jars)
            if coords is not None
        }

        entries: Dict[str, ArtifactEntry] = {}
        runtime_count = 0
        for path in config.runtime_jars:
            coords = self._infer_or_skip(path, "runtime")
            if coords is None:
                continue
            role = ClasspathRole.RUNTIME_VISIBLE
            if coords.key in deployment_keys:
                role |= ClasspathRole.AUGMENTATION_VISIBLE
            if coords.key in extension_keys:
                role |= ClasspathRole.IS_EXTENSION
            if self._add(entries, application, coords, path, role):
                runtime_count += 1

        deployment_only = 0
        for path in config.deployment_jars:
            coords = self._infer_or_skip(path, "deployment")
            if coords is None:
                continue
            if self._add(entries, application, coords, path, ClasspathRole.AUGMENTATION_VISIBLE):
                deployment_only += 1

        model = DependencyModel(application_artifact=application, dependencies=list(entries.values()))
        model.validate()
        self.log.info(
            "Dependency model: app=%s runtime=%d deployment-only=%d extensions=%d skipped=%d",
            application.coordinate,
            runtime_count,
            deployment_only,
            len(model.extension_entries()),
            len(self.last_skipped),
        )
        for entry in model.dependencies:
            self.log.debug("  %s flags=%s path=%s", entry.key, entry.role.describe(), entry.path)
        return model

    def _application_entry(self, config: AugmentationConfig) -> ArtifactEntry:
        coords: Optional[ArtifactCoordinate] = None
        if config.application_jars:
            coords = self.inference.infer(config.application_jars[0])
        if coords is None:
            coords = ArtifactCoordinate(
                group=self.synthetic_group,
                name=config.application_name,
                version=self.synthetic_version,
            )
            self.log.debug("Synthesized application coordinates %s", coords)
        return ArtifactEntry(
            coordinate=coords,
            resolved_paths=tuple(config.application_jars),
            role=ClasspathRole.RUNTIME_VISIBLE,
        )

    def _infer_or_skip(self, path: Path, kind: str) -> Optional[ArtifactCoordinate]:
        coords = self.inference.infer(path)
        if coords is None:
            self.last_skipped.append(path)
            self.log.warning("Cannot infer coordinates for %s archive %s, skipping", kind, path.name)
        return coords

    def _add(
        self,
        entries: Dict[str, ArtifactEntry],
        application: ArtifactEntry,
        coords: ArtifactCoordinate,
        path: Path,
        role: ClasspathRole,
    ) -> bool:
        """Insert or merge an entry; returns True when a new entry was created."""
        if coords.key == application.key:
            self.log.debug("Ignoring %s, it is the application artifact", path)
            return False
        existing = entries.get(coords.key)
        if existing is not None:
            existing.add_role(role)
            return False
        entries[coords.key] = ArtifactEntry(coordinate=coords, resolved_paths=(Path(path),), role=role)
        return True
