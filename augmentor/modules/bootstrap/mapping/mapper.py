"""Link runtime extensions to their deployment (companion) archives."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence, Tuple

from augmentor.modules.bootstrap.coordinates import CoordinateInference
from augmentor.modules.bootstrap.domain import (
    ArtifactCoordinate,
    ExtensionDescriptor,
    MappingConflict,
    MappingResult,
)


class ExtensionModuleMapper:
    """Resolve each extension to a companion archive by declared name or convention."""

    def __init__(self, inference: CoordinateInference | None = None) -> None:
        self.inference = inference or CoordinateInference()
        self.log = logging.getLogger(self.__class__.__name__)

    def resolve(
        self,
        extensions: Iterable[ExtensionDescriptor],
        candidates: Sequence[Path | str],
    ) -> MappingResult:
        result = MappingResult()
        index = self._build_index(candidates, result)

        for extension in extensions:
            declared = extension.declared_companion_name
            convention = extension.convention_companion_name
            if declared and declared != convention:
                result.conflicts.append(
                    MappingConflict(extension=extension, declared_name=declared, convention_name=convention)
                )
                self.log.warning(
                    "Extension %s declares deployment module %s but convention expects %s; using declared",
                    extension.coordinate.key,
                    declared,
                    convention,
                )

            expected = extension.expected_companion_name
            match = index.get(expected)
            if match is None:
                result.unmapped.append(extension)
                self.log.warning(
                    "No deployment archive %s for extension %s (%s)",
                    expected,
                    extension.coordinate.key,
                    extension.archive_path.name,
                )
                continue

            path, coords = match
            resolved = dataclasses.replace(extension, companion_coordinate=coords)
            result.mapped[resolved] = path
            self.log.debug("Mapped %s -> %s", extension.coordinate.key, path)

        self.log.info(
            "Extension mapping: mapped=%d unmapped=%d conflicts=%d",
            len(result.mapped),
            len(result.unmapped),
            len(result.conflicts),
        )
        return result

    def find_companion(
        self, extension: ExtensionDescriptor, candidates: Sequence[Path | str]
    ) -> Optional[Path]:
        expected = extension.expected_companion_name
        for candidate in candidates:
            coords = self.inference.infer(candidate)
            if coords is not None and coords.name == expected:
                return Path(candidate)
        return None

    def _build_index(
        self, candidates: Sequence[Path | str], result: MappingResult
    ) -> Dict[str, Tuple[Path, ArtifactCoordinate]]:
        index: Dict[str, Tuple[Path, ArtifactCoordinate]] = {}
        for candidate in candidates:
            path = Path(candidate)
            coords = self.inference.infer(path)
            if coords is None:
                self.log.warning("Cannot infer coordinates for deployment archive %s", path.name)
                continue
            existing = index.get(coords.name)
            if existing is not None:
                if existing[0] != path:
                    result.duplicate_names.append(coords.name)
                    self.log.warning(
                        "Duplicate deployment module %s: keeping %s, ignoring %s",
                        coords.name,
                        existing[0],
                        path,
                    )
                continue
            index[coords.name] = (path, coords)
        return index
