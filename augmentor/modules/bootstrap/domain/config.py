"""Immutable augmentation inputs and their builder."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from augmentor.modules.bootstrap.util.exceptions import InputError

DEFAULT_APPLICATION_NAME = "application"
DEFAULT_MAIN_CLASS = "io.quarkus.runner.GeneratedMain"


def parse_archive_list(value: Optional[str]) -> List[Path]:
    """Split a comma or ``os.pathsep`` separated archive list."""
    if not value:
        return []
    separator = "," if "," in value else os.pathsep
    return [Path(item.strip()) for item in value.split(separator) if item.strip()]


@dataclass(frozen=True)
class AugmentationConfig:
    application_jars: Tuple[Path, ...]
    runtime_jars: Tuple[Path, ...]
    deployment_jars: Tuple[Path, ...]
    output_dir: Path
    application_name: str = DEFAULT_APPLICATION_NAME
    main_class: str = DEFAULT_MAIN_CLASS
    build_dir: Optional[Path] = None

    @property
    def runtime_classpath(self) -> List[Path]:
        return [*self.application_jars, *self.runtime_jars]

    @staticmethod
    def builder() -> "AugmentationConfigBuilder":
        return AugmentationConfigBuilder()


class AugmentationConfigBuilder:
    """Collects inputs before freezing them into an AugmentationConfig."""

    def __init__(self) -> None:
        self._application_jars: List[Path] = []
        self._runtime_jars: List[Path] = []
        self._deployment_jars: List[Path] = []
        self._output_dir: Optional[Path] = None
        self._application_name = DEFAULT_APPLICATION_NAME
        self._main_class = DEFAULT_MAIN_CLASS
        self._build_dir: Optional[Path] = None

    def add_application_jars(self, jars: Iterable[Path | str]) -> "AugmentationConfigBuilder":
        self._application_jars.extend(Path(jar) for jar in jars)
        return self

    def add_runtime_jars(self, jars: Iterable[Path | str]) -> "AugmentationConfigBuilder":
        self._runtime_jars.extend(Path(jar) for jar in jars)
        return self

    def add_deployment_jars(self, jars: Iterable[Path | str]) -> "AugmentationConfigBuilder":
        self._deployment_jars.extend(Path(jar) for jar in jars)
        return self

    def set_output_dir(self, output_dir: Path | str | None) -> "AugmentationConfigBuilder":
        self._output_dir = Path(output_dir) if output_dir else None
        return self

    def set_application_name(self, name: Optional[str]) -> "AugmentationConfigBuilder":
        if name:
            self._application_name = name
        return self

    def set_main_class(self, main_class: Optional[str]) -> "AugmentationConfigBuilder":
        if main_class:
            self._main_class = main_class
        return self

    def set_build_dir(self, build_dir: Path | str | None) -> "AugmentationConfigBuilder":
        self._build_dir = Path(build_dir) if build_dir else None
        return self

    def build(self) -> AugmentationConfig:
        if self._output_dir is None:
            raise InputError("--output-dir is required")
        if not self._application_jars:
            raise InputError("at least one application archive is required (--application-jars)")
        return AugmentationConfig(
            application_jars=tuple(self._application_jars),
            runtime_jars=tuple(self._runtime_jars),
            deployment_jars=tuple(self._deployment_jars),
            output_dir=self._output_dir,
            application_name=self._application_name,
            main_class=self._main_class,
            build_dir=self._build_dir,
        )
