"""Error taxonomy for the augmentation pipeline."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:  # pragma: no cover
    from augmentor.modules.bootstrap.domain import PipelineSummary


class AugmentorError(RuntimeError):
    """Base class for failures surfaced to the CLI."""

    exit_code = 1

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.summary: Optional["PipelineSummary"] = None


class InputError(AugmentorError):
    """Required configuration is missing or malformed."""

    exit_code = 2


class CoordinateInferenceError(AugmentorError):
    """Neither the repository layout nor the filename identifies the archive."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"cannot infer coordinates for {path}")
        self.path = path


class ModelBuildError(AugmentorError):
    """The dependency model violates one of its invariants."""

    exit_code = 3


class UnmappedExtensionsError(AugmentorError):
    """Raised only when the caller treats unmapped extensions as fatal."""

    exit_code = 3


class SetupStep(str, Enum):
    LOADER = "loader"
    LOOKUP = "lookup"
    CONSTRUCTOR = "constructor"
    INSTANTIATE = "instantiate"
    CONCURRENT = "concurrent"


class SetupFailed(AugmentorError):
    """Loader construction or entry point resolution failed."""

    exit_code = 3

    def __init__(self, step: SetupStep, message: str) -> None:
        super().__init__(f"[{step.value}] {message}")
        self.step = step


class AugmentationExecutionFailed(AugmentorError):
    """The framework's own augmentation call raised."""

    exit_code = 4

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"augmentation failed: {cause}")
        self.cause = cause


class OutputMaterializationError(AugmentorError):
    """Copying the produced output to its destination failed."""

    exit_code = 5


class ArtifactDownloadError(AugmentorError):
    """A repository download did not succeed."""

    exit_code = 5
