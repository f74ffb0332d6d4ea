"""Utility modules for the bootstrap augmentor."""

from .exceptions import (
    ArtifactDownloadError,
    AugmentationExecutionFailed,
    AugmentorError,
    CoordinateInferenceError,
    InputError,
    ModelBuildError,
    OutputMaterializationError,
    SetupFailed,
    SetupStep,
    UnmappedExtensionsError,
)

__all__ = [
    "ArtifactDownloadError",
    "AugmentationExecutionFailed",
    "AugmentorError",
    "CoordinateInferenceError",
    "InputError",
    "ModelBuildError",
    "OutputMaterializationError",
    "SetupFailed",
    "SetupStep",
    "UnmappedExtensionsError",
]
