from .artifact import UNKNOWN_GROUP, ArtifactCoordinate, ArtifactEntry, ClasspathRole
from .config import (
    DEFAULT_APPLICATION_NAME,
    DEFAULT_MAIN_CLASS,
    AugmentationConfig,
    AugmentationConfigBuilder,
    parse_archive_list,
)
from .models import (
    AugmentedOutput,
    DependencyModel,
    ExtensionDescriptor,
    MappingConflict,
    MappingResult,
    PipelineSummary,
)

__all__ = [
    "UNKNOWN_GROUP",
    "ArtifactCoordinate",
    "ArtifactEntry",
    "ClasspathRole",
    "DEFAULT_APPLICATION_NAME",
    "DEFAULT_MAIN_CLASS",
    "AugmentationConfig",
    "AugmentationConfigBuilder",
    "parse_archive_list",
    "AugmentedOutput",
    "DependencyModel",
    "ExtensionDescriptor",
    "MappingConflict",
    "MappingResult",
    "PipelineSummary",
]
