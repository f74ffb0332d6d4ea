from .context import ambient_resolution_context, current_resolution_tier
from .strategy import (
    ActionEntryPoint,
    AugmentationContext,
    AugmentationEntryPoint,
    CuratedApplication,
    LoaderStrategy,
    QualifiedNameLoaderStrategy,
    parse_qualified_name,
    to_augmented_output,
)
from .tiers import AUGMENTATION_TIER, RUNTIME_TIER, ArchiveTier, LoaderHierarchy, TierImportHook

__all__ = [
    "ambient_resolution_context",
    "current_resolution_tier",
    "ActionEntryPoint",
    "AugmentationContext",
    "AugmentationEntryPoint",
    "CuratedApplication",
    "LoaderStrategy",
    "QualifiedNameLoaderStrategy",
    "parse_qualified_name",
    "to_augmented_output",
    "AUGMENTATION_TIER",
    "RUNTIME_TIER",
    "ArchiveTier",
    "LoaderHierarchy",
    "TierImportHook",
]
