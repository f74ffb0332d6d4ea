from .augment import DEFAULT_AUGMENT_ACTION, AugmentationOrchestrator

__all__ = ["DEFAULT_AUGMENT_ACTION", "AugmentationOrchestrator"]
