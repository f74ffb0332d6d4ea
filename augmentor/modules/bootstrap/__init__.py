"""Bootstrap augmentation module exports."""

from .service import AugmentationPipeline, PipelineResult, PreparedModel

__all__ = ["AugmentationPipeline", "PipelineResult", "PreparedModel"]
