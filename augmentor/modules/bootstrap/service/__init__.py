from .pipeline import AugmentationPipeline, PipelineResult, PreparedModel

__all__ = ["AugmentationPipeline", "PipelineResult", "PreparedModel"]
