from .builder import DependencyModelBuilder

__all__ = ["DependencyModelBuilder"]
