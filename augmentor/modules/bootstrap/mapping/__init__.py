from .mapper import ExtensionModuleMapper

__all__ = ["ExtensionModuleMapper"]
