from .extension_detector import EXTENSION_METADATA_ENTRY, ExtensionDetector, parse_properties

__all__ = ["EXTENSION_METADATA_ENTRY", "ExtensionDetector", "parse_properties"]
