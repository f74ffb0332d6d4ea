from .inference import CoordinateInference, extract_version, split_version, strip_archive_name

__all__ = ["CoordinateInference", "extract_version", "split_version", "strip_archive_name"]
