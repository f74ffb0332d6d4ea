from .materializer import OutputMaterializer, format_size

__all__ = ["OutputMaterializer", "format_size"]
