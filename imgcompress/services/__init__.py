"""Pipeline services."""

from .compression import ImageCompressionService, compress_image

__all__ = ["ImageCompressionService", "compress_image"]
