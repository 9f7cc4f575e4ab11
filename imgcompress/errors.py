"""Exceptions raised by the compression pipeline."""

from __future__ import annotations


class ImageCompressionError(RuntimeError):
    """Base class for pipeline failures."""

    outcome = "error"


class DecodeError(ImageCompressionError):
    """Raised when the input bytes cannot be interpreted as an image."""

    outcome = "decode_error"


class SurfaceUnavailable(ImageCompressionError):
    """Raised when the raster surface cannot be allocated. Safe to retry."""

    outcome = "surface_unavailable"


class SizeExceeded(ImageCompressionError):
    """Raised in strict mode when even the lowest quality is over budget."""

    outcome = "size_exceeded"

    def __init__(self, size: int, max_size: int, quality: float) -> None:
        self.size = size
        self.max_size = max_size
        self.quality = quality
        super().__init__(
            f"Encoded image is {size} bytes at quality {quality:.2f}, budget is {max_size} bytes.",
        )


class CompressionCancelled(ImageCompressionError):
    """Raised when the caller cancels an in-flight compression."""

    outcome = "cancelled"
