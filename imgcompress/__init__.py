"""Size-bounded image compression for API payloads."""

from .cancellation import CancellationToken
from .config.settings import CompressionConfig
from .errors import (
    CompressionCancelled,
    DecodeError,
    ImageCompressionError,
    SizeExceeded,
    SurfaceUnavailable,
)
from .imgproc.encoder import EncodedResult
from .imgproc.normalize import TargetGeometry, compute_target_geometry
from .services.compression import ImageCompressionService, compress_image

__all__ = [
    "CancellationToken",
    "CompressionCancelled",
    "CompressionConfig",
    "DecodeError",
    "EncodedResult",
    "ImageCompressionError",
    "ImageCompressionService",
    "SizeExceeded",
    "SurfaceUnavailable",
    "TargetGeometry",
    "compress_image",
    "compute_target_geometry",
]
