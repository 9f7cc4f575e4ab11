"""Decoding, geometry and encoding stages."""

from .data_url import build_data_url, parse_data_url
from .decode import ImageSource, SourceImage, open_source_image
from .encoder import EncodedResult, SizeBoundedEncoder
from .normalize import GeometryNormalizer, TargetGeometry, compute_target_geometry
from .raster import RasterSurface, allocate_surface

__all__ = [
    "EncodedResult",
    "GeometryNormalizer",
    "ImageSource",
    "RasterSurface",
    "SizeBoundedEncoder",
    "SourceImage",
    "TargetGeometry",
    "allocate_surface",
    "build_data_url",
    "compute_target_geometry",
    "open_source_image",
    "parse_data_url",
]
