"""Image normalisation helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from imgcompress.imgproc.decode import SourceImage


@dataclass(frozen=True, slots=True)
class TargetGeometry:
    """Pixel dimensions of the raster surface."""

    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Geometry must be positive, got {self.width}x{self.height}.")

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def longest_side(self) -> int:
        return max(self.width, self.height)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_target_geometry(width: int, height: int, max_dimension: int) -> TargetGeometry:
    """
    Return dimensions bounded by ``max_dimension`` with the aspect ratio kept.

    Images already within bounds are returned unchanged; nothing is ever
    upscaled. Otherwise the longer side becomes ``max_dimension`` and the
    shorter one is scaled by the same ratio, rounded half up and never below
    one pixel. Square images take the width branch.
    """

    if width <= 0 or height <= 0:
        raise ValueError(f"Source dimensions must be positive, got {width}x{height}.")
    if max_dimension <= 0:
        raise ValueError("max_dimension must be positive.")

    if width <= max_dimension and height <= max_dimension:
        return TargetGeometry(width, height)

    if width >= height:
        scaled = _round_half_up(height / width * max_dimension)
        return TargetGeometry(max_dimension, max(1, scaled))

    scaled = _round_half_up(width / height * max_dimension)
    return TargetGeometry(max(1, scaled), max_dimension)


class GeometryNormalizer:
    """Computes the raster geometry for decoded sources."""

    def __init__(self, max_dimension: int) -> None:
        if max_dimension <= 0:
            raise ValueError("max_dimension must be positive.")
        self._max_dimension = max_dimension

    @property
    def max_dimension(self) -> int:
        return self._max_dimension

    def normalize(self, source: SourceImage) -> TargetGeometry:
        return compute_target_geometry(source.width, source.height, self._max_dimension)
