"""Quality search under a byte budget."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from io import BytesIO

from PIL import Image

from imgcompress.cancellation import CancellationToken, check_token
from imgcompress.config.settings import CompressionConfig
from imgcompress.errors import SizeExceeded, SurfaceUnavailable
from imgcompress.imgproc.data_url import build_data_url, parse_data_url
from imgcompress.imgproc.normalize import TargetGeometry
from imgcompress.imgproc.raster import RasterSurface
from imgcompress.metrics.prometheus_exporter import compression_attempts_total

logger = logging.getLogger(__name__)

JPEG_MIME = "image/jpeg"


@dataclass(frozen=True, slots=True)
class EncodedResult:
    """JPEG data URL together with the quality level that produced it."""

    data_url: str
    quality: float
    width: int
    height: int
    within_budget: bool
    fallback: bool = False
    mime_type: str = JPEG_MIME

    @property
    def byte_length(self) -> int:
        # Data URLs are pure ASCII, so characters and bytes coincide.
        return len(self.data_url)

    @property
    def geometry(self) -> TargetGeometry:
        return TargetGeometry(self.width, self.height)

    def to_bytes(self) -> bytes:
        """Return the raw JPEG payload."""

        _, payload = parse_data_url(self.data_url)
        return payload


def pillow_quality(level: float) -> int:
    """Map a 0-1 quality level onto Pillow's 1-100 JPEG scale."""

    return max(1, min(100, int(level * 100 + 0.5)))


def encode_jpeg(image: Image.Image, level: float) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="JPEG", quality=pillow_quality(level))
    return buffer.getvalue()


class SizeBoundedEncoder:
    """Picks the highest ladder quality whose data URL fits ``max_size``."""

    def __init__(self, config: CompressionConfig) -> None:
        self._config = config

    def _encode_at(self, surface: RasterSurface, level: float) -> str:
        try:
            payload = encode_jpeg(surface.image, level)
        except MemoryError as exc:
            raise SurfaceUnavailable("Ran out of memory while encoding the raster surface.") from exc
        return build_data_url(payload, JPEG_MIME)

    async def encode(self, surface: RasterSurface, *, token: CancellationToken | None = None) -> EncodedResult:
        """
        Try each ladder level in descending order and return the first fit.

        When nothing fits, the lowest level's encode is returned with
        ``fallback=True`` unless the config is strict, in which case
        :class:`SizeExceeded` is raised instead.
        """

        max_size = self._config.max_size
        geometry = surface.geometry
        data_url = ""

        for level in self._config.quality_ladder:
            check_token(token)
            data_url = await asyncio.to_thread(self._encode_at, surface, level)
            compression_attempts_total.inc()
            logger.debug(
                "Encoded %dx%d at quality %.2f: %d bytes (budget %d).",
                geometry.width,
                geometry.height,
                level,
                len(data_url),
                max_size,
            )
            if len(data_url) <= max_size:
                return EncodedResult(
                    data_url=data_url,
                    quality=level,
                    width=geometry.width,
                    height=geometry.height,
                    within_budget=True,
                )

        # The ladder is strictly descending, so the last attempt is the lowest level.
        lowest = self._config.lowest_quality
        if self._config.strict:
            raise SizeExceeded(size=len(data_url), max_size=max_size, quality=lowest)

        logger.warning(
            "No quality level fits %d bytes; returning quality %.2f at %d bytes.",
            max_size,
            lowest,
            len(data_url),
        )
        return EncodedResult(
            data_url=data_url,
            quality=lowest,
            width=geometry.width,
            height=geometry.height,
            within_budget=False,
            fallback=True,
        )
