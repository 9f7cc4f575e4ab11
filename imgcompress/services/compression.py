"""Decode, normalise, rasterize and encode in a single call."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from imgcompress.cancellation import CancellationToken
from imgcompress.config.settings import CompressionConfig, get_settings
from imgcompress.errors import DecodeError, ImageCompressionError
from imgcompress.imgproc.data_url import parse_data_url
from imgcompress.imgproc.decode import ImageSource, open_source_image
from imgcompress.imgproc.encoder import EncodedResult, SizeBoundedEncoder
from imgcompress.imgproc.normalize import GeometryNormalizer
from imgcompress.imgproc.raster import allocate_surface
from imgcompress.metrics.prometheus_exporter import compression_total, compressions_in_progress

logger = logging.getLogger(__name__)


class ImageCompressionService:
    """Turns arbitrary image input into a size-bounded JPEG data URL.

    The service holds configuration only. Every call allocates its own
    decode handle and raster surface, so concurrent calls are independent.
    """

    def __init__(self, config: CompressionConfig | None = None) -> None:
        self._config = config or get_settings().compression_config()
        self._normalizer = GeometryNormalizer(self._config.max_dimension)
        self._encoder = SizeBoundedEncoder(self._config)

    @property
    def config(self) -> CompressionConfig:
        return self._config

    async def compress(
        self,
        source: ImageSource,
        *,
        token: CancellationToken | None = None,
    ) -> EncodedResult:
        """
        Compress ``source`` into an :class:`EncodedResult`.

        Raises :class:`DecodeError` for unreadable input,
        :class:`SurfaceUnavailable` when pixels cannot be allocated and
        :class:`CompressionCancelled` when ``token`` is cancelled.
        """

        compressions_in_progress.inc()
        try:
            result = await self._run(source, token)
        except ImageCompressionError as exc:
            compression_total.labels(outcome=exc.outcome).inc()
            raise
        except asyncio.CancelledError:
            compression_total.labels(outcome="cancelled").inc()
            raise
        except Exception:
            compression_total.labels(outcome="error").inc()
            raise
        finally:
            compressions_in_progress.dec()

        compression_total.labels(outcome="fallback" if result.fallback else "ok").inc()
        return result

    async def _run(self, source: ImageSource, token: CancellationToken | None) -> EncodedResult:
        config = self._config
        async with open_source_image(source, max_input_bytes=config.max_input_bytes, token=token) as image:
            geometry = self._normalizer.normalize(image)
            if geometry.size != (image.width, image.height):
                logger.debug(
                    "Resizing %dx%d to %dx%d.",
                    image.width,
                    image.height,
                    geometry.width,
                    geometry.height,
                )
            async with allocate_surface(image, geometry, config.background, token=token) as surface:
                result = await self._encoder.encode(surface, token=token)

        logger.info(
            "Compressed %s image to %dx%d at quality %.2f (%d bytes).",
            image.source_format or "unknown",
            result.width,
            result.height,
            result.quality,
            result.byte_length,
        )
        return result

    async def compress_data_url(
        self,
        data_url: str,
        *,
        token: CancellationToken | None = None,
    ) -> str:
        """
        Return ``data_url`` unchanged when it already fits ``max_size``.

        Larger URLs are decoded and re-compressed as JPEG. The URL must be a
        valid base64 data URL either way, otherwise :class:`DecodeError` is
        raised.
        """

        try:
            parse_data_url(data_url)
        except ValueError as exc:
            raise DecodeError(f"Input is not a valid data URL: {exc}") from exc

        if len(data_url) <= self._config.max_size:
            return data_url
        result = await self.compress(data_url, token=token)
        return result.data_url

    async def compress_many(
        self,
        sources: Iterable[ImageSource],
        *,
        concurrency: int | None = None,
        token: CancellationToken | None = None,
        return_exceptions: bool = False,
    ) -> list[EncodedResult | BaseException]:
        """
        Compress several images concurrently, keeping input order.

        With ``return_exceptions`` a failed input yields its exception in
        place of a result instead of aborting the batch.
        """

        if concurrency is not None and concurrency <= 0:
            raise ValueError("concurrency must be a positive integer.")
        semaphore = asyncio.Semaphore(concurrency) if concurrency is not None else None

        async def _one(source: ImageSource) -> EncodedResult:
            if semaphore is None:
                return await self.compress(source, token=token)
            async with semaphore:
                return await self.compress(source, token=token)

        return list(
            await asyncio.gather(
                *(_one(source) for source in sources),
                return_exceptions=return_exceptions,
            ),
        )


async def compress_image(
    source: ImageSource,
    config: CompressionConfig | None = None,
    *,
    token: CancellationToken | None = None,
) -> EncodedResult:
    """Shortcut for ``ImageCompressionService(config).compress(source)``."""

    return await ImageCompressionService(config).compress(source, token=token)
