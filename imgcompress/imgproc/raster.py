"""Raster surface allocation."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from PIL import Image

from imgcompress.cancellation import CancellationToken, check_token
from imgcompress.errors import SurfaceUnavailable
from imgcompress.imgproc.decode import SourceImage
from imgcompress.imgproc.normalize import TargetGeometry


@dataclass(slots=True)
class RasterSurface:
    """RGB pixels at the target geometry, owned by a single compression call."""

    image: Image.Image
    geometry: TargetGeometry

    def close(self) -> None:
        self.image.close()


def _has_transparency(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or (image.mode == "P" and "transparency" in image.info)


def render_surface(
    image: Image.Image,
    geometry: TargetGeometry,
    background: tuple[int, int, int],
) -> Image.Image:
    """Return a new RGB image of ``geometry`` drawn from ``image``."""

    if _has_transparency(image):
        rgba = image.convert("RGBA")
        canvas = Image.new("RGB", rgba.size, background)
        canvas.paste(rgba, mask=rgba.getchannel("A"))
        rgba.close()
    elif image.mode != "RGB":
        canvas = image.convert("RGB")
    else:
        canvas = image.copy()

    if canvas.size == geometry.size:
        return canvas

    resized = canvas.resize(geometry.size, Image.Resampling.LANCZOS)
    canvas.close()
    return resized


@asynccontextmanager
async def allocate_surface(
    source: SourceImage,
    geometry: TargetGeometry,
    background: tuple[int, int, int],
    *,
    token: CancellationToken | None = None,
) -> AsyncIterator[RasterSurface]:
    """Rasterize ``source`` at ``geometry`` and release the pixels on exit."""

    check_token(token)
    try:
        pixels = await asyncio.to_thread(render_surface, source.image, geometry, background)
    except (MemoryError, OSError) as exc:
        raise SurfaceUnavailable(
            f"Could not allocate a {geometry.width}x{geometry.height} raster surface.",
        ) from exc

    surface = RasterSurface(image=pixels, geometry=geometry)
    try:
        yield surface
    finally:
        surface.close()
