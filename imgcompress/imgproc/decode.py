"""Decoding of caller-supplied image bytes."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import AsyncIterator, BinaryIO, Optional, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from imgcompress.cancellation import CancellationToken, check_token
from imgcompress.errors import DecodeError
from imgcompress.imgproc.data_url import parse_data_url

logger = logging.getLogger(__name__)

ImageSource = Union[bytes, bytearray, memoryview, BinaryIO, Path, str]

_DECODE_ERRORS = (
    UnidentifiedImageError,
    Image.DecompressionBombError,
    OSError,
    SyntaxError,
    ValueError,
    EOFError,
)


@dataclass(slots=True)
class SourceImage:
    """Decoded image handle with EXIF orientation already applied."""

    image: Image.Image
    source_format: Optional[str] = None

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def close(self) -> None:
        self.image.close()


def _check_input_size(size: int, max_input_bytes: int | None) -> None:
    if max_input_bytes is not None and size > max_input_bytes:
        raise DecodeError(f"Input is {size} bytes, limit is {max_input_bytes} bytes.")


def _read_source(source: ImageSource, max_input_bytes: int | None = None) -> bytes:
    """Return the raw image bytes. ``data:`` strings are decoded, other strings are paths."""

    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    if isinstance(source, str) and source.startswith("data:"):
        try:
            _, payload = parse_data_url(source)
        except ValueError as exc:
            raise DecodeError(f"Input is not a valid data URL: {exc}") from exc
        return payload
    if isinstance(source, (str, Path)):
        path = Path(source)
        _check_input_size(path.stat().st_size, max_input_bytes)
        return path.read_bytes()
    return source.read()


def _decode(data: bytes) -> SourceImage:
    try:
        opened = Image.open(BytesIO(data))
    except _DECODE_ERRORS as exc:
        raise DecodeError(f"Input is not a supported image: {exc}") from exc

    source_format = opened.format
    try:
        opened.load()
        oriented = ImageOps.exif_transpose(opened)
    except _DECODE_ERRORS as exc:
        opened.close()
        raise DecodeError(f"Input is not a supported image: {exc}") from exc

    if oriented is not opened:
        opened.close()
    if oriented.width <= 0 or oriented.height <= 0:
        oriented.close()
        raise DecodeError("Decoded image has zero width or height.")
    return SourceImage(image=oriented, source_format=source_format)


@asynccontextmanager
async def open_source_image(
    source: ImageSource,
    *,
    max_input_bytes: int | None = None,
    token: CancellationToken | None = None,
) -> AsyncIterator[SourceImage]:
    """Decode ``source`` and close the decoded handle on exit."""

    check_token(token)
    data = await asyncio.to_thread(_read_source, source, max_input_bytes)
    if not data:
        raise DecodeError("Input is empty.")
    _check_input_size(len(data), max_input_bytes)

    check_token(token)
    try:
        decoded = await asyncio.to_thread(_decode, data)
    except DecodeError as exc:
        logger.warning("Failed to decode image (%d bytes): %s", len(data), exc)
        raise

    try:
        yield decoded
    finally:
        decoded.close()
