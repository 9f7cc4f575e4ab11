"""Shared fixtures building synthetic images."""

from __future__ import annotations

import os
from io import BytesIO
from typing import Callable

import pytest
from PIL import Image

from imgcompress.config.settings import CompressionConfig, get_settings

ImageFactory = Callable[..., bytes]


def _save(image: Image.Image, fmt: str, **kwargs) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format=fmt, **kwargs)
    image.close()
    return buffer.getvalue()


@pytest.fixture
def make_image() -> ImageFactory:
    def _factory(
        width: int,
        height: int,
        *,
        mode: str = "RGB",
        color: object = (200, 120, 40),
        fmt: str = "PNG",
    ) -> bytes:
        return _save(Image.new(mode, (width, height), color), fmt)

    return _factory


@pytest.fixture
def make_noise_image() -> ImageFactory:
    def _factory(width: int, height: int, fmt: str = "PNG") -> bytes:
        image = Image.frombytes("RGB", (width, height), os.urandom(width * height * 3))
        return _save(image, fmt)

    return _factory


@pytest.fixture
def default_config() -> CompressionConfig:
    return CompressionConfig()


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    for name in (
        "IMAGE_MAX_SIZE",
        "IMAGE_MAX_DIMENSION",
        "IMAGE_QUALITY_LADDER",
        "IMAGE_STRICT_SIZE",
        "IMAGE_BACKGROUND",
        "IMAGE_MAX_INPUT_BYTES",
        "IMAGE_BATCH_CONCURRENCY",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
