"""Pipeline configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional, Sequence

DEFAULT_MAX_SIZE = 4 * 1024 * 1024
DEFAULT_MAX_DIMENSION = 2048
DEFAULT_QUALITY_LADDER: tuple[float, ...] = (0.92, 0.85, 0.75, 0.65, 0.50)
DEFAULT_BACKGROUND: tuple[int, int, int] = (0, 0, 0)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _load_env_file(path: str = ".env") -> None:
    """Populate os.environ from the provided .env file if it exists."""

    env_path = Path(path)
    if not env_path.exists():
        return

    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


@dataclass(frozen=True, slots=True)
class CompressionConfig:
    """Budget and encoding parameters for one compression call."""

    max_size: int = DEFAULT_MAX_SIZE
    max_dimension: int = DEFAULT_MAX_DIMENSION
    quality_ladder: tuple[float, ...] = DEFAULT_QUALITY_LADDER
    strict: bool = False
    background: tuple[int, int, int] = DEFAULT_BACKGROUND
    max_input_bytes: Optional[int] = None

    def __post_init__(self) -> None:
        if self.max_size <= 0:
            raise ValueError("max_size must be a positive number of bytes.")
        if self.max_dimension <= 0:
            raise ValueError("max_dimension must be a positive number of pixels.")
        if self.max_input_bytes is not None and self.max_input_bytes <= 0:
            raise ValueError("max_input_bytes must be positive when set.")

        ladder = tuple(float(level) for level in self.quality_ladder)
        if not ladder:
            raise ValueError("quality_ladder must contain at least one level.")
        if any(not 0.0 < level <= 1.0 for level in ladder):
            raise ValueError("quality levels must lie in (0, 1].")
        if any(later >= earlier for earlier, later in zip(ladder, ladder[1:])):
            raise ValueError("quality_ladder must be strictly descending.")
        object.__setattr__(self, "quality_ladder", ladder)

        if len(self.background) != 3 or any(not 0 <= channel <= 255 for channel in self.background):
            raise ValueError("background must be an RGB triple of 0-255 values.")
        object.__setattr__(self, "background", tuple(int(channel) for channel in self.background))

    @property
    def lowest_quality(self) -> float:
        return self.quality_ladder[-1]


@dataclass(frozen=True, slots=True)
class Settings:
    """Centralised project settings based on OS environment variables."""

    environment: str = "dev"
    log_level: str = "INFO"

    image_max_size: int = DEFAULT_MAX_SIZE
    image_max_dimension: int = DEFAULT_MAX_DIMENSION
    image_quality_ladder: tuple[float, ...] = DEFAULT_QUALITY_LADDER
    image_strict_size: bool = False
    image_background: tuple[int, int, int] = DEFAULT_BACKGROUND
    image_max_input_bytes: Optional[int] = None
    image_batch_concurrency: int = 4

    def __post_init__(self) -> None:
        if self.image_batch_concurrency <= 0:
            raise ValueError("IMAGE_BATCH_CONCURRENCY must be a positive integer.")

    def compression_config(self) -> CompressionConfig:
        """Return the value object threaded through the pipeline."""

        return CompressionConfig(
            max_size=self.image_max_size,
            max_dimension=self.image_max_dimension,
            quality_ladder=self.image_quality_ladder,
            strict=self.image_strict_size,
            background=self.image_background,
            max_input_bytes=self.image_max_input_bytes,
        )


def parse_quality_ladder(raw: str) -> tuple[float, ...]:
    """Parse ``"0.92,0.85,0.5"`` into a tuple of floats."""

    return tuple(float(part) for part in raw.split(",") if part.strip())


def parse_hex_color(raw: str) -> tuple[int, int, int]:
    """Parse ``#rrggbb`` (leading hash optional) into an RGB triple."""

    value = raw.strip().lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected a #rrggbb colour, got {raw!r}.")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


def _env_optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


def _ladder_from_env(default: Sequence[float]) -> tuple[float, ...]:
    raw = os.getenv("IMAGE_QUALITY_LADDER", "").strip()
    return parse_quality_ladder(raw) if raw else tuple(default)


def _build_settings() -> Settings:
    _load_env_file()

    background = os.getenv("IMAGE_BACKGROUND", "").strip()
    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        image_max_size=int(os.getenv("IMAGE_MAX_SIZE", str(DEFAULT_MAX_SIZE))),
        image_max_dimension=int(os.getenv("IMAGE_MAX_DIMENSION", str(DEFAULT_MAX_DIMENSION))),
        image_quality_ladder=_ladder_from_env(DEFAULT_QUALITY_LADDER),
        image_strict_size=_env_bool("IMAGE_STRICT_SIZE", False),
        image_background=parse_hex_color(background) if background else DEFAULT_BACKGROUND,
        image_max_input_bytes=_env_optional_int("IMAGE_MAX_INPUT_BYTES"),
        image_batch_concurrency=int(os.getenv("IMAGE_BATCH_CONCURRENCY", "4")),
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance to avoid re-reading configuration."""

    return _build_settings()
