"""Compress images into size-bounded JPEG data URLs."""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Sequence

from imgcompress import EncodedResult, ImageCompressionError, ImageCompressionService
from imgcompress.config.settings import get_settings
from imgcompress.monitoring.logging import configure_logging


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Re-encode images as JPEG data URLs that fit a byte budget.",
    )
    parser.add_argument("inputs", nargs="+", type=Path, help="Source image files")
    parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        help="Directory for results (default: next to each input)",
    )
    parser.add_argument("--max-size", type=int, help="Budget for the data URL in bytes")
    parser.add_argument("--max-dimension", type=int, help="Longest side in pixels")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail instead of returning an over-budget lowest-quality encode",
    )
    parser.add_argument(
        "--raw",
        action="store_true",
        help="Write the JPEG bytes instead of the data URL text",
    )
    return parser


def _output_path(source: Path, output_dir: Path | None, raw: bool) -> Path:
    suffix = ".jpg" if raw else ".jpg.b64"
    directory = output_dir or source.parent
    return directory / f"{source.stem}{suffix}"


def _format_result(source: Path, result: EncodedResult) -> str:
    status = "✅" if result.within_budget else "⚠️"
    return (
        f"{status} {source.name}: {result.width}x{result.height}, "
        f"quality={result.quality:.2f}, size={result.byte_length} bytes"
    )


def _format_failure(source: Path, error: BaseException) -> str:
    return f"❌ {source.name}: {error}"


def write_results(
    sources: Sequence[Path],
    results: Iterable[EncodedResult | BaseException],
    output_dir: Path | None,
    raw: bool,
) -> int:
    """Write successful results, report failures and return the failure count."""

    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)
    failures = 0
    for source, result in zip(sources, results):
        if isinstance(result, (ImageCompressionError, OSError)):
            failures += 1
            print(_format_failure(source, result))
            continue
        if isinstance(result, BaseException):
            raise result
        target = _output_path(source, output_dir, raw)
        if raw:
            target.write_bytes(result.to_bytes())
        else:
            target.write_text(result.data_url, encoding="ascii")
        print(f"{_format_result(source, result)} ➜ {target}")
    return failures


async def run(args: argparse.Namespace) -> list[EncodedResult | BaseException]:
    settings = get_settings()
    config = settings.compression_config()
    overrides = {}
    if args.max_size is not None:
        overrides["max_size"] = args.max_size
    if args.max_dimension is not None:
        overrides["max_dimension"] = args.max_dimension
    if args.strict:
        overrides["strict"] = True
    if overrides:
        config = replace(config, **overrides)

    service = ImageCompressionService(config)
    return await service.compress_many(
        args.inputs,
        concurrency=settings.image_batch_concurrency,
        return_exceptions=True,
    )


def main(argv: Sequence[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    configure_logging()
    results = asyncio.run(run(args))
    failures = write_results(args.inputs, results, args.output_dir, args.raw)
    if failures:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
