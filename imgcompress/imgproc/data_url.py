"""Helpers for ``data:`` URLs."""

from __future__ import annotations

import base64
import binascii


def build_data_url(data: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def parse_data_url(url: str) -> tuple[str, bytes]:
    """Split a base64 data URL into its MIME type and decoded payload."""

    if not url.startswith("data:") or "," not in url:
        raise ValueError("Not a data URL.")
    header, encoded = url[len("data:"):].split(",", 1)
    mime_type, _, encoding = header.partition(";")
    if encoding != "base64":
        raise ValueError("Only base64 data URLs are supported.")
    try:
        return mime_type, base64.b64decode(encoded, validate=True)
    except (ValueError, binascii.Error) as exc:
        raise ValueError("Data URL payload is not valid base64.") from exc
