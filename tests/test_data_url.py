"""Tests for data URL helpers."""

import pytest

from imgcompress.imgproc.data_url import build_data_url, parse_data_url


def test_build_and_parse() -> None:
    url = build_data_url(b"\xff\xd8\xff", "image/jpeg")

    assert url == "data:image/jpeg;base64,/9j/"
    assert parse_data_url(url) == ("image/jpeg", b"\xff\xd8\xff")


@pytest.mark.parametrize(
    "url",
    [
        "https://example.com/image.jpg",
        "data:image/jpeg;base64",
        "data:text/plain,hello",
        "data:image/jpeg;base64,***",
    ],
)
def test_parse_rejects_invalid_urls(url: str) -> None:
    with pytest.raises(ValueError):
        parse_data_url(url)
