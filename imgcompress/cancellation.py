"""Cooperative cancellation for in-flight compressions."""

from __future__ import annotations

from typing import Optional

from imgcompress.errors import CompressionCancelled


class CancellationToken:
    """Flag shared between a caller and a running compression.

    The pipeline checks the token before decoding, before rasterizing and
    before every encode attempt.
    """

    __slots__ = ("_cancelled", "_reason")

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation. Repeated calls keep the first reason."""

        if not self._cancelled:
            self._cancelled = True
            self._reason = reason

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise CompressionCancelled(self._reason or "Compression was cancelled.")


def check_token(token: CancellationToken | None) -> None:
    if token is not None:
        token.raise_if_cancelled()
