"""Connection modes of a client."""

from __future__ import annotations

from enum import Enum


class Mode(Enum):
    """Whether the connection is closed after one request or kept alive."""

    SHORT_CONN = "short"
    KEEP_ALIVE = "keep_alive"

    def is_keep_alive(self) -> bool:
        """Tell whether the server should keep the connection open."""
        return self is Mode.KEEP_ALIVE