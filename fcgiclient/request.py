"""A FastCGI request: parameters plus the body sent as stdin."""

from __future__ import annotations

import inspect
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from dataclasses import dataclass, field
from typing import Any

from .meta import MAX_LENGTH
from .params import Params


@dataclass
class Request:
    """Parameters and body of one FastCGI request.

    ``stdin`` may be bytes, a file-like object whose ``read`` is plain or a
    coroutine (such as ``asyncio.StreamReader``), an async iterable of bytes
    or an iterable of bytes.
    """

    params: Params = field(default_factory=Params.default)
    stdin: Any = b""

    async def chunks(self) -> AsyncIterator[bytes]:
        """Yield the body in non-empty chunks."""
        body = self.stdin
        if isinstance(body, str):
            raise TypeError("stdin must be bytes, not str")
        if isinstance(body, (bytes, bytearray, memoryview)):
            if len(body):
                yield bytes(body)
            return
        if hasattr(body, "read"):
            while True:
                chunk = body.read(MAX_LENGTH)
                if inspect.isawaitable(chunk):
                    chunk = await chunk
                if not chunk:
                    return
                yield bytes(chunk)
        if isinstance(body, AsyncIterable):
            async for chunk in body:
                if chunk:
                    yield bytes(chunk)
            return
        if isinstance(body, Iterable):
            for chunk in body:
                if chunk:
                    yield bytes(chunk)
            return
        raise TypeError(f"unsupported stdin type: {type(body).__name__}")