"""Responses of a FastCGI server, whole or as a stream of output chunks."""

from __future__ import annotations

import logging
from contextlib import suppress
from dataclasses import dataclass
from enum import Enum
from typing import Any

import asyncio

from .errors import UnknownRequestTypeError
from .meta import EndRequest, Header, RequestType

logger = logging.getLogger(__name__)


def _show(data: bytes | None) -> str:
    if data is None:
        return "None"
    return repr(data.decode("utf-8", errors="backslashreplace"))


@dataclass(repr=False)
class Response:
    """Everything a request wrote to STDOUT and STDERR; None when nothing."""

    stdout: bytes | None = None
    stderr: bytes | None = None

    def __repr__(self) -> str:
        return f"Response(stdout={_show(self.stdout)}, stderr={_show(self.stderr)})"


class ContentKind(Enum):
    """Output channel a chunk of content came from."""

    STDOUT = "stdout"
    STDERR = "stderr"


@dataclass(frozen=True)
class Content:
    """One chunk of output received from the server."""

    kind: ContentKind
    data: bytes


_KINDS = {
    RequestType.STDOUT: ContentKind.STDOUT,
    RequestType.STDERR: ContentKind.STDERR,
}


class ResponseStream:
    """Async iterator over the output records of one request.

    Iteration ends at the end request record, or quietly when the
    connection closes first. If ``writer`` is given, it is closed once
    the stream is finished.
    """

    def __init__(self, reader: Any, request_id: int, *, writer: Any = None) -> None:
        self._reader = reader
        self._request_id = request_id
        self._writer = writer
        self._eof = False

    def __aiter__(self) -> ResponseStream:
        return self

    async def __anext__(self) -> Content:
        while not self._eof:
            try:
                header = await Header.read_from(self._reader)
                data = await header.read_content(self._reader)
            except asyncio.IncompleteReadError:
                await self._finish()
                break
            logger.debug("receive id=%s header=%s", self._request_id, header)

            kind = _KINDS.get(header.record_type)
            if kind is not None:
                return Content(kind, data)

            await self._finish()
            if header.record_type is RequestType.END_REQUEST:
                end = EndRequest.from_bytes(data)
                logger.debug("receive id=%s end=%s", self._request_id, end)
                end.protocol_status.check(end.app_status)
                break
            raise UnknownRequestTypeError(header.record_type)
        raise StopAsyncIteration

    async def _finish(self) -> None:
        self._eof = True
        writer, self._writer = self._writer, None
        if writer is None:
            return
        writer.close()
        wait_closed = getattr(writer, "wait_closed", None)
        if wait_closed is not None:
            with suppress(OSError):
                await wait_closed()