"""Async FastCGI client over an asyncio stream pair."""

from __future__ import annotations

import logging
from contextlib import suppress
from typing import Any

from .conn import Mode
from .errors import ClientError, ResponseNotFoundError, UnknownRequestTypeError
from .meta import (
    EndRequest,
    Header,
    RequestType,
    Role,
    begin_request_record,
    encode_params,
    write_records,
)
from .request import Request
from .response import Response, ResponseStream

logger = logging.getLogger(__name__)

# Like common web servers, one request at a time per connection, always id 1.
REQUEST_ID = 1


class Client:
    """Talks to a FastCGI server over an asyncio reader and writer.

    A short-connection client serves a single request and closes the
    connection; a keep-alive client serves requests one after another.
    """

    def __init__(self, reader: Any, writer: Any, mode: Mode = Mode.SHORT_CONN) -> None:
        self._reader = reader
        self._writer = writer
        self._mode = mode
        self._used = False

    @classmethod
    def short(cls, reader: Any, writer: Any) -> Client:
        """Client for one request on a connection closed afterwards."""
        return cls(reader, writer, Mode.SHORT_CONN)

    @classmethod
    def keep_alive(cls, reader: Any, writer: Any) -> Client:
        """Client for many requests on one connection."""
        return cls(reader, writer, Mode.KEEP_ALIVE)

    @property
    def mode(self) -> Mode:
        return self._mode

    async def execute_once(self, request: Request) -> Response:
        """Send the request, collect the whole response and close the connection."""
        self._start_once("execute_once")
        try:
            await self._send(request)
            return await self._receive()
        finally:
            await self._close()

    async def execute_once_stream(self, request: Request) -> ResponseStream:
        """Send the request and stream the response; the connection closes at its end."""
        self._start_once("execute_once_stream")
        try:
            await self._send(request)
        except BaseException:
            await self._close()
            raise
        return ResponseStream(self._reader, REQUEST_ID, writer=self._writer)

    async def execute(self, request: Request) -> Response:
        """Send the request and collect the whole response, keeping the connection."""
        self._require(Mode.KEEP_ALIVE, "execute")
        await self._send(request)
        return await self._receive()

    async def execute_stream(self, request: Request) -> ResponseStream:
        """Send the request and stream the response, keeping the connection."""
        self._require(Mode.KEEP_ALIVE, "execute_stream")
        await self._send(request)
        return ResponseStream(self._reader, REQUEST_ID)

    def _require(self, mode: Mode, operation: str) -> None:
        if self._mode is not mode:
            raise ValueError(f"{operation} needs a {mode.value} client, not {self._mode.value}")

    def _start_once(self, operation: str) -> None:
        self._require(Mode.SHORT_CONN, operation)
        if self._used:
            raise ClientError("a short connection serves only one request")
        self._used = True

    async def _send(self, request: Request) -> None:
        writer = self._writer
        logger.debug("start request id=%s", REQUEST_ID)
        writer.write(begin_request_record(REQUEST_ID, Role.RESPONDER, self._mode.is_keep_alive()))

        await write_records(writer, RequestType.PARAMS, REQUEST_ID, encode_params(request.params))
        await write_records(writer, RequestType.PARAMS, REQUEST_ID, b"")
        await write_records(writer, RequestType.STDIN, REQUEST_ID, request.chunks())
        await write_records(writer, RequestType.STDIN, REQUEST_ID, b"")
        await writer.drain()

    async def _receive(self) -> Response:
        stdout = bytearray()
        stderr = bytearray()
        while True:
            header = await Header.read_from(self._reader)
            if header.request_id != REQUEST_ID:
                raise ResponseNotFoundError(REQUEST_ID)
            logger.debug("receive id=%s header=%s", REQUEST_ID, header)

            if header.record_type is RequestType.STDOUT:
                stdout += await header.read_content(self._reader)
            elif header.record_type is RequestType.STDERR:
                stderr += await header.read_content(self._reader)
            elif header.record_type is RequestType.END_REQUEST:
                end = EndRequest.from_bytes(await header.read_content(self._reader))
                logger.debug("receive id=%s end=%s", REQUEST_ID, end)
                end.protocol_status.check(end.app_status)
                return Response(
                    stdout=bytes(stdout) if stdout else None,
                    stderr=bytes(stderr) if stderr else None,
                )
            else:
                raise UnknownRequestTypeError(header.record_type)

    async def _close(self) -> None:
        self._writer.close()
        wait_closed = getattr(self._writer, "wait_closed", None)
        if wait_closed is not None:
            with suppress(OSError):
                await wait_closed()