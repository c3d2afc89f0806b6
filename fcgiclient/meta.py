"""FastCGI record layout: headers, begin and end request bodies, name-value pairs."""

from __future__ import annotations

import logging
import struct
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Mapping
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Union

from .errors import end_request_error

logger = logging.getLogger(__name__)

VERSION_1 = 1
MAX_LENGTH = 0xFFFF
HEADER_LEN = 8

_HEADER = struct.Struct(">BBHHBB")
_BEGIN_REQUEST = struct.Struct(">HB5s")
_END_REQUEST = struct.Struct(">IB3s")
_MAX_PARAM_LENGTH = 0x7FFFFFFF

Content = Union[bytes, bytearray, memoryview, Iterable[bytes], AsyncIterable[bytes]]


class RequestType(IntEnum):
    """Type of a FastCGI record."""

    BEGIN_REQUEST = 1
    ABORT_REQUEST = 2
    END_REQUEST = 3
    PARAMS = 4
    STDIN = 5
    STDOUT = 6
    STDERR = 7
    DATA = 8
    GET_VALUES = 9
    GET_VALUES_RESULT = 10
    UNKNOWN_TYPE = 11

    @classmethod
    def from_byte(cls, value: int) -> RequestType:
        """Decode a type byte; anything unknown becomes UNKNOWN_TYPE."""
        if 1 <= value <= 10:
            return cls(value)
        return cls.UNKNOWN_TYPE

    def __str__(self) -> str:
        return str(int(self))


class Role(IntEnum):
    """Role the application plays for a request."""

    RESPONDER = 1
    AUTHORIZER = 2
    FILTER = 3


class ProtocolStatus(IntEnum):
    """Protocol status carried by an end request record."""

    REQUEST_COMPLETE = 0
    CANT_MPX_CONN = 1
    OVERLOADED = 2
    UNKNOWN_ROLE = 3

    @classmethod
    def from_byte(cls, value: int) -> ProtocolStatus:
        """Decode a status byte; anything unknown becomes UNKNOWN_ROLE."""
        if 0 <= value <= 2:
            return cls(value)
        return cls.UNKNOWN_ROLE

    def check(self, app_status: int) -> None:
        """Raise the matching error unless the request completed."""
        if self is not ProtocolStatus.REQUEST_COMPLETE:
            raise end_request_error(self, app_status)


@dataclass
class Header:
    """The fixed eight-byte header in front of every record."""

    version: int
    record_type: RequestType
    request_id: int
    content_length: int
    padding_length: int
    reserved: int = 0

    @classmethod
    def for_content(cls, record_type: RequestType, request_id: int, content: bytes) -> Header:
        """Build the header for a record carrying ``content``."""
        content_length = min(len(content), MAX_LENGTH)
        return cls(
            version=VERSION_1,
            record_type=record_type,
            request_id=request_id,
            content_length=content_length,
            padding_length=-content_length & 7,
        )

    def to_bytes(self) -> bytes:
        return _HEADER.pack(
            self.version,
            int(self.record_type),
            self.request_id,
            self.content_length,
            self.padding_length,
            self.reserved,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> Header:
        """Decode exactly HEADER_LEN bytes."""
        if len(data) != HEADER_LEN:
            raise ValueError(f"header needs {HEADER_LEN} bytes, got {len(data)}")
        version, type_byte, request_id, content_length, padding, reserved = _HEADER.unpack(
            bytes(data)
        )
        return cls(
            version=version,
            record_type=RequestType.from_byte(type_byte),
            request_id=request_id,
            content_length=content_length,
            padding_length=padding,
            reserved=reserved,
        )

    @classmethod
    async def read_from(cls, reader: Any) -> Header:
        """Read one header from an asyncio stream reader."""
        return cls.from_bytes(await reader.readexactly(HEADER_LEN))

    async def read_content(self, reader: Any) -> bytes:
        """Read this record's content, consuming and dropping its padding."""
        content = await reader.readexactly(self.content_length)
        await reader.readexactly(self.padding_length)
        return content

    def write_to(self, writer: Any, content: bytes) -> None:
        """Queue the header, ``content`` and padding on ``writer``."""
        writer.write(self.to_bytes() + bytes(content) + bytes(self.padding_length))


@dataclass
class BeginRequest:
    """Body of a begin request record."""

    role: Role
    keep_alive: bool
    reserved: bytes = bytes(5)

    @property
    def flags(self) -> int:
        return int(self.keep_alive)

    def to_bytes(self) -> bytes:
        return _BEGIN_REQUEST.pack(int(self.role), self.flags, self.reserved)


@dataclass
class EndRequest:
    """Body of an end request record."""

    app_status: int
    protocol_status: ProtocolStatus
    reserved: bytes = bytes(3)

    @classmethod
    def from_bytes(cls, data: bytes) -> EndRequest:
        if len(data) < _END_REQUEST.size:
            raise ValueError(
                f"end request body needs {_END_REQUEST.size} bytes, got {len(data)}"
            )
        app_status, status, reserved = _END_REQUEST.unpack(bytes(data[: _END_REQUEST.size]))
        return cls(app_status, ProtocolStatus.from_byte(status), reserved)


def encode_param_length(length: int) -> bytes:
    """Encode a name or value length: one byte below 128, else four with the top bit set."""
    if length < 0 or length > _MAX_PARAM_LENGTH:
        raise ValueError(f"parameter length out of range: {length}")
    if length < 128:
        return bytes((length,))
    return struct.pack(">I", length | 1 << 31)


def _as_bytes(text: str | bytes) -> bytes:
    return text.encode() if isinstance(text, str) else bytes(text)


def encode_param_pair(name: str | bytes, value: str | bytes) -> bytes:
    """Encode one name-value pair."""
    name_data = _as_bytes(name)
    value_data = _as_bytes(value)
    return (
        encode_param_length(len(name_data))
        + encode_param_length(len(value_data))
        + name_data
        + value_data
    )


def encode_params(params: Mapping[str, str]) -> bytes:
    """Encode every pair of ``params`` in iteration order."""
    return b"".join(encode_param_pair(name, value) for name, value in params.items())


def begin_request_record(request_id: int, role: Role, keep_alive: bool) -> bytes:
    """Build a whole begin request record, header included."""
    body = BeginRequest(role, keep_alive)
    content = body.to_bytes()
    header = Header.for_content(RequestType.BEGIN_REQUEST, request_id, content)
    logger.debug("begin request id=%s header=%s body=%s", request_id, header, body)
    return header.to_bytes() + content + bytes(header.padding_length)


async def _iter_chunks(content: Content) -> AsyncIterator[bytes]:
    if isinstance(content, (bytes, bytearray, memoryview)):
        yield bytes(content)
        return
    if isinstance(content, AsyncIterable):
        async for chunk in content:
            yield bytes(chunk)
        return
    for chunk in content:
        yield bytes(chunk)


async def write_records(
    writer: Any, record_type: RequestType, request_id: int, content: Content
) -> None:
    """Write ``content`` as records of at most MAX_LENGTH bytes each.

    Empty content yields a single empty record, which ends a stream.
    """
    written = False
    async for chunk in _iter_chunks(content):
        for start in range(0, len(chunk), MAX_LENGTH):
            piece = chunk[start : start + MAX_LENGTH]
            header = Header.for_content(record_type, request_id, piece)
            logger.debug("send id=%s header=%s", request_id, header)
            header.write_to(writer, piece)
            await writer.drain()
            written = True
    if not written:
        header = Header.for_content(record_type, request_id, b"")
        logger.debug("send id=%s header=%s", request_id, header)
        header.write_to(writer, b"")
        await writer.drain()