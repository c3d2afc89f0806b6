import asyncio

import pytest

from fcgiclient.errors import EndRequestOverloadedError, EndRequestUnknownRoleError
from fcgiclient.meta import (
    HEADER_LEN,
    MAX_LENGTH,
    VERSION_1,
    BeginRequest,
    EndRequest,
    Header,
    ProtocolStatus,
    RequestType,
    Role,
    begin_request_record,
    encode_param_length,
    encode_param_pair,
    encode_params,
    write_records,
)


class _Sink:
    def __init__(self):
        self.data = bytearray()
        self.drains = 0

    def write(self, data):
        self.data += data

    async def drain(self):
        self.drains += 1


def _parse_records(data):
    records = []
    view = bytes(data)
    while view:
        header = Header.from_bytes(view[:HEADER_LEN])
        start = HEADER_LEN
        end = start + header.content_length
        records.append((header, view[start:end]))
        view = view[end + header.padding_length :]
    return records


async def _produce():
    yield b"ab"
    yield b""
    yield b"cd"


def test_request_type_from_byte():
    assert RequestType.from_byte(6) is RequestType.STDOUT
    assert RequestType.from_byte(3) is RequestType.END_REQUEST
    assert RequestType.from_byte(200) is RequestType.UNKNOWN_TYPE
    assert RequestType.from_byte(0) is RequestType.UNKNOWN_TYPE


def test_request_type_displays_as_number():
    assert str(RequestType.from_byte(7)) == "7"
    assert str(RequestType.from_byte(3)) == "3"


def test_protocol_status_from_byte():
    assert ProtocolStatus.from_byte(0) is ProtocolStatus.REQUEST_COMPLETE
    assert ProtocolStatus.from_byte(2) is ProtocolStatus.OVERLOADED
    assert ProtocolStatus.from_byte(9) is ProtocolStatus.UNKNOWN_ROLE


def test_protocol_status_check():
    assert ProtocolStatus.REQUEST_COMPLETE.check(5) is None
    with pytest.raises(EndRequestOverloadedError) as info:
        ProtocolStatus.OVERLOADED.check(5)
    assert info.value.app_status == 5
    with pytest.raises(EndRequestUnknownRoleError):
        ProtocolStatus.UNKNOWN_ROLE.check(0)


@pytest.mark.parametrize("size", [0, 1, 5, 8, 9, 100, MAX_LENGTH])
def test_header_padding_aligns_to_eight(size):
    header = Header.for_content(RequestType.STDIN, 1, bytes(size))
    assert header.version == VERSION_1
    assert header.content_length == size
    assert 0 <= header.padding_length < 8
    assert (header.content_length + header.padding_length) % 8 == 0


def test_header_content_length_is_capped():
    header = Header.for_content(RequestType.STDIN, 1, bytes(MAX_LENGTH + 10))
    assert header.content_length == MAX_LENGTH


def test_header_round_trip():
    header = Header.for_content(RequestType.PARAMS, 513, b"abc")
    raw = header.to_bytes()
    assert len(raw) == HEADER_LEN
    assert Header.from_bytes(raw) == header


def test_header_from_bytes_rejects_wrong_size():
    with pytest.raises(ValueError):
        Header.from_bytes(b"\x01\x06")


def test_header_write_to_appends_padding():
    sink = _Sink()
    header = Header.for_content(RequestType.STDOUT, 1, b"hello")
    header.write_to(sink, b"hello")
    assert len(sink.data) % 8 == 0
    assert _parse_records(sink.data) == [(header, b"hello")]


@pytest.mark.asyncio
async def test_header_read_from_and_content_skip_padding():
    sink = _Sink()
    first = Header.for_content(RequestType.STDOUT, 1, b"hello")
    first.write_to(sink, b"hello")
    second = Header.for_content(RequestType.STDERR, 1, b"oops")
    second.write_to(sink, b"oops")

    reader = asyncio.StreamReader()
    reader.feed_data(bytes(sink.data))
    reader.feed_eof()

    header = await Header.read_from(reader)
    assert header == first
    assert await header.read_content(reader) == b"hello"
    header = await Header.read_from(reader)
    assert header.record_type is RequestType.STDERR
    assert await header.read_content(reader) == b"oops"
    assert reader.at_eof()


@pytest.mark.asyncio
async def test_header_read_from_truncated_stream():
    reader = asyncio.StreamReader()
    reader.feed_data(b"\x01\x06\x00")
    reader.feed_eof()
    with pytest.raises(asyncio.IncompleteReadError):
        await Header.read_from(reader)


def test_begin_request_body():
    body = BeginRequest(Role.RESPONDER, True)
    raw = body.to_bytes()
    assert len(raw) == 8
    assert raw[:2] == int(Role.RESPONDER).to_bytes(2, "big")
    assert raw[2] == 1
    assert raw[3:] == bytes(5)


def test_begin_request_record_bytes():
    assert begin_request_record(1, Role.RESPONDER, False) == bytes(
        [1, 1, 0, 1, 0, 8, 0, 0, 0, 1, 0, 0, 0, 0, 0, 0]
    )


def test_begin_request_record_keep_alive_flag():
    ((header, content),) = _parse_records(begin_request_record(3, Role.FILTER, True))
    assert header.record_type is RequestType.BEGIN_REQUEST
    assert header.request_id == 3
    assert content == BeginRequest(Role.FILTER, True).to_bytes()


def test_end_request_from_bytes():
    end = EndRequest.from_bytes(b"\x00\x00\x00\x07\x02\x00\x00\x00")
    assert end.app_status == 7
    assert end.protocol_status is ProtocolStatus.OVERLOADED
    assert end.reserved == bytes(3)


def test_end_request_from_short_bytes():
    with pytest.raises(ValueError):
        EndRequest.from_bytes(b"\x00\x00")


def test_param_length_short_and_long():
    assert encode_param_length(5) == b"\x05"
    assert encode_param_length(127) == b"\x7f"
    assert encode_param_length(128) == b"\x80\x00\x00\x80"
    assert len(encode_param_length(70000)) == 4
    assert encode_param_length(70000)[0] & 0x80


def test_param_length_out_of_range():
    with pytest.raises(ValueError):
        encode_param_length(-1)
    with pytest.raises(ValueError):
        encode_param_length(1 << 31)


def test_param_pair_encoding():
    assert encode_param_pair("A", "b") == b"\x01\x01Ab"


def test_param_pair_long_value():
    value = "x" * 200
    encoded = encode_param_pair("N", value)
    assert encoded[:1] == encode_param_length(1)
    assert encoded[1:5] == encode_param_length(200)
    assert encoded.endswith(b"N" + value.encode())


def test_param_pair_uses_byte_length():
    encoded = encode_param_pair("k", "é")
    assert encoded[1] == len("é".encode())


def test_encode_params_concatenates_pairs():
    params = {"A": "1", "BB": "22"}
    assert encode_params(params) == encode_param_pair("A", "1") + encode_param_pair("BB", "22")
    assert encode_params({}) == b""


@pytest.mark.asyncio
async def test_write_records_empty_content_writes_one_empty_record():
    sink = _Sink()
    await write_records(sink, RequestType.STDIN, 1, b"")
    records = _parse_records(sink.data)
    assert len(records) == 1
    header, content = records[0]
    assert header.record_type is RequestType.STDIN
    assert header.content_length == 0
    assert content == b""


@pytest.mark.asyncio
async def test_write_records_splits_large_content():
    body = bytes(range(256)) * 300
    sink = _Sink()
    await write_records(sink, RequestType.STDIN, 1, body)
    records = _parse_records(sink.data)
    assert len(records) == 2
    assert all(header.content_length <= MAX_LENGTH for header, _ in records)
    assert b"".join(content for _, content in records) == body
    assert sink.drains == len(records)


@pytest.mark.asyncio
async def test_write_records_accepts_iterables():
    sink = _Sink()
    await write_records(sink, RequestType.PARAMS, 2, _produce())
    records = _parse_records(sink.data)
    assert [content for _, content in records] == [b"ab", b"cd"]
    assert {header.request_id for header, _ in records} == {2}

    sink = _Sink()
    await write_records(sink, RequestType.STDIN, 1, [b"x", b"y"])
    assert [content for _, content in _parse_records(sink.data)] == [b"x", b"y"]