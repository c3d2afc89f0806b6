# fcgiclient

An asynchronous FastCGI client built on `asyncio` streams. It sends a request to a FastCGI application server, such as PHP-FPM, and returns what the application wrote to stdout and stderr. You can collect the whole response at once, or read it as a stream of chunks.

The package has no runtime dependencies. It needs Python 3.10 or later.

## Modules

- `fcgiclient.client`: `Client`, which sends requests and reads responses.
- `fcgiclient.params`: `Params`, a `dict` of CGI variables with chainable setters.
- `fcgiclient.request`: `Request`, which pairs the params with a body.
- `fcgiclient.response`: `Response`, `ResponseStream`, `Content` and `ContentKind`.
- `fcgiclient.conn`: `Mode`, which is either short connection or keep-alive.
- `fcgiclient.errors`: `ClientError` and its subclasses.
- `fcgiclient.meta`: the record layout, with `Header`, `RequestType`, `Role`, `ProtocolStatus`, `BeginRequest`, `EndRequest`, the name-value pair encoders and `write_records`.

## Connection modes

A `Client` wraps an `asyncio` reader/writer pair, such as the one returned by `asyncio.open_connection` or `asyncio.open_unix_connection`.

- `Client.short(reader, writer)` gives a short-connection client. It serves exactly one request through `execute_once` or `execute_once_stream`, and then closes the writer. If you try a second request, it raises `ClientError`.
- `Client.keep_alive(reader, writer)` gives a keep-alive client. It asks the server to keep the connection open, and it serves requests one after another through `execute` or `execute_stream`.

If you call a method that belongs to the other mode, it raises `ValueError`. The mode of a client is available as `client.mode`.

## Building parameters

`Params.default()` starts with three variables already set:

- `GATEWAY_INTERFACE=FastCGI/1.0`
- `SERVER_SOFTWARE=fcgiclient`
- `SERVER_PROTOCOL=HTTP/1.1`

Each setter stores one CGI variable and returns the same params, so the calls can be chained:

```python
from fcgiclient.params import Params

params = (
    Params.default()
    .request_method("GET")
    .document_root("/var/www")
    .script_name("/index.php")
    .script_filename("/var/www/index.php")
    .request_uri("/index.php")
    .document_uri("/index.php")
    .remote_addr("127.0.0.1")
    .remote_port(12345)
    .server_addr("127.0.0.1")
    .server_port(80)
    .server_name("localhost")
    .content_type("")
    .content_length(0)
)
```

`remote_port` and `server_port` take an integer from 0 to 65535. `content_length` takes a non-negative integer. A value outside these ranges raises `ValueError`. `Params` is a `dict`, so you can also set any other variable with `params["NAME"] = "value"`. `params.copy()` returns an independent `Params`.

## Sending a request

```python
import asyncio

from fcgiclient.client import Client
from fcgiclient.request import Request


async def main():
    reader, writer = await asyncio.open_connection("127.0.0.1", 9000)
    client = Client.short(reader, writer)
    response = await client.execute_once(Request(params, b""))
    print(response.stdout)  # bytes, or None when nothing was written
    print(response.stderr)


asyncio.run(main())
```

`Request(params, stdin)` defaults to `Params.default()` and an empty body. The body can be any of the following:

- `bytes`
- a file-like object whose `read` is plain or a coroutine, such as `io.BytesIO` or `asyncio.StreamReader`
- an async iterable of bytes
- an iterable of bytes

A `str` body raises `TypeError`. The body is sent as FastCGI stdin, split into records of at most 65535 bytes. Every request uses request id 1 and the responder role.

## Keep-alive and POST bodies

```python
body = b"p1=3&p2=4"
params = (
    Params.default()
    .request_method("POST")
    .content_type("application/x-www-form-urlencoded")
    .content_length(len(body))
    # ... script and server variables as above
)

reader, writer = await asyncio.open_connection("127.0.0.1", 9000)
client = Client.keep_alive(reader, writer)
for _ in range(3):
    response = await client.execute(Request(params.copy(), body))
```

## Streaming responses

`execute_once_stream` and `execute_stream` return a `ResponseStream`. It yields `Content` items as records arrive. Each item has a `kind`, which is `ContentKind.STDOUT` or `ContentKind.STDERR`, and a `data` field holding the bytes:

```python
from fcgiclient.response import ContentKind

stream = await client.execute_once_stream(Request(params, b""))
stdout = bytearray()
async for content in stream:
    if content.kind is ContentKind.STDOUT:
        stdout += content.data
```

The stream ends when the end-request record arrives. It also ends, without raising an error, if the connection closes before that record. A stream started with `execute_once_stream` closes the writer when it ends.

## Errors

Protocol failures raise a subclass of `fcgiclient.errors.ClientError`:

- `ResponseNotFoundError`: a record arrived for a request id other than 1.
- `UnknownRequestTypeError`: the server sent a record type that is neither stdout, stderr nor end-request.
- `EndRequestCantMpxConnError`, `EndRequestOverloadedError`, `EndRequestUnknownRoleError`: the server ended the request with that protocol status. All three derive from `EndRequestError`, and they keep the application status in `app_status`.

When `execute_once` or `execute` finds the connection closed before the response is complete, it raises `asyncio.IncompleteReadError`. Other socket failures surface as `OSError`.

## What it does not do

This package is a client only. It provides no FastCGI server, no command-line tool and no connection pool. It does not multiplex several requests on one connection. It does not send the authorizer or filter roles, and it does not send management records such as get-values.