# edgehttp

A small toolkit for HTTP/1.x with no dependencies. It covers the parts that
sit between raw bytes and an application:

- a bounded header table that matches names without regard to case;
- rules that decide the connection type and body framing of a message;
- the WebSocket upgrade handshake.

## Installation

```
pip install edgehttp
```

## Headers

`edgehttp.headers.Headers` holds up to `capacity` name/value pairs. The
default capacity is `DEFAULT_MAX_HEADERS_COUNT`, which is 64.

- Names are matched without regard to ASCII case.
- Setting a name that is already present replaces its value in place, so the
  header keeps its position.
- Setting a new name when the table is full raises `IndexError`.
- Setting a header with an empty name does nothing.
- Removing a header keeps the rest in their order.

The setters return the table, so calls can be chained.

```python
from edgehttp.headers import Headers

headers = Headers(16)
headers.set_host("example.com").set_connection_keep_alive().set_content_len(42)

headers.get("host")       # "example.com"
headers.content_len()     # 42
headers.remove("Host")
list(headers)             # [("Connection", "Keep-Alive"), ("Content-Length", "42")]
```

Iterating over the table yields values as text. `iter_raw()` and `get_raw()`
give the values as bytes.

`content_len()` raises `ValueError` if the `Content-Length` value is
malformed. `set_content_len()` raises `ValueError` if the length is not in
the unsigned 64-bit range.

There are shortcuts for common headers:

- Readers: `content_type`, `content_encoding`, `transfer_encoding`, `host`,
  `connection`, `cache_control` and `upgrade`.
- Setters: `set_transfer_encoding_chunked`, `set_connection_close`,
  `set_connection_upgrade`, `set_cache_control_no_cache`,
  `set_upgrade_websocket` and others.

`RequestHeaders` adds the request line to a `Headers` table: the HTTP version,
the method and the path. It defaults to `GET / HTTP/1.1`.

`ResponseHeaders` adds the status line: the HTTP version, the code and an
optional reason. It defaults to HTTP/1.1 200.

Calling `str()` on either gives a readable dump of the message head.

## Methods

```python
from edgehttp.method import Method

Method.parse("get")       # Method.GET
Method.parse("bogus")     # None
str(Method.MKCALENDAR)    # "MKCALENDAR"
```

## Connection and body negotiation

`edgehttp.negotiation.ConnectionType.resolve` decides whether a connection is
kept alive, closed or upgraded. It looks at these, in order:

1. the type given in the `Connection` header;
2. the type carried over from the peer, such as the request's type when
   resolving a response;
3. the protocol version.

It raises `HeadersMismatchError` if a response tries to keep alive a
connection that the request asked to close.

`BodyType.resolve` decides how a body is framed:

- `BodyType.chunked()`: chunked transfer encoding;
- `BodyType.content_len(n)`: a body of `n` bytes, given by `Content-Length`;
- `BodyType.raw()`: raw until the connection closes.

It raises `HeadersMismatchError` for combinations that the protocol does not
allow:

- a raw body in a request;
- a raw body on a connection that is not closed;
- a chunked body over HTTP/1.0;
- a response whose body type is unknown on a keep-alive connection, unless
  chunked encoding is allowed over HTTP/1.1.

`from_header`, `from_headers` and `raw_header` convert between these types and
header pairs. In `from_headers`, the last matching header wins.

```python
from edgehttp.negotiation import BodyType, ConnectionType

conn = ConnectionType.resolve(None, None, True)           # ConnectionType.KEEP_ALIVE
body = BodyType.resolve(None, conn, False, True, True)    # chunked response body
body.raw_header()                                         # ("Transfer-Encoding", b"Chunked")
```

## WebSocket upgrade

```python
from edgehttp import ws

ws.sec_key_response("dGhlIHNhbXBsZSBub25jZQ==")
# "s3pPLMBiTxaQ9kYGzzhZRbK+xOo="
```

- `ws.upgrade_request_headers` builds the client's upgrade headers from a
  16-byte nonce. Other nonce lengths raise `ValueError`.
- `ws.is_upgrade_request` tells whether a request asks for an upgrade.
- `ws.upgrade_response_headers` builds the server's reply to an upgrade
  request. It raises `ws.UpgradeError` in two cases:
  - the `Sec-WebSocket-Version` header is missing or does not match the
    expected version, which is "13" by default;
  - the `Sec-WebSocket-Key` header is missing.
- `ws.is_upgrade_accepted` checks the server's 101 response against the nonce
  the client used.

The same operations are also available as methods:

- `Headers.set_ws_upgrade_request_headers`
- `Headers.set_ws_upgrade_response_headers`
- `RequestHeaders.is_ws_upgrade_request`
- `ResponseHeaders.is_ws_upgrade_accepted`

## What this package does not do

This package only models message heads and the rules that govern them. It
does not:

- open sockets;
- read or write bytes on the wire;
- parse raw HTTP messages;
- encode or decode chunked bodies.

It has no HTTP client connection, no server and no command-line program. To
send or receive messages, use these pieces together with your own I/O code.

## Running the tests

```
pip install -e .[test]
pytest
```