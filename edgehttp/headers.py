"""HTTP header collections and request/response heads."""

from __future__ import annotations

import string
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from edgehttp import ws
from edgehttp.method import Method
from edgehttp.negotiation import BodyType

__all__ = ["DEFAULT_MAX_HEADERS_COUNT", "Headers", "RequestHeaders", "ResponseHeaders"]

DEFAULT_MAX_HEADERS_COUNT = 64

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def _eq_ignore_ascii_case(a: str, b: str) -> bool:
    return a.translate(_ASCII_LOWER) == b.translate(_ASCII_LOWER)


def _decode(value: bytes) -> str:
    return value.decode("utf-8", errors="surrogateescape")


class Headers:
    """An ordered, bounded set of HTTP headers with case-insensitive names.

    Setting a header whose name is already present replaces it in place;
    setting a new header when ``capacity`` headers are held raises IndexError.
    """

    def __init__(self, capacity: int = DEFAULT_MAX_HEADERS_COUNT) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 0:
            raise ValueError(f"Invalid header capacity: {capacity!r}")
        self.capacity = capacity
        self._entries: list[tuple[str, bytes]] = []

    def __iter__(self) -> Iterator[tuple[str, str]]:
        """Iterate over ``(name, value)`` pairs, values as text."""
        for name, value in self._entries:
            yield name, _decode(value)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Headers):
            return NotImplemented
        return self._entries == other._entries

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Headers({list(self)!r})"

    def iter_raw(self) -> Iterator[tuple[str, bytes]]:
        """Iterate over ``(name, value)`` pairs, values as raw bytes."""
        yield from self._entries

    def _find(self, name: str) -> int | None:
        return next(
            (
                index
                for index, (hname, _) in enumerate(self._entries)
                if _eq_ignore_ascii_case(name, hname)
            ),
            None,
        )

    def get(self, name: str) -> str | None:
        """Return the value of header ``name`` as text, or None."""
        raw = self.get_raw(name)
        return None if raw is None else _decode(raw)

    def get_raw(self, name: str) -> bytes | None:
        """Return the value of header ``name`` as bytes, or None."""
        index = self._find(name)
        return None if index is None else self._entries[index][1]

    def set(self, name: str, value: str) -> Headers:
        """Set header ``name`` to the text ``value``."""
        return self.set_raw(name, value.encode("utf-8", errors="surrogateescape"))

    def set_raw(self, name: str, value: bytes) -> Headers:
        """Set header ``name`` to the raw ``value``; an empty name is ignored."""
        if not name:
            return self.remove(name)
        entry = (name, bytes(value))
        index = self._find(name)
        if index is not None:
            self._entries[index] = entry
        elif len(self._entries) < self.capacity:
            self._entries.append(entry)
        else:
            raise IndexError("No space left")
        return self

    def remove(self, name: str) -> Headers:
        """Remove header ``name`` if present, keeping the order of the rest."""
        index = self._find(name)
        if index is not None:
            del self._entries[index]
        return self

    def content_len(self) -> int | None:
        """Return the ``Content-Length`` value; raises ValueError if malformed."""
        value = self.get("Content-Length")
        if value is None:
            return None
        body_type = BodyType.from_header("Content-Length", value)
        return None if body_type is None else body_type.length

    def content_type(self) -> str | None:
        return self.get("Content-Type")

    def content_encoding(self) -> str | None:
        return self.get("Content-Encoding")

    def transfer_encoding(self) -> str | None:
        return self.get("Transfer-Encoding")

    def host(self) -> str | None:
        return self.get("Host")

    def connection(self) -> str | None:
        return self.get("Connection")

    def cache_control(self) -> str | None:
        return self.get("Cache-Control")

    def upgrade(self) -> str | None:
        return self.get("Upgrade")

    def set_content_len(self, content_len: int) -> Headers:
        """Set ``Content-Length``; raises ValueError outside the u64 range."""
        header = BodyType.content_len(content_len).raw_header()
        assert header is not None
        name, value = header
        return self.set_raw(name, value)

    def set_content_type(self, content_type: str) -> Headers:
        return self.set("Content-Type", content_type)

    def set_content_encoding(self, content_encoding: str) -> Headers:
        return self.set("Content-Encoding", content_encoding)

    def set_transfer_encoding(self, transfer_encoding: str) -> Headers:
        return self.set("Transfer-Encoding", transfer_encoding)

    def set_transfer_encoding_chunked(self) -> Headers:
        return self.set_transfer_encoding("Chunked")

    def set_host(self, host: str) -> Headers:
        return self.set("Host", host)

    def set_connection(self, connection: str) -> Headers:
        return self.set("Connection", connection)

    def set_connection_close(self) -> Headers:
        return self.set_connection("Close")

    def set_connection_keep_alive(self) -> Headers:
        return self.set_connection("Keep-Alive")

    def set_connection_upgrade(self) -> Headers:
        return self.set_connection("Upgrade")

    def set_cache_control(self, cache: str) -> Headers:
        return self.set("Cache-Control", cache)

    def set_cache_control_no_cache(self) -> Headers:
        return self.set_cache_control("No-Cache")

    def set_upgrade(self, upgrade: str) -> Headers:
        return self.set("Upgrade", upgrade)

    def set_upgrade_websocket(self) -> Headers:
        return self.set_upgrade("websocket")

    def set_ws_upgrade_request_headers(
        self,
        host: str | None,
        origin: str | None,
        version: str | None,
        nonce: bytes,
    ) -> Headers:
        """Set every WebSocket upgrade request header, including the key."""
        for name, value in ws.upgrade_request_headers(host, origin, version, nonce):
            self.set(name, value)
        return self

    def set_ws_upgrade_response_headers(
        self,
        request_headers: Iterable[tuple[str, str]],
        version: str | None,
    ) -> Headers:
        """Set every WebSocket upgrade response header; raises UpgradeError."""
        for name, value in ws.upgrade_response_headers(request_headers, version):
            self.set(name, value)
        return self


def _format_headers(headers: Headers) -> str:
    return "".join(f"{name}: {value}\n" for name, value in headers)


@dataclass
class RequestHeaders:
    """A request line and its headers; defaults to ``GET / HTTP/1.1``."""

    http11: bool = True
    method: Method = Method.GET
    path: str = "/"
    headers: Headers = field(default_factory=Headers)

    def is_ws_upgrade_request(self) -> bool:
        """Return True if this is a WebSocket upgrade request."""
        return ws.is_upgrade_request(self.method, self.headers)

    def __str__(self) -> str:
        version = "HTTP/1.1" if self.http11 else "HTTP/1.0"
        return f"{version} {self.method} {self.path}\n" + _format_headers(self.headers)


@dataclass
class ResponseHeaders:
    """A status line and its headers; defaults to ``HTTP/1.1 200``."""

    http11: bool = True
    code: int = 200
    reason: str | None = None
    headers: Headers = field(default_factory=Headers)

    def is_ws_upgrade_accepted(self, nonce: bytes) -> bool:
        """Return True if this response accepts the upgrade requested with ``nonce``."""
        return ws.is_upgrade_accepted(self.code, self.headers, nonce)

    def __str__(self) -> str:
        version = "HTTP/1.1 " if self.http11 else "HTTP/1.0"
        reason = self.reason if self.reason is not None else ""
        return f"{version} {self.code} {reason}\n" + _format_headers(self.headers)