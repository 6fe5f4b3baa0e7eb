"""Connection and body type negotiation for HTTP messages."""

from __future__ import annotations

import logging
import re
import string
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

__all__ = ["HeadersMismatchError", "ConnectionType", "BodyKind", "BodyType"]

_log = logging.getLogger(__name__)

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)
_U64_MAX = 2**64 - 1
_CONTENT_LEN_RE = re.compile(r"\+?[0-9]+")


def _eq_ignore_ascii_case(a: str, b: str) -> bool:
    return a.translate(_ASCII_LOWER) == b.translate(_ASCII_LOWER)


def _parse_content_len(value: str) -> int:
    if not _CONTENT_LEN_RE.fullmatch(value):
        raise ValueError(f"Invalid Content-Length header: {value!r}")
    length = int(value)
    if length > _U64_MAX:
        raise ValueError(f"Invalid Content-Length header: {value!r}")
    return length


class HeadersMismatchError(Exception):
    """Raised for an invalid combination of connection type and body type.

    With no ``detail`` it reports that a response asked for a connection type
    the request did not allow; with a ``detail`` it reports a body type mismatch.
    """

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        if detail is None:
            message = "Response connection type is different from the request connection type"
        else:
            message = f"Body type mismatch: {detail}"
        super().__init__(message)

    @property
    def is_body_type_error(self) -> bool:
        """True when the error concerns the body type."""
        return self.detail is not None


class ConnectionType(Enum):
    """The value of the ``Connection`` header."""

    KEEP_ALIVE = "Keep-Alive"
    CLOSE = "Close"
    UPGRADE = "Upgrade"

    @classmethod
    def resolve(
        cls,
        headers_connection_type: ConnectionType | None,
        carry_over_connection_type: ConnectionType | None,
        http11: bool,
    ) -> ConnectionType:
        """Resolve the connection type from headers, carry-over and protocol version."""
        if headers_connection_type is not None:
            if (
                headers_connection_type is cls.KEEP_ALIVE
                and carry_over_connection_type is cls.CLOSE
            ):
                _log.warning("Cannot set a Keep-Alive connection when the peer requested Close")
                raise HeadersMismatchError()
            return headers_connection_type
        if carry_over_connection_type is not None:
            return carry_over_connection_type
        return cls.KEEP_ALIVE if http11 else cls.CLOSE

    @classmethod
    def from_header(cls, name: str, value: str) -> ConnectionType | None:
        """Return the connection type a ``Connection`` header names, or None."""
        if not _eq_ignore_ascii_case(name, "Connection"):
            return None
        for member in cls:
            if _eq_ignore_ascii_case(value, member.value):
                return member
        return None

    @classmethod
    def from_headers(cls, headers: Iterable[tuple[str, str]]) -> ConnectionType | None:
        """Return the connection type in ``headers``; the last one wins."""
        connection: ConnectionType | None = None
        for name, value in headers:
            found = cls.from_header(name, value)
            if found is None:
                continue
            if connection is not None:
                _log.warning(
                    "Multiple Connection headers found. Current %s and new %s",
                    connection,
                    found,
                )
            connection = found
        return connection

    def raw_header(self) -> tuple[str, bytes]:
        """Return the header name and raw value for this connection type."""
        return ("Connection", self.value.encode("ascii"))

    def __str__(self) -> str:
        return self.value


class BodyKind(Enum):
    """How the length of a message body is conveyed."""

    CHUNKED = "Chunked"
    CONTENT_LEN = "Content-Length"
    RAW = "Raw"


@dataclass(frozen=True)
class BodyType:
    """A body type; ``length`` is set only for Content-Length bodies."""

    kind: BodyKind
    length: int | None = None

    def __post_init__(self) -> None:
        if self.kind is BodyKind.CONTENT_LEN:
            if (
                not isinstance(self.length, int)
                or isinstance(self.length, bool)
                or not 0 <= self.length <= _U64_MAX
            ):
                raise ValueError(f"Invalid content length: {self.length!r}")
        elif self.length is not None:
            raise ValueError(f"{self.kind.value} body type carries no length")

    @classmethod
    def chunked(cls) -> BodyType:
        """A chunked body (Transfer-Encoding: Chunked)."""
        return cls(BodyKind.CHUNKED)

    @classmethod
    def content_len(cls, length: int) -> BodyType:
        """A body of ``length`` bytes (Content-Length)."""
        return cls(BodyKind.CONTENT_LEN, length)

    @classmethod
    def raw(cls) -> BodyType:
        """A raw body, ending when a Close connection ends."""
        return cls(BodyKind.RAW)

    @classmethod
    def resolve(
        cls,
        headers_body_type: BodyType | None,
        connection_type: ConnectionType,
        request: bool,
        http11: bool,
        chunked_if_unspecified: bool,
    ) -> BodyType:
        """Resolve the body type from the headers, connection type and protocol."""
        if headers_body_type is not None:
            kind = headers_body_type.kind
            if kind is BodyKind.RAW:
                if request:
                    message = "Raw body in a request. This is not allowed."
                    _log.warning(message)
                    raise HeadersMismatchError(message)
                if connection_type is not ConnectionType.CLOSE:
                    message = "Raw body response with a Keep-Alive connection. This is not allowed."
                    _log.warning(message)
                    raise HeadersMismatchError(message)
            elif kind is BodyKind.CHUNKED and not http11:
                message = "Chunked body with an HTTP/1.0 connection. This is not allowed."
                _log.warning(message)
                raise HeadersMismatchError(message)
            return headers_body_type

        if request:
            if chunked_if_unspecified and http11:
                return cls.chunked()
            _log.debug("Unknown body type in a request. Assuming Content-Length=0.")
            return cls.content_len(0)
        if connection_type is ConnectionType.CLOSE:
            return cls.raw()
        if connection_type is ConnectionType.UPGRADE:
            if http11:
                _log.debug(
                    "Unknown body type in response but the Connection is Upgrade. "
                    "Assuming Content-Length=0."
                )
                return cls.content_len(0)
            message = (
                "Connection is set to Upgrade but the HTTP protocol version is not 1.1. "
                "This is not allowed."
            )
            _log.warning(message)
            raise HeadersMismatchError(message)
        if chunked_if_unspecified and http11:
            return cls.chunked()
        message = (
            "Unknown body type in a response with a Keep-Alive connection. This is not allowed."
        )
        _log.warning(message)
        raise HeadersMismatchError(message)

    @classmethod
    def from_header(cls, name: str, value: str) -> BodyType | None:
        """Return the body type a header names, or None.

        Raises ValueError for a malformed ``Content-Length`` value.
        """
        if _eq_ignore_ascii_case(name, "Transfer-Encoding"):
            if _eq_ignore_ascii_case(value, "Chunked"):
                return cls.chunked()
        elif _eq_ignore_ascii_case(name, "Content-Length"):
            return cls.content_len(_parse_content_len(value))
        return None

    @classmethod
    def from_headers(cls, headers: Iterable[tuple[str, str]]) -> BodyType | None:
        """Return the body type in ``headers``; the last one wins."""
        body: BodyType | None = None
        for name, value in headers:
            found = cls.from_header(name, value)
            if found is None:
                continue
            if body is not None:
                _log.warning(
                    "Multiple body type headers found. Current %s and new %s", body, found
                )
            body = found
        return body

    def raw_header(self) -> tuple[str, bytes] | None:
        """Return the header for this body type, or None for a raw body."""
        if self.kind is BodyKind.CHUNKED:
            return ("Transfer-Encoding", b"Chunked")
        if self.kind is BodyKind.CONTENT_LEN:
            return ("Content-Length", str(self.length).encode("ascii"))
        return None

    def __str__(self) -> str:
        if self.kind is BodyKind.CONTENT_LEN:
            return f"Content-Length: {self.length}"
        return self.kind.value