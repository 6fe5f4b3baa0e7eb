"""HTTP request methods."""

from __future__ import annotations

from enum import Enum


class Method(Enum):
    """An HTTP request method; the value is its wire form."""

    DELETE = "DELETE"
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    CONNECT = "CONNECT"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"
    COPY = "COPY"
    LOCK = "LOCK"
    MKCOL = "MKCOL"
    MOVE = "MOVE"
    PROPFIND = "PROPFIND"
    PROPPATCH = "PROPPATCH"
    SEARCH = "SEARCH"
    UNLOCK = "UNLOCK"
    BIND = "BIND"
    REBIND = "REBIND"
    UNBIND = "UNBIND"
    ACL = "ACL"
    REPORT = "REPORT"
    MKACTIVITY = "MKACTIVITY"
    CHECKOUT = "CHECKOUT"
    MERGE = "MERGE"
    MSEARCH = "MSEARCH"
    NOTIFY = "NOTIFY"
    SUBSCRIBE = "SUBSCRIBE"
    UNSUBSCRIBE = "UNSUBSCRIBE"
    PATCH = "PATCH"
    PURGE = "PURGE"
    MKCALENDAR = "MKCALENDAR"
    LINK = "LINK"
    UNLINK = "UNLINK"

    @classmethod
    def parse(cls, name: str) -> Method | None:
        """Return the method named by ``name`` (ASCII case-insensitive), or None."""
        if not name.isascii():
            return None
        try:
            return cls(name.upper())
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value