"""WebSocket upgrade handshake helpers."""

from __future__ import annotations

import base64
import hashlib
import logging
import string
from collections.abc import Iterable

from edgehttp.method import Method

__all__ = [
    "NONCE_LEN",
    "MAX_BASE64_KEY_LEN",
    "MAX_BASE64_KEY_RESPONSE_LEN",
    "UPGRADE_REQUEST_HEADERS_LEN",
    "UPGRADE_RESPONSE_HEADERS_LEN",
    "UpgradeError",
    "upgrade_request_headers",
    "is_upgrade_request",
    "upgrade_response_headers",
    "is_upgrade_accepted",
    "sec_key_response",
]

_log = logging.getLogger(__name__)

NONCE_LEN = 16
MAX_BASE64_KEY_LEN = 28
MAX_BASE64_KEY_RESPONSE_LEN = 33

UPGRADE_REQUEST_HEADERS_LEN = 7
UPGRADE_RESPONSE_HEADERS_LEN = 4

_DEFAULT_VERSION = "13"
_WS_MAGIC_GUID = "258EAFA5-E914-47DA-95CA-C5AB0DC85B11"
_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def _eq_ignore_ascii_case(a: str, b: str) -> bool:
    return a.translate(_ASCII_LOWER) == b.translate(_ASCII_LOWER)


class UpgradeError(Exception):
    """Raised when a WebSocket upgrade request cannot be answered.

    ``reason`` is one of the class attributes ``NO_VERSION``, ``NO_SEC_KEY``
    or ``UNSUPPORTED_VERSION``.
    """

    NO_VERSION = "No Sec-WebSocket-Version header"
    NO_SEC_KEY = "No Sec-WebSocket-Key header"
    UNSUPPORTED_VERSION = "Unsupported Sec-WebSocket-Version"

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


def _sec_key_encode(nonce: bytes) -> str:
    nonce = bytes(nonce)
    if len(nonce) != NONCE_LEN:
        raise ValueError(f"Nonce must be {NONCE_LEN} bytes long, got {len(nonce)}")
    return base64.b64encode(nonce).decode("ascii")


def _sec_key_digest(sec_key: str) -> str:
    sha1 = hashlib.sha1()
    sha1.update(sec_key.encode("utf-8"))
    sha1.update(_WS_MAGIC_GUID.encode("ascii"))
    response = base64.b64encode(sha1.digest()).decode("ascii")
    _log.debug("Computed response: %s", response)
    return response


def upgrade_request_headers(
    host: str | None,
    origin: str | None,
    version: str | None,
    nonce: bytes,
) -> list[tuple[str, str]]:
    """Return the headers of a WebSocket upgrade request.

    A missing ``host`` or ``origin`` yields an empty ``("", "")`` entry; a
    missing ``version`` means version "13".
    """
    return [
        ("Host", host) if host is not None else ("", ""),
        ("Origin", origin) if origin is not None else ("", ""),
        ("Content-Length", "0"),
        ("Connection", "Upgrade"),
        ("Upgrade", "websocket"),
        ("Sec-WebSocket-Version", version if version is not None else _DEFAULT_VERSION),
        ("Sec-WebSocket-Key", _sec_key_encode(nonce)),
    ]


def is_upgrade_request(method: Method, request_headers: Iterable[tuple[str, str]]) -> bool:
    """Return True if the request asks for a WebSocket upgrade."""
    if method is not Method.GET:
        return False

    connection = False
    upgrade = False
    for name, value in request_headers:
        if _eq_ignore_ascii_case(name, "Connection"):
            connection = _eq_ignore_ascii_case(value, "Upgrade")
        elif _eq_ignore_ascii_case(name, "Upgrade"):
            upgrade = _eq_ignore_ascii_case(value, "websocket")

    return connection and upgrade


def upgrade_response_headers(
    request_headers: Iterable[tuple[str, str]],
    version: str | None,
) -> list[tuple[str, str]]:
    """Return the headers of a response accepting a WebSocket upgrade.

    Raises UpgradeError when the request lacks a matching version or a key.
    """
    expected_version = version if version is not None else _DEFAULT_VERSION
    version_ok = False
    accept: str | None = None

    for name, value in request_headers:
        if _eq_ignore_ascii_case(name, "Sec-WebSocket-Version"):
            if not _eq_ignore_ascii_case(value, expected_version):
                raise UpgradeError(UpgradeError.NO_VERSION)
            version_ok = True
        elif _eq_ignore_ascii_case(name, "Sec-WebSocket-Key"):
            accept = sec_key_response(value)

    if not version_ok:
        raise UpgradeError(UpgradeError.NO_VERSION)
    if accept is None:
        raise UpgradeError(UpgradeError.NO_SEC_KEY)

    return [
        ("Content-Length", "0"),
        ("Connection", "Upgrade"),
        ("Upgrade", "websocket"),
        ("Sec-WebSocket-Accept", accept),
    ]


def is_upgrade_accepted(
    code: int,
    response_headers: Iterable[tuple[str, str]],
    nonce: bytes,
) -> bool:
    """Return True if the response accepts the upgrade requested with ``nonce``."""
    if code != 101:
        return False

    connection = False
    upgrade = False
    accepted = False
    for name, value in response_headers:
        if _eq_ignore_ascii_case(name, "Connection"):
            connection = _eq_ignore_ascii_case(value, "Upgrade")
        elif _eq_ignore_ascii_case(name, "Upgrade"):
            upgrade = _eq_ignore_ascii_case(value, "websocket")
        elif _eq_ignore_ascii_case(name, "Sec-WebSocket-Accept"):
            accepted = value == _sec_key_digest(_sec_key_encode(nonce))

    return connection and upgrade and accepted


def sec_key_response(sec_key: str) -> str:
    """Compute the ``Sec-WebSocket-Accept`` value for a ``Sec-WebSocket-Key``."""
    _log.debug("Computing response for key: %s", sec_key)
    return _sec_key_digest(sec_key)