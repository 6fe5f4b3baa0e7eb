import pytest

from edgehttp.negotiation import BodyKind, BodyType, ConnectionType, HeadersMismatchError

KA = ConnectionType.KEEP_ALIVE
CL = ConnectionType.CLOSE
UP = ConnectionType.UPGRADE


@pytest.mark.parametrize(
    "headers, carry, http11, expected",
    [
        (None, None, True, KA),
        (None, None, False, CL),
        (None, KA, False, KA),
        (None, KA, True, KA),
        (CL, None, False, CL),
        (KA, None, False, KA),
        (CL, None, True, CL),
        (KA, None, True, KA),
        (CL, CL, False, CL),
        (KA, KA, False, KA),
        (CL, CL, True, CL),
        (KA, KA, True, KA),
        (CL, KA, False, CL),
        (CL, KA, True, CL),
    ],
)
def test_resolve_conn(headers, carry, http11, expected):
    assert ConnectionType.resolve(headers, carry, http11) is expected


@pytest.mark.parametrize("http11", [False, True])
def test_resolve_conn_keep_alive_after_close_fails(http11):
    with pytest.raises(HeadersMismatchError) as info:
        ConnectionType.resolve(KA, CL, http11)
    assert info.value.is_body_type_error is False
    assert "connection type" in str(info.value)


@pytest.mark.parametrize(
    "headers, conn, request_, http11, chunked, expected",
    [
        (None, KA, True, True, False, BodyType.content_len(0)),
        (None, CL, True, True, False, BodyType.content_len(0)),
        (None, KA, True, False, False, BodyType.content_len(0)),
        (None, CL, True, False, False, BodyType.content_len(0)),
        (None, UP, False, True, False, BodyType.content_len(0)),
        (BodyType.raw(), CL, False, True, False, BodyType.raw()),
        (BodyType.raw(), CL, False, False, False, BodyType.raw()),
        (None, CL, True, True, True, BodyType.chunked()),
        (None, KA, True, True, True, BodyType.chunked()),
        (None, CL, True, False, True, BodyType.content_len(0)),
        (None, KA, True, False, True, BodyType.content_len(0)),
        (None, KA, False, True, True, BodyType.chunked()),
        (None, CL, False, True, True, BodyType.raw()),
    ],
)
def test_resolve_body(headers, conn, request_, http11, chunked, expected):
    assert BodyType.resolve(headers, conn, request_, http11, chunked) == expected


@pytest.mark.parametrize(
    "headers, conn, request_, http11",
    [
        (None, UP, False, False),
        (BodyType.chunked(), CL, True, False),
        (BodyType.chunked(), KA, True, False),
        (BodyType.chunked(), CL, False, False),
        (BodyType.chunked(), KA, False, False),
        (BodyType.raw(), CL, True, True),
        (BodyType.raw(), KA, True, True),
        (BodyType.raw(), CL, True, False),
        (BodyType.raw(), KA, True, False),
        (BodyType.raw(), KA, False, True),
        (BodyType.raw(), KA, False, False),
    ],
)
def test_resolve_body_errors(headers, conn, request_, http11):
    with pytest.raises(HeadersMismatchError) as info:
        BodyType.resolve(headers, conn, request_, http11, False)
    assert info.value.is_body_type_error is True
    assert str(info.value).startswith("Body type mismatch: ")


def test_resolve_body_keep_alive_response_unspecified_fails():
    with pytest.raises(HeadersMismatchError):
        BodyType.resolve(None, KA, False, True, False)


def test_connection_from_header():
    assert ConnectionType.from_header("connection", "close") is CL
    assert ConnectionType.from_header("CONNECTION", "keep-alive") is KA
    assert ConnectionType.from_header("Connection", "UPGRADE") is UP
    assert ConnectionType.from_header("Connection", "other") is None
    assert ConnectionType.from_header("Upgrade", "Close") is None


def test_connection_from_headers_last_wins():
    headers = [("Host", "x"), ("Connection", "Close"), ("Connection", "Keep-Alive")]
    assert ConnectionType.from_headers(headers) is KA
    assert ConnectionType.from_headers([("Host", "x")]) is None


def test_connection_raw_header_and_str():
    assert KA.raw_header() == ("Connection", b"Keep-Alive")
    assert CL.raw_header() == ("Connection", b"Close")
    assert UP.raw_header() == ("Connection", b"Upgrade")
    assert str(KA) == "Keep-Alive"


def test_body_from_header():
    assert BodyType.from_header("transfer-encoding", "chunked") == BodyType.chunked()
    assert BodyType.from_header("Transfer-Encoding", "gzip") is None
    assert BodyType.from_header("content-length", "42") == BodyType.content_len(42)
    assert BodyType.from_header("Content-Type", "text/plain") is None


@pytest.mark.parametrize("value", ["abc", "-1", " 5", "", "18446744073709551616"])
def test_body_from_header_invalid_length(value):
    with pytest.raises(ValueError):
        BodyType.from_header("Content-Length", value)


def test_body_from_headers_last_wins():
    headers = [("Content-Length", "10"), ("Transfer-Encoding", "Chunked")]
    assert BodyType.from_headers(headers) == BodyType.chunked()
    assert BodyType.from_headers([("Transfer-Encoding", "Chunked"), ("Content-Length", "7")]) == (
        BodyType.content_len(7)
    )
    assert BodyType.from_headers([]) is None


def test_body_raw_header():
    assert BodyType.chunked().raw_header() == ("Transfer-Encoding", b"Chunked")
    assert BodyType.content_len(123).raw_header() == ("Content-Length", b"123")
    assert BodyType.raw().raw_header() is None


def test_body_str():
    assert str(BodyType.chunked()) == "Chunked"
    assert str(BodyType.content_len(5)) == "Content-Length: 5"
    assert str(BodyType.raw()) == "Raw"


def test_body_kinds_and_validation():
    assert BodyType.content_len(3).kind is BodyKind.CONTENT_LEN
    assert BodyType.content_len(3).length == 3
    with pytest.raises(ValueError):
        BodyType.content_len(-1)
    with pytest.raises(ValueError):
        BodyType(BodyKind.RAW, 5)