"""HTTP request-line parsing, header lookup and response building."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum
from typing import NamedTuple, Optional, Tuple, Union

from microhttp.utils import CRLF, next_line

PATH_SIZE = 256
HEADER_LINE_SIZE = 512
VARIANT_SIZE = 64
_SMALL_BUFLEN = 64

_HEAD_ENCODING = "latin-1"


class Method(IntEnum):
    """HTTP request methods."""

    GET = 1
    POST = 2
    PUT = 3
    HEAD = 4
    DELETE = 5
    CONNECT = 6
    OPTIONS = 7
    PATCH = 8


@dataclass(frozen=True)
class HttpVersion:
    """Protocol version as major and minor numbers."""

    major: int = 1
    minor: int = 0

    def __str__(self) -> str:
        if self.minor == 0:
            return str(self.major)
        return f"{self.major}.{self.minor}"


class Header(NamedTuple):
    """A single header name and value."""

    name: str
    value: str


@dataclass
class HttpRequest:
    """The parts of a request line plus the raw text that follows it."""

    method: Method
    variant: str
    version: HttpVersion
    url_path: str
    raw_content: str


class RequestParseError(ValueError):
    """Raised when a request line cannot be parsed.

    ``code`` tells which step failed: -1 missing separator, -2 method too long,
    -3 unknown method or path too long, -4 bad version, -5 no content line.
    """

    def __init__(self, code: int, message: str) -> None:
        self.code = code
        super().__init__(message)


HeaderLike = Union[Header, Tuple[str, str]]


def header_has_value(header: HeaderLike, delim: str, value: str) -> bool:
    """Tell whether ``value`` is one of the ``delim``-separated items of a header."""
    _, content = header
    for index, item in enumerate(content.split(delim)):
        if index:
            item = item.lstrip(" ")
        if len(item) >= _SMALL_BUFLEN:
            return False
        if item == value:
            return True
    return False


def find_header(buffer: Optional[str], name: Optional[str]) -> Optional[str]:
    """Return the value of header ``name`` in a block of CRLF-separated lines.

    The search stops at the first line that has no colon, which marks the end
    of the header block. Returns None when the header is not found.
    """
    if buffer is None or name is None:
        return None
    rest: Optional[str] = buffer
    while True:
        split = next_line(rest, HEADER_LINE_SIZE)
        if split is None:
            return None
        line, rest = split
        colon = line.find(":")
        if colon < 0 or colon >= _SMALL_BUFLEN:
            return None
        if line[:colon] == name:
            return line[colon + 1:].lstrip(" ")


def total_headers_size(headers: Iterable[HeaderLike]) -> int:
    """Return how many characters the headers take as ``name: value\\r\\n`` lines."""
    return sum(len(name) + len(value) + 4 for name, value in headers)


def build_response(
    variant: str,
    version: HttpVersion,
    status: str,
    headers: Iterable[HeaderLike] = (),
    body: Union[str, bytes, None] = None,
) -> bytes:
    """Build the bytes of an HTTP response.

    The status line is ``<variant>/<version> <status>``, the version written
    as ``major`` alone when ``minor`` is 0.
    """
    if variant is None or status is None:
        raise ValueError("response needs a variant and a status")
    lines = [f"{variant}/{version} {status}"]
    lines.extend(f"{name}: {value}" for name, value in headers)
    head = (CRLF.join(lines) + CRLF + CRLF).encode(_HEAD_ENCODING)
    if body is None:
        return head
    if isinstance(body, str):
        body = body.encode("utf-8")
    return head + bytes(body)


def _digit(text: str, index: int) -> int:
    return ord(text[index]) - ord("0") if index < len(text) else -ord("0")


def parse_request_line(buffer: Union[str, bytes]) -> HttpRequest:
    """Parse the request line at the start of ``buffer``.

    Raises RequestParseError when the line is malformed.
    """
    if isinstance(buffer, bytes):
        buffer = buffer.decode(_HEAD_ENCODING)
    nul = buffer.find("\0")
    if nul >= 0:
        buffer = buffer[:nul]

    space = buffer.find(" ")
    if space < 0:
        raise RequestParseError(-1, "no space after request method")
    method_name = buffer[:space]
    if len(method_name) >= _SMALL_BUFLEN:
        raise RequestParseError(-2, "request method too long")
    try:
        method = Method[method_name]
    except KeyError:
        raise RequestParseError(-3, f"unknown request method: {method_name!r}") from None

    path_start = space + 1
    path_end = buffer.find(" ", path_start)
    if path_end < 0:
        raise RequestParseError(-1, "no space after url path")
    url_path = buffer[path_start:path_end]
    if len(url_path) >= PATH_SIZE:
        raise RequestParseError(-3, "url path too long")

    variant_start = path_end + 1
    slash = buffer.find("/", variant_start)
    if slash < 0:
        raise RequestParseError(-1, "no slash in protocol version")

    version_end = slash + 1
    while version_end < len(buffer):
        char = buffer[version_end]
        if char == " " or buffer.startswith(CRLF, version_end):
            break
        version_end += 1
    if version_end >= len(buffer):
        raise RequestParseError(-4, "request line is not terminated")
    version_text = buffer[slash + 1:version_end]

    major = _digit(version_text, 0)
    minor = _digit(version_text, 2) if version_text[1:2] == "." else 0
    if major < 0 or minor < 0:
        raise RequestParseError(-4, f"bad protocol version: {version_text!r}")

    split = next_line(buffer[slash:])
    if split is None:
        raise RequestParseError(-5, "no request content")
    _, raw_content = split

    return HttpRequest(
        method=method,
        variant=buffer[variant_start:slash],
        version=HttpVersion(major, minor),
        url_path=url_path,
        raw_content=raw_content,
    )