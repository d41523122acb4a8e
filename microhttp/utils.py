"""String, path, URL and file helpers used by the server."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Optional, Tuple, Union

CRLF = "\r\n"


def next_line(buffer: Optional[str], max_size: Optional[int] = None) -> Optional[Tuple[str, str]]:
    """Split the first CRLF-terminated line off ``buffer``.

    Returns ``(line, rest)`` or ``None`` when there is no non-empty line or the
    line would not fit in ``max_size`` characters (including a terminator).
    """
    if buffer is None:
        return None
    nul = buffer.find("\0")
    if nul >= 0:
        buffer = buffer[:nul]
    end = buffer.find(CRLF)
    if end < 0:
        line, rest = buffer, ""
    else:
        line, rest = buffer[:end], buffer[end + len(CRLF):]
    if not line:
        return None
    if max_size is not None and len(line) >= max_size:
        return None
    return line, rest


def read_file(path: Union[str, os.PathLike]) -> bytes:
    """Read a whole file in binary mode."""
    return Path(path).read_bytes()


def file_extension(path: str) -> str:
    """Return the text after the last dot in ``path``, or an empty string."""
    dot = path.rfind(".")
    if dot < 0:
        return ""
    return path[dot + 1:]


def _join_without_double_slash(origin: str, string: str) -> str:
    if origin.endswith("/") and string.startswith("/"):
        return origin + string[1:]
    return origin + string


def path_join(origin: str, string: str, max_length: Optional[int] = None) -> str:
    """Join ``string`` to ``origin`` without doubling a slash between them.

    Raises ValueError when the combined lengths exceed ``max_length``.
    """
    if origin is None or string is None:
        raise ValueError("path_join needs two strings")
    if max_length is not None and len(origin) + len(string) > max_length:
        raise ValueError(
            f"joined path longer than {max_length} characters"
        )
    return _join_without_double_slash(origin, string)


def url_append(url: str, string: str, max_size: Optional[int] = None) -> str:
    """Drop the query string from ``url`` and append ``string`` to its path.

    Raises ValueError when the result with its terminator exceeds ``max_size``.
    """
    base = url.split("?", 1)[0]
    result = _join_without_double_slash(base, string)
    if max_size is not None and len(result) + 1 > max_size:
        raise ValueError(f"url longer than {max_size - 1} characters")
    return result


def lookup_value(pairs, key: str) -> Optional[str]:
    """Return the value of the first pair whose key equals ``key``, else None."""
    items: Iterable = pairs.items() if isinstance(pairs, Mapping) else pairs
    for pair_key, value in items:
        if pair_key == key:
            return value
    return None