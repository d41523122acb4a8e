"""Server error codes, messages and a reporter that remembers the last error."""

from __future__ import annotations

import sys
from enum import IntEnum
from typing import Callable, Optional, TextIO, Union


class ErrorCode(IntEnum):
    """Codes for the failures the server can report."""

    INVALID_ARGUMENTS = 1
    ACCEPT = 2
    SELECT = 3
    WSA_STARTUP = 4
    GETADDRINFO = 5
    SOCKET_CREATE = 6
    LISTEN = 7
    RECV = 8
    HTTP_PARSE = 9
    SEND = 10
    BIND = 11
    IOCTL = 12
    TIMEOUT = 13
    CONTROL_HANDLER = 14
    MAIN_THREAD = 15
    SOCKET_SHUTDOWN = 16
    SOCKET_CLOSE = 17


_MESSAGES = {
    ErrorCode.INVALID_ARGUMENTS: "Invalid arguments passed to the function: {}",
    ErrorCode.ACCEPT: "accept() call failed with code: {}",
    ErrorCode.SELECT: "select() call failed with code: {}",
    ErrorCode.WSA_STARTUP: "WSAStartup() call failed in fuction: {}",
    ErrorCode.GETADDRINFO: "getaddrinfo() call failed with code: {}",
    ErrorCode.SOCKET_CREATE: "Failed to create listen socket with code: {}",
    ErrorCode.LISTEN: "listen() call failed with code: {}",
    ErrorCode.RECV: "recv() call failed with code: {}",
    ErrorCode.HTTP_PARSE: "Failed to parse http protocol in function: {}",
    ErrorCode.SEND: "send() call failed with code: {}",
    ErrorCode.BIND: "socket bind() call failed with code: {}",
    ErrorCode.IOCTL: "ioctlsocket() call failed with code: {}",
    ErrorCode.TIMEOUT: "call timed limit expired in function: {}",
    ErrorCode.CONTROL_HANDLER: "failed to set control handler with code: {}",
    ErrorCode.MAIN_THREAD: "failed to get main thread handle with code: {}",
    ErrorCode.SOCKET_SHUTDOWN: "failed to shutdown socket with code: {}",
    ErrorCode.SOCKET_CLOSE: "failed to close socket with code: {}",
}

_PREFIX = "[SERVER ERROR] "


def describe(code: int, what: object) -> str:
    """Return the human-readable message for an error code and its detail."""
    try:
        template = _MESSAGES[ErrorCode(code)]
    except ValueError:
        return f"Undefined error: {int(code)}"
    return template.format(what)


class ServerError(Exception):
    """An error raised or reported by the server."""

    def __init__(self, code: Union[ErrorCode, int], what: object) -> None:
        self.code = int(code)
        self.what = what
        super().__init__(describe(code, what))


class ErrorReporter:
    """Remembers the last reported error and optionally notifies a callback."""

    def __init__(self) -> None:
        self._last: Optional[ServerError] = None
        self._stream: Optional[TextIO] = None
        self._callback: Optional[Callable[[ServerError], None]] = None

    def set_output(self, stream: Optional[TextIO]) -> None:
        """Set the stream that print_last writes to (stderr when unset)."""
        self._stream = stream

    def set_callback(self, callback: Optional[Callable[[ServerError], None]]) -> None:
        """Set a function called with every reported error."""
        self._callback = callback

    def report(self, error: ServerError) -> None:
        """Record an error as the last one and run the callback."""
        self._last = error
        if self._callback is not None:
            self._callback(error)

    def last_code(self) -> int:
        """Return the code of the last reported error, or 0 if there is none."""
        return self._last.code if self._last is not None else 0

    def print_last(self) -> None:
        """Write the last error's message to the output stream."""
        if self._last is None or not self._last.code:
            return
        stream = self._stream if self._stream is not None else sys.stderr
        stream.write(f"{_PREFIX}{self._last}\n")