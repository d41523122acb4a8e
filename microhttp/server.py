"""Select-based TCP server and the HTTP server built on top of it."""

from __future__ import annotations

import select
import socket
import threading
from enum import IntEnum
from typing import Callable, Dict, List, Optional, Union

from microhttp.errors import ErrorCode, ErrorReporter, ServerError
from microhttp.httpprot import HttpRequest, RequestParseError, parse_request_line

RECV_BUFFER_SIZE = 10240
FALLBACK_RESPONSE = b"HTTP/1.1 500\r\n\r\n"


class Event(IntEnum):
    """Events an HTTP server can bind listeners to."""

    REQUEST = 1
    CONNECTION_OPEN = 2
    CONNECTION_CLOSE = 3
    SERVER_ON = 4
    SERVER_OFF = 5


class CallbackResult(IntEnum):
    """What the server does with a client after its I/O callback ran."""

    CONTINUE = 0
    CLOSE_SOCKET = 1


IOCallback = Callable[[socket.socket], CallbackResult]
SocketCallback = Callable[[socket.socket], None]
PlainCallback = Callable[[], None]
RequestCallback = Callable[[HttpRequest], Union[bytes, str, None]]


class BaseServer:
    """A listening socket that hands readable client connections to a callback."""

    def __init__(
        self,
        host: Optional[str],
        port: Union[str, int],
        socket_type: int = socket.SOCK_STREAM,
        protocol: int = 0,
    ) -> None:
        self.errors = ErrorReporter()
        self._io_cb: Optional[IOCallback] = None
        self._accept_cb: Optional[SocketCallback] = None
        self._open_cb: Optional[PlainCallback] = None
        self._close_cb: Optional[PlainCallback] = None

        self._slots: List[Optional[socket.socket]] = []
        self._quit = False
        self._listening = False
        self._closed = False
        self._lock = threading.Lock()
        self._stopped = threading.Event()
        self._loop_thread: Optional[int] = None
        self._wake_r: Optional[socket.socket] = None
        self._wake_w: Optional[socket.socket] = None

        try:
            infos = socket.getaddrinfo(
                host, port, socket.AF_UNSPEC, socket_type, protocol, socket.AI_PASSIVE
            )
        except socket.gaierror as exc:
            self._fail(ErrorCode.GETADDRINFO, exc.errno, exc)
        if not infos:
            self._fail(ErrorCode.GETADDRINFO, 0)
        family, stype, proto, _, address = infos[0]

        try:
            sock = socket.socket(family, stype, proto)
        except OSError as exc:
            self._fail(ErrorCode.SOCKET_CREATE, exc.errno, exc)

        try:
            sock.bind(address)
        except OSError as exc:
            sock.close()
            self._fail(ErrorCode.BIND, exc.errno, exc)

        try:
            sock.setblocking(False)
        except OSError as exc:
            sock.close()
            self._fail(ErrorCode.IOCTL, exc.errno, exc)

        self._socket = sock

    def _fail(self, code: ErrorCode, what: object, cause: Optional[BaseException] = None):
        error = ServerError(code, what)
        self.errors.report(error)
        raise error from cause

    def _report(self, code: ErrorCode, what: object) -> None:
        self.errors.report(ServerError(code, what))

    @property
    def address(self):
        """The address the server socket is bound to."""
        return self._socket.getsockname()

    def on_io(self, callback: Optional[IOCallback]) -> None:
        """Set the function called when a client socket has data to read."""
        self._io_cb = callback

    def on_accept(self, callback: Optional[SocketCallback]) -> None:
        """Set the function called with each newly accepted client socket."""
        self._accept_cb = callback

    def on_open(self, callback: Optional[PlainCallback]) -> None:
        """Set the function called when the server starts listening."""
        self._open_cb = callback

    def on_close(self, callback: Optional[PlainCallback]) -> None:
        """Set the function called when the server shuts down."""
        self._close_cb = callback

    def listen(self, max_connections: int) -> None:
        """Serve client connections until the server is shut down.

        At most ``max_connections`` clients are held at once.
        """
        if self._closed or max_connections < 1:
            self._close_server_socket()
            self._fail(ErrorCode.INVALID_ARGUMENTS, "create_server")

        try:
            self._socket.listen(socket.SOMAXCONN)
        except OSError as exc:
            self._close_server_socket()
            self._fail(ErrorCode.LISTEN, exc.errno, exc)

        self._slots = [None] * max_connections
        self._wake_r, self._wake_w = socket.socketpair()
        self._wake_r.setblocking(False)
        self._loop_thread = threading.get_ident()
        self._stopped.clear()
        self._listening = True

        try:
            if self._open_cb is not None:
                self._open_cb()
            self._loop()
        except KeyboardInterrupt:
            pass
        finally:
            self._finish()

    def _loop(self) -> None:
        while not self._quit:
            watched = [self._socket, self._wake_r]
            watched.extend(client for client in self._slots if client is not None)
            try:
                readable, _, _ = select.select(watched, [], [])
            except OSError as exc:
                self._report(ErrorCode.SELECT, exc.errno)
                break

            if self._quit:
                break

            ready = set(readable)
            if self._wake_r in ready:
                self._drain_wakeup()
            if self._socket in ready:
                self._accept()

            for index, client in enumerate(self._slots):
                if client is None or client not in ready:
                    continue
                result = (
                    self._io_cb(client)
                    if self._io_cb is not None
                    else CallbackResult.CLOSE_SOCKET
                )
                if result == CallbackResult.CLOSE_SOCKET:
                    self._slots[index] = None
                    client.close()
                if self._quit:
                    break

    def _drain_wakeup(self) -> None:
        try:
            while self._wake_r.recv(64):
                pass
        except OSError:
            pass

    def _accept(self) -> None:
        try:
            client, _ = self._socket.accept()
        except OSError as exc:
            self._report(ErrorCode.ACCEPT, exc.errno)
            return
        client.setblocking(True)
        for index, slot in enumerate(self._slots):
            if slot is None:
                self._slots[index] = client
                if self._accept_cb is not None:
                    self._accept_cb(client)
                return
        # no free slot: the connection cannot be served
        client.close()

    def _close_server_socket(self) -> None:
        self._socket.close()

    def _finish(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        for client in self._slots:
            if client is not None:
                client.close()
        self._slots = []
        self._socket.close()
        for wake in (self._wake_r, self._wake_w):
            if wake is not None:
                wake.close()
        self._listening = False
        try:
            if self._close_cb is not None:
                self._close_cb()
        finally:
            self._stopped.set()

    def shutdown(self) -> None:
        """Stop serving, close every connection and run the close callback."""
        self._quit = True
        if self._listening and not self._closed:
            try:
                self._wake_w.send(b"\0")
            except OSError:
                pass
            if threading.get_ident() != self._loop_thread:
                self._stopped.wait()
        else:
            self._finish()

    def __enter__(self) -> "BaseServer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()


class HttpServer(BaseServer):
    """A TCP server that parses request lines and answers through a callback."""

    def __init__(self, host: Optional[str], port: Union[str, int]) -> None:
        super().__init__(host, port, socket.SOCK_STREAM, socket.IPPROTO_TCP)
        self._listeners: Dict[Event, Optional[Callable]] = {event: None for event in Event}
        self.on_io(self.handle_client)

    def bind_listener(self, event: Union[Event, int], callback: Optional[Callable]) -> None:
        """Bind ``callback`` to ``event``; raises ValueError for an unknown event."""
        self._listeners[Event(event)] = callback

    def handle_client(self, client: socket.socket) -> CallbackResult:
        """Read one request from ``client`` and send back the response."""
        try:
            data = client.recv(RECV_BUFFER_SIZE)
        except OSError as exc:
            self._report(ErrorCode.RECV, exc.errno)
            return CallbackResult.CONTINUE

        if not data:
            on_close = self._listeners[Event.CONNECTION_CLOSE]
            if on_close is not None:
                on_close(client)
            try:
                client.shutdown(socket.SHUT_RDWR)
            except OSError as exc:
                self._report(ErrorCode.SOCKET_SHUTDOWN, exc.errno)
            try:
                client.close()
            except OSError as exc:
                self._report(ErrorCode.SOCKET_CLOSE, exc.errno)
                return CallbackResult.CONTINUE
            return CallbackResult.CLOSE_SOCKET

        response: Union[bytes, str, None] = None
        try:
            request = parse_request_line(data)
        except RequestParseError:
            self._report(ErrorCode.HTTP_PARSE, "IO_callback")
        else:
            on_request = self._listeners[Event.REQUEST]
            if on_request is not None:
                response = on_request(request)

        if not response:
            response = FALLBACK_RESPONSE
        if isinstance(response, str):
            response = response.encode("utf-8")

        try:
            client.sendall(response)
        except OSError as exc:
            self._report(ErrorCode.SEND, exc.errno)

        return CallbackResult.CONTINUE

    def listen(
        self, max_connections: int, on_request: Optional[RequestCallback] = None
    ) -> None:
        """Serve HTTP clients until shut down, optionally binding a request handler."""
        self.on_accept(self._listeners[Event.CONNECTION_OPEN])
        self.on_open(self._listeners[Event.SERVER_ON])
        self.on_close(self._listeners[Event.SERVER_OFF])
        if on_request is not None:
            self.bind_listener(Event.REQUEST, on_request)
        super().listen(max_connections)