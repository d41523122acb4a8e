"""Request handlers and a command that serves static files over HTTP."""

from __future__ import annotations

import argparse
import os
import sys
from typing import Callable, Optional, Union

from microhttp.errors import ServerError
from microhttp.httpprot import Header, HttpRequest, Method, build_response
from microhttp.server import Event, HttpServer
from microhttp.utils import file_extension, lookup_value, path_join, read_file

MAX_PATH_SIZE = 256

DEFAULT_HOST = "localhost"
DEFAULT_PORT = "8000"
DEFAULT_ROOT = "public"
DEFAULT_MAX_CONNECTIONS = 1024

HELLO_PORT = "3000"
HELLO_MAX_CONNECTIONS = 100
HELLO_BODY = "Hello, world!"

MIME_TYPES = (
    ("html", "text/html; charset=utf-8"),
    ("htm", "text/html"),
    ("css", "text/css"),
    ("json", "text/json"),
    ("js", "text/javascript"),
    ("ico", "image/vnd.microsoft.icon"),
    ("png", "image/png"),
    ("jpg", "image/jpeg"),
    ("jpeg", "image/jpeg"),
)

RequestHandler = Callable[[HttpRequest], Optional[bytes]]


def _join(origin: str, string: str) -> str:
    # a join that would overflow leaves the path unchanged
    try:
        return path_join(origin, string, MAX_PATH_SIZE)
    except ValueError:
        return origin


def make_static_handler(root: Union[str, os.PathLike]) -> RequestHandler:
    """Return a handler that answers GET requests with files under ``root``.

    A request for ``/`` is served ``index.html``. Missing files get a 404;
    methods other than GET get no response.
    """
    root_path = os.fspath(root)

    def handle(request: HttpRequest) -> Optional[bytes]:
        if request.method != Method.GET:
            return None

        full_path = _join(root_path, request.url_path)
        if request.url_path == "/":
            full_path = _join(full_path, "index.html")

        try:
            content = read_file(full_path)
        except OSError:
            headers = [
                Header("Content-Length", "0"),
                Header("Connection", "close"),
            ]
            return build_response(
                request.variant, request.version, "404 Not Found", headers
            )

        headers = []
        mime_type = lookup_value(MIME_TYPES, file_extension(full_path))
        if mime_type is not None:
            headers.append(Header("Content-Type", mime_type))
        headers.append(Header("Content-Length", str(len(content))))
        headers.append(Header("Connection", "keep-alive"))
        return build_response(
            request.variant, request.version, "200 OK", headers, content
        )

    return handle


def hello_handler(request: HttpRequest) -> Optional[bytes]:
    """Answer ``/`` with a plain-text greeting; give no response otherwise."""
    if request.url_path != "/":
        return None
    headers = [
        Header("Content-Type", "text/plain"),
        Header("Content-Length", str(len(HELLO_BODY))),
    ]
    return build_response(
        request.variant, request.version, "200 OK", headers, HELLO_BODY
    )


def _parse_args(argv):
    parser = argparse.ArgumentParser(description="Serve files over HTTP.")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", default=None)
    parser.add_argument("--root", default=DEFAULT_ROOT)
    parser.add_argument("--max-connections", type=int, default=None)
    parser.add_argument(
        "--hello",
        action="store_true",
        help="answer / with a fixed greeting instead of serving files",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Run the server until interrupted; return the exit status."""
    args = _parse_args(argv)
    port = args.port or (HELLO_PORT if args.hello else DEFAULT_PORT)
    max_connections = args.max_connections
    if max_connections is None:
        max_connections = HELLO_MAX_CONNECTIONS if args.hello else DEFAULT_MAX_CONNECTIONS

    try:
        server = HttpServer(args.host, port)
    except ServerError as error:
        sys.stderr.write(f"[SERVER ERROR] {error}\n")
        return 1

    server.errors.set_callback(lambda _error: server.errors.print_last())

    if args.hello:
        handler = hello_handler
    else:
        handler = make_static_handler(args.root)
        server.bind_listener(
            Event.CONNECTION_OPEN,
            lambda sock: print(f"connection opened on socket: {sock.fileno()}"),
        )
        server.bind_listener(
            Event.CONNECTION_CLOSE,
            lambda sock: print(f"connection closed on socket: {sock.fileno()}"),
        )
        server.bind_listener(
            Event.SERVER_ON,
            lambda: print(f"server listening on http://{args.host}:{port}\n"),
        )
        server.bind_listener(
            Event.SERVER_OFF, lambda: print("\nserver stopped listening")
        )

    try:
        server.listen(max_connections, handler)
    except ServerError:
        return 1
    return 0