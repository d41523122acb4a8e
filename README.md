# microhttp

A small HTTP/1.x server built on plain sockets and `select`. It accepts client
connections and parses the request line of what each client sends. It passes
the parsed request to a handler you supply and sends back the bytes the
handler returns. The package also has helpers that parse request lines, look
up headers and build raw HTTP responses.

## Installing

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## The `microhttp` command

```
microhttp
```

This starts a static file server on `localhost:8000` that serves the files
below the directory `public`, relative to where the command is run. It holds at
most 1024 client connections at once. It prints a line when it starts, when it
stops, and when a connection opens or closes. Stop it with Ctrl-C.

- A `GET` for `/` is answered with `index.html`.
- A file that cannot be read gets a `404 Not Found` response with
  `Content-Length: 0` and `Connection: close`.
- A file that is read is sent with `200 OK`, its `Content-Length` and
  `Connection: keep-alive`. A `Content-Type` header is added when the
  extension is one of html, htm, css, json, js, ico, png, jpg or jpeg.
- Requests with any other method get a bare `500` response.

Options:

- `--host HOST`: the host to bind to (default `localhost`).
- `--port PORT`: the port to bind to (default `8000`, or `3000` with `--hello`).
- `--root DIR`: the directory to serve (default `public`).
- `--max-connections N`: the most clients held at once (default 1024, or 100
  with `--hello`).
- `--hello`: answer `/` with the plain-text body `Hello, world!` instead of
  serving files. Other paths get a bare `500` response.

Server errors that happen while serving are written to standard error with a
`[SERVER ERROR]` prefix. The command exits with status 1 if the server cannot
be created or fails to start listening.

## Using the library

The server is `microhttp.server.HttpServer`. Create it with a host and a port,
then start it with `listen`. Pass `listen` the most simultaneous client
connections you allow and a request handler. The handler receives an
`HttpRequest` and returns the response as `bytes` or `str`, or `None`:

```python
from microhttp.server import HttpServer
from microhttp.app import hello_handler

server = HttpServer("localhost", "3000")
server.listen(100, hello_handler)
```

`microhttp.app.make_static_handler(root)` returns the handler that the
`microhttp` command uses to serve files below `root`:

```python
from microhttp.server import HttpServer
from microhttp.app import make_static_handler

server = HttpServer("localhost", "8000")
server.listen(1024, make_static_handler("public"))
```

`listen` blocks until the server is shut down. It also returns on Ctrl-C.
`shutdown()`, called from another thread, stops the loop. It closes every
connection and runs the `SERVER_OFF` listener. The server can also be used as
a context manager, which shuts it down on exit. The `address` property gives
the address the socket is bound to.

Listeners for other events are attached with
`HttpServer.bind_listener(event, callback)`, passing a member of
`microhttp.server.Event`:

- `REQUEST`: called with the `HttpRequest`; the same as the handler given to
  `listen`.
- `CONNECTION_OPEN` and `CONNECTION_CLOSE`: called with the client socket.
- `SERVER_ON` and `SERVER_OFF`: called with no arguments.

An unknown event raises `ValueError`. If a request line cannot be parsed, or
the handler gives no response, the client gets a bare `HTTP/1.1 500` response.

`microhttp.server.BaseServer` is the plain `select` loop underneath. It takes a
host, a port, a socket type and a protocol. `on_io`, `on_accept`, `on_open` and
`on_close` set its callbacks. The I/O callback returns a `CallbackResult`, and
`CLOSE_SOCKET` drops the client.

### Protocol helpers

`microhttp.httpprot` has the protocol pieces:

- `parse_request_line(buffer)` takes `str` or `bytes` and returns an
  `HttpRequest`. The request holds the `method` (a `Method`), the `variant`
  (such as `HTTP`), the `version` (an `HttpVersion`), the `url_path` and the
  `raw_content` after the request line. It raises `RequestParseError`, whose
  `code` tells which step failed.
- `build_response(variant, version, status, headers, body)` returns the
  response as `bytes`. `status` is a string such as `"200 OK"`, `headers` is a
  sequence of `Header` or `(name, value)` pairs, and `body` is `str`, `bytes` or
  `None`. The version is written as the major number alone when the minor
  number is 0, for example `HTTP/1 200 OK`.
- `find_header(buffer, name)` returns the value of a header in a block of
  CRLF-separated lines, or `None`.
- `header_has_value(header, delim, value)` tells whether `value` is one of the
  `delim`-separated items of a header's value.
- `total_headers_size(headers)` counts the characters the headers take as
  `name: value\r\n` lines.

`microhttp.utils` has the small helpers these use: `next_line`, `read_file`,
`file_extension`, `path_join`, `url_append` and `lookup_value`.

### Errors

Server failures are raised as `microhttp.errors.ServerError`. Each one carries
a `code` from `ErrorCode` and a `what` detail, and `describe(code, what)` gives
its message. Every server has an `ErrorReporter` as its `errors` attribute.
Failures that happen while serving are reported there instead of being raised.
The reporter remembers the last error (`last_code()`), runs the callback set
with `set_callback` for each error, and `print_last()` writes the last message
to the stream set with `set_output`, or to standard error.

## What it does not do

- Only the request line is parsed. Request headers and bodies are left as raw
  text in `HttpRequest.raw_content`, and each readable event reads at most
  10240 bytes.
- There is no TLS, no chunked transfer and no persistent-connection handling
  beyond keeping the socket open.
- The static file handler joins the request path to the root as given. It does
  not resolve or reject `..` segments, so do not expose it to untrusted
  clients.