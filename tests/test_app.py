import pytest

from microhttp.app import hello_handler, main, make_static_handler
from microhttp.httpprot import parse_request_line


def _request(method="GET", path="/", version="1.1"):
    raw = f"{method} {path} HTTP/{version}\r\nHost: localhost\r\n\r\n"
    return parse_request_line(raw.encode("latin-1"))


@pytest.fixture
def site(tmp_path):
    (tmp_path / "index.html").write_text("hello")
    (tmp_path / "logo.png").write_bytes(b"\x89PNG\x00data")
    (tmp_path / "notes.xyz").write_bytes(b"abc")
    return tmp_path


def test_root_serves_index_html(site):
    handler = make_static_handler(site)
    response = handler(_request())
    assert response == (
        b"HTTP/1.1 200 OK\r\n"
        b"Content-Type: text/html; charset=utf-8\r\n"
        b"Content-Length: 5\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
        b"hello"
    )


def test_named_file_served_with_binary_body(site):
    handler = make_static_handler(str(site))
    response = handler(_request(path="/logo.png"))
    head, body = response.split(b"\r\n\r\n", 1)
    assert body == b"\x89PNG\x00data"
    assert b"Content-Type: image/png" in head.split(b"\r\n")
    assert f"Content-Length: {len(body)}".encode() in head.split(b"\r\n")


def test_missing_file_gives_404(site):
    handler = make_static_handler(site)
    response = handler(_request(path="/missing.html"))
    assert response == (
        b"HTTP/1.1 404 Not Found\r\n"
        b"Content-Length: 0\r\n"
        b"Connection: close\r\n"
        b"\r\n"
    )


def test_unknown_extension_has_no_content_type(site):
    handler = make_static_handler(site)
    response = handler(_request(path="/notes.xyz"))
    head, body = response.split(b"\r\n\r\n", 1)
    assert body == b"abc"
    assert not any(line.startswith(b"Content-Type") for line in head.split(b"\r\n"))


def test_non_get_request_gets_no_response(site):
    handler = make_static_handler(site)
    assert handler(_request(method="POST")) is None


def test_overlong_path_falls_back_to_root_and_404s(site):
    handler = make_static_handler(site)
    response = handler(_request(path="/" + "a" * 250))
    assert response.startswith(b"HTTP/1.1 404 Not Found\r\n")


def test_version_and_variant_echoed(site):
    handler = make_static_handler(site)
    response = handler(_request(version="1.0"))
    assert response.startswith(b"HTTP/1 200 OK\r\n")


def test_hello_handler_root():
    response = hello_handler(_request())
    assert response == (
        b"HTTP/1.1 200 OK\r\n"
        b"Content-Type: text/plain\r\n"
        b"Content-Length: 13\r\n"
        b"\r\n"
        b"Hello, world!"
    )


def test_hello_handler_other_path():
    assert hello_handler(_request(path="/other")) is None


def test_main_fails_on_invalid_max_connections(capsys):
    status = main(["--host", "127.0.0.1", "--port", "0", "--max-connections", "0"])
    assert status == 1
    assert "Invalid arguments passed to the function" in capsys.readouterr().err