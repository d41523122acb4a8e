import pytest

from microhttp.utils import (
    file_extension,
    lookup_value,
    next_line,
    path_join,
    read_file,
    url_append,
)

MIME_TYPES = [
    ("html", "text/html; charset=utf-8"),
    ("htm", "text/html"),
    ("css", "text/css"),
    ("json", "text/json"),
    ("js", "text/javascript"),
    ("png", "image/png"),
]


def test_next_line_splits_first_line():
    buffer = "GET / HTTP/1.1\r\nHost: localhost\r\n\r\n"
    assert next_line(buffer) == ("GET / HTTP/1.1", "Host: localhost\r\n\r\n")


def test_next_line_iterates_until_blank_line():
    buffer = "GET / HTTP/1.1\r\nHost: localhost\r\nConnection: close\r\n\r\nbody"
    lines = []
    step = next_line(buffer)
    while step is not None:
        line, buffer = step
        lines.append(line)
        step = next_line(buffer)
    assert lines == ["GET / HTTP/1.1", "Host: localhost", "Connection: close"]
    assert buffer == "\r\nbody"


def test_next_line_last_line_without_crlf():
    assert next_line("tail") == ("tail", "")


def test_next_line_empty_and_none():
    assert next_line("") is None
    assert next_line(None) is None
    assert next_line("\r\nbody") is None


def test_next_line_stops_at_nul():
    assert next_line("abc\0def\r\n") == ("abc", "")


def test_next_line_respects_max_size():
    assert next_line("abcdef", 6) is None
    assert next_line("abcdef", 7) == ("abcdef", "")


def test_read_file_round_trip(tmp_path):
    data = bytes(range(256))
    target = tmp_path / "blob.bin"
    target.write_bytes(data)
    assert read_file(target) == data
    assert read_file(str(target)) == data


def test_read_file_missing_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_file(tmp_path / "missing.html")


@pytest.mark.parametrize(
    "path, expected",
    [
        ("index.html", "html"),
        ("public/style.css", "css"),
        ("archive.tar.gz", "gz"),
        ("README", ""),
        ("trailing.", ""),
    ],
)
def test_file_extension(path, expected):
    assert file_extension(path) == expected


def test_path_join_avoids_double_slash():
    assert path_join("../public/", "/index.html", 256) == "../public/index.html"


def test_path_join_plain_concatenation():
    assert path_join("../public", "/index.html", 256) == "../public/index.html"
    assert path_join("../public/", "index.html") == "../public/index.html"


def test_path_join_length_limit():
    origin, string = "abc", "def"
    assert path_join(origin, string, len(origin) + len(string)) == origin + string
    with pytest.raises(ValueError):
        path_join(origin, string, len(origin) + len(string) - 1)


def test_url_append_drops_query_and_slash():
    assert url_append("/docs/?page=2", "/intro", 64) == "/docs/intro"


def test_url_append_without_query():
    assert url_append("/docs", "/intro") == "/docs/intro"


def test_url_append_size_limit():
    result = url_append("/a", "/b", 5)
    assert result == "/a/b"
    with pytest.raises(ValueError):
        url_append("/a", "/b", 4)


def test_lookup_value_in_pair_list():
    assert lookup_value(MIME_TYPES, "css") == "text/css"
    assert lookup_value(MIME_TYPES, "html") == "text/html; charset=utf-8"


def test_lookup_value_missing_key():
    assert lookup_value(MIME_TYPES, "gif") is None
    assert lookup_value([], "css") is None


def test_lookup_value_in_mapping():
    assert lookup_value(dict(MIME_TYPES), "png") == "image/png"


def test_lookup_value_returns_first_match():
    pairs = [("k", "first"), ("k", "second")]
    assert lookup_value(pairs, "k") == "first"