import io

import pytest

from microhttp.errors import ErrorCode, ErrorReporter, ServerError, describe


def test_describe_invalid_arguments():
    assert (
        describe(ErrorCode.INVALID_ARGUMENTS, "create_server")
        == "Invalid arguments passed to the function: create_server"
    )


def test_describe_accepts_plain_int_and_numeric_detail():
    assert describe(7, 98) == "listen() call failed with code: 98"


def test_describe_unknown_code():
    assert describe(99, "anything") == "Undefined error: 99"


@pytest.mark.parametrize("code", list(ErrorCode))
def test_every_code_has_message_containing_detail(code):
    message = describe(code, "detail-xyz")
    assert not message.startswith("Undefined error")
    assert message.endswith("detail-xyz")


def test_server_error_carries_code_and_message():
    err = ServerError(ErrorCode.HTTP_PARSE, "IO_callback")
    assert err.code == 9
    assert err.what == "IO_callback"
    assert str(err) == "Failed to parse http protocol in function: IO_callback"


def test_server_error_is_exception():
    error = ServerError(ErrorCode.SELECT, "select")
    with pytest.raises(Exception) as excinfo:
        raise error
    assert excinfo.value is error
    assert str(excinfo.value) == "select() call failed with code: select"
    assert excinfo.value.code == 3


def test_reporter_starts_without_error():
    reporter = ErrorReporter()
    assert reporter.last_code() == 0


def test_reporter_records_last_code():
    reporter = ErrorReporter()
    reporter.report(ServerError(ErrorCode.ACCEPT, 1))
    reporter.report(ServerError(ErrorCode.LISTEN, 2))
    assert reporter.last_code() == ErrorCode.LISTEN


def test_reporter_runs_callback_with_error():
    reporter = ErrorReporter()
    seen = []
    reporter.set_callback(seen.append)
    err = ServerError(ErrorCode.BIND, 13)
    reporter.report(err)
    assert seen == [err]


def test_print_last_writes_prefixed_message():
    reporter = ErrorReporter()
    out = io.StringIO()
    reporter.set_output(out)
    reporter.report(ServerError(ErrorCode.LISTEN, 98))
    reporter.print_last()
    assert out.getvalue() == "[SERVER ERROR] listen() call failed with code: 98\n"


def test_print_last_without_error_writes_nothing():
    reporter = ErrorReporter()
    out = io.StringIO()
    reporter.set_output(out)
    reporter.print_last()
    assert out.getvalue() == ""


def test_print_last_defaults_to_stderr(capsys):
    reporter = ErrorReporter()
    reporter.report(ServerError(ErrorCode.SELECT, "select"))
    reporter.print_last()
    captured = capsys.readouterr()
    assert captured.err == "[SERVER ERROR] select() call failed with code: select\n"
    assert captured.out == ""