import io

from loghorizon.logger import PrintLogger


def test_info_line_contains_message_and_fields():
    stream = io.StringIO()
    PrintLogger(stream).info("starting server", version="0.1.0")
    output = stream.getvalue()
    assert "INFO: starting server [version 0.1.0]" in output
    assert output.endswith("\n")


def test_error_line_prefix():
    stream = io.StringIO()
    PrintLogger(stream).error("failed to listen", error="boom")
    assert "ERROR: failed to listen [error boom]" in stream.getvalue()


def test_one_line_per_message():
    stream = io.StringIO()
    logger = PrintLogger(stream)
    logger.info("first")
    logger.error("second")
    lines = stream.getvalue().splitlines()
    assert len(lines) == 2
    assert "INFO: first []" in lines[0]
    assert "ERROR: second []" in lines[1]


def test_fields_keep_order():
    stream = io.StringIO()
    PrintLogger(stream).info("search", start="a", end="b", level="info")
    assert "[start a end b level info]" in stream.getvalue()