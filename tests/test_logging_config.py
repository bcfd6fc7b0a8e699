import io
import json
import logging

import pytest
import structlog

from intenus import __version__
from intenus.config import Settings
from intenus.logging_config import SERVICE_NAME, resolve_log_format, setup_logging


@pytest.fixture
def stream():
    """Capture log output, then put the root logger back as it was."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield io.StringIO()
    root.handlers[:] = handlers
    root.setLevel(level)


def last_json_line(stream: io.StringIO) -> dict:
    return json.loads(stream.getvalue().strip().splitlines()[-1])


def test_stdlib_records_render_as_json_with_service_context(stream):
    setup_logging("INFO", "json", stream=stream)

    logging.getLogger("intenus.core.intent.resolver").info(
        "Intent request rejected: %s", "InvalidAddress"
    )

    line = last_json_line(stream)
    assert line["event"] == "Intent request rejected: InvalidAddress"
    assert line["level"] == "info"
    assert line["logger"] == "intenus.core.intent.resolver"
    assert line["service"] == SERVICE_NAME
    assert line["version"] == __version__
    assert line["igs_version"] == "1.0.0"
    assert "timestamp" in line


def test_structlog_loggers_share_the_pipeline(stream):
    setup_logging("INFO", "json", stream=stream)

    structlog.stdlib.get_logger("test.http").info("request", status_code=200)

    line = last_json_line(stream)
    assert line["event"] == "request"
    assert line["status_code"] == 200
    assert line["service"] == SERVICE_NAME


def test_level_filters_debug_records(stream):
    setup_logging("WARNING", "json", stream=stream)

    logging.getLogger("intenus.core.intent.defaults").info("ignored")
    logging.getLogger("intenus.core.intent.defaults").warning("Unknown priority 'moon'")

    lines = stream.getvalue().strip().splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["level"] == "warning"


def test_console_output_is_not_json(stream):
    setup_logging("DEBUG", "auto", stream=stream)

    logging.getLogger("intenus").debug("resolved intent")

    output = stream.getvalue()
    assert "resolved intent" in output
    with pytest.raises(ValueError):
        json.loads(output.strip().splitlines()[-1])


@pytest.mark.parametrize(
    "log_format,level,expected",
    [
        ("auto", logging.DEBUG, "console"),
        ("auto", logging.INFO, "json"),
        ("json", logging.DEBUG, "json"),
        ("console", logging.ERROR, "console"),
    ],
)
def test_resolve_log_format(log_format, level, expected):
    assert resolve_log_format(log_format, level) == expected


def test_unknown_log_format_is_rejected():
    with pytest.raises(ValueError):
        resolve_log_format("xml", logging.INFO)


def test_log_format_from_environment(monkeypatch):
    monkeypatch.setenv("INTENUS_LOG_FORMAT", "json")
    assert Settings(_env_file=None).log_format == "json"
