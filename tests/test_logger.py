import io
import logging

import pytest

from actrun.logger import (
    COLORS,
    StepLogFormatter,
    check_if_terminal,
    with_job_logger,
)


def _record(message, **fields):
    record = logging.LogRecord("t", logging.INFO, __file__, 1, message, None, None)
    for key, value in fields.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def plain(monkeypatch):
    monkeypatch.setenv("CLICOLOR_FORCE", "0")


def test_plain_format(plain):
    formatter = StepLogFormatter(COLORS[0])
    assert formatter.format(_record("hello", job="build")) == "[build] hello"


def test_trailing_newline_removed(plain):
    formatter = StepLogFormatter(COLORS[0])
    assert formatter.format(_record("hello\n", job="build")) == "[build] hello"


def test_dryrun_format(plain):
    formatter = StepLogFormatter(COLORS[0])
    out = formatter.format(_record("hello", job="build", dryrun=True))
    assert out == "*DRYRUN* [build] hello"


def test_raw_output_format(plain):
    formatter = StepLogFormatter(COLORS[0])
    out = formatter.format(_record("hello", job="build", raw_output=True))
    assert out == "[build]   | hello"


def test_secrets_masked(plain):
    formatter = StepLogFormatter(COLORS[0], {"GITHUB_TOKEN": "token"})
    out = formatter.format(_record("value is token", job="build"))
    assert "token" not in out
    assert out.endswith("value is ***")


def test_insecure_secrets_kept(plain):
    formatter = StepLogFormatter(COLORS[0], {"GITHUB_TOKEN": "token"}, True)
    out = formatter.format(_record("value is token", job="build"))
    assert out.endswith("value is token")


def test_colored_format_when_forced(monkeypatch):
    monkeypatch.setenv("CLICOLOR_FORCE", "1")
    formatter = StepLogFormatter(COLORS[0])
    out = formatter.format(_record("hello", job="build"))
    assert out.startswith(f"\x1b[{COLORS[0]}m[build] ")
    assert out.endswith("hello")


def test_is_colored_env(monkeypatch):
    formatter = StepLogFormatter(COLORS[0])
    monkeypatch.delenv("CLICOLOR_FORCE", raising=False)
    monkeypatch.delenv("CLICOLOR", raising=False)
    assert formatter.is_colored(io.StringIO()) is False
    monkeypatch.setenv("CLICOLOR_FORCE", "1")
    assert formatter.is_colored(io.StringIO()) is True
    monkeypatch.setenv("CLICOLOR_FORCE", "0")
    assert formatter.is_colored(io.StringIO()) is False
    monkeypatch.delenv("CLICOLOR_FORCE")
    monkeypatch.setenv("CLICOLOR", "0")
    assert formatter.is_colored(io.StringIO()) is False


def test_check_if_terminal_false_for_buffers():
    assert check_if_terminal(io.StringIO()) is False
    assert check_if_terminal(object()) is False


def test_with_job_logger_writes(plain):
    stream = io.StringIO()
    logger = with_job_logger("build", {"S": "secret"}, False, False, stream)
    logger.info("hello secret")
    logger.info("line", extra={"raw_output": True})
    assert stream.getvalue().splitlines() == ["[build] hello ***", "[build]   | line"]


def test_with_job_logger_dryrun(plain):
    stream = io.StringIO()
    logger = with_job_logger("build", None, False, True, stream)
    logger.info("hello")
    assert stream.getvalue() == "*DRYRUN* [build] hello\n"


def test_with_job_logger_cycles_colors():
    first = with_job_logger("a", stream=io.StringIO())
    second = with_job_logger("b", stream=io.StringIO())
    color_a = first.logger.handlers[0].formatter.color
    color_b = second.logger.handlers[0].formatter.color
    assert color_a in COLORS and color_b in COLORS
    assert COLORS.index(color_b) == (COLORS.index(color_a) + 1) % len(COLORS)