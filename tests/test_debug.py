import io
import logging

import pytest

from musicrpc.debug import parse_level, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers = handlers
    root.setLevel(level)


@pytest.mark.parametrize(
    "name, level",
    [("debug", logging.DEBUG), ("INFO", logging.INFO), ("warn", logging.WARNING), ("Error", logging.ERROR)],
)
def test_parse_level(name, level) -> None:
    assert parse_level(name) == level


def test_parse_level_unknown() -> None:
    with pytest.raises(ValueError):
        parse_level("loud")


def test_console_output_is_filtered_and_plain_off_tty() -> None:
    stream = io.StringIO()
    setup_logging("warning", stream=stream)
    log = logging.getLogger("musicrpc.test")
    log.info("hidden")
    log.warning("now playing song=%s", "Bohemian Rhapsody")
    assert stream.getvalue() == "warn  now playing song=Bohemian Rhapsody\n"


def test_debug_file(tmp_path) -> None:
    path = tmp_path / "debug.log"
    setup_logging("error", debug_file=True, stream=io.StringIO(), log_path=path)
    logging.getLogger("musicrpc.test").debug("got song from cache songID=%d", 42)
    for handler in logging.getLogger().handlers:
        handler.flush()
    assert "got song from cache songID=42" in path.read_text(encoding="utf-8")


def test_setup_again_closes_previous_handlers(tmp_path) -> None:
    setup_logging("error", debug_file=True, stream=io.StringIO(), log_path=tmp_path / "first.log")
    first = list(logging.getLogger().handlers)
    file_handler = next(h for h in first if isinstance(h, logging.FileHandler))

    setup_logging("error", debug_file=True, stream=io.StringIO(), log_path=tmp_path / "second.log")

    assert file_handler.stream is None
    assert not any(h in logging.getLogger().handlers for h in first)
