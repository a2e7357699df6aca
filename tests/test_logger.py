import logging

from webwatcher.logger import level_from_name, setup_logger


def test_console_only_logger():
    log = setup_logger("webwatcher.test.console", level=logging.INFO)
    assert log.level == logging.INFO
    assert [type(h) for h in log.handlers] == [logging.StreamHandler]


def test_file_logger(tmp_path):
    log_dir = tmp_path / "logs"
    log = setup_logger("webwatcher.test.file", level=logging.DEBUG, log_dir=str(log_dir), console=False)
    log.debug("hello")
    for handler in log.handlers:
        handler.flush()
    assert "hello" in (log_dir / "webwatcher.log").read_text()


def test_level_from_name():
    assert level_from_name("debug") == logging.DEBUG
    assert level_from_name("nonsense") == logging.WARNING
    assert level_from_name("BASIC_FORMAT") == logging.WARNING
