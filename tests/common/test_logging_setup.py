import logging

import pytest
from rich.logging import RichHandler

from payroll_system.common.logging_setup import setup_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_console_goes_through_rich(root_logger):
    setup_logging("debug")

    assert root_logger.level == logging.DEBUG
    assert [type(h) for h in root_logger.handlers] == [RichHandler]
    assert logging.getLogger("werkzeug").level == logging.WARNING


def test_unknown_level_falls_back_to_info_and_log_file_is_created(root_logger, tmp_path):
    log_file = tmp_path / "logs" / "payroll.log"

    setup_logging("chatty", log_file)
    logging.getLogger("payroll_system.test").warning("written")

    assert root_logger.level == logging.INFO
    assert any(isinstance(h, logging.FileHandler) for h in root_logger.handlers)
    assert "written" in log_file.read_text(encoding="utf-8")
