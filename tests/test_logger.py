"""Tests for logging setup."""

import logging
import os
import subprocess
import sys
from datetime import datetime

from code_tutor.logger import LOGGER_NAME, setup_logging

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def test_setup_logging_writes_dated_file(log_dir):
    """setup_logging() creates the log directory and a file for today."""
    logger = setup_logging()
    logger.warning("hello from the test")

    log_file = log_dir / f"{datetime.now().strftime('%Y-%m-%d')}.log"
    assert log_file.exists()
    assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)
    for handler in logger.handlers:
        handler.flush()
    assert "hello from the test" in log_file.read_text(encoding="utf-8")


def test_setup_logging_twice_keeps_one_file_handler(log_dir):
    setup_logging()
    logger = setup_logging()
    assert sum(isinstance(h, logging.FileHandler) for h in logger.handlers) == 1


def test_import_has_no_side_effects(tmp_path):
    """Importing the package creates no directories and attaches no real handlers."""
    env = {k: v for k, v in os.environ.items() if k != "CODE_TUTOR_HOME"}
    env["HOME"] = str(tmp_path)
    env["PYTHONPATH"] = PROJECT_ROOT

    script = (
        "import logging, code_tutor.prompt, code_tutor.response, code_tutor.pipeline\n"
        f"handlers = logging.getLogger({LOGGER_NAME!r}).handlers\n"
        "print(sorted(type(h).__name__ for h in handlers))\n"
    )
    result = subprocess.run(
        [sys.executable, "-c", script],
        cwd=tmp_path, env=env, capture_output=True, text=True, check=True,
    )

    assert result.stdout.strip() == "['NullHandler']"
    assert list(tmp_path.iterdir()) == []
