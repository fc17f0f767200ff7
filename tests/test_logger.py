"""Unit tests for structured logging."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import json
import logging
import pytest
from logger import JSONFormatter, setup_logging


def _record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("services.paginator", logging.INFO, __file__, 1, message, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_format_is_json():
    """Test that log records are rendered as a JSON object."""
    entry = json.loads(JSONFormatter().format(_record("Paginated chapter")))

    assert entry["level"] == "INFO"
    assert entry["logger"] == "services.paginator"
    assert entry["message"] == "Paginated chapter"
    assert entry["timestamp"].endswith("Z")


def test_extra_fields_are_included():
    """Test that fields passed via extra= end up in the entry."""
    entry = json.loads(JSONFormatter().format(_record("Persisted", chapter_id=7, word_count=1200)))

    assert entry["chapter_id"] == 7
    assert entry["word_count"] == 1200


def test_exception_info_is_included():
    """Test that tracebacks are captured."""
    try:
        raise ValueError("bad budget")
    except ValueError:
        record = logging.LogRecord("main", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

    entry = json.loads(JSONFormatter().format(record))

    assert "ValueError: bad budget" in entry["exception"]


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


def test_setup_logging(restore_root_logger):
    """Test that setup_logging installs a JSON handler at the given level."""
    setup_logging("DEBUG")

    assert restore_root_logger.level == logging.DEBUG
    assert isinstance(restore_root_logger.handlers[-1].formatter, JSONFormatter)
