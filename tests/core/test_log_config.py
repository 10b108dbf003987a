import io
import logging

import pytest
from structlog.contextvars import bound_contextvars, get_contextvars

from retention_api.core.log_config import setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_installs_single_handler(restore_root_logger):
    setup_logging("warning")

    assert len(restore_root_logger.handlers) == 1
    assert restore_root_logger.level == logging.WARNING
    assert logging.getLogger("botocore").level == logging.WARNING


def test_records_can_be_routed_away_from_stdout(restore_root_logger, capsys):
    stream = io.StringIO()
    setup_logging("info", stream=stream)

    logging.getLogger("retention_api.retention.services.cleaner").warning("bucket swept")

    assert "bucket swept" in stream.getvalue()
    assert "bucket swept" not in capsys.readouterr().out


def test_orchestrator_context_is_visible_to_stdlib_records():
    with bound_contextvars(cleanup_run="abc123", bucket="invoices"):
        assert get_contextvars() == {"cleanup_run": "abc123", "bucket": "invoices"}
    assert "cleanup_run" not in get_contextvars()
