"""
Тесты системы логирования.
"""

import logging

from repo_transfer.utils.logger import StructuredLogger, TransferFormatter, setup_logging


class TestStructuredLogger:
    """Тесты структурированного логгера событий."""

    def test_event_carries_context_and_data(self, caplog):
        events = StructuredLogger("tests.structured")
        events.set_context(source="old-owner", destination="new-owner")

        with caplog.at_level(logging.INFO, logger="tests.structured"):
            events.log_event("transfer.outcome", resource="alpha", worker_id=2, status_code=None)

        record = caplog.records[-1]
        assert record.levelno == logging.INFO
        assert record.getMessage() == "transfer.outcome source=old-owner destination=new-owner resource=alpha worker_id=2"
        assert record.structured_data['context'] == {"source": "old-owner", "destination": "new-owner"}
        assert record.structured_data['data']['resource'] == "alpha"

    def test_level_is_respected(self, caplog):
        events = StructuredLogger("tests.structured")

        with caplog.at_level(logging.INFO, logger="tests.structured"):
            events.log_event("transfer.summary", level="WARNING", failed=1)

        assert caplog.records[-1].levelno == logging.WARNING
        assert caplog.records[-1].getMessage() == "transfer.summary failed=1"

    def test_clear_context(self, caplog):
        events = StructuredLogger("tests.structured")
        events.set_context(source="old-owner")
        events.clear_context()

        with caplog.at_level(logging.INFO, logger="tests.structured"):
            events.log_event("transfer.summary")

        assert events.get_context() == {}
        assert caplog.records[-1].getMessage() == "transfer.summary"

    def test_log_error(self, caplog):
        events = StructuredLogger("tests.structured")

        with caplog.at_level(logging.INFO, logger="tests.structured"):
            events.log_error(ValueError("bad config"), phase="configuration")

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.structured_data['event'] == "transfer.error"
        assert record.structured_data['data'] == {
            'error': "bad config",
            'error_type': "ValueError",
            'phase': "configuration",
        }


class TestSetupLogging:
    """Тесты настройки логирования."""

    def test_console_and_file_handlers(self, tmp_path, restore_logging):
        log_file = tmp_path / "logs" / "transfer.log"

        setup_logging(level="DEBUG", log_file=str(log_file))

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 2
        assert all(isinstance(h.formatter, TransferFormatter) for h in root.handlers)
        assert log_file.parent.exists()
        assert logging.getLogger("urllib3").level == logging.WARNING
