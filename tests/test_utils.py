"""
Tests for utility modules: logging, retry.

Run with: pytest tests/test_utils.py -v
"""

import json
import logging
from unittest.mock import Mock

import pytest
import requests

from roofscan.utils import (
    FileFormatter,
    RetryConfig,
    RoofScanFormatter,
    get_logger,
    retry_with_backoff,
    setup_logging,
)
from roofscan.utils.retry import calculate_delay, should_retry_exception


class TestLogging:
    """Tests for logging configuration."""

    def test_get_logger(self):
        logger = get_logger("test_module")
        assert logger.name == "test_module"

    def test_logger_has_handlers(self):
        setup_logging()
        assert len(logging.getLogger().handlers) > 0

    def test_formatter_appends_context(self):
        record = logging.LogRecord("roofscan", logging.INFO, __file__, 1, "Rendered", None, None)
        record.job_id = "job-9"
        formatted = RoofScanFormatter(use_colors=False).format(record)
        assert "Rendered" in formatted
        assert "job_id=job-9" in formatted

    def test_formatter_appends_segment_context(self):
        record = logging.LogRecord("roofscan", logging.ERROR, __file__, 1, "Skipped", None, None)
        record.segment_id = "seg-2"
        formatted = RoofScanFormatter(use_colors=False).format(record)
        assert formatted.endswith("[segment_id=seg-2]")

    def test_file_formatter_fields(self):
        record = logging.LogRecord("roofscan", logging.ERROR, __file__, 1, "Broken %s", ("box",), None)
        record.job_id = "job-9"
        entry = json.loads(FileFormatter().format(record))
        assert entry["level"] == "ERROR"
        assert entry["message"] == "Broken box"
        assert entry["job_id"] == "job-9"
        assert "segment_id" not in entry

    def test_log_to_file(self, tmp_path):
        log_file = tmp_path / "roofscan.log"
        setup_logging(level="DEBUG", log_to_file=True, log_file=str(log_file))
        get_logger("roofscan.test").info("written to file")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "written to file" in log_file.read_text()
        setup_logging()

    def test_unknown_level_falls_back_to_info(self):
        root = setup_logging(level="chatty")
        assert root.level == logging.INFO
        setup_logging()


class TestRetry:
    """Tests for retry with backoff."""

    def test_succeeds_first_try(self):
        func = Mock(return_value="ok")
        wrapped = retry_with_backoff(func, max_retries=3, sleep=Mock())
        assert wrapped() == "ok"
        assert func.call_count == 1

    def test_retries_then_succeeds(self):
        func = Mock(side_effect=[ConnectionError(), ConnectionError(), "ok"], __name__="func")
        sleep = Mock()
        wrapped = retry_with_backoff(func, max_retries=3, sleep=sleep)
        assert wrapped() == "ok"
        assert func.call_count == 3
        assert sleep.call_count == 2

    def test_gives_up_after_max_retries(self):
        func = Mock(side_effect=TimeoutError("slow"), __name__="func")
        wrapped = retry_with_backoff(func, max_retries=2, sleep=Mock())
        with pytest.raises(TimeoutError):
            wrapped()
        assert func.call_count == 3

    def test_non_retryable_raised_immediately(self):
        func = Mock(side_effect=KeyError("x"), __name__="func")
        wrapped = retry_with_backoff(func, max_retries=3, sleep=Mock())
        with pytest.raises(KeyError):
            wrapped()
        assert func.call_count == 1

    def test_max_retries_override_does_not_mutate_config(self):
        config = RetryConfig(max_retries=5)
        retry_with_backoff(Mock(), config=config, max_retries=1)
        assert config.max_retries == 5

    def test_status_code_decides(self):
        config = RetryConfig()
        busy = requests.HTTPError(response=Mock(status_code=503))
        missing = requests.HTTPError(response=Mock(status_code=404))
        assert should_retry_exception(busy, config)
        assert not should_retry_exception(missing, config)

    def test_connection_failures_retried_other_request_errors_not(self):
        config = RetryConfig()
        assert should_retry_exception(requests.ConnectionError("reset"), config)
        assert should_retry_exception(requests.Timeout("slow"), config)
        assert not should_retry_exception(requests.exceptions.InvalidURL("bad"), config)

    def test_delay_is_capped(self):
        config = RetryConfig(base_delay=1.0, max_delay=5.0, jitter=False)
        assert calculate_delay(0, config) == 1.0
        assert calculate_delay(1, config) == 2.0
        assert calculate_delay(10, config) == 5.0
