"""Unit tests for logging setup and credential masking."""

from __future__ import annotations

import logging

import pytest

from netsift.utils.logging import HeaderMaskingFilter, get_logger, setup_logging


def _record(msg: str, *args: object) -> logging.LogRecord:
    return logging.LogRecord("netsift.test", logging.INFO, __file__, 1, msg, args, None)


class TestHeaderMaskingFilter:
    """Tests for HeaderMaskingFilter."""

    @pytest.fixture
    def masking_filter(self) -> HeaderMaskingFilter:
        return HeaderMaskingFilter()

    def test_masks_header_lines(self, masking_filter: HeaderMaskingFilter) -> None:
        record = _record("accept: */*\nAuthorization: Bearer secret-token\ncookie: sid=abc; theme=dark")

        assert masking_filter.filter(record) is True
        assert "secret-token" not in record.msg
        assert "sid=abc" not in record.msg
        assert "Authorization: [MASKED]" in record.msg
        assert "cookie: [MASKED]" in record.msg
        assert "accept: */*" in record.msg

    def test_masks_dict_reprs_in_args(self, masking_filter: HeaderMaskingFilter) -> None:
        record = _record("headers=%s", "{'x-api-key': 'k-123', 'accept': 'json'}")

        masking_filter.filter(record)

        assert record.args == ("{'x-api-key': '[MASKED]', 'accept': 'json'}",)

    def test_leaves_other_args_untouched(self, masking_filter: HeaderMaskingFilter) -> None:
        record = _record("%d exchanges", 3)

        masking_filter.filter(record)

        assert record.args == (3,)
        assert record.getMessage() == "3 exchanges"


class TestSetupLogging:
    """Tests for setup_logging and get_logger."""

    def test_single_handler_with_filter(self) -> None:
        logger = setup_logging(logging.DEBUG, name="netsift.test_setup")
        logger = setup_logging(logging.DEBUG, name="netsift.test_setup")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert any(isinstance(f, HeaderMaskingFilter) for f in logger.handlers[0].filters)

    def test_get_logger_namespace(self) -> None:
        assert get_logger("capture").name == "netsift.capture"
        assert get_logger().name == "netsift"
