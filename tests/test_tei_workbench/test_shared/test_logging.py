"""Tests for structured logging helpers."""

import logging

from tei_workbench.shared.logging import CorrelationLogger, configure_logging, get_logger


class TestCorrelationLogger:
    """Test CorrelationLogger."""

    def test_component_defaults_to_module_name(self):
        """Test the default component name."""
        logger = get_logger("tei_workbench.tree.builder")

        assert isinstance(logger, CorrelationLogger)
        assert logger.component == "builder"
        assert logger.correlation_id is None

    def test_records_carry_structured_fields(self, caplog):
        """Test that records include component, correlation ID and extras."""
        logger = get_logger("tei_workbench.test", "session-1", "history")

        with caplog.at_level(logging.INFO, logger="tei_workbench.test"):
            logger.info("Snapshot recorded", extra={"cursor": 3})

        record = caplog.records[0]
        assert record.getMessage() == "Snapshot recorded"
        assert record.component == "history"
        assert record.correlation_id == "session-1"
        assert record.cursor == 3

    def test_error_includes_traceback(self, caplog):
        """Test that errors logged inside handlers keep exception info."""
        logger = get_logger("tei_workbench.test")

        with caplog.at_level(logging.ERROR, logger="tei_workbench.test"):
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                logger.error("Failed")

        assert caplog.records[0].exc_info is not None


class TestConfigureLogging:
    """Test configure_logging."""

    def test_single_handler(self):
        """Test that repeated configuration does not add handlers."""
        configure_logging("DEBUG")
        configure_logging("WARNING")

        package_logger = logging.getLogger("tei_workbench")
        assert len(package_logger.handlers) == 1
        assert package_logger.level == logging.WARNING
