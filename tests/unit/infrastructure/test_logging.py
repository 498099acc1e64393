"""Tests for logging configuration and utilities."""

import logging
from unittest.mock import Mock

import pytest
from fastapi import HTTPException

from src.iolab.logging import (
    get_logger,
    handle_generic_error,
    handle_state_error,
    handle_validation_error,
    log_execution_time,
)


class TestGetLogger:
    """Test the get_logger function."""

    def test_get_logger_returns_logger(self) -> None:
        """Test that get_logger returns a configured logger."""
        logger = get_logger("iolab_test_logger")

        assert isinstance(logger, logging.Logger)
        assert logger.name == "iolab_test_logger"
        assert logger.level == logging.INFO
        assert isinstance(logger.handlers[0], logging.StreamHandler)

    def test_get_logger_reuses_existing_handlers(self) -> None:
        """Test that get_logger doesn't add duplicate handlers."""
        logger1 = get_logger("iolab_duplicate_handlers")
        initial_handler_count = len(logger1.handlers)

        logger2 = get_logger("iolab_duplicate_handlers")

        assert logger1 is logger2
        assert len(logger2.handlers) == initial_handler_count


class TestLogExecutionTime:
    """Test the log_execution_time context manager."""

    def test_log_execution_time_success(self) -> None:
        """Test log_execution_time with successful operation."""
        logger = Mock(spec=logging.Logger)

        with log_execution_time(logger, "benchmark computation"):
            pass

        assert logger.info.call_count == 2
        assert "Starting benchmark computation" in logger.info.call_args_list[0][0][0]
        assert "Completed benchmark computation" in logger.info.call_args_list[1][0][0]

    def test_log_execution_time_error(self) -> None:
        """Test that errors are logged and re-raised."""
        logger = Mock(spec=logging.Logger)

        with pytest.raises(ValueError):
            with log_execution_time(logger, "failing operation"):
                raise ValueError("boom")

        logger.error.assert_called_once()
        assert "boom" in logger.error.call_args[0][0]


class TestErrorHandlers:
    """Test the HTTP error translation helpers."""

    def test_handle_validation_error(self) -> None:
        """Test that validation errors map to 400."""
        logger = Mock(spec=logging.Logger)

        error = handle_validation_error(logger, ValueError("intercept must be positive"))

        assert isinstance(error, HTTPException)
        assert error.status_code == 400
        assert error.detail == "intercept must be positive"
        logger.warning.assert_called_once()

    def test_handle_state_error(self) -> None:
        """Test that lifecycle errors map to 409."""
        logger = Mock(spec=logging.Logger)

        error = handle_state_error(logger, RuntimeError("game is running"))

        assert error.status_code == 409
        assert error.detail == "game is running"

    def test_handle_generic_error(self) -> None:
        """Test that unexpected errors map to 500 without leaking details."""
        logger = Mock(spec=logging.Logger)

        error = handle_generic_error(logger, RuntimeError("secret"))

        assert error.status_code == 500
        assert error.detail == "Internal server error"
        logger.error.assert_called_once()
