# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for logging configuration."""

import json
import logging

import pytest
import structlog

from enrollkit.core.config.settings import Settings
from enrollkit.domains.enrollment.form import EnrollmentForm
from enrollkit.domains.enrollment.payment_methods import PaymentMethodSelector
from enrollkit.models.enrollment import PaymentMethod
from enrollkit.utils.logging import (
    HANDLER_NAME,
    bind_context,
    clear_context,
    get_logger,
    setup_logging,
)


@pytest.fixture
def configure_logging():
    """Run setup_logging and undo it after the test."""
    yield setup_logging

    root = logging.getLogger()
    for handler in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(handler)
    root.setLevel(logging.WARNING)
    logging.getLogger("enrollkit").setLevel(logging.NOTSET)
    structlog.reset_defaults()
    clear_context()


def json_lines(output: str) -> list[dict]:
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging."""

    def test_applies_level_and_quiets_transport(self, configure_logging) -> None:
        """Test the package level is applied and HTTP chatter is quieted."""
        settings = Settings(_env_file=None, debug=False, log_level="INFO")

        configure_logging(settings)

        assert logging.getLogger("enrollkit").level == logging.INFO
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("PIL").level == logging.WARNING

    def test_repeated_setup_installs_one_handler(self, configure_logging) -> None:
        """Test calling setup twice replaces the previous handler."""
        settings = Settings(_env_file=None, debug=False, log_level="INFO")

        configure_logging(settings)
        configure_logging(settings)

        names = [h.get_name() for h in logging.getLogger().handlers]
        assert names.count(HANDLER_NAME) == 1

    def test_stdlib_records_carry_bound_context(self, configure_logging, capsys) -> None:
        """Test records from logging.getLogger include bound context as JSON keys."""
        configure_logging(
            Settings(_env_file=None, environment="staging", debug=False, log_level="INFO")
        )
        bind_context(user_id="7")

        logging.getLogger("enrollkit.tests").info("Plain record: %s", "value")

        lines = json_lines(capsys.readouterr().out)
        assert lines[-1]["event"] == "Plain record: value"
        assert lines[-1]["user_id"] == "7"
        assert lines[-1]["level"] == "info"

    def test_get_logger_returns_bound_logger(self) -> None:
        """Test get_logger returns a usable structlog logger."""
        logger = get_logger("enrollkit.tests")

        assert hasattr(logger, "info")


@pytest.mark.unit
class TestSubmissionLogContext:
    """Tests for user and course tagging of submission logs."""

    @pytest.mark.asyncio
    async def test_submit_log_carries_user_and_course(
        self, configure_logging, capsys, api_client, identity, course, payment_accounts, png_bytes
    ) -> None:
        """Test the dispatch log line of a successful submit is tagged."""
        configure_logging(
            Settings(_env_file=None, environment="staging", debug=False, log_level="INFO")
        )
        form = EnrollmentForm(
            api_client,
            identity=identity,
            course=course,
            selector=PaymentMethodSelector(accounts=payment_accounts),
        )
        form.select_payment_method(PaymentMethod.JAZZCASH)
        form.update_field("jazzcash_number", "03001234567")
        form.update_field("jazzcash_account_name", "Ayesha Khan")
        form.attach_proof(png_bytes, "image/png", "receipt.png")
        await form.collector.wait_for_preview()

        outcome = await form.submit()

        assert outcome.kind == "submitted"
        lines = json_lines(capsys.readouterr().out)
        submitting = [line for line in lines if line["event"].startswith("Submitting enrollment")]
        assert len(submitting) == 1
        assert submitting[0]["user_id"] == "7"
        assert submitting[0]["course_id"] == "42"
        assert structlog.contextvars.get_contextvars() == {}


@pytest.mark.unit
class TestLoggingContext:
    """Tests for context binding."""

    def test_bind_and_clear(self) -> None:
        """Test bound keys appear in the context until cleared."""
        bind_context(user_id="7", course_id="42")

        assert structlog.contextvars.get_contextvars() == {"user_id": "7", "course_id": "42"}

        clear_context()

        assert structlog.contextvars.get_contextvars() == {}
