# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the structlog configuration."""

import json
import logging

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import Settings
from src.infrastructure.database.seeds.demo import seed_demo_data
from src.utils.logging import get_logger, setup_logging


def _json_lines(output: str) -> list[dict]:
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


@pytest.fixture
def json_logging(capsys: pytest.CaptureFixture[str]) -> None:
    """Install JSON logging once capsys owns stdout."""
    setup_logging(Settings(environment="staging", debug=False, log_level="INFO"))


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_structlog_events_carry_logger_name(
        self, json_logging: None, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test key/value events render with the module logger name."""
        get_logger("src.example").info("class_created", class_id="c-1")

        records = _json_lines(capsys.readouterr().out)
        assert records[-1]["event"] == "class_created"
        assert records[-1]["logger"] == "src.example"
        assert records[-1]["class_id"] == "c-1"
        assert records[-1]["level"] == "info"

    def test_stdlib_records_share_the_formatter(
        self, json_logging: None, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test %-style stdlib records end up in the same JSON stream."""
        logging.getLogger("src.domains.example").info("Graded %d answers", 3)

        records = _json_lines(capsys.readouterr().out)
        assert records[-1]["event"] == "Graded 3 answers"
        assert records[-1]["logger"] == "src.domains.example"

    def test_level_filter_applies_to_structlog_events(
        self, json_logging: None, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test events below the configured level are dropped."""
        get_logger("src.example").debug("noise")

        assert _json_lines(capsys.readouterr().out) == []

    async def test_demo_seed_logs_after_setup(
        self, json_logging: None, db_session: AsyncSession
    ) -> None:
        """Test seeding runs with production-style logging installed."""
        seeded = await seed_demo_data(db_session)

        assert seeded["student"].id == "student-demo"
