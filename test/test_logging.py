#  -*- coding: utf-8 -*-
"""
Test suite for structured logging.

Tests cover:
- Silence until configured
- JSON and console rendering of analysis events
- Level handling and handler replacement
"""

from __future__ import annotations

import io
import json
import logging

import pytest

from typing import Iterator

from proplens import AnalysisCache, AnalysisSettings, configure_logging, get_logger
from proplens.logging import ROOT_LOGGER_NAME


# ========== ========== ========== ========== Fixtures
@pytest.fixture(autouse=True)
def restore_logger() -> Iterator[None]:
    """Undo configure_logging after each test."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    handlers, level = list(logger.handlers), logger.level

    yield

    logger.handlers[:] = handlers
    logger.setLevel(level)


@pytest.fixture
def sample_class() -> type:

    class Sample:
        value: int

    return Sample


def events(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


# ========== ========== ========== ========== Tests
class TestConfigureLogging:
    """Test the handler installed by configure_logging."""

    def test_json_events(self, sample_class: type) -> None:
        stream = io.StringIO()
        configure_logging('DEBUG', json_format=True, stream=stream)

        AnalysisCache().analyze(sample_class)

        analyzed = [event for event in events(stream) if event['event'] == 'type_analyzed']

        assert any(event['type'].endswith('Sample') for event in analyzed)
        assert all(event['level'] == 'debug' for event in analyzed)
        assert all('timestamp' in event for event in analyzed)

        sample_event = [event for event in analyzed if event['type'].endswith('Sample')][0]
        assert sample_event['properties'] == ['value']
        assert sample_event['parent'] == 'object'

    def test_console_events(self, sample_class: type) -> None:
        stream = io.StringIO()
        configure_logging('DEBUG', stream=stream)

        AnalysisCache().analyze(sample_class)

        assert 'type_analyzed' in stream.getvalue()

    def test_level_filters_debug_events(self, sample_class: type) -> None:
        stream = io.StringIO()
        configure_logging('INFO', json_format=True, stream=stream)

        AnalysisCache().analyze(sample_class)

        assert stream.getvalue() == ''

    def test_level_from_settings(self) -> None:
        handler = configure_logging(settings=AnalysisSettings(log_level='ERROR'), stream=io.StringIO())

        assert handler.level == logging.ERROR
        assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.ERROR

    def test_default_level(self) -> None:
        handler = configure_logging(stream=io.StringIO())
        assert handler.level == logging.WARNING

    def test_handler_is_replaced(self) -> None:
        first = configure_logging('DEBUG', stream=io.StringIO())
        second = configure_logging('DEBUG', stream=io.StringIO())

        handlers = logging.getLogger(ROOT_LOGGER_NAME).handlers

        assert second in handlers
        assert first not in handlers

    def test_cache_clear_event(self) -> None:
        stream = io.StringIO()
        configure_logging('DEBUG', json_format=True, stream=stream)

        AnalysisCache().clear()

        assert [event['analyzers'] for event in events(stream)] == [0]

    def test_get_logger_routes_to_stdlib(self) -> None:
        stream = io.StringIO()
        configure_logging('INFO', json_format=True, stream=stream)

        get_logger('proplens.custom').info('custom_event', answer=42)

        [event] = events(stream)

        assert event['event'] == 'custom_event'
        assert event['answer'] == 42
        assert event['level'] == 'info'
