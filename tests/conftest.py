"""
Shared Test Fixtures for Random Shosha Poster

This module provides common fixtures used across all test modules.
Fixtures include credentials, log capture, HTTP responses, and
data factories for test objects.
"""

import json
import logging
import os
import sys
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.protocols import BlueskyCredentials, SentenceRecord, XCredentials


# =============================================================================
# Credential Fixtures
# =============================================================================

@pytest.fixture
def x_credentials():
    """Complete X credentials with obvious test values."""
    return XCredentials(
        api_key="test-api-key",
        api_secret="test-api-secret",
        access_token="test-access-token",
        access_token_secret="test-access-secret",
    )


@pytest.fixture
def bluesky_credentials():
    """Complete Bluesky credentials with obvious test values."""
    return BlueskyCredentials(identifier="randomshosha.test", password="test-app-password")


# =============================================================================
# Logging Fixtures
# =============================================================================

@pytest.fixture
def capture_logs():
    """
    Capture log messages for assertion in tests.

    Records are captured on the root logger, which every application
    logger propagates to.

    Returns:
        list: A list that will contain captured log records.
    """

    class LogCapture(logging.Handler):
        def __init__(self):
            super().__init__()
            self.records = []

        def emit(self, record):
            self.records.append(record)

    handler = LogCapture()
    handler.setLevel(logging.DEBUG)

    root_logger = logging.getLogger()
    original_level = root_logger.level
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(handler)

    yield handler.records

    root_logger.removeHandler(handler)
    root_logger.setLevel(original_level)


# =============================================================================
# HTTP Response Fixtures
# =============================================================================

@pytest.fixture
def mock_http_response():
    """
    Factory fixture for creating mock HTTP responses.

    Usage:
        def test_http_request(mock_http_response):
            response = mock_http_response(
                status_code=200,
                json_data={'key': 'value'},
            )

    Returns:
        callable: A factory function for creating mock responses.
    """
    def _create_response(
        status_code: int = 200,
        content: bytes = b'',
        text: str = '',
        json_data: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> MagicMock:
        mock_response = MagicMock()
        mock_response.status_code = status_code
        mock_response.content = content
        mock_response.headers = headers if headers is not None else {'Content-Type': 'application/json'}
        mock_response.ok = 200 <= status_code < 300

        if text:
            mock_response.text = text
        elif json_data is not None:
            mock_response.text = json.dumps(json_data, ensure_ascii=False)
        else:
            mock_response.text = ''

        if json_data is not None:
            mock_response.json.return_value = json_data
        else:
            mock_response.json.side_effect = ValueError("No JSON data")

        return mock_response

    return _create_response


# =============================================================================
# Data Model Factories
# =============================================================================

@pytest.fixture
def japanese_payload():
    """A Japanese content API response body."""
    return {
        "sentence_text": "あなたはそれを知っていますか。",
        "book_id": "meian-natsume",
        "sentence_id": 12,
        "title": "明暗",
        "author": "夏目漱石",
        "char_count": 15,
        "card_url": "https://rmc-8.com/shosha/card/meian-natsume/12",
    }


@pytest.fixture
def english_payload():
    """An English content API response body."""
    return {
        "sentence_text": "It was the best of times, it was the worst of times.",
        "book_id": "two-cities-dickens",
        "sentence_id": 1,
        "title": "A Tale of Two Cities",
        "author": "Charles Dickens",
        "word_count": 12,
    }


@pytest.fixture
def sentence_record_factory():
    """
    Factory fixture for creating SentenceRecord test objects.

    Returns:
        callable: A factory function for creating SentenceRecord objects.
    """
    def _create_record(
        text: str = "あなたはそれを知っていますか。",
        book_id: str = "meian-natsume",
        sentence_id: int = 12,
        title: str = "明暗",
        author: str = "夏目漱石",
        **kwargs
    ) -> SentenceRecord:
        return SentenceRecord(
            text=text,
            book_id=book_id,
            sentence_id=sentence_id,
            title=title,
            author=author,
            **kwargs
        )

    return _create_record
