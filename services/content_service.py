"""
Content Service Module

This module fetches random sentences from the Random Shosha content API
and builds OGP preview image URLs for them. Responses are validated
against the expected shape before they reach the formatter.
"""

from typing import Any, Dict, Optional
from urllib.parse import urlencode, quote

import requests

from config import settings
from services.protocols import Language, SentenceRecord
from utils.exceptions import FetchError
from utils.logger import get_logger

logger = get_logger(__name__)

# Language specific count field required in each API response
COUNT_FIELDS = {
    "ja": "char_count",
    "en": "word_count",
}


def _api_url(lang: Language) -> str:
    return settings.ENGLISH_API_URL if lang == "en" else settings.JAPANESE_API_URL


def _require_str(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise FetchError(f"Field '{key}' is missing or not a non-empty string")
    return value


def _require_int(data: Dict[str, Any], key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool):
        raise FetchError(f"Field '{key}' must be an integer, got a boolean")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    raise FetchError(f"Field '{key}' is missing or not an integer")


def parse_sentence(data: Any, lang: Language) -> SentenceRecord:
    """
    Validate a decoded API response and convert it to a SentenceRecord.

    Args:
        data: The decoded JSON body
        lang: Language the response was requested in

    Returns:
        SentenceRecord: The validated sentence

    Raises:
        FetchError: If any required field is missing or has the wrong type
    """
    if not isinstance(data, dict):
        raise FetchError(f"Expected a JSON object, got {type(data).__name__}")

    # The API names the sentence body 'sentence_text'
    text_key = "sentence_text" if "sentence_text" in data else "text"

    count_field = COUNT_FIELDS["en" if lang == "en" else "ja"]
    count = _require_int(data, count_field)

    card_url: Optional[str] = data.get("card_url")
    if card_url is not None and not isinstance(card_url, str):
        raise FetchError("Field 'card_url' must be a string")

    return SentenceRecord(
        text=_require_str(data, text_key),
        book_id=_require_str(data, "book_id"),
        sentence_id=_require_int(data, "sentence_id"),
        title=_require_str(data, "title"),
        author=_require_str(data, "author"),
        char_count=count if count_field == "char_count" else None,
        word_count=count if count_field == "word_count" else None,
        card_url=card_url or None,
    )


def fetch_sentence(lang: Language) -> SentenceRecord:
    """
    Fetch one random sentence from the content API.

    Args:
        lang: 'ja' or 'en'

    Returns:
        SentenceRecord: The fetched sentence

    Raises:
        FetchError: On network failure, a non-success status or an invalid body
    """
    url = _api_url(lang)
    try:
        response = requests.get(url, timeout=settings.REQUEST_TIMEOUT)
    except requests.RequestException as e:
        raise FetchError(f"Failed to fetch data from {lang} API: {e}") from e

    if not 200 <= response.status_code < 300:
        raise FetchError(f"{lang} API returned status {response.status_code}")

    try:
        data = response.json()
    except ValueError as e:
        raise FetchError(f"{lang} API returned invalid JSON: {e}") from e

    record = parse_sentence(data, lang)
    logger.info(f"Fetched {lang} sentence: {record.title} - {record.author}")
    return record


def fetch_japanese_sentence() -> SentenceRecord:
    """Fetch a sentence from the Japanese API."""
    return fetch_sentence("ja")


def fetch_english_sentence() -> SentenceRecord:
    """Fetch a sentence from the English API."""
    return fetch_sentence("en")


def build_ogp_image_url(record: SentenceRecord, lang: Language) -> str:
    """
    Build the OGP image API URL that renders a preview card for a sentence.

    Args:
        record: The sentence to render
        lang: 'ja' or 'en'

    Returns:
        str: URL with percent-encoded sentence, title, author and lang parameters
    """
    query = urlencode(
        {
            "sentence": record.text,
            "title": record.title,
            "author": record.author,
            "lang": lang,
        },
        quote_via=quote,
    )
    return f"{settings.OGP_IMAGE_API_URL}?{query}"
