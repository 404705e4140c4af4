"""
Formatter Module

This module turns a fetched sentence into the text shared on every platform:
a title line, a hashtag line and the share URL, each on its own line.
"""

from urllib.parse import quote

from config import settings
from services.protocols import Language, SentenceRecord, ShareContent

# Characters encodeURIComponent leaves untouched besides alphanumerics and "-_."
_URI_COMPONENT_SAFE = "!~*'()"


def generate_share_url(book_id: str, sentence_id: int, lang: Language) -> str:
    """
    Build the Random Shosha page URL for a sentence.

    Args:
        book_id: Identifier of the work
        sentence_id: Index of the sentence within the work
        lang: 'ja' or 'en'

    Returns:
        str: The share URL
    """
    path = settings.SHARE_PATHS["en" if lang == "en" else "ja"]
    encoded_book_id = quote(book_id, safe=_URI_COMPONENT_SAFE)
    return f"{settings.SHARE_BASE_URL}/{path}/?book_id={encoded_book_id}&sentence_id={sentence_id}"


def generate_hashtags(book_id: str, sentence_id: int, lang: Language) -> str:
    """Primary tag for the language followed by a per-sentence tag such as '#meiannatsume_12'."""
    primary = settings.PRIMARY_HASHTAGS["en" if lang == "en" else "ja"]
    clean_book_id = book_id.replace("-", "")
    return f"{primary} #{clean_book_id}_{sentence_id}"


def generate_share_content(record: SentenceRecord, lang: Language) -> ShareContent:
    """
    Compose the post body for a sentence.

    Args:
        record: The fetched sentence
        lang: 'ja' or 'en'

    Returns:
        ShareContent: Post text and the share URL embedded in it
    """
    share_url = generate_share_url(record.book_id, record.sentence_id, lang)
    hashtags = generate_hashtags(record.book_id, record.sentence_id, lang)

    if lang == "en":
        heading = f'"{record.title}" by {record.author}'
    else:
        heading = f"『{record.title}』{record.author}著"

    text = f"{heading}\n{hashtags}\n{share_url}"
    return ShareContent(text=text, url=share_url)
