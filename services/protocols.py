"""
Service Protocol Definitions

This module defines the data classes exchanged between services and the
typing.Protocol interface shared by the publishing services. These protocols
enable loose coupling, dependency injection, and easier testing.

Protocols defined:
- SocialPlatformService: Interface for social media platform services (X, Bluesky)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, Optional, Dict, Any, Literal, Tuple


Language = Literal["ja", "en"]


@dataclass(frozen=True)
class SentenceRecord:
    """Data class to store one sentence fetched from the content API.

    Attributes:
        text (str): The sentence itself.
        book_id (str): Identifier of the work, e.g. 'meian-natsume'.
        sentence_id (int): Index of the sentence within the work.
        title (str): Title of the work.
        author (str): Author of the work.
        char_count (int, optional): Character count (Japanese API only).
        word_count (int, optional): Word count (English API only).
        card_url (str, optional): Card page URL (Japanese API only).
    """
    text: str
    book_id: str
    sentence_id: int
    title: str
    author: str
    char_count: Optional[int] = None
    word_count: Optional[int] = None
    card_url: Optional[str] = None


@dataclass(frozen=True)
class ShareContent:
    """Post body shared to every platform. `url` always appears verbatim in `text`."""
    text: str
    url: str


@dataclass(frozen=True)
class XCredentials:
    """OAuth 1.0a user-context credentials of one X account."""
    api_key: str = field(repr=False)
    api_secret: str = field(repr=False)
    access_token: str = field(repr=False)
    access_token_secret: str = field(repr=False)

    def is_complete(self) -> bool:
        return all([self.api_key, self.api_secret, self.access_token, self.access_token_secret])


@dataclass(frozen=True)
class BlueskyCredentials:
    """Handle and app password of one Bluesky account."""
    identifier: str
    password: str = field(repr=False)

    def is_complete(self) -> bool:
        return bool(self.identifier and self.password)


class SpanKind(Enum):
    LINK = "link"
    TAG = "tag"


@dataclass(frozen=True)
class RichTextSpan:
    """A byte range of post text annotated as a link or a hashtag.

    Offsets count UTF-8 bytes, not characters.
    """
    byte_start: int
    byte_end: int
    kind: SpanKind
    value: str

    def to_facet(self) -> Dict[str, Any]:
        """Render the span as an app.bsky.richtext.facet object."""
        if self.kind is SpanKind.LINK:
            feature = {"$type": "app.bsky.richtext.facet#link", "uri": self.value}
        else:
            feature = {"$type": "app.bsky.richtext.facet#tag", "tag": self.value}
        return {
            "index": {"byteStart": self.byte_start, "byteEnd": self.byte_end},
            "features": [feature],
        }


POST_COLLECTION = "app.bsky.feed.post"
EXTERNAL_EMBED_TYPE = "app.bsky.embed.external"


@dataclass(frozen=True)
class ExternalEmbed:
    """An app.bsky.embed.external link card. `thumb` is a blob reference passed through unchanged."""
    uri: str
    title: str
    description: str
    thumb: Optional[Dict[str, Any]] = None

    def to_record(self) -> Dict[str, Any]:
        external: Dict[str, Any] = {
            "uri": self.uri,
            "title": self.title,
            "description": self.description,
        }
        if self.thumb:
            external["thumb"] = self.thumb
        return {"$type": EXTERNAL_EMBED_TYPE, "external": external}


@dataclass(frozen=True)
class PostRecord:
    """An app.bsky.feed.post record.

    `facets` holds rendered app.bsky.richtext.facet objects. The optional
    members are only written out when set, so a post without
    links or hashtags carries no `facets` key at all.
    """
    text: str
    created_at: str
    facets: Tuple[Dict[str, Any], ...] = ()
    embed: Optional[ExternalEmbed] = None

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "$type": POST_COLLECTION,
            "text": self.text,
            "createdAt": self.created_at,
        }
        if self.facets:
            record["facets"] = list(self.facets)
        if self.embed is not None:
            record["embed"] = self.embed.to_record()
        return record


class SocialPlatformService(Protocol):
    """Protocol defining the interface for social media platform services.

    This protocol unifies the interface for Bluesky (SocialService) and
    X (TwitterService), enabling them to be used interchangeably by the
    orchestration layer.
    """

    platform_name: str

    def post_content(self, share: ShareContent, record: SentenceRecord) -> bool:
        """Post formatted content to the social media platform.

        Args:
            share: The formatted post body.
            record: The sentence the post was built from.

        Returns:
            True if the platform accepted the post, False otherwise.
        """
        ...
