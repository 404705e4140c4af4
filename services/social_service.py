"""
Social Service Module

This module handles social media integration with the AT Protocol (Bluesky).
It provides functionality for creating sessions, uploading preview images
as blobs, and composing and creating post records with rich-text facets
and link-card embeds.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

from config import settings
from services.content_service import build_ogp_image_url
from services.facets import extract_facets, facets_to_records
from services.protocols import (
    POST_COLLECTION,
    BlueskyCredentials,
    ExternalEmbed,
    Language,
    PostRecord,
    SentenceRecord,
    ShareContent,
)
from utils.exceptions import AuthenticationError, MediaUploadError, PostingError, SocialMediaError
from utils.helpers import safe_get, truncate_text
from utils.logger import get_logger

logger = get_logger(__name__)


def _iso_now() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a 'Z' suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SocialService:
    """Service for social media integrations with the AT Protocol (Bluesky)."""

    platform_name = "bluesky"

    def __init__(self, credentials: BlueskyCredentials, lang: Language = "ja"):
        """
        Initialize the social service.

        Args:
            credentials: Handle and app password of the account to post as
            lang: Language used for default link-card texts
        """
        self.credentials = credentials
        self.lang = lang
        self.api_base = settings.BLUESKY_API_BASE.rstrip("/")

    def _xrpc_url(self, method: str) -> str:
        return f"{self.api_base}/{method}"

    # =========================================================================
    # Session
    # =========================================================================

    def _login(self) -> str:
        """
        Create a session and return its access token.

        Raises:
            AuthenticationError: On transport failure, a non-200 status or a missing token
        """
        if not self.credentials.is_complete():
            raise AuthenticationError("Missing AT Protocol credentials")

        try:
            response = requests.post(
                self._xrpc_url("com.atproto.server.createSession"),
                json={
                    "identifier": self.credentials.identifier,
                    "password": self.credentials.password,
                },
                timeout=settings.REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise AuthenticationError(f"Bluesky session request failed: {e}") from e

        if response.status_code != settings.BLUESKY_SUCCESS_STATUS:
            body = truncate_text(response.text or "", settings.LOG_BODY_LENGTH)
            raise AuthenticationError(f"Bluesky session creation failed ({response.status_code}): {body}")

        try:
            access_jwt = response.json().get("accessJwt")
        except (ValueError, AttributeError) as e:
            raise AuthenticationError(f"Bluesky session response is not a JSON object: {e}") from e

        if not access_jwt:
            raise AuthenticationError("Bluesky session response has no accessJwt")
        return access_jwt

    def create_session(self) -> Optional[str]:
        """
        Authenticate with Bluesky.

        A new session is created on every call; nothing is cached.

        Returns:
            Optional[str]: The access token, or None if authentication failed
        """
        try:
            access_jwt = self._login()
            logger.info(f"Bluesky session created for {self.credentials.identifier}")
            return access_jwt
        except AuthenticationError as e:
            logger.error(f"Failed to authenticate with AT Protocol: {e}")
            return None

    # =========================================================================
    # Blob upload
    # =========================================================================

    def _upload_image(self, image_url: str, access_jwt: str) -> Dict[str, Any]:
        try:
            image_response = requests.get(image_url, timeout=settings.REQUEST_TIMEOUT)
        except requests.RequestException as e:
            raise MediaUploadError(f"Failed to download image {image_url}: {e}") from e

        if image_response.status_code != 200:
            raise MediaUploadError(f"Image download returned status {image_response.status_code}")

        content_type = image_response.headers.get("Content-Type") or settings.DEFAULT_BLOB_MIME_TYPE
        mime_type = content_type.split(";")[0].strip() or settings.DEFAULT_BLOB_MIME_TYPE

        try:
            upload = requests.post(
                self._xrpc_url("com.atproto.repo.uploadBlob"),
                data=image_response.content,
                headers={
                    "Content-Type": mime_type,
                    "Authorization": f"Bearer {access_jwt}",
                },
                timeout=settings.REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise MediaUploadError(f"Blob upload request failed: {e}") from e

        if upload.status_code != settings.BLUESKY_SUCCESS_STATUS:
            body = truncate_text(upload.text or "", settings.LOG_BODY_LENGTH)
            raise MediaUploadError(f"Blob upload failed ({upload.status_code}): {body}")

        try:
            blob = safe_get(upload.json(), "blob")
        except ValueError as e:
            raise MediaUploadError(f"Blob upload response is not JSON: {e}") from e

        if not blob:
            raise MediaUploadError("Blob upload response has no blob")
        return blob

    def upload_blob(self, image_url: str, access_jwt: str) -> Optional[Dict[str, Any]]:
        """
        Download an image and re-upload it as a Bluesky blob.

        Args:
            image_url: URL of the image to download
            access_jwt: Session access token

        Returns:
            Optional[Dict[str, Any]]: The blob reference from the upload response, or None on failure
        """
        try:
            blob = self._upload_image(image_url, access_jwt)
            logger.info(f"Uploaded thumbnail blob from {image_url}")
            return blob
        except MediaUploadError as e:
            logger.warning(f"Failed to upload image: {e}")
            return None

    # =========================================================================
    # Record composition
    # =========================================================================

    def build_external_embed(self, share_url: str, title: Optional[str] = None,
                             description: Optional[str] = None,
                             thumb: Optional[Dict[str, Any]] = None) -> ExternalEmbed:
        """
        Build an app.bsky.embed.external link card.

        Missing title and description fall back to the language defaults.
        """
        defaults = settings.OGP_DEFAULTS["en" if self.lang == "en" else "ja"]
        return ExternalEmbed(
            uri=share_url,
            title=title or defaults["title"],
            description=description or defaults["description"],
            thumb=thumb,
        )

    def build_post_record(self, text: str, embed: Optional[ExternalEmbed] = None) -> PostRecord:
        """
        Build an app.bsky.feed.post record.

        Args:
            text: The post text
            embed: Optional link card

        Returns:
            PostRecord: The post record with its link and hashtag facets
        """
        return PostRecord(
            text=text,
            created_at=_iso_now(),
            facets=tuple(facets_to_records(extract_facets(text))),
            embed=embed,
        )

    def _create_record(self, record: PostRecord, access_jwt: str) -> Dict[str, Any]:
        payload = {
            "repo": self.credentials.identifier,
            "collection": POST_COLLECTION,
            "record": record.to_record(),
        }
        try:
            response = requests.post(
                self._xrpc_url("com.atproto.repo.createRecord"),
                json=payload,
                headers={"Authorization": f"Bearer {access_jwt}"},
                timeout=settings.REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise PostingError(f"Bluesky createRecord request failed: {e}") from e

        body = truncate_text(response.text or "", settings.LOG_BODY_LENGTH)
        if response.status_code != settings.BLUESKY_SUCCESS_STATUS:
            raise PostingError(f"Bluesky post failed ({response.status_code}): {body}")

        logger.info(f"Bluesky post successful: {body}")
        try:
            return response.json()
        except ValueError:
            return {}

    # =========================================================================
    # Posting
    # =========================================================================

    def post_to_social(self, text: str, share_url: Optional[str] = None,
                       ogp_title: Optional[str] = None, ogp_description: Optional[str] = None,
                       ogp_image_url: Optional[str] = None) -> bool:
        """
        Post content to Bluesky.

        Args:
            text: The text to post
            share_url: URL for the link card (optional)
            ogp_title: Link card title (optional, language default otherwise)
            ogp_description: Link card description (optional, language default otherwise)
            ogp_image_url: Image for the link card thumbnail (optional, used only with share_url)

        Returns:
            bool: True if the post was successful, False otherwise
        """
        access_jwt = self.create_session()
        if not access_jwt:
            logger.error("Bluesky authentication failed")
            return False

        try:
            embed = None
            if share_url:
                thumb = self.upload_blob(ogp_image_url, access_jwt) if ogp_image_url else None
                embed = self.build_external_embed(share_url, ogp_title, ogp_description, thumb)
                logger.info(f"Adding OGP card for URL: {share_url}")

            record = self.build_post_record(text, embed)
            self._create_record(record, access_jwt)
            return True

        except SocialMediaError as e:
            logger.error(f"Error posting to AT Protocol: {e}")
            return False

    def post_content(self, share: ShareContent, record: Optional[SentenceRecord] = None) -> bool:
        """Post share content with a link card, rendering an OGP thumbnail when the sentence is known."""
        ogp_image_url = build_ogp_image_url(record, self.lang) if record else None
        return self.post_to_social(share.text, share_url=share.url, ogp_image_url=ogp_image_url)
