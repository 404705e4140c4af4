"""
Twitter Service Module

This module handles integration with the X (Twitter) API v2.
Requests are signed with one-legged OAuth 1.0a using the account's
permanent access token.
"""

import json
from typing import Any, Dict, Optional

import requests

from config import settings
from services.oauth import generate_oauth_header
from services.protocols import SentenceRecord, ShareContent, XCredentials
from utils.exceptions import AuthenticationError, PostingError, SocialMediaError
from utils.helpers import truncate_text
from utils.logger import get_logger

logger = get_logger(__name__)


class TwitterService:
    """Service for X (Twitter) integration."""

    platform_name = "twitter"

    def __init__(self, credentials: XCredentials):
        """
        Initialize the Twitter service.

        Args:
            credentials: OAuth 1.0a credentials of the account to post as
        """
        self.credentials = credentials
        self.tweet_url = settings.X_TWEET_URL

    def _create_tweet(self, text: str) -> Dict[str, Any]:
        """
        Send a create-tweet request.

        Args:
            text: The tweet text

        Returns:
            Dict[str, Any]: The decoded response body

        Raises:
            AuthenticationError: If credentials are incomplete
            PostingError: On transport failure or a status other than 201
        """
        if not self.credentials.is_complete():
            raise AuthenticationError("X credentials are incomplete")

        auth_header = generate_oauth_header("POST", self.tweet_url, {}, self.credentials)

        try:
            response = requests.post(
                self.tweet_url,
                data=json.dumps({"text": text}),
                headers={
                    "Authorization": auth_header,
                    "Content-Type": "application/json",
                },
                timeout=settings.REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise PostingError(f"X request failed: {e}") from e

        body = truncate_text(response.text or "", settings.LOG_BODY_LENGTH)
        if response.status_code != settings.X_SUCCESS_STATUS:
            raise PostingError(f"X post failed ({response.status_code}): {body}")

        logger.info(f"X post successful: {body}")
        try:
            return response.json()
        except ValueError:
            return {}

    def post_tweet(self, text: str) -> bool:
        """
        Post a tweet.

        No client-side truncation is done; X rejects oversized text itself.

        Args:
            text: The text to tweet

        Returns:
            bool: True if the tweet was created, False otherwise
        """
        try:
            self._create_tweet(text)
            return True
        except SocialMediaError as e:
            logger.error(f"Error posting tweet: {e}")
            return False

    def post_content(self, share: ShareContent, record: Optional[SentenceRecord] = None) -> bool:
        """Post formatted share content; the link travels inside the text."""
        return self.post_tweet(share.text)
