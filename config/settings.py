"""
Configuration Settings for Random Shosha Poster

This module centralizes all configuration settings for the Random Shosha Poster,
including environment variables, platform credentials, and application constants.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

from services.protocols import BlueskyCredentials, XCredentials

# Determine the application root directory
APP_ROOT = Path(__file__).resolve().parent.parent

# Load environment variables from .env file
load_dotenv(dotenv_path=os.path.join(APP_ROOT, '.env'))


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes")


# =============================================================================
# Platform Credentials
# =============================================================================

# X (Twitter) - Japanese account
X_RND_SHOSHA_API_KEY = os.getenv("X_RND_SHOSHA_API_KEY", "")
X_RND_SHOSHA_API_KEY_SECRET = os.getenv("X_RND_SHOSHA_API_KEY_SECRET", "")
X_RND_SHOSHA_ACCESS_TOKEN = os.getenv("X_RND_SHOSHA_ACCESS_TOKEN", "")
X_RND_SHOSHA_ACCESS_TOKEN_SECRET = os.getenv("X_RND_SHOSHA_ACCESS_TOKEN_SECRET", "")

# X (Twitter) - English account
X_RND_SHOSHA_EN_API_KEY = os.getenv("X_RND_SHOSHA_EN_API_KEY", "")
X_RND_SHOSHA_EN_API_KEY_SECRET = os.getenv("X_RND_SHOSHA_EN_API_KEY_SECRET", "")
X_RND_SHOSHA_EN_ACCESS_TOKEN = os.getenv("X_RND_SHOSHA_EN_ACCESS_TOKEN", "")
X_RND_SHOSHA_EN_ACCESS_TOKEN_SECRET = os.getenv("X_RND_SHOSHA_EN_ACCESS_TOKEN_SECRET", "")

# Bluesky - shared account, with an optional English override
BSKY_HANDLE = os.getenv("BSKY_HANDLE", "")
BSKY_RND_SHOSHA_APP_PASS = os.getenv("BSKY_RND_SHOSHA_APP_PASS", "")
BSKY_EN_HANDLE = os.getenv("BSKY_EN_HANDLE", "")
BSKY_RND_SHOSHA_EN_APP_PASS = os.getenv("BSKY_RND_SHOSHA_EN_APP_PASS", "")

# =============================================================================
# Endpoints
# =============================================================================

JAPANESE_API_URL = os.getenv("JAPANESE_API_URL", "https://rmc-8.com/api/random-shosha")
ENGLISH_API_URL = os.getenv("ENGLISH_API_URL", "https://rmc-8.com/api/random-shosha-en")
OGP_IMAGE_API_URL = os.getenv("OGP_IMAGE_API_URL", "https://rmc-8.com/api/random-shosha-ogp")

SHARE_BASE_URL = os.getenv("SHARE_BASE_URL", "https://rmc-8.com/shosha")
SHARE_PATHS = {
    "ja": "random_shosha",
    "en": "random_shosha_en",
}

X_TWEET_URL = "https://api.twitter.com/2/tweets"
BLUESKY_API_BASE = os.getenv("BLUESKY_API_BASE", "https://bsky.social/xrpc")

# =============================================================================
# Social Media Platform Settings
# =============================================================================

ENABLE_TWITTER = _env_bool("ENABLE_TWITTER", True)
ENABLE_BLUESKY = _env_bool("ENABLE_BLUESKY", True)
DEFAULT_PLATFORMS = ["twitter", "bluesky"]  # Default platforms to post to

REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "30"))  # Seconds per HTTP call
X_SUCCESS_STATUS = 201
BLUESKY_SUCCESS_STATUS = 200
DEFAULT_BLOB_MIME_TYPE = "image/jpeg"
LOG_BODY_LENGTH = 500                # Max response body length echoed into logs

# =============================================================================
# Post Formatting
# =============================================================================

PRIMARY_HASHTAGS = {
    "ja": "#ランダム書写",
    "en": "#random_shosha",
}

OGP_DEFAULTS = {
    "ja": {
        "title": "Random Shosha - 書写のお題",
        "description": "古典文学の一文を書写のお題として",
    },
    "en": {
        "title": "Random Shosha - Calligraphy Practice",
        "description": "Classic literature sentence for calligraphy practice",
    },
}

SUPPORTED_LANGUAGES = ("ja", "en")


# =============================================================================
# Credential Resolution
# =============================================================================

def get_x_credentials(lang: str) -> XCredentials:
    """
    Resolve the X (Twitter) account credentials for a language.

    Args:
        lang: 'ja' or 'en'

    Returns:
        XCredentials: The credentials of that language's account.
    """
    if lang == "en":
        return XCredentials(
            api_key=X_RND_SHOSHA_EN_API_KEY,
            api_secret=X_RND_SHOSHA_EN_API_KEY_SECRET,
            access_token=X_RND_SHOSHA_EN_ACCESS_TOKEN,
            access_token_secret=X_RND_SHOSHA_EN_ACCESS_TOKEN_SECRET,
        )
    return XCredentials(
        api_key=X_RND_SHOSHA_API_KEY,
        api_secret=X_RND_SHOSHA_API_KEY_SECRET,
        access_token=X_RND_SHOSHA_ACCESS_TOKEN,
        access_token_secret=X_RND_SHOSHA_ACCESS_TOKEN_SECRET,
    )


def get_bluesky_credentials(lang: str) -> BlueskyCredentials:
    """
    Resolve the Bluesky account credentials for a language.

    The English account falls back to the shared account unless both
    BSKY_EN_HANDLE and BSKY_RND_SHOSHA_EN_APP_PASS are set.
    """
    if lang == "en" and BSKY_EN_HANDLE and BSKY_RND_SHOSHA_EN_APP_PASS:
        return BlueskyCredentials(identifier=BSKY_EN_HANDLE, password=BSKY_RND_SHOSHA_EN_APP_PASS)
    return BlueskyCredentials(identifier=BSKY_HANDLE, password=BSKY_RND_SHOSHA_APP_PASS)


# Validation lives in config.validators; re-exported for callers using settings.validate_settings()
from config.validators import validate_settings, get_config_summary  # noqa: E402
