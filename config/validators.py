"""
Configuration Validation for Random Shosha Poster

This module contains configuration validation logic.
Extracted from settings.py for better separation of concerns.
"""

import logging

from utils.exceptions import ConfigurationError
from utils.helpers import is_valid_url


def validate_settings(languages=None):
    """
    Validate that all required settings are properly configured.

    Args:
        languages: Languages whose accounts must be configured. Defaults to all supported languages.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    # Import settings here to avoid circular imports
    from config import settings

    logger = logging.getLogger(__name__)
    errors = []

    if languages is None:
        languages = settings.SUPPORTED_LANGUAGES

    for lang in languages:
        if lang not in settings.SUPPORTED_LANGUAGES:
            errors.append(f"Unsupported language: {lang}")

    if not settings.ENABLE_BLUESKY and not settings.ENABLE_TWITTER:
        logger.warning("Both ENABLE_BLUESKY and ENABLE_TWITTER are disabled. "
                       "Nothing will be posted. Check your .env configuration.")

    # Validate enabled platforms have credentials for every requested language
    for lang in languages:
        if lang not in settings.SUPPORTED_LANGUAGES:
            continue

        if settings.ENABLE_TWITTER:
            x_creds = settings.get_x_credentials(lang)
            if not x_creds.is_complete():
                errors.append(f"ENABLE_TWITTER is true but X credentials for '{lang}' are not configured.")

        if settings.ENABLE_BLUESKY:
            bsky_creds = settings.get_bluesky_credentials(lang)
            if not bsky_creds.is_complete():
                errors.append(f"ENABLE_BLUESKY is true but Bluesky credentials for '{lang}' are not configured. "
                              "Please configure BSKY_HANDLE and BSKY_RND_SHOSHA_APP_PASS.")

    # Validate endpoint URLs
    url_settings = [
        ("JAPANESE_API_URL", settings.JAPANESE_API_URL),
        ("ENGLISH_API_URL", settings.ENGLISH_API_URL),
        ("OGP_IMAGE_API_URL", settings.OGP_IMAGE_API_URL),
        ("SHARE_BASE_URL", settings.SHARE_BASE_URL),
        ("BLUESKY_API_BASE", settings.BLUESKY_API_BASE),
    ]

    for name, value in url_settings:
        if not is_valid_url(value):
            errors.append(f"{name} must be an http(s) URL, got {value!r}")

    if settings.REQUEST_TIMEOUT <= 0:
        errors.append(f"REQUEST_TIMEOUT must be positive, got {settings.REQUEST_TIMEOUT}")

    # Raise all errors at once
    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)

    return True


def get_config_summary() -> dict:
    """
    Returns a summary of current configuration (without sensitive values).
    Useful for logging startup state.
    """
    # Import settings here to avoid circular imports
    from config import settings

    return {
        "platforms": {
            "twitter": {
                "enabled": settings.ENABLE_TWITTER,
                "configured": {
                    lang: settings.get_x_credentials(lang).is_complete()
                    for lang in settings.SUPPORTED_LANGUAGES
                },
            },
            "bluesky": {
                "enabled": settings.ENABLE_BLUESKY,
                "handle": {
                    lang: settings.get_bluesky_credentials(lang).identifier
                    for lang in settings.SUPPORTED_LANGUAGES
                },
                "app_password_set": bool(settings.BSKY_RND_SHOSHA_APP_PASS),
            },
            "default_platforms": settings.DEFAULT_PLATFORMS,
        },
        "endpoints": {
            "japanese_api": settings.JAPANESE_API_URL,
            "english_api": settings.ENGLISH_API_URL,
            "ogp_image_api": settings.OGP_IMAGE_API_URL,
            "bluesky_api": settings.BLUESKY_API_BASE,
        },
        "request_timeout": settings.REQUEST_TIMEOUT,
    }
