"""
Custom Exception Classes for Random Shosha Poster

This module defines custom exceptions for better error handling and
categorization of failures across the application.
"""


class RandomShoshaError(Exception):
    """Base exception for all Random Shosha Poster errors."""
    pass


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(RandomShoshaError):
    """Raised when configuration validation fails or required settings are missing."""
    pass


# =============================================================================
# Content Errors
# =============================================================================

class ContentError(RandomShoshaError):
    """Base exception for sentence content errors."""
    pass


class FetchError(ContentError):
    """Raised when a sentence cannot be fetched or does not match the expected shape."""
    pass


# =============================================================================
# Social Media Errors
# =============================================================================

class SocialMediaError(RandomShoshaError):
    """Base exception for social media platform errors."""
    pass


class AuthenticationError(SocialMediaError):
    """Raised when authentication with a social media platform fails."""
    pass


class PostingError(SocialMediaError):
    """Raised when posting to a social media platform fails."""
    pass


class MediaUploadError(SocialMediaError):
    """Raised when media upload fails."""
    pass
