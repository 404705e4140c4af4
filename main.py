"""
Random Shosha Poster

This is the main entry point for the Random Shosha Poster.
It fetches a random literary sentence, formats it per language,
and posts it to social media platforms (X and Bluesky).

The zero-argument post_* functions are the targets for the external
scheduler; main() exposes the same workflow on the command line.
"""

import sys
import argparse
import logging
from typing import Callable, Dict, List, Optional

from config import settings
from utils.logger import get_logger, setup_file_logging
from utils.exceptions import ContentError, RandomShoshaError
from services.content_service import fetch_sentence
from services.formatter import generate_share_content
from services.protocols import Language, SocialPlatformService
from services.social_service import SocialService
from services.twitter_service import TwitterService

# Set up logging
logger = get_logger(__name__)

PLATFORM_LABELS = {
    "twitter": "X",
    "bluesky": "Bluesky",
}


def _default_service_factories() -> Dict[str, Callable[[Language], SocialPlatformService]]:
    return {
        "twitter": lambda lang: TwitterService(settings.get_x_credentials(lang)),
        "bluesky": lambda lang: SocialService(settings.get_bluesky_credentials(lang), lang=lang),
    }


class RandomShoshaPoster:
    """
    Main application class for the Random Shosha Poster.

    This class orchestrates fetching one sentence, formatting it,
    and posting it to each requested platform in turn.
    """

    def __init__(self, service_factories: Optional[Dict[str, Callable[[Language], SocialPlatformService]]] = None):
        """
        Initialize the poster.

        Args:
            service_factories: Map of platform name to a factory building that
                platform's service for a language. Defaults to X and Bluesky.
        """
        self.service_factories = service_factories or _default_service_factories()

    def enabled_platforms(self, platforms: Optional[List[str]] = None) -> List[str]:
        """Normalize requested platform names and drop unknown or disabled ones."""
        if platforms is None:
            platforms = settings.DEFAULT_PLATFORMS

        enabled = []
        for platform in (p.strip().lower() for p in platforms):
            if platform not in self.service_factories:
                logger.warning(f"Unknown platform ignored: {platform}")
            elif platform == "twitter" and not settings.ENABLE_TWITTER:
                logger.info("X posting is disabled (ENABLE_TWITTER=false)")
            elif platform == "bluesky" and not settings.ENABLE_BLUESKY:
                logger.info("Bluesky posting is disabled (ENABLE_BLUESKY=false)")
            elif platform not in enabled:
                enabled.append(platform)
        return enabled

    def run(self, lang: Language, platforms: Optional[List[str]] = None, test_mode: bool = False) -> bool:
        """
        Run the workflow for one language.

        Args:
            lang: 'ja' or 'en'
            platforms: Platforms to post to, defaults to settings.DEFAULT_PLATFORMS
            test_mode: If True, logs the composed post without posting

        Returns:
            bool: True if every attempted platform succeeded, False otherwise
        """
        platforms = self.enabled_platforms(platforms)
        if not platforms:
            logger.warning("No enabled platforms to post to")
            return False

        try:
            # 1. Fetch one sentence for this run
            record = fetch_sentence(lang)
        except ContentError as e:
            logger.error(f"Failed to fetch {lang} sentence: {e}")
            return False

        # 2. Format the post body
        share = generate_share_content(record, lang)
        logger.info(f"Post text: {share.text}")

        if test_mode:
            logger.info(f"TEST MODE: Would post to {', '.join(platforms)}")
            return True

        # 3. Post to each platform; one failure never skips the next
        results = {}
        for platform in platforms:
            label = PLATFORM_LABELS.get(platform, platform)
            try:
                service = self.service_factories[platform](lang)
                results[platform] = service.post_content(share, record)
            except RandomShoshaError as e:
                logger.error(f"{label} post error: {e}", exc_info=True)
                results[platform] = False
            logger.info(f"{label} post result: {'Success' if results[platform] else 'Failed'}")

        return all(results.values())


def _run_entry_point(description: str, lang: Language, platforms: List[str]) -> bool:
    """Run one scheduled job; never raises."""
    logger.info(f"=== Starting {description} ===")
    try:
        success = RandomShoshaPoster().run(lang, platforms)
    except Exception as e:
        logger.error(f"{description} error: {e}", exc_info=True)
        return False
    logger.info(f"=== {description} completed ===")
    return success


def post_to_x_japanese() -> bool:
    """Post a Japanese sentence to X (Japanese account)."""
    return _run_entry_point("Japanese post to X", "ja", ["twitter"])


def post_to_x_english() -> bool:
    """Post an English sentence to X (English account)."""
    return _run_entry_point("English post to X", "en", ["twitter"])


def post_to_bluesky_japanese() -> bool:
    """Post a Japanese sentence to Bluesky."""
    return _run_entry_point("Japanese post to Bluesky", "ja", ["bluesky"])


def post_to_bluesky_english() -> bool:
    """Post an English sentence to Bluesky."""
    return _run_entry_point("English post to Bluesky", "en", ["bluesky"])


def post_japanese() -> bool:
    """Post one Japanese sentence to both X and Bluesky."""
    return _run_entry_point("Japanese post", "ja", ["twitter", "bluesky"])


def post_english() -> bool:
    """Post one English sentence to both X and Bluesky."""
    return _run_entry_point("English post", "en", ["twitter", "bluesky"])


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Random Shosha Poster')
    parser.add_argument('--lang', type=str, choices=list(settings.SUPPORTED_LANGUAGES), default='ja',
                        help='Language of the sentence to post')
    parser.add_argument('--test', action='store_true', help='Run in test mode without posting')
    parser.add_argument('--log-file', type=str, default=None, help='Log file path')
    parser.add_argument('--log-level', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default='INFO', help='Logging level')
    parser.add_argument('--platforms', type=str, default=None,
                        help='Comma-separated list of platforms to post to (twitter,bluesky)')
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    # Parse command line arguments
    args = parse_arguments(argv)

    # Set up logging
    log_level = getattr(logging, args.log_level)
    setup_file_logging(args.log_file, log_level)

    # Parse platforms
    platforms = None
    if args.platforms:
        platforms = [p.strip().lower() for p in args.platforms.split(',') if p.strip()]

    logger.info(f"Starting Random Shosha Poster ({args.lang})")
    if platforms:
        logger.info(f"Posting to platforms: {', '.join(platforms)}")

    try:
        if not args.test:
            settings.validate_settings([args.lang])
        logger.debug(f"Configuration: {settings.get_config_summary()}")

        poster = RandomShoshaPoster()
        success = poster.run(args.lang, platforms=platforms, test_mode=args.test)

        if success:
            logger.info("Random Shosha Poster completed successfully")
            exit_code = 0
        else:
            logger.warning("Random Shosha Poster completed with warnings or errors")
            exit_code = 1

    except Exception as e:
        logger.error(f"Unhandled exception in Random Shosha Poster: {e}", exc_info=True)
        exit_code = 2

    logger.info(f"Random Shosha Poster finished with exit code {exit_code}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
