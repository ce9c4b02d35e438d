"""Main entry point for the area realtime service."""

import asyncio
import logging
import sys

import aiohttp

from area_realtime.adapters.auth import HttpTokenValidator, StaticTokenValidator
from area_realtime.adapters.config import AppConfig, CollaboratorConfigurationLoader
from area_realtime.adapters.directory import HttpFriendshipDirectory, InMemoryFriendshipDirectory
from area_realtime.adapters.web import RealtimeWebAdapter
from area_realtime.composition import build_services
from area_realtime.domain.ports import FriendshipDirectory, TokenValidator

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stderr,
)

logger = logging.getLogger(__name__)


def create_collaborators(
    config: AppConfig, session: aiohttp.ClientSession
) -> tuple[TokenValidator, FriendshipDirectory]:
    """Pick HTTP collaborators when their URLs are configured, else the TOML-backed ones."""
    settings = CollaboratorConfigurationLoader.load(config)

    validator: TokenValidator
    if config.auth_service_url:
        logger.info(f"Validating tokens with {config.auth_service_url}")
        validator = HttpTokenValidator(
            session, config.auth_service_url, timeout_seconds=config.http_timeout_seconds
        )
    else:
        if not settings.tokens:
            logger.warning("No auth service and no [tokens] configured; every connection fails")
        validator = StaticTokenValidator(settings.tokens)

    directory: FriendshipDirectory
    if config.directory_service_url:
        logger.info(f"Resolving friendships with {config.directory_service_url}")
        directory = HttpFriendshipDirectory(
            session, config.directory_service_url, timeout_seconds=config.http_timeout_seconds
        )
    else:
        directory = InMemoryFriendshipDirectory.from_settings(
            settings.friendships, dict(settings.areas)
        )
    return validator, directory


async def main() -> None:
    """Main application entry point."""
    config = AppConfig()

    # Create aiohttp session for efficient HTTP connections to collaborators
    async with aiohttp.ClientSession() as session:
        try:
            validator, directory = create_collaborators(config, session)
        except (ValueError, FileNotFoundError) as e:
            logger.error(f"Invalid collaborator configuration: {e}")
            sys.exit(1)

        services = build_services(config, validator, directory)
        web_adapter = RealtimeWebAdapter(services, config)

        try:
            await web_adapter.start()
        except KeyboardInterrupt:
            logger.info("Shutting down...")
        finally:
            await web_adapter.stop()


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
