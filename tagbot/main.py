"""tagbot — main entry point."""

import asyncio
import logging
import os

from .config import TagbotSettings, load_settings

_log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_log_file = os.path.expanduser("~/tagbot.log")

logger = logging.getLogger("tagbot")


def setup_logging(debug: bool = False):
    """Log to stderr and ~/tagbot.log."""
    logging.basicConfig(
        level=logging.INFO,
        format=_log_format,
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(_log_file, encoding="utf-8"),
        ],
    )
    # python-telegram-bot and httpx log every poll at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    if debug:
        logger.setLevel(logging.DEBUG)


def build_dispatcher(settings: TagbotSettings, send):
    """Wire commands, prompt sessions and rate limiting together."""
    from .commands.dispatcher import Dispatcher
    from .commands.issue_pr import IssuePRCommand
    from .commands.sessions import PromptSessions
    from .commands.tag_edit import TagEditCommand
    from .db.models import get_community_settings
    from .github.client import GitHubClient
    from .ratelimit import RateLimiter

    client = GitHubClient(
        settings.github_token,
        api_url=settings.github_api_url,
        timeout=settings.github_timeout,
    )
    commands = [
        TagEditCommand(),
        IssuePRCommand(client, send, install_command=settings.install_command),
    ]
    return Dispatcher(
        commands,
        sessions=PromptSessions(timeout=settings.prompt_timeout, max_attempts=settings.prompt_attempts),
        rate_limiter=RateLimiter(settings.rate_limit_requests, settings.rate_limit_window),
        cancel_word=settings.cancel_word,
        load_settings=get_community_settings,
    )


async def run(settings: TagbotSettings = None):
    """Main run loop."""
    from .channels.telegram import TelegramChannel
    from .db.connection import close_db, init_db

    settings = settings or load_settings()
    if not settings.telegram_bot_token:
        logger.error("No Telegram bot token configured (TAGBOT_TELEGRAM_BOT_TOKEN).")
        return

    await init_db(settings.database_url)
    channel = None
    try:
        channel = TelegramChannel(
            dispatcher=None,
            bot_token=settings.telegram_bot_token,
            default_locale=settings.default_locale,
        )
        channel.dispatcher = build_dispatcher(settings, channel.send_rendered)
        await channel.start()
        logger.info("tagbot is running. Press Ctrl+C to stop.")
        await asyncio.Event().wait()
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("Shutting down...")
    finally:
        if channel and channel.app:
            await channel.stop()
        await close_db()
