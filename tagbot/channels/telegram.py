"""Telegram channel adapter."""

import asyncio
import logging
import re
from typing import Optional

from telegram import Update
from telegram.constants import ChatMemberStatus
from telegram.error import Forbidden, TelegramError
from telegram.ext import (
    Application,
    ChatMemberHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from ..commands.base import CommandContext
from ..commands.dispatcher import Dispatcher
from ..communication.formatting import markdown_to_telegram_html
from ..communication.transport import send_rendered
from ..db.models import get_community_settings
from ..i18n import available_locales, t

logger = logging.getLogger("tagbot.telegram")

_COMMAND_PREFIX_RE = re.compile(r"^/\S+[ \t]?")


def command_arguments(text: str) -> str:
    """Strip the leading ``/command@bot`` from a message, keeping the rest verbatim."""
    return _COMMAND_PREFIX_RE.sub("", text or "", count=1)


class TelegramChannel:
    """Telegram bot adapter for tagbot."""

    def __init__(self, dispatcher: Dispatcher, bot_token: str, default_locale: str = "en", sweep_interval: float = 5.0):
        self.dispatcher = dispatcher
        self.bot_token = bot_token
        self.default_locale = default_locale
        self.sweep_interval = sweep_interval
        self.app: Optional[Application] = None
        self._sweep_task: Optional[asyncio.Task] = None

    async def start(self):
        """Start the Telegram bot."""
        self.app = (
            Application.builder()
            .token(self.bot_token)
            .build()
        )

        self.app.add_handler(CommandHandler("start", self._cmd_help))
        self.app.add_handler(CommandHandler("help", self._cmd_help))
        self.app.add_handler(CommandHandler("cancel", self._cmd_cancel))
        triggers = sorted(self.dispatcher.commands)
        self.app.add_handler(CommandHandler(triggers, self._cmd_dispatch))
        self.app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, self._handle_message))
        self.app.add_handler(ChatMemberHandler(self._handle_my_chat_member, ChatMemberHandler.MY_CHAT_MEMBER))
        self.app.add_error_handler(self._handle_error)

        await self.app.initialize()
        await self.app.start()
        await self.app.updater.start_polling(allowed_updates=Update.ALL_TYPES)
        self._sweep_task = asyncio.create_task(self._sweep_loop())
        logger.info(f"Telegram bot started with commands: {', '.join(triggers)}")

    async def stop(self):
        """Stop the Telegram bot."""
        if self._sweep_task:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
        if self.app:
            await self.app.updater.stop()
            await self.app.stop()
            await self.app.shutdown()

    async def send_rendered(self, chat_id: int, message):
        """Transport for lookup messages."""
        await send_rendered(self.app.bot, chat_id, message)

    # ── Context ─────────────────────────────────────────────

    async def _roles(self, chat_id: int, user_id: int) -> frozenset[str]:
        """Chat-member status plus admin custom title, as role names."""
        try:
            member = await self.app.bot.get_chat_member(chat_id, user_id)
        except TelegramError as e:
            logger.debug(f"get_chat_member failed for {user_id} in {chat_id}: {e}")
            return frozenset()
        roles = {str(member.status)}
        title = getattr(member, "custom_title", None)
        if title:
            roles.add(title)
        return frozenset(roles)

    async def _locale(self, community_id: str, tg_user) -> str:
        settings = await get_community_settings(community_id)
        locales = available_locales()
        if settings.get("locale") in locales:
            return settings["locale"]
        language = (getattr(tg_user, "language_code", None) or "").split("-")[0]
        if language in locales:
            return language
        return self.default_locale

    async def _build_context(self, update: Update) -> CommandContext:
        chat = update.effective_chat
        user = update.effective_user
        community_id = str(chat.id)
        return CommandContext(
            actor_id=str(user.id),
            actor_name=self._get_display_name(user),
            chat_id=chat.id,
            community_id=community_id,
            roles=await self._roles(chat.id, user.id),
            locale=await self._locale(community_id, user),
            message_id=update.effective_message.message_id if update.effective_message else None,
        )

    @staticmethod
    def _get_display_name(user) -> str:
        if user.username:
            return f"@{user.username}"
        return user.full_name or str(user.id)

    def _reply_to(self, update: Update):
        async def reply(text: str):
            await update.effective_message.reply_text(
                markdown_to_telegram_html(text),
                parse_mode="HTML",
            )
        return reply

    # ── Handlers ────────────────────────────────────────────

    async def _cmd_help(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /start and /help."""
        ctx = await self._build_context(update)
        await self._reply_to(update)(t("help.text", ctx.locale))

    async def _cmd_cancel(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /cancel: abandon a pending prompt."""
        ctx = await self._build_context(update)
        await self.dispatcher.cancel(ctx, self._reply_to(update))

    async def _cmd_dispatch(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle every registered command."""
        message = update.effective_message
        if not message or not message.text or not update.effective_user:
            return
        name = message.text.split(maxsplit=1)[0][1:].split("@", 1)[0]
        ctx = await self._build_context(update)
        await self.dispatcher.invoke(name, ctx, command_arguments(message.text), self._reply_to(update))

    async def _handle_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Plain text: only meaningful as an answer to a pending prompt."""
        message = update.effective_message
        if not message or not message.text or not update.effective_user:
            return
        pending, expired = self.dispatcher.sessions.get(update.effective_chat.id, str(update.effective_user.id))
        if pending is None and not expired:
            return
        ctx = await self._build_context(update)
        await self.dispatcher.handle_reply(ctx, message.text, self._reply_to(update))

    async def _handle_my_chat_member(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """The bot left or was removed: abandon everything pending in that chat."""
        change = update.my_chat_member
        if not change:
            return
        status = change.new_chat_member.status
        if status in (ChatMemberStatus.LEFT, ChatMemberStatus.BANNED):
            self.dispatcher.sessions.drop_chat(change.chat.id)

    async def _sweep_loop(self):
        """Expire prompts nobody answered and tell the chat."""
        while True:
            await asyncio.sleep(self.sweep_interval)
            for pending in self.dispatcher.expire():
                try:
                    await self.app.bot.send_message(
                        chat_id=pending.ctx.chat_id,
                        text=markdown_to_telegram_html(t("session.timeout", pending.ctx.locale)),
                        parse_mode="HTML",
                    )
                except Forbidden:
                    self.dispatcher.sessions.drop_chat(pending.ctx.chat_id)
                except TelegramError as e:
                    logger.warning(f"Could not send timeout notice to {pending.ctx.chat_id}: {e}")

    async def _handle_error(self, update: object, context: ContextTypes.DEFAULT_TYPE):
        """Handle errors."""
        logger.error(f"Telegram error: {context.error}", exc_info=context.error)
