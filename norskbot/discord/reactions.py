"""
Reaction-triggered translation.

Reacting to a user's message with a `translate<lang>` custom emoji translates
it publicly; the bot then marks it with the matching `translate<lang>done`
emoji so the same translation is not posted twice.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import discord

from norskbot.translation.languages import DisplayLanguage, Language, LanguageEmojis, get_emoji_data
from norskbot.translation.router import TranslationRequest, TranslationRouter

from .errors import AdminNotifier
from .responders import MessageResponder
from .translate import translate_and_reply


class ReactionTranslator:
    def __init__(
        self,
        discord_bot: discord.Client,
        router: TranslationRouter,
        notify: Optional[AdminNotifier] = None,
    ) -> None:
        self.discord_bot = discord_bot
        self.router = router
        self.notify = notify
        self._in_progress: set[tuple[int, Language]] = set()

    def should_skip(self, message: discord.Message, emojis: LanguageEmojis) -> bool:
        """Skip when already being translated, or already marked done by the bot."""
        if (message.id, emojis.language) in self._in_progress:
            return True
        return any(
            r.me and getattr(r.emoji, "name", r.emoji) == emojis.done for r in message.reactions
        )

    async def _fetch_target(
        self, payload: discord.RawReactionActionEvent
    ) -> Optional[tuple[discord.Message, discord.Member, LanguageEmojis]]:
        emojis = get_emoji_data(payload.emoji.name or "", "translate")
        member = payload.member
        if emojis is None or payload.guild_id is None or member is None or member.bot:
            return None

        channel = self.discord_bot.get_channel(payload.channel_id)
        if not isinstance(channel, (discord.TextChannel, discord.Thread)):
            return None
        if not channel.permissions_for(member).send_messages:
            return None

        try:
            message = await channel.fetch_message(payload.message_id)
        except discord.HTTPException as e:
            logging.warning("Could not fetch message %s for translation: %s", payload.message_id, e)
            return None
        if message.author.bot or not message.content:
            return None
        return message, member, emojis

    async def _mark_done(self, message: discord.Message, emojis: LanguageEmojis) -> None:
        done = discord.utils.get(message.guild.emojis, name=emojis.done) if message.guild else None
        if done is None:
            return
        try:
            await message.add_reaction(done)
        except discord.HTTPException as e:
            logging.warning("Could not add %s to message %s: %s", emojis.done, message.id, e)

    async def on_raw_reaction_add(self, payload: discord.RawReactionActionEvent) -> None:
        target = await self._fetch_target(payload)
        if target is None:
            return
        message, member, emojis = target
        await self.translate_message(message, member, emojis, payload.emoji)

    async def translate_message(
        self,
        message: discord.Message,
        member: discord.Member,
        emojis: LanguageEmojis,
        reaction: Any,
    ) -> None:
        """Translate `message` on behalf of `member`, who reacted with `reaction`."""
        if self.should_skip(message, emojis):
            logging.debug(
                "Translation for message %s to %s is already in progress or done, skipping",
                message.id, emojis.language.value,
            )
            try:
                await message.remove_reaction(reaction, member)
            except discord.HTTPException as e:
                logging.warning("Could not remove reaction from %s: %s", member, e)
            return

        key = (message.id, emojis.language)
        self._in_progress.add(key)
        logging.info(
            "User %s requested translation for message %s to %s",
            member, message.id, emojis.language.value,
        )
        try:
            source = await self.router.resolve_source(message.content, emojis.language)
            if source == emojis.language:
                logging.debug("Message %s is already in %s, not translating", message.id, source.value)
                await self._mark_done(message, emojis)
                await message.remove_reaction(reaction, member)
                return

            request = TranslationRequest(
                target=emojis.language, text=message.content, source=source, public=True
            )
            result = await translate_and_reply(
                self.router,
                MessageResponder(message, member),
                request,
                DisplayLanguage.ENGLISH,
                notify=self.notify,
            )
            if result is not None:
                await self._mark_done(message, emojis)
            await message.clear_reaction(reaction)
        except discord.HTTPException as e:
            logging.warning("Could not update reactions on message %s: %s", message.id, e)
        finally:
            self._in_progress.discard(key)
