"""
Reply targets for translations.

Slash commands and context menus answer through their interaction; reaction
translations have no interaction and reply to the reacted message instead.
"""

from __future__ import annotations

from typing import Any, Optional, Union

import discord

from norskbot.ratelimit import RateLimitScope


def is_moderator(member: Any) -> bool:
    """Members who can kick or ban are never rate limited."""
    perms = getattr(member, "guild_permissions", None)
    return bool(perms and (perms.kick_members or perms.ban_members))


def _reply_kwargs(content: Optional[str], embed: Optional[discord.Embed]) -> dict[str, Any]:
    kw: dict[str, Any] = {}
    if content is not None:
        kw["content"] = content
    if embed is not None:
        kw["embed"] = embed
    return kw


class InteractionResponder:
    is_pseudo = False

    def __init__(self, interaction: discord.Interaction) -> None:
        self.interaction = interaction

    @property
    def user(self) -> Union[discord.User, discord.Member]:
        return self.interaction.user

    def scope(self) -> RateLimitScope:
        i = self.interaction
        return RateLimitScope(
            user_id=i.user.id,
            channel_id=i.channel_id,
            guild_id=i.guild_id,
            privileged=is_moderator(i.user),
            user_tag=str(i.user),
        )

    async def defer(self, ephemeral: bool) -> None:
        if not self.interaction.response.is_done():
            await self.interaction.response.defer(ephemeral=ephemeral, thinking=True)

    async def send(
        self,
        content: Optional[str] = None,
        embed: Optional[discord.Embed] = None,
        ephemeral: bool = False,
    ) -> None:
        kw = _reply_kwargs(content, embed)
        if self.interaction.response.is_done():
            await self.interaction.followup.send(ephemeral=ephemeral, **kw)
        else:
            await self.interaction.response.send_message(ephemeral=ephemeral, **kw)


class MessageResponder:
    """Public replies to a message, on behalf of the user who reacted to it."""

    is_pseudo = True

    def __init__(self, message: discord.Message, user: Union[discord.User, discord.Member]) -> None:
        self.message = message
        self.user = user

    def scope(self) -> RateLimitScope:
        return RateLimitScope(
            user_id=self.user.id,
            channel_id=self.message.channel.id,
            guild_id=self.message.guild.id if self.message.guild else None,
            privileged=is_moderator(self.user),
            user_tag=str(self.user),
        )

    async def defer(self, ephemeral: bool) -> None:
        pass

    async def send(
        self,
        content: Optional[str] = None,
        embed: Optional[discord.Embed] = None,
        ephemeral: bool = False,
    ) -> None:
        # no ephemeral messages outside interactions: mention the user instead
        if content is not None and embed is None:
            content = f"{self.user.mention} {content}"
        await self.message.reply(mention_author=False, **_reply_kwargs(content, embed))


Responder = Union[InteractionResponder, MessageResponder]
