"""
Admin alerts and the app command error handler.

Provider failures (quota used up, key revoked, service down) are answered with
a generic message to the user; the details go to the admins listed under
`permissions.users.admin_ids` by DM.
"""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Any, Awaitable, Callable, Optional

import discord

from norskbot.translation.errors import UpstreamTranslationError, parse_error_message


AdminNotifier = Callable[[Exception, str], Awaitable[int]]

APP_COMMAND_ERROR_MESSAGE = (
    "Det skjedde ein feil. Administratorane har fått beskjed. / "
    "Something went wrong, the admins have been notified."
)


def admin_ids(config: dict[str, Any]) -> list[int]:
    users = ((config.get("permissions") or {}).get("users") or {})
    return list(users.get("admin_ids") or [])


def admin_report(error: Exception, context: str, now: Optional[datetime] = None) -> str:
    """DM text for one failure: when, where, and the mapped error."""
    lines = [
        "🤖 **norskbot error**",
        f"⏰ {(now or datetime.now()).strftime('%Y-%m-%d %H:%M:%S')}",
        f"📝 {context or 'unknown context'}",
    ]
    if isinstance(error, UpstreamTranslationError):
        status = f" (HTTP {error.status_code})" if error.status_code is not None else ""
        lines.append(f"🌐 Provider: {error.provider}{status}")
    lines.append("")
    lines.append(parse_error_message(error))
    return "\n".join(lines)


async def notify_admin_error(
    discord_bot: discord.Client,
    config: dict[str, Any],
    error: Exception,
    context: str = "",
) -> int:
    """
    DM every configured admin about `error`. Returns how many were reached;
    admins that cannot be fetched or messaged are logged and skipped.
    """
    ids = admin_ids(config)
    if not ids:
        return 0

    report = admin_report(error, context)
    reached = 0
    for admin_id in ids:
        try:
            user = discord_bot.get_user(admin_id) or await discord_bot.fetch_user(admin_id)
            await user.send(report)
            reached += 1
        except discord.HTTPException as e:
            logging.warning("Could not notify admin %s: %s", admin_id, e)
    return reached


def make_admin_notifier(discord_bot: discord.Client, config: dict[str, Any]) -> AdminNotifier:
    async def notify(error: Exception, context: str) -> int:
        return await notify_admin_error(discord_bot, config, error, context)

    return notify


async def handle_app_command_error(
    interaction: discord.Interaction,
    error: Exception,
    notify: AdminNotifier,
) -> None:
    """Log, alert the admins, and apologise to the user in private."""
    command = getattr(interaction.command, "name", "unknown")
    logging.exception("App command error in /%s: %s", command, error)
    await notify(error, f"App command error: {command}")
    try:
        if interaction.response.is_done():
            await interaction.followup.send(APP_COMMAND_ERROR_MESSAGE, ephemeral=True)
        else:
            await interaction.response.send_message(APP_COMMAND_ERROR_MESSAGE, ephemeral=True)
    except discord.HTTPException as e:
        logging.warning("Could not report error to %s: %s", interaction.user, e)
