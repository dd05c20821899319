"""
Entrypoint: `python -m norskbot.main`.

Builds the translation router from config, registers commands and handlers on
a discord.py bot, and starts the rate-limit sweep on the scheduler once the
bot is ready.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any

import discord
from discord.ext import commands
import httpx
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from norskbot.config.loader import get_config
from norskbot.config.rate_limits import load_rate_limit_policies, store_settings
from norskbot.discord.commands import register_commands
from norskbot.discord.errors import handle_app_command_error, make_admin_notifier
from norskbot.discord.reactions import ReactionTranslator
from norskbot.ratelimit import InMemoryRateLimitStore, RateLimiter
from norskbot.translation.graph import Translator
from norskbot.translation.providers.apertium import DEFAULT_BASE_URL, ApertiumClient, apertium_translator
from norskbot.translation.providers.deepl import DeepLClient, deepl_translator
from norskbot.translation.router import DEFAULT_MAX_TEXT_LENGTH, TranslationRouter

if os.environ.get("DEBUG"):
    logging.basicConfig(level=logging.DEBUG)
    logging.getLogger("httpx").setLevel(logging.DEBUG)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s: %(message)s")


def build_router(
    config: dict[str, Any],
    http_client: httpx.AsyncClient,
) -> tuple[TranslationRouter, ApertiumClient]:
    apertium_cfg = config.get("apertium") or {}
    apertium = ApertiumClient(apertium_cfg.get("base_url", DEFAULT_BASE_URL), http_client)

    # priority order: the free translator keeps nb<->nn
    translators: list[Translator] = [apertium_translator(apertium)]
    deepl_key = (config.get("deepl") or {}).get("api_key")
    if deepl_key:
        translators.append(deepl_translator(DeepLClient(deepl_key, http_client)))
    else:
        logging.warning("DeepL is not configured, only Bokmål↔Nynorsk is available")

    max_entries, _ = store_settings(config)
    router = TranslationRouter(
        translators,
        RateLimiter(InMemoryRateLimitStore(max_entries)),
        detector=apertium,
        policies=load_rate_limit_policies(config),
        max_text_length=config.get("max_text_length", DEFAULT_MAX_TEXT_LENGTH),
    )
    return router, apertium


def create_bot(config: dict[str, Any], http_client: httpx.AsyncClient) -> commands.Bot:
    intents = discord.Intents.default()
    intents.message_content = True
    intents.reactions = True
    activity = discord.CustomActivity(name=(config.get("status_message") or "Omset bokmål, nynorsk og engelsk")[:128])
    discord_bot = commands.Bot(intents=intents, activity=activity, command_prefix=commands.when_mentioned)

    router, apertium = build_router(config, http_client)
    notify = make_admin_notifier(discord_bot, config)
    names = register_commands(discord_bot.tree, router, apertium, notify)
    reactions = ReactionTranslator(discord_bot, router, notify)

    scheduler = AsyncIOScheduler()
    _, sweep_interval = store_settings(config)
    max_window = max(p.window for p in router.policies.values())

    # coroutine job: runs on the bot's event loop, not the scheduler's thread pool
    async def sweep_rate_limits() -> None:
        router.rate_limiter.sweep(max_window)

    @discord_bot.tree.error
    async def on_app_command_error(interaction: discord.Interaction, error: Exception) -> None:
        await handle_app_command_error(interaction, error, notify)

    @discord_bot.event
    async def on_ready() -> None:
        if client_id := config.get("client_id"):
            logging.info(f"\n\nBOT INVITE URL:\nhttps://discord.com/oauth2/authorize?client_id={client_id}&permissions=274877975616&scope=bot\n")
        await discord_bot.tree.sync()
        logging.info(f"Synced {len(names)} commands: {', '.join(names)}")
        if not scheduler.running:
            scheduler.add_job(
                sweep_rate_limits, "interval", seconds=sweep_interval,
                id="rate_limit_sweep", replace_existing=True,
            )
            scheduler.start()
            logging.info("Scheduler started (rate limit sweep every %ss)", sweep_interval)

    @discord_bot.event
    async def on_raw_reaction_add(payload: discord.RawReactionActionEvent) -> None:
        await reactions.on_raw_reaction_add(payload)

    return discord_bot


async def run_bot(config: dict[str, Any] | None = None) -> None:
    config = config or get_config()
    logging.info("🚀 Bot starting | deepl: %s", bool((config.get("deepl") or {}).get("api_key")))
    async with httpx.AsyncClient(timeout=30) as http_client:
        discord_bot = create_bot(config, http_client)
        async with discord_bot:
            await discord_bot.start(config["bot_token"])


def main() -> None:
    try:
        asyncio.run(run_bot())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
