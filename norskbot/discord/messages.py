"""
User-facing text for translation replies, in Nynorsk and English.
"""

from __future__ import annotations

import random
import re
from typing import Callable, Optional

import discord

from norskbot.translation.languages import DisplayLanguage, language_name
from norskbot.translation.router import TranslationResult


EMBED_COLOR_TRANSLATED = discord.Color(0x00FF00)
MAX_DESCRIPTION_LENGTH = 1800
DONATION_PROMPT_CHANCE = 1 / 3

_MARKDOWN_CHARS = re.compile(r"([\\`*_~])")


def sanitize(value: str) -> str:
    """Escape markdown so translated text renders literally."""
    return _MARKDOWN_CHARS.sub(r"\\\1", value)


def truncate(value: str, n: int) -> str:
    return f"{value[:n]}…" if len(value) > n else value


# (singular, plural) per unit
_UNITS = {
    DisplayLanguage.NORWEGIAN: {
        "hour": ("time", "timar"),
        "minute": ("minutt", "minutt"),
        "second": ("sekund", "sekund"),
    },
    DisplayLanguage.ENGLISH: {
        "hour": ("hour", "hours"),
        "minute": ("minute", "minutes"),
        "second": ("second", "seconds"),
    },
}


def format_wait_time(seconds: float, display_language: DisplayLanguage) -> str:
    """Relative future time, e.g. 'om 5 minutt' / 'in 5 minutes'."""
    seconds = max(1, round(seconds))
    if seconds > 60 * 60:
        amount, unit = round(seconds / (60 * 60)), "hour"
    elif seconds > 60:
        amount, unit = round(seconds / 60), "minute"
    else:
        amount, unit = seconds, "second"
    singular, plural = _UNITS[display_language][unit]
    word = singular if amount == 1 else plural
    prefix = "om" if display_language == DisplayLanguage.NORWEGIAN else "in"
    return f"{prefix} {amount} {word}"


def rate_limited(seconds: float, display_language: DisplayLanguage) -> str:
    wait = format_wait_time(seconds, display_language)
    if display_language == DisplayLanguage.NORWEGIAN:
        return f"Du har brukt denne kommandoen for mykje i det siste. Prøv igjen {wait}."
    return f"You have used this command too much recently. Try again {wait}."


def translated_title(result: TranslationResult, display_language: DisplayLanguage) -> str:
    source = language_name(result.source_language, display_language)
    target = language_name(result.target_language, display_language)
    if display_language == DisplayLanguage.NORWEGIAN:
        return f"Omset frå {source} til {target}"
    return f"Translated from {source} to {target}"


def uses_remaining(uses_left: int, display_language: DisplayLanguage) -> str:
    if display_language == DisplayLanguage.NORWEGIAN:
        noun = "omsetjing" if uses_left == 1 else "omsetjingar"
        return f"Du har {uses_left} {noun} igjen før du må venta ei stund."
    noun = "translation" if uses_left == 1 else "translations"
    return f"You have {uses_left} {noun} left before you have to wait a while."


def donation_prompt(display_language: DisplayLanguage) -> str:
    if display_language == DisplayLanguage.NORWEGIAN:
        return (
            "_Visste du at me betalar for kvar omsetjing?_\n"
            "_Hjelp oss med å tilby omsetjingar "
            "[ved å donera til Ada](https://github.com/sponsors/adalinesimonian)._"
        )
    return (
        "_Did you know we pay for every translation?_\n"
        "_Help us offer translations by "
        "[donating to Ada](https://github.com/sponsors/adalinesimonian)._"
    )


def requested_by(user: str, display_language: DisplayLanguage) -> str:
    if display_language == DisplayLanguage.NORWEGIAN:
        return f"Spurd av {user}"
    return f"Requested by {user}"


def inaccuracy_warning(display_language: DisplayLanguage) -> str:
    if display_language == DisplayLanguage.NORWEGIAN:
        return "⚠️ Omsetjingane kan innehalda feil."
    return "⚠️ Translations may contain mistakes."


def build_translation_embed(
    result: TranslationResult,
    display_language: DisplayLanguage,
    requested_by_tag: Optional[str] = None,
    rng: Callable[[], float] = random.random,
) -> discord.Embed:
    """
    Embed for a finished translation.

    `requested_by_tag` is set for reaction-triggered translations, where the
    reply is public and not attached to an interaction.
    """
    description = truncate(sanitize(result.text or ""), MAX_DESCRIPTION_LENGTH)
    if result.expensive and rng() < DONATION_PROMPT_CHANCE:
        description += f"\n\n{donation_prompt(display_language)}"

    embed = discord.Embed(
        title=translated_title(result, display_language),
        description=description,
        color=EMBED_COLOR_TRANSLATED,
    )

    warning = inaccuracy_warning(display_language)
    uses_left = result.rate_limit.uses_left if result.rate_limit else None
    if uses_left is not None:
        mention = f"@{requested_by_tag} " if requested_by_tag else ""
        footer = f"{mention}{uses_remaining(uses_left, display_language)}\n{warning}"
    elif requested_by_tag:
        footer = f"{requested_by(requested_by_tag, display_language)}\n{warning}"
    else:
        footer = warning
    embed.set_footer(text=footer)
    return embed
