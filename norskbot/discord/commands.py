"""
Slash commands and message context menus.

Commands are declared as data in TRANSLATE_COMMANDS / CONTEXT_MENU_COMMANDS
and turned into app commands by `register_commands`.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional

import discord
from discord import app_commands

from norskbot.translation.errors import UpstreamTranslationError
from norskbot.translation.languages import DisplayLanguage, Language, language_name
from norskbot.translation.providers.apertium import ApertiumClient
from norskbot.translation.router import TranslationRequest, TranslationRouter

from .errors import AdminNotifier
from .messages import sanitize, truncate
from .responders import InteractionResponder
from .translate import translate_and_reply


TEXT_PARAM_DESCRIPTION = "Teksten du vil omsetja / The text you want to translate"
SHOW_EVERYONE_DESCRIPTION = "Vis svaret til alle / Show the answer to everyone"
DETECTION_MIN_CONFIDENCE = 0.5
DETECTION_MAX_CANDIDATES = 3


@dataclass(frozen=True)
class TranslateCommand:
    name: str
    source: Language
    target: Language
    display_language: DisplayLanguage = DisplayLanguage.NORWEGIAN

    @property
    def description(self) -> str:
        no = DisplayLanguage.NORWEGIAN
        en = DisplayLanguage.ENGLISH
        return (
            f"Omset frå {language_name(self.source, no)} til {language_name(self.target, no)} / "
            f"Translate from {language_name(self.source, en)} to {language_name(self.target, en)}"
        )


@dataclass(frozen=True)
class ContextMenuTranslation:
    name: str
    target: Language


TRANSLATE_COMMANDS = (
    TranslateCommand("nbnn", Language.BOKMAL, Language.NYNORSK),
    TranslateCommand("nnnb", Language.NYNORSK, Language.BOKMAL),
    TranslateCommand("nben", Language.BOKMAL, Language.ENGLISH),
    TranslateCommand("nnen", Language.NYNORSK, Language.ENGLISH),
    TranslateCommand("ennb", Language.ENGLISH, Language.BOKMAL, DisplayLanguage.ENGLISH),
    TranslateCommand("ennn", Language.ENGLISH, Language.NYNORSK, DisplayLanguage.ENGLISH),
)

CONTEXT_MENU_COMMANDS = (
    ContextMenuTranslation("To English", Language.ENGLISH),
    ContextMenuTranslation("To Bokmål", Language.BOKMAL),
    ContextMenuTranslation("To Nynorsk", Language.NYNORSK),
)


def make_translate_command(
    definition: TranslateCommand,
    router: TranslationRouter,
    notify: Optional[AdminNotifier] = None,
) -> app_commands.Command:
    @app_commands.describe(tekst=TEXT_PARAM_DESCRIPTION, vis_alle=SHOW_EVERYONE_DESCRIPTION)
    async def callback(interaction: discord.Interaction, tekst: str, vis_alle: bool = False) -> None:
        request = TranslationRequest(target=definition.target, text=tekst, source=definition.source, public=vis_alle)
        await translate_and_reply(
            router, InteractionResponder(interaction), request, definition.display_language, notify=notify
        )

    return app_commands.Command(name=definition.name, description=definition.description, callback=callback)


def make_context_menu(
    definition: ContextMenuTranslation,
    router: TranslationRouter,
    notify: Optional[AdminNotifier] = None,
) -> app_commands.ContextMenu:
    async def callback(interaction: discord.Interaction, message: discord.Message) -> None:
        request = TranslationRequest(target=definition.target, text=message.content)
        await translate_and_reply(
            router, InteractionResponder(interaction), request, DisplayLanguage.ENGLISH, notify=notify
        )

    return app_commands.ContextMenu(name=definition.name, callback=callback)


def describe_detection(author: str, text: str, candidates: list[tuple[Language, float]]) -> str:
    """Embed description listing the most likely languages of `text`."""
    excerpt = sanitize(truncate(text, 100))
    top = [c for c in candidates if c[1] > DETECTION_MIN_CONFIDENCE][:DETECTION_MAX_CANDIDATES]
    description = f"@{author} said:\n> {excerpt}\n\n"
    if not top:
        return description + (
            "I couldn't detect the language of that message. "
            "It may be too short or be in a language I don't support."
        )

    (first, confidence), rest = top[0], top[1:]
    en = DisplayLanguage.ENGLISH
    description += (
        f"I am **{confidence * 100:.2f}% confident** that the message is in "
        f"**{language_name(first, en)}**."
    )
    if rest:
        others = "\n".join(f"- {language_name(lang, en)} ({conf * 100:.2f}%)" for lang, conf in rest)
        description += f"\n\nOther likely languages include:\n{others}"
    return description


def make_detect_language_menu(
    apertium: ApertiumClient,
    notify: Optional[AdminNotifier] = None,
) -> app_commands.ContextMenu:
    async def callback(interaction: discord.Interaction, message: discord.Message) -> None:
        if not message.content:
            await interaction.response.send_message("No text to detect.", ephemeral=True)
            return

        await interaction.response.defer(ephemeral=True, thinking=True)
        try:
            candidates = await apertium.detect_languages(message.content)
        except UpstreamTranslationError as e:
            logging.exception("Error detecting language")
            if notify is not None:
                await notify(e, "Language detection")
            await interaction.followup.send(
                "An error occurred while detecting the language.", ephemeral=True
            )
            return

        embed = discord.Embed(
            title="Language Detection",
            description=describe_detection(message.author.name, message.content, candidates),
        )
        embed.set_footer(
            text="⚠️ I am not always accurate. Dialects or slang may affect the result. "
            "Ask a human for confirmation."
        )
        await interaction.followup.send(embed=embed, ephemeral=True)

    return app_commands.ContextMenu(name="Detect Language", callback=callback)


def register_commands(
    tree: app_commands.CommandTree,
    router: TranslationRouter,
    apertium: Optional[ApertiumClient] = None,
    notify: Optional[AdminNotifier] = None,
) -> list[str]:
    """Add every command to `tree` and return their names."""
    commands: list[app_commands.Command | app_commands.ContextMenu] = [
        make_translate_command(definition, router, notify) for definition in TRANSLATE_COMMANDS
    ]
    commands += [make_context_menu(definition, router, notify) for definition in CONTEXT_MENU_COMMANDS]
    if apertium is not None:
        commands.append(make_detect_language_menu(apertium, notify))

    for command in commands:
        tree.add_command(command)
    return [command.name for command in commands]
