from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional


class Language(str, Enum):
    AUTO = "auto"  # source only: let the provider detect the language

    BOKMAL = "nb"
    NYNORSK = "nn"
    ENGLISH = "en"
    ARABIC = "ar"
    BULGARIAN = "bg"
    CHINESE = "zh"
    CZECH = "cs"
    DANISH = "da"
    DUTCH = "nl"
    ESTONIAN = "et"
    FINNISH = "fi"
    FRENCH = "fr"
    GERMAN = "de"
    GREEK = "el"
    HUNGARIAN = "hu"
    INDONESIAN = "id"
    ITALIAN = "it"
    JAPANESE = "ja"
    KOREAN = "ko"
    LATVIAN = "lv"
    LITHUANIAN = "lt"
    POLISH = "pl"
    PORTUGUESE = "pt"
    ROMANIAN = "ro"
    RUSSIAN = "ru"
    SLOVAK = "sk"
    SLOVENIAN = "sl"
    SPANISH = "es"
    SWEDISH = "sv"
    TURKISH = "tr"
    UKRAINIAN = "uk"


class DisplayLanguage(str, Enum):
    NORWEGIAN = "no"
    ENGLISH = "en"


# (nynorsk, english)
_NAMES: dict[Language, tuple[str, str]] = {
    Language.AUTO: ("ukjent språk", "unknown language"),
    Language.BOKMAL: ("bokmål", "Bokmål"),
    Language.NYNORSK: ("nynorsk", "Nynorsk"),
    Language.ENGLISH: ("engelsk", "English"),
    Language.ARABIC: ("arabisk", "Arabic"),
    Language.BULGARIAN: ("bulgarsk", "Bulgarian"),
    Language.CHINESE: ("kinesisk", "Chinese"),
    Language.CZECH: ("tsjekkisk", "Czech"),
    Language.DANISH: ("dansk", "Danish"),
    Language.DUTCH: ("nederlandsk", "Dutch"),
    Language.ESTONIAN: ("estisk", "Estonian"),
    Language.FINNISH: ("finsk", "Finnish"),
    Language.FRENCH: ("fransk", "French"),
    Language.GERMAN: ("tysk", "German"),
    Language.GREEK: ("gresk", "Greek"),
    Language.HUNGARIAN: ("ungarsk", "Hungarian"),
    Language.INDONESIAN: ("indonesisk", "Indonesian"),
    Language.ITALIAN: ("italiensk", "Italian"),
    Language.JAPANESE: ("japansk", "Japanese"),
    Language.KOREAN: ("koreansk", "Korean"),
    Language.LATVIAN: ("latvisk", "Latvian"),
    Language.LITHUANIAN: ("litauisk", "Lithuanian"),
    Language.POLISH: ("polsk", "Polish"),
    Language.PORTUGUESE: ("portugisisk", "Portuguese"),
    Language.ROMANIAN: ("rumensk", "Romanian"),
    Language.RUSSIAN: ("russisk", "Russian"),
    Language.SLOVAK: ("slovakisk", "Slovak"),
    Language.SLOVENIAN: ("slovensk", "Slovenian"),
    Language.SPANISH: ("spansk", "Spanish"),
    Language.SWEDISH: ("svensk", "Swedish"),
    Language.TURKISH: ("tyrkisk", "Turkish"),
    Language.UKRAINIAN: ("ukrainsk", "Ukrainian"),
}

LANGUAGE_NAMES: dict[DisplayLanguage, dict[Language, str]] = {
    DisplayLanguage.NORWEGIAN: {lang: names[0] for lang, names in _NAMES.items()},
    DisplayLanguage.ENGLISH: {lang: names[1] for lang, names in _NAMES.items()},
}


def language_name(language: Language, display_language: DisplayLanguage) -> str:
    return LANGUAGE_NAMES[display_language][language]


# ── Reaction emojis ──────────────────────────────────────────────────────────

EmojiKind = Literal["translate", "done"]


@dataclass(frozen=True)
class LanguageEmojis:
    language: Language
    translate: str  # added by users to request a translation
    done: str       # added by the bot once it has translated


TRANSLATION_EMOJIS: dict[Language, LanguageEmojis] = {
    lang: LanguageEmojis(lang, f"translate{lang.value}", f"translate{lang.value}done")
    for lang in (Language.ENGLISH, Language.BOKMAL, Language.NYNORSK)
}


def get_emoji_data(emoji: str, kind: Optional[EmojiKind] = None) -> Optional[LanguageEmojis]:
    """
    Look up reaction emoji data by emoji name.

    When `kind` is given only that emoji of each language is matched.
    """
    for data in TRANSLATION_EMOJIS.values():
        candidates = (getattr(data, kind),) if kind else (data.translate, data.done)
        if emoji in candidates:
            return data
    return None
