from __future__ import annotations

from typing import Optional, Tuple

from .languages import DisplayLanguage


class TranslationError(Exception):
    """Base error for translation failures."""


class SameLanguageError(TranslationError):
    pass


class NoTranslationPathError(TranslationError):
    pass


class TextTooLongError(TranslationError):
    def __init__(self, length: int, limit: int) -> None:
        super().__init__(f"Text is {length} characters, limit is {limit}")
        self.length = length
        self.limit = limit


class TranslationGraphConflictError(TranslationError):
    pass


class UpstreamTranslationError(TranslationError):
    """A translation provider failed or returned an invalid response."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.status_code = status_code


def parse_error_message(error: Exception) -> str:
    """
    Map raw exceptions into short, human-readable messages.
    Used for admin notifications and logs.
    """
    s, t = str(error), type(error).__name__
    status = getattr(error, "status_code", None)
    if isinstance(error, NoTranslationPathError):
        return f"❌ No translation path: {s}"
    if status == 429 or "429" in s:
        return "⚠️ Rate Limited: translation provider is temporarily rate-limited."
    if status == 456:
        return "⚠️ Quota Exceeded: translation provider character quota is used up."
    if status in (401, 403) or "Unauthorized" in s or "Forbidden" in s:
        return "❌ Authentication Error: Invalid API key or credentials."
    if "Connect" in t or "Timeout" in t or "ECONNREFUSED" in s:
        return "❌ Connection Error: Unable to connect to the translation provider."
    return f"❌ {t}: {s.split(chr(10))[0][:100]}"


_USER_MESSAGES = {
    DisplayLanguage.NORWEGIAN: {
        "same_language": "Kan ikkje omsetja til same språk som originalteksten.",
        "too_long": "Omsett tekst er for lang til å bli sendt. Prøv å korta ned teksten.",
        "generic": "Det skjedde ein feil under omsetjinga. Prøv igjen seinare.",
    },
    DisplayLanguage.ENGLISH: {
        "same_language": "Cannot translate to the same language as the original text.",
        "too_long": "Translated text is too long to be sent. Try shortening the text.",
        "generic": "An error occurred during translation. Try again later.",
    },
}


def format_user_friendly_error(
    error: Exception,
    display_language: DisplayLanguage = DisplayLanguage.NORWEGIAN,
) -> str:
    """
    Short, safe error message suitable for end users.
    """
    messages = _USER_MESSAGES[display_language]
    if isinstance(error, SameLanguageError):
        return messages["same_language"]
    if isinstance(error, TextTooLongError):
        return messages["too_long"]
    return messages["generic"]


def error_messages(
    error: Exception,
    display_language: DisplayLanguage = DisplayLanguage.NORWEGIAN,
) -> Tuple[str, str]:
    """
    Convenience helper returning (admin_message, user_message).
    """
    return parse_error_message(error), format_user_friendly_error(error, display_language)
