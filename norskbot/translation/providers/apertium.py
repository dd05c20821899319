"""
norskbot/translation/providers/apertium.py

Apertium APy client: free Bokmål↔Nynorsk machine translation and language
identification. Apertium speaks ISO 639-3 codes (nob, nno, eng, ...).
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import httpx

from ..errors import UpstreamTranslationError
from ..graph import TranslationOutput, Translator
from ..languages import Language


DEFAULT_BASE_URL = "https://apertium.org/apy"
REQUEST_TIMEOUT_SECONDS = 30

APERTIUM_CODES: dict[Language, str] = {
    Language.BOKMAL: "nob",
    Language.NYNORSK: "nno",
    Language.ENGLISH: "eng",
    Language.DANISH: "dan",
    Language.SWEDISH: "swe",
    Language.GERMAN: "deu",
    Language.FRENCH: "fra",
    Language.SPANISH: "spa",
    Language.ITALIAN: "ita",
    Language.DUTCH: "nld",
    Language.PORTUGUESE: "por",
    Language.FINNISH: "fin",
    Language.POLISH: "pol",
    Language.RUSSIAN: "rus",
    Language.UKRAINIAN: "ukr",
    Language.CZECH: "ces",
    Language.TURKISH: "tur",
}
_FROM_APERTIUM = {code: lang for lang, code in APERTIUM_CODES.items()}


def apertium_to_language(code: Optional[str]) -> Optional[Language]:
    if not code:
        return None
    return _FROM_APERTIUM.get(code)


class ApertiumClient:
    name = "apertium"

    def __init__(self, base_url: str = DEFAULT_BASE_URL, http_client: httpx.AsyncClient | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.http_client = http_client or httpx.AsyncClient(timeout=REQUEST_TIMEOUT_SECONDS)

    async def translate(self, source: Language, target: Language, text: str) -> TranslationOutput:
        try:
            resp = await self.http_client.post(
                f"{self.base_url}/translate",
                data={
                    "langpair": f"{APERTIUM_CODES[source]}|{APERTIUM_CODES[target]}",
                    "markUnknown": "no",
                    "prefs": "",
                    "q": text,
                },
            )
            data = resp.json()
            status = data.get("responseStatus")
            if status != 200:
                raise UpstreamTranslationError(
                    self.name, str(data.get("responseDetails") or "translation failed"), status
                )
            translated = data["responseData"]["translatedText"]
        except httpx.HTTPError as e:
            raise UpstreamTranslationError(self.name, str(e)) from e
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise UpstreamTranslationError(self.name, "invalid response", resp.status_code) from e

        if not isinstance(translated, str):
            raise UpstreamTranslationError(self.name, "invalid response", resp.status_code)
        return TranslationOutput(text=translated)

    async def detect_languages(self, text: str) -> List[Tuple[Language, float]]:
        """
        Identify candidate languages for `text`, most likely first.
        Languages the bot does not know are dropped.
        """
        try:
            resp = await self.http_client.get(f"{self.base_url}/identifyLang", params={"q": text})
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamTranslationError(self.name, str(e), e.response.status_code) from e
        except httpx.HTTPError as e:
            raise UpstreamTranslationError(self.name, str(e)) from e
        except ValueError as e:
            raise UpstreamTranslationError(self.name, "invalid JSON response", resp.status_code) from e

        if not isinstance(data, dict):
            raise UpstreamTranslationError(self.name, "invalid response", resp.status_code)

        try:
            candidates = [
                (lang, float(confidence))
                for code, confidence in data.items()
                if (lang := apertium_to_language(code)) is not None
            ]
        except (TypeError, ValueError) as e:
            raise UpstreamTranslationError(self.name, "invalid confidence value", resp.status_code) from e
        return sorted(candidates, key=lambda c: c[1], reverse=True)

    async def detect(self, text: str) -> Optional[Language]:
        """Best guess for the language of `text`, or None if undetectable."""
        try:
            candidates = await self.detect_languages(text)
        except UpstreamTranslationError as e:
            logging.warning("Language detection failed: %s", e)
            return None
        return candidates[0][0] if candidates else None


def apertium_translator(client: ApertiumClient) -> Translator:
    pair = (Language.BOKMAL, Language.NYNORSK)
    return Translator(
        name=client.name,
        sources=pair,
        targets=pair,
        translate=client.translate,
        expensive=False,
    )
