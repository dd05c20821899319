"""
norskbot/translation/providers/deepl.py

DeepL REST client. Every call is billed per character, so the translator it
produces is marked expensive. DeepL can detect the source language itself
(Language.AUTO) and reports what it detected.
"""

from __future__ import annotations

from typing import Optional

import httpx

from ..errors import UpstreamTranslationError
from ..graph import TranslationOutput, Translator
from ..languages import Language


FREE_API_URL = "https://api-free.deepl.com/v2"
PRO_API_URL = "https://api.deepl.com/v2"
REQUEST_TIMEOUT_SECONDS = 30

# Nynorsk is not offered by DeepL; it is reached through Bokmål.
SOURCE_CODES: dict[Language, str] = {
    lang: lang.value.upper()
    for lang in Language
    if lang not in (Language.AUTO, Language.NYNORSK)
}
TARGET_CODES: dict[Language, str] = {
    **SOURCE_CODES,
    Language.ENGLISH: "EN-US",
    Language.PORTUGUESE: "PT-PT",
    Language.CHINESE: "ZH-HANS",
}
_FROM_DEEPL = {code: lang for lang, code in SOURCE_CODES.items()}


def deepl_to_language(code: Optional[str]) -> Optional[Language]:
    if not code:
        return None
    return _FROM_DEEPL.get(code.upper().split("-")[0])


def api_url_for_key(api_key: str) -> str:
    return FREE_API_URL if api_key.endswith(":fx") else PRO_API_URL


class DeepLClient:
    name = "deepl"

    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient | None = None,
        base_url: str | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("DeepL API key is not set")
        self.base_url = (base_url or api_url_for_key(api_key)).rstrip("/")
        self.http_client = http_client or httpx.AsyncClient(timeout=REQUEST_TIMEOUT_SECONDS)
        self._headers = {"Authorization": f"DeepL-Auth-Key {api_key}"}

    async def translate(self, source: Language, target: Language, text: str) -> TranslationOutput:
        payload: dict = {"text": [text], "target_lang": TARGET_CODES[target]}
        if source != Language.AUTO:
            payload["source_lang"] = SOURCE_CODES[source]

        try:
            resp = await self.http_client.post(
                f"{self.base_url}/translate", json=payload, headers=self._headers
            )
            resp.raise_for_status()
            translation = resp.json()["translations"][0]
            translated_text = translation["text"]
        except httpx.HTTPStatusError as e:
            raise UpstreamTranslationError(self.name, str(e), e.response.status_code) from e
        except httpx.HTTPError as e:
            raise UpstreamTranslationError(self.name, str(e)) from e
        except (ValueError, KeyError, IndexError) as e:
            raise UpstreamTranslationError(self.name, "invalid response", resp.status_code) from e

        return TranslationOutput(
            text=translated_text,
            detected_language=deepl_to_language(translation.get("detected_source_language")),
        )


def deepl_translator(client: DeepLClient) -> Translator:
    return Translator(
        name=client.name,
        sources=(Language.AUTO, *SOURCE_CODES),
        targets=tuple(TARGET_CODES),
        translate=client.translate,
        expensive=True,
    )
