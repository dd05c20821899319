"""
norskbot/translation/router.py

Entry point for translations. Resolves the source language, picks the
shortest provider chain, rate-limits by the chain's cost and runs it.

Rate limiting is a distinguished result, not an exception: a rejected request
returns a TranslationResult whose `rate_limit.is_rate_limited` is True.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Iterable, Mapping, Optional, Protocol

from ..ratelimit import RateLimitPolicy, RateLimitResult, RateLimiter, RateLimitScope
from .errors import NoTranslationPathError, SameLanguageError, TextTooLongError
from .graph import TranslationPipeline, Translator, build_graph, resolve_pipeline
from .languages import Language


DEFAULT_MAX_TEXT_LENGTH = 1800
EXPENSIVE_TIER = "expensive"
CHEAP_TIER = "cheap"

DEFAULT_POLICIES: dict[str, RateLimitPolicy] = {
    EXPENSIVE_TIER: RateLimitPolicy(window=30 * 60, max_per_window=3, by_user=True),
    CHEAP_TIER: RateLimitPolicy(window=60, max_per_window=3, by_user=False),
}


class LanguageDetector(Protocol):
    def detect(self, text: str) -> Awaitable[Optional[Language]]: ...


@dataclass(frozen=True)
class TranslationRequest:
    target: Language
    text: str
    source: Optional[Language] = None  # None: detect, Language.AUTO: provider detects
    public: bool = False               # shown to everyone rather than ephemeral


@dataclass(frozen=True)
class TranslationResult:
    text: Optional[str]
    source_language: Language
    target_language: Language
    expensive: bool
    rate_limit: Optional[RateLimitResult] = None

    @property
    def is_rate_limited(self) -> bool:
        return bool(self.rate_limit and self.rate_limit.is_rate_limited)


@dataclass(frozen=True)
class PreparedTranslation:
    request: TranslationRequest
    source: Language
    pipeline: TranslationPipeline
    rate_limit: Optional[RateLimitResult] = None

    @property
    def is_rate_limited(self) -> bool:
        return bool(self.rate_limit and self.rate_limit.is_rate_limited)


def fallback_source(target: Language) -> Language:
    """Guess for undetectable text: assume the opposite of the target."""
    return Language.BOKMAL if target == Language.ENGLISH else Language.ENGLISH


class TranslationRouter:
    def __init__(
        self,
        translators: Iterable[Translator],
        rate_limiter: RateLimiter,
        detector: Optional[LanguageDetector] = None,
        policies: Optional[Mapping[str, RateLimitPolicy]] = None,
        max_text_length: int = DEFAULT_MAX_TEXT_LENGTH,
        strict_graph: bool = False,
    ) -> None:
        self.graph = build_graph(translators, strict=strict_graph)
        self.rate_limiter = rate_limiter
        self.detector = detector
        self.policies = {**DEFAULT_POLICIES, **(policies or {})}
        self.max_text_length = max_text_length

    async def resolve_source(self, text: str, target: Language) -> Language:
        detected = await self.detector.detect(text) if self.detector else None
        if detected is not None:
            return detected
        if Language.AUTO in self.graph:
            return Language.AUTO
        return fallback_source(target)

    def pipeline(self, source: Language, target: Language) -> TranslationPipeline:
        return resolve_pipeline(self.graph, source, target)

    async def prepare(self, request: TranslationRequest, scope: RateLimitScope) -> PreparedTranslation:
        """
        Resolve the source language and the provider chain, and count the use
        against the rate limit tier matching the chain's cost.

        Raises SameLanguageError before any provider is called, and
        TextTooLongError for accepted requests over the length limit.
        """
        target = request.target
        source = request.source
        logging.info("Translating %s -> %s: %s", source and source.value, target.value, request.text)

        if source is None:
            source = await self.resolve_source(request.text, target)

        if source == target:
            logging.info("Source language is the same as target language (%s)", target.value)
            raise SameLanguageError(f"Cannot translate {source.value} to itself")

        pipeline = self.pipeline(source, target)
        rate_limit = None
        if pipeline.expensive or request.public:
            tier = EXPENSIVE_TIER if pipeline.expensive else CHEAP_TIER
            key = f"{type(self).__name__}-{tier}"
            logging.debug("Rate limiting enabled for %s", key)
            rate_limit = self.rate_limiter.rate_limit(key, scope, self.policies[tier])

        prepared = PreparedTranslation(request, source, pipeline, rate_limit)
        if not prepared.is_rate_limited and len(request.text) > self.max_text_length:
            raise TextTooLongError(len(request.text), self.max_text_length)
        return prepared

    async def execute(self, prepared: PreparedTranslation) -> TranslationResult:
        """
        Run a prepared, accepted translation. Provider errors propagate
        unchanged; nothing is retried.
        """
        source, target = prepared.source, prepared.request.target
        if not prepared.pipeline:
            logging.error("No translation pipeline found from %s to %s", source.value, target.value)
            raise NoTranslationPathError(f"No translation path from {source.value} to {target.value}")

        output = await prepared.pipeline.run(prepared.request.text)
        if source == Language.AUTO and output.detected_language is not None:
            source = output.detected_language

        return TranslationResult(
            text=output.text,
            source_language=source,
            target_language=target,
            expensive=prepared.pipeline.expensive,
            rate_limit=prepared.rate_limit,
        )

    async def translate(self, request: TranslationRequest, scope: RateLimitScope) -> TranslationResult:
        prepared = await self.prepare(request, scope)
        if prepared.is_rate_limited:
            return TranslationResult(
                text=None,
                source_language=prepared.source,
                target_language=request.target,
                expensive=prepared.pipeline.expensive,
                rate_limit=prepared.rate_limit,
            )
        return await self.execute(prepared)
