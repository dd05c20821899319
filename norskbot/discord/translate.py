from __future__ import annotations

import logging
import random
from typing import Callable, Optional

from norskbot.translation.errors import (
    SameLanguageError,
    TextTooLongError,
    TranslationError,
    UpstreamTranslationError,
    error_messages,
    format_user_friendly_error,
)
from norskbot.translation.languages import DisplayLanguage
from norskbot.translation.router import TranslationRequest, TranslationResult, TranslationRouter

from . import messages
from .errors import AdminNotifier
from .responders import Responder


async def translate_and_reply(
    router: TranslationRouter,
    responder: Responder,
    request: TranslationRequest,
    display_language: DisplayLanguage = DisplayLanguage.NORWEGIAN,
    rng: Callable[[], float] = random.random,
    notify: Optional[AdminNotifier] = None,
) -> Optional[TranslationResult]:
    """
    Translate `request` and answer through `responder`.

    Rejections (same language, too long, rate limited) are answered
    ephemerally before anything is deferred or billed; provider failures get a
    generic "try again later" and, when `notify` is given, an admin
    alert. Returns the result, or None if nothing was translated.
    """
    ephemeral = not request.public

    # detection is a network round trip, so acknowledge the interaction first
    if request.source is None:
        await responder.defer(ephemeral=ephemeral)

    try:
        prepared = await router.prepare(request, responder.scope())
    except (SameLanguageError, TextTooLongError) as e:
        logging.info("Translation rejected for %s: %s", responder.user, e)
        await responder.send(format_user_friendly_error(e, display_language), ephemeral=True)
        return None

    if prepared.is_rate_limited:
        wait = prepared.rate_limit.time_until_next_use or 0
        await responder.send(messages.rate_limited(wait, display_language), ephemeral=True)
        return None

    await responder.defer(ephemeral=ephemeral)

    try:
        result = await router.execute(prepared)
    except TranslationError as e:
        admin_msg, user_msg = error_messages(e, display_language)
        logging.exception("Translation failed: %s", admin_msg)
        if notify is not None and isinstance(e, UpstreamTranslationError):
            await notify(e, f"Translation {prepared.source.value}->{request.target.value}")
        await responder.send(user_msg, ephemeral=True)
        return None

    requested_by = str(responder.user) if responder.is_pseudo else None
    embed = messages.build_translation_embed(result, display_language, requested_by, rng)
    await responder.send(embed=embed, ephemeral=ephemeral)
    return result
