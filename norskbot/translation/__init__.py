from .errors import (
    NoTranslationPathError,
    SameLanguageError,
    TextTooLongError,
    TranslationError,
    TranslationGraphConflictError,
    UpstreamTranslationError,
)
from .graph import (
    TranslationEdge,
    TranslationOutput,
    TranslationPipeline,
    Translator,
    build_graph,
    find_path,
    resolve_pipeline,
)
from .languages import DisplayLanguage, Language, get_emoji_data, language_name
from .router import PreparedTranslation, TranslationRequest, TranslationResult, TranslationRouter

__all__ = [
    "NoTranslationPathError",
    "SameLanguageError",
    "TextTooLongError",
    "TranslationError",
    "TranslationGraphConflictError",
    "UpstreamTranslationError",
    "TranslationEdge",
    "TranslationOutput",
    "TranslationPipeline",
    "Translator",
    "build_graph",
    "find_path",
    "resolve_pipeline",
    "DisplayLanguage",
    "Language",
    "get_emoji_data",
    "language_name",
    "PreparedTranslation",
    "TranslationRequest",
    "TranslationResult",
    "TranslationRouter",
]
