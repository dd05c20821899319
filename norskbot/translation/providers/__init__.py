from .apertium import ApertiumClient, apertium_to_language, apertium_translator
from .deepl import DeepLClient, deepl_to_language, deepl_translator

__all__ = [
    "ApertiumClient",
    "apertium_to_language",
    "apertium_translator",
    "DeepLClient",
    "deepl_to_language",
    "deepl_translator",
]
