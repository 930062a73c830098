"""comment_translate - debounced, cache-backed translation of code comments."""

__version__ = "0.1.0"
__all__ = ["Translator", "translate_text"]


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    # Not exported as "translate": that name belongs to the subpackage
    if name == "translate_text":
        from .api import translate

        return translate
    if name == "Translator":
        from .core import Translator

        return Translator
    raise AttributeError(f"module 'comment_translate' has no attribute {name!r}")
