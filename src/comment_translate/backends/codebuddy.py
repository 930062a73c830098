"""Codebuddy CLI backend.

Sends a context-aware prompt to the `codebuddy` command line tool and uses
its stdout as the translation.
"""

import asyncio
import logging
import shutil

from ..host import TranslateContext
from ..translate.errors import BackendFailureError, BackendUnavailableError
from .base import TranslationBackend

logger = logging.getLogger(__name__)

LANGUAGE_NAMES = {
    "zh": "Chinese",
    "en": "English",
    "ja": "Japanese",
    "ko": "Korean",
    "fr": "French",
    "de": "German",
    "es": "Spanish",
    "pt": "Portuguese",
    "ru": "Russian",
    "it": "Italian",
    "vi": "Vietnamese",
    "th": "Thai",
    "ar": "Arabic",
}

# codebuddy prints plugin warnings on stdout alongside the answer
NOISE_MARKERS = ("plugin error", "Run /plugin")


def language_name(lang_code: str) -> str:
    return LANGUAGE_NAMES.get(lang_code, lang_code)


def build_prompt(
    text: str, target_lang: str, context: TranslateContext | None = None
) -> str:
    """Build the translation prompt for a comment.

    Args:
        text: Comment text to translate
        target_lang: Target language code
        context: Optional code context; file type, package and type names go
            on one compact line, followed by the function signature and the
            surrounding code in a fenced block

    Returns:
        Prompt text
    """
    parts = [
        f"Translate this code comment to {language_name(target_lang)}. "
        "Output ONLY the translation."
    ]

    if context:
        tags = []
        if context.file_type:
            tags.append(context.file_type)
        if context.package_or_module:
            tags.append(f"pkg:{context.package_or_module}")
        if context.struct_or_class:
            tags.append(f"type:{context.struct_or_class}")
        if tags:
            parts.append("[" + ", ".join(tags) + "]")

        if context.function_signature:
            parts.append(f"Function: {context.function_signature}")

        if context.surrounding_code:
            parts.extend(["```", context.surrounding_code, "```"])

    parts.extend(["", f"Comment: {text}"])
    return "\n".join(parts)


def clean_output(output: str) -> str:
    """Drop codebuddy's plugin noise lines and surrounding whitespace."""
    lines = [
        line
        for line in output.splitlines()
        if not any(marker in line for marker in NOISE_MARKERS)
    ]
    return "\n".join(lines).strip()


class CodebuddyBackend(TranslationBackend):
    """Translation through the codebuddy CLI (`codebuddy -p -y PROMPT`)."""

    name = "codebuddy"

    def __init__(self, command: str = "codebuddy") -> None:
        self.command = command
        self._available: bool | None = None

    def is_available(self) -> bool:
        """Check once whether the command is on PATH."""
        if self._available is None:
            self._available = shutil.which(self.command) is not None
            if not self._available:
                logger.warning(f"{self.command} not found on PATH")
        return self._available

    async def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
        context: TranslateContext | None = None,
    ) -> str:
        if not self.is_available():
            raise BackendUnavailableError(
                f"{self.command} is required for translation. Install it and make "
                "sure it is on PATH."
            )

        prompt = build_prompt(text, target_lang, context)

        try:
            proc = await asyncio.create_subprocess_exec(
                self.command,
                "-p",
                "-y",
                prompt,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise BackendFailureError(
                f"Failed to start {self.command}: {e}", original_error=e
            ) from e

        try:
            stdout, stderr = await proc.communicate()
        except asyncio.CancelledError:
            # Do not leave the child running when the cycle is torn down
            if proc.returncode is None:
                proc.kill()
            raise

        if proc.returncode != 0:
            message = f"Translation failed ({self.command} exited with {proc.returncode})"
            err = stderr.decode(errors="replace").strip()
            if err:
                message = f"{message}: {' '.join(err.splitlines())}"
            raise BackendFailureError(message, status_code=proc.returncode)

        result = clean_output(stdout.decode(errors="replace"))
        if not result:
            raise BackendFailureError(f"{self.command} returned no translation")

        logger.debug(f"{self.command} translated {len(text)} chars to {target_lang}")
        return result
