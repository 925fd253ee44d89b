"""Translator agent: translates one text field at a time."""

import logging

from agents.base_agent import BaseAgent
from config.exceptions import ProviderError
from tools.text_utils import translation_error_marker

logger = logging.getLogger(__name__)

LANGUAGE_NAMES = {
    "en": "English",
    "de": "German",
    "it": "Italian",
    "fr": "French",
    "es": "Spanish",
}


def language_name(code: str) -> str:
    return LANGUAGE_NAMES.get(code.lower(), code)


class TranslatorAgent(BaseAgent):
    """Translates text from the configured source language."""

    prompt_name = "translator"

    async def translate(self, text: str, target_language: str) -> str:
        """Translate ``text``; blank text is returned as ``""``.

        A provider failure that survives the retry policy does not raise:
        the field gets the original text behind a translation-error marker,
        so one bad field cannot sink a whole-book translation.
        """
        if not text or not text.strip():
            return ""
        prompt = self._section(
            "Instructions",
            source_language=self.settings.translation_source_language,
            target_language=language_name(target_language),
            text=text,
        )
        try:
            return await self._generate_text(prompt, self.settings.llm_model_translation)
        except ProviderError as e:
            logger.error("Error translating text to %s: %s", target_language, e)
            return translation_error_marker(text)
