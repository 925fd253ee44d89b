"""Editor agent: improve, summarize or expand a passage."""

import logging

from agents.base_agent import BaseAgent
from config.exceptions import InvalidInputError
from models.enums import TextAction

logger = logging.getLogger(__name__)

_SECTIONS = {
    TextAction.IMPROVE: "Improve",
    TextAction.SUMMARIZE: "Summarize",
    TextAction.EXPAND: "Expand",
}


class EditorAgent(BaseAgent):
    """Applies an editing action to existing text."""

    prompt_name = "editor"

    def _model_for(self, action: TextAction) -> str:
        # Summaries are cheap; rewriting and expanding use the editing model
        if action is TextAction.SUMMARIZE:
            return self.settings.llm_model_translation
        return self.settings.llm_model_editing

    async def process_text(self, text: str, action: TextAction | str) -> str:
        """Return the edited text.

        Raises:
            InvalidInputError: Empty text or unknown action.
            ProviderError: The provider call failed after retries.
        """
        if not text or not text.strip():
            raise InvalidInputError("Cannot edit empty text")
        try:
            action = TextAction(action)
        except ValueError as e:
            raise InvalidInputError(f"Unknown editing action: {action}") from e

        prompt = self._section(_SECTIONS[action], text=text)
        logger.info("Editing %d chars with action '%s'", len(text), action.value)
        return await self._generate_text(prompt, self._model_for(action))
