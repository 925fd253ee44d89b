"""Metadata agent: store description and cover artwork."""

import logging
from typing import Optional

from agents.base_agent import BaseAgent
from config.exceptions import InvalidInputError, ProviderError
from models.book import BookStructure
from tools.text_utils import join_keywords

logger = logging.getLogger(__name__)


class MetadataAgent(BaseAgent):
    """Writes the book description and produces cover options."""

    prompt_name = "metadata"

    async def generate_description(self, title: str, structure: Optional[BookStructure]) -> str:
        """Write a plain-text store description from the title and chapter titles."""
        if not title.strip():
            raise InvalidInputError("A book title is required for the description")
        chapter_titles = ", ".join(ch.title for ch in structure.chapters if ch.title) if structure else ""
        prompt = self._section(
            "Description",
            title=title.strip(),
            chapter_titles=chapter_titles or "various subjects",
            language=self.settings.translation_source_language,
        )
        description = await self._generate_text(prompt, self.settings.llm_model_research)
        logger.info("Description generated for '%s' (%d chars)", title, len(description))
        return description

    async def generate_cover_prompt(
        self,
        topic: str,
        title: str,
        keywords: list[str],
        category: str,
    ) -> str:
        """Return an English image prompt for the cover.

        A plain template prompt is returned when the provider fails, so the
        cover step can still run.
        """
        values = dict(
            topic=topic,
            title=title,
            category=category or "General",
            keywords=join_keywords(keywords) or "none",
        )
        try:
            prompt = await self._generate_text(self._section("Cover Prompt", **values), self.settings.llm_model_research)
        except ProviderError as e:
            logger.warning("Cover prompt generation failed, using template: %s", e)
            prompt = ""
        return prompt or self._section("Cover Fallback", **values)

    async def generate_cover_options(self, prompt: str, count: Optional[int] = None) -> list[str]:
        """Generate ``count`` cover images one after another, as data URLs."""
        count = count or self.settings.cover_option_count
        if count < 1:
            raise InvalidInputError("count must be >= 1", {"count": count})
        options = []
        for index in range(count):
            image = await self._call(lambda: self.provider.generate_image(prompt))
            options.append(image.to_data_url())
            logger.debug("Cover option %d/%d generated", index + 1, count)
        return options
