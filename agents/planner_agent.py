"""Planner agent: proposes a chapter/subchapter outline."""

import logging

from agents.base_agent import BaseAgent
from config.exceptions import ProviderResponseParseError
from models.book import BookStructure, Chapter, SubChapter
from tools.response_parsing import parse_json_object
from tools.text_utils import join_keywords

logger = logging.getLogger(__name__)


class PlannerAgent(BaseAgent):
    """Generates a two-level book structure as JSON."""

    prompt_name = "planner"

    async def generate_structure(
        self,
        topic: str,
        title: str,
        subtitle: str = "",
        keywords: list[str] | None = None,
        chapter_count: int = 10,
        subchapter_count: int = 4,
    ) -> BookStructure:
        """Ask the provider for an outline and convert it to a BookStructure.

        Ids in the model output are ignored; every node gets a fresh id.

        Raises:
            ProviderResponseParseError: The response holds no usable chapters.
        """
        prompt = self._section(
            "Instructions",
            topic=topic,
            title=title,
            subtitle=subtitle,
            chapter_count=chapter_count,
            subchapter_count=subchapter_count,
            keywords=join_keywords(keywords or []) or "none",
        )
        text = await self._generate_text(prompt, self.settings.llm_model_planning)
        data = parse_json_object(text)

        raw_chapters = data.get("chapters")
        if not isinstance(raw_chapters, list) or not raw_chapters:
            raise ProviderResponseParseError("Outline contains no chapters", raw_response=text)

        chapters = []
        for raw in raw_chapters:
            if not isinstance(raw, dict):
                continue
            subchapters = [
                SubChapter(title=str(sub.get("title", "")).strip())
                for sub in raw.get("subchapters") or []
                if isinstance(sub, dict)
            ]
            chapters.append(Chapter(title=str(raw.get("title", "")).strip(), subchapters=subchapters))

        logger.info(
            "Outline generated: %d chapters, %d subchapters",
            len(chapters), sum(len(ch.subchapters) for ch in chapters),
        )
        return BookStructure(chapters=chapters)
