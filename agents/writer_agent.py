"""Writer agent: streams chapter and subchapter content."""

import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Optional

from agents.base_agent import BaseAgent
from tools.generation_client import GenerationRequest
from tools.text_utils import join_keywords

logger = logging.getLogger(__name__)


@dataclass
class GenerationParams:
    """Knobs for one section generation."""
    tone: Optional[str] = None
    audience: Optional[str] = None
    style: Optional[str] = None
    target_word_count: Optional[int] = None
    keywords: list[str] = field(default_factory=list)
    existing_text: Optional[str] = None  # regenerate from this text when set


class WriterAgent(BaseAgent):
    """Builds section prompts and opens streamed generation calls."""

    prompt_name = "writer"

    def build_request(
        self,
        topic: str,
        chapter_title: str,
        subchapter_title: Optional[str],
        params: GenerationParams,
    ) -> GenerationRequest:
        if params.existing_text:
            opening = self._section("Regeneration", existing_text=params.existing_text)
        else:
            opening = self._section("Fresh Draft", topic=topic)

        keywords = join_keywords(params.keywords)
        keyword_instruction = (
            f"Weave in these keywords naturally and strategically: {keywords}."
            if keywords else "Write naturally without forcing keywords."
        )

        guidelines = [
            f"- Tone of voice: {params.tone}" if params.tone else "",
            f"- Target audience: {params.audience}" if params.audience else "",
            f"- Writing style: {params.style}" if params.style else "",
        ]
        guidelines = "\n".join(g for g in guidelines if g)
        if guidelines:
            guidelines = f"\nAlso follow these additional specifications:\n{guidelines}"

        length_instruction = ""
        if params.target_word_count:
            length_instruction = (
                f"\nKEY REQUIREMENT: this section MUST be about {params.target_word_count} words long. "
                "Write complete, detailed text that meets this length. Do not return a short summary."
            )

        prompt = self._section(
            "Instructions",
            opening=opening,
            chapter_title=chapter_title,
            subchapter_part=f' - Subchapter "{subchapter_title}"' if subchapter_title else "",
            keyword_instruction=keyword_instruction,
            guidelines=guidelines,
            length_instruction=length_instruction,
        )
        return self._request(prompt, self.settings.llm_model_writing)

    async def open_stream(
        self,
        topic: str,
        chapter_title: str,
        subchapter_title: Optional[str],
        params: GenerationParams,
    ) -> AsyncIterator[str]:
        """Open a streamed call; only the opening is retried on rate limits."""
        request = self.build_request(topic, chapter_title, subchapter_title, params)
        logger.info(
            "Opening stream for '%s'%s", chapter_title,
            f" / '{subchapter_title}'" if subchapter_title else "",
        )
        return await self._call(lambda: self.provider.generate_stream(request))
