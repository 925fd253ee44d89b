"""Content block agent: appendix suggestions, texts and illustrations."""

import logging
from dataclasses import dataclass

from agents.base_agent import BaseAgent
from config.exceptions import InvalidInputError
from models.enums import ContentBlockType
from models.project import Project
from tools.response_parsing import parse_json_array

logger = logging.getLogger(__name__)

_EXAMPLES = {
    ContentBlockType.RECIPE: "'A weekly meal plan with recipes inspired by the book's principles.'",
    ContentBlockType.EXERCISE: "'A series of desk stretches based on the book's ergonomics concepts.'",
    ContentBlockType.BONUS: "'A printable checklist summarising the key steps of every chapter.'",
}


@dataclass
class GeneratedBlock:
    title: str
    text_content: str


def _chapter_titles(project: Project, limit: int = 5) -> str:
    if not project.book_structure:
        return ""
    return ", ".join(ch.title for ch in project.book_structure.chapters[:limit])


def format_block_text(description: str, items: list[str]) -> str:
    """Render a description followed by a bulleted item list."""
    text = f"{description}\n\n"
    if items:
        text += "- " + "\n- ".join(items)
    return text


class ContentBlockAgent(BaseAgent):
    """Generates appendix-style content blocks for a project."""

    prompt_name = "content_block"

    async def suggest_prompt(self, project: Project, block_type: ContentBlockType) -> str:
        prompt = self._section(
            "Suggestion",
            book_title=project.book_title,
            topic=project.topic,
            chapter_titles=_chapter_titles(project),
            block_type=block_type.value,
            example=_EXAMPLES[block_type],
        )
        return await self._generate_text(prompt, self.settings.llm_model_writing)

    async def generate_blocks(
        self,
        project: Project,
        description: str,
        block_type: ContentBlockType,
        count: int = 1,
        existing_titles: list[str] | None = None,
    ) -> list[GeneratedBlock]:
        if count < 1:
            raise InvalidInputError("count must be >= 1", {"count": count})
        uniqueness = ""
        if existing_titles:
            uniqueness = (
                "IMPORTANT: avoid bonus items with the following titles, they already exist: "
                + ", ".join(existing_titles) + "."
            )
        prompt = self._section(
            "Blocks",
            book_title=project.book_title,
            topic=project.topic,
            chapter_titles=_chapter_titles(project),
            count=count,
            block_type=block_type.value,
            description=description,
            uniqueness=uniqueness,
        )
        text = await self._generate_text(prompt, self.settings.llm_model_writing)

        blocks = []
        for item in parse_json_array(text):
            if not isinstance(item, dict):
                continue
            items = [str(i) for i in item.get("items") or []]
            blocks.append(GeneratedBlock(
                title=str(item.get("title", "")).strip(),
                text_content=format_block_text(str(item.get("description", "")), items),
            ))
        logger.info("Generated %d %s block(s)", len(blocks), block_type.value)
        return blocks

    async def generate_illustration(self, title: str, project: Project) -> str:
        """Return a data URL for a block illustration."""
        prompt = self._section("Illustration", topic=project.topic, title=title)
        image = await self._call(lambda: self.provider.generate_image(prompt))
        return image.to_data_url()
