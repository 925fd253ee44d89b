"""Whole-project translation in paced, bounded-parallel chunks."""

import asyncio
import copy
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from agents.translator_agent import TranslatorAgent
from config.exceptions import OperationCancelledError
from config.settings import Settings
from models.project import Project
from workflow.cancellation import CancellationToken

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TranslatableField:
    """A (container, attribute) pair holding translatable text."""
    container: Any
    field_name: str

    def read(self) -> str:
        return getattr(self.container, self.field_name)

    def write(self, value: str) -> None:
        setattr(self.container, self.field_name, value)


def collect_translatable_fields(project: Project) -> list[TranslatableField]:
    """List every non-empty text field: project metadata, tree, content blocks."""
    fields: list[TranslatableField] = []

    def _add(container: Any, name: str) -> None:
        if getattr(container, name):
            fields.append(TranslatableField(container, name))

    for name in ("book_title", "subtitle", "author"):
        _add(project, name)
    if project.book_structure is not None:
        for chapter in project.book_structure.chapters:
            _add(chapter, "title")
            _add(chapter, "content")
            for sub in chapter.subchapters:
                _add(sub, "title")
                _add(sub, "content")
    for block in project.content_blocks:
        _add(block, "title")
        _add(block, "text_content")
    return fields


class BatchTranslator:
    """Translates a deep copy of a project; the input is never touched.

    Fields go out in chunks of ``translation_chunk_size`` concurrent calls,
    with ``translation_pacing_seconds`` between chunks.
    """

    def __init__(
        self,
        translator: Optional[TranslatorAgent] = None,
        settings: Optional[Settings] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.settings = settings or Settings()
        self.translator = translator or TranslatorAgent(settings=self.settings)
        self._sleep = sleep

    async def translate_project(
        self,
        project: Project,
        target_language: str,
        on_progress: Optional[Callable[[int, int], None]] = None,
        token: Optional[CancellationToken] = None,
    ) -> Project:
        """Return a translated copy of ``project``.

        Args:
            project: Source project; left unchanged.
            target_language: Language code or name, e.g. ``"en"``.
            on_progress: Called with ``(completed, total)`` after each chunk.
            token: Checked before each chunk.

        Raises:
            OperationCancelledError: The token was cancelled; the partial
                copy is discarded.
        """
        translated = copy.deepcopy(project)
        fields = collect_translatable_fields(translated)
        total = len(fields)
        report = on_progress or (lambda completed, total: None)

        if total == 0:
            report(0, 0)
            return translated

        chunk_size = self.settings.translation_chunk_size
        completed = 0
        logger.info("Translating %d field(s) to %s in chunks of %d", total, target_language, chunk_size)

        for start in range(0, total, chunk_size):
            if token is not None and token.cancelled:
                raise OperationCancelledError(completed, total)

            chunk = fields[start:start + chunk_size]
            results = await asyncio.gather(
                *(self.translator.translate(f.read(), target_language) for f in chunk)
            )
            for f, text in zip(chunk, results):
                f.write(text)

            completed += len(chunk)
            report(completed, total)
            logger.debug("Translated %d/%d fields", completed, total)

            if completed < total:
                await self._sleep(self.settings.translation_pacing_seconds)

        return translated
