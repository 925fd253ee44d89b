"""Generate-all: sequential, paced generation across the whole tree."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from agents.writer_agent import GenerationParams
from config.exceptions import BookForgeError, GenerationInProgressError, NoActiveProjectError
from config.settings import Settings
from models.book import BookStructure
from workflow.callbacks import BatchProgress, LoggingCallback, ProgressCallback
from workflow.cancellation import CancellationToken
from workflow.generation import GenerationOrchestrator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkItem:
    """One leaf to generate."""
    node_id: str
    title: str
    chapter_title: str
    is_subchapter: bool


@dataclass
class BatchRun:
    """Transient state of one generate-all run."""
    worklist: list[WorkItem]
    cursor: int = 0
    running: bool = False
    cancelled: bool = False
    progress: Optional[BatchProgress] = None
    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.worklist)


def build_worklist(structure: Optional[BookStructure]) -> list[WorkItem]:
    """Flatten the tree depth-first into leaves.

    A chapter without subchapters is a leaf itself; otherwise each of its
    subchapters is. Untitled leaves are skipped.
    """
    items: list[WorkItem] = []
    if structure is None:
        return items
    for chapter in structure.chapters:
        if not chapter.subchapters:
            if chapter.title.strip():
                items.append(WorkItem(chapter.id, chapter.title, chapter.title, is_subchapter=False))
            continue
        for sub in chapter.subchapters:
            if sub.title.strip():
                items.append(WorkItem(sub.id, sub.title, chapter.title, is_subchapter=True))
    return items


class BatchScheduler:
    """Runs the orchestrator over every leaf, one at a time.

    Items never run in parallel and consecutive item starts are at least
    ``batch_pacing_seconds`` apart, keeping the whole run under one shared
    provider quota. A failed item gets an inline error marker and the run
    moves on.
    """

    def __init__(
        self,
        orchestrator: GenerationOrchestrator,
        settings: Optional[Settings] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.orchestrator = orchestrator
        self.store = orchestrator.store
        self.settings = settings or orchestrator.settings
        self._sleep = sleep
        self.current_run: Optional[BatchRun] = None
        self._token: Optional[CancellationToken] = None

    @property
    def is_running(self) -> bool:
        return self.current_run is not None and self.current_run.running

    def cancel(self, reason: str = "") -> None:
        """Stop scheduling further items; the in-flight item finishes."""
        if self._token is not None:
            self._token.cancel(reason)

    async def run(
        self,
        params: Optional[GenerationParams] = None,
        token: Optional[CancellationToken] = None,
        callback: Optional[ProgressCallback] = None,
    ) -> BatchRun:
        """Generate every leaf of the active project.

        Returns:
            The finished (or cancelled) run with per-item outcomes.
        """
        if self.is_running or self.orchestrator.is_generating:
            raise GenerationInProgressError("*")
        project = self.store.project
        if project is None:
            raise NoActiveProjectError()

        params = params or GenerationParams(target_word_count=self.settings.batch_target_word_count)
        token = token or CancellationToken()
        callback = callback or LoggingCallback()
        run = BatchRun(worklist=build_worklist(project.book_structure), running=True)
        self.current_run = run
        self._token = token

        total = run.total
        logger.info("Generate-all started: %d item(s)", total)
        try:
            for i, item in enumerate(run.worklist):
                if token.cancelled:
                    run.cancelled = True
                    logger.info("Generate-all cancelled before item %d/%d", i + 1, total)
                    break

                run.cursor = i
                callback.on_item_start(i + 1, total, item.title)
                try:
                    await self.orchestrator.generate(item.node_id, params)
                    run.succeeded.append(item.node_id)
                except BookForgeError as e:
                    run.failed.append(item.node_id)
                    callback.on_item_error(item.title, e)

                run.progress = BatchProgress(current=i + 1, total=total, current_node_title=item.title)
                callback.on_progress(run.progress)

                if i < total - 1:
                    await self._sleep(self.settings.batch_pacing_seconds)
        finally:
            run.running = False
            self._token = None

        callback.on_complete(len(run.succeeded) + len(run.failed), total)
        return run
