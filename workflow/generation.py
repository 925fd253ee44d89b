"""Single-node streaming generation with a debounced manual-edit path."""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from agents.writer_agent import GenerationParams, WriterAgent
from config.exceptions import (
    GenerationInProgressError,
    InvalidInputError,
    NoActiveProjectError,
)
from config.settings import Settings
from models.document_store import DocumentStore
from tools.generation_client import classify_provider_error
from tools.text_utils import error_marker
from workflow.debounce import Debouncer

logger = logging.getLogger(__name__)


@dataclass
class GenerationJob:
    """State of one streaming call; lives only while the call runs."""
    node_id: str
    params: GenerationParams
    previous_content: str = ""
    buffer: str = ""
    error: Optional[Exception] = None
    done: bool = False


@dataclass
class PendingEdit:
    node_id: str
    text: str = field(repr=False)


class GenerationOrchestrator:
    """Drives generation for one node at a time against a DocumentStore.

    Streaming output accumulates in ``live_text`` and is committed once the
    stream ends. A failed stream commits an error marker instead, so a node
    is never left half-written. Manual edits are committed through a
    single-slot debouncer after ``edit_debounce_seconds`` of inactivity.
    """

    def __init__(
        self,
        store: DocumentStore,
        writer: Optional[WriterAgent] = None,
        settings: Optional[Settings] = None,
        debouncer: Optional[Debouncer] = None,
    ):
        self.store = store
        self.settings = settings or store.settings
        self.writer = writer or WriterAgent(settings=self.settings)
        self.debouncer = debouncer or Debouncer(on_error=self._on_commit_error)
        self._job: Optional[GenerationJob] = None
        self._pending_edit: Optional[PendingEdit] = None
        self.last_commit_error: Optional[Exception] = None

    # ---- State ----

    @property
    def job(self) -> Optional[GenerationJob]:
        return self._job

    @property
    def is_generating(self) -> bool:
        return self._job is not None and not self._job.done

    @property
    def live_text(self) -> Optional[str]:
        """Uncommitted text: the streaming buffer or the pending manual edit."""
        if self.is_generating:
            return self._job.buffer
        if self._pending_edit is not None and self.debouncer.pending:
            return self._pending_edit.text
        return None

    # ---- Generation ----

    async def generate(
        self,
        node_id: str,
        params: Optional[GenerationParams] = None,
        on_fragment: Optional[Callable[[str], None]] = None,
    ) -> str:
        """Stream new content for ``node_id`` and commit it.

        Args:
            node_id: Chapter or subchapter to write.
            params: Tone, audience, length and so on; defaults apply when None.
            on_fragment: Called with the accumulated buffer after each fragment.

        Returns:
            The committed text.

        Raises:
            GenerationInProgressError: Another job is still streaming.
            UnresolvedNodeIdError: ``node_id`` is not in the tree.
            ProviderError: The stream failed; the error marker is already committed.
        """
        if self.is_generating:
            raise GenerationInProgressError(node_id)
        project = self.store.project
        if project is None:
            raise NoActiveProjectError()
        if not project.topic.strip():
            raise InvalidInputError("Project topic is required for generation")

        node, parent = self.store.find_node(node_id)
        subchapter_title = node.title if node is not parent else None
        params = params or GenerationParams()

        # Earlier manual edits land before the generated text replaces them
        self.debouncer.flush()

        job = GenerationJob(node_id=node_id, params=params, previous_content=node.content)
        self._job = job
        try:
            stream = await self.writer.open_stream(project.topic, parent.title, subchapter_title, params)
            async for fragment in stream:
                job.buffer += fragment
                if on_fragment is not None:
                    on_fragment(job.buffer)
        except Exception as e:
            error = classify_provider_error(e, "Stream failed")
            logger.error("Generation failed for node %s: %s", node_id, error)
            job.error = error
            job.buffer = error_marker(str(error))
            job.done = True
            self.store.update_node_content(node_id, job.buffer)
            if error is e:
                raise
            raise error from e
        finally:
            job.done = True

        self.store.update_node_content(node_id, job.buffer)
        logger.info("Generated %d chars for node %s", len(job.buffer), node_id)
        return job.buffer

    # ---- Manual edits ----

    def edit(self, node_id: str, text: str) -> None:
        """Record a manual edit; it is committed after a quiet period."""
        if self.is_generating:
            raise GenerationInProgressError(node_id)
        self._pending_edit = PendingEdit(node_id=node_id, text=text)
        self.debouncer.schedule(
            lambda: self.store.update_node_content(node_id, text),
            self.settings.edit_debounce_seconds,
        )

    def flush_edits(self) -> None:
        """Commit any pending manual edit immediately."""
        self.debouncer.flush()

    def discard_edits(self) -> None:
        self.debouncer.cancel_pending()
        self._pending_edit = None

    def _on_commit_error(self, error: Exception) -> None:
        self.last_commit_error = error
        logger.error("Failed to commit manual edit: %s", error)
