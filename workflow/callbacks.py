"""Progress callbacks for batch generation and translation."""

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchProgress:
    """Snapshot of a batch run after an item finished."""
    current: int
    total: int
    current_node_title: str = ""

    @property
    def fraction(self) -> float:
        return self.current / self.total if self.total else 1.0


@runtime_checkable
class ProgressCallback(Protocol):
    """Hooks into the batch lifecycle."""

    def on_item_start(self, index: int, total: int, title: str) -> None:
        ...

    def on_progress(self, progress: BatchProgress) -> None:
        ...

    def on_item_error(self, title: str, error: Exception) -> None:
        ...

    def on_complete(self, completed: int, total: int) -> None:
        ...


class LoggingCallback:
    """Lightweight callback that logs progress to the standard logger."""

    def on_item_start(self, index: int, total: int, title: str) -> None:
        logger.debug("→ item %d/%d: %s", index, total, title)

    def on_progress(self, progress: BatchProgress) -> None:
        logger.info("Progress %d/%d (%s)", progress.current, progress.total, progress.current_node_title)

    def on_item_error(self, title: str, error: Exception) -> None:
        logger.error("Item '%s' failed: %s", title, error)

    def on_complete(self, completed: int, total: int) -> None:
        logger.info("Batch complete, %d/%d items", completed, total)


class RichProgressCallback:
    """Progress callback that renders a Rich progress bar in the terminal."""

    def __init__(self, console=None, description: str = "Generating"):
        """
        Args:
            console: Rich Console instance. Creates one if not provided.
            description: Label shown before the current item title.
        """
        self._console = console
        self._description = description
        self._progress = None
        self._task_id = None

    def start(self, total: int = 0):
        """Start the progress display. Call before running the batch."""
        from rich.console import Console
        from rich.progress import (
            Progress, SpinnerColumn, TextColumn, BarColumn, MofNCompleteColumn,
        )

        console = self._console or Console()
        self._progress = Progress(
            SpinnerColumn("dots"),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=console,
        )
        self._progress.start()
        self._task_id = self._progress.add_task(self._description, total=total or None)

    def stop(self):
        if self._progress is not None:
            self._progress.stop()
            self._progress = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *exc):
        self.stop()
        return False

    def on_item_start(self, index: int, total: int, title: str) -> None:
        if self._progress is not None:
            self._progress.update(
                self._task_id, total=total, description=f"{self._description}: {title}",
            )

    def on_progress(self, progress: BatchProgress) -> None:
        if self._progress is not None:
            self._progress.update(self._task_id, total=progress.total, completed=progress.current)

    def on_item_error(self, title: str, error: Exception) -> None:
        if self._progress is not None:
            self._progress.console.print(f"[red]✗ {title}: {error}[/]")

    def on_complete(self, completed: int, total: int) -> None:
        if self._progress is not None:
            self._progress.update(self._task_id, completed=completed)
