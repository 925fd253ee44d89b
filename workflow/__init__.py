"""Workflow package: generation, generate-all, translation, and utilities."""

from workflow.generation import GenerationOrchestrator, GenerationJob
from workflow.batch import BatchScheduler, BatchRun, WorkItem, build_worklist
from workflow.translation import BatchTranslator, collect_translatable_fields
from workflow.callbacks import BatchProgress, ProgressCallback, LoggingCallback, RichProgressCallback
from workflow.cancellation import CancellationToken
from workflow.debounce import Debouncer

__all__ = [
    "GenerationOrchestrator",
    "GenerationJob",
    "BatchScheduler",
    "BatchRun",
    "WorkItem",
    "build_worklist",
    "BatchTranslator",
    "collect_translatable_fields",
    "BatchProgress",
    "ProgressCallback",
    "LoggingCallback",
    "RichProgressCallback",
    "CancellationToken",
    "Debouncer",
]
