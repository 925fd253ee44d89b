"""Agents package: prompt-driven generation roles."""

from agents.base_agent import BaseAgent
from agents.planner_agent import PlannerAgent
from agents.writer_agent import WriterAgent, GenerationParams
from agents.editor_agent import EditorAgent
from agents.translator_agent import TranslatorAgent
from agents.content_block_agent import ContentBlockAgent
from agents.research_agent import ResearchAgent, ResearchResult, Trend
from agents.metadata_agent import MetadataAgent

__all__ = [
    "BaseAgent",
    "PlannerAgent",
    "WriterAgent",
    "GenerationParams",
    "EditorAgent",
    "TranslatorAgent",
    "ContentBlockAgent",
    "ResearchAgent",
    "ResearchResult",
    "Trend",
    "MetadataAgent",
]
