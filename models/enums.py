"""Enumerations for book projects and generation parameters."""

from enum import Enum


class ContentBlockType(str, Enum):
    RECIPE = "recipe"
    EXERCISE = "exercise"
    BONUS = "bonus"


class ToneOfVoice(str, Enum):
    INFORMAL = "Informal"
    FORMAL = "Formal"
    ACADEMIC = "Academic"
    PERSUASIVE = "Persuasive"


class TargetAudience(str, Enum):
    BEGINNERS = "Beginners"
    EXPERTS = "Experts"
    GENERAL = "General"


class WritingStyle(str, Enum):
    DESCRIPTIVE = "Descriptive"
    NARRATIVE = "Narrative"
    EXPOSITORY = "Expository"
    ARGUMENTATIVE = "Argumentative"


class LayoutTemplate(str, Enum):
    CLASSIC = "Classic"
    MODERN = "Modern"
    MINIMALIST = "Minimalist"


class PageSize(str, Enum):
    SIX_BY_NINE = "6x9"
    SEVEN_BY_TEN = "7x10"


class TextAction(str, Enum):
    """Editing actions applied to an existing passage."""
    IMPROVE = "improve"
    SUMMARIZE = "summarize"
    EXPAND = "expand"


class NodeKind(str, Enum):
    CHAPTER = "chapter"
    SUBCHAPTER = "subchapter"
