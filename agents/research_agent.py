"""Research agent: market research, trending topics and store categories."""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from agents.base_agent import BaseAgent
from config.exceptions import InvalidInputError, ProviderError
from tools.response_parsing import parse_json_array, parse_json_object

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    "Arts & Photography", "Biographies & Memoirs", "Business & Money", "Children's Books",
    "Comics & Graphic Novels", "Computers & Technology", "Cookbooks, Food & Wine",
    "Crafts, Hobbies & Home", "Education & Teaching", "Engineering & Transportation",
    "Health, Fitness & Dieting", "History", "Humor & Entertainment", "Law",
    "Lesbian, Gay, Bisexual & Transgender Books", "Literature & Fiction", "Medical Books",
    "Mystery, Thriller & Suspense", "Parenting & Relationships", "Politics & Social Sciences",
    "Reference", "Religion & Spirituality", "Romance", "Science & Math",
    "Science Fiction & Fantasy", "Self-Help", "Sports & Outdoors", "Teen & Young Adult",
    "Test Preparation", "Travel",
]


def _relevance(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


@dataclass
class RankedSuggestion:
    """A keyword, title or subtitle with its 0-100 relevance."""
    text: str
    relevance: float = 0.0

    def to_dict(self) -> dict:
        return {"text": self.text, "relevance": self.relevance}

    @classmethod
    def from_dict(cls, data: dict) -> "RankedSuggestion":
        return cls(text=str(data.get("text", "")), relevance=_relevance(data.get("relevance")))


def _ranked(raw: Any, key: str) -> list[RankedSuggestion]:
    """Convert model output items to suggestions, most relevant first."""
    items = []
    for entry in raw if isinstance(raw, list) else []:
        if not isinstance(entry, dict):
            continue
        text = str(entry.get(key, "")).strip()
        if text:
            items.append(RankedSuggestion(text=text, relevance=_relevance(entry.get("relevance"))))
    return sorted(items, key=lambda s: s.relevance, reverse=True)


@dataclass
class ResearchResult:
    """Market research for one topic; stored on Project.research_data."""
    market_summary: str = ""
    keywords: list[RankedSuggestion] = field(default_factory=list)
    titles: list[RankedSuggestion] = field(default_factory=list)
    subtitles: list[RankedSuggestion] = field(default_factory=list)

    def top_keywords(self, limit: int = 7) -> list[str]:
        return [k.text for k in self.keywords[:limit]]

    def to_dict(self) -> dict:
        return {
            "market_summary": self.market_summary,
            "keywords": [k.to_dict() for k in self.keywords],
            "titles": [t.to_dict() for t in self.titles],
            "subtitles": [s.to_dict() for s in self.subtitles],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ResearchResult":
        return cls(
            market_summary=data.get("market_summary") or "",
            keywords=[RankedSuggestion.from_dict(k) for k in data.get("keywords") or []],
            titles=[RankedSuggestion.from_dict(t) for t in data.get("titles") or []],
            subtitles=[RankedSuggestion.from_dict(s) for s in data.get("subtitles") or []],
        )


@dataclass
class Trend:
    topic: str
    reason: str = ""
    trend_score: float = 0.0


class ResearchAgent(BaseAgent):
    """Market research helpers used before a book is outlined."""

    prompt_name = "research"

    async def research_topic(self, topic: str) -> ResearchResult:
        """Research keywords, titles and subtitles for ``topic``.

        Raises:
            InvalidInputError: ``topic`` is blank.
            ProviderResponseParseError: The response is not a JSON object.
        """
        if not topic.strip():
            raise InvalidInputError("Research topic is required")
        prompt = self._section("Research", topic=topic.strip())
        text = await self._generate_text(prompt, self.settings.llm_model_research)
        data = parse_json_object(text)

        result = ResearchResult(
            market_summary=str(data.get("marketSummary", "")).strip(),
            keywords=_ranked(data.get("keywords"), "keyword"),
            titles=_ranked(data.get("titles"), "title"),
            subtitles=_ranked(data.get("subtitles"), "subtitle"),
        )
        logger.info(
            "Research for '%s': %d keywords, %d titles, %d subtitles",
            topic, len(result.keywords), len(result.titles), len(result.subtitles),
        )
        return result

    async def discover_trends(self, period: str) -> list[Trend]:
        """Return trending non-fiction topics for ``period``, strongest first."""
        prompt = self._section("Trends", period=period)
        text = await self._generate_text(prompt, self.settings.llm_model_research)

        trends = []
        for entry in parse_json_array(text):
            if not isinstance(entry, dict) or not str(entry.get("topic", "")).strip():
                continue
            trends.append(Trend(
                topic=str(entry["topic"]).strip(),
                reason=str(entry.get("reason", "")).strip(),
                trend_score=_relevance(entry.get("trendScore")),
            ))
        trends.sort(key=lambda t: t.trend_score, reverse=True)
        logger.info("Discovered %d trend(s) for '%s'", len(trends), period)
        return trends

    async def fetch_categories(self) -> list[str]:
        """Top-level store categories, sorted; a built-in list on failure."""
        try:
            text = await self._generate_text(self._section("Categories"), self.settings.llm_model_research)
            categories = sorted({str(c).strip() for c in parse_json_array(text) if str(c).strip()})
        except ProviderError as e:
            logger.warning("Category lookup failed, using built-in list: %s", e)
            return list(DEFAULT_CATEGORIES)
        return categories or list(DEFAULT_CATEGORIES)


def research_from_project(data: Optional[dict]) -> Optional[ResearchResult]:
    """Rebuild a ResearchResult from ``Project.research_data``."""
    return ResearchResult.from_dict(data) if data else None
