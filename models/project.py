"""Project aggregate root."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from models.book import BookStructure, ContentBlock, generate_id
from models.enums import LayoutTemplate, PageSize

# Fields held in memory only; dropped from persisted snapshots to save space
TRANSIENT_FIELDS = ("cover_options",)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def next_timestamp(previous: Optional[datetime]) -> datetime:
    """Return a timestamp strictly greater than ``previous``."""
    now = utc_now()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


@dataclass
class Project:
    """One authored book: metadata, chapter tree and content blocks."""
    id: str = field(default_factory=generate_id)
    project_title: str = ""
    book_title: str = ""
    topic: str = ""
    subtitle: str = ""
    author: str = ""
    description: str = ""
    metadata_keywords: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    research_data: Optional[dict] = None
    selected_sources: list[dict] = field(default_factory=list)
    book_structure: Optional[BookStructure] = None
    content_blocks: list[ContentBlock] = field(default_factory=list)
    authors_archive: list[str] = field(default_factory=list)
    layout_template: LayoutTemplate = LayoutTemplate.CLASSIC
    page_size: PageSize = PageSize.SIX_BY_NINE
    cover_image: Optional[str] = None
    cover_options: list[str] = field(default_factory=list)
    last_saved: datetime = field(default_factory=utc_now)

    def to_dict(self, include_transient: bool = False) -> dict:
        data = {
            "id": self.id,
            "project_title": self.project_title,
            "book_title": self.book_title,
            "topic": self.topic,
            "subtitle": self.subtitle,
            "author": self.author,
            "description": self.description,
            "metadata_keywords": list(self.metadata_keywords),
            "categories": list(self.categories),
            "research_data": self.research_data,
            "selected_sources": list(self.selected_sources),
            "book_structure": self.book_structure.to_dict() if self.book_structure else None,
            "content_blocks": [b.to_dict() for b in self.content_blocks],
            "authors_archive": list(self.authors_archive),
            "layout_template": self.layout_template.value,
            "page_size": self.page_size.value,
            "cover_image": self.cover_image,
            "cover_options": list(self.cover_options),
            "last_saved": self.last_saved.isoformat(),
        }
        if not include_transient:
            for name in TRANSIENT_FIELDS:
                data.pop(name)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        structure = data.get("book_structure")
        last_saved = data.get("last_saved")
        return cls(
            id=data["id"],
            project_title=data.get("project_title") or "",
            book_title=data.get("book_title") or "",
            topic=data.get("topic") or "",
            subtitle=data.get("subtitle") or "",
            author=data.get("author") or "",
            description=data.get("description") or "",
            metadata_keywords=list(data.get("metadata_keywords") or []),
            categories=list(data.get("categories") or []),
            research_data=data.get("research_data"),
            selected_sources=list(data.get("selected_sources") or []),
            book_structure=BookStructure.from_dict(structure) if structure else None,
            content_blocks=[ContentBlock.from_dict(b) for b in data.get("content_blocks") or []],
            authors_archive=list(data.get("authors_archive") or []),
            layout_template=LayoutTemplate(data.get("layout_template") or LayoutTemplate.CLASSIC.value),
            page_size=PageSize(data.get("page_size") or PageSize.SIX_BY_NINE.value),
            cover_image=data.get("cover_image"),
            cover_options=[],
            last_saved=datetime.fromisoformat(last_saved) if last_saved else utc_now(),
        )
