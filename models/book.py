"""Chapter tree and content block data models."""

import uuid
from dataclasses import dataclass, field
from typing import Any, Optional

from config.exceptions import InvalidInputError
from models.enums import ContentBlockType


def generate_id() -> str:
    """Return a fresh node/project id. Ids are never reused."""
    return f"id_{uuid.uuid4().hex}"


@dataclass
class SubChapter:
    """Second and last level of the chapter tree."""
    id: str = field(default_factory=generate_id)
    title: str = ""
    content: str = ""

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SubChapter":
        if data.get("subchapters"):
            raise InvalidInputError(
                "Subchapters cannot contain children",
                {"subchapter_id": data.get("id", "")},
            )
        return cls(
            id=data.get("id") or generate_id(),
            title=data.get("title") or "",
            content=data.get("content") or "",
        )


@dataclass
class Chapter:
    """Top-level chapter with its ordered subchapters."""
    id: str = field(default_factory=generate_id)
    title: str = ""
    content: str = ""
    subchapters: list[SubChapter] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "subchapters": [sub.to_dict() for sub in self.subchapters],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Chapter":
        return cls(
            id=data.get("id") or generate_id(),
            title=data.get("title") or "",
            content=data.get("content") or "",
            subchapters=[SubChapter.from_dict(s) for s in data.get("subchapters") or []],
        )


@dataclass
class BookStructure:
    """Ordered list of chapters."""
    chapters: list[Chapter] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"chapters": [ch.to_dict() for ch in self.chapters]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BookStructure":
        chapters = data.get("chapters")
        if not isinstance(chapters, list):
            raise InvalidInputError("Book structure requires a 'chapters' list")
        return cls(chapters=[Chapter.from_dict(ch) for ch in chapters])


@dataclass
class ContentBlock:
    """Flat appendix-like unit outside the chapter tree."""
    id: str = field(default_factory=generate_id)
    type: ContentBlockType = ContentBlockType.BONUS
    title: str = ""
    text_content: str = ""
    image: Optional[str] = None  # data URL

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "text_content": self.text_content,
            "image": self.image,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContentBlock":
        return cls(
            id=data.get("id") or generate_id(),
            type=ContentBlockType(data.get("type", ContentBlockType.BONUS.value)),
            title=data.get("title") or "",
            text_content=data.get("text_content") or "",
            image=data.get("image"),
        )
