"""Lookup-by-id index over the two-level chapter tree."""

from dataclasses import dataclass
from typing import Optional, Union

from config.exceptions import InvalidInputError
from models.book import BookStructure, Chapter, SubChapter
from models.enums import NodeKind

Node = Union[Chapter, SubChapter]


@dataclass(frozen=True)
class NodeRef:
    """Position of a node in the tree, tagged with its level."""
    kind: NodeKind
    chapter_index: int
    subchapter_index: Optional[int] = None
    parent_id: Optional[str] = None

    @property
    def is_chapter(self) -> bool:
        return self.kind is NodeKind.CHAPTER

    def resolve(self, structure: BookStructure) -> Node:
        chapter = structure.chapters[self.chapter_index]
        if self.is_chapter:
            return chapter
        return chapter.subchapters[self.subchapter_index]


def build_node_index(structure: Optional[BookStructure]) -> dict[str, NodeRef]:
    """Map every chapter and subchapter id to its position.

    Raises:
        InvalidInputError: If an id occurs more than once in the tree.
    """
    index: dict[str, NodeRef] = {}
    if structure is None:
        return index

    def _add(node_id: str, ref: NodeRef) -> None:
        if node_id in index:
            raise InvalidInputError("Duplicate node id in book structure", {"node_id": node_id})
        index[node_id] = ref

    for ci, chapter in enumerate(structure.chapters):
        _add(chapter.id, NodeRef(NodeKind.CHAPTER, ci))
        for si, sub in enumerate(chapter.subchapters):
            _add(sub.id, NodeRef(NodeKind.SUBCHAPTER, ci, si, parent_id=chapter.id))
    return index
