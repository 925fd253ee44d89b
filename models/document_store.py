"""Canonical in-memory project plus its per-identity snapshot archive.

All mutations follow the same discipline: compute a new value from the
current one, stamp ``last_saved``, install it in a single step, then write
the whole archive through the persistence adapter. A failed write never
rolls back memory; the error is raised to the caller after the new state is
installed.
"""

import json
import logging
from dataclasses import fields, replace
from typing import Any, Optional, Union

from config.exceptions import (
    InvalidInputError,
    NoActiveProjectError,
    PersistenceCapacityExceededError,
    ProjectNotFoundError,
    UnresolvedNodeIdError,
)
from config.settings import Settings
from models.book import BookStructure, Chapter, ContentBlock, SubChapter, generate_id
from models.database import PersistenceAdapter
from models.enums import ContentBlockType
from models.identity import Identity
from models.project import Project, next_timestamp
from models.structure import Node, NodeRef, build_node_index

logger = logging.getLogger(__name__)

# Fields only the store itself may set
_PROTECTED_FIELDS = {"id", "last_saved", "book_structure", "content_blocks"}
_PROJECT_FIELDS = {f.name for f in fields(Project)}


class DocumentStore:
    """Active project, archive, and the structural mutation API."""

    def __init__(
        self,
        adapter: PersistenceAdapter,
        identity: Identity,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or Settings()
        self._adapter = adapter
        self._identity = identity
        self._project: Optional[Project] = None
        self._archive: list[Project] = []
        self._index: dict[str, NodeRef] = {}
        self.reload_archive()

    # ---- Keys ----

    def _archive_key(self) -> Optional[str]:
        namespace = self._identity.namespace()
        return f"{self.settings.archive_key_prefix}-{namespace}" if namespace else None

    def _authors_key(self) -> Optional[str]:
        namespace = self._identity.namespace()
        return f"{self.settings.authors_key_prefix}-{namespace}" if namespace else None

    # ---- Read access ----

    @property
    def project(self) -> Optional[Project]:
        return self._project

    @property
    def archived_projects(self) -> list[Project]:
        return list(self._archive)

    @property
    def is_project_started(self) -> bool:
        return self._project is not None

    def _require_project(self) -> Project:
        if self._project is None:
            raise NoActiveProjectError()
        return self._project

    def _resolve(self, node_id: str) -> NodeRef:
        ref = self._index.get(node_id)
        if ref is None:
            raise UnresolvedNodeIdError(node_id)
        return ref

    def find_node(self, node_id: str) -> tuple[Node, Chapter]:
        """Return ``(node, parent_chapter)``; a chapter is its own parent."""
        project = self._require_project()
        ref = self._resolve(node_id)
        chapter = project.book_structure.chapters[ref.chapter_index]
        return ref.resolve(project.book_structure), chapter

    # ---- Archive hydration / persistence ----

    def reload_archive(self) -> None:
        """(Re)load the archive for the current identity.

        Without a namespace all state is cleared. A corrupt snapshot is
        removed and treated as an empty archive.
        """
        key = self._archive_key()
        if key is None:
            self._project = None
            self._archive = []
            self._index = {}
            return

        raw = self._adapter.get(key)
        if raw is None:
            self._archive = []
            return
        try:
            parsed = json.loads(raw)
            if not isinstance(parsed, list):
                raise ValueError("archive snapshot is not a list")
            self._archive = [Project.from_dict(p) for p in parsed]
        except (ValueError, KeyError, TypeError, InvalidInputError) as e:
            logger.error("Error parsing project archive '%s': %s", key, e)
            self._adapter.delete(key)
            self._archive = []
            return
        logger.info("Loaded %d archived project(s) for '%s'", len(self._archive), key)

    def _persist_archive(self, key: str) -> None:
        snapshot = json.dumps(
            [p.to_dict(include_transient=False) for p in self._archive],
            ensure_ascii=False,
        )
        try:
            self._adapter.set(key, snapshot)
        except PersistenceCapacityExceededError:
            logger.error(
                "Storage capacity exceeded; changes kept in memory only. "
                "Delete old or unused projects to free up space."
            )
            raise

    def _install(self, updated: Project, index: Optional[dict[str, NodeRef]] = None) -> Optional[Project]:
        key = self._archive_key()
        if key is None:
            logger.warning("No identity namespace; mutation of project %s ignored", updated.id)
            return None

        archive = list(self._archive)
        for i, existing in enumerate(archive):
            if existing.id == updated.id:
                archive[i] = updated
                break
        else:
            archive.append(updated)

        self._project = updated
        self._archive = archive
        if index is not None:
            self._index = index
        self._persist_archive(key)
        return updated

    def _commit(self, **changes: Any) -> Optional[Project]:
        current = self._require_project()
        index = None
        if "book_structure" in changes:
            index = build_node_index(changes["book_structure"])
        updated = replace(current, **changes, last_saved=next_timestamp(current.last_saved))
        return self._install(updated, index)

    # ---- Project lifecycle ----

    def start_new_project(self, title: str) -> Optional[Project]:
        """Create, activate and archive a fresh project."""
        key = self._archive_key()
        if key is None:
            logger.warning("No identity namespace; cannot start project '%s'", title)
            return None

        project = Project(
            project_title=title,
            topic=title,
            authors_archive=self._load_authors(),
        )
        self._project = None
        self._install(project, index={})
        logger.info("Started project %s ('%s')", project.id, title)
        return project

    def load_project(self, project_id: str) -> Project:
        for project in self._archive:
            if project.id == project_id:
                index = build_node_index(project.book_structure)
                self._project = project
                self._index = index
                return project
        raise ProjectNotFoundError(project_id)

    def end_current_project(self) -> None:
        self._project = None
        self._index = {}

    def delete_project(self, project_id: str) -> None:
        """Remove a project from the archive; the active pointer is untouched."""
        key = self._archive_key()
        if key is None:
            return
        self._archive = [p for p in self._archive if p.id != project_id]
        self._persist_archive(key)
        logger.info("Project %s deleted from archive", project_id)

    def update_project(self, **updates: Any) -> Optional[Project]:
        """Update plain project fields (titles, metadata, layout, ...)."""
        unknown = set(updates) - _PROJECT_FIELDS
        if unknown:
            raise InvalidInputError("Unknown project fields", {"fields": sorted(unknown)})
        protected = set(updates) & _PROTECTED_FIELDS
        if protected:
            raise InvalidInputError("Fields cannot be set directly", {"fields": sorted(protected)})
        return self._commit(**updates)

    # ---- Authors archive ----

    def _load_authors(self) -> list[str]:
        key = self._authors_key()
        raw = self._adapter.get(key) if key else None
        if not raw:
            return []
        try:
            authors = json.loads(raw)
        except ValueError:
            logger.error("Error parsing authors archive '%s'", key)
            return []
        return [a for a in authors if isinstance(a, str)]

    def add_author_to_archive(self, author: str) -> None:
        project = self._require_project()
        name = author.strip()
        key = self._authors_key()
        if not name or key is None or name in project.authors_archive:
            return
        authors = [*project.authors_archive, name]
        # Written first so it survives a failed archive write
        self._adapter.set(key, json.dumps(authors, ensure_ascii=False))
        self._commit(authors_archive=authors)

    # ---- Chapter tree ----

    def _structure(self) -> BookStructure:
        project = self._require_project()
        return project.book_structure or BookStructure()

    def set_book_structure(self, structure: Union[BookStructure, dict]) -> Optional[Project]:
        """Replace the whole tree, hydrating missing content to ``""``."""
        if isinstance(structure, BookStructure):
            structure = structure.to_dict()
        return self._commit(book_structure=BookStructure.from_dict(structure))

    def _with_node(self, node_id: str, **changes: Any) -> BookStructure:
        structure = self._structure()
        ref = self._resolve(node_id)
        chapters = list(structure.chapters)
        chapter = chapters[ref.chapter_index]
        if ref.is_chapter:
            chapters[ref.chapter_index] = replace(chapter, **changes)
        else:
            subchapters = list(chapter.subchapters)
            subchapters[ref.subchapter_index] = replace(subchapters[ref.subchapter_index], **changes)
            chapters[ref.chapter_index] = replace(chapter, subchapters=subchapters)
        return BookStructure(chapters=chapters)

    def update_node_content(self, node_id: str, content: str) -> Optional[Project]:
        """Replace the content of one chapter or subchapter.

        Raises:
            UnresolvedNodeIdError: No node has ``node_id``; nothing changes.
        """
        self._require_project()
        return self._commit(book_structure=self._with_node(node_id, content=content))

    def _resolve_kind(self, node_id: str, chapter: bool) -> NodeRef:
        ref = self._resolve(node_id)
        if ref.is_chapter != chapter:
            raise UnresolvedNodeIdError(node_id)
        return ref

    def update_chapter_title(self, chapter_id: str, title: str) -> Optional[Project]:
        self._require_project()
        self._resolve_kind(chapter_id, chapter=True)
        return self._commit(book_structure=self._with_node(chapter_id, title=title))

    def update_subchapter_title(self, subchapter_id: str, title: str) -> Optional[Project]:
        self._require_project()
        self._resolve_kind(subchapter_id, chapter=False)
        return self._commit(book_structure=self._with_node(subchapter_id, title=title))

    def add_chapter(self, title: str = "") -> Chapter:
        structure = self._structure()
        chapter = Chapter(id=generate_id(), title=title)
        self._commit(book_structure=BookStructure(chapters=[*structure.chapters, chapter]))
        return chapter

    def delete_chapter(self, chapter_id: str) -> Optional[Project]:
        structure = self._structure()
        self._resolve_kind(chapter_id, chapter=True)
        chapters = [ch for ch in structure.chapters if ch.id != chapter_id]
        return self._commit(book_structure=BookStructure(chapters=chapters))

    def add_subchapter(self, chapter_id: str, title: str = "") -> SubChapter:
        structure = self._structure()
        ref = self._resolve_kind(chapter_id, chapter=True)
        sub = SubChapter(id=generate_id(), title=title)
        chapters = list(structure.chapters)
        chapter = chapters[ref.chapter_index]
        chapters[ref.chapter_index] = replace(chapter, subchapters=[*chapter.subchapters, sub])
        self._commit(book_structure=BookStructure(chapters=chapters))
        return sub

    def delete_subchapter(self, subchapter_id: str) -> Optional[Project]:
        structure = self._structure()
        ref = self._resolve_kind(subchapter_id, chapter=False)
        chapters = list(structure.chapters)
        chapter = chapters[ref.chapter_index]
        chapters[ref.chapter_index] = replace(
            chapter, subchapters=[s for s in chapter.subchapters if s.id != subchapter_id]
        )
        return self._commit(book_structure=BookStructure(chapters=chapters))

    def reorder_structure(self, dragged_id: str, target_id: str) -> bool:
        """Move ``dragged_id`` to the position of ``target_id``.

        Only siblings move: two chapters, or two subchapters of the same
        chapter. Anything else (same id, mixed levels, different parents,
        unknown ids) leaves the tree untouched and returns False.
        """
        project = self._require_project()
        if project.book_structure is None or dragged_id == target_id:
            return False
        dragged = self._index.get(dragged_id)
        target = self._index.get(target_id)
        if dragged is None or target is None or dragged.kind != target.kind:
            return False

        chapters = list(project.book_structure.chapters)
        if dragged.is_chapter:
            moved = chapters.pop(dragged.chapter_index)
            chapters.insert(target.chapter_index, moved)
        else:
            if dragged.parent_id != target.parent_id:
                return False
            chapter = chapters[dragged.chapter_index]
            subchapters = list(chapter.subchapters)
            moved = subchapters.pop(dragged.subchapter_index)
            subchapters.insert(target.subchapter_index, moved)
            chapters[dragged.chapter_index] = replace(chapter, subchapters=subchapters)

        self._commit(book_structure=BookStructure(chapters=chapters))
        return True

    # ---- Content blocks ----

    def add_content_block(
        self,
        block_type: ContentBlockType,
        title: str = "",
        text_content: str = "",
        image: Optional[str] = None,
    ) -> ContentBlock:
        project = self._require_project()
        block = ContentBlock(
            id=generate_id(), type=block_type, title=title, text_content=text_content, image=image,
        )
        self._commit(content_blocks=[*project.content_blocks, block])
        return block

    def update_content_block(self, block: ContentBlock) -> Optional[Project]:
        project = self._require_project()
        if not any(b.id == block.id for b in project.content_blocks):
            raise UnresolvedNodeIdError(block.id)
        blocks = [block if b.id == block.id else b for b in project.content_blocks]
        return self._commit(content_blocks=blocks)

    def delete_content_block(self, block_id: str) -> Optional[Project]:
        project = self._require_project()
        if not any(b.id == block_id for b in project.content_blocks):
            raise UnresolvedNodeIdError(block_id)
        return self._commit(content_blocks=[b for b in project.content_blocks if b.id != block_id])
