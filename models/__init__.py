"""Models package: document tree, project, persistence, and enums."""

from models.book import BookStructure, Chapter, ContentBlock, SubChapter, generate_id
from models.project import Project
from models.structure import NodeRef, build_node_index
from models.identity import Identity, StaticIdentity
from models.database import MemorySnapshotStore, PersistenceAdapter, SqliteSnapshotStore
from models.document_store import DocumentStore
from models.enums import (
    ContentBlockType,
    ToneOfVoice,
    TargetAudience,
    WritingStyle,
    LayoutTemplate,
    PageSize,
    TextAction,
    NodeKind,
)

__all__ = [
    "BookStructure",
    "Chapter",
    "ContentBlock",
    "SubChapter",
    "generate_id",
    "Project",
    "NodeRef",
    "build_node_index",
    "Identity",
    "StaticIdentity",
    "MemorySnapshotStore",
    "PersistenceAdapter",
    "SqliteSnapshotStore",
    "DocumentStore",
    "ContentBlockType",
    "ToneOfVoice",
    "TargetAudience",
    "WritingStyle",
    "LayoutTemplate",
    "PageSize",
    "TextAction",
    "NodeKind",
]
