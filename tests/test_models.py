"""Tests for document tree, project and identity models."""

import json
from datetime import timedelta

import pytest


class TestBookStructure:
    def test_from_dict_hydrates_missing_fields(self):
        from models.book import BookStructure
        structure = BookStructure.from_dict({
            "chapters": [{"id": "c1", "title": "One", "subchapters": [{"id": "s1"}]}]
        })
        chapter = structure.chapters[0]
        assert chapter.content == ""
        assert chapter.subchapters[0].title == ""
        assert chapter.subchapters[0].content == ""

    def test_from_dict_fills_missing_ids(self):
        from models.book import BookStructure
        structure = BookStructure.from_dict({"chapters": [{"title": "One"}, {"title": "Two"}]})
        ids = [ch.id for ch in structure.chapters]
        assert all(i.startswith("id_") for i in ids)
        assert ids[0] != ids[1]

    def test_missing_chapters_list_rejected(self):
        from config.exceptions import InvalidInputError
        from models.book import BookStructure
        with pytest.raises(InvalidInputError):
            BookStructure.from_dict({"title": "no chapters"})

    def test_subchapter_cannot_nest(self):
        from config.exceptions import InvalidInputError
        from models.book import BookStructure
        with pytest.raises(InvalidInputError):
            BookStructure.from_dict({
                "chapters": [{"id": "c1", "subchapters": [{"id": "s1", "subchapters": [{"id": "x"}]}]}]
            })


class TestContentBlock:
    def test_type_round_trip(self):
        from models.book import ContentBlock
        from models.enums import ContentBlockType
        block = ContentBlock(type=ContentBlockType.RECIPE, title="Pasta", text_content="Boil water")
        restored = ContentBlock.from_dict(block.to_dict())
        assert restored == block
        assert block.to_dict()["type"] == "recipe"


class TestProject:
    def test_snapshot_omits_transient_fields(self):
        from models.project import Project
        project = Project(project_title="P", cover_options=["data:image/png;base64,AAA"])
        assert "cover_options" not in project.to_dict()
        assert project.to_dict(include_transient=True)["cover_options"] == ["data:image/png;base64,AAA"]

    def test_json_snapshot_restores(self):
        from models.book import BookStructure
        from models.project import Project
        project = Project(
            project_title="P",
            topic="Olive oil",
            book_structure=BookStructure.from_dict({"chapters": [{"id": "c1", "title": "Intro"}]}),
            metadata_keywords=["olive", "oil"],
        )
        restored = Project.from_dict(json.loads(json.dumps(project.to_dict())))
        assert restored.id == project.id
        assert restored.book_structure.chapters[0].title == "Intro"
        assert restored.last_saved == project.last_saved
        assert restored.cover_options == []

    def test_next_timestamp_strictly_increases(self):
        from models.project import next_timestamp, utc_now
        future = utc_now() + timedelta(seconds=60)
        assert next_timestamp(future) > future
        assert next_timestamp(None) is not None


class TestNodeIndex:
    def test_index_positions(self):
        from models.book import BookStructure
        from models.enums import NodeKind
        from models.structure import build_node_index
        structure = BookStructure.from_dict({
            "chapters": [
                {"id": "a", "title": "A", "subchapters": [{"id": "a1"}, {"id": "a2"}]},
                {"id": "b", "title": "B"},
            ]
        })
        index = build_node_index(structure)
        assert index["b"].kind is NodeKind.CHAPTER
        assert index["b"].chapter_index == 1
        assert index["a2"].subchapter_index == 1
        assert index["a2"].parent_id == "a"
        assert index["a2"].resolve(structure).id == "a2"

    def test_duplicate_ids_rejected(self):
        from config.exceptions import InvalidInputError
        from models.book import BookStructure
        from models.structure import build_node_index
        structure = BookStructure.from_dict({
            "chapters": [{"id": "dup", "subchapters": [{"id": "dup"}]}]
        })
        with pytest.raises(InvalidInputError):
            build_node_index(structure)

    def test_empty_structure(self):
        from models.structure import build_node_index
        assert build_node_index(None) == {}


class TestIdentity:
    def test_user_namespace(self):
        from models.identity import StaticIdentity
        assert StaticIdentity(user_id="u42").namespace() == "u42"

    def test_guest_when_auth_disabled(self):
        from models.identity import StaticIdentity
        assert StaticIdentity().namespace() == "guest"

    def test_none_when_signed_out(self):
        from models.identity import StaticIdentity
        assert StaticIdentity(auth_enabled=True).namespace() is None
