"""Tests for NoteMapper."""

import dataclasses
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import pytest

from tests.unit.fakes import make_note, make_note_dict
from trilium_etapi.core.mapping import transforms
from trilium_etapi.core.mapping.mapper import (
    Computed,
    ExtractorSource,
    Field,
    LabelSource,
    MappingError,
    NoSource,
    NoteMapper,
    PropertySource,
    RelationSource,
    TriliumMapper,
    parse_source,
)
from trilium_etapi.models.note import Note

# --- Sources ---


def test_parse_source_classifies_prefixes() -> None:
    assert parse_source("#slug") == LabelSource("slug")
    assert parse_source("~author") == RelationSource("author")
    assert parse_source("note.title") == PropertySource(("title",))
    assert parse_source("title") == NoSource("title")


def test_parse_source_wraps_callables() -> None:
    def extractor(note: Note) -> str:
        return note.title

    assert parse_source(extractor) == ExtractorSource(extractor)


# --- Basic mapping ---


def test_maps_note_properties_with_shorthand(blog_note: Note) -> None:
    mapper = NoteMapper({"id": "note.note_id", "title": "note.title", "kind": "note.type"})

    result = mapper.map(blog_note)

    assert result == {"id": "note1", "title": "Getting Started with Python", "kind": "text"}


def test_maps_label_attributes(blog_note: Note) -> None:
    mapper = NoteMapper({"slug": "#slug", "status": "#status"})

    result = mapper.map(blog_note)

    assert result == {"slug": "getting-started-python", "status": "published"}


def test_maps_relation_attributes(blog_note: Note) -> None:
    mapper = NoteMapper({"author_id": "~author"})

    assert mapper.map(blog_note) == {"author_id": "author1"}


def test_label_lookup_ignores_relations_with_same_name() -> None:
    note = make_note(labels={"author": "label-value"}, relations={"author": "relation-value"})
    mapper = NoteMapper({"label": "#author", "relation": "~author"})

    assert mapper.map(note) == {"label": "label-value", "relation": "relation-value"}


def test_label_lookup_uses_first_match() -> None:
    note = Note.from_dict(
        {
            "noteId": "n1",
            "title": "Dup",
            "attributes": [
                {"type": "label", "name": "tag", "value": "first"},
                {"type": "label", "name": "tag", "value": "second"},
            ],
        }
    )

    assert NoteMapper({"tag": "#tag"}).map(note) == {"tag": "first"}


def test_missing_attributes_and_paths_resolve_to_none(blog_note: Note) -> None:
    mapper = NoteMapper(
        {
            "missing_label": "#nope",
            "missing_relation": "~nope",
            "missing_property": "note.nope.deeper",
            "unknown_prefix": "title",
        }
    )

    assert mapper.map(blog_note) == {
        "missing_label": None,
        "missing_relation": None,
        "missing_property": None,
        "unknown_prefix": None,
    }


def test_property_path_accepts_wire_field_names(blog_note: Note) -> None:
    mapper = NoteMapper({"id": "note.noteId", "created": "note.utcDateCreated"})

    result = mapper.map(blog_note)

    assert result == {"id": blog_note.note_id, "created": blog_note.utc_date_created}


def test_property_path_walks_into_nested_values(blog_note: Note) -> None:
    mapper = NoteMapper({"first_attr": "note.attributes", "parent": "note.parent_note_ids"})

    result = mapper.map(blog_note)

    assert result["parent"] == ("root",)
    assert result["first_attr"][0].name == "slug"


def test_none_config_entries_are_skipped(blog_note: Note) -> None:
    mapper = NoteMapper({"slug": "#slug", "unused": None})

    assert mapper.map(blog_note) == {"slug": "getting-started-python"}


# --- Transforms ---


def test_applies_transform_function(blog_note: Note) -> None:
    mapper = NoteMapper({"word_count": Field("#wordCount", transform=transforms.number)})

    assert mapper.map(blog_note) == {"word_count": 1000}


def test_custom_transform_receives_note(blog_note: Note) -> None:
    def with_title(value: Any, note: Note) -> str:
        return f"{note.title}: {value}"

    mapper = NoteMapper({"label": Field("#status", transform=with_title)})

    assert mapper.map(blog_note) == {"label": "Getting Started with Python: published"}


def test_dict_form_is_accepted(blog_note: Note) -> None:
    mapper = NoteMapper(
        {"tags": {"from": "#tags", "transform": transforms.comma_separated, "default": []}}
    )

    assert mapper.map(blog_note) == {"tags": ["python", "programming", "tutorial"]}


# --- Defaults ---


def test_uses_default_when_value_missing(blog_note: Note) -> None:
    mapper = NoteMapper({"category": Field("#category", default="uncategorized")})

    assert mapper.map(blog_note) == {"category": "uncategorized"}


def test_does_not_use_default_when_value_exists(blog_note: Note) -> None:
    mapper = NoteMapper({"status": Field("#status", default="draft")})

    assert mapper.map(blog_note) == {"status": "published"}


def test_default_applies_after_failed_transform() -> None:
    note = make_note(labels={"wordCount": "lots"})
    mapper = NoteMapper({"word_count": Field("#wordCount", transform=transforms.number, default=0)})

    assert mapper.map(note) == {"word_count": 0}


def test_none_is_a_valid_default_for_required_check() -> None:
    note = make_note()
    mapper = NoteMapper({"published_at": Field("#publishedAt", default=None, required=True)})

    with pytest.raises(MappingError):
        mapper.map(note)


# --- Required fields ---


def test_required_field_missing_raises_with_note_id_and_title() -> None:
    note = make_note("abc123", "Untagged Post")
    mapper = NoteMapper({"title": "note.title", "slug": Field("#slug", required=True)})

    with pytest.raises(MappingError) as exc_info:
        mapper.map(note)

    assert str(exc_info.value) == "Required field 'slug' missing from note abc123 (Untagged Post)"


def test_required_field_present_does_not_raise(blog_note: Note) -> None:
    mapper = NoteMapper({"slug": {"from": "#slug", "required": True}})

    assert mapper.map(blog_note) == {"slug": "getting-started-python"}


def test_required_default_satisfies_requirement() -> None:
    mapper = NoteMapper({"status": Field("#status", default="draft", required=True)})

    assert mapper.map(make_note()) == {"status": "draft"}


# --- Computed fields ---


def test_computes_value_from_mapped_fields(blog_note: Note) -> None:
    mapper = NoteMapper(
        {
            "read_time": Computed(lambda partial, note: math.ceil(partial["word_count"] / 200)),
            "word_count": Field("#wordCount", transform=transforms.number, default=0),
        }
    )

    assert mapper.map(blog_note) == {"word_count": 1000, "read_time": 5}


def test_computed_receives_note(blog_note: Note) -> None:
    mapper = NoteMapper({"upper": {"computed": lambda partial, note: note.title.upper()}})

    assert mapper.map(blog_note) == {"upper": "GETTING STARTED WITH PYTHON"}


def test_computed_uses_default_when_none(blog_note: Note) -> None:
    mapper = NoteMapper({"score": Computed(lambda partial, note: None, default=42)})

    assert mapper.map(blog_note) == {"score": 42}


def test_computed_sees_read_only_partial(blog_note: Note) -> None:
    seen: list[Mapping[str, Any]] = []

    def capture(partial: Mapping[str, Any], note: Note) -> int:
        seen.append(partial)
        return 1

    NoteMapper({"slug": "#slug", "one": Computed(capture)}).map(blog_note)

    with pytest.raises(TypeError):
        seen[0]["slug"] = "changed"  # type: ignore[index]


def test_computed_does_not_see_other_computed_fields(blog_note: Note) -> None:
    mapper = NoteMapper(
        {
            "first": Computed(lambda partial, note: "computed"),
            "second": Computed(lambda partial, note: partial.get("first")),
        }
    )

    assert mapper.map(blog_note) == {"first": "computed", "second": None}


# --- Custom extractors ---


def test_custom_extractor_function(blog_note: Note) -> None:
    mapper = NoteMapper(
        {
            "label_count": Field(lambda note: len(note.labels())),
            "has_author": {"from": lambda note: bool(note.relations())},
        }
    )

    assert mapper.map(blog_note) == {"label_count": 5, "has_author": True}


# --- Batches ---


def test_maps_list_of_notes_in_order() -> None:
    notes = [make_note(f"n{i}", f"Note {i}") for i in range(3)]
    mapper = NoteMapper({"id": "note.note_id"})

    result = mapper.map(notes)

    assert result == [{"id": "n0"}, {"id": "n1"}, {"id": "n2"}]


def test_batch_propagates_required_failure() -> None:
    notes = [make_note("ok", labels={"slug": "a"}), make_note("bad")]
    mapper = NoteMapper({"slug": Field("#slug", required=True)})

    with pytest.raises(MappingError, match="note bad"):
        mapper.map(notes)


def test_maps_raw_note_records() -> None:
    records = [
        make_note_dict("n1", "First", labels={"slug": "first"}),
        make_note_dict("n2", "Second", labels={"slug": "second"}),
    ]
    mapper = NoteMapper({"id": "note.note_id", "slug": "#slug"})

    assert mapper.map(records) == [{"id": "n1", "slug": "first"}, {"id": "n2", "slug": "second"}]


def test_single_raw_record_maps_as_one_note() -> None:
    mapper = NoteMapper({"title": "note.title", "slug": "#slug"})

    result = mapper.map(make_note_dict("n1", "Only", labels={"slug": "only"}))

    assert result == {"title": "Only", "slug": "only"}


def test_mapper_does_not_mutate_note(blog_note: Note) -> None:
    snapshot = dataclasses.replace(blog_note)

    NoteMapper({"slug": "#slug", "x": Computed(lambda p, n: 1)}).map(blog_note)

    assert blog_note == snapshot
    assert len(blog_note.attributes) == 6


# --- Targets ---


@dataclass(frozen=True)
class BlogPost:
    title: str
    slug: str
    published: bool


def test_target_builds_instances(blog_note: Note) -> None:
    mapper = NoteMapper(
        {
            "title": "note.title",
            "slug": "#slug",
            "published": Field("#published", transform=transforms.boolean, default=False),
        },
        target=BlogPost,
    )

    post = mapper.map(blog_note)

    assert post == BlogPost("Getting Started with Python", "getting-started-python", True)


# --- Merge ---


def test_merge_combines_configurations() -> None:
    merged = NoteMapper.merge({"id": "note.note_id"}, {"slug": "#slug"}, {"status": "#status"})

    assert merged == {"id": "note.note_id", "slug": "#slug", "status": "#status"}


def test_merge_later_configs_replace_whole_entries() -> None:
    base = {"status": Field("#status", default="draft", required=True), "id": "note.note_id"}
    override = {"status": "#state"}

    merged = TriliumMapper.merge(base, override)

    assert merged["status"] == "#state"
    assert list(merged) == ["status", "id"]


def test_config_is_kept_on_mapper() -> None:
    config = {"slug": "#slug"}
    assert NoteMapper(config).config is config


def test_invalid_mapping_raises_type_error() -> None:
    with pytest.raises(TypeError, match="Invalid mapping for field 'bad'"):
        NoteMapper({"bad": 42})  # type: ignore[dict-item]
