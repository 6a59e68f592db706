"""Fields every mapped note type shares, and their mapping."""

from dataclasses import dataclass
from datetime import datetime

from trilium_etapi.core.mapping import transforms
from trilium_etapi.core.mapping.mapper import Field, FieldMapping, MappingConfig, NoteMapper


@dataclass(frozen=True)
class StandardNote:
    """Base fields for mapped note types; subclass it to add your own."""

    id: str
    title: str
    date_created_utc: datetime
    date_last_modified_utc: datetime


STANDARD_NOTE_MAPPING: dict[str, FieldMapping] = {
    "id": Field("note.note_id", required=True),
    "title": Field("note.title", required=True),
    "date_created_utc": Field("note.utc_date_created", transform=transforms.date, required=True),
    "date_last_modified_utc": Field(
        "note.utc_date_modified", transform=transforms.date, required=True
    ),
}


def standard_mapping(custom: MappingConfig) -> dict[str, FieldMapping | None]:
    """Merge ``custom`` over ``STANDARD_NOTE_MAPPING``."""
    return NoteMapper.merge(STANDARD_NOTE_MAPPING, custom)
