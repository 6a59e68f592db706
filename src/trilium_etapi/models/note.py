"""Domain models for Trilium ETAPI records."""

import dataclasses
import re
from dataclasses import dataclass, field
from typing import Any, Literal

AttributeType = Literal["label", "relation"]

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def _wire_kwargs(cls: type[Any], data: dict[str, Any]) -> dict[str, Any]:
    """Pick the camelCase wire keys that correspond to dataclass fields of ``cls``."""
    names = {f.name for f in dataclasses.fields(cls)}
    return {snake_case(key): value for key, value in data.items() if snake_case(key) in names}


@dataclass(frozen=True)
class Attribute:
    """A label or relation attached to a note."""

    type: AttributeType
    name: str
    value: str = ""
    attribute_id: str | None = None
    note_id: str | None = None
    position: int | None = None
    is_inheritable: bool = False
    utc_date_modified: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Attribute":
        return cls(**_wire_kwargs(cls, data))


@dataclass(frozen=True)
class Note:
    """A Trilium note as returned by ETAPI."""

    note_id: str
    title: str = ""
    type: str | None = None
    mime: str | None = None
    is_protected: bool = False
    blob_id: str | None = None
    attributes: tuple[Attribute, ...] = ()
    parent_note_ids: tuple[str, ...] = ()
    child_note_ids: tuple[str, ...] = ()
    parent_branch_ids: tuple[str, ...] = ()
    child_branch_ids: tuple[str, ...] = ()
    date_created: str | None = None
    date_modified: str | None = None
    utc_date_created: str | None = None
    utc_date_modified: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Note":
        """Build a note from its ETAPI JSON form."""
        kwargs = _wire_kwargs(cls, data)
        kwargs.setdefault("note_id", "")
        kwargs["attributes"] = tuple(
            Attribute.from_dict(attr) for attr in data.get("attributes") or ()
        )
        for key in ("parent_note_ids", "child_note_ids", "parent_branch_ids", "child_branch_ids"):
            kwargs[key] = tuple(kwargs.get(key) or ())
        return cls(**kwargs)

    def labels(self) -> tuple[Attribute, ...]:
        return tuple(attr for attr in self.attributes if attr.type == "label")

    def relations(self) -> tuple[Attribute, ...]:
        return tuple(attr for attr in self.attributes if attr.type == "relation")


@dataclass(frozen=True)
class Branch:
    """Placement of a note under a parent note."""

    branch_id: str | None = None
    note_id: str | None = None
    parent_note_id: str | None = None
    prefix: str | None = None
    note_position: int | None = None
    is_expanded: bool = False
    utc_date_modified: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Branch":
        return cls(**_wire_kwargs(cls, data))


@dataclass(frozen=True)
class Attachment:
    """A file or image owned by a note."""

    attachment_id: str | None = None
    owner_id: str | None = None
    role: str | None = None
    mime: str | None = None
    title: str | None = None
    position: int | None = None
    blob_id: str | None = None
    date_modified: str | None = None
    utc_date_modified: str | None = None
    utc_date_scheduled_for_erasure_since: str | None = None
    content_length: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Attachment":
        return cls(**_wire_kwargs(cls, data))


@dataclass(frozen=True)
class AppInfo:
    """Server build and version information."""

    app_version: str | None = None
    db_version: int | None = None
    sync_version: int | None = None
    build_date: str | None = None
    build_revision: str | None = None
    data_directory: str | None = None
    clipper_protocol_version: int | str | None = None
    utc_date_time: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppInfo":
        return cls(**_wire_kwargs(cls, data))


@dataclass(frozen=True)
class EtapiErrorBody:
    """Error payload returned by ETAPI for non-2xx responses."""

    status: int
    code: str | None = None
    message: str | None = None

    @classmethod
    def from_response(cls, status: int, body: Any) -> "EtapiErrorBody":
        """Build an error from a decoded response body, which may not be JSON."""
        if isinstance(body, dict):
            return cls(
                status=int(body.get("status", status)),
                code=body.get("code"),
                message=body.get("message"),
            )
        return cls(status=status, message=str(body) if body else None)

    def __str__(self) -> str:
        parts = [str(self.status)]
        if self.code:
            parts.append(self.code)
        if self.message:
            parts.append(self.message)
        return " ".join(parts)


@dataclass(frozen=True)
class MappingFailure:
    """A note that could not be mapped during a search-and-map run."""

    note_id: str
    note_title: str
    reason: str
    note: Note | dict[str, Any]


@dataclass(frozen=True)
class SearchAndMapResult:
    """Mapped search results, with failures kept apart."""

    data: list[Any] = field(default_factory=list)
    failures: list[MappingFailure] = field(default_factory=list)
