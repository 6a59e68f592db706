"""Declarative mapping of Trilium notes onto caller-defined shapes.

A mapping config assigns each output field a source::

    mapper = NoteMapper(
        {
            "title": "note.title",
            "slug": Field("#slug", required=True),
            "word_count": Field("#wordCount", transform=transforms.number, default=0),
            "read_time": Computed(lambda partial, note: math.ceil(partial["word_count"] / 200)),
        }
    )
    posts = mapper.map(notes)

Source strings are parsed once, when the mapper is built:

- ``#name``: value of the first label called ``name``
- ``~name``: value of the first relation called ``name``
- ``note.a.b``: walk attributes/keys of the note itself; wire names such as
  ``note.utcDateCreated`` fall back to the snake_case attribute
- a callable: called with the note

Direct fields are resolved first, computed fields afterwards. Computed
functions get a read-only view of the direct fields only, so one computed
field cannot read another.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Generic, TypeVar, Union, overload

from loguru import logger

from trilium_etapi.models.note import Note, snake_case

T = TypeVar("T")


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()
"""Marks an unset ``default``; ``None`` is a legal default value."""

TransformFunction = Callable[[Any, Note], Any]
ExtractorFunction = Callable[[Note], Any]
ComputedFunction = Callable[[Mapping[str, Any], Note], Any]


class MappingError(ValueError):
    """Raised when a required field cannot be resolved for a note."""


@dataclass(frozen=True)
class Field:
    """Map a field from a source path or extractor function."""

    source: str | ExtractorFunction
    transform: TransformFunction | None = None
    default: Any = MISSING
    required: bool = False


@dataclass(frozen=True)
class Computed:
    """Derive a field from the directly mapped fields."""

    fn: ComputedFunction
    default: Any = MISSING


FieldMapping = Union[str, Field, Computed, Mapping[str, Any]]
MappingConfig = Mapping[str, FieldMapping | None]


# --- Parsed sources ---


@dataclass(frozen=True)
class LabelSource:
    name: str

    def resolve(self, note: Note) -> Any:
        return _find_attribute(note, "label", self.name)


@dataclass(frozen=True)
class RelationSource:
    name: str

    def resolve(self, note: Note) -> Any:
        return _find_attribute(note, "relation", self.name)


@dataclass(frozen=True)
class PropertySource:
    path: tuple[str, ...]

    def resolve(self, note: Note) -> Any:
        obj: Any = note
        for part in self.path:
            if obj is None:
                return None
            if isinstance(obj, Mapping):
                obj = obj.get(part)
            elif hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                obj = getattr(obj, snake_case(part), None)
        return obj


@dataclass(frozen=True)
class ExtractorSource:
    fn: ExtractorFunction

    def resolve(self, note: Note) -> Any:
        return self.fn(note)


@dataclass(frozen=True)
class NoSource:
    """A path with no known prefix; always resolves to None."""

    path: str

    def resolve(self, note: Note) -> Any:
        return None


Source = Union[LabelSource, RelationSource, PropertySource, ExtractorSource, NoSource]


def _find_attribute(note: Note, attr_type: str, name: str) -> str | None:
    for attr in note.attributes:
        if attr.type == attr_type and attr.name == name:
            return attr.value
    return None


def parse_source(source: str | ExtractorFunction) -> Source:
    """Parse a source path (``#label``, ``~relation``, ``note.path``) or wrap a callable."""
    if callable(source):
        return ExtractorSource(source)
    if source.startswith("#"):
        return LabelSource(source[1:])
    if source.startswith("~"):
        return RelationSource(source[1:])
    if source.startswith("note."):
        return PropertySource(tuple(source[len("note.") :].split(".")))
    return NoSource(source)


@dataclass(frozen=True)
class CompiledField:
    name: str
    source: Source
    transform: TransformFunction | None = None
    default: Any = MISSING
    required: bool = False


@dataclass(frozen=True)
class CompiledComputed:
    name: str
    fn: ComputedFunction
    default: Any = MISSING


def compile_field(name: str, mapping: FieldMapping) -> CompiledField | CompiledComputed:
    """Normalize one config entry into its compiled form."""
    if isinstance(mapping, str):
        return CompiledField(name, parse_source(mapping))
    if isinstance(mapping, Computed):
        return CompiledComputed(name, mapping.fn, mapping.default)
    if isinstance(mapping, Field):
        return CompiledField(
            name, parse_source(mapping.source), mapping.transform, mapping.default, mapping.required
        )
    if isinstance(mapping, Mapping):
        if "computed" in mapping:
            return CompiledComputed(name, mapping["computed"], mapping.get("default", MISSING))
        if "from" in mapping:
            return CompiledField(
                name,
                parse_source(mapping["from"]),
                mapping.get("transform"),
                mapping.get("default", MISSING),
                bool(mapping.get("required", False)),
            )
    msg = f"Invalid mapping for field {name!r}: {mapping!r}"
    raise TypeError(msg)


class NoteMapper(Generic[T]):
    """Maps Trilium notes to dicts, or to ``target`` instances when one is given.

    Args:
        config: Field name to mapping (path string, ``Field``, ``Computed`` or dict form).
        target: Optional callable receiving the mapped fields as keyword arguments,
            e.g. a dataclass.
    """

    def __init__(self, config: MappingConfig, target: Callable[..., T] | None = None) -> None:
        self.config = config
        self.target = target
        self._fields: list[CompiledField] = []
        self._computed: list[CompiledComputed] = []
        for name, mapping in config.items():
            if mapping is None:
                continue
            compiled = compile_field(name, mapping)
            if isinstance(compiled, CompiledComputed):
                self._computed.append(compiled)
            else:
                self._fields.append(compiled)

    @staticmethod
    def merge(*configs: MappingConfig) -> dict[str, FieldMapping | None]:
        """Merge configs by field name; later configs replace earlier entries whole."""
        merged: dict[str, FieldMapping | None] = {}
        for config in configs:
            for name, mapping in config.items():
                merged[name] = mapping
        return merged

    @overload
    def map(self, notes: Note | Mapping[str, Any]) -> T: ...

    @overload
    def map(self, notes: Sequence[Note | Mapping[str, Any]]) -> list[T]: ...

    def map(
        self, notes: Note | Mapping[str, Any] | Sequence[Note | Mapping[str, Any]]
    ) -> T | list[T]:
        """Map one note, or each note of a list in order.

        Raw ETAPI note records (dicts) are accepted alongside ``Note`` objects.
        """
        if isinstance(notes, (Note, Mapping)):
            return self.map_one(notes)
        return [self.map_one(note) for note in notes]

    def map_one(self, note: Note | Mapping[str, Any]) -> T:
        """Map a single note or raw ETAPI note record.

        Raises:
            MappingError: A required field resolved to None.
        """
        if isinstance(note, Mapping):
            note = Note.from_dict(dict(note))
        result: dict[str, Any] = {}

        for fld in self._fields:
            value = fld.source.resolve(note)
            if fld.transform is not None:
                value = fld.transform(value, note)
            if value is None and fld.default is not MISSING:
                value = fld.default
            if fld.required and value is None:
                msg = f"Required field '{fld.name}' missing from note {note.note_id} ({note.title})"
                raise MappingError(msg)
            result[fld.name] = value

        if self._computed:
            partial = MappingProxyType(dict(result))
            for computed in self._computed:
                value = computed.fn(partial, note)
                if value is None and computed.default is not MISSING:
                    value = computed.default
                result[computed.name] = value

        logger.debug("Mapped note {} to {} fields", note.note_id, len(result))
        if self.target is None:
            return result  # type: ignore[return-value]
        return self.target(**result)


TriliumMapper = NoteMapper
