"""Typed client for the Trilium Notes ETAPI, with a search-query builder and note mapper."""

from trilium_etapi.api import ApiResponse, EtapiError, TriliumApi
from trilium_etapi.core.mapping import transforms
from trilium_etapi.core.mapping.mapper import (
    MISSING,
    Computed,
    Field,
    MappingConfig,
    MappingError,
    NoteMapper,
    TriliumMapper,
)
from trilium_etapi.core.mapping.standard import STANDARD_NOTE_MAPPING, StandardNote, standard_mapping
from trilium_etapi.core.search.query import (
    ConditionValue,
    QueryBuildError,
    build_search_query,
    parse_query,
)
from trilium_etapi.core.search.searcher import search_and_map
from trilium_etapi.models.note import (
    AppInfo,
    Attachment,
    Attribute,
    Branch,
    MappingFailure,
    Note,
    SearchAndMapResult,
)
from trilium_etapi.protocols import ApiProtocol

__all__ = [
    "MISSING",
    "STANDARD_NOTE_MAPPING",
    "ApiProtocol",
    "ApiResponse",
    "AppInfo",
    "Attachment",
    "Attribute",
    "Branch",
    "Computed",
    "ConditionValue",
    "EtapiError",
    "Field",
    "MappingConfig",
    "MappingError",
    "MappingFailure",
    "Note",
    "NoteMapper",
    "QueryBuildError",
    "SearchAndMapResult",
    "StandardNote",
    "TriliumApi",
    "TriliumMapper",
    "build_search_query",
    "parse_query",
    "search_and_map",
    "standard_mapping",
    "transforms",
]
