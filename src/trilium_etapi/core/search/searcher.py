"""Search notes through ETAPI and map the results."""

from collections.abc import Mapping
from typing import Any, Literal

from loguru import logger

from trilium_etapi.api import EtapiError
from trilium_etapi.core.mapping.mapper import MappingConfig, NoteMapper
from trilium_etapi.core.search.query import QueryNode, build_search_query
from trilium_etapi.models.note import MappingFailure, Note, SearchAndMapResult
from trilium_etapi.protocols import ApiProtocol


def build_full_query(
    query: str | Mapping[str, Any] | QueryNode,
    *,
    limit: int | None = None,
    order_by: str | None = None,
    order_direction: Literal["asc", "desc"] | None = None,
    fast_search: bool = False,
) -> str:
    """Build the search string, with ordering, limit and fast-search options appended."""
    search_query = query if isinstance(query, str) else build_search_query(query)

    options: list[str] = []
    if order_by:
        options.append(f"orderBy:{order_by}")
        if order_direction:
            options.append(order_direction)
    if limit:
        options.append(f"limit:{limit}")
    if fast_search:
        options.append("fastSearch")

    return f"{search_query} {' '.join(options)}" if options else search_query


def search_and_map(
    api: ApiProtocol,
    *,
    query: str | Mapping[str, Any] | QueryNode,
    mapping: MappingConfig | NoteMapper[Any],
    limit: int | None = None,
    order_by: str | None = None,
    order_direction: Literal["asc", "desc"] | None = None,
    fast_search: bool = False,
) -> SearchAndMapResult:
    """Search notes and map each result, collecting per-note failures.

    Args:
        api: ETAPI client.
        query: Search string or condition tree for ``build_search_query``.
        mapping: Mapping config, or a ready ``NoteMapper``.
        limit: Max results.
        order_by: Note property to order by, e.g. ``dateModified``.
        order_direction: ``asc`` or ``desc``; only used with ``order_by``.
        fast_search: Skip content search on the server.

    Returns:
        Mapped notes in result order, and the notes that failed to map.

    Raises:
        EtapiError: The search request failed or returned no result list.
        QueryBuildError: ``query`` is an invalid condition tree.
    """
    full_query = build_full_query(
        query,
        limit=limit,
        order_by=order_by,
        order_direction=order_direction,
        fast_search=fast_search,
    )
    logger.debug("Searching: {!r}", full_query)

    response = api.search(full_query)
    if response.error is not None:
        raise EtapiError(response.error)
    if not isinstance(response.data, Mapping) or response.data.get("results") is None:
        raise EtapiError("No results returned from search")

    mapper = mapping if isinstance(mapping, NoteMapper) else NoteMapper(mapping)

    data: list[Any] = []
    failures: list[MappingFailure] = []
    for raw in response.data["results"]:
        note: Note | None = None
        try:
            note = Note.from_dict(raw)
            mapped = mapper.map_one(note)
        except Exception as e:
            failures.append(_failure(raw if note is None else note, str(e)))
            continue
        if mapped is None:
            failures.append(_failure(note, "Mapping returned undefined"))
        else:
            data.append(mapped)

    if failures:
        logger.warning("{} of {} notes failed to map", len(failures), len(failures) + len(data))
    return SearchAndMapResult(data=data, failures=failures)


def _failure(note: Any, reason: str) -> MappingFailure:
    if not isinstance(note, Note):
        raw = dict(note) if isinstance(note, Mapping) else {}
        return MappingFailure(
            note_id=raw.get("noteId") or "unknown",
            note_title=raw.get("title") or "Untitled",
            reason=reason,
            note=raw,
        )
    return MappingFailure(
        note_id=note.note_id or "unknown",
        note_title=note.title or "Untitled",
        reason=reason,
        note=note,
    )
