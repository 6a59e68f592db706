"""Render note subtrees as markdown."""

import io

from trilium_etapi.models.note import Note
from trilium_etapi.protocols import ApiProtocol


def render_note_tree(
    api: ApiProtocol,
    *,
    note_id: str = "root",
    max_depth: int | None = 3,
) -> str:
    """Render a note and its descendants as indented markdown.

    Each note is fetched with ``GET /notes/{id}``; children are walked in
    ``childNoteIds`` order.

    Args:
        api: ETAPI client.
        note_id: The root note to start rendering from.
        max_depth: Max levels below the start note to include (None = unlimited).

    Returns:
        Markdown string with bullet-list hierarchy.
    """
    out = io.StringIO()
    _render(api, out, note_id, depth=0, max_depth=max_depth)
    return out.getvalue()


def _render(
    api: ApiProtocol, out: io.StringIO, note_id: str, *, depth: int, max_depth: int | None
) -> None:
    indent = "    " * depth
    response = api.request("GET", f"/notes/{note_id}")
    if response.error is not None or not isinstance(response.data, dict):
        out.write(f"{indent}- [error fetching {note_id}]\n")
        return

    note = Note.from_dict(response.data)
    suffix = f" [{note.type}]" if note.type else ""
    out.write(f"{indent}- {note.title or '(untitled)'}{suffix}\n")

    if not note.child_note_ids:
        return

    # Truncation indicator when children are cut off by max_depth
    if max_depth is not None and depth >= max_depth:
        count = len(note.child_note_ids)
        noun = "child" if count == 1 else "children"
        out.write(f"{indent}    - ... ({count} more {noun}, id={note.note_id})\n")
        return

    for child_id in note.child_note_ids:
        _render(api, out, child_id, depth=depth + 1, max_depth=max_depth)
