"""Fake implementations for testing against ETAPI."""

from typing import Any

from trilium_etapi.api import ApiResponse
from trilium_etapi.models.note import Note


class FakeApi:
    """In-memory fake for TriliumApi.

    Stores predefined responses and records all calls for assertions.
    """

    def __init__(self) -> None:
        self.responses: dict[tuple[str, str], ApiResponse] = {}
        self.calls: list[tuple[str, str, dict[str, Any] | None]] = []

    def add_response(
        self, method: str, path: str, data: Any = None, *, status_code: int = 200
    ) -> None:
        """Register a successful response for a method and path."""
        self.responses[(method, path)] = ApiResponse(status_code=status_code, data=data)

    def add_error(self, method: str, path: str, response: ApiResponse) -> None:
        """Register an error response for a method and path."""
        self.responses[(method, path)] = response

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: str | bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> ApiResponse:
        """Return the predefined response and record the call."""
        self.calls.append((method, path, params))
        if (method, path) not in self.responses:
            msg = f"FakeApi: no response registered for {method} {path!r}"
            raise KeyError(msg)
        return self.responses[(method, path)]

    def search(self, query: str, limit: int | None = None) -> ApiResponse:
        params: dict[str, Any] = {"search": query}
        if limit is not None:
            params["limit"] = limit
        return self.request("GET", "/notes", params=params)

    @property
    def search_queries(self) -> list[str]:
        return [params["search"] for _method, path, params in self.calls if params and path == "/notes"]


def make_note_dict(
    note_id: str = "note1",
    title: str = "Getting Started",
    *,
    labels: dict[str, str] | None = None,
    relations: dict[str, str] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Create an ETAPI note record with the given labels and relations."""
    attributes: list[dict[str, Any]] = []
    for name, value in (labels or {}).items():
        attributes.append(
            {"attributeId": f"a-{name}", "noteId": note_id, "type": "label", "name": name, "value": value}
        )
    for name, value in (relations or {}).items():
        attributes.append(
            {"attributeId": f"r-{name}", "noteId": note_id, "type": "relation", "name": name, "value": value}
        )
    return {
        "noteId": note_id,
        "title": title,
        "type": "text",
        "mime": "text/html",
        "isProtected": False,
        "blobId": f"blob-{note_id}",
        "attributes": attributes,
        "parentNoteIds": ["root"],
        "childNoteIds": [],
        "parentBranchIds": [f"root_{note_id}"],
        "childBranchIds": [],
        "dateCreated": "2024-01-15 10:00:00.000+0000",
        "dateModified": "2024-01-20 15:30:00.000+0000",
        "utcDateCreated": "2024-01-15 10:00:00.000Z",
        "utcDateModified": "2024-01-20 15:30:00.000Z",
        **extra,
    }


def make_note(
    note_id: str = "note1",
    title: str = "Getting Started",
    *,
    labels: dict[str, str] | None = None,
    relations: dict[str, str] | None = None,
    **extra: Any,
) -> Note:
    return Note.from_dict(make_note_dict(note_id, title, labels=labels, relations=relations, **extra))
