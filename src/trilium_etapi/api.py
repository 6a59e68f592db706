"""Trilium ETAPI HTTP client."""

from dataclasses import dataclass
from typing import Any

import requests
from loguru import logger

from trilium_etapi.config import DEFAULT_TIMEOUT, ETAPI_PREFIX, resolve_api_key, resolve_base_url
from trilium_etapi.models.note import EtapiErrorBody


class EtapiError(RuntimeError):
    """An ETAPI call that returned an error response."""

    def __init__(self, error: EtapiErrorBody | str) -> None:
        self.error = error if isinstance(error, EtapiErrorBody) else None
        super().__init__(f"ETAPI request failed: {error}")


@dataclass(frozen=True)
class ApiResponse:
    """Outcome of one ETAPI request: ``data`` on success, ``error`` otherwise."""

    status_code: int
    data: Any = None
    error: EtapiErrorBody | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> Any:
        """Return ``data``, or raise ``EtapiError`` for an error response."""
        if self.error is not None:
            raise EtapiError(self.error)
        return self.data


class TriliumApi:
    """Thin ETAPI client: forwards the token and base URL, decodes responses.

    Network failures from requests propagate; HTTP error statuses are returned
    as ``ApiResponse.error`` rather than raised.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        *,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = resolve_base_url(base_url).rstrip("/") + ETAPI_PREFIX
        self.api_key = resolve_api_key(api_key)
        self.timeout = timeout
        self.sess = session or requests.Session()

        logger.debug("API ready: base_url {!r}, timeout {!r}", self.base_url, self.timeout)

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
        """Invoke an ETAPI endpoint, e.g. ``request("GET", "/notes/root")``."""
        url = self.base_url + "/" + path.lstrip("/")
        logger.debug("Making request: {} {} {}", method, url, repr(params)[:64])

        r = self.sess.request(
            method,
            url,
            params=params,
            json=json,
            data=data,
            headers={"Authorization": self.api_key, **(headers or {})},
            timeout=self.timeout,
        )
        body = _decode_body(r)
        if not 200 <= r.status_code < 300:
            error = EtapiErrorBody.from_response(r.status_code, body)
            logger.debug("Request failed: {} {} -> {}", method, url, error)
            return ApiResponse(status_code=r.status_code, error=error)
        return ApiResponse(status_code=r.status_code, data=body)

    def search(self, query: str, limit: int | None = None) -> ApiResponse:
        """Run a search; ``data`` is ``{"results": [...]}``."""
        params: dict[str, Any] = {"search": query}
        if limit is not None:
            params["limit"] = limit
        return self.request("GET", "/notes", params=params)

    # --- Notes ---

    def app_info(self) -> ApiResponse:
        return self.request("GET", "/app-info")

    def get_note(self, note_id: str) -> ApiResponse:
        return self.request("GET", f"/notes/{note_id}")

    def create_note(
        self,
        *,
        parent_note_id: str,
        title: str,
        type: str = "text",
        content: str = "",
        **extra: Any,
    ) -> ApiResponse:
        """Create a note; ``data`` holds ``{"note": ..., "branch": ...}``.

        Extra keyword arguments are sent as-is (``mime``, ``notePosition``, ...).
        """
        body = {
            "parentNoteId": parent_note_id,
            "title": title,
            "type": type,
            "content": content,
            **extra,
        }
        return self.request("POST", "/create-note", json=body)

    def patch_note(self, note_id: str, changes: dict[str, Any]) -> ApiResponse:
        return self.request("PATCH", f"/notes/{note_id}", json=changes)

    def delete_note(self, note_id: str) -> ApiResponse:
        return self.request("DELETE", f"/notes/{note_id}")

    def get_note_content(self, note_id: str) -> ApiResponse:
        return self.request("GET", f"/notes/{note_id}/content")

    def put_note_content(self, note_id: str, content: str) -> ApiResponse:
        return self.request(
            "PUT",
            f"/notes/{note_id}/content",
            data=content.encode("utf-8"),
            headers={"Content-Type": "text/plain"},
        )

    # --- Branches ---

    def create_branch(self, branch: dict[str, Any]) -> ApiResponse:
        return self.request("POST", "/branches", json=branch)

    def get_branch(self, branch_id: str) -> ApiResponse:
        return self.request("GET", f"/branches/{branch_id}")

    def patch_branch(self, branch_id: str, changes: dict[str, Any]) -> ApiResponse:
        return self.request("PATCH", f"/branches/{branch_id}", json=changes)

    def delete_branch(self, branch_id: str) -> ApiResponse:
        return self.request("DELETE", f"/branches/{branch_id}")

    # --- Attributes ---

    def create_attribute(self, attribute: dict[str, Any]) -> ApiResponse:
        return self.request("POST", "/attributes", json=attribute)

    def get_attribute(self, attribute_id: str) -> ApiResponse:
        return self.request("GET", f"/attributes/{attribute_id}")

    def patch_attribute(self, attribute_id: str, changes: dict[str, Any]) -> ApiResponse:
        return self.request("PATCH", f"/attributes/{attribute_id}", json=changes)

    def delete_attribute(self, attribute_id: str) -> ApiResponse:
        return self.request("DELETE", f"/attributes/{attribute_id}")

    # --- Attachments ---

    def get_attachment(self, attachment_id: str) -> ApiResponse:
        return self.request("GET", f"/attachments/{attachment_id}")

    def delete_attachment(self, attachment_id: str) -> ApiResponse:
        return self.request("DELETE", f"/attachments/{attachment_id}")


def _decode_body(r: requests.Response) -> Any:
    if not r.content:
        return None
    content_type = r.headers.get("Content-Type", "")
    if "json" in content_type:
        try:
            return r.json()
        except ValueError:
            return r.text
    return r.text
