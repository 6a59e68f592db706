"""Protocols for dependency injection of the ETAPI transport."""

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from trilium_etapi.api import ApiResponse


@runtime_checkable
class ApiProtocol(Protocol):
    """Protocol for ETAPI clients."""

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: str | bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> "ApiResponse":
        """Invoke an endpoint and return its decoded response."""
        ...

    def search(self, query: str, limit: int | None = None) -> "ApiResponse":
        """Run a search query against ``GET /notes``."""
        ...
