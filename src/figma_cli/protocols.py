"""Protocols for dependency injection in the CLI."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ApiProtocol(Protocol):
    """Protocol for Figma API clients."""

    def call(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """GET an API endpoint and return the JSON response."""
        ...

    def download(self, url: str) -> bytes | None:
        """Fetch a rendered asset, returning None when the download fails."""
        ...
