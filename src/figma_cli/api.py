"""Figma REST API client."""

import re
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar
from urllib.parse import urlparse

import requests
from loguru import logger

from figma_cli.config import API_BASE_URL
from figma_cli.errors import FigmaApiError, InputError
from figma_cli.protocols import ApiProtocol

T = TypeVar("T")

_URL_PATH_KEY = re.compile(r"/(?:file|design|proto|board|slides)/([a-zA-Z0-9]+)")
_PARTIAL_URL_KEY = re.compile(r"figma\.com/(?:file|design|proto|board|slides)/([a-zA-Z0-9]+)")
_BARE_KEY = re.compile(r"\b([a-zA-Z0-9]{10,})\b")


class FigmaApi:
    """Thin Figma API client. Token is passed in, never looked up here."""

    def __init__(self, token: str, *, base_url: str = API_BASE_URL, timeout: float = 60.0) -> None:
        self.api_token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.sess = requests.Session()
        logger.debug(f"API ready: base_url {self.base_url!r}")

    def call(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """GET ``path`` relative to the API base URL, return json."""
        logger.debug(f"Making request: {path!r} {params!r}")
        r = self.sess.get(
            f"{self.base_url}/{path.lstrip('/')}",
            params=params or None,
            headers={"X-Figma-Token": self.api_token},
            timeout=self.timeout,
        )
        if not r.ok:
            raise FigmaApiError(r.status_code, r.text)
        rv: dict[str, Any] = r.json()
        return rv

    def download(self, url: str) -> bytes | None:
        """Download a rendered image. Image URLs are pre-signed, no token is sent."""
        r = self.sess.get(url, timeout=self.timeout)
        if not r.ok:
            logger.debug(f"Download failed ({r.status_code}): {url!r}")
            return None
        return r.content


def fetch_all(*thunks: Callable[[], T]) -> list[T]:
    """Run independent fetches in parallel and return their results in order.

    The first exception raised by any fetch propagates.
    """
    if len(thunks) <= 1:
        return [thunk() for thunk in thunks]
    with ThreadPoolExecutor(max_workers=len(thunks)) as executor:
        futures = [executor.submit(thunk) for thunk in thunks]
        return [f.result() for f in futures]


def parse_file_key(value: str) -> str:
    """Extract a file key from a bare key, a Figma URL, or text containing one."""
    text = value.strip()
    if re.fullmatch(r"[a-zA-Z0-9]+", text):
        return text

    parsed = urlparse(text)
    if parsed.scheme and parsed.netloc:
        match = _URL_PATH_KEY.search(parsed.path)
        if match:
            return match.group(1)

    for pattern in (_PARTIAL_URL_KEY, _BARE_KEY):
        match = pattern.search(text)
        if match:
            return match.group(1)

    msg = f"Invalid Figma file key or URL: {value}"
    raise InputError(msg)


# --- Endpoints ---


def get_file(
    api: ApiProtocol,
    file_key: str,
    *,
    depth: int | None = None,
    node_ids: list[str] | None = None,
) -> dict[str, Any]:
    params: dict[str, Any] = {}
    if depth:
        params["depth"] = depth
    if node_ids:
        params["ids"] = ",".join(node_ids)
    return api.call(f"files/{file_key}", params)


def get_file_nodes(api: ApiProtocol, file_key: str, node_ids: list[str]) -> dict[str, Any]:
    return api.call(f"files/{file_key}/nodes", {"ids": ",".join(node_ids)})


def get_images(
    api: ApiProtocol,
    file_key: str,
    node_ids: list[str],
    *,
    fmt: str = "png",
    scale: float = 1,
) -> dict[str, Any]:
    return api.call(
        f"images/{file_key}",
        {"ids": ",".join(node_ids), "format": fmt, "scale": scale},
    )


def get_local_variables(api: ApiProtocol, file_key: str) -> dict[str, Any]:
    return api.call(f"files/{file_key}/variables/local")


def get_comments(api: ApiProtocol, file_key: str) -> dict[str, Any]:
    return api.call(f"files/{file_key}/comments")


def get_versions(api: ApiProtocol, file_key: str) -> dict[str, Any]:
    return api.call(f"files/{file_key}/versions")
