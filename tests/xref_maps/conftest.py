"""Shared fixtures for the xref_maps test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Iterator

import httpx
import pytest

from DocsXRef.XRefMaps.net import reset_http_client
from DocsXRef.XRefMaps.settings import DownloaderSettings
from DocsXRef.XRefMaps.testing import render_map, sample_map_payload


@pytest.fixture(autouse=True)
def _reset_shared_client() -> Iterator[None]:
    reset_http_client()
    yield
    reset_http_client()


@pytest.fixture
def settings() -> DownloaderSettings:
    return DownloaderSettings()


@pytest.fixture
def search_dirs(tmp_path: Path) -> Dict[str, Path]:
    """Create ``repo`` (primary) and ``shared`` (fallback) folders under tmp_path."""

    dirs = {"repo": tmp_path / "repo", "shared": tmp_path / "shared"}
    for folder in dirs.values():
        folder.mkdir()
    return dirs


@pytest.fixture
def map_server() -> Callable[..., httpx.MockTransport]:
    """Return a factory building a MockTransport that serves path -> (status, body)."""

    def factory(routes: Dict[str, object]) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            route = routes.get(request.url.path)
            if route is None:
                return httpx.Response(404, text="missing")
            if isinstance(route, httpx.Response):
                return route
            if isinstance(route, dict):
                fmt = "json" if request.url.path.lower().endswith(".json") else "yaml"
                return httpx.Response(200, text=render_map(route, fmt))
            return httpx.Response(200, text=str(route))

        return httpx.MockTransport(handler)

    return factory


@pytest.fixture
def payload() -> dict:
    return sample_map_payload("System.String", "System.Int32")
