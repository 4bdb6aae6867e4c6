"""Testing utilities for exercising xref map acquisition without a network.

Provides :func:`use_mock_http_client`, which routes remote downloads through
an :class:`httpx.MockTransport`, and :func:`write_xref_map`, which writes a
map document in any supported format for local-search fixtures.
"""

from __future__ import annotations

import contextlib
import json
import zipfile
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional

import httpx
import yaml

from .net import configure_http_client, reset_http_client

__all__ = [
    "use_mock_http_client",
    "write_xref_map",
    "write_xref_archive",
    "sample_map_payload",
    "render_map",
]

YAML_MIME_HEADER = "### YamlMime:XRefMap\n"


@contextlib.contextmanager
def use_mock_http_client(transport: httpx.BaseTransport, **client_kwargs: Any) -> Iterator[httpx.Client]:
    """Temporarily install an HTTPX client backed by ``transport``."""

    client = httpx.Client(transport=transport, **client_kwargs)
    configure_http_client(client)
    try:
        yield client
    finally:
        reset_http_client()
        client.close()


def sample_map_payload(*uids: str, base_url: Optional[str] = None) -> dict:
    """Return a small map document with one reference per uid."""

    payload: dict = {
        "sorted": True,
        "references": [
            {"uid": uid, "name": uid.rsplit(".", 1)[-1], "href": f"{uid}.html"} for uid in uids or ("System.String",)
        ],
    }
    if base_url is not None:
        payload["baseUrl"] = base_url
    return payload


def render_map(payload: Mapping[str, Any], fmt: str) -> str:
    if fmt == "json":
        return json.dumps(payload, indent=2)
    return YAML_MIME_HEADER + yaml.safe_dump(dict(payload), sort_keys=False)


def write_xref_map(path: Path, payload: Mapping[str, Any]) -> Path:
    """Write ``payload`` to ``path`` as JSON for ``.json`` files, YAML otherwise."""

    path.parent.mkdir(parents=True, exist_ok=True)
    fmt = "json" if path.suffix.lower() == ".json" else "yaml"
    path.write_text(render_map(payload, fmt), encoding="utf-8")
    return path


def write_xref_archive(path: Path, entries: Mapping[str, Mapping[str, Any]]) -> Path:
    """Write a zip archive with one map document per entry name."""

    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        for name, payload in entries.items():
            fmt = "json" if name.lower().endswith(".json") else "yaml"
            archive.writestr(name, render_map(payload, fmt))
    return path
