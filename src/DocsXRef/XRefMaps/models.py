# === NAVMAP v1 ===
# {
#   "module": "DocsXRef.XRefMaps.models",
#   "purpose": "Pydantic models for cross-reference map documents and their entries",
#   "sections": [
#     {"id": "spec", "name": "XRefSpec", "anchor": "class-xrefspec", "kind": "class"},
#     {"id": "redirection", "name": "XRefMapRedirection", "anchor": "class-xrefmapredirection", "kind": "class"},
#     {"id": "map", "name": "XRefMap", "anchor": "class-xrefmap", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Typed models for cross-reference map documents.

An xref map is the YAML/JSON document a documentation build publishes so
other builds can link to its API pages. Each entry (:class:`XRefSpec`) maps a
``uid`` to an ``href``; relative hrefs resolve against the map's base URL.
Unknown keys are preserved so round-tripping a map never loses data emitted
by newer producers.
"""

from __future__ import annotations

from typing import List, Optional
from urllib.parse import urljoin, urlsplit

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

__all__ = ["XRefSpec", "XRefMapRedirection", "XRefMap"]


class XRefSpec(BaseModel):
    """Single cross-reference entry."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    uid: str
    name: Optional[str] = None
    href: Optional[str] = None
    full_name: Optional[str] = Field(default=None, alias="fullName")
    name_with_type: Optional[str] = Field(default=None, alias="nameWithType")
    comment_id: Optional[str] = Field(default=None, alias="commentId")


class XRefMapRedirection(BaseModel):
    """Points uids sharing ``uid_prefix`` at another map."""

    model_config = ConfigDict(populate_by_name=True)

    uid_prefix: Optional[str] = Field(default=None, alias="uidPrefix")
    href: Optional[str] = None


class XRefMap(BaseModel):
    """In-memory cross-reference map document.

    Attributes:
        sorted: Producer hint that ``references`` is ordered by uid.
        href_updated: Whether hrefs were already rewritten against ``base_url``.
        base_url: Prefix for relative hrefs. Accepts ``baseUrl``, ``base_url``
            or ``base`` on input and serializes as ``baseUrl``.
        redirections: Prefix-based pointers to other maps.
        references: The uid -> href entries.

    Examples:
        >>> m = XRefMap.model_validate({"baseUrl": "https://d.example/api/",
        ...     "references": [{"uid": "A", "href": "a.html"}]})
        >>> m.resolve("A").href
        'https://d.example/api/a.html'
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    sorted: Optional[bool] = None
    href_updated: Optional[bool] = Field(default=None, alias="hrefUpdated")
    base_url: Optional[str] = Field(
        default=None,
        alias="baseUrl",
        validation_alias=AliasChoices("baseUrl", "base_url", "base"),
    )
    redirections: List[XRefMapRedirection] = Field(default_factory=list)
    references: List[XRefSpec] = Field(default_factory=list)

    def resolve(self, uid: str) -> Optional[XRefSpec]:
        """Return the entry for ``uid`` with its href made absolute, if present."""

        spec = next((entry for entry in self.references if entry.uid == uid), None)
        if spec is None:
            return None
        href = self._absolute_href(spec.href)
        if href == spec.href:
            return spec
        return spec.model_copy(update={"href": href})

    def _absolute_href(self, href: Optional[str]) -> Optional[str]:
        if not href or not self.base_url or self.href_updated:
            return href
        if urlsplit(href).scheme:
            return href
        return urljoin(self.base_url, href)
