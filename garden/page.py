"""
Page records for the garden content index.

A ContentFile is what discovery finds on disk; a PageNode is what the
build pipeline produces from it and then enriches with derived meta.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ContentFile:
    """A content file discovered under the content root."""
    path: Path
    slug: str
    sort_key: str

    @property
    def segments(self) -> List[str]:
        return self.slug.split("/") if self.slug else []


@dataclass
class PageNode:
    """Represents one content file after parsing and enrichment."""
    slug: str
    params: List[str]
    frontmatter: Dict[str, Any]
    content: str  # Raw body, frontmatter removed
    meta: Dict[str, Any] = field(default_factory=dict)
    path: Optional[Path] = None
    sort_key: str = ""

    @classmethod
    def from_file(cls, content_file: ContentFile, frontmatter: Dict[str, Any], body: str) -> "PageNode":
        return cls(
            slug=content_file.slug,
            params=content_file.segments,
            frontmatter=frontmatter,
            content=body,
            path=content_file.path,
            sort_key=content_file.sort_key,
        )

    @property
    def url(self) -> str:
        """Site-relative URL of the page (e.g. ``/garden/next-mdx-relations``)."""
        return "/" + self.slug

    def clone(self) -> "PageNode":
        """Deep copy handed to generators so they cannot touch the index."""
        return copy.deepcopy(self)

    def to_dict(self, include_content: bool = False) -> Dict[str, Any]:
        data = {
            "slug": self.slug,
            "params": list(self.params),
            "frontmatter": copy.deepcopy(self.frontmatter),
            "meta": copy.deepcopy(self.meta),
        }
        if include_content:
            data["content"] = self.content
        return data
