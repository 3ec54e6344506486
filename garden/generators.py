"""
Meta and relation generators.

Two strategy shapes are registered by key in the index configuration:

    MetaGenerator:      (node) -> value
        Runs once per page, in isolation. The return value is stored at
        ``node.meta[key]``.

    RelationGenerator:  (nodes) -> nodes
        Runs once over the whole collection, after every meta generator
        and after any relation generator declared before it. It must
        return the same pages (by slug), annotated with new meta entries.

Usage:
    config = RelationsConfig(
        content=Path("content"),
        meta_generators={"mentions": mentions, "reading_time": reading_time},
        relation_generators={"mentioned_in": mentioned_in()},
    )
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from .links import extract_internal_links, link_to_slug
from .page import PageNode

MetaGenerator = Callable[[PageNode], Any]
RelationGenerator = Callable[[List[PageNode]], List[PageNode]]

WORDS_PER_MINUTE = 200

_WORD_PATTERN = re.compile(r"[\w'’-]+", re.UNICODE)
_MARKUP_PATTERN = re.compile(r"<[^>]+>|^(?:import|export)\s.*$", re.MULTILINE)


# ============================================================================
# Meta generators
# ============================================================================


def mentions(node: PageNode) -> List[str]:
    """Internal pages this page links to, as ``/slug`` strings."""
    links = extract_internal_links(node.content)
    own = node.url
    return [link for link in links if link != own]


def word_count(node: PageNode) -> int:
    text = _MARKUP_PATTERN.sub(" ", node.content)
    return len(_WORD_PATTERN.findall(text))


def reading_time(node: PageNode) -> int:
    """Estimated reading time in whole minutes, at least 1."""
    return max(1, math.ceil(word_count(node) / WORDS_PER_MINUTE))


# ============================================================================
# Relation generators
# ============================================================================


def mentioned_in(source_key: str = "mentions", target_key: str = "mentioned_in") -> RelationGenerator:
    """Build a generator storing, per page, the slugs of pages that link to it.

    Args:
        source_key: Meta key holding each page's outbound ``/slug`` links
        target_key: Meta key to write the inbound slugs to

    Returns:
        RelationGenerator. Pages without inbound links get an empty list.

    Example:
        A links to /b, B links nowhere:
            B.meta["mentioned_in"] == ["a"]
            A.meta["mentioned_in"] == []
    """

    def generate(nodes: List[PageNode]) -> List[PageNode]:
        inbound: Dict[str, List[str]] = {node.slug: [] for node in nodes}

        for node in nodes:
            for link in node.meta.get(source_key) or []:
                target = link_to_slug(link)
                if target == node.slug or target not in inbound:
                    continue
                if node.slug not in inbound[target]:
                    inbound[target].append(node.slug)

        for node in nodes:
            node.meta[target_key] = inbound[node.slug]
        return nodes

    return generate


def chronological_neighbors(
    date_key: str = "date",
    previous_key: str = "previous",
    next_key: str = "next",
    section: bool = True,
) -> RelationGenerator:
    """Build a generator linking each dated page to its older/newer neighbor.

    Pages are ordered by ``frontmatter[date_key]``; with ``section`` set,
    only pages sharing the first slug segment are neighbors (top-level
    pages form one section). Undated pages get None for both keys.
    Collection order is left unchanged.
    """

    def generate(nodes: List[PageNode]) -> List[PageNode]:
        groups: Dict[str, List[PageNode]] = {}
        for node in nodes:
            node.meta[previous_key] = None
            node.meta[next_key] = None
            when = _as_datetime(node.frontmatter.get(date_key))
            if when is None:
                continue
            group = node.params[0] if section and len(node.params) > 1 else ""
            groups.setdefault(group, []).append(node)

        for members in groups.values():
            members.sort(key=lambda n: (_as_datetime(n.frontmatter.get(date_key)), n.slug))
            for index, node in enumerate(members):
                if index > 0:
                    node.meta[previous_key] = members[index - 1].slug
                if index + 1 < len(members):
                    node.meta[next_key] = members[index + 1].slug
        return nodes

    return generate


def _as_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return None


DEFAULT_META_GENERATORS: Dict[str, MetaGenerator] = {
    "mentions": mentions,
    "word_count": word_count,
    "reading_time": reading_time,
}


def default_relation_generators() -> Dict[str, RelationGenerator]:
    return {"mentioned_in": mentioned_in()}
