"""
Garden module for Markdown/MDX content relations.

This module provides functionality for:
- Discovering content files and deriving their slugs
- Parsing YAML frontmatter
- Deriving per-page meta (mentions, word count, reading time)
- Deriving cross-page relations (mentioned in, previous/next)
- Querying pages for static path/prop generation

Content layout:
    content/
        garden/01-next-mdx-relations.mdx   - slug garden/next-mdx-relations
        posts/2021-recap.md                - slug posts/2021-recap

Frontmatter format:
    ---
    title: Next MDX Relations
    date: 2021-04-02
    tags: [mdx, nextjs]
    draft: false
    ---

Usage:
    from garden import RelationsConfig, create_relations, mentions, mentioned_in

    garden = create_relations(RelationsConfig(
        content=Path("content"),
        meta_generators={"mentions": mentions},
        relation_generators={"mentioned_in": mentioned_in()},
    ))

    paths = garden.list_paths()
    props = garden.get_page_props("garden/next-mdx-relations")
    tags = garden.get_paths_by_prop("tags")
"""

from .frontmatter_parser import parse_frontmatter, split_frontmatter, ParseError
from .page import ContentFile, PageNode
from .discovery import discover_files, derive_slug
from .links import extract_links, extract_internal_links, normalize_link
from .generators import (
    MetaGenerator,
    RelationGenerator,
    chronological_neighbors,
    mentioned_in,
    mentions,
    reading_time,
    word_count,
)
from .config import RelationsConfig, load_config
from .builder import ContentIndex, GeneratorError, NotFoundError, Relations, create_relations

__all__ = [
    "parse_frontmatter",
    "split_frontmatter",
    "ParseError",
    "ContentFile",
    "PageNode",
    "discover_files",
    "derive_slug",
    "extract_links",
    "extract_internal_links",
    "normalize_link",
    "MetaGenerator",
    "RelationGenerator",
    "chronological_neighbors",
    "mentioned_in",
    "mentions",
    "reading_time",
    "word_count",
    "RelationsConfig",
    "load_config",
    "ContentIndex",
    "GeneratorError",
    "NotFoundError",
    "Relations",
    "create_relations",
]

__version__ = "1.0.0"
