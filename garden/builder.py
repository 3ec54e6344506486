"""
Content index builder for garden collections.

Build pipeline:
1. Discover content files under the configured root
2. Parse frontmatter + body (files in parallel, joined in discovery order)
3. Meta generation, one isolated pass per page
4. Relation generation over the whole collection, in declared order
5. Swap the finished collection into the index

Query surface (what a static-site/routing layer consumes):
- list_paths()             one path descriptor per page
- list_pages()             frontmatter + meta of every page
- get_page_props(slug)     one page, body serialized
- get_paths_by_prop(key)   distinct values of a property across pages
"""

from __future__ import annotations

import copy
import json
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple, Union

from .config import RelationsConfig
from .discovery import discover_files
from .frontmatter_parser import ParseError, parse_frontmatter
from .page import ContentFile, PageNode
from .serializer import Serializer, render_markdown

logger = logging.getLogger(__name__)

INDEX_VERSION = "1.0"


class GeneratorError(RuntimeError):
    """Raised when a relation generator fails or breaks the collection."""

    def __init__(self, key: str, stage: str, message: str):
        self.key = key
        self.stage = stage
        super().__init__(f"{stage} generator '{key}' failed: {message}")


class NotFoundError(LookupError):
    """Raised when no page matches a slug."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Page '{slug}' not found")


def normalize_slug(slug: Union[str, Sequence[str]]) -> str:
    """Accept "a/b", "/a/b/" or ["a", "b"] and return "a/b"."""
    if isinstance(slug, str):
        return slug.strip().strip("/")
    return "/".join(str(part).strip("/") for part in slug if str(part).strip("/"))


class ContentIndex:
    """Lazily built, process-lifetime index over one content collection."""

    def __init__(self, config: RelationsConfig, serializer: Optional[Serializer] = None):
        """Initialize the index.

        Args:
            config: Collection configuration
            serializer: Body serializer for get_page_props (default: Markdown to HTML)
        """
        self.config = config
        self.serializer = serializer or render_markdown
        # (nodes, nodes by slug, failed files), replaced as one value
        self._state: Optional[Tuple[List[PageNode], Dict[str, PageNode], List[Tuple[str, str]]]] = None
        self._lock = threading.Lock()
        self.last_stats: Dict[str, Any] = {}

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    @property
    def is_built(self) -> bool:
        return self._state is not None

    @property
    def failed(self) -> List[Tuple[str, str]]:
        """(path, error) for every file excluded by the last successful build."""
        state = self._state
        return list(state[2]) if state else []

    def _current(self) -> Tuple[List[PageNode], Dict[str, PageNode], List[Tuple[str, str]]]:
        state = self._state
        if state is None:
            with self._lock:
                if self._state is None:
                    self._build()
                state = self._state
        return state

    def ensure_built(self) -> List[PageNode]:
        return self._current()[0]

    def rebuild(self) -> Dict[str, Any]:
        """Build the index again from disk.

        On failure the previous index stays in place and the error
        propagates.

        Returns:
            Dictionary with build statistics
        """
        with self._lock:
            self._build()
        return self.last_stats

    def _build(self) -> None:
        started = time.perf_counter()
        config = self.config

        files = discover_files(
            config.content,
            extensions=config.extensions,
            exclude=config.exclude,
            rewrites=config.slug_rewrites,
        )
        logger.info(f"Discovered {len(files)} content file(s) under {config.content}")

        nodes, failed = self._parse_files(files)

        drafts = 0
        if config.drop_drafts:
            kept = [node for node in nodes if not node.frontmatter.get("draft")]
            drafts = len(nodes) - len(kept)
            nodes = kept

        nodes = self._apply_meta_generators(nodes)
        nodes = self._apply_relation_generators(nodes)

        self._state = (nodes, {node.slug: node for node in nodes}, failed)

        self.last_stats = {
            "files_count": len(files),
            "pages_count": len(nodes),
            "failed_count": len(failed),
            "drafts_dropped": drafts,
            "content_dir": str(config.content),
            "duration_ms": round((time.perf_counter() - started) * 1000, 1),
            "timestamp": datetime.now().isoformat(),
        }
        logger.info(
            f"Built index: {len(nodes)} page(s), {len(failed)} failed, "
            f"{self.last_stats['duration_ms']}ms"
        )

    def _parse_files(self, files: List[ContentFile]) -> Tuple[List[PageNode], List[Tuple[str, str]]]:
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            results = list(pool.map(_parse_file, files))

        nodes = []
        failed = []
        for content_file, result in zip(files, results):
            if isinstance(result, ParseError):
                logger.warning(f"Skipping {content_file.path}: {result}")
                failed.append((str(content_file.path), str(result)))
                continue
            nodes.append(result)
        return nodes, failed

    def _apply_meta_generators(self, nodes: List[PageNode]) -> List[PageNode]:
        generators = self.config.meta_generators
        if not generators:
            return nodes

        def enrich(node: PageNode) -> Dict[str, Any]:
            meta: Dict[str, Any] = {}
            for key, generator in generators.items():
                view = node.clone()
                view.meta = copy.deepcopy(meta)
                try:
                    meta[key] = generator(view)
                except Exception as exc:
                    logger.warning(f"Meta generator '{key}' failed for '{node.slug}': {exc}")
            return meta

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            metas = list(pool.map(enrich, nodes))

        for node, meta in zip(nodes, metas):
            node.meta = meta
        return nodes

    def _apply_relation_generators(self, nodes: List[PageNode]) -> List[PageNode]:
        for key, generator in self.config.relation_generators.items():
            working = [node.clone() for node in nodes]
            try:
                result = generator(working)
            except Exception as exc:
                logger.error(f"Relation generator '{key}' failed: {exc}")
                raise GeneratorError(key, "relation", str(exc)) from exc

            try:
                _check_relation_result(key, nodes, result)
            except GeneratorError as exc:
                logger.error(str(exc))
                raise
            nodes = list(result)
        return nodes

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_paths(self) -> List[Dict[str, Dict[str, List[str]]]]:
        """Path descriptors for static path generation.

        Example:
            >>> index.list_paths()
            [{'params': {'slug': ['garden', 'next-mdx-relations']}}, ...]
        """
        param = self.config.param_name
        return [{"params": {param: list(node.params)}} for node in self.ensure_built()]

    def list_pages(self, include_content: Optional[bool] = None) -> List[Dict[str, Any]]:
        """All pages with frontmatter and meta, in collection order.

        Args:
            include_content: Include the raw body (default from config)
        """
        if include_content is None:
            include_content = self.config.include_content
        return [node.to_dict(include_content) for node in self.ensure_built()]

    def get_node(self, slug: Union[str, Sequence[str]]) -> PageNode:
        _, by_slug, _ = self._current()
        key = normalize_slug(slug)
        node = by_slug.get(key)
        if node is None:
            raise NotFoundError(key)
        return node

    def get_page_props(self, slug: Union[str, Sequence[str]]) -> Dict[str, Any]:
        """Props for rendering one page.

        Args:
            slug: "garden/next-mdx-relations" or its segment list

        Returns:
            Dictionary with slug, frontmatter, meta and serialized_body

        Raises:
            NotFoundError: If no page has this slug
        """
        node = self.get_node(slug)
        data = node.to_dict()
        data["serialized_body"] = self.serializer(node.content)
        return data

    def get_paths_by_prop(self, key: str) -> List[Any]:
        """Distinct values of ``frontmatter[key]`` (else ``meta[key]``) across pages.

        List values are flattened; missing and None values are skipped.
        Order is first-seen unless sort_prop_values is configured.

        Example:
            >>> index.get_paths_by_prop("tags")
            ['mdx', 'nextjs', 'gardening']
        """
        values: List[Any] = []
        seen = set()

        for node in self.ensure_built():
            if key in node.frontmatter:
                value = node.frontmatter[key]
            else:
                value = node.meta.get(key)

            items = value if isinstance(value, (list, tuple, set)) else [value]
            for item in items:
                if item is None:
                    continue
                marker = (type(item), _hashable(item))
                if marker in seen:
                    continue
                seen.add(marker)
                values.append(item)

        if self.config.sort_prop_values:
            values.sort(key=lambda v: (type(v).__name__, str(v)))
        return values

    def get_pages_by_prop(self, key: str, value: Any) -> List[Dict[str, Any]]:
        """Pages whose ``key`` property equals or contains ``value``."""
        matches = []
        for node in self.ensure_built():
            prop = node.frontmatter.get(key, node.meta.get(key))
            if prop == value or (isinstance(prop, (list, tuple, set)) and value in prop):
                matches.append(node.to_dict())
        return matches

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_json_data(self, include_content: bool = False) -> Dict[str, Any]:
        pages = self.list_pages(include_content=include_content)
        return {
            "version": INDEX_VERSION,
            "created_at": datetime.now().isoformat(),
            "content_dir": str(self.config.content),
            "total_pages": len(pages),
            "pages": pages,
        }

    def export(self, output_path: Path, include_content: bool = False) -> Path:
        """Write the built index to a JSON file.

        Args:
            output_path: Destination file; parent directories are created
            include_content: Include raw bodies

        Returns:
            The written path
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(
            json.dumps(self.to_json_data(include_content), indent=2, ensure_ascii=False, default=_json_default),
            encoding="utf-8",
        )
        return output_path


def _parse_file(content_file: ContentFile) -> Union[PageNode, ParseError]:
    path = str(content_file.path)
    try:
        text = content_file.path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        return ParseError(f"not valid UTF-8: {exc}", path)

    try:
        frontmatter, body = parse_frontmatter(text, path)
    except ParseError as exc:
        return exc
    return PageNode.from_file(content_file, frontmatter, body)


def _check_relation_result(key: str, before: List[PageNode], result: Any) -> None:
    """Ensure a relation generator returned the same pages, annotated only."""
    if not isinstance(result, list):
        raise GeneratorError(key, "relation", f"expected a list of pages, got {type(result).__name__}")

    if len(result) != len(before):
        raise GeneratorError(
            key, "relation", f"returned {len(result)} pages, expected {len(before)}"
        )

    originals = {node.slug: node for node in before}
    seen = set()
    for node in result:
        if not isinstance(node, PageNode):
            raise GeneratorError(key, "relation", f"expected PageNode, got {type(node).__name__}")
        if node.slug in seen:
            raise GeneratorError(key, "relation", f"duplicate page '{node.slug}'")
        seen.add(node.slug)

        original = originals.get(node.slug)
        if original is None:
            raise GeneratorError(key, "relation", f"unknown page '{node.slug}'")
        if (
            node.frontmatter != original.frontmatter
            or node.content != original.content
            or list(node.params) != list(original.params)
            or node.path != original.path
        ):
            raise GeneratorError(key, "relation", f"page '{node.slug}' was replaced, not annotated")
        if not isinstance(node.meta, dict):
            raise GeneratorError(key, "relation", f"page '{node.slug}' meta is not a mapping")
        missing = [name for name in original.meta if name not in node.meta]
        if missing:
            raise GeneratorError(
                key, "relation", f"page '{node.slug}' lost meta keys: {', '.join(missing)}"
            )


def _hashable(value: Any) -> Any:
    try:
        hash(value)
        return value
    except TypeError:
        return json.dumps(value, sort_keys=True, default=str)


def _json_default(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, set):
        return sorted(value, key=str)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class Relations(NamedTuple):
    """Query functions bound to one isolated ContentIndex."""
    list_paths: Callable[[], List[Dict]]
    list_pages: Callable[..., List[Dict]]
    get_page_props: Callable[[Union[str, Sequence[str]]], Dict]
    get_paths_by_prop: Callable[[str], List[Any]]
    rebuild: Callable[[], Dict]
    index: ContentIndex


def create_relations(config: RelationsConfig, serializer: Optional[Serializer] = None) -> Relations:
    """Create the query functions for one content collection.

    Each call returns functions closed over a fresh index, so several
    collections (e.g. blog and garden) can coexist.

    Example:
        >>> garden = create_relations(RelationsConfig(content=Path("content/garden")))
        >>> garden.get_page_props("next-mdx-relations")["frontmatter"]["title"]
        'Next MDX Relations'
    """
    index = ContentIndex(config, serializer=serializer)
    return Relations(
        list_paths=index.list_paths,
        list_pages=index.list_pages,
        get_page_props=index.get_page_props,
        get_paths_by_prop=index.get_paths_by_prop,
        rebuild=index.rebuild,
        index=index,
    )
