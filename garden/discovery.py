"""
Content discovery for the garden index.

Walks the content root, applies exclude patterns and derives public slugs:

    content/
        garden/01-next-mdx-relations.mdx  -> garden/next-mdx-relations
        garden/index.md                   -> garden
        posts/2021-recap.md               -> posts/2021-recap
        _drafts/unfinished.md             (skipped, underscore prefix)

Leading sort prefixes of one to three digits ("01-", "2_", "10.") are
stripped from the slug; longer numbers such as years are part of the name.
Prefixes stay in the sort key, so files are returned in their intended
order.
"""

from __future__ import annotations

import fnmatch
import logging
import re
from pathlib import Path, PurePosixPath
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .page import ContentFile

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".md", ".mdx")

SORT_PREFIX_PATTERN = re.compile(r"^\d{1,3}[-_.](?=.)")


def strip_sort_prefix(segment: str) -> str:
    """Remove a leading numeric sort prefix from one path segment.

    Example:
        >>> strip_sort_prefix("01-introduction")
        'introduction'
        >>> strip_sort_prefix("2021")
        '2021'
    """
    return SORT_PREFIX_PATTERN.sub("", segment, count=1)


def derive_slug(relative_path: PurePosixPath, rewrites: Optional[Dict[str, str]] = None) -> str:
    """Derive the public slug for a file path relative to the content root.

    Args:
        relative_path: Path relative to the content root, extension included
        rewrites: Optional slug prefix rewrites applied last

    Returns:
        Slug with "/" separated segments and no leading slash
    """
    parts = list(relative_path.with_suffix("").parts)
    segments = [strip_sort_prefix(part) for part in parts]

    if len(segments) > 1 and segments[-1] == "index":
        segments = segments[:-1]

    slug = "/".join(segments)
    return apply_rewrites(slug, rewrites or {})


def apply_rewrites(slug: str, rewrites: Dict[str, str]) -> str:
    """Rewrite the first matching slug prefix (whole segments only)."""
    for source, target in rewrites.items():
        source = source.strip("/")
        target = target.strip("/")
        if slug == source:
            return target
        if slug.startswith(source + "/"):
            rest = slug[len(source) + 1:]
            return f"{target}/{rest}" if target else rest
    return slug


def is_excluded(relative_path: PurePosixPath, patterns: Sequence[str]) -> bool:
    """Check a relative path against exclude globs.

    Hidden files/directories and underscore-prefixed files are always
    excluded. A pattern matches if it matches the whole relative path or
    any single segment of it.
    """
    parts = relative_path.parts
    if any(part.startswith(".") for part in parts):
        return True
    if relative_path.name.startswith("_") or any(part.startswith("_") for part in parts[:-1]):
        return True

    posix = relative_path.as_posix()
    for pattern in patterns:
        if fnmatch.fnmatch(posix, pattern):
            return True
        if any(fnmatch.fnmatch(part, pattern) for part in parts):
            return True
    return False


def natural_sort_key(value: str) -> Tuple:
    """Sort key that orders "2-b" before "10-a"."""
    return tuple(
        (0, int(chunk), "") if chunk.isdigit() else (1, 0, chunk.lower())
        for chunk in re.split(r"(\d+)", value)
        if chunk
    )


def iter_content_paths(
    root: Path,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    exclude: Sequence[str] = (),
) -> Iterator[Path]:
    """Yield content file paths under root, unordered."""
    extensions = {ext.lower() for ext in extensions}
    for path in root.rglob("*"):
        if not path.is_file() or path.suffix.lower() not in extensions:
            continue
        relative = PurePosixPath(path.relative_to(root).as_posix())
        if is_excluded(relative, exclude):
            logger.debug(f"Excluded {relative}")
            continue
        yield path


def discover_files(
    root: Path,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    exclude: Sequence[str] = (),
    rewrites: Optional[Dict[str, str]] = None,
) -> List[ContentFile]:
    """Discover content files and derive their slugs.

    Args:
        root: Content root directory
        extensions: File suffixes treated as content
        exclude: Glob patterns to skip
        rewrites: Slug prefix rewrites

    Returns:
        ContentFile list in sort order, slugs unique. When two files derive
        the same slug the first in sort order wins and the other is logged
        and dropped.

    Raises:
        FileNotFoundError: If the content root does not exist
    """
    root = Path(root)
    if not root.is_dir():
        raise FileNotFoundError(f"Content directory not found: {root}")

    found = []
    for path in iter_content_paths(root, extensions, exclude):
        relative = PurePosixPath(path.relative_to(root).as_posix())
        sort_key = relative.with_suffix("").as_posix()
        found.append(ContentFile(path=path, slug=derive_slug(relative, rewrites), sort_key=sort_key))

    found.sort(key=lambda item: natural_sort_key(item.sort_key))

    files: List[ContentFile] = []
    seen: Dict[str, Path] = {}
    for content_file in found:
        if content_file.slug in seen:
            logger.warning(
                f"Duplicate slug '{content_file.slug}': {content_file.path} "
                f"conflicts with {seen[content_file.slug]}, skipping"
            )
            continue
        seen[content_file.slug] = content_file.path
        files.append(content_file)

    return files
