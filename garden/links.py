"""
Link extraction for Markdown/MDX bodies.

Recognizes inline links ``[text](/target)``, reference definitions
``[id]: /target``, JSX/HTML anchors ``<a href="/target">`` and wiki links
``[[target]]``. Image links are ignored.
"""

from __future__ import annotations

import re
from typing import List, Optional
from urllib.parse import urlsplit

INLINE_LINK_PATTERN = re.compile(r'(?<!!)\[[^\]]*\]\(\s*<?([^\s)>]+)>?(?:\s+"[^"]*")?\s*\)')
REFERENCE_LINK_PATTERN = re.compile(r'^\s{0,3}\[[^\]]+\]:\s*<?(\S+?)>?(?:\s+.*)?$', re.MULTILINE)
HREF_PATTERN = re.compile(r'<(?:a|Link)\b[^>]*?\bhref=["\']([^"\']+)["\']', re.IGNORECASE)
WIKI_LINK_PATTERN = re.compile(r'\[\[([^\]|#]+)(?:#[^\]|]*)?(?:\|[^\]]*)?\]\]')

FENCED_CODE_PATTERN = re.compile(r'^(```|~~~).*?^\1\s*$', re.MULTILINE | re.DOTALL)
INLINE_CODE_PATTERN = re.compile(r'`[^`\n]*`')


def _strip_code(text: str) -> str:
    text = FENCED_CODE_PATTERN.sub("", text)
    return INLINE_CODE_PATTERN.sub("", text)


def extract_links(text: str) -> List[str]:
    """Extract raw link targets from Markdown/MDX text, in document order.

    Links inside fenced or inline code are ignored. Duplicates are kept.
    """
    text = _strip_code(text)

    matches = []
    for pattern in (INLINE_LINK_PATTERN, REFERENCE_LINK_PATTERN, HREF_PATTERN):
        matches.extend((m.start(), m.group(1)) for m in pattern.finditer(text))
    matches.extend((m.start(), "/" + m.group(1).strip()) for m in WIKI_LINK_PATTERN.finditer(text))

    matches.sort(key=lambda item: item[0])
    return [target for _, target in matches]


def normalize_link(target: str) -> Optional[str]:
    """Normalize an internal link target to ``/slug`` form.

    Returns None for external links (scheme or host present), pure
    fragments and relative links that cannot be resolved without a base.

    Example:
        >>> normalize_link("/garden/next-mdx-relations/#usage")
        '/garden/next-mdx-relations'
        >>> normalize_link("https://example.com/b") is None
        True
    """
    target = target.strip()
    if not target or target.startswith("#"):
        return None

    parts = urlsplit(target)
    if parts.scheme or parts.netloc:
        return None
    if not parts.path.startswith("/"):
        return None

    path = re.sub(r"\.mdx?$", "", parts.path.rstrip("/"))
    return path or "/"


def extract_internal_links(text: str) -> List[str]:
    """Extract normalized internal link targets, deduplicated in first-seen order."""
    links = []
    for target in extract_links(text):
        normalized = normalize_link(target)
        if normalized and normalized not in links:
            links.append(normalized)
    return links


def link_to_slug(link: str) -> str:
    """Turn a normalized ``/slug`` link into a bare slug."""
    return link.strip("/")
