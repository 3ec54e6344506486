"""
Frontmatter parser for garden content files.

Splits a Markdown/MDX file into its leading YAML block and body.

Format:
---
title: Building a digital garden
date: 2021-03-14
tags: [gardening, mdx]
draft: false
---
# Body starts here
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

import yaml

OPEN_DELIMITER = "---"
CLOSE_DELIMITERS = ("---", "...")

# Keys always coerced to a list of strings
LIST_KEYS = ("tags", "categories", "aliases")

_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0", ""}


class ParseError(ValueError):
    """Exception raised when a frontmatter block is malformed."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


def split_frontmatter(text: str, path: Optional[str] = None) -> Tuple[str, str]:
    """Split raw file text into (frontmatter block, body).

    Args:
        text: Raw file contents
        path: Source path, only used in error messages

    Returns:
        Tuple of (raw YAML block, body). The block is empty when the file
        has no frontmatter.

    Raises:
        ParseError: If the opening delimiter is never closed
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != OPEN_DELIMITER:
        return "", text

    for index, line in enumerate(lines[1:], start=1):
        if line.rstrip() in CLOSE_DELIMITERS:
            block = "".join(lines[1:index])
            body = "".join(lines[index + 1:])
            return block, body.lstrip("\n")

    raise ParseError("unterminated frontmatter block", path)


def parse_frontmatter(text: str, path: Optional[str] = None) -> Tuple[Dict[str, Any], str]:
    """Parse frontmatter into a typed mapping and return it with the body.

    Args:
        text: Raw file contents
        path: Source path, only used in error messages

    Returns:
        Tuple of (frontmatter dict, body)

    Raises:
        ParseError: If the block is unterminated, is not valid YAML, or
            does not decode to a mapping

    Example:
        >>> fm, body = parse_frontmatter("---\\ntitle: Hi\\ntags: a, b\\n---\\nHello")
        >>> fm['tags']
        ['a', 'b']
        >>> body
        'Hello'
    """
    block, body = split_frontmatter(text, path)
    if not block.strip():
        return {}, body

    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        raise ParseError(f"invalid frontmatter syntax: {exc}", path) from exc

    if data is None:
        return {}, body
    if not isinstance(data, dict):
        raise ParseError(
            f"frontmatter must be a mapping, got {type(data).__name__}", path
        )

    return _coerce_fields(data, path), body


def _coerce_fields(data: Dict, path: Optional[str]) -> Dict[str, Any]:
    """Normalize decoded YAML values into the field types pages rely on."""
    frontmatter: Dict[str, Any] = {}

    for key, value in data.items():
        key = str(key)

        if key in LIST_KEYS or key.endswith("_tags"):
            value = _as_string_list(key, value, path)
        elif key == "draft":
            value = _as_bool(value, path)
        elif key == "date" and isinstance(value, str):
            value = _as_date(value, path)

        frontmatter[key] = value

    return frontmatter


def _as_string_list(key: str, value: Any, path: Optional[str]) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        # Comma-separated string to list
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if item is not None and str(item).strip()]
    raise ParseError(f"'{key}' must be a string or list, got {type(value).__name__}", path)


def _as_bool(value: Any, path: Optional[str]) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    lowered = str(value).strip().lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    raise ParseError(f"'draft' must be a boolean, got {value!r}", path)


def _as_date(value: str, path: Optional[str]) -> date:
    # YAML already decodes unquoted ISO dates; this handles quoted ones
    text = value.strip()
    try:
        if re.fullmatch(r"\d{4}-\d{2}-\d{2}", text):
            return date.fromisoformat(text)
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise ParseError(f"invalid date {value!r}", path) from exc


if __name__ == "__main__":
    test_content = """---
title: Next MDX Relations
date: "2021-04-02"
tags: mdx, nextjs
draft: no
---
# Next MDX Relations

Links to [my garden](/garden).
"""

    try:
        frontmatter, body = parse_frontmatter(test_content, "demo.mdx")
        print("✓ Frontmatter parsed successfully:")
        for key, value in frontmatter.items():
            print(f"  {key}: {value!r}")
        print(f"\n✓ Body ({len(body)} chars)")
        print(f"  Starts with: {body[:30]}...")
    except ParseError as e:
        print(f"✗ Error: {e}")
