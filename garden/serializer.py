"""Body serializers for get_page_props."""

from __future__ import annotations

import re
from typing import Any, Callable

import markdown

Serializer = Callable[[str], Any]

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "toc"]

# MDX import/export statements have no Markdown rendering
_ESM_PATTERN = re.compile(r"^(?:import|export)\s.*$\n?", re.MULTILINE)


def render_markdown(body: str) -> str:
    """Render a Markdown/MDX body to HTML."""
    body = _ESM_PATTERN.sub("", body)
    return markdown.markdown(body, extensions=MARKDOWN_EXTENSIONS, output_format="html")
