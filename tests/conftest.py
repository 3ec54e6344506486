from pathlib import Path

import pytest


def write_page(root: Path, relative: str, text: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def content_dir(tmp_path):
    """Small garden: A links to B, B links nowhere, C is tagged y."""
    root = tmp_path / "content"
    write_page(root, "a.md", "---\ntitle: A\ntags: [x]\ndate: 2021-01-01\n---\nSee [B](/b) for more.\n")
    write_page(root, "b.md", "---\ntitle: B\ntags: [x, y]\ndate: 2021-02-01\n---\nNo links here.\n")
    write_page(root, "c.mdx", "---\ntitle: C\ntags: [y]\n---\nimport Chart from './chart'\n\n<Chart />\n")
    return root
