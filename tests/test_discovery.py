"""Tests for garden.discovery."""

from pathlib import PurePosixPath

import pytest

from garden.discovery import derive_slug, discover_files, is_excluded, strip_sort_prefix

from .conftest import write_page


class TestDeriveSlug:
    def test_strips_extension(self):
        assert derive_slug(PurePosixPath("garden/next-mdx-relations.mdx")) == "garden/next-mdx-relations"

    def test_strips_sort_prefixes_from_every_segment(self):
        assert derive_slug(PurePosixPath("01-guides/2_setup.md")) == "guides/setup"

    def test_keeps_purely_numeric_segment(self):
        assert strip_sort_prefix("2021") == "2021"
        assert derive_slug(PurePosixPath("posts/2021.md")) == "posts/2021"

    def test_keeps_year_prefixed_names(self):
        assert strip_sort_prefix("2021-recap") == "2021-recap"
        assert derive_slug(PurePosixPath("posts/2021-recap.md")) == "posts/2021-recap"
        assert derive_slug(PurePosixPath("posts/003_notes.md")) == "posts/notes"

    def test_drops_trailing_index(self):
        assert derive_slug(PurePosixPath("garden/index.md")) == "garden"
        assert derive_slug(PurePosixPath("index.md")) == "index"

    def test_applies_rewrites(self):
        rewrites = {"posts": "blog"}
        assert derive_slug(PurePosixPath("posts/hello.md"), rewrites) == "blog/hello"
        assert derive_slug(PurePosixPath("postscript.md"), rewrites) == "postscript"


class TestIsExcluded:
    def test_hidden_and_underscore_paths(self):
        assert is_excluded(PurePosixPath(".obsidian/note.md"), [])
        assert is_excluded(PurePosixPath("_drafts/note.md"), [])
        assert is_excluded(PurePosixPath("garden/_partial.mdx"), [])

    def test_glob_against_path_and_segments(self):
        assert is_excluded(PurePosixPath("drafts/idea.md"), ["drafts/*"])
        assert is_excluded(PurePosixPath("garden/drafts/idea.md"), ["drafts"])
        assert not is_excluded(PurePosixPath("garden/idea.md"), ["drafts"])


class TestDiscoverFiles:
    def test_orders_by_sort_prefix_and_skips_other_files(self, tmp_path):
        write_page(tmp_path, "10-last.md", "")
        write_page(tmp_path, "2-second.md", "")
        write_page(tmp_path, "1-first.mdx", "")
        write_page(tmp_path, "notes.txt", "")
        write_page(tmp_path, "image.png", "")

        files = discover_files(tmp_path)

        assert [f.slug for f in files] == ["first", "second", "last"]
        assert files[0].sort_key == "1-first"

    def test_year_named_files_do_not_collide(self, tmp_path):
        write_page(tmp_path, "posts/2020-recap.md", "")
        write_page(tmp_path, "posts/2021-recap.md", "")

        files = discover_files(tmp_path)

        assert [f.slug for f in files] == ["posts/2020-recap", "posts/2021-recap"]

    def test_duplicate_slug_keeps_first(self, tmp_path, caplog):
        write_page(tmp_path, "01-intro.md", "")
        write_page(tmp_path, "intro.md", "")

        files = discover_files(tmp_path)

        assert [f.slug for f in files] == ["intro"]
        assert files[0].path.name == "01-intro.md"
        assert "Duplicate slug" in caplog.text

    def test_exclude_patterns(self, tmp_path):
        write_page(tmp_path, "garden/keep.md", "")
        write_page(tmp_path, "garden/skip.draft.md", "")

        files = discover_files(tmp_path, exclude=["*.draft.md"])

        assert [f.slug for f in files] == ["garden/keep"]

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            discover_files(tmp_path / "nope")
