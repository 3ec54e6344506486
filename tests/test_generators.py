"""Tests for garden.generators."""

from datetime import date

from garden.generators import (
    chronological_neighbors,
    mentioned_in,
    mentions,
    reading_time,
    word_count,
)
from garden.page import PageNode


def make_node(slug, content="", frontmatter=None, meta=None):
    return PageNode(
        slug=slug,
        params=slug.split("/"),
        frontmatter=frontmatter or {},
        content=content,
        meta=meta or {},
    )


class TestMetaGenerators:
    def test_mentions_excludes_self_links(self):
        node = make_node("a", "See [B](/b). Again [B](/b/). Back to [me](/a).")
        assert mentions(node) == ["/b"]

    def test_word_count_skips_mdx_markup(self):
        node = make_node("a", "import Chart from './chart'\n\nOne two three.\n\n<Chart data={x} />\n")
        assert word_count(node) == 3

    def test_reading_time_rounds_up(self):
        assert reading_time(make_node("a", "word " * 450)) == 3

    def test_reading_time_is_at_least_one_minute(self):
        assert reading_time(make_node("a", "")) == 1


class TestMentionedIn:
    def test_collects_inbound_slugs(self):
        nodes = [
            make_node("a", meta={"mentions": ["/b", "/missing"]}),
            make_node("b", meta={"mentions": []}),
            make_node("c", meta={"mentions": ["/b", "/a"]}),
        ]

        result = mentioned_in()(nodes)

        by_slug = {node.slug: node for node in result}
        assert by_slug["a"].meta["mentioned_in"] == ["c"]
        assert by_slug["b"].meta["mentioned_in"] == ["a", "c"]
        assert by_slug["c"].meta["mentioned_in"] == []

    def test_custom_keys(self):
        nodes = [
            make_node("a", meta={"links": ["/b"]}),
            make_node("b"),
        ]

        result = mentioned_in(source_key="links", target_key="backlinks")(nodes)

        assert result[1].meta["backlinks"] == ["a"]
        assert "mentioned_in" not in result[1].meta

    def test_preserves_count_and_order(self):
        nodes = [make_node(slug) for slug in ("x", "y", "z")]
        result = mentioned_in()(nodes)
        assert [node.slug for node in result] == ["x", "y", "z"]


class TestChronologicalNeighbors:
    def test_links_dated_pages_within_section(self):
        nodes = [
            make_node("garden/new", frontmatter={"date": date(2021, 3, 1)}),
            make_node("garden/old", frontmatter={"date": date(2021, 1, 1)}),
            make_node("garden/undated"),
            make_node("posts/other", frontmatter={"date": date(2021, 2, 1)}),
        ]

        result = chronological_neighbors()(nodes)

        by_slug = {node.slug: node for node in result}
        assert by_slug["garden/old"].meta == {"previous": None, "next": "garden/new"}
        assert by_slug["garden/new"].meta == {"previous": "garden/old", "next": None}
        assert by_slug["garden/undated"].meta == {"previous": None, "next": None}
        assert by_slug["posts/other"].meta == {"previous": None, "next": None}
        assert [node.slug for node in result] == [n.slug for n in nodes]

    def test_without_sections(self):
        nodes = [
            make_node("garden/a", frontmatter={"date": date(2021, 1, 1)}),
            make_node("posts/b", frontmatter={"date": date(2021, 2, 1)}),
        ]

        result = chronological_neighbors(section=False)(nodes)

        assert result[0].meta["next"] == "posts/b"
        assert result[1].meta["previous"] == "garden/a"
