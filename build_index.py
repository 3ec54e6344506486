#!/usr/bin/env python3
"""
Build the garden content index and export it to JSON.

This script:
1. Discovers .md/.mdx files under the content directory
2. Parses frontmatter and applies meta generators
3. Applies relation generators (mentioned in, previous/next)
4. Writes the index to output/index.json

Usage:
    python build_index.py
    python build_index.py --content content/garden --output output/garden.json
    python build_index.py --exclude "drafts/*" --exclude "*.draft.md"
"""

import argparse
import logging
import sys
from pathlib import Path

from garden import ContentIndex, GeneratorError, chronological_neighbors, load_config

BASE_DIR = Path(__file__).resolve().parent
OUTPUT_FILE = BASE_DIR / "output" / "index.json"


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Build the garden content index",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Build from GARDEN_CONTENT_DIR (or ./content)
    python build_index.py

    # Build another collection
    python build_index.py --content content/posts --output output/posts.json

    # Skip drafts and include raw bodies
    python build_index.py --drop-drafts --include-content
        """
    )

    parser.add_argument(
        "--content",
        type=Path,
        help="Content directory (default: GARDEN_CONTENT_DIR or ./content)"
    )

    parser.add_argument(
        "--output",
        type=Path,
        default=OUTPUT_FILE,
        help=f"JSON file to write (default: {OUTPUT_FILE})"
    )

    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        help="Glob pattern to exclude (repeatable)"
    )

    parser.add_argument(
        "--drop-drafts",
        action="store_true",
        help="Exclude pages with draft: true"
    )

    parser.add_argument(
        "--include-content",
        action="store_true",
        help="Include raw page bodies in the export"
    )

    parser.add_argument(
        "--neighbors",
        action="store_true",
        help="Add previous/next meta by date within each section"
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show detailed output"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    overrides = {}
    if args.content:
        overrides["content"] = args.content
    if args.drop_drafts:
        overrides["drop_drafts"] = True

    config = load_config(**overrides)
    if args.exclude:
        config.exclude.extend(args.exclude)
    if args.neighbors:
        config.relation_generators["neighbors"] = chronological_neighbors()

    print("\n" + "=" * 70)
    print("Garden Index Builder")
    print("=" * 70)
    print(f"\nInput: {config.content}")
    print(f"Output: {args.output}")
    print("=" * 70)

    index = ContentIndex(config)

    try:
        stats = index.rebuild()
    except FileNotFoundError as e:
        print(f"\n✗ Error: {e}")
        return 1
    except GeneratorError as e:
        print(f"\n✗ Build failed: {e}")
        return 1

    index.export(args.output, include_content=args.include_content)

    for path, error in index.failed:
        print(f"  ✗ {path}: {error}")

    # Summary
    print("\n" + "=" * 70)
    print("INDEX BUILD COMPLETE")
    print("=" * 70)
    print(f"  Files found: {stats['files_count']}")
    print(f"  Pages indexed: {stats['pages_count']}")
    print(f"  Files failed: {stats['failed_count']}")
    if stats["drafts_dropped"]:
        print(f"  Drafts dropped: {stats['drafts_dropped']}")
    print(f"  Duration: {stats['duration_ms']}ms")

    if args.verbose and stats["pages_count"]:
        tags = index.get_paths_by_prop("tags")
        if tags:
            print(f"\nTags ({len(tags)}): {', '.join(str(t) for t in tags[:10])}")

        linked = [page for page in index.list_pages() if page["meta"].get("mentioned_in")]
        if linked:
            print(f"\nMost mentioned pages:")
            linked.sort(key=lambda page: len(page["meta"]["mentioned_in"]), reverse=True)
            for page in linked[:3]:
                print(f"  • {page['slug']} ({len(page['meta']['mentioned_in'])} mentions)")

    print(f"\nIndex written to {args.output}")
    print("=" * 70 + "\n")

    return 0 if stats["failed_count"] == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
