from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from .config import (
    DEFAULT_TARGET,
    FOLDER_INDEX_LAYOUTS,
    INDEX_FILE,
    INDEX_STYLES,
    SiteOptions,
    load_config,
    resolve_options,
)
from .git import changed_pages
from .pages import folder_index_paths, render_folder_index, render_index, render_recent_page
from .render import write_text
from .sitemaps import (
    ROBOTS_FILE,
    SITEMAP_FILE,
    SITEMAP_INDEX_FILE,
    render_robots,
    render_sitemap,
    render_sitemap_index,
    render_split_sitemaps,
    sitemap_location,
)
from .tree import DirectoryUnreadable, FolderNode, build_tree, iter_folders
from .utils import display_text, parse_bool


def excluded_outputs(options: SiteOptions) -> set[str]:
    """Paths this run generates inside the target directory, relative to it."""
    outputs = [INDEX_FILE]
    if options.has_recent_page:
        outputs.append(options.recent_page)
    if options.split_sitemaps:
        outputs.append(options.sitemap_dir)
    if options.folder_indexes and options.folder_index_layout == "shared":
        outputs.append(options.folder_index_dir)
    prefix = options.target_prefix
    excluded = set()
    for path in outputs:
        if not prefix:
            excluded.add(path)
        elif path.startswith(f"{prefix}/"):
            excluded.add(path[len(prefix) + 1 :])
    return excluded


def excluded_names(options: SiteOptions) -> set[str]:
    """File names this run generates in every folder."""
    if options.folder_indexes and options.folder_index_layout == "colocated":
        return {options.folder_index_name}
    return set()


def render_documents(changed: list[str], tree: FolderNode, options: SiteOptions) -> dict[str, str]:
    """Every output document keyed by its path relative to the pages directory."""
    documents = {INDEX_FILE: render_index(changed, tree, options)}
    if options.split_sitemaps:
        sitemaps = render_split_sitemaps(tree, options)
        documents.update(sitemaps)
        documents[SITEMAP_INDEX_FILE] = render_sitemap_index(list(sitemaps), options)
    else:
        documents[SITEMAP_FILE] = render_sitemap(tree, options)
    documents[ROBOTS_FILE] = render_robots(sitemap_location(options))
    if options.has_recent_page:
        documents[options.recent_page] = render_recent_page(changed, options)
    if options.folder_indexes:
        index_paths = folder_index_paths(tree, options)
        for folder in iter_folders(tree):
            documents[index_paths[folder.rel]] = render_folder_index(folder.rel, folder, options, index_paths)
    return documents


def generate_site(options: SiteOptions) -> list[Path]:
    """Regenerate every output file and return the written paths.

    The tree is scanned before anything is written, so an unreadable target
    directory leaves the previous outputs untouched.
    """
    tree = build_tree(
        options.target_dir,
        exclude=excluded_outputs(options),
        exclude_names=excluded_names(options),
    )
    changed = changed_pages(options.target_dir, options.pages_dir) if options.git_enabled else []
    written = []
    for rel, text in render_documents(changed, tree, options).items():
        path = options.pages_dir / rel
        write_text(path, text)
        written.append(path)
    return written


def main(argv: list[str] | None = None) -> None:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="site.toml",
        help="Path to config file (TOML/YAML/JSON).",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)
    config = load_config(Path(pre_args.config))

    def cfg_value(key: str, default: object) -> object:
        value = config.get(key)
        return default if value is None else value

    def cfg_str(key: str, default: str) -> str:
        value = cfg_value(key, default)
        return default if value is None else str(value)

    def cfg_bool(key: str, default: bool) -> bool:
        value = cfg_value(key, default)
        return parse_bool(value) if value is not None else default

    parser = argparse.ArgumentParser(description="Regenerate index.html, sitemap and robots.txt for a folder of pages.")
    parser.add_argument("--config", default=pre_args.config, help="Path to config file (TOML/YAML/JSON).")
    parser.add_argument(
        "--pages-dir",
        default=cfg_str("pages_dir", "."),
        help="Directory that receives the generated files (default: current directory).",
    )
    parser.add_argument(
        "--target",
        default=cfg_str("target", DEFAULT_TARGET),
        help="Sub-folder of the pages directory to index when it exists.",
    )
    parser.add_argument(
        "--base-url",
        default=cfg_str("base_url", ""),
        help="Public site URL for sitemap and robots locations (falls back to $BASE_URL).",
    )
    parser.add_argument("--title", default=cfg_str("title", "Site Index"), help="Index page title.")
    parser.add_argument(
        "--index-style",
        choices=INDEX_STYLES,
        default=cfg_str("index_style", "nested"),
        help="nested: collapse folders below the top level; flat: expand everything.",
    )
    parser.add_argument(
        "--split-sitemaps",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("split_sitemaps", False),
        help="Write one sitemap per folder plus a sitemap index.",
    )
    parser.add_argument(
        "--folder-indexes",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("folder_indexes", False),
        help="Write an index page for every folder.",
    )
    parser.add_argument(
        "--folder-index-layout",
        choices=FOLDER_INDEX_LAYOUTS,
        default=cfg_str("folder_index_layout", "colocated"),
        help="colocated: inside each folder; shared: collected in one side directory.",
    )
    parser.add_argument(
        "--folder-index-name",
        default=cfg_str("folder_index_name", "_index.html"),
        help="File name of colocated folder index pages.",
    )
    parser.add_argument(
        "--recent-page",
        default=cfg_str("recent_page", "recent.html"),
        help="File name of the recently changed pages document.",
    )
    parser.add_argument(
        "--write-recent",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("write_recent", False),
        help="Write the recently changed pages document (always on with --folder-indexes).",
    )
    parser.add_argument(
        "--intro-file",
        default=cfg_str("intro_file", ""),
        help="Markdown, HTML or text file shown at the top of the index page.",
    )
    parser.add_argument(
        "--intro-text",
        default=cfg_str("intro_text", ""),
        help="Text shown at the top of the index page.",
    )
    parser.add_argument(
        "--intro-html",
        default=cfg_str("intro_html", ""),
        help="HTML shown at the top of the index page.",
    )
    parser.add_argument(
        "--template",
        default=cfg_str("template", ""),
        help="HTML template with {{title}}, {{heading}} and {{content}} placeholders.",
    )
    parser.add_argument(
        "--git",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("git", True),
        help="List pages changed in the latest git commit.",
    )
    args = parser.parse_args(argv)
    start = time.perf_counter()
    options = resolve_options(args)
    try:
        written = generate_site(options)
    except DirectoryUnreadable as exc:
        print(f"Cannot read pages directory: {exc}", file=sys.stderr)
        sys.exit(1)
    elapsed = time.perf_counter() - start
    print("Generated:", " ".join(display_text(str(path)) for path in written))
    print(f"Completed in {elapsed:.2f}s.")
