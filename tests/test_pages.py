"""Tests for index, recently-changed and per-folder index pages."""

from __future__ import annotations

import os
import re
import sys
import unittest
from urllib.parse import unquote

from helpers import make_options, sample_tree

from siteindex.pages import (
    folder_index_paths,
    relative_href,
    render_folder_index,
    render_index,
    render_recent_page,
)
from siteindex.tree import FolderNode, PageEntry

HREF_RE = re.compile(r'href="([^"]+)"')


def deep_tree() -> FolderNode:
    deep = FolderNode(name="deep", rel="sub/deep", pages=(PageEntry("d.html", "sub/deep/d.html"),))
    sub = FolderNode(name="sub", rel="sub", folders=(deep,), pages=(PageEntry("c.html", "sub/c.html"),))
    return FolderNode(name="site", rel="", folders=(sub,), pages=(PageEntry("a.html", "a.html"),))


def changed_section(text: str) -> str:
    start = text.index("Recently edited (latest commit)")
    return text[start : text.index("</section>", start)]


class RenderIndexTests(unittest.TestCase):
    def test_empty_changed_list_renders_single_placeholder(self) -> None:
        text = render_index([], sample_tree(), make_options())

        section = changed_section(text)
        self.assertEqual(section.count("<li>"), 1)
        self.assertIn("<li>None in latest commit</li>", section)
        self.assertNotIn("<a ", section)

    def test_changed_pages_render_as_links(self) -> None:
        text = render_index(["sub/c.html", "a.html"], sample_tree(), make_options())

        section = changed_section(text)
        self.assertIn('<li><a href="./sub/c.html">sub/c.html</a></li>', section)
        self.assertIn('<li><a href="./a.html">a.html</a></li>', section)
        self.assertLess(section.index("sub/c.html"), section.index("a.html"))
        self.assertNotIn("None in latest commit", section)

    def test_pages_follow_tree_order(self) -> None:
        text = render_index([], sample_tree(), make_options())

        self.assertLess(text.index('href="./a.html"'), text.index('href="./B.html"'))
        self.assertLess(text.index('href="./B.html"'), text.index('href="./sub/c.html"'))

    def test_nested_style_collapses_folders_below_top_level(self) -> None:
        text = render_index([], deep_tree(), make_options(index_style="nested"))

        self.assertIn("<li><strong>sub/</strong>", text)
        self.assertIn("<li><details><summary>deep/</summary>", text)
        self.assertNotIn("<details open", text)
        self.assertIn('href="./sub/deep/d.html"', text)

    def test_flat_style_expands_everything(self) -> None:
        text = render_index([], deep_tree(), make_options(index_style="flat"))

        self.assertNotIn("<details>", text)
        self.assertIn("<strong>deep/</strong>", text)
        self.assertIn('href="./sub/deep/d.html"', text)

    def test_target_prefix_applies_to_text_and_target(self) -> None:
        text = render_index(["a.html"], sample_tree(), make_options(target_prefix="webpages"))

        self.assertIn('<a href="./webpages/a.html">webpages/a.html</a>', text)
        self.assertIn("showing: webpages", text)

    def test_root_label_defaults_to_pages_directory_name(self) -> None:
        text = render_index([], sample_tree(), make_options())

        self.assertIn("Site Index - showing: site", text)
        self.assertIn("Folders &amp; Pages under site", text)

    def test_link_targets_are_percent_encoded(self) -> None:
        name = "my page#1 & more.html"
        tree = FolderNode(name="site", rel="", pages=(PageEntry(name, name),))

        text = render_index([], tree, make_options())

        self.assertIn('href="./my%20page%231%20%26%20more.html"', text)
        self.assertIn(">my page#1 &amp; more.html</a>", text)
        hrefs = HREF_RE.findall(text)
        self.assertEqual([unquote(href) for href in hrefs], [f"./{name}"])

    @unittest.skipIf(sys.platform == "win32", "file names are not bytes on Windows")
    def test_undecodable_file_names_link_to_raw_bytes(self) -> None:
        name = os.fsdecode(b"caf\xe9.html")
        folder = FolderNode(name=os.fsdecode(b"d\xe9j\xe0"), rel=os.fsdecode(b"d\xe9j\xe0"))
        tree = FolderNode(name="site", rel="", folders=(folder,), pages=(PageEntry(name, name),))

        text = render_index([name], tree, make_options())

        self.assertIn('<a href="./caf%E9.html">caf\ufffd.html</a>', text)
        self.assertIn("<strong>d\ufffdj\ufffd/</strong>", text)
        text.encode("utf-8")

    def test_intro_and_navigation_links(self) -> None:
        options = make_options(intro_html="<p>Hello</p>", folder_indexes=True)

        text = render_index([], sample_tree(), options)

        self.assertIn('<div class="intro"><p>Hello</p></div>', text)
        self.assertIn('<a href="./recent.html">Recently changed pages</a>', text)
        self.assertIn('<a href="./_index.html">Browse by folder</a>', text)

    def test_document_is_complete_html(self) -> None:
        text = render_index([], sample_tree(), make_options())

        self.assertTrue(text.startswith("<!doctype html>"))
        self.assertIn("<title>Site Index</title>", text)
        self.assertTrue(text.rstrip().endswith("</html>"))

    def test_custom_template_is_used(self) -> None:
        options = make_options(template="<main>{{heading}}|{{content}}</main>")

        text = render_index([], sample_tree(), options)

        self.assertTrue(text.startswith("<main>Site Index - showing: site|"))


class RecentPageTests(unittest.TestCase):
    def test_recent_page_lists_changes(self) -> None:
        text = render_recent_page(["sub/c.html"], make_options())

        self.assertIn('<li><a href="./sub/c.html">sub/c.html</a></li>', text)
        self.assertIn('<a href="./index.html">Site index</a>', text)

    def test_recent_page_placeholder(self) -> None:
        text = render_recent_page([], make_options())

        self.assertIn("<li>None in latest commit</li>", text)


class FolderIndexTests(unittest.TestCase):
    def test_colocated_paths(self) -> None:
        paths = folder_index_paths(deep_tree(), make_options())

        self.assertEqual(paths, {"": "_index.html", "sub": "sub/_index.html", "sub/deep": "sub/deep/_index.html"})

    def test_colocated_paths_include_target_prefix(self) -> None:
        paths = folder_index_paths(sample_tree(), make_options(target_prefix="webpages"))

        self.assertEqual(paths, {"": "webpages/_index.html", "sub": "webpages/sub/_index.html"})

    def test_root_index_has_no_parent_link(self) -> None:
        tree = sample_tree()
        options = make_options(folder_indexes=True)

        text = render_folder_index("", tree, options, folder_index_paths(tree, options))

        self.assertNotIn("Parent folder", text)
        self.assertIn('<a href="./index.html">Site index</a>', text)
        self.assertIn('<a href="./recent.html">Recently changed pages</a>', text)
        self.assertIn('<li><a href="./sub/_index.html">sub/</a></li>', text)
        self.assertIn('<li><a href="./a.html">a.html</a></li>', text)

    def test_subfolder_index_links_relative_to_itself(self) -> None:
        tree = deep_tree()
        options = make_options(folder_indexes=True)
        sub = tree.folders[0]

        text = render_folder_index("sub", sub, options, folder_index_paths(tree, options))

        self.assertIn('<a href="../_index.html">Parent folder</a>', text)
        self.assertIn('<a href="../index.html">Site index</a>', text)
        self.assertIn('<a href="../recent.html">Recently changed pages</a>', text)
        self.assertIn('<li><a href="./deep/_index.html">deep/</a></li>', text)
        self.assertIn('<li><a href="./c.html">c.html</a></li>', text)
        self.assertIn("Index of sub", text)

    def test_parent_link_without_precomputed_paths(self) -> None:
        deep = deep_tree().folders[0].folders[0]

        text = render_folder_index("sub/deep", deep, make_options())

        self.assertIn('<a href="../_index.html">Parent folder</a>', text)
        self.assertIn("<li>No subfolders</li>", text)

    def test_shared_layout_collects_indexes_in_side_directory(self) -> None:
        tree = deep_tree()
        options = make_options(folder_indexes=True, folder_index_layout="shared")
        paths = folder_index_paths(tree, options)

        self.assertEqual(
            paths,
            {"": "_indexes/root.html", "sub": "_indexes/sub.html", "sub/deep": "_indexes/sub__deep.html"},
        )

        text = render_folder_index("sub", tree.folders[0], options, paths)

        self.assertIn('<a href="./root.html">Parent folder</a>', text)
        self.assertIn('<li><a href="./sub__deep.html">deep/</a></li>', text)
        self.assertIn('<li><a href="../sub/c.html">c.html</a></li>', text)
        self.assertIn('<a href="../index.html">Site index</a>', text)

    def test_empty_folder_shows_placeholders(self) -> None:
        empty = FolderNode(name="empty", rel="empty")

        text = render_folder_index("empty", empty, make_options())

        self.assertIn("<li>No subfolders</li>", text)
        self.assertIn("<li>No pages</li>", text)


class RelativeHrefTests(unittest.TestCase):
    def test_relative_href(self) -> None:
        self.assertEqual(relative_href("a.html", "index.html"), "./a.html")
        self.assertEqual(relative_href("index.html", "x/y/_index.html"), "../../index.html")
        self.assertEqual(relative_href("x/a b.html", "x/_index.html"), "./a%20b.html")


if __name__ == "__main__":
    unittest.main()
