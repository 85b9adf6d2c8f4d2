from __future__ import annotations

import html
import posixpath

from .config import INDEX_FILE, SiteOptions
from .render import render_template
from .tree import FolderNode, child_rel, iter_folders
from .utils import display_text, encode_uri, path_slug, unique_name

CHANGED_PLACEHOLDER = "<li>None in latest commit</li>"
SHARED_ROOT_STEM = "root"


def relative_href(target: str, from_page: str) -> str:
    """Encoded link from the page at ``from_page`` to ``target``.

    Both paths are relative to the pages directory.
    """
    start = posixpath.dirname(from_page) or "."
    rel = posixpath.relpath(target, start)
    if not rel.startswith("../"):
        rel = f"./{rel}"
    return encode_uri(rel)


def escape_text(text: str) -> str:
    return html.escape(display_text(text))


def link_item(href: str, text: str, indent: str = "") -> str:
    return f'{indent}<li><a href="{href}">{escape_text(text)}</a></li>'


def render_changed_list(changed_pages: list[str], options: SiteOptions, from_page: str) -> str:
    items = []
    for rel in changed_pages:
        path = options.site_path(rel)
        items.append(link_item(relative_href(path, from_page), path))
    return "\n".join(items) if items else CHANGED_PLACEHOLDER


def render_tree(node: FolderNode, options: SiteOptions, depth: int = 0) -> str:
    """Nested ``<ul>`` listing of ``node``.

    With the nested style every folder below the top level sits in a closed
    ``<details>`` block; the flat style expands everything.
    """
    collapsible = options.index_style == "nested"
    pad = " " * depth
    out = ""
    if node.pages:
        out += "<ul>\n"
        for page in node.pages:
            path = options.site_path(page.rel)
            out += link_item(relative_href(path, INDEX_FILE), path, pad) + "\n"
        out += "</ul>\n"
    if node.folders:
        out += "<ul>\n"
        for folder in node.folders:
            name = escape_text(folder.name)
            if depth > 0 and collapsible:
                out += f"{pad}<li><details><summary>{name}/</summary>\n"
                out += render_tree(folder, options, depth + 1)
                out += f"{pad}</details></li>\n"
            else:
                out += f"{pad}<li><strong>{name}/</strong>\n"
                out += render_tree(folder, options, depth + 1)
                out += f"{pad}</li>\n"
        out += "</ul>\n"
    return out


def render_index(changed_pages: list[str], tree: FolderNode, options: SiteOptions) -> str:
    label = escape_text(options.shown_root_label)
    nav = []
    if options.has_recent_page:
        nav.append(f'<a href="{relative_href(options.recent_page, INDEX_FILE)}">Recently changed pages</a>')
    if options.folder_indexes:
        root_index = folder_index_paths(tree, options)[tree.rel]
        nav.append(f'<a href="{relative_href(root_index, INDEX_FILE)}">Browse by folder</a>')
    nav_html = f"<nav>{' | '.join(nav)}</nav>\n" if nav else ""
    intro = f"<div class=\"intro\">{options.intro_html}</div>\n" if options.intro_html else ""
    content = (
        f"{nav_html}"
        f"{intro}"
        "<section>\n"
        "  <h2>Recently edited (latest commit)</h2>\n"
        "  <ul>\n"
        f"{render_changed_list(changed_pages, options, INDEX_FILE)}\n"
        "  </ul>\n"
        "</section>\n"
        "<section>\n"
        f"  <h2>Folders &amp; Pages under {label}</h2>\n"
        f"{render_tree(tree, options)}"
        "</section>"
    )
    return render_template(
        options.template,
        title=escape_text(options.title),
        heading=f"{escape_text(options.title)} - showing: {label}",
        content=content,
    )


def render_recent_page(changed_pages: list[str], options: SiteOptions) -> str:
    page = options.recent_page
    content = (
        f'<nav><a href="{relative_href(INDEX_FILE, page)}">Site index</a></nav>\n'
        "<ul>\n"
        f"{render_changed_list(changed_pages, options, page)}\n"
        "</ul>"
    )
    return render_template(
        options.template,
        title=escape_text(f"Recently changed | {options.title}"),
        heading="Recently edited (latest commit)",
        content=content,
    )


def default_index_path(folder_rel: str, options: SiteOptions) -> str:
    if options.folder_index_layout == "colocated":
        return options.site_path(child_rel(folder_rel, options.folder_index_name))
    slug = path_slug(folder_rel) if folder_rel else SHARED_ROOT_STEM
    return f"{options.folder_index_dir}/{slug}.html"


def folder_index_paths(tree: FolderNode, options: SiteOptions) -> dict[str, str]:
    """Output path of every folder's index page, relative to the pages directory."""
    paths: dict[str, str] = {}
    used: set[str] = set()
    for folder in iter_folders(tree):
        if options.folder_index_layout == "colocated":
            paths[folder.rel] = default_index_path(folder.rel, options)
            continue
        candidate = path_slug(folder.rel) if folder.rel else SHARED_ROOT_STEM
        name = unique_name(candidate, folder.rel, used, ".html")
        used.add(name)
        paths[folder.rel] = f"{options.folder_index_dir}/{name}"
    return paths


def render_folder_index(
    folder_rel: str,
    folder: FolderNode,
    options: SiteOptions,
    index_paths: dict[str, str] | None = None,
) -> str:
    """Index page for one folder: its pages, its subfolders, and navigation."""
    if index_paths is None:
        index_paths = folder_index_paths(folder, options)
    here = index_paths[folder_rel]

    nav = [
        f'<a href="{relative_href(INDEX_FILE, here)}">Site index</a>',
        f'<a href="{relative_href(options.recent_page, here)}">Recently changed pages</a>',
    ]
    if folder_rel:
        parent_rel = posixpath.dirname(folder_rel)
        parent_index = index_paths.get(parent_rel) or default_index_path(parent_rel, options)
        nav.append(f'<a href="{relative_href(parent_index, here)}">Parent folder</a>')

    folder_items = [
        link_item(relative_href(index_paths[sub.rel], here), f"{sub.name}/") for sub in folder.folders
    ]
    page_items = [
        link_item(relative_href(options.site_path(page.rel), here), page.name) for page in folder.pages
    ]
    folders_html = "\n".join(folder_items) or "<li>No subfolders</li>"
    pages_html = "\n".join(page_items) or "<li>No pages</li>"
    content = (
        f"<nav>{' | '.join(nav)}</nav>\n"
        "<section>\n"
        "  <h2>Folders</h2>\n"
        "  <ul>\n"
        f"{folders_html}\n"
        "  </ul>\n"
        "</section>\n"
        "<section>\n"
        "  <h2>Pages</h2>\n"
        "  <ul>\n"
        f"{pages_html}\n"
        "  </ul>\n"
        "</section>"
    )
    label = options.site_path(folder_rel) if folder_rel else options.shown_root_label
    return render_template(
        options.template,
        title=escape_text(f"{label} | {options.title}"),
        heading=f"Index of {escape_text(label)}",
        content=content,
    )
