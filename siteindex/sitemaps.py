"""Sitemap, sitemap index and robots.txt rendering.

Locations are built one way everywhere: ``base_url/path`` when a base URL is
configured, otherwise the root-absolute ``/path``.
"""

from __future__ import annotations

from .config import ROBOTS_FILE, SITEMAP_FILE, SITEMAP_INDEX_FILE, SiteOptions
from .tree import FolderNode, iter_folders, iter_pages
from .utils import encode_uri, escape_xml, join_url, path_slug, unique_name

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
ROOT_SITEMAP_STEM = "sitemap-root"


def location(path: str, options: SiteOptions) -> str:
    encoded = encode_uri(path)
    if options.base_url:
        return join_url(options.base_url, encoded)
    return "/" + encoded.lstrip("/")


def _urlset(node: FolderNode, options: SiteOptions) -> str:
    lines = [XML_DECLARATION, f'<urlset xmlns="{SITEMAP_NS}">']
    for page in iter_pages(node):
        loc = location(options.site_path(page.rel), options)
        lines.append(f"<url><loc>{escape_xml(loc)}</loc></url>")
    lines.append("</urlset>")
    return "\n".join(lines) + "\n"


def render_sitemap(tree: FolderNode, options: SiteOptions) -> str:
    return _urlset(tree, options)


def render_sitemap_for_folder(folder: FolderNode, options: SiteOptions) -> str:
    """Sitemap of the folder's own pages and every page below it."""
    return _urlset(folder, options)


def render_sitemap_index(sitemap_paths: list[str], options: SiteOptions) -> str:
    lines = [XML_DECLARATION, f'<sitemapindex xmlns="{SITEMAP_NS}">']
    for path in sitemap_paths:
        lines.append(f"<sitemap><loc>{escape_xml(location(path, options))}</loc></sitemap>")
    lines.append("</sitemapindex>")
    return "\n".join(lines) + "\n"


def sitemap_file_names(tree: FolderNode) -> dict[str, str]:
    """Map every folder's relative path to a distinct sitemap file name."""
    names: dict[str, str] = {}
    used: set[str] = set()
    for folder in iter_folders(tree):
        candidate = f"sitemap-{path_slug(folder.rel)}" if folder.rel else ROOT_SITEMAP_STEM
        name = unique_name(candidate, folder.rel, used, ".xml")
        used.add(name)
        names[folder.rel] = name
    return names


def render_split_sitemaps(tree: FolderNode, options: SiteOptions) -> dict[str, str]:
    """Per-folder sitemaps keyed by their path relative to the pages directory."""
    names = sitemap_file_names(tree)
    documents = {}
    for folder in iter_folders(tree):
        path = f"{options.sitemap_dir}/{names[folder.rel]}"
        documents[path] = render_sitemap_for_folder(folder, options)
    return documents


def sitemap_location(options: SiteOptions) -> str:
    return location(SITEMAP_INDEX_FILE if options.split_sitemaps else SITEMAP_FILE, options)


def render_robots(sitemap_url: str) -> str:
    return f"User-agent: *\nAllow: /\nSitemap: {sitemap_url}\n"
