"""Shared builders for site trees used across tests."""

from __future__ import annotations

from pathlib import Path

from siteindex.config import SiteOptions
from siteindex.tree import FolderNode, PageEntry


def make_options(**overrides: object) -> SiteOptions:
    values: dict = {"pages_dir": Path("/srv/site"), "target_dir": Path("/srv/site")}
    values.update(overrides)
    return SiteOptions(**values)


def sample_tree() -> FolderNode:
    """Root with ``a.html``, ``B.html`` and ``sub/c.html``."""
    sub = FolderNode(name="sub", rel="sub", pages=(PageEntry("c.html", "sub/c.html"),))
    return FolderNode(
        name="site",
        rel="",
        folders=(sub,),
        pages=(PageEntry("a.html", "a.html"), PageEntry("B.html", "B.html")),
    )


def write_pages(root: Path, *rels: str) -> None:
    for rel in rels:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"<p>{rel}</p>\n", encoding="utf-8")
