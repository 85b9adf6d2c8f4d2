"""Folder/page tree scanned from the site directory.

The tree is built once per run and handed to the renderers. Hidden entries and
non-page files never make it into the model.
"""

from __future__ import annotations

import os
from collections.abc import Collection, Iterator
from dataclasses import dataclass, field
from pathlib import Path

PAGE_SUFFIX = ".html"
HIDDEN_PREFIX = "."


class DirectoryUnreadable(OSError):
    """A folder under the scan root could not be listed."""

    def __init__(self, path: Path, reason: OSError) -> None:
        super().__init__(f"cannot list {path}: {reason.strerror or reason}")
        self.errno = reason.errno
        self.path = path
        self.reason = reason


@dataclass(frozen=True)
class PageEntry:
    name: str
    rel: str


@dataclass(frozen=True)
class FolderNode:
    name: str
    rel: str
    folders: tuple[FolderNode, ...] = field(default_factory=tuple)
    pages: tuple[PageEntry, ...] = field(default_factory=tuple)


def sort_key(name: str) -> tuple[str, str]:
    """Case-insensitive order with the raw name as a tie breaker."""
    return name.casefold(), name


def is_page_name(name: str) -> bool:
    return name.lower().endswith(PAGE_SUFFIX)


def is_hidden(name: str) -> bool:
    return name.startswith(HIDDEN_PREFIX)


def child_rel(parent_rel: str, name: str) -> str:
    return f"{parent_rel}/{name}" if parent_rel else name


def _scan(
    directory: Path, name: str, rel: str, exclude: Collection[str], exclude_names: Collection[str]
) -> FolderNode:
    try:
        with os.scandir(directory) as it:
            entries = list(it)
    except (FileNotFoundError, NotADirectoryError, PermissionError) as exc:
        raise DirectoryUnreadable(directory, exc) from exc

    folders: list[FolderNode] = []
    pages: list[PageEntry] = []
    for entry in entries:
        if is_hidden(entry.name):
            continue
        entry_rel = child_rel(rel, entry.name)
        if entry_rel in exclude or entry.name in exclude_names:
            continue
        if entry.is_dir(follow_symlinks=False):
            folders.append(_scan(Path(entry.path), entry.name, entry_rel, exclude, exclude_names))
        elif entry.is_file(follow_symlinks=False) and is_page_name(entry.name):
            pages.append(PageEntry(name=entry.name, rel=entry_rel))

    folders.sort(key=lambda node: sort_key(node.name))
    pages.sort(key=lambda page: sort_key(page.name))
    return FolderNode(name=name, rel=rel, folders=tuple(folders), pages=tuple(pages))


def build_tree(
    root: Path, exclude: Collection[str] = (), exclude_names: Collection[str] = ()
) -> FolderNode:
    """Scan ``root`` recursively into a :class:`FolderNode`.

    ``exclude`` holds slash-separated paths relative to ``root`` (generated
    outputs) that are left out of the tree; ``exclude_names`` drops entries
    with those names at any depth. Raises :class:`DirectoryUnreadable` when any
    folder cannot be listed; no partial tree is returned.
    """
    root = Path(root)
    return _scan(root, root.name, "", frozenset(exclude), frozenset(exclude_names))


def iter_pages(node: FolderNode) -> Iterator[PageEntry]:
    yield from node.pages
    for folder in node.folders:
        yield from iter_pages(folder)


def iter_folders(node: FolderNode) -> Iterator[FolderNode]:
    yield node
    for folder in node.folders:
        yield from iter_folders(folder)


def count_pages(node: FolderNode) -> int:
    return sum(1 for _ in iter_pages(node))
