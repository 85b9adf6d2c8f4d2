"""Pages touched by the latest commit, read from git.

The query is advisory: any failure degrades to an empty list.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

from .tree import is_hidden, is_page_name
from .utils import to_web_path

GIT_TIMEOUT_SECONDS = 30


class CollaboratorQueryFailed(RuntimeError):
    """git could not answer the query."""


def run_git(args: list[str], cwd: Path) -> str:
    try:
        completed = subprocess.run(
            ["git", *args],
            cwd=cwd,
            check=True,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="surrogateescape",
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except FileNotFoundError as exc:
        raise CollaboratorQueryFailed("git executable not found") from exc
    except subprocess.TimeoutExpired as exc:
        raise CollaboratorQueryFailed(f"git {args[0]} timed out") from exc
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
        raise CollaboratorQueryFailed(f"git {args[0]} failed: {detail}") from exc
    return completed.stdout


def repo_root(cwd: Path) -> Path:
    return Path(run_git(["rev-parse", "--show-toplevel"], cwd).strip())


def latest_commit_files(cwd: Path) -> tuple[Path, list[str]]:
    """Return the repository root and the files changed in ``HEAD``.

    Paths are relative to the repository root. Deleted files are skipped and
    the root commit reports its own files.
    """
    root = repo_root(cwd)
    raw = run_git(
        ["diff-tree", "--no-commit-id", "--name-only", "-r", "-z", "--root", "--diff-filter=d", "HEAD"],
        root,
    )
    return root, [item for item in raw.split("\0") if item.strip()]


def select_pages(root: Path, files: list[str], target_dir: Path) -> list[str]:
    """Keep page files inside ``target_dir``, relative to it, in git order."""
    target = target_dir.resolve()
    pages = []
    for name in files:
        path = (root / name).resolve()
        if not path.is_relative_to(target):
            continue
        rel = to_web_path(path.relative_to(target).as_posix())
        if not rel or not is_page_name(rel):
            continue
        if any(is_hidden(part) for part in rel.split("/")):
            continue
        pages.append(rel)
    return pages


def changed_pages(target_dir: Path, cwd: Path | None = None) -> list[str]:
    try:
        root, files = latest_commit_files(cwd or target_dir)
    except CollaboratorQueryFailed as exc:
        print(f"Could not read latest commit, no recent pages listed: {exc}", file=sys.stderr)
        return []
    return select_pages(root, files, target_dir)
