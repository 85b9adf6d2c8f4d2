from __future__ import annotations

import html
import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path

import markdown

from .render import BASE_TEMPLATE, read_template
from .utils import parse_bool, to_web_path

try:
    import tomllib as toml
except ImportError:
    try:
        import tomli as toml
    except ImportError:  # pragma: no cover - optional dependency
        toml = None

try:
    import yaml
except ImportError:  # pragma: no cover - optional dependency
    yaml = None

INDEX_STYLES = ("nested", "flat")
FOLDER_INDEX_LAYOUTS = ("colocated", "shared")
DEFAULT_TARGET = "webpages"
INDEX_FILE = "index.html"
SITEMAP_FILE = "sitemap.xml"
SITEMAP_INDEX_FILE = "sitemap-index.xml"
ROBOTS_FILE = "robots.txt"
ROOT_OUTPUTS = (INDEX_FILE, SITEMAP_FILE, SITEMAP_INDEX_FILE, ROBOTS_FILE)


@dataclass
class SiteOptions:
    pages_dir: Path
    target_dir: Path
    target_prefix: str = ""
    base_url: str = ""
    title: str = "Site Index"
    index_style: str = "nested"
    split_sitemaps: bool = False
    sitemap_dir: str = "sitemaps"
    folder_indexes: bool = False
    folder_index_layout: str = "colocated"
    folder_index_name: str = "_index.html"
    folder_index_dir: str = "_indexes"
    recent_page: str = "recent.html"
    write_recent: bool = False
    intro_html: str = ""
    template: str = BASE_TEMPLATE
    git_enabled: bool = True

    @property
    def shown_root_label(self) -> str:
        return self.target_prefix or self.pages_dir.name

    @property
    def has_recent_page(self) -> bool:
        return self.write_recent or self.folder_indexes

    def site_path(self, rel: str) -> str:
        """Path of a page relative to the pages directory."""
        if not self.target_prefix:
            return rel
        if not rel:
            return self.target_prefix
        return f"{self.target_prefix}/{rel}"


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        if toml is None:
            print("TOML config requires tomllib (Python 3.11+) or tomli.", file=sys.stderr)
            sys.exit(1)
        try:
            data = toml.loads(text)
        except Exception as exc:  # pragma: no cover - depends on parser
            print(f"Invalid TOML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        if not isinstance(data, dict):
            print(f"TOML config must be a mapping: {path}", file=sys.stderr)
            sys.exit(1)
        return data
    if suffix in {".yml", ".yaml"}:
        if yaml is None:
            print("YAML config requires PyYAML.", file=sys.stderr)
            sys.exit(1)
        try:
            data = yaml.safe_load(text)
        except Exception as exc:  # pragma: no cover - depends on parser
            print(f"Invalid YAML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        if data is None:
            return {}
        if not isinstance(data, dict):
            print(f"YAML config must be a mapping: {path}", file=sys.stderr)
            sys.exit(1)
        return data
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        print(f"Invalid JSON in config file {path}: {exc}", file=sys.stderr)
        sys.exit(1)
    if not isinstance(data, dict):
        print(f"JSON config must be a mapping: {path}", file=sys.stderr)
        sys.exit(1)
    return data


def resolve_path(value: str, args: object) -> Path:
    path = Path(value)
    if not path.is_absolute():
        config_path = Path(getattr(args, "config", "site.toml")).resolve()
        path = config_path.parent / path
    return path


def resolve_intro_html(args: object) -> str:
    html_snippet = (getattr(args, "intro_html", "") or "").strip()
    if html_snippet:
        return html_snippet

    file_value = (getattr(args, "intro_file", "") or "").strip()
    if file_value:
        path = resolve_path(file_value, args)
        if not path.exists():
            print(f"Intro file not found: {path}", file=sys.stderr)
        else:
            text = path.read_text(encoding="utf-8")
            suffix = path.suffix.lower()
            if suffix in {".html", ".htm"}:
                return text
            if suffix == ".md":
                md = markdown.Markdown(extensions=["fenced_code", "tables"])
                return md.convert(text)
            escaped = html.escape(text).replace("\n", "<br>")
            return f"<p>{escaped}</p>"

    text_value = (getattr(args, "intro_text", "") or "").strip()
    if text_value:
        escaped = html.escape(text_value).replace("\n", "<br>")
        return f"<p>{escaped}</p>"
    return ""


def resolve_template(args: object) -> str:
    file_value = (getattr(args, "template", "") or "").strip()
    if not file_value:
        return BASE_TEMPLATE
    path = resolve_path(file_value, args)
    if not path.exists():
        print(f"Template file not found: {path}", file=sys.stderr)
        sys.exit(1)
    return read_template(path)


def resolve_target_dir(pages_dir: Path, target: str) -> Path:
    """Use ``pages_dir/target`` when it is a directory, else ``pages_dir``."""
    if target:
        candidate = pages_dir / target
        if candidate.is_dir():
            return candidate
    return pages_dir


def resolve_base_url(value: str) -> str:
    value = (value or "").strip() or os.environ.get("BASE_URL", "").strip()
    return value.rstrip("/")


def resolve_options(args: object) -> SiteOptions:
    pages_dir = Path(getattr(args, "pages_dir", "") or ".").resolve()
    target_dir = resolve_target_dir(pages_dir, getattr(args, "target", DEFAULT_TARGET) or "")
    target_prefix = to_web_path(os.path.relpath(target_dir, pages_dir))

    index_style = str(getattr(args, "index_style", "nested") or "nested").lower()
    if index_style not in INDEX_STYLES:
        print(f"Unknown index style {index_style!r}; expected one of {', '.join(INDEX_STYLES)}.", file=sys.stderr)
        sys.exit(1)
    layout = str(getattr(args, "folder_index_layout", "colocated") or "colocated").lower()
    if layout not in FOLDER_INDEX_LAYOUTS:
        print(
            f"Unknown folder index layout {layout!r}; expected one of {', '.join(FOLDER_INDEX_LAYOUTS)}.",
            file=sys.stderr,
        )
        sys.exit(1)

    folder_indexes = parse_bool(getattr(args, "folder_indexes", False))
    folder_index_name = str(getattr(args, "folder_index_name", "") or "_index.html")
    recent_page = str(getattr(args, "recent_page", "") or "recent.html")
    if recent_page in ROOT_OUTPUTS:
        print(f"Recent page {recent_page!r} would overwrite a generated file.", file=sys.stderr)
        sys.exit(1)
    if folder_indexes and layout == "colocated" and not target_prefix:
        if folder_index_name in ROOT_OUTPUTS or folder_index_name == recent_page:
            print(
                f"Folder index name {folder_index_name!r} would overwrite a generated file in the pages directory.",
                file=sys.stderr,
            )
            sys.exit(1)

    return SiteOptions(
        pages_dir=pages_dir,
        target_dir=target_dir,
        target_prefix=target_prefix,
        base_url=resolve_base_url(getattr(args, "base_url", "")),
        title=str(getattr(args, "title", "") or "Site Index"),
        index_style=index_style,
        split_sitemaps=parse_bool(getattr(args, "split_sitemaps", False)),
        folder_indexes=folder_indexes,
        folder_index_layout=layout,
        folder_index_name=folder_index_name,
        recent_page=recent_page,
        write_recent=parse_bool(getattr(args, "write_recent", False)),
        intro_html=resolve_intro_html(args),
        template=resolve_template(args),
        git_enabled=parse_bool(getattr(args, "git", True)),
    )
