from __future__ import annotations

import hashlib
import os
import re
from urllib.parse import quote

XML_ESCAPES = {"<": "&lt;", ">": "&gt;", "&": "&amp;", "'": "&apos;", '"': "&quot;"}
XML_RESERVED_RE = re.compile(r"[<>&'\"]")
WHITESPACE_RE = re.compile(r"\s+")


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def join_url(base: str, path: str) -> str:
    base = base.rstrip("/")
    path = path.lstrip("/")
    if not path:
        return base
    return f"{base}/{path}"


def to_web_path(path: str) -> str:
    """Normalize an OS path to forward slashes without a leading ``./``."""
    path = path.replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    if path == ".":
        return ""
    return path


def encode_uri(path: str) -> str:
    """Percent-encode everything outside the unreserved set, keeping ``/``.

    Names that are not valid UTF-8 on disk arrive with surrogate escapes; they
    are encoded back to their raw bytes so the link still resolves.
    """
    return quote(os.fsencode(path), safe="/")


def display_text(text: str) -> str:
    """Replace undecodable file-name bytes so the text can be written as UTF-8."""
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def escape_xml(text: str) -> str:
    return XML_RESERVED_RE.sub(lambda match: XML_ESCAPES[match.group(0)], text)


def hash_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8", "surrogateescape")).hexdigest()


def path_slug(rel: str) -> str:
    """Flatten a relative folder path into one file-name-safe segment."""
    slug = rel.strip("/").replace("/", "__")
    return WHITESPACE_RE.sub("-", slug.strip())


def unique_name(candidate: str, key: str, used: set[str], suffix: str = "") -> str:
    """Return ``candidate + suffix`` or a hash-suffixed variant not in ``used``."""
    name = f"{candidate}{suffix}"
    if name not in used:
        return name
    digest = hash_text(key)
    for length in (8, 10, 12, 16):
        name = f"{candidate}-{digest[:length]}{suffix}"
        if name not in used:
            return name
    counter = 2
    while True:
        name = f"{candidate}-{counter}{suffix}"
        if name not in used:
            return name
        counter += 1
