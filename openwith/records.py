# -*- coding: utf-8 -*-
"""
Record extraction from a Launch Services registry dump.

The dump is semi-structured text: records are separated by dashed lines and
each record is a run of `label:   value` lines. We read it with one pattern
per field, each independently optional, instead of a general parser:
- a bundle record needs a grouping key and a name (displayName or name),
- a claim record needs its bindings.
Records missing their required fields are dropped, never raised on.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional

from .models import Bundle, Claim, Rank, RawRecord, RecordKind

logger = logging.getLogger(__name__)


# Volatile in-memory object id printed after keys, e.g. "Foo.app (0x1a2b)".
_OBJECT_SUFFIX_RE = re.compile(r"\s+\(0x[0-9a-f]+\)\s*$", re.IGNORECASE)

_FIRST_LINE_RE = re.compile(r"^(?P<key>.+?)[ \t]*\n")
_DISPLAY_NAME_RE = re.compile(r"^displayName:[ \t]+(?P<v>.+)$", re.MULTILINE)
_NAME_RE = re.compile(r"^name:[ \t]+(?P<v>.+)$", re.MULTILINE)
_PATH_RE = re.compile(r"^path:[ \t]+(?P<v>.+?)(?:[ \t]+\(0x[0-9a-fA-F]+\))?[ \t]*$", re.MULTILINE)
_ICON_RE = re.compile(r"^icons:[ \t]+(?P<v>.+)$", re.MULTILINE)
_IDENTIFIER_RE = re.compile(r"^identifier:[ \t]+(?P<v>\S+)", re.MULTILINE)

_BINDINGS_RE = re.compile(r"^bindings:[ \t]+(?P<v>.+)$", re.MULTILINE)
_RANK_RE = re.compile(r"^rank:[ \t]+(?P<v>\w+)", re.MULTILINE)
_BUNDLE_RE = re.compile(r"^bundle:[ \t]+(?P<v>.+?)[ \t]*$", re.MULTILINE)

_SEPARATOR_RE = re.compile(r"^-{8,}[ \t]*$", re.MULTILINE)
_RECORD_LABELS = {
    "bundle id:": RecordKind.BUNDLE,
    "claim id:": RecordKind.CLAIM,
}


def normalize_ext(ext: str) -> str:
    """Lowercase extension without the leading dot ("MD" / ".md" -> "md")."""
    ext = (ext or "").strip()
    if ext.startswith("."):
        ext = ext[1:]
    return ext.lower()


def strip_object_suffix(key: str) -> str:
    return _OBJECT_SUFFIX_RE.sub("", (key or "").strip()).strip()


def _field(pattern: re.Pattern, text: str) -> Optional[str]:
    m = pattern.search(text)
    if not m:
        return None
    val = m.group("v").strip()
    return val or None


def _join_path(base: str, rel: str) -> str:
    if rel.startswith("/"):
        return rel
    return base.rstrip("/") + "/" + rel


def parse_bundle(text: str) -> Optional[Bundle]:
    if not isinstance(text, str) or not text.strip():
        return None
    first = _FIRST_LINE_RE.match(text.lstrip("\n"))
    if not first:
        return None
    key = strip_object_suffix(first.group("key"))
    # displayName wins over name.
    name = _field(_DISPLAY_NAME_RE, text) or _field(_NAME_RE, text)
    if not key or not name:
        return None

    path = _field(_PATH_RE, text) or ""
    icon_rel = _field(_ICON_RE, text)
    icon = _join_path(path, icon_rel) if icon_rel and path else None
    identifier = _field(_IDENTIFIER_RE, text)
    return Bundle(key=key, name=name, path=path, icon=icon, identifier=identifier)


def parse_claim(text: str) -> Optional[Claim]:
    if not isinstance(text, str):
        return None
    bindings = _field(_BINDINGS_RE, text)
    if not bindings:
        return None
    content_types = [s.strip() for s in bindings.split(",") if s.strip()]
    if not content_types:
        return None
    raw_bundle = _field(_BUNDLE_RE, text)
    if not raw_bundle:
        return None
    return Claim(
        rank=Rank.parse(_field(_RANK_RE, text)),
        content_types=content_types,
        bundle_key=strip_object_suffix(raw_bundle),
    )


def extract(records: Iterable[RawRecord]) -> tuple[List[Bundle], List[Claim]]:
    """Split raw records into parsed bundles and claims, in input order."""
    bundles: List[Bundle] = []
    claims: List[Claim] = []
    dropped = 0
    for record in records:
        if record.kind == RecordKind.BUNDLE:
            bundle = parse_bundle(record.text)
            if bundle is None:
                dropped += 1
                continue
            bundles.append(bundle)
        elif record.kind == RecordKind.CLAIM:
            claim = parse_claim(record.text)
            if claim is None:
                dropped += 1
                continue
            claims.append(claim)
    if dropped:
        logger.debug("dropped %d malformed registry records", dropped)
    return bundles, claims


def split_dump(text: str) -> List[RawRecord]:
    """
    Cut `lsregister -dump` output into tagged records.

    A record is a bundle record when its first line is `bundle id: ...` and a
    claim record when it is `claim id: ...`; the label is removed so the
    record text starts with the grouping key. Other records are ignored.
    """
    out: List[RawRecord] = []
    if not isinstance(text, str):
        return out
    for block in _SEPARATOR_RE.split(text):
        block = block.strip("\n")
        if not block.strip():
            continue
        head = block.lstrip()
        for label, kind in _RECORD_LABELS.items():
            if head.startswith(label):
                out.append(RawRecord(kind=kind, text=head[len(label):].lstrip(" \t") + "\n"))
                break
    return out
