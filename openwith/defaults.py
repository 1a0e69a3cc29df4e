# -*- coding: utf-8 -*-
"""
Default-application indicators.

Three independent tiers, read from already-fetched data:
- file default: the per-file override marker (one app, matched by exact path),
- system default: handler entries for the file's extension or any of its
  content types (lower-cased bundle identifiers),
- user default ("Change All"): identifiers from content-type handler entries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Set

from .models import FileOverride, HandlerRecord

EXTENSION_TAG_CLASS = "public.filename-extension"


@dataclass
class DefaultIndicators:
    file_override: Optional[FileOverride] = None
    system_ids: Set[str] = field(default_factory=set)
    user_ids: Set[str] = field(default_factory=set)

    def is_file_default(self, path: str) -> bool:
        return self.file_override is not None and bool(path) and self.file_override.path == path

    def is_system_default(self, identifier: Optional[str]) -> bool:
        return bool(identifier) and identifier.lower() in self.system_ids

    def is_user_default(self, name: str, identifier: Optional[str]) -> bool:
        if name in self.user_ids:
            return True
        return bool(identifier) and identifier in self.user_ids


def _first(*values: Optional[str]) -> Optional[str]:
    for v in values:
        if v:
            return v
    return None


def resolve_defaults(
    handlers: Iterable[HandlerRecord],
    content_types: Sequence[str],
    ext: str,
    file_override: Optional[FileOverride] = None,
) -> DefaultIndicators:
    out = DefaultIndicators(file_override=file_override)
    types = set(content_types)

    for handler in handlers or []:
        if (
            ext
            and handler.content_tag_class == EXTENSION_TAG_CLASS
            and handler.content_tag == ext
        ):
            bundle_id = _first(handler.role_editor, handler.role_viewer, handler.role_all)
            if bundle_id:
                out.system_ids.add(bundle_id.lower())

        if handler.content_type and handler.content_type in types:
            bundle_id = _first(handler.role_all, handler.role_editor, handler.role_viewer)
            if bundle_id:
                out.system_ids.add(bundle_id.lower())
                out.user_ids.add(bundle_id)

    return out
