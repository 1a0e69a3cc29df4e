# -*- coding: utf-8 -*-
"""
Typed entities shared by the resolution pipeline.

Loose external data (handler preference entries, Info.plist document types,
override attributes) is normalised here once, at the boundary, so the index
and ranking code only ever sees fully-typed values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional


class Rank(str, Enum):
    OWNER = "Owner"
    DEFAULT = "Default"
    ALTERNATE = "Alternate"
    NONE = "None"
    # Synthesized from document-type declarations, never read from the registry.
    EXTENSION_MATCH = "ExtensionMatch"

    @property
    def weight(self) -> int:
        return _RANK_WEIGHTS[self]

    @classmethod
    def parse(cls, value: Optional[str]) -> "Rank":
        """Map a raw registry rank to a Rank; anything unrecognised is NONE."""
        s = (value or "").strip()
        for rank in _RAW_RANKS:
            if rank.value == s:
                return rank
        return cls.NONE


_RANK_WEIGHTS: Dict[Rank, int] = {
    Rank.EXTENSION_MATCH: 4,
    Rank.OWNER: 3,
    Rank.DEFAULT: 2,
    Rank.ALTERNATE: 1,
    Rank.NONE: 0,
}

_RAW_RANKS = (Rank.OWNER, Rank.DEFAULT, Rank.ALTERNATE, Rank.NONE)


class RecordKind(str, Enum):
    BUNDLE = "bundle"
    CLAIM = "claim"


@dataclass(frozen=True)
class RawRecord:
    kind: RecordKind
    text: str


@dataclass(frozen=True)
class Bundle:
    key: str
    name: str
    path: str = ""
    icon: Optional[str] = None
    identifier: Optional[str] = None


@dataclass(frozen=True)
class Claim:
    rank: Rank
    content_types: List[str]
    bundle_key: str


@dataclass(frozen=True)
class Candidate:
    bundle: Bundle
    rank: Rank

    @property
    def name(self) -> str:
        return self.bundle.name

    @property
    def path(self) -> str:
        return self.bundle.path


@dataclass
class RankedApp:
    name: str
    path: str
    rank: Rank
    icon: Optional[str] = None
    identifier: Optional[str] = None
    is_file_default: bool = False
    is_system_default: bool = False
    is_default: bool = False

    def to_dict(self) -> dict:
        out: Dict[str, Any] = {
            "name": self.name,
            "path": self.path,
            "rank": self.rank.value,
            "isFileDefault": self.is_file_default,
            "isSystemDefault": self.is_system_default,
            "isDefault": self.is_default,
        }
        if self.icon:
            out["icon"] = self.icon
        if self.identifier:
            out["identifier"] = self.identifier
        return out


def _opt_str(data: dict, *keys: str) -> Optional[str]:
    for key in keys:
        val = data.get(key)
        if isinstance(val, str) and val.strip():
            return val.strip()
    return None


def _str_list(value) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    return [str(x).strip() for x in value if isinstance(x, str) and x.strip()]


@dataclass(frozen=True)
class HandlerRecord:
    """One default-application handler entry from the preferences store."""

    content_tag_class: Optional[str] = None
    content_tag: Optional[str] = None
    content_type: Optional[str] = None
    role_editor: Optional[str] = None
    role_viewer: Optional[str] = None
    role_all: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "HandlerRecord":
        # Accept both the native LSHandler* keys and the short field names.
        return cls(
            content_tag_class=_opt_str(data, "LSHandlerContentTagClass", "contentTagClass", "content_tag_class"),
            content_tag=_opt_str(data, "LSHandlerContentTag", "contentTag", "content_tag"),
            content_type=_opt_str(data, "LSHandlerContentType", "contentType", "content_type"),
            role_editor=_opt_str(data, "LSHandlerRoleEditor", "roleEditor", "role_editor"),
            role_viewer=_opt_str(data, "LSHandlerRoleViewer", "roleViewer", "role_viewer"),
            role_all=_opt_str(data, "LSHandlerRoleAll", "roleAll", "role_all"),
        )


@dataclass(frozen=True)
class DocumentType:
    extensions: FrozenSet[str] = frozenset()
    content_types: FrozenSet[str] = frozenset()

    @classmethod
    def from_dict(cls, data: dict) -> "DocumentType":
        exts = _str_list(data.get("CFBundleTypeExtensions", data.get("extensions")))
        utis = _str_list(data.get("LSItemContentTypes", data.get("contentTypes")))
        return cls(extensions=frozenset(exts), content_types=frozenset(utis))


@dataclass(frozen=True)
class AppDeclarations:
    """What an application bundle declares about itself (its Info.plist)."""

    document_types: List[DocumentType] = field(default_factory=list)
    icon_file: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "AppDeclarations":
        raw_types = data.get("CFBundleDocumentTypes", data.get("documentTypes")) or []
        if not isinstance(raw_types, list):
            raw_types = []
        icon_file = _opt_str(data, "CFBundleIconFile", "iconFile")
        if icon_file is None:
            icons = data.get("CFBundleIcons")
            if isinstance(icons, dict) and isinstance(icons.get("CFBundlePrimaryIcon"), dict):
                icon_file = _opt_str(icons["CFBundlePrimaryIcon"], "CFBundleIconFile")
        return cls(
            document_types=[DocumentType.from_dict(d) for d in raw_types if isinstance(d, dict)],
            icon_file=icon_file,
        )


@dataclass(frozen=True)
class FileOverride:
    path: str
    identifier: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["FileOverride"]:
        if not isinstance(data, dict):
            return None
        path = _opt_str(data, "path")
        identifier = _opt_str(data, "bundleidentifier", "identifier")
        # The original marker is only honoured when both fields are present.
        if not path or not identifier:
            return None
        return cls(path=path, identifier=identifier)
