# -*- coding: utf-8 -*-
"""
Bundle index, extension-match synthesis and the content-type index.

- Bundles are keyed by their registry grouping key. Duplicate keys keep the
  copy installed under /Applications/, otherwise the first one seen.
- An app whose Info.plist document types list the file's extension is an
  "extension match": its claims are upgraded to Rank.EXTENSION_MATCH, and if
  it has no claim on any type of the file it is added under public.data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .models import AppDeclarations, Bundle, Candidate, Claim, Rank

logger = logging.getLogger(__name__)


CANONICAL_APPS_DIR = "/Applications/"
APP_CONTAINER_SUFFIX = ".app"
FALLBACK_CONTENT_TYPE = "public.data"
WILDCARD_EXTENSION = "*"

# path -> declarations (None when unavailable)
DeclarationLookup = Callable[[str], Optional[AppDeclarations]]


def is_app_container(path: str) -> bool:
    return bool(path) and path.endswith(APP_CONTAINER_SUFFIX)


def _is_canonical(path: str) -> bool:
    return bool(path) and path.startswith(CANONICAL_APPS_DIR)


def build_bundle_index(bundles: Iterable[Bundle]) -> Dict[str, Bundle]:
    index: Dict[str, Bundle] = {}
    for bundle in bundles:
        existing = index.get(bundle.key)
        if existing is None or (_is_canonical(bundle.path) and not _is_canonical(existing.path)):
            index[bundle.key] = bundle
    return index


def declares_extension(decl: AppDeclarations, ext: str, include_wildcard: bool = False) -> bool:
    for doc_type in decl.document_types:
        if ext in doc_type.extensions:
            return True
        if include_wildcard and WILDCARD_EXTENSION in doc_type.extensions:
            return True
    return False


def _safe_declarations(lookup: Optional[DeclarationLookup], path: str) -> Optional[AppDeclarations]:
    if lookup is None:
        return None
    try:
        return lookup(path)
    except Exception as e:
        logger.debug("declarations unavailable for %s: %s", path, e)
        return None


@dataclass
class ExtensionMatch:
    name: str
    path: str
    declarations: AppDeclarations


def find_extension_matches(
    bundles: Iterable[Bundle],
    ext: str,
    declarations: Optional[DeclarationLookup],
    include_wildcard: bool = False,
) -> Dict[str, ExtensionMatch]:
    """
    Map app path -> ExtensionMatch for every bundle declaring `ext`.

    All parsed bundle records are considered, including those that lost the
    duplicate-key resolution, and each path is looked up once.
    """
    matches: Dict[str, ExtensionMatch] = {}
    if not ext:
        return matches
    checked: set[str] = set()
    for bundle in bundles:
        path = bundle.path
        if not is_app_container(path) or path in checked:
            continue
        checked.add(path)
        decl = _safe_declarations(declarations, path)
        if decl is None:
            continue
        if declares_extension(decl, ext, include_wildcard):
            matches[path] = ExtensionMatch(name=bundle.name, path=path, declarations=decl)
            logger.debug("%s declares .%s", bundle.name, ext)
    return matches


def _icon_from_declarations(path: str, decl: AppDeclarations) -> Optional[str]:
    icon_file = decl.icon_file
    if not icon_file:
        return None
    if not icon_file.endswith(".icns"):
        icon_file += ".icns"
    return f"{path.rstrip('/')}/Contents/Resources/{icon_file}"


@dataclass
class ContentTypeIndex:
    """
    content type -> candidates. Claims are deduplicated by app name per type;
    extension-matching fallbacks are always appended to public.data.
    """

    by_type: Dict[str, List[Candidate]] = field(default_factory=dict)

    def get(self, content_type: str) -> List[Candidate]:
        return self.by_type.get(content_type, [])

    def names(self, content_type: str) -> set[str]:
        return {c.name for c in self.get(content_type)}

    def has_path(self, content_type: str, path: str) -> bool:
        return any(c.path == path for c in self.get(content_type))

    def add(self, content_type: str, candidate: Candidate) -> bool:
        entries = self.by_type.setdefault(content_type, [])
        if any(c.name == candidate.name for c in entries):
            return False
        entries.append(candidate)
        return True


def build_content_type_index(
    claims: Iterable[Claim],
    bundle_index: Dict[str, Bundle],
    extension_matches: Dict[str, ExtensionMatch],
    hierarchy: Sequence[str],
    include_alternate: bool = True,
) -> ContentTypeIndex:
    index = ContentTypeIndex()

    for claim in claims:
        if claim.rank == Rank.NONE:
            continue
        if not include_alternate and claim.rank == Rank.ALTERNATE:
            continue
        bundle = bundle_index.get(claim.bundle_key)
        if bundle is None:
            continue
        rank = Rank.EXTENSION_MATCH if bundle.path in extension_matches else claim.rank
        for content_type in claim.content_types:
            index.add(content_type, Candidate(bundle=bundle, rank=rank))

    # Apps that declare the extension but never claim any type of this file.
    for path, match in extension_matches.items():
        found_in = next((t for t in hierarchy if index.has_path(t, path)), None)
        if found_in is not None:
            logger.debug("%s already listed under %s", match.name, found_in)
            continue
        bundle = next((b for b in bundle_index.values() if b.path == path), None)
        if bundle is None:
            logger.debug("%s not in bundle index, creating entry", match.name)
            bundle = Bundle(
                key=path,
                name=match.name,
                path=path,
                icon=_icon_from_declarations(path, match.declarations),
            )
        logger.debug("adding extension-matching app %s at %s", match.name, path)
        # Not deduplicated: a same-named claimant of public.data must not hide it.
        index.by_type.setdefault(FALLBACK_CONTENT_TYPE, []).append(Candidate(bundle=bundle, rank=Rank.EXTENSION_MATCH))

    return index
