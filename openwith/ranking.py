# -*- coding: utf-8 -*-
"""
Merge per-content-type candidates into one ordered "Open With" list.

Each candidate under the content type at hierarchy position i scores
    rank.weight * 10 + (len(hierarchy) - i)
and only the best score per app name is kept. Final order: file default,
system default, user default, score (descending), name.
"""

from __future__ import annotations

import locale
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .compat import CompatibilityCache
from .defaults import DefaultIndicators
from .index import ContentTypeIndex, is_app_container
from .models import Candidate, Rank, RankedApp

logger = logging.getLogger(__name__)


GENERIC_CONTENT_TYPES = frozenset({"public.data", "public.item", "public.content"})


@dataclass
class _Scored:
    app: RankedApp
    weight: int


def _name_key(name: str):
    return (locale.strxfrm(name.casefold()), name)


def _sort_key(entry: _Scored):
    app = entry.app
    return (
        not app.is_file_default,
        not app.is_system_default,
        not app.is_default,
        -entry.weight,
        _name_key(app.name),
    )


def _to_ranked(candidate: Candidate, defaults: DefaultIndicators) -> RankedApp:
    bundle = candidate.bundle
    return RankedApp(
        name=bundle.name,
        path=bundle.path,
        rank=candidate.rank,
        icon=bundle.icon,
        identifier=bundle.identifier,
        is_file_default=defaults.is_file_default(bundle.path),
        is_system_default=defaults.is_system_default(bundle.identifier),
        is_default=defaults.is_user_default(bundle.name, bundle.identifier),
    )


def _log_index(hierarchy: Sequence[str], index: ContentTypeIndex) -> None:
    for content_type in hierarchy:
        apps = index.get(content_type)
        if not apps:
            logger.debug("  %s: no apps", content_type)
            continue
        top = ", ".join(f"{c.name} ({c.rank.value})" for c in apps[:3])
        logger.debug("  %s: %d apps: %s", content_type, len(apps), top)


def rank_apps(
    hierarchy: Sequence[str],
    index: ContentTypeIndex,
    defaults: DefaultIndicators,
    max_results: Optional[int] = None,
    max_uti_depth: Optional[int] = None,
    compatibility: Optional[CompatibilityCache] = None,
) -> List[RankedApp]:
    """
    Rank the candidates of `index` for a file with content types `hierarchy`.

    `compatibility` is None when the compatibility check is skipped.
    """
    if not hierarchy:
        return []

    if logger.isEnabledFor(logging.DEBUG):
        _log_index(hierarchy, index)

    types = list(hierarchy[:max_uti_depth]) if max_uti_depth else list(hierarchy)
    if max_uti_depth:
        logger.debug("limiting to first %d content types: %s", max_uti_depth, types)

    # Names present under a non-generic type of the processed hierarchy.
    specific_names: set[str] = set()
    for content_type in types:
        if content_type not in GENERIC_CONTENT_TYPES:
            specific_names |= index.names(content_type)

    merged: Dict[str, _Scored] = {}
    for i, content_type in enumerate(types):
        specificity = len(hierarchy) - i
        generic = content_type in GENERIC_CONTENT_TYPES
        for candidate in index.get(content_type):
            if generic and candidate.rank != Rank.EXTENSION_MATCH and candidate.name not in specific_names:
                continue
            if (
                compatibility is not None
                and is_app_container(candidate.path)
                and not compatibility.is_compatible(candidate.path)
            ):
                continue

            weight = candidate.rank.weight * 10 + specificity
            existing = merged.get(candidate.name)
            if existing is None or weight > existing.weight:
                merged[candidate.name] = _Scored(app=_to_ranked(candidate, defaults), weight=weight)

    ordered = [entry.app for entry in sorted(merged.values(), key=_sort_key)]
    if max_results and len(ordered) > max_results:
        ordered = ordered[:max_results]
    return ordered
