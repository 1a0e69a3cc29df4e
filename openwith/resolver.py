# -*- coding: utf-8 -*-
"""
Entry points: the ordered list of applications able to open a file.
"""

from __future__ import annotations

from typing import List, Optional

from .compat import ArchitectureProbe, CompatibilityCache
from .config import ResolveOptions
from .defaults import resolve_defaults
from .index import DeclarationLookup, build_bundle_index, build_content_type_index, find_extension_matches
from .models import RankedApp
from .ranking import rank_apps
from .records import extract
from .sources import MacSources, ResolutionInputs, Sources, gather_inputs


def resolve(
    inputs: ResolutionInputs,
    options: Optional[ResolveOptions] = None,
    declarations: Optional[DeclarationLookup] = None,
    architectures: Optional[ArchitectureProbe] = None,
) -> List[RankedApp]:
    """
    Rank applications for already-fetched inputs.

    `declarations` and `architectures` are per-app lookups called lazily
    while indexing and ranking.
    """
    options = options or ResolveOptions()
    hierarchy = list(inputs.content_types or [])
    if not hierarchy:
        return []

    bundles, claims = extract(inputs.records)
    bundle_index = build_bundle_index(bundles)
    ext_matches = find_extension_matches(bundles, inputs.extension, declarations, options.include_wildcard)
    index = build_content_type_index(
        claims,
        bundle_index,
        ext_matches,
        hierarchy,
        include_alternate=options.include_alternate,
    )
    defaults = resolve_defaults(inputs.handlers, hierarchy, inputs.extension, inputs.file_override)

    compatibility = None
    if not options.skip_compatibility_check:
        compatibility = CompatibilityCache(architectures)

    return rank_apps(
        hierarchy,
        index,
        defaults,
        max_results=options.max_results,
        max_uti_depth=options.max_uti_depth,
        compatibility=compatibility,
    )


def get_open_with_apps(
    file_path: str,
    options: Optional[ResolveOptions] = None,
    sources: Optional[Sources] = None,
) -> List[RankedApp]:
    options = options or ResolveOptions()
    if sources is None:
        sources = MacSources(timeout=options.source_timeout)
    inputs = gather_inputs(sources, file_path, timeout=options.source_timeout)
    return resolve(
        inputs,
        options,
        declarations=sources.app_declarations,
        architectures=sources.architectures,
    )
