# -*- coding: utf-8 -*-
"""
Per-resolution memo of app compatibility with the running system.

Current macOS only runs 64-bit code, so an app built solely for legacy
architectures is left out of the results. A cache instance belongs to one
resolution call and is dropped with it.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


SYSTEM_PREFIX = "/System/"
LEGACY_ARCHITECTURES = frozenset({"i386", "ppc", "ppc7400", "ppc970", "(null)", ""})

# path -> executable architectures, None when unknown
ArchitectureProbe = Callable[[str], Optional[List[str]]]


def is_legacy_only(architectures: List[str]) -> bool:
    cleaned = [a.strip().replace('"', "") for a in architectures]
    return bool(cleaned) and all(a in LEGACY_ARCHITECTURES for a in cleaned)


class CompatibilityCache:
    def __init__(self, probe: Optional[ArchitectureProbe] = None):
        self.probe = probe
        self._results: Dict[str, bool] = {}
        self.probe_calls = 0

    def __len__(self) -> int:
        return len(self._results)

    def is_compatible(self, path: str) -> bool:
        cached = self._results.get(path)
        if cached is not None:
            return cached
        ok = self._check(path)
        self._results[path] = ok
        return ok

    def _check(self, path: str) -> bool:
        if path.startswith(SYSTEM_PREFIX) or self.probe is None:
            return True
        self.probe_calls += 1
        try:
            archs = self.probe(path)
        except Exception as e:
            # Can't tell, assume compatible.
            logger.debug("architecture probe failed for %s: %s", path, e)
            return True
        if not archs:
            return True
        if is_legacy_only(archs):
            logger.debug("skipping %s: legacy-only architectures %s", path, archs)
            return False
        return True
