# -*- coding: utf-8 -*-
"""
openwith: the ranked "Open With" application list for a file.
"""

from __future__ import annotations

from .config import InvalidOptionsError, ResolveOptions
from .icon import get_app_icon, get_app_icons
from .models import RankedApp, Rank
from .resolver import get_open_with_apps, resolve
from .sources import MacSources, ResolutionInputs, SnapshotSources, Sources

__all__ = [
    "InvalidOptionsError",
    "MacSources",
    "Rank",
    "RankedApp",
    "ResolutionInputs",
    "ResolveOptions",
    "SnapshotSources",
    "Sources",
    "get_app_icon",
    "get_app_icons",
    "get_open_with_apps",
    "resolve",
]

__version__ = "0.1.0"
