# -*- coding: utf-8 -*-
"""
Command line front end: list the apps that can open a file.

    openwith README.md
    openwith --max-results 5 --json report.pdf
    openwith --snapshot machine.json notes.md
"""

from __future__ import annotations

import argparse
import json
import locale
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .config import ConfigManager, InvalidOptionsError, ResolveOptions
from .icon import get_app_icons
from .models import RankedApp
from .resolver import get_open_with_apps
from .sources import SnapshotSources, SourceUnavailable


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openwith",
        description="List the applications able to open a file, in \"Open With\" order.",
    )
    parser.add_argument("file", help="file to resolve")
    parser.add_argument("--config", type=Path, help="JSON file with resolution options")
    parser.add_argument("--snapshot", type=Path, help="read system data from a JSON snapshot")
    parser.add_argument("--no-alternate", action="store_true", help="leave out Alternate-rank apps")
    parser.add_argument("--max-results", type=int, help="limit the number of results")
    parser.add_argument("--max-uti-depth", type=int, help="only use the first N content types")
    parser.add_argument("--wildcard", action="store_true", help="count '*' extension declarations as matches")
    parser.add_argument("--skip-compat", action="store_true", help="skip the architecture compatibility check")
    parser.add_argument("--timeout", type=float, help="seconds allowed for each system lookup")
    parser.add_argument("--json", action="store_true", help="print results as JSON")
    parser.add_argument("--icons", action="store_true", help="extract app icons as PNG data URIs")
    parser.add_argument("--debug", action="store_true", help="log resolution details to stderr")
    return parser


def options_from_args(args: argparse.Namespace) -> ResolveOptions:
    base = ConfigManager(args.config).load() if args.config else ResolveOptions()
    return base.merged(
        include_alternate=False if args.no_alternate else None,
        max_results=args.max_results,
        max_uti_depth=args.max_uti_depth,
        include_wildcard=True if args.wildcard else None,
        skip_compatibility_check=True if args.skip_compat else None,
        source_timeout=args.timeout,
    )


def format_apps(apps: Sequence[RankedApp]) -> str:
    lines: List[str] = [f"Found {len(apps)} apps:", ""]
    for i, app in enumerate(apps, start=1):
        lines.append(f"{i}. {app.name}")
        lines.append(f"   Path: {app.path}")
        lines.append(f"   Rank: {app.rank.value}")
        if app.is_file_default:
            lines.append("   * File-specific default")
        if app.is_system_default:
            lines.append("   * System default application")
        if app.is_default:
            lines.append("   * User default (\"Change All\")")
        lines.append("")
    return "\n".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error:
        pass

    try:
        options = options_from_args(args)
    except InvalidOptionsError as e:
        parser.error(str(e))

    sources = None
    if args.snapshot:
        try:
            sources = SnapshotSources.from_file(args.snapshot)
        except SourceUnavailable as e:
            parser.error(str(e))

    file_path = str(Path(args.file).expanduser().resolve())
    apps = get_open_with_apps(file_path, options, sources)
    icons = get_app_icons(apps) if args.icons else []

    if args.json:
        rows = [app.to_dict() for app in apps]
        if args.icons:
            for row, uri in zip(rows, icons):
                row["iconData"] = uri
        print(json.dumps(rows, ensure_ascii=False, indent=2))
        return 0

    print(f"Getting apps that can open: {file_path}\n")
    print(format_apps(apps))
    if args.icons:
        valid = [uri for uri in icons if uri]
        print(f"Successfully extracted {len(valid)}/{len(apps)} icons")
    return 0


if __name__ == "__main__":
    sys.exit(main())
