# -*- coding: utf-8 -*-
"""
Resolution options and their JSON file form.

Fields (camelCase aliases accepted on input):
- include_alternate: bool          (includeAlternate)
- max_results: int | None          (maxResults)
- max_uti_depth: int | None        (maxUTIDepth)
- include_wildcard: bool           (includeWildcard)
- skip_compatibility_check: bool   (skipCompatibilityCheck)
- source_timeout: float seconds    (sourceTimeout)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


DEFAULT_SOURCE_TIMEOUT = 10.0


class InvalidOptionsError(ValueError):
    pass


def _to_bool(value, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        s = value.strip().lower()
        if s in ("1", "true", "yes", "on"):
            return True
        if s in ("0", "false", "no", "off"):
            return False
    return default


def _pick(data: dict, *keys: str):
    for key in keys:
        if key in data:
            return data[key]
    return None


def _check_limit(name: str, value) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidOptionsError(f"{name} must be a positive integer or None, got {value!r}")


@dataclass(frozen=True)
class ResolveOptions:
    include_alternate: bool = True
    max_results: Optional[int] = None
    max_uti_depth: Optional[int] = None
    include_wildcard: bool = False
    skip_compatibility_check: bool = False
    source_timeout: float = DEFAULT_SOURCE_TIMEOUT

    def __post_init__(self):
        _check_limit("max_results", self.max_results)
        _check_limit("max_uti_depth", self.max_uti_depth)
        timeout = self.source_timeout
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise InvalidOptionsError(f"source_timeout must be a positive number, got {timeout!r}")

    @classmethod
    def from_dict(cls, data: dict) -> "ResolveOptions":
        if not isinstance(data, dict):
            raise InvalidOptionsError("options must be a JSON object")
        timeout = _pick(data, "source_timeout", "sourceTimeout")
        if isinstance(timeout, str):
            try:
                timeout = float(timeout)
            except ValueError:
                raise InvalidOptionsError(f"source_timeout is not a number: {timeout!r}") from None
        return cls(
            include_alternate=_to_bool(_pick(data, "include_alternate", "includeAlternate"), True),
            max_results=_pick(data, "max_results", "maxResults"),
            max_uti_depth=_pick(data, "max_uti_depth", "maxUTIDepth"),
            include_wildcard=_to_bool(_pick(data, "include_wildcard", "includeWildcard"), False),
            skip_compatibility_check=_to_bool(
                _pick(data, "skip_compatibility_check", "skipCompatibilityCheck"), False
            ),
            source_timeout=DEFAULT_SOURCE_TIMEOUT if timeout is None else timeout,
        )

    def to_dict(self) -> dict:
        return {
            "include_alternate": self.include_alternate,
            "max_results": self.max_results,
            "max_uti_depth": self.max_uti_depth,
            "include_wildcard": self.include_wildcard,
            "skip_compatibility_check": self.skip_compatibility_check,
            "source_timeout": self.source_timeout,
        }

    def merged(self, **overrides) -> "ResolveOptions":
        data = self.to_dict()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return ResolveOptions.from_dict(data)


class ConfigManager:
    def __init__(self, config_path: Path):
        self.config_path = config_path

    def load(self) -> ResolveOptions:
        if not self.config_path.exists():
            return ResolveOptions()
        try:
            data = json.loads(self.config_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            # Unreadable file: fall back to defaults rather than abort.
            logger.warning("ignoring unreadable config %s: %s", self.config_path, e)
            return ResolveOptions()
        if not isinstance(data, dict):
            logger.warning("ignoring config %s: not a JSON object", self.config_path)
            return ResolveOptions()
        return ResolveOptions.from_dict(data)
