# -*- coding: utf-8 -*-
"""
Where the resolution inputs come from.

`Sources` is the interface the resolver reads through:
- content_type_tree(file): the file's content types, most specific first
- registry_records(): the Launch Services registry as tagged records
- handlers(): default-application handler entries
- file_override(file): the per-file "Open With" marker, if any
- app_declarations(app): Info.plist document types and icon of an app
- architectures(app): executable architectures of an app

Backends:
- MacSources reads the live system through the stock command line tools.
- SnapshotSources reads a JSON document holding the same data.

Every backend raises SourceUnavailable when a lookup fails; callers degrade
that source to "no data".
"""

from __future__ import annotations

import json
import logging
import plistlib
import subprocess
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import AppDeclarations, FileOverride, HandlerRecord, RawRecord, RecordKind
from .records import normalize_ext, split_dump

logger = logging.getLogger(__name__)


LSREGISTER = (
    "/System/Library/Frameworks/CoreServices.framework/Frameworks/"
    "LaunchServices.framework/Support/lsregister"
)
HANDLERS_DOMAIN = "com.apple.LaunchServices/com.apple.launchservices.secure"
HANDLERS_KEY = "LSHandlers"
OPEN_WITH_XATTR = "com.apple.LaunchServices.OpenWith"


class SourceUnavailable(Exception):
    pass


class Sources(ABC):
    @abstractmethod
    def content_type_tree(self, file_path: str) -> List[str]:
        ...

    @abstractmethod
    def registry_records(self) -> List[RawRecord]:
        ...

    @abstractmethod
    def handlers(self) -> List[HandlerRecord]:
        ...

    @abstractmethod
    def file_override(self, file_path: str) -> Optional[FileOverride]:
        ...

    @abstractmethod
    def app_declarations(self, app_path: str) -> Optional[AppDeclarations]:
        ...

    @abstractmethod
    def architectures(self, app_path: str) -> Optional[List[str]]:
        ...


def _handler_list(raw) -> List[HandlerRecord]:
    if not isinstance(raw, list):
        return []
    return [HandlerRecord.from_dict(h) for h in raw if isinstance(h, dict)]


class MacSources(Sources):
    def __init__(self, timeout: float = 10.0, lsregister: str = LSREGISTER):
        self.timeout = timeout
        self.lsregister = lsregister

    def _run(self, args: List[str]) -> bytes:
        try:
            proc = subprocess.run(args, capture_output=True, timeout=self.timeout, check=False)
        except FileNotFoundError as e:
            raise SourceUnavailable(f"{args[0]} not found") from e
        except subprocess.TimeoutExpired as e:
            raise SourceUnavailable(f"{args[0]} timed out") from e
        if proc.returncode != 0:
            err = proc.stderr.decode("utf-8", errors="replace").strip()
            raise SourceUnavailable(f"{args[0]} exited with {proc.returncode}: {err}")
        return proc.stdout

    def _plist(self, payload: bytes) -> Any:
        try:
            return plistlib.loads(payload)
        except (plistlib.InvalidFileException, ValueError) as e:
            raise SourceUnavailable(f"unreadable plist: {e}") from e

    def _mdls(self, attribute: str, path: str) -> Optional[List[str]]:
        data = self._plist(self._run(["mdls", "-name", attribute, "-plist", "-", path]))
        values = data.get(attribute) if isinstance(data, dict) else None
        if not isinstance(values, list):
            return None
        return [str(v) for v in values]

    def content_type_tree(self, file_path: str) -> List[str]:
        return self._mdls("kMDItemContentTypeTree", file_path) or []

    def registry_records(self) -> List[RawRecord]:
        text = self._run([self.lsregister, "-dump"]).decode("utf-8", errors="replace")
        return split_dump(text)

    def handlers(self) -> List[HandlerRecord]:
        data = self._plist(self._run(["defaults", "export", HANDLERS_DOMAIN, "-"]))
        if not isinstance(data, dict):
            return []
        return _handler_list(data.get(HANDLERS_KEY))

    def file_override(self, file_path: str) -> Optional[FileOverride]:
        try:
            out = self._run(["xattr", "-px", OPEN_WITH_XATTR, file_path])
        except SourceUnavailable:
            # Attribute not set.
            return None
        try:
            payload = bytes.fromhex("".join(out.decode("ascii", errors="replace").split()))
        except ValueError as e:
            raise SourceUnavailable(f"bad {OPEN_WITH_XATTR} value: {e}") from e
        return FileOverride.from_dict(self._plist(payload))

    def app_declarations(self, app_path: str) -> Optional[AppDeclarations]:
        plist_path = Path(app_path) / "Contents" / "Info.plist"
        if not plist_path.is_file():
            return None
        try:
            with plist_path.open("rb") as f:
                data = plistlib.load(f)
        except (OSError, plistlib.InvalidFileException, ValueError) as e:
            raise SourceUnavailable(f"unreadable {plist_path}: {e}") from e
        if not isinstance(data, dict):
            return None
        return AppDeclarations.from_dict(data)

    def architectures(self, app_path: str) -> Optional[List[str]]:
        return self._mdls("kMDItemExecutableArchitectures", app_path)


class SnapshotSources(Sources):
    """
    Sources backed by a JSON document:

        {
          "content_types": {"md": ["net.daringfireball.markdown", ...], "*": [...]},
          "records": [{"kind": "bundle", "text": "..."}, ...],
          "dump": "<raw lsregister -dump text>",
          "handlers": [{"LSHandlerContentType": "...", "LSHandlerRoleAll": "..."}],
          "file_overrides": {"/path/to/file": {"path": "...", "bundleidentifier": "..."}},
          "declarations": {"/Applications/X.app": {"CFBundleDocumentTypes": [...]}},
          "architectures": {"/Applications/X.app": ["x86_64", "arm64"]}
        }

    `content_types` may also be a plain list used for every file.
    """

    def __init__(self, data: Optional[dict] = None):
        self.data = data if isinstance(data, dict) else {}

    @classmethod
    def from_file(cls, path: Path) -> "SnapshotSources":
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise SourceUnavailable(f"unreadable snapshot {path}: {e}") from e
        if not isinstance(data, dict):
            raise SourceUnavailable(f"snapshot {path} is not a JSON object")
        return cls(data)

    def _section(self, name: str) -> Dict[str, Any]:
        section = self.data.get(name)
        return section if isinstance(section, dict) else {}

    def content_type_tree(self, file_path: str) -> List[str]:
        raw = self.data.get("content_types")
        if isinstance(raw, dict):
            ext = normalize_ext(Path(file_path).suffix)
            raw = raw.get(ext, raw.get("*"))
        if not isinstance(raw, list):
            return []
        return [str(t) for t in raw if isinstance(t, str) and t]

    def registry_records(self) -> List[RawRecord]:
        out: List[RawRecord] = []
        for item in self.data.get("records") or []:
            if not isinstance(item, dict):
                continue
            try:
                kind = RecordKind(item.get("kind"))
            except ValueError:
                continue
            text = item.get("text")
            if isinstance(text, str):
                out.append(RawRecord(kind=kind, text=text))
        dump = self.data.get("dump")
        if isinstance(dump, str):
            out.extend(split_dump(dump))
        return out

    def handlers(self) -> List[HandlerRecord]:
        return _handler_list(self.data.get("handlers"))

    def file_override(self, file_path: str) -> Optional[FileOverride]:
        return FileOverride.from_dict(self._section("file_overrides").get(file_path))

    def app_declarations(self, app_path: str) -> Optional[AppDeclarations]:
        raw = self._section("declarations").get(app_path)
        if not isinstance(raw, dict):
            return None
        return AppDeclarations.from_dict(raw)

    def architectures(self, app_path: str) -> Optional[List[str]]:
        raw = self._section("architectures").get(app_path)
        if not isinstance(raw, list):
            return None
        return [str(a) for a in raw]


@dataclass
class ResolutionInputs:
    """Everything fetched up front for one file."""

    file_path: str
    extension: str
    content_types: List[str] = field(default_factory=list)
    records: List[RawRecord] = field(default_factory=list)
    handlers: List[HandlerRecord] = field(default_factory=list)
    file_override: Optional[FileOverride] = None


def gather_inputs(sources: Sources, file_path: str, timeout: Optional[float] = None) -> ResolutionInputs:
    """
    Fetch the independent sources concurrently.

    A source that raises, or is still running when `timeout` expires, is
    treated as empty.
    """
    inputs = ResolutionInputs(file_path=file_path, extension=normalize_ext(Path(file_path).suffix))
    empty: Dict[str, Any] = {
        "content_types": [],
        "records": [],
        "handlers": [],
        "file_override": None,
    }

    executor = ThreadPoolExecutor(max_workers=len(empty), thread_name_prefix="openwith")
    try:
        futures = {
            "content_types": executor.submit(sources.content_type_tree, file_path),
            "records": executor.submit(sources.registry_records),
            "handlers": executor.submit(sources.handlers),
            "file_override": executor.submit(sources.file_override, file_path),
        }
        done, _pending = wait(futures.values(), timeout=timeout)
        for name, future in futures.items():
            if future not in done:
                logger.debug("source %s timed out after %ss", name, timeout)
                future.cancel()
                continue
            try:
                value = future.result()
            except Exception as e:
                logger.debug("source %s unavailable: %s", name, e)
                continue
            setattr(inputs, name, value if value is not None else empty[name])
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    logger.debug("content type hierarchy: %s", inputs.content_types)
    logger.debug("file extension: %s", inputs.extension)
    return inputs
