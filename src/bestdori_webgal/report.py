"""Progress events and run reports.

The pipeline never prints directly. It hands events to a Reporter, which
keeps the non-fatal errors and forwards every event to a listener. The
default listener prints to stderr, so the CLI and library callers see
warnings as they happen and again in the final summary.
"""

import sys
import threading
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Callable

from .core.resources import ResourceManifest, ResourceRef
from .errors import ConversionError, FetchFailure


@dataclass(frozen=True)
class Event:
    """A single progress event.

    Attributes:
        kind: 'stage', 'info', 'warning' or 'resource'
        message: Human readable line
        payload: The object the event is about (error, DownloadResult, ...)
    """

    kind: str
    message: str
    payload: Any = None


EventListener = Callable[[Event], None]


def print_event(event: Event) -> None:
    """Default listener: write events to stderr."""
    if event.kind == "warning":
        print(f"Warning: {event.message}", file=sys.stderr)
    elif event.kind == "resource":
        result = event.payload
        if result is not None and not result.ok:
            print(f"Failed: {event.message}", file=sys.stderr)
    else:
        print(event.message, file=sys.stderr)


def silent(event: Event) -> None:
    """Listener that drops every event."""


@dataclass(frozen=True)
class DownloadResult:
    """Outcome of fetching one ResourceRef."""

    ref: ResourceRef
    bytes_written: int = 0
    error: FetchFailure | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class DownloadReport:
    """Append-only collection of DownloadResult values.

    Results arrive from worker completions in any order; the report is safe to
    append to from several threads.
    """

    def __init__(self, manifest: ResourceManifest | None = None):
        self.manifest = manifest if manifest is not None else ResourceManifest()
        self._results: list[DownloadResult] = []
        self._lock = threading.Lock()

    def add(self, result: DownloadResult) -> None:
        with self._lock:
            self._results.append(result)

    def __iter__(self) -> Iterator[DownloadResult]:
        with self._lock:
            return iter(list(self._results))

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)

    @property
    def succeeded(self) -> list[DownloadResult]:
        return [r for r in self if r.ok]

    @property
    def failed(self) -> list[DownloadResult]:
        return [r for r in self if not r.ok]

    @property
    def failed_urls(self) -> set[str]:
        return {r.ref.url for r in self.failed}

    @property
    def missing(self) -> list[ResourceRef]:
        """Refs of the manifest that have no successful download."""
        done = {r.ref.path for r in self.succeeded}
        return [ref for ref in self.manifest if ref.path not in done]


class Reporter:
    """Collects non-fatal errors and streams events to a listener."""

    def __init__(self, listener: EventListener | None = None):
        self.listener = listener or print_event
        self.warnings: list[ConversionError] = []
        self.stage: str | None = None
        self._lock = threading.Lock()

    def emit(self, event: Event) -> None:
        self.listener(event)

    def enter_stage(self, stage: str, message: str | None = None) -> None:
        self.stage = stage
        self.emit(Event("stage", message or f"{stage}...", stage))

    def info(self, message: str) -> None:
        self.emit(Event("info", message))

    def warn(self, error: ConversionError) -> None:
        with self._lock:
            self.warnings.append(error)
        self.emit(Event("warning", str(error), error))

    def resource(self, result: DownloadResult) -> None:
        if result.ok:
            message = f"{result.ref.path} ({result.bytes_written} bytes)"
        else:
            message = str(result.error)
        self.emit(Event("resource", message, result))


@dataclass
class RunReport:
    """Final outcome of one conversion run."""

    script: str
    target: str
    commands: int = 0
    scenes: int = 0
    instructions: int = 0
    downloads: DownloadReport = field(default_factory=DownloadReport)
    packaged: int = 0
    missing: list[ResourceRef] = field(default_factory=list)
    warnings: list[ConversionError] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.missing)

    def summary(self) -> dict[str, Any]:
        """Counts suitable for printing or JSON output."""
        return {
            "script": self.script,
            "target": self.target,
            "scripts_processed": 1,
            "commands": self.commands,
            "scenes": self.scenes,
            "instructions": self.instructions,
            "assets_total": len(self.downloads.manifest),
            "assets_downloaded": len(self.downloads.succeeded),
            "assets_failed": len(self.downloads.failed),
            "assets_packaged": self.packaged,
            "missing": [ref.path for ref in self.missing],
            "warnings": len(self.warnings),
        }
