"""Resource references and the deduplicated download manifest."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Any


class AssetKind(str, Enum):
    """Target project directory an asset belongs to."""

    BACKGROUND = "background"
    BGM = "bgm"
    VOCAL = "vocal"
    FIGURE = "figure"
    FIGURE_MANIFEST = "figure-manifest"

    @property
    def directory(self) -> str:
        if self is AssetKind.FIGURE_MANIFEST:
            return AssetKind.FIGURE.value
        return self.value

    @property
    def media(self) -> str:
        """Coarse media tag: 'image', 'audio' or 'animated-model-file'."""
        if self is AssetKind.BACKGROUND:
            return "image"
        if self in (AssetKind.BGM, AssetKind.VOCAL):
            return "audio"
        return "animated-model-file"


@dataclass(frozen=True)
class ResourceRef:
    """One asset to fetch.

    Attributes:
        url: Remote URL
        path: Destination relative to the target root (posix separators),
              always starting with the kind's directory
        kind: Asset kind
        payload: Bytes already fetched during resolution, if any
    """

    url: str
    path: str
    kind: AssetKind
    payload: bytes | None = field(default=None, compare=False, repr=False)

    @property
    def script_path(self) -> str:
        """Path as written in WebGAL commands (relative to the kind directory)."""
        return str(PurePosixPath(self.path).relative_to(self.kind.directory))

    def absolute_path(self, root: Path) -> Path:
        return Path(root).joinpath(*PurePosixPath(self.path).parts)


class ResourceManifest:
    """Ordered set of ResourceRef keyed by destination path.

    When two references compute the same path the first one is kept and the
    later one is counted in ``duplicates``.
    """

    def __init__(self, refs: list[ResourceRef] | None = None):
        self._refs: dict[str, ResourceRef] = {}
        self.duplicates = 0
        # model.json documents keyed by their destination path
        self.model_configs: dict[str, dict[str, Any]] = {}
        for ref in refs or []:
            self.add(ref)

    def add(self, ref: ResourceRef) -> bool:
        """Add a ref; return False when its path is already present."""
        if ref.path in self._refs:
            self.duplicates += 1
            return False
        self._refs[ref.path] = ref
        return True

    def extend(self, refs: list[ResourceRef]) -> int:
        return sum(1 for ref in refs if self.add(ref))

    def get(self, path: str) -> ResourceRef | None:
        return self._refs.get(path)

    def __contains__(self, path: object) -> bool:
        return path in self._refs

    def __iter__(self) -> Iterator[ResourceRef]:
        return iter(list(self._refs.values()))

    def __len__(self) -> int:
        return len(self._refs)

    def by_kind(self, kind: AssetKind) -> list[ResourceRef]:
        return [ref for ref in self._refs.values() if ref.kind is kind]
