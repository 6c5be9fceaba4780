"""Parsed source script model.

Every command is a frozen, keyword-only dataclass. Commands that reference
an asset keep the raw identifying fields (AssetReference, costume names)
so resolution can compute remote locations without going back to the JSON.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ReferenceType(str, Enum):
    BANDORI = "bandori"
    CUSTOM = "custom"
    COMMON = "common"


@dataclass(frozen=True)
class AssetReference:
    """Location of an asset as written in the script.

    Either ``url`` (uploaded/custom assets) or ``file`` with an optional
    ``bundle`` (assets shipped in game data bundles) is set.
    """

    kind: ReferenceType = ReferenceType.BANDORI
    file: str | None = None
    bundle: str | None = None
    url: str | None = None

    def describe(self) -> str:
        if self.url is not None:
            return f"{self.kind.value}: {self.url}"
        if self.bundle is not None:
            return f"{self.kind.value}: {self.bundle} -> {self.file}"
        return f"{self.kind.value}: {self.file}"


@dataclass(frozen=True)
class Motion:
    """Live2D motion/expression change for one character."""

    character: int
    motion: str = ""
    expression: str = ""
    delay: float = 0.0


class LayoutType(str, Enum):
    APPEAR = "appear"
    HIDE = "hide"
    MOVE = "move"


class Side(str, Enum):
    LEFT_INSIDE = "leftInside"
    LEFT_OVER = "leftOver"
    CENTER = "center"
    RIGHT_INSIDE = "rightInside"
    RIGHT_OVER = "rightOver"


class Transition(str, Enum):
    BLACK_IN = "blackIn"
    BLACK_OUT = "blackOut"
    WHITE_IN = "whiteIn"
    WHITE_OUT = "whiteOut"

    @property
    def entering(self) -> bool:
        return self in (Transition.BLACK_IN, Transition.WHITE_IN)


@dataclass(frozen=True, kw_only=True)
class SourceCommand:
    index: int
    wait: bool = False
    delay: float = 0.0

    @property
    def type_name(self) -> str:
        return type(self).__name__


@dataclass(frozen=True, kw_only=True)
class TalkCommand(SourceCommand):
    name: str
    text: str
    characters: tuple[int, ...] = ()
    motions: tuple[Motion, ...] = ()


@dataclass(frozen=True, kw_only=True)
class SoundCommand(SourceCommand):
    bgm: AssetReference | None = None
    se: AssetReference | None = None


@dataclass(frozen=True, kw_only=True)
class BackgroundCommand(SourceCommand):
    image: AssetReference


@dataclass(frozen=True, kw_only=True)
class CardStillCommand(SourceCommand):
    image: AssetReference


@dataclass(frozen=True, kw_only=True)
class TransitionCommand(SourceCommand):
    transition: Transition


@dataclass(frozen=True, kw_only=True)
class TelopCommand(SourceCommand):
    text: str


@dataclass(frozen=True, kw_only=True)
class LayoutCommand(SourceCommand):
    layout: LayoutType
    costume: str
    motion: Motion
    side_from: Side = Side.CENTER
    side_to: Side = Side.CENTER
    side_from_offset_x: int = 0
    side_to_offset_x: int = 0


@dataclass(frozen=True, kw_only=True)
class MotionCommand(SourceCommand):
    costume: str
    motion: Motion


@dataclass(frozen=True, kw_only=True)
class UnknownCommand(SourceCommand):
    action_type: str
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False)

    @property
    def type_name(self) -> str:
        return self.action_type or "unknown"


@dataclass(frozen=True)
class ParsedScript:
    """Immutable, ordered sequence of source commands."""

    commands: tuple[SourceCommand, ...]
    origin: str | None = None

    def __iter__(self) -> Iterator[SourceCommand]:
        return iter(self.commands)

    def __len__(self) -> int:
        return len(self.commands)

    def iter_with_wait(self) -> Iterator[tuple[SourceCommand, bool]]:
        """Yield each command with the ``wait`` flag of the command after it.

        The last command is paired with False.
        """
        following = [c.wait for c in self.commands[1:]] + [False]
        return zip(self.commands, following)
