"""WebGAL script instructions.

Each instruction renders to a single WebGAL statement of the form

    head:main -pair=value -tag;

Pair arguments whose value is None are omitted, tag arguments are written
only when true. Rendering is the fixed encoding of the target format; the
transpiler never builds statement strings itself.
"""

import json
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

START_SCENE = "start.txt"
BACKGROUND_TARGET = "bg-main"


class FigureSide(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


def _statement(head: str, main: str, args: list[tuple[str, str | None]]) -> str:
    parts = [f"{head}{main}"]
    for key, value in args:
        parts.append(f"-{key}" if value is None else f"-{key}={value}")
    return " ".join(parts) + ";"


def _escape(text: str) -> str:
    # WebGAL ends a statement at ';' and breaks dialogue lines at '|'
    return text.replace(";", "；").replace("\r\n", "\n").replace("\n", "|")


@dataclass(frozen=True)
class Transform:
    x: int = 0

    def render(self) -> str:
        return json.dumps({"position": {"x": self.x}}, separators=(",", ":"))


class TargetInstruction:
    """Base class; subclasses implement render()."""

    def render(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class Say(TargetInstruction):
    """Show a line of dialogue."""

    name: str
    text: str
    next: bool = False
    figure_id: int | None = None

    def render(self) -> str:
        args: list[tuple[str, str | None]] = []
        if self.next:
            args.append(("notend", None))
        if self.figure_id is not None:
            args.append(("id", None))
            args.append(("figureId", str(self.figure_id)))
        return _statement(f"{_escape(self.name)}:", _escape(self.text), args)


@dataclass(frozen=True)
class ChangeBackground(TargetInstruction):
    """Set the background, or clear it when image is None."""

    image: str | None = None
    next: bool = False

    def render(self) -> str:
        args: list[tuple[str, str | None]] = [("next", None)] if self.next else []
        return _statement("changeBg:", self.image or "none", args)


@dataclass(frozen=True)
class ChangeFigure(TargetInstruction):
    """Show, update or (with model=None) hide the figure of one character."""

    model: str | None
    figure_id: int
    next: bool = False
    side: FigureSide = FigureSide.CENTER
    transform: Transform | None = None
    motion: str | None = None
    expression: str | None = None

    @classmethod
    def hide(cls, figure_id: int, next: bool = False) -> "ChangeFigure":
        return cls(model=None, figure_id=figure_id, next=next)

    def render(self) -> str:
        args: list[tuple[str, str | None]] = [("id", str(self.figure_id))]
        if self.next:
            args.append(("next", None))
        if self.transform is not None:
            args.append(("transform", self.transform.render()))
        if self.motion is not None:
            args.append(("motion", self.motion))
        if self.expression is not None:
            args.append(("expression", self.expression))
        if self.side is not FigureSide.CENTER:
            args.append((self.side.value, None))
        return _statement("changeFigure:", self.model or "none", args)


@dataclass(frozen=True)
class PlayBgm(TargetInstruction):
    """Play (or stop, with sound=None) background music."""

    sound: str | None

    @property
    def channel(self) -> str:
        return "bgm"

    def render(self) -> str:
        return _statement("bgm:", self.sound or "none", [])


@dataclass(frozen=True)
class PlayEffect(TargetInstruction):
    """Play a sound effect or voice."""

    sound: str | None

    @property
    def channel(self) -> str:
        return "effect"

    def render(self) -> str:
        return _statement("playEffect:", self.sound or "none", [])


@dataclass(frozen=True)
class ChoiceOption:
    text: str
    target: str


@dataclass(frozen=True)
class Choose(TargetInstruction):
    """Present options, each jumping to a scene file."""

    options: tuple[ChoiceOption, ...]

    def render(self) -> str:
        # ':' separates an option's text from its target scene
        main = "|".join(
            f"{_escape(o.text).replace('|', ' ').replace(':', '：')}:{o.target}" for o in self.options
        )
        return _statement("choose:", main, [])


@dataclass(frozen=True)
class CallScene(TargetInstruction):
    file: str

    def render(self) -> str:
        return _statement("callScene:", self.file, [])


@dataclass(frozen=True)
class SetAnimation(TargetInstruction):
    animation: str
    target: str = BACKGROUND_TARGET
    next: bool = False

    def render(self) -> str:
        args: list[tuple[str, str | None]] = [("target", self.target)]
        if self.next:
            args.append(("next", None))
        return _statement("setAnimation:", self.animation, args)


@dataclass
class Scene:
    """One WebGAL scene file."""

    name: str
    instructions: list[TargetInstruction] = field(default_factory=list)

    @property
    def relative_path(self) -> str:
        return f"scene/{self.name}"

    def render(self) -> str:
        return "".join(f"{i.render()}\n" for i in self.instructions)


@dataclass
class TargetScript:
    """Transpiled story: scenes in the order they are reached."""

    scenes: list[Scene] = field(default_factory=lambda: [Scene(START_SCENE)])

    @property
    def instructions(self) -> list[TargetInstruction]:
        return [i for scene in self.scenes for i in scene.instructions]

    def __iter__(self) -> Iterator[Scene]:
        return iter(self.scenes)

    def __len__(self) -> int:
        return len(self.scenes)

    def render(self) -> dict[str, str]:
        """Map of scene file name to rendered text."""
        return {scene.name: scene.render() for scene in self.scenes}
