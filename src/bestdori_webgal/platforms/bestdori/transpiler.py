"""Bestdori to WebGAL transpiler.

Commands are processed strictly in order while a SceneState tracks what is
on stage: the background, the music and every visible figure with its
model, position, motion and expression. Each instruction auto-advances
(``-next``/``-notend``) unless the following command waits for the reader.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

from ...core.instructions import (
    ChangeBackground,
    ChangeFigure,
    ChoiceOption,
    Choose,
    FigureSide,
    PlayBgm,
    PlayEffect,
    Say,
    Scene,
    SetAnimation,
    TargetInstruction,
    TargetScript,
    Transform,
)
from ...core.resources import ResourceRef
from ...core.script import (
    AssetReference,
    BackgroundCommand,
    CardStillCommand,
    LayoutCommand,
    LayoutType,
    Motion,
    MotionCommand,
    ParsedScript,
    Side,
    SoundCommand,
    SourceCommand,
    TalkCommand,
    TelopCommand,
    TransitionCommand,
    UnknownCommand,
)
from ...errors import UnresolvableAsset, UnsupportedCommand
from ...report import Reporter
from ...transpilers.base import Transpiler
from .naming import AssetNaming, CostumeTracker

SIDE_MAP = {
    Side.LEFT_INSIDE: FigureSide.LEFT,
    Side.LEFT_OVER: FigureSide.LEFT,
    Side.CENTER: FigureSide.CENTER,
    Side.RIGHT_INSIDE: FigureSide.RIGHT,
    Side.RIGHT_OVER: FigureSide.RIGHT,
}


@dataclass
class Figure:
    """A figure currently on stage."""

    model: str
    side: FigureSide = FigureSide.CENTER
    x: int = 0
    motion: str | None = None
    expression: str | None = None

    def apply(self, motion: Motion) -> None:
        # Empty names keep what the figure is already doing
        if motion.motion:
            self.motion = motion.motion
        if motion.expression:
            self.expression = motion.expression


@dataclass
class SceneState:
    """Running stage state while transpiling."""

    background: str | None = None
    bgm: str | None = None
    figures: dict[int, Figure] = field(default_factory=dict)
    costumes: CostumeTracker = field(default_factory=CostumeTracker)


class WebgalTranspiler(Transpiler):
    """Transpiler from Bestdori commands to WebGAL scenes.

    The transpiler keeps no state between calls, so transpiling the same
    script twice gives equal results.

    Args:
        naming: Naming rules; used to write the same asset paths the
                resolver downloads to
        reporter: Receives UnsupportedCommand warnings
    """

    def __init__(self, naming: AssetNaming, reporter: Reporter | None = None):
        super().__init__(reporter)
        self.naming = naming

    def transpile(self, script: ParsedScript) -> TargetScript:
        return _SceneWriter(self.naming, self.reporter).write(script)


class _SceneWriter:
    """Transpilation of one script."""

    def __init__(self, naming: AssetNaming, reporter: Reporter):
        self.naming = naming
        self.reporter = reporter
        self.state = SceneState()
        self.target = TargetScript()
        self.handlers: dict[type, Callable[..., None]] = {
            TalkCommand: self.talk,
            SoundCommand: self.sound,
            BackgroundCommand: self.background,
            CardStillCommand: self.card_still,
            TransitionCommand: self.transition,
            TelopCommand: self.telop,
            LayoutCommand: self.layout,
            MotionCommand: self.motion,
        }

    def write(self, script: ParsedScript) -> TargetScript:
        for command, following_waits in script.iter_with_wait():
            handler = self.handlers.get(type(command))
            if handler is None:
                reason = "unknown action type" if isinstance(command, UnknownCommand) else "not supported"
                self.skip(command, reason)
                continue
            handler(command, not following_waits)
        return self.target

    # ---------------- helpers ----------------

    def emit(self, instruction: TargetInstruction) -> None:
        self.target.scenes[-1].instructions.append(instruction)

    def skip(self, command: SourceCommand, reason: str) -> None:
        self.reporter.warn(UnsupportedCommand(command.index, command.type_name, reason))

    def name_asset(
        self, command: SourceCommand, rule: Callable[[AssetReference], ResourceRef], reference: AssetReference
    ) -> str | None:
        try:
            return rule(reference).script_path
        except UnresolvableAsset as e:
            self.skip(command, str(e))
            return None

    def show(self, character: int, figure: Figure, next: bool) -> None:
        self.emit(
            ChangeFigure(
                model=figure.model,
                figure_id=character,
                next=next,
                side=figure.side,
                transform=Transform(x=figure.x),
                motion=figure.motion,
                expression=figure.expression,
            )
        )

    def visible_figure(self, command: SourceCommand, character: int) -> Figure | None:
        figure = self.state.figures.get(character)
        if figure is None:
            self.skip(command, f"character {character} is not on stage")
        return figure

    def model_for(self, command: LayoutCommand | MotionCommand) -> str | None:
        character = command.motion.character
        costume = self.state.costumes.costume_for(character, command.costume)
        if costume is None:
            self.skip(command, f"no costume known for character {character}")
            return None
        try:
            return self.naming.model_script_path(costume)
        except UnresolvableAsset as e:
            self.skip(command, str(e))
            return None

    # ---------------- commands ----------------

    def talk(self, command: TalkCommand, next: bool) -> None:
        for motion in command.motions:
            figure = self.visible_figure(command, motion.character)
            if figure is None:
                continue
            figure.apply(motion)
            self.show(motion.character, figure, next=True)

        self.emit(
            Say(
                name=command.name,
                text=command.text.strip(),
                next=next,
                figure_id=command.characters[0] if command.characters else None,
            )
        )

    def sound(self, command: SoundCommand, next: bool) -> None:
        if command.bgm is not None:
            path = self.name_asset(command, self.naming.bgm, command.bgm)
            if path is not None and path != self.state.bgm:
                self.state.bgm = path
                self.emit(PlayBgm(path))

        if command.se is not None:
            path = self.name_asset(command, self.naming.sound_effect, command.se)
            if path is not None:
                self.emit(PlayEffect(path))

    def background(self, command: BackgroundCommand, next: bool) -> None:
        path = self.name_asset(command, self.naming.background, command.image)
        if path is not None and path != self.state.background:
            self.state.background = path
            self.emit(ChangeBackground(path, next=next))

    def card_still(self, command: CardStillCommand, next: bool) -> None:
        """Show a still on an empty stage, then put the stage back."""
        path = self.name_asset(command, self.naming.background, command.image)
        if path is None:
            return
        for character in self.state.figures:
            self.emit(ChangeFigure.hide(character, next=True))
        self.emit(ChangeBackground(path, next=next))

        # Figures and background are restored as they were before the still
        for character, figure in self.state.figures.items():
            self.show(character, figure, next=True)
        self.emit(ChangeBackground(self.state.background))

    def transition(self, command: TransitionCommand, next: bool) -> None:
        animation = "enter" if command.transition.entering else "exit"
        self.emit(SetAnimation(animation, next=next))

    def telop(self, command: TelopCommand, next: bool) -> None:
        # The caption becomes a single choice leading into the next scene
        scene = Scene(f"scene-{len(self.target.scenes)}.txt")
        self.emit(Choose((ChoiceOption(command.text.strip(), scene.name),)))
        self.target.scenes.append(scene)

    def layout(self, command: LayoutCommand, next: bool) -> None:
        character = command.motion.character

        if command.layout is LayoutType.HIDE:
            self.state.costumes.costume_for(character, command.costume)
            if self.visible_figure(command, character) is not None:
                del self.state.figures[character]
                self.emit(ChangeFigure.hide(character, next=next))
            return

        if command.layout is LayoutType.MOVE:
            self.state.costumes.costume_for(character, command.costume)
            figure = self.visible_figure(command, character)
            if figure is None:
                return
        else:
            model = self.model_for(command)
            if model is None:
                return
            figure = self.state.figures.setdefault(character, Figure(model))
            figure.model = model

        figure.side = SIDE_MAP[command.side_to]
        figure.x = command.side_to_offset_x
        figure.apply(command.motion)
        self.show(character, figure, next=next)

    def motion(self, command: MotionCommand, next: bool) -> None:
        character = command.motion.character
        model = self.model_for(command)
        if model is None:
            return
        figure = self.state.figures.setdefault(character, Figure(model))
        figure.apply(command.motion)
        self.show(character, figure, next=next)
