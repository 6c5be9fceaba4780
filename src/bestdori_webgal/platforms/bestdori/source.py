"""Bestdori story script source.

This module reads Bestdori story JSON documents into the ParsedScript model
and wires the Bestdori resolver and WebGAL transpiler for the pipeline.
"""

import json
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from jsonschema import ValidationError

from ...core.script import (
    AssetReference,
    BackgroundCommand,
    CardStillCommand,
    LayoutCommand,
    LayoutType,
    Motion,
    MotionCommand,
    ParsedScript,
    ReferenceType,
    Side,
    SoundCommand,
    SourceCommand,
    TalkCommand,
    TelopCommand,
    Transition,
    TransitionCommand,
    UnknownCommand,
)
from ...core.validator import describe_error, validate_story
from ...errors import MalformedScript
from ...sources.base import Deserializer, ScriptSource
from .naming import AssetNaming
from .resolver import BestdoriResolver
from .transpiler import WebgalTranspiler

if TYPE_CHECKING:
    from ...downloader import HttpFetcher
    from ...report import Reporter


def parse_reference(data: Mapping[str, Any] | None) -> AssetReference | None:
    """Build an AssetReference from a resource object.

    Sound effects name their file under "se" instead of "file".
    """
    if data is None:
        return None
    url = data.get("url")
    kind = data.get("type")
    if kind is None:
        # Effects flatten the resource into the action, so "type" is taken
        kind = ReferenceType.CUSTOM if url is not None else ReferenceType.BANDORI
    return AssetReference(
        kind=ReferenceType(kind),
        file=data.get("file", data.get("se")),
        bundle=data.get("bundle") or None,
        url=url,
    )


def parse_motion(data: Mapping[str, Any]) -> Motion:
    return Motion(
        character=int(data["character"]),
        motion=data.get("motion") or "",
        expression=data.get("expression") or "",
        delay=float(data.get("delay") or 0),
    )


class BestdoriDeserializer(Deserializer):
    """Deserializer for Bestdori story JSON.

    The document's optional top-level "background" and "bgm" entries become
    the first commands (background first), followed by one command per
    element of "actions".
    """

    def deserialize(self, text: str | bytes, origin: str | None = None) -> ParsedScript:
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedScript(f"Invalid JSON: {e.msg}", origin, e.lineno, e.colno) from e
        except UnicodeDecodeError as e:
            raise MalformedScript(f"Script is not valid UTF-8: {e.reason}", origin) from e

        try:
            validate_story(document)
        except ValidationError as e:
            location, message = describe_error(e)
            raise MalformedScript(message, origin, location=location) from e

        commands: list[SourceCommand] = []

        background = parse_reference(document.get("background"))
        if background is not None:
            commands.append(BackgroundCommand(index=len(commands), image=background))

        bgm = parse_reference(document.get("bgm"))
        if bgm is not None:
            commands.append(SoundCommand(index=len(commands), bgm=bgm))

        for position, action in enumerate(document["actions"]):
            try:
                commands.append(self.parse_action(action, len(commands)))
            except (KeyError, TypeError, ValueError) as e:
                raise MalformedScript(
                    f"Invalid {action.get('type')} action: {e}", origin, location=f"actions -> {position}"
                ) from e

        return ParsedScript(tuple(commands), origin=origin)

    def parse_action(self, action: Mapping[str, Any], index: int) -> SourceCommand:
        """Build the command for one element of "actions"."""
        action_type = action["type"]
        common: dict[str, Any] = {
            "index": index,
            "wait": bool(action.get("wait", False)),
            "delay": float(action.get("delay") or 0),
        }

        if action_type == "talk":
            return TalkCommand(
                name=action.get("name") or "",
                text=action["body"],
                characters=tuple(int(c) for c in action.get("characters") or ()),
                motions=tuple(parse_motion(m) for m in action.get("motions") or ()),
                **common,
            )

        if action_type == "sound":
            return SoundCommand(
                bgm=parse_reference(action.get("bgm")),
                se=parse_reference(action.get("se")),
                **common,
            )

        if action_type == "effect":
            return self.parse_effect(action, common)

        if action_type == "layout":
            return LayoutCommand(
                layout=LayoutType(action["layoutType"]),
                costume=action.get("costume") or "",
                motion=parse_motion(action),
                side_from=Side(action.get("sideFrom") or Side.CENTER.value),
                side_to=Side(action.get("sideTo") or Side.CENTER.value),
                side_from_offset_x=int(action.get("sideFromOffsetX") or 0),
                side_to_offset_x=int(action.get("sideToOffsetX") or 0),
                **common,
            )

        if action_type == "motion":
            return MotionCommand(
                costume=action.get("costume") or "",
                motion=parse_motion(action),
                **common,
            )

        return UnknownCommand(action_type=str(action_type), raw=dict(action), **common)

    def parse_effect(self, action: Mapping[str, Any], common: dict[str, Any]) -> SourceCommand:
        effect_type = action["effectType"]

        if effect_type == "changeBackground":
            image = parse_reference(action["background"])
            if image is None:
                raise ValueError("changeBackground without a background")
            return BackgroundCommand(image=image, **common)

        if effect_type == "changeCardStill":
            resource = {key: value for key, value in action.items() if key != "type"}
            return CardStillCommand(image=parse_reference(resource) or AssetReference(), **common)

        if effect_type == "telop":
            return TelopCommand(text=action["text"], **common)

        return TransitionCommand(transition=Transition(effect_type), **common)


class BestdoriSource(ScriptSource):
    """Source implementation for Bestdori story scripts.

    Example:
        >>> source = BestdoriSource(load_config())
        >>> script = source.get_deserializer().deserialize(path.read_text())
    """

    name = "bestdori"

    def get_deserializer(self) -> BestdoriDeserializer:
        return BestdoriDeserializer()

    def get_naming(self) -> AssetNaming:
        return AssetNaming(self.config.urls)

    def get_resolver(self, fetcher: "HttpFetcher", reporter: "Reporter") -> BestdoriResolver:
        return BestdoriResolver(self.get_naming(), fetcher, reporter)

    def get_transpiler(self, reporter: "Reporter") -> WebgalTranspiler:
        return WebgalTranspiler(self.get_naming(), reporter)
