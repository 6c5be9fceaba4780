"""Bestdori Live2D build manifests and WebGAL model configs.

A Bestdori costume publishes its file list in a buildData.asset JSON
document. Converting a costume means downloading every listed file into
one directory and writing a WebGAL model.json that points at them.
"""

import json
from dataclasses import dataclass

from ...core.types import BuildDataBase, BundleFile, ExpressionFile, ModelConfig, MotionFile
from ...core.validator import BUILD_DATA_SCHEMA, validate_with_error_details
from ...paths import sanitize_filename

MODEL_VERSION = "Sample 1.0.0"

MODEL_FILE = "model.moc"
PHYSICS_FILE = "physics.json"
TEXTURES_DIR = "textures"
MOTIONS_DIR = "motions"
EXPRESSIONS_DIR = "expressions"

MOTION_SUFFIX = ".mtn.bytes"
EXPRESSION_SUFFIX = ".exp.json"


@dataclass(frozen=True)
class BundleEntry:
    """One file of a build manifest."""

    bundle: str
    file: str

    @classmethod
    def from_dict(cls, data: BundleFile) -> "BundleEntry":
        return cls(bundle=data["bundleName"], file=data["fileName"])


@dataclass(frozen=True)
class BuildData:
    """Parsed buildData.asset ("Base" section)."""

    model: BundleEntry
    physics: BundleEntry
    textures: tuple[BundleEntry, ...] = ()
    motions: tuple[BundleEntry, ...] = ()
    expressions: tuple[BundleEntry, ...] = ()

    @classmethod
    def from_bytes(cls, data: bytes) -> "BuildData":
        """Parse and validate a build manifest.

        Raises:
            ValueError: If the bytes are not JSON or do not match the
                        build manifest schema
        """
        document = json.loads(data.decode("utf-8-sig"))

        is_valid, error_msg = validate_with_error_details(document, BUILD_DATA_SCHEMA)
        if not is_valid:
            raise ValueError(error_msg)

        base: BuildDataBase = document["Base"]
        return cls(
            model=BundleEntry.from_dict(base["model"]),
            physics=BundleEntry.from_dict(base["physics"]),
            textures=tuple(BundleEntry.from_dict(f) for f in base["textures"]),
            motions=tuple(BundleEntry.from_dict(f) for f in base.get("motions", [])),
            expressions=tuple(BundleEntry.from_dict(f) for f in base.get("expressions", [])),
        )


def _strip_suffix(name: str, suffix: str) -> str:
    return name[: -len(suffix)] if name.endswith(suffix) and len(name) > len(suffix) else name


def build_model(build: BuildData) -> tuple[ModelConfig, list[tuple[BundleEntry, str]]]:
    """Lay out a costume for WebGAL.

    Args:
        build: Parsed build manifest

    Returns:
        Tuple of (model.json document, files). Each file pairs the manifest
        entry with its path inside the costume directory.
    """
    files: list[tuple[BundleEntry, str]] = [
        (build.model, MODEL_FILE),
        (build.physics, PHYSICS_FILE),
    ]

    textures: list[str] = []
    for entry in build.textures:
        local = f"{TEXTURES_DIR}/{sanitize_filename(entry.file)}"
        textures.append(local)
        files.append((entry, local))

    # Motion names are what changeFigure -motion refers to
    motions: dict[str, list[MotionFile]] = {}
    for entry in build.motions:
        name = sanitize_filename(_strip_suffix(entry.file, MOTION_SUFFIX))
        if name in motions:
            continue
        local = f"{MOTIONS_DIR}/{name}.mtn"
        motions[name] = [{"file": local}]
        files.append((entry, local))

    expressions: list[ExpressionFile] = []
    for entry in build.expressions:
        file = sanitize_filename(entry.file)
        local = f"{EXPRESSIONS_DIR}/{file}"
        expressions.append({"name": _strip_suffix(file, EXPRESSION_SUFFIX), "file": local})
        files.append((entry, local))

    config: ModelConfig = {
        "version": MODEL_VERSION,
        "layout": {"center_x": 0, "center_y": 0, "width": 2},
        "hit_areas_custom": {
            "head_x": [-0.25, 1.0],
            "head_y": [0.25, 0.2],
            "body_x": [-0.3, 0.2],
            "body_y": [0.3, -1.9],
        },
        "model": MODEL_FILE,
        "physics": PHYSICS_FILE,
        "textures": textures,
        "motions": motions,
        "expressions": expressions,
    }
    return config, files

