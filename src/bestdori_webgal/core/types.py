"""Type definitions for the JSON documents the converter reads and writes.

These TypedDicts mirror the schemas in schemas/ (inputs) and the WebGAL
Live2D model.json format (output).
"""

from typing import TypedDict


class BundleFile(TypedDict):
    """One file entry of a Live2D buildData.asset manifest."""

    bundleName: str
    fileName: str


class _BuildDataBase(TypedDict):
    model: BundleFile
    physics: BundleFile
    textures: list[BundleFile]


class BuildDataBase(_BuildDataBase, total=False):
    motions: list[BundleFile]
    expressions: list[BundleFile]


class LayoutConfig(TypedDict):
    center_x: int
    center_y: int
    width: int


class HitAreas(TypedDict):
    head_x: list[float]
    head_y: list[float]
    body_x: list[float]
    body_y: list[float]


class MotionFile(TypedDict):
    file: str


class ExpressionFile(TypedDict):
    name: str
    file: str


# "hit_areas_custom" is the key WebGAL expects; TypedDict keeps the functional
# form so the key can be spelled exactly.
ModelConfig = TypedDict(
    "ModelConfig",
    {
        "version": str,
        "layout": LayoutConfig,
        "hit_areas_custom": HitAreas,
        "model": str,
        "physics": str,
        "textures": list[str],
        "motions": dict[str, list[MotionFile]],
        "expressions": list[ExpressionFile],
    },
)
