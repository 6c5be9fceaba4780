"""Tests for Live2D build manifests and generated model configs."""

import json

import pytest
from conftest import build_data

from bestdori_webgal.platforms.bestdori.live2d import BuildData, BundleEntry, build_model


def encode(document: object) -> bytes:
    return json.dumps(document).encode("utf-8")


class TestBuildData:
    """Test parsing of buildData.asset."""

    def test_parses_all_sections(self) -> None:
        build = BuildData.from_bytes(encode(build_data("039_casual")))

        assert build.model == BundleEntry("live2d/chara/039_casual", "model.moc")
        assert len(build.textures) == 1
        assert [m.file for m in build.motions] == ["idle01.mtn.bytes", "smile01.mtn.bytes"]
        assert len(build.expressions) == 2

    def test_accepts_byte_order_mark(self) -> None:
        build = BuildData.from_bytes(b"\xef\xbb\xbf" + encode(build_data("039_casual")))
        assert build.physics.file == "physics.json"

    def test_motions_and_expressions_are_optional(self) -> None:
        document = build_data("039_casual")
        del document["Base"]["motions"]
        del document["Base"]["expressions"]

        build = BuildData.from_bytes(encode(document))

        assert build.motions == ()
        assert build.expressions == ()

    def test_rejects_missing_model(self) -> None:
        document = build_data("039_casual")
        del document["Base"]["model"]
        with pytest.raises(ValueError, match="Validation error"):
            BuildData.from_bytes(encode(document))

    def test_rejects_non_json(self) -> None:
        with pytest.raises(ValueError):
            BuildData.from_bytes(b"UnityFS\x00\x01")


class TestBuildModel:
    """Test the costume layout and model.json document."""

    def test_file_layout(self) -> None:
        config, files = build_model(BuildData.from_bytes(encode(build_data("039_casual"))))

        assert [local for _, local in files] == [
            "model.moc",
            "physics.json",
            "textures/texture_00.png",
            "motions/idle01.mtn",
            "motions/smile01.mtn",
            "expressions/default.exp.json",
            "expressions/smile.exp.json",
        ]
        assert config["model"] == "model.moc"
        assert config["physics"] == "physics.json"
        assert list(config["motions"]) == ["idle01", "smile01"]
        assert [e["name"] for e in config["expressions"]] == ["default", "smile"]

    def test_duplicate_motion_names_keep_first(self) -> None:
        document = build_data("039_casual", motions=("idle01",))
        document["Base"]["motions"].append({"bundleName": "live2d/chara/other", "fileName": "idle01.mtn.bytes"})

        config, files = build_model(BuildData.from_bytes(encode(document)))

        motion_entries = [entry for entry, local in files if local.startswith("motions/")]
        assert len(motion_entries) == 1
        assert motion_entries[0].bundle == "live2d/chara/039_casual/motions"
        assert config["motions"] == {"idle01": [{"file": "motions/idle01.mtn"}]}

    def test_config_is_json_serializable(self) -> None:
        config, _ = build_model(BuildData.from_bytes(encode(build_data("039_casual"))))
        assert json.loads(json.dumps(config))["textures"] == ["textures/texture_00.png"]
