"""Tests for Bestdori asset resolution."""

import json

import pytest
from conftest import ROOT, FakeHost

from bestdori_webgal.config import Config
from bestdori_webgal.core.resources import AssetKind
from bestdori_webgal.core.script import AssetReference, ReferenceType
from bestdori_webgal.downloader import HttpFetcher
from bestdori_webgal.errors import FetchFailure, UnresolvableAsset
from bestdori_webgal.platforms.bestdori.naming import AssetNaming
from bestdori_webgal.platforms.bestdori.resolver import BestdoriResolver
from bestdori_webgal.platforms.bestdori.source import BestdoriDeserializer
from bestdori_webgal.report import Reporter


def parse(*actions: dict, **top: object):
    return BestdoriDeserializer().deserialize(json.dumps({**top, "actions": list(actions)}))


def appear(character: int, costume: str) -> dict:
    return {"type": "layout", "layoutType": "appear", "character": character, "costume": costume, "sideTo": "center"}


BACKGROUND = {"type": "bandori", "file": "bg00051", "bundle": "bg/scenario15"}


@pytest.fixture
def resolver(config: Config, naming: AssetNaming, host: FakeHost, reporter: Reporter) -> BestdoriResolver:
    return BestdoriResolver(naming, HttpFetcher(config, client=host.client(), backoff=0), reporter)


class TestNaming:
    """Test the naming rules for single-file assets."""

    def test_bundled_background(self, naming: AssetNaming) -> None:
        ref = naming.background(AssetReference(file="bg00051", bundle="bg/scenario15"))
        assert ref.url == f"{ROOT}bg/scenario15_rip/bg00051.png"
        assert ref.path == "background/bg_scenario15-bg00051.png"
        assert ref.script_path == "bg_scenario15-bg00051.png"
        assert ref.kind.media == "image"

    def test_custom_background(self, naming: AssetNaming) -> None:
        ref = naming.background(AssetReference(kind=ReferenceType.CUSTOM, url="https://example.com/up/bg.png"))
        assert ref.url == "https://example.com/up/bg.png"
        assert ref.path == "background/example.com_up_bg.png"

    def test_scenario_bgm(self, naming: AssetNaming) -> None:
        ref = naming.bgm(AssetReference(file="BGM01"))
        assert ref.url == f"{ROOT}sound/scenario/bgm/bGM01_rip/BGM01.mp3"
        assert ref.path == "bgm/BGM01.mp3"

    def test_sound_effects(self, naming: AssetNaming) -> None:
        common = naming.sound_effect(AssetReference(kind=ReferenceType.COMMON, file="se_01"))
        assert common.url == "https://bestdori.com/res/CommonSE/se_01.mp3"
        assert common.path == "vocal/se_01.mp3"

        voice = naming.sound_effect(AssetReference(file="voice01", bundle="sound/voice/scenario/event1"))
        assert voice.url == f"{ROOT}sound/voice/scenario/event1_rip/voice01.mp3"
        assert voice.path == "vocal/sound_voice_scenario_event1-voice01.mp3"
        assert voice.kind is AssetKind.VOCAL

    def test_unnamed_references(self, naming: AssetNaming) -> None:
        with pytest.raises(UnresolvableAsset):
            naming.background(AssetReference(file="bg00051"))
        with pytest.raises(UnresolvableAsset):
            naming.sound_effect(AssetReference(file="voice01"))
        with pytest.raises(UnresolvableAsset):
            naming.bgm(AssetReference(kind=ReferenceType.CUSTOM, url="ftp://example.com/a.mp3"))

    def test_costume(self, naming: AssetNaming) -> None:
        ref = naming.figure_manifest("039_casual")
        assert ref.url == f"{ROOT}live2d/chara/039_casual_rip/buildData.asset"
        assert ref.path == "figure/039_casual/buildData.asset"
        assert ref.kind.media == "animated-model-file"
        assert naming.model_script_path("039_casual") == "039_casual/model.json"


class TestBuildManifest:
    """Test manifest construction over whole scripts."""

    def test_paths_are_unique_and_first_wins(self, resolver: BestdoriResolver) -> None:
        script = parse(
            {"type": "effect", "effectType": "changeBackground", "background": BACKGROUND},
            {"type": "sound", "bgm": {"type": "bandori", "file": "BGM01"}},
            {"type": "effect", "effectType": "changeBackground", "background": BACKGROUND},
            {"type": "sound", "bgm": {"type": "bandori", "file": "BGM01"}},
        )

        manifest = resolver.build_manifest(script)

        paths = [ref.path for ref in manifest]
        assert paths == ["background/bg_scenario15-bg00051.png", "bgm/BGM01.mp3"]
        assert len(set(paths)) == len(manifest)
        assert manifest.duplicates == 2

    def test_unresolvable_reference_is_a_warning(self, resolver: BestdoriResolver, reporter: Reporter) -> None:
        script = parse(
            {"type": "sound", "bgm": {"type": "bandori", "file": "BGM01"}, "se": {"type": "bandori", "se": "voice01"}},
            {"type": "effect", "effectType": "changeBackground", "background": {"type": "bandori", "file": "bg1"}},
        )

        manifest = resolver.build_manifest(script)

        assert [ref.path for ref in manifest] == ["bgm/BGM01.mp3"]
        assert len(reporter.warnings) == 2
        assert all(isinstance(w, UnresolvableAsset) for w in reporter.warnings)

    def test_commands_without_assets(self, resolver: BestdoriResolver) -> None:
        script = parse({"type": "talk", "name": "A", "body": "hi"}, {"type": "effect", "effectType": "blackIn"})
        assert len(resolver.build_manifest(script)) == 0


class TestLive2dExpansion:
    """Test two-phase expansion of costumes."""

    def test_expands_costume(self, resolver: BestdoriResolver, host: FakeHost) -> None:
        host.add_costume("039_casual")

        manifest = resolver.build_manifest(parse(appear(39, "039_casual")))

        paths = [ref.path for ref in manifest]
        assert paths == [
            "figure/039_casual/buildData.asset",
            "figure/039_casual/model.moc",
            "figure/039_casual/physics.json",
            "figure/039_casual/textures/texture_00.png",
            "figure/039_casual/motions/idle01.mtn",
            "figure/039_casual/motions/smile01.mtn",
            "figure/039_casual/expressions/default.exp.json",
            "figure/039_casual/expressions/smile.exp.json",
        ]
        first = manifest.get("figure/039_casual/buildData.asset")
        assert first is not None and first.payload is not None
        motion = manifest.get("figure/039_casual/motions/idle01.mtn")
        assert motion is not None
        assert motion.url == f"{ROOT}live2d/chara/039_casual/motions_rip/idle01.mtn.bytes"

        config = manifest.model_configs["figure/039_casual/model.json"]
        assert config["textures"] == ["textures/texture_00.png"]
        assert config["motions"]["smile01"] == [{"file": "motions/smile01.mtn"}]
        assert config["expressions"][1] == {"name": "smile", "file": "expressions/smile.exp.json"}

    def test_costume_expanded_once(self, resolver: BestdoriResolver, host: FakeHost) -> None:
        host.add_costume("039_casual")
        script = parse(
            appear(39, "039_casual"),
            {"type": "layout", "layoutType": "hide", "character": 39, "costume": "039_casual"},
            appear(39, "039_casual"),
            {"type": "motion", "character": 39, "costume": "039_casual", "motion": "idle01"},
        )

        resolver.build_manifest(script)

        manifest_url = f"{ROOT}live2d/chara/039_casual_rip/buildData.asset"
        assert host.requests.count(manifest_url) == 1

    def test_empty_costume_reuses_last(self, resolver: BestdoriResolver, host: FakeHost, reporter: Reporter) -> None:
        host.add_costume("001_school")
        script = parse(
            {"type": "layout", "layoutType": "move", "character": 1, "costume": "001_school"},
            {"type": "motion", "character": 1, "costume": "", "motion": "idle01"},
            {"type": "motion", "character": 2, "costume": "", "motion": "idle01"},
        )

        manifest = resolver.build_manifest(script)

        assert "figure/001_school/model.moc" in manifest
        assert len(reporter.warnings) == 1
        assert isinstance(reporter.warnings[0], UnresolvableAsset)
        assert "character 2" in str(reporter.warnings[0])

    def test_manifest_fetch_failure(self, resolver: BestdoriResolver, reporter: Reporter) -> None:
        manifest = resolver.build_manifest(parse(appear(39, "039_casual")))

        (ref,) = list(manifest)
        assert ref.path == "figure/039_casual/buildData.asset"
        assert ref.payload is None
        assert manifest.model_configs == {}
        (warning,) = reporter.warnings
        assert isinstance(warning, FetchFailure)
        assert warning.cause == "http"
        assert warning.path == ref.path

    def test_invalid_manifest(self, resolver: BestdoriResolver, host: FakeHost, reporter: Reporter) -> None:
        host.add(f"{ROOT}live2d/chara/039_casual_rip/buildData.asset", {"Base": {"model": {}}})

        manifest = resolver.build_manifest(parse(appear(39, "039_casual")))

        assert len(manifest) == 1
        assert manifest.model_configs == {}
        (warning,) = reporter.warnings
        assert isinstance(warning, UnresolvableAsset)
        assert warning.kind == "figure"
