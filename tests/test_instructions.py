"""Tests for WebGAL instruction rendering."""

from bestdori_webgal.core.instructions import (
    CallScene,
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
    TargetScript,
    Transform,
)


class TestSay:
    """Test dialogue statements."""

    def test_plain(self) -> None:
        assert Say("Kasumi", "Hello!").render() == "Kasumi:Hello!;"

    def test_auto_advance_and_figure(self) -> None:
        assert Say("Soyo", "...", next=True, figure_id=39).render() == "Soyo:... -notend -id -figureId=39;"

    def test_escapes_line_breaks_and_terminators(self) -> None:
        assert Say("Arisa", "one\ntwo; three").render() == "Arisa:one|two； three;"

    def test_narration_without_name(self) -> None:
        assert Say("", "Rain.").render() == ":Rain.;"


class TestChangeFigure:
    """Test figure statements."""

    def test_full_argument_order(self) -> None:
        figure = ChangeFigure(
            model="036_casual/model.json",
            figure_id=36,
            next=True,
            side=FigureSide.LEFT,
            transform=Transform(x=-120),
            motion="idle01",
            expression="smile",
        )
        assert figure.render() == (
            'changeFigure:036_casual/model.json -id=36 -next -transform={"position":{"x":-120}} '
            "-motion=idle01 -expression=smile -left;"
        )

    def test_center_has_no_side_tag(self) -> None:
        assert ChangeFigure("a/model.json", 1).render() == "changeFigure:a/model.json -id=1;"

    def test_hide(self) -> None:
        assert ChangeFigure.hide(36, next=True).render() == "changeFigure:none -id=36 -next;"


class TestOtherStatements:
    """Test the remaining statement kinds."""

    def test_background(self) -> None:
        assert ChangeBackground("bg.png", next=True).render() == "changeBg:bg.png -next;"
        assert ChangeBackground().render() == "changeBg:none;"

    def test_audio(self) -> None:
        assert PlayBgm("bgm01.mp3").render() == "bgm:bgm01.mp3;"
        assert PlayBgm(None).render() == "bgm:none;"
        assert PlayEffect("se.mp3").render() == "playEffect:se.mp3;"
        assert PlayBgm("x").channel == "bgm"
        assert PlayEffect("x").channel == "effect"

    def test_choose_keeps_option_order(self) -> None:
        choose = Choose((ChoiceOption("First", "scene-1.txt"), ChoiceOption("Second", "scene-2.txt")))
        assert choose.render() == "choose:First:scene-1.txt|Second:scene-2.txt;"

    def test_choose_escapes_option_separators(self) -> None:
        choose = Choose((ChoiceOption("Chapter 1: Start", "scene-1.txt"),))
        assert choose.render() == "choose:Chapter 1： Start:scene-1.txt;"

    def test_call_scene(self) -> None:
        assert CallScene("scene-1.txt").render() == "callScene:scene-1.txt;"

    def test_set_animation(self) -> None:
        assert SetAnimation("enter", next=True).render() == "setAnimation:enter -target=bg-main -next;"


class TestTargetScript:
    """Test scene grouping."""

    def test_starts_with_entry_scene(self) -> None:
        script = TargetScript()
        assert [scene.name for scene in script] == ["start.txt"]
        assert script.scenes[0].relative_path == "scene/start.txt"

    def test_render_one_statement_per_line(self) -> None:
        script = TargetScript([Scene("start.txt", [PlayBgm("a.mp3"), Say("A", "hi")]), Scene("scene-1.txt")])

        rendered = script.render()

        assert rendered == {"start.txt": "bgm:a.mp3;\nA:hi;\n", "scene-1.txt": ""}
        assert len(script.instructions) == 2
