"""Test the full compile pipeline and the command-line entry point."""

import json

import pytest
from slide_compiler.compiler import SlideCompiler, compile_source, describe_document, main
from slide_compiler.config import CompilerConfig
from slide_compiler.errors import ParseError, SlideSourceError, UnresolvedStyleTarget
from slide_compiler.models import ContentKind
from slide_compiler.parser import parse

DECK = """
// three independent slides
[
  centre(title :: text("Welcome"))
  slide { width: 1280, height: 720, bg: "#101010" }
  title { size: 64, fill: "#FFFFFF" }
]

[
  row(padding(text("left")){amount: 20}, column(text("top"), text("bottom")))
]

[
  text("The end")
]
"""


def texts(laid_out):
    return [box.text.value for box in laid_out.box.walk() if box.text is not None]


def test_compile_deck(measurer):
    slides = SlideCompiler(measurer=measurer).compile(DECK, viewport=(800, 600))

    assert [slide.index for slide in slides] == [0, 1, 2]
    assert (slides[0].record.width, slides[0].record.height) == (1280, 720)
    assert slides[0].record.background.to_hex() == "#101010"
    assert (slides[1].record.width, slides[1].record.height) == (800, 600)
    assert slides[1].record.background is None

    assert texts(slides[0]) == ["Welcome"]
    assert texts(slides[1]) == ["left", "top", "bottom"]
    assert texts(slides[2]) == ["The end"]

    title = slides[0].box.children[0]
    assert title.name == "title"
    assert (title.width, title.height) == measurer.measure("Welcome", 64)
    assert title.x == (1280 - title.width) // 2


def test_viewport_defaults_to_config(measurer):
    config = CompilerConfig().with_viewport(320, 240)
    slides = SlideCompiler(config=config, measurer=measurer).compile('[ centre(text("x")) ]')
    assert (slides[0].box.width, slides[0].box.height) == (320, 240)


def test_concurrent_layout_matches_sequential(measurer):
    source = "\n".join(f'[ row(text("slide {i}"), centre(text("{i}"))) ]' for i in range(12))

    sequential = SlideCompiler(measurer=measurer).compile(source, (640, 480))
    concurrent = SlideCompiler(config=CompilerConfig(max_workers=4), measurer=measurer).compile(source, (640, 480))

    assert concurrent == sequential
    assert [texts(slide)[0] for slide in concurrent] == [f"slide {i}" for i in range(12)]


def test_cached_relayout(measurer):
    compiler = SlideCompiler(measurer=measurer, cache=True)
    slides = compiler.parse('[ centre(text("a")) ]')
    resolved = compiler.resolve(slides, (100, 100))

    first = compiler.layout_all(resolved)
    second = compiler.layout_all(resolved)
    assert second[0].box is first[0].box
    assert compiler.layout_engine.cache.hits == 1


def test_resize_relayout_from_stored_ast(measurer):
    compiler = SlideCompiler(measurer=measurer)
    slides = compiler.parse('[ centre(text("a")) ]')

    small = compiler.layout_all(compiler.resolve(slides, (100, 100)))[0]
    large = compiler.layout_all(compiler.resolve(slides, (400, 300)))[0]
    assert (small.box.width, large.box.width) == (100, 400)
    assert small.box.children[0].x == (100 - 8) // 2
    assert large.box.children[0].x == (400 - 8) // 2


def test_any_error_rejects_the_whole_document(measurer):
    source = '[ text("fine") ] [ text("broken") missing { size: 3 } ]'
    with pytest.raises(UnresolvedStyleTarget):
        SlideCompiler(measurer=measurer).compile(source)

    with pytest.raises(ParseError):
        compile_source('[ text("fine") ] [ row() ]', measurer=measurer)


def test_laid_out_slide_to_dict(measurer):
    slides = compile_source('[ text("a") slide { bg: "#FF000080" } ]', (50, 40), measurer=measurer)
    data = slides[0].to_dict()
    assert data["width"] == 50
    assert data["height"] == 40
    assert data["background"] == "#FF000080"
    assert data["box"]["kind"] == ContentKind.TEXT.value


def test_describe_document():
    summary = describe_document(parse(DECK))
    assert summary.splitlines()[0] == "3 slide(s), 9 element(s)"
    assert "names: title" in summary
    assert "style blocks: slide, title" in summary


# ----------------------------------------------------------------------
# CLI
# ----------------------------------------------------------------------

@pytest.fixture
def deck_file(tmp_path):
    path = tmp_path / "deck.slides"
    path.write_text(DECK, encoding="utf-8")
    return path


def test_cli_inspect(deck_file, capsys):
    assert main(["inspect", str(deck_file)]) == 0
    assert "3 slide(s)" in capsys.readouterr().out


def test_cli_format_round_trips(deck_file, capsys):
    assert main(["format", str(deck_file)]) == 0
    printed = capsys.readouterr().out
    assert parse(printed) == parse(DECK)


def test_cli_layout_emits_json(deck_file, capsys):
    assert main(["layout", str(deck_file), "--width", "800", "--height", "600", "--workers", "2"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert len(data) == 3
    assert data[0]["width"] == 1280
    assert data[1]["width"] == 800
    assert data[2]["box"]["text"]["value"] == "The end"


def test_cli_reports_source_errors(tmp_path):
    path = tmp_path / "bad.slides"
    path.write_text('[ triangle(text("a")) ]', encoding="utf-8")
    assert main(["inspect", str(path)]) == 1


def test_cli_missing_file(tmp_path):
    assert main(["inspect", str(tmp_path / "nope.slides")]) == 1


def test_errors_share_a_base_class():
    with pytest.raises(SlideSourceError):
        parse("[ text(1) ]")
    with pytest.raises(ValueError):
        parse("[ text(1) ]")


def test_negative_viewport_gives_empty_slide_record(measurer):
    slides = SlideCompiler(measurer=measurer).compile('[ text("a") ]', (-5, -7))
    assert (slides[0].record.width, slides[0].record.height) == (0, 0)
    assert (slides[0].box.width, slides[0].box.height) == (0, 0)


def test_cli_layout_clamps_negative_width(deck_file, capsys):
    assert main(["layout", str(deck_file), "--width", "-5", "--height", "600"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data[1]["width"] == 0
    assert data[1]["box"]["width"] == 0
