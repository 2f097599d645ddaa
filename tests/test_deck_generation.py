"""End-to-end tests for one generation pass."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from slidedeck_ml.deck_generation import DeckGenerator, generate_from_library
from slidedeck_ml.deck_models import (
    CodeBlock,
    FreeText,
    Image,
    LayoutBlock,
    OrderedList,
    Size,
    SlideTemplate,
    Template,
    TextPlaceholder,
    UnorderedList,
)
from slidedeck_ml.exceptions import GenerationError
from slidedeck_ml.reference_resolver import ReferenceResolver
from slidedeck_ml.settings import DeckSettings

from tests.deck_fixtures import StaticLookup, corporate_template, presentation_with, slide_with


def _rich_presentation():
    return presentation_with(
        slide_with(FreeText(inline="Hello", placeholder="title"), template="TitleSlide"),
        slide_with(
            LayoutBlock(
                placeholder="left",
                elements=[FreeText(inline="Left", placeholder="leftText")],
            ),
            UnorderedList(items=["a", OrderedList(items=["b"])]),
            CodeBlock(language="py", code="print('hi')"),
            template="TwoColumns",
        ),
        name="Rich",
        options=["progressBar"],
    )


def test_generation_is_deterministic():
    presentation = _rich_presentation()
    generator = DeckGenerator(StaticLookup())

    first = generator.generate(presentation)
    second = generator.generate(presentation)
    fresh = DeckGenerator(StaticLookup()).generate(_rich_presentation())

    assert first.artifacts() == second.artifacts()
    assert first.artifacts() == fresh.artifacts()


def test_identities_agree_between_markup_and_stylesheet():
    text = FreeText(inline="Hello", placeholder="title", css="color: blue;")
    deck = DeckGenerator(StaticLookup()).generate(
        presentation_with(slide_with(text, template="TitleSlide"))
    )

    assert '<p class="content-1">' in deck.markup
    assert ".content-1 {\ncolor: blue;\n}" in deck.stylesheet
    assert ".slide-1 {\nbackground: navy;\n}" in deck.stylesheet


def test_binding_issues_are_reported_and_logged(caplog):
    presentation = presentation_with(
        slide_with(Image(url="https://example.com/a.png", placeholder="title"), template="TitleSlide")
    )

    with caplog.at_level("WARNING", logger="slidedeck_ml.deck_generation"):
        deck = DeckGenerator(StaticLookup()).generate(presentation)

    assert [issue.severity for issue in deck.issues] == ["error"]
    assert "cannot bind" in caplog.text


def test_generation_rejects_templates():
    with pytest.raises(GenerationError):
        DeckGenerator().generate(corporate_template())


def test_write_creates_three_artifacts(tmp_path):
    deck = DeckGenerator().generate(
        presentation_with(slide_with(FreeText(inline="x")), name="Hello", template_path=None)
    )

    written = deck.write(tmp_path / "out")

    assert sorted(path.name for path in written) == ["Hello.html", "main.ts", "style.css"]
    assert (tmp_path / "out" / "Hello.html").read_text(encoding="utf-8") == deck.markup


def test_generate_from_library_copies_assets(tmp_path):
    source = tmp_path / "Presentations"
    (source / "templates").mkdir(parents=True)
    (source / "templates" / "corporate.json").write_text(
        json.dumps(corporate_template().to_dict()), encoding="utf-8"
    )
    (source / "assets" / "img").mkdir(parents=True)
    (source / "assets" / "img" / "photo.png").write_bytes(b"\x89PNG")

    presentation = presentation_with(
        slide_with(
            FreeText(inline="Cover", placeholder="title"),
            Image(url="img/photo.png", placeholder="hero"),
            template="TitleSlide",
        ),
        name="Cover",
    )
    presentation_path = source / "cover.json"
    presentation_path.write_text(json.dumps(presentation.to_dict()), encoding="utf-8")

    settings = DeckSettings(
        source_dir=source,
        output_dir=tmp_path / "Reveal",
        assets_dir=source / "assets",
    )
    written = generate_from_library(presentation_path, settings)

    output = tmp_path / "Reveal"
    assert [path.name for path in written] == ["Cover.html", "style.css", "main.ts"]
    assert (output / "assets" / "img" / "photo.png").read_bytes() == b"\x89PNG"
    markup = (output / "Cover.html").read_text(encoding="utf-8")
    assert 'src="./assets/img/photo.png"' in markup
    assert "font-family: Inter;" in (output / "style.css").read_text(encoding="utf-8")


def test_generate_from_library_rejects_template_documents(tmp_path):
    path = tmp_path / "template.json"
    path.write_text(json.dumps(corporate_template().to_dict()), encoding="utf-8")
    settings = DeckSettings(source_dir=tmp_path, output_dir=tmp_path / "out", assets_dir=tmp_path)

    with pytest.raises(GenerationError) as excinfo:
        generate_from_library(Path(path), settings)

    assert excinfo.value.source == str(path)


def test_hello_slide_binds_and_nests_paragraph_in_section():
    template = Template(
        name="Minimal",
        slide_templates=[SlideTemplate(name="Cover", content=[TextPlaceholder(name="title")])],
    )
    hello = FreeText(inline="Hello", placeholder="title", size=Size(width="50%"), css="color:blue;")
    slide = slide_with(hello, template="Cover")
    presentation = presentation_with(slide, name="Hello")
    lookup = StaticLookup({"templates/corporate": template})

    resolver = ReferenceResolver(presentation, lookup)
    assert resolver.resolve_content_placeholder(hello, slide).name == "title"

    deck = DeckGenerator(lookup).generate(presentation)

    section = deck.markup.index('<section class="vertical v-align-center h-align-center slide-1">')
    paragraph = deck.markup.index('<p class="content-1">')
    assert section < paragraph < deck.markup.index("</section>")
    assert deck.issues == []
    assert deck.stylesheet.index(".content-1 {\n  width: 50%;\n}") < deck.stylesheet.index(
        ".content-1 {\ncolor:blue;\n}"
    )


def test_generate_from_library_ignores_json_assets(tmp_path):
    source = tmp_path / "Presentations"
    (source / "assets").mkdir(parents=True)
    (source / "assets" / "chart-data.json").write_text('{"values": [1, 2]}', encoding="utf-8")
    (source / "assets" / "partial.json").write_text("{oops", encoding="utf-8")
    presentation_path = source / "plain.json"
    presentation_path.write_text(
        json.dumps(
            presentation_with(slide_with(FreeText(inline="x")), name="Plain", template_path=None).to_dict()
        ),
        encoding="utf-8",
    )
    settings = DeckSettings(
        source_dir=source,
        output_dir=tmp_path / "Reveal",
        assets_dir=source / "assets",
    )

    written = generate_from_library(presentation_path, settings)

    assert [path.name for path in written] == ["Plain.html", "style.css", "main.ts"]
