import pytest

from slidedeck_ml.deck_models import (
    Animation,
    ArrowAnnotation,
    CodeBlock,
    Content,
    FreeText,
    Image,
    LayoutBlock,
    LineHighlight,
    MathBlock,
    Model3D,
    OrderedList,
    RectAnnotation,
    SimpleHighlight,
    UnorderedList,
    Video,
    VisualHighlight,
    VisualStep,
)
from slidedeck_ml.exceptions import GenerationError
from slidedeck_ml.identity_registry import IdentityRegistry
from slidedeck_ml.markup_generator import (
    MarkupGenerator,
    escape_xml,
    legend_image_steps,
    line_highlight_spec,
    strip_quotes,
)
from slidedeck_ml.reference_resolver import ReferenceResolver

from tests.deck_fixtures import StaticLookup, presentation_with, slide_with


def _render(presentation, *, with_template=False, asset_copier=None):
    registry = IdentityRegistry()
    registry.register_presentation(presentation)
    resolver = ReferenceResolver(presentation, StaticLookup()) if with_template else None
    return MarkupGenerator(registry, resolver, asset_copier).generate(presentation)


def test_single_slide_paragraph_is_nested_in_its_section():
    presentation = presentation_with(slide_with(FreeText(inline="Hello")), name="Hello")

    markup = _render(presentation)

    section = '<section class="vertical v-align-center h-align-center slide-1">'
    paragraph = '<p class="content-1">'
    assert markup.startswith("<!DOCTYPE html>")
    assert "<title>Hello</title>" in markup
    assert '<link rel="stylesheet" href="style.css">' in markup
    assert '<script type="module" src="/main.ts"></script>' in markup
    assert markup.index(section) < markup.index(paragraph) < markup.index("Hello\n", markup.index(paragraph))
    assert markup.index(paragraph) < markup.index("</section>")
    assert markup.count("<section") == 1


def test_animation_marks_content_as_fragment():
    text = FreeText(inline="step", animation=Animation("fade-up", index=2, duration_ms=300))

    markup = _render(presentation_with(slide_with(text)))

    assert (
        '<p class="content-1 fragment fade-up" data-fragment-index="2" '
        'style="transition-duration: 300ms">'
    ) in markup


def test_nested_lists_are_wrapped_in_unstyled_items():
    nested = OrderedList(items=["b"])
    outer = UnorderedList(items=["a", nested])

    markup = _render(presentation_with(slide_with(outer)))

    assert '<ul class="content-1">' in markup
    assert "<li>a</li>" in markup
    assert '<li style="list-style-type: none;">' in markup
    assert '<ol class="content-2">' in markup
    assert markup.index('<ol class="content-2">') < markup.index("</ul>")


def test_annotated_image_draws_escaped_overlay():
    image = Image(
        url="https://example.com/diagram.png",
        annotations=[
            RectAnnotation(10, "20%", 30, 40, label="'A & B'", step=2),
            ArrowAnnotation(0, 0, 10, 20, label="<go>"),
        ],
    )

    markup = _render(presentation_with(slide_with(image)))

    assert '<div class="annotated-media content-1">' in markup
    assert '<img src="https://example.com/diagram.png" alt="" />' in markup
    assert markup.count("content-1") == 1
    assert (
        '<rect class="anno-rect fragment" data-fragment-index="2" '
        'x="10" y="20" width="30" height="40" rx="1" ry="1" />'
    ) in markup
    assert ">A &amp; B</text>" in markup
    assert '<text class="anno-label" x="5" y="10">&lt;go&gt;</text>' in markup
    assert 'marker-end="url(#arrowhead)"' in markup


def test_plain_image_without_annotations():
    markup = _render(presentation_with(slide_with(Image(url="https://example.com/a.png"))))

    assert '<img class="content-1" src="https://example.com/a.png" alt="" />' in markup
    assert "annotation-layer" not in markup


@pytest.mark.parametrize(
    "url, embed",
    [
        ("https://www.youtube.com/watch?v=abc123", "https://www.youtube.com/embed/abc123"),
        ("https://youtu.be/xyz789", "https://www.youtube.com/embed/xyz789"),
    ],
)
def test_youtube_links_become_iframes(url, embed):
    markup = _render(presentation_with(slide_with(Video(url=url))))

    assert f'<iframe src="{embed}" class="content-1"' in markup
    assert "<video" not in markup


def test_other_videos_use_native_player():
    markup = _render(presentation_with(slide_with(Video(url="https://cdn.example.com/clip.mp4"))))

    assert '<video src="https://cdn.example.com/clip.mp4" class="content-1" controls></video>' in markup


def test_model_viewer_element():
    markup = _render(presentation_with(slide_with(Model3D(url="https://example.com/a.glb"))))

    assert '<model-viewer class="content-1" src="https://example.com/a.glb"' in markup
    assert "camera-controls></model-viewer>" in markup


def test_code_block_escapes_source_and_emits_line_steps():
    block = CodeBlock(
        language="python",
        code="if a < b:\n    print(a)",
        highlight=SimpleHighlight(
            [LineHighlight.from_value("1,3-5"), LineHighlight.from_value(7)]
        ),
    )

    markup = _render(presentation_with(slide_with(block)))

    assert '<div class="code-block content-1 horizontal">' in markup
    assert '<code data-trim data-line-numbers="1,3-5|7" class="language-python">' in markup
    assert "if a &lt; b:" in markup
    assert "Legend for code highlighting" not in markup


def test_code_block_with_visual_highlight_targets_its_legend():
    block = CodeBlock(
        language="ts",
        code="let x = 1;",
        animation=Animation("fade-in"),
        highlight=VisualHighlight(
            [
                VisualStep(LineHighlight([1])),
                VisualStep(LineHighlight([2]), "https://example.com/a.png"),
                VisualStep(LineHighlight([3])),
                VisualStep(LineHighlight([(4, 6)]), "https://example.com/b.png"),
            ]
        ),
    )

    markup = _render(presentation_with(slide_with(block)))

    assert '<pre class="fragment fade-in">' in markup
    assert 'data-line-numbers="1|2|3|4-6"' in markup
    assert 'data-target=".highlight-content-1"' in markup
    assert (
        'data-image-steps="https://example.com/a.png|https://example.com/a.png|'
        'https://example.com/a.png|https://example.com/b.png"'
    ) in markup
    assert '<img alt="Legend for code highlighting" class="highlight-content-1" />' in markup


def test_math_block_is_wrapped_in_display_delimiters():
    markup = _render(presentation_with(slide_with(MathBlock(formula=r"e^{i\pi} + 1 = 0"))))

    assert '<div class="math content-1">' in markup
    assert "$$\n" in markup
    assert r"e^{i\pi} + 1 = 0" in markup


def test_layout_block_without_style_uses_bound_placeholder_layout():
    block = LayoutBlock(placeholder="left", elements=[FreeText(inline="col", placeholder="leftText")])
    presentation = presentation_with(slide_with(block, template="TwoColumns"))

    markup = _render(presentation, with_template=True)

    assert '<div class="layout horizontal v-align-center h-align-center content-1">' in markup
    assert '<p class="content-2">' in markup


def test_relative_media_goes_through_asset_copier():
    copied = []

    def copier(path):
        copied.append(path)
        return f"./assets/{path}"

    image = Image(url="img/photo.png")
    markup = _render(presentation_with(slide_with(image)), asset_copier=copier)

    assert 'src="./assets/img/photo.png"' in markup
    assert copied == ["img/photo.png"]


def test_unsupported_content_raises():
    class Unsupported(Content):
        pass

    registry = IdentityRegistry()
    slide = slide_with()
    generator = MarkupGenerator(registry)

    with pytest.raises(GenerationError):
        generator.render_content(Unsupported(), slide, None, 0)


def test_helpers():
    assert line_highlight_spec([LineHighlight([1, (3, 5)]), LineHighlight([7])]) == "1,3-5|7"
    assert strip_quotes('"quoted"') == "quoted"
    assert strip_quotes("'") == "'"
    assert escape_xml("<a & 'b'>") == "&lt;a &amp; &apos;b&apos;&gt;"


def test_legend_image_steps_backfills_leading_steps():
    highlight = VisualHighlight(
        [
            VisualStep(LineHighlight([1])),
            VisualStep(LineHighlight([2]), "one.png"),
            VisualStep(LineHighlight([3])),
        ]
    )

    assert legend_image_steps(highlight) == ["one.png", "one.png", "one.png"]
    assert legend_image_steps(highlight, lambda url: f"./assets/{url}")[0] == "./assets/one.png"


def test_visual_highlight_without_urls_leaves_image_steps_empty():
    block = CodeBlock(
        language="py",
        code="x = 1",
        highlight=VisualHighlight(
            [VisualStep(LineHighlight([1])), VisualStep(LineHighlight([2]))]
        ),
    )

    markup = _render(presentation_with(slide_with(block)))

    assert legend_image_steps(block.highlight) == []
    assert 'data-line-numbers="1|2"' in markup
    assert 'data-image-steps=""' in markup
    assert 'data-image-steps="|"' not in markup


def test_lists_nested_several_levels_deep():
    innermost = UnorderedList(items=["c"])
    middle = OrderedList(items=["b", innermost])
    outer = UnorderedList(items=["a", middle])

    markup = _render(presentation_with(slide_with(outer)))

    opening = [
        markup.index('<ul class="content-1">'),
        markup.index('<ol class="content-2">'),
        markup.index('<ul class="content-3">'),
    ]
    assert opening == sorted(opening)
    assert markup.count('<li style="list-style-type: none;">') == 2
    assert "<li>c</li>" in markup
    assert markup.index("<li>c</li>") < markup.index("</ol>") < markup.rindex("</ul>")
