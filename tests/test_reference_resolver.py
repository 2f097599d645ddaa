import logging

from slidedeck_ml.deck_models import (
    CodeBlock,
    FreeText,
    Image,
    LayoutBlock,
    LayoutPlaceholder,
    OrderedList,
    TextPlaceholder,
)
from slidedeck_ml.reference_resolver import ReferenceResolver, is_compatible, kind_matches

from tests.deck_fixtures import StaticLookup, presentation_with, slide_with


def test_template_resolution_is_memoized():
    lookup = StaticLookup()
    resolver = ReferenceResolver(presentation_with(slide_with()), lookup)

    first = resolver.resolve_template()
    second = resolver.resolve_template()

    assert first is second
    assert first.name == "Corporate"
    assert lookup.requests == ["templates/corporate"]


def test_missing_import_resolves_to_none_and_warns(caplog):
    resolver = ReferenceResolver(presentation_with(slide_with()), StaticLookup({}))

    with caplog.at_level(logging.WARNING, logger="slidedeck_ml.reference_resolver"):
        assert resolver.resolve_template() is None

    assert "could not be located" in caplog.text


def test_presentation_without_import_has_no_template():
    presentation = presentation_with(slide_with(), template_path=None)
    resolver = ReferenceResolver(presentation, StaticLookup())

    assert resolver.resolve_template() is None
    assert resolver.binding_diagnostics() == []


def test_slide_template_binding():
    slide = slide_with(template="TitleSlide")
    unknown = slide_with(template="Missing")
    resolver = ReferenceResolver(presentation_with(slide, unknown), StaticLookup())

    assert resolver.resolve_slide_template(slide).name == "TitleSlide"
    assert resolver.resolve_slide_template(unknown) is None


def test_content_binds_to_slide_template_placeholder():
    title = FreeText(inline="Hello", placeholder="title")
    slide = slide_with(title, template="TitleSlide")
    resolver = ReferenceResolver(presentation_with(slide), StaticLookup())

    placeholder = resolver.resolve_content_placeholder(title, slide)

    assert isinstance(placeholder, TextPlaceholder)
    assert placeholder.name == "title"
    assert resolver.bound_placeholder(title) is placeholder


def test_nested_layout_scopes_to_its_layout_placeholder():
    inside = FreeText(inline="left side", placeholder="leftText")
    sibling = FreeText(inline="wrong column", placeholder="rightText")
    block = LayoutBlock(placeholder="left", elements=[inside, sibling])
    slide = slide_with(block, template="TwoColumns")
    resolver = ReferenceResolver(presentation_with(slide), StaticLookup())

    layout_binding = resolver.resolve_content_placeholder(block, slide)
    assert isinstance(layout_binding, LayoutPlaceholder)
    assert layout_binding.name == "left"

    assert resolver.resolve_content_placeholder(inside, slide, block).name == "leftText"
    assert resolver.resolve_content_placeholder(sibling, slide, block) is None


def test_unbound_layout_block_falls_back_to_slide_template():
    inside = FreeText(inline="deep", placeholder="leftText")
    block = LayoutBlock(elements=[inside])
    slide = slide_with(block, template="TwoColumns")
    resolver = ReferenceResolver(presentation_with(slide), StaticLookup())

    assert resolver.bound_placeholder(inside).name == "leftText"


def test_slide_without_template_sees_every_placeholder():
    text = FreeText(inline="anywhere", placeholder="rightText")
    slide = slide_with(text)
    resolver = ReferenceResolver(presentation_with(slide), StaticLookup())

    names = {item.name for item in resolver.placeholder_candidates(slide)}

    assert {"title", "hero", "left", "leftText", "right", "rightText"} <= names
    assert resolver.resolve_content_placeholder(text, slide).name == "rightText"


def test_compatibility_table():
    text_placeholder = TextPlaceholder(name="body", kind="ol")

    assert is_compatible(OrderedList(items=[]), text_placeholder)
    assert kind_matches(OrderedList(items=[]), text_placeholder)
    assert not kind_matches(FreeText(inline="x"), text_placeholder)
    assert not is_compatible(CodeBlock(language="py", code="x"), text_placeholder)


def test_binding_diagnostics_report_problems():
    presentation = presentation_with(
        slide_with(
            Image(url="a.png", placeholder="title"),
            OrderedList(items=["a"], placeholder="title"),
            FreeText(inline="x", placeholder="nope"),
            template="TitleSlide",
        ),
        slide_with(template="Ghost"),
    )
    resolver = ReferenceResolver(presentation, StaticLookup())

    issues = resolver.binding_diagnostics()
    by_severity = {}
    for issue in issues:
        by_severity.setdefault(issue.severity, []).append(issue.message)

    assert len(by_severity["error"]) == 1
    assert "'Image' cannot bind to 'title'" in by_severity["error"][0]
    assert any("kind 'freetext'" in message for message in by_severity["warning"])
    assert any("unknown placeholder 'nope'" in message for message in by_severity["warning"])
    assert any("'Ghost' is not defined" in message for message in by_severity["warning"])


def test_binding_diagnostics_for_missing_template():
    resolver = ReferenceResolver(presentation_with(slide_with()), StaticLookup({}))

    issues = resolver.binding_diagnostics()

    assert len(issues) == 1
    assert "templates/corporate" in issues[0].message


def test_layout_block_bound_to_non_layout_placeholder_uses_slide_scope():
    inside = FreeText(inline="caption", placeholder="hero")
    block = LayoutBlock(placeholder="title", elements=[inside])
    slide = slide_with(block, template="TitleSlide")
    resolver = ReferenceResolver(presentation_with(slide), StaticLookup())

    assert isinstance(resolver.resolve_content_placeholder(block, slide), TextPlaceholder)
    names = [item.name for item in resolver.placeholder_candidates(slide, block)]
    assert names == ["title", "hero"]
    assert resolver.bound_placeholder(inside).name == "hero"

    messages = [issue.message for issue in resolver.binding_diagnostics()]
    assert any("'LayoutBlock' cannot bind to 'title'" in message for message in messages)
