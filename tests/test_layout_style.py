from slidedeck_ml.deck_models import (
    HorizontalAlignOption,
    LayoutStyle,
    LayoutTypeOption,
    VerticalAlignOption,
)
from slidedeck_ml.layout_style import LayoutClasses, classes_for


def test_missing_layout_uses_defaults():
    assert classes_for(None).css_classes == "vertical v-align-center h-align-center"
    assert classes_for(LayoutStyle()) == LayoutClasses()


def test_vertical_layout_swaps_alignment_axes():
    layout = LayoutStyle(
        [
            LayoutTypeOption("vertical"),
            VerticalAlignOption("start"),
            HorizontalAlignOption("end"),
        ]
    )

    assert str(classes_for(layout)) == "vertical v-align-end h-align-start"


def test_horizontal_layout_keeps_declared_alignment():
    layout = LayoutStyle(
        [
            LayoutTypeOption("horizontal"),
            VerticalAlignOption("start"),
            HorizontalAlignOption("end"),
        ]
    )

    assert str(classes_for(layout)) == "horizontal v-align-start h-align-end"


def test_last_option_of_each_kind_wins():
    layout = LayoutStyle(
        [
            LayoutTypeOption("vertical"),
            VerticalAlignOption("start"),
            LayoutTypeOption("horizontal"),
            VerticalAlignOption("end"),
        ]
    )

    classes = classes_for(layout)

    assert classes.layout_type == "horizontal"
    assert classes.vertical == "end"
    assert classes.horizontal == "center"


def test_alignment_without_layout_type_defaults_to_vertical():
    layout = LayoutStyle([VerticalAlignOption("start")])

    assert str(classes_for(layout)) == "vertical v-align-center h-align-start"
