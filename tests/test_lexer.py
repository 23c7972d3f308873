"""Unit tests for line classification and numeric extraction.

Tests:
    - Layout lines: blank, comment, program delimiter, program number
    - Dominant category selection (motion first)
    - Relevant-address extraction and malformed values
    - Modal motion inference
    - Classification never raises
"""

import pytest

from ncdialect.core.lexer import (
    LineCategory,
    MotionType,
    carried_motion,
    classify,
    classify_line,
    parse_number,
    split_words,
    strip_comments,
)


# ---------------------------------------------------------------------------
# Layout lines
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("text,category", [
    ("", LineCategory.BLANK),
    ("   \t", LineCategory.BLANK),
    ("%", LineCategory.PROGRAM_DELIMITER),
    ("(FACE MILL)", LineCategory.COMMENT),
    ("; roughing pass", LineCategory.COMMENT),
    ("(unclosed comment", LineCategory.COMMENT),
    ("O1000", LineCategory.PROGRAM_NUMBER),
])
def test_layout_lines(text, category):
    assert classify_line(text).category is category


def test_program_number_with_block_number():
    line = classify_line("N5 O2000 (PART)")
    assert line.category is LineCategory.PROGRAM_NUMBER
    assert line.block_number == 5


# ---------------------------------------------------------------------------
# Dominant category
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("text,category", [
    ("G0 X0 Y0", LineCategory.RAPID),
    ("G00 Z5", LineCategory.RAPID),
    ("G1 X10 Y20 F500", LineCategory.LINEAR),
    ("G2 X5 Y5 I3 J4", LineCategory.ARC_CW),
    ("G03 X1 Y1 R2", LineCategory.ARC_CCW),
    ("T3 M6", LineCategory.TOOL_CHANGE),
    ("M3 S1200", LineCategory.SPINDLE_CW),
    ("M04", LineCategory.SPINDLE_CCW),
    ("G41 D1", LineCategory.COMP_LEFT),
    ("G42", LineCategory.COMP_RIGHT),
    ("G40", LineCategory.COMP_CANCEL),
    ("M30", LineCategory.PROGRAM_END),
    ("M2", LineCategory.PROGRAM_END),
    ("G4 P1", LineCategory.UNRECOGNIZED),
    ("G17 G90", LineCategory.UNRECOGNIZED),
])
def test_dominant_category(text, category):
    assert classify_line(text).category is category


def test_motion_wins_over_compensation():
    line = classify_line("G41 G1 X5 Y5 F200")
    assert line.category is LineCategory.LINEAR
    assert line.compensation is LineCategory.COMP_LEFT
    assert line.motion is MotionType.LINEAR


def test_motion_wins_over_spindle():
    line = classify_line("G0 X0 M3 S1000")
    assert line.category is LineCategory.RAPID
    assert not line.has("S")


def test_existing_block_number_is_read():
    line = classify_line("N0050 G1 X1")
    assert line.block_number == 50
    assert line.category is LineCategory.LINEAR


def test_lowercase_and_packed_words():
    line = classify_line("g1x10y-2.5f300")
    assert line.category is LineCategory.LINEAR
    assert line.words == {"X": 10.0, "Y": -2.5, "F": 300.0}


def test_block_delete_prefix():
    assert classify_line("/G1 X1").category is LineCategory.LINEAR


def test_unrecognized_well_formed_flag():
    assert classify_line("G4 P1").well_formed
    assert not classify_line("HELLO WORLD").well_formed


# ---------------------------------------------------------------------------
# Numeric extraction
# ---------------------------------------------------------------------------

def test_only_present_addresses_are_extracted():
    line = classify_line("G1 X10")
    assert line.get("X") == 10.0
    assert not line.has("Y")
    assert line.get("F") is None


def test_irrelevant_addresses_are_dropped():
    line = classify_line("M3 S1200 X5")
    assert line.words == {"S": 1200.0}


def test_arc_centre_offsets():
    line = classify_line("G2 X5 Y5 I3 J4 F100")
    assert line.words == {"X": 5.0, "Y": 5.0, "I": 3.0, "J": 4.0, "F": 100.0}


def test_comment_inside_line_is_ignored():
    line = classify_line("G1 X10 (X99) F100")
    assert line.words == {"X": 10.0, "F": 100.0}


def test_malformed_value_is_dropped_with_warning():
    line = classify_line("G1 X1.2.3 Y5")
    assert line.category is LineCategory.LINEAR
    assert line.words == {"Y": 5.0}
    assert line.warnings == ("Malformed X value '1.2.3' ignored",)


@pytest.mark.parametrize("raw,expected", [
    ("10", 10.0),
    ("-5.5", -5.5),
    ("+3", 3.0),
    (".5", 0.5),
    ("1.", 1.0),
    ("", None),
    ("1.2.3", None),
    ("1e3", None),
])
def test_parse_number(raw, expected):
    assert parse_number(raw) == expected


def test_split_words():
    words, clean = split_words("G1X10 Y20")
    assert words == [("G", "1"), ("X", "10"), ("Y", "20")]
    assert clean
    _, clean = split_words("G1 #5")
    assert not clean


def test_strip_comments():
    assert strip_comments("G1 X1 (note) ; tail").strip() == "G1 X1"


# ---------------------------------------------------------------------------
# Modal motion
# ---------------------------------------------------------------------------

def test_axis_only_line_without_modal_state():
    assert classify_line("X5 Y5").category is LineCategory.UNRECOGNIZED


def test_axis_only_line_with_modal_state():
    line = classify_line("X5 Y5", modal_motion=MotionType.LINEAR)
    assert line.category is LineCategory.LINEAR
    assert line.words == {"X": 5.0, "Y": 5.0}


def test_classifier_tracks_modal_motion():
    lines = classify("G2 X1 Y1 I1 J0\nX2 Y2 I1 J0\nM5 X3\n", modal_tracking=True)
    assert [l.category for l in lines] == [
        LineCategory.ARC_CW,
        LineCategory.ARC_CW,
        LineCategory.UNRECOGNIZED,
    ]


def test_classify_without_modal_tracking():
    lines = classify("G1 X1\nX2")
    assert lines[1].category is LineCategory.UNRECOGNIZED


def test_carried_motion():
    assert carried_motion(MotionType.RAPID, classify_line("G1 X1")) is MotionType.LINEAR
    assert carried_motion(MotionType.RAPID, classify_line("M3 S100")) is MotionType.RAPID
    assert carried_motion(None, classify_line("(NOTE)")) is None


# ---------------------------------------------------------------------------
# Totality
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("text", ["###", "G", "N", ")", "(((", "X", "GG1", "N-5 G1", "é ü", "O"])
def test_classification_never_raises(text):
    line = classify_line(text, 7)
    assert line.line_number == 7
    assert isinstance(line.category, LineCategory)
