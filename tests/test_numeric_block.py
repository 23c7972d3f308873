"""Unit tests for the numeric-block (ISO / Fanuc style) emitter.

Tests:
    - Tape markers, program number and M30 end block
    - N block numbering, existing numbers kept
    - Implied-decimal formatting
    - Unrecognized lines
    - Setup block and high speed mode
"""

import logging

import pytest

from ncdialect.core.config import MachineParameters
from ncdialect.core.lexer import LineCategory
from ncdialect.core.program import DiagnosticKind
from ncdialect.dialects import NumericBlockEmitter
from ncdialect.engine import process


@pytest.fixture
def params():
    return MachineParameters.numeric_block()


def translate(text, params):
    return NumericBlockEmitter(params).translate(text)


def test_single_linear_move(params):
    program = translate("G1 X10 Y20 F500", params)
    assert program.lines == [
        "%",
        "O1000",
        "N0010 G1 X10 Y20 F500",
        "N0020 M30 (PROGRAM END)",
        "%",
    ]


def test_existing_end_is_not_duplicated(params):
    program = translate("G0 X0 Y0\nM30", params)
    assert program.lines == ["%", "O1000", "N0010 G0 X0 Y0", "N0020 M30", "%"]


def test_wrapped_source_is_not_wrapped_again(params):
    program = translate("%\nO2000\nG1 X1\nM30\n%", params)
    assert program.lines == ["%", "O2000", "N0010 G1 X1", "N0020 M30", "%"]


def test_program_number_follows_source_start_marker(params):
    program = translate("%\nG1 X1\nM30\n%", params)
    assert program.lines == ["%", "O1000", "N0010 G1 X1", "N0020 M30", "%"]


def test_empty_source(params):
    program = translate("", params)
    assert program.body == ()
    assert program.lines == ["%", "O1000", "N0010 M30 (PROGRAM END)", "%"]


def test_comments_and_blanks_are_not_numbered(params):
    program = translate("(FACE)\n\nG1 X1", params)
    assert program.body_lines == ["(FACE)", "", "N0010 G1 X1"]


def test_existing_block_numbers_are_kept(params):
    program = translate("N100 G1 X1\nG1 X2\nN0200 M30", params)
    assert program.body_lines == ["N100 G1 X1", "N0110 G1 X2", "N0200 M30"]
    assert program.block_numbers == [100, 110, 200]
    assert program.footer == ("%",)


def test_renumbering_output_is_stable(params):
    first = translate("G0 X0\nG1 X5 F100\nM30", params)
    second = translate(first.text, params)
    assert second.lines == first.lines


def test_block_numbers_increase(params):
    program = translate("\n".join(f"G1 X{i}" for i in range(20)), params)
    numbers = program.block_numbers
    assert numbers == sorted(numbers)
    assert len(set(numbers)) == len(numbers)


def test_implied_decimal_formatting():
    params = MachineParameters.numeric_block(use_decimal_point=False)
    program = translate("G2 X10.5 Y-2 I1.25 J0 F500 (X1)", params)
    assert program.body_lines == ["N0010 G2 X10500 Y-2000 I1250 J0 F500 (X1)"]


def test_decimal_point_keeps_text(params):
    program = translate("G1 X10.500 Y-2", params)
    assert program.body_lines == ["N0010 G1 X10.500 Y-2"]


def test_unrecognized_command_is_numbered(params):
    program = translate("G4 P1", params)
    assert program.body_lines == ["N0010 G4 P1"]


def test_garbage_is_annotated(params):
    program = translate("HELLO (WORLD)", params)
    assert program.body_lines == ["(UNRECOGNIZED: HELLO [WORLD])"]


def test_malformed_value_diagnostic(params):
    program = translate("G1 X10\nG1 X1.2.3 Y5", params)
    assert len(program.diagnostics) == 1
    diagnostic = program.diagnostics[0]
    assert diagnostic.kind is DiagnosticKind.MALFORMED_NUMERIC
    assert diagnostic.line == 2
    assert diagnostic.origin == "source"
    assert "X" in diagnostic.message


def test_tool_changes_are_counted(params):
    emitter = NumericBlockEmitter(params)
    state = emitter.sequencer.initial_state()
    for text in ("T1 M6", "G1 X1", "T2 M6"):
        _, state = emitter.emit(emitter.classify(text, 1, state), state)
    assert state.tool_calls == 2
    assert not state.end_emitted


def test_setup_block():
    params = MachineParameters.numeric_block(include_setup_block=True, high_speed_mode=True)
    program = translate("G1 X1", params)
    assert program.header == (
        "%",
        "O1000",
        "N0010 G21 (MM)",
        "N0020 G90 G17 (ABSOLUTE XY PLANE)",
        "N0030 G54 (WORK OFFSET)",
        "N0040 G05.1 Q1 (HIGH SPEED MODE ON)",
        "N0050 M8 (COOLANT FLOOD)",
    )
    assert program.body_lines == ["N0060 G1 X1"]
    assert program.footer == (
        "N0070 G05.1 Q0 (HIGH SPEED MODE OFF)",
        "N0080 M30 (PROGRAM END)",
        "%",
    )


def test_end_block_goes_inside_source_closing_marker(params):
    program, report = process("%\nG1 X1 F100\n%\n", params)
    assert program.lines == ["%", "O1000", "N0010 G1 X1 F100", "N0020 M30 (PROGRAM END)", "%"]
    assert program.footer == ()
    assert report.is_valid
    assert report.statistics.total_blocks == 2


def test_opening_marker_alone_gets_closing_marker(params):
    program = translate("%\nG1 X1", params)
    assert program.lines == ["%", "O1000", "N0010 G1 X1", "N0020 M30 (PROGRAM END)", "%"]


def test_high_speed_mode_off_before_source_end():
    params = MachineParameters.numeric_block(include_setup_block=True, high_speed_mode=True)
    program = translate("G1 X1 F100\nM30", params)
    assert program.body_lines == [
        "N0060 G1 X1 F100",
        "N0070 G05.1 Q0 (HIGH SPEED MODE OFF)",
        "N0080 M30",
    ]
    assert program.footer == ("%",)


def test_high_speed_mode_off_inside_closing_marker():
    params = MachineParameters.numeric_block(include_setup_block=True, high_speed_mode=True)
    program = translate("%\nG1 X1\n%", params)
    assert program.lines[-4:] == [
        "N0060 G1 X1",
        "N0070 G05.1 Q0 (HIGH SPEED MODE OFF)",
        "N0080 M30 (PROGRAM END)",
        "%",
    ]


def test_tool_calls_are_logged(params, caplog):
    with caplog.at_level(logging.INFO, logger="ncdialect"):
        translate("T1 M6\nG1 X1\nT2 M6", params)
    assert "2 tool calls" in caplog.text


def test_setup_block_inch_mist():
    params = MachineParameters.numeric_block(
        include_setup_block=True, use_mm=False, coolant="mist", work_offset="G55"
    )
    header = translate("", params).header
    assert "N0010 G20 (INCH)" in header
    assert "N0030 G55 (WORK OFFSET)" in header
    assert "N0040 M7 (COOLANT MIST)" in header


def test_block_number_wrap():
    params = MachineParameters.numeric_block(max_block_number=30)
    program = translate("G1 X1\nG1 X2\nG1 X3\nG1 X4", params)
    assert program.body_lines == ["N10 G1 X1", "N20 G1 X2", "N30 G1 X3", "N10 G1 X4"]
    sequence = [d for d in program.diagnostics if d.kind is DiagnosticKind.SEQUENCE]
    assert len(sequence) == 1
    assert sequence[0].line == 4


def test_modal_tracking_does_not_change_numeric_text():
    params = MachineParameters.numeric_block(modal_tracking=True)
    program = translate("G1 X1 F100\nX2", params)
    assert program.body_lines == ["N0010 G1 X1 F100", "N0020 X2"]
    assert program.body[1].category is LineCategory.LINEAR


def test_wrong_dialect_parameters():
    with pytest.raises(ValueError, match="numeric"):
        NumericBlockEmitter(MachineParameters.conversational())
