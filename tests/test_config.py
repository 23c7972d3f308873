"""Unit tests for machine parameters.

Tests:
    - Dialect presets
    - Invariant checks raise ConfigError
    - Dictionary and JSON load/save
"""

import json

import pytest

from ncdialect.core.config import ConfigError, Dialect, MachineParameters


def test_numeric_block_defaults():
    params = MachineParameters.numeric_block()
    assert params.dialect is Dialect.NUMERIC_BLOCK
    assert params.max_feed_rate == 10000
    assert params.max_spindle_speed == 12000
    assert params.block_increment == 10
    assert params.max_block_number == 9999
    assert params.units == "MM"


def test_conversational_defaults():
    params = MachineParameters.conversational()
    assert params.dialect is Dialect.CONVERSATIONAL
    assert params.block_increment == 5
    assert params.max_feed_rate == 30000
    assert params.tool_monitoring and params.working_plane_monitoring


def test_preset_overrides():
    params = MachineParameters.conversational(block_increment=1, use_mm=False)
    assert params.block_increment == 1
    assert params.units == "INCH"


def test_dialect_accepts_string():
    assert MachineParameters(dialect="conversational").dialect is Dialect.CONVERSATIONAL
    assert MachineParameters.for_dialect("numeric").dialect is Dialect.NUMERIC_BLOCK


def test_unknown_dialect():
    with pytest.raises(ConfigError, match="Unknown dialect"):
        Dialect.parse("klartext")


@pytest.mark.parametrize("changes,match", [
    ({"block_increment": 0}, "block_increment"),
    ({"block_start": -1}, "block_start"),
    ({"max_block_number": 5}, "max_block_number"),
    ({"max_feed_rate": 0}, "max_feed_rate"),
    ({"max_spindle_speed": -1}, "max_spindle_speed"),
    ({"coolant": "oil"}, "coolant"),
    ({"program_name": "  "}, "program_name"),
])
def test_invariants(changes, match):
    with pytest.raises(ConfigError, match=match):
        MachineParameters.numeric_block(**changes)


def test_with_changes_revalidates():
    params = MachineParameters.numeric_block()
    assert params.with_changes(max_feed_rate=500).max_feed_rate == 500
    with pytest.raises(ConfigError):
        params.with_changes(block_increment=-10)


def test_from_dict_uses_dialect_preset():
    params = MachineParameters.from_dict({"dialect": "conversational", "program_name": "PLATE"})
    assert params.block_increment == 5
    assert params.program_name == "PLATE"


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(ConfigError, match="max_speed"):
        MachineParameters.from_dict({"max_speed": 1})


def test_json_save_and_load(tmp_path):
    path = tmp_path / "machine.json"
    params = MachineParameters.conversational(blank_max=(200, 150, 0))
    params.to_json(path)
    data = json.loads(path.read_text())
    assert data["dialect"] == "conversational"
    assert data["blank_max"] == [200.0, 150.0, 0.0]
    assert MachineParameters.from_json(path) == params


def test_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(ConfigError, match="invalid JSON"):
        MachineParameters.from_json(path)


@pytest.mark.parametrize("data", [
    {"blank_min": "abc"},
    {"blank_max": 5},
    {"max_feed_rate": "fast"},
])
def test_bad_values_raise_config_error(data):
    with pytest.raises(ConfigError):
        MachineParameters.from_dict(data)


def test_non_utf8_file(tmp_path):
    path = tmp_path / "latin1.json"
    path.write_bytes(b'{"program_name": "PI\xe8CE"}')
    with pytest.raises(ConfigError, match="invalid JSON"):
        MachineParameters.from_json(path)
