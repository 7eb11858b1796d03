"""Tests for technique definitions and validation."""

from dataclasses import FrozenInstanceError

import pytest

from breathpacer.errors import ValidationError
from breathpacer.techniques import (
    BUILTIN_TECHNIQUES,
    Capability,
    ColorScheme,
    Phase,
    TechniqueDefinition,
    ensure_valid,
    pattern_from_durations,
    validate_technique,
)


class TestTechniqueDefinition:
    def test_lists_are_normalised(self):
        technique = TechniqueDefinition(
            id="t",
            name="T",
            phases=[{"key": "inhale", "name": "Inhale"}, ("exhale", "Exhale")],
            durations_sec=[3, 5],
        )
        assert technique.phases == (Phase("inhale", "Inhale"), Phase("exhale", "Exhale"))
        assert technique.durations_sec == (3, 5)
        assert technique.pattern == "3-5"
        assert technique.total_duration_sec == 8
        assert technique.phase_count == 2

    def test_frozen(self, box4):
        with pytest.raises(FrozenInstanceError):
            box4.name = "Changed"

    def test_copy_is_equal_but_independent(self, box4):
        clone = box4.copy()
        assert clone == box4
        assert clone is not box4

    def test_dict_round_trip_keeps_supplements(self, four_seven_eight):
        restored = TechniqueDefinition.from_dict(four_seven_eight.to_dict())
        assert restored == four_seven_eight
        assert restored.color_scheme == four_seven_eight.color_scheme

    def test_capabilities_present(self, box4):
        assert box4.supports(Capability.INSTRUCTIONS)
        assert box4.capability(Capability.INSTRUCTIONS)[0].startswith("Breathe in")
        assert isinstance(box4.capability(Capability.COLOR_SCHEME), ColorScheme)

    def test_capabilities_absent_are_none(self, make_technique):
        plain = make_technique([4, 4])
        assert plain.capability(Capability.INSTRUCTIONS) is None
        assert plain.capability(Capability.COLOR_SCHEME) is None
        assert not plain.supports(Capability.COLOR_SCHEME)

    def test_pattern_from_durations(self):
        assert pattern_from_durations((4, 7, 8)) == "4-7-8"


class TestValidation:
    def test_builtins_are_valid(self):
        for technique in BUILTIN_TECHNIQUES:
            report = validate_technique(technique)
            assert report.is_valid, (technique.id, report.errors)

    def test_builtin_catalogue(self):
        patterns = {t.id: t.durations_sec for t in BUILTIN_TECHNIQUES}
        assert patterns["box4"] == (4, 4, 4, 4)
        assert patterns["478"] == (4, 7, 8)
        assert patterns["coherent"] == (5, 5)
        assert len(patterns) == 8

    @pytest.mark.parametrize(
        "kwargs, field",
        [
            ({"id": ""}, "id"),
            ({"name": "  "}, "name"),
            ({"phases": [], "durations_sec": []}, "phases"),
            ({"phases": [Phase("", "Inhale")], "durations_sec": [4]}, "phases[0].key"),
            ({"durations_sec": [4]}, "durations_sec"),
            ({"durations_sec": [4, 0]}, "durations_sec[1]"),
            ({"durations_sec": [4, 2.5]}, "durations_sec[1]"),
            ({"durations_sec": [True, 4]}, "durations_sec[0]"),
            ({"id": 7}, "id"),
            ({"name": 123}, "name"),
            ({"description": 7}, "description"),
            ({"benefits": ["calm"]}, "benefits"),
            ({"pattern": 478}, "pattern"),
            ({"category": None}, "category"),
            ({"instructions": ["Inhale", 2]}, "instructions[1]"),
            ({"phases": [Phase("inhale", 1), Phase(2, "Exhale")]}, "phases[0].name"),
            ({"phases": [Phase("inhale", 1), Phase(2, "Exhale")]}, "phases[1].key"),
        ],
    )
    def test_errors(self, kwargs, field):
        base = {
            "id": "t",
            "name": "T",
            "phases": [Phase("inhale", "Inhale"), Phase("exhale", "Exhale")],
            "durations_sec": [4, 4],
        }
        base.update(kwargs)
        report = validate_technique(TechniqueDefinition(**base))
        assert not report.is_valid
        assert field in [issue.field for issue in report.errors]

    def test_not_a_definition(self):
        report = validate_technique({"id": "x"})
        assert report.first_error().field == "definition"

    def test_long_phase_warns(self, make_technique):
        report = validate_technique(make_technique([61, 4]))
        assert report.is_valid
        assert [w.field for w in report.warnings] == ["durations_sec[0]"]

    def test_short_and_long_cycles_warn(self, make_technique):
        assert validate_technique(make_technique([1, 2])).warnings[0].field == "total_duration_sec"
        assert validate_technique(make_technique([60, 60, 1])).warnings[0].field == "total_duration_sec"
        assert validate_technique(make_technique([4, 4])).warnings == []

    def test_ensure_valid_raises_first_error(self, make_technique):
        with pytest.raises(ValidationError) as info:
            ensure_valid(make_technique([4, -1]))
        assert info.value.field == "durations_sec[1]"
        assert info.value.value == -1
        assert info.value.to_dict()["code"] == "VALIDATION_ERROR"

    def test_ensure_valid_logs_warnings(self, make_technique, caplog):
        caplog.set_level("WARNING", logger="breathpacer.techniques")
        technique = ensure_valid(make_technique([1, 1]))
        assert technique.id == "custom"
        assert any("too short" in r.getMessage() for r in caplog.records)
