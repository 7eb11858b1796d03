"""Tests for TechniqueRegistry."""

import json

import pytest

from breathpacer.errors import NotFoundError, ValidationError
from breathpacer.techniques import Phase, TechniqueDefinition, TechniqueRegistry


def test_with_builtins(registry):
    assert len(registry) == 8
    assert "box4" in registry
    assert registry.has_technique("478")
    assert not registry.has_technique("nope")


def test_get_unknown_raises_not_found(registry):
    with pytest.raises(NotFoundError) as info:
        registry.get_technique("nope")
    assert info.value.technique_id == "nope"
    # NotFoundError is also a LookupError
    with pytest.raises(LookupError):
        registry.create_technique("nope")


def test_create_technique_returns_copy(registry):
    first = registry.create_technique("box4")
    second = registry.create_technique("box4")
    assert first == second
    assert first is not second
    assert first is not registry.get_technique("box4")


def test_register_rejects_invalid(make_technique):
    registry = TechniqueRegistry()
    with pytest.raises(ValidationError):
        registry.register(make_technique([4, 0]))
    assert len(registry) == 0


def test_duplicate_id_last_writer_wins(make_technique, caplog):
    caplog.set_level("INFO", logger="breathpacer.techniques")
    registry = TechniqueRegistry()
    registry.register(make_technique([4, 4], technique_id="dup", name="First"))
    registry.register(make_technique([5, 5], technique_id="dup", name="Second"))
    assert len(registry) == 1
    assert registry.get_technique("dup").name == "Second"
    assert any("Replacing technique 'dup'" in r.getMessage() for r in caplog.records)


def test_unregister(registry):
    removed = registry.unregister("coherent")
    assert removed.id == "coherent"
    assert "coherent" not in registry
    with pytest.raises(NotFoundError):
        registry.unregister("coherent")


def test_search_is_case_insensitive(registry):
    ids = {t.id for t in registry.search_techniques("SLEEP")}
    assert ids == {"478", "478-extended"}
    assert {t.id for t in registry.search_techniques("4-7-8")} == {"478", "478-extended"}
    assert registry.search_techniques("zzz") == []


def test_recommended_sorted_by_total_duration(registry):
    ids = [t.id for t in registry.get_recommended_techniques()]
    assert ids[:3] == ["coherent", "triangle", "555"]
    totals = [t.total_duration_sec for t in registry.get_recommended_techniques()]
    assert totals == sorted(totals)


def test_recommended_filters(registry):
    short = registry.get_recommended_techniques(max_duration=15)
    assert [t.id for t in short] == ["coherent", "triangle", "555"]

    four_phase = registry.get_recommended_techniques(min_phases=4)
    assert [t.id for t in four_phase] == ["box4", "4444-extended"]

    mixed = registry.get_recommended_techniques(min_duration=16, max_duration=19, max_phases=3)
    assert [t.id for t in mixed] == ["628", "478"]


def test_by_category_and_metadata(registry):
    assert {t.id for t in registry.get_techniques_by_category("focus")} == {"box4", "555", "4444-extended"}
    rows = {row["id"]: row for row in registry.get_technique_metadata()}
    assert rows["478"]["pattern"] == "4-7-8"
    assert rows["478"]["total_duration"] == 19
    assert rows["478"]["phase_count"] == 3


def test_json_round_trip(registry, tmp_path):
    path = tmp_path / "techniques.json"
    registry.save_json(path, ["478", "box4"])

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["version"] == "1.0"
    assert [t["id"] for t in data["techniques"]] == ["478", "box4"]

    fresh = TechniqueRegistry()
    assert fresh.load_json(path) == ["478", "box4"]
    assert fresh.get_technique("478") == registry.get_technique("478")


def test_load_json_bare_list(tmp_path):
    path = tmp_path / "custom.json"
    path.write_text(json.dumps([
        {"id": "quick", "name": "Quick", "phases": [{"key": "inhale", "name": "Inhale"}], "durations_sec": [4]},
    ]), encoding="utf-8")
    registry = TechniqueRegistry()
    assert registry.load_json(path) == ["quick"]
    assert registry.get_technique("quick").pattern == "4"


def test_load_json_invalid_entry_registers_nothing(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"techniques": [
        {"id": "ok", "name": "Ok", "phases": [["inhale", "Inhale"]], "durations_sec": [4]},
        {"id": "bad", "name": "Bad", "phases": [["inhale", "Inhale"]], "durations_sec": [0]},
    ]}), encoding="utf-8")
    registry = TechniqueRegistry()
    with pytest.raises(ValidationError):
        registry.load_json(path)
    assert len(registry) == 0


def test_register_rejects_non_string_name():
    registry = TechniqueRegistry()
    technique = TechniqueDefinition(id="x", name=123, phases=[Phase("a", "A")], durations_sec=[4])
    with pytest.raises(ValidationError) as info:
        registry.register(technique)
    assert info.value.field == "name"
    assert "x" not in registry


def test_load_json_non_string_description_is_rejected(tmp_path):
    path = tmp_path / "typed.json"
    path.write_text(json.dumps([
        {"id": "x", "name": "X", "description": 7, "phases": [["inhale", "Inhale"]], "durations_sec": [4]},
    ]), encoding="utf-8")
    registry = TechniqueRegistry.with_builtins()
    with pytest.raises(ValidationError) as info:
        registry.load_json(path)
    assert info.value.field == "description"
    assert "x" not in registry
    assert [t.id for t in registry.search_techniques("zzz")] == []


def test_load_json_malformed_entry(tmp_path):
    path = tmp_path / "malformed.json"
    path.write_text(json.dumps({"techniques": [{"name": "No id"}]}), encoding="utf-8")
    with pytest.raises(ValidationError, match="Malformed technique entry 0"):
        TechniqueRegistry().load_json(path)


def test_load_json_unsupported_format(tmp_path):
    path = tmp_path / "weird.json"
    path.write_text(json.dumps({"other": 1}), encoding="utf-8")
    with pytest.raises(ValidationError):
        TechniqueRegistry().load_json(path)


def test_registered_definition_shared_read_only():
    technique = TechniqueDefinition(id="x", name="X", phases=[Phase("inhale", "Inhale")], durations_sec=[5])
    registry = TechniqueRegistry([technique])
    assert registry.get_technique("x") is technique
