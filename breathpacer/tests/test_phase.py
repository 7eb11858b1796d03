"""Tests for the pure phase calculator."""

import pytest

from breathpacer.errors import ConfigurationError
from breathpacer.techniques import Phase
from breathpacer.timing.phase import compute_phase, cycles_completed, phase_boundaries, phase_for


class TestComputePhase:
    def test_four_seven_eight_inside_hold(self):
        snap = compute_phase(5, [4, 7, 8])
        assert snap.phase_index == 1
        assert snap.time_in_phase == 1
        assert snap.time_left == 6
        assert snap.duration == 7

    def test_boundary_belongs_to_next_phase(self):
        snap = compute_phase(4, [4, 7, 8])
        assert snap.phase_index == 1
        assert snap.time_in_phase == 0
        assert snap.time_left == 7

    def test_wraps_to_first_phase_after_cycle(self):
        snap = compute_phase(19, [4, 7, 8])
        assert snap.phase_index == 0
        assert snap.time_in_phase == 0

    def test_box_scenario(self):
        expected = {0: (0, 0, 4), 3: (0, 3, 1), 4: (1, 0, 4), 15: (3, 3, 1), 16: (0, 0, 4)}
        for elapsed, (index, in_phase, left) in expected.items():
            snap = compute_phase(elapsed, [4, 4, 4, 4])
            assert (snap.phase_index, snap.time_in_phase, snap.time_left) == (index, in_phase, left)

    def test_every_second_of_two_cycles_is_consistent(self):
        durations = [4, 7, 8]
        for elapsed in range(0, 2 * sum(durations)):
            snap = compute_phase(elapsed, durations)
            assert 0 <= snap.phase_index < len(durations)
            assert 0 <= snap.time_in_phase < durations[snap.phase_index]
            assert snap.time_in_phase + snap.time_left == durations[snap.phase_index]

    def test_periodic_in_total(self):
        durations = [6, 2, 8]
        for elapsed in range(16):
            assert compute_phase(elapsed, durations) == compute_phase(elapsed + 16 * 3, durations)

    def test_phase_keys_attached(self):
        phases = [Phase("inhale", "Inhale"), Phase("exhale", "Exhale")]
        snap = compute_phase(6, [5, 5], phases)
        assert snap.phase_key == "exhale"
        assert snap.phase_name == "Exhale"

    def test_without_phases_key_is_none(self):
        snap = compute_phase(0, [3])
        assert snap.phase_key is None
        assert snap.phase_name is None

    def test_empty_durations(self):
        with pytest.raises(ConfigurationError):
            compute_phase(0, [])

    def test_zero_total(self):
        with pytest.raises(ConfigurationError):
            compute_phase(3, [0, 0])

    def test_negative_elapsed(self):
        with pytest.raises(ValueError):
            compute_phase(-1, [4, 4])

    def test_to_dict(self):
        data = compute_phase(5, [4, 7, 8]).to_dict()
        assert data["phase_index"] == 1
        assert data["time_left"] == 6


def test_phase_for_definition(four_seven_eight):
    snap = phase_for(12, four_seven_eight)
    assert snap.phase_index == 2
    assert snap.phase_key == "exhale"
    assert snap.time_in_phase == 1


def test_phase_boundaries():
    assert phase_boundaries([4, 7, 8]) == [4, 11, 19]
    assert phase_boundaries([]) == []


def test_cycles_completed():
    assert cycles_completed(0, 16) == 0
    assert cycles_completed(15, 16) == 0
    assert cycles_completed(32, 16) == 2
    assert cycles_completed(5, 0) == 0
