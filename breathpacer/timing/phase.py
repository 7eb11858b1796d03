"""
Phase calculation over cyclic, variable-length segments.

Pure functions only: no shared state is touched, so these are safe to call
from any tick, thread or test without synchronisation.

Boundary rule: an elapsed time that lands exactly on a phase boundary
belongs to the *next* phase (strict less-than against the running total).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, TYPE_CHECKING

from ..errors import ConfigurationError

if TYPE_CHECKING:
    from ..techniques.definition import Phase, TechniqueDefinition


@dataclass(frozen=True)
class PhaseSnapshot:
    """
    Active phase at one instant.

    Attributes:
        phase_index: 0-based index into the technique's phases
        phase_key: Key of the active phase (None if computed from durations only)
        phase_name: Display name of the active phase (None if unknown)
        duration: Duration of the active phase in seconds
        time_in_phase: Seconds since the phase began (0 <= time_in_phase < duration)
        time_left: Seconds until the phase ends (duration - time_in_phase)
    """
    phase_index: int
    phase_key: Optional[str]
    phase_name: Optional[str]
    duration: int
    time_in_phase: int
    time_left: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase_index": self.phase_index,
            "phase_key": self.phase_key,
            "phase_name": self.phase_name,
            "duration": self.duration,
            "time_in_phase": self.time_in_phase,
            "time_left": self.time_left,
        }


def phase_boundaries(durations: Sequence[int]) -> List[int]:
    """Running totals of the durations, e.g. ``[4, 7, 8] -> [4, 11, 19]``."""
    bounds = []
    acc = 0
    for duration in durations:
        acc += duration
        bounds.append(acc)
    return bounds


def cycles_completed(elapsed_seconds: int, total_duration: int) -> int:
    """Number of full cycles contained in ``elapsed_seconds``."""
    if total_duration <= 0:
        return 0
    return elapsed_seconds // total_duration


def compute_phase(
    elapsed_seconds: int,
    durations: Sequence[int],
    phases: Optional[Sequence[Phase]] = None,
) -> PhaseSnapshot:
    """
    Find the active phase for an elapsed time.

    Args:
        elapsed_seconds: Non-negative seconds since the session began
            (may exceed one cycle; it is reduced modulo the total)
        durations: Positive phase durations in seconds
        phases: Optional phases aligned with ``durations`` for key/name

    Returns:
        PhaseSnapshot for the reduced elapsed time

    Raises:
        ConfigurationError: If durations is empty or sums to zero
        ValueError: If elapsed_seconds is negative
    """
    if not durations:
        raise ConfigurationError("Cannot compute phase: no phase durations")
    total = sum(durations)
    if total <= 0:
        raise ConfigurationError("Cannot compute phase: total duration is zero", {"durations": list(durations)})
    if elapsed_seconds < 0:
        raise ValueError(f"elapsed_seconds must be non-negative, got {elapsed_seconds}")

    reduced = elapsed_seconds % total
    accumulated = 0
    for index, duration in enumerate(durations):
        before = accumulated
        accumulated += duration
        if reduced < accumulated:
            phase = phases[index] if phases is not None and index < len(phases) else None
            return PhaseSnapshot(
                phase_index=index,
                phase_key=phase.key if phase is not None else None,
                phase_name=phase.name if phase is not None else None,
                duration=duration,
                time_in_phase=reduced - before,
                time_left=accumulated - reduced,
            )

    # Only reachable with non-positive individual durations, which the
    # registry rejects before a definition can reach the calculator.
    raise ConfigurationError("Cannot compute phase: durations must be positive", {"durations": list(durations)})


def phase_for(elapsed_seconds: int, definition: TechniqueDefinition) -> PhaseSnapshot:
    """Compute the active phase of a technique definition."""
    return compute_phase(elapsed_seconds, definition.durations_sec, definition.phases)
