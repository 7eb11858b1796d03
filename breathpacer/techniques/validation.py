"""Structural validation for technique definitions.

Errors make a definition unusable (the registry rejects it). Warnings are
advisory only: they flag patterns that are valid but unusual to follow.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from numbers import Integral
from typing import Any, Optional

from ..errors import ValidationError
from .definition import TechniqueDefinition

logger = logging.getLogger(__name__)

MAX_COMFORTABLE_PHASE_SEC = 60
MIN_COMFORTABLE_CYCLE_SEC = 4
MAX_COMFORTABLE_CYCLE_SEC = 120


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    message: str
    value: Any = None


@dataclass
class ValidationReport:
    """Outcome of :func:`validate_technique`."""

    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def first_error(self) -> Optional[ValidationIssue]:
        return self.errors[0] if self.errors else None

    def raise_for_errors(self) -> None:
        """Raise ValidationError for the first error, if any."""
        issue = self.first_error()
        if issue is not None:
            raise ValidationError(issue.message, field=issue.field, value=issue.value)


def _is_positive_int(value: Any) -> bool:
    # bool is an Integral but never a valid duration
    return isinstance(value, Integral) and not isinstance(value, bool) and value > 0


def validate_technique(definition: Any) -> ValidationReport:
    """
    Check a technique definition against its structural invariants.

    Args:
        definition: Object to check (anything that is not a
            TechniqueDefinition is reported as an error)

    Returns:
        ValidationReport with errors and warnings
    """
    report = ValidationReport()
    if not isinstance(definition, TechniqueDefinition):
        report.errors.append(ValidationIssue(
            "definition", f"Expected TechniqueDefinition, got {type(definition).__name__}", definition
        ))
        return report

    if not isinstance(definition.id, str) or not definition.id.strip():
        report.errors.append(ValidationIssue("id", "Technique id must be a non-empty string", definition.id))
    if not isinstance(definition.name, str) or not definition.name.strip():
        report.errors.append(ValidationIssue("name", "Technique name must be a non-empty string", definition.name))
    for attr in ("description", "benefits", "pattern", "category"):
        value = getattr(definition, attr)
        if not isinstance(value, str):
            report.errors.append(ValidationIssue(attr, f"{attr.capitalize()} must be a string", value))
    for i, step in enumerate(definition.instructions):
        if not isinstance(step, str):
            report.errors.append(ValidationIssue(f"instructions[{i}]", "Instruction must be a string", step))

    phases = definition.phases
    durations = definition.durations_sec

    if not phases:
        report.errors.append(ValidationIssue("phases", "Technique must contain at least one phase", phases))
    for i, phase in enumerate(phases):
        if not isinstance(phase.key, str) or not phase.key:
            report.errors.append(ValidationIssue(f"phases[{i}].key", "Phase key must be a non-empty string", phase.key))
        if not isinstance(phase.name, str) or not phase.name:
            report.errors.append(ValidationIssue(f"phases[{i}].name", "Phase name must be a non-empty string", phase.name))

    if len(phases) != len(durations):
        report.errors.append(ValidationIssue(
            "durations_sec",
            f"Phase count mismatch: {len(phases)} phases but {len(durations)} durations",
            durations,
        ))

    for i, duration in enumerate(durations):
        if not _is_positive_int(duration):
            report.errors.append(ValidationIssue(
                f"durations_sec[{i}]", f"Duration must be a positive integer, got {duration!r}", duration
            ))
        elif duration > MAX_COMFORTABLE_PHASE_SEC:
            report.warnings.append(ValidationIssue(
                f"durations_sec[{i}]",
                f"Phase longer than {MAX_COMFORTABLE_PHASE_SEC}s may be difficult to follow",
                duration,
            ))

    if report.is_valid:
        total = definition.total_duration_sec
        if total < MIN_COMFORTABLE_CYCLE_SEC:
            report.warnings.append(ValidationIssue(
                "total_duration_sec", f"Cycle shorter than {MIN_COMFORTABLE_CYCLE_SEC}s may be too short", total
            ))
        elif total > MAX_COMFORTABLE_CYCLE_SEC:
            report.warnings.append(ValidationIssue(
                "total_duration_sec", f"Cycle longer than {MAX_COMFORTABLE_CYCLE_SEC}s may be too long", total
            ))

    return report


def ensure_valid(definition: Any) -> TechniqueDefinition:
    """Validate, log warnings, raise ValidationError on the first error."""
    report = validate_technique(definition)
    report.raise_for_errors()
    for issue in report.warnings:
        logger.warning("[registry] %s: %s (%s=%r)", definition.id, issue.message, issue.field, issue.value)
    return definition
