"""
Breathing technique definitions, validation and registry.

Core Components:
- TechniqueDefinition: immutable ordered phases + durations
- validate_technique: structural invariants (errors) and advisories (warnings)
- TechniqueRegistry: validated store and factory for technique copies
"""

from .definition import (
    Capability,
    ColorScheme,
    Phase,
    TechniqueDefinition,
    pattern_from_durations,
)

from .validation import (
    ValidationIssue,
    ValidationReport,
    ensure_valid,
    validate_technique,
)

from .builtin import BUILTIN_TECHNIQUES
from .registry import TechniqueRegistry

__all__ = [
    'Capability',
    'ColorScheme',
    'Phase',
    'TechniqueDefinition',
    'pattern_from_durations',
    'ValidationIssue',
    'ValidationReport',
    'ensure_valid',
    'validate_technique',
    'BUILTIN_TECHNIQUES',
    'TechniqueRegistry',
]
