"""
Technique Data Model - an immutable cyclic breathing pattern.

A TechniqueDefinition is an ordered list of phases (inhale, hold, exhale...)
with one positive integer duration per phase. Definitions are created once,
stored in the registry and shared by reference with any number of timers,
so every field is frozen and every sequence is a tuple.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple


class Capability(Enum):
    """Optional behaviour a technique may carry.

    Query with ``TechniqueDefinition.supports`` / ``capability``; a missing
    capability is reported as ``None`` rather than a made-up default.
    """
    INSTRUCTIONS = "instructions"
    COLOR_SCHEME = "color_scheme"


@dataclass(frozen=True)
class Phase:
    """One named segment of a breathing cycle."""
    key: str
    name: str

    def to_dict(self) -> Dict[str, str]:
        return {"key": self.key, "name": self.name}

    @classmethod
    def from_value(cls, value: Any) -> Phase:
        """Accept a Phase, a ``{"key", "name"}`` mapping or a ``(key, name)`` pair."""
        if isinstance(value, Phase):
            return value
        if isinstance(value, dict):
            return cls(key=value.get("key", ""), name=value.get("name", ""))
        key, name = value
        return cls(key=key, name=name)


@dataclass(frozen=True)
class ColorScheme:
    """Display palette attached to a technique (hex colour strings)."""
    primary: str
    secondary: str
    accent: str
    background: str = "#0b1020"
    panel: str = "#0f172a"
    text: str = "#e5e7eb"

    def to_dict(self) -> Dict[str, str]:
        return {
            "primary": self.primary,
            "secondary": self.secondary,
            "accent": self.accent,
            "background": self.background,
            "panel": self.panel,
            "text": self.text,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ColorScheme:
        return cls(**{k: data[k] for k in data if k in cls.__dataclass_fields__})


def pattern_from_durations(durations: Iterable[int]) -> str:
    """Build the conventional pattern label, e.g. ``(4, 7, 8) -> "4-7-8"``."""
    return "-".join(str(d) for d in durations)


@dataclass(frozen=True)
class TechniqueDefinition:
    """
    Immutable breathing technique.

    Attributes:
        id: Unique registry key (also the only value preference storage keeps)
        name: Display name
        phases: Ordered phases, one per duration
        durations_sec: Positive integer duration of each phase in seconds
        description: Short description
        benefits: Free-text benefits (searchable)
        pattern: Pattern label such as "4-7-8" (derived when empty)
        category: Optional grouping key
        instructions: Step-by-step guidance (INSTRUCTIONS capability)
        color_scheme: Display palette (COLOR_SCHEME capability)

    No validation happens here; the registry and the timer validate before
    use so that invalid definitions can still be constructed and reported.
    """
    id: str
    name: str
    phases: Tuple[Phase, ...]
    durations_sec: Tuple[int, ...]
    description: str = ""
    benefits: str = ""
    pattern: str = ""
    category: str = ""
    instructions: Tuple[str, ...] = field(default_factory=tuple)
    color_scheme: Optional[ColorScheme] = None

    def __post_init__(self):
        """Normalise lists and mappings into frozen values."""
        object.__setattr__(self, "phases", tuple(Phase.from_value(p) for p in self.phases))
        object.__setattr__(self, "durations_sec", tuple(self.durations_sec))
        object.__setattr__(self, "instructions", tuple(self.instructions))
        if isinstance(self.color_scheme, dict):
            object.__setattr__(self, "color_scheme", ColorScheme.from_dict(self.color_scheme))
        if not self.pattern:
            object.__setattr__(self, "pattern", pattern_from_durations(self.durations_sec))

    @property
    def total_duration_sec(self) -> int:
        """Length of one full cycle in seconds."""
        return sum(self.durations_sec)

    @property
    def phase_count(self) -> int:
        return len(self.phases)

    def supports(self, capability: Capability) -> bool:
        return self.capability(capability) is not None

    def capability(self, capability: Capability) -> Optional[Any]:
        """
        Return the value backing a capability, or None if absent.

        Args:
            capability: Capability to query

        Returns:
            Instructions tuple, ColorScheme, or None
        """
        if capability is Capability.INSTRUCTIONS:
            return self.instructions or None
        if capability is Capability.COLOR_SCHEME:
            return self.color_scheme
        return None

    def copy(self) -> TechniqueDefinition:
        """Independent value copy (equal, but not the same object)."""
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "phases": [p.to_dict() for p in self.phases],
            "durations_sec": list(self.durations_sec),
            "description": self.description,
            "benefits": self.benefits,
            "pattern": self.pattern,
        }
        if self.category:
            data["category"] = self.category
        if self.instructions:
            data["instructions"] = list(self.instructions)
        if self.color_scheme is not None:
            data["color_scheme"] = self.color_scheme.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TechniqueDefinition:
        """Deserialize from dict."""
        scheme = data.get("color_scheme")
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            phases=tuple(data.get("phases", ())),
            durations_sec=tuple(data.get("durations_sec", ())),
            description=data.get("description", ""),
            benefits=data.get("benefits", ""),
            pattern=data.get("pattern", ""),
            category=data.get("category", ""),
            instructions=tuple(data.get("instructions", ())),
            color_scheme=ColorScheme.from_dict(scheme) if scheme else None,
        )
