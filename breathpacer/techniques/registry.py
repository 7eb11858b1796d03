"""
Technique Registry - validated store of breathing techniques.

The registry is the only place definitions enter the engine, so it is also
where structural validation happens; timers downstream can assume every
definition they receive satisfies its invariants.

Usage:
    registry = TechniqueRegistry.with_builtins()
    technique = registry.create_technique("box4")
    timer.set_technique(technique)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from ..errors import NotFoundError, ValidationError
from .builtin import BUILTIN_TECHNIQUES
from .definition import TechniqueDefinition
from .validation import ensure_valid

logger = logging.getLogger(__name__)


class TechniqueRegistry:
    """Validates and stores TechniqueDefinitions keyed by id."""

    def __init__(self, techniques: Iterable[TechniqueDefinition] = ()):
        self._techniques: Dict[str, TechniqueDefinition] = {}
        for technique in techniques:
            self.register(technique)

    @classmethod
    def with_builtins(cls) -> TechniqueRegistry:
        """Create a registry pre-populated with the built-in catalogue."""
        return cls(BUILTIN_TECHNIQUES)

    def __len__(self) -> int:
        return len(self._techniques)

    def __contains__(self, technique_id: object) -> bool:
        return technique_id in self._techniques

    # ===== Mutation =====

    def register(self, definition: TechniqueDefinition) -> None:
        """
        Validate and store a technique.

        Re-registering an existing id replaces the previous definition
        (last writer wins).

        Raises:
            ValidationError: If the definition violates its invariants
        """
        ensure_valid(definition)
        if definition.id in self._techniques:
            logger.info(f"[registry] Replacing technique '{definition.id}'")
        else:
            logger.debug(f"[registry] Registered technique '{definition.id}'")
        self._techniques[definition.id] = definition

    def unregister(self, technique_id: str) -> TechniqueDefinition:
        """Remove and return a technique. Raises NotFoundError if absent."""
        try:
            return self._techniques.pop(technique_id)
        except KeyError:
            raise NotFoundError(technique_id) from None

    # ===== Lookup =====

    def get_technique(self, technique_id: str) -> TechniqueDefinition:
        """Return the registered definition. Raises NotFoundError if absent."""
        try:
            return self._techniques[technique_id]
        except KeyError:
            raise NotFoundError(technique_id) from None

    def create_technique(self, technique_id: str) -> TechniqueDefinition:
        """Return an independent copy so timers never share one instance."""
        return self.get_technique(technique_id).copy()

    def has_technique(self, technique_id: str) -> bool:
        return technique_id in self._techniques

    def get_technique_ids(self) -> List[str]:
        return list(self._techniques)

    def get_all_techniques(self) -> List[TechniqueDefinition]:
        return list(self._techniques.values())

    def get_techniques_by_category(self, category: str) -> List[TechniqueDefinition]:
        return [t for t in self._techniques.values() if t.category == category]

    def search_techniques(self, query: str) -> List[TechniqueDefinition]:
        """Case-insensitive substring match against name, description, benefits and pattern."""
        needle = query.lower()
        return [
            t for t in self._techniques.values()
            if needle in t.name.lower()
            or needle in t.description.lower()
            or needle in t.benefits.lower()
            or needle in t.pattern.lower()
        ]

    def get_recommended_techniques(
        self,
        *,
        min_duration: Optional[int] = None,
        max_duration: Optional[int] = None,
        min_phases: Optional[int] = None,
        max_phases: Optional[int] = None,
    ) -> List[TechniqueDefinition]:
        """
        Filter by cycle length and phase count.

        Args:
            min_duration: Minimum total cycle duration in seconds (inclusive)
            max_duration: Maximum total cycle duration in seconds (inclusive)
            min_phases: Minimum phase count (inclusive)
            max_phases: Maximum phase count (inclusive)

        Returns:
            Matching techniques sorted ascending by total duration
        """
        techniques = self.get_all_techniques()
        if min_duration is not None:
            techniques = [t for t in techniques if t.total_duration_sec >= min_duration]
        if max_duration is not None:
            techniques = [t for t in techniques if t.total_duration_sec <= max_duration]
        if min_phases is not None:
            techniques = [t for t in techniques if t.phase_count >= min_phases]
        if max_phases is not None:
            techniques = [t for t in techniques if t.phase_count <= max_phases]
        return sorted(techniques, key=lambda t: t.total_duration_sec)

    def get_technique_metadata(self) -> List[Dict[str, Any]]:
        """Summary rows for pickers and the CLI."""
        return [
            {
                "id": t.id,
                "name": t.name,
                "description": t.description,
                "benefits": t.benefits,
                "pattern": t.pattern,
                "category": t.category,
                "total_duration": t.total_duration_sec,
                "phase_count": t.phase_count,
            }
            for t in self._techniques.values()
        ]

    # ===== I/O =====

    def save_json(self, path: Path | str, technique_ids: Optional[Iterable[str]] = None) -> None:
        """
        Write techniques to a JSON file.

        Args:
            path: Output file path
            technique_ids: Ids to export (default: all)
        """
        ids = list(technique_ids) if technique_ids is not None else self.get_technique_ids()
        data = {"version": "1.0", "techniques": [self.get_technique(i).to_dict() for i in ids]}
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        logger.info(f"[registry] Saved {len(ids)} technique(s) to {path}")

    def load_json(self, path: Path | str) -> List[str]:
        """
        Register every technique found in a JSON file.

        Accepts ``{"techniques": [...]}`` or a bare list of technique dicts.
        The file is fully parsed and validated before anything is registered,
        so a bad entry leaves the registry untouched.

        Returns:
            Ids registered from the file

        Raises:
            FileNotFoundError: If the file doesn't exist
            json.JSONDecodeError: If the file is not valid JSON
            ValidationError: If any entry is malformed or invalid
        """
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        entries = data.get("techniques") if isinstance(data, dict) else data
        if not isinstance(entries, list):
            raise ValidationError(f"Unsupported technique file format in {path}", field="techniques")

        definitions = []
        for i, entry in enumerate(entries):
            try:
                definition = TechniqueDefinition.from_dict(entry)
            except (KeyError, TypeError, ValueError) as exc:
                raise ValidationError(
                    f"Malformed technique entry {i} in {path}: {exc}", field=f"techniques[{i}]"
                ) from exc
            definitions.append(ensure_valid(definition))

        for definition in definitions:
            self.register(definition)
        logger.info(f"[registry] Loaded {len(definitions)} technique(s) from {path}")
        return [d.id for d in definitions]
