"""Built-in breathing techniques shipped with the engine."""

from __future__ import annotations

from .definition import ColorScheme, Phase, TechniqueDefinition

INHALE = Phase("inhale", "Inhale")
HOLD_FULL = Phase("hold1", "Hold")
EXHALE = Phase("exhale", "Exhale")
HOLD_EMPTY = Phase("hold2", "Hold")

FOUR_PHASE = (INHALE, HOLD_FULL, EXHALE, HOLD_EMPTY)
THREE_PHASE = (INHALE, HOLD_FULL, EXHALE)
TWO_PHASE = (INHALE, EXHALE)


def _scheme(primary: str, secondary: str = "#34D399", accent: str = "#F59E0B") -> ColorScheme:
    return ColorScheme(primary=primary, secondary=secondary, accent=accent)


BUILTIN_TECHNIQUES: tuple[TechniqueDefinition, ...] = (
    TechniqueDefinition(
        id="box4",
        name="Box Breathing 4-4-4-4",
        phases=FOUR_PHASE,
        durations_sec=(4, 4, 4, 4),
        description="Classic square breathing technique",
        benefits="Reduces stress, improves focus, balances nervous system",
        category="focus",
        instructions=(
            "Breathe in slowly for 4 seconds",
            "Hold your breath for 4 seconds",
            "Exhale slowly for 4 seconds",
            "Hold empty for 4 seconds",
            "Repeat the cycle",
        ),
        color_scheme=_scheme("#60A5FA"),
    ),
    TechniqueDefinition(
        id="478",
        name="4-7-8 Breathing",
        phases=THREE_PHASE,
        durations_sec=(4, 7, 8),
        description="Calming technique for relaxation",
        benefits="Promotes sleep, reduces anxiety, activates parasympathetic nervous system",
        category="relaxation",
        instructions=(
            "Place the tip of your tongue behind your upper front teeth",
            "Exhale completely through your mouth",
            "Close your mouth and inhale through your nose for 4 seconds",
            "Hold your breath for 7 seconds",
            "Exhale through your mouth for 8 seconds",
            "Repeat 3-4 times",
        ),
        color_scheme=_scheme("#8B5CF6"),
    ),
    TechniqueDefinition(
        id="478-extended",
        name="Extended 4-7-8",
        phases=THREE_PHASE,
        durations_sec=(6, 10, 12),
        description="Longer version for deep relaxation",
        benefits="Deep relaxation, stress relief, better sleep preparation",
        category="relaxation",
        instructions=(
            "This is an extended version of 4-7-8 breathing",
            "Inhale slowly and deeply for 6 seconds",
            "Hold your breath for 10 seconds",
            "Exhale slowly and completely for 12 seconds",
            "Focus on the longer exhale for maximum relaxation",
            "Repeat 2-3 times for deep relaxation",
        ),
        color_scheme=_scheme("#7C3AED"),
    ),
    TechniqueDefinition(
        id="triangle",
        name="Triangle Breathing 4-4-4",
        phases=THREE_PHASE,
        durations_sec=(4, 4, 4),
        description="Simple three-phase breathing",
        benefits="Easy to learn, good for beginners, promotes calm",
        category="beginner",
        instructions=(
            "Perfect for beginners",
            "Inhale slowly for 4 seconds",
            "Hold your breath for 4 seconds",
            "Exhale slowly for 4 seconds",
            "No pause between cycles",
            "Focus on smooth, even breathing",
        ),
        color_scheme=_scheme("#06B6D4"),
    ),
    TechniqueDefinition(
        id="555",
        name="Equal Breathing 5-5-5",
        phases=THREE_PHASE,
        durations_sec=(5, 5, 5),
        description="Balanced breathing pattern",
        benefits="Improves focus, reduces stress, easy to maintain",
        category="focus",
        instructions=(
            "Equal timing for all phases",
            "Inhale slowly for 5 seconds",
            "Hold your breath for 5 seconds",
            "Exhale slowly for 5 seconds",
            "Maintain steady rhythm",
            "Great for meditation and focus",
        ),
        color_scheme=_scheme("#059669"),
    ),
    TechniqueDefinition(
        id="628",
        name="Energy Breathing 6-2-8",
        phases=THREE_PHASE,
        durations_sec=(6, 2, 8),
        description="Quick inhale, short hold, long exhale",
        benefits="Increases energy, improves alertness, quick stress relief",
        category="energy",
        instructions=(
            "Energizing breathing pattern",
            "Quick, sharp inhale for 6 seconds",
            "Brief hold for 2 seconds",
            "Long, controlled exhale for 8 seconds",
            "Feel the energy building up",
            "Use when you need a quick boost",
        ),
        color_scheme=_scheme("#DC2626"),
    ),
    TechniqueDefinition(
        id="4444-extended",
        name="Extended Box 6-6-6-6",
        phases=FOUR_PHASE,
        durations_sec=(6, 6, 6, 6),
        description="Longer box breathing for deep focus",
        benefits="Deep focus, meditation preparation, advanced relaxation",
        category="focus",
        instructions=(
            "Advanced box breathing technique",
            "Inhale slowly for 6 seconds",
            "Hold your breath for 6 seconds",
            "Exhale slowly for 6 seconds",
            "Hold empty for 6 seconds",
            "Perfect for deep meditation",
        ),
        color_scheme=_scheme("#7C2D12"),
    ),
    TechniqueDefinition(
        id="coherent",
        name="Coherent Breathing 5-5",
        phases=TWO_PHASE,
        durations_sec=(5, 5),
        description="Simple two-phase breathing",
        benefits="Heart coherence, emotional balance, stress reduction",
        category="relaxation",
        instructions=(
            "Simple and effective breathing",
            "Inhale slowly for 5 seconds",
            "Exhale slowly for 5 seconds",
            "No holds - continuous flow",
            "Promotes heart coherence",
            "Great for emotional regulation",
        ),
        color_scheme=_scheme("#0891B2"),
    ),
)
