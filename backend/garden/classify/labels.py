"""Canonical CLIP label set and admission thresholds.

The classifier answers with probabilities positionally matched to LABELS, so
this order is part of the wire contract. All lookups below go through label
names; never index the probability vector with bare integers elsewhere.
"""

from __future__ import annotations

LABELS: tuple[str, ...] = (
    "a doodle of a flower",
    "a sketch of a flower",
    "artwork with flowers",
    "a doodle of a penis",
    "a doodle",
    "a doodle of an object",
    "a swastika",
    "handwriting",
    "text",
    "the word flower",
)

FLOWER_LABELS: tuple[str, ...] = (
    "a doodle of a flower",
    "a sketch of a flower",
    "artwork with flowers",
)
EGGPLANT_LABEL = "a doodle of a penis"

# Content that is never admitted, whatever the other scores say.
DISALLOWED_LABELS: tuple[str, ...] = ("a swastika",)

# Strict ">" comparisons. Deployment-time constants, not settings.
FLOWER_THRESHOLD = 0.90
EGGPLANT_THRESHOLD = 0.95

LABEL_SEPARATOR = " | "


def label_index(label: str) -> int:
    return LABELS.index(label)


def classifier_prompt() -> str:
    """Pipe-joined label list sent as the ``text`` input."""
    return LABEL_SEPARATOR.join(LABELS)
