"""Classification result and the categorical decision derived from it."""

from __future__ import annotations

import enum
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from garden.classify.labels import (
    DISALLOWED_LABELS,
    EGGPLANT_LABEL,
    EGGPLANT_THRESHOLD,
    FLOWER_LABELS,
    FLOWER_THRESHOLD,
    LABELS,
)


class Decision(str, enum.Enum):
    FLOWER = "flower"
    EGGPLANT = "eggplant"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ClassificationResult:
    """Immutable label → probability map over the fixed label set."""

    probabilities: Mapping[str, float]

    def __post_init__(self) -> None:
        missing = [label for label in LABELS if label not in self.probabilities]
        if missing:
            raise ValueError(f"Missing probabilities for labels: {missing}")
        frozen = MappingProxyType({label: float(self.probabilities[label]) for label in LABELS})
        object.__setattr__(self, "probabilities", frozen)

    @classmethod
    def from_vector(cls, values: Sequence[float]) -> ClassificationResult:
        """Build from the classifier's positional output."""
        if len(values) != len(LABELS):
            raise ValueError(
                f"Expected {len(LABELS)} probabilities, got {len(values)}"
            )
        return cls(probabilities=dict(zip(LABELS, (float(v) for v in values))))

    @property
    def flower_probability(self) -> float:
        return sum(self.probabilities[label] for label in FLOWER_LABELS)

    @property
    def eggplant_probability(self) -> float:
        return self.probabilities[EGGPLANT_LABEL]

    @property
    def is_flower(self) -> bool:
        return self.flower_probability > FLOWER_THRESHOLD

    @property
    def is_eggplant(self) -> bool:
        return self.eggplant_probability > EGGPLANT_THRESHOLD

    @property
    def top_label(self) -> str:
        return max(LABELS, key=lambda label: self.probabilities[label])

    @property
    def is_disallowed(self) -> bool:
        return self.top_label in DISALLOWED_LABELS

    def decide(self) -> Decision:
        """Flower is checked before eggplant; disallowed content always loses."""
        if self.is_disallowed:
            return Decision.REJECTED
        if self.is_flower:
            return Decision.FLOWER
        if self.is_eggplant:
            return Decision.EGGPLANT
        return Decision.REJECTED

    @property
    def confidence(self) -> float:
        """Score stored with an admitted record for its category."""
        decision = self.decide()
        if decision is Decision.EGGPLANT:
            return self.eggplant_probability
        return self.flower_probability
