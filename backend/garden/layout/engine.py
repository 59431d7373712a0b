"""Scatter layout for the garden scene.

Positions are percentages of the island container. Rows near the top of the
band hug a wide strip, the middle band shifts right and the front band shifts
left, giving an island silhouette instead of a uniform scatter. Items lower
on the island (larger ``top``) are drawn larger.

Pure function of ``n`` plus the random source; nothing is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

# Vertical band: top ∈ [0, 65) percent of the container height.
TOP_RANGE = 65.0

# (upper bound of top, left start, left span) — first matching band wins.
_HORIZONTAL_BANDS: tuple[tuple[float, float, float], ...] = (
    (20.0, 10.0, 60.0),
    (50.0, 40.0, 30.0),
    (TOP_RANGE, 10.0, 40.0),
)

# Scale grows linearly from back (top = 0) to front (top = TOP_RANGE).
SCALE_BASE = 0.5
SCALE_SPAN = 0.3

# Minimum separation in percentage points, checked per axis.
MIN_DISTANCE = 8.0
MAX_ATTEMPTS = 50


@dataclass(frozen=True)
class LayoutPosition:
    left: float
    top: float
    scale: float

    @property
    def left_css(self) -> str:
        return f"{self.left}%"

    @property
    def top_css(self) -> str:
        return f"{self.top}%"

    @property
    def z_index(self) -> int:
        """Items further down overlap the ones behind them."""
        return int(self.top)


def _band_left(top: float, rng: np.random.Generator) -> float:
    for upper, start, span in _HORIZONTAL_BANDS[:-1]:
        if top < upper:
            break
    else:
        _, start, span = _HORIZONTAL_BANDS[-1]
    return start + rng.random() * span


def scale_for(top: float) -> float:
    return SCALE_BASE + (top / TOP_RANGE) * SCALE_SPAN


def is_clear(candidate: LayoutPosition, placed: list[LayoutPosition]) -> bool:
    """Far enough on at least one axis from every placed position."""
    return all(
        abs(candidate.left - p.left) >= MIN_DISTANCE or abs(candidate.top - p.top) >= MIN_DISTANCE
        for p in placed
    )


def sample_position(rng: np.random.Generator) -> LayoutPosition:
    top = rng.random() * TOP_RANGE
    return LayoutPosition(left=_band_left(top, rng), top=top, scale=scale_for(top))


def layout(n: int, rng: np.random.Generator | None = None) -> list[LayoutPosition]:
    """Return exactly ``n`` positions, using at most MAX_ATTEMPTS samples each.

    When every attempt collides, the last candidate is kept and overlap is
    allowed.
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    rng = rng if rng is not None else np.random.default_rng()

    positions: list[LayoutPosition] = []
    for _ in range(n):
        candidate = sample_position(rng)
        attempts = 1
        while not is_clear(candidate, positions) and attempts < MAX_ATTEMPTS:
            candidate = sample_position(rng)
            attempts += 1
        positions.append(candidate)
    return positions
