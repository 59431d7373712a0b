"""The two public collections a submission can be admitted into."""

from __future__ import annotations

import enum


class Category(str, enum.Enum):
    FLOWERS = "flowers"
    EGGPLANTS = "eggplants"

    @property
    def table(self) -> str:
        """Raw table: full history, moderated rows included."""
        return self.value

    @property
    def public_view(self) -> str:
        """Filtered view: rows flagged ``manual_moderation`` are excluded."""
        return f"public_{self.value}"

    @property
    def has_quota(self) -> bool:
        return self is Category.FLOWERS
