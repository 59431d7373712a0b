"""Terminal outcomes of one submission attempt, plus the captions they show.

The controller returns these as plain data; rendering (typing effects,
timers, overlays) is the presentation layer's business.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from garden.admission.quota import QUOTA_MESSAGE
from garden.categories import Category
from garden.storage.persistence import StoredSubmission

DEFAULT_CAPTION = "Add a flower to our garden? "


class RejectionKind(str, enum.Enum):
    CAPTURE = "capture"
    QUOTA = "quota"
    QUOTA_SERVER = "quota-server"
    ERROR = "error"
    CONTENT = "content"
    PERSISTENCE = "persistence"


@dataclass(frozen=True)
class Caption:
    text: str
    follow_up: str | None = None
    delay_s: float = 0.0


CAPTIONS: dict[Category | RejectionKind, Caption | None] = {
    Category.FLOWERS: Caption(DEFAULT_CAPTION),
    Category.EGGPLANTS: Caption(
        "Ummm... O.o what's that? ",
        follow_up="I guess this is more your speed? ",
        delay_s=2.0,
    ),
    RejectionKind.CONTENT: Caption(
        "That's not a flower. Try again? ",
        follow_up=DEFAULT_CAPTION,
        delay_s=5.0,
    ),
    RejectionKind.QUOTA: Caption(QUOTA_MESSAGE),
    RejectionKind.QUOTA_SERVER: Caption(QUOTA_MESSAGE),
    # Failures leave the caption alone.
    RejectionKind.CAPTURE: None,
    RejectionKind.ERROR: None,
    RejectionKind.PERSISTENCE: None,
}


@dataclass(frozen=True)
class Accepted:
    category: Category
    confidence: float
    stored: StoredSubmission

    @property
    def caption(self) -> Caption | None:
        return CAPTIONS[self.category]

    @property
    def url(self) -> str:
        return self.stored.url


@dataclass(frozen=True)
class Rejected:
    kind: RejectionKind
    detail: str = ""
    current_count: int | None = None

    @property
    def caption(self) -> Caption | None:
        return CAPTIONS[self.kind]


Outcome = Accepted | Rejected
