"""
MyCSD point scale and metadata defaults.

Level labels are free text entered by organizers ("Negeri / Universiti",
"Kebangsaan/Antara Universiti", "Kelab", ...). They are matched case-insensitively
against marker substrings, highest tier first:
    international / antarabangsa                      -> 8
    university / universiti / state / negeri /
    national / kebangsaan                             -> 4
    anything else, including empty                    -> 2
"""

from typing import Dict, Optional, Tuple

from app.core.enums import MyCSDCategory, MyCSDLevel


DEFAULT_MYCSD_CATEGORY = MyCSDCategory.REKA_CIPTA_DAN_INOVASI
DEFAULT_MYCSD_LEVEL = "kampus"

# Order matters: the first tier with a matching marker wins.
LEVEL_MARKERS: Tuple[Tuple[MyCSDLevel, Tuple[str, ...]], ...] = (
    (MyCSDLevel.ANTARABANGSA, ("international", "antarabangsa")),
    (MyCSDLevel.KEBANGSAAN, ("university", "universiti", "state", "negeri", "national", "kebangsaan")),
)

LEVEL_POINTS: Dict[MyCSDLevel, int] = {
    MyCSDLevel.ANTARABANGSA: 8,
    MyCSDLevel.KEBANGSAAN: 4,
    MyCSDLevel.KAMPUS: 2,
}


def resolve_level(label: Optional[str]) -> MyCSDLevel:
    """Map an organizer's level label onto one of the three fixed levels."""
    text = (label or "").strip().lower()
    for level, markers in LEVEL_MARKERS:
        if any(marker in text for marker in markers):
            return level
    return MyCSDLevel.KAMPUS


def points_for_level(label: Optional[str]) -> int:
    return LEVEL_POINTS[resolve_level(label)]


def _squash(text: str) -> str:
    return "".join(text.split()).upper()


def resolve_category(label: Optional[str]) -> Optional[MyCSDCategory]:
    """Match one of the five categories ignoring case and whitespace. None if no match."""
    if not label or not label.strip():
        return None
    wanted = _squash(label)
    for category in MyCSDCategory:
        if _squash(category.value) == wanted or category.name == wanted:
            return category
    return None


def effective_category(label: Optional[str]) -> MyCSDCategory:
    """Category used for ledger entries and reports; falls back when the event has none."""
    return resolve_category(label) or DEFAULT_MYCSD_CATEGORY


def effective_level(label: Optional[str]) -> str:
    """Level label used for scoring; falls back to campus when the event has none."""
    if label and label.strip():
        return label.strip()
    return DEFAULT_MYCSD_LEVEL
