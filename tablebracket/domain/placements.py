from __future__ import annotations

import math
from dataclasses import dataclass

from tablebracket.domain.models import Competitor, Match, Slot, is_real


@dataclass(frozen=True)
class PlacementResult:
    is_complete: bool
    placements: tuple[Competitor, ...] | None = None

    @property
    def winner(self) -> Competitor | None:
        if not self.placements:
            return None
        return self.placements[0]

    def at(self, place: int) -> Competitor | None:
        """Return the competitor at a 1-based place, if any."""
        if not self.placements or place < 1 or place > len(self.placements):
            return None
        return self.placements[place - 1]


def _slot_sort_key(slot: Slot) -> tuple[float, str, str]:
    competitor = slot.competitor
    if is_real(competitor) and slot.points is not None:
        points = float(slot.points)
    else:
        points = -math.inf
    name = competitor.name if competitor is not None else ""
    identity = competitor.id if competitor is not None else ""
    return (-points, name, identity)


def compute_placements(match: Match) -> PlacementResult:
    """Rank the competitors of a match by recorded points.

    The match is incomplete while any real participant has no points.
    Byes always rank after real participants. Ties are broken by display
    name, then by id. Empty slots do not appear in the placement.
    """
    if any(slot.needs_points for slot in match.slots):
        return PlacementResult(is_complete=False)

    ordered = sorted(match.slots, key=_slot_sort_key)
    placements = tuple(slot.competitor for slot in ordered if slot.competitor is not None)
    return PlacementResult(is_complete=True, placements=placements)


def is_match_complete(match: Match) -> bool:
    return compute_placements(match).is_complete
