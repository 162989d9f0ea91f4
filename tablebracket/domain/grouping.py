from __future__ import annotations

import math
from typing import Sequence, TypeVar

from tablebracket.domain.models import (
    MIN_MATCH_SIZE,
    ROUND_ONE,
    Bye,
    Participant,
    Round,
)

T = TypeVar("T")


def group_count_for(total: int) -> int:
    """Return how many groups of 4-5 players ``total`` players split into."""
    if total <= 0:
        return 0
    min_groups = math.ceil(total / 5)
    max_groups = total // 4
    if min_groups <= max_groups:
        return max_groups
    return math.ceil(total / 4)


def distribute_into_groups(players: Sequence[T]) -> list[list[T]]:
    """Split players into contiguous, balanced groups.

    More, smaller groups are preferred when both 4- and 5-player tilings
    fit. Totals with no such tiling (fewer than 4, or 6, 7, 11) produce
    some groups of 3 or fewer.
    """
    total = len(players)
    count = group_count_for(total)
    if count == 0:
        return []

    base, remainder = divmod(total, count)
    groups: list[list[T]] = []
    start = 0
    for index in range(count):
        size = base + (1 if index < remainder else 0)
        groups.append(list(players[start : start + size]))
        start += size
    return groups


def make_byes(count: int) -> list[Bye]:
    return [Bye() for _ in range(max(count, 0))]


def seed_initial_round(participants: Sequence[Participant]) -> Round:
    groups = []
    for group in distribute_into_groups(participants):
        missing = MIN_MATCH_SIZE - len(group)
        groups.append([*group, *make_byes(missing)])
    return Round.from_groups(ROUND_ONE, groups)
