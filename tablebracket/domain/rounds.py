"""Next-round construction.

A completed round is turned into the next one by the first matching rule:

1. ``semifinal_to_final``: a Semifinal always leads to the Final Table
   (three winners plus the best second).
2. ``form_semifinal``: winners, then seconds, then thirds form a pool; a
   pool of exactly nine players becomes a Semifinal of three matches.
3. ``bye_padded_final``: three matches with at least two real players each
   lead straight to the Final Table when winners plus the best second give
   four distinct players.
4. ``default_grouping``: advancers are regrouped into matches of 4-5, short
   groups are topped up with the best thirds. Four players in total make
   the Final Table, anything else is a regular round.

Rules never raise for well-formed input; failure is reported through
``BuildOutcome.reason``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from tablebracket.domain.grouping import distribute_into_groups
from tablebracket.domain.models import (
    FINAL_TABLE,
    MIN_MATCH_SIZE,
    SEMIFINAL,
    Participant,
    Round,
    Tournament,
    is_real,
    regular_round_name,
)
from tablebracket.domain.placements import PlacementResult, compute_placements

SEMIFINAL_SIZE = 9
SEMIFINAL_MATCHES = 3
FINAL_TABLE_SIZE = 4


@dataclass(frozen=True)
class RankedEntry:
    participant: Participant
    points: int | float


@dataclass(frozen=True)
class RoundResults:
    advancers: tuple[Participant, ...]
    thirds: tuple[RankedEntry, ...]


@dataclass(frozen=True)
class BuildOutcome:
    round: Round | None = None
    reason: str | None = None
    rule: str | None = None

    @property
    def built(self) -> bool:
        return self.round is not None


@dataclass(frozen=True)
class BuildContext:
    previous: Round
    round_index: int
    rankings: tuple[PlacementResult, ...]
    results: RoundResults
    allow_short_groups: bool = False

    def all_ranked(self, minimum: int = 1) -> bool:
        return all(
            ranking.is_complete
            and ranking.placements is not None
            and len(ranking.placements) >= minimum
            for ranking in self.rankings
        )


@dataclass(frozen=True)
class AdvancementRule:
    name: str
    applies: Callable[[BuildContext], bool]
    build: Callable[[BuildContext], BuildOutcome | None]


def by_points_then_name(entries: Iterable[RankedEntry]) -> list[RankedEntry]:
    return sorted(entries, key=lambda entry: (-entry.points, entry.participant.name))


def unique_by_id(participants: Iterable[Participant]) -> list[Participant]:
    seen: set[str] = set()
    unique: list[Participant] = []
    for participant in participants:
        if participant.id in seen:
            continue
        seen.add(participant.id)
        unique.append(participant)
    return unique


def collect_results(previous: Round) -> RoundResults:
    """Gather first/second finishers and third places from complete matches."""
    advancers: list[Participant] = []
    thirds: list[RankedEntry] = []
    for match in previous.matches:
        ranking = compute_placements(match)
        if not ranking.is_complete:
            continue
        first, second, third = (ranking.at(place) for place in (1, 2, 3))
        if is_real(first):
            advancers.append(first)
        if is_real(second):
            advancers.append(second)
        if is_real(third):
            thirds.append(RankedEntry(third, match.points_of(third)))
    return RoundResults(advancers=tuple(advancers), thirds=tuple(thirds))


def _placed_entries(context: BuildContext, place: int) -> list[RankedEntry]:
    entries: list[RankedEntry] = []
    for match, ranking in zip(context.previous.matches, context.rankings):
        competitor = ranking.at(place)
        if is_real(competitor):
            entries.append(RankedEntry(competitor, match.points_of(competitor)))
    return entries


def _winners_and_best_second(context: BuildContext) -> list[Participant]:
    winners = [entry.participant for entry in _placed_entries(context, 1)]
    seconds = by_points_then_name(_placed_entries(context, 2))
    candidates = list(winners)
    if seconds:
        candidates.append(seconds[0].participant)
    return unique_by_id(candidates)


def _final_table(players: list[Participant], rule: str) -> BuildOutcome:
    return BuildOutcome(round=Round.from_groups(FINAL_TABLE, [players]), rule=rule)


def _semifinal_to_final(context: BuildContext) -> BuildOutcome:
    if not context.all_ranked(minimum=2):
        return BuildOutcome(reason="Every Semifinal match needs at least two ranked players.")
    finalists = _winners_and_best_second(context)
    if len(finalists) != FINAL_TABLE_SIZE:
        return BuildOutcome(
            reason=f"Semifinal produced {len(finalists)} finalists instead of {FINAL_TABLE_SIZE}."
        )
    return _final_table(finalists, "semifinal_to_final")


def _form_semifinal(context: BuildContext) -> BuildOutcome | None:
    pool = unique_by_id(
        [
            *(entry.participant for entry in _placed_entries(context, 1)),
            *(entry.participant for entry in by_points_then_name(_placed_entries(context, 2))),
            *(entry.participant for entry in by_points_then_name(context.results.thirds)),
        ]
    )
    if len(pool) != SEMIFINAL_SIZE:
        return None
    size = SEMIFINAL_SIZE // SEMIFINAL_MATCHES
    groups = [pool[index : index + size] for index in range(0, SEMIFINAL_SIZE, size)]
    return BuildOutcome(round=Round.from_groups(SEMIFINAL, groups), rule="form_semifinal")


def _looks_like_semifinal(context: BuildContext) -> bool:
    matches = context.previous.matches
    return len(matches) == SEMIFINAL_MATCHES and all(
        len(match.real_participants()) >= 2 for match in matches
    )


def _bye_padded_final(context: BuildContext) -> BuildOutcome | None:
    if not context.all_ranked(minimum=2):
        return BuildOutcome(reason="Every match needs at least two ranked players.")
    finalists = _winners_and_best_second(context)
    if len(finalists) != FINAL_TABLE_SIZE:
        return None
    return _final_table(finalists, "bye_padded_final")


def _default_grouping(context: BuildContext) -> BuildOutcome:
    remaining = [entry.participant for entry in by_points_then_name(context.results.thirds)]
    groups: list[list[Participant]] = []
    for index, group in enumerate(distribute_into_groups(context.results.advancers), start=1):
        if len(group) < MIN_MATCH_SIZE:
            needed = MIN_MATCH_SIZE - len(group)
            group = [*group, *remaining[:needed]]
            del remaining[:needed]
        if len(group) < MIN_MATCH_SIZE and not context.allow_short_groups:
            return BuildOutcome(
                reason=(
                    f"Match {index} would have {len(group)} players: "
                    "not enough third-place finishers to fill it."
                )
            )
        groups.append(group)

    total = sum(len(group) for group in groups)
    if total == FINAL_TABLE_SIZE:
        name = FINAL_TABLE
    else:
        name = regular_round_name(context.round_index + 2)
    return BuildOutcome(round=Round.from_groups(name, groups), rule="default_grouping")


RULES: tuple[AdvancementRule, ...] = (
    AdvancementRule(
        name="semifinal_to_final",
        applies=lambda context: context.previous.name == SEMIFINAL,
        build=_semifinal_to_final,
    ),
    AdvancementRule(
        name="form_semifinal",
        applies=lambda context: context.previous.name != SEMIFINAL and context.all_ranked(),
        build=_form_semifinal,
    ),
    AdvancementRule(
        name="bye_padded_final",
        applies=_looks_like_semifinal,
        build=_bye_padded_final,
    ),
    AdvancementRule(
        name="default_grouping",
        applies=lambda context: True,
        build=_default_grouping,
    ),
)


def build_next_round(
    previous: Round,
    round_index: int,
    *,
    allow_short_groups: bool = False,
) -> BuildOutcome:
    """Build the round that follows ``previous``.

    ``round_index`` is the zero-based position of ``previous`` in the
    tournament. ``allow_short_groups`` keeps matches that could not be
    topped up to four players instead of refusing to build.
    """
    results = collect_results(previous)
    if not results.advancers:
        return BuildOutcome(reason="No advancers.")

    context = BuildContext(
        previous=previous,
        round_index=round_index,
        rankings=tuple(compute_placements(match) for match in previous.matches),
        results=results,
        allow_short_groups=allow_short_groups,
    )
    for rule in RULES:
        if not rule.applies(context):
            continue
        outcome = rule.build(context)
        if outcome is not None:
            if outcome.rule is None:
                return BuildOutcome(reason=outcome.reason, rule=rule.name)
            return outcome
    return BuildOutcome(reason="No advancement rule matched.")


def preview_advancer_ids(
    previous: Round,
    round_index: int,
    *,
    allow_short_groups: bool = False,
) -> set[str]:
    """Return ids of participants who would be seated in the next round."""
    outcome = build_next_round(previous, round_index, allow_short_groups=allow_short_groups)
    if outcome.round is None:
        return set()
    return {
        participant.id
        for match in outcome.round.matches
        for participant in match.real_participants()
    }


def find_champion(tournament: Tournament) -> Participant | None:
    """Return the winner of a computed Final Table, if the tournament has one."""
    final = tournament.current_round
    if final is None or not final.is_final_table or not final.computed or not final.matches:
        return None
    winner = compute_placements(final.matches[0]).winner
    return winner if is_real(winner) else None
