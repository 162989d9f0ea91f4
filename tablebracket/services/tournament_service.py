from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Iterable

from tablebracket.domain.grouping import seed_initial_round
from tablebracket.domain.models import Participant, Round, Slot, Tournament
from tablebracket.domain.placements import is_match_complete
from tablebracket.domain.rounds import build_next_round, find_champion, preview_advancer_ids
from tablebracket.services.audit_log import (
    BUILD_ROUND,
    COMPUTE_ROUND,
    EXPORT_HISTORY,
    EXPORT_SNAPSHOT,
    IMPORT_SNAPSHOT,
    LOAD_ROSTER,
    RESET,
    SEED_ROUND,
    AuditLogService,
)
from tablebracket.services.errors import (
    BuildBlockedError,
    IncompleteRoundError,
    InvalidPointError,
    TournamentError,
)
from tablebracket.services.history_export import HistoryExportService, history_rows
from tablebracket.services.roster_import import fetch_participants_from_url, load_participants_from_file
from tablebracket.services.snapshot import (
    export_snapshot,
    import_snapshot,
    load_snapshot_file,
    save_snapshot_file,
)
from tablebracket.settings import get_allow_short_groups


def parse_points(value: object) -> int | float | None:
    """Normalize a point entry; empty input clears the slot."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidPointError("Points must be a number.")
    if isinstance(value, str):
        text = value.strip().replace(",", ".")
        if not text:
            return None
        try:
            value = int(text)
        except ValueError:
            try:
                value = float(text)
            except ValueError as exc:
                raise InvalidPointError(f"Points must be a number, got '{value}'.") from exc
    if not isinstance(value, (int, float)):
        raise InvalidPointError("Points must be a number.")
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if math.isinf(value):
            raise InvalidPointError("Points must be finite.")
    return value


class TournamentService:
    """Owns the tournament state and exposes the user-facing operations.

    Every failure is raised as a ``TournamentError`` subclass after being
    written to the audit log; state is left untouched in that case.
    """

    def __init__(
        self,
        tournament: Tournament | None = None,
        *,
        audit_log: AuditLogService | None = None,
        allow_short_groups: bool | None = None,
    ) -> None:
        self._tournament = tournament or Tournament()
        self._audit_log = audit_log
        self._allow_short_groups = (
            get_allow_short_groups() if allow_short_groups is None else allow_short_groups
        )

    @property
    def tournament(self) -> Tournament:
        return self._tournament

    @property
    def allow_short_groups(self) -> bool:
        return self._allow_short_groups

    def _log(self, event_type: str, title: str, details: str, context: dict[str, object] | None = None) -> None:
        if self._audit_log is not None:
            self._audit_log.log_event(event_type, title, details, context=context)

    def _fail(self, title: str, exc: TournamentError) -> TournamentError:
        if self._audit_log is not None:
            self._audit_log.log_error(title, exc)
        return exc

    def load_roster(self, participants: Iterable[Participant], source: str = "manual") -> list[Participant]:
        roster = list(participants)
        self._tournament = Tournament(participants=roster, rounds=[])
        self._log(
            LOAD_ROSTER,
            "Roster loaded",
            f"{len(roster)} participant(s) from {source}",
            context={"source": source, "count": len(roster)},
        )
        return roster

    def load_roster_from_url(self, url: str | None = None) -> list[Participant]:
        try:
            participants = fetch_participants_from_url(url)
        except TournamentError as exc:
            self._fail("Roster load failed", exc)
            raise
        return self.load_roster(participants, source=url or "default sheet")

    def load_roster_from_file(self, path: str | Path) -> list[Participant]:
        try:
            participants = load_participants_from_file(path)
        except TournamentError as exc:
            self._fail("Roster load failed", exc)
            raise
        return self.load_roster(participants, source=str(path))

    def seed_first_round(self) -> Round:
        if not self._tournament.participants:
            raise self._fail("Seeding failed", BuildBlockedError("Load participants first."))
        if self._tournament.rounds:
            raise self._fail("Seeding failed", BuildBlockedError("The first round is already seeded."))
        first_round = seed_initial_round(self._tournament.participants)
        self._tournament.rounds.append(first_round)
        self._log(
            SEED_ROUND,
            "Round 1 seeded",
            f"{len(first_round.matches)} match(es)",
            context={"matches": len(first_round.matches)},
        )
        return first_round

    def _editable_slot(self, round_index: int, match_index: int, slot_index: int) -> Slot:
        if min(round_index, match_index, slot_index) < 0:
            raise InvalidPointError("No such slot.")
        try:
            round_ = self._tournament.rounds[round_index]
            slot = round_.matches[match_index].slots[slot_index]
        except IndexError as exc:
            raise InvalidPointError("No such slot.") from exc
        if round_.computed:
            raise InvalidPointError(f"{round_.name} is already computed.")
        if slot.competitor is None:
            raise InvalidPointError("The slot is empty.")
        if slot.is_bye:
            raise InvalidPointError("BYE slots do not take points.")
        return slot

    def record_point(self, round_index: int, match_index: int, slot_index: int, value: object) -> None:
        """Set or clear (``None`` / empty text) the points of one slot."""
        try:
            slot = self._editable_slot(round_index, match_index, slot_index)
            points = parse_points(value)
        except TournamentError as exc:
            self._fail("Point entry rejected", exc)
            raise
        slot.points = points

    def compute_round(self) -> Participant | None:
        """Lock the current round. Returns the champion for a Final Table."""
        current = self._tournament.current_round
        if current is None:
            raise self._fail("Compute failed", IncompleteRoundError("There is no round to compute."))
        incomplete = [
            index
            for index, match in enumerate(current.matches, start=1)
            if not is_match_complete(match)
        ]
        if incomplete:
            raise self._fail(
                "Compute failed",
                IncompleteRoundError(
                    "Fill points for all non-BYE players in this round before computing "
                    f"(match {', '.join(str(index) for index in incomplete)})."
                ),
            )
        current.computed = True
        self._log(COMPUTE_ROUND, f"{current.name} computed", f"{len(current.matches)} match(es)")
        return find_champion(self._tournament)

    def build_next_round(self) -> Round:
        current = self._tournament.current_round
        if current is None:
            raise self._fail("Build failed", BuildBlockedError("Seed the first round first."))
        if current.is_final_table:
            raise self._fail(
                "Build failed",
                BuildBlockedError("Already at the Final Table. No further rounds can be generated."),
            )
        if not current.computed:
            raise self._fail("Build failed", BuildBlockedError("Compute the current round first."))

        outcome = build_next_round(
            current,
            self._tournament.current_round_index,
            allow_short_groups=self._allow_short_groups,
        )
        if outcome.round is None:
            raise self._fail("Build failed", BuildBlockedError(outcome.reason or "No advancers."))
        self._tournament.rounds.append(outcome.round)
        self._log(
            BUILD_ROUND,
            f"{outcome.round.name} built",
            f"{len(outcome.round.matches)} match(es) from {current.name}",
            context={"rule": outcome.rule, "matches": len(outcome.round.matches)},
        )
        return outcome.round

    def reset(self) -> None:
        self._tournament = Tournament()
        self._log(RESET, "Tournament reset", "Participants and rounds cleared")

    def champion(self) -> Participant | None:
        return find_champion(self._tournament)

    def advancer_ids(self, round_index: int) -> set[str]:
        """Ids of participants from a computed round seated in its next round."""
        if not 0 <= round_index < len(self._tournament.rounds):
            return set()
        round_ = self._tournament.rounds[round_index]
        if not round_.computed or round_.is_final_table:
            return set()
        return preview_advancer_ids(round_, round_index, allow_short_groups=self._allow_short_groups)

    def export_snapshot(self) -> dict[str, Any]:
        return export_snapshot(self._tournament)

    def import_snapshot(self, data: object) -> Tournament:
        try:
            tournament = import_snapshot(data)
        except TournamentError as exc:
            self._fail("Import failed", exc)
            raise
        self._tournament = tournament
        self._log(
            IMPORT_SNAPSHOT,
            "Snapshot imported",
            f"{len(tournament.participants)} participant(s), {len(tournament.rounds)} round(s)",
        )
        return tournament

    def save_snapshot(self, path: str | Path) -> Path:
        output_path = save_snapshot_file(self._tournament, path)
        self._log(EXPORT_SNAPSHOT, "Snapshot exported", str(output_path), context={"path": str(output_path)})
        return output_path

    def load_snapshot(self, path: str | Path) -> Tournament:
        try:
            tournament = load_snapshot_file(path)
        except TournamentError as exc:
            self._fail("Import failed", exc)
            raise
        self._tournament = tournament
        self._log(IMPORT_SNAPSHOT, "Snapshot imported", str(path), context={"path": str(path)})
        return tournament

    def history_rows(self) -> list[list[str]]:
        return history_rows(self._tournament)

    def export_history(self, path: str | Path) -> Path:
        output_path = HistoryExportService().export_xlsx(self._tournament, path)
        self._log(EXPORT_HISTORY, "History exported", str(output_path), context={"path": str(output_path)})
        return output_path
