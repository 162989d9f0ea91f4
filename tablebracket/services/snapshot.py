"""JSON snapshot export and import of the whole tournament state."""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Mapping

from tablebracket.domain.models import (
    BYE_NAME,
    Bye,
    Competitor,
    Match,
    Participant,
    Round,
    Slot,
    Tournament,
    is_bye,
)
from tablebracket.domain.placements import compute_placements
from tablebracket.services.errors import MalformedSnapshotError


def _competitor_to_dict(competitor: Competitor) -> dict[str, Any]:
    if is_bye(competitor):
        return {"id": competitor.id, "name": BYE_NAME, "bye": True}
    return {"id": competitor.id, "name": competitor.name, "flagUrl": competitor.image, "bye": False}


def _match_to_dict(match: Match) -> dict[str, Any]:
    ranking = compute_placements(match)
    return {
        "id": match.id,
        "slots": [
            {
                "participant": _competitor_to_dict(slot.competitor) if slot.competitor else None,
                "points": slot.points,
            }
            for slot in match.slots
        ],
        "isComplete": ranking.is_complete,
        "placements": (
            [_competitor_to_dict(competitor) for competitor in ranking.placements]
            if ranking.placements is not None
            else None
        ),
    }


def export_snapshot(tournament: Tournament) -> dict[str, Any]:
    return {
        "participants": [_competitor_to_dict(participant) for participant in tournament.participants],
        "rounds": [
            {
                "id": round_.id,
                "name": round_.name,
                "matches": [_match_to_dict(match) for match in round_.matches],
                "computed": round_.computed,
            }
            for round_ in tournament.rounds
        ],
    }


def _require(record: object, key: str, expected: type | tuple[type, ...], where: str) -> Any:
    if not isinstance(record, Mapping):
        raise MalformedSnapshotError(f"{where}: expected an object.")
    value = record.get(key)
    if not isinstance(value, expected):
        raise MalformedSnapshotError(f"{where}: field '{key}' is missing or invalid.")
    return value


def _competitor_from_dict(record: object, where: str) -> Competitor:
    identity = _require(record, "id", str, where)
    name = _require(record, "name", str, where)
    # snapshots without a "bye" flag mark byes by name only
    marked = record["bye"] is True if "bye" in record else name == BYE_NAME
    if marked:
        return Bye(id=identity)
    image = record.get("flagUrl")
    return Participant(id=identity, name=name, image=image if isinstance(image, str) and image else None)


def _points_from(record: Mapping[str, Any], where: str) -> int | float | None:
    points = record.get("points")
    if points is None:
        return None
    if isinstance(points, bool) or not isinstance(points, (int, float)):
        raise MalformedSnapshotError(f"{where}: points must be a number.")
    if not math.isfinite(points):
        raise MalformedSnapshotError(f"{where}: points must be finite.")
    return points


def _match_from_dict(record: object, where: str) -> Match:
    identity = _require(record, "id", str, where)
    slots: list[Slot] = []
    for index, slot_record in enumerate(_require(record, "slots", list, where), start=1):
        slot_where = f"{where}, slot {index}"
        if not isinstance(slot_record, Mapping):
            raise MalformedSnapshotError(f"{slot_where}: expected an object.")
        participant = slot_record.get("participant")
        competitor = _competitor_from_dict(participant, slot_where) if participant else None
        slots.append(Slot(competitor=competitor, points=_points_from(slot_record, slot_where)))
    return Match(id=identity, slots=slots)


def _round_from_dict(record: object, where: str) -> Round:
    identity = _require(record, "id", str, where)
    name = _require(record, "name", str, where)
    matches = [
        _match_from_dict(match_record, f"{where}, match {index}")
        for index, match_record in enumerate(_require(record, "matches", list, where), start=1)
    ]
    return Round(id=identity, name=name, matches=matches, computed=record.get("computed") is True)


def import_snapshot(data: object) -> Tournament:
    """Restore a tournament from snapshot data.

    Raises MalformedSnapshotError when ``participants`` or ``rounds`` is
    missing or not a list, or when a nested record is invalid.
    """
    if not isinstance(data, Mapping):
        raise MalformedSnapshotError("Invalid state file.")
    if not isinstance(data.get("participants"), list) or not isinstance(data.get("rounds"), list):
        raise MalformedSnapshotError("Invalid state file: 'participants' and 'rounds' must be lists.")

    participants: list[Participant] = []
    for index, record in enumerate(data["participants"], start=1):
        competitor = _competitor_from_dict(record, f"participant {index}")
        if isinstance(competitor, Participant):
            participants.append(competitor)
    rounds = [
        _round_from_dict(record, f"round {index}")
        for index, record in enumerate(data["rounds"], start=1)
    ]
    return Tournament(participants=participants, rounds=rounds)


def save_snapshot_file(tournament: Tournament, path: str | Path) -> Path:
    output_path = Path(path)
    output_path.write_text(
        json.dumps(export_snapshot(tournament), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    return output_path


def load_snapshot_file(path: str | Path) -> Tournament:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise MalformedSnapshotError(f"Invalid state file: {exc}") from exc
    return import_snapshot(data)
