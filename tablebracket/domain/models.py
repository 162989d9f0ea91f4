"""Tournament data model: participants, slots, matches and rounds."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable
from uuid import uuid4

ROUND_ONE = "Round 1"
SEMIFINAL = "Semifinal"
FINAL_TABLE = "Final Table"
BYE_NAME = "BYE"

MIN_MATCH_SIZE = 4


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex[:12]}"


def regular_round_name(number: int) -> str:
    return f"Round {number}"


@dataclass(frozen=True)
class Participant:
    id: str
    name: str
    image: str | None = None

    @classmethod
    def create(cls, name: str, image: str | None = None) -> Participant:
        return cls(id=new_id("p"), name=name, image=image or None)


@dataclass(frozen=True)
class Bye:
    """Padding placeholder. Never earns points and never advances."""

    id: str = field(default_factory=lambda: new_id("bye"))

    @property
    def name(self) -> str:
        return BYE_NAME

    @property
    def image(self) -> None:
        return None


Competitor = Participant | Bye


def is_bye(competitor: object) -> bool:
    return isinstance(competitor, Bye)


def is_real(competitor: object) -> bool:
    return isinstance(competitor, Participant)


@dataclass
class Slot:
    competitor: Competitor | None = None
    points: int | float | None = None

    @property
    def is_empty(self) -> bool:
        return self.competitor is None

    @property
    def is_bye(self) -> bool:
        return is_bye(self.competitor)

    @property
    def needs_points(self) -> bool:
        return is_real(self.competitor) and self.points is None


@dataclass
class Match:
    id: str
    slots: list[Slot] = field(default_factory=list)

    @classmethod
    def from_competitors(cls, competitors: Iterable[Competitor]) -> Match:
        slots = [
            Slot(competitor=competitor, points=0 if is_bye(competitor) else None)
            for competitor in competitors
        ]
        return cls(id=new_id("m"), slots=slots)

    def real_participants(self) -> list[Participant]:
        return [slot.competitor for slot in self.slots if is_real(slot.competitor)]

    def points_of(self, competitor: Competitor | None) -> int | float:
        """Return the recorded points of a competitor, 0 when absent."""
        if competitor is None:
            return 0
        for slot in self.slots:
            if slot.competitor is not None and slot.competitor.id == competitor.id:
                return slot.points if slot.points is not None else 0
        return 0


@dataclass
class Round:
    id: str
    name: str
    matches: list[Match] = field(default_factory=list)
    computed: bool = False

    @classmethod
    def from_groups(cls, name: str, groups: Iterable[Iterable[Competitor]]) -> Round:
        return cls(
            id=new_id("r"),
            name=name,
            matches=[Match.from_competitors(group) for group in groups],
        )

    @property
    def is_final_table(self) -> bool:
        return self.name == FINAL_TABLE

    @property
    def is_semifinal(self) -> bool:
        return self.name == SEMIFINAL


@dataclass
class Tournament:
    participants: list[Participant] = field(default_factory=list)
    rounds: list[Round] = field(default_factory=list)

    @property
    def current_round(self) -> Round | None:
        return self.rounds[-1] if self.rounds else None

    @property
    def current_round_index(self) -> int | None:
        return len(self.rounds) - 1 if self.rounds else None
