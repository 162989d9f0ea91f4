from __future__ import annotations


class TournamentError(ValueError):
    """Recoverable, user-visible tournament failure."""


class RosterLoadError(TournamentError):
    pass


class IncompleteRoundError(TournamentError):
    pass


class BuildBlockedError(TournamentError):
    pass


class MalformedSnapshotError(TournamentError):
    pass


class InvalidPointError(TournamentError):
    pass
