import json
import unittest

from tablebracket.domain.models import FINAL_TABLE, SEMIFINAL, Participant
from tablebracket.services.snapshot import export_snapshot, import_snapshot
from tablebracket.services.tournament_service import TournamentService
from tests.helpers.bracket_factory import roster_names


class FullTournamentTests(unittest.TestCase):
    def _play_round(self, service: TournamentService) -> None:
        index = service.tournament.current_round_index
        for match_index, match in enumerate(service.tournament.rounds[index].matches):
            for slot_index, slot in enumerate(match.slots):
                if slot.competitor is not None and not slot.is_bye:
                    service.record_point(index, match_index, slot_index, 10 - slot_index)
        service.compute_round()

    def test_twenty_four_players_reach_a_champion(self) -> None:
        service = TournamentService(allow_short_groups=False)
        service.load_roster([Participant.create(name) for name in roster_names(24)])
        service.seed_first_round()

        champion = None
        while champion is None:
            self._play_round(service)
            champion = service.champion()
            if champion is None:
                service.build_next_round()

        rounds = service.tournament.rounds
        self.assertEqual([round_.name for round_ in rounds], ["Round 1", "Round 2", SEMIFINAL, FINAL_TABLE])
        self.assertEqual([len(round_.matches) for round_ in rounds], [6, 3, 3, 1])
        self.assertEqual(
            [slot.competitor.name for slot in rounds[-1].matches[0].slots],
            ["Player 01", "Player 02", "Player 05", "Player 09"],
        )
        self.assertEqual(champion.name, "Player 01")

    def test_restored_snapshot_continues_identically(self) -> None:
        service = TournamentService(allow_short_groups=False)
        service.load_roster([Participant.create(name) for name in roster_names(24)])
        service.seed_first_round()
        self._play_round(service)

        restored = TournamentService(
            import_snapshot(json.loads(json.dumps(export_snapshot(service.tournament)))),
            allow_short_groups=False,
        )
        original_next = service.build_next_round()
        restored_next = restored.build_next_round()

        def seated(round_):
            return [[slot.competitor.id for slot in match.slots] for match in round_.matches]

        self.assertEqual(original_next.name, restored_next.name)
        self.assertEqual(seated(original_next), seated(restored_next))


if __name__ == "__main__":
    unittest.main()
