import unittest

from tablebracket.domain.grouping import distribute_into_groups, group_count_for, make_byes, seed_initial_round
from tablebracket.domain.models import ROUND_ONE, Participant, is_bye, is_real


class DistributeIntoGroupsTests(unittest.TestCase):
    def test_group_sizes_table(self) -> None:
        cases = [
            (0, []),
            (1, [1]),
            (3, [3]),
            (4, [4]),
            (5, [5]),
            (6, [3, 3]),
            (7, [4, 3]),
            (8, [4, 4]),
            (9, [5, 4]),
            (10, [5, 5]),
            (11, [4, 4, 3]),
            (12, [4, 4, 4]),
            (13, [5, 4, 4]),
            (24, [4, 4, 4, 4, 4, 4]),
            (25, [5, 4, 4, 4, 4, 4]),
        ]
        for total, expected in cases:
            with self.subTest(total=total):
                groups = distribute_into_groups(list(range(total)))
                self.assertEqual([len(group) for group in groups], expected)

    def test_tileable_totals_give_groups_of_four_or_five(self) -> None:
        totals = [4, 5, 8, 9, 10, *range(12, 61)]
        for total in totals:
            with self.subTest(total=total):
                groups = distribute_into_groups(list(range(total)))
                self.assertTrue(all(len(group) in (4, 5) for group in groups))
                self.assertEqual(sum(len(group) for group in groups), total)
                self.assertEqual(len(groups), group_count_for(total))

    def test_input_order_is_preserved_in_contiguous_slices(self) -> None:
        players = [f"p{index}" for index in range(17)]
        groups = distribute_into_groups(players)
        self.assertEqual([player for group in groups for player in group], players)
        self.assertEqual(groups[0], players[:5])


class SeedInitialRoundTests(unittest.TestCase):
    def _roster(self, count: int) -> list[Participant]:
        return [Participant.create(f"Player {index}") for index in range(count)]

    def test_small_roster_is_padded_to_four_slots(self) -> None:
        for count in (1, 2, 3):
            with self.subTest(count=count):
                round_ = seed_initial_round(self._roster(count))
                self.assertEqual(round_.name, ROUND_ONE)
                self.assertEqual(len(round_.matches), 1)
                slots = round_.matches[0].slots
                self.assertEqual(len(slots), 4)
                self.assertEqual(sum(1 for slot in slots if is_real(slot.competitor)), count)
                self.assertTrue(all(slot.points == 0 for slot in slots if is_bye(slot.competitor)))
                self.assertTrue(all(slot.points is None for slot in slots if is_real(slot.competitor)))

    def test_six_players_get_one_bye_per_match(self) -> None:
        round_ = seed_initial_round(self._roster(6))
        self.assertEqual([len(match.slots) for match in round_.matches], [4, 4])
        self.assertEqual([len(match.real_participants()) for match in round_.matches], [3, 3])

    def test_large_roster_has_no_byes(self) -> None:
        round_ = seed_initial_round(self._roster(23))
        self.assertEqual(sorted(len(match.slots) for match in round_.matches), [4, 4, 5, 5, 5])
        self.assertFalse(any(slot.is_bye for match in round_.matches for slot in match.slots))
        self.assertFalse(round_.computed)

    def test_empty_roster_gives_empty_round(self) -> None:
        self.assertEqual(seed_initial_round([]).matches, [])

    def test_byes_have_unique_ids(self) -> None:
        byes = make_byes(5)
        self.assertEqual(len({bye.id for bye in byes}), 5)
        self.assertEqual(make_byes(-1), [])


if __name__ == "__main__":
    unittest.main()
