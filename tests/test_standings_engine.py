import pytest

from league_standings.calculation.standings_engine import (
    compute_standings,
    compute_streak,
    rank_records,
    resolve_current_week,
)
from league_standings.models.enums import StructureMode
from league_standings.models.group import Group, GroupAssignment
from league_standings.models.standings import TeamRecord
from league_standings.models.team import Team

YEAR = 2025


def ids(records):
    return [r.team_id for r in records]


# ============================================================================
# Worked example: three teams, one win and one tie
# ============================================================================


class TestThreeTeamSeason:
    def test_overall_order(self, three_teams, opening_games):
        standings = compute_standings(
            YEAR, three_teams, opening_games, [], StructureMode.SINGLE_LEAGUE
        )

        assert ids(standings.overall) == [1, 3, 2]

    def test_records(self, three_teams, opening_games):
        standings = compute_standings(YEAR, three_teams, opening_games, [])
        alpha, bravo, charlie = (standings.get_record(i) for i in (1, 2, 3))

        assert (alpha.wins, alpha.losses, alpha.ties) == (1, 0, 0)
        assert alpha.win_percentage == 1.0
        assert alpha.points_for == 24

        assert (bravo.wins, bravo.losses, bravo.ties) == (0, 1, 1)
        assert bravo.win_percentage == 0.25
        assert bravo.points_for == 27
        assert bravo.points_against == 34
        assert bravo.point_differential == -7

        assert (charlie.wins, charlie.losses, charlie.ties) == (0, 0, 1)
        assert charlie.win_percentage == 0.5

    def test_streaks(self, three_teams, opening_games):
        standings = compute_standings(YEAR, three_teams, opening_games, [])

        assert standings.get_record(1).streak == "W1"
        # Latest game was a tie for both
        assert standings.get_record(2).streak == "-"
        assert standings.get_record(3).streak == "-"

    def test_single_league_has_no_group_tables(self, three_teams, opening_games):
        standings = compute_standings(YEAR, three_teams, opening_games, [])

        assert standings.groups == []
        assert standings.divisions is None
        assert standings.quads is None


# ============================================================================
# Properties
# ============================================================================


@pytest.fixture
def busy_season(make_game):
    return [
        make_game(1, 1, 2, 101.5, 99.0),
        make_game(1, 3, 4, 80.0, 80.0),
        make_game(2, 1, 3, 70.2, 90.4),
        make_game(2, 2, 4, 110.0, 60.0),
        make_game(3, 1, 4, 88.8, 88.8),
        make_game(3, 2, 3, 77.0, 120.0),
        make_game(4, 1, 2),  # not played yet
        make_game(5, 3, 1, 95.0, 94.0, is_playoff=True),
    ]


def test_win_percentage_bounds(four_teams, busy_season):
    standings = compute_standings(YEAR, four_teams, busy_season, [])

    for record in standings.overall:
        assert 0.0 <= record.win_percentage <= 1.0
        expected = (record.wins + 0.5 * record.ties) / (
            record.wins + record.losses + record.ties
        )
        assert record.win_percentage == pytest.approx(expected)


def test_zero_games_win_percentage_is_zero():
    record = TeamRecord(team_id=1, year=YEAR, team_name="Nobody")

    assert record.win_percentage == 0.0
    assert record.group_win_percentage == 0.0


def test_results_are_conserved(four_teams, busy_season):
    standings = compute_standings(YEAR, four_teams, busy_season, [])
    completed = [g for g in busy_season if g.is_completed]

    total = sum(r.wins + r.losses + r.ties for r in standings.overall)
    assert total == 2 * len(completed)
    assert sum(r.wins for r in standings.overall) == sum(
        r.losses for r in standings.overall
    )
    for record in standings.overall:
        played = [g for g in completed if g.involves(record.team_id)]
        assert record.games_played == len(played)


def test_overall_order_respects_tiebreak_tuple(
    four_teams, busy_season, division_assignments, divisions
):
    standings = compute_standings(
        YEAR, four_teams, busy_season, division_assignments, StructureMode.DIVISIONS, divisions
    )

    keys = [
        (r.win_percentage, r.group_win_percentage, r.points_for)
        for r in standings.overall
    ]
    assert keys == sorted(keys, reverse=True)


def test_teams_without_completed_games_are_excluded(three_teams, opening_games, make_game):
    teams = three_teams + [Team(team_id=9, name="Expansion")]
    games = opening_games + [make_game(3, 9, 1)]

    standings = compute_standings(YEAR, teams, games, [])

    assert 9 not in ids(standings.overall)


def test_same_inputs_give_identical_output(
    four_teams, busy_season, division_assignments, divisions
):
    before = [g.model_dump() for g in busy_season]

    first = compute_standings(
        YEAR, four_teams, busy_season, division_assignments, StructureMode.DIVISIONS, divisions
    )
    second = compute_standings(
        YEAR, four_teams, busy_season, division_assignments, StructureMode.DIVISIONS, divisions
    )

    assert first.model_dump_json() == second.model_dump_json()
    assert [g.model_dump() for g in busy_season] == before


# ============================================================================
# Divisions and quads
# ============================================================================


class TestGroupedStandings:
    def test_group_win_percentage_breaks_overall_tie(
        self, four_teams, division_games, division_assignments, divisions
    ):
        standings = compute_standings(
            YEAR, four_teams, division_games, division_assignments,
            StructureMode.DIVISIONS, divisions,
        )

        # 1 and 2 are both 1-1; 1 is 1-0 in the division
        assert ids(standings.overall) == [3, 1, 2, 4]

    def test_points_for_breaks_remaining_tie(self, four_teams, division_games):
        standings = compute_standings(YEAR, four_teams, division_games, [])

        # Same win % and no group games: 2 scored more than 1
        assert ids(standings.overall) == [3, 2, 1, 4]

    def test_group_sub_records(
        self, four_teams, division_games, division_assignments, divisions
    ):
        standings = compute_standings(
            YEAR, four_teams, division_games, division_assignments,
            StructureMode.DIVISIONS, divisions,
        )

        one = standings.get_record(1)
        assert (one.group_wins, one.group_losses, one.group_ties) == (1, 0, 0)
        two = standings.get_record(2)
        assert (two.group_wins, two.group_losses, two.group_ties) == (0, 1, 0)
        assert one.group_id == 10

    def test_group_tables(
        self, four_teams, division_games, division_assignments, divisions
    ):
        standings = compute_standings(
            YEAR, four_teams, division_games, division_assignments,
            StructureMode.DIVISIONS, divisions,
        )

        assert [g.name for g in standings.groups] == ["North", "South"]
        assert ids(standings.divisions["North"]) == [1, 2]
        assert ids(standings.divisions["South"]) == [3, 4]
        assert standings.quads is None
        assert standings.groups[0].leader.team_id == 1

    def test_playoff_games_do_not_count_toward_group_record(
        self, four_teams, division_assignments, make_game
    ):
        games = [
            make_game(1, 1, 3, 50, 40),
            make_game(15, 1, 2, 90, 80, is_playoff=True),
        ]

        standings = compute_standings(
            YEAR, four_teams, games, division_assignments, StructureMode.DIVISIONS
        )

        one = standings.get_record(1)
        assert one.wins == 2
        assert one.group_games == 0
        assert standings.get_record(2).group_games == 0

    def test_cross_group_games_do_not_count(
        self, four_teams, division_assignments, make_game
    ):
        standings = compute_standings(
            YEAR, four_teams, [make_game(1, 1, 3, 50, 40)], division_assignments,
            StructureMode.DIVISIONS,
        )

        assert all(r.group_games == 0 for r in standings.overall)

    def test_team_without_assignment_is_overall_only(
        self, four_teams, division_games, division_assignments, divisions
    ):
        assignments = [a for a in division_assignments if a.team_id != 4]

        standings = compute_standings(
            YEAR, four_teams, division_games, assignments, StructureMode.DIVISIONS, divisions
        )

        four = standings.get_record(4)
        assert four is not None
        assert (four.group_wins, four.group_losses, four.group_ties) == (0, 0, 0)
        assert four.group_id is None
        assert all(4 not in ids(g.teams) for g in standings.groups)

    def test_duplicate_group_names_are_disambiguated(
        self, four_teams, division_games, division_assignments
    ):
        groups = [Group(group_id=10, name="East"), Group(group_id=20, name="East")]

        standings = compute_standings(
            YEAR, four_teams, division_games, division_assignments,
            StructureMode.DIVISIONS, groups,
        )

        assert [g.name for g in standings.groups] == ["East (10)", "East (20)"]
        assert sum(len(teams) for teams in standings.divisions.values()) == 4
        assert ids(standings.divisions["East (20)"]) == [3, 4]

    def test_group_label_falls_back_without_metadata(
        self, four_teams, division_games, division_assignments
    ):
        standings = compute_standings(
            YEAR, four_teams, division_games, division_assignments, StructureMode.QUADS
        )

        assert set(standings.quads) == {"Quad 10", "Quad 20"}
        assert standings.divisions is None

    def test_assignments_ignored_in_single_league(
        self, four_teams, division_games, division_assignments
    ):
        standings = compute_standings(
            YEAR, four_teams, division_games, division_assignments,
            StructureMode.SINGLE_LEAGUE,
        )

        assert standings.groups == []
        assert all(r.group_games == 0 and r.group_id is None for r in standings.overall)

    def test_assignments_from_other_years_are_ignored(
        self, four_teams, division_games
    ):
        assignments = [
            GroupAssignment(team_id=1, year=2024, group_id=10),
            GroupAssignment(team_id=2, year=2024, group_id=10),
        ]

        standings = compute_standings(
            YEAR, four_teams, division_games, assignments, StructureMode.DIVISIONS
        )

        assert standings.groups == []

    def test_assignment_to_unknown_group_is_skipped(
        self, four_teams, division_games, division_assignments
    ):
        groups = [Group(group_id=10, name="North")]

        standings = compute_standings(
            YEAR, four_teams, division_games, division_assignments,
            StructureMode.DIVISIONS, groups,
        )

        assert [g.name for g in standings.groups] == ["North"]
        assert standings.get_record(3).group_id is None


# ============================================================================
# Bad rows
# ============================================================================


def test_game_with_unknown_team_is_skipped(three_teams, opening_games, make_game):
    games = opening_games + [make_game(3, 1, 99, 50, 10)]

    standings = compute_standings(YEAR, three_teams, games, [])

    assert standings.get_record(1).games_played == 1
    assert 99 not in ids(standings.overall)


def test_games_from_other_years_are_ignored(three_teams, opening_games, make_game):
    games = opening_games + [make_game(1, 3, 1, 100, 0, year=2024)]

    standings = compute_standings(YEAR, three_teams, games, [])

    assert standings.get_record(3).games_played == 1
    assert standings.get_record(1).losses == 0


def test_empty_season(three_teams):
    standings = compute_standings(YEAR, three_teams, [], [], StructureMode.DIVISIONS)

    assert standings.overall == []
    assert standings.groups == []


# ============================================================================
# Streaks and current week
# ============================================================================


class TestStreak:
    def test_no_games(self):
        assert compute_streak(1, []) == "-"

    def test_trailing_wins(self, make_game):
        games = [
            make_game(1, 1, 2, 10, 20),
            make_game(2, 1, 2, 30, 20),
            make_game(3, 2, 1, 10, 20),
            make_game(4, 1, 2, 30, 20),
        ]
        assert compute_streak(1, games) == "W3"
        assert compute_streak(2, games) == "L3"

    def test_tie_breaks_streak(self, make_game):
        games = [
            make_game(1, 1, 2, 30, 20),
            make_game(2, 1, 2, 20, 20),
            make_game(3, 1, 2, 30, 20),
            make_game(4, 1, 2, 30, 25),
        ]
        assert compute_streak(1, games) == "W2"

    def test_latest_tie_is_undetermined(self, make_game):
        games = [
            make_game(1, 1, 2, 30, 20),
            make_game(2, 1, 2, 20, 20),
        ]
        assert compute_streak(1, games) == "-"

    def test_uses_week_order_not_row_order(self, make_game):
        games = [
            make_game(3, 1, 2, 10, 20),
            make_game(1, 1, 2, 30, 20),
            make_game(2, 1, 2, 30, 20),
        ]
        assert compute_streak(1, games) == "L1"

    def test_ignores_unplayed_games(self, make_game):
        games = [make_game(1, 1, 2, 30, 20), make_game(2, 1, 2)]
        assert compute_streak(1, games) == "W1"


def test_resolve_current_week(make_game):
    games = [
        make_game(1, 1, 2, 30, 20),
        make_game(3, 1, 2, 30, 20),
        make_game(4, 1, 2),
        make_game(9, 1, 2, 30, 20, year=2024),
    ]

    assert resolve_current_week(games, YEAR) == 3
    assert resolve_current_week([], YEAR) == 1


def test_rank_records_is_deterministic_on_full_ties():
    records = [
        TeamRecord(team_id=5, year=YEAR, team_name="E", wins=1, points_for=10),
        TeamRecord(team_id=2, year=YEAR, team_name="B", wins=1, points_for=10),
    ]

    assert ids(rank_records(records)) == [2, 5]
