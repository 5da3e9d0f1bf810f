import itertools

import pytest

from league_standings.models.game import Game
from league_standings.models.group import Group, GroupAssignment
from league_standings.models.team import Team

YEAR = 2025


@pytest.fixture
def make_game():
    """Factory for games with auto-incrementing ids in creation order."""
    ids = itertools.count(1)

    def _make(
        week,
        home,
        away,
        home_score=None,
        away_score=None,
        year=YEAR,
        is_playoff=False,
        game_id=None,
    ):
        return Game(
            id=game_id if game_id is not None else next(ids),
            year=year,
            week=week,
            home_team_id=home,
            away_team_id=away,
            home_score=home_score,
            away_score=away_score,
            is_playoff=is_playoff,
        )

    return _make


@pytest.fixture
def three_teams():
    return [
        Team(team_id=1, name="Alpha", short_name="A"),
        Team(team_id=2, name="Bravo", short_name="B"),
        Team(team_id=3, name="Charlie", short_name="C"),
    ]


@pytest.fixture
def opening_games(make_game):
    """Week 1: Alpha 24 - Bravo 17. Week 2: Bravo 10 - Charlie 10."""
    return [
        make_game(1, 1, 2, 24, 17),
        make_game(2, 2, 3, 10, 10),
    ]


@pytest.fixture
def four_teams():
    return [
        Team(team_id=1, name="Longshanks"),
        Team(team_id=2, name="Odouls"),
        Team(team_id=3, name="Lanniesters"),
        Team(team_id=4, name="Mighty Boom"),
    ]


@pytest.fixture
def divisions():
    return [
        Group(group_id=10, name="North", year=YEAR),
        Group(group_id=20, name="South", year=YEAR),
    ]


@pytest.fixture
def division_assignments():
    return [
        GroupAssignment(team_id=1, year=YEAR, group_id=10),
        GroupAssignment(team_id=2, year=YEAR, group_id=10),
        GroupAssignment(team_id=3, year=YEAR, group_id=20),
        GroupAssignment(team_id=4, year=YEAR, group_id=20),
    ]


@pytest.fixture
def division_games(make_game):
    """
    Records after week 2:
        1: 1-1 (div 1-0), PF 185
        2: 1-1 (div 0-1), PF 210
        3: 2-0 (div 1-0), PF 175
        4: 0-2 (div 0-1), PF 130
    """
    return [
        make_game(1, 1, 2, 100, 90),
        make_game(1, 3, 4, 80, 70),
        make_game(2, 1, 3, 85, 95),
        make_game(2, 2, 4, 120, 60),
    ]
