# league_standings/utils/misc_utils.py
from typing import Tuple


def win_percentage(wins: int, losses: int, ties: int) -> float:
    """Ties count as half a win; 0.0 when no games have been played."""
    total = wins + losses + ties
    if total == 0:
        return 0.0
    return (wins + 0.5 * ties) / total


def canonical_pair(team_a: int, team_b: int) -> Tuple[int, int]:
    """Orders an unordered pair of team ids, lower id first."""
    return (team_a, team_b) if team_a <= team_b else (team_b, team_a)


def format_record(wins: int, losses: int, ties: int) -> str:
    return f"{wins}-{losses}-{ties}"


def format_points(value: float) -> str:
    return f"{value:.1f}"


def format_percentage(value: float) -> str:
    """Formats a 0-1 fraction as a percentage with one decimal, e.g. 62.5%."""
    return f"{value * 100:.1f}%"
