"""
Season standings calculation.

Folds a season's completed games into one TeamRecord per participating team,
ranks them overall and within each division/quad, and computes streaks.
Everything here is a pure function of its arguments: no I/O, no caching, and
inputs are never mutated.
"""

from collections import Counter, defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from league_standings.models.enums import GameResult, StructureMode
from league_standings.models.game import Game
from league_standings.models.group import Group, GroupAssignment
from league_standings.models.standings import GroupStandings, Standings, TeamRecord
from league_standings.models.team import Team


def ranking_key(record: TeamRecord) -> Tuple[float, float, float, int]:
    """Sort key for standings: win %, then group win %, then points scored.

    Head-to-head is deliberately not a sort key (schedules are asymmetric);
    team_id only settles otherwise identical rows so ordering is stable.
    """
    return (
        -record.win_percentage,
        -record.group_win_percentage,
        -record.points_for,
        record.team_id,
    )


def rank_records(records: Iterable[TeamRecord]) -> List[TeamRecord]:
    return sorted(records, key=ranking_key)


def compute_streak(team_id: int, games: Sequence[Game]) -> str:
    """
    Computes the current streak for a team, e.g. "W3" or "L1".

    Args:
        team_id: The team whose streak is computed.
        games: Games to consider; incomplete games and games the team did not
               play are ignored.

    Returns:
        The result letter and length of the trailing run of identical results,
        or "-" when the team has no completed games or its latest game was a
        tie (a tie ends any streak).
    """
    played = sorted(
        (g for g in games if g.is_completed and g.involves(team_id)),
        key=lambda g: g.week,
    )
    if not played:
        return "-"

    results = [g.result_for(team_id) for g in played]
    current = results[-1]
    if current == GameResult.TIE:
        return "-"

    length = 0
    for result in reversed(results):
        if result != current:
            break
        length += 1
    return f"{current.value}{length}"


def resolve_current_week(games: Iterable[Game], year: int) -> int:
    """Most recent week with a completed game in the season, 1 if none."""
    weeks = [g.week for g in games if g.year == year and g.is_completed]
    return max(weeks) if weeks else 1


def _season_group_lookup(
    year: int,
    group_assignments: Iterable[GroupAssignment],
    known_teams: Dict[int, str],
    structure_mode: StructureMode,
    groups: Optional[Sequence[Group]],
) -> Dict[int, int]:
    """Builds team_id -> group_id for the season, skipping unusable rows."""
    if structure_mode == StructureMode.SINGLE_LEAGUE:
        return {}

    known_groups = {g.group_id for g in groups} if groups else None
    lookup: Dict[int, int] = {}

    for assignment in group_assignments:
        if assignment.year != year or assignment.group_id is None:
            continue
        if assignment.team_id not in known_teams:
            logger.warning(
                f"Group assignment for unknown team {assignment.team_id} in {year}. Skipping."
            )
            continue
        if known_groups is not None and assignment.group_id not in known_groups:
            logger.warning(
                f"Team {assignment.team_id} assigned to unknown "
                f"{structure_mode.group_label.lower()} {assignment.group_id} in {year}. Skipping."
            )
            continue
        previous = lookup.get(assignment.team_id)
        if previous is not None and previous != assignment.group_id:
            logger.warning(
                f"Team {assignment.team_id} has several group assignments in {year} "
                f"({previous}, {assignment.group_id}). Using the last one."
            )
        lookup[assignment.team_id] = assignment.group_id

    return lookup


def _apply_result(record: TeamRecord, result: GameResult, group_game: bool) -> None:
    if result == GameResult.WIN:
        record.wins += 1
        if group_game:
            record.group_wins += 1
    elif result == GameResult.LOSS:
        record.losses += 1
        if group_game:
            record.group_losses += 1
    else:
        record.ties += 1
        if group_game:
            record.group_ties += 1


def _build_group_standings(
    overall: List[TeamRecord],
    structure_mode: StructureMode,
    groups: Optional[Sequence[Group]],
) -> List[GroupStandings]:
    if structure_mode == StructureMode.SINGLE_LEAGUE:
        return []

    names = {g.group_id: g.name for g in groups or []}
    members: Dict[int, List[TeamRecord]] = defaultdict(list)
    for record in overall:
        if record.group_id is not None:
            members[record.group_id].append(record)

    labels = {
        group_id: names.get(group_id, f"{structure_mode.group_label} {group_id}")
        for group_id in sorted(members)
    }
    label_counts = Counter(labels.values())
    for group_id, label in labels.items():
        if label_counts[label] > 1:
            logger.warning(
                f"Several {structure_mode.group_label.lower()}s are named '{label}'. "
                f"Labelling group {group_id} as '{label} ({group_id})'."
            )
            labels[group_id] = f"{label} ({group_id})"

    return [
        GroupStandings(
            group_id=group_id,
            name=labels[group_id],
            # Re-ranked within the group rather than filtered from overall
            teams=rank_records(members[group_id]),
        )
        for group_id in sorted(members)
    ]


def compute_standings(
    year: int,
    teams: Sequence[Team],
    games: Sequence[Game],
    group_assignments: Sequence[GroupAssignment],
    structure_mode: StructureMode = StructureMode.SINGLE_LEAGUE,
    groups: Optional[Sequence[Group]] = None,
) -> Standings:
    """
    Computes overall and division/quad standings for one season.

    Args:
        year: Season year.
        teams: Team registry; games against teams missing here are skipped.
        games: The season's games. Incomplete games are ignored and games from
               other years are filtered out.
        group_assignments: Team-to-group rows; only this year's rows are used.
        structure_mode: Whether the season uses divisions, quads or neither.
        groups: Optional group metadata used to name group tables.

    Returns:
        Standings with the ranked overall list and, for grouped seasons, one
        ranked table per group that has at least one participating team.
    """
    structure_mode = StructureMode(structure_mode)
    team_names = {team.team_id: team.name for team in teams}
    team_groups = _season_group_lookup(
        year, group_assignments, team_names, structure_mode, groups
    )

    records: Dict[int, TeamRecord] = {
        team_id: TeamRecord(
            team_id=team_id,
            year=year,
            team_name=name,
            group_id=team_groups.get(team_id),
        )
        for team_id, name in team_names.items()
    }
    played: Dict[int, List[Game]] = defaultdict(list)
    skipped = 0

    for game in games:
        if game.year != year:
            logger.debug(f"Ignoring game {game.id} from {game.year} while computing {year}.")
            continue
        if not game.is_completed:
            continue
        home, away = game.home_team_id, game.away_team_id
        if home not in records or away not in records:
            logger.warning(
                f"Game {game.id} (week {game.week}) references unknown team "
                f"{home if home not in records else away}. Skipping."
            )
            skipped += 1
            continue
        if home == away:
            logger.warning(f"Game {game.id} (week {game.week}) has the same team on both sides. Skipping.")
            skipped += 1
            continue

        home_group = team_groups.get(home)
        group_game = (
            home_group is not None
            and home_group == team_groups.get(away)
            and not game.is_playoff
        )
        for team_id in (home, away):
            record = records[team_id]
            scored, allowed = game.scores_for(team_id)
            record.points_for += scored
            record.points_against += allowed
            _apply_result(record, game.result_for(team_id), group_game)
            played[team_id].append(game)

    for team_id, record in records.items():
        record.streak = compute_streak(team_id, played.get(team_id, []))

    # Teams without a completed game did not take part in this season
    overall = rank_records(r for r in records.values() if r.games_played > 0)
    group_standings = _build_group_standings(overall, structure_mode, groups)

    logger.debug(
        f"Computed {year} standings: {len(overall)} teams, "
        f"{len(group_standings)} groups, {skipped} games skipped."
    )
    return Standings(
        year=year,
        structure_mode=structure_mode,
        overall=overall,
        groups=group_standings,
    )
