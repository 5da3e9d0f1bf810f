"""
Playoff scenario report builder.

Consumes computed Standings plus the season's games and derives the current
group leaders (bye teams), head-to-head records, the remaining schedule and
the points race for the open playoff slots. The structured payload is then
rendered to Markdown by report_formatter.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from loguru import logger

from league_standings.calculation.errors import LeagueConfigurationError
from league_standings.calculation.report_formatter import render_report
from league_standings.calculation.standings_engine import resolve_current_week
from league_standings.models.enums import GameResult, QualificationStatus, StructureMode
from league_standings.models.game import Game
from league_standings.models.group import Group
from league_standings.models.report import (
    GroupTable,
    HeadToHeadGame,
    HeadToHeadRecord,
    LeagueConfig,
    QualificationEntry,
    ScenarioPayload,
    ScenarioReport,
    ScheduledGame,
    ScheduleWeek,
    StandingsRow,
)
from league_standings.models.standings import Standings, TeamRecord
from league_standings.models.team import Team
from league_standings.utils.misc_utils import canonical_pair


def validate_league_config(
    config: LeagueConfig,
    standings: Standings,
    groups: Optional[Sequence[Group]] = None,
) -> None:
    """
    Checks that the league configuration can produce a meaningful report.

    Raises:
        LeagueConfigurationError: listing every problem found. structure_only
            is set when only the division/quad setup is at fault.
    """
    problems: List[str] = []
    structure_problems: List[str] = []

    if config.playoff_slots <= 0:
        problems.append(f"Playoff slot count must be positive, got {config.playoff_slots}")
    if config.total_teams <= 0:
        problems.append(f"Total team count must be positive, got {config.total_teams}")
    elif config.playoff_slots > config.total_teams:
        problems.append(
            f"Playoff slot count ({config.playoff_slots}) exceeds total teams ({config.total_teams})"
        )

    mode = standings.structure_mode
    # Before any game is completed no group can have a member yet
    if (
        mode != StructureMode.SINGLE_LEAGUE
        and standings.overall
        and not groups
        and not standings.groups
    ):
        structure_problems.append(
            f"Structure mode '{mode.value}' requested but no "
            f"{mode.group_label.lower()}s exist for {standings.year}"
        )
    leader_count = sum(1 for g in standings.groups if g.leader)
    if config.playoff_slots > 0 and leader_count > config.playoff_slots:
        structure_problems.append(
            f"{leader_count} {mode.group_label.lower()} leaders exceed "
            f"{config.playoff_slots} playoff slots"
        )

    if problems or structure_problems:
        raise LeagueConfigurationError(
            problems + structure_problems, structure_only=not problems
        )


def determine_group_leaders(standings: Standings) -> List[TeamRecord]:
    """Top team of every group, in overall-standings order."""
    leader_ids = {g.leader.team_id for g in standings.groups if g.leader}
    return [r for r in standings.overall if r.team_id in leader_ids]


def aggregate_head_to_head(
    games: Iterable[Game], year: int, team_names: Dict[int, str]
) -> List[HeadToHeadRecord]:
    """
    Builds head-to-head records from completed regular-season games.

    Args:
        games: Season games in any order.
        year: Only games from this season are counted.
        team_names: team_id -> display name; unknown ids fall back to "Team {id}".

    Returns:
        One record per pair that has met at least once, ordered by pair ids,
        with the game log in week order.
    """
    meetings: Dict[Tuple[int, int], List[Game]] = defaultdict(list)
    for game in games:
        if game.year != year or game.is_playoff or not game.is_completed:
            continue
        if game.home_team_id == game.away_team_id:
            continue
        meetings[canonical_pair(game.home_team_id, game.away_team_id)].append(game)

    records: List[HeadToHeadRecord] = []
    for (team1_id, team2_id) in sorted(meetings):
        record = HeadToHeadRecord(
            team1_id=team1_id,
            team1_name=team_names.get(team1_id, f"Team {team1_id}"),
            team2_id=team2_id,
            team2_name=team_names.get(team2_id, f"Team {team2_id}"),
        )
        for game in sorted(meetings[(team1_id, team2_id)], key=lambda g: g.week):
            team1_score, team2_score = game.scores_for(team1_id)
            record.games.append(
                HeadToHeadGame(week=game.week, team1_score=team1_score, team2_score=team2_score)
            )
            result = game.result_for(team1_id)
            if result == GameResult.WIN:
                record.team1_wins += 1
            elif result == GameResult.LOSS:
                record.team2_wins += 1
            else:
                record.ties += 1
        records.append(record)

    return records


def remaining_schedule(
    games: Iterable[Game],
    year: int,
    from_week: int,
    team_names: Dict[int, str],
    last_week: Optional[int] = None,
    leader_ids: Optional[Set[int]] = None,
    qualifying_round_week: Optional[int] = None,
) -> List[ScheduleWeek]:
    """
    Groups the non-playoff games from from_week through last_week by week.

    Games keep their source order inside a week. Completed games in that
    range are included with their scores.
    """
    leader_ids = leader_ids or set()
    by_week: Dict[int, List[ScheduledGame]] = defaultdict(list)

    for game in games:
        if game.year != year or game.is_playoff or game.week < from_week:
            continue
        if last_week is not None and game.week > last_week:
            continue
        by_week[game.week].append(
            ScheduledGame(
                game_id=game.id,
                week=game.week,
                home_team_id=game.home_team_id,
                home_team_name=team_names.get(game.home_team_id, f"Team {game.home_team_id}"),
                away_team_id=game.away_team_id,
                away_team_name=team_names.get(game.away_team_id, f"Team {game.away_team_id}"),
                home_score=game.home_score,
                away_score=game.away_score,
                involves_leader=bool(
                    {game.home_team_id, game.away_team_id} & leader_ids
                ),
            )
        )

    return [
        ScheduleWeek(
            week=week,
            is_qualifying_round=week == qualifying_round_week,
            games=by_week[week],
        )
        for week in sorted(by_week)
    ]


def rank_qualification(
    standings: Standings, leader_ids: Set[int], open_slots: int
) -> List[QualificationEntry]:
    """
    Ranks non-leaders by total season points for the open playoff slots.

    Ties on points keep overall-standings order. Purely informational: the
    marks reflect the current data and clinch nothing.
    """
    contenders = sorted(
        (r for r in standings.overall if r.team_id not in leader_ids),
        key=lambda r: -r.points_for,
    )
    return [
        QualificationEntry(
            rank=index + 1,
            team_id=record.team_id,
            team_name=record.team_name,
            record=record.record,
            points_for=record.points_for,
            status=(
                QualificationStatus.QUALIFYING
                if index < open_slots
                else QualificationStatus.OUTSIDE
            ),
        )
        for index, record in enumerate(contenders)
    ]


def _status_for(
    team_id: int, leader_ids: Set[int], qualifying_ids: Set[int]
) -> QualificationStatus:
    if team_id in leader_ids:
        return QualificationStatus.LEADER
    if team_id in qualifying_ids:
        return QualificationStatus.QUALIFYING
    return QualificationStatus.OUTSIDE


def build_scenario_report(
    year: int,
    week: Optional[int],
    standings: Standings,
    games: Sequence[Game],
    groups: Optional[Sequence[Group]],
    league_config: LeagueConfig,
    teams: Optional[Sequence[Team]] = None,
) -> ScenarioReport:
    """
    Builds the playoff scenario payload and its Markdown rendering.

    Args:
        year: Season year.
        week: Current-week cursor; None resolves to the latest week with a
              completed game.
        standings: Output of compute_standings for the same season.
        games: All of the season's games, completed or not.
        groups: Division/quad metadata used for table labels.
        league_config: Playoff slots, team count and round structure.
        teams: Optional team registry for naming teams that have not played.

    Returns:
        ScenarioReport holding the structured payload and the rendered text.

    Raises:
        LeagueConfigurationError: when the configuration is invalid.
    """
    validate_league_config(league_config, standings, groups)

    if standings.year != year:
        logger.warning(f"Standings are for {standings.year} but the report is for {year}.")
    if not week or week < 1:
        week = resolve_current_week(games, year)

    team_names: Dict[int, str] = {t.team_id: t.name for t in teams or []}
    for record in standings.overall:
        team_names.setdefault(record.team_id, record.team_name)

    leaders = determine_group_leaders(standings)
    leader_ids = {r.team_id for r in leaders}
    open_slots = max(league_config.playoff_slots - len(leaders), 0)

    qualification = rank_qualification(standings, leader_ids, open_slots)
    qualifying_ids = {
        e.team_id for e in qualification if e.status == QualificationStatus.QUALIFYING
    }

    group_names = {g.group_id: g.name for g in groups or []}
    group_tables = [
        GroupTable(
            group_id=group.group_id,
            name=group_names.get(group.group_id) or group.name or f"Group {group.group_id}",
            rows=[
                StandingsRow(
                    rank=index + 1,
                    record=record,
                    status=_status_for(record.team_id, leader_ids, qualifying_ids),
                )
                for index, record in enumerate(group.teams)
            ],
        )
        for group in standings.groups
    ]

    payload = ScenarioPayload(
        year=year,
        week=week,
        structure_mode=standings.structure_mode,
        playoff_slots=league_config.playoff_slots,
        total_teams=league_config.total_teams,
        regular_season_weeks=league_config.regular_season_weeks,
        qualifying_round_week=league_config.qualifying_round_week,
        open_slots=open_slots,
        standings=[
            StandingsRow(
                rank=index + 1,
                record=record,
                status=_status_for(record.team_id, leader_ids, qualifying_ids),
            )
            for index, record in enumerate(standings.overall)
        ],
        groups=group_tables,
        leaders=[
            QualificationEntry(
                rank=index + 1,
                team_id=record.team_id,
                team_name=record.team_name,
                record=record.record,
                points_for=record.points_for,
                status=QualificationStatus.LEADER,
            )
            for index, record in enumerate(leaders)
        ],
        qualification=qualification,
        head_to_head=aggregate_head_to_head(games, year, team_names),
        remaining_schedule=remaining_schedule(
            games,
            year,
            from_week=week,
            team_names=team_names,
            last_week=league_config.last_scheduled_week,
            leader_ids=leader_ids,
            qualifying_round_week=league_config.qualifying_round_week,
        ),
    )

    logger.success(
        f"Built {year} week {week} scenario report: {len(payload.standings)} teams, "
        f"{len(payload.head_to_head)} head-to-head pairs, "
        f"{len(payload.remaining_schedule)} remaining weeks."
    )
    return ScenarioReport(payload=payload, text=render_report(payload))
