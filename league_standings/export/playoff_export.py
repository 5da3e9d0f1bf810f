"""
Playoff scenario export: fetch a season, compute standings, build the report.

This is the only place that wires the data-fetch collaborator to the pure
standings and scenario code.
"""

from pathlib import Path
from typing import Optional, Tuple

from loguru import logger

from league_standings.calculation.errors import LeagueConfigurationError
from league_standings.calculation.report_formatter import render_report
from league_standings.calculation.scenario_reporter import build_scenario_report
from league_standings.calculation.standings_engine import compute_standings
from league_standings.config.settings import settings
from league_standings.models.enums import StructureMode
from league_standings.models.report import LeagueConfig, ScenarioReport
from league_standings.models.season import SeasonSnapshot
from league_standings.models.standings import Standings
from league_standings.storage.supabase_client import SupabaseLeagueRepository


def build_league_config(snapshot: SeasonSnapshot, standings: Standings) -> LeagueConfig:
    """League configuration from the season row, falling back to settings."""
    league_season = snapshot.league_season

    playoff_slots = settings.default_playoff_teams
    if league_season and league_season.playoff_teams is not None:
        playoff_slots = league_season.playoff_teams

    if league_season and league_season.team_count is not None:
        total_teams = league_season.team_count
    else:
        participants = {a.team_id for a in snapshot.group_assignments}
        total_teams = len(standings.overall) or len(participants) or len(snapshot.teams)

    return LeagueConfig(
        playoff_slots=playoff_slots,
        total_teams=total_teams,
        regular_season_weeks=settings.regular_season_weeks,
        qualifying_round_week=settings.qualifying_round_week,
    )


async def export_playoff_scenarios(
    repository: SupabaseLeagueRepository,
    year: int,
    week: Optional[int] = None,
    allow_degraded: bool = True,
) -> ScenarioReport:
    """
    Builds the playoff scenario report for a season.

    Args:
        repository: Data-fetch collaborator for the season's rows.
        year: Season year.
        week: Current-week cursor; None uses the latest week with a completed game.
        allow_degraded: When the only configuration problems concern the
            division/quad structure, fall back to a single-league report and
            list the problems in payload.warnings instead of raising.

    Raises:
        LeagueConfigurationError: for configuration problems that cannot be
            degraded (or any problem when allow_degraded is False).
        DataFetchError: when the season cannot be fetched.
    """
    snapshot = await repository.fetch_season_snapshot(year)

    standings = compute_standings(
        year,
        snapshot.teams,
        snapshot.games,
        snapshot.group_assignments,
        snapshot.structure_mode,
        snapshot.groups,
    )
    league_config = build_league_config(snapshot, standings)

    try:
        return build_scenario_report(
            year,
            week,
            standings,
            snapshot.games,
            snapshot.groups,
            league_config,
            teams=snapshot.teams,
        )
    except LeagueConfigurationError as e:
        if not (allow_degraded and e.structure_only):
            logger.error(f"Invalid league configuration for {year}: {e}")
            raise
        problems = list(e.problems)
        logger.warning(
            f"League structure unusable for {year} ({e}). Falling back to a single-league report."
        )

    standings = compute_standings(
        year,
        snapshot.teams,
        snapshot.games,
        snapshot.group_assignments,
        StructureMode.SINGLE_LEAGUE,
    )
    report = build_scenario_report(
        year,
        week,
        standings,
        snapshot.games,
        None,
        league_config,
        teams=snapshot.teams,
    )
    payload = report.payload.model_copy(update={"warnings": problems})
    return ScenarioReport(payload=payload, text=render_report(payload))


def write_report(report: ScenarioReport, output_dir: str = ".") -> Tuple[Path, Path]:
    """Writes the Markdown and JSON renderings; returns both paths."""
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    stem = f"playoff_scenarios_{report.payload.year}_week{report.payload.week}"

    markdown_path = directory / f"{stem}.md"
    json_path = directory / f"{stem}.json"
    markdown_path.write_text(report.text, encoding="utf-8")
    json_path.write_text(report.payload.model_dump_json(indent=2), encoding="utf-8")

    logger.success(f"Saved scenario report to {markdown_path} and {json_path}")
    return markdown_path, json_path
