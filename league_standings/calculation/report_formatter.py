"""
Markdown rendering for playoff scenario payloads.

The output is line-oriented and deterministic: the same payload always
renders the same text, section by section.
"""

from typing import List

from league_standings.models.enums import QualificationStatus, StructureMode
from league_standings.models.report import (
    GroupTable,
    ScenarioPayload,
    ScheduleWeek,
    StandingsRow,
)
from league_standings.utils.misc_utils import format_percentage, format_points

STATUS_MARKERS = {
    QualificationStatus.LEADER: "🏆 BYE",
    QualificationStatus.QUALIFYING: "✅ In",
    QualificationStatus.OUTSIDE: "⚪ Out",
}

EMPTY_STANDINGS = "_No completed games yet._"
EMPTY_HEAD_TO_HEAD = "_No teams have played each other yet._"
EMPTY_SCHEDULE = "_No remaining games scheduled._"


def _label(payload: ScenarioPayload) -> str:
    return payload.structure_mode.group_label


def _header(payload: ScenarioPayload) -> List[str]:
    label = _label(payload)
    group_count = len(payload.groups)
    lines = [
        "# Fantasy Football League Playoff Scenario Analysis",
        "",
        f"**Season:** {payload.year}",
        f"**Current Week:** {payload.week}",
        f"**Total Teams:** {payload.total_teams}",
        "**Playoff Structure:**",
    ]
    if payload.regular_season_weeks:
        lines.append(f"- **Regular Season:** Weeks 1-{payload.regular_season_weeks}")

    if group_count:
        play_in_teams = max(payload.total_teams - group_count, 0)
        if payload.qualifying_round_week:
            lines.append(
                f"- **Week {payload.qualifying_round_week} (Play-in Round):** "
                f"{group_count} {label} winners get BYEs. "
                f"Remaining {play_in_teams} teams play in Week {payload.qualifying_round_week}."
            )
        lines.append(
            f"- **Playoff Field:** {payload.playoff_slots} teams "
            f"({group_count} {label} winners + {payload.open_slots} highest total "
            f"season points from the remaining teams)"
        )
    else:
        lines.append(
            f"- **Playoff Field:** {payload.playoff_slots} teams by total season points"
        )
    lines.append("")

    for warning in payload.warnings:
        lines.append(f"> **Note:** {warning}")
    if payload.warnings:
        lines.append("")
    return lines


def _overall_table(rows: List[StandingsRow]) -> List[str]:
    lines = ["## Current Standings", ""]
    if not rows:
        return lines + [EMPTY_STANDINGS, ""]

    lines.append(
        "| Rank | Team | W | L | T | Win % | Points For | Points Against | Point Diff | Streak | Status |"
    )
    lines.append(
        "|------|------|---|---|---|-------|------------|----------------|------------|--------|--------|"
    )
    for row in rows:
        r = row.record
        lines.append(
            f"| {row.rank} | {r.team_name} | {r.wins} | {r.losses} | {r.ties} | "
            f"{format_percentage(r.win_percentage)} | {format_points(r.points_for)} | "
            f"{format_points(r.points_against)} | {format_points(r.point_differential)} | "
            f"{r.streak} | {STATUS_MARKERS[row.status]} |"
        )
    lines.append("")
    return lines


def _group_tables(payload: ScenarioPayload) -> List[str]:
    if payload.structure_mode == StructureMode.SINGLE_LEAGUE:
        return []

    label = _label(payload)
    short = label[0]
    lines = [f"## {label} Standings", ""]
    if not payload.groups:
        return lines + [EMPTY_STANDINGS, ""]

    for table in payload.groups:
        lines.extend(_group_table(table, short))
    return lines


def _group_table(table: GroupTable, short: str) -> List[str]:
    lines = [
        f"### {table.name}",
        f"| Rank | Team | W | L | T | Win % | Points For | {short} W | {short} L | {short} T |",
        "|------|------|---|---|---|-------|------------|-----|-----|-----|",
    ]
    for row in table.rows:
        r = row.record
        marker = " 🏆" if row.rank == 1 else ""
        lines.append(
            f"| {row.rank}{marker} | {r.team_name} | {r.wins} | {r.losses} | {r.ties} | "
            f"{format_percentage(r.win_percentage)} | {format_points(r.points_for)} | "
            f"{r.group_wins} | {r.group_losses} | {r.group_ties} |"
        )
    lines.append("")
    return lines


def _head_to_head(payload: ScenarioPayload) -> List[str]:
    lines = ["## Head-to-Head Records", ""]
    if not payload.head_to_head:
        return lines + [EMPTY_HEAD_TO_HEAD, ""]

    lines.extend(["*Only showing teams that have played each other*", ""])
    for h2h in payload.head_to_head:
        lines.append(f"### {h2h.team1_name} vs {h2h.team2_name}")
        lines.append(
            f"- **Record:** {h2h.team1_name} {h2h.team1_wins}-{h2h.team2_wins}-{h2h.ties} "
            f"{h2h.team2_name}"
        )
        lines.append("- **Games:**")
        for game in h2h.games:
            lines.append(
                f"  - Week {game.week}: {h2h.team1_name} {format_points(game.team1_score)}, "
                f"{h2h.team2_name} {format_points(game.team2_score)}"
            )
        lines.append("")
    return lines


def _schedule_week(week: ScheduleWeek, payload: ScenarioPayload) -> List[str]:
    title = f"### Week {week.week}"
    lines = []
    if week.is_qualifying_round:
        lines.append(f"{title} (Play-in Round)")
        if payload.groups:
            lines.append(
                f"*{len(payload.groups)} {_label(payload)} leaders have BYEs this week*"
            )
        lines.append("")
    else:
        lines.append(title)

    for game in week.games:
        score = ""
        if game.home_score is not None and game.away_score is not None:
            score = f" ({format_points(game.home_score)} - {format_points(game.away_score)})"
        bye = " 🏆 BYE" if week.is_qualifying_round and game.involves_leader else ""
        lines.append(f"- {game.home_team_name} vs {game.away_team_name}{score}{bye}")
    lines.append("")
    return lines


def _remaining_schedule(payload: ScenarioPayload) -> List[str]:
    weeks = [w for w in (payload.regular_season_weeks, payload.qualifying_round_week) if w]
    last = max(weeks) if weeks else None
    span = f"Weeks {payload.week}-{last}" if last else f"From Week {payload.week}"

    lines = [f"## Remaining Schedule ({span})", ""]
    if not payload.remaining_schedule:
        return lines + [EMPTY_SCHEDULE, ""]
    for week in payload.remaining_schedule:
        lines.extend(_schedule_week(week, payload))
    return lines


def _playoff_race(payload: ScenarioPayload) -> List[str]:
    label = _label(payload)
    lines = ["## Playoff Race", ""]

    if payload.groups:
        lines.append(f"### {label} Leaders (automatic bids)")
        if not payload.leaders:
            lines.append(EMPTY_STANDINGS)
        for entry in payload.leaders:
            lines.append(
                f"{entry.rank}. {entry.team_name} ({entry.record}, "
                f"{format_points(entry.points_for)} total PF)"
            )
        lines.append("")

    lines.append(f"### Open Slots (top {payload.open_slots} by total season points)")
    if not payload.qualification:
        lines.append(EMPTY_STANDINGS)
    for entry in payload.qualification:
        mark = "✅" if entry.status == QualificationStatus.QUALIFYING else "❌"
        lines.append(
            f"{entry.rank}. {mark} {entry.team_name} ({entry.record}, "
            f"{format_points(entry.points_for)} total PF)"
        )
    lines.extend(
        [
            "",
            f"*✅ = Currently in the top {payload.open_slots} | ❌ = Currently outside*",
            "",
        ]
    )
    return lines


def _rules(payload: ScenarioPayload) -> List[str]:
    label = _label(payload)
    lines = ["## Playoff Qualification Rules", ""]
    if payload.groups:
        lines.extend(
            [
                f"### {label} Winners",
                f"- Top team in each {label.lower()} receives an automatic playoff bid",
            ]
        )
        if payload.qualifying_round_week:
            lines.append(f"- {label} winners have a BYE in Week {payload.qualifying_round_week}")
        lines.append("")
    lines.extend(
        [
            "### Remaining Slots",
            f"- {payload.open_slots} slots go to the highest total season points scorers "
            "among the remaining teams",
            "",
            "### Tiebreakers",
            "1. Overall record (win %)",
            f"2. {label} record (win %)",
            "3. Total points scored",
            "",
            "*Head-to-head records are listed for reference and are not an automatic tiebreaker.*",
        ]
    )
    return lines


def render_report(payload: ScenarioPayload) -> str:
    """Renders a scenario payload as a Markdown report."""
    lines: List[str] = []
    lines.extend(_header(payload))
    lines.extend(_overall_table(payload.standings))
    lines.extend(_group_tables(payload))
    lines.extend(_head_to_head(payload))
    lines.extend(_remaining_schedule(payload))
    lines.extend(_playoff_race(payload))
    lines.extend(_rules(payload))
    return "\n".join(lines) + "\n"
