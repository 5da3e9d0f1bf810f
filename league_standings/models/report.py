from typing import List, Optional

from pydantic import BaseModel, Field

from .enums import QualificationStatus, StructureMode
from .standings import TeamRecord


class LeagueConfig(BaseModel):
    """Season-level league configuration supplied by the caller.

    The seeding rule is data, not code: every group leader gets a bye through
    the qualifying round, and the remaining playoff slots go to the
    non-leaders with the most season points.
    """

    playoff_slots: int
    total_teams: int
    regular_season_weeks: Optional[int] = None  # Last regular-season week, inclusive
    qualifying_round_week: Optional[int] = None  # Play-in week, if the league has one

    @property
    def last_scheduled_week(self) -> Optional[int]:
        weeks = [w for w in (self.regular_season_weeks, self.qualifying_round_week) if w]
        return max(weeks) if weeks else None


class HeadToHeadGame(BaseModel):
    week: int
    team1_score: float
    team2_score: float


class HeadToHeadRecord(BaseModel):
    """Regular-season meetings between two teams, lower team id first."""

    team1_id: int
    team1_name: str
    team2_id: int
    team2_name: str
    team1_wins: int = 0
    team2_wins: int = 0
    ties: int = 0
    games: List[HeadToHeadGame] = Field(default_factory=list)


class ScheduledGame(BaseModel):
    game_id: Optional[int] = None
    week: int
    home_team_id: int
    home_team_name: str
    away_team_id: int
    away_team_name: str
    home_score: Optional[float] = None
    away_score: Optional[float] = None
    involves_leader: bool = False


class ScheduleWeek(BaseModel):
    week: int
    is_qualifying_round: bool = False
    games: List[ScheduledGame] = Field(default_factory=list)


class StandingsRow(BaseModel):
    rank: int
    record: TeamRecord
    status: QualificationStatus


class GroupTable(BaseModel):
    group_id: int
    name: str
    rows: List[StandingsRow] = Field(default_factory=list)


class QualificationEntry(BaseModel):
    rank: int
    team_id: int
    team_name: str
    record: str
    points_for: float
    status: QualificationStatus


class ScenarioPayload(BaseModel):
    """Structured playoff-scenario data; the text report is rendered from it."""

    year: int
    week: int
    structure_mode: StructureMode
    playoff_slots: int
    total_teams: int
    regular_season_weeks: Optional[int] = None
    qualifying_round_week: Optional[int] = None
    open_slots: int = 0
    standings: List[StandingsRow] = Field(default_factory=list)
    groups: List[GroupTable] = Field(default_factory=list)
    leaders: List[QualificationEntry] = Field(default_factory=list)
    qualification: List[QualificationEntry] = Field(default_factory=list)
    head_to_head: List[HeadToHeadRecord] = Field(default_factory=list)
    remaining_schedule: List[ScheduleWeek] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class ScenarioReport(BaseModel):
    payload: ScenarioPayload
    text: str
