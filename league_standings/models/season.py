from typing import List, Optional

from pydantic import BaseModel, Field

from .enums import StructureMode
from .game import Game
from .group import Group, GroupAssignment
from .team import Team


class LeagueSeason(BaseModel):
    """A league_seasons row: how one season is structured."""

    year: int
    structure_type: Optional[StructureMode] = None
    playoff_teams: Optional[int] = None
    team_count: Optional[int] = None


class SeasonSnapshot(BaseModel):
    """Everything fetched for one season before any computation runs."""

    year: int
    structure_mode: StructureMode = StructureMode.SINGLE_LEAGUE
    teams: List[Team] = Field(default_factory=list)
    games: List[Game] = Field(default_factory=list)
    group_assignments: List[GroupAssignment] = Field(default_factory=list)
    groups: List[Group] = Field(default_factory=list)
    league_season: Optional[LeagueSeason] = None
