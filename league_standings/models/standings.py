from typing import Dict, List, Optional

from pydantic import BaseModel, Field, computed_field

from league_standings.utils.misc_utils import format_record, win_percentage

from .enums import StructureMode


class TeamRecord(BaseModel):
    """Derived season record for one team. Never persisted."""

    team_id: int
    year: int
    team_name: str

    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: float = 0.0
    points_against: float = 0.0

    # Division/quad sub-record: regular-season games against same-group teams
    group_id: Optional[int] = None
    group_wins: int = 0
    group_losses: int = 0
    group_ties: int = 0

    streak: str = "-"

    @computed_field  # type: ignore[misc]
    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.ties

    @computed_field  # type: ignore[misc]
    @property
    def point_differential(self) -> float:
        return self.points_for - self.points_against

    @computed_field  # type: ignore[misc]
    @property
    def win_percentage(self) -> float:
        return win_percentage(self.wins, self.losses, self.ties)

    @computed_field  # type: ignore[misc]
    @property
    def group_games(self) -> int:
        return self.group_wins + self.group_losses + self.group_ties

    @computed_field  # type: ignore[misc]
    @property
    def group_win_percentage(self) -> float:
        return win_percentage(self.group_wins, self.group_losses, self.group_ties)

    @property
    def record(self) -> str:
        return format_record(self.wins, self.losses, self.ties)


class GroupStandings(BaseModel):
    """Ranked members of one division or quad."""

    group_id: int
    name: str
    teams: List[TeamRecord] = Field(default_factory=list)

    @property
    def leader(self) -> Optional[TeamRecord]:
        return self.teams[0] if self.teams else None


class Standings(BaseModel):
    """Overall and group-scoped rankings for one season."""

    year: int
    structure_mode: StructureMode = StructureMode.SINGLE_LEAGUE
    overall: List[TeamRecord] = Field(default_factory=list)
    groups: List[GroupStandings] = Field(default_factory=list)

    def _groups_by_name(self, mode: StructureMode) -> Optional[Dict[str, List[TeamRecord]]]:
        if self.structure_mode != mode or not self.groups:
            return None
        return {group.name: group.teams for group in self.groups}

    @property
    def divisions(self) -> Optional[Dict[str, List[TeamRecord]]]:
        return self._groups_by_name(StructureMode.DIVISIONS)

    @property
    def quads(self) -> Optional[Dict[str, List[TeamRecord]]]:
        return self._groups_by_name(StructureMode.QUADS)

    def get_record(self, team_id: int) -> Optional[TeamRecord]:
        for record in self.overall:
            if record.team_id == team_id:
                return record
        return None
