from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .enums import GameResult


class Game(BaseModel):
    """A scheduled or completed matchup for one (year, week).

    Scores are None until the game has been played; fantasy scores are
    fractional so they are kept as floats.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    year: int
    week: int = Field(..., ge=0)
    home_team_id: int
    away_team_id: int
    home_score: Optional[float] = None
    away_score: Optional[float] = None
    is_playoff: bool = False

    @property
    def is_completed(self) -> bool:
        return self.home_score is not None and self.away_score is not None

    def involves(self, team_id: int) -> bool:
        return team_id in (self.home_team_id, self.away_team_id)

    def scores_for(self, team_id: int) -> Tuple[float, float]:
        """Returns (points scored, points allowed) from the given team's side."""
        if not self.is_completed:
            raise ValueError(f"Game {self.id} has not been completed")
        if team_id == self.home_team_id:
            return self.home_score, self.away_score
        if team_id == self.away_team_id:
            return self.away_score, self.home_score
        raise ValueError(f"Team {team_id} did not play in game {self.id}")

    def result_for(self, team_id: int) -> GameResult:
        scored, allowed = self.scores_for(team_id)
        if scored > allowed:
            return GameResult.WIN
        if scored < allowed:
            return GameResult.LOSS
        return GameResult.TIE
