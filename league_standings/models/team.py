# league_standings/models/team.py
from typing import Optional
from pydantic import BaseModel, ConfigDict


class Team(BaseModel):
    """A franchise in the league registry; ids are stable across seasons."""

    model_config = ConfigDict(frozen=True)

    team_id: int
    name: str
    short_name: Optional[str] = None
