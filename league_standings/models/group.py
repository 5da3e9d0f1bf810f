from typing import Optional

from pydantic import BaseModel, ConfigDict


class Group(BaseModel):
    """A division or quad for one season."""

    model_config = ConfigDict(frozen=True)

    group_id: int
    name: str
    year: Optional[int] = None


class GroupAssignment(BaseModel):
    """Season-scoped membership of a team in a division or quad.

    group_id is None when the team is ungrouped for that season.
    """

    model_config = ConfigDict(frozen=True)

    team_id: int
    year: int
    group_id: Optional[int] = None
