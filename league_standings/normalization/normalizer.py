from typing import Any, Dict, Iterable, List, Optional, Tuple

from loguru import logger
from pydantic import ValidationError

from league_standings.models.enums import StructureMode
from league_standings.models.game import Game
from league_standings.models.group import Group, GroupAssignment
from league_standings.models.season import LeagueSeason
from league_standings.models.team import Team

Row = Dict[str, Any]


class RowNormalizer:
    """Normalizes loosely typed Supabase rows into the league models.

    The league's tables have been through a couple of schema revisions, so
    every field is looked up under each column name it has had. Rows that
    still fail validation are logged and dropped; normalization never raises.
    """

    def __init__(self):
        # Key: model field, Value: column names to try, in order
        self.team_aliases: Dict[str, Tuple[str, ...]] = {
            "team_id": ("team_id", "id"),
            "name": ("team_name", "name"),
            "short_name": ("short_name", "abbreviation"),
        }
        self.game_aliases: Dict[str, Tuple[str, ...]] = {
            "id": ("id", "game_id"),
            "year": ("year", "season_year"),
            "week": ("week",),
            "home_team_id": ("home_team_id",),
            "away_team_id": ("away_team_id",),
            "home_score": ("home_score",),
            "away_score": ("away_score",),
            "is_playoff": ("playoffs", "is_playoff"),
        }
        self.group_aliases: Dict[StructureMode, Dict[str, Tuple[str, ...]]] = {
            StructureMode.DIVISIONS: {
                "group_id": ("division_id", "id"),
                "name": ("division_name", "name"),
                "year": ("year", "season_year"),
            },
            StructureMode.QUADS: {
                "group_id": ("quad_id", "id"),
                "name": ("quad_name", "name"),
                "year": ("year", "season_year"),
            },
        }
        self.assignment_columns: Dict[StructureMode, str] = {
            StructureMode.DIVISIONS: "division_id",
            StructureMode.QUADS: "quad_id",
        }
        logger.debug("RowNormalizer initialized.")

    @staticmethod
    def _pick(row: Row, aliases: Dict[str, Tuple[str, ...]]) -> Row:
        picked: Row = {}
        for field_name, columns in aliases.items():
            for column in columns:
                if row.get(column) is not None:
                    picked[field_name] = row[column]
                    break
        return picked

    def _validate(self, model, data: Row, row: Row, kind: str):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.warning(
                f"Skipping invalid {kind} row {row}: {e.error_count()} validation error(s)"
            )
            logger.debug(f"Validation details: {e}")
            return None

    def _normalize_many(self, rows: Optional[Iterable[Row]], normalize_one) -> List[Any]:
        normalized = []
        for row in rows or []:
            if not isinstance(row, dict):
                logger.warning(f"Skipping non-dictionary row: {type(row)}")
                continue
            item = normalize_one(row)
            if item is not None:
                normalized.append(item)
        return normalized

    # --- Teams ---
    def normalize_team(self, row: Row) -> Optional[Team]:
        data = self._pick(row, self.team_aliases)
        if "name" not in data and "team_id" in data:
            data["name"] = f"Team {data['team_id']}"
        return self._validate(Team, data, row, "team")

    def normalize_teams(self, rows: Optional[Iterable[Row]]) -> List[Team]:
        return self._normalize_many(rows, self.normalize_team)

    # --- Games ---
    def normalize_game(self, row: Row) -> Optional[Game]:
        data = self._pick(row, self.game_aliases)
        return self._validate(Game, data, row, "game")

    def normalize_games(self, rows: Optional[Iterable[Row]]) -> List[Game]:
        return self._normalize_many(rows, self.normalize_game)

    # --- Divisions / quads ---
    def normalize_group(self, row: Row, mode: StructureMode) -> Optional[Group]:
        aliases = self.group_aliases.get(mode)
        if not aliases:
            return None
        data = self._pick(row, aliases)
        if "name" not in data and "group_id" in data:
            data["name"] = f"{mode.group_label} {data['group_id']}"
        return self._validate(Group, data, row, mode.group_label.lower())

    def normalize_groups(self, rows: Optional[Iterable[Row]], mode: StructureMode) -> List[Group]:
        return self._normalize_many(rows, lambda row: self.normalize_group(row, mode))

    def normalize_assignment(
        self, row: Row, mode: StructureMode
    ) -> Optional[GroupAssignment]:
        """Reads a team_seasons row, keeping the group column for the mode."""
        column = self.assignment_columns.get(mode)
        data = {
            "team_id": row.get("team_id"),
            "year": row.get("year", row.get("season_year")),
            "group_id": row.get(column) if column else None,
        }
        return self._validate(GroupAssignment, data, row, "team season")

    def normalize_assignments(
        self, rows: Optional[Iterable[Row]], mode: StructureMode
    ) -> List[GroupAssignment]:
        return self._normalize_many(rows, lambda row: self.normalize_assignment(row, mode))

    # --- League seasons ---
    def parse_structure_mode(self, value: Any) -> Optional[StructureMode]:
        if value is None:
            return None
        try:
            return StructureMode(str(value).strip().lower())
        except ValueError:
            logger.warning(f"Unknown league structure type '{value}'. Ignoring.")
            return None

    def normalize_league_season(self, row: Optional[Row]) -> Optional[LeagueSeason]:
        if not row:
            return None
        data = {
            "year": row.get("year", row.get("season_year")),
            "structure_type": self.parse_structure_mode(row.get("structure_type")),
            "playoff_teams": row.get("playoff_teams"),
            "team_count": row.get("team_count"),
        }
        return self._validate(LeagueSeason, data, row, "league season")
