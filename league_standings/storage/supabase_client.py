# league_standings/storage/supabase_client.py
import asyncio
from typing import Any, Callable, Dict, List, Optional

import httpx
from loguru import logger
from postgrest import APIResponse
from postgrest.exceptions import APIError
from supabase import AsyncClient, create_async_client
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from league_standings.calculation.errors import DataFetchError
from league_standings.config.settings import settings
from league_standings.models.enums import StructureMode
from league_standings.models.game import Game
from league_standings.models.group import Group, GroupAssignment
from league_standings.models.season import LeagueSeason, SeasonSnapshot
from league_standings.models.team import Team
from league_standings.normalization.normalizer import RowNormalizer

GROUP_TABLES: Dict[StructureMode, str] = {
    StructureMode.DIVISIONS: "divisions",
    StructureMode.QUADS: "quads",
}


async def initialize_supabase(
    url: Optional[str] = None, key: Optional[str] = None
) -> AsyncClient:
    """Creates an async Supabase client. The caller owns and passes it on."""
    url = url or settings.supabase_url
    key = key or settings.supabase_api_key

    if not url or not key:
        logger.critical("Supabase URL or Key not configured in settings.")
        raise DataFetchError("Supabase configuration missing.")

    logger.debug(f"Attempting to initialize Async Supabase client with URL: {url}")
    logger.debug(f"Using Supabase Key (snippet): {key[:5]}...{key[-5:]}")

    try:
        client: AsyncClient = await create_async_client(url, key)
    except Exception as e:
        logger.exception(f"Failed to initialize Async Supabase client: {e}")
        raise DataFetchError("Failed to initialize Supabase client.") from e

    logger.success("Async Supabase client initialized successfully.")
    return client


class SupabaseLeagueRepository:
    """Fetches one season's league rows from Supabase and normalizes them.

    The client is injected so tests (and other callers) can supply their own.
    """

    def __init__(
        self,
        client: AsyncClient,
        normalizer: Optional[RowNormalizer] = None,
        retry_attempts: Optional[int] = None,
        retry_wait: float = 1.0,
    ):
        self.client = client
        self.normalizer = normalizer or RowNormalizer()
        self.retry_attempts = retry_attempts or settings.fetch_retry_attempts
        self.retry_wait = retry_wait

    async def _select(
        self,
        table: str,
        build: Callable[[Any], Any],
        optional: bool = False,
    ) -> List[Dict[str, Any]]:
        """Runs a select with retries on transport errors.

        Args:
            table: Table name, used for the query and for error reporting.
            build: Receives the table query builder and returns the filtered query.
            optional: When True a PostgREST error (e.g. a table this league
                never created) yields no rows instead of raising.
        """
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.retry_attempts),
                wait=wait_exponential(
                    multiplier=self.retry_wait, min=self.retry_wait, max=10
                ),
                retry=retry_if_exception_type(httpx.RequestError),
                reraise=True,
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.warning(
                            f"Retrying select on {table} (attempt {attempt.retry_state.attempt_number})"
                        )
                    response: APIResponse = await build(self.client.table(table)).execute()
        except APIError as e:
            if optional:
                logger.warning(f"Optional table {table} unavailable: {e.message}")
                return []
            logger.error(f"Supabase API error fetching {table}: {e.message}")
            logger.debug(f"Full APIError details: {e}")
            raise DataFetchError(f"Failed to fetch {table}: {e.message}", table=table) from e
        except httpx.RequestError as e:
            logger.error(f"Max retries exceeded fetching {table}: {e}")
            raise DataFetchError(f"Failed to fetch {table} after retries", table=table) from e

        rows = response.data or []
        logger.debug(f"Fetched {len(rows)} rows from {table}.")
        return rows

    async def fetch_teams(self) -> List[Team]:
        rows = await self._select("teams", lambda q: q.select("*"))
        teams = self.normalizer.normalize_teams(rows)
        return sorted(teams, key=lambda t: t.team_id)

    async def fetch_games(self, year: int) -> List[Game]:
        rows = await self._select(
            "games",
            lambda q: q.select("*").eq("year", year).order("week").order("id"),
        )
        return self.normalizer.normalize_games(rows)

    async def _fetch_team_season_rows(self, year: int) -> List[Dict[str, Any]]:
        return await self._select(
            "team_seasons", lambda q: q.select("*").eq("year", year)
        )

    async def fetch_group_assignments(
        self, year: int, mode: StructureMode
    ) -> List[GroupAssignment]:
        rows = await self._fetch_team_season_rows(year)
        return self.normalizer.normalize_assignments(rows, mode)

    async def _fetch_group_rows(self, mode: StructureMode) -> List[Dict[str, Any]]:
        table = GROUP_TABLES.get(mode)
        if not table:
            return []
        return await self._select(table, lambda q: q.select("*"), optional=True)

    def _groups_for_year(
        self, rows: List[Dict[str, Any]], year: int, mode: StructureMode
    ) -> List[Group]:
        groups = self.normalizer.normalize_groups(rows, mode)
        # Group tables are not always season-scoped; rows without a year apply to all
        return sorted(
            (g for g in groups if g.year is None or g.year == year),
            key=lambda g: g.group_id,
        )

    async def fetch_groups(self, year: int, mode: StructureMode) -> List[Group]:
        rows = await self._fetch_group_rows(mode)
        return self._groups_for_year(rows, year, mode)

    async def fetch_league_season(self, year: int) -> Optional[LeagueSeason]:
        rows = await self._select(
            "league_seasons", lambda q: q.select("*").eq("year", year).limit(1)
        )
        if not rows:
            logger.info(f"No league_seasons row for {year}; using configured defaults.")
            return None
        return self.normalizer.normalize_league_season(rows[0])

    async def fetch_season_snapshot(self, year: int) -> SeasonSnapshot:
        """
        Fetches every row needed to compute standings and scenarios for a season.

        The structure mode comes from league_seasons.structure_type; when that
        is missing it is inferred from which group table has rows for the
        season (quads first, then divisions).
        """
        logger.info(f"Fetching season snapshot for {year} from Supabase...")
        (
            teams,
            games,
            team_season_rows,
            league_season,
            division_rows,
            quad_rows,
        ) = await asyncio.gather(
            self.fetch_teams(),
            self.fetch_games(year),
            self._fetch_team_season_rows(year),
            self.fetch_league_season(year),
            self._fetch_group_rows(StructureMode.DIVISIONS),
            self._fetch_group_rows(StructureMode.QUADS),
        )

        divisions = self._groups_for_year(division_rows, year, StructureMode.DIVISIONS)
        quads = self._groups_for_year(quad_rows, year, StructureMode.QUADS)

        mode = league_season.structure_type if league_season else None
        if mode is None:
            if quads:
                mode = StructureMode.QUADS
            elif divisions:
                mode = StructureMode.DIVISIONS
            else:
                mode = StructureMode.SINGLE_LEAGUE
            logger.debug(f"Inferred structure mode '{mode.value}' for {year}.")

        groups = {StructureMode.DIVISIONS: divisions, StructureMode.QUADS: quads}.get(mode, [])
        snapshot = SeasonSnapshot(
            year=year,
            structure_mode=mode,
            teams=teams,
            games=games,
            group_assignments=self.normalizer.normalize_assignments(team_season_rows, mode),
            groups=groups,
            league_season=league_season,
        )
        logger.success(
            f"Fetched {year}: {len(snapshot.teams)} teams, {len(snapshot.games)} games, "
            f"{len(snapshot.groups)} {mode.group_label.lower()}s."
        )
        return snapshot
