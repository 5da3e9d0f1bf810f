import sys
import asyncio
import argparse
from datetime import date
from typing import List, Optional

# --- Settings/Logging ---
from league_standings.logging.setup import setup_logging
from league_standings.config.settings import settings

setup_logging()

from loguru import logger

from league_standings.calculation.errors import DataFetchError, LeagueConfigurationError
from league_standings.export.playoff_export import export_playoff_scenarios, write_report
from league_standings.storage.supabase_client import (
    SupabaseLeagueRepository,
    initialize_supabase,
)

from rich import print
from rich.markdown import Markdown
from rich.panel import Panel


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Export playoff scenario data for a league season."
    )
    parser.add_argument(
        "year", nargs="?", type=int, default=date.today().year, help="Season year."
    )
    parser.add_argument(
        "week",
        nargs="?",
        type=int,
        default=None,
        help="Current week (defaults to the latest week with a completed game).",
    )
    parser.add_argument(
        "--output-dir",
        default=settings.report_output_dir,
        help="Directory for the .md and .json report files.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail instead of falling back to a single-league report on structure problems.",
    )
    return parser.parse_args(argv)


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    args = parse_args(argv)
    logger.info(f"Exporting playoff scenario data for {args.year}...")

    try:
        client = await initialize_supabase()
        repository = SupabaseLeagueRepository(client)
        report = await export_playoff_scenarios(
            repository, args.year, args.week, allow_degraded=not args.strict
        )
    except DataFetchError as e:
        logger.critical(f"Could not fetch season data: {e}")
        return 1
    except LeagueConfigurationError as e:
        logger.critical(f"Invalid league configuration: {e}")
        for problem in e.problems:
            logger.error(f" - {problem}")
        return 1

    print(
        Panel(
            Markdown(report.text),
            title=f"{report.payload.year} Week {report.payload.week}",
        )
    )

    try:
        write_report(report, args.output_dir)
    except OSError as e:
        logger.error(f"Failed to write report files to {args.output_dir}: {e}")
        return 1
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Unhandled exception in main execution: {e}")
        sys.exit(1)
