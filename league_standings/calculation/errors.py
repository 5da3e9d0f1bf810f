from typing import List, Optional


class LeagueDataError(Exception):
    """Base exception for standings and scenario report errors."""

    pass


class LeagueConfigurationError(LeagueDataError):
    """Raised when the league configuration cannot produce a meaningful report.

    Row-level anomalies never raise; only configuration problems the caller
    has to decide about end up here.
    """

    def __init__(self, problems: List[str], structure_only: bool = False):
        self.problems = list(problems)
        # True when every problem is about the division/quad structure, so a
        # single-league report is still possible.
        self.structure_only = structure_only
        super().__init__("; ".join(self.problems) or "Invalid league configuration")


class DataFetchError(LeagueDataError):
    """Raised when season rows cannot be fetched from the data store."""

    def __init__(self, message: str, table: Optional[str] = None):
        self.table = table
        super().__init__(message)
