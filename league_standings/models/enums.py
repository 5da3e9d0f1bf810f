from enum import Enum


class StructureMode(str, Enum):
    SINGLE_LEAGUE = "single_league"
    DIVISIONS = "divisions"
    QUADS = "quads"

    @property
    def group_label(self) -> str:
        """Singular display label for a group in this structure."""
        if self == StructureMode.QUADS:
            return "Quad"
        if self == StructureMode.DIVISIONS:
            return "Division"
        return "Group"


class GameResult(str, Enum):
    WIN = "W"
    LOSS = "L"
    TIE = "T"


class QualificationStatus(str, Enum):
    LEADER = "leader"  # Top of a division/quad, bye through the play-in round
    QUALIFYING = "qualifying"  # Currently inside the points cut
    OUTSIDE = "outside"
