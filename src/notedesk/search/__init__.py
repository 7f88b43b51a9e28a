"""Fuzzy ranking and debounced search coordination."""

from .commands import PaletteCommand, filter_commands
from .coordinator import CommandPalette, PaletteMode, PanelTab, SearchCoordinator, SearchPanel
from .models import MatchCandidate, SearchKind, SearchOutcome, SearchRequest, SurfaceStatus
from .ranking import match_positions, rank, score
from .surface import CommandSurface, EmptyQueryPolicy, SearchSurface, SurfaceState

__all__ = [
    "CommandPalette",
    "CommandSurface",
    "EmptyQueryPolicy",
    "MatchCandidate",
    "PaletteCommand",
    "PaletteMode",
    "PanelTab",
    "SearchCoordinator",
    "SearchKind",
    "SearchOutcome",
    "SearchPanel",
    "SearchRequest",
    "SearchSurface",
    "SurfaceState",
    "SurfaceStatus",
    "filter_commands",
    "match_positions",
    "rank",
    "score",
]
