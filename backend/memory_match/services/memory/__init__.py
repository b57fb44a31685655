"""Memory match engine: deck, flip resolution, clock, win and best scores.

Nothing in here talks to HTTP or Socket.IO; the blueprints and socket
handlers drive a ``MemorySession`` and forward its snapshots and signals.
"""

from .deck import Tile, generate_deck
from .leaderboard import LeaderboardEntry, LeaderboardStore, leaderboard_key
from .resolver import MatchResolver
from .scheduler import BackgroundScheduler, ManualScheduler
from .session import MemorySession
from .themes import CUSTOM_THEME, DIFFICULTY_PAIRS, THEMES, parse_custom_symbols
from .win import is_won

__all__ = [
    'Tile', 'generate_deck', 'LeaderboardEntry', 'LeaderboardStore', 'leaderboard_key',
    'MatchResolver', 'BackgroundScheduler', 'ManualScheduler', 'MemorySession',
    'CUSTOM_THEME', 'DIFFICULTY_PAIRS', 'THEMES', 'parse_custom_symbols', 'is_won',
]
