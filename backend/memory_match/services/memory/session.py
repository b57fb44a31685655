import logging
import random
import threading
from typing import Callable, Dict, List, Optional, Sequence

from .clock import SessionClock
from .deck import Tile, generate_deck
from .leaderboard import LeaderboardEntry, LeaderboardStore, leaderboard_key
from .resolver import MatchResolver
from .themes import CUSTOM_THEME, DIFFICULTY_PAIRS, THEMES, parse_custom_symbols
from .win import is_won

FLIP = 'flip'
WIN = 'win'

DEFAULT_PLAYER_NAME = 'Anonymous'


class MemorySession:
    """One player's game: deck, pending flips, clock and win state.

    - ``configure``/``restart`` replace the deck and bump ``generation``
    - the reveal resolution is scheduled tagged with the generation and is
      dropped if the session was reconfigured in the meantime
    - ``on_signal(name)`` receives flip/match/mismatch/win
    - ``on_change(snapshot)`` runs after every mutation, clock ticks included
    """

    def __init__(
        self,
        scheduler,
        leaderboard: LeaderboardStore,
        code: str = '',
        difficulty: str = 'easy',
        theme: str = 'animals',
        custom_symbols=None,
        reveal_delay: float = 0.9,
        tick_interval: float = 1.0,
        themes: Optional[Dict[str, Sequence[str]]] = None,
        rng: Optional[random.Random] = None,
        on_signal: Optional[Callable[[str], None]] = None,
        on_change: Optional[Callable[[dict], None]] = None,
        logger=None,
    ):
        self.code = code
        self.scheduler = scheduler
        self.leaderboard = leaderboard
        self.reveal_delay = reveal_delay
        self.themes = themes if themes is not None else THEMES
        self.rng = rng
        self.on_signal = on_signal
        self.on_change = on_change
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.RLock()
        self.clock = SessionClock(scheduler, interval=tick_interval, on_tick=self._on_tick, lock=self._lock)
        self.generation = 0
        self.difficulty = None
        self.theme = None
        self.custom_symbols: List[str] = []
        self.deck: List[Tile] = []
        self.resolver = MatchResolver(self.deck)
        self.won = False
        self.closed = False
        if not self.configure(difficulty, theme, custom_symbols):
            self.configure('easy', next(iter(self.themes), CUSTOM_THEME))

    # -- configuration -------------------------------------------------

    @property
    def pair_count(self) -> int:
        return DIFFICULTY_PAIRS.get(self.difficulty, 0)

    @property
    def leaderboard_key(self) -> str:
        return leaderboard_key(self.theme, self.difficulty)

    def _symbols(self) -> List[str]:
        if self.theme == CUSTOM_THEME:
            return list(self.custom_symbols)
        return list(self.themes.get(self.theme, []))

    def configure(self, difficulty: Optional[str] = None, theme: Optional[str] = None, custom_symbols=None) -> bool:
        """Start a fresh game with the given settings.

        Omitted arguments keep their current value. Unknown difficulty or
        theme leaves the session untouched and returns False.
        """
        with self._lock:
            difficulty = difficulty or self.difficulty
            theme = theme or self.theme
            if difficulty not in DIFFICULTY_PAIRS:
                self.logger.info(f"[configure-skip] session={self.code} unknown difficulty={difficulty}")
                return False
            if theme != CUSTOM_THEME and theme not in self.themes:
                self.logger.info(f"[configure-skip] session={self.code} unknown theme={theme}")
                return False
            if custom_symbols is not None:
                self.custom_symbols = parse_custom_symbols(custom_symbols)
            self.difficulty = difficulty
            self.theme = theme
            self._new_deck()
            return True

    def restart(self) -> None:
        with self._lock:
            self.configure(self.difficulty, self.theme)

    def _new_deck(self) -> None:
        self.generation += 1
        self.deck = generate_deck(self._symbols(), self.pair_count, rng=self.rng)
        self.resolver = MatchResolver(self.deck)
        self.won = False
        self.closed = False
        self.clock.reset()
        self.clock.start()
        self.logger.info(
            f"[configure] session={self.code} generation={self.generation} difficulty={self.difficulty} "
            f"theme={self.theme} tiles={len(self.deck)}"
        )
        if len(self.deck) < 2 * self.pair_count:
            self.logger.info(
                f"[configure] session={self.code} symbol source short: {len(self.deck) // 2} of {self.pair_count} pairs"
            )
        self._changed()

    def close(self) -> None:
        """Stop the clock and invalidate anything still scheduled."""
        with self._lock:
            self.closed = True
            self.generation += 1
            self.clock.stop()
            self.logger.info(f"[session-end] session={self.code}")

    # -- play ----------------------------------------------------------

    def flip(self, tile_id: int) -> bool:
        with self._lock:
            if self.closed or not self.resolver.flip(tile_id):
                return False
            self._signal(FLIP)
            self.logger.info(f"[flip] session={self.code} tile={tile_id} state={self.resolver.state}")
            if self.resolver.locked:
                self._schedule_reveal(self.generation)
            self._check_win()
            self._changed()
            return True

    def _schedule_reveal(self, generation: int) -> None:
        self.logger.info(f"[reveal-set] session={self.code} generation={generation} delay={self.reveal_delay}s")
        self.scheduler.call_later(self.reveal_delay, lambda: self._reveal(generation))

    def _reveal(self, generation: int) -> None:
        with self._lock:
            if generation != self.generation:
                self.logger.info(
                    f"[reveal-stale] session={self.code} expected_generation={generation} actual={self.generation}"
                )
                return
            outcome = self.resolver.resolve()
            if outcome is None:
                return
            self.logger.info(f"[reveal-fire] session={self.code} outcome={outcome} moves={self.resolver.moves}")
            self._signal(outcome)
            self._check_win()
            self._changed()

    def _check_win(self) -> None:
        if self.won or not is_won(self.deck):
            return
        self.won = True
        self.clock.stop()
        self.logger.info(
            f"[win] session={self.code} moves={self.resolver.moves} elapsed={self.clock.elapsed_seconds}s"
        )
        self._signal(WIN)

    def _on_tick(self) -> None:
        with self._lock:
            self._changed()

    def finish_win(self, name: Optional[str]) -> Optional[List[LeaderboardEntry]]:
        """Record the finished game on the leaderboard, then deal a new deck.

        Returns the updated ranking, or None if the game is not won yet.
        """
        with self._lock:
            if not self.won:
                return None
            entry = LeaderboardEntry(
                name=(name or '').strip() or DEFAULT_PLAYER_NAME,
                moves=self.resolver.moves,
                elapsed_seconds=self.clock.elapsed_seconds,
            )
            ranked = self.leaderboard.commit(self.leaderboard_key, entry)
            self.restart()
            return ranked

    # -- presentation --------------------------------------------------

    def _signal(self, name: str) -> None:
        if self.on_signal:
            self.on_signal(name)

    def _changed(self) -> None:
        if self.on_change:
            self.on_change(self.snapshot())

    def stats(self) -> dict:
        return {
            'moves': self.resolver.moves,
            'elapsed_seconds': self.clock.elapsed_seconds,
            'running': self.clock.running,
        }

    def configuration(self) -> dict:
        return {
            'difficulty': self.difficulty,
            'theme': self.theme,
            'custom_symbols': list(self.custom_symbols),
            'pair_count': self.pair_count,
        }

    def snapshot(self) -> dict:
        with self._lock:
            return {
                'session_code': self.code,
                'generation': self.generation,
                'deck': [tile.to_dict() for tile in self.deck],
                'stats': self.stats(),
                'configuration': self.configuration(),
                'pending': list(self.resolver.pending),
                'locked': self.resolver.locked,
                'won': self.won,
            }
