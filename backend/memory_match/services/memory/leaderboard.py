"""Per-configuration best scores, ranked by time then moves."""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

DEFAULT_SIZE = 5


def leaderboard_key(theme: str, difficulty: str) -> str:
    return f"{theme}-{difficulty}"


@dataclass
class LeaderboardEntry:
    name: str
    moves: int
    elapsed_seconds: int

    @property
    def rank_key(self):
        return (self.elapsed_seconds, self.moves)

    def to_dict(self):
        return {
            'name': self.name,
            'moves': self.moves,
            'elapsed_seconds': self.elapsed_seconds,
        }

    def to_record(self):
        return {
            'name': self.name,
            'moves': self.moves,
            'elapsedSeconds': self.elapsed_seconds,
        }

    @classmethod
    def from_record(cls, data) -> 'LeaderboardEntry':
        """Build an entry from its stored form; raises ValueError when malformed."""
        if not isinstance(data, dict):
            raise ValueError(f"entry is not a mapping: {data!r}")
        elapsed = data.get('elapsedSeconds', data.get('elapsed_seconds'))
        moves = data.get('moves')
        for value in (elapsed, moves):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"bad score values in entry: {data!r}")
        return cls(name=str(data.get('name', '')), moves=moves, elapsed_seconds=elapsed)


class LeaderboardStore:
    """Keyed top-N table over a ``load()``/``save(table)`` storage.

    The table is read from storage once, on first use, and written back in
    full after every commit.
    """

    def __init__(self, storage, size: int = DEFAULT_SIZE, logger=None):
        self.storage = storage
        self.size = size
        self.logger = logger or logging.getLogger(__name__)
        self._table: Optional[Dict[str, List[LeaderboardEntry]]] = None
        self._lock = threading.RLock()

    def _loaded(self) -> Dict[str, List[LeaderboardEntry]]:
        if self._table is None:
            self._table = self._parse(self.storage.load())
            self.logger.info(f"[leaderboard-load] keys={len(self._table)}")
        return self._table

    def _parse(self, raw) -> Dict[str, List[LeaderboardEntry]]:
        if not isinstance(raw, dict):
            if raw:
                self.logger.warning(f"[leaderboard-load] ignoring non-mapping record of type {type(raw).__name__}")
            return {}
        table: Dict[str, List[LeaderboardEntry]] = {}
        for key, rows in raw.items():
            if not isinstance(rows, list):
                self.logger.warning(f"[leaderboard-load] dropping key={key} (not a list)")
                continue
            entries = []
            for row in rows:
                try:
                    entries.append(LeaderboardEntry.from_record(row))
                except ValueError as exc:
                    self.logger.warning(f"[leaderboard-load] dropping entry under key={key}: {exc}")
            entries.sort(key=lambda e: e.rank_key)
            table[str(key)] = entries[:self.size]
        return table

    def read(self, key: str) -> List[LeaderboardEntry]:
        with self._lock:
            return list(self._loaded().get(key, []))

    def commit(self, key: str, entry: LeaderboardEntry) -> List[LeaderboardEntry]:
        """Rank ``entry`` into ``key``'s list and persist the whole table."""
        with self._lock:
            table = dict(self._loaded())
            ranked = table.get(key, []) + [entry]
            ranked.sort(key=lambda e: e.rank_key)
            table[key] = ranked[:self.size]
            self.storage.save(_records(table))
            self._table = table
            self.logger.info(
                f"[leaderboard-commit] key={key} name={entry.name} moves={entry.moves} "
                f"elapsed={entry.elapsed_seconds}s size={len(table[key])}"
            )
            return list(table[key])

    def to_records(self) -> Dict[str, List[dict]]:
        with self._lock:
            return _records(self._loaded())


def _records(table: Dict[str, List[LeaderboardEntry]]) -> Dict[str, List[dict]]:
    return {key: [e.to_record() for e in entries] for key, entries in table.items()}
