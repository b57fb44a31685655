from typing import List, Optional

from .deck import Tile

IDLE = 'idle'
ONE_FACE_UP = 'one_face_up'
COMPARING = 'comparing'

MATCH = 'match'
MISMATCH = 'mismatch'


class MatchResolver:
    """Tracks the face-up, not yet matched tiles of one deck.

    Flips are accepted while fewer than two tiles are pending. Once two are
    pending the resolver sits in ``comparing`` until ``resolve`` is called;
    scheduling that call is left to the owner.
    """

    def __init__(self, deck: List[Tile]):
        self.deck = deck
        self.pending: List[int] = []
        self.moves = 0

    @property
    def state(self) -> str:
        if len(self.pending) >= 2:
            return COMPARING
        if self.pending:
            return ONE_FACE_UP
        return IDLE

    @property
    def locked(self) -> bool:
        return len(self.pending) >= 2

    def _tile(self, tile_id) -> Optional[Tile]:
        if isinstance(tile_id, bool) or not isinstance(tile_id, int):
            return None
        if 0 <= tile_id < len(self.deck):
            return self.deck[tile_id]
        return None

    def flip(self, tile_id: int) -> bool:
        """Turn a tile face-up. Returns False when the flip is ignored."""
        if self.locked:
            return False
        tile = self._tile(tile_id)
        if tile is None or tile.face_up or tile.matched:
            return False
        tile.face_up = True
        self.pending.append(tile.id)
        return True

    def resolve(self) -> Optional[str]:
        """Compare the two pending tiles and settle them.

        Returns ``'match'`` or ``'mismatch'``, or None when nothing is
        waiting for comparison.
        """
        if not self.locked:
            return None
        first, second = (self.deck[i] for i in self.pending[:2])
        if first.symbol == second.symbol:
            first.matched = second.matched = True
            outcome = MATCH
        else:
            first.face_up = second.face_up = False
            outcome = MISMATCH
        self.pending = []
        self.moves += 1
        return outcome
