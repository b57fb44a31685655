from typing import Sequence

from .deck import Tile


def is_won(deck: Sequence[Tile]) -> bool:
    """A deck is won once it is non-empty and every tile is matched."""
    return len(deck) > 0 and all(tile.matched for tile in deck)
