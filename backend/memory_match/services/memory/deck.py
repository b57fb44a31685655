import random
from dataclasses import dataclass
from typing import List, Optional, Sequence


@dataclass
class Tile:
    id: int
    symbol: str
    face_up: bool = False
    matched: bool = False

    def to_dict(self):
        return {
            'id': self.id,
            'symbol': self.symbol,
            'face_up': self.face_up,
            'matched': self.matched,
        }


def generate_deck(symbols: Sequence[str], pair_count: int, rng: Optional[random.Random] = None) -> List[Tile]:
    """Build a freshly shuffled deck holding two copies of each symbol.

    Only the first ``pair_count`` symbols are used. A shorter source yields
    a smaller deck rather than an error.
    """
    chosen = list(symbols[:max(0, pair_count)])
    faces = chosen + chosen
    (rng or random).shuffle(faces)
    return [Tile(id=idx, symbol=symbol) for idx, symbol in enumerate(faces)]
