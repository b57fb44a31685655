import unicodedata
from typing import Dict, Iterable, List, Optional, Union

CUSTOM_THEME = 'custom'

DIFFICULTY_PAIRS: Dict[str, int] = {
    'easy': 4,
    'medium': 8,
    'hard': 12,
}

THEMES: Dict[str, List[str]] = {
    'animals': ["🐶", "🐱", "🐭", "🐹", "🐰", "🦊", "🐻", "🐼", "🐨", "🦁", "🐷", "🐸", "🐵", "🐮", "🐯", "🦒"],
    'shapes': ["🔴", "🟠", "🟡", "🟢", "🔵", "🟣", "🟤", "⚫️", "⚪️", "🟥", "🟧", "🟨", "🟩", "🟦", "🟪", "⬛️"],
    'smiles': ["😀", "😃", "😄", "😁", "😆", "😊", "🙂", "😉", "😎", "🤩", "🥳", "🤗", "🤠", "😺", "😸", "😹"],
    'food': ["🍎", "🍌", "🍇", "🍓", "🍒", "🍍", "🥝", "🍉", "🍑", "🥕", "🌽", "🍕", "🍩", "🍪", "🧁", "🍦"],
}

ZERO_WIDTH_JOINER = '\u200d'


def _attaches_to_previous(ch: str) -> bool:
    # combining marks, variation selectors (Mn) and emoji skin tone modifiers
    return unicodedata.category(ch) in ('Mn', 'Me') or '\U0001F3FB' <= ch <= '\U0001F3FF'


def split_symbols(text: str) -> List[str]:
    """Split a string into visible symbols.

    Variation selectors, combining marks, skin tones and zero-width-joined
    sequences stay with the symbol they decorate, so ``'⚫️'`` is one symbol.
    """
    symbols: List[str] = []
    join_next = False
    for ch in text:
        if symbols and (join_next or ch == ZERO_WIDTH_JOINER or _attaches_to_previous(ch)):
            symbols[-1] += ch
        else:
            symbols.append(ch)
        join_next = ch == ZERO_WIDTH_JOINER
    return symbols


def parse_custom_symbols(raw: Optional[Union[str, Iterable[str]]]) -> List[str]:
    """Normalize a user-supplied symbol source.

    A string containing whitespace or commas is split on them; any other
    string is taken one symbol at a time. Blank entries are dropped and
    repeats are removed keeping first occurrence, so every symbol can be
    paired exactly once.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        if any(ch.isspace() or ch == ',' for ch in raw):
            items = raw.replace(',', ' ').split()
        else:
            items = split_symbols(raw)
    else:
        items = [str(item).strip() for item in raw]
    seen = set()
    symbols = []
    for item in items:
        if not item or item in seen:
            continue
        seen.add(item)
        symbols.append(item)
    return symbols
