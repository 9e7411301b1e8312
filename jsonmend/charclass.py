from enum import IntFlag


class CharRole(IntFlag):
    NONE = 0
    WHITESPACE = 1
    QUOTE = 2
    ID_START = 4
    DIGIT = 8
    VALUE_START = 16


# Unicode glyphs outside Latin-1 that the automaton treats as quotes or spaces
_EXTRA_ROLES = {
    "\u201c": CharRole.QUOTE,
    "\u201d": CharRole.QUOTE,
    "\u2018": CharRole.QUOTE,
    "\u2019": CharRole.QUOTE,
    "\u202f": CharRole.WHITESPACE,  # narrow no-break space
    "\u205f": CharRole.WHITESPACE,  # medium mathematical space
    "\u3000": CharRole.WHITESPACE,  # ideographic space
}


def _build_table():
    table = [CharRole.NONE] * 256
    for c in (9, 10, 13, 32, 160):
        table[c] |= CharRole.WHITESPACE
    table[ord('"')] |= CharRole.QUOTE
    table[ord("'")] |= CharRole.QUOTE
    for c in range(ord("0"), ord("9") + 1):
        table[c] |= CharRole.DIGIT | CharRole.VALUE_START
    for start, end in (("A", "Z"), ("a", "z")):
        for c in range(ord(start), ord(end) + 1):
            table[c] |= CharRole.ID_START
    for ch in "_$":
        table[ord(ch)] |= CharRole.ID_START
    for ch in "-.tfnTFN":
        table[ord(ch)] |= CharRole.VALUE_START
    return tuple(table)


CHAR_TABLE = _build_table()


def classify(ch: str) -> CharRole:
    """Return the role bits of a single character."""
    code = ord(ch)
    if code < 256:
        return CHAR_TABLE[code]
    return _EXTRA_ROLES.get(ch, CharRole.NONE)


def is_whitespace(ch: str) -> bool:
    return bool(classify(ch) & CharRole.WHITESPACE)


def is_quote(ch: str) -> bool:
    return bool(classify(ch) & CharRole.QUOTE)


def is_identifier_start(ch: str) -> bool:
    return bool(classify(ch) & CharRole.ID_START)


def is_identifier_char(ch: str) -> bool:
    return bool(classify(ch) & (CharRole.ID_START | CharRole.DIGIT))


def is_value_char(ch: str) -> bool:
    """Characters that may continue a bare literal or number token."""
    return ch in "+-." or is_identifier_char(ch)
