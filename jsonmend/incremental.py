"""
Stateful JSON repair that accepts input in arbitrary chunks.

The engine is a single-pass state machine. Every lexical decision that needs
to see the next character (comment openers, the ``*`` of ``*/``, ellipses,
escapes, the closing quote of a possibly concatenated string, a possibly
trailing comma) is carried in the instance state instead of being resolved by
peeking, so splitting the input at any point gives the same output:

    >>> repairer = IncrementalRepair()
    >>> repairer.push('{"name": "Jo')
    '{"name": "Jo'
    >>> repairer.push('hn", "age": 3')
    'hn", "age": '
    >>> repairer.end()
    '3}'
"""

from enum import Enum, auto
from typing import List, Optional

from jsonmend.charclass import CharRole, classify, is_identifier_char, is_quote, is_value_char
from jsonmend.events import RepairAction, RepairCallback

# Incomplete literal -> completion. Covers every prefix of true/false/null and
# of the Python constants True/False/None.
LITERAL_COMPLETIONS = {
    "t": "true", "tr": "true", "tru": "true", "true": "true",
    "f": "false", "fa": "false", "fal": "false", "fals": "false", "false": "false",
    "n": "null", "nu": "null", "nul": "null", "null": "null",
    "T": "true", "Tr": "true", "Tru": "true", "True": "true",
    "F": "false", "Fa": "false", "Fal": "false", "Fals": "false", "False": "false",
    "N": "null", "No": "null", "Non": "null", "None": "null",
}

# Constructor-like calls (MongoDB shell / extended JSON) whose argument is kept
WRAPPER_NAMES = frozenset({
    "NumberLong", "NumberInt", "NumberDecimal", "ObjectId", "ISODate", "Date",
    "Timestamp", "BinData", "UUID", "DBRef", "MinKey", "MaxKey", "RegExp",
})

_NUMBER_HEAD = "-0123456789"
_NUMBER_TAIL = ".eE+-"
_HEX_DIGITS = "0123456789abcdefABCDEF"
_SHORT_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t", "\b": "\\b", "\f": "\\f"}


class Context(Enum):
    OBJECT = auto()
    ARRAY = auto()
    STRING = auto()


class Mode(Enum):
    STRUCTURAL = auto()
    STRING = auto()
    UNQUOTED_KEY = auto()
    VALUE = auto()
    LINE_COMMENT = auto()
    BLOCK_COMMENT = auto()
    BLOCK_COMMENT_STAR = auto()
    SLASH = auto()
    DOTS = auto()


class Held(Enum):
    NONE = auto()
    QUOTE = auto()
    COMMA = auto()


def _is_wrapper_prefix(text: str) -> bool:
    return any(name.startswith(text) for name in WRAPPER_NAMES)


def _escape_control(ch: str) -> str:
    if ch in _SHORT_ESCAPES:
        return _SHORT_ESCAPES[ch]
    if ord(ch) < 0x20:
        return "\\u%04x" % ord(ch)
    return ch


class IncrementalRepair:
    """
    Repairs a JSON stream chunk by chunk.

    ``push`` returns the part of the repaired output that is already final;
    ``end`` returns the closing fragment. Concatenating every ``push`` result
    with ``end()`` gives the same text for any way of splitting the input.

    When more than one top-level container was seen (NDJSON), the elements are
    comma-joined in the stream and ``multiple_roots`` is true; wrapping them in
    ``[...]`` is up to the caller, see ``repair_stream``.

    One instance serves one stream and is not safe for concurrent use.
    """

    def __init__(self, on_repair: Optional[RepairCallback] = None):
        self.on_repair = on_repair
        self.reset()

    def reset(self) -> None:
        """Forget everything so the instance can serve a new stream."""
        self.stack: List[Context] = []
        self.mode = Mode.STRUCTURAL
        self.token = ""
        self.quote = '"'
        self.escape = ""
        self.string_is_key = False
        self.closed_key = False
        self.expect_key = False
        self.expect_value = False
        self.colon_owed = False
        self.after_value = False
        self.awaiting_item = False
        self.held = ""
        self.held_kind = Held.NONE
        self.wrappers: List[int] = []
        self.root_count = 0
        self.offset = 0
        self._pos = 0
        self._out: List[str] = []

    @property
    def multiple_roots(self) -> bool:
        return self.root_count > 1

    @property
    def depth(self) -> int:
        return len(self.stack)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def push(self, chunk: str) -> str:
        """Feed a chunk and return the repaired output that became final."""
        self._out = []
        for i, ch in enumerate(chunk):
            self._pos = self.offset + i
            self._feed(ch)
        self.offset += len(chunk)
        return self._drain()

    def end(self) -> str:
        """Finish the stream and return the closing fragment."""
        self._out = []
        self._pos = self.offset
        self._finish()
        return self._drain()

    def snapshot(self) -> str:
        """Return what ``end()`` would return right now, without changing state."""
        saved = dict(self.__dict__)
        saved["stack"] = list(self.stack)
        saved["wrappers"] = list(self.wrappers)
        on_repair, self.on_repair = self.on_repair, None
        try:
            return self.end()
        finally:
            self.__dict__.update(saved)
            self.on_repair = on_repair

    # ------------------------------------------------------------------
    # Output helpers
    # ------------------------------------------------------------------

    def _drain(self) -> str:
        out = "".join(self._out)
        self._out = []
        return out

    def _write(self, text: str) -> None:
        self._out.append(text)

    def _repair(self, action: RepairAction, note: str) -> None:
        if self.on_repair is not None:
            self.on_repair(action, self._pos, note)

    def _hold(self, text: str, kind: Held) -> None:
        self.held = text
        self.held_kind = kind

    def _flush_held(self) -> None:
        if self.held_kind is not Held.NONE:
            self._write(self.held)
            self._hold("", Held.NONE)

    def _drop_trailing_comma(self) -> None:
        if self.held_kind is Held.COMMA:
            # keep the whitespace that followed the comma
            self._write(self.held[1:])
            self._hold("", Held.NONE)
        else:
            self._flush_held()

    def _top(self) -> Optional[Context]:
        return self.stack[-1] if self.stack else None

    # ------------------------------------------------------------------
    # Character dispatch
    # ------------------------------------------------------------------

    def _feed(self, ch: str) -> None:
        mode = self.mode

        if mode is Mode.STRING:
            self._string_char(ch)
            return

        if mode is Mode.LINE_COMMENT:
            if ch in "\r\n":
                self.mode = Mode.STRUCTURAL
                self._space()
            return

        if mode is Mode.BLOCK_COMMENT:
            if ch == "*":
                self.mode = Mode.BLOCK_COMMENT_STAR
            return

        if mode is Mode.BLOCK_COMMENT_STAR:
            if ch == "/":
                self.mode = Mode.STRUCTURAL
            elif ch != "*":
                self.mode = Mode.BLOCK_COMMENT
            return

        if mode is Mode.SLASH:
            if ch == "/":
                self.mode = Mode.LINE_COMMENT
                return
            if ch == "*":
                self.mode = Mode.BLOCK_COMMENT
                return
            self.mode = Mode.STRUCTURAL
            self._emit_other("/")
            self._feed(ch)
            return

        if mode is Mode.DOTS:
            if ch == ".":
                self.token += ch
                if self.token == "...":
                    self.token = ""
                    self.mode = Mode.STRUCTURAL
                return
            dots, self.token = self.token, ""
            self.mode = Mode.STRUCTURAL
            self._begin_value(dots)
            self._feed(ch)
            return

        if mode is Mode.UNQUOTED_KEY:
            if is_identifier_char(ch):
                self.token += ch
                return
            if not self._end_unquoted_key(ch):
                return

        elif mode is Mode.VALUE:
            if is_value_char(ch):
                self.token += ch
                return
            if not self._end_value(ch):
                return

        self._structural(ch)

    def _string_char(self, ch: str) -> None:
        if self.escape:
            if not self._escape_char(ch):
                return
        if ch == "\\":
            self.escape = ch
        elif ch == self.quote or (self.quote != '"' and is_quote(ch)):
            self._close_string()
        else:
            self._write(_escape_control(ch))

    def _escape_char(self, ch: str) -> bool:
        """Extend the pending escape; True when ``ch`` still needs handling."""
        if self.escape == "\\":
            if ch == "u":
                self.escape = "\\u"
            else:
                self.escape = ""
                self._write("\\" + ch)
            return False
        # \uXXXX is only written once all four hex digits are in
        if ch in _HEX_DIGITS:
            self.escape += ch
            if len(self.escape) == 6:
                self._write(self.escape)
                self.escape = ""
            return False
        self._write(self.escape)
        self.escape = ""
        return True

    def _structural(self, ch: str) -> None:
        role = classify(ch)

        if self.wrappers and ch in "()":
            self._wrapper_paren(ch)
        elif role & CharRole.WHITESPACE:
            self._space()
        elif ch == "/":
            self.mode = Mode.SLASH
        elif ch == ".":
            self.mode = Mode.DOTS
            self.token = ch
        elif ch == "+" and self.held_kind is Held.QUOTE:
            # "a" + "b": drop the operator, the quotes get merged
            pass
        elif ch in "{[":
            self._open(ch)
        elif ch == "}":
            self._close_object()
        elif ch == "]":
            self._close_array()
        elif role & CharRole.QUOTE:
            self._open_string(ch)
        elif ch == ":":
            self._colon()
        elif ch == ",":
            self._comma()
        elif role & (CharRole.ID_START | CharRole.DIGIT | CharRole.VALUE_START):
            self._start_item()
            if self.expect_key and self._top() is Context.OBJECT and is_identifier_char(ch):
                self.mode = Mode.UNQUOTED_KEY
                self.token = ch
            else:
                self.expect_key = False
                self.expect_value = False
                self.mode = Mode.VALUE
                self.token = ch
        else:
            self._emit_other(ch)

    def _emit_other(self, ch: str) -> None:
        self._flush_held()
        self._write(ch)

    def _space(self) -> None:
        if not self.stack and self.root_count > 0:
            # between top-level elements; the NDJSON join supplies the comma
            return
        if self.held_kind is not Held.NONE:
            self.held += " "
        else:
            self._write(" ")

    def _wrapper_paren(self, ch: str) -> None:
        if ch == "(":
            self.wrappers[-1] += 1
            self._emit_other(ch)
        elif self.wrappers[-1] == 0:
            self.wrappers.pop()
        else:
            self.wrappers[-1] -= 1
            self._emit_other(ch)

    # ------------------------------------------------------------------
    # Items and separators
    # ------------------------------------------------------------------

    def _start_item(self) -> None:
        """Write whatever separator the key or value about to start needs."""
        self._flush_held()
        self.awaiting_item = False
        if self.after_value:
            self.after_value = False
            self._repair(RepairAction.MISSING_COMMA, "Adding missing comma between values")
            self._write(",")
            if self._top() is Context.OBJECT:
                self.expect_key = True
        elif self.colon_owed and self._top() is Context.OBJECT:
            self._repair(RepairAction.INSERTED_VALUE, "Adding missing colon after key")
            self._write(":")
            self.colon_owed = False
            self.expect_value = True

    def _value_done(self) -> None:
        self.expect_value = False
        self.after_value = bool(self.stack)

    def _container_done(self) -> None:
        self.expect_key = False
        self.expect_value = False
        self.colon_owed = False
        self.awaiting_item = False
        if self.stack:
            self.after_value = True
        else:
            self.after_value = False
            self.root_count += 1

    def _begin_value(self, text: str) -> None:
        self._start_item()
        self.expect_key = False
        self.expect_value = False
        self.mode = Mode.VALUE
        self.token = text

    def _open(self, ch: str) -> None:
        self._start_item()
        if not self.stack and self.root_count > 0:
            self._repair(RepairAction.MISSING_COMMA, "Adding comma between root elements")
            self._write(",")
        elif self.expect_key and self._top() is Context.OBJECT:
            self._repair(RepairAction.SYNTHETIC_KEY, "Adding synthetic key for nested container")
            self._write('"_":')
        self._write(ch)
        self.stack.append(Context.OBJECT if ch == "{" else Context.ARRAY)
        self.expect_key = ch == "{"
        self.expect_value = False
        self.colon_owed = False
        self.awaiting_item = True

    def _close_object(self) -> None:
        if Context.OBJECT not in self.stack:
            return
        self._drop_trailing_comma()
        if self._top() is Context.ARRAY:
            self._fill_empty_slot()
        while self._top() is Context.ARRAY:
            self._repair(RepairAction.CLOSED_ARRAY, "Closing ] before }")
            self._write("]")
            self.stack.pop()
        if self.colon_owed:
            self._repair(RepairAction.INSERTED_VALUE, "Adding null for key")
            self._write(":null")
        elif self.expect_value:
            self._repair(RepairAction.INSERTED_VALUE, "Adding null after colon")
            self._write("null")
        self._write("}")
        self.stack.pop()
        self._container_done()

    def _close_array(self) -> None:
        if self._top() is not Context.ARRAY:
            return
        self._drop_trailing_comma()
        self._fill_empty_slot()
        self._write("]")
        self.stack.pop()
        self._container_done()

    def _fill_empty_slot(self) -> None:
        """Write null for an array element whose wrapper call had no argument."""
        if self.expect_value:
            self._repair(RepairAction.INSERTED_VALUE, "Adding null for empty element")
            self._write("null")
            self.expect_value = False

    def _open_string(self, ch: str) -> None:
        if self.held_kind is Held.QUOTE:
            # "a" "b" / "a" + "b": continue the string that just closed
            self._hold("", Held.NONE)
            self.string_is_key = self.closed_key
            if self.closed_key:
                self.colon_owed = False
            else:
                self.after_value = False
        else:
            self._start_item()
            self.string_is_key = self.expect_key and self._top() is Context.OBJECT
            self.expect_key = False
            self.expect_value = False
            self._write('"')
        self.stack.append(Context.STRING)
        self.mode = Mode.STRING
        self.quote = ch
        self.escape = ""

    def _close_string(self) -> None:
        self.stack.pop()
        self.mode = Mode.STRUCTURAL
        self._hold('"', Held.QUOTE)
        self.closed_key = self.string_is_key
        if self.string_is_key:
            self.colon_owed = True
        else:
            self._value_done()
        self.string_is_key = False

    def _colon(self) -> None:
        if not self.colon_owed:
            return
        self._flush_held()
        self._write(":")
        self.colon_owed = False
        self.expect_value = True

    def _comma(self) -> None:
        if self.stack and self.awaiting_item:
            # leading or doubled comma
            return
        if not self.stack and self.root_count > 0:
            return
        self._flush_held()
        top = self._top()
        if top is Context.OBJECT:
            if self.colon_owed:
                self._repair(RepairAction.INSERTED_VALUE, "Adding null for key")
                self._write(":null")
            elif self.expect_value:
                self._repair(RepairAction.INSERTED_VALUE, "Adding null after colon")
                self._write("null")
        elif top is Context.ARRAY:
            self._fill_empty_slot()
        self._hold(",", Held.COMMA)
        self.colon_owed = False
        self.expect_value = False
        self.after_value = False
        self.awaiting_item = top is not None
        self.expect_key = top is Context.OBJECT

    # ------------------------------------------------------------------
    # Bare tokens
    # ------------------------------------------------------------------

    def _emit_key(self, key: str) -> None:
        self._repair(RepairAction.INSERTED_QUOTE, f'Wrapped unquoted key "{key}"')
        self._write(f'"{key}"')
        self.colon_owed = True
        self.expect_key = False

    def _end_unquoted_key(self, ch: str) -> bool:
        """Close the pending key; False when ``ch`` was consumed."""
        key, self.token = self.token, ""
        self.mode = Mode.STRUCTURAL
        if ch == "(" and key in WRAPPER_NAMES:
            self.wrappers.append(0)
            return False
        self._emit_key(key)
        return True

    def _end_value(self, ch: str) -> bool:
        """Close the pending literal; False when ``ch`` was consumed."""
        text, self.token = self.token, ""
        self.mode = Mode.STRUCTURAL
        if ch == "(" and text in WRAPPER_NAMES:
            self.wrappers.append(0)
            # the call argument fills the value slot; null if it never comes
            self.expect_value = bool(self.stack) or self.root_count == 0
            return False
        self._write(self._complete_literal(text))
        self._value_done()
        return True

    def _complete_literal(self, text: str) -> str:
        completion = LITERAL_COMPLETIONS.get(text)
        if completion is not None:
            if completion != text:
                self._repair(RepairAction.FIXED_LITERAL, f'Fixed "{text}" -> "{completion}"')
            return completion
        if text[0] in _NUMBER_HEAD and text[-1] in _NUMBER_TAIL:
            self._repair(RepairAction.FIXED_LITERAL, f'Completed number "{text}" -> "{text}0"')
            return text + "0"
        return text

    # ------------------------------------------------------------------
    # End of input
    # ------------------------------------------------------------------

    def _finish(self) -> None:
        mode = self.mode
        if mode is Mode.SLASH:
            self.mode = Mode.STRUCTURAL
            self._emit_other("/")
        elif mode is Mode.DOTS:
            # a truncated ellipsis
            self.token = ""
            self.mode = Mode.STRUCTURAL
        elif mode in (Mode.LINE_COMMENT, Mode.BLOCK_COMMENT, Mode.BLOCK_COMMENT_STAR):
            self.mode = Mode.STRUCTURAL

        if self.held_kind is Held.QUOTE:
            self._flush_held()

        mode = self.mode
        if mode is Mode.UNQUOTED_KEY:
            key, self.token = self.token, ""
            self.mode = Mode.STRUCTURAL
            self._emit_key(key)
        elif mode is Mode.VALUE:
            text, self.token = self.token, ""
            self.mode = Mode.STRUCTURAL
            if text not in LITERAL_COMPLETIONS and _is_wrapper_prefix(text):
                # a wrapper call cut off before its argument
                self._repair(RepairAction.INSERTED_VALUE, f'Replaced truncated call "{text}" with null')
                self._write("null")
            else:
                self._write(self._complete_literal(text))
            self._value_done()
        elif mode is Mode.STRING:
            # a dangling backslash or partial \u escape is dropped
            self.escape = ""
            self.mode = Mode.STRUCTURAL
            self.stack.pop()
            self._repair(RepairAction.INSERTED_QUOTE, "Closing unterminated string")
            self._write('"')
            if self.string_is_key:
                self.colon_owed = True
            else:
                self._value_done()
            self.string_is_key = False

        if self.colon_owed:
            self._repair(RepairAction.INSERTED_VALUE, "Adding null for key")
            self._write(":null")
            self.colon_owed = False
        elif self.expect_value:
            self._repair(RepairAction.INSERTED_VALUE, "Adding null after colon")
            self._write("null")
            self.expect_value = False

        self._drop_trailing_comma()

        while self.stack:
            context = self.stack.pop()
            if context is Context.OBJECT:
                self._repair(RepairAction.CLOSED_OBJECT, "Closing missing }")
                self._write("}")
            elif context is Context.ARRAY:
                self._repair(RepairAction.CLOSED_ARRAY, "Closing missing ]")
                self._write("]")
            if not self.stack:
                self.root_count += 1

        self.wrappers = []
        self.expect_key = False
        self.after_value = False
        self.awaiting_item = False


def create_incremental_repair(on_repair: Optional[RepairCallback] = None) -> IncrementalRepair:
    return IncrementalRepair(on_repair=on_repair)
