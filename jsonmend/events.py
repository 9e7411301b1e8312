from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional


class RepairAction(str, Enum):
    INSERTED_QUOTE = "inserted_quote"
    FIXED_LITERAL = "fixed_literal"
    CLOSED_OBJECT = "closed_object"
    CLOSED_ARRAY = "closed_array"
    MISSING_COMMA = "missing_comma"
    SYNTHETIC_KEY = "synthetic_key"
    INSERTED_VALUE = "inserted_value"

    def __str__(self):
        return self.value


RepairCallback = Callable[[RepairAction, int, str], None]


@dataclass(frozen=True)
class RepairEvent:
    kind: RepairAction
    position: int
    note: str

    def format(self) -> str:
        return f"[repair] {self.kind.value} at {self.position}: {self.note}"


class RepairLog:
    """
    Append-only collector of repair events.

    Instances are callable, so they can be passed anywhere an ``on_repair``
    callback is accepted:

        log = RepairLog()
        repair('{"a": [1, 2', on_repair=log)
        log.kinds()  # ['closed_array', 'closed_object']
    """

    def __init__(self, forward: Optional[RepairCallback] = None):
        self._events: List[RepairEvent] = []
        self._forward = forward

    def __call__(self, kind: RepairAction, position: int, note: str) -> None:
        self._events.append(RepairEvent(RepairAction(kind), position, note))
        if self._forward is not None:
            self._forward(kind, position, note)

    def __len__(self):
        return len(self._events)

    def __iter__(self):
        return iter(self._events)

    @property
    def events(self) -> List[RepairEvent]:
        return list(self._events)

    def kinds(self) -> List[str]:
        return [event.kind.value for event in self._events]

    def clear(self) -> None:
        self._events = []
