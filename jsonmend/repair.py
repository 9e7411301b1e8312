"""
One-shot repair of incomplete or malformed JSON text.

Examples:
    repair('{"name": "John')                 -> '{"name": "John"}'
    repair("{'key': 'value'}")               -> '{"key": "value"}'
    repair('{"active": True, "data": None}') -> '{"active": true, "data": null}'
    repair('{name: "John", age: 30}')        -> '{"name": "John", "age": 30}'
    repair('```json\\n{"a": 1}\\n```')         -> '{"a": 1}'
    repair('callback({"a": 1})')             -> '{"a": 1}'
    repair('{"count": NumberLong(123)}')     -> '{"count": 123}'
    repair('{"text": "hello" + "world"}')    -> '{"text": "helloworld"}'
    repair('{"a": 1}\\n{"b": 2}')              -> '[{"a": 1},{"b": 2}]'
"""

from typing import Optional

from jsonmend.events import RepairCallback
from jsonmend.incremental import IncrementalRepair
from jsonmend.preprocess import preprocess


def wrap_roots(text: str, repairer: IncrementalRepair) -> str:
    """Wrap comma-joined top-level elements in an array."""
    if repairer.multiple_roots:
        return "[" + text + "]"
    return text


def repair(text: str, on_repair: Optional[RepairCallback] = None) -> str:
    """
    Repair ``text`` into valid JSON. Never raises.

    Returns an empty string for empty or whitespace-only input. ``on_repair``
    is called as ``on_repair(action, position, note)`` for every corrective
    action, in input order.
    """
    if not text or not text.strip():
        return ""

    repairer = IncrementalRepair(on_repair=on_repair)
    body = repairer.push(preprocess(text)) + repairer.end()
    return wrap_roots(body, repairer)
