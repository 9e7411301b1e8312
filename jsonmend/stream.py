from typing import Iterable, Iterator, Optional

from jsonmend.events import RepairCallback
from jsonmend.incremental import IncrementalRepair
from jsonmend.repair import wrap_roots


def iter_repair(chunks: Iterable[str], on_repair: Optional[RepairCallback] = None,
                repairer: Optional[IncrementalRepair] = None) -> Iterator[str]:
    """
    Repair a stream of text chunks, yielding output as soon as it is final.

    The last fragment yielded is the closing fragment from ``end()``. Pass an
    existing ``repairer`` to inspect it afterwards (e.g. ``multiple_roots``).
    """
    if repairer is None:
        repairer = IncrementalRepair(on_repair=on_repair)
    for chunk in chunks:
        fragment = repairer.push(chunk)
        if fragment:
            yield fragment
    closing = repairer.end()
    if closing:
        yield closing


def repair_stream(chunks: Iterable[str], on_repair: Optional[RepairCallback] = None) -> str:
    """Repair a chunked stream into one JSON text (no preprocessing)."""
    repairer = IncrementalRepair(on_repair=on_repair)
    body = "".join(iter_repair(chunks, repairer=repairer))
    return wrap_roots(body, repairer)
