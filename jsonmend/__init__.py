from jsonmend.events import RepairAction, RepairEvent, RepairLog
from jsonmend.extract import contains_json, extract_all_json, extract_json, strip_llm_wrapper
from jsonmend.incremental import IncrementalRepair, create_incremental_repair
from jsonmend.preprocess import preprocess
from jsonmend.repair import repair
from jsonmend.stream import iter_repair, repair_stream

__all__ = [
    "repair",
    "preprocess",
    "IncrementalRepair",
    "create_incremental_repair",
    "iter_repair",
    "repair_stream",
    "RepairAction",
    "RepairEvent",
    "RepairLog",
    "extract_json",
    "extract_all_json",
    "contains_json",
    "strip_llm_wrapper",
]
