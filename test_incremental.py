"""
Test script for chunked (incremental) repair.

The main property: however the input is split, the concatenated output of
push() calls plus end() is the same as repairing the whole text at once.
"""

import random

from jsonmend import IncrementalRepair, create_incremental_repair, repair, repair_stream
from jsonmend.stream import iter_repair

DOCUMENTS = [
    '{"name": "John", "age": 30, "tags": ["a", "b"]}',
    '{"text": "He said \\"Hello\\" \\u00e9", "n": -1.5e3}',
    "{name: 'John', active: True, missing: None}",
    '{"a": 1, /* block * comment */ "b": [1, 2, ...], // line\n"c": tru',
    '{"count": NumberLong(123), "id": ObjectId("507f")}',
    '{"t": "a" + "b", "u": "x" "y"}',
    '{"a": [1, 2',
    '[1 2, , 3,]',
    '{"a" 1, "b": }',
    '{{"inner": 1}}',
    '{"path": "a/b", "ratio": 1. ',
]


def _run_chunks(chunks):
    repairer = IncrementalRepair()
    out = "".join(repairer.push(chunk) for chunk in chunks)
    return out + repairer.end()


def _random_partition(text, rng):
    chunks = []
    pos = 0
    while pos < len(text):
        size = rng.randint(1, 5)
        chunks.append(text[pos:pos + size])
        pos += size
    return chunks


def test_single_push_matches_repair():
    for doc in DOCUMENTS:
        assert _run_chunks([doc]) == repair(doc), doc


def test_every_split_point():
    for doc in DOCUMENTS:
        expected = repair(doc)
        for i in range(len(doc) + 1):
            assert _run_chunks([doc[:i], doc[i:]]) == expected, (doc, i)


def test_random_partitions():
    rng = random.Random(42)
    for doc in DOCUMENTS:
        expected = repair(doc)
        for _ in range(25):
            chunks = _random_partition(doc, rng)
            assert _run_chunks(chunks) == expected, chunks


def test_one_character_at_a_time():
    for doc in DOCUMENTS:
        assert _run_chunks(list(doc)) == repair(doc), doc


def test_lookahead_across_chunks():
    # comment opener, comment closer, escape and ellipsis split between chunks
    assert _run_chunks(['{"a": 1, /', '* c *', '/ "b": 2}']) == '{"a": 1,  "b": 2}'
    assert _run_chunks(['{"text": "a\\', '"b"}']) == '{"text": "a\\"b"}'
    assert _run_chunks(["[1, ..", ".]"]) == "[1 ]"
    assert _run_chunks(['{"a": 1}', "\n", '{"b": 2}']) == '{"a": 1},{"b": 2}'


def test_output_is_final():
    repairer = IncrementalRepair()
    assert repairer.push('{"name": "Jo') == '{"name": "Jo'
    assert repairer.push('hn", "age": 3') == 'hn", "age": '
    assert repairer.end() == "3}"


def test_pending_comma_is_held_back():
    repairer = IncrementalRepair()
    assert repairer.push("[1,") == "[1"
    assert repairer.push("2]") == ",2]"


def test_snapshot_matches_end_without_changing_state():
    text = '{"a": [1, "tw'
    repairer = IncrementalRepair()
    pushed = repairer.push(text)
    first = repairer.snapshot()
    assert repairer.snapshot() == first

    other = IncrementalRepair()
    other.push(text)
    assert first == other.end()

    rest = repairer.push('o"]}')
    assert pushed + rest + repairer.end() == repair(text + 'o"]}')


def test_snapshot_does_not_report_repairs():
    events = []
    repairer = IncrementalRepair(on_repair=lambda kind, pos, note: events.append(kind))
    repairer.push('{"a": [1')
    repairer.snapshot()
    assert events == []
    repairer.end()
    assert [str(kind) for kind in events] == ["closed_array", "closed_object"]


def test_reset():
    repairer = create_incremental_repair()
    repairer.push('{"a": [1, {"b": "c')
    repairer.reset()
    assert repairer.depth == 0
    assert repairer.push("[1]") + repairer.end() == "[1]"


def test_multiple_roots_flag():
    repairer = IncrementalRepair()
    out = repairer.push('{"a":1}\n{"b":2}') + repairer.end()
    assert out == '{"a":1},{"b":2}'
    assert repairer.multiple_roots

    repairer.reset()
    repairer.push('{"a":1}')
    repairer.end()
    assert not repairer.multiple_roots


def test_stream_helpers():
    chunks = ['{"a":1}\n', '{"b":', "2"]
    assert repair_stream(chunks) == '[{"a":1},{"b":2}]'
    assert repair_stream(['{"a": [1', ", 2"]) == '{"a": [1, 2]}'

    fragments = list(iter_repair(['{"a": ', "tru"]))
    assert all(fragments)
    assert "".join(fragments) == '{"a": true}'


def main():
    print("🧪 Testing incremental repair...")
    test_single_push_matches_repair()
    test_every_split_point()
    test_random_partitions()
    test_one_character_at_a_time()
    test_lookahead_across_chunks()
    test_output_is_final()
    test_pending_comma_is_held_back()
    test_snapshot_matches_end_without_changing_state()
    test_snapshot_does_not_report_repairs()
    test_reset()
    test_multiple_roots_flag()
    test_stream_helpers()
    print("✅ Incremental tests passed")


if __name__ == "__main__":
    main()
