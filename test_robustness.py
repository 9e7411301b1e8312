"""
Test script for robustness: repair must never raise, and realistic malformed
LLM output must come back as parseable JSON.
"""

import json
import random

from jsonmend import IncrementalRepair, repair

MALFORMED_CORPUS = [
    '{"users": [{"name": "A", "tags": ["x", "y"',
    '{"a": True, "b": None, "c": False}',
    "{a: 1, b: [1, 2,], c: {d: 'e'},}",
    '// header comment\n{"a": 1}',
    '{"a": 1 /* c */, "b": [1, 2, ...]}',
    '{"msg": "unterminated',
    '[{"a": 1}, {"b": ',
    '{"a": "x" "y"}',
    '{"count": NumberInt(5), "id": ObjectId("abc")}',
    '```json\n{"a": [1, 2\n',
    'callback({"a": 1, "b": tru',
    '{"a": [1, 2}',
    '{"a": 1]}',
    '{"a": 1 "b": 2}',
    "[1 2 3]",
    '{"a" 1}',
    '{"a": -',
    '{"text": "line1\nline2"}',
    '{{"a": 1}}',
    '{"a": }',
    '{"a":1}\n{"b":2}\n',
    '{"text": "He said \\"hi',
    '{"pi": 3.',
    "[,1,,2,]",
    '{"a": {"b": {"c": [',
    '{"k": "v",, "x": 1}',
    '{\\"a\\": \\"b\\"}',
]

FUZZ_ALPHABET = '{}[]:,"\'\\/*. +-0123456789tfnTFNabc()\n\t' + chr(0x201C) + chr(0x201D)


def test_malformed_corpus_repairs_to_valid_json():
    for text in MALFORMED_CORPUS:
        repaired = repair(text)
        try:
            json.loads(repaired)
        except ValueError:
            raise AssertionError(f"{text!r} repaired to invalid {repaired!r}")


def test_never_raises_on_garbage():
    rng = random.Random(1234)
    for _ in range(500):
        text = "".join(rng.choice(FUZZ_ALPHABET) for _ in range(rng.randint(0, 60)))
        assert isinstance(repair(text), str)


def test_fuzz_chunking_invariance():
    rng = random.Random(99)
    for _ in range(300):
        text = "".join(rng.choice(FUZZ_ALPHABET) for _ in range(rng.randint(1, 40)))
        whole = IncrementalRepair()
        expected = whole.push(text) + whole.end()

        chunked = IncrementalRepair()
        out = []
        pos = 0
        while pos < len(text):
            size = rng.randint(1, 4)
            out.append(chunked.push(text[pos:pos + size]))
            pos += size
        out.append(chunked.end())
        assert "".join(out) == expected, text


def test_stray_closers_only():
    assert repair("]]]}}}") == ""


def test_binary_noise():
    noise = bytes(range(256)).decode("latin-1")
    assert isinstance(repair(noise), str)


def test_deep_nesting():
    assert isinstance(repair("[" * 10000), str)
    assert isinstance(repair("{" * 10000), str)
    assert json.loads(repair("[" * 200)) is not None
    assert json.loads(repair('{"a": ' * 200)) is not None


def main():
    print("🧪 Testing robustness...")
    test_malformed_corpus_repairs_to_valid_json()
    test_never_raises_on_garbage()
    test_fuzz_chunking_invariance()
    test_stray_closers_only()
    test_binary_noise()
    test_deep_nesting()
    print("✅ Robustness tests passed")


if __name__ == "__main__":
    main()
