"""
Test script for pulling JSON out of LLM prose.
"""

from jsonmend import contains_json, extract_all_json, extract_json, repair, strip_llm_wrapper
from jsonmend.extract import find_json_blocks, strip_thinking_blocks


def test_extract_from_prose():
    assert extract_json('Sure! {"name": "John"} Hope this helps!') == '{"name": "John"}'
    assert extract_json("The data is: [1, 2, 3] as requested.") == "[1, 2, 3]"


def test_thinking_blocks_are_skipped():
    text = '<thought>{"draft": 1}</thought>\n{"result": true}'
    assert extract_json(text) == '{"result": true}'
    assert extract_json(text, strip_thinking=False) == '{"draft": 1}'
    assert strip_thinking_blocks("<THINK>hmm</THINK>ok") == "ok"


def test_extract_all_and_largest():
    text = 'First: {"a": 1} Second: {"bb": [1, 2, 3]}'
    assert extract_all_json(text) == ['{"a": 1}', '{"bb": [1, 2, 3]}']
    assert extract_json(text, prefer_largest=True) == '{"bb": [1, 2, 3]}'


def test_brackets_inside_strings():
    assert extract_json('{"a": "}"} tail') == '{"a": "}"}'
    assert find_json_blocks('x {"a": "\\"}"} y') == ['{"a": "\\"}"}']


def test_unterminated_block_runs_to_end():
    block = extract_json('Result: {"a": [1, 2')
    assert block == '{"a": [1, 2'
    assert repair(block) == '{"a": [1, 2]}'


def test_no_json_returns_input():
    assert extract_json("no json here") == "no json here"
    assert extract_all_json("no json here") == []


def test_contains_json():
    assert contains_json('x {"a": 1}')
    assert contains_json("[1, 2]")
    assert not contains_json("no braces")
    assert not contains_json("{ hello }")


def test_strip_llm_wrapper():
    text = 'Here is the JSON:\n```json\n{"a": 1}\n```\nHope this helps!'
    assert strip_llm_wrapper(text) == '{"a": 1}'


def main():
    print("🧪 Testing extraction...")
    test_extract_from_prose()
    test_thinking_blocks_are_skipped()
    test_extract_all_and_largest()
    test_brackets_inside_strings()
    test_unterminated_block_runs_to_end()
    test_no_json_returns_input()
    test_contains_json()
    test_strip_llm_wrapper()
    print("✅ Extraction tests passed")


if __name__ == "__main__":
    main()
