"""
Locate JSON inside messy LLM output (prose, thinking blocks, markdown).

    extract_json('Sure! Here is the data: {"name": "John"} Hope this helps!')
    # -> '{"name": "John"}'
"""

import re
from typing import List

# Compile regex patterns once for better performance
THINKING_PATTERNS = [
    re.compile(r"<thought>.*?</thought>", re.IGNORECASE | re.DOTALL),
    re.compile(r"<thinking>.*?</thinking>", re.IGNORECASE | re.DOTALL),
    re.compile(r"<think>.*?</think>", re.IGNORECASE | re.DOTALL),
    re.compile(r"<reasoning>.*?</reasoning>", re.IGNORECASE | re.DOTALL),
    re.compile(r"<scratchpad>.*?</scratchpad>", re.IGNORECASE | re.DOTALL),
    re.compile(r"<internal>.*?</internal>", re.IGNORECASE | re.DOTALL),
]

_MARKDOWN_BLOCK = re.compile(r"```(?:json|JSON)?\s*\n?(.*?)\n?```", re.DOTALL)
_PROSE_LEAD_IN = re.compile(
    r"^(?:Here(?:'s| is) (?:the |your )?(?:JSON|data|response|result)[:\s]*)",
    re.IGNORECASE | re.MULTILINE,
)
_PROSE_SIGN_OFF = re.compile(
    r"(?:Hope this helps!?|Let me know if you (?:need|have) .*?|Is there anything else.*?)$",
    re.IGNORECASE | re.MULTILINE,
)
_HAS_OPENER = re.compile(r"[{\[]")
_LOOKS_LIKE_JSON = re.compile(r"[{\[]\s*(?:\"|\d|true|false|null|[{\[])")


def strip_thinking_blocks(text: str) -> str:
    for pattern in THINKING_PATTERNS:
        text = pattern.sub("", text)
    return text


def find_json_blocks(text: str) -> List[str]:
    """
    Return every top-level ``{...}`` / ``[...]`` span in ``text``.

    Only the opener's own bracket type is counted, and brackets inside
    double-quoted strings are ignored. A block that never closes runs to the
    end of the text so it can still be repaired.
    """
    blocks = []
    length = len(text)
    i = 0
    while i < length:
        opener = text[i]
        if opener not in "{[":
            i += 1
            continue

        closer = "}" if opener == "{" else "]"
        start = i
        depth = 1
        in_string = False
        escaped = False
        i += 1
        while i < length and depth > 0:
            c = text[i]
            if escaped:
                escaped = False
            elif c == "\\" and in_string:
                escaped = True
            elif c == '"':
                in_string = not in_string
            elif not in_string:
                if c == opener:
                    depth += 1
                elif c == closer:
                    depth -= 1
            i += 1

        blocks.append(text[start:i])
    return blocks


def extract_json(text: str, strip_thinking: bool = True, prefer_largest: bool = False) -> str:
    """
    Return the first (or the largest) JSON block found in ``text``.

    The input is returned unchanged when it contains no block at all.
    """
    cleaned = strip_thinking_blocks(text) if strip_thinking else text
    blocks = find_json_blocks(cleaned)
    if not blocks:
        return text
    if prefer_largest:
        return max(blocks, key=len)
    return blocks[0]


def extract_all_json(text: str, strip_thinking: bool = True) -> List[str]:
    if strip_thinking:
        text = strip_thinking_blocks(text)
    return find_json_blocks(text)


def contains_json(text: str) -> bool:
    """Cheap check for something that starts like a JSON object or array."""
    if not _HAS_OPENER.search(text):
        return False
    return bool(_LOOKS_LIKE_JSON.search(text))


def strip_llm_wrapper(text: str) -> str:
    """Remove thinking blocks, markdown fences and chatty prose, then extract."""
    text = strip_thinking_blocks(text)
    text = _MARKDOWN_BLOCK.sub(r"\1", text)
    text = _PROSE_LEAD_IN.sub("", text)
    text = _PROSE_SIGN_OFF.sub("", text)
    return extract_json(text.strip())
