import re

from jsonmend.charclass import is_identifier_char, is_identifier_start, is_whitespace

# Compile regex patterns once for better performance
_FENCE = "```"
_ESCAPED_JSON_START = re.compile(r"[{\[]\\")
_ESCAPE_SEQUENCE = re.compile(r"\\([\"\\nrt])")
_UNESCAPE_MAP = {'"': '"', "\\": "\\", "n": "\n", "r": "\r", "t": "\t"}


def _skip_whitespace(text: str, pos: int) -> int:
    while pos < len(text) and is_whitespace(text[pos]):
        pos += 1
    return pos


def _skip_whitespace_back(text: str, end: int) -> int:
    while end > 0 and is_whitespace(text[end - 1]):
        end -= 1
    return end


def strip_code_fence(text: str) -> str:
    """Return the body of a leading ``` fence, or the text unchanged."""
    start = _skip_whitespace(text, 0)
    if not text.startswith(_FENCE, start):
        return text

    # Skip the language tag line
    body_start = start + len(_FENCE)
    while body_start < len(text) and text[body_start] not in "\r\n":
        body_start += 1
    if body_start < len(text):
        body_start += 1

    close = text.find(_FENCE, body_start)
    if close == -1:
        return text[body_start:]
    return text[body_start:close]


def strip_jsonp(text: str) -> str:
    """Unwrap ``callback({...})`` / ``callback([...]);`` style payloads."""
    pos = _skip_whitespace(text, 0)
    if pos >= len(text) or not is_identifier_start(text[pos]):
        return text
    while pos < len(text) and is_identifier_char(text[pos]):
        pos += 1
    pos = _skip_whitespace(text, pos)
    if pos >= len(text) or text[pos] != "(":
        return text
    payload_start = _skip_whitespace(text, pos + 1)
    if payload_start >= len(text) or text[payload_start] not in "{[":
        return text

    payload = text[payload_start:]
    end = _skip_whitespace_back(payload, len(payload))
    if end > 0 and payload[end - 1] == ";":
        end -= 1
    end = _skip_whitespace_back(payload, end)
    if end > 0 and payload[end - 1] == ")":
        end -= 1
    return payload[:end]


def unescape_stringified(text: str) -> str:
    """Undo one level of string escaping when text looks like ``{\\"a\\": 1}``."""
    start = _skip_whitespace(text, 0)
    if not _ESCAPED_JSON_START.match(text, start):
        return text
    return _ESCAPE_SEQUENCE.sub(lambda m: _UNESCAPE_MAP[m.group(1)], text)


def preprocess(text: str) -> str:
    """
    Strip the wrappers LLMs commonly put around a JSON payload.

    Applied in order: markdown code fence, JSONP call, escaped (stringified)
    JSON. Pure and total; text without any wrapper is returned unchanged.
    """
    text = strip_code_fence(text)
    text = strip_jsonp(text)
    return unescape_stringified(text)
