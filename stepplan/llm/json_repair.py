"""
Recovers the plan object from free-text model output.
What it handles:
- Commentary and ``` fences around the payload
- Truncated output (unclosed strings, objects and arrays, "..." elisions)
- Trailing commas before a closing bracket
- Steps arrays whose items lost their { } wrappers

And, the main purpose:
Turn unreliable model text into a candidate plan dict, or say why it can't.
Nothing in here raises for malformed input.
"""


import json
import re
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

from stepplan.core.logging import get_logger, snippet
from stepplan.llm.schemas import FallbackReason, ParseResult

log = get_logger("llm.json_repair")

_CLOSERS = {"{": "}", "[": "]"}
_FENCE_RE = re.compile(r"```[a-zA-Z0-9_-]*")
_ELLIPSIS_RE = re.compile(r"\.{3,}|…")
_TRAILING_COMMA_RE = re.compile(r"(?:,\s*)+([}\]])")
_PARTIAL_LITERAL_RE = re.compile(r"([:\[,]\s*)(t|tr|tru|f|fa|fal|fals|n|nu|nul)$")
_LITERALS = {"t": "true", "f": "false", "n": "null"}
_DANGLING_NUMBER_RE = re.compile(r"(\d)(?:\.|[eE][+-]?)$")
_LONE_MINUS_RE = re.compile(r"([:\[,]\s*)-$")
_BARE_STEPS_RE = re.compile(r'"steps"\s*:\s*\[\s*(?="stepNumber"\s*:)')
_STEP_KEY = '"stepNumber"'


@dataclass
class _ScanState:
    end: Optional[int] = None  # index just past the closer of the outermost object
    stack: List[str] = field(default_factory=list)
    in_string: bool = False
    escaped: bool = False
    string_start: int = -1
    string_is_key: bool = False
    pending_key_start: int = -1  # a key string was closed but its ':' never came

    @property
    def balanced(self) -> bool:
        return self.end is not None


def _scan(text: str, start: int = 0) -> _ScanState:
    """
    Walk text from `start` (an opening brace) tracking delimiter nesting,
    string literals and key position. Stops when the outermost delimiter
    closes. Closers that don't match the innermost open delimiter are skipped.
    """
    st = _ScanState()
    last_sig = ""
    for i in range(start, len(text)):
        ch = text[i]
        if st.in_string:
            if st.escaped:
                st.escaped = False
            elif ch == "\\":
                st.escaped = True
            elif ch == '"':
                st.in_string = False
                if st.string_is_key:
                    st.pending_key_start = st.string_start
                last_sig = ch
            continue

        if ch == '"':
            st.in_string = True
            st.string_start = i
            st.string_is_key = bool(st.stack) and st.stack[-1] == "{" and last_sig in ("{", ",")
            continue

        if ch == ":":
            st.pending_key_start = -1
        elif ch in _CLOSERS:
            st.stack.append(ch)
        elif ch in "}]" and st.stack and _CLOSERS[st.stack[-1]] == ch:
            st.stack.pop()
            if not st.stack:
                st.end = i + 1
                return st

        # elision dots are transparent for key detection
        if not ch.isspace() and ch not in ".…":
            last_sig = ch
    return st


def _segments(text: str) -> List[Tuple[bool, str]]:
    """Split text into (is_string_literal, chunk) pieces."""
    out: List[Tuple[bool, str]] = []
    i = 0
    n = len(text)
    while i < n:
        if text[i] == '"':
            j = i + 1
            while j < n:
                if text[j] == "\\":
                    j += 2
                    continue
                if text[j] == '"':
                    break
                j += 1
            out.append((True, text[i : j + 1]))
            i = j + 1
        else:
            j = text.find('"', i)
            j = n if j == -1 else j
            out.append((False, text[i:j]))
            i = j
    return out


def _outside_strings(text: str, fn: Callable[[str], str]) -> str:
    return "".join(chunk if is_str else fn(chunk) for is_str, chunk in _segments(text))


def strip_code_fences(text: str) -> str:
    return _outside_strings(text or "", lambda s: _FENCE_RE.sub("", s)).strip()


def strip_ellipses(text: str) -> str:
    return _outside_strings(text, lambda s: _ELLIPSIS_RE.sub("", s))


def strip_trailing_commas(text: str) -> str:
    """Drop commas that directly precede `}` or `]`. Idempotent."""
    return _outside_strings(text, lambda s: _TRAILING_COMMA_RE.sub(r"\1", s))


def has_ellipsis(text: str) -> bool:
    return any(not is_str and _ELLIPSIS_RE.search(chunk) for is_str, chunk in _segments(text))


def extract_object_span(text: str) -> Optional[str]:
    """
    Return the outermost object starting at the first `{`.
    If the object never closes, everything from the `{` on is returned.
    None when the text has no `{` at all.
    """
    start = (text or "").find("{")
    if start == -1:
        return None
    st = _scan(text, start)
    if st.balanced:
        return text[start : st.end]
    return text[start:].rstrip()


def needs_truncation_repair(span: str) -> bool:
    return not _scan(span).balanced or has_ellipsis(span)


def close_truncated(span: str) -> str:
    """
    Complete a cut-off object: finish or drop the dangling token, remove
    elisions, then append closers innermost-first for every open delimiter.
    """
    st = _scan(span)
    if st.balanced:
        return strip_trailing_commas(strip_ellipses(span[: st.end]))

    text = span
    if st.in_string:
        if st.string_is_key:
            text = text[: st.string_start]
        else:
            if st.escaped:
                text = text[:-1]
            text += '"'
    elif st.pending_key_start >= 0:
        text = text[: st.pending_key_start]

    text = strip_ellipses(text).rstrip()
    text = _PARTIAL_LITERAL_RE.sub(lambda m: m.group(1) + _LITERALS[m.group(2)[0]], text)
    text = _LONE_MINUS_RE.sub(r"\1", _DANGLING_NUMBER_RE.sub(r"\1", text)).rstrip()
    if text.endswith(","):
        text = text[:-1].rstrip()
    if text.endswith(":"):
        text += " null"

    text += "".join(_CLOSERS[c] for c in reversed(st.stack))
    return strip_trailing_commas(text)


def wrap_bare_steps(text: str) -> str:
    """
    Fix `"steps": [ "stepNumber": 1, ..., "stepNumber": 2, ... ]` by wrapping
    each item in braces. Stray closing braces inside the array are dropped.
    """
    m = _BARE_STEPS_RE.search(text)
    if not m:
        return text

    body: List[str] = []
    starts: List[int] = []
    depth = 0
    end = len(text)
    i = m.end()
    while i < len(text):
        ch = text[i]
        if ch == '"':
            j = i + 1
            while j < len(text) and text[j] != '"':
                j += 2 if text[j] == "\\" else 1
            literal = text[i : j + 1]
            if depth == 0 and literal == _STEP_KEY:
                starts.append(len(body))
            body.append(literal)
            i = j + 1
            continue
        if ch in _CLOSERS:
            depth += 1
        elif ch in "}]":
            if depth == 0:
                if ch == "]":
                    end = i
                    break
                i += 1
                continue
            depth -= 1
        body.append(ch)
        i += 1

    starts.append(len(body))
    items = []
    for a, b in zip(starts, starts[1:]):
        item = "".join(body[a:b]).strip().rstrip(",").strip()
        items.append("{" + item + "}")

    log.debug(f"Wrapped {len(items)} bare step(s) in objects")
    return text[: m.end()] + ", ".join(items) + text[end:]


def _load_object(text: str) -> dict:
    parsed: Any = json.loads(text)
    if not isinstance(parsed, dict):
        raise ValueError(f"JSON is not an object (got {type(parsed).__name__})")
    return parsed


def parse_plan_text(raw: str) -> ParseResult:
    """
    Extract the candidate plan from raw model text.
    At most one repair pass is applied after a failed parse.
    """
    cleaned = strip_code_fences(raw)
    span = extract_object_span(cleaned)
    if span is None:
        log.warning(f"No JSON object in planner output. Snippet={snippet(cleaned)}")
        return ParseResult(reason=FallbackReason.NO_STRUCTURED_PAYLOAD)

    repaired = False
    if needs_truncation_repair(span):
        span = close_truncated(span)
        repaired = True
        log.debug(f"Closed truncated planner output: {snippet(span)}")

    try:
        return ParseResult(candidate=_load_object(span), repaired=repaired)
    except (ValueError, RecursionError) as e:
        log.debug(f"Plan JSON parse failed (attempt1): {e}. Trying repair...")

    fixed = strip_trailing_commas(wrap_bare_steps(span))
    try:
        return ParseResult(candidate=_load_object(fixed), repaired=True)
    except (ValueError, RecursionError) as e:
        log.warning(f"Plan JSON parse failed after repair: {e}. Snippet={snippet(fixed)}")
        return ParseResult(reason=FallbackReason.UNREPAIRABLE_SYNTAX)
