"""Best-effort JSON extraction from model message content.

Handles: already-parsed objects, chunked content arrays, direct JSON,
markdown fences, JSON embedded in prose, <think>...</think> reasoning
blocks, and lightly malformed JSON (bare keys, single quotes, trailing
commas). Never raises; unparseable text degrades to ``{"summary": text}``.
"""

import json
import logging
import re

logger = logging.getLogger(__name__)

_THINK_RE = re.compile(r"<think>.*?</think>", re.DOTALL)
_FENCE_RE = re.compile(r"```\s*(?:json\b)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)

_FENCE_MARKER_RE = re.compile(r"```\s*(?:json\b)?", re.IGNORECASE)
_BARE_KEY_RE = re.compile(r"([,{]\s*)([A-Za-z_][A-Za-z0-9_]*?)\s*:")
_SINGLE_QUOTED_RE = re.compile(r"'([^'\\]*(?:\\.[^'\\]*)*)'")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")

_CLOSERS = {"}": "{", "]": "["}


def extract_payload(content: object) -> object:
    """Convert raw message content into a parsed payload.

    Returns a dict or list parsed from the content, the content itself when
    it is already a dict, ``{}`` for empty input, or ``{"summary": text}``
    when no JSON could be recovered.
    """
    if not content:
        return {}

    if isinstance(content, list):
        content = _join_chunks(content)
        if not content:
            return {}

    if isinstance(content, dict):
        return content

    if not isinstance(content, str):
        return {}

    trimmed = content.strip()
    if not trimmed:
        return {}

    parsed = parse_json_text(trimmed)
    if parsed is not None:
        return parsed

    logger.warning("Could not parse JSON from model response (%d chars), keeping it as summary", len(trimmed))
    return {"summary": trimmed}


def parse_json_text(text: str) -> dict | list | None:
    """Run the layered parse strategies on text; None if all of them fail."""
    cleaned = _THINK_RE.sub("", text).strip()
    if not cleaned:
        return None

    parsed = _loads_container(cleaned)
    if parsed is not None:
        return parsed

    parsed = _parse_fence_or_slice(cleaned)
    if parsed is not None:
        return parsed

    if "{" in cleaned or "[" in cleaned:
        fixed = relax_fix_json(cleaned)
        parsed = _parse_fence_or_slice(fixed)
        if parsed is not None:
            logger.info("Recovered JSON from model response after relaxed repair")
            return parsed
        return _loads_container(fixed)

    return None


def match_code_fence(text: str) -> str | None:
    """Return the interior of the first ``` fenced block, if any."""
    match = _FENCE_RE.search(text)
    if match is None:
        return None
    return match.group(1).strip()


def find_first_json_slice(text: str) -> str | None:
    """Return the first balanced {...} or [...] substring of text.

    Brackets inside string literals are ignored. A closer that does not
    match the innermost opener aborts the scan.
    """
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return None
    start = min(starts)

    stack: list[str] = []
    in_string = False
    escape = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch in "{[":
            stack.append(ch)
        elif ch in _CLOSERS:
            if not stack or stack[-1] != _CLOSERS[ch]:
                return None
            stack.pop()
            if not stack:
                return text[start:i + 1]

    return None


def relax_fix_json(text: str) -> str:
    """Apply lossy repairs for common near-JSON mistakes."""
    fixed = _FENCE_MARKER_RE.sub("", text).replace("```", "")
    fixed = _BARE_KEY_RE.sub(r'\1"\2":', fixed)
    fixed = _SINGLE_QUOTED_RE.sub(r'"\1"', fixed)
    fixed = _TRAILING_COMMA_RE.sub(r"\1", fixed)
    return fixed


def _join_chunks(chunks: list) -> str:
    parts = []
    for chunk in chunks:
        if isinstance(chunk, str):
            parts.append(chunk)
        elif isinstance(chunk, dict) and isinstance(chunk.get("text"), str):
            parts.append(chunk["text"])
    return "".join(parts).strip()


def _parse_fence_or_slice(text: str) -> dict | list | None:
    fenced = match_code_fence(text)
    if fenced:
        parsed = _loads_container(fenced)
        if parsed is not None:
            return parsed

    json_slice = find_first_json_slice(text)
    if json_slice:
        return _loads_container(json_slice)

    return None


def _loads_container(text: str) -> dict | list | None:
    try:
        result = json.loads(text)
    except (ValueError, RecursionError):
        return None
    if isinstance(result, (dict, list)):
        return result
    return None
