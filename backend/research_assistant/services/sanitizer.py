"""
Post-processing for model answers.

The prompt asks for dash bullets and numbered sections with no empty items,
but models still emit stray markers ("-", "3.", "b)") and runs of blank
lines. This pass removes those lines without touching any line that carries
content.
"""
from __future__ import annotations

import re
from typing import List

# A list marker with nothing after it: "-", "*", "•", "1.", "12)", "a.", "B)"
_EMPTY_ITEM_RE = re.compile(r"^(?:[-*•]|\d+[.)]|[A-Za-z][.)])$")
_LINE_SPLIT_RE = re.compile(r"\r?\n")


def is_empty_list_item(line: str) -> bool:
    return bool(_EMPTY_ITEM_RE.match(line.strip()))


def sanitize_llm_output(text: str | None) -> str:
    """
    Drop whitespace-only and marker-only lines.

    With every blank line dropped no blank run can remain, so the output is
    the surviving content lines, unchanged and in order. Idempotent.
    """
    out: List[str] = [
        line
        for line in _LINE_SPLIT_RE.split(text or "")
        if line.strip() and not is_empty_list_item(line)
    ]
    return "\n".join(out)
