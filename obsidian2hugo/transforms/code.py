"""Code region protection.

Fenced blocks and inline code spans are swapped for indexed placeholders so
that the link, math and tag passes never see their contents.
"""

import re
from typing import List, Tuple

# Fenced ``` blocks first, then single-line `inline` spans
CODE_PATTERN = re.compile(r"```[\s\S]*?```|`[^`\n]+`")

PLACEHOLDER_PATTERN = re.compile("\x00CODE(\\d+)\x00")


def placeholder(index: int) -> str:
    return f"\x00CODE{index}\x00"


def split_code_spans(text: str) -> List[Tuple[bool, str]]:
    """Classify text into (is_code, chunk) spans, in order."""
    spans = []
    pos = 0
    for match in CODE_PATTERN.finditer(text):
        if match.start() > pos:
            spans.append((False, text[pos:match.start()]))
        spans.append((True, match.group(0)))
        pos = match.end()
    if pos < len(text):
        spans.append((False, text[pos:]))
    return spans


def protect_code(text: str) -> Tuple[str, List[str]]:
    """Replace code regions with placeholders.

    Returns:
        Tuple of (protected text, original code regions by index)
    """
    originals: List[str] = []
    parts = []
    for is_code, chunk in split_code_spans(text):
        if is_code:
            parts.append(placeholder(len(originals)))
            originals.append(chunk)
        else:
            parts.append(chunk)
    return "".join(parts), originals


def restore_code(text: str, originals: List[str]) -> str:
    """Put the code regions recorded by protect_code back in place."""
    if not originals:
        return text
    return PLACEHOLDER_PATTERN.sub(lambda m: originals[int(m.group(1))], text)
