"""LaTeX math delimiter handling for Hugo's goldmark passthrough."""

import re
from dataclasses import dataclass
from typing import List

from obsidian2hugo.core.models import Advisory, INFO, NOTICE
from obsidian2hugo.transforms.code import protect_code, restore_code

DISPLAY_PATTERN = re.compile(r"\$\$([\s\S]*?)\$\$")

# A $ not next to another $, single line, shortest match
INLINE_PATTERN = re.compile(r"(^|[^$])\$([^$\n]+?)\$(?=[^$]|\Z)")

UNESCAPED_ASTERISK = re.compile(r"(?<!\\)\*")
LINE_BREAK = re.compile(r"(?<!\\)\\\\(?!\\)")

_DISPLAY_HOLDER = "\x00MATH{}\x00"
_DISPLAY_HOLDER_PATTERN = re.compile("\x00MATH(\\d+)\x00")


@dataclass(frozen=True)
class MathResult:
    text: str
    has_math: bool
    advisories: List[Advisory]


def escape_asterisks(math: str) -> str:
    """Escape asterisks so goldmark does not read them as emphasis."""
    return UNESCAPED_ASTERISK.sub(r"\\*", math)


def transform_math(text: str, alt_delimiters: bool = False, alt_line_breaks: bool = False) -> MathResult:
    """Normalize display and inline math.

    Args:
        text: Note body
        alt_delimiters: Wrap display math in $$$$ instead of $$
        alt_line_breaks: Double standalone \\\\ line breaks in display math

    Returns:
        MathResult with the rewritten text, whether math was found and a
        single advisory describing the mode used
    """
    safe, code = protect_code(text)
    displays: List[str] = []
    found_inline = False

    def replace_display(match: re.Match) -> str:
        inner = escape_asterisks(match.group(1))
        if alt_line_breaks:
            inner = LINE_BREAK.sub(lambda _: "\\\\\\\\", inner)
        delimiter = "$$$$" if alt_delimiters else "$$"
        displays.append(f"{delimiter}{inner}{delimiter}")
        return _DISPLAY_HOLDER.format(len(displays) - 1)

    def replace_inline(match: re.Match) -> str:
        nonlocal found_inline
        pre, inner = match.group(1), match.group(2)
        # Looks like currency: $5, $10.00
        if inner.strip()[:1].isdigit():
            return match.group(0)
        found_inline = True
        return f"{pre}${escape_asterisks(inner)}$"

    safe = DISPLAY_PATTERN.sub(replace_display, safe)
    safe = INLINE_PATTERN.sub(replace_inline, safe)
    safe = _DISPLAY_HOLDER_PATTERN.sub(lambda m: displays[int(m.group(1))], safe)

    has_math = bool(displays) or found_inline
    advisories = [_mode_advisory(alt_delimiters, alt_line_breaks)] if has_math else []
    return MathResult(restore_code(safe, code), has_math, advisories)


def _mode_advisory(alt_delimiters: bool, alt_line_breaks: bool) -> Advisory:
    if not alt_delimiters and not alt_line_breaks:
        return Advisory(
            NOTICE,
            "LaTeX detected. Standard delimiters are used. If math does not render "
            "correctly, try enabling alternative $$$$ delimiters or \\\\\\\\ line breaks.",
        )
    modes = []
    if alt_delimiters:
        modes.append("display math uses $$$$ delimiters")
    if alt_line_breaks:
        modes.append("\\\\ in display math is converted to \\\\\\\\")
    return Advisory(INFO, "LaTeX detected. Alternative mode: " + "; ".join(modes) + ".")
