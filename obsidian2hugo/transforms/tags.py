"""Inline #tag extraction."""

import re
from typing import List

from obsidian2hugo.transforms.code import protect_code

_EXTENDED = "\u00C0-\u024F\u4e00-\u9fff"

# A # at line start or after whitespace/,;( followed by a letter, _, Latin
# extended or CJK character
INLINE_TAG_PATTERN = re.compile(
    r"(^|[\s,;(])#([a-zA-Z_%s][A-Za-z0-9_%s/-]*)" % (_EXTENDED, _EXTENDED),
    re.MULTILINE,
)

HEX_COLOR_PATTERN = re.compile(r"^[0-9a-fA-F]{3,8}$")


def extract_inline_tags(text: str) -> List[str]:
    """Collect distinct inline tags in first-seen order.

    Tags inside code are ignored and the text itself is left untouched.
    """
    protected, _ = protect_code(text)
    tags = []
    for match in INLINE_TAG_PATTERN.finditer(protected):
        tag = match.group(2)
        if HEX_COLOR_PATTERN.match(tag):
            continue
        if tag not in tags:
            tags.append(tag)
    return tags
