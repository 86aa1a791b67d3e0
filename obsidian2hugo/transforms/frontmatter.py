"""Front matter codec and metadata merging for obsidian2hugo.

Only the subset of YAML that notes actually use is understood: scalars,
inline ``[a, b]`` lists and indented ``- item`` lists. Anything else in the
block is skipped rather than rejected.
"""

import datetime
import math
import re
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import titlecase as tc

from obsidian2hugo.core.models import Advisory, INFO
from obsidian2hugo.core.slug import title_from_filename
from obsidian2hugo.transforms.code import protect_code, restore_code

FrontMatter = Dict[str, Any]

DELIMITER = "---"

PREFERRED_ORDER = ("title", "date", "draft", "tags", "math", "description")

LIST_ITEM_PATTERN = re.compile(r"^\s+-\s+(.*)$")
KEY_VALUE_PATTERN = re.compile(r"^([\w][\w.-]*)\s*:\s*(.*)$")
NUMBER_PATTERN = re.compile(r"^-?(?:0|[1-9]\d*)(\.\d+)?$")
H1_PATTERN = re.compile(r"^#\s+(.+)$", re.MULTILINE)

# Strings that would be read back as something else unless quoted
NEEDS_QUOTES_PATTERN = re.compile(r"[:#\[\]{}&*!|>'\"%@`,\n]")
RESERVED_PATTERN = re.compile(r"^(true|false|yes|no|null|~)$", re.IGNORECASE)
NUMERIC_PATTERN = re.compile(r"^-?\d+(\.\d+)?$")


def parse_scalar(raw: str) -> Any:
    """Coerce a raw front matter value to None, bool, number or string."""
    value = raw.strip()
    if value in ("", "~", "null"):
        return None
    if value in ("true", "yes"):
        return True
    if value in ("false", "no"):
        return False
    match = NUMBER_PATTERN.match(value)
    if match:
        return float(value) if match.group(1) else int(value)
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return _unescape_double(value[1:-1])
    if len(value) >= 2 and value[0] == value[-1] == "'":
        return value[1:-1].replace("''", "'")
    return value


def _unescape_double(inner: str) -> str:
    out = []
    chars = iter(inner)
    for ch in chars:
        if ch == "\\":
            nxt = next(chars, "")
            out.append("\n" if nxt == "n" else nxt)
        else:
            out.append(ch)
    return "".join(out)


def parse_front_matter(raw_text: str) -> Tuple[Optional[FrontMatter], str]:
    """Split a note into its front matter and body.

    Args:
        raw_text: Full note content

    Returns:
        Tuple of (front matter dict or None when there is no block, body)
    """
    # Only \n ends a line; other separators may appear inside values
    lines = raw_text.split("\n")
    if lines[0].rstrip("\r") != DELIMITER:
        return None, raw_text

    end = None
    for i in range(1, len(lines)):
        if lines[i].rstrip("\r") == DELIMITER:
            end = i
            break
    if end is None:
        return None, raw_text

    result: FrontMatter = {}
    current_key = None
    for line in lines[1:end]:
        line = line.rstrip("\r")
        if not line.strip():
            continue

        item = LIST_ITEM_PATTERN.match(line)
        if item and current_key is not None:
            if not isinstance(result.get(current_key), list):
                result[current_key] = []
            result[current_key].append(parse_scalar(item.group(1)))
            continue

        pair = KEY_VALUE_PATTERN.match(line)
        if not pair:
            continue
        key, raw_value = pair.group(1), pair.group(2).strip()
        current_key = key
        if raw_value.startswith("[") and raw_value.endswith("]"):
            inner = raw_value[1:-1]
            result[key] = [parse_scalar(part) for part in inner.split(",")] if inner.strip() else []
        else:
            result[key] = parse_scalar(raw_value)

    body = "\n".join(lines[end + 1:])
    # One blank line separates the block from the body
    if body.startswith("\r\n"):
        body = body[2:]
    elif body.startswith("\n"):
        body = body[1:]
    return result, body


def quote(value: str) -> str:
    """Quote a string only when leaving it bare would change its meaning."""
    if (
        value == ""
        or value != value.strip()
        or NEEDS_QUOTES_PATTERN.search(value)
        or RESERVED_PATTERN.match(value)
        or NUMERIC_PATTERN.match(value)
    ):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return f'"{escaped}"'
    return value


def _format_scalar(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return repr(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return f'"{value!r}"'
        # Plain decimal notation, never exponent form
        text = format(Decimal(repr(value)), "f")
        return text if "." in text else text + ".0"
    return quote(str(value))


def serialize_front_matter(fm: FrontMatter) -> str:
    """Render front matter as YAML lines, without the delimiters."""
    keys = [k for k in PREFERRED_ORDER if k in fm]
    keys += [k for k in fm if k not in PREFERRED_ORDER]

    lines = []
    for key in keys:
        value = fm[key]
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            if not value:
                continue
            lines.append(f"{key}:")
            lines.extend(f"  - {_format_scalar(item)}" for item in value)
        else:
            lines.append(f"{key}: {_format_scalar(value)}")
    return "\n".join(lines)


def first_heading(body: str) -> Optional[str]:
    """Return the first level-1 heading outside code, or None."""
    protected, originals = protect_code(body)
    match = H1_PATTERN.search(protected)
    if not match:
        return None
    return restore_code(match.group(1), originals).strip()


def existing_tags(fm: FrontMatter) -> List[str]:
    """Read tags from front matter. Handles both list and string formats."""
    tag_data = fm.get("tags")
    if isinstance(tag_data, list):
        return [str(tag) for tag in tag_data if tag is not None]
    if isinstance(tag_data, str) and tag_data:
        return [tag_data]
    return []


def merge_front_matter(
    existing: Optional[FrontMatter],
    body: str,
    file_name: str,
    inline_tags: List[str],
    has_math: bool,
    today: Optional[datetime.date] = None,
    titlecase_titles: bool = False,
) -> Tuple[FrontMatter, List[Advisory]]:
    """Fill in the metadata Hugo needs while keeping what the note declares.

    Args:
        existing: Parsed front matter of the note, if any
        body: Final note body
        file_name: Note file name, used as the last-resort title
        inline_tags: Tags harvested from the body
        has_math: Whether the math pass found any math
        today: Date to stamp when the note has none (default: today)
        titlecase_titles: Title-case titles derived from the file name

    Returns:
        Tuple of (merged front matter, advisories)
    """
    fm: FrontMatter = dict(existing or {})
    advisories: List[Advisory] = []

    if not fm.get("title"):
        heading = first_heading(body)
        if heading:
            fm["title"] = heading
        else:
            title = title_from_filename(file_name)
            fm["title"] = tc.titlecase(title) if titlecase_titles else title

    if not fm.get("date") and not fm.get("created"):
        fm["date"] = (today or datetime.date.today()).isoformat()

    if fm.get("draft") is None:
        fm["draft"] = False

    if inline_tags:
        current = existing_tags(fm)
        new_tags = [t for t in inline_tags if t not in current]
        fm["tags"] = list(dict.fromkeys(current + inline_tags))
        if current and new_tags:
            plural = "s" if len(new_tags) > 1 else ""
            advisories.append(Advisory(
                INFO,
                "Tags exist both in the article body and front matter. "
                f"All tags have been merged ({len(new_tags)} new tag{plural} added).",
            ))

    if has_math:
        fm["math"] = True

    return fm, advisories
