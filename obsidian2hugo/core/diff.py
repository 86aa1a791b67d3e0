"""Line-level diff between a note and its converted output."""

from typing import List

from obsidian2hugo.core.models import ADDED, DiffAlignment, REMOVED, SAME

# Above this many line pairs the LCS table is not built
MAX_CELLS = 4_000_000


def compute_line_diff(original: str, transformed: str) -> DiffAlignment:
    """Align two texts line by line using a longest common subsequence.

    When both an added and a removed step are equally good, the added step
    is taken first. This only changes which of two equivalent alignments is
    shown.

    Args:
        original: Text before conversion
        transformed: Text after conversion

    Returns:
        DiffAlignment with one marker per original line and one per
        transformed line. For very large inputs every marker is ``same`` and
        ``exact`` is False.
    """
    old_lines = (original or "").split("\n")
    new_lines = (transformed or "").split("\n")
    m, n = len(old_lines), len(new_lines)

    if m * n > MAX_CELLS:
        return DiffAlignment((SAME,) * m, (SAME,) * n, exact=False)

    table = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(1, m + 1):
        row, prev = table[i], table[i - 1]
        old = old_lines[i - 1]
        for j in range(1, n + 1):
            if old == new_lines[j - 1]:
                row[j] = prev[j - 1] + 1
            else:
                row[j] = max(prev[j], row[j - 1])

    old_markers: List[str] = []
    new_markers: List[str] = []
    i, j = m, n
    while i > 0 or j > 0:
        if i > 0 and j > 0 and old_lines[i - 1] == new_lines[j - 1]:
            old_markers.append(SAME)
            new_markers.append(SAME)
            i -= 1
            j -= 1
        elif j > 0 and (i == 0 or table[i][j - 1] >= table[i - 1][j]):
            new_markers.append(ADDED)
            j -= 1
        else:
            old_markers.append(REMOVED)
            i -= 1

    old_markers.reverse()
    new_markers.reverse()
    return DiffAlignment(tuple(old_markers), tuple(new_markers))


def render_unified(original: str, transformed: str, alignment: DiffAlignment) -> List[str]:
    """Merge an alignment into one listing prefixed with '  ', '- ' or '+ '."""
    old_lines = (original or "").split("\n")
    new_lines = (transformed or "").split("\n")

    if not alignment.exact:
        return [f"  {line}" for line in new_lines]

    out = []
    i = j = 0
    while i < len(old_lines) or j < len(new_lines):
        if i < len(old_lines) and alignment.original[i] == REMOVED:
            out.append(f"- {old_lines[i]}")
            i += 1
        elif j < len(new_lines) and alignment.transformed[j] == ADDED:
            out.append(f"+ {new_lines[j]}")
            j += 1
        else:
            out.append(f"  {old_lines[i]}")
            i += 1
            j += 1
    return out
