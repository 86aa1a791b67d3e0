"""Wikilink and image embed rewriting."""

import re
from typing import TYPE_CHECKING, List, Set, Tuple

from obsidian2hugo.core.models import Advisory, DEFAULT_DIRECTORY, WARNING
from obsidian2hugo.core.slug import slugify

if TYPE_CHECKING:
    from obsidian2hugo.core.processor import ResolverIndex

IMAGE_EXTENSIONS = ("png", "jpg", "jpeg", "gif", "webp", "svg", "bmp", "tiff")

_EXT_GROUP = "|".join(IMAGE_EXTENSIONS)

# Pattern for image embeds: ![[image.png]]
IMAGE_EMBED_PATTERN = re.compile(r"!\[\[([^\]]+\.(?:%s))\]\]" % _EXT_GROUP, re.IGNORECASE)

# Pattern for wikilinks: [[target]] or [[target|display]], with an optional leading !
WIKILINK_PATTERN = re.compile(r"(!?)\[\[([^\]]+)\]\]")

IMAGE_TARGET_PATTERN = re.compile(r"\.(?:%s)$" % _EXT_GROUP, re.IGNORECASE)


def rewrite_embeds(text: str) -> str:
    """Rewrite ``![[image.ext]]`` embeds to ``![](image.ext)``.

    Must run before rewrite_links, which would otherwise turn the embed
    into a page link.
    """
    return IMAGE_EMBED_PATTERN.sub(lambda m: f"![]({m.group(1)})", text)


def _anchor(fragment: str) -> str:
    anchor = slugify(fragment)
    return f"#{anchor}" if anchor else ""


def rewrite_links(text: str, index: "ResolverIndex") -> Tuple[str, List[Advisory]]:
    """Rewrite wikilinks to absolute Hugo post links.

    Args:
        text: Note body with code already protected
        index: Batch-wide resolver index

    Returns:
        Tuple of (rewritten text, advisories for unresolved targets)
    """
    warnings: List[Advisory] = []
    unresolved: Set[str] = set()

    def replace_link(match: re.Match) -> str:
        bang, inner = match.group(1), match.group(2)

        if "|" in inner:
            target, display = inner.split("|", 1)
            target, display = target.strip(), display.strip()
        else:
            target = display = inner.strip()

        # Embed syntax the embed pass did not catch, e.g. [[image.png]]
        if IMAGE_TARGET_PATTERN.search(target):
            alt = display if display != target else ""
            return f"![{alt}]({target})"

        base, _, fragment = target.partition("#")
        base = base.strip()
        section = _anchor(fragment) if fragment else ""

        if not base:
            # Section link within the same page
            return f"{bang}[{display}]({section})"

        entry = index.get(base)
        if entry is not None:
            return f"{bang}[{display}](/{entry.target_directory}/{entry.slug}/{section})"

        if base not in unresolved:
            unresolved.add(base)
            warnings.append(Advisory(
                WARNING,
                f'Wikilink target "{base}" not found in uploaded files. '
                "Link generated as best-effort.",
            ))
        return f"{bang}[{display}](/{DEFAULT_DIRECTORY}/{slugify(base)}/{section})"

    result = WIKILINK_PATTERN.sub(replace_link, text)
    return result, warnings
