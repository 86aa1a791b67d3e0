"""
obsidian2hugo - Convert Obsidian notes into Hugo posts

Turns a batch of Obsidian vault notes into Hugo (PaperMod) content with
support for:
- Wikilink and image embed conversion
- LaTeX delimiter normalization
- Inline tag collection into front matter
- Merging into a previously exported Hugo site archive
"""

from obsidian2hugo.config import SiteConfig, load_config
from obsidian2hugo.core.models import Advisory, BatchResult, SourceDocument, TransformResult
from obsidian2hugo.core.discovery import NoteDiscovery
from obsidian2hugo.core.processor import ContentProcessor, ResolverIndex, transform_batch

__version__ = "0.1.0"

__all__ = [
    "SiteConfig",
    "load_config",
    "Advisory",
    "BatchResult",
    "SourceDocument",
    "TransformResult",
    "NoteDiscovery",
    "ContentProcessor",
    "ResolverIndex",
    "transform_batch",
]
