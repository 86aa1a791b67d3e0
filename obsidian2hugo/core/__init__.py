"""Core components for obsidian2hugo."""

from obsidian2hugo.core.models import Advisory, BatchResult, DiffAlignment, ExistingSite, ManifestEntry, SourceDocument, TransformResult
from obsidian2hugo.core.discovery import NoteDiscovery
from obsidian2hugo.core.processor import ContentProcessor, IndexEntry, ResolverIndex, transform_batch
from obsidian2hugo.core.diff import compute_line_diff, render_unified
from obsidian2hugo.core.archive import assemble_posts, assemble_site, read_existing_site

__all__ = [
    "Advisory",
    "BatchResult",
    "DiffAlignment",
    "ExistingSite",
    "ManifestEntry",
    "SourceDocument",
    "TransformResult",
    "NoteDiscovery",
    "ContentProcessor",
    "IndexEntry",
    "ResolverIndex",
    "transform_batch",
    "compute_line_diff",
    "render_unified",
    "assemble_posts",
    "assemble_site",
    "read_existing_site",
]
