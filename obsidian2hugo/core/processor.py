"""Content processor for transforming Obsidian notes into Hugo posts."""

import datetime
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from obsidian2hugo.config import SiteConfig
from obsidian2hugo.core.models import (
    Advisory,
    BatchResult,
    DEFAULT_DIRECTORY,
    ExistingSite,
    SourceDocument,
    TransformResult,
    WARNING,
)
from obsidian2hugo.transforms.code import protect_code, restore_code
from obsidian2hugo.transforms.frontmatter import merge_front_matter, parse_front_matter, serialize_front_matter
from obsidian2hugo.transforms.links import rewrite_embeds, rewrite_links
from obsidian2hugo.transforms.math import transform_math
from obsidian2hugo.transforms.tags import extract_inline_tags


@dataclass(frozen=True)
class IndexEntry:
    slug: str
    target_directory: str


class ResolverIndex:
    """Read-only index mapping note base names to their post location.

    Built once per batch before any note is transformed; the first note
    seen under a base name owns the entry.
    """

    def __init__(self, entries: Mapping[str, IndexEntry], duplicates: Iterable[str] = ()):
        self._entries = MappingProxyType(dict(entries))
        self.duplicates: Tuple[str, ...] = tuple(duplicates)

    @classmethod
    def build(cls, documents: Iterable[SourceDocument]) -> "ResolverIndex":
        """Build an index from a batch of documents."""
        entries: Dict[str, IndexEntry] = {}
        duplicates: List[str] = []

        for doc in documents:
            base_name = doc.base_name
            if base_name in entries:
                if base_name not in duplicates:
                    duplicates.append(base_name)
                continue
            entries[base_name] = IndexEntry(doc.slug, doc.target_directory or DEFAULT_DIRECTORY)

        return cls(entries, duplicates)

    @classmethod
    def from_dict(cls, data: Mapping[str, str], target_directory: str = DEFAULT_DIRECTORY) -> "ResolverIndex":
        """Build an index from a base name -> slug dictionary."""
        return cls({name: IndexEntry(slug, target_directory) for name, slug in data.items()})

    def get(self, base_name: str) -> Optional[IndexEntry]:
        return self._entries.get(base_name)

    def __contains__(self, base_name: str) -> bool:
        return base_name in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class ContentProcessor:
    """Runs a single note through the conversion pipeline.

    Handles:
    - Front matter parsing and merging
    - Image embed and wikilink conversion, with code left untouched
    - LaTeX delimiter normalization
    - Inline tag collection
    """

    def __init__(
        self,
        index: ResolverIndex,
        config: Optional[SiteConfig] = None,
        today: Optional[datetime.date] = None,
    ):
        """Initialize ContentProcessor.

        Args:
            index: Resolver index for the whole batch
            config: Site configuration (math modes, title casing)
            today: Date stamped on notes without one (default: today)
        """
        self.index = index
        self.config = config or SiteConfig()
        self.today = today

    def process(self, document: SourceDocument) -> TransformResult:
        """Transform one note. Never raises; failures become error advisories."""
        if document.raw_text is None:
            return TransformResult.failure("File content not loaded")
        try:
            return self._transform(document)
        except Exception as e:
            return TransformResult.failure(f"Transformation failed: {e}")

    def _transform(self, document: SourceDocument) -> TransformResult:
        warnings: List[Advisory] = []

        existing, body = parse_front_matter(document.raw_text)

        # Links are rewritten with code protected; code goes back before the
        # math pass so backticks are never read as math delimiters
        text, code = protect_code(body)
        text = rewrite_embeds(text)
        text, link_warnings = rewrite_links(text, self.index)
        warnings.extend(link_warnings)
        text = restore_code(text, code)

        math = transform_math(
            text,
            alt_delimiters=self.config.math_alt_delimiters,
            alt_line_breaks=self.config.math_alt_line_breaks,
        )
        text = math.text
        warnings.extend(math.advisories)

        inline_tags = extract_inline_tags(text)

        fm, tag_warnings = merge_front_matter(
            existing,
            text,
            document.name,
            inline_tags,
            math.has_math,
            today=self.today,
            titlecase_titles=self.config.titlecase_titles,
        )
        warnings.extend(tag_warnings)

        return TransformResult(
            output_text=self.build_output(fm, text),
            front_matter=fm,
            warnings=tuple(warnings),
            has_math=math.has_math,
        )

    @staticmethod
    def build_output(front_matter: Dict, body: str) -> str:
        """Assemble the final post: front matter block, blank line, body."""
        return f"---\n{serialize_front_matter(front_matter)}\n---\n\n{body}"


def transform_batch(
    documents: List[SourceDocument],
    config: Optional[SiteConfig] = None,
    existing_site: Optional[ExistingSite] = None,
    max_workers: Optional[int] = None,
    today: Optional[datetime.date] = None,
) -> BatchResult:
    """Transform a batch of notes.

    The resolver index is fully built before any note is processed; notes
    are then independent and may run in a thread pool.

    Args:
        documents: Notes to convert
        config: Site configuration
        existing_site: Previously exported site, used to flag overwrites
        max_workers: Thread pool size; None or 1 processes sequentially
        today: Date stamped on notes without one

    Returns:
        BatchResult with one result per document, in input order
    """
    index = ResolverIndex.build(d for d in documents if d.raw_text is not None)
    processor = ContentProcessor(index, config, today=today)

    if max_workers and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(processor.process, documents))
    else:
        results = [processor.process(doc) for doc in documents]

    existing_posts = set(existing_site.existing_posts) if existing_site else set()
    path_counts = Counter(doc.target_path for doc, result in zip(documents, results) if result.ok)
    items = []
    for doc, result in zip(documents, results):
        if result.ok:
            extra = []
            if doc.base_name in index.duplicates:
                extra.append(Advisory(
                    WARNING,
                    f'Duplicate filename "{doc.name}" detected. Wikilink resolution may be ambiguous.',
                ))
            if path_counts[doc.target_path] > 1:
                extra.append(Advisory(
                    WARNING,
                    f'"{doc.target_path}" is produced by more than one note. Only the last one is kept.',
                ))
            if doc.target_path in existing_posts:
                extra.append(Advisory(
                    WARNING,
                    f'"{doc.target_path}" already exists in the uploaded Hugo site. It will be overwritten.',
                ))
            result = result.with_warnings(extra)
        items.append((doc, result))

    return BatchResult(items=items, duplicates=index.duplicates)
