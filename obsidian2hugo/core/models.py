"""Data models for obsidian2hugo."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from obsidian2hugo.core.slug import slugify

# Advisory levels
ERROR = "error"
WARNING = "warning"
INFO = "info"
NOTICE = "notice"

LEVELS = (ERROR, WARNING, INFO, NOTICE)

# Diff markers
SAME = "same"
REMOVED = "removed"
ADDED = "added"

CONTENT_ROOT = "content"
DEFAULT_DIRECTORY = "posts"


def strip_md_extension(name: str) -> str:
    """Remove a trailing .md extension, case-insensitively."""
    if name.lower().endswith(".md"):
        return name[:-3]
    return name


@dataclass(frozen=True)
class SourceDocument:
    """One note as handed to the pipeline.

    ``raw_text`` is None when the source could not be read; the pipeline
    turns that into an error advisory instead of failing the batch.
    """
    id: str
    name: str
    raw_text: Optional[str]
    declared_slug: Optional[str] = None
    target_directory: str = DEFAULT_DIRECTORY

    @property
    def base_name(self) -> str:
        """Name used as the cross-reference lookup key."""
        return strip_md_extension(self.name)

    @property
    def slug(self) -> str:
        return self.declared_slug or slugify(self.base_name)

    @property
    def target_path(self) -> str:
        """Path of the generated post inside the site archive."""
        directory = self.target_directory or DEFAULT_DIRECTORY
        return f"{CONTENT_ROOT}/{directory}/{self.slug}.md"


@dataclass(frozen=True)
class Advisory:
    """A message attached to a document or batch. Never alters content."""
    level: str
    message: str

    def __post_init__(self):
        if self.level not in LEVELS:
            raise ValueError(f"Unknown advisory level: {self.level}")


@dataclass(frozen=True)
class TransformResult:
    """Outcome of running one document through the pipeline."""
    output_text: Optional[str]
    front_matter: Dict[str, Any]
    warnings: Tuple[Advisory, ...] = ()
    has_math: bool = False

    @property
    def ok(self) -> bool:
        return self.output_text is not None

    @classmethod
    def failure(cls, message: str) -> "TransformResult":
        return cls(output_text=None, front_matter={}, warnings=(Advisory(ERROR, message),))

    def with_warnings(self, extra: List[Advisory]) -> "TransformResult":
        """Return a copy with batch-level advisories appended."""
        if not extra:
            return self
        return TransformResult(
            output_text=self.output_text,
            front_matter=self.front_matter,
            warnings=self.warnings + tuple(extra),
            has_math=self.has_math,
        )


@dataclass
class BatchResult:
    """All per-document results of one batch run, in input order."""
    items: List[Tuple[SourceDocument, TransformResult]] = field(default_factory=list)
    duplicates: Tuple[str, ...] = ()

    @property
    def results(self) -> List[TransformResult]:
        return [result for _, result in self.items]

    @property
    def transformed(self) -> List[Tuple[SourceDocument, TransformResult]]:
        return [(doc, result) for doc, result in self.items if result.ok]

    @property
    def failed(self) -> List[SourceDocument]:
        return [doc for doc, result in self.items if not result.ok]

    @property
    def warning_count(self) -> int:
        """Number of error and warning advisories across the batch."""
        return sum(
            1 for result in self.results for w in result.warnings
            if w.level in (ERROR, WARNING)
        )

    @property
    def notice_count(self) -> int:
        """Number of info and notice advisories across the batch."""
        return sum(
            1 for result in self.results for w in result.warnings
            if w.level in (INFO, NOTICE)
        )


@dataclass(frozen=True)
class DiffAlignment:
    """Per-line markers for the original and transformed text.

    ``exact`` is False when the alignment was skipped for size; all markers
    are then ``same`` even though the texts may differ.
    """
    original: Tuple[str, ...]
    transformed: Tuple[str, ...]
    exact: bool = True


@dataclass(frozen=True)
class ManifestEntry:
    """A file in an output archive and where its bytes came from."""
    path: str
    source: str  # "existing" or "generated"
    content: bytes


@dataclass
class ExistingSite:
    """A previously exported Hugo site, keyed by normalized path."""
    files: Dict[str, bytes] = field(default_factory=dict)
    root_prefix: str = ""
    site_config_raw: Optional[str] = None
    site_info: Optional[Dict[str, str]] = None
    existing_posts: List[str] = field(default_factory=list)
    content_dirs: List[str] = field(default_factory=list)
