"""Note discovery: reads Obsidian notes from disk into SourceDocuments."""

from pathlib import Path
from typing import Dict, List, Optional

from obsidian2hugo.core.models import DEFAULT_DIRECTORY, SourceDocument, strip_md_extension
from obsidian2hugo.transforms.frontmatter import parse_front_matter


class NoteDiscovery:
    """Finds the Markdown notes to convert in one or more folders."""

    def __init__(
        self,
        source_paths: List[Path],
        default_directory: str = DEFAULT_DIRECTORY,
        directory_overrides: Optional[Dict[str, str]] = None,
    ):
        """Initialize NoteDiscovery.

        Args:
            source_paths: Note files or folders containing notes
            default_directory: Content subdirectory for notes without an override
            directory_overrides: Base name -> content subdirectory
        """
        self.source_paths = [Path(p) for p in source_paths]
        self.default_directory = default_directory
        self.directory_overrides = dict(directory_overrides or {})

    def discover_all(self) -> List[SourceDocument]:
        """Load every note under the source paths.

        Returns:
            List of SourceDocument, sorted by path within each folder

        Raises:
            FileNotFoundError: If none of the source paths exist
        """
        existing = [p for p in self.source_paths if p.exists()]

        for p in self.source_paths:
            if not p.exists():
                print(f"Warning: Source path not found: {p}")

        if not existing:
            paths = ', '.join(str(p) for p in self.source_paths)
            raise FileNotFoundError(f"No source paths found: {paths}")

        documents = []
        seen = set()
        for source in existing:
            note_paths = [source] if source.is_file() else sorted(source.glob("*.md"))
            for note_path in note_paths:
                if note_path.suffix.lower() != ".md" or note_path.resolve() in seen:
                    continue
                seen.add(note_path.resolve())
                documents.append(self.load(note_path))

        return documents

    def load(self, file_path: Path) -> SourceDocument:
        """Read one note. Unreadable files yield a document without text.

        The slug may be declared in the note's front matter.
        """
        file_path = Path(file_path)
        try:
            raw_text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            print(f"Warning: Failed to read {file_path.name}: {e}")
            raw_text = None

        declared_slug = None
        if raw_text is not None:
            frontmatter, _ = parse_front_matter(raw_text)
            slug = (frontmatter or {}).get("slug")
            if isinstance(slug, str) and slug.strip():
                declared_slug = slug.strip()

        return SourceDocument(
            id=str(file_path),
            name=file_path.name,
            raw_text=raw_text,
            declared_slug=declared_slug,
            target_directory=self.directory_overrides.get(strip_md_extension(file_path.name), self.default_directory),
        )
