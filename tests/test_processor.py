"""Tests for ResolverIndex, ContentProcessor and batch conversion."""

import datetime

import pytest

from obsidian2hugo.config import SiteConfig
from obsidian2hugo.core import processor as processor_module
from obsidian2hugo.core.archive import read_existing_site
from obsidian2hugo.core.models import ERROR, INFO, NOTICE, SourceDocument, WARNING
from obsidian2hugo.core.processor import ContentProcessor, ResolverIndex, transform_batch

TODAY = datetime.date(2024, 5, 1)


def make_doc(name: str, text, target_directory: str = "posts", declared_slug=None) -> SourceDocument:
    return SourceDocument(
        id=f"notes/{name}",
        name=name,
        raw_text=text,
        declared_slug=declared_slug,
        target_directory=target_directory,
    )


class TestResolverIndex:
    """Tests for ResolverIndex class."""

    def test_build(self):
        index = ResolverIndex.build([
            make_doc("First Note.md", ""),
            make_doc("Setup Guide.md", "", target_directory="guides"),
        ])

        assert index.get("First Note").slug == "first-note"
        assert index.get("First Note").target_directory == "posts"
        assert index.get("Setup Guide").target_directory == "guides"
        assert len(index) == 2
        assert index.duplicates == ()

    def test_declared_slug(self):
        index = ResolverIndex.build([make_doc("First Note.md", "", declared_slug="custom")])

        assert index.get("First Note").slug == "custom"

    def test_first_duplicate_wins(self):
        index = ResolverIndex.build([
            make_doc("Note.md", "", target_directory="posts"),
            make_doc("Note.md", "", target_directory="guides"),
            make_doc("Note.md", "", target_directory="notes"),
        ])

        assert index.get("Note").target_directory == "posts"
        assert index.duplicates == ("Note",)

    def test_from_dict(self):
        index = ResolverIndex.from_dict({"My Note": "my-note"})

        assert "My Note" in index
        assert index.get("my note") is None

    def test_missing(self):
        assert ResolverIndex.from_dict({}).get("Nonexistent") is None


class TestContentProcessor:
    """Tests for ContentProcessor class."""

    @pytest.fixture
    def index(self):
        return ResolverIndex.from_dict({
            "First Note": "first-note",
            "Second Note": "second-note",
        })

    @pytest.fixture
    def processor(self, index):
        return ContentProcessor(index, SiteConfig(), today=TODAY)

    def test_bare_note_output(self, processor):
        result = processor.process(make_doc("hello-world.md", "Hello [[Missing Note]]"))

        assert result.ok
        assert result.output_text == (
            "---\n"
            "title: hello world\n"
            "date: 2024-05-01\n"
            "draft: false\n"
            "---\n"
            "\n"
            "Hello [Missing Note](/posts/missing-note/)"
        )
        assert [w.level for w in result.warnings] == [WARNING]

    def test_full_pipeline(self, processor):
        raw = """---
title: Existing
tags: [alpha]
---
# Heading

See [[First Note]] and ![[pic.png]] #beta

```
[[First Note]] $x*y$ #gamma
```

Math $a*b$ here.
"""
        result = processor.process(make_doc("note.md", raw))

        assert result.front_matter == {
            "title": "Existing",
            "tags": ["alpha", "beta"],
            "date": "2024-05-01",
            "draft": False,
            "math": True,
        }
        assert result.output_text.startswith(
            "---\ntitle: Existing\ndate: 2024-05-01\ndraft: false\n"
            "tags:\n  - alpha\n  - beta\nmath: true\n---\n\n# Heading\n"
        )
        assert "See [First Note](/posts/first-note/) and ![](pic.png) #beta" in result.output_text
        assert "```\n[[First Note]] $x*y$ #gamma\n```" in result.output_text
        assert "Math $a\\*b$ here." in result.output_text
        assert [w.level for w in result.warnings] == [NOTICE, INFO]
        assert result.has_math

    def test_embed_is_never_a_link(self, processor):
        result = processor.process(make_doc("note.md", "![[pic.png]]"))

        assert result.output_text.endswith("\n\n![](pic.png)")
        assert "/posts/" not in result.output_text
        assert result.warnings == ()

    def test_links_in_inline_code_untouched(self, processor):
        result = processor.process(make_doc("note.md", "Use `[[First Note]]` or [[First Note]]"))

        assert result.output_text.endswith("Use `[[First Note]]` or [First Note](/posts/first-note/)")

    def test_alias_and_plain_link_share_target(self, processor):
        result = processor.process(make_doc("note.md", "[[Second Note]] [[Second Note|alias]]"))

        assert "[Second Note](/posts/second-note/) [alias](/posts/second-note/)" in result.output_text

    def test_alt_math_modes(self, index):
        config = SiteConfig(math_alt_delimiters=True)
        result = ContentProcessor(index, config, today=TODAY).process(make_doc("m.md", "$$x$$"))

        assert result.output_text.endswith("$$$$x$$$$")
        assert [w.level for w in result.warnings] == [INFO]

    def test_reconverting_output_is_stable(self, processor):
        first = processor.process(make_doc("a.md", "# A\n\nbody\n")).output_text
        second = processor.process(make_doc("a.md", first)).output_text

        assert second == first

    def test_unreadable_source(self, processor):
        result = processor.process(make_doc("gone.md", None))

        assert not result.ok
        assert result.output_text is None
        assert result.warnings[0].level == ERROR
        assert result.warnings[0].message == "File content not loaded"

    def test_exception_becomes_error(self, processor, monkeypatch):
        def explode(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(processor_module, "rewrite_links", explode)
        result = processor.process(make_doc("note.md", "text"))

        assert not result.ok
        assert result.warnings[0].level == ERROR
        assert result.warnings[0].message == "Transformation failed: boom"


class TestTransformBatch:
    """Tests for batch conversion."""

    def test_links_across_batch(self):
        docs = [
            make_doc("First Note.md", "Links to [[Setup Guide]]"),
            make_doc("Setup Guide.md", "Back to [[First Note]]", target_directory="guides"),
        ]

        batch = transform_batch(docs, today=TODAY)

        first, guide = batch.results
        assert "[Setup Guide](/guides/setup-guide/)" in first.output_text
        assert "[First Note](/posts/first-note/)" in guide.output_text
        assert batch.warning_count == 0

    def test_failure_does_not_stop_batch(self, monkeypatch):
        original = processor_module.transform_math

        def fragile(text, *args, **kwargs):
            if "BOOM" in text:
                raise ValueError("cannot convert")
            return original(text, *args, **kwargs)

        monkeypatch.setattr(processor_module, "transform_math", fragile)
        docs = [
            make_doc("a.md", "first"),
            make_doc("b.md", "BOOM"),
            make_doc("c.md", "third"),
        ]

        batch = transform_batch(docs, today=TODAY)

        assert [result.ok for result in batch.results] == [True, False, True]
        assert batch.failed == [docs[1]]
        assert batch.results[1].warnings[0].level == ERROR
        assert len(batch.transformed) == 2

    def test_unreadable_document_excluded_from_index(self):
        docs = [make_doc("Gone.md", None), make_doc("a.md", "[[Gone]]")]

        batch = transform_batch(docs, today=TODAY)

        assert not batch.results[0].ok
        assert batch.results[1].warnings[0].level == WARNING

    def test_duplicate_names_flagged(self):
        docs = [
            make_doc("Note.md", "one"),
            make_doc("Note.md", "two", target_directory="guides"),
            make_doc("Other.md", "[[Note]]"),
        ]

        batch = transform_batch(docs, today=TODAY)

        assert batch.duplicates == ("Note",)
        for result in batch.results[:2]:
            assert any("Duplicate filename" in w.message for w in result.warnings)
        assert "[Note](/posts/note/)" in batch.results[2].output_text
        assert not any("Duplicate" in w.message for w in batch.results[2].warnings)

    def test_existing_post_overwrite_warning(self):
        existing = read_existing_site({"hugo.toml": b"", "content/posts/first-note.md": b"old"})
        docs = [make_doc("First Note.md", "new"), make_doc("Fresh.md", "new")]

        batch = transform_batch(docs, existing_site=existing, today=TODAY)

        assert any("will be overwritten" in w.message for w in batch.results[0].warnings)
        assert batch.results[1].warnings == ()

    def test_thread_pool_matches_sequential(self):
        docs = [make_doc(f"Note {i}.md", f"# N{i}\n[[Note {(i + 1) % 8}]] $x*{i}$") for i in range(8)]

        sequential = transform_batch(docs, today=TODAY)
        parallel = transform_batch(docs, max_workers=4, today=TODAY)

        assert parallel.results == sequential.results

    def test_counts(self):
        docs = [make_doc("a.md", "[[Missing]] $x$"), make_doc("b.md", None)]

        batch = transform_batch(docs, today=TODAY)

        assert batch.warning_count == 2
        assert batch.notice_count == 1

    def test_colliding_target_paths_flagged(self):
        docs = [make_doc("My Note.md", "one"), make_doc("my-note.md", "two"), make_doc("Other.md", "three")]

        batch = transform_batch(docs, today=TODAY)

        for result in batch.results[:2]:
            assert any("content/posts/my-note.md" in w.message and "more than one note" in w.message
                       for w in result.warnings)
        assert batch.results[2].warnings == ()
        assert batch.duplicates == ()
