"""Tests for existing-site import and archive assembly."""

import io
import zipfile

import pytest

from obsidian2hugo.config import SiteConfig
from obsidian2hugo.core import templates
from obsidian2hugo.core.archive import (
    EXISTING,
    GENERATED,
    assemble_posts,
    assemble_site,
    common_root_prefix,
    load_archive,
    parse_site_config,
    read_existing_site,
    site_root_name,
    write_archive,
)
from obsidian2hugo.core.models import SourceDocument, TransformResult

EXISTING_TOML = b'baseURL = "https://old.github.io/blog/"\ntitle = "Old Blog"\n[params]\n  description = "Old words"\n  author = "Ada"\n'


def generated(name: str, text: str = "new post", target_directory: str = "posts"):
    doc = SourceDocument(id=name, name=name, raw_text="", target_directory=target_directory)
    return doc, TransformResult(output_text=text, front_matter={})


def by_path(entries):
    return {entry.path: entry for entry in entries}


class TestReadExistingSite:
    """Tests for read_existing_site."""

    def test_strips_wrapping_folder(self):
        site = read_existing_site({
            "site/hugo.toml": EXISTING_TOML,
            "site/content/posts/old.md": b"old",
            "site/content/posts/_index.md": b"",
            "site/content/guides/deep/g.md": b"guide",
            "site/static/x.png": b"png",
        })

        assert site.root_prefix == "site/"
        assert set(site.files) == {
            "hugo.toml",
            "content/posts/old.md",
            "content/posts/_index.md",
            "content/guides/deep/g.md",
            "static/x.png",
        }
        assert sorted(site.existing_posts) == ["content/guides/deep/g.md", "content/posts/old.md"]
        assert site.content_dirs == ["guides", "guides/deep", "posts"]

    def test_site_info(self):
        site = read_existing_site({"hugo.toml": EXISTING_TOML, "content/posts/a.md": b""})

        assert site.root_prefix == ""
        assert site.site_config_raw.startswith("baseURL")
        assert site.site_info == {
            "base_url": "https://old.github.io/blog/",
            "title": "Old Blog",
            "description": "Old words",
            "author": "Ada",
        }

    def test_posts_directory_always_listed(self):
        site = read_existing_site({"hugo.toml": b"", "content/notes/a.md": b""})

        assert site.content_dirs == ["posts", "notes"]
        assert site.site_info == {"base_url": "", "title": "", "description": "", "author": ""}

    def test_no_site_config(self):
        site = read_existing_site({"README.md": b"", "content/posts/a.md": b""})

        assert site.site_config_raw is None
        assert site.site_info is None

    @pytest.mark.parametrize("paths,expected", [
        ([], ""),
        (["a/x", "b/y"], ""),
        (["a/x", "a/y/z"], "a/"),
        (["hugo.toml", "a/y"], ""),
        (["ab/x", "a/y"], ""),
    ])
    def test_common_root_prefix(self, paths, expected):
        assert common_root_prefix(paths) == expected


class TestAssembleSite:
    """Tests for assemble_site."""

    @pytest.fixture
    def config(self):
        return SiteConfig(site_name="New Blog", github_username="me", repo_name="blog")

    @pytest.fixture
    def existing(self):
        return read_existing_site({
            "hugo.toml": EXISTING_TOML,
            "go.mod": b"module old",
            ".github/workflows/hugo.yml": b"old workflow",
            "content/posts/first-note.md": b"old content",
            "content/posts/kept.md": b"kept",
            "static/x.png": b"png",
        })

    def test_fresh_site_layout(self, config):
        entries = assemble_site([generated("First Note.md")], config)

        assert set(by_path(entries)) == {
            "hugo.toml",
            "go.mod",
            "go.sum",
            ".github/workflows/hugo.yml",
            "content/posts/first-note.md",
            "static/images/README.md",
        }
        assert all(entry.source == GENERATED for entry in entries)

    def test_generated_post_wins(self, config, existing):
        entries = assemble_site([generated("First Note.md", "fresh")], config, existing)

        matching = [e for e in entries if e.path == "content/posts/first-note.md"]
        assert len(matching) == 1
        assert matching[0].content == b"fresh"
        assert matching[0].source == GENERATED

    def test_other_existing_files_kept(self, config, existing):
        files = by_path(assemble_site([generated("First Note.md")], config, existing))

        assert files["content/posts/kept.md"].content == b"kept"
        assert files["content/posts/kept.md"].source == EXISTING
        assert files["static/x.png"].content == b"png"

    def test_infrastructure_regenerated(self, config, existing):
        files = by_path(assemble_site([generated("First Note.md")], config, existing))

        assert files["go.mod"].content == b"module github.com/me/blog\n\ngo 1.23\n"
        assert files[".github/workflows/hugo.yml"].content == templates.WORKFLOW_YAML.encode()
        assert files["go.sum"].content == b""

    def test_site_config_preserved(self, config, existing):
        files = by_path(assemble_site([generated("a.md")], config, existing, preserve_site_config=True))

        assert files["hugo.toml"].content == EXISTING_TOML
        assert files["hugo.toml"].source == EXISTING

    def test_site_config_regenerated(self, config, existing):
        files = by_path(assemble_site([generated("a.md")], config, existing, preserve_site_config=False))

        assert files["hugo.toml"].source == GENERATED
        assert b'title = "New Blog"' in files["hugo.toml"].content

    def test_preserve_defaults_to_config(self, existing):
        config = SiteConfig(preserve_site_config=False)

        files = by_path(assemble_site([generated("a.md")], config, existing))

        assert files["hugo.toml"].source == GENERATED

    def test_preserve_without_existing_config(self, config):
        site = read_existing_site({"README.md": b"", "content/posts/a.md": b""})

        files = by_path(assemble_site([generated("b.md")], config, site))

        assert files["hugo.toml"].source == GENERATED

    def test_target_directory(self, config):
        files = by_path(assemble_site([generated("Guide.md", target_directory="guides")], config))

        assert "content/guides/guide.md" in files

    def test_failed_documents_skipped(self, config):
        doc = SourceDocument(id="bad", name="bad.md", raw_text=None)
        entries = assemble_site([(doc, TransformResult.failure("nope"))], config)

        assert "content/posts/bad.md" not in by_path(entries)

    def test_paths_unique(self, config, existing):
        entries = assemble_site([generated("First Note.md"), generated("kept.md")], config, existing)

        paths = [entry.path for entry in entries]
        assert len(paths) == len(set(paths))


class TestTemplates:
    """Tests for generated site files."""

    def test_hugo_toml_round_trips_site_info(self):
        config = SiteConfig(site_name="My Blog", description="About things", author="Ada",
                            github_username="me", repo_name="blog")

        info = parse_site_config(templates.hugo_toml(config))

        assert info == {
            "base_url": "https://me.github.io/blog/",
            "title": "My Blog",
            "description": "About things",
            "author": "Ada",
        }

    def test_hugo_toml_escapes_quotes(self):
        toml = templates.hugo_toml(SiteConfig(site_name='The "Best" Blog'))

        assert 'title = "The \\"Best\\" Blog"' in toml

    def test_workflow_pins_versions(self):
        assert f'HUGO_VERSION: "{templates.HUGO_VERSION}"' in templates.WORKFLOW_YAML
        assert "go-version: '1.23'" in templates.WORKFLOW_YAML
        assert "${{ runner.temp }}" in templates.WORKFLOW_YAML


class TestPostsAndZip:
    """Tests for posts-only output and zip I/O."""

    def test_assemble_posts(self):
        entries = assemble_posts([generated("First Note.md", "one"), generated("Guide.md", "two", "guides")])

        assert [(e.path, e.content) for e in entries] == [("first-note.md", b"one"), ("guide.md", b"two")]

    def test_site_root_name(self):
        assert site_root_name(SiteConfig(site_name="My Blog")) == "my-blog-hugo-site"

    def test_write_and_load(self):
        entries = assemble_posts([generated("First Note.md", "one")])
        buffer = io.BytesIO()

        write_archive(buffer, entries, root="wrapped")

        assert load_archive(buffer.getvalue()) == {"wrapped/first-note.md": b"one"}

    def test_load_skips_directories(self, tmp_path):
        path = tmp_path / "site.zip"
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("site/", b"")
            zf.writestr("site/hugo.toml", EXISTING_TOML)

        files = load_archive(path)

        assert files == {"site/hugo.toml": EXISTING_TOML}
        assert read_existing_site(files).site_info["title"] == "Old Blog"
