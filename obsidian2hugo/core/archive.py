"""Site archive import and assembly.

The archive is handled as a flat mapping of path -> bytes; ``zipfile`` is
only touched by load_archive and write_archive.
"""

import io
import re
import zipfile
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

import inflection

from obsidian2hugo.config import SiteConfig
from obsidian2hugo.core import templates
from obsidian2hugo.core.models import (
    CONTENT_ROOT,
    DEFAULT_DIRECTORY,
    ExistingSite,
    ManifestEntry,
    SourceDocument,
    TransformResult,
)

EXISTING = "existing"
GENERATED = "generated"

SECTION_INDEX = "_index.md"

SITE_INFO_PATTERNS = {
    "base_url": re.compile(r"^\s*baseURL\s*=\s*[\"']([^\"']+)[\"']", re.MULTILINE),
    "title": re.compile(r"^\s*title\s*=\s*[\"']([^\"']+)[\"']", re.MULTILINE),
    "description": re.compile(r"^\s*description\s*=\s*[\"']([^\"']+)[\"']", re.MULTILINE),
    "author": re.compile(r"^\s*author\s*=\s*[\"']([^\"']+)[\"']", re.MULTILINE),
}

Documents = Iterable[Tuple[SourceDocument, TransformResult]]


def parse_site_config(content: str) -> Dict[str, str]:
    """Pull base URL, title, description and author out of a hugo.toml."""
    info = {}
    for key, pattern in SITE_INFO_PATTERNS.items():
        match = pattern.search(content)
        info[key] = match.group(1) if match else ""
    return info


def common_root_prefix(paths: List[str]) -> str:
    """Return 'folder/' when every path sits under the same top-level folder."""
    if not paths:
        return ""
    first, sep, _ = paths[0].partition("/")
    if not sep or not first:
        return ""
    candidate = first + "/"
    if all(p.startswith(candidate) for p in paths):
        return candidate
    return ""


def read_existing_site(entries: Mapping[str, bytes]) -> ExistingSite:
    """Index a previously exported site.

    Args:
        entries: Archive files keyed by path (directory entries excluded)

    Returns:
        ExistingSite with paths normalized relative to the site root
    """
    paths = [p for p in entries if not p.endswith("/")]
    prefix = common_root_prefix(paths)
    site = ExistingSite(root_prefix=prefix)
    content_dirs = set()

    for path in paths:
        normal = path[len(prefix):] if prefix and path.startswith(prefix) else path
        data = entries[path]
        site.files[normal] = data

        if normal == templates.SITE_CONFIG_PATH:
            site.site_config_raw = data.decode("utf-8", errors="replace")
            site.site_info = parse_site_config(site.site_config_raw)

        if normal.startswith(f"{CONTENT_ROOT}/") and normal.endswith(".md"):
            parts = normal[len(CONTENT_ROOT) + 1:].split("/")
            if parts[-1] != SECTION_INDEX:
                site.existing_posts.append(normal)
            for i in range(1, len(parts)):
                content_dirs.add("/".join(parts[:i]))

    site.content_dirs = sorted(content_dirs)
    if DEFAULT_DIRECTORY not in site.content_dirs:
        site.content_dirs.insert(0, DEFAULT_DIRECTORY)
    return site


def assemble_site(
    documents: Documents,
    config: SiteConfig,
    existing: Optional[ExistingSite] = None,
    preserve_site_config: Optional[bool] = None,
) -> List[ManifestEntry]:
    """Build the file list of a deployable Hugo site.

    Existing files are copied unless a generated post takes their path,
    they are infrastructure files (always regenerated) or they are
    hugo.toml and the configuration is not preserved.

    Args:
        documents: (document, result) pairs; failed results are skipped
        config: Site configuration for the generated files
        existing: Previously exported site to merge into
        preserve_site_config: Keep the existing hugo.toml (default: config)

    Returns:
        Manifest entries with unique paths
    """
    if preserve_site_config is None:
        preserve_site_config = config.preserve_site_config

    posts = [
        (doc.target_path, result.output_text.encode("utf-8"))
        for doc, result in documents if result.ok
    ]
    post_paths = {path for path, _ in posts}

    manifest: Dict[str, ManifestEntry] = {}
    keep_config = existing is not None and preserve_site_config

    if existing is not None:
        for path, data in existing.files.items():
            if path in post_paths:
                continue
            if path == templates.SITE_CONFIG_PATH and not preserve_site_config:
                continue
            if path in templates.INFRASTRUCTURE_PATHS:
                continue
            manifest[path] = ManifestEntry(path, EXISTING, data)

    def generate(path: str, text: str):
        manifest[path] = ManifestEntry(path, GENERATED, text.encode("utf-8"))

    if not keep_config or templates.SITE_CONFIG_PATH not in manifest:
        generate(templates.SITE_CONFIG_PATH, templates.hugo_toml(config))
    generate(templates.GO_MOD_PATH, templates.go_mod(config))
    generate(templates.GO_SUM_PATH, templates.GO_SUM)
    generate(templates.WORKFLOW_PATH, templates.WORKFLOW_YAML)

    for path, data in posts:
        manifest[path] = ManifestEntry(path, GENERATED, data)

    generate(templates.IMAGES_README_PATH, templates.IMAGES_README)
    return list(manifest.values())


def assemble_posts(documents: Documents) -> List[ManifestEntry]:
    """Build a flat archive holding only the converted posts."""
    return [
        ManifestEntry(f"{doc.slug}.md", GENERATED, result.output_text.encode("utf-8"))
        for doc, result in documents if result.ok
    ]


def site_root_name(config: SiteConfig) -> str:
    """Name of the folder wrapping the site inside the output archive."""
    return f"{inflection.parameterize(config.site_name) or 'my-blog'}-hugo-site"


def load_archive(source: Union[str, Path, bytes]) -> Dict[str, bytes]:
    """Read every file of a zip archive into memory."""
    handle = io.BytesIO(source) if isinstance(source, bytes) else source
    with zipfile.ZipFile(handle) as zf:
        return {info.filename: zf.read(info) for info in zf.infolist() if not info.is_dir()}


def write_archive(
    target: Union[str, Path, io.BytesIO],
    entries: Iterable[ManifestEntry],
    root: Optional[str] = None,
) -> None:
    """Write manifest entries to a zip archive, optionally under a root folder."""
    prefix = f"{root.strip('/')}/" if root else ""
    with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for entry in entries:
            zf.writestr(prefix + entry.path, entry.content)
