"""Site configuration: settings schema and obsidian2hugo.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator


CONFIG_FILE = "obsidian2hugo.yaml"
ENV_PREFIX = "OBSIDIAN2HUGO_"


class SiteConfig(BaseModel):
    site_name:            str  = Field(default="My Blog", min_length=1, description="Site title in hugo.toml")
    description:          str  = "A blog powered by Hugo and PaperMod"
    author:               str  = ""
    github_username:      str  = Field(default="", description="GitHub user or org hosting the Pages site")
    repo_name:            str  = Field(default="my-blog", description="Repository name of the Pages site")
    math_alt_delimiters:  bool = Field(default=False, description="Wrap display math in $$$$")
    math_alt_line_breaks: bool = Field(default=False, description="Double \\\\ line breaks in display math")
    preserve_site_config: bool = Field(default=True,  description="Keep hugo.toml from an existing site archive")
    titlecase_titles:     bool = Field(default=False, description="Title-case titles derived from file names")
    default_directory:    str  = Field(default="posts", description="Content subdirectory for notes")

    @field_validator("default_directory")
    @classmethod
    def _relative_directory(cls, value: str) -> str:
        value = value.strip().strip("/")
        if not value or ".." in value.split("/"):
            raise ValueError("default_directory must be a relative path inside content/")
        return value

    @property
    def has_repository(self) -> bool:
        """True when both GitHub user and repository are configured."""
        return bool(self.github_username.strip() and self.repo_name.strip())


def load_config(overrides: dict[str, Any] = None, path: Optional[Path] = None) -> SiteConfig:
    """Load SiteConfig from obsidian2hugo.yaml, then OBSIDIAN2HUGO_<FIELD> env vars, then non-None overrides."""
    config_path = Path(path) if path else Path(CONFIG_FILE)
    data: dict[str, Any] = {}
    if config_path.exists():
        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {config_path}: expected a mapping")

    for name in SiteConfig.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return SiteConfig(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e
