"""Files generated into a Hugo site archive (PaperMod theme, GitHub Pages)."""

from obsidian2hugo.config import SiteConfig

HUGO_VERSION = "0.155.3"
GO_VERSION = "1.23"

SITE_CONFIG_PATH = "hugo.toml"
GO_MOD_PATH = "go.mod"
GO_SUM_PATH = "go.sum"
WORKFLOW_PATH = ".github/workflows/hugo.yml"
IMAGES_README_PATH = "static/images/README.md"

# Always regenerated, never taken from an existing archive
INFRASTRUCTURE_PATHS = frozenset({GO_MOD_PATH, GO_SUM_PATH, WORKFLOW_PATH})


def _toml_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _namespace(config: SiteConfig) -> str:
    return f"{config.github_username or 'username'}/{config.repo_name or 'my-blog'}"


def hugo_toml(config: SiteConfig) -> str:
    user = config.github_username or "username"
    repo = config.repo_name or "my-blog"
    title = _toml_string(config.site_name or "My Blog")
    description = _toml_string(config.description)
    home = _toml_string(config.description or "Welcome to my blog")
    author = _toml_string(config.author)
    return f'''baseURL = "https://{user}.github.io/{repo}/"
languageCode = "en-us"
title = "{title}"
# theme is imported via [module] below, do not set theme here

[pagination]
  pagerSize = 10

[params]
  env = "production"
  description = "{description}"
  author = "{author}"
  defaultTheme = "auto"
  ShowReadingTime = true
  ShowShareButtons = false
  ShowPostNavLinks = true
  ShowBreadCrumbs = true
  ShowCodeCopyButtons = true
  ShowToc = true
  math = true
  mathjax = true

[params.homeInfoParams]
  Title = "{title}"
  Content = "{home}"

[markup]
  [markup.goldmark]
    [markup.goldmark.renderer]
      unsafe = true
    [markup.goldmark.extensions]
      [markup.goldmark.extensions.passthrough]
        enable = true
        [markup.goldmark.extensions.passthrough.delimiters]
          block = [["$$", "$$"]]
          inline = [["$", "$"]]

[module]
  [[module.imports]]
    path = "github.com/adityatelange/hugo-PaperMod"
'''


def go_mod(config: SiteConfig) -> str:
    return f"module github.com/{_namespace(config)}\n\ngo {GO_VERSION}\n"


GO_SUM = ""

WORKFLOW_TEMPLATE = '''name: Deploy Hugo site to GitHub Pages

on:
  push:
    branches: ["main"]
  workflow_dispatch:

permissions:
  contents: read
  pages: write
  id-token: write

concurrency:
  group: "pages"
  cancel-in-progress: false

defaults:
  run:
    shell: bash

jobs:
  build:
    runs-on: ubuntu-latest
    env:
      HUGO_VERSION: "@HUGO_VERSION@"
    steps:
      - name: Install Hugo CLI
        run: |
          wget -O ${{ runner.temp }}/hugo.deb https://github.com/gohugoio/hugo/releases/download/v${HUGO_VERSION}/hugo_extended_${HUGO_VERSION}_linux-amd64.deb
          sudo dpkg -i ${{ runner.temp }}/hugo.deb

      - name: Install Go
        uses: actions/setup-go@v5
        with:
          go-version: '@GO_VERSION@'

      - name: Checkout
        uses: actions/checkout@v4

      - name: Setup Pages
        id: pages
        uses: actions/configure-pages@v5

      - name: Install Hugo Modules
        run: hugo mod get

      - name: Build with Hugo
        env:
          HUGO_CACHEDIR: ${{ runner.temp }}/hugo_cache
          HUGO_ENVIRONMENT: production
        run: |
          hugo --minify --baseURL "${{ steps.pages.outputs.base_url }}/"

      - name: Upload artifact
        uses: actions/upload-pages-artifact@v3
        with:
          path: ./public

  deploy:
    environment:
      name: github-pages
      url: ${{ steps.deployment.outputs.page_url }}
    runs-on: ubuntu-latest
    needs: build
    steps:
      - name: Deploy to GitHub Pages
        id: deployment
        uses: actions/deploy-pages@v4
'''

WORKFLOW_YAML = WORKFLOW_TEMPLATE.replace("@HUGO_VERSION@", HUGO_VERSION).replace("@GO_VERSION@", GO_VERSION)

IMAGES_README = '''# Images Folder

Place your blog images in this folder.

When your Obsidian notes reference images like `![[my-image.png]]`,
they are converted to standard markdown: `![](my-image.png)`.

To make them work in Hugo:
1. Copy the referenced images from your Obsidian vault into this folder
2. Hugo will serve them from /images/ path

Example:
- Markdown reference: `![](my-image.png)`
- File location: `static/images/my-image.png`
- Rendered URL: `/images/my-image.png`
'''
