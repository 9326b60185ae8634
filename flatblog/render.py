from __future__ import annotations

import datetime as dt
import html
import re
from collections.abc import Callable
from pathlib import Path

from .config import SiteConfig
from .errors import EXIT_FAILURE, EXIT_PERMISSION, SiteError
from .metadata import SiteData, sort_records
from .utils import NAME, VERSION, write_text

ROOT_RE = re.compile(r"%root%", re.IGNORECASE)
HOME_RE = re.compile(r"%home%", re.IGNORECASE)
RECENT_POSTS = 5


def placeholder_re(name: str) -> re.Pattern:
    return re.compile(rf"<!--\s*{re.escape(name)}\s*-->", re.IGNORECASE)


CONTENT_RE = placeholder_re("content")


def substitute(pattern: re.Pattern, value: str, text: str) -> str:
    return pattern.sub(lambda _match: value, text)


def list_of_tags(config: SiteConfig, site: SiteData, root: str) -> str:
    if not config.with_tags:
        return ""
    return "\n".join(
        f'<li><a href="{config.link(f"{root}tags/{entry.url}")}">{html.escape(entry.name)}</a> ({entry.count})</li>'
        for entry in sorted(site.tags.values(), key=lambda entry: entry.name)
    )


def list_of_months(config: SiteConfig, site: SiteData, root: str, year: str = "") -> str:
    if not config.with_posts:
        return ""
    entries = [entry for entry in site.months.values() if not year or entry.year == year]
    return "\n".join(
        f'<li><a href="{config.link(root + entry.url)}">{entry.label}</a> ({entry.count})</li>'
        for entry in sorted(entries, key=lambda entry: entry.url, reverse=True)
    )


def list_of_pages(config: SiteConfig, site: SiteData, root: str) -> str:
    if not config.with_pages:
        return ""
    return "".join(
        f'<li><a href="{config.link(root + page.permalink)}">{page.title}</a></li>\n'
        for page in reversed(sort_records(site.pages))
    )


def list_of_posts(config: SiteConfig, site: SiteData, root: str, limit: int = RECENT_POSTS) -> str:
    if not config.with_posts:
        return ""
    return "".join(
        f'<li><a href="{config.link(root + post.permalink)}">{post.title}</a></li>\n'
        for post in site.posts[:limit]
    )


class ThemeRenderer:
    """Substitutes theme placeholders, caching the page frame per relative root."""

    def __init__(self, config: SiteConfig, site: SiteData) -> None:
        self.config = config
        self.site = site
        self.cache: dict[str, str] = {}
        self._theme: str | None = None
        rss_enabled = config.with_rss and bool(config.base_url)
        self.placeholders: dict[str, Callable[[str], str]] = {
            "rss": lambda root: (
                f'<link rel="alternate" href="{root}index.rss" title="RSS Feed" type="application/rss+xml">'
                if rss_enabled
                else ""
            ),
            "content-type": lambda root: (
                f'<meta http-equiv="Content-Type" content="text/html; charset={config.encoding}">'
            ),
            "stylesheet": lambda root: f'<link rel="stylesheet" href="{root}{config.style}" type="text/css">',
            "generator": lambda root: f'<meta name="Generator" content="{NAME} {VERSION}">',
            "date": lambda root: f'<meta name="Date" content="{dt.datetime.now().ctime()}">',
            "tags": lambda root: list_of_tags(config, site, root),
            "archive": lambda root: list_of_months(config, site, root),
            "pages": lambda root: list_of_pages(config, site, root),
            "posts": lambda root: list_of_posts(config, site, root),
            "subtitle": lambda root: config.subtitle,
            "e-mail": lambda root: config.email,
            "title": lambda root: config.title,
            "name": lambda root: config.author_name,
            "author-name": lambda root: config.author_name,
            "year": lambda root: str(dt.date.today().year),
            "current-year": lambda root: str(dt.date.today().year),
        }
        self.patterns = {name: placeholder_re(name) for name in self.placeholders}

    @property
    def theme_path(self) -> Path:
        return self.config.repo_dir / "theme" / self.config.theme

    def load_theme(self) -> str:
        if self._theme is None:
            path = self.theme_path
            try:
                self._theme = path.read_text(encoding=self.config.encoding, errors="replace")
            except PermissionError as exc:
                raise SiteError(f"Unable to read theme `{path}': {exc.strerror}", EXIT_PERMISSION) from exc
            except OSError as exc:
                raise SiteError(f"Unable to read theme `{path}': {exc.strerror or exc}", EXIT_FAILURE) from exc
        return self._theme

    def frame(self, root: str) -> str:
        template = self.cache.get(root)
        if template is None:
            template = self.load_theme()
            for name, compute in self.placeholders.items():
                template = substitute(self.patterns[name], compute(root), template)
            self.cache[root] = template
        return template

    def render(self, content: str, root: str) -> str:
        text = substitute(CONTENT_RE, content, self.frame(root))
        text = substitute(ROOT_RE, root, text)
        return substitute(HOME_RE, self.config.link(root), text)

    def write_page(self, path: Path, content: str, root: str) -> None:
        write_text(path, self.render(content, root), self.config.encoding)
        if self.config.verbose > 1:
            print(f"Created {path}")
