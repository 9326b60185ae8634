from __future__ import annotations

import codecs
import configparser
import json
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from .errors import SiteError
from .utils import parse_bool, parse_int, warn

try:
    import tomllib as toml
except ImportError:
    try:
        import tomli as toml
    except ImportError:  # pragma: no cover - optional dependency
        toml = None

try:
    import yaml
except ImportError:  # pragma: no cover - optional dependency
    yaml = None

REPO_DIR = ".blaze"

MONTHS = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)

DEFAULT_LOCALE = {
    "archive": "Archive for",
    "tags": "Posts tagged as",
    "taglist": "List of tags",
    "previous": "&laquo; previous",
    "next": "next &raquo;",
    "more": "Read more &raquo;",
    "postedby": "by",
    "taggedas": "tagged as",
}


def load_config(path: Path) -> dict:
    """Read command-line defaults from a TOML, YAML or JSON file."""
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        if toml is None:
            warn("TOML config requires tomllib (Python 3.11+) or tomli.")
            sys.exit(1)
        try:
            data = toml.loads(text)
        except Exception as exc:  # pragma: no cover - depends on parser
            warn(f"Invalid TOML in config file {path}: {exc}")
            sys.exit(1)
        if not isinstance(data, dict):
            warn(f"TOML config must be a mapping: {path}")
            sys.exit(1)
        return data
    if suffix in {".yml", ".yaml"}:
        if yaml is None:
            warn("YAML config requires PyYAML.")
            sys.exit(1)
        try:
            data = yaml.safe_load(text)
        except Exception as exc:  # pragma: no cover - depends on parser
            warn(f"Invalid YAML in config file {path}: {exc}")
            sys.exit(1)
        if data is None:
            return {}
        if not isinstance(data, dict):
            warn(f"YAML config must be a mapping: {path}")
            sys.exit(1)
        return data
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        warn(f"Invalid JSON in config file {path}: {exc}")
        sys.exit(1)


def read_ini(path: Path, encoding: str = "utf-8") -> dict[str, dict[str, str]]:
    """Parse an INI file into a mapping of section name to options.

    Raises ``OSError``, ``UnicodeDecodeError`` or ``configparser.Error``.
    """
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    with path.open(encoding=encoding) as handle:
        parser.read_file(handle, source=str(path))
    return {section: dict(parser.items(section)) for section in parser.sections()}


@dataclass(frozen=True)
class SiteConfig:
    blogdir: Path
    destdir: Path
    verbose: int = 1
    with_index: bool = True
    with_posts: bool = True
    with_pages: bool = True
    with_tags: bool = True
    with_rss: bool = True
    with_css: bool = True
    full_paths: bool = False
    extension: str = "html"
    encoding: str = "UTF-8"
    markup: str = "html"
    title: str = "My Blog"
    subtitle: str = "yet another blog"
    style: str = "default.css"
    theme: str = "default.html"
    lang: str = "en_GB"
    base_url: str = ""
    posts_per_page: int = 10
    author_name: str = "admin"
    email: str = "admin@localhost"
    locale: Mapping[str, str] = field(default_factory=dict)

    @property
    def repo_dir(self) -> Path:
        return self.blogdir / REPO_DIR

    def text(self, key: str) -> str:
        return self.locale.get(key) or DEFAULT_LOCALE.get(key, key)

    def month_name(self, month: int) -> str:
        key = MONTHS[month - 1]
        return self.locale.get(key) or key.capitalize()

    def index_name(self, number: int = 0) -> str:
        return f"index{number or ''}.{self.extension}"

    def link(self, url: str) -> str:
        """Append the index file name to a directory link in full-paths mode."""
        if not self.full_paths:
            return url
        if not url.endswith("/"):
            url += "/"
        return url + self.index_name()


def load_site_config(
    blogdir: Path,
    destdir: Path,
    verbose: int = 1,
    with_index: bool = True,
    with_posts: bool = True,
    with_pages: bool = True,
    with_tags: bool = True,
    with_rss: bool = True,
    with_css: bool = True,
    full_paths: bool = False,
) -> SiteConfig:
    repo_dir = blogdir / REPO_DIR
    try:
        conf = read_ini(repo_dir / "config")
    except (OSError, UnicodeDecodeError, configparser.Error) as exc:
        raise SiteError(f"Unable to read configuration: {exc}") from exc

    core = conf.get("core", {})
    blog = conf.get("blog", {})
    user = conf.get("user", {})
    encoding = core.get("encoding") or "UTF-8"
    try:
        codecs.lookup(encoding)
    except LookupError as exc:
        raise SiteError(f"Unknown encoding `{encoding}' in core.encoding.") from exc
    lang = blog.get("lang") or "en_GB"

    locale: dict[str, str] = {}
    lang_path = repo_dir / "lang" / lang
    try:
        locale = read_ini(lang_path).get("lang", {})
    except (OSError, UnicodeDecodeError, configparser.Error):
        if verbose:
            warn(f"Unable to read language file `{lang_path}'.")

    if not with_posts:
        with_tags = False
        with_rss = False

    return SiteConfig(
        blogdir=blogdir,
        destdir=destdir,
        verbose=verbose,
        with_index=with_index,
        with_posts=with_posts,
        with_pages=with_pages,
        with_tags=with_tags,
        with_rss=with_rss,
        with_css=with_css,
        full_paths=full_paths or parse_bool(blog.get("full_paths")),
        extension=core.get("extension") or "html",
        encoding=encoding,
        markup=(core.get("markup") or "html").lower(),
        title=blog.get("title") or "My Blog",
        subtitle=blog.get("subtitle") or "yet another blog",
        style=blog.get("style") or "default.css",
        theme=blog.get("theme") or "default.html",
        lang=lang,
        base_url=blog.get("url") or "",
        posts_per_page=max(1, parse_int(blog.get("posts"), 10)),
        author_name=user.get("name") or "admin",
        email=user.get("email") or "admin@localhost",
        locale=MappingProxyType(dict(locale)),
    )
