from __future__ import annotations

import configparser
import datetime as dt
import re
from pathlib import Path
from typing import TYPE_CHECKING

import markdown

from .config import SiteConfig, read_ini
from .errors import HeaderError
from .utils import today, warn

if TYPE_CHECKING:
    from .metadata import Record

FORBIDDEN_RE = re.compile(r"[^\w\s-]")
INVALID_URL_RE = re.compile(r"[^\w-]")
SPACE_RE = re.compile(r"\s+")
DATE_RE = re.compile(r"[0-9]{4}-[01][0-9]-[0-3][0-9]")
ID_RE = re.compile(r"0|[1-9][0-9]*")
BREAK_RE = re.compile(r"<!--\s*break\s*-->", re.IGNORECASE)

RECORD_KINDS = ("post", "page")


def make_url(text: str) -> str:
    text = FORBIDDEN_RE.sub("", text).strip()
    return SPACE_RE.sub("-", text)


def normalize_tags(value: str) -> str:
    value = value.replace(":", "")
    items = (SPACE_RE.sub(" ", item).strip() for item in value.split(","))
    return ", ".join(item for item in items if item)


def is_valid_date(value: str) -> bool:
    if not DATE_RE.fullmatch(value):
        return False
    try:
        dt.date.fromisoformat(value)
    except ValueError:
        return False
    return True


def fix_header(header: dict, record_id: int, kind: str, verbose: int = 1) -> dict:
    """Repair missing or invalid header fields in place.

    Every repair prints a diagnostic when ``verbose`` is set. Nothing here
    raises: a damaged header always ends up with usable values.
    """

    def report(message: str) -> None:
        if verbose:
            warn(f"{message} in the {kind} with ID {record_id}.")

    title = (header.get("title") or "").strip()
    if not title:
        report("Missing title")
        title = str(record_id)
    header["title"] = title

    author = (header.get("author") or "").strip()
    if not author:
        report("Missing author")
        author = "admin"
    elif FORBIDDEN_RE.search(author):
        report("Invalid author")
        author = FORBIDDEN_RE.sub("", author).strip() or "admin"
    header["author"] = author

    date = (header.get("date") or "").strip()
    if not date:
        report("Missing date")
        date = today()
    elif not is_valid_date(date):
        report("Invalid date")
        date = today()
    header["date"] = date

    tags = header.get("tags") or ""
    if kind != "post":
        tags = ""
    elif ":" in tags:
        report("Invalid tags")
    header["tags"] = normalize_tags(tags)

    url = (header.get("url") or "").strip()
    if not url:
        url = make_url(title.lower())
    elif INVALID_URL_RE.search(url):
        report("Invalid URL")
        url = make_url(url)
    header["url"] = url or str(record_id)

    return header


def head_dir(config: SiteConfig, kind: str) -> Path:
    return config.repo_dir / f"{kind}s" / "head"


def body_path(config: SiteConfig, kind: str, record_id: int) -> Path:
    return config.repo_dir / f"{kind}s" / "body" / str(record_id)


def list_record_ids(config: SiteConfig, kind: str) -> list[int]:
    directory = head_dir(config, kind)
    if not directory.is_dir():
        return []
    ids = []
    for path in directory.iterdir():
        if path.name.startswith(".") or not path.is_file():
            continue
        if not ID_RE.fullmatch(path.name):
            if config.verbose:
                warn(f"Invalid {kind} ID `{path.name}'. Skipping.")
            continue
        ids.append(int(path.name))
    return sorted(ids)


def read_header(path: Path, encoding: str = "utf-8") -> dict:
    try:
        data = read_ini(path, encoding)
    except (OSError, UnicodeDecodeError, configparser.Error) as exc:
        raise HeaderError(f"Unable to read `{path}': {exc}") from exc
    return dict(data.get("header", {}))


def collect_headers(config: SiteConfig, kind: str) -> list[tuple[int, dict]]:
    headers = []
    directory = head_dir(config, kind)
    for record_id in list_record_ids(config, kind):
        try:
            header = read_header(directory / str(record_id), config.encoding)
        except HeaderError as exc:
            warn(f"{exc} Skipping the {kind} with ID {record_id}.")
            continue
        headers.append((record_id, fix_header(header, record_id, kind, config.verbose)))
    return headers


def render_markdown(text: str) -> str:
    md = markdown.Markdown(
        extensions=["fenced_code", "tables", "codehilite"],
        extension_configs={"codehilite": {"guess_lang": False}},
    )
    html_content = md.convert(text)
    md.reset()
    return html_content


def read_body(config: SiteConfig, record: Record, excerpt: bool = False, link: str = "") -> str:
    """Return the record body, or its excerpt up to the break marker line."""
    try:
        text = record.body_path.read_text(encoding=config.encoding, errors="replace")
    except OSError:
        return ""
    more = ""
    if excerpt:
        match = BREAK_RE.search(text)
        if match:
            text = text[: text.rfind("\n", 0, match.start()) + 1]
            if link:
                more = f'<p><a href="{config.link(link)}">{config.text("more")}</a></p>\n'
    if config.markup == "markdown":
        text = render_markdown(text) + "\n"
    return text + more
