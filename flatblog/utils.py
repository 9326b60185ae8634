from __future__ import annotations

import datetime as dt
import re
import shutil
import sys
from pathlib import Path

from .errors import EXIT_FAILURE, EXIT_PERMISSION, SiteError

NAME = "flatblog"
VERSION = "0.8.1"

HTML_RE = re.compile(r"<[^>]*>|&[^;]*;|[<>&]")


def warn(message: str) -> None:
    print(f"{NAME}: {message}", file=sys.stderr)


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def parse_int(value: object, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def join_url(base: str, path: str) -> str:
    base = base.rstrip("/")
    path = path.lstrip("/")
    if not path:
        return base
    return f"{base}/{path}"


def today() -> str:
    return dt.date.today().isoformat()


def rfc822_date(value: str) -> str:
    """Format a ``YYYY-MM-DD`` string as an RFC 822 timestamp one second past midnight."""
    date = dt.datetime.strptime(value, "%Y-%m-%d").replace(second=1, tzinfo=dt.timezone.utc)
    return date.strftime("%a, %d %b %Y %H:%M:%S GMT")


def strip_html(text: str) -> str:
    return HTML_RE.sub("", text)


def make_directories(paths: list[Path], mode: int = 0o777) -> None:
    for path in sorted(paths):
        if path.is_dir():
            continue
        try:
            path.mkdir(mode=mode, parents=True, exist_ok=True)
        except OSError as exc:
            raise SiteError(f"Creating `{path}': {exc.strerror or exc}", EXIT_PERMISSION) from exc


def write_text(path: Path, text: str, encoding: str = "utf-8") -> None:
    try:
        path.write_text(text, encoding=encoding, errors="xmlcharrefreplace")
    except PermissionError as exc:
        raise SiteError(f"Writing `{path}': {exc.strerror}", EXIT_PERMISSION) from exc
    except (OSError, LookupError) as exc:
        raise SiteError(f"Writing `{path}': {exc}", EXIT_FAILURE) from exc


def copy_file(source: Path, target: Path) -> None:
    try:
        shutil.copyfile(source, target)
    except OSError as exc:
        raise SiteError(f"Unable to copy `{source}': {exc.strerror or exc}", EXIT_PERMISSION) from exc
