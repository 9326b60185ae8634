from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .config import SiteConfig
from .content import body_path, collect_headers, make_url

TAG_SPLIT_RE = re.compile(r",\s*")


@dataclass(frozen=True)
class Record:
    id: int
    kind: str
    date: str
    title: str
    author: str
    url: str
    body_path: Path
    tags: tuple[str, ...] = ()

    @property
    def year(self) -> str:
        return self.date[:4]

    @property
    def month(self) -> str:
        return self.date[5:7]

    @property
    def month_key(self) -> str:
        return f"{self.year}/{self.month}"

    @property
    def slug(self) -> str:
        return f"{self.id}-{self.url}"

    @property
    def permalink(self) -> str:
        if self.kind == "page":
            return self.url
        return f"{self.month_key}/{self.slug}"


@dataclass
class TagEntry:
    name: str
    url: str
    count: int = 1


@dataclass
class MonthEntry:
    label: str
    url: str
    year: str
    count: int = 1


@dataclass
class SiteData:
    posts: list[Record] = field(default_factory=list)
    pages: list[Record] = field(default_factory=list)
    tags: dict[str, TagEntry] = field(default_factory=dict)
    months: dict[str, MonthEntry] = field(default_factory=dict)


def split_tags(value: str) -> tuple[str, ...]:
    tags: list[str] = []
    for item in TAG_SPLIT_RE.split(value):
        tag = item.strip().lower()
        if tag and tag not in tags:
            tags.append(tag)
    return tuple(tags)


def make_record(header: dict, record_id: int, kind: str, path: Path) -> Record:
    return Record(
        id=record_id,
        kind=kind,
        date=header["date"],
        title=header["title"],
        author=header["author"],
        url=header["url"],
        body_path=path,
        tags=split_tags(header.get("tags", "")) if kind == "post" else (),
    )


def sort_records(records: Iterable[Record]) -> list[Record]:
    """Most recent first; records sharing a date are ordered by descending ID."""
    return sorted(records, key=lambda record: (record.date, record.id), reverse=True)


def build_tag_index(posts: Iterable[Record]) -> dict[str, TagEntry]:
    tags: dict[str, TagEntry] = {}
    for post in posts:
        for tag in post.tags:
            entry = tags.get(tag)
            if entry:
                entry.count += 1
            else:
                tags[tag] = TagEntry(name=tag, url=make_url(tag) or "tag")
    return tags


def build_month_index(posts: Iterable[Record], month_name: Callable[[int], str]) -> dict[str, MonthEntry]:
    months: dict[str, MonthEntry] = {}
    for post in posts:
        entry = months.get(post.month_key)
        if entry:
            entry.count += 1
        else:
            months[post.month_key] = MonthEntry(
                label=f"{month_name(int(post.month))} {post.year}",
                url=f"{post.month_key}/",
                year=post.year,
            )
    return months


def collect_records(config: SiteConfig, kind: str) -> list[Record]:
    return sort_records(
        make_record(header, record_id, kind, body_path(config, kind, record_id))
        for record_id, header in collect_headers(config, kind)
    )


def collect_metadata(config: SiteConfig) -> SiteData:
    posts = collect_records(config, "post")
    return SiteData(
        posts=posts,
        pages=collect_records(config, "page"),
        tags=build_tag_index(posts),
        months=build_month_index(posts, config.month_name),
    )
