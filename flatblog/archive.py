from __future__ import annotations

import html
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from .config import SiteConfig
from .metadata import SiteData
from .pages import build_post, format_excerpt
from .render import ThemeRenderer, list_of_months, list_of_tags
from .utils import make_directories


@dataclass(frozen=True)
class ArchivePage:
    key: str
    number: int
    fragments: tuple[str, ...]
    has_next: bool = False

    @property
    def previous(self) -> int | None:
        return self.number - 1 if self.number else None

    @property
    def next(self) -> int | None:
        return self.number + 1 if self.has_next else None


def paginate(entries: Iterable[tuple[str, str]], capacity: int) -> Iterator[ArchivePage]:
    """Group ``(key, fragment)`` pairs into pages of at most ``capacity`` fragments.

    Entries must arrive with equal keys adjacent to each other. A page is
    flushed when the key changes or when it is full; only a page flushed for
    being full, with more entries of the same key waiting, links to a next
    page. Page numbers restart at 0 for every key and no page is ever empty.
    """
    capacity = max(1, capacity)
    current = None
    number = 0
    fragments: list[str] = []
    for key, fragment in entries:
        if current is None:
            current = key
        if fragments and (key != current or len(fragments) >= capacity):
            same_group = key == current
            yield ArchivePage(current, number, tuple(fragments), has_next=same_group)
            number = number + 1 if same_group else 0
            fragments = []
        current = key
        fragments.append(fragment)
    if fragments:
        yield ArchivePage(current, number, tuple(fragments))


def write_archive_page(
    renderer: ThemeRenderer, config: SiteConfig, directory: Path, heading: str, page: ArchivePage
) -> None:
    navigation = ['<div class="navigation">']
    if page.previous is not None:
        navigation.append(f'  <a href="{config.index_name(page.previous)}">{config.text("previous")}</a>')
    if page.next is not None:
        navigation.append(f'  <a href="{config.index_name(page.next)}">{config.text("next")}</a>')
    navigation.append("</div>\n")
    body = f'<div class="section">{heading}</div>\n\n' + "".join(page.fragments) + "\n".join(navigation)
    make_directories([directory])
    renderer.write_page(directory / config.index_name(page.number), body, "../../")


def build_year_index(renderer: ThemeRenderer, config: SiteConfig, site: SiteData, year: str) -> None:
    directory = config.destdir / year
    body = (
        f'<div class="section">{config.text("archive")} {year}</div>\n\n'
        f'<ul>\n{list_of_months(config, site, "../", year)}\n</ul>'
    )
    make_directories([directory])
    renderer.write_page(directory / config.index_name(), body, "../")


def build_posts(renderer: ThemeRenderer, config: SiteConfig, site: SiteData) -> None:
    """Write every post page, the yearly indices and the paginated monthly archives."""

    def month_entries() -> Iterator[tuple[str, str]]:
        last_year = ""
        for post in site.posts:
            build_post(renderer, config, site, post)
            if post.year != last_year:
                build_year_index(renderer, config, site, post.year)
                last_year = post.year
            yield post.month_key, format_excerpt(config, site, post, post.slug, "../../")

    for page in paginate(month_entries(), config.posts_per_page):
        year, month = page.key.split("/")
        heading = f'{config.text("archive")} {site.months[page.key].label}'
        write_archive_page(renderer, config, config.destdir / year / month, heading, page)


def build_tags(renderer: ThemeRenderer, config: SiteConfig, site: SiteData) -> None:
    for entry in sorted(site.tags.values(), key=lambda entry: entry.name):
        entries = (
            (entry.name, format_excerpt(config, site, post, f"../../{post.permalink}", "../../"))
            for post in site.posts
            if entry.name in post.tags
        )
        directory = config.destdir / "tags" / entry.url
        heading = f'{config.text("tags")} {html.escape(entry.name)}'
        for page in paginate(entries, config.posts_per_page):
            write_archive_page(renderer, config, directory, heading, page)

    if site.tags:
        directory = config.destdir / "tags"
        body = (
            f'<div class="section">{config.text("taglist")}</div>\n\n'
            f'<ul>\n{list_of_tags(config, site, "../")}\n</ul>'
        )
        make_directories([directory])
        renderer.write_page(directory / config.index_name(), body, "../")
