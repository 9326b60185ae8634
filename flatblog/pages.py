from __future__ import annotations

import html

from .config import SiteConfig
from .content import read_body
from .metadata import Record, SiteData
from .render import ThemeRenderer
from .utils import NAME, VERSION, copy_file, join_url, make_directories, rfc822_date, strip_html, warn, write_text

FEED_LIMIT = 10
FEED_DESCRIPTION_LENGTH = 500


def format_tags(config: SiteConfig, site: SiteData, root: str, tags: tuple[str, ...]) -> str:
    links = []
    for tag in tags:
        entry = site.tags.get(tag)
        if entry is None:
            continue
        links.append(f'<a href="{config.link(f"{root}tags/{entry.url}")}">{html.escape(tag)}</a>')
    return ", ".join(links)


def format_heading(config: SiteConfig, title: str, date: str, author: str, tags: str = "") -> str:
    posted_by = config.text("postedby")
    if config.with_tags and tags:
        ending = f', {config.text("taggedas")} <span class="tags">{tags}</span>.\n'
    else:
        ending = ".\n"
    return (
        f'<h2 class="post">{title}</h2>\n\n'
        '<div class="information">\n'
        f'  <span class="date">{date}</span> '
        f'{posted_by} <span class="author">{author}</span>{ending}'
        "</div>\n\n"
    )


def format_excerpt(config: SiteConfig, site: SiteData, record: Record, link: str, root: str) -> str:
    """Linked heading plus the body up to the break marker."""
    title = f'<a href="{config.link(link)}">{record.title}</a>'
    tags = format_tags(config, site, root, record.tags)
    return format_heading(config, title, record.date, record.author, tags) + read_body(
        config, record, excerpt=True, link=link
    )


def build_post(renderer: ThemeRenderer, config: SiteConfig, site: SiteData, record: Record) -> None:
    root = "../../../"
    year_dir = config.destdir / record.year
    month_dir = year_dir / record.month
    post_dir = month_dir / record.slug
    make_directories([year_dir, month_dir, post_dir])
    tags = format_tags(config, site, root, record.tags)
    body = format_heading(config, record.title, record.date, record.author, tags) + read_body(config, record)
    renderer.write_page(post_dir / config.index_name(), body, root)


def build_pages(renderer: ThemeRenderer, config: SiteConfig, site: SiteData) -> None:
    for page in site.pages:
        page_dir = config.destdir / page.url
        make_directories([page_dir])
        body = format_heading(config, page.title, page.date, page.author) + read_body(config, page)
        renderer.write_page(page_dir / config.index_name(), body, "../")


def build_index(renderer: ThemeRenderer, config: SiteConfig, site: SiteData) -> None:
    body = ""
    if config.with_posts:
        body = "".join(
            format_excerpt(config, site, post, post.permalink, "./")
            for post in site.posts[: config.posts_per_page]
        )
    make_directories([config.destdir])
    renderer.write_page(config.destdir / config.index_name(), body, "./")


def build_rss(config: SiteConfig, site: SiteData) -> bool:
    """Write ``index.rss``; returns False when the feed had to be skipped."""
    if not config.base_url:
        warn("Missing blog.url option. Skipping the RSS feed.")
        return False
    base = config.base_url.rstrip("/")
    items = []
    for post in site.posts[:FEED_LIMIT]:
        link = html.escape(join_url(base, f"{post.permalink}/{config.index_name()}"), quote=False)
        description = strip_html(read_body(config, post, excerpt=True)[:FEED_DESCRIPTION_LENGTH])
        items.append(
            "\n".join(
                [
                    "  <item>",
                    f"    <title>{strip_html(post.title)}</title>",
                    f"    <link>{link}</link>",
                    f"    <description>{description}</description>",
                    f"    <pubDate>{rfc822_date(post.date)}</pubDate>",
                    "  </item>",
                ]
            )
        )
    rss = "\n".join(
        [
            f'<?xml version="1.0" encoding="{config.encoding}"?>',
            '<rss version="2.0">',
            "<channel>",
            f"  <title>{strip_html(config.title)}</title>",
            f"  <link>{html.escape(base, quote=False)}/</link>",
            f"  <description>{strip_html(config.subtitle)}</description>",
            f"  <generator>{NAME} {VERSION}</generator>",
            *items,
            "</channel>",
            "</rss>",
        ]
    )
    path = config.destdir / "index.rss"
    make_directories([config.destdir])
    write_text(path, rss + "\n", config.encoding)
    if config.verbose > 1:
        print(f"Created {path}")
    return True


def build_stylesheet(config: SiteConfig) -> None:
    target = config.destdir / config.style
    make_directories([target.parent])
    copy_file(config.repo_dir / "style" / config.style, target)
    if config.verbose > 1:
        print(f"Created {target}")
