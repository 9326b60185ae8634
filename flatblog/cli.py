from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from .archive import build_posts, build_tags
from .config import REPO_DIR, load_config, load_site_config
from .errors import EXIT_USAGE, SiteError
from .metadata import collect_metadata
from .pages import build_index, build_pages, build_rss, build_stylesheet
from .render import ThemeRenderer
from .utils import NAME, VERSION, parse_bool, parse_int, warn

FEATURES = (
    ("c", "css", "stylesheet creation"),
    ("i", "index", "index page creation"),
    ("p", "posts", "blog posts creation, including tags and RSS feed"),
    ("P", "pages", "pages creation"),
    ("t", "tags", "support for tags"),
    ("r", "rss", "RSS feed creation"),
)


class ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        warn(message)
        sys.exit(EXIT_USAGE)


def build_site(args: argparse.Namespace) -> bool:
    blogdir = Path(args.blogdir)
    destdir = Path(args.destdir)
    verbose = args.verbose

    if not (blogdir / REPO_DIR).is_dir():
        raise SiteError(f"Not a blog repository: `{blogdir}' has no {REPO_DIR} directory.")

    if not (args.with_posts or args.with_pages):
        if verbose:
            print("Nothing to do.")
        return False

    config = load_site_config(
        blogdir,
        destdir,
        verbose=verbose,
        with_index=args.with_index,
        with_posts=args.with_posts,
        with_pages=args.with_pages,
        with_tags=args.with_tags,
        with_rss=args.with_rss,
        with_css=args.with_css,
        full_paths=args.full_paths,
    )
    site = collect_metadata(config)
    renderer = ThemeRenderer(config, site)

    if config.with_rss:
        build_rss(config, site)
    if config.with_css:
        build_stylesheet(config)
    if config.with_index:
        build_index(renderer, config, site)
    if config.with_posts:
        build_posts(renderer, config, site)
    if config.with_tags:
        build_tags(renderer, config, site)
    if config.with_pages:
        build_pages(renderer, config, site)
    return True


def main(argv: list[str] | None = None) -> None:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="flatblog.toml",
        help="Path to a file with command-line defaults (TOML/YAML/JSON).",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)
    config = load_config(Path(pre_args.config))

    def cfg_value(key: str, default: object) -> object:
        value = config.get(key)
        return default if value is None else value

    def cfg_str(key: str, default: str) -> str:
        value = cfg_value(key, default)
        return default if value is None else str(value)

    def cfg_bool(key: str, default: bool) -> bool:
        value = cfg_value(key, default)
        return parse_bool(value) if value is not None else default

    def cfg_int(key: str, default: int) -> int:
        value = cfg_value(key, default)
        return parse_int(value, default)

    parser = ArgumentParser(prog=NAME, description="Generate a static blog from a flat-file repository.")
    parser.add_argument(
        "--config",
        default=pre_args.config,
        help="Path to a file with command-line defaults (TOML/YAML/JSON).",
    )
    parser.add_argument(
        "-b",
        "--blogdir",
        default=cfg_str("blogdir", "."),
        help="Directory where the blog repository is placed.",
    )
    parser.add_argument(
        "-d",
        "--destdir",
        default=cfg_str("destdir", "."),
        help="Directory where the generated static content is placed.",
    )
    for short, name, description in FEATURES:
        enabled = cfg_bool(name, True)
        parser.add_argument(
            f"-{short}",
            f"--no-{name}",
            dest=f"with_{name}",
            action="store_false",
            default=enabled,
            help=f"Disable {description}.",
        )
        parser.add_argument(
            f"--with-{name}",
            dest=f"with_{name}",
            action="store_true",
            default=enabled,
            help=f"Enable {description}.",
        )
    parser.add_argument(
        "-F",
        "--full-paths",
        dest="full_paths",
        action="store_true",
        default=cfg_bool("full_paths", False),
        help="Always include the index file name in generated links.",
    )
    parser.add_argument(
        "--no-full-paths",
        dest="full_paths",
        action="store_false",
        help="Link to directories only.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        dest="verbose",
        action="store_const",
        const=0,
        default=cfg_int("verbose", 1),
        help="Avoid displaying unnecessary messages.",
    )
    parser.add_argument(
        "-V",
        "--verbose",
        dest="verbose",
        action="store_const",
        const=2,
        help="Display all messages including the list of created files.",
    )
    parser.add_argument("-v", "--version", action="version", version=f"{NAME} {VERSION}")
    args = parser.parse_args(argv)

    start = time.perf_counter()
    try:
        built = build_site(args)
    except SiteError as exc:
        warn(str(exc))
        sys.exit(exc.exit_code)
    elapsed = time.perf_counter() - start
    if built and args.verbose:
        if args.verbose > 1:
            print(f"Build completed in {elapsed:.2f}s.")
        print("Done.")
