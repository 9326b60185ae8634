from __future__ import annotations

from pathlib import Path

import pytest

from flatblog.config import SiteConfig

THEME = """<!DOCTYPE html>
<html>
<head>
  <!-- content-type -->
  <!-- generator -->
  <!-- date -->
  <!-- stylesheet -->
  <!-- rss -->
  <title><!-- title --> - <!-- subtitle --></title>
</head>
<body>
<h1><a href="%home%"><!-- title --></a></h1>
<ul>
<li><a href="%root%">Home</a></li>
<!-- pages -->
</ul>
<div id="content">
<!-- content -->
</div>
<ul>
<!-- tags -->
</ul>
<ul>
<!-- archive -->
</ul>
<ul>
<!-- posts -->
</ul>
<p>Copyright &copy; <!-- year --> <!-- name --> &lt;<!-- e-mail -->&gt;</p>
</body>
</html>
"""


class Repo:
    """A blog repository laid out on disk the way the record tools write it."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.blaze = root / ".blaze"
        for sub in ("theme", "style", "lang", "posts/head", "posts/body", "pages/head", "pages/body"):
            (self.blaze / sub).mkdir(parents=True, exist_ok=True)
        self.write_config()
        (self.blaze / "theme" / "default.html").write_text(THEME, encoding="utf-8")
        (self.blaze / "style" / "default.css").write_text("body { color: black; }\n", encoding="utf-8")

    def write_config(self, **options: str) -> None:
        sections = {
            "core": {"extension": "html", "encoding": "UTF-8"},
            "blog": {
                "title": "Test Blog",
                "subtitle": "just testing",
                "theme": "default.html",
                "style": "default.css",
                "posts": "10",
            },
            "user": {"name": "Tester", "email": "tester@example.com"},
        }
        for key, value in options.items():
            section, option = key.split("_", 1)
            sections.setdefault(section, {})[option] = value
        text = "".join(
            f"[{section}]\n" + "".join(f"  {name} = {value}\n" for name, value in values.items())
            for section, values in sections.items()
        )
        (self.blaze / "config").write_text(text, encoding="utf-8")

    def write_lang(self, name: str, **strings: str) -> None:
        text = "[lang]\n" + "".join(f"{key}={value}\n" for key, value in strings.items())
        (self.blaze / "lang" / name).write_text(text, encoding="utf-8")

    def add_post(self, record_id: int, body: str = "<p>Post body.</p>\n", **header: str) -> None:
        self._add("posts", record_id, body, header)

    def add_page(self, record_id: int, body: str = "<p>Page body.</p>\n", **header: str) -> None:
        self._add("pages", record_id, body, header)

    def write_raw_header(self, kind: str, record_id: int, text: str) -> None:
        (self.blaze / kind / "head" / str(record_id)).write_text(text, encoding="utf-8")

    def _add(self, kind: str, record_id: int, body: str, header: dict) -> None:
        lines = ["[header]"] + [f"  {name} = {value}" for name, value in header.items()]
        self.write_raw_header(kind, record_id, "\n".join(lines) + "\n")
        (self.blaze / kind / "body" / str(record_id)).write_text(body, encoding="utf-8")


@pytest.fixture
def repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Repo:
    monkeypatch.chdir(tmp_path)
    return Repo(tmp_path / "blog")


@pytest.fixture
def dest(tmp_path: Path) -> Path:
    return tmp_path / "site"


@pytest.fixture
def site_config(repo: Repo, dest: Path) -> SiteConfig:
    return SiteConfig(blogdir=repo.root, destdir=dest, title="Test Blog", author_name="Tester")
