from __future__ import annotations

import json
import xml.etree.ElementTree as etree

import pytest

from flatblog.cli import main


def run(repo, dest, *extra):
    main(["-b", str(repo.root), "-d", str(dest), *extra])


def test_single_post_scenario(repo, dest, capsys):
    repo.add_post(1, title="Hello World", date="2024-03-01", author="me", tags="Perl, perl")

    run(repo, dest)

    post = dest / "2024" / "03" / "1-hello-world" / "index.html"
    assert post.exists()
    assert (dest / "2024" / "03" / "index.html").exists()
    assert (dest / "2024" / "index.html").exists()
    assert (dest / "tags" / "perl" / "index.html").exists()
    assert (dest / "default.css").read_text(encoding="utf-8") == "body { color: black; }\n"
    index = (dest / "index.html").read_text(encoding="utf-8")
    assert '<li><a href="./tags/perl">perl</a> (1)</li>' in index
    assert '<li><a href="./2024/03/">March 2024</a> (1)</li>' in index
    assert '<a href="2024/03/1-hello-world">Hello World</a>' in index
    assert "Done." in capsys.readouterr().out


def test_rss_is_skipped_without_base_url(repo, dest, capsys):
    repo.add_post(1, title="Hello", date="2024-03-01", author="me")

    run(repo, dest)

    assert not (dest / "index.rss").exists()
    assert (dest / "index.html").exists()
    assert "Missing blog.url option. Skipping the RSS feed." in capsys.readouterr().err


def test_rss_feed_is_written_with_base_url(repo, dest):
    repo.write_config(blog_url="http://example.com/blog/")
    for record_id in range(1, 13):
        repo.add_post(
            record_id,
            title=f"Post <em>{record_id}</em> &amp; more",
            date=f"2024-03-{record_id:02d}",
            author="me",
            body="<p>Some <b>bold</b> text &copy; here.</p>\n<!-- break -->\n<p>Hidden</p>\n",
        )

    run(repo, dest)

    tree = etree.parse(dest / "index.rss")
    channel = tree.getroot().find("channel")
    assert channel.findtext("title") == "Test Blog"
    assert channel.findtext("link") == "http://example.com/blog/"
    items = channel.findall("item")
    assert len(items) == 10
    assert items[0].findtext("title") == "Post 12  more"
    assert items[0].findtext("link") == "http://example.com/blog/2024/03/12-post-em12em-amp-more/index.html"
    assert items[0].findtext("description").strip() == "Some bold text  here."
    assert items[0].findtext("pubDate") == "Tue, 12 Mar 2024 00:00:01 GMT"
    assert 'href="./index.rss"' in (dest / "index.html").read_text(encoding="utf-8")


def test_unparsable_header_is_skipped(repo, dest, capsys):
    repo.add_post(1, title="Good", date="2024-03-01", author="me")
    repo.write_raw_header("posts", 2, "garbage without a section\n")

    run(repo, dest)

    assert (dest / "2024" / "03" / "1-good" / "index.html").exists()
    assert not list((dest / "2024" / "03").glob("2-*"))
    assert "Skipping the post with ID 2." in capsys.readouterr().err


def test_pages_are_generated(repo, dest):
    repo.add_page(1, title="About Me", date="2024-01-01", author="me", body="<p>Hi there.</p>\n")

    run(repo, dest)

    page = (dest / "about-me" / "index.html").read_text(encoding="utf-8")
    assert '<h2 class="post">About Me</h2>' in page
    assert "<p>Hi there.</p>" in page
    assert '<li><a href="../about-me">About Me</a></li>' in page


def test_index_lists_recent_excerpts(repo, dest):
    repo.write_config(blog_posts="2")
    for record_id in range(1, 4):
        repo.add_post(
            record_id,
            title=f"Post {record_id}",
            date=f"2024-05-0{record_id}",
            author="me",
            body=f"<p>Intro {record_id}</p>\n<!-- break -->\n<p>Rest {record_id}</p>\n",
        )

    run(repo, dest)

    index = (dest / "index.html").read_text(encoding="utf-8")
    assert "Intro 3" in index and "Intro 2" in index
    assert "Intro 1" not in index
    assert "Rest 3" not in index
    assert '<p><a href="2024/05/3-post-3">Read more &raquo;</a></p>' in index


def test_no_posts_disables_tags_and_rss(repo, dest):
    repo.write_config(blog_url="http://example.com")
    repo.add_post(1, title="Hello", date="2024-03-01", author="me", tags="perl")
    repo.add_page(1, title="About", date="2024-01-01", author="me")

    run(repo, dest, "-p")

    assert (dest / "about" / "index.html").exists()
    assert not (dest / "tags").exists()
    assert not (dest / "index.rss").exists()
    assert not (dest / "2024").exists()


def test_nothing_to_do(repo, dest, capsys):
    run(repo, dest, "-p", "-P")

    assert "Nothing to do." in capsys.readouterr().out
    assert not dest.exists()


def test_verbose_lists_created_files(repo, dest, capsys):
    repo.add_post(1, title="Hello", date="2024-03-01", author="me")

    run(repo, dest, "-V")

    out = capsys.readouterr().out
    assert f"Created {dest / 'index.html'}" in out
    assert f"Created {dest / '2024' / '03' / '1-hello' / 'index.html'}" in out


def test_quiet_prints_nothing(repo, dest, capsys):
    repo.add_post(1, title="Hello", date="2024-03-01")

    run(repo, dest, "-q", "-r")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""


def test_missing_repository_exits_with_failure(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["-b", str(tmp_path / "nowhere"), "-d", str(tmp_path / "out")])

    assert excinfo.value.code == 1
    assert "Not a blog repository" in capsys.readouterr().err


def test_unreadable_configuration_exits_with_failure(repo, dest, capsys):
    (repo.blaze / "config").unlink()

    with pytest.raises(SystemExit) as excinfo:
        run(repo, dest)

    assert excinfo.value.code == 1
    assert "Unable to read configuration" in capsys.readouterr().err


def test_invalid_option_exits_with_usage_error(repo, dest):
    with pytest.raises(SystemExit) as excinfo:
        run(repo, dest, "--bogus")

    assert excinfo.value.code == 22


def test_unwritable_destination_exits(repo, tmp_path, capsys):
    repo.add_post(1, title="Hello", date="2024-03-01", author="me")
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        run(repo, blocker / "site")

    assert excinfo.value.code != 0
    assert "flatblog:" in capsys.readouterr().err


def test_defaults_file_supplies_options(repo, dest, tmp_path):
    repo.add_post(1, title="Hello", date="2024-03-01", author="me", tags="perl")
    defaults = tmp_path / "defaults.json"
    defaults.write_text(json.dumps({"blogdir": str(repo.root), "destdir": str(dest), "tags": False}), encoding="utf-8")

    main(["--config", str(defaults)])

    assert (dest / "index.html").exists()
    assert not (dest / "tags").exists()


def test_full_paths_flag(repo, dest):
    repo.add_post(1, title="Hello", date="2024-03-01", author="me")

    run(repo, dest, "-F")

    index = (dest / "index.html").read_text(encoding="utf-8")
    assert '<a href="2024/03/1-hello/index.html">Hello</a>' in index


def test_stray_head_file_does_not_abort_the_run(repo, dest, capsys):
    repo.add_post(1, title="Hello", date="2024-03-01", author="me")
    repo.write_raw_header("posts", "²", "[header]\ntitle = Stray\n")

    run(repo, dest)

    assert (dest / "2024" / "03" / "1-hello" / "index.html").exists()
    assert "Invalid post ID" in capsys.readouterr().err


def test_unknown_encoding_exits_with_failure(repo, dest, capsys):
    repo.write_config(core_encoding="no-such-codec")
    repo.add_post(1, title="Hello", date="2024-03-01", author="me")

    with pytest.raises(SystemExit) as excinfo:
        run(repo, dest)

    assert excinfo.value.code == 1
    assert "flatblog: Unknown encoding `no-such-codec'" in capsys.readouterr().err
    assert not dest.exists()
