"""Unit tests for core/parse.py"""

from datetime import date, datetime
from pathlib import Path

import pytest

from blogpub.core.models import ParsedPost
from blogpub.core.parse import (
    FrontmatterError, discover_files, has_frontmatter, parse_date, parse_file, parse_filename,
    split_frontmatter,
)


# --- split_frontmatter ---

def test_split_frontmatter_with_yaml():
    """split_frontmatter extracts the YAML header and returns the body."""
    fm, body = split_frontmatter("---\ntitle: Hello\n---\n# Body\n")
    assert fm == {"title": "Hello"}
    assert body == "# Body\n"


def test_split_frontmatter_no_frontmatter():
    """Text without an opening delimiter yields an empty dict and the full text."""
    text = "# No front matter\n"
    fm, body = split_frontmatter(text)
    assert fm == {}
    assert body == text


def test_split_frontmatter_empty_block():
    """An empty block parses to an empty mapping."""
    fm, body = split_frontmatter("---\n---\nBody\n")
    assert fm == {}
    assert body == "Body\n"


def test_split_frontmatter_closing_without_newline():
    """The closing delimiter may be the last line of the file."""
    fm, body = split_frontmatter("---\ntitle: T\n---")
    assert fm == {"title": "T"}
    assert body == ""


def test_split_frontmatter_trailing_whitespace_on_delimiters():
    fm, _ = split_frontmatter("---  \ntitle: T\n---\t\nBody\n")
    assert fm == {"title": "T"}


def test_split_frontmatter_strips_bom():
    fm, _ = split_frontmatter("\ufeff---\ntitle: T\n---\n")
    assert fm == {"title": "T"}


def test_split_frontmatter_keeps_later_rules_in_body():
    """Only the first closing delimiter ends the block; later '---' lines stay in the body."""
    fm, body = split_frontmatter("---\ntitle: T\n---\nA\n\n---\n\nB\n")
    assert fm == {"title": "T"}
    assert "---" in body


@pytest.mark.parametrize("text,match", [
    ("---\ntitle: T\n# never closed\n", "Unterminated"),
    ("---\ntitle: [unclosed\n---\n", "Invalid YAML"),
    ("---\n- a\n- b\n---\n", "expected a mapping"),
    ("---\ntitle: T\ndate: 2021-02-30\n---\n", "Invalid YAML"),
])
def test_split_frontmatter_errors(text, match):
    """Malformed blocks raise FrontmatterError, which is a ValueError."""
    with pytest.raises(FrontmatterError, match=match):
        split_frontmatter(text)
    assert issubclass(FrontmatterError, ValueError)


def test_split_frontmatter_stringifies_keys():
    """Non-string YAML keys are kept as strings."""
    fm, _ = split_frontmatter("---\ntitle: T\n2021: yes\n---\n")
    assert fm == {"title": "T", "2021": True}


def test_has_frontmatter():
    assert has_frontmatter("---\ntitle: T\n---\n")
    assert not has_frontmatter("# Title\n")
    assert not has_frontmatter("")


# --- parse_filename ---

@pytest.mark.parametrize("name,expected", [
    ("2021-03-01-spring-amqp.md", (date(2021, 3, 1), "spring-amqp")),
    ("2020-12-31-Terraform_AWS.md", (date(2020, 12, 31), "terraform-aws")),
    ("spring-amqp.md", (None, "spring-amqp")),
    ("2021-13-45-bad-date.md", (None, "2021-13-45-bad-date")),
])
def test_parse_filename(name, expected):
    """The <YYYY-MM-DD>-<slug> convention is applied when it matches, else the stem is slugified."""
    assert parse_filename(Path(name)) == expected


# --- parse_date ---

@pytest.mark.parametrize("value,expected", [
    (date(2021, 3, 1), datetime(2021, 3, 1)),
    (datetime(2021, 3, 1, 5, 0), datetime(2021, 3, 1, 5, 0)),
    ("2021-03-01", datetime(2021, 3, 1)),
    ("2021-03-01T05:00:00", datetime(2021, 3, 1, 5, 0)),
    ("2021-03-01 05:00:00 +1100", datetime(2021, 3, 1, 5, 0)),
    ("2021-03-01T05:00:00Z", datetime(2021, 3, 1, 5, 0)),
])
def test_parse_date(value, expected):
    """Dates, datetimes and common string forms normalize to naive wall-clock datetimes."""
    assert parse_date(value) == expected


@pytest.mark.parametrize("value", ["yesterday", "", 42, None, ["2021-03-01"]])
def test_parse_date_rejects(value):
    with pytest.raises(ValueError):
        parse_date(value)


# --- discover_files ---

def test_discover_files_single(tmp_path):
    """discover_files returns a list with one file when given a Markdown file path."""
    f = tmp_path / "post.md"
    f.write_text("# Hello")
    assert discover_files(f) == [f]


def test_discover_files_non_md_skipped(tmp_path):
    """discover_files ignores non-Markdown files such as the istio setup script."""
    (tmp_path / "istio-setup.sh").write_text("echo hi")
    assert discover_files(tmp_path) == []


def test_discover_files_dir_sorted(tmp_path):
    """discover_files finds .md, .markdown and .mdx files recursively, sorted."""
    (tmp_path / "b.md").write_text("b")
    (tmp_path / "a.markdown").write_text("a")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "c.mdx").write_text("c")
    files = discover_files(tmp_path)
    assert files == sorted(files)
    assert len(files) == 3


# --- parse_file ---

def test_parse_file_sample(sample_path):
    """parse_file splits front matter, tokenizes the body and resolves the slug from the file name."""
    post = parse_file(sample_path)
    assert isinstance(post, ParsedPost)
    assert post.slug == "spring-amqp"
    assert post.filename_date == date(2021, 3, 1)
    assert post.frontmatter["title"] == "Request/Response with Spring AMQP"
    assert post.frontmatter["image"] == {"auto": "0074-stack"}
    assert not post.markdown.startswith("---")
    assert post.body_offset == 10
    assert any(t.type == "fence" for t in post.tokens)


def test_parse_file_slug_from_frontmatter(tmp_path):
    """A front-matter slug wins over the file name."""
    f = tmp_path / "2021-01-01-anything.md"
    f.write_text("---\nslug: Custom Slug\n---\n# Body\n")
    assert parse_file(f).slug == "custom-slug"


def test_parse_file_slug_from_stem(tmp_path):
    """Without the date prefix the whole stem becomes the slug."""
    f = tmp_path / "My Post.md"
    f.write_text("# Body\n")
    post = parse_file(f)
    assert post.slug == "my-post"
    assert post.filename_date is None
    assert post.frontmatter == {}
    assert post.body_offset == 0


def test_parse_file_invalid_frontmatter(tmp_path):
    f = tmp_path / "bad.md"
    f.write_text("---\ntitle: [oops\n---\n")
    with pytest.raises(FrontmatterError):
        parse_file(f)
