"""File discovery, front-matter extraction, and markdown-it tokenization"""

import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

import yaml
from markdown_it import MarkdownIt

from blogpub.core.models import ParsedPost
from blogpub.core.utils.slug import slugify


logger = logging.getLogger(__name__)

MD_EXTENSIONS = {'.md', '.markdown', '.mdx'}
FILENAME_RE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})-(.+)$')

_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M %z",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)


class FrontmatterError(ValueError):
    """The front-matter block exists but cannot be turned into a mapping."""


def make_parser(preset: str) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def _closing_line(lines: list[str]) -> Optional[int]:
    """Index of the closing '---' line, or None when the text has no front-matter block."""
    if not lines or lines[0].rstrip() != '---':
        return None
    for i in range(1, len(lines)):
        if lines[i].rstrip() == '---':
            return i
    raise FrontmatterError("Unterminated front matter: missing closing '---'")


def _load_yaml(text: str) -> dict[str, Any]:
    try:
        fm = yaml.safe_load(text) if text.strip() else {}
    except yaml.YAMLError as e:
        raise FrontmatterError(f"Invalid YAML front matter: {e}") from e
    except (ValueError, TypeError) as e:
        # Well-formed YAML the constructors reject, e.g. date: 2021-02-30
        raise FrontmatterError(f"Invalid YAML front matter: {e}") from e
    if fm is None:
        return {}
    if not isinstance(fm, dict):
        raise FrontmatterError(f"Invalid YAML front matter: expected a mapping, got {type(fm).__name__}")
    return {str(k): v for k, v in fm.items()}


def _split(text: str) -> tuple[dict[str, Any], str, int]:
    """Return (front matter, body, number of lines before the body)."""
    lines = text.splitlines(keepends=True)
    end = _closing_line(lines)
    if end is None:
        return {}, text, 0
    fm = _load_yaml(''.join(lines[1:end]))
    return fm, ''.join(lines[end + 1:]), end + 1


def has_frontmatter(text: str) -> bool:
    """True when the text opens with a '---' delimiter line."""
    first = text.lstrip('\ufeff').split('\n', 1)[0]
    return first.rstrip() == '---'


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body). Raises FrontmatterError on a malformed block."""
    fm, body, _ = _split(text.lstrip('\ufeff'))
    return fm, body


def parse_filename(path: Path) -> tuple[Optional[date], str]:
    """Apply the <YYYY-MM-DD>-<slug> naming convention; non-matching names yield (None, slug of stem)."""
    m = FILENAME_RE.match(path.stem)
    if m:
        try:
            return date(int(m.group(1)), int(m.group(2)), int(m.group(3))), slugify(m.group(4))
        except ValueError:
            logger.debug("Ignoring impossible date in file name %s", path.name)
    return None, slugify(path.stem)


def parse_date(value: Any) -> datetime:
    """Normalize a YAML date, datetime or date string to a naive datetime.

    Offsets are dropped, keeping the wall-clock time the author wrote.
    Raises ValueError for anything that is not recognizably a date.
    """
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        try:
            return datetime.fromisoformat(text.replace('Z', '+00:00')).replace(tzinfo=None)
        except ValueError:
            pass
        for fmt in _DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).replace(tzinfo=None)
            except ValueError:
                continue
    raise ValueError(f"Unrecognized date: {value!r}")


def discover_files(path: Path) -> list[Path]:
    """Return sorted Markdown files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.is_file() and p.suffix in MD_EXTENSIONS)


def parse_file(path: Path, parser_config: str = 'gfm-like') -> ParsedPost:
    """Parse a single post file into a ParsedPost with token stream."""
    raw = path.read_text(encoding='utf-8')
    frontmatter, body, offset = _split(raw.lstrip('\ufeff'))
    tokens = make_parser(parser_config).parse(body)
    filename_date, filename_slug = parse_filename(path)
    slug = slugify(str(frontmatter['slug'])) if frontmatter.get('slug') else filename_slug
    logger.debug("Parsed %s (%d tokens, slug=%s)", path, len(tokens), slug)
    return ParsedPost(
        path=path,
        slug=slug or 'post',
        raw=raw,
        markdown=body,
        frontmatter=frontmatter,
        tokens=tokens,
        body_offset=offset,
        filename_date=filename_date,
    )
