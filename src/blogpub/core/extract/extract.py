"""Convert a ParsedPost into a StagedPost"""

import logging
from datetime import date, datetime
from typing import Any, Optional

from blogpub.core.extract.blocks import tokens_to_code_blocks
from blogpub.core.models import ParsedPost, StagedPost
from blogpub.core.parse import make_parser, parse_date


logger = logging.getLogger(__name__)


def as_list(value: Any) -> list[str]:
    """Normalize a list-ish front-matter value; a bare scalar becomes a one-item list."""
    if value is None:
        return []
    items = value if isinstance(value, (list, tuple)) else [value]
    return [str(v).strip() for v in items if v is not None and str(v).strip()]


def image_asset(value: Any) -> Optional[str]:
    """Return the image.auto asset id; a plain string image is taken as the id itself."""
    if isinstance(value, dict):
        auto = value.get('auto')
        return str(auto) if auto else None
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        value = ", ".join(as_list(value))
    text = str(value).strip()
    return text or None


def _date(parsed: ParsedPost, key: str, fallback: Optional[date] = None) -> Optional[datetime]:
    value = parsed.frontmatter.get(key)
    if value is not None:
        try:
            return parse_date(value)
        except ValueError:
            logger.warning("%s: ignoring unparseable %s %r", parsed.path, key, value)
    return parse_date(fallback) if fallback else None


def summarize(markdown: str, length: int = 20, parser_config: str = 'gfm-like') -> str:
    """Plain-text summary: the first `length` words of prose, code samples and raw HTML skipped."""
    words: list[str] = []
    for tok in make_parser(parser_config).parse(markdown):
        if tok.type != 'inline':
            continue
        for child in tok.children or []:
            if child.type in ('text', 'code_inline'):
                words.extend(child.content.split())
        if len(words) >= length:
            break
    return " ".join(words[:length])


def extract_post(parsed: ParsedPost) -> StagedPost:
    """Convert a ParsedPost into recognized fields plus fenced code blocks."""
    fm = parsed.frontmatter
    source_lines = parsed.markdown.splitlines(keepends=True)
    return StagedPost(
        slug=parsed.slug,
        path=str(parsed.path),
        title=_optional_str(fm.get('title')) or "",
        date=_date(parsed, 'date', parsed.filename_date),
        modified=_date(parsed, 'modified'),
        author=_optional_str(fm.get('author')),
        excerpt=_optional_str(fm.get('excerpt')),
        image=image_asset(fm.get('image')),
        categories=as_list(fm.get('categories')),
        tags=as_list(fm.get('tags')),
        frontmatter=fm,
        markdown=parsed.markdown,
        code_blocks=tokens_to_code_blocks(parsed.tokens, source_lines, parsed.body_offset),
    )
