"""Export: normalized post Markdown, sidecar JSON, and the paginated site index"""

import json
import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import yaml
from sqlmodel import Session

from blogpub.config import Settings
from blogpub.core.extract.extract import summarize
from blogpub.core.filters import absolute_url, opengraph, permalink, reading_time, teaser, word_count
from blogpub.crud.models import CodeBlock, Post
from blogpub.crud.posts import get_code_blocks


logger = logging.getLogger(__name__)

RECOGNIZED_KEYS = ('title', 'date', 'modified', 'author', 'categories', 'tags', 'excerpt', 'image', 'slug')


def _yaml_date(value: Optional[datetime]):
    """Midnight timestamps are written as plain dates."""
    if value is None:
        return None
    if value.time() == datetime.min.time():
        return value.date()
    return value


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def build_frontmatter(post: Post) -> dict[str, Any]:
    """Recognized keys in canonical order, then any remaining user keys untouched."""
    fm: dict[str, Any] = {
        'title': post.title,
        'date': _yaml_date(post.date),
        'modified': _yaml_date(post.modified),
        'author': post.author,
        'categories': list(post.categories or []),
        'tags': list(post.tags or []),
        'excerpt': post.excerpt,
        'image': {'auto': post.image} if post.image else None,
        'slug': post.slug,
    }
    fm = {k: v for k, v in fm.items() if v not in (None, [])}
    for key, value in (post.frontmatter or {}).items():
        if key not in RECOGNIZED_KEYS:
            fm[key] = value
    return fm


def build_markdown(post: Post) -> str:
    """Return the body with a normalized YAML front-matter block prepended."""
    header = yaml.safe_dump(build_frontmatter(post), default_flow_style=False, allow_unicode=True, sort_keys=False)
    return f"---\n{header}---\n\n{post.markdown.lstrip()}"


def _image(post: Post, settings: Settings) -> Optional[dict[str, str]]:
    if not post.image:
        return None
    return {
        'auto': post.image,
        'teaser': teaser(post.image, settings.teaser_prefix, settings.teaser_suffix),
        'opengraph': opengraph(post.image, settings.opengraph_prefix, settings.opengraph_suffix),
    }


def build_sidecar(post: Post, code_blocks: list[CodeBlock], settings: Settings) -> dict:
    """Build the sidecar JSON dict consumed by site templates."""
    return {
        "slug": post.slug,
        "path": post.path,
        "url": absolute_url(permalink(post.slug), settings.base_url),
        "title": post.title,
        "date": _iso(post.date),
        "modified": _iso(post.modified),
        "author": post.author,
        "categories": list(post.categories or []),
        "tags": list(post.tags or []),
        "excerpt": post.excerpt,
        "summary": summarize(post.markdown, settings.summary_length, settings.parser_config),
        "word_count": word_count(post.markdown),
        "reading_time": reading_time(post.markdown),
        "image": _image(post, settings),
        "code_blocks": [
            {
                "language": b.language,
                "line": b.line,
                "lines": len(b.content.splitlines()),
                "closed": b.closed,
            }
            for b in code_blocks
        ],
        "committed_at": _iso(post.committed_at),
    }


def sort_posts(posts: list[Post]) -> list[Post]:
    """Newest first; undated posts last, by slug."""
    dated = sorted((p for p in posts if p.date), key=lambda p: (p.date, p.slug), reverse=True)
    undated = sorted((p for p in posts if not p.date), key=lambda p: p.slug)
    return dated + undated


def _entry(post: Post, settings: Settings) -> dict:
    return {
        "slug": post.slug,
        "title": post.title,
        "url": absolute_url(permalink(post.slug), settings.base_url),
        "date": _iso(post.date),
        "author": post.author,
        "categories": list(post.categories or []),
        "excerpt": post.excerpt,
    }


def build_taxonomies(posts: list[Post]) -> dict[str, dict[str, list[str]]]:
    """Map each category, tag and author to the sorted slugs of its posts."""
    taxonomies: dict[str, dict[str, set]] = {"categories": {}, "tags": {}, "authors": {}}
    for post in posts:
        terms = {
            "categories": post.categories or [],
            "tags": post.tags or [],
            "authors": [post.author] if post.author else [],
        }
        for name, values in terms.items():
            for term in values:
                taxonomies[name].setdefault(term, set()).add(post.slug)
    return {
        name: {term: sorted(slugs) for term, slugs in sorted(terms.items())}
        for name, terms in taxonomies.items()
    }


def build_site_index(posts: list[Post], settings: Settings) -> dict:
    """Build the home index, its pages and the taxonomy map from all posts."""
    entries = [_entry(p, settings) for p in sort_posts(posts)]
    total_pages = max(1, math.ceil(len(entries) / settings.paginate))
    pages = []
    for n in range(1, total_pages + 1):
        start = (n - 1) * settings.paginate
        pages.append({
            "page": n,
            "total_pages": total_pages,
            "prev": n - 1 if n > 1 else None,
            "next": n + 1 if n < total_pages else None,
            "posts": entries[start:start + settings.paginate],
        })
    return {
        "index": {
            "base_url": settings.base_url,
            "total_posts": len(entries),
            "total_pages": total_pages,
            "paginate": settings.paginate,
            "posts": entries,
        },
        "pages": pages,
        "taxonomies": build_taxonomies(posts),
    }


def _write_json(path: Path, data: Any) -> None:
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding='utf-8')


def write_post(post: Post, session: Session, output_dir: Path, settings: Settings) -> tuple[Path, Path]:
    """Write posts/<slug>.md and posts/<slug>.json. Returns (md_path, json_path)."""
    dest_dir = output_dir / "posts"
    dest_dir.mkdir(parents=True, exist_ok=True)
    md_path = dest_dir / f"{post.slug}.md"
    json_path = dest_dir / f"{post.slug}.json"

    md_path.write_text(build_markdown(post), encoding='utf-8')
    _write_json(json_path, build_sidecar(post, get_code_blocks(session, post.id), settings))
    logger.debug("Wrote %s", md_path)
    return md_path, json_path


def write_site_index(posts: list[Post], output_dir: Path, settings: Settings) -> list[Path]:
    """Write index.json, pages/<n>.json and taxonomies.json. Returns written paths."""
    site = build_site_index(posts, settings)
    pages_dir = output_dir / "pages"
    pages_dir.mkdir(parents=True, exist_ok=True)
    for stale in pages_dir.glob("*.json"):
        stale.unlink()

    written = [output_dir / "index.json"]
    _write_json(written[0], site["index"])
    for page in site["pages"]:
        path = pages_dir / f"{page['page']}.json"
        _write_json(path, page)
        written.append(path)
    taxonomies_path = output_dir / "taxonomies.json"
    _write_json(taxonomies_path, site["taxonomies"])
    written.append(taxonomies_path)
    return written
