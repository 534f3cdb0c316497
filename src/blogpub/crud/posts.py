"""Post persistence: upsert, code block replacement, lookups and taxonomy queries"""

import logging
from datetime import datetime

from sqlalchemy import func
from sqlmodel import Session, select

from blogpub.crud.models import CodeBlock, Post
from blogpub.crud.versioning import save_version


logger = logging.getLogger(__name__)

POST_FIELDS = (
    'slug', 'title', 'date', 'modified', 'author', 'excerpt', 'image',
    'categories', 'tags', 'markdown', 'hash',
)


def get_by_path(session: Session, path: str) -> Post | None:
    """Return the Post with the given source path, or None if not found."""
    return session.exec(select(Post).where(Post.path == path)).one_or_none()


def get_by_slug(session: Session, slug: str) -> Post | None:
    """Return the first Post with the given slug, or None if not found."""
    return session.exec(select(Post).where(Post.slug == slug)).first()


def get_all_posts(session: Session) -> list[Post]:
    """Return all posts in the database."""
    return list(session.exec(select(Post)).all())


def get_last_committed(session: Session) -> list[Post]:
    """Return posts from the most recent commit batch (MAX committed_at)."""
    max_ts = session.exec(select(func.max(Post.committed_at))).one()
    if max_ts is None:
        return []
    return list(session.exec(select(Post).where(Post.committed_at == max_ts)).all())


def get_by_category(session: Session, category: str) -> list[Post]:
    """Return posts listing category among their categories (case-sensitive)."""
    return [p for p in get_all_posts(session) if category in (p.categories or [])]


def list_categories(session: Session) -> list[str]:
    """Return sorted distinct categories across all stored posts."""
    return sorted({c for cats in session.exec(select(Post.categories)).all() for c in (cats or [])})


def list_authors(session: Session) -> list[str]:
    """Return sorted distinct authors across all stored posts."""
    return sorted({a for a in session.exec(select(Post.author)).all() if a})


def get_code_blocks(session: Session, post_id) -> list[CodeBlock]:
    """Return a post's code samples in document order."""
    return list(session.exec(
        select(CodeBlock).where(CodeBlock.post_id == post_id).order_by(CodeBlock.position)
    ).all())


def _replace_code_blocks(session: Session, post_id, code_blocks: list[dict]) -> None:
    """Delete all existing code blocks for a post and insert new ones."""
    for row in session.exec(select(CodeBlock).where(CodeBlock.post_id == post_id)).all():
        session.delete(row)
    session.flush()

    for position, blk in enumerate(code_blocks):
        session.add(CodeBlock(
            post_id=post_id,
            position=position,
            language=blk.get('language'),
            content=blk['content'],
            line=blk['line'],
            closed=blk.get('closed', True),
        ))
    session.flush()


def _apply(post: Post, data: dict) -> None:
    """Copy recognized fields from a processed StagedPost dict onto a Post row."""
    for name in POST_FIELDS:
        setattr(post, name, data.get(name))
    post.title = data.get('title') or ""
    post.categories = list(data.get('categories') or [])
    post.tags = list(data.get('tags') or [])
    post.frontmatter = data.get('frontmatter') or None


def commit_post(
    session: Session,
    data: dict,
    max_versions: int = 10,
    committed_at: datetime | None = None,
    ) -> tuple[Post, str]:
    """Upsert a processed StagedPost dict, matched on source path.

    Returns (post, status) where status is 'created', 'updated', or 'unchanged'.
    Flushes but does not commit; the caller controls the transaction.
    committed_at is set on created/updated posts only.
    """
    post = get_by_path(session, data['path'])

    if post:
        if post.hash == data['hash']:
            return post, 'unchanged'
        save_version(session, post, max_versions)
        _apply(post, data)
        post.updated_at = datetime.now()
        post.committed_at = committed_at
        session.add(post)
        session.flush()
        _replace_code_blocks(session, post.id, data.get('code_blocks', []))
        logger.info("Updated %s", data['path'])
        return post, 'updated'

    post = Post(path=data['path'], slug=data['slug'], markdown=data['markdown'], hash=data['hash'])
    _apply(post, data)
    post.committed_at = committed_at
    session.add(post)
    session.flush()
    _replace_code_blocks(session, post.id, data.get('code_blocks', []))
    logger.info("Created %s", data['path'])
    return post, 'created'
