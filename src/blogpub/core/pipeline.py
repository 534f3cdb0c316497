"""Pipeline step functions: extract, commit, export and lint orchestration"""

import logging
from datetime import datetime
from pathlib import Path

from sqlmodel import Session

from blogpub.config import Settings
from blogpub.core.export import write_post, write_site_index
from blogpub.core.extract.extract import extract_post
from blogpub.core.lint import lint_paths
from blogpub.core.models import Finding, StagedPost
from blogpub.core.parse import discover_files, parse_file
from blogpub.core.utils.hashing import post_hash
from blogpub.core.utils.slug import slugify
from blogpub.crud.models import Post
from blogpub.crud.posts import commit_post, get_all_posts


logger = logging.getLogger(__name__)


def _staging_name(path: Path) -> str:
    """Staging file name derived from the source path so equal slugs never collide."""
    name = slugify("-".join(path.with_suffix('').parts))
    return f"{name or 'post'}.json"


def _process(staged: StagedPost) -> dict:
    """Flatten a StagedPost into the dict commit_post expects, with its content hash."""
    data = staged.model_dump(mode='python')
    data['hash'] = post_hash(staged.markdown, staged.frontmatter)
    return data


def run_extract(
    path: str,
    parser_config: str,
    staging_dir: Path,
    ) -> list[tuple[Path, Path]]:
    """Parse path and write StagedPost JSON to staging_dir. Returns (source_path, staging_file) pairs.

    Staging JSON left from a previous run is removed first.
    """
    staging_dir.mkdir(parents=True, exist_ok=True)
    for stale in staging_dir.glob('*.json'):
        stale.unlink()

    results = []
    for p in discover_files(Path(path)):
        try:
            parsed = parse_file(p, parser_config)
            staged = extract_post(parsed)
            out_file = staging_dir / _staging_name(p)
            out_file.write_text(staged.model_dump_json(indent=2), encoding='utf-8')
            results.append((p, out_file))
            logger.debug("Staged %s -> %s", p, out_file)
        except Exception as e:
            raise RuntimeError(f"Failed to extract {p}: {e}") from e
    return results


def run_commit(
    engine,
    max_versions: int,
    staging_dir: Path,
    ) -> tuple[dict[str, int], list[tuple[str, str]]]:
    """Read staged StagedPost JSON and upsert it into the database.

    Returns (counts, changes) where changes is a list of (status, slug) for
    created/updated posts. Returns ({}, []) when staging_dir is empty.
    """
    files = sorted(staging_dir.glob('*.json')) if staging_dir.exists() else []
    if not files:
        return {}, []

    committed_at = datetime.now()
    counts = {"created": 0, "updated": 0, "unchanged": 0}
    changes = []
    with Session(engine) as session:
        for f in files:
            staged = StagedPost.model_validate_json(f.read_text(encoding='utf-8'))
            post, status = commit_post(session, _process(staged), max_versions, committed_at)
            counts[status] += 1
            if status != 'unchanged':
                changes.append((status, post.slug))
        session.commit()
    logger.info("Committed %d staged post(s): %s", len(files), counts)
    return counts, changes


def run_export(
    session: Session,
    posts: list[Post],
    output_dir: Path,
    settings: Settings,
    ) -> list[tuple[str, Path]]:
    """Write posts to output_dir, then rebuild the site index from every stored post.

    Returns (slug, md_path) pairs for the posts written.
    """
    results = []
    for post in posts:
        md_path, _ = write_post(post, session, output_dir, settings)
        results.append((post.slug, md_path))
    write_site_index(get_all_posts(session), output_dir, settings)
    return results


def run_lint(path: str, parser_config: str) -> list[Finding]:
    """Lint every post under path. Raises FileNotFoundError if path does not exist."""
    target = Path(path)
    if not target.exists():
        raise FileNotFoundError(f"No such file or directory: {path}")
    return lint_paths(target, parser_config)
