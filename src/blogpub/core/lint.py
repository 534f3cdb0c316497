"""Content-quality checks over post files.

Per-file rules run in ``lint_file``; rules that compare posts with each other
(duplicate title + date, duplicate slug) run in ``lint_paths`` once every file
has been read. Content problems are always reported as findings, never raised.
"""

import logging
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Optional

from blogpub.core.extract.blocks import tokens_to_code_blocks
from blogpub.core.models import Finding, LintResult, Severity
from blogpub.core.parse import (
    FrontmatterError, discover_files, has_frontmatter, parse_date, parse_file, parse_filename,
)


logger = logging.getLogger(__name__)


def _check_date(result: LintResult, fm: dict, key: str) -> Optional[datetime]:
    value = fm.get(key)
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError:
        _add(result, "date-invalid", Severity.warning, f"'{key}' is not a recognizable date: {value!r}")
        return None


def _add(result: LintResult, rule: str, severity: Severity, message: str, line: int = None) -> None:
    result.findings.append(Finding(
        path=str(result.path), rule=rule, severity=severity, message=message, line=line,
    ))


def lint_file(path: Path, parser_config: str = 'gfm-like') -> LintResult:
    """Run the per-file rules against a single post."""
    result = LintResult(path=path)
    filename_date, _ = parse_filename(path)
    if filename_date is None:
        _add(result, "filename-convention", Severity.warning,
             "file name does not follow <YYYY-MM-DD>-<slug>.md")

    try:
        text = path.read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        _add(result, "encoding-invalid", Severity.error, f"file is not valid UTF-8: {e.reason} at byte {e.start}")
        return result

    if not has_frontmatter(text):
        _add(result, "frontmatter-missing", Severity.error, "no front-matter block at top of file", 1)
        return result

    try:
        parsed = parse_file(path, parser_config)
    except FrontmatterError as e:
        _add(result, "frontmatter-invalid", Severity.error, str(e), 1)
        return result

    fm = parsed.frontmatter
    result.slug = parsed.slug
    title = fm.get('title')
    if title is None or not str(title).strip():
        _add(result, "title-missing", Severity.error, "front matter has no non-empty 'title'")
    else:
        result.title = str(title).strip()

    if 'categories' in fm and not isinstance(fm['categories'], list):
        _add(result, "categories-not-list", Severity.warning, "'categories' should be a list")

    post_date = _check_date(result, fm, 'date')
    _check_date(result, fm, 'modified')
    if post_date is None:
        if filename_date is not None:
            post_date = parse_date(filename_date)
        elif fm.get('date') is None:
            _add(result, "date-missing", Severity.warning, "no 'date' in front matter or file name")
    result.date = post_date

    source_lines = parsed.markdown.splitlines(keepends=True)
    for block in tokens_to_code_blocks(parsed.tokens, source_lines, parsed.body_offset):
        if not block.closed:
            _add(result, "fence-unclosed", Severity.error, "fenced code block has no closing fence", block.line)
        if block.language is None:
            _add(result, "fence-no-language", Severity.warning, "fenced code block has no language tag", block.line)

    logger.debug("Linted %s: %d finding(s)", path, len(result.findings))
    return result


def _duplicates(results: list[LintResult], key, rule: str, severity: Severity, label: str) -> list[Finding]:
    groups: dict = defaultdict(list)
    for r in results:
        k = key(r)
        if k is not None:
            groups[k].append(r)

    findings = []
    for members in groups.values():
        if len(members) < 2:
            continue
        for r in members:
            others = ", ".join(str(o.path) for o in members if o is not r)
            findings.append(Finding(
                path=str(r.path), rule=rule, severity=severity,
                message=f"{label} also used by {others}",
            ))
    return findings


def lint_paths(path: Path, parser_config: str = 'gfm-like') -> list[Finding]:
    """Lint every post under path, then apply the cross-post rules."""
    results = [lint_file(p, parser_config) for p in discover_files(path)]
    findings = [f for r in results for f in r.findings]
    findings += _duplicates(
        results,
        lambda r: (r.title, r.date) if r.title and r.date else None,
        "duplicate-title-date", Severity.error, "title and date",
    )
    findings += _duplicates(
        results, lambda r: r.slug, "duplicate-slug", Severity.warning, "slug",
    )
    return sorted(findings, key=lambda f: (f.path, f.line or 0, f.rule))


def has_errors(findings: list[Finding], strict: bool = False) -> bool:
    """True when any finding fails the run; strict mode promotes warnings."""
    if strict:
        return bool(findings)
    return any(f.severity == Severity.error for f in findings)
