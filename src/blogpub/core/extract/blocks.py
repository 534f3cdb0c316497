"""Fence-token to code block conversion using source line positions"""

import re

from blogpub.core.models import StagedCodeBlock


# Closing fences may sit inside list items or blockquotes.
CLOSING_FENCE_RE = re.compile(r'^[\s>]*(`{3,}|~{3,})\s*$')


def _language(token) -> str | None:
    """First word of the fence info string, e.g. 'java' for ```java title="App.java"."""
    info = (token.info or '').strip()
    return info.split()[0] if info else None


def _is_closed(token, source_lines: list[str]) -> bool:
    """A fence is closed when its last source line is a fence at least as long as the opener."""
    if not token.map:
        return True
    start, end = token.map
    if end - start < 2 or end > len(source_lines):
        return False
    m = CLOSING_FENCE_RE.match(source_lines[end - 1])
    if not m:
        return False
    marker = m.group(1)
    return marker[0] == token.markup[0] and len(marker) >= len(token.markup)


def tokens_to_code_blocks(tokens: list, source_lines: list[str], line_offset: int = 0) -> list[StagedCodeBlock]:
    """Convert every fence token (including nested ones) to a StagedCodeBlock.

    line_offset shifts token lines, which are relative to the body, to file lines.
    """
    blocks: list[StagedCodeBlock] = []
    for tok in tokens:
        if tok.type != 'fence':
            continue
        blocks.append(StagedCodeBlock(
            language=_language(tok),
            content=tok.content,
            line=(tok.map[0] if tok.map else 0) + line_offset + 1,
            closed=_is_closed(tok, source_lines),
        ))
    return blocks
