"""Intermediate data models for the parse, extract and lint steps"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel


class StagedCodeBlock(BaseModel):
    """A fenced code sample from a post body."""
    language: Optional[str] = None
    content: str
    line: int                       # 1-based line of the opening fence within the file
    closed: bool = True


class StagedPost(BaseModel):
    """Public staging contract: written by extract, read by commit."""
    slug: str
    path: str
    title: str = ""
    date: Optional[datetime] = None
    modified: Optional[datetime] = None
    author: Optional[str] = None
    excerpt: Optional[str] = None
    image: Optional[str] = None     # image.auto asset identifier
    categories: list[str] = []
    tags: list[str] = []
    frontmatter: dict[str, Any] = {}
    markdown: str                   # body without front matter
    code_blocks: list[StagedCodeBlock] = []


@dataclass
class ParsedPost:
    """Internal parse result carrying markdown-it tokens; not persisted."""
    path:          Path
    slug:          str
    raw:           str             # full file content (includes front matter)
    markdown:      str             # body only
    frontmatter:   dict[str, Any]
    tokens:        list            # markdown-it Token objects
    body_offset:   int = 0         # lines consumed by the front-matter block
    filename_date: Optional[date] = None


class Severity(str, Enum):
    error = "error"
    warning = "warning"


class Finding(BaseModel):
    """A single content-quality problem found in a post file."""
    path: str
    rule: str
    severity: Severity
    message: str
    line: Optional[int] = None

    def __str__(self) -> str:
        loc = f"{self.path}:{self.line}" if self.line else self.path
        return f"{loc}: {self.severity.value} [{self.rule}] {self.message}"


@dataclass
class LintResult:
    """Per-file lint outcome plus the keys needed for cross-post checks."""
    path:     Path
    findings: list[Finding] = field(default_factory=list)
    title:    Optional[str] = None
    date:     Optional[datetime] = None
    slug:     Optional[str] = None
