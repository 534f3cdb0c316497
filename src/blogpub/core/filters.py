"""Template filters for URLs, image variants and reading time"""

import math


WORDS_PER_MINUTE = 200


def absolute_url(path: str, base_url: str) -> str:
    """Join base_url and path with exactly one slash."""
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def teaser(asset: str, prefix: str = "", suffix: str = "") -> str:
    """Surround an image asset id with the teaser prefix and suffix."""
    return f"{prefix}{asset}{suffix}"


def opengraph(asset: str, prefix: str = "", suffix: str = "") -> str:
    """Surround an image asset id with the opengraph prefix and suffix."""
    return f"{prefix}{asset}{suffix}"


def permalink(slug: str) -> str:
    return f"/{slug}/"


def word_count(markdown: str) -> int:
    return len(markdown.split())


def reading_time(markdown: str) -> int:
    """Whole minutes to read the body, never less than one."""
    return max(1, math.ceil(word_count(markdown) / WORDS_PER_MINUTE))
