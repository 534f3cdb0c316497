"""Post slugs in the Jekyll 'default' style"""

import re
import unicodedata


_NON_ALNUM = re.compile(r'[^a-z0-9]+')


def slugify(text: str) -> str:
    """Lowercase ASCII words joined by single hyphens; accents are folded, other punctuation dropped."""
    folded = unicodedata.normalize('NFKD', text).encode('ascii', 'ignore').decode('ascii')
    return _NON_ALNUM.sub('-', folded.lower()).strip('-')
