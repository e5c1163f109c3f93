import math
import re
from typing import Optional

_LEADING_ARTICLE = re.compile(r'^(a|an|the)\s+')
# Keep letters, digits, whitespace, colon, ampersand and apostrophe
_DISALLOWED = re.compile(r"[^\w\s:&']|_")
_WHITESPACE = re.compile(r'\s+')


def normalize_answer(text: Optional[str]) -> str:
    """Map a free-text guess to the canonical form used for comparison.

    Trim, lowercase, drop one leading article, strip punctuation outside the
    allow-list, then collapse whitespace.
    """
    if not text:
        return ''
    result = text.strip().lower()
    result = _LEADING_ARTICLE.sub('', result, count=1)
    result = _DISALLOWED.sub('', result)
    return _WHITESPACE.sub(' ', result).strip()


def answers_match(guess: Optional[str], title: Optional[str]) -> bool:
    return normalize_answer(guess) == normalize_answer(title)


def compute_score(elapsed_sec: float, time_limit_sec: float, base_points: int, bonus_per_sec: float) -> int:
    """Points for a correct answer: fixed award plus a bonus for each remaining second.

    >>> compute_score(1.0, 20, 100, 5)
    195
    """
    remaining = max(0.0, time_limit_sec - elapsed_sec)
    return base_points + int(math.floor(remaining * bonus_per_sec))
