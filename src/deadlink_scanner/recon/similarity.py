"""Character-histogram cosine similarity used for soft-404 detection."""

from __future__ import annotations

import math
from collections import Counter
from typing import Union

Content = Union[str, bytes]


def _as_text(value: Content) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def cosine_similarity(left: Content, right: Content) -> float:
    """Cosine of the character-count vectors of ``left`` and ``right``.

    Both inputs are treated as multisets of characters over their union
    alphabet. Empty input scores ``0.0`` instead of dividing by zero.
    """

    left_counts = Counter(_as_text(left))
    right_counts = Counter(_as_text(right))
    if not left_counts or not right_counts:
        return 0.0

    # Characters missing from either side contribute nothing to the dot product.
    dot = sum(count * right_counts[char] for char, count in left_counts.items() if char in right_counts)
    left_sq = sum(count * count for count in left_counts.values())
    right_sq = sum(count * count for count in right_counts.values())

    return min(1.0, max(0.0, dot / math.sqrt(left_sq * right_sq)))


def is_soft_404(baseline: Content, body: Content, threshold: float) -> bool:
    """True when ``body`` looks like the baseline error page."""

    if not baseline:
        return False
    return cosine_similarity(baseline, body) >= threshold
