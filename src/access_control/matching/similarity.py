from __future__ import annotations

from typing import Optional

import numpy as np


def template_similarity(first: Optional[bytes], second: Optional[bytes]) -> float:
    """Percentage of byte positions at which two templates are equal.

    Returns 0.0 when either template is missing or empty, or when the lengths
    differ. This is an exact positional comparison, so it only catches
    identical or lightly corrupted copies of a template.
    """

    if not first or not second:
        return 0.0
    if len(first) != len(second):
        return 0.0

    a = np.frombuffer(first, dtype=np.uint8)
    b = np.frombuffer(second, dtype=np.uint8)
    matching = int(np.count_nonzero(a == b))
    return matching * 100.0 / a.size
