"""Canvas size labels: normalization and ordering"""

import re
from typing import Optional

# Quote and inch-mark glyphs Printify uses interchangeably in size labels
_QUOTE_GLYPHS_RE = re.compile("[“”„‟″‶＂]")

_NUMERIC_PREFIX_RE = re.compile(r"\s*(\d+(?:\.\d+)?)")


def normalize_size_label(label: str) -> str:
    """Fold curly quotes and inch marks to a plain double quote.

    '6″ x 6″' and '6” x 6”' both become '6" x 6"'. Idempotent.
    """
    return _QUOTE_GLYPHS_RE.sub('"', label)


def size_prefix(label: str) -> Optional[float]:
    """Leading number of a size label ('12" x 12"' -> 12.0), or None."""
    m = _NUMERIC_PREFIX_RE.match(label or "")
    return float(m.group(1)) if m else None


def size_sort_key(label: str) -> tuple:
    """Sort key ordering labels by their numeric prefix.

    Compares numbers, not strings, so 6 sorts before 12. Labels without a
    number go last, alphabetically.
    """
    prefix = size_prefix(label)
    if prefix is None:
        return (1, 0.0, label or "")
    return (0, prefix, label)
