from __future__ import annotations

import re

_NON_WORD_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_query(text: str | None) -> str:
    """Lower-case, replace punctuation with spaces and collapse whitespace.

    ``"Dog-Parks   near ME!"`` becomes ``"dog parks near me"``. Punctuation is
    replaced before whitespace is collapsed so the result is idempotent.
    """
    if not text:
        return ""
    lowered = str(text).lower()
    stripped = _NON_WORD_RE.sub(" ", lowered)
    return _WHITESPACE_RE.sub(" ", stripped).strip()
