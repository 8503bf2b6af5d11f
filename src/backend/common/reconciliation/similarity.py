from __future__ import annotations

import re

# `\w` keeps Unicode letters such as å, ä, ö and é; underscores count as separators.
_SEPARATORS = re.compile(r"[\W_]+")


def name_tokens(name: str | None) -> frozenset[str]:
    if not name:
        return frozenset()
    return frozenset(_SEPARATORS.sub(" ", name.lower()).split())


def jaccard_similarity(name1: str | None, name2: str | None) -> float:
    """Intersection over union of the two names' token sets; 0 if either set is empty."""
    tokens1 = name_tokens(name1)
    tokens2 = name_tokens(name2)
    if not tokens1 or not tokens2:
        return 0.0
    return len(tokens1 & tokens2) / len(tokens1 | tokens2)
