"""Name tokenization shared by indexing and search."""

from __future__ import annotations

from typing import List, Optional

MIN_TOKEN_LENGTH = 3


def tokenize(text: str) -> List[str]:
    """Lower-case ``text``, split on whitespace and drop short tokens.

    Order of first appearance is kept and duplicates are removed.
    """
    if not text:
        return []
    tokens: List[str] = []
    for token in text.lower().split():
        if len(token) >= MIN_TOKEN_LENGTH and token not in tokens:
            tokens.append(token)
    return tokens


def tokenize_names(*names: Optional[str]) -> List[str]:
    """Tokens contributed by every name field of a record."""
    tokens: List[str] = []
    for name in names:
        for token in tokenize(name or ""):
            if token not in tokens:
                tokens.append(token)
    return tokens
