"""
Translation of library search strings into FTS5 MATCH expressions.

Search syntax:
- ``word``: the book must contain the word (title or authors, any case)
- ``-word``: the book must not contain the word
- ``"two words"``: the words must appear together, in order
- ``word*``: any word starting with ``word``

All positive terms must match. Unquoted single-character words are ignored,
like stop words. A search with no positive terms matches nothing.
"""

import re

# A quoted phrase (optionally negated) or a run of non-space characters.
_CHUNK = re.compile(r'(-?)"([^"]*)"?|(\S+)')
_WORD = re.compile(r"\w+")


def _quote(words: list[str]) -> str:
    # \w+ never contains a double quote, so no escaping is needed.
    return '"' + " ".join(words) + '"'


def to_match_expression(search: str) -> str | None:
    """
    Build an FTS5 MATCH expression for ``search``.

    Returns None when the search has no positive terms.
    """
    positives: list[str] = []
    negatives: list[str] = []

    for m in _CHUNK.finditer(search):
        negate_phrase, phrase, chunk = m.groups()
        if chunk is None:
            negated = bool(negate_phrase)
            words = _WORD.findall(phrase)
            prefix = False
        else:
            negated = chunk.startswith("-")
            body = chunk[1:] if negated else chunk
            words = [w for w in _WORD.findall(body) if len(w) > 1]
            prefix = body.endswith("*") and len(words) == 1

        if not words:
            continue
        term = _quote(words) + ("*" if prefix else "")
        (negatives if negated else positives).append(term)

    if not positives:
        return None

    expression = " AND ".join(positives)
    for term in negatives:
        expression = f"({expression}) NOT {term}"
    return expression
