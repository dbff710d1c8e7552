"""
aspect_weaver.template
======================

Expansion of advice templates against a single match.

Two kinds of substitution happen:

1. every literal occurrence of a captured argument name is replaced by the
   captured value;
2. every occurrence of the placeholder character (``$`` by default) is
   replaced by the verbatim matched source text.

Argument names are applied one at a time, longest first, then
alphabetically, so a name that is a substring of another (``ARG`` inside
``ARG1``) never takes over the longer name's occurrences, and of two
overlapping names (``AB`` and ``BCD`` in ``ABCD``) the longer one wins.
The placeholder goes last.  Text that has been substituted is frozen: it is
never scanned again, so a value containing ``$`` or another argument name
is copied through unchanged.
"""

from __future__ import annotations

from typing import List, Mapping, Tuple

from aspect_weaver.report import MatchRecord

PLACEHOLDER = "$"

# (text, frozen) pieces of a partly expanded template.
_Segments = List[Tuple[str, bool]]


def _replace_in_open_text(segments: _Segments, token: str, value: str) -> _Segments:
    out: _Segments = []
    for text, frozen in segments:
        if frozen or token not in text:
            out.append((text, frozen))
            continue
        for i, piece in enumerate(text.split(token)):
            if i:
                out.append((value, True))
            if piece:
                out.append((piece, False))
    return out


def expand_text(
    template: str,
    args: Mapping[str, str],
    matched_text: str,
    placeholder: str = PLACEHOLDER,
) -> str:
    """Expand *template* with explicit *args* and *matched_text*."""
    segments: _Segments = [(template, False)]
    for key in sorted((k for k in args if k), key=lambda k: (-len(k), k)):
        segments = _replace_in_open_text(segments, key, args[key])
    if placeholder:
        segments = _replace_in_open_text(segments, placeholder, matched_text)
    return "".join(text for text, _frozen in segments)


def expand(template: str, record: MatchRecord, placeholder: str = PLACEHOLDER) -> str:
    """Expand *template* for *record*."""
    return expand_text(template, record.captured_args, record.matched_text, placeholder)


__all__ = ["PLACEHOLDER", "expand", "expand_text"]
