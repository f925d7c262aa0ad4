"""Name cleaning for filenames and parsed series guesses.

Two jobs live here:

* ``sanitize_name()`` turns an arbitrary catalog title into a
  filesystem-safe, dot-separated name component.  It is total and
  idempotent, so it can be applied to a full filename as the last step
  of formatting.
* ``clean_series_guess()`` tidies the series segment captured by the
  filename parser (release tags, bracketed noise, separators).
"""

import re

from .models import UNKNOWN_SERIES

# ---------------------------------------------------------------------------
# Sanitizer patterns
# ---------------------------------------------------------------------------

# Characters that are invalid in Windows filenames
RESERVED_CHARS = frozenset(':/\\|?*<>"')

_WHITESPACE = re.compile(r'\s+')
_TO_DASH = re.compile(r'[:/\\|]')
_REMOVE = re.compile(r'[?*<>",]')
_DOTS = re.compile(r'\.{2,}')
_DASHES = re.compile(r'-{2,}')
_EDGES = re.compile(r'^[.\-\s]+|[.\-\s]+$')

# ---------------------------------------------------------------------------
# Series-guess patterns
# ---------------------------------------------------------------------------

_BRACKETED = (
    r'\[[^\]]*\]',
    r'\([^)]*\)',
    r'【[^】]*】',
    r'『[^』]*』',
    r'「[^」]*」',
)
_SEPARATORS = re.compile(r'[._\s]+')


def sanitize_name(raw: str) -> str:
    """Make *raw* safe to use as (part of) a filename.

    Whitespace becomes dots, path separators and colons become dashes and
    the remaining reserved characters are dropped.  Repeated dots and
    dashes collapse, and the result never starts or ends with either.

    Args:
        raw: Any string, typically a series or episode title.

    Returns:
        The sanitized name.  May be empty.
    """
    name = _WHITESPACE.sub('.', raw)
    name = _TO_DASH.sub('-', name)
    name = _REMOVE.sub('', name)
    # Stripping the edges can expose a new ".-" run at the boundary, so
    # collapse and strip until stable.
    while True:
        cleaned = _DOTS.sub('.', name)
        cleaned = _DASHES.sub('-', cleaned)
        cleaned = _EDGES.sub('', cleaned)
        if cleaned == name:
            return cleaned
        name = cleaned


def strip_reserved(raw: str) -> str:
    """Drop reserved characters but keep spaces (used for folder names)."""
    name = ''.join(c for c in raw if c not in RESERVED_CHARS)
    return _WHITESPACE.sub(' ', name).strip(' .')


def clean_series_guess(raw: str | None) -> str:
    """Clean the series segment captured by a filename pattern."""
    if not raw:
        return UNKNOWN_SERIES
    name = raw
    for pattern in _BRACKETED:
        name = re.sub(pattern, ' ', name)
    name = _SEPARATORS.sub(' ', name)
    # Separator dashes left over between the name and the episode marker
    name = re.sub(r'^[\s\-]+|[\s\-]+$', '', name)
    return name.strip() or UNKNOWN_SERIES
