"""Citation marker cleanup for Responses API output.

File-search answers embed markers such as ``【6:0†Informe.pdf】`` or
``【15†Archivo.pdf】``. They are reduced to the bare source name; any other
``【...】`` span is dropped. Whitespace is then tidied so the text reads
cleanly in a chat bubble.

The substitutions run in a fixed order: the catch-all removal would
otherwise swallow the markers whose source name must be kept.
"""

from __future__ import annotations

import re
from typing import Any

_SOURCE_WITH_INDEX = re.compile(r"【\s*\d+:\d+†([^】]+)】")
_SOURCE = re.compile(r"【\s*\d+†([^】]+)】")
_ANY_MARKER = re.compile(r"【[^】]*】")
_TRAILING_SPACES = re.compile(r"[ \t]+\n")
_BLANK_RUNS = re.compile(r"\n{3,}")


def sanitize_citations(s: Any = "") -> str:
    """Strip citation markers from ``s`` and normalise whitespace.

    ``None`` is treated as the empty string; other values are stringified.
    """
    text = "" if s is None else str(s)
    text = _SOURCE_WITH_INDEX.sub(r"\1", text)
    text = _SOURCE.sub(r"\1", text)
    text = _ANY_MARKER.sub("", text)
    text = _TRAILING_SPACES.sub("\n", text)
    text = _BLANK_RUNS.sub("\n\n", text)
    return text.strip()
