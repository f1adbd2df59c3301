"""
Publish Markdown files to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
import re

LOGGER = logging.getLogger(__name__)

_FENCE = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")


def find_unterminated_fence(text: str) -> str | None:
    """
    Finds a code block that is opened but never closed.

    A fence is closed only by a line of the same character (backtick or tilde) that is at least as long as the opening
    fence and carries no info string. Fence-like lines inside an open code block are part of its content.

    :param text: Markdown text.
    :returns: The opening fence marker (e.g. ```` ``` ```` or `~~~~`) of the code block left open, or `None`.
    """

    opening: str | None = None
    for line in text.splitlines():
        m = _FENCE.match(line)
        if m is None:
            continue

        marker, info = m.group(1), m.group(2)
        if opening is None:
            # a backtick in the info string makes the line inline code, not a fence
            if marker[0] == "`" and "`" in info:
                continue
            opening = marker
        elif marker[0] == opening[0] and len(marker) >= len(opening) and not info.strip():
            opening = None

    return opening


def close_unterminated_fences(text: str) -> str:
    """
    Appends a closing fence when a Markdown document has a code block that is opened but never closed.

    Documents produced by text generators are often truncated in the middle of a code block.

    :param text: Markdown text.
    :returns: Markdown text in which every fenced code block is closed.
    """

    opening = find_unterminated_fence(text)
    if opening is not None:
        LOGGER.warning("Unterminated code block; appending a closing fence")
        if text and not text.endswith("\n"):
            text += "\n"
        text += f"{opening}\n"
    return text
