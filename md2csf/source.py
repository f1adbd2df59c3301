"""
Publish Markdown files to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
from typing import Iterable, Iterator

from markdown_it import MarkdownIt
from markdown_it.token import Token
from mdit_py_plugins.tasklists import tasklists_plugin

from .events import (
    BLOCK_QUOTE,
    BOLD,
    HARD_BREAK,
    IMAGE,
    ITALIC,
    LIST_ITEM,
    PARAGRAPH,
    SOFT_BREAK,
    STRIKETHROUGH,
    TABLE,
    THEMATIC_BREAK,
    UNORDERED_LIST,
    CodeBlock,
    End,
    Heading,
    InlineCode,
    Link,
    MarkdownEvent,
    OrderedList,
    Start,
    Tag,
    TaskMarker,
    Text,
)
from .text import close_unterminated_fences

LOGGER = logging.getLogger(__name__)

_PARSER = MarkdownIt("commonmark").enable(["table", "strikethrough"]).use(tasklists_plugin)

# block-level tokens that map to a container tag with no data
_BLOCK_TAGS: dict[str, Tag] = {
    "blockquote": BLOCK_QUOTE,
    "bullet_list": UNORDERED_LIST,
    "list_item": LIST_ITEM,
    "table": TABLE,
}

# inline tokens that map to a container tag with no data
_INLINE_TAGS: dict[str, Tag] = {
    "strong": BOLD,
    "em": ITALIC,
    "s": STRIKETHROUGH,
}


def _split_nesting(token_type: str) -> tuple[str, int]:
    "Separates the base name and the nesting direction (+1 open, -1 close) of a token type."

    if token_type.endswith("_open"):
        return token_type[: -len("_open")], 1
    elif token_type.endswith("_close"):
        return token_type[: -len("_close")], -1
    else:
        return token_type, 0


def _fence_language(info: str) -> str | None:
    "Extracts the language name from the info string of a fenced code block."

    words = info.split()
    return words[0] if words else None


def _is_task_checkbox(token: Token) -> bool:
    return token.type == "html_inline" and "task-list-item-checkbox" in token.content


class _EventBuilder:
    "Translates a token stream produced by *markdown-it-py* into Markdown events."

    def __init__(self) -> None:
        self._open_tags: list[Tag] = []
        self._row_cells = 0

    def block(self, tokens: Iterable[Token]) -> Iterator[MarkdownEvent]:
        for token in tokens:
            name, nesting = _split_nesting(token.type)

            match name:
                case "inline":
                    yield from self.inline(token.children or [])
                case "paragraph":
                    # paragraphs in tight lists are not rendered
                    if not token.hidden:
                        yield from self._container(PARAGRAPH, nesting)
                case "heading":
                    yield from self._container(Heading(int(token.tag[1:])), nesting)
                case "ordered_list":
                    yield from self._container(OrderedList(int(token.attrGet("start") or 1)), nesting)
                case "fence" | "code_block":
                    tag = CodeBlock(_fence_language(token.info) if name == "fence" else None)
                    yield Start(tag)
                    yield Text(token.content)
                    yield End(tag)
                case "hr":
                    yield THEMATIC_BREAK
                case "tr":
                    # each table row becomes a paragraph of space-separated cell text
                    if nesting > 0:
                        self._row_cells = 0
                    yield from self._container(PARAGRAPH, nesting)
                case "th" | "td":
                    if nesting > 0:
                        if self._row_cells > 0:
                            yield Text(" ")
                        self._row_cells += 1
                case "thead" | "tbody":
                    pass
                case "html_block":
                    LOGGER.debug("Skipping HTML block: %s", token.content.strip())
                case _ if name in _BLOCK_TAGS:
                    yield from self._container(_BLOCK_TAGS[name], nesting)
                case _:
                    LOGGER.debug("Skipping unrecognized block token: %s", token.type)

    def inline(self, tokens: Iterable[Token]) -> Iterator[MarkdownEvent]:
        # images nest their alternate text as child tokens; walk with an explicit stack
        pending: list[Iterator[Token]] = [iter(tokens)]
        strip_leading_space = False

        while pending:
            token = next(pending[-1], None)
            if token is None:
                pending.pop()
                if pending:
                    yield End(IMAGE)
                continue

            name, nesting = _split_nesting(token.type)

            match name:
                case "text" | "text_special":
                    content = token.content
                    if strip_leading_space:
                        content = content.lstrip(" ")
                    if content:
                        yield Text(content)
                case "code_inline":
                    yield InlineCode(token.content)
                case "softbreak":
                    yield SOFT_BREAK
                case "hardbreak":
                    yield HARD_BREAK
                case "link":
                    if nesting > 0:
                        yield from self._container(Link(str(token.attrGet("href") or "")), nesting)
                    else:
                        yield from self._container(None, nesting)
                case "image":
                    yield Start(IMAGE)
                    pending.append(iter(token.children or []))
                case "html_inline" if _is_task_checkbox(token):
                    yield TaskMarker('checked="checked"' in token.content)
                    strip_leading_space = True
                    continue
                case "html_inline":
                    LOGGER.debug("Skipping inline HTML: %s", token.content)
                case _ if name in _INLINE_TAGS:
                    yield from self._container(_INLINE_TAGS[name], nesting)
                case _:
                    LOGGER.debug("Skipping unrecognized inline token: %s", token.type)

            strip_leading_space = False

    def _container(self, tag: Tag | None, nesting: int) -> Iterator[MarkdownEvent]:
        """
        Emits the start or end event for a container.

        Closing tokens carry no data of their own (e.g. the destination of a link), so the end event reuses the tag
        recorded when the container was opened.
        """

        if nesting > 0 and tag is not None:
            self._open_tags.append(tag)
            yield Start(tag)
        elif nesting < 0 and self._open_tags:
            yield End(self._open_tags.pop())


def iter_events(tokens: Iterable[Token]) -> Iterator[MarkdownEvent]:
    "Produces Markdown events from a block-level token stream."

    return _EventBuilder().block(tokens)


def markdown_to_events(text: str) -> list[MarkdownEvent]:
    """
    Parses a Markdown document into a sequence of Markdown events.

    Code blocks left open at the end of the document are closed before parsing.

    :param text: Markdown input as a string.
    :returns: Events in document order, with balanced start and end events.
    """

    tokens = _PARSER.parse(close_unterminated_fences(text))
    return list(iter_events(tokens))
