"""
Publish Markdown files to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .article import Article, parse_article
from .csf import ParseError, content_to_string, elements_from_string
from .domain import ConfluenceDocumentOptions
from .events import (
    Bold,
    BlockQuote,
    CodeBlock,
    End,
    HardBreak,
    Heading,
    Image,
    InlineCode,
    Italic,
    Link,
    ListItem,
    ListKind,
    MarkdownEvent,
    OrderedList,
    Paragraph,
    SoftBreak,
    Start,
    Strikethrough,
    Table,
    Tag,
    TaskMarker,
    Text,
    ThematicBreak,
    UnorderedList,
)
from .quality import QualityScore, score
from .scanner import ScannedDocument, Scanner
from .sensitive import FlaggedSection, scan
from .source import markdown_to_events

LOGGER = logging.getLogger(__name__)

IMAGE_WARNING = "images are not supported — will be omitted"
TABLE_WARNING = "tables are not supported — content will be rendered as text"
TASK_LIST_WARNING = "task list checkboxes are not supported — will be omitted"

# language parameter value for code blocks that declare no language
PLAIN_LANGUAGE = "plain"

MIN_HEADING_LEVEL = 1
MAX_HEADING_LEVEL = 6

# code points that XML 1.0 does not permit in a document, not even as a character reference
_INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def strip_invalid_xml_chars(text: str) -> str:
    "Removes control characters and other code points that cannot appear in an XML document."

    text, count = _INVALID_XML_CHARS.subn("", text)
    if count > 0:
        LOGGER.debug("Dropped %d character(s) not permitted in XML", count)
    return text


def escape_xml(text: str) -> str:
    "Replaces characters with special meaning in XML with predefined entities, and drops characters XML forbids."

    # `&` goes first such that entities produced by later substitutions are not escaped again
    text = text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;").replace("'", "&apos;")
    return strip_invalid_xml_chars(text)


def clamp_heading_level(level: int) -> int:
    "Maps a heading level to the nearest valid level in the range 1 to 6."

    return min(max(level, MIN_HEADING_LEVEL), MAX_HEADING_LEVEL)


@dataclass(frozen=True)
class ConversionResult:
    """
    Output of a single conversion.

    :param markup: Confluence Storage Format (XHTML) document body.
    :param warnings: Constructs that have no faithful representation in the output, deduplicated and sorted.
    """

    markup: str
    warnings: tuple[str, ...]


class ConfluenceStorageFormatConverter:
    """
    Transforms a sequence of Markdown events into a Confluence Storage Format document.

    Each invocation of `convert` owns its output buffer and list nesting stack; instances hold no state between
    calls and may be shared.
    """

    def convert(self, events: Iterable[MarkdownEvent]) -> ConversionResult:
        """
        Converts Markdown events in a single forward pass.

        Never raises for well-typed input: unsupported constructs produce warnings, unbalanced list ends are ignored.
        """

        output: list[str] = []
        warnings: list[str] = []
        stack: list[ListKind] = []

        for event in events:
            match event:
                case Start(tag):
                    self._start(tag, output, warnings, stack)
                case End(tag):
                    self._end(tag, output, stack)
                case Text(text):
                    output.append(escape_xml(text))
                case InlineCode(text):
                    output.append(f"<code>{escape_xml(text)}</code>")
                case SoftBreak():
                    output.append(" ")
                case HardBreak():
                    output.append("<br/>")
                case ThematicBreak():
                    output.append("<hr/>\n")
                case TaskMarker():
                    warnings.append(TASK_LIST_WARNING)
                case _:
                    LOGGER.debug("Ignoring unrecognized event: %r", event)

        if stack:
            LOGGER.debug("Closing %d list(s) left open at end of input", len(stack))
            while stack:
                self._close_list(stack.pop(), output)

        return ConversionResult(markup="".join(output), warnings=tuple(sorted(set(warnings))))

    def _start(self, tag: Tag, output: list[str], warnings: list[str], stack: list[ListKind]) -> None:
        match tag:
            case Paragraph():
                output.append("<p>")
            case Heading(level):
                output.append(f"<h{clamp_heading_level(level)}>")
            case BlockQuote():
                output.append("<blockquote>")
            case CodeBlock(language):
                output.append(
                    '<ac:structured-macro ac:name="code" ac:schema-version="1">'
                    f'<ac:parameter ac:name="language">{escape_xml(language or PLAIN_LANGUAGE)}</ac:parameter>'
                    "<ac:plain-text-body><![CDATA["
                )
            case UnorderedList():
                stack.append(ListKind.UNORDERED)
                output.append("<ul>")
            case OrderedList():
                stack.append(ListKind.ORDERED)
                output.append("<ol>")
            case ListItem():
                output.append("<li>")
            case Bold():
                output.append("<strong>")
            case Italic():
                output.append("<em>")
            case Strikethrough():
                output.append("<del>")
            case Link(destination):
                output.append(f'<a href="{escape_xml(destination)}">')
            case Image():
                warnings.append(IMAGE_WARNING)
            case Table():
                warnings.append(TABLE_WARNING)
            case _:
                LOGGER.debug("Ignoring start of unrecognized tag: %r", tag)

    def _end(self, tag: Tag, output: list[str], stack: list[ListKind]) -> None:
        match tag:
            case Paragraph():
                output.append("</p>\n")
            case Heading(level):
                output.append(f"</h{clamp_heading_level(level)}>\n")
            case BlockQuote():
                output.append("</blockquote>\n")
            case CodeBlock():
                output.append("]]></ac:plain-text-body></ac:structured-macro>\n")
            case UnorderedList() | OrderedList():
                if stack:
                    self._close_list(stack.pop(), output)
                else:
                    LOGGER.debug("Ignoring end of list with no matching start")
            case ListItem():
                output.append("</li>")
            case Bold():
                output.append("</strong>")
            case Italic():
                output.append("</em>")
            case Strikethrough():
                output.append("</del>")
            case Link():
                output.append("</a>")
            case Image() | Table():
                pass
            case _:
                LOGGER.debug("Ignoring end of unrecognized tag: %r", tag)

    @staticmethod
    def _close_list(kind: ListKind, output: list[str]) -> None:
        match kind:
            case ListKind.ORDERED:
                output.append("</ol>\n")
            case ListKind.UNORDERED:
                output.append("</ul>\n")


def convert_events(events: Iterable[MarkdownEvent]) -> ConversionResult:
    "Converts a sequence of Markdown events into Confluence Storage Format."

    return ConfluenceStorageFormatConverter().convert(events)


def convert_markdown(text: str) -> ConversionResult:
    "Parses Markdown text and converts it into Confluence Storage Format."

    return convert_events(markdown_to_events(text))


class ConversionError(RuntimeError):
    "Raised when a Markdown document cannot be converted to Confluence Storage Format."


class ConfluenceDocument:
    "Encapsulates the Confluence Storage Format body and metadata of a single Markdown document."

    title: str
    labels: list[str]
    page_id: str | None
    space_key: str | None

    article: Article
    quality: QualityScore
    findings: list[FlaggedSection]
    warnings: tuple[str, ...]

    options: ConfluenceDocumentOptions
    text: str
    markup: str

    @classmethod
    def create(cls, path: Path, options: ConfluenceDocumentOptions) -> "ConfluenceDocument":
        try:
            document = Scanner().read(path)
        except (OSError, UnicodeDecodeError) as ex:
            raise ConversionError(path) from ex

        return ConfluenceDocument(path, document, options)

    def __init__(self, path: Path, document: ScannedDocument, options: ConfluenceDocumentOptions) -> None:
        "Converts a single Markdown document to Confluence Storage Format."

        self.options = options
        self.text = document.text

        result = convert_markdown(document.text)

        # output with unbalanced or misnested tags would be rejected by Confluence
        try:
            elements_from_string(result.markup)
        except ParseError as ex:
            raise ConversionError(path) from ex

        self.markup = result.markup
        self.warnings = result.warnings

        self.article = parse_article(document.text)
        self.quality = score(self.article)
        self.findings = scan(document.text)

        if options.title is not None:
            self.title = options.title
        elif document.title is not None:
            self.title = document.title
        elif self.article.has_title:
            self.title = self.article.title
        else:
            self.title = path.stem

        self.labels = document.tags or self.article.tags
        self.page_id = document.page_id
        self.space_key = document.space_key or options.space_key

    def xhtml(self) -> str:
        if self.options.pretty_print:
            return content_to_string(self.markup)
        else:
            return self.markup
