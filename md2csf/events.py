"""
Publish Markdown files to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import enum
from dataclasses import dataclass


@enum.unique
class ListKind(enum.Enum):
    "Distinguishes numbered lists from bulleted lists on the nesting stack."

    ORDERED = "ordered"
    UNORDERED = "unordered"


@dataclass(frozen=True)
class Paragraph:
    pass


@dataclass(frozen=True)
class Heading:
    "Section heading; `level` is expected in the range 1 to 6."

    level: int


@dataclass(frozen=True)
class BlockQuote:
    pass


@dataclass(frozen=True)
class CodeBlock:
    """
    Fenced or indented code block.

    :param language: Language declared in the info string of a fenced block, or `None` for an indented block.
    """

    language: str | None = None


@dataclass(frozen=True)
class UnorderedList:
    pass


@dataclass(frozen=True)
class OrderedList:
    "Numbered list; `start` is the number of the first item."

    start: int = 1


@dataclass(frozen=True)
class ListItem:
    pass


@dataclass(frozen=True)
class Bold:
    pass


@dataclass(frozen=True)
class Italic:
    pass


@dataclass(frozen=True)
class Strikethrough:
    pass


@dataclass(frozen=True)
class Link:
    destination: str


@dataclass(frozen=True)
class Image:
    pass


@dataclass(frozen=True)
class Table:
    pass


Tag = Paragraph | Heading | BlockQuote | CodeBlock | UnorderedList | OrderedList | ListItem | Bold | Italic | Strikethrough | Link | Image | Table


@dataclass(frozen=True)
class Start:
    "Opens a block or inline container."

    tag: Tag


@dataclass(frozen=True)
class End:
    "Closes the container opened by the matching `Start`."

    tag: Tag


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class InlineCode:
    text: str


@dataclass(frozen=True)
class SoftBreak:
    pass


@dataclass(frozen=True)
class HardBreak:
    pass


@dataclass(frozen=True)
class ThematicBreak:
    pass


@dataclass(frozen=True)
class TaskMarker:
    "Checkbox at the beginning of a task list item."

    checked: bool


MarkdownEvent = Start | End | Text | InlineCode | SoftBreak | HardBreak | ThematicBreak | TaskMarker

# shared instances of tags and events that carry no data
PARAGRAPH = Paragraph()
BLOCK_QUOTE = BlockQuote()
UNORDERED_LIST = UnorderedList()
LIST_ITEM = ListItem()
BOLD = Bold()
ITALIC = Italic()
STRIKETHROUGH = Strikethrough()
IMAGE = Image()
TABLE = Table()

SOFT_BREAK = SoftBreak()
HARD_BREAK = HardBreak()
THEMATIC_BREAK = ThematicBreak()
