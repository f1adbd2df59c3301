"""
Publish Markdown files to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import markdown

from .text import close_unterminated_fences

_CONVERTER = markdown.Markdown(
    extensions=[
        "markdown.extensions.tables",
        "pymdownx.highlight",  # required by `pymdownx.superfences`
        "pymdownx.superfences",
        "pymdownx.tasklist",
        "pymdownx.tilde",
        "sane_lists",
    ],
    extension_configs={
        "pymdownx.highlight": {
            "use_pygments": False,
        },
        "pymdownx.tasklist": {
            "custom_checkbox": False,
        },
    },
)


def markdown_to_html(content: str) -> str:
    """
    Converts a Markdown document into HTML for preview with Python-Markdown.

    Unlike Confluence Storage Format output, the preview shows images, tables and task lists.

    :param content: Markdown input as a string.
    :returns: HTML output as a string.
    :see: https://python-markdown.github.io/
    """

    _CONVERTER.reset()
    html = _CONVERTER.convert(close_unterminated_fences(content))
    return html
