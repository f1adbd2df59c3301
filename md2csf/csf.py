"""
Publish Markdown files to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import re

import lxml.etree as ET

# XML namespaces typically associated with Confluence Storage Format documents
_namespaces = {
    "ac": "http://atlassian.com/content",
    "ri": "http://atlassian.com/resource/identifier",
}
for key, value in _namespaces.items():
    ET.register_namespace(key, value)


class ParseError(RuntimeError):
    pass


def _qname(namespace_uri: str, name: str) -> str:
    return ET.QName(namespace_uri, name).text


def AC_ATTR(name: str) -> str:
    return _qname(_namespaces["ac"], name)


def AC_TAG(name: str) -> str:
    return _qname(_namespaces["ac"], name)


def elements_from_strings(items: list[str]) -> ET._Element:
    """
    Creates a Confluence Storage Format XML document tree from XML fragment strings.

    This function
    * wraps the content in a root element,
    * adds namespace declarations associated with Confluence documents.

    Only the entities predefined in XML (e.g. `&amp;` or `&apos;`) are recognized.

    :param items: Strings to parse into XML fragments.
    :returns: An XML document as an element tree.
    """

    parser = ET.XMLParser(
        remove_blank_text=True,
        remove_comments=True,
        strip_cdata=False,
        resolve_entities=False,
    )

    ns_attr_list = "".join(f' xmlns:{key}="{value}"' for key, value in _namespaces.items())

    data = [f"<root{ns_attr_list}>"]
    data.extend(items)
    data.append("</root>")

    try:
        return ET.fromstringlist(data, parser=parser)
    except ET.XMLSyntaxError as ex:
        raise ParseError() from ex


def elements_from_string(content: str) -> ET._Element:
    """
    Creates a Confluence Storage Format XML document tree from an XML string.

    :param content: String to parse into XML.
    :returns: An XML document as an element tree.
    """

    return elements_from_strings([content])


def is_well_formed(content: str) -> bool:
    "True if the Confluence Storage Format fragment parses as XML."

    try:
        elements_from_string(content)
    except ParseError:
        return False
    return True


def elements_to_string(root: ET._Element) -> str:
    """
    Converts a Confluence Storage Format element tree into an XML string to push to Confluence REST API.

    :param root: Synthesized XML element tree of a Confluence Storage Format document.
    :returns: XML as a string.
    """

    xml = ET.tostring(root, encoding="utf8", method="xml").decode("utf8")
    m = re.match(r"^<root\s+[^>]*>(.*)</root>\s*$", xml, re.DOTALL)
    if m:
        return m.group(1)
    else:
        raise ValueError("expected: Confluence content")


# elements whose position in the page layout does not depend on surrounding whitespace
_BLOCK_ELEMENTS = frozenset(
    [
        "p",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "blockquote",
        "ul",
        "ol",
        "li",
        "hr",
        AC_TAG("structured-macro"),
        AC_TAG("parameter"),
        AC_TAG("plain-text-body"),
    ]
)


def _is_block_container(elem: ET._Element) -> bool:
    "True if an element holds only block-level elements, such that whitespace between them carries no meaning."

    if len(elem) == 0 or (elem.text and elem.text.strip()):
        return False

    for child in elem:
        if child.tag not in _BLOCK_ELEMENTS:
            return False
        if child.tail and child.tail.strip():
            return False

    return True


def _indent(elem: ET._Element, level: int, space: str = "  ") -> None:
    "Indents block-level children of an element; inline (mixed) content is left intact."

    if not _is_block_container(elem):
        return

    indentation = "\n" + space * (level + 1)
    elem.text = indentation
    for child in elem:
        _indent(child, level + 1, space)
        child.tail = indentation
    elem[-1].tail = "\n" + space * level


def content_to_string(content: str) -> str:
    """
    Converts a Confluence Storage Format document into a readable, indented XML document.

    Only whitespace between block-level elements is changed; paragraph text and inline markup are preserved as is.

    :param content: Confluence Storage Format content as a string.
    :returns: XML as a string.
    """

    if not content.strip():
        return ""

    root = elements_from_string(content)
    if not _is_block_container(root):
        return content

    root.text = None
    for child in root:
        _indent(child, 0)
        child.tail = "\n"

    return elements_to_string(root)
