"""Write an element tree as SVG markup."""
from __future__ import annotations

import io
import xml.etree.ElementTree as ET
from typing import IO, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .element import Element

XML_DECLARATION = '<?xml version="1.0"?>'
GENERATOR_COMMENT = "<!-- Generated by smartsvg -->"
DEFAULT_NAMESPACES = {
    "xmlns": "http://www.w3.org/2000/svg",
    "xmlns:xlink": "http://www.w3.org/1999/xlink",
}


def _to_etree(node: "Element", *, root: bool = False) -> ET.Element:
    attrs = node.attrs.copy()
    if root:
        attrs.update(DEFAULT_NAMESPACES)
    elem = ET.Element(node.tag)
    # ElementTree keeps insertion order, so sorted insertion gives sorted output.
    for key, value in attrs.sorted_items():
        elem.set(key, value)
    if node.children:
        for child in node.children:
            for text in child.comments:
                elem.append(ET.Comment(text))
            elem.append(_to_etree(child))
    elif node.text:
        elem.text = node.text
    return elem


def write_document(node: "Element", sink: IO[str]) -> None:
    """Write ``node`` as a standalone document, namespaces added on output only."""
    sink.write(XML_DECLARATION + "\n")
    if node.declaration:
        sink.write(node.declaration + "\n")
    sink.write(GENERATOR_COMMENT + "\n")
    for text in node.comments:
        sink.write(f"<!--{text}-->\n")
    tree = _to_etree(node, root=True)
    ET.indent(tree, space="\t")
    sink.write(ET.tostring(tree, encoding="unicode"))
    sink.write("\n")


def to_string(node: "Element") -> str:
    buf = io.StringIO()
    write_document(node, buf)
    return buf.getvalue()


__all__ = ["DEFAULT_NAMESPACES", "to_string", "write_document"]
