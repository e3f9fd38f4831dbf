"""Render a Node tree as JUnit XML text."""

import re
from pathlib import Path
from xml.dom import minidom

from .models import Node

# Characters that are not allowed anywhere in an XML 1.0 document
_INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def _clean(value) -> str:
    return _INVALID_XML_CHARS.sub("", str(value))


def _to_dom(doc: minidom.Document, node: Node) -> minidom.Element:
    element = doc.createElement(node.tag)
    for key, value in node.attrs.items():
        element.setAttribute(key, _clean(value))

    if node.text is not None:
        text = _clean(node.text)
        # "]]>" cannot appear inside a CDATA section
        if node.cdata and "]]>" not in text:
            element.appendChild(doc.createCDATASection(text))
        else:
            element.appendChild(doc.createTextNode(text))

    for child in node.children:
        element.appendChild(_to_dom(doc, child))
    return element


def to_xml(root: Node, pretty: bool = True) -> str:
    """Serialize the tree, with an XML declaration."""
    doc = minidom.Document()
    doc.appendChild(_to_dom(doc, root))
    if pretty:
        data = doc.toprettyxml(indent="  ", encoding="UTF-8")
    else:
        data = doc.toxml(encoding="UTF-8")
    return data.decode("utf-8")


def write_xml(root: Node, path: Path, pretty: bool = True) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(to_xml(root, pretty=pretty), encoding="utf-8")
    return path
