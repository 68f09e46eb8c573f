# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Low level primitives: a pull cursor over a parsed document and a streaming XML text emitter"""

import os
from dataclasses import dataclass, field
from enum import IntEnum
from io import StringIO
from typing import IO, Self, TextIO
from xml.sax.saxutils import escape

from lxml import etree

from .exceptions import LibXMLError

__all__ = 'PARSER_OPTIONS', 'NodeType', 'XMLPullReader', 'XMLSource', 'XMLStreamWriter'


# noinspection PyProtectedMember
type ETreeElement = etree._Element  # noqa: SLF001
type XMLSource = str | bytes | os.PathLike[str] | IO[bytes] | IO[str]


PARSER_OPTIONS = dict(resolve_entities=False, no_network=True, strip_cdata=False, remove_blank_text=False, remove_comments=False, remove_pis=False)


class NodeType(IntEnum):
    NONE = 0
    ELEMENT = 1
    TEXT = 3
    ENTITY_REFERENCE = 5
    PROCESSING_INSTRUCTION = 7
    COMMENT = 8
    WHITESPACE = 13
    END_ELEMENT = 15


@dataclass(slots=True)
class Node:
    type: NodeType
    depth: int
    element: ETreeElement | None = None
    value: str = ''
    end: int | None = None  # the position of the matching END_ELEMENT node, None for empty elements


def _add_text(nodes: list[Node], text: str | None, depth: int) -> None:
    if text:
        nodes.append(Node(NodeType.WHITESPACE if text.isspace() else NodeType.TEXT, depth, value=text))


def _add_node(nodes: list[Node], element: ETreeElement, depth: int) -> None:
    # noinspection PyProtectedMember
    if isinstance(element, etree._Comment):  # noqa: SLF001
        nodes.append(Node(NodeType.COMMENT, depth, element, element.text or ''))
    elif isinstance(element, etree._ProcessingInstruction):  # noqa: SLF001
        nodes.append(Node(NodeType.PROCESSING_INSTRUCTION, depth, element, element.text or ''))
    elif isinstance(element, etree._Entity):  # noqa: SLF001
        nodes.append(Node(NodeType.ENTITY_REFERENCE, depth, element, element.text or ''))
    else:
        start = Node(NodeType.ELEMENT, depth, element)
        nodes.append(start)
        if element.text is not None or len(element):
            _add_text(nodes, element.text, depth + 1)
            for child in element:
                _add_node(nodes, child, depth + 1)
            start.end = len(nodes)
            nodes.append(Node(NodeType.END_ELEMENT, depth, element))
    _add_text(nodes, element.tail, depth)


class XMLPullReader:
    """
    A forward only cursor over the nodes of a document.

    The document is parsed with lxml and then walked in document order the way
    a streaming pull parser reports it: an ELEMENT node for every start tag,
    TEXT and WHITESPACE nodes for character data (CDATA sections are reported
    as TEXT), COMMENT and PROCESSING_INSTRUCTION nodes and an END_ELEMENT node
    for every element that has content. Elements without content are reported
    only once, with is_empty_element set.

    The depth of the root element is 0 and the depth of the nodes inside an
    element is the element depth plus 1. Before the first call to read() and
    after the last node the cursor is on no node and node_type is NONE.
    """

    def __init__(self, root: ETreeElement) -> None:
        self._nodes: list[Node] = []
        for sibling in reversed(list(root.itersiblings(preceding=True))):
            _add_node(self._nodes, sibling, 0)
        _add_node(self._nodes, root, 0)
        for sibling in root.itersiblings():
            _add_node(self._nodes, sibling, 0)
        self._position = -1

    def __repr__(self) -> str:
        return f'<{self.__class__.__qualname__} at position {self._position} of {len(self._nodes)} nodes>'

    @classmethod
    def from_source(cls, source: XMLSource) -> Self:
        if hasattr(source, 'read'):
            source = source.read()
        try:
            match source:
                case str():
                    # Text is already decoded, so the encoding named by its XML declaration no longer applies.
                    root = etree.fromstring(source.encode(), etree.XMLParser(encoding='utf-8', **PARSER_OPTIONS))
                case bytes():
                    root = etree.fromstring(source, etree.XMLParser(**PARSER_OPTIONS))
                case _:
                    root = etree.parse(os.fspath(source), etree.XMLParser(**PARSER_OPTIONS)).getroot()
        except etree.XMLSyntaxError as exc:
            raise LibXMLError(f'Failed to parse the XML document: {exc}', errors=(str(entry) for entry in exc.error_log)) from exc
        return cls(root)

    @property
    def position(self) -> int:
        return self._position

    @property
    def node(self) -> Node | None:
        if 0 <= self._position < len(self._nodes):
            return self._nodes[self._position]
        return None

    @property
    def node_type(self) -> NodeType:
        node = self.node
        return node.type if node is not None else NodeType.NONE

    @property
    def depth(self) -> int:
        node = self.node
        return node.depth if node is not None else 0

    @property
    def element(self) -> ETreeElement | None:
        node = self.node
        if node is not None and node.type in {NodeType.ELEMENT, NodeType.END_ELEMENT}:
            return node.element
        return None

    @property
    def local_name(self) -> str | None:
        element = self.element
        return etree.QName(element).localname if element is not None else None

    @property
    def namespace_uri(self) -> str:
        element = self.element
        return (etree.QName(element).namespace or '') if element is not None else ''

    @property
    def value(self) -> str:
        node = self.node
        return node.value if node is not None else ''

    @property
    def is_empty_element(self) -> bool:
        node = self.node
        return node is not None and node.type is NodeType.ELEMENT and node.end is None

    @property
    def attributes(self) -> dict[str, str]:
        """The attributes of the current element, with the namespaced ones in clark notation"""
        node = self.node
        if node is None or node.type is not NodeType.ELEMENT:
            return {}
        return dict(node.element.attrib)

    @property
    def has_attributes(self) -> bool:
        node = self.node
        return node is not None and node.type is NodeType.ELEMENT and len(node.element.attrib) > 0

    def read(self) -> bool:
        """Move to the next node in document order. Return False when there are no more nodes."""
        self._position = min(self._position + 1, len(self._nodes))
        return self._position < len(self._nodes)

    def next(self) -> bool:
        """Move to the node after the current one, skipping the subtree of the current element"""
        node = self.node
        if node is not None and node.type is NodeType.ELEMENT and node.end is not None:
            self._position = node.end
        return self.read()

    def read_inner_xml(self) -> str:
        """Return the markup inside the current element, with the namespace declarations in scope copied on every child element"""
        node = self.node
        if node is None or node.type is not NodeType.ELEMENT:
            return ''
        element = node.element
        return escape(element.text or '') + ''.join(etree.tostring(child, encoding='unicode', with_tail=True) for child in element)


@dataclass(slots=True)
class OpenElement:
    name: str
    depth: int
    start_tag_open: bool = True
    has_children: bool = False
    has_text: bool = False
    namespace_declarations: dict[str, str] = field(default_factory=dict)


_attribute_entities = {'"': '&quot;', '\n': '&#10;', '\r': '&#13;', '\t': '&#9;'}


def _quote_attribute(value: str) -> str:
    return f'"{escape(value, _attribute_entities)}"'


class XMLStreamWriter:
    """
    Write XML text to a stream, one construct at a time.

    Namespace declarations requested while an element's start tag is being
    written are added after its attributes, when the start tag is closed.
    Elements that have no content are closed with '/>'.

    With indent enabled, child elements go on their own line, indented by
    indent_string for every nesting level, unless their parent contains text,
    and the document ends with a newline.
    """

    def __init__(self, stream: TextIO | None = None, *, indent: bool = False, indent_string: str = ' ') -> None:
        self._buffer = StringIO() if stream is None else None
        self.stream = stream if stream is not None else self._buffer
        self.indent = indent
        self.indent_string = indent_string
        self._elements: list[OpenElement] = []

    def __repr__(self) -> str:
        return f'<{self.__class__.__qualname__} on {self.stream!r} with {len(self._elements)} open elements>'

    def getvalue(self) -> str:
        if self._buffer is None:
            raise TypeError(f'Cannot retrieve the output of a writer that writes to {self.stream!r}')
        return self._buffer.getvalue()

    def start_document(self, version: str = '1.0', encoding: str | None = None, standalone: bool | None = None) -> None:
        declaration = f'<?xml version="{version}"'
        if encoding is not None:
            declaration += f' encoding="{encoding}"'
        if standalone is not None:
            declaration += f' standalone="{'yes' if standalone else 'no'}"'
        self.stream.write(f'{declaration}?>\n')

    def end_document(self) -> None:
        while self._elements:
            self.end_element()
        self.stream.flush()

    def start_element(self, name: str) -> None:
        if self._elements:
            parent = self._elements[-1]
            self._close_start_tag(parent)
            parent.has_children = True
            if self.indent and not parent.has_text:
                self.stream.write('\n' + self.indent_string * (parent.depth + 1))
        self.stream.write(f'<{name}')
        self._elements.append(OpenElement(name, len(self._elements)))

    def start_element_ns(self, prefix: str | None, local_name: str, namespace: str | None = None) -> None:
        self.start_element(f'{prefix}:{local_name}' if prefix else local_name)
        if namespace is not None:
            self._declare_namespace(prefix, namespace)

    def end_element(self) -> None:
        if not self._elements:
            raise RuntimeError('There is no open element to end')
        element = self._elements.pop()
        if element.start_tag_open:
            self._write_namespace_declarations(element)
            self.stream.write('/>')
        else:
            if self.indent and element.has_children and not element.has_text:
                self.stream.write('\n' + self.indent_string * element.depth)
            self.stream.write(f'</{element.name}>')
        if self.indent and not self._elements:
            self.stream.write('\n')

    def write_attribute(self, name: str, value: str) -> None:
        self._open_start_tag()
        self.stream.write(f' {name}={_quote_attribute(value)}')

    def write_attribute_ns(self, prefix: str | None, local_name: str, namespace: str | None, value: str) -> None:
        self.write_attribute(f'{prefix}:{local_name}' if prefix else local_name, value)
        if namespace is not None:
            self._declare_namespace(prefix, namespace)

    def write_string(self, text: str) -> None:
        self._start_text()
        self.stream.write(escape(text))

    def write_cdata(self, text: str) -> None:
        self._start_text()
        self.stream.write(f'<![CDATA[{text.replace(']]>', ']]]]><![CDATA[>')}]]>')

    def _open_start_tag(self) -> OpenElement:
        if not self._elements or not self._elements[-1].start_tag_open:
            raise RuntimeError('Attributes can only be written right after an element was started')
        return self._elements[-1]

    def _declare_namespace(self, prefix: str | None, namespace: str) -> None:
        self._open_start_tag().namespace_declarations.setdefault(prefix or '', namespace)

    def _write_namespace_declarations(self, element: OpenElement) -> None:
        for prefix, namespace in element.namespace_declarations.items():
            self.stream.write(f' {f'xmlns:{prefix}' if prefix else 'xmlns'}={_quote_attribute(namespace)}')

    def _close_start_tag(self, element: OpenElement) -> None:
        if element.start_tag_open:
            self._write_namespace_declarations(element)
            self.stream.write('>')
            element.start_tag_open = False

    def _start_text(self) -> None:
        if self._elements:
            element = self._elements[-1]
            self._close_start_tag(element)
            element.has_text = True
