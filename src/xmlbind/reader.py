# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
from collections.abc import Iterator

from lxml import etree

from . import clark
from .context import Context
from .elements import Base
from .exceptions import ConfigurationError, LibXMLError, ParseError
from .model import Decoder, ElementMap, ParsedElement, XMLDeserializable
from .stream import NodeType, XMLPullReader, XMLSource

__all__ = 'ParsedElement', 'Reader'


log = logging.getLogger(__name__)


class Reader(Context):
    """
    Decode an XML document into Python values.

    Every element is decoded by the decoder registered for its clark notation
    name in the element map. Elements without a registered decoder are decoded
    with Base.xml_deserialize, which returns None for an empty element, the
    text for an element with only text content, or the list of parsed child
    elements otherwise.
    """

    premature_end_message = (
        'The document ended before the current element was closed. '
        'Most likely a decoder consumed too many nodes, reading past the end of its own element.'
    )

    def __init__(self) -> None:
        super().__init__()
        self._cursor: XMLPullReader | None = None

    def __repr__(self) -> str:
        return f'<{self.__class__.__qualname__} on {self._cursor!r}>'

    def load(self, source: XMLSource) -> None:
        """Load the document from XML text, bytes, a file object or a file path"""
        if self._cursor is not None:
            raise RuntimeError('A document was already loaded into this reader')
        self._cursor = XMLPullReader.from_source(source)
        log.debug('Loaded XML document from %s', type(source).__qualname__)

    @property
    def cursor(self) -> XMLPullReader:
        if self._cursor is None:
            raise RuntimeError('No document was loaded into this reader')
        return self._cursor

    # Cursor access

    @property
    def node_type(self) -> NodeType:
        return self.cursor.node_type

    @property
    def depth(self) -> int:
        return self.cursor.depth

    @property
    def position(self) -> int:
        return self.cursor.position

    @property
    def local_name(self) -> str | None:
        return self.cursor.local_name

    @property
    def namespace_uri(self) -> str:
        return self.cursor.namespace_uri

    @property
    def value(self) -> str:
        return self.cursor.value

    @property
    def is_empty_element(self) -> bool:
        return self.cursor.is_empty_element

    @property
    def has_attributes(self) -> bool:
        return self.cursor.has_attributes

    def read(self) -> bool:
        return self.cursor.read()

    def next(self) -> bool:
        return self.cursor.next()

    def read_inner_xml(self) -> str:
        return self.cursor.read_inner_xml()

    # Decoding

    @property
    def clark(self) -> str | None:
        """The clark notation name of the current element or None if the reader is not positioned on an element"""
        if self._cursor is None or self._cursor.node_type not in {NodeType.ELEMENT, NodeType.END_ELEMENT}:
            return None
        return clark.combine(self._cursor.namespace_uri, self._cursor.local_name)

    def parse(self) -> ParsedElement:
        """Decode the document and return the parsed root element"""
        cursor = self.cursor
        while cursor.node_type is not NodeType.ELEMENT and cursor.read():
            pass
        if cursor.node_type is not NodeType.ELEMENT:
            raise ParseError('The document does not contain a root element')
        try:
            result = self.parse_current_element()
        except etree.LxmlError as exc:
            raise LibXMLError(f'Failed to process the XML document: {exc}') from exc
        except RecursionError as exc:
            raise ParseError('The document is nested too deeply') from exc
        log.debug('Parsed document with the %s root element', result.name)
        return result

    def parse_current_element(self) -> ParsedElement:
        """Decode the element the reader is positioned on and move past it"""
        name = self.clark
        if name is None or self.node_type is not NodeType.ELEMENT:
            raise ParseError(f'The reader is not positioned on an element (current node type: {self.node_type.name})')
        attributes = self.parse_attributes() if self.has_attributes else {}
        position = self.position
        value = self.decoder_for(name)(self)
        if self.position == position:
            raise ConfigurationError(f'The decoder for the {name} element did not advance the reader past the element')
        return ParsedElement(name, value, attributes)

    def parse_attributes(self) -> dict[str, str]:
        # Namespace declarations are not attributes and are never reported here.
        return self.cursor.attributes

    def parse_inner_tree(self, element_map: ElementMap | None = None) -> list[ParsedElement] | str | None:
        """
        Decode the content of the current element and move past it.

        Return None if the element is empty, the list of parsed child elements
        if it has any (text mixed with child elements is discarded) or else
        the concatenated text content. Comments, processing instructions and
        whitespace between elements are skipped.

        If element_map is given, it replaces the reader's element map while
        the content is decoded.
        """
        if self.node_type is NodeType.ELEMENT and self.is_empty_element:
            self.next()
            return None
        if element_map is None:
            return self._parse_content()
        with self.scoped_context(element_map=element_map):
            return self._parse_content()

    def _parse_content(self) -> list[ParsedElement] | str | None:
        depth = self.depth
        text: list[str] = []
        elements: list[ParsedElement] = []
        if not self.read():
            raise ParseError(self.premature_end_message)
        while True:
            match self.node_type:
                case NodeType.ELEMENT:
                    elements.append(self.parse_current_element())
                case NodeType.TEXT:
                    text.append(self.value)
                    self.read()
                case NodeType.END_ELEMENT if self.depth == depth:
                    self.read()
                    break
                case NodeType.NONE:
                    raise ParseError(self.premature_end_message)
                case _:
                    self.read()
        if elements:
            return elements
        return ''.join(text) if text else None

    def parse_get_elements(self, element_map: ElementMap | None = None) -> list[ParsedElement]:
        """Same as parse_inner_tree(), but always return a list, that is empty if the element had no child elements"""
        result = self.parse_inner_tree(element_map)
        return result if isinstance(result, list) else []

    def read_text(self) -> str:
        """Return the text inside the current element, including the text of its descendants, and move past the element"""
        if self.node_type is NodeType.ELEMENT and self.is_empty_element:
            self.next()
            return ''
        depth = self.depth
        text: list[str] = []
        while self.read() and self.depth > depth:
            if self.node_type is NodeType.TEXT:
                text.append(self.value)
        if self.node_type is NodeType.END_ELEMENT and self.depth == depth:
            self.read()
        return ''.join(text)

    def iter_child_elements(self) -> Iterator[str]:
        """
        Iterate over the child elements of the current element.

        The clark notation name of each child is produced while the reader is
        positioned on it. The consumer may decode the child, or leave it alone
        in which case it is skipped. When the iteration ends, the reader is
        positioned after the end of the current element.
        """
        if self.node_type is NodeType.ELEMENT and self.is_empty_element:
            self.next()
            return
        depth = self.depth
        if not self.read():
            raise ParseError(self.premature_end_message)
        while True:
            match self.node_type:
                case NodeType.ELEMENT:
                    position = self.position
                    yield self.clark
                    if self.position == position:
                        self.next()
                case NodeType.END_ELEMENT if self.depth == depth:
                    self.read()
                    return
                case NodeType.NONE:
                    raise ParseError(self.premature_end_message)
                case _:
                    self.read()

    def decoder_for(self, name: str) -> Decoder:
        """Return the decoder for the element with the given clark notation name"""
        if name not in self.element_map:
            return Base.xml_deserialize
        decoder = self.element_map[name]
        match decoder:
            case type() if issubclass(decoder, XMLDeserializable):
                return decoder.xml_deserialize
            case type():
                raise ConfigurationError(f'The {decoder.__qualname__} class registered for the {name} element does not implement xml_deserialize()')
            case _ if callable(decoder):
                return decoder
            case _:
                raise ConfigurationError(f'Could not use {decoder!r} as the decoder for the {name} element')
