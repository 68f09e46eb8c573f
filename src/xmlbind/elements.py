# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Standard element classes, that can be registered in the element map and the class map"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from urllib.parse import urljoin

from . import clark, deserializers, serializers
from .stream import NodeType, XMLPullReader

if TYPE_CHECKING:
    from .reader import Reader
    from .writer import Writer

__all__ = 'Base', 'CData', 'Elements', 'KeyValue', 'Uri', 'XMLFragment'


@dataclass
class Base:
    """
    The default element.

    It decodes empty elements as None, elements with text content as the text
    and elements with child elements as the list of the parsed children. The
    value is written back with the writer's standard rules.
    """

    value: Any = None

    def xml_serialize(self, writer: 'Writer') -> None:
        writer.write(self.value)

    @classmethod
    def xml_deserialize(cls, reader: 'Reader') -> Any:
        return reader.parse_inner_tree()


@dataclass
class CData:
    """Write a string as a CDATA section. It can only be used for writing."""

    value: str

    def xml_serialize(self, writer: 'Writer') -> None:
        writer.write_cdata(self.value)


@dataclass
class Elements:
    """
    A list of element names, represented by empty child elements.

    For example <d:resourcetype><d:collection /><s:calendar /></d:resourcetype>
    decodes as ['{DAV:}collection', '{urn:example}calendar'].
    """

    value: list[str] = field(default_factory=list)

    def xml_serialize(self, writer: 'Writer') -> None:
        serializers.enum(writer, self.value)

    @classmethod
    def xml_deserialize(cls, reader: 'Reader') -> list[str]:
        return deserializers.enum(reader)


@dataclass
class KeyValue:
    """A dictionary keyed by clark notation element names, represented by the child elements"""

    value: dict[str, Any] = field(default_factory=dict)

    def xml_serialize(self, writer: 'Writer') -> None:
        writer.write(self.value)

    @classmethod
    def xml_deserialize(cls, reader: 'Reader') -> dict[str, Any]:
        return deserializers.key_value(reader)


@dataclass
class Uri:
    """
    A URI, like the content of <link>/foo/bar</link>.

    Relative URIs are resolved against the reader's or the writer's context
    URI. Two Uri instances are equal if their stored strings are equal.
    """

    value: str

    def xml_serialize(self, writer: 'Writer') -> None:
        writer.write_string(urljoin(writer.context_uri, self.value))

    @classmethod
    def xml_deserialize(cls, reader: 'Reader') -> 'Uri':
        return cls(urljoin(reader.context_uri, reader.read_text()))


@dataclass
class XMLFragment:
    """
    An unprocessed piece of XML.

    The inner XML of the element is kept as is, with every child element
    carrying the namespace declarations that were in scope for it. When
    written, the fragment is parsed again and its elements, attributes and
    text are written through the writer, so their namespaces use the
    writer's prefixes.

    lxml reports CDATA sections as text, so CDATA inside a fragment is
    written back as escaped text with the same content.
    """

    xml: str

    wrapper_namespace = 'http://sabre.io/ns'

    def xml_serialize(self, writer: 'Writer') -> None:
        cursor = XMLPullReader.from_source(f'<xml-fragment xmlns="{self.wrapper_namespace}">{self.xml}</xml-fragment>')
        while cursor.read():
            if cursor.depth < 1:
                continue
            match cursor.node_type:
                case NodeType.ELEMENT:
                    writer.start_element(clark.combine(cursor.namespace_uri, cursor.local_name))
                    writer.write_attributes(cursor.attributes)
                    if cursor.is_empty_element:
                        writer.end_element()
                case NodeType.TEXT | NodeType.WHITESPACE:
                    writer.write_string(cursor.value)
                case NodeType.END_ELEMENT:
                    writer.end_element()

    @classmethod
    def xml_deserialize(cls, reader: 'Reader') -> 'XMLFragment':
        result = cls(reader.read_inner_xml())
        reader.next()
        return result
