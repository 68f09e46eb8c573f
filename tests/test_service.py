# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from dataclasses import dataclass, field
from io import BytesIO, StringIO
from pathlib import Path

import pytest

from xmlbind import KeyValue, ParsedElement, Reader, Service, Writer
from xmlbind.exceptions import ConfigurationError, LibXMLError, ParseError

NS = 'http://sabredav.org/ns'


@dataclass
class OrderStatus:
    id: str | None = None
    label: str | None = None


@dataclass
class Order:
    id: str | None = None
    amount: str | None = None
    description: str | None = None
    status: OrderStatus | None = None
    link: list[str] = field(default_factory=list)


def decode_root(reader: Reader) -> str:
    reader.next()
    return 'bar'


class TestService:

    def test_get_reader(self) -> None:
        element_map = {'{http://sabre.io/ns}test': decode_root}
        service = Service(element_map=element_map)
        reader = service.get_reader()
        assert isinstance(reader, Reader)
        assert reader.element_map == element_map
        reader.element_map['{urn:other}elem'] = decode_root
        assert '{urn:other}elem' not in service.element_map

    def test_get_writer(self) -> None:
        namespace_map = {'http://sabre.io/ns': 's'}
        service = Service(namespace_map=namespace_map)
        writer = service.get_writer()
        assert isinstance(writer, Writer)
        assert writer.namespace_map == namespace_map
        assert writer.indent

    def test_parse(self) -> None:
        service = Service(element_map={'{http://sabre.io/ns}blab': decode_root})
        document = '<root xmlns="http://sabre.io/ns"><child>value</child></root>'
        name, value = service.parse(document)
        assert name == '{http://sabre.io/ns}root'
        assert value == [ParsedElement('{http://sabre.io/ns}child', 'value')]

    def test_parse_sources(self, tmp_path: Path) -> None:
        service = Service(element_map={'{http://sabre.io/ns}root': decode_root})
        document = '<root xmlns="http://sabre.io/ns"><child>value</child></root>'
        path = tmp_path / 'document.xml'
        path.write_text(document)
        for source in (document, document.encode(), StringIO(document), BytesIO(document.encode()), path):
            assert service.parse(source) == ('{http://sabre.io/ns}root', 'bar')

    def test_parse_text_with_a_stale_encoding_declaration(self) -> None:
        assert Service().parse('<?xml version="1.0" encoding="ISO-8859-1"?><a>café</a>') == ('{}a', 'café')

    def test_parse_deeply_nested_document(self) -> None:
        with pytest.raises(ParseError, match=r'nested too deeply'):
            Service().parse('<a>' * 256 + '</a>' * 256)

    def test_expect(self) -> None:
        service = Service(element_map={'{http://sabre.io/ns}root': decode_root})
        document = '<root xmlns="http://sabre.io/ns"><child>value</child></root>'
        assert service.expect('{http://sabre.io/ns}root', document) == 'bar'
        assert service.expect(['{http://sabre.io/ns}other', '{http://sabre.io/ns}root'], document.encode()) == 'bar'

    def test_expect_wrong_root(self) -> None:
        service = Service()
        with pytest.raises(ParseError, match=r'Expected \{http://sabre.io/ns\}root but received \{http://sabre.io/ns\}wrong as the root element'):
            service.expect('{http://sabre.io/ns}root', '<wrong xmlns="http://sabre.io/ns"/>')
        with pytest.raises(ParseError, match=r'Expected \{urn:a\}a or \{urn:b\}b but received \{\}c'):
            service.expect(['{urn:a}a', '{urn:b}b'], '<c/>')

    def test_broken_document(self) -> None:
        service = Service()
        with pytest.raises(LibXMLError):
            service.parse('<root xmlns="http://sabre.io/ns">')
        with pytest.raises(ParseError):
            service.expect('{}a', '<a><a>')

    def test_write(self) -> None:
        service = Service(namespace_map={'http://sabre.io/ns': 's'})
        assert service.write('{http://sabre.io/ns}root', {'{http://sabre.io/ns}child': 'value'}) == (
            '<?xml version="1.0"?>\n'
            '<s:root xmlns:s="http://sabre.io/ns">\n'
            ' <s:child>value</s:child>\n'
            '</s:root>\n'
        )

    def test_write_without_indent(self) -> None:
        service = Service(namespace_map={'urn:test': 's'}, indent=False)
        assert service.write('{urn:test}root', 'text') == '<?xml version="1.0"?>\n<s:root xmlns:s="urn:test">text</s:root>'

    def test_write_context_uri(self) -> None:
        service = Service(namespace_map={'urn:test': None})
        assert service.write('{urn:test}root', lambda writer: writer.write_string(writer.context_uri), context_uri='http://example.org/') == (
            '<?xml version="1.0"?>\n<root xmlns="urn:test">http://example.org/</root>\n'
        )

    def test_parse_write_round_trip(self) -> None:
        service = Service(element_map={'{DAV:}prop': KeyValue}, namespace_map={'DAV:': 'd'})
        name, value = service.parse('<d:prop xmlns:d="DAV:"><d:displayname>home</d:displayname><d:getetag/></d:prop>')
        assert service.write(name, KeyValue(value)) == (
            '<?xml version="1.0"?>\n'
            '<d:prop xmlns:d="DAV:">\n'
            ' <d:displayname>home</d:displayname>\n'
            ' <d:getetag/>\n'
            '</d:prop>\n'
        )

    def test_map_value_object(self) -> None:
        document = """<?xml version="1.0"?>
<order xmlns="http://sabredav.org/ns">
 <id>1234</id>
 <amount>99.99</amount>
 <description>black friday deal</description>
 <status>
  <id>5</id>
  <label>processed</label>
 </status>
</order>
"""
        service = Service()
        service.namespace_map[NS] = None
        service.map_value_object(f'{{{NS}}}order', Order)
        service.map_value_object(f'{{{NS}}}status', OrderStatus)

        name, order = service.parse(document)
        assert name == f'{{{NS}}}order'
        assert order == Order(id='1234', amount='99.99', description='black friday deal', status=OrderStatus(id='5', label='processed'))
        assert service.write_value_object(order) == document

    def test_map_value_object_repeated_fields(self) -> None:
        document = """<?xml version="1.0"?>
<order xmlns="http://sabredav.org/ns">
 <id>1234</id>
 <amount/>
 <description/>
 <status/>
 <link>/foo</link>
 <link>/bar</link>
</order>
"""
        service = Service(namespace_map={NS: None})
        service.map_value_object(f'{{{NS}}}order', Order)
        order = service.expect(f'{{{NS}}}order', document)
        assert order == Order(id='1234', link=['/foo', '/bar'])
        assert service.write_value_object(order) == document

    def test_map_value_object_empty(self) -> None:
        service = Service()
        service.map_value_object(f'{{{NS}}}order', Order)
        assert service.expect(f'{{{NS}}}order', '<order xmlns="http://sabredav.org/ns"/>') == Order()

    def test_write_value_object_not_registered(self) -> None:
        with pytest.raises(ConfigurationError, match=r'Order is not a registered value object class'):
            Service().write_value_object(Order())

    def test_service_is_not_modified_by_documents(self) -> None:
        def override_map(reader: Reader) -> object:
            reader.element_map['{urn:test}leaked'] = decode_root
            return reader.parse_inner_tree()

        service = Service(element_map={'{urn:test}root': override_map})
        service.parse('<root xmlns="urn:test"><leaked/></root>')
        assert set(service.element_map) == {'{urn:test}root'}
