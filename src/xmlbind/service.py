# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
from collections.abc import Iterable
from functools import partial
from typing import Any

from . import clark, deserializers, serializers
from .exceptions import ConfigurationError, ParseError
from .model import ClassMap, ElementMap, NamespaceMap
from .reader import Reader
from .stream import XMLSource
from .writer import Writer

__all__ = ('Service',)  # noqa: COM818


log = logging.getLogger(__name__)


class Service:
    """
    The entry point for reading and writing XML documents.

    The service holds the registries used by the readers and writers it
    creates. Every reader and writer gets its own copy of the registries, so
    they can be modified while a document is processed without affecting the
    service or other documents.
    """

    element_map: ElementMap
    namespace_map: NamespaceMap
    class_map: ClassMap
    value_object_map: dict[type, str]

    def __init__(self, *, element_map: ElementMap | None = None, namespace_map: NamespaceMap | None = None, class_map: ClassMap | None = None, indent: bool = True) -> None:
        self.element_map = dict(element_map or {})
        self.namespace_map = dict(namespace_map or {})
        self.class_map = dict(class_map or {})
        self.value_object_map = {}
        self.indent = indent

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}(element_map={self.element_map!r}, namespace_map={self.namespace_map!r}, class_map={self.class_map!r}, indent={self.indent!r})'

    def get_reader(self) -> Reader:
        reader = Reader()
        reader.element_map = dict(self.element_map)
        return reader

    def get_writer(self) -> Writer:
        writer = Writer(indent=self.indent)
        writer.namespace_map = dict(self.namespace_map)
        writer.class_map = dict(self.class_map)
        return writer

    def parse(self, source: XMLSource, context_uri: str | None = None) -> tuple[str, Any]:
        """Parse a document and return the clark notation name of its root element and its decoded value"""
        reader = self.get_reader()
        reader.context_uri = context_uri or ''
        reader.load(source)
        result = reader.parse()
        return result.name, result.value

    def expect(self, root_element_name: str | Iterable[str], source: XMLSource, context_uri: str | None = None) -> Any:
        """
        Parse a document that must have a specific root element and return its decoded value.

        The root element name can be a single clark notation name or a list
        of acceptable names. If the root element has a different name, a
        ParseError is raised.
        """
        expected_names = [root_element_name] if isinstance(root_element_name, str) else list(root_element_name)
        name, value = self.parse(source, context_uri)
        if name not in expected_names:
            raise ParseError(f'Expected {' or '.join(expected_names)} but received {name} as the root element')
        return value

    def write(self, root_element_name: str, value: Any, context_uri: str | None = None) -> str:
        """Write a complete document with the given root element and return it as text"""
        writer = self.get_writer()
        writer.open_memory()
        writer.context_uri = context_uri or ''
        writer.start_document()
        writer.write_element(root_element_name, value)
        return writer.output_memory()

    def map_value_object(self, element_name: str, cls: type) -> None:
        """
        Map an element to a value object class.

        Instances of cls are written as the given element, with one child
        element for every field and the same element is read back into an
        instance of cls. The child elements use the namespace of the element.
        """
        namespace, _ = clark.split(element_name)
        self.element_map[element_name] = partial(deserializers.value_object, cls=cls, namespace=namespace)
        self.class_map[cls] = partial(serializers.value_object, namespace=namespace)
        self.value_object_map[cls] = element_name
        log.debug('Mapped the %s element to the %s value object class', element_name, cls.__qualname__)

    def write_value_object(self, obj: object, context_uri: str | None = None) -> str:
        try:
            element_name = self.value_object_map[type(obj)]
        except KeyError:
            raise ConfigurationError(f'{type(obj).__qualname__} is not a registered value object class, use map_value_object() first') from None
        return self.write(element_name, obj, context_uri)

    @staticmethod
    def parse_clark_notation(name: str) -> tuple[str, str]:
        return clark.split(name)
