# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
from collections.abc import Mapping
from typing import Any, TextIO

from . import clark
from .context import Context
from .serializers import Scalar, standard_serializer, text_value
from .stream import XMLStreamWriter

__all__ = ('Writer',)  # noqa: COM818


log = logging.getLogger(__name__)


class Writer(Context):
    """
    Encode Python values as XML.

    Element and attribute names are given in clark notation. Namespaces found
    in the namespace map are written with their registered prefix (None or ''
    meaning the default namespace) and are all declared on the first element
    that is written. Other namespaces get automatically generated prefixes
    (x1, x2, ...) that are declared on every element that uses them.
    """

    def __init__(self, stream: TextIO | None = None, *, indent: bool = False) -> None:
        super().__init__()
        self.indent = indent
        self.adhoc_namespaces: dict[str, str] = {}
        self.namespaces_written = False
        self._stream_writer: XMLStreamWriter | None = None
        if stream is not None:
            self.open_stream(stream)

    def __repr__(self) -> str:
        return f'<{self.__class__.__qualname__} on {self._stream_writer!r}>'

    def open_memory(self) -> None:
        """Write the document to an in-memory buffer, retrieved with output_memory()"""
        self._open(None)

    def open_stream(self, stream: TextIO) -> None:
        self._open(stream)

    def _open(self, stream: TextIO | None) -> None:
        if self._stream_writer is not None:
            raise RuntimeError('The writer output was already set')
        self._stream_writer = XMLStreamWriter(stream, indent=self.indent)

    @property
    def stream_writer(self) -> XMLStreamWriter:
        if self._stream_writer is None:
            raise RuntimeError('The writer has no output, call open_memory() or open_stream() first')
        return self._stream_writer

    def output_memory(self) -> str:
        return self.stream_writer.getvalue()

    def start_document(self) -> None:
        self.stream_writer.start_document()

    def end_document(self) -> None:
        self.stream_writer.end_document()

    def end_element(self) -> None:
        self.stream_writer.end_element()

    def write_string(self, text: str) -> None:
        self.stream_writer.write_string(text)

    def write_cdata(self, text: str) -> None:
        self.stream_writer.write_cdata(text)

    def write(self, value: Any) -> None:
        """Write the inner XML of the current element from value (see serializers.standard_serializer)"""
        standard_serializer(self, value)

    def start_element(self, name: str) -> None:
        stream_writer = self.stream_writer
        if clark.is_clark(name):
            namespace, local_name = clark.split(name)
            if namespace in self.namespace_map:
                stream_writer.start_element_ns(self.namespace_map[namespace] or None, local_name)
            elif not namespace:
                stream_writer.start_element(local_name)
                stream_writer.write_attribute('xmlns', '')
            else:
                stream_writer.start_element_ns(self._adhoc_prefix(namespace), local_name, namespace)
        else:
            stream_writer.start_element(name)
        if not self.namespaces_written:
            for namespace, prefix in self.namespace_map.items():
                stream_writer.write_attribute(f'xmlns:{prefix}' if prefix else 'xmlns', namespace)
            self.namespaces_written = True

    def write_element(self, name: str, content: Any = None) -> None:
        """Write a complete element, with content as its inner XML"""
        self.start_element(name)
        if content is not None:
            self.write(content)
        self.end_element()

    def write_attribute(self, name: str, value: Scalar | None) -> None:
        if value is None:
            return
        text = text_value(value)
        if not clark.is_clark(name):
            self.stream_writer.write_attribute(name, text)
            return
        namespace, local_name = clark.split(name)
        # Unprefixed attributes are in no namespace, so an attribute in a namespace mapped to the default one needs a generated prefix.
        if self.namespace_map.get(namespace):
            self.stream_writer.write_attribute(f'{self.namespace_map[namespace]}:{local_name}', text)
        elif not namespace:
            self.stream_writer.write_attribute(local_name, text)
        else:
            self.stream_writer.write_attribute_ns(self._adhoc_prefix(namespace), local_name, namespace, text)

    def write_attributes(self, attributes: Mapping[str, Scalar | None]) -> None:
        for name, value in attributes.items():
            self.write_attribute(name, value)

    def _adhoc_prefix(self, namespace: str) -> str:
        try:
            return self.adhoc_namespaces[namespace]
        except KeyError:
            prefix = self.adhoc_namespaces[namespace] = f'x{len(self.adhoc_namespaces) + 1}'
            log.debug('Using the %s prefix for the %s namespace', prefix, namespace)
            return prefix
