# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Standard encoders, that write common value shapes as XML"""

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from . import clark
from .exceptions import ConfigurationError
from .model import ParsedElement, XMLSerializable, value_object_fields

if TYPE_CHECKING:
    from .writer import Writer

__all__ = 'enum', 'repeating_elements', 'standard_serializer', 'text_value', 'value_object'


type Scalar = str | int | float | Decimal | bool


def text_value(value: Scalar) -> str:
    match value:
        case bool():
            return 'true' if value else 'false'
        case str():
            return value
        case _:
            return str(value)


def enum(writer: 'Writer', values: Iterable[str]) -> None:
    """
    Write an empty element for every clark notation name in values.

    This is the counterpart of the enum decoder and is used for values like
    <s:elem1 /><s:elem2 /> that only matter by the names of the elements.
    """
    for value in values:
        writer.write_element(value)


def value_object(writer: 'Writer', obj: object, namespace: str) -> None:
    """
    Write the fields of a value object as child elements in the given namespace.

    A field that holds a list is written as one element for every item.
    """
    for name in value_object_fields(obj):
        element_name = clark.combine(namespace, name)
        value = getattr(obj, name)
        if isinstance(value, list):
            for item in value:
                writer.write_element(element_name, item)
        else:
            writer.write_element(element_name, value)


def repeating_elements(writer: 'Writer', items: Iterable[Any], child_element_name: str) -> None:
    """Write every item inside its own child_element_name element"""
    for item in items:
        writer.write_element(child_element_name, item)


def standard_serializer(writer: 'Writer', value: Any) -> None:
    """
    Write the inner XML of an element from a value.

    Scalars are written as text and None writes nothing. Objects that
    implement xml_serialize() write themselves, instances of classes in the
    writer's class map are written by the registered encoder and other
    callables are called with the writer.

    A mapping writes one child element for each of its entries. If an entry
    is a mapping with a 'name' key (or a ParsedElement), its name, value and
    attributes are used. If it is a mapping with a 'value' key, but no 'name',
    the key is the element name and the value and attributes are taken from
    it. Otherwise the key is the element name and the entry is its value. A
    list or tuple writes one child element for each of its items, which must
    have a name as described above.
    """
    match value:
        case str() | bool() | int() | float() | Decimal():
            writer.write_string(text_value(value))
        case None:
            pass
        case _ if isinstance(value, XMLSerializable) and not isinstance(value, type):
            value.xml_serialize(writer)
        case _ if type(value) in writer.class_map:
            writer.class_map[type(value)](writer, value)
        case _ if callable(value) and not isinstance(value, type):
            value(writer)
        case ParsedElement():
            _write_entries(writer, [(0, value)])
        case Mapping():
            _write_entries(writer, value.items())
        case list() | tuple():
            _write_entries(writer, enumerate(value))
        case _:
            raise ConfigurationError(f'The writer cannot serialize values of type {type(value).__qualname__}')


def _write_entries(writer: 'Writer', entries: Iterable[tuple[Any, Any]]) -> None:
    for key, item in entries:
        positional = not isinstance(key, str)
        match item:
            case ParsedElement(name=name, value=value, attributes=attributes):
                pass
            case Mapping() if 'name' in item:
                name, value, attributes = item['name'], item.get('value'), item.get('attributes') or {}
            case Mapping() if 'value' in item and not positional:
                name, value, attributes = key, item['value'], item.get('attributes') or {}
            case _ if not positional:
                name, value, attributes = key, item, {}
            case _:
                raise ConfigurationError('Every item of a list must be a mapping with at least a "name" key, or a ParsedElement')
        writer.start_element(name)
        writer.write_attributes(attributes)
        writer.write(value)
        writer.end_element()
