# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from collections.abc import Callable
from dataclasses import dataclass, field, fields, is_dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .reader import Reader
    from .writer import Writer


__all__ = (  # noqa: RUF022
    'XMLSerializable',
    'XMLDeserializable',
    'XMLElement',
    'ParsedElement',
    'Decoder',
    'Encoder',
    'ElementMap',
    'NamespaceMap',
    'ClassMap',
    'value_object_fields',
)


@runtime_checkable
class XMLSerializable(Protocol):
    def xml_serialize(self, writer: 'Writer') -> None:
        """
        Write the XML representation of the value.

        The element that contains the value was already started by the caller,
        which will also end it. The method only writes the attributes, child
        elements and text of that element. Any element started by the method
        must also be ended by it.
        """
        ...


@runtime_checkable
class XMLDeserializable(Protocol):
    @classmethod
    def xml_deserialize(cls, reader: 'Reader') -> Any:
        """
        Decode the element the reader is positioned on and return its value.

        On return the reader must be positioned right after the element's end
        tag. Use reader.next() to skip the element, or reader.parse_inner_tree()
        to decode its content and move past it.
        """
        ...


@runtime_checkable
class XMLElement(XMLSerializable, XMLDeserializable, Protocol):
    pass


type Decoder = Callable[[Reader], Any] | type[XMLDeserializable]
type Encoder = Callable[[Writer, Any], None]
type ElementMap = dict[str, Decoder]
type NamespaceMap = dict[str, str | None]
type ClassMap = dict[type, Encoder]


@dataclass
class ParsedElement:
    name: str
    value: Any = None
    attributes: dict[str, str] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        match key:
            case 'name' | 'value' | 'attributes':
                return getattr(self, key)
            case _:
                raise KeyError(key)


def value_object_fields(instance: object) -> list[str]:
    """The names of the fields of a value object, in definition order"""
    if is_dataclass(instance):
        return [item.name for item in fields(instance)]
    return list(vars(instance))
