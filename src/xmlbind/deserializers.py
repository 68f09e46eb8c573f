# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Standard decoders, that turn common XML shapes into Python values"""

from typing import TYPE_CHECKING, Any

from .model import value_object_fields

if TYPE_CHECKING:
    from .reader import Reader

__all__ = 'enum', 'key_value', 'repeating_elements', 'value_object'


def key_value(reader: 'Reader', namespace: str | None = None) -> dict[str, Any]:
    """
    Decode the child elements of the current element into a dictionary.

    For example:

      <s:root xmlns:s="urn:example">
        <s:elem1>value1</s:elem1>
        <s:elem2>value2</s:elem2>
        <s:elem3 />
      </s:root>

    is decoded as:

      {
        '{urn:example}elem1': 'value1',
        '{urn:example}elem2': 'value2',
        '{urn:example}elem3': None,
      }

    The values are decoded using the reader's element map. If namespace is
    given, the elements in that namespace are keyed by their local name. If
    the same element appears more than once, the last one wins. Attributes
    are discarded.
    """
    values = {}
    for name in reader.iter_child_elements():
        key = reader.local_name if namespace is not None and reader.namespace_uri == namespace else name
        values[key] = reader.parse_current_element().value
    return values


def enum(reader: 'Reader', namespace: str | None = None) -> list[str]:
    """
    Decode the child elements of the current element into a list of their names.

    For example:

      <s:root xmlns:s="urn:example">
        <s:elem1 />
        <s:elem2 />
        <s:elem3 />
      </s:root>

    is decoded as ['{urn:example}elem1', '{urn:example}elem2', '{urn:example}elem3'].

    If namespace is given, the elements in that namespace are reported by
    their local name. The content of the child elements is skipped.
    """
    return [reader.local_name if namespace is not None and reader.namespace_uri == namespace else name for name in reader.iter_child_elements()]


def value_object[T](reader: 'Reader', cls: type[T], namespace: str) -> T:
    """
    Decode the current element into an instance of cls.

    The class must be instantiable without arguments. Every child element in
    the given namespace whose local name matches a field of the instance sets
    that field, or is appended to it if the field holds a list. Other child
    elements are skipped.
    """
    instance = cls()
    field_names = set(value_object_fields(instance))
    for _ in reader.iter_child_elements():
        field_name = reader.local_name
        if reader.namespace_uri != namespace or field_name not in field_names:
            continue
        value = reader.parse_current_element().value
        current_value = getattr(instance, field_name)
        if isinstance(current_value, list):
            current_value.append(value)
        else:
            setattr(instance, field_name, value)
    return instance


def repeating_elements(reader: 'Reader', child_element_name: str) -> list[Any]:
    """
    Decode a list of same-named child elements into a list of their values.

    For example:

      <collection xmlns="urn:example">
        <item>foo</item>
        <item>bar</item>
      </collection>

    is decoded by repeating_elements(reader, '{urn:example}item') as ['foo', 'bar'].
    Child elements with a different name are discarded.
    """
    return [element.value for element in reader.parse_get_elements() if element.name == child_element_name]
