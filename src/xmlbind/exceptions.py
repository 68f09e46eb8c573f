# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from collections.abc import Iterable

__all__ = 'ConfigurationError', 'ContextStackError', 'FormatError', 'LibXMLError', 'ParseError', 'XMLBindError'


class XMLBindError(Exception):
    """Base class for the errors raised by xmlbind"""


class FormatError(XMLBindError, ValueError):
    """A qualified name is not in clark notation"""


class ParseError(XMLBindError):
    """The document is malformed or its content cannot be decoded"""


class LibXMLError(ParseError):
    """The XML parser rejected the document"""

    def __init__(self, message: str, errors: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.errors = tuple(errors)


class ConfigurationError(XMLBindError, TypeError):
    """A registry entry or a value cannot be used for decoding or encoding"""


class ContextStackError(XMLBindError, RuntimeError):
    """The context stack was popped without a matching push"""
