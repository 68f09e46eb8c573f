# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from . import clark, deserializers, serializers
from .__info__ import __version__
from .context import Context
from .elements import Base, CData, Elements, KeyValue, Uri, XMLFragment
from .exceptions import ConfigurationError, ContextStackError, FormatError, LibXMLError, ParseError, XMLBindError
from .model import ParsedElement, XMLDeserializable, XMLElement, XMLSerializable
from .reader import Reader
from .service import Service
from .writer import Writer

__all__ = (  # noqa: RUF022
    '__version__',
    'Service',
    'Reader',
    'Writer',
    'Context',
    'ParsedElement',
    'XMLSerializable',
    'XMLDeserializable',
    'XMLElement',
    'Base',
    'CData',
    'Elements',
    'KeyValue',
    'Uri',
    'XMLFragment',
    'XMLBindError',
    'FormatError',
    'ParseError',
    'LibXMLError',
    'ConfigurationError',
    'ContextStackError',
    'clark',
    'deserializers',
    'serializers',
)
