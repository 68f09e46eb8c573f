# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Conversion between clark notation names and (namespace, local name) pairs"""

import re

from .exceptions import FormatError

__all__ = 'combine', 'is_clark', 'split'


_clark_re = re.compile(r'\{(?P<namespace>[^}]*)\}(?P<local_name>.*)', re.DOTALL)


def combine(namespace: str, local_name: str) -> str:
    return f'{{{namespace}}}{local_name}'


def split(name: str) -> tuple[str, str]:
    """
    Split a clark notation name into its namespace and local name.

    An empty namespace ('{}name') denotes an element in no namespace.
    """
    match = _clark_re.match(name)
    if match is None:
        raise FormatError(f'{name!r} is not a valid clark-notation formatted string')
    return match['namespace'], match['local_name']


def is_clark(name: str) -> bool:
    return name.startswith('{')
