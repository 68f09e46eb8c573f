# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from typing import NamedTuple, Self

from .exceptions import ContextStackError
from .model import ClassMap, ElementMap, NamespaceMap

__all__ = 'Context', 'ContextScope', 'ContextSnapshot'


class ContextSnapshot(NamedTuple):
    element_map: ElementMap
    namespace_map: NamespaceMap
    class_map: ClassMap
    context_uri: str


class Context:
    """
    The registries that drive decoding and encoding.

    The element map associates clark notation element names with decoders,
    the namespace map associates namespaces with the prefixes used when
    writing and the class map associates classes with encoders. The context
    URI is the base used to resolve relative URIs.

    The current state can be saved with push_context() and restored later
    with pop_context(), which allows decoders to temporarily change the
    registries while they parse a subtree.
    """

    element_map: ElementMap
    namespace_map: NamespaceMap
    class_map: ClassMap
    context_uri: str

    def __init__(self) -> None:
        self.element_map = {}
        self.namespace_map = {}
        self.class_map = {}
        self.context_uri = ''
        self._context_stack: list[ContextSnapshot] = []

    @property
    def context_depth(self) -> int:
        return len(self._context_stack)

    def push_context(self) -> None:
        self._context_stack.append(ContextSnapshot(dict(self.element_map), dict(self.namespace_map), dict(self.class_map), self.context_uri))

    def pop_context(self) -> None:
        try:
            snapshot = self._context_stack.pop()
        except IndexError:
            raise ContextStackError('pop_context() was called without a matching push_context()') from None
        self.element_map, self.namespace_map, self.class_map, self.context_uri = snapshot

    def scoped_context(self, *, element_map: ElementMap | None = None, namespace_map: NamespaceMap | None = None, class_map: ClassMap | None = None, context_uri: str | None = None) -> 'ContextScope':
        """Return a context manager that saves the context on entry, applies the given overrides and restores the context on exit"""
        return ContextScope(self, element_map=element_map, namespace_map=namespace_map, class_map=class_map, context_uri=context_uri)


class ContextScope:
    def __init__(self, context: Context, *, element_map: ElementMap | None = None, namespace_map: NamespaceMap | None = None, class_map: ClassMap | None = None, context_uri: str | None = None) -> None:
        self.context = context
        self.element_map = element_map
        self.namespace_map = namespace_map
        self.class_map = class_map
        self.context_uri = context_uri

    def __repr__(self) -> str:
        overrides = ('element_map', 'namespace_map', 'class_map', 'context_uri')
        return f'{self.__class__.__qualname__}({', '.join(f'{name}={value!r}' for name in overrides if (value := getattr(self, name)) is not None)})'

    def __enter__(self) -> Self:
        self.setup()
        return self

    def __exit__(self, *_: object) -> None:
        self.reset()

    def setup(self) -> None:
        context = self.context
        context.push_context()
        if self.element_map is not None:
            context.element_map = dict(self.element_map)
        if self.namespace_map is not None:
            context.namespace_map = dict(self.namespace_map)
        if self.class_map is not None:
            context.class_map = dict(self.class_map)
        if self.context_uri is not None:
            context.context_uri = self.context_uri

    def reset(self) -> None:
        self.context.pop_context()
