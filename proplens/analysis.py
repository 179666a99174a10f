#  -*- coding: utf-8 -*-
"""
Property discovery and merging.

``TypeAnalyzer`` scans one class: its declared fields, its accessor methods
and its property-like descriptors. The result is a frozen mapping from
property name to ``PropertyDescriptor`` for that class alone. Analyzers of
the classes in the MRO are linked, so ``get_properties`` can merge the
properties of the whole inheritance chain, the most derived declaration
winning.

Analyzers are built and memoized by an ``AnalysisCache``. The module level
functions ``analyze``, ``clear_cache`` and ``cache_scope`` use a cache scoped
to the current execution context (thread or asyncio task), so no lock is
needed on the lookup path.

Examples
--------
>>> class Base:
...     id: int
...     def get_name(self) -> str: ...
>>> class Person(Base):
...     email: str
...     def isActive(self) -> bool: ...
>>> [prop.name for prop in analyze(Person).get_properties()]
['active', 'email', 'id', 'name']
"""

from __future__ import annotations

import functools
import inspect
import threading
import typing

from contextlib import contextmanager, nullcontext
from contextvars import ContextVar
from types import MappingProxyType

from proplens.logging import get_logger
from proplens.naming import (READ_PREFIX, BOOLEAN_READ_PREFIX, WRITE_PREFIX,
                             accessor_suffix, normalize_property_name)
from proplens.ordering import PropertyOrder, declared_property_order
from proplens.properties import FieldInfo, PropertyDescriptor, MISSING, positional_parameters
from proplens.settings import AnalysisSettings
from proplens.utils import check_types, get_full_qualified_name

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Callable, Iterator, Mapping


log = get_logger(__name__)


def _is_class_variable(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(('ClassVar', 'typing.ClassVar'))

    return annotation is typing.ClassVar or typing.get_origin(annotation) is typing.ClassVar


def _parameter_count(func: Callable) -> int | None:
    """
    Number of positional parameters besides the instance one.

    ``*args`` and ``**kwargs`` are not counted. None if the signature is
    unknown or if a keyword-only parameter has no default, since such a
    method cannot be called with positional values only.
    """
    try:
        parameters = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return None

    if any(parameter.kind is inspect.Parameter.KEYWORD_ONLY and parameter.default is inspect.Parameter.empty
           for parameter in parameters):
        return None

    return len(positional_parameters(func)) - 1


def _unresolved_annotations(cls: type) -> dict[str, Any]:
    """Own annotations of ``cls``, undefined names kept as forward references."""
    try:
        import annotationlib
    except ImportError:
        # before 3.14 annotations are evaluated eagerly or kept as strings
        return dict(vars(cls).get('__annotations__', {}))

    return annotationlib.get_annotations(cls, format=annotationlib.Format.FORWARDREF)


def _mangle(cls: type, name: str) -> str:
    if name.startswith('__') and not name.endswith('__'):
        return f"_{cls.__name__.lstrip('_')}{name}"

    return name


def _declared_slots(cls: type) -> tuple[str, ...]:
    slots = vars(cls).get('__slots__', ())

    if isinstance(slots, str):
        slots = (slots,)

    return tuple(slot for slot in slots if slot not in ('__dict__', '__weakref__'))


# ========== ========== ========== ========== ========== TypeAnalyzer
class TypeAnalyzer:
    """
    Properties of one class.

    Analyzers are created by ``AnalysisCache.analyze``; do not instantiate
    them directly.

    Parameters
    ----------
    cls : type
        Class to analyze.
    cache : AnalysisCache
        Cache supplying the analyzers of the parent classes and the settings.

    Attributes
    ----------
    type : type
        The analyzed class.
    parent : TypeAnalyzer or None
        Analyzer of the next class in the MRO. None for ``object``.
    settings : AnalysisSettings
        Settings in effect when the analyzer was built.

    Notes
    -----
    Construction order:

    1. Analyze the parent classes (through the cache).
    2. Collect the fields declared on ``cls``: own annotations (``ClassVar``
       excluded) and own ``__slots__``. Field names are used verbatim.
    3. Collect the accessor methods declared on ``cls``, skipping static and
       class methods and names too short to be accessors:

       - no parameter, ``get`` prefix: read accessor;
       - no parameter, ``is`` prefix: read accessor;
       - one parameter, ``set`` prefix: write accessor.

    4. Collect ``property``-like descriptors declared on ``cls``.
    5. Drop descriptors backed by nothing and freeze the rest.
    """

    # ========== ========== ========== ========== ========== class attributes
    __slots__ = ('type', 'parent', 'settings', '_lineage', '_fields', '_properties', '_merged')

    # ========== ========== ========== ========== ========== special methods
    def __init__(self, cls: type, cache: AnalysisCache) -> None:

        self.type: type = cls
        self.settings: AnalysisSettings = cache.settings

        bases = cls.__mro__[1:]

        self.parent: TypeAnalyzer | None = cache.analyze(bases[0]) if bases else None
        self._lineage: tuple[TypeAnalyzer, ...] = tuple(cache.analyze(base) for base in bases)

        self._fields: Mapping[str, FieldInfo] = MappingProxyType(self._collect_fields())
        self._properties: Mapping[str, PropertyDescriptor] = MappingProxyType(self._populate_properties())
        self._merged: tuple[PropertyDescriptor, ...] | None = None

        log.debug("type_analyzed",
                  type=get_full_qualified_name(cls),
                  properties=list(self._properties),
                  parent=get_full_qualified_name(bases[0]) if bases else None)

    def __repr__(self) -> str:
        return f"TypeAnalyzer({get_full_qualified_name(self.type)}, properties={list(self._properties)})"

    def __contains__(self, name: str) -> bool:
        return self.has_property(name)

    def __iter__(self) -> Iterator[PropertyDescriptor]:
        return iter(self.get_properties())

    def __len__(self) -> int:
        return len(self.get_properties())

    # ========== ========== ========== ========== ========== private methods
    def _collect_fields(self) -> dict[str, FieldInfo]:
        cls = self.type
        namespace = vars(cls)
        fields: dict[str, FieldInfo] = {}

        try:
            annotations = inspect.get_annotations(cls)
        except NameError as error:
            log.debug("annotations_unresolved", type=get_full_qualified_name(cls), error=str(error))
            annotations = _unresolved_annotations(cls)

        for name, annotation in annotations.items():

            if _is_class_variable(annotation):
                continue

            fields[name] = FieldInfo(name, cls, annotation, namespace.get(name, MISSING), kind='annotation')

        for slot in _declared_slots(cls):
            name = _mangle(cls, slot)

            if name not in fields:
                fields[name] = FieldInfo(name, cls, annotations.get(slot), kind='slot')

        if not self.settings.include_private_fields:
            fields = {name: field for name, field in fields.items() if not name.startswith('_')}

        return fields

    def _accessor_property(self,
                           properties: dict[str, PropertyDescriptor],
                           method_name: str,
                           prefix: str) -> PropertyDescriptor | None:

        suffix = accessor_suffix(method_name, prefix, snake_case=self.settings.snake_case_accessors)

        if not suffix:
            return None

        name = normalize_property_name(suffix)

        if name not in properties:
            properties[name] = PropertyDescriptor.from_accessor(name, self)

        return properties[name]

    def _populate_properties(self) -> dict[str, PropertyDescriptor]:
        cls = self.type
        settings = self.settings
        properties: dict[str, PropertyDescriptor] = {}

        # ---------- ---------- ---------- ---------- fields
        for name, field in self._fields.items():
            if name not in properties:
                properties[name] = PropertyDescriptor.from_field(field, self)

        # ---------- ---------- ---------- ---------- accessor methods
        for name, value in vars(cls).items():

            if isinstance(value, (staticmethod, classmethod)) or not inspect.isfunction(value):
                continue

            if len(name) <= settings.min_accessor_length and not name.startswith(BOOLEAN_READ_PREFIX):
                continue

            count = _parameter_count(value)

            if count is None:
                log.debug("method_skipped", type=get_full_qualified_name(cls), method=name)
                continue

            if count == 0:

                if name.startswith(READ_PREFIX):
                    prop = self._accessor_property(properties, name, READ_PREFIX)

                elif name.startswith(BOOLEAN_READ_PREFIX):
                    prop = self._accessor_property(properties, name, BOOLEAN_READ_PREFIX)

                else:
                    continue

                if prop is not None:
                    prop.set_read_method(value)

            elif count == 1 and name.startswith(WRITE_PREFIX):
                prop = self._accessor_property(properties, name, WRITE_PREFIX)

                if prop is not None:
                    prop.add_write_method(value)

        # ---------- ---------- ---------- ---------- descriptors
        if settings.include_descriptors:

            for name, value in vars(cls).items():

                if isinstance(value, type):
                    continue

                if isinstance(value, functools.cached_property):
                    fget, fset = value.func, None

                elif isinstance(value, property) or hasattr(value, 'fget'):
                    fget, fset = getattr(value, 'fget', None), getattr(value, 'fset', None)

                else:
                    continue

                if fget is None and fset is None:
                    continue

                if name not in properties:
                    properties[name] = PropertyDescriptor.from_accessor(name, self)

                if fget is not None:
                    properties[name].set_read_method(fget)

                if fset is not None:
                    properties[name].add_write_method(fset)

        # ---------- ---------- ---------- ---------- prune and freeze
        for name in [name for name, prop in properties.items() if prop.is_non_property()]:
            del properties[name]

        for prop in properties.values():
            prop.freeze()

        return properties

    # ========== ========== ========== ========== ========== public methods
    def get_property(self, name: str) -> PropertyDescriptor | None:
        """
        Find a property by name on this class or its ancestors.

        Parameters
        ----------
        name : str
            Property name.

        Returns
        -------
        PropertyDescriptor or None
            The descriptor declared by the most derived class in the MRO, or
            None when no class declares ``name``.
        """
        prop = self._properties.get(name)

        if prop is not None:
            return prop

        for ancestor in self._lineage:
            prop = ancestor._properties.get(name)

            if prop is not None:
                return prop

        return None

    def has_property(self, name: str) -> bool:
        return self.get_property(name) is not None

    def get_properties(self) -> tuple[PropertyDescriptor, ...]:
        """
        Return every property visible on the class, ordered.

        The class' own properties are merged with those of its ancestors; a
        name already present is never replaced by an ancestor's descriptor.
        The merged properties are then sorted by the class' declared property
        order, or by name when there is none.

        Returns
        -------
        tuple of PropertyDescriptor
            One descriptor per distinct property name.
        """
        if self._merged is None:
            merged: dict[str, PropertyDescriptor] = dict(self._properties)

            for ancestor in self._lineage:
                for name, prop in ancestor._properties.items():
                    if name not in merged:
                        merged[name] = prop

            ordering = self.property_order()
            self._merged = tuple(merged[name] for name in ordering.sort(merged))

        return self._merged

    def property_names(self) -> list[str]:
        return [prop.name for prop in self.get_properties()]

    def property_order(self) -> PropertyOrder:
        """Ordering policy applied by ``get_properties``."""
        names = declared_property_order(self.type, inherit=self.settings.inherit_property_order)
        return PropertyOrder(names, unlisted=self.settings.unlisted_properties)

    def declared_field(self, name: str) -> FieldInfo | None:
        """Field ``name`` declared on this class itself, or None."""
        return self._fields.get(name)

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def own_properties(self) -> Mapping[str, PropertyDescriptor]:
        """Read-only mapping of the properties declared on this class only."""
        return self._properties

    @property
    def fields(self) -> Mapping[str, FieldInfo]:
        """Read-only mapping of the fields declared on this class only."""
        return self._fields

    @property
    def lineage(self) -> tuple[TypeAnalyzer, ...]:
        """Analyzers of the ancestors, in MRO order."""
        return self._lineage


# ========== ========== ========== ========== ========== AnalysisCache
class AnalysisCache:
    """
    Memo of ``type -> TypeAnalyzer``.

    Parameters
    ----------
    settings : AnalysisSettings, optional
        Settings used to build analyzers. Defaults to ``AnalysisSettings()``.
    threadsafe : bool, optional
        Guard ``analyze`` with a re-entrant lock. Defaults to
        ``settings.threadsafe_cache``. Only needed when the same cache is used
        from several threads; the context-scoped cache never is.

    Examples
    --------
    >>> cache = AnalysisCache()
    >>> cache.analyze(Person) is cache.analyze(Person)
    True
    >>> cache.clear()
    """

    def __init__(self,
                 settings: AnalysisSettings | None = None,
                 *,
                 threadsafe: bool | None = None) -> None:

        check_types(settings, AnalysisSettings, can_be_none=True)

        self.settings: AnalysisSettings = settings if settings is not None else AnalysisSettings()

        if threadsafe is None:
            threadsafe = self.settings.threadsafe_cache

        self._analyzers: dict[type, TypeAnalyzer] = {}
        self._lock: threading.RLock | nullcontext = threading.RLock() if threadsafe else nullcontext()

    def __contains__(self, cls: type) -> bool:
        return cls in self._analyzers

    def __len__(self) -> int:
        return len(self._analyzers)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(analyzers={len(self._analyzers)})"

    def analyze(self, cls: type | None) -> TypeAnalyzer | None:
        """
        Return the analyzer of ``cls``, building it on first request.

        Parameters
        ----------
        cls : type or None
            Class to analyze. None stands for "no class" and yields None.

        Returns
        -------
        TypeAnalyzer or None

        Raises
        ------
        TypeError
            If ``cls`` is neither a class nor None.
        """
        if cls is None:
            return None

        check_types(cls, type)

        with self._lock:
            analyzer = self._analyzers.get(cls)

            if analyzer is None:
                analyzer = TypeAnalyzer(cls, self)
                self._analyzers[cls] = analyzer

        return analyzer

    def clear(self) -> None:
        """Forget every analyzer."""
        with self._lock:
            count = len(self._analyzers)
            self._analyzers.clear()

        log.debug("analysis_cache_cleared", analyzers=count)


# ========== ========== ========== ========== ========== context scope
_current_cache: ContextVar[AnalysisCache | None] = ContextVar('proplens_analysis_cache', default=None)


def current_cache() -> AnalysisCache:
    """Return the cache of the current context, creating it if needed."""
    cache = _current_cache.get()

    if cache is None:
        cache = AnalysisCache()
        _current_cache.set(cache)

    return cache


def analyze(cls: type | None) -> TypeAnalyzer | None:
    """Analyze ``cls`` with the cache of the current context."""
    return current_cache().analyze(cls)


def clear_cache() -> None:
    """
    Drop the cache of the current context.

    The next ``analyze`` call in this context starts from an empty cache.
    Other contexts are not affected, even if they share the dropped cache
    object.
    """
    if _current_cache.get() is not None:
        _current_cache.set(None)
        log.debug("context_cache_dropped")


@contextmanager
def cache_scope(settings: AnalysisSettings | None = None) -> Iterator[AnalysisCache]:
    """
    Run a block with a fresh cache as the current context's cache.

    Parameters
    ----------
    settings : AnalysisSettings, optional
        Settings for the fresh cache.

    Yields
    ------
    AnalysisCache
        The cache in effect inside the block. The previous cache is
        restored on exit.

    Examples
    --------
    >>> with cache_scope(AnalysisSettings(unlisted_properties='last')):
    ...     names = analyze(Person).property_names()
    """
    cache = AnalysisCache(settings)
    token = _current_cache.set(cache)

    try:
        yield cache

    finally:
        _current_cache.reset(token)
        cache.clear()
