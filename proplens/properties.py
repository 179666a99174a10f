#  -*- coding: utf-8 -*-
"""
Property descriptors discovered by ``TypeAnalyzer``.

A property is a logical, named attribute of a class backed by any
combination of:

- a declared field (an annotated class attribute or a ``__slots__`` entry),
- a read accessor (``get_x``/``getX``/``is_x``/``isX`` or a ``property`` getter),
- one or more write accessors (``set_x``/``setX`` or a ``property`` setter).

``PropertyDescriptor`` instances are assembled while their owning analyzer
scans a class and are frozen once the scan is over. The emission layer uses
the field and accessor handles they expose to read and write values.
"""

from __future__ import annotations

import inspect
import typing

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Callable, TypeAlias, TYPE_CHECKING

if TYPE_CHECKING:
    from proplens.analysis import TypeAnalyzer


Accessor: TypeAlias = Callable[..., Any]


class _Missing:
    """Marker for a field declared without a class-level value."""

    __slots__ = ()

    def __repr__(self) -> str:
        return 'MISSING'

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def _type_hints(func: Accessor) -> dict[str, Any]:
    try:
        return typing.get_type_hints(func)
    except (NameError, TypeError, AttributeError):
        # unresolvable forward references; fall back to the raw annotations
        return dict(getattr(func, '__annotations__', {}))


def positional_parameters(func: Accessor) -> list[str]:
    """Names of the parameters of ``func`` that can be passed positionally."""
    try:
        parameters = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return []

    return [parameter.name for parameter in parameters
            if parameter.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)]


def _value_parameter(func: Accessor) -> str | None:
    """Name of the parameter receiving the value in a write accessor."""
    parameters = positional_parameters(func)
    return parameters[1] if len(parameters) > 1 else None


def _accepts(func: Accessor, value: Any) -> bool:
    name = _value_parameter(func)

    if name is None:
        return True

    annotation = _type_hints(func).get(name, inspect.Parameter.empty)

    if annotation is inspect.Parameter.empty or annotation is Any:
        return True

    try:
        return isinstance(value, annotation)
    except TypeError:
        # parameterized generics and string annotations cannot be checked
        return True


# ========== ========== ========== ========== ========== FieldInfo
class FieldInfo:
    """
    Handle on a field declared directly by a class.

    Attributes
    ----------
    name : str
        Field name, exactly as declared.
    owner : type
        Declaring class.
    annotation : object
        Declared annotation, or ``None`` for unannotated slots.
    default : object
        Class-level value assigned to the field, or ``MISSING``.
    kind : str
        ``'annotation'`` or ``'slot'``.
    """

    __slots__ = ('name', 'owner', 'annotation', 'default', 'kind')

    def __init__(self,
                 name: str,
                 owner: type,
                 annotation: Any = None,
                 default: Any = MISSING,
                 kind: str = 'annotation') -> None:

        self.name: str = name
        self.owner: type = owner
        self.annotation: Any = annotation
        self.default: Any = default
        self.kind: str = kind

    def __repr__(self) -> str:
        return f"FieldInfo({self.owner.__qualname__}.{self.name}, kind={self.kind!r})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, FieldInfo):
            return NotImplemented

        return self.owner is other.owner and self.name == other.name

    def __hash__(self) -> int:
        return hash((self.owner, self.name))

    @property
    def resolved_annotation(self) -> Any:
        """
        The annotation with string forward references evaluated in the
        namespace of ``owner``. The declared annotation is returned when it
        cannot be evaluated.
        """
        if not isinstance(self.annotation, str):
            return self.annotation

        try:
            hints = typing.get_type_hints(self.owner)
        except (NameError, TypeError, AttributeError):
            return self.annotation

        return hints.get(self.name, self.annotation)


# ========== ========== ========== ========== ========== PropertyDescriptor
class PropertyDescriptor:
    """
    One logical property of an analyzed class.

    Parameters
    ----------
    name : str
        Canonical property name (case-sensitive).
    analyzer : TypeAnalyzer
        Analyzer of the class declaring the property. This is a back
        reference; the analyzer owns the descriptor.
    field : FieldInfo, optional
        Backing field, if any.

    Notes
    -----
    Descriptors are mutable only while their analyzer scans the class. The
    analyzer calls ``freeze`` once the scan is finished; any further call to
    ``set_read_method`` or ``add_write_method`` raises ``AttributeError``.

    Write accessors are kept in discovery order. Several write accessors may
    legitimately exist for one property (``set_x`` next to a ``property``
    setter, for instance); ``write`` picks the first whose value parameter
    annotation accepts the value being written.
    """

    # ========== ========== ========== ========== ========== class attributes
    __slots__ = ('name', 'analyzer', '_field', '_read_method', '_write_methods', '_frozen')

    # ========== ========== ========== ========== ========== special methods
    def __init__(self,
                 name: str,
                 analyzer: TypeAnalyzer,
                 field: FieldInfo | None = None) -> None:

        self.name: str = name
        self.analyzer: TypeAnalyzer = analyzer

        self._field: FieldInfo | None = field
        self._read_method: Accessor | None = None
        self._write_methods: list[Accessor] | tuple[Accessor, ...] = []
        self._frozen: bool = False

    def __repr__(self) -> str:
        flags = ''.join((
            'f' if self._field is not None else '-',
            'r' if self._read_method is not None else '-',
            'w' if self._write_methods else '-',
        ))
        return f"PropertyDescriptor({self.name!r}, {flags}, declared_by={self.declaring_type.__qualname__})"

    # ========== ========== ========== ========== ========== private methods
    def _check_mutable(self) -> None:
        if self._frozen:
            raise AttributeError(f"can't modify property '{self.name}' after analysis")

    # ========== ========== ========== ========== ========== public methods
    @classmethod
    def from_field(cls, field: FieldInfo, analyzer: TypeAnalyzer) -> PropertyDescriptor:
        """Create a descriptor backed only by ``field``."""
        return cls(field.name, analyzer, field=field)

    @classmethod
    def from_accessor(cls, name: str, analyzer: TypeAnalyzer) -> PropertyDescriptor:
        """Create an empty descriptor for a property first seen through an accessor."""
        return cls(name, analyzer)

    def set_read_method(self, method: Accessor) -> None:
        """
        Record the read accessor.

        A later call replaces the earlier one (``getX`` and ``get_x`` on the
        same class both describe ``x``; the one defined last wins).
        """
        self._check_mutable()
        self._read_method = method

    def add_write_method(self, method: Accessor) -> None:
        """Append a write accessor; existing ones are kept."""
        self._check_mutable()
        self._write_methods.append(method)

    def is_non_property(self) -> bool:
        """Return True when nothing backs this descriptor."""
        return self._field is None and self._read_method is None and not self._write_methods

    def freeze(self) -> None:
        self._write_methods = tuple(self._write_methods)
        self._frozen = True

    def read(self, obj: object) -> Any:
        """
        Read the property value from ``obj``.

        Uses the read accessor when there is one, otherwise the backing field.

        Raises
        ------
        AttributeError
            If the property has neither a read accessor nor a field, or if the
            field is not set on ``obj``.
        """
        if self._read_method is not None:
            return self._read_method(obj)

        if self._field is not None:
            return getattr(obj, self._field.name)

        raise AttributeError(f"unreadable attribute '{self.name}'")

    def write(self, obj: object, value: Any) -> None:
        """
        Write ``value`` to the property of ``obj``.

        The first write accessor whose value parameter accepts ``value`` is
        used. Without a matching accessor, the backing field is assigned.

        Raises
        ------
        AttributeError
            If neither an applicable write accessor nor a field exists.
        """
        for method in self._write_methods:
            if _accepts(method, value):
                method(obj, value)
                return

        if self._field is not None:
            setattr(obj, self._field.name, value)
            return

        raise AttributeError(f"can't set attribute '{self.name}' (read-only property)")

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def field(self) -> FieldInfo | None:
        """Backing field, or None."""
        return self._field

    @property
    def read_method(self) -> Accessor | None:
        """Read accessor, or None."""
        return self._read_method

    @property
    def write_methods(self) -> tuple[Accessor, ...]:
        """Write accessors in discovery order."""
        return tuple(self._write_methods)

    @property
    def write_method(self) -> Accessor | None:
        """First write accessor, or None."""
        return self._write_methods[0] if self._write_methods else None

    @property
    def readable(self) -> bool:
        return self._read_method is not None or self._field is not None

    @property
    def writable(self) -> bool:
        return bool(self._write_methods) or self._field is not None

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def declaring_type(self) -> type:
        """Class whose analysis produced this descriptor."""
        return self.analyzer.type

    @property
    def property_type(self) -> Any:
        """
        Declared type of the property, or None if nothing declares it.

        Looked up in order: the field annotation, the read accessor's return
        annotation, then the value parameter annotation of the first write
        accessor.
        """
        if self._field is not None and self._field.annotation is not None:
            return self._field.resolved_annotation

        if self._read_method is not None:
            hints = _type_hints(self._read_method)

            if 'return' in hints:
                return hints['return']

        for method in self._write_methods:
            name = _value_parameter(method)

            if name is not None:
                hints = _type_hints(method)

                if name in hints:
                    return hints[name]

        return None
