#  -*- coding: utf-8 -*-
"""
Ordering of analyzed properties.

Without a declaration, properties come out in natural order (lexicographic
by name). A class can declare its own order with the ``property_order``
decorator:

>>> @property_order('id', 'name')
... class Person:
...     name: str
...     id: int
...     email: str

Listed names keep their declared relative order. Names missing from the
declaration are placed before the listed ones (or after them, with
``unlisted='last'``) and are sorted lexicographically among themselves.
"""

from __future__ import annotations

from proplens.utils import check_types

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Callable, Iterable, TypeVar


PROPERTY_ORDER_ATTRIBUTE: str = '__property_order__'

UNLISTED_MODES: tuple[str, ...] = ('first', 'last')

C = TypeVar('C', bound=type)


class PropertyOrder:
    """
    Sort policy over property names.

    Parameters
    ----------
    names : iterable of str, optional
        Declared order. None or empty means natural order.
    unlisted : {'first', 'last'}, default 'first'
        Where names absent from ``names`` go relative to the listed ones.

    Raises
    ------
    ValueError
        If ``unlisted`` is not a known mode.
    """

    __slots__ = ('names', 'unlisted', '_positions')

    def __init__(self, names: Iterable[str] | None = None, unlisted: str = 'first') -> None:

        if unlisted not in UNLISTED_MODES:
            raise ValueError(f"unlisted must be one of {UNLISTED_MODES}, got {unlisted!r}")

        self.names: tuple[str, ...] = tuple(names) if names is not None else ()
        self.unlisted: str = unlisted

        self._positions: dict[str, int] = {}

        for index, name in enumerate(self.names):
            self._positions.setdefault(name, index)

    def __repr__(self) -> str:
        return f"PropertyOrder({list(self.names)!r}, unlisted={self.unlisted!r})"

    @property
    def is_natural(self) -> bool:
        return not self.names

    def position(self, name: str) -> int:
        """Index of ``name`` in the declaration, or -1 if it is not listed."""
        return self._positions.get(name, -1)

    def sort_key(self, name: str) -> tuple[int, str]:
        position = self._positions.get(name)

        if position is None:
            position = -1 if self.unlisted == 'first' else len(self.names)

        return position, name

    def compare(self, name1: str, name2: str) -> int:
        """Negative, zero or positive as ``name1`` sorts before, with or after ``name2``."""
        key1 = self.sort_key(name1)
        key2 = self.sort_key(name2)
        return (key1 > key2) - (key1 < key2)

    def sort(self, names: Iterable[str]) -> list[str]:
        return sorted(names, key=self.sort_key)


def property_order(*names: str) -> Callable[[C], C]:
    """
    Class decorator declaring the order of the class' properties.

    Parameters
    ----------
    *names : str
        Property names in the desired output order.

    Raises
    ------
    TypeError
        If a name is not a string.
    ValueError
        If a name is repeated.

    Notes
    -----
    The declaration belongs to the decorated class only. Subclasses use it
    when the analysis settings have ``inherit_property_order`` enabled.
    """
    for name in names:
        check_types(name, str)

    duplicates = sorted({name for name in names if names.count(name) > 1})

    if duplicates:
        raise ValueError(f"Property order declares {', '.join(duplicates)} more than once")

    def decorator(cls: C) -> C:
        check_types(cls, type)
        setattr(cls, PROPERTY_ORDER_ATTRIBUTE, tuple(names))
        return cls

    return decorator


def declared_property_order(cls: type, inherit: bool = False) -> tuple[str, ...] | None:
    """
    Return the property order declared on ``cls``.

    Parameters
    ----------
    cls : type
        Class to inspect.
    inherit : bool, default False
        If True, the first declaration found along the MRO is returned.
        Otherwise only a declaration made on ``cls`` itself counts.

    Returns
    -------
    tuple of str or None
        Declared names, or None when there is no declaration.
    """
    for base in (cls.__mro__ if inherit else (cls,)):
        names = vars(base).get(PROPERTY_ORDER_ATTRIBUTE)

        if names is not None:
            return tuple(names)

    return None
