#  -*- coding: utf-8 -*-
"""
Accessor naming convention.

Accessor methods expose a property through a prefix followed by the property
name: ``get``/``is`` for readers and ``set`` for writers. The part after the
prefix is turned into the canonical property name by
``normalize_property_name``.

Both the bean style (``getName``, ``isActive``) and the snake case style
(``get_name``, ``is_active``) are recognized.
"""

from __future__ import annotations


READ_PREFIX: str = 'get'
BOOLEAN_READ_PREFIX: str = 'is'
WRITE_PREFIX: str = 'set'


def normalize_property_name(raw: str) -> str:
    """
    Convert the suffix of an accessor name into a property name.

    Parameters
    ----------
    raw : str
        The part of the method name following the accessor prefix.

    Returns
    -------
    str
        ``raw`` with its first character lower-cased, except when the first
        two characters are both upper-case (acronyms such as ``URL`` are kept
        as they are). Inputs shorter than two characters are lower-cased.

    Examples
    --------
    >>> normalize_property_name('Name')
    'name'
    >>> normalize_property_name('URLPath')
    'URLPath'
    >>> normalize_property_name('X')
    'x'
    """
    if len(raw) < 2:
        return raw.lower()

    if raw[0].isupper() and raw[1].isupper():
        return raw

    return raw[0].lower() + raw[1:]


def accessor_suffix(name: str, prefix: str, snake_case: bool = True) -> str:
    """
    Return what follows ``prefix`` in an accessor method name.

    Parameters
    ----------
    name : str
        Method name, assumed to start with ``prefix``.
    prefix : str
        One of the accessor prefixes.
    snake_case : bool, default True
        If True, a single underscore right after the prefix is dropped so that
        ``get_name`` and ``getName`` describe the same property.

    Returns
    -------
    str
        The raw property name, possibly empty (in which case ``name`` is not
        an accessor).
    """
    suffix = name[len(prefix):]

    if snake_case and suffix.startswith('_'):
        suffix = suffix[1:]

    return suffix
