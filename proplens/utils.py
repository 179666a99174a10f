#  -*- coding: utf-8 -*-
"""
Small helpers shared by the introspection modules.
"""

from __future__ import annotations

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any


def get_full_qualified_name(cls: type) -> str:
    """
    Return the fully qualified name of a class.

    For built-in types (module is ``builtins``), returns ``cls.__qualname__``.
    For user-defined types, returns ``"<module>.<qualname>"``.

    Parameters
    ----------
    cls : type
        The class to identify.

    Returns
    -------
    str
        Fully qualified name, used in log events and error messages.

    Examples
    --------
    >>> get_full_qualified_name(int)
    'int'
    >>> get_full_qualified_name(Path)
    'pathlib.Path'
    """
    module = getattr(cls, '__module__', None)
    qualname = getattr(cls, '__qualname__', repr(cls))

    if module is None or module == 'builtins':
        return qualname

    return f"{module}.{qualname}"


def check_types(obj: Any,
                types: type | tuple[type, ...],
                can_be_none: bool = False,
                raise_error: bool = True) -> bool:
    """
    Check whether an object is an instance of expected types.

    Parameters
    ----------
    obj : object
        Value to test.
    types : type or tuple of type
        Expected type(s).
    can_be_none : bool, default False
        If True, ``None`` is accepted as valid.
    raise_error : bool, default True
        If True, raises TypeError when the check fails. If False, returns False
        on mismatch.

    Returns
    -------
    bool
        True if obj is an instance of one of the expected types (or None, when
        permitted), False otherwise.

    Raises
    ------
    TypeError
        If ``raise_error`` is True and the check fails.

    Examples
    --------
    >>> check_types(1, int)
    True
    >>> check_types(None, int, can_be_none=True)
    True
    >>> check_types("x", int, raise_error=False)
    False
    """
    if can_be_none:
        if isinstance(types, tuple):
            types = (*types, None.__class__)
        else:
            types = (types, None.__class__)

    result = isinstance(obj, types)

    if not result and raise_error:

        if isinstance(types, tuple):
            cls_names = ', '.join(get_full_qualified_name(cls) for cls in types)
        else:
            cls_names = get_full_qualified_name(types)

        error_msg = f"Expected instance of one of the following classes: {cls_names}. " \
                    f"Given {get_full_qualified_name(type(obj))} instead"
        raise TypeError(error_msg)

    return result
