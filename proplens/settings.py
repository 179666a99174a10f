#  -*- coding: utf-8 -*-
"""
Analysis settings.

Settings are declared as ``SettingProperty`` descriptors on
``AnalysisSettings``: each one has a default and, optionally, a parser that
validates and coerces assigned values. Settings can be loaded from a TOML
file, either a dedicated file or a ``pyproject.toml`` holding a
``[tool.proplens]`` table.

Examples
--------
>>> settings = AnalysisSettings(unlisted_properties='last')
>>> settings.min_accessor_length
3
>>> settings = AnalysisSettings.load('pyproject.toml')
"""

from __future__ import annotations

import toml

from pathlib import Path

from proplens.ordering import UNLISTED_MODES
from proplens.utils import check_types

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Callable, ClassVar, Mapping, TypeAlias, TypeVar, Self


T = TypeVar('T')
"""Represent the type of the setting"""

Parser: TypeAlias = Callable[[object, Any], T]


LOG_LEVELS: tuple[str, ...] = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

PROJECT_TABLES: tuple[str, ...] = ('tool', 'project', 'build-system')
"""Top-level tables marking a shared project file such as ``pyproject.toml``"""


class SettingProperty:
    """
    Descriptor holding one setting.

    Parameters
    ----------
    default : object or callable
        Value returned while the setting is unset. If callable, it is called
        with the owning instance.
    parser : callable, optional
        ``parser(instance, raw_value) -> value`` applied on assignment.
    readonly : bool, default False
        If True, assignment raises AttributeError.
    doc : str, optional
        Documentation of the setting.

    Notes
    -----
    As with other descriptors in this package, assigning None resets the
    setting to its default.
    """

    # ========== ========== ========== ========== ========== special methods
    def __init__(self,
                 *,
                 default: Any = None,
                 parser: Parser | None = None,
                 readonly: bool = False,
                 doc: str | None = None) -> None:

        self._default: Any = default
        self._parser: Parser | None = parser
        self._readonly: bool = readonly

        self.__doc__: str | None = doc

    def __set_name__(self, owner: type, name: str) -> None:
        self.name: str = name
        self.owner: type = owner
        self.private_name: str = f"_setting__{name}"

    def __get__(self, instance: object | None, owner: type) -> Any:
        if instance is None:
            # Accessing from class, return descriptor for introspection
            return self

        value = instance.__dict__.get(self.private_name)

        if value is None:
            value = self._default(instance) if callable(self._default) else self._default

        return value

    def __set__(self, instance: object, value: Any) -> None:
        if self._readonly:
            raise AttributeError(f"can't set attribute '{self.name}' (read-only setting)")

        if value is None:
            value = self._default(instance) if callable(self._default) else self._default

        if self._parser is not None:
            value = self._parser(instance, value)

        instance.__dict__[self.private_name] = value

    # ========== ========== ========== ========== ========== public methods
    @property
    def fget(self) -> Callable[[object], Any]:
        """Getter, as exposed by ``property``."""
        return lambda instance: self.__get__(instance, type(instance))

    @property
    def fset(self) -> Callable[[object, Any], None] | None:
        """Setter, as exposed by ``property``; None for read-only settings."""
        if self._readonly:
            return None

        return lambda instance, value: self.__set__(instance, value)

    @property
    def default(self) -> Any:
        return self._default

    @property
    def readonly(self) -> bool:
        return self._readonly


# ========== ========== ========== ========== ========== parsers
def _parse_bool(instance: object, value: Any) -> bool:
    check_types(value, bool)
    return value


def _parse_length(instance: object, value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("Expected an int, given bool instead")

    check_types(value, int)

    if value < 0:
        raise ValueError(f"Expected a non-negative length, got {value}")

    return value


def _parse_unlisted(instance: object, value: Any) -> str:
    check_types(value, str)

    if value not in UNLISTED_MODES:
        raise ValueError(f"Expected one of {UNLISTED_MODES}, got {value!r}")

    return value


def _parse_log_level(instance: object, value: Any) -> str:
    check_types(value, str)

    level = value.upper()

    if level == 'WARN':
        level = 'WARNING'

    if level not in LOG_LEVELS:
        raise ValueError(f"Expected one of {LOG_LEVELS}, got {value!r}")

    return level


# ========== ========== ========== ========== ========== AnalysisSettings
class AnalysisSettings:
    """
    Settings controlling type analysis.

    Parameters
    ----------
    **values
        Initial values, by setting name.

    Raises
    ------
    KeyError
        If a keyword is not a known setting.

    Notes
    -----
    An ``AnalysisCache`` reads its settings every time it builds an analyzer.
    Changing a setting does not affect analyzers already cached; call
    ``AnalysisCache.clear`` afterwards.
    """

    table_name: ClassVar[str] = 'proplens'

    # ---------- ---------- ---------- ---------- accessor discovery
    min_accessor_length: int = SettingProperty(default=3, parser=_parse_length, doc="""
        Method names of this length or shorter are not accessors, unless they
        start with ``is``. The default ignores a bare ``get`` or ``set``.
        """)

    snake_case_accessors: bool = SettingProperty(default=True, parser=_parse_bool, doc="""
        Recognize ``get_x``/``is_x``/``set_x`` in addition to ``getX``/``isX``/``setX``.
        """)

    include_descriptors: bool = SettingProperty(default=True, parser=_parse_bool, doc="""
        Treat ``property`` objects and similar descriptors as accessor pairs.
        """)

    include_private_fields: bool = SettingProperty(default=True, parser=_parse_bool, doc="""
        Include declared fields whose name starts with an underscore.
        """)

    # ---------- ---------- ---------- ---------- ordering
    unlisted_properties: str = SettingProperty(default='first', parser=_parse_unlisted, doc="""
        Placement of properties missing from a declared property order:
        ``'first'`` or ``'last'``.
        """)

    inherit_property_order: bool = SettingProperty(default=False, parser=_parse_bool, doc="""
        Let classes use a property order declared by an ancestor.
        """)

    # ---------- ---------- ---------- ---------- cache and logging
    threadsafe_cache: bool = SettingProperty(default=False, parser=_parse_bool, doc="""
        Guard the cache with a lock. Only needed when one cache is shared by
        several threads.
        """)

    log_level: str = SettingProperty(default='WARNING', parser=_parse_log_level, doc="""
        Level used by ``configure_logging`` when no explicit level is given.
        """)

    # ========== ========== ========== ========== ========== special methods
    def __init__(self, **values: Any) -> None:
        names = self.setting_names()

        for name, value in values.items():

            if name not in names:
                raise KeyError(f"Unknown setting {name!r}")

            setattr(self, name, value)

    def __repr__(self) -> str:
        values = ', '.join(f"{name}={value!r}" for name, value in self.to_dict().items())
        return f"{type(self).__name__}({values})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, AnalysisSettings):
            return NotImplemented

        return self.to_dict() == other.to_dict()

    # ========== ========== ========== ========== ========== public methods
    @classmethod
    def setting_names(cls) -> tuple[str, ...]:
        """Names of all settings, in declaration order."""
        names: dict[str, None] = {}

        for base in reversed(cls.__mro__):
            for attr_name, attr_value in vars(base).items():
                if isinstance(attr_value, SettingProperty):
                    names[attr_name] = None

        return tuple(names)

    def to_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.setting_names()}

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> Self:
        check_types(values, Mapping)
        return cls(**dict(values))

    @classmethod
    def load(cls, path: str | Path) -> Self:
        """
        Load settings from a TOML file.

        Parameters
        ----------
        path : str or Path
            A TOML file. Settings are read from a ``[tool.proplens]`` table,
            then from a ``[proplens]`` table. A dedicated file without either
            table is read from the top level.

        Returns
        -------
        AnalysisSettings
            Default settings when a project file (one with a ``tool``,
            ``project`` or ``build-system`` table) has no proplens table.

        Raises
        ------
        FileNotFoundError
            If the file does not exist.
        KeyError
            If the table has an unknown setting.
        """
        data = toml.load(Path(path))

        tool_table = data.get('tool', {})

        if isinstance(tool_table, dict) and cls.table_name in tool_table:
            values = tool_table[cls.table_name]

        elif cls.table_name in data:
            values = data[cls.table_name]

        elif any(table in data for table in PROJECT_TABLES):
            values = {}

        else:
            values = data

        return cls.from_dict(values)

    def dump(self, path: str | Path) -> None:
        """Write the settings to a TOML file under a ``[proplens]`` table."""
        with Path(path).open('w') as file:
            toml.dump({self.table_name: self.to_dict()}, file)
