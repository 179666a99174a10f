#  -*- coding: utf-8 -*-
"""
Proplens: reflective property discovery for serialization.

Proplens inspects a class and tells a serializer which logical properties it
exposes, where their values come from and in which order to emit them.

Key Features
------------
- **Fields and accessors**: Properties come from declared fields (annotations
  and ``__slots__``), ``get``/``is``/``set`` accessor methods and
  ``property`` descriptors
- **Inheritance aware**: Properties are merged along the MRO, the most derived
  declaration winning
- **Ordering**: Natural (by name) order, or an explicit order declared with
  ``property_order``
- **Cached**: Analyses are memoized per execution context

Modules
-------
analysis
    TypeAnalyzer, AnalysisCache and the context-scoped ``analyze`` function
properties
    PropertyDescriptor and FieldInfo
ordering
    PropertyOrder and the ``property_order`` decorator
naming
    Accessor naming convention
settings
    AnalysisSettings, loadable from TOML
display
    Rich rendering of analysis results

Examples
--------
>>> from proplens import analyze, property_order
>>>
>>> @property_order('id', 'name')
... class Person:
...     id: int
...     email: str
...
...     def get_name(self) -> str:
...         return self._name
...
...     def set_name(self, value: str) -> None:
...         self._name = value
>>>
>>> [prop.name for prop in analyze(Person).get_properties()]
['email', 'id', 'name']
"""


from .naming import normalize_property_name
from .properties import FieldInfo, PropertyDescriptor, MISSING
from .ordering import PropertyOrder, property_order, declared_property_order
from .settings import AnalysisSettings, SettingProperty
from .analysis import (TypeAnalyzer,
                       AnalysisCache,
                       analyze,
                       clear_cache,
                       cache_scope,
                       current_cache)
from .logging import configure_logging, get_logger
from .display import PropertyTable, DisplaySettings


__all__ = [
    "normalize_property_name",
    "FieldInfo",
    "PropertyDescriptor",
    "MISSING",
    "PropertyOrder",
    "property_order",
    "declared_property_order",
    "AnalysisSettings",
    "SettingProperty",
    "TypeAnalyzer",
    "AnalysisCache",
    "analyze",
    "clear_cache",
    "cache_scope",
    "current_cache",
    "configure_logging",
    "get_logger",
    "PropertyTable",
    "DisplaySettings",
]


try:
    # this will run if proplens is installed
    from importlib.metadata import metadata, PackageNotFoundError

    meta = metadata('proplens')

    __author__ = meta['Author']
    __license__ = meta['License']
    __version__ = meta['Version']

except PackageNotFoundError:
    # this will run during development
    import toml
    from pathlib import Path

    pyproject_filepath = Path(__file__).parent.parent / "pyproject.toml"

    with pyproject_filepath.open() as file:
        pyproject = toml.load(file)

    __version__ = pyproject["project"]["version"]
    __author__ = pyproject["project"]["authors"][0]["name"]
    __license__ = pyproject["project"]["license"]["text"]
