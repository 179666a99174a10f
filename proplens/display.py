#  -*- coding: utf-8 -*-
"""
Rich terminal display of analysis results.

``PropertyTable`` renders the merged, ordered properties of a class as a
Rich panel: one row per property with its backing field, accessors and
declaring class. Styling is controlled by ``DisplaySettings``.

Examples
--------
>>> from rich import print
>>> print(PropertyTable(Person))
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from io import StringIO

from rich.markup import escape
from rich.text import Text
from rich.panel import Panel
from rich.console import Console, RenderableType
from rich.table import Table
from rich import box

from proplens.analysis import TypeAnalyzer, analyze
from proplens.properties import PropertyDescriptor
from proplens.settings import SettingProperty
from proplens.utils import check_types, get_full_qualified_name

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Callable


def _parse_box(instance: object, value: Any) -> str:
    check_types(value, str)

    if not isinstance(getattr(box, value, None), box.Box):
        raise ValueError(f"Unknown box style {value!r}")

    return value


def _parse_align(instance: object, value: Any) -> str:
    check_types(value, str)

    if value not in ('left', 'center', 'right'):
        raise ValueError(f"Expected 'left', 'center' or 'right', got {value!r}")

    return value


def _parse_width(instance: object, value: Any) -> int:
    check_types(value, int)

    if value <= 0:
        raise ValueError(f"Expected a positive width, got {value}")

    return value


# ========== ========== ========== ========== ========== ==========
class DisplaySettings:
    """
    Configuration for terminal display formatting.

    Attributes
    ----------
    console_width : int
        Maximum console output width in characters. Default 150.
    property_style : str
        Style for property names. Default 'bold bright_yellow'.
    panel_border_style : str
        Style for panel borders. Default 'bright_cyan'.
    panel_box : str
        Box style name from rich.box. Default 'ROUNDED'.
    panel_title_align : str
        Panel title alignment. Default 'center'.
    table_header_style : str or None
        Style for table headers. Default 'bold bright_yellow'.
    table_spacing : int
        Column spacing in characters. Default 4.
    missing_marker : str
        Text shown for an absent field or accessor. Default '-'.
    """

    console_width: int = SettingProperty(default=150, parser=_parse_width)
    property_style: str = SettingProperty(default='bold bright_yellow')
    panel_border_style: str = SettingProperty(default='bright_cyan')
    panel_box: str = SettingProperty(default='ROUNDED', parser=_parse_box)
    panel_title_align: str = SettingProperty(default='center', parser=_parse_align)
    table_header_style: str = SettingProperty(default='bold bright_yellow')
    table_spacing: int = SettingProperty(default=4)
    missing_marker: str = SettingProperty(default='-')


class Displayable(ABC):
    """
    Abstract base for objects with Rich terminal display.

    Subclasses define the panel through ``_title`` and ``_content``; this
    class handles styling and rendering, and integrates with Rich's protocol
    (``__rich__``) and with ``str``.
    """

    display_settings: DisplaySettings

    # ========== ========== ========== ========== ========== special methods
    def __str__(self) -> str:
        string_io = StringIO()
        console = Console(file=string_io,
                          force_terminal=True,
                          width=self.display_settings.console_width)

        console.print(self._display_panel())

        return string_io.getvalue()

    def __rich__(self) -> RenderableType:
        return self._display_panel()

    # ========== ========== ========== ========== ========== protected methods
    @abstractmethod
    def _title(self) -> Text:
        ...

    @abstractmethod
    def _content(self) -> RenderableType:
        ...

    def _display_panel(self) -> Panel:
        return Panel(
            self._content(),
            title=self._title(),
            border_style=self.display_settings.panel_border_style,
            title_align=self.display_settings.panel_title_align,
            expand=False,
            box=getattr(box, self.display_settings.panel_box)
        )

    # ========== ========== ========== ========== ========== public methods
    def to_html(self) -> str:
        """Export the display as HTML with inline styles."""
        console = Console(record=True, file=StringIO(), width=self.display_settings.console_width)
        console.print(self)
        return console.export_html()

    def to_svg(self) -> str:
        """Export the display as SVG."""
        console = Console(record=True, file=StringIO(), width=self.display_settings.console_width)
        console.print(self)
        return console.export_svg()


def _accessor_label(func: Callable | None, missing: str) -> str:
    if func is None:
        return missing

    return getattr(func, '__name__', repr(func))


def _type_label(annotation: Any, missing: str) -> str:
    if annotation is None:
        return missing

    if isinstance(annotation, str):
        return annotation

    if check_types(annotation, type, raise_error=False):
        return annotation.__qualname__

    return repr(annotation).replace('typing.', '')


class PropertyTable(Displayable):
    """
    Panel listing the properties of an analyzed class.

    Parameters
    ----------
    target : type or TypeAnalyzer
        Class to display, analyzed with the current context's cache, or an
        existing analyzer.
    display_settings : DisplaySettings, optional
        Styling. A new ``DisplaySettings`` by default.

    Raises
    ------
    TypeError
        If ``target`` is neither a class nor an analyzer.
    """

    COLUMNS: tuple[str, ...] = ('property', 'type', 'field', 'reader', 'writers', 'declared by')

    def __init__(self,
                 target: type | TypeAnalyzer,
                 display_settings: DisplaySettings | None = None) -> None:

        check_types(target, (type, TypeAnalyzer))

        self.analyzer: TypeAnalyzer = target if isinstance(target, TypeAnalyzer) else analyze(target)
        self.display_settings: DisplaySettings = display_settings or DisplaySettings()

    # ========== ========== ========== ========== ========== protected methods
    def _title(self) -> Text:
        return Text(get_full_qualified_name(self.analyzer.type))

    def _content(self) -> RenderableType:
        properties = self.analyzer.get_properties()

        if not properties:
            return Text('no properties', style='dim')

        table = Table.grid(padding=(0, self.display_settings.table_spacing), expand=False)

        for _ in self.COLUMNS:
            table.add_column(justify='left')

        table.add_row(*(escape(column) for column in self.COLUMNS),
                      style=self.display_settings.table_header_style)

        for prop in properties:
            table.add_row(*self.row(prop))

        return table

    # ========== ========== ========== ========== ========== public methods
    def row(self, prop: PropertyDescriptor) -> tuple[Text | str, ...]:
        """Cells describing ``prop``, in ``COLUMNS`` order."""
        missing = self.display_settings.missing_marker

        writers = ', '.join(_accessor_label(method, missing) for method in prop.write_methods)

        return (
            Text(prop.name, style=self.display_settings.property_style),
            escape(_type_label(prop.property_type, missing)),
            escape(prop.field.name if prop.field is not None else missing),
            escape(_accessor_label(prop.read_method, missing)),
            escape(writers or missing),
            escape(prop.declaring_type.__name__),
        )
