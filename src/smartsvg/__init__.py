"""Public API for smartsvg."""
from .attributes import Attributes, format_value, rotate, scale, sum_attributes, translate, view_box
from .colors import COLOR_NAMES, NAMED_COLORS, ColorCycle, default_cycle, random_color, rgb
from .element import Element, new_document
from .errors import (
    CycleError,
    DataError,
    DiagramStateError,
    LegendCountError,
    SmartSVGError,
    StructureError,
    UnsortedDataError,
)
from .layout import DEFAULT_LAYOUT, DiagramLayout, Display, PlotFrame
from .serializer import to_string, write_document

__all__ = [
    "Attributes",
    "COLOR_NAMES",
    "ColorCycle",
    "CycleError",
    "DEFAULT_LAYOUT",
    "DataError",
    "DiagramLayout",
    "DiagramStateError",
    "Display",
    "Element",
    "LegendCountError",
    "NAMED_COLORS",
    "PlotFrame",
    "SmartSVGError",
    "StructureError",
    "UnsortedDataError",
    "default_cycle",
    "format_value",
    "new_document",
    "random_color",
    "rgb",
    "rotate",
    "scale",
    "sum_attributes",
    "to_string",
    "translate",
    "view_box",
    "write_document",
]
