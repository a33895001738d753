"""Error types raised while building and laying out SVG trees."""
from __future__ import annotations

from typing import Optional, Sequence


class SmartSVGError(ValueError):
    """Structured error with a stable code for CLI mapping."""

    code = "E_SMARTSVG"

    def __init__(self, message: str, *, code: Optional[str] = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        self.message = message

    def __str__(self) -> str:
        return self.message


class TreeError(SmartSVGError):
    code = "E_TREE"


class CycleError(TreeError):
    """Raised when a graft or splice would make a node its own descendant."""

    code = "E_TREE_CYCLE"


class StructureError(TreeError):
    """Raised when an element would hold both text and children."""

    code = "E_TREE_STRUCTURE"


class DataError(SmartSVGError):
    code = "E_DATA"


class DisplayModeError(DataError):
    code = "E_DISPLAY_MODE"


class EmptyDataError(DataError):
    code = "E_DATA_EMPTY"


class DataLengthError(DataError):
    code = "E_DATA_LENGTH"


class UnsortedDataError(DataError):
    code = "E_DATA_UNSORTED"

    def __init__(self, message: str, *, index: int) -> None:
        super().__init__(message)
        self.index = index


class DimensionError(DataError):
    code = "E_DIMENSIONS"


class DiagramStateError(SmartSVGError):
    code = "E_DIAGRAM_STATE"


class NotADiagramError(DiagramStateError):
    code = "E_NOT_DIAGRAM"


class PlotNotFoundError(DiagramStateError):
    code = "E_PLOT_NOT_FOUND"


class TransformMissingError(DiagramStateError):
    code = "E_TRANSFORM_MISSING"


class TransformParseError(DiagramStateError):
    code = "E_TRANSFORM_PARSE"


class PageSizeError(DiagramStateError):
    code = "E_PAGE_SIZE"


class SeriesColorError(DiagramStateError):
    code = "E_SERIES_COLOR"


class LegendCountError(DiagramStateError):
    code = "E_LEGEND_COUNT"

    def __init__(self, expected: int, descriptions: Sequence[str]) -> None:
        self.expected = expected
        self.actual = len(descriptions)
        self.descriptions = list(descriptions)
        super().__init__(
            f"legend needs one description per plotted series: "
            f"series={expected}, descriptions={self.actual} ({self.descriptions!r})"
        )
