"""Diagram layout: axis labels, grids, scaled plots and legends.

``LayoutBuilder`` is mixed into :class:`smartsvg.element.Element`, so every
element can host a diagram. The layout writes geometry into the tree and later
reads it back (``add_plot``, ``legend``) through the tree search helpers.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Sequence, Tuple, Union

from .attributes import rotate, scale, sum_attributes, translate, view_box
from .colors import ColorCycle, default_cycle
from .errors import (
    DataError,
    DataLengthError,
    DimensionError,
    DisplayModeError,
    EmptyDataError,
    LegendCountError,
    NotADiagramError,
    PageSizeError,
    PlotNotFoundError,
    SeriesColorError,
    TransformMissingError,
    TransformParseError,
    UnsortedDataError,
)
from .text import fit_font_size

if TYPE_CHECKING:  # pragma: no cover
    from .element import Element

logger = logging.getLogger(__name__)

DIAGRAM_ID = "diagram"
PLOT_ID = "plot"
DATA_ID = "data"
TITLE_ID = "title"
LEGEND_ID = "legend"
LEGEND_SWATCH_ID = "legendRect"
MIDMARKER_ID = "polyline-midmarker"
COLUMN_MARKER_ID = "column-marker"
V_LINE_ID = "vLine"
H_LINE_ID = "hLine"

_NUMBER = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"
_TRANSLATE_RE = re.compile(
    rf"translate\(\s*({_NUMBER})\s*(?:,\s*|\s+)({_NUMBER})\s*\)"
)
_MARKER_REF_RE = re.compile(r"url\(#([^)]+)\)")


class Display(Enum):
    COLUMN = "column"
    CONTINUOUS = "continuous"

    @classmethod
    def coerce(cls, value: Union["Display", str]) -> "Display":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise DisplayModeError(
            f"unknown display mode {value!r}; expected one of: column, continuous"
        )


@dataclass(frozen=True)
class DiagramLayout:
    """Fixed page partition used by :meth:`LayoutBuilder.diagram`."""

    title_height: int = 25
    text_height: int = 10
    label_width: int = 70
    label_height: int = 70 // 3
    plot_margin: int = 2
    grid_count: int = 10
    min_width: int = 100
    min_height: int = 100
    legend_margin: int = 5
    title_font_size: float = 16.0
    legend_font_size: float = 10.0


DEFAULT_LAYOUT = DiagramLayout()


@dataclass(frozen=True)
class PlotFrame:
    """Numeric transform components of a diagram's plot area.

    Attached to the ``plot`` group as ``geometry`` so the legend does not have
    to recover offsets from rendered transform text.
    """

    left: float
    top: float
    width: float
    height: float
    x_scale: float
    x_shift: float
    y_scale: float
    y_shift: float


def validate_series(
    x_values: Sequence[float], y_values: Sequence[float]
) -> Tuple[List[float], List[float]]:
    xs = [float(v) for v in x_values]
    ys = [float(v) for v in y_values]
    if len(xs) != len(ys):
        raise DataLengthError(
            f"data pair has uneven length: len(x)={len(xs)}, len(y)={len(ys)}"
        )
    if not xs:
        raise EmptyDataError("got empty data set")
    for axis, values in (("x", xs), ("y", ys)):
        for idx, value in enumerate(values):
            if not math.isfinite(value):
                raise DataError(f"{axis}[{idx}]={value} is not a finite number")
    return xs, ys


def _check_sorted(xs: Sequence[float]) -> None:
    for idx in range(1, len(xs)):
        if xs[idx] < xs[idx - 1]:
            raise UnsortedDataError(
                f"x values are not sorted: x[{idx}]={xs[idx]:g} < x[{idx - 1}]={xs[idx - 1]:g}",
                index=idx,
            )


def _resize(values: Sequence[float], length: float) -> Tuple[float, float]:
    lo, hi = min(values), max(values)
    span = hi - lo
    if span == 0:
        span = 1.0
    factor = length / span
    return factor, -lo * factor


def _round_half_away(value: float) -> int:
    rounded = math.floor(abs(value) + 0.5)
    return int(rounded) if value >= 0 else -int(rounded)


def _font_size(value: float) -> str:
    return f"{value:.1f}".rstrip("0").rstrip(".")


def _plot_offsets(plot: "Element") -> Tuple[float, float]:
    frame = plot.geometry
    if isinstance(frame, PlotFrame):
        return frame.left, frame.top
    transform = plot.attrs.get("transform")
    if transform is None:
        raise TransformMissingError("could not find transform attribute of plot group")
    if not isinstance(transform, str):
        raise TransformParseError(
            f"could not decode transform attribute to string: {transform!r}"
        )
    match = _TRANSLATE_RE.search(transform)
    if match is None:
        raise TransformParseError(
            f'could not find translate(x, y) in plot transform "{transform}"'
        )
    return float(match.group(1)), float(match.group(2))


class LayoutBuilder:
    """Mixin for :class:`~smartsvg.element.Element` with high-level builders."""

    def label(
        self: "Element",
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        values: Sequence[float],
        count: int,
        attrs: Optional[Mapping[str, Any]] = None,
    ) -> "Element":
        """Write ``count + 1`` evenly spaced values along the line p1 -> p2."""
        values = [float(v) for v in values]
        if not values:
            raise EmptyDataError("label needs at least one value")
        if count <= 0:
            raise DataError(f"label count must be positive, got {count}")
        group = self.gid("label", attrs)
        group.attrs.setdefault("fill", "black")

        dx = x2 - x1
        dy = y2 - y1
        angle = math.atan2(abs(dy), abs(dx))
        lo, hi = min(values), max(values)
        value_step = (hi - lo) / count
        x_step = dx / count * math.cos(angle)
        y_step = dy / count * math.sin(angle)
        for i in range(count + 1):
            group.text_at(
                _round_half_away(x1 + i * x_step),
                _round_half_away(y1 + i * y_step),
                f"{lo + i * value_step:.2f}",
            )
        return group

    def grid(
        self: "Element",
        x: float,
        y: float,
        width: float,
        height: float,
        count: int,
        attrs: Optional[Mapping[str, Any]] = None,
    ) -> "Element":
        """Draw ``count + 1`` vertical and horizontal lines over the box."""
        if count <= 0:
            raise DataError(f"grid count must be positive, got {count}")
        group = self.gid("grid", attrs)
        defs = group.defs()
        defs.line(0, 0, 0, height, {"id": V_LINE_ID})
        defs.line(0, 0, width, 0, {"id": H_LINE_ID})

        step_x = width / count
        step_y = height / count
        for i in range(count + 1):
            group.use(V_LINE_ID, {"x": f"{x + i * step_x:.0f}"})
            group.use(H_LINE_ID, {"y": f"{y + i * step_y:.0f}"})
        return group

    def diagram(
        self: "Element",
        width: int,
        height: int,
        x_values: Sequence[float],
        y_values: Sequence[float],
        title: str,
        display: Union[Display, str] = Display.CONTINUOUS,
        *,
        x: float = 0,
        y: float = 0,
        colors: Optional[ColorCycle] = None,
        layout: Optional[DiagramLayout] = None,
    ) -> "Element":
        """Plot ``y_values`` against sorted ``x_values`` in a titled, gridded box.

        All input checks run before the first node is created, so a failed
        call leaves the tree untouched. Returns the ``id="diagram"`` group.
        """
        layout = layout or DEFAULT_LAYOUT
        mode = Display.coerce(display)
        xs, ys = validate_series(x_values, y_values)
        _check_sorted(xs)
        if width < layout.min_width or height < layout.min_height:
            raise DimensionError(
                f"diagram is {width}x{height}; minimum size is "
                f"{layout.min_width}x{layout.min_height}"
            )
        inner_width = width - layout.label_width
        inner_height = height - layout.title_height - layout.label_height
        min_inner = 2 * layout.plot_margin
        if inner_width <= min_inner or inner_height <= min_inner:
            raise DimensionError(
                f"plot area of a {width}x{height} diagram is {inner_width}x{inner_height}; "
                f"both sides must exceed {min_inner}"
            )
        if layout.grid_count <= 0:
            raise DataError(f"grid count must be positive, got {layout.grid_count}")
        colors = colors or default_cycle()

        x_scale, x_shift = _resize(xs, inner_width)
        y_scale, y_shift = _resize(ys, inner_height)

        top = self.gid(DIAGRAM_ID, {"width": width, "height": height})
        top.add_attributes(translate(x, y))

        # Background first.
        top.rect(0, 0, width, height, {"fill": "white"})
        title_size = fit_font_size(title, layout.title_font_size, width - 2 * layout.legend_margin)
        top.text_at(
            width // 2,
            3 * layout.title_height // 4,
            title,
            {
                "text-anchor": "middle",
                "fill": "black",
                "id": TITLE_ID,
                "font-size": _font_size(title_size),
            },
        )

        plot = top.gid(PLOT_ID, translate(layout.label_width, layout.title_height))
        plot.geometry = PlotFrame(
            left=layout.label_width,
            top=layout.title_height,
            width=inner_width,
            height=inner_height,
            x_scale=x_scale,
            x_shift=x_shift,
            y_scale=y_scale,
            y_shift=y_shift,
        )
        plot.label(0, inner_height, 0, 0, ys, layout.grid_count, {"text-anchor": "end"})
        label_y = inner_height + layout.text_height
        plot.label(0, label_y, inner_width, label_y, xs, layout.grid_count, {"text-anchor": "start"})

        viewport = plot.start_view(inner_width, inner_height, 0, 0, inner_width, inner_height)
        cartesian = viewport.translate(0, inner_height)
        cartesian.add_attributes(scale(1, -1), {"fill": "none"})

        margin = layout.plot_margin
        inset = cartesian.translate(margin, margin)
        inset.add_attributes(
            scale((inner_width - 2 * margin) / inner_width, (inner_height - 2 * margin) / inner_height)
        )
        inset.grid(0, 0, inner_width, inner_height, layout.grid_count, {"stroke": "black", "stroke-width": 1})

        data = inset.translate(x_shift, y_shift)
        data.set_id(DATA_ID)
        data.add_attributes(scale(x_scale, y_scale))

        defs = data.defs()
        marker_color = colors.next_color()
        series_color = colors.next_color()
        marker_attrs = {
            "viewBox": "0 0 10 10",
            "preserveAspectRatio": "xMidYMid meet",
            "refX": 5,
            "refY": 5,
            "fill": "none",
            "vector-effect": "non-scaling-stroke",
        }
        defs.marker(MIDMARKER_ID, sum_attributes(marker_attrs, {"stroke": marker_color, "orient": "auto"})).circle(5, 5, 1)

        line_attrs = {"fill": "none", "stroke": series_color, "vector-effect": "non-scaling-stroke"}
        if mode is Display.COLUMN:
            # Bars are drawn by the marker at every vertex; the line itself is hidden.
            line_attrs["stroke"] = "none"
            for key in ("marker-start", "marker-mid", "marker-end"):
                line_attrs[key] = f"url(#{COLUMN_MARKER_ID})"
            defs.marker(
                COLUMN_MARKER_ID, sum_attributes(marker_attrs, {"stroke": series_color, "orient": "0"})
            ).rect(0, 0, 1, 1000)
        data.polyline(xs, ys, line_attrs)

        # Inner frame last, over the grid and the data.
        cartesian.rect(0, 0, inner_width, inner_height, {"stroke": "grey", "stroke-width": 3})

        logger.debug(
            "diagram %r (%s): %d points, x scale=%g shift=%g, y scale=%g shift=%g",
            title,
            mode.value,
            len(xs),
            x_scale,
            x_shift,
            y_scale,
            y_shift,
        )
        return top

    def add_plot(
        self: "Element",
        x_values: Sequence[float],
        y_values: Sequence[float],
        attrs: Optional[Mapping[str, Any]] = None,
        *,
        colors: Optional[ColorCycle] = None,
    ) -> "Element":
        """Add another series to an existing diagram, sharing its axes."""
        if self.attrs.get("id") != DIAGRAM_ID or not self.find_all_by_tag("polyline"):
            raise NotADiagramError(
                'will only add a plot to an existing diagram: no id="diagram" '
                "element with polyline series found"
            )
        data = self.find_by_id(DATA_ID)
        if data is None:
            raise PlotNotFoundError(f'could not find the "{DATA_ID}" group to add the plot to')
        xs, ys = validate_series(x_values, y_values)

        defaults = {"fill": "none", "vector-effect": "non-scaling-stroke"}
        if not attrs or "stroke" not in attrs:
            defaults["stroke"] = (colors or default_cycle()).next_color()
        line = data.polyline(xs, ys, defaults)
        line.add_attributes(attrs, override=True)
        logger.debug("added series %d with %d points", len(self.find_all_by_tag("polyline")), len(xs))
        return line

    def legend(self: "Element", *descriptions: str, layout: Optional[DiagramLayout] = None) -> "Element":
        """Add one colored row per plotted series, labeled with ``descriptions``."""
        layout = layout or DEFAULT_LAYOUT
        if self.attrs.get("id") != DIAGRAM_ID:
            raise NotADiagramError("will only add a legend to a diagram")
        series = self.find_all_by_tag("polyline")
        if len(series) != len(descriptions):
            raise LegendCountError(len(series), descriptions)
        if not series:
            raise NotADiagramError("diagram has no plotted series to describe")

        plot = self.find_by_id(PLOT_ID)
        if plot is None:
            raise PlotNotFoundError(f'could not find the "{PLOT_ID}" group of the diagram')
        left, top = _plot_offsets(plot)
        page_height = self.attrs.get("height")
        if page_height is None:
            raise PageSizeError("could not find the height attribute of the diagram")
        if isinstance(page_height, bool) or not isinstance(page_height, (int, float)):
            raise PageSizeError(f"could not read diagram height {page_height!r} as a number")
        series_colors = [self._series_color(line, idx) for idx, line in enumerate(series)]

        margin = layout.legend_margin
        box_width = (left - 2 * margin) // 3
        box_height = page_height - top - 2 * margin
        row = box_height // len(series)
        legend = self.gid(
            LEGEND_ID,
            sum_attributes(translate(margin, top + margin), view_box(0, 0, box_width, box_height)),
        )
        legend.defs().rect(0, 0, box_width, row, {"id": LEGEND_SWATCH_ID})

        half_text = layout.text_height // 2
        for idx, (description, color) in enumerate(zip(descriptions, series_colors)):
            offset = row * idx
            legend.use(LEGEND_SWATCH_ID, {"fill": color, "y": offset})
            size = fit_font_size(description, layout.legend_font_size, row - 2 * margin)
            text = legend.text_at(
                half_text + row // 2,
                offset,
                description,
                {"text-anchor": "middle", "fill": "black", "font-size": _font_size(size)},
            )
            text.add_attributes(rotate(90, half_text, offset))
        logger.debug("legend with %d rows of height %g", len(series), row)
        return legend

    def _series_color(self: "Element", line: "Element", index: int) -> str:
        stroke = line.attrs.get("stroke")
        if stroke is None:
            raise SeriesColorError(f"could not find stroke attribute for series {index}")
        if not isinstance(stroke, str):
            raise SeriesColorError(f"stroke colour of series {index} is not a string: {stroke!r}")
        if stroke == "none":
            # Column series hide the line and paint with their marker.
            match = _MARKER_REF_RE.search(str(line.attrs.get("marker-mid", "")))
            marker = self.find_by_id(match.group(1)) if match else None
            if marker is not None and isinstance(marker.attrs.get("stroke"), str):
                return marker.attrs["stroke"]
        return stroke


__all__ = [
    "DEFAULT_LAYOUT",
    "DiagramLayout",
    "Display",
    "LayoutBuilder",
    "PlotFrame",
    "validate_series",
]
