"""Attribute container with deterministic ordering and additive merge."""
from __future__ import annotations

import math
from typing import Any, List, Mapping, Optional, Tuple


def format_value(value: Any) -> str:
    """Canonical string form of an attribute value."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


class Attributes(dict):
    """Maps attribute names to raw values; formatting happens on output."""

    def sorted_items(self) -> List[Tuple[str, str]]:
        return [(key, format_value(self[key])) for key in sorted(self)]

    def merge(self, *others: Optional[Mapping[str, Any]], override: bool = False) -> "Attributes":
        # Without override an existing value is kept and the new one appended,
        # so successive transforms accumulate instead of replacing each other.
        for other in others:
            if not other:
                continue
            for key, value in other.items():
                prefix = ""
                if not override and key in self:
                    prefix = format_value(self[key])
                    if prefix:
                        prefix += " "
                self[key] = prefix + format_value(value)
        return self

    def set_pos(self, x: float, y: float) -> None:
        self["x"] = x
        self["y"] = y

    def set_size(self, width: float, height: float) -> None:
        self["width"] = width
        self["height"] = height

    def copy(self) -> "Attributes":
        return Attributes(self)


def translate(x: float, y: float) -> Attributes:
    return Attributes(transform=f"translate({format_value(x)}, {format_value(y)})")


def scale(x: float, y: float) -> Attributes:
    return Attributes(transform=f"scale({format_value(x)}, {format_value(y)})")


def rotate(angle: float, cx: Optional[float] = None, cy: Optional[float] = None) -> Attributes:
    if cx is None or cy is None:
        return Attributes(transform=f"rotate({format_value(angle)})")
    return Attributes(
        transform=f"rotate({format_value(angle)}, {format_value(cx)}, {format_value(cy)})"
    )


def view_box(min_x: float, min_y: float, width: float, height: float) -> Attributes:
    return Attributes(
        viewBox=" ".join(format_value(v) for v in (min_x, min_y, width, height))
    )


def sum_attributes(*maps: Optional[Mapping[str, Any]]) -> Attributes:
    """Union of the given maps; later maps win on key collisions."""
    result = Attributes()
    for mapping in maps:
        if mapping:
            result.update(mapping)
    return result


__all__ = [
    "Attributes",
    "format_value",
    "rotate",
    "scale",
    "sum_attributes",
    "translate",
    "view_box",
]
