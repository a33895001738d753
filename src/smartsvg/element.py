"""SVG element tree: construction, cycle-safe mutation and search.

Builder methods create a child of the element they are called on and return
it, so calls chain naturally::

    doc = new_document(400, 300)
    doc.g({"stroke": "black"}).rect(0, 0, 10, 10)

Children are owned by their parent's ``children`` list. The parent link is a
weak reference, consulted only to answer ancestor questions.
"""
from __future__ import annotations

import logging
import weakref
from typing import Any, IO, Iterator, List, Mapping, Optional, Sequence

from .attributes import Attributes, format_value, scale, translate
from .errors import CycleError, StructureError
from .layout import LayoutBuilder, validate_series
from .serializer import to_string, write_document

logger = logging.getLogger(__name__)


class Element(LayoutBuilder):
    """One SVG element: a container of children or a text leaf, never both."""

    def __init__(
        self,
        tag: str,
        attrs: Optional[Mapping[str, Any]] = None,
        text: str = "",
    ) -> None:
        self.tag = tag
        self.attrs = Attributes(attrs or {})
        self._text = text
        self.children: List[Element] = []
        self.comments: List[str] = []
        self.declaration = ""
        self.geometry: Any = None
        self._parent_ref: Optional[weakref.ReferenceType] = None

    def __repr__(self) -> str:
        ident = self.attrs.get("id")
        suffix = f' id="{ident}"' if ident is not None else ""
        return f"<Element {self.tag}{suffix} children={len(self.children)}>"

    def __str__(self) -> str:
        return to_string(self)

    @property
    def text(self) -> str:
        return self._text

    @text.setter
    def text(self, value: str) -> None:
        if value and self.children:
            raise StructureError(f"<{self.tag}> has children and cannot also hold text")
        self._text = value

    @property
    def parent(self) -> Optional["Element"]:
        return self._parent_ref() if self._parent_ref is not None else None

    # -- structure -------------------------------------------------------

    def _attach(self, child: "Element") -> None:
        if self._text:
            raise StructureError(f"<{self.tag}> holds text and cannot take child <{child.tag}>")
        self.children.append(child)
        if child.parent is None:
            child._parent_ref = weakref.ref(self)

    def is_ancestor_of(self, other: "Element") -> bool:
        """True if this element lies on ``other``'s parent chain."""
        cursor = other.parent
        while cursor is not None:
            if cursor is self:
                return True
            cursor = cursor.parent
        return False

    def new_child(self, tag: str, attrs: Optional[Mapping[str, Any]] = None) -> "Element":
        child = Element(tag, attrs)
        self._attach(child)
        return child

    def add(self, other: "Element") -> "Element":
        """Append ``other`` as a child.

        ``other`` may already be a descendant; that only adds a second forward
        edge, so the same subtree is written twice on output. Anything that
        would make this element reachable from itself raises ``CycleError``.
        """
        if other is self or other.is_ancestor_of(self):
            raise CycleError(
                f"<{other.tag}> is an ancestor of <{self.tag}>; adding it would create a cycle"
            )
        if other.contains(self):
            raise CycleError(
                f"<{self.tag}> is reachable from <{other.tag}>; adding it would create a cycle"
            )
        self._attach(other)
        logger.debug("grafted %r under %r", other, self)
        return other

    def insert(self, other: "Element") -> "Element":
        """Wrap all current children in ``other`` and make it the only child."""
        if other is self or other.is_ancestor_of(self):
            raise CycleError(
                f"<{other.tag}> is an ancestor of <{self.tag}>; inserting it would create a cycle"
            )
        if self.contains(other):
            raise CycleError(
                f"<{other.tag}> is already below <{self.tag}>; inserting it would create a cycle"
            )
        if other.contains(self):
            raise CycleError(
                f"<{self.tag}> is reachable from <{other.tag}>; inserting it would create a cycle"
            )
        if self._text:
            raise StructureError(f"<{self.tag}> holds text and cannot take child <{other.tag}>")
        if other.text and self.children:
            raise StructureError(f"<{other.tag}> holds text and cannot adopt children")

        moved = self.children
        other.children.extend(moved)
        for child in moved:
            if child.parent is self:
                child._parent_ref = weakref.ref(other)
        self.children = [other]
        if other.parent is None:
            other._parent_ref = weakref.ref(self)
        logger.debug("spliced %r between %r and %d children", other, self, len(moved))
        return other

    # -- search ----------------------------------------------------------

    def iter(self) -> Iterator["Element"]:
        """Depth-first, pre-order walk starting with this element."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find_by_id(self, ident: str) -> Optional["Element"]:
        for node in self.iter():
            if node.attrs.get("id") == ident:
                return node
        return None

    def find_all_by_tag(self, tag: str) -> List["Element"]:
        return [node for node in self.iter() if node.tag == tag]

    def contains(self, other: "Element") -> bool:
        return any(node is other for node in self.iter())

    # -- attributes and output ---------------------------------------------

    def add_attributes(self, *maps: Optional[Mapping[str, Any]], override: bool = False) -> "Element":
        self.attrs.merge(*maps, override=override)
        return self

    def set_id(self, ident: str) -> "Element":
        self.attrs["id"] = ident
        return self

    def comment(self, text: str) -> "Element":
        self.comments.append(text)
        return self

    def set_css(self, href: str) -> None:
        """Reference an external stylesheet from the document header."""
        self.declaration = f'<?xml-stylesheet type="text/css" href="{href}" ?>'

    def write(self, sink: IO[str]) -> None:
        write_document(self, sink)

    # -- structural builders -----------------------------------------------

    def start(self, width: float, height: float, attrs: Optional[Mapping[str, Any]] = None) -> "Element":
        """Nested ``svg`` viewport."""
        child = self.new_child("svg", attrs)
        child.attrs.set_size(width, height)
        return child

    def start_view(
        self,
        width: float,
        height: float,
        min_x: float,
        min_y: float,
        view_width: float,
        view_height: float,
        attrs: Optional[Mapping[str, Any]] = None,
    ) -> "Element":
        child = self.start(width, height, attrs)
        child.attrs["viewBox"] = _box(min_x, min_y, view_width, view_height)
        return child

    def symbol(self, ident: str, attrs: Optional[Mapping[str, Any]] = None) -> "Element":
        return self.new_child("symbol", attrs).set_id(ident)

    def symbol_with_viewbox(
        self,
        ident: str,
        min_x: float,
        min_y: float,
        view_width: float,
        view_height: float,
        attrs: Optional[Mapping[str, Any]] = None,
    ) -> "Element":
        child = self.symbol(ident, attrs)
        child.attrs["viewBox"] = _box(min_x, min_y, view_width, view_height)
        return child

    def use(self, ident: str, attrs: Optional[Mapping[str, Any]] = None) -> "Element":
        child = self.new_child("use", attrs)
        child.attrs["xlink:href"] = f"#{ident}"
        return child

    def title(self, text: str) -> "Element":
        child = self.new_child("title")
        child.text = text
        return child

    def desc(self, text: str) -> "Element":
        child = self.new_child("desc")
        child.text = text
        return child

    def defs(self) -> "Element":
        return self.new_child("defs")

    def marker(self, ident: str, attrs: Optional[Mapping[str, Any]] = None) -> "Element":
        return self.new_child("marker", attrs).set_id(ident)

    def g(self, attrs: Optional[Mapping[str, Any]] = None) -> "Element":
        return self.new_child("g", attrs)

    def gid(self, ident: str, attrs: Optional[Mapping[str, Any]] = None) -> "Element":
        return self.g(attrs).set_id(ident)

    def translate(self, x: float, y: float) -> "Element":
        return self.g(translate(x, y))

    def scale(self, x: float, y: float) -> "Element":
        return self.g(scale(x, y))

    def link(self, url: str) -> "Element":
        """Make everything currently inside this element clickable."""
        anchor = Element("a", {"xlink:href": url, "xlink:show": "replace", "target": "_parent"})
        return self.insert(anchor)

    # -- shapes --------------------------------------------------------------

    def circle(self, cx: float, cy: float, r: float, attrs: Optional[Mapping[str, Any]] = None) -> "Element":
        child = self.new_child("circle", attrs)
        child.attrs.update(cx=cx, cy=cy, r=r)
        return child

    def rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        attrs: Optional[Mapping[str, Any]] = None,
    ) -> "Element":
        child = self.new_child("rect", attrs)
        child.attrs.set_pos(x, y)
        child.attrs.set_size(width, height)
        return child

    def line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        attrs: Optional[Mapping[str, Any]] = None,
    ) -> "Element":
        child = self.new_child("line", attrs)
        child.attrs.update(x1=x1, y1=y1, x2=x2, y2=y2)
        return child

    def polyline(
        self,
        x_values: Sequence[float],
        y_values: Sequence[float],
        attrs: Optional[Mapping[str, Any]] = None,
    ) -> "Element":
        xs, ys = validate_series(x_values, y_values)
        child = self.new_child("polyline", attrs)
        child.attrs["points"] = " ".join(f"{px:f},{py:f}" for px, py in zip(xs, ys))
        return child

    def text_at(
        self,
        x: float,
        y: float,
        text: str,
        attrs: Optional[Mapping[str, Any]] = None,
    ) -> "Element":
        child = self.new_child("text", attrs)
        child.text = text
        child.attrs.set_pos(x, y)
        return child

    def image(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        href: str,
        attrs: Optional[Mapping[str, Any]] = None,
    ) -> "Element":
        child = self.new_child("image", attrs)
        child.attrs["xlink:href"] = href
        child.attrs.set_pos(x, y)
        child.attrs.set_size(width, height)
        return child


def _box(min_x: float, min_y: float, width: float, height: float) -> str:
    return " ".join(format_value(v) for v in (min_x, min_y, width, height))


def new_document(width: float, height: float) -> Element:
    """Root ``svg`` element for a page of the given size."""
    return Element(
        "svg",
        {
            "preserveAspectRatio": "xMinYMin meet",
            "viewBox": _box(0, 0, width, height),
        },
    )


__all__ = ["Element", "new_document"]
