# -- Debug Overlay -- #

'''
Debug primitives (circles, lines, text) drawn on top of the particles.

Primitives accumulate until the renderer drains them with the next
frame snapshot.
'''

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class OverlayCircle:
    x: float
    y: float
    radius: float
    color: str


@dataclass
class OverlayLine:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str


@dataclass
class OverlayText:
    x: float
    y: float
    text: str
    color: str


@dataclass
class OverlayItems:
    '''Primitives handed to the renderer for one frame.'''

    circles: list[OverlayCircle] = field(default_factory=list)
    lines: list[OverlayLine] = field(default_factory=list)
    texts: list[OverlayText] = field(default_factory=list)

    def isEmpty(self) -> bool:
        return not (self.circles or self.lines or self.texts)


class DebugOverlay:
    '''Accumulates debug primitives between renderer frames.'''

    def __init__(self) -> None:
        self._items = OverlayItems()

    def addCircle(self, x: float, y: float, radius: float, color: str) -> None:
        self._items.circles.append(OverlayCircle(x, y, radius, color))

    def addLine(self, x1: float, y1: float, x2: float, y2: float, color: str) -> None:
        self._items.lines.append(OverlayLine(x1, y1, x2, y2, color))

    def addText(self, x: float, y: float, text: str, color: str) -> None:
        self._items.texts.append(OverlayText(x, y, text, color))

    def clear(self) -> None:
        self._items = OverlayItems()

    def peek(self) -> OverlayItems:
        '''Current primitives, without clearing them.'''
        return self._items

    def drain(self) -> OverlayItems:
        '''Return the accumulated primitives and start a fresh list.'''
        items = self._items
        self._items = OverlayItems()
        return items
