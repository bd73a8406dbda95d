from __future__ import annotations

from collections import OrderedDict
from typing import Iterable

import pygame


Color = tuple[int, int, int] | tuple[int, int, int, int]


class TextCache:
    """Least-recently-used cache of rendered text surfaces.

    Returned surfaces are shared and must be treated as immutable.
    """

    def __init__(self, max_size: int = 256) -> None:
        self._max_size = max(1, max_size)
        self._surfaces: OrderedDict[tuple[int, str, Color], pygame.Surface] = OrderedDict()

    def __len__(self) -> int:
        return len(self._surfaces)

    def render(self, font: pygame.font.Font, text: str, color: Color) -> pygame.Surface:
        key = (id(font), text, color)
        cached = self._surfaces.get(key)
        if cached is not None:
            self._surfaces.move_to_end(key)
            return cached
        rendered = font.render(text, True, color)
        self._surfaces[key] = rendered
        if len(self._surfaces) > self._max_size:
            self._surfaces.popitem(last=False)
        return rendered


def load_font(preferred_names: Iterable[str], size: int, *, bold: bool = False) -> pygame.font.Font:
    names = list(preferred_names)
    for name in names:
        match = pygame.font.match_font(name, bold=bold)
        if match:
            return pygame.font.Font(match, size)
    return pygame.font.SysFont(names[0] if names else None, size, bold=bold)


__all__ = ["Color", "TextCache", "load_font"]
