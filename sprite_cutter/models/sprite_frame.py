from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class SpriteFrame:
    """
    A rectangular sprite region in source-image coordinates.
    """
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def as_box(self) -> Tuple[int, int, int, int]:
        """(left, top, right, bottom), the order crop helpers expect."""
        return self.x, self.y, self.right, self.bottom
