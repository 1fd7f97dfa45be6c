"""Pointer geometry to structural position resolution.

Rendering code reports the on-screen box of every rendered block (in
document order); these helpers turn a pointer coordinate into an insertion
index without touching any display surface.
"""

from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True)
class BlockBox:
    """Vertical extent of a rendered block in viewport coordinates."""

    top: float
    bottom: float

    @property
    def midpoint(self) -> float:
        return self.top + (self.bottom - self.top) / 2


def resolve_insertion_index(pointer_y: float, boxes: Sequence[BlockBox]) -> int:
    """Map a pointer Y coordinate to an insertion index.

    Scans boxes in order. A pointer strictly above a box's midpoint means
    "insert before this box"; anything else means "after it" and the scan
    continues. A pointer exactly on a midpoint resolves downward.

    Args:
        pointer_y: Pointer vertical coordinate
        boxes: Rendered block boxes, indexed like the block sequence

    Returns:
        Index in [0, len(boxes)]; len(boxes) means append at end

    Examples:
        >>> boxes = [BlockBox(0, 10), BlockBox(10, 20), BlockBox(20, 30)]
        >>> resolve_insertion_index(12, boxes)
        1
        >>> resolve_insertion_index(25, boxes)
        3
    """
    index = 0
    for i, box in enumerate(boxes):
        if pointer_y < box.midpoint:
            return i
        index = i + 1
    return index


def indicator_offset(boxes: Sequence[BlockBox], index: int) -> Optional[float]:
    """Vertical position of the drop indicator for an insertion index.

    The indicator sits on the bottom edge of the block before the insertion
    point, or on the top edge of the first block when inserting at 0.

    Returns:
        Y coordinate, or None when nothing is rendered
    """
    if not boxes:
        return None
    if index > 0:
        return boxes[min(index, len(boxes)) - 1].bottom
    return boxes[0].top
