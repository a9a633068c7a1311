from typing import Iterable, List

# Strictly increasing axis coordinates, always starting at 0 and ending at the axis extent.
BoundaryList = List[int]


def build_boundary_list(candidates: Iterable[int], extent: int) -> BoundaryList:
    """
    Add both sentinels, sort and drop duplicates.
    """
    return sorted({0, extent, *(int(c) for c in candidates)})
