# algorithms/topology.py
from __future__ import annotations
from typing import Dict, Iterator, List, Optional, Tuple

Vec = Tuple[int, int]

# Direction indices; (d + 2) % 4 is the opposite side
N, E, S, W = 0, 1, 2, 3

OFFSETS: Dict[int, Vec] = {
    N: (0, -1),
    E: (1, 0),
    S: (0, 1),
    W: (-1, 0),
}

_BY_OFFSET: Dict[Vec, int] = {off: d for d, off in OFFSETS.items()}


class GridTopology:
    """Geometry of a rows x cols grid. Positions are (x, y), (0, 0) top-left."""

    def __init__(self, rows: int, cols: int):
        if rows < 1 or cols < 1:
            raise ValueError(f"Grid must be at least 1x1, got {rows}x{cols}")
        self.rows = rows
        self.cols = cols

    @property
    def size(self) -> int:
        return self.rows * self.cols

    def in_bounds(self, pos: Vec) -> bool:
        x, y = pos
        return 0 <= x < self.cols and 0 <= y < self.rows

    def check(self, pos: Vec) -> Vec:
        if not self.in_bounds(pos):
            raise IndexError(f"Cell {pos} outside {self.cols}x{self.rows} grid")
        return pos

    def step(self, pos: Vec, d: int) -> Optional[Vec]:
        dx, dy = OFFSETS[d]
        nxt = (pos[0] + dx, pos[1] + dy)
        return nxt if self.in_bounds(nxt) else None

    def neighbors(self, pos: Vec) -> List[Vec]:
        x, y = pos
        out = []
        for dx, dy in OFFSETS.values():
            nx, ny = x + dx, y + dy
            if 0 <= nx < self.cols and 0 <= ny < self.rows:
                out.append((nx, ny))
        return out

    def direction(self, a: Vec, b: Vec) -> int:
        d = _BY_OFFSET.get((b[0] - a[0], b[1] - a[1]))
        if d is None:
            raise ValueError(f"Cells {a} and {b} are not adjacent")
        return d

    def opposite(self, a: Vec, b: Vec) -> Tuple[int, int]:
        """Direction index at a toward b, and at b toward a."""
        d = self.direction(a, b)
        return d, (d + 2) % 4

    def positions(self) -> Iterator[Vec]:
        for y in range(self.rows):
            for x in range(self.cols):
                yield (x, y)

    def edge_total(self) -> int:
        """Number of edges in the full grid graph."""
        return self.rows * (self.cols - 1) + self.cols * (self.rows - 1)
