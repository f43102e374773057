# maze.py
from __future__ import annotations
import random
from dataclasses import dataclass, field
from typing import List, Tuple

from algorithms.topology import GridTopology, Vec

Edge = Tuple[Vec, Vec]
ORIGIN: Vec = (0, 0)


class MazeInvariantError(RuntimeError):
    """Walls or connectivity disagree with what the algorithms guarantee."""


@dataclass
class Cell:
    visited: bool = False
    # N, E, S, W; True = closed
    walls: List[bool] = field(default_factory=lambda: [True, True, True, True])


class Maze:
    """rows x cols cells, every wall closed until a generator opens edges."""

    def __init__(self, rows: int, cols: int):
        self.topology = GridTopology(rows, cols)
        self.cells: List[List[Cell]] = [[Cell() for _ in range(cols)] for _ in range(rows)]

    @property
    def rows(self) -> int:
        return self.topology.rows

    @property
    def cols(self) -> int:
        return self.topology.cols

    def cell(self, pos: Vec) -> Cell:
        x, y = self.topology.check(pos)
        return self.cells[y][x]

    def is_open(self, a: Vec, b: Vec) -> bool:
        da, db = self.topology.opposite(a, b)
        wa = self.cell(a).walls[da]
        wb = self.cell(b).walls[db]
        if wa != wb:
            raise MazeInvariantError(f"Wall bits of edge {a}-{b} disagree")
        return not wa

    def set_wall(self, a: Vec, b: Vec, closed: bool) -> None:
        da, db = self.topology.opposite(a, b)
        self.cell(a).walls[da] = closed
        self.cell(b).walls[db] = closed

    def open_neighbors(self, pos: Vec) -> List[Vec]:
        return [n for n in self.topology.neighbors(pos) if self.is_open(pos, n)]

    def closed_neighbors(self, pos: Vec) -> List[Vec]:
        return [n for n in self.topology.neighbors(pos) if not self.is_open(pos, n)]

    def open_edges(self) -> List[Edge]:
        edges = []
        for pos in self.topology.positions():
            x, y = pos
            # east and south only, so each edge is listed once
            for nxt in ((x + 1, y), (x, y + 1)):
                if self.topology.in_bounds(nxt) and self.is_open(pos, nxt):
                    edges.append((pos, nxt))
        return edges

    def edge_count(self) -> int:
        return len(self.open_edges())

    def check_consistency(self) -> None:
        for pos in self.topology.positions():
            walls = self.cell(pos).walls
            for d in range(4):
                nxt = self.topology.step(pos, d)
                if nxt is None:
                    if not walls[d]:
                        raise MazeInvariantError(f"Border wall {d} of {pos} is open")
                else:
                    self.is_open(pos, nxt)

    def wall_masks(self) -> List[List[List[bool]]]:
        return [[list(c.walls) for c in row] for row in self.cells]


def generate_maze(rows: int, cols: int, rnd: random.Random, origin: Vec = ORIGIN) -> Maze:
    """Randomized DFS (recursive backtracker) spanning tree, explicit stack."""
    maze = Maze(rows, cols)
    topo = maze.topology
    topo.check(origin)

    def frame(pos: Vec):
        maze.cell(pos).visited = True
        neigh = topo.neighbors(pos)
        rnd.shuffle(neigh)
        return pos, neigh

    stack = [frame(origin)]
    while stack:
        pos, remaining = stack[-1]
        if not remaining:
            stack.pop()
            continue
        nxt = remaining.pop()
        if maze.cell(nxt).visited:
            continue
        maze.set_wall(pos, nxt, closed=False)
        stack.append(frame(nxt))

    return maze
