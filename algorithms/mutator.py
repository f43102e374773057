# algorithms/mutator.py
from __future__ import annotations
import logging
import random
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Type

from algorithms.flood_fill import collect_shore, flood_fill
from algorithms.pathfinder import find_path
from algorithms.topology import Vec
from maze import ORIGIN, Maze, MazeInvariantError

log = logging.getLogger("shifting-maze")

Edge = Tuple[Vec, Vec]


class NoSwapError(Exception):
    """A random pick that cannot produce a swap; the caller retries."""


class EmptyShoreError(NoSwapError):
    pass


class NoClosedEdgeError(NoSwapError):
    pass


@dataclass(frozen=True)
class EdgeSwap:
    closed: Edge
    opened: Edge


def _random_cell(maze: Maze, rnd: random.Random) -> Vec:
    return (rnd.randrange(maze.cols), rnd.randrange(maze.rows))


class TopologyMutator:
    """
    Replaces one open edge of the spanning tree with one closed edge,
    keeping the open edges a spanning tree.
    """

    name = "base"

    def __init__(self, max_attempts: int = 64):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = max_attempts

    def mutate(self, maze: Maze, rnd: random.Random) -> Optional[EdgeSwap]:
        topo = maze.topology
        # strip grids: the grid graph is already a tree, nothing to swap in
        if topo.edge_total() == topo.size - 1:
            return None

        last_err = None
        for attempt in range(self.max_attempts):
            try:
                return self._attempt(maze, rnd)
            except NoSwapError as e:
                last_err = str(e)
                log.debug("%s swap retry %d: %s", self.name, attempt + 1, e)

        raise RuntimeError(f"No edge swap after {self.max_attempts} tries: {last_err}")

    def _attempt(self, maze: Maze, rnd: random.Random) -> EdgeSwap:
        raise NotImplementedError


class ShoreSwap(TopologyMutator):
    """Close a tree edge, flood the anchor's lake, reopen a random shore pair."""

    name = "shore"

    def __init__(self, max_attempts: int = 64, anchor: str = "origin"):
        super().__init__(max_attempts)
        if anchor not in ("origin", "random"):
            raise ValueError(f"Unknown anchor mode: {anchor}")
        self.anchor = anchor

    def _attempt(self, maze: Maze, rnd: random.Random) -> EdgeSwap:
        p = _random_cell(maze, rnd)
        opens = maze.open_neighbors(p)
        if not opens:
            raise MazeInvariantError(f"Cell {p} has no open edge")
        q = rnd.choice(opens)

        maze.set_wall(p, q, closed=True)

        anchor = ORIGIN if self.anchor == "origin" else _random_cell(maze, rnd)
        lake = flood_fill(maze, anchor)
        if len(lake) == maze.topology.size:
            raise MazeInvariantError(f"Closing {p}-{q} did not split the maze")

        shore = collect_shore(maze, lake, exclude=(p, q))
        if not shore:
            maze.set_wall(p, q, closed=False)
            raise EmptyShoreError(f"Edge {p}-{q} is the only shore pair")

        u, v = rnd.choice(shore)
        maze.set_wall(u, v, closed=False)
        return EdgeSwap(closed=(p, q), opened=(u, v))


class CycleSwap(TopologyMutator):
    """Open a closed edge, then break the cycle it makes at a random path edge."""

    name = "cycle"

    def _attempt(self, maze: Maze, rnd: random.Random) -> EdgeSwap:
        p = _random_cell(maze, rnd)
        closed = maze.closed_neighbors(p)
        if not closed:
            raise NoClosedEdgeError(f"Cell {p} has no closed edge")
        q = rnd.choice(closed)
        return self.swap_at(maze, p, q, rnd)

    def swap_at(self, maze: Maze, p: Vec, q: Vec, rnd: random.Random) -> EdgeSwap:
        # path is taken before (p, q) opens; it is the rest of the cycle
        path = find_path(maze, p, q)
        i = rnd.randrange(len(path) - 1)
        a, b = path[i], path[i + 1]

        # close first: an already-open (p, q) then comes back unchanged
        maze.set_wall(a, b, closed=True)
        maze.set_wall(p, q, closed=False)
        return EdgeSwap(closed=(a, b), opened=(p, q))


STRATEGIES: Dict[str, Type[TopologyMutator]] = {
    ShoreSwap.name: ShoreSwap,
    CycleSwap.name: CycleSwap,
}


def make_mutator(name: str, **kwargs) -> TopologyMutator:
    cls = STRATEGIES.get(name)
    if cls is None:
        raise ValueError(f"Unknown mutation strategy: {name!r} (choose from {sorted(STRATEGIES)})")
    return cls(**kwargs)
