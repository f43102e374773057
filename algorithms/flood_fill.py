# algorithms/flood_fill.py
from __future__ import annotations
from collections import deque
from typing import List, Optional, Set, Tuple

from algorithms.topology import Vec
from maze import Maze

Edge = Tuple[Vec, Vec]


def flood_fill(maze: Maze, anchor: Vec) -> Set[Vec]:
    """Cells reachable from anchor through open edges (the "lake")."""
    maze.topology.check(anchor)
    lake = {anchor}
    q = deque([anchor])
    while q:
        pos = q.popleft()
        for nxt in maze.open_neighbors(pos):
            if nxt not in lake:
                lake.add(nxt)
                q.append(nxt)
    return lake


def collect_shore(maze: Maze, lake: Set[Vec], exclude: Optional[Edge] = None) -> List[Edge]:
    """
    Grid-adjacent (inside, outside) pairs on the lake border.
    `exclude` is dropped in either orientation. Row-major order.
    """
    skip = set()
    if exclude is not None:
        a, b = exclude
        skip = {(a, b), (b, a)}

    shore: List[Edge] = []
    for pos in maze.topology.positions():
        if pos not in lake:
            continue
        for nxt in maze.topology.neighbors(pos):
            if nxt in lake or (pos, nxt) in skip:
                continue
            shore.append((pos, nxt))
    return shore
