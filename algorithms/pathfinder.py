# algorithms/pathfinder.py
from __future__ import annotations
from typing import List, Set

from algorithms.topology import Vec
from maze import Maze, MazeInvariantError


def find_path(maze: Maze, source: Vec, destination: Vec) -> List[Vec]:
    """
    Depth-first search over open edges.
    Returns the cells from source to destination, both included.
    Raises MazeInvariantError if destination cannot be reached.
    """
    topo = maze.topology
    topo.check(source)
    topo.check(destination)

    if source == destination:
        return [source]

    seen: Set[Vec] = {source}
    # (cell, open neighbors not tried yet)
    stack = [(source, maze.open_neighbors(source))]
    while stack:
        pos, remaining = stack[-1]
        if pos == destination:
            break
        if not remaining:
            stack.pop()
            continue
        nxt = remaining.pop()
        if nxt in seen:
            continue
        seen.add(nxt)
        stack.append((nxt, maze.open_neighbors(nxt)))

    if not stack:
        raise MazeInvariantError(f"No open route from {source} to {destination}")

    # the frames still on the stack are exactly the route
    return [pos for pos, _ in stack]
