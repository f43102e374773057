import random

import pytest

from algorithms.flood_fill import flood_fill
from maze import Maze, generate_maze


def assert_spanning_tree(maze: Maze):
    size = maze.topology.size
    assert maze.edge_count() == size - 1
    assert len(flood_fill(maze, (0, 0))) == size
    maze.check_consistency()


def open_edges_as_sets(maze: Maze):
    return {frozenset(e) for e in maze.open_edges()}


@pytest.fixture
def rnd():
    return random.Random(1234)


@pytest.fixture
def maze5(rnd):
    return generate_maze(5, 5, rnd)
