import json

import pytest

from algorithms.pathfinder import find_path
from algorithms.topology import N, E, S
from conftest import assert_spanning_tree
from config import MAX_COLS, MazeConfig
from game import DIRS, MazeSession, resolve_direction, SessionManager


def make_session(**kw):
    kw.setdefault("rows", 5)
    kw.setdefault("cols", 6)
    kw.setdefault("seed", 31)
    return MazeSession(MazeConfig(**kw))


def open_dir(session):
    walls = session.maze.cell(session.agent.pos).walls
    for name, d in DIRS.items():
        if not walls[d]:
            return name
    raise AssertionError("agent cell has no open wall")


def closed_dir(session):
    walls = session.maze.cell(session.agent.pos).walls
    for name, d in DIRS.items():
        if walls[d]:
            return name
    raise AssertionError("agent cell has no closed wall")


def test_new_session_is_built_with_a_path_to_the_goal():
    s = make_session()
    assert s.phase == "BUILT"
    assert s.agent.pos == (0, 0)
    assert s.goal == (5, 4)
    assert s.path[0] == (0, 0) and s.path[-1] == (5, 4)
    assert_spanning_tree(s.maze)


@pytest.mark.parametrize("strategy", ["shore", "cycle"])
def test_every_tick_mutates_at_full_chance(strategy):
    s = make_session(strategy=strategy)
    for _ in range(100):
        assert s.step() is True
        assert s.last_swap is not None
        assert s.path == find_path(s.maze, s.agent.pos, s.goal)
    assert s.tick == 100
    assert_spanning_tree(s.maze)


def test_zero_chance_never_mutates():
    s = make_session(mutation_chance=0.0)
    masks = s.maze.wall_masks()
    for _ in range(50):
        assert s.step() is False
    assert s.maze.wall_masks() == masks


def test_partial_chance_mutates_some_ticks():
    s = make_session(mutation_chance=0.5)
    results = [s.step() for _ in range(200)]
    assert any(results) and not all(results)
    assert_spanning_tree(s.maze)


def test_move_through_open_wall():
    s = make_session()
    d = open_dir(s)
    assert s.try_move(d) is True
    assert s.agent.pos != (0, 0)
    assert s.path[0] == s.agent.pos


def test_move_into_wall_is_refused():
    s = make_session()
    assert s.try_move(closed_dir(s)) is False
    assert s.agent.pos == (0, 0)


def test_direction_names():
    assert resolve_direction("u") == N
    assert resolve_direction("R") == E
    assert resolve_direction(S) == S
    with pytest.raises(ValueError):
        resolve_direction("X")
    with pytest.raises(ValueError):
        resolve_direction(7)


def test_teleport_recomputes_path():
    s = make_session()
    s.teleport((3, 2))
    assert s.agent.pos == (3, 2)
    assert s.path[0] == (3, 2) and s.path[-1] == s.goal


def test_teleport_off_grid_is_rejected():
    s = make_session()
    with pytest.raises(IndexError):
        s.teleport((6, 0))
    assert s.agent.pos == (0, 0)


def test_teleport_onto_goal():
    s = make_session()
    s.teleport(s.goal)
    assert s.path == [s.goal]


def test_regenerate_rebuilds_and_keeps_agent():
    s = make_session()
    s.teleport((2, 2))
    for _ in range(5):
        s.step()
    old = s.maze
    s.regenerate()
    assert s.maze is not old
    assert s.last_swap is None
    assert s.agent.pos == (2, 2)
    assert s.path[0] == (2, 2)
    assert_spanning_tree(s.maze)


def test_same_seed_replays_identically():
    def run():
        s = make_session(seed=5)
        for i in range(30):
            s.step()
            if i == 10:
                s.try_move(open_dir(s))
        return s.state_dict()

    assert run() == run()


def test_strip_session_steps_without_swaps():
    s = make_session(rows=1, cols=5)
    assert s.step() is False
    assert s.path == [(0, 0), (1, 0), (2, 0), (3, 0), (4, 0)]


def test_snapshot_is_json_ready():
    s = make_session()
    s.step()
    snap = json.loads(json.dumps(s.snapshot()))
    assert (snap["rows"], snap["cols"], snap["seed"]) == (5, 6, 31)
    assert snap["strategy"] == "shore"
    assert snap["agent"] == [0, 0]
    assert snap["goal"] == [5, 4]
    assert len(snap["walls"]) == 5 and len(snap["walls"][0]) == 6
    assert snap["path"][0] == [0, 0]
    assert set(snap["swap"]) == {"closed", "opened"}


def test_manager_config_overrides():
    mgr = SessionManager(base=MazeConfig(rows=10, cols=20, seed=1, tick_hz=30))
    cfg = mgr.make_config({"type": "join", "rows": 4, "cols": 5, "seed": 9})
    assert (cfg.rows, cfg.cols, cfg.seed, cfg.tick_hz) == (4, 5, 9, 30)
    cfg = mgr.make_config({"type": "join", "strategy": "cycle", "mutation_chance": "0.5"})
    assert (cfg.rows, cfg.cols, cfg.strategy, cfg.mutation_chance) == (10, 20, "cycle", 0.5)
    with pytest.raises(ValueError):
        mgr.make_config({"rows": 0})
    with pytest.raises(ValueError):
        mgr.make_config({"rows": "lots"})
    # dimensions are capped and never truncated
    with pytest.raises(ValueError, match="exceeds"):
        mgr.make_config({"rows": 10**6, "cols": 10**6})
    with pytest.raises(ValueError, match="exceeds"):
        mgr.make_config({"rows": 4, "cols": MAX_COLS + 1})
    for bad in (1.5, 4.0, True, [4], "4.5"):
        with pytest.raises(ValueError, match="whole number"):
            mgr.make_config({"rows": bad})
    assert mgr.make_config({"rows": "7", "cols": 9}).rows == 7
