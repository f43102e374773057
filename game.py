from __future__ import annotations

import asyncio
import json
import logging
import random
import time
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from algorithms.mutator import EdgeSwap, make_mutator
from algorithms.pathfinder import find_path
from algorithms.topology import E, N, S, W
from config import MazeConfig
from maze import ORIGIN, Maze, generate_maze

log = logging.getLogger("shifting-maze")

Vec = Tuple[int, int]

DIRS: Dict[str, int] = {
    "U": N,
    "D": S,
    "L": W,
    "R": E,
}


def resolve_direction(direction: Union[str, int]) -> int:
    if isinstance(direction, str):
        d = DIRS.get(direction.upper())
        if d is None:
            raise ValueError(f"Unknown direction: {direction!r}")
        return d
    if direction not in (N, E, S, W):
        raise ValueError(f"Unknown direction index: {direction!r}")
    return direction


@dataclass
class Agent:
    pos: Vec = ORIGIN


class MazeSession:
    """
    One maze, its agent and a single seeded RNG.
    Every call runs to completion; callers only read between calls.
    """

    def __init__(self, config: MazeConfig):
        self.config = config
        self.rnd = random.Random(config.seed)
        self.mutator = make_mutator(config.strategy)
        self.agent = Agent()
        self.goal: Vec = (config.cols - 1, config.rows - 1)
        self.tick = 0
        self.last_swap: Optional[EdgeSwap] = None
        self.maze: Optional[Maze] = None
        self.path: List[Vec] = []
        self.regenerate()

    @property
    def phase(self) -> str:
        return "BUILT" if self.maze is not None else "UNINITIALIZED"

    def regenerate(self) -> None:
        self.maze = None
        self.maze = generate_maze(self.config.rows, self.config.cols, self.rnd, origin=ORIGIN)
        self.last_swap = None
        self.refresh_path()

    def refresh_path(self) -> None:
        self.path = find_path(self.maze, self.agent.pos, self.goal)

    def should_mutate(self) -> bool:
        chance = self.config.mutation_chance
        if chance <= 0.0:
            return False
        if chance >= 1.0:
            return True
        return self.rnd.random() < chance

    def step(self) -> bool:
        """One tick: maybe swap an edge, then refresh the cached path."""
        self.tick += 1
        mutated = False
        if self.should_mutate():
            self.last_swap = self.mutator.mutate(self.maze, self.rnd)
            mutated = self.last_swap is not None
        self.refresh_path()
        return mutated

    # ----------------- Intents -----------------

    def try_move(self, direction: Union[str, int]) -> bool:
        d = resolve_direction(direction)
        if self.maze.cell(self.agent.pos).walls[d]:
            return False
        # border walls are never open, so the step stays on the grid
        self.agent.pos = self.maze.topology.step(self.agent.pos, d)
        self.refresh_path()
        return True

    def teleport(self, pos: Vec) -> None:
        pos = (int(pos[0]), int(pos[1]))
        self.maze.topology.check(pos)
        self.agent.pos = pos
        self.refresh_path()

    # ----------------- Views -----------------

    def snapshot(self) -> dict:
        return {
            "rows": self.maze.rows,
            "cols": self.maze.cols,
            "seed": self.config.seed,
            "strategy": self.mutator.name,
            **self.state_dict(),
        }

    def state_dict(self) -> dict:
        swap = None
        if self.last_swap is not None:
            swap = {
                "closed": [list(p) for p in self.last_swap.closed],
                "opened": [list(p) for p in self.last_swap.opened],
            }
        return {
            "t": self.tick,
            "phase": self.phase,
            "walls": self.maze.wall_masks(),
            "agent": list(self.agent.pos),
            "goal": list(self.goal),
            "path": [list(p) for p in self.path],
            "swap": swap,
        }


class MazeRoom:
    """Drives one MazeSession for one websocket client at tick_hz."""

    def __init__(self, room_id: str, session: MazeSession, ws: Any):
        self.room_id = room_id
        self.session = session
        self.ws = ws
        self.input_q: asyncio.Queue = asyncio.Queue()

        self._task: Optional[asyncio.Task] = None
        self._ended: bool = False

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._loop())

    def stop(self) -> None:
        self._ended = True
        if self._task:
            self._task.cancel()

    async def send_start(self) -> None:
        await self._send({"type": "start", "room_id": self.room_id, **self.session.snapshot()})

    async def handle_client_msg(self, msg: dict) -> None:
        t = msg.get("type")
        if t in ("input", "regenerate", "teleport"):
            await self.input_q.put((t, msg))
        else:
            await self._send({"type": "error", "message": f"Unknown type: {t}"})

    async def _send(self, payload: dict) -> None:
        await self.ws.send_text(json.dumps(payload))

    # ----------------- Tick loop -----------------

    async def _loop(self) -> None:
        dt = 1.0 / float(self.session.config.tick_hz)
        try:
            while not self._ended:
                start_t = time.time()

                await self._drain_inputs()
                self.session.step()

                await self._send({"type": "state", **self.session.state_dict()})

                elapsed = time.time() - start_t
                await asyncio.sleep(max(0.0, dt - elapsed))
        except asyncio.CancelledError:
            return
        except Exception as e:
            log.exception("Room %s crashed", self.room_id)
            try:
                await self._send({"type": "error", "message": f"Room crashed: {type(e).__name__}"})
            except Exception as send_err:
                log.debug("Room %s: crash notice not delivered: %s", self.room_id, send_err)
            self._ended = True

    async def _drain_inputs(self) -> None:
        # Drain up to N intents per tick to avoid abuse
        for _ in range(6):
            if self.input_q.empty():
                break
            kind, msg = await self.input_q.get()

            if kind == "input":
                d = str(msg.get("dir") or "").upper()
                if d in DIRS:
                    self.session.try_move(d)

            elif kind == "regenerate":
                self.session.regenerate()
                log.info("Room %s regenerated", self.room_id)

            elif kind == "teleport":
                await self._teleport(msg.get("pos"))

    async def _teleport(self, pos: Any) -> None:
        try:
            x, y = int(pos[0]), int(pos[1])
            self.session.teleport((x, y))
        except (TypeError, ValueError, IndexError, KeyError):
            await self._send({"type": "error", "message": f"Bad teleport target: {pos!r}"})


def _whole(key: str, value: Any) -> int:
    """Whole numbers only; 1.5 or True are refused rather than truncated."""
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError(f"{key} must be a whole number, got {value!r}")
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{key} must be a whole number, got {value!r}") from None


class SessionManager:
    """One room per connected client; a room ends when its client leaves."""

    def __init__(self, base: Optional[MazeConfig] = None):
        self.base = base
        self.rooms: Dict[str, MazeRoom] = {}

    def make_config(self, overrides: Dict[str, Any]) -> MazeConfig:
        base = self.base or MazeConfig.from_env()
        kw = {
            "rows": base.rows,
            "cols": base.cols,
            "aspect": base.aspect,
            "mutation_chance": base.mutation_chance,
            "seed": None,
            "strategy": base.strategy,
            "tick_hz": base.tick_hz,
            "wall_width": base.wall_width,
        }
        if "rows" in overrides and "cols" not in overrides:
            kw["cols"] = None
        for key in ("rows", "cols", "seed"):
            if overrides.get(key) is not None:
                kw[key] = _whole(key, overrides[key])
        if overrides.get("strategy") is not None:
            kw["strategy"] = str(overrides["strategy"])
        if overrides.get("mutation_chance") is not None:
            kw["mutation_chance"] = float(overrides["mutation_chance"])
        return MazeConfig(**kw)

    async def join(self, ws: Any, player_id: str, overrides: Dict[str, Any]) -> MazeRoom:
        """Raises ValueError/TypeError on bad overrides."""
        config = self.make_config(overrides)
        room = MazeRoom(room_id=f"r-{uuid.uuid4().hex[:6]}", session=MazeSession(config), ws=ws)
        self.rooms[player_id] = room
        log.info("Room %s: %dx%d maze, seed %s, %s swaps",
                 room.room_id, config.rows, config.cols, config.seed, config.strategy)
        return room

    async def disconnect(self, player_id: str) -> None:
        room = self.rooms.pop(player_id, None)
        if room:
            room.stop()
