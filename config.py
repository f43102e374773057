# config.py
from __future__ import annotations
import os
import random
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from algorithms.mutator import STRATEGIES

Vec = Tuple[int, int]

# =========================
#  DEFAULTS
# =========================
ROWS = 30
MAX_ROWS = 200
MAX_COLS = 400
ASPECT = 16 / 9
MUTATION_CHANCE = 1.0
STRATEGY = "shore"
TICK_HZ = 15
WALL_WIDTH = 5.0


@dataclass
class MazeConfig:
    rows: int = ROWS
    cols: Optional[int] = None
    aspect: float = ASPECT
    mutation_chance: float = MUTATION_CHANCE
    seed: Optional[int] = None
    strategy: str = STRATEGY
    tick_hz: int = TICK_HZ
    wall_width: float = WALL_WIDTH

    def __post_init__(self):
        if self.cols is None:
            if self.aspect <= 0:
                raise ValueError(f"aspect must be positive, got {self.aspect}")
            self.cols = max(1, int(self.rows * self.aspect))
        if self.rows < 1 or self.cols < 1:
            raise ValueError(f"Grid must be at least 1x1, got {self.rows}x{self.cols}")
        if self.rows > MAX_ROWS or self.cols > MAX_COLS:
            raise ValueError(f"Grid {self.rows}x{self.cols} exceeds {MAX_ROWS}x{MAX_COLS}")
        if not 0.0 <= self.mutation_chance <= 1.0:
            raise ValueError(f"mutation_chance must be in [0, 1], got {self.mutation_chance}")
        if self.strategy not in STRATEGIES:
            raise ValueError(f"Unknown strategy {self.strategy!r}")
        if self.tick_hz <= 0:
            raise ValueError(f"tick_hz must be positive, got {self.tick_hz}")
        # fixed once so the whole run is reproducible from the logged seed
        if self.seed is None:
            self.seed = random.randint(1, 10**9)

    @classmethod
    def from_screen(cls, width: float, height: float, rows: int = ROWS, **kw) -> "MazeConfig":
        """Columns follow the window's aspect ratio."""
        return cls(rows=rows, aspect=width / height, **kw)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None, prefix: str = "MAZE_") -> "MazeConfig":
        env = os.environ if env is None else env

        def get(name, cast):
            raw = env.get(prefix + name)
            if raw is None or raw == "":
                return None
            try:
                return cast(raw)
            except ValueError:
                raise ValueError(f"Bad value for {prefix}{name}: {raw!r}") from None

        kw = {
            "rows": get("ROWS", int),
            "cols": get("COLS", int),
            "mutation_chance": get("MUTATION_CHANCE", float),
            "seed": get("SEED", int),
            "strategy": get("STRATEGY", str),
            "tick_hz": get("TICK_HZ", int),
        }
        return cls(**{k: v for k, v in kw.items() if v is not None})


@dataclass(frozen=True)
class CellGeometry:
    """Pixel size of one cell, computed once after the window exists."""
    rows: int
    cols: int
    cell_w: float
    cell_h: float

    @classmethod
    def fit(cls, width: float, height: float, rows: int, cols: int) -> "CellGeometry":
        return cls(rows=rows, cols=cols, cell_w=width / cols, cell_h=height / rows)

    def to_cell(self, px: float, py: float) -> Vec:
        x = int(px // self.cell_w)
        y = int(py // self.cell_h)
        return (min(max(x, 0), self.cols - 1), min(max(y, 0), self.rows - 1))

    def origin(self, pos: Vec) -> Tuple[float, float]:
        return (pos[0] * self.cell_w, pos[1] * self.cell_h)

    def center(self, pos: Vec) -> Tuple[float, float]:
        return (pos[0] * self.cell_w + self.cell_w / 2, pos[1] * self.cell_h + self.cell_h / 2)
