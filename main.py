import logging
import os
import sys

import pygame

from algorithms.topology import E, N, S, W
from config import CellGeometry, MazeConfig
from game import MazeSession

log = logging.getLogger("shifting-maze")

# =========================
#  WINDOW
# =========================
FULLSCREEN = os.environ.get("MAZE_WINDOWED", "") == ""
WINDOW_SIZE = (1280, 720)   # used when windowed
TITLE = "maze"

# =========================
#  COLORS
# =========================
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
YELLOW = (253, 249, 0)
DARKGREEN = (0, 117, 44)

PATH_WIDTH = 5

KEYS = {
    "L": (pygame.K_a, pygame.K_LEFT),
    "R": (pygame.K_d, pygame.K_RIGHT),
    "U": (pygame.K_w, pygame.K_UP),
    "D": (pygame.K_s, pygame.K_DOWN),
}


def load_config(width: int, height: int) -> MazeConfig:
    """Env overrides, columns taken from the window unless MAZE_COLS is set."""
    env = MazeConfig.from_env()
    cols = env.cols if os.environ.get("MAZE_COLS") else None
    return MazeConfig.from_screen(
        width, height,
        rows=env.rows,
        cols=cols,
        mutation_chance=env.mutation_chance,
        seed=env.seed,
        strategy=env.strategy,
        tick_hz=env.tick_hz,
        wall_width=env.wall_width,
    )


# =========================
#  DRAW
# =========================
def draw_walls(screen, session: MazeSession, geo: CellGeometry, width: int):
    for y, row in enumerate(session.maze.cells):
        for x, cell in enumerate(row):
            x1, y1 = geo.origin((x, y))
            x2, y2 = x1 + geo.cell_w, y1 + geo.cell_h
            if cell.walls[W]:
                pygame.draw.line(screen, DARKGREEN, (x1, y1), (x1, y2), width)
            if cell.walls[E]:
                pygame.draw.line(screen, DARKGREEN, (x2, y1), (x2, y2), width)
            if cell.walls[N]:
                pygame.draw.line(screen, DARKGREEN, (x1, y1), (x2, y1), width)
            if cell.walls[S]:
                pygame.draw.line(screen, DARKGREEN, (x1, y2), (x2, y2), width)


def draw_agent(screen, session: MazeSession, geo: CellGeometry):
    cx, cy = geo.center(session.agent.pos)
    pygame.draw.circle(screen, YELLOW, (cx, cy), geo.cell_w * 0.4)


def draw_path(screen, session: MazeSession, geo: CellGeometry):
    if len(session.path) < 2:
        return
    points = [geo.center(p) for p in session.path]
    pygame.draw.lines(screen, WHITE, False, points, PATH_WIDTH)


# =========================
#  MAIN
# =========================
def main():
    logging.basicConfig(level=logging.INFO)
    pygame.init()
    pygame.display.set_caption(TITLE)
    if FULLSCREEN:
        screen = pygame.display.set_mode((0, 0), pygame.FULLSCREEN)
    else:
        screen = pygame.display.set_mode(WINDOW_SIZE)
    clock = pygame.time.Clock()

    # geometry is fixed once the window exists
    width, height = screen.get_size()
    config = load_config(width, height)
    geo = CellGeometry.fit(width, height, config.rows, config.cols)
    wall_width = max(1, int(config.wall_width))

    session = MazeSession(config)
    log.info("Maze %dx%d, seed %s, %s swaps, mutation chance %.2f",
             config.rows, config.cols, config.seed, config.strategy, config.mutation_chance)

    running = True
    while running:
        # ===== EVENTS =====
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_SPACE:
                    session.regenerate()

        # held keys move every frame
        pressed = pygame.key.get_pressed()
        for d, keys in KEYS.items():
            if any(pressed[k] for k in keys):
                session.try_move(d)

        if pygame.mouse.get_pressed()[0]:
            session.teleport(geo.to_cell(*pygame.mouse.get_pos()))

        # ===== DRAW =====
        screen.fill(BLACK)
        draw_walls(screen, session, geo, wall_width)
        draw_agent(screen, session, geo)
        draw_path(screen, session, geo)
        pygame.display.flip()
        clock.tick(config.tick_hz)

        # ===== TICK =====
        session.step()

    pygame.quit()
    sys.exit()


if __name__ == "__main__":
    main()
