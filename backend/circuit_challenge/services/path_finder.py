"""
Circuit Challenge - Path Finder

Случайное блуждание от START до FINISH.
Диагональный ход фиксирует ориентацию диагонали своего блока 2×2,
и на этот блок больше нельзя пойти по другой диагонали.
"""

import logging
from typing import Dict, List, NamedTuple, Tuple

from ..schemas import Coordinate, DiagonalDirection
from .errors import PathGenerationFailed
from .seeded_random import SeededRandom


logger = logging.getLogger(__name__)


# ============================================
# CONSTANTS
# ============================================

DIRECTIONS: List[Tuple[int, int]] = [
    (-1, 0),   # up
    (1, 0),    # down
    (0, -1),   # left
    (0, 1),    # right
    (-1, -1),  # up-left
    (-1, 1),   # up-right
    (1, -1),   # down-left
    (1, 1),    # down-right
]

PATH_MAX_ATTEMPTS = 200
SMALL_GRID_CELLS = 20

SMALL_GRID_PROGRESS_THRESHOLD = 0.6
SMALL_GRID_FINISH_BIAS = 0.4

LARGE_GRID_PULL_START = 0.5
DEAD_END_WEIGHT = 0.5
JITTER = 0.5


class PathResult(NamedTuple):
    """Путь решения и зафиксированные диагонали блоков."""
    path: Tuple[Coordinate, ...]
    diagonal_commitments: Dict[Coordinate, DiagonalDirection]


# ============================================
# GEOMETRY HELPERS
# ============================================

def get_adjacent(pos: Coordinate, rows: int, cols: int) -> List[Coordinate]:
    """Все 8 соседей внутри поля."""
    adjacent = []
    for dr, dc in DIRECTIONS:
        row, col = pos[0] + dr, pos[1] + dc
        if 0 <= row < rows and 0 <= col < cols:
            adjacent.append((row, col))
    return adjacent


def manhattan_distance(a: Coordinate, b: Coordinate) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def are_adjacent(a: Coordinate, b: Coordinate) -> bool:
    """Соседи по 8 направлениям (клетка сама себе не сосед)."""
    row_diff = abs(a[0] - b[0])
    col_diff = abs(a[1] - b[1])
    return row_diff <= 1 and col_diff <= 1 and (row_diff + col_diff) > 0


def is_diagonal_move(from_pos: Coordinate, to_pos: Coordinate) -> bool:
    return from_pos[0] != to_pos[0] and from_pos[1] != to_pos[1]


def diagonal_block(a: Coordinate, b: Coordinate) -> Coordinate:
    """Левый верхний угол блока 2×2, которому принадлежит диагональ."""
    return (min(a[0], b[0]), min(a[1], b[1]))


def diagonal_direction(from_pos: Coordinate, to_pos: Coordinate) -> DiagonalDirection:
    row_diff = to_pos[0] - from_pos[0]
    col_diff = to_pos[1] - from_pos[1]
    if (row_diff > 0 and col_diff > 0) or (row_diff < 0 and col_diff < 0):
        return DiagonalDirection.DOWN_RIGHT
    return DiagonalDirection.DOWN_LEFT


def is_diagonal_move_valid(
    from_pos: Coordinate,
    to_pos: Coordinate,
    commitments: Dict[Coordinate, DiagonalDirection],
) -> bool:
    """Диагональ нельзя провести, если блок уже занят другой диагональю."""
    if not is_diagonal_move(from_pos, to_pos):
        return True
    existing = commitments.get(diagonal_block(from_pos, to_pos))
    return existing is None or existing == diagonal_direction(from_pos, to_pos)


def count_direction_changes(path: List[Coordinate]) -> int:
    """Сколько раз путь меняет направление."""
    if len(path) < 3:
        return 0

    changes = 0
    prev_delta = (path[1][0] - path[0][0], path[1][1] - path[0][1])
    for i in range(2, len(path)):
        delta = (path[i][0] - path[i - 1][0], path[i][1] - path[i - 1][1])
        if delta != prev_delta:
            changes += 1
        prev_delta = delta
    return changes


def required_direction_changes(length: int) -> int:
    if length < 6:
        return 1
    if length < 8:
        return 2
    return 3


def is_interesting_path(path: List[Coordinate]) -> bool:
    """Короткие пути требуют меньше поворотов."""
    return count_direction_changes(path) >= required_direction_changes(len(path))


# ============================================
# MOVE SELECTION
# ============================================

def _pick_small_grid_move(
    valid_moves: List[Coordinate],
    finish: Coordinate,
    progress: float,
    rng: SeededRandom,
) -> Coordinate:
    if progress > SMALL_GRID_PROGRESS_THRESHOLD and rng.chance(SMALL_GRID_FINISH_BIAS):
        return min(valid_moves, key=lambda move: manhattan_distance(move, finish))
    return rng.choice(valid_moves)


def _pick_large_grid_move(
    valid_moves: List[Coordinate],
    current: Coordinate,
    finish: Coordinate,
    visited: set,
    progress: float,
    rows: int,
    cols: int,
    rng: SeededRandom,
) -> Coordinate:
    pull = max(0.0, progress - LARGE_GRID_PULL_START) * 2
    best_move = valid_moves[0]
    best_score = float("-inf")

    for move in valid_moves:
        score = -manhattan_distance(move, finish) * pull

        # Штраф за тупики: считаем свободных соседей кандидата
        future_options = sum(
            1 for n in get_adjacent(move, rows, cols)
            if n not in visited and n != current
        )
        score += future_options * DEAD_END_WEIGHT
        score += rng.uniform(0, JITTER)

        if score > best_score:
            best_score = score
            best_move = move

    return best_move


# ============================================
# RANDOM WALK
# ============================================

def _random_walk(
    rows: int,
    cols: int,
    max_length: int,
    rng: SeededRandom,
) -> Tuple[List[Coordinate], Dict[Coordinate, DiagonalDirection]]:
    """Одна попытка блуждания. Возвращает путь (возможно, не дошедший до FINISH)."""
    start = (0, 0)
    finish = (rows - 1, cols - 1)
    is_small_grid = rows * cols <= SMALL_GRID_CELLS

    path = [start]
    visited = {start}
    commitments: Dict[Coordinate, DiagonalDirection] = {}
    current = start

    while current != finish:
        if len(path) >= max_length:
            break

        valid_moves = [
            n for n in get_adjacent(current, rows, cols)
            if n not in visited and is_diagonal_move_valid(current, n, commitments)
        ]
        if not valid_moves:
            break

        progress = len(path) / max_length
        if is_small_grid:
            next_pos = _pick_small_grid_move(valid_moves, finish, progress, rng)
        else:
            next_pos = _pick_large_grid_move(
                valid_moves, current, finish, visited, progress, rows, cols, rng
            )

        if is_diagonal_move(current, next_pos):
            commitments[diagonal_block(current, next_pos)] = diagonal_direction(current, next_pos)

        path.append(next_pos)
        visited.add(next_pos)
        current = next_pos

    return path, commitments


def generate_path(
    rows: int,
    cols: int,
    min_length: int,
    max_length: int,
    rng: SeededRandom,
    max_attempts: int = PATH_MAX_ATTEMPTS,
) -> PathResult:
    """
    Генерирует путь решения от (0,0) до (rows-1, cols-1).

    Raises:
        PathGenerationFailed: если за max_attempts блужданий путь не найден
    """
    finish = (rows - 1, cols - 1)

    for attempt in range(max_attempts):
        path, commitments = _random_walk(rows, cols, max_length, rng)

        if path[-1] != finish:
            continue
        if len(path) < min_length or not is_interesting_path(path):
            continue

        logger.debug(
            "Path found on walk %d: length=%d turns=%d",
            attempt + 1, len(path), count_direction_changes(path),
        )
        return PathResult(path=tuple(path), diagonal_commitments=dict(commitments))

    raise PathGenerationFailed(
        f"Failed to generate valid path after {max_attempts} attempts "
        f"({rows}x{cols}, length {min_length}-{max_length})"
    )
