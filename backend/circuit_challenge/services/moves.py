"""
Circuit Challenge - Move Checking

Чистые проверки ходов по готовому пазлу (без состояния игры).
Ход верный, если коннектор между клетками несёт ответ исходной клетки.
"""

from typing import List, NamedTuple, Optional, Sequence, Tuple

from ..schemas import Connector, Coordinate, Puzzle
from .connectors import connector_lookup
from .path_finder import are_adjacent, get_adjacent


class MoveCheck(NamedTuple):
    correct: bool
    connector: Optional[Connector]


def is_adjacent(a: Coordinate, b: Coordinate) -> bool:
    return are_adjacent(a, b)


def adjacent_cells(pos: Coordinate, rows: int, cols: int) -> List[Coordinate]:
    return get_adjacent(pos, rows, cols)


def check_move(puzzle: Puzzle, from_pos: Coordinate, to_pos: Coordinate) -> MoveCheck:
    """Проверка одного хода. Нет коннектора -> ход неверный, connector=None."""
    connector = puzzle.connector_between(from_pos, to_pos)
    if connector is None:
        return MoveCheck(correct=False, connector=None)

    cell = puzzle.cell_at(from_pos)
    correct = cell is not None and cell.answer is not None and cell.answer == connector.value
    return MoveCheck(correct=correct, connector=connector)


def validate_moves(puzzle: Puzzle, moves: Sequence[Coordinate]) -> Tuple[bool, Optional[str]]:
    """
    Проверяет полный маршрут игрока от START до FINISH.

    Возвращает (ok, error), где error указывает первый неверный шаг.
    """
    if not moves:
        return False, "No moves submitted"

    moves = [tuple(m) for m in moves]
    if moves[0] != puzzle.start:
        return False, f"Route must begin at START {puzzle.start}, got {moves[0]}"

    by_pair = connector_lookup(puzzle.connectors)
    visited = {moves[0]}

    for step in range(1, len(moves)):
        prev, current = moves[step - 1], moves[step]

        if puzzle.cell_at(current) is None:
            return False, f"Step {step}: cell {current} is outside the grid"

        if not are_adjacent(prev, current):
            return False, f"Step {step}: {prev} and {current} are not adjacent"

        if current in visited:
            return False, f"Step {step}: cell {current} already visited"

        connector = by_pair.get(frozenset((prev, current)))
        if connector is None:
            return False, f"Step {step}: no connector between {prev} and {current}"

        answer = puzzle.cell_at(prev).answer
        if connector.value != answer:
            return False, (
                f"Step {step}: connector {connector.value} does not match "
                f"answer {answer} at {prev}"
            )

        visited.add(current)

    if moves[-1] != puzzle.finish:
        return False, f"Route ends at {moves[-1]}, not FINISH {puzzle.finish}"

    return True, None
