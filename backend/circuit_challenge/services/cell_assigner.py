"""
Circuit Challenge - Cell Answers

Клетки пути получают значение коннектора к следующей клетке пути,
остальные - значение случайного соседнего коннектора (ложный след).
"""

from typing import List, Sequence, Tuple

from ..schemas import Cell, Connector, Coordinate
from .connectors import build_incidence_index, connector_lookup
from .errors import CellAnswerInvariantViolated
from .seeded_random import SeededRandom


def assign_cell_answers(
    rows: int,
    cols: int,
    path: Sequence[Coordinate],
    connectors: Sequence[Connector],
    rng: SeededRandom,
) -> Tuple[Tuple[Cell, ...], ...]:
    """
    Собирает сетку клеток с ответами (выражения добавляются позже).

    Raises:
        CellAnswerInvariantViolated: у клетки нет коннекторов
            или между соседними клетками пути нет коннектора
    """
    start = (0, 0)
    finish = (rows - 1, cols - 1)

    by_pair = connector_lookup(connectors)
    incidence = build_incidence_index(connectors)

    answers = {}

    for current, following in zip(path, path[1:]):
        connector = by_pair.get(frozenset((current, following)))
        if connector is None:
            raise CellAnswerInvariantViolated(
                f"No connector between path cells {current} and {following}"
            )
        answers[current] = connector.value

    grid: List[Tuple[Cell, ...]] = []
    for row in range(rows):
        line = []
        for col in range(cols):
            coord = (row, col)
            answer = None

            if coord != finish:
                answer = answers.get(coord)
                if answer is None:
                    indices = incidence.get(coord)
                    if not indices:
                        raise CellAnswerInvariantViolated(f"Cell {coord} has no connectors")
                    answer = connectors[rng.choice(indices)].value

            line.append(Cell(
                row=row,
                col=col,
                is_start=coord == start,
                is_finish=coord == finish,
                answer=answer,
            ))
        grid.append(tuple(line))

    return tuple(grid)
