"""Общие фикстуры тестов движка."""

import pytest

from circuit_challenge.schemas import Cell, Connector, DiagonalDirection, Puzzle
from circuit_challenge.services.connectors import build_connector_graph, connector_lookup, connectors_for
from circuit_challenge.services.difficulty import custom_profile
from circuit_challenge.services.expressions import fallback_expression
from circuit_challenge.services.seeded_random import SeededRandom


HANDMADE_PATH = ((0, 0), (0, 1), (1, 2), (2, 3))


def build_handmade_puzzle() -> Puzzle:
    """
    Пазл 3×4 без случайности: все диагонали DR, у каждого коннектора
    своё значение (5, 6, 7, ...), путь (0,0) -> (0,1) -> (1,2) -> (2,3).
    """
    rows, cols = 3, 4
    diagonals = tuple(
        tuple(DiagonalDirection.DOWN_RIGHT for _ in range(cols - 1))
        for _ in range(rows - 1)
    )
    connectors = tuple(
        Connector(
            kind=c.kind,
            cell_a=c.cell_a,
            cell_b=c.cell_b,
            value=i + 5,
            direction=c.direction,
        )
        for i, c in enumerate(build_connector_graph(rows, cols, diagonals))
    )

    by_pair = connector_lookup(connectors)
    path_answers = {
        a: by_pair[frozenset((a, b))].value
        for a, b in zip(HANDMADE_PATH, HANDMADE_PATH[1:])
    }

    grid = []
    for row in range(rows):
        line = []
        for col in range(cols):
            coord = (row, col)
            is_finish = coord == (rows - 1, cols - 1)
            answer = None
            expression = None
            if not is_finish:
                answer = path_answers.get(coord, connectors_for(coord, connectors)[0].value)
                expression = fallback_expression(answer).text
            line.append(Cell(
                row=row,
                col=col,
                is_start=coord == (0, 0),
                is_finish=is_finish,
                answer=answer,
                expression=expression,
            ))
        grid.append(tuple(line))

    return Puzzle(
        id="handmade",
        difficulty_label="Handmade",
        grid=tuple(grid),
        connectors=connectors,
        solution=HANDMADE_PATH,
    )


@pytest.fixture
def rng():
    return SeededRandom(12345)


@pytest.fixture
def handmade_puzzle():
    return build_handmade_puzzle()


@pytest.fixture
def addition_profile():
    """Поле 4×5, только сложение до 15, коннекторы 5-15."""
    return custom_profile(
        name="Addition 4x5",
        add_sub_range=15,
        connector_min=5,
        connector_max=15,
        grid_rows=4,
        grid_cols=5,
    )
