import pytest

from circuit_challenge.schemas import ConnectorKind, DiagonalDirection
from circuit_challenge.services.connectors import (
    UnvaluedConnector,
    assign_connector_values,
    build_connector_graph,
    build_diagonal_grid,
    build_incidence_index,
    connector_between,
    connectors_for,
)
from circuit_challenge.services.errors import ValueAssignmentFailed
from circuit_challenge.services.seeded_random import SeededRandom


def all_dr(rows, cols):
    return tuple(
        tuple(DiagonalDirection.DOWN_RIGHT for _ in range(cols - 1))
        for _ in range(rows - 1)
    )


class TestDiagonalGrid:
    """Таблица диагоналей"""

    def test_shape(self, rng):
        grid = build_diagonal_grid(4, 5, {}, rng)
        assert len(grid) == 3
        assert all(len(line) == 4 for line in grid)

    def test_commitments_are_kept(self):
        commitments = {
            (0, 0): DiagonalDirection.DOWN_LEFT,
            (2, 3): DiagonalDirection.DOWN_RIGHT,
        }
        for seed in range(10):
            grid = build_diagonal_grid(4, 5, commitments, SeededRandom(seed))
            assert grid[0][0] == DiagonalDirection.DOWN_LEFT
            assert grid[2][3] == DiagonalDirection.DOWN_RIGHT


class TestConnectorGraph:
    """Граф коннекторов"""

    @pytest.mark.parametrize("rows,cols", [(3, 4), (4, 5), (6, 8)])
    def test_connector_count(self, rows, cols):
        connectors = build_connector_graph(rows, cols, all_dr(rows, cols))
        expected = rows * (cols - 1) + (rows - 1) * cols + (rows - 1) * (cols - 1)
        assert len(connectors) == expected

    def test_kinds(self):
        connectors = build_connector_graph(3, 4, all_dr(3, 4))
        kinds = [c.kind for c in connectors]
        assert kinds.count(ConnectorKind.HORIZONTAL) == 9
        assert kinds.count(ConnectorKind.VERTICAL) == 8
        assert kinds.count(ConnectorKind.DIAGONAL) == 6

    def test_diagonal_endpoints_follow_direction(self):
        grid = (
            (DiagonalDirection.DOWN_RIGHT, DiagonalDirection.DOWN_LEFT, DiagonalDirection.DOWN_RIGHT),
            (DiagonalDirection.DOWN_LEFT, DiagonalDirection.DOWN_RIGHT, DiagonalDirection.DOWN_LEFT),
        )
        diagonals = [c for c in build_connector_graph(3, 4, grid) if c.kind == ConnectorKind.DIAGONAL]
        pairs = {(c.cell_a, c.cell_b) for c in diagonals}

        assert ((0, 0), (1, 1)) in pairs
        assert ((0, 2), (1, 1)) in pairs
        assert ((1, 1), (2, 0)) in pairs
        assert all(c.direction is not None for c in diagonals)

    def test_one_diagonal_per_block(self):
        connectors = build_connector_graph(4, 5, all_dr(4, 5))
        blocks = [
            (min(c.cell_a[0], c.cell_b[0]), min(c.cell_a[1], c.cell_b[1]))
            for c in connectors if c.kind == ConnectorKind.DIAGONAL
        ]
        assert len(blocks) == len(set(blocks)) == 12


class TestValueAssignment:
    """Раскраска значений"""

    def test_values_unique_per_cell(self):
        unvalued = build_connector_graph(4, 5, all_dr(4, 5))
        connectors = assign_connector_values(unvalued, 5, 20, SeededRandom(3))

        for cell, indices in build_incidence_index(connectors).items():
            values = [connectors[i].value for i in indices]
            assert len(values) == len(set(values)), f"duplicate at {cell}"

    def test_values_in_range(self):
        unvalued = build_connector_graph(4, 5, all_dr(4, 5))
        connectors = assign_connector_values(unvalued, 5, 20, SeededRandom(3))
        assert all(5 <= c.value <= 20 for c in connectors)

    def test_order_and_geometry_preserved(self):
        unvalued = build_connector_graph(3, 4, all_dr(3, 4))
        connectors = assign_connector_values(unvalued, 1, 30, SeededRandom(8))
        for before, after in zip(unvalued, connectors):
            assert (before.kind, before.cell_a, before.cell_b) == (after.kind, after.cell_a, after.cell_b)

    def test_star_with_too_few_values_fails(self):
        # 9 коннекторов в одной клетке, а значений всего 8
        hub = (5, 5)
        spokes = [(5 + dr, 5 + dc) for dr in (-1, 0, 1) for dc in (-1, 0, 1) if (dr, dc) != (0, 0)]
        spokes.append((7, 7))
        unvalued = [
            UnvaluedConnector(kind=ConnectorKind.HORIZONTAL, cell_a=hub, cell_b=spoke)
            for spoke in spokes
        ]
        assert len(unvalued) == 9

        for seed in range(5):
            with pytest.raises(ValueAssignmentFailed):
                assign_connector_values(unvalued, 1, 8, SeededRandom(seed))

    def test_star_with_enough_values_succeeds(self):
        hub = (0, 0)
        unvalued = [
            UnvaluedConnector(kind=ConnectorKind.HORIZONTAL, cell_a=hub, cell_b=(1, i))
            for i in range(9)
        ]
        connectors = assign_connector_values(unvalued, 1, 9, SeededRandom(0))
        assert sorted(c.value for c in connectors) == list(range(1, 10))


class TestLookups:
    """Поиск коннекторов"""

    def test_connectors_for_and_between(self, handmade_puzzle):
        connectors = handmade_puzzle.connectors
        corner = connectors_for((0, 0), connectors)
        assert len(corner) == 3

        connector = connector_between((0, 1), (0, 0), connectors)
        assert connector is not None
        assert connector.connects((0, 0), (0, 1))
        assert connector_between((0, 0), (2, 2), connectors) is None
