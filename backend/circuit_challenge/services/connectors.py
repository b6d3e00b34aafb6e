"""
Circuit Challenge - Connector Graph

Диагонали блоков 2×2, граф коннекторов и раскраска значений:
у двух коннекторов с общей клеткой значения всегда разные.
"""

import logging
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from ..schemas import Connector, ConnectorKind, Coordinate, DiagonalDirection
from .errors import ValueAssignmentFailed
from .seeded_random import SeededRandom


logger = logging.getLogger(__name__)

DiagonalGrid = Tuple[Tuple[DiagonalDirection, ...], ...]


class UnvaluedConnector(NamedTuple):
    """Коннектор до назначения значения."""
    kind: ConnectorKind
    cell_a: Coordinate
    cell_b: Coordinate
    direction: Optional[DiagonalDirection] = None


# ============================================
# DIAGONAL GRID
# ============================================

def build_diagonal_grid(
    rows: int,
    cols: int,
    commitments: Dict[Coordinate, DiagonalDirection],
    rng: SeededRandom,
) -> DiagonalGrid:
    """
    Таблица (rows-1) × (cols-1) диагоналей.
    Блоки, через которые прошёл путь, сохраняют своё направление.
    """
    grid = []
    for row in range(rows - 1):
        line = []
        for col in range(cols - 1):
            committed = commitments.get((row, col))
            if committed is not None:
                line.append(committed)
            elif rng.chance(0.5):
                line.append(DiagonalDirection.DOWN_RIGHT)
            else:
                line.append(DiagonalDirection.DOWN_LEFT)
        grid.append(tuple(line))
    return tuple(grid)


# ============================================
# CONNECTOR GRAPH
# ============================================

def build_connector_graph(
    rows: int,
    cols: int,
    diagonal_grid: DiagonalGrid,
) -> List[UnvaluedConnector]:
    """Горизонтали, вертикали и одна диагональ на блок (без значений)."""
    connectors: List[UnvaluedConnector] = []

    for row in range(rows):
        for col in range(cols - 1):
            connectors.append(UnvaluedConnector(
                kind=ConnectorKind.HORIZONTAL,
                cell_a=(row, col),
                cell_b=(row, col + 1),
            ))

    for row in range(rows - 1):
        for col in range(cols):
            connectors.append(UnvaluedConnector(
                kind=ConnectorKind.VERTICAL,
                cell_a=(row, col),
                cell_b=(row + 1, col),
            ))

    for row in range(rows - 1):
        for col in range(cols - 1):
            direction = diagonal_grid[row][col]
            if direction == DiagonalDirection.DOWN_RIGHT:
                cell_a, cell_b = (row, col), (row + 1, col + 1)
            else:
                cell_a, cell_b = (row, col + 1), (row + 1, col)
            connectors.append(UnvaluedConnector(
                kind=ConnectorKind.DIAGONAL,
                cell_a=cell_a,
                cell_b=cell_b,
                direction=direction,
            ))

    return connectors


def build_incidence_index(connectors: Sequence) -> Dict[Coordinate, List[int]]:
    """Клетка -> индексы коннекторов, которые её касаются."""
    index: Dict[Coordinate, List[int]] = {}
    for i, connector in enumerate(connectors):
        index.setdefault(connector.cell_a, []).append(i)
        index.setdefault(connector.cell_b, []).append(i)
    return index


# ============================================
# VALUE ASSIGNMENT
# ============================================

def assign_connector_values(
    unvalued: Sequence[UnvaluedConnector],
    connector_min: int,
    connector_max: int,
    rng: SeededRandom,
) -> Tuple[Connector, ...]:
    """
    Жадная раскраска в случайном порядке.

    Для каждого коннектора допустимы значения [min, max] минус значения,
    уже занятые коннекторами обеих его клеток.

    Raises:
        ValueAssignmentFailed: если допустимых значений не осталось
    """
    incidence = build_incidence_index(unvalued)
    values: Dict[int, int] = {}

    for i in rng.shuffle(range(len(unvalued))):
        connector = unvalued[i]

        used = set()
        for cell in (connector.cell_a, connector.cell_b):
            for j in incidence[cell]:
                if j in values:
                    used.add(values[j])

        available = [v for v in range(connector_min, connector_max + 1) if v not in used]
        if not available:
            raise ValueAssignmentFailed(
                f"No available value for connector {connector.cell_a}-{connector.cell_b} "
                f"(range {connector_min}-{connector_max}, {len(used)} values in use)"
            )

        values[i] = rng.choice(available)

    return tuple(
        Connector(
            kind=connector.kind,
            cell_a=connector.cell_a,
            cell_b=connector.cell_b,
            value=values[i],
            direction=connector.direction,
        )
        for i, connector in enumerate(unvalued)
    )


# ============================================
# LOOKUPS
# ============================================

def connectors_for(cell: Coordinate, connectors: Sequence[Connector]) -> List[Connector]:
    return [c for c in connectors if c.touches(cell)]


def connector_between(
    a: Coordinate,
    b: Coordinate,
    connectors: Sequence[Connector],
) -> Optional[Connector]:
    for connector in connectors:
        if connector.connects(a, b):
            return connector
    return None


def connector_lookup(connectors: Sequence[Connector]) -> Dict[frozenset, Connector]:
    """Словарь {frozenset({a, b}): коннектор} для быстрых запросов."""
    return {frozenset((c.cell_a, c.cell_b)): c for c in connectors}
