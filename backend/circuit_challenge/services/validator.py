"""
Circuit Challenge - Puzzle Validator

Независимая проверка готового пазла. Не зависит от порядка генерации,
одна ошибка на каждый нарушивший экземпляр.
"""

from typing import List, Sequence

from ..schemas import Cell, Connector, Coordinate, Puzzle, ValidationResult
from .connectors import build_incidence_index, connector_lookup
from .expressions import evaluate_expression
from .path_finder import are_adjacent


def fmt(coord: Coordinate) -> str:
    return f"({coord[0]},{coord[1]})"


def validate_path(path: Sequence[Coordinate], rows: int, cols: int) -> List[str]:
    """Структура пути: концы, соседство, повторы, границы."""
    errors = []

    if len(path) < 2:
        return ["Path must have at least 2 cells"]

    if tuple(path[0]) != (0, 0):
        errors.append(f"Path must start at (0,0), but starts at {fmt(path[0])}")

    if tuple(path[-1]) != (rows - 1, cols - 1):
        errors.append(f"Path must end at ({rows - 1},{cols - 1}), but ends at {fmt(path[-1])}")

    visited = set()
    for i, coord in enumerate(path):
        row, col = coord
        if not (0 <= row < rows and 0 <= col < cols):
            errors.append(f"Path coordinate {fmt(coord)} is out of bounds")

        if coord in visited:
            errors.append(f"Duplicate coordinate in path: {fmt(coord)}")
        visited.add(coord)

        if i > 0 and not are_adjacent(path[i - 1], coord):
            errors.append(f"Non-adjacent cells in path: {fmt(path[i - 1])} to {fmt(coord)}")

    return errors


def validate_connector_uniqueness(connectors: Sequence[Connector], rows: int, cols: int) -> List[str]:
    """У каждой клетки значения коннекторов попарно различны."""
    errors = []
    incidence = build_incidence_index(connectors)

    for row in range(rows):
        for col in range(cols):
            values = [connectors[i].value for i in incidence.get((row, col), [])]
            if len(values) != len(set(values)):
                errors.append(f"Duplicate connector value at cell {fmt((row, col))}")

    return errors


def validate_cell_flags(grid: Sequence[Sequence[Cell]]) -> List[str]:
    """Флаги START/FINISH стоят ровно на (0,0) и в правом нижнем углу."""
    errors = []
    if not grid:
        return errors

    start = (0, 0)
    finish = (len(grid) - 1, len(grid[-1]) - 1)

    for line in grid:
        for cell in line:
            coord = cell.coordinate
            if cell.is_start != (coord == start):
                if cell.is_start:
                    errors.append(f"Cell {fmt(coord)} is marked START, but START is {fmt(start)}")
                else:
                    errors.append(f"START cell {fmt(coord)} is not marked as START")
            if cell.is_finish != (coord == finish):
                if cell.is_finish:
                    errors.append(f"Cell {fmt(coord)} is marked FINISH, but FINISH is {fmt(finish)}")
                else:
                    errors.append(f"FINISH cell {fmt(coord)} is not marked as FINISH")

    return errors


def validate_cell_answers(grid: Sequence[Sequence[Cell]], connectors: Sequence[Connector]) -> List[str]:
    """FINISH без ответа, остальные совпадают ровно с одним коннектором."""
    errors = []
    incidence = build_incidence_index(connectors)

    for line in grid:
        for cell in line:
            coord = cell.coordinate
            if cell.is_finish:
                if cell.answer is not None:
                    errors.append(f"FINISH cell {fmt(coord)} should have no answer, has {cell.answer}")
                continue

            if cell.answer is None:
                errors.append(f"Cell {fmt(coord)} has no answer but is not FINISH")
                continue

            matching = sum(
                1 for i in incidence.get(coord, [])
                if connectors[i].value == cell.answer
            )
            if matching == 0:
                errors.append(f"Cell {fmt(coord)} has answer {cell.answer} but no matching connector")
            elif matching > 1:
                errors.append(
                    f"Cell {fmt(coord)} has answer {cell.answer} matching {matching} connectors"
                )

    return errors


def validate_solution_path(puzzle: Puzzle) -> List[str]:
    """Значение коннектора на каждом шаге пути равно ответу клетки."""
    errors = []
    by_pair = connector_lookup(puzzle.connectors)

    for current, following in zip(puzzle.solution, puzzle.solution[1:]):
        connector = by_pair.get(frozenset((current, following)))
        if connector is None:
            errors.append(f"No connector between path cells {fmt(current)} and {fmt(following)}")
            continue

        cell = puzzle.cell_at(current)
        if cell is None:
            # Границы уже проверены в validate_path
            continue
        if cell.answer != connector.value:
            errors.append(
                f"Cell {fmt(current)} answer {cell.answer} doesn't match "
                f"connector value {connector.value}"
            )

    return errors


def validate_expressions(grid: Sequence[Sequence[Cell]]) -> List[str]:
    """Выражения всех клеток, кроме START и FINISH, дают ответ клетки."""
    errors = []

    for line in grid:
        for cell in line:
            if cell.is_start or cell.is_finish:
                continue

            coord = fmt(cell.coordinate)
            if not cell.expression:
                errors.append(f"Cell {coord} has empty expression")
                continue

            result = evaluate_expression(cell.expression)
            if result is None:
                errors.append(f"Cannot evaluate expression '{cell.expression}' at {coord}")
            elif result != cell.answer:
                errors.append(
                    f"Expression '{cell.expression}' = {result}, "
                    f"but cell answer is {cell.answer} at {coord}"
                )

    return errors


def validate_puzzle(puzzle: Puzzle) -> ValidationResult:
    """Валидирует пазл целиком (все проверки, ошибки в порядке проверок)."""
    errors: List[str] = []

    errors.extend(validate_path(puzzle.solution, puzzle.rows, puzzle.cols))
    errors.extend(validate_cell_flags(puzzle.grid))
    errors.extend(validate_connector_uniqueness(puzzle.connectors, puzzle.rows, puzzle.cols))
    errors.extend(validate_cell_answers(puzzle.grid, puzzle.connectors))
    errors.extend(validate_solution_path(puzzle))
    errors.extend(validate_expressions(puzzle.grid))

    return ValidationResult.from_errors(errors)
