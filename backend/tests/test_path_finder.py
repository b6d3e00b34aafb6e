import pytest

from circuit_challenge.schemas import DiagonalDirection, calculate_max_path_length, calculate_min_path_length
from circuit_challenge.services.errors import PathGenerationFailed, StageError
from circuit_challenge.services.path_finder import (
    are_adjacent,
    count_direction_changes,
    diagonal_block,
    diagonal_direction,
    generate_path,
    get_adjacent,
    is_diagonal_move_valid,
    is_interesting_path,
)
from circuit_challenge.services.seeded_random import SeededRandom
from circuit_challenge.services.validator import validate_path


class TestGeometry:
    """Соседство и диагонали"""

    def test_corner_has_three_neighbours(self):
        assert sorted(get_adjacent((0, 0), 3, 4)) == [(0, 1), (1, 0), (1, 1)]

    def test_interior_has_eight_neighbours(self):
        assert len(get_adjacent((1, 1), 3, 4)) == 8

    def test_adjacency(self):
        assert are_adjacent((1, 1), (2, 2))
        assert are_adjacent((1, 1), (1, 0))
        assert not are_adjacent((1, 1), (1, 1))
        assert not are_adjacent((0, 0), (0, 2))

    def test_diagonal_block_is_top_left(self):
        assert diagonal_block((1, 2), (0, 1)) == (0, 1)
        assert diagonal_block((0, 2), (1, 1)) == (0, 1)

    def test_diagonal_direction(self):
        assert diagonal_direction((0, 0), (1, 1)) == DiagonalDirection.DOWN_RIGHT
        assert diagonal_direction((1, 1), (0, 0)) == DiagonalDirection.DOWN_RIGHT
        assert diagonal_direction((0, 1), (1, 0)) == DiagonalDirection.DOWN_LEFT
        assert diagonal_direction((1, 0), (0, 1)) == DiagonalDirection.DOWN_LEFT

    def test_committed_block_rejects_crossing_diagonal(self):
        commitments = {(0, 0): DiagonalDirection.DOWN_RIGHT}
        assert is_diagonal_move_valid((1, 1), (0, 0), commitments)
        assert not is_diagonal_move_valid((0, 1), (1, 0), commitments)
        # Ортогональные ходы не зависят от диагоналей
        assert is_diagonal_move_valid((0, 0), (0, 1), commitments)


class TestInterestingness:
    """Порог поворотов зависит от длины пути"""

    def test_straight_line_has_no_turns(self):
        assert count_direction_changes([(0, 0), (0, 1), (0, 2), (0, 3)]) == 0

    def test_turns_are_counted(self):
        path = [(0, 0), (0, 1), (1, 2), (2, 2), (2, 3)]
        assert count_direction_changes(path) == 3

    def test_short_path_needs_one_turn(self):
        assert is_interesting_path([(0, 0), (0, 1), (1, 1), (2, 1), (2, 2)])
        assert not is_interesting_path([(0, 0), (1, 1), (2, 2), (3, 3), (4, 4)])

    def test_long_path_needs_three_turns(self):
        # 8 клеток, 2 поворота
        path = [(0, 0), (0, 1), (0, 2), (0, 3), (1, 3), (2, 3), (2, 2), (2, 1)]
        assert count_direction_changes(path) == 2
        assert not is_interesting_path(path)


class TestGeneratePath:
    """Случайное блуждание"""

    @pytest.mark.parametrize("rows,cols", [(3, 4), (4, 5), (5, 6), (6, 8)])
    def test_path_respects_all_constraints(self, rows, cols):
        min_length = calculate_min_path_length(rows, cols)
        max_length = calculate_max_path_length(rows, cols)

        found = 0
        for seed in range(5):
            rng = SeededRandom(seed)
            try:
                result = generate_path(rows, cols, min_length, max_length, rng)
            except PathGenerationFailed:
                continue

            found += 1
            path = list(result.path)
            assert validate_path(path, rows, cols) == []
            assert min_length <= len(path) <= max_length
            assert is_interesting_path(path)

        assert found > 0

    def test_diagonals_on_path_match_commitments(self):
        rng = SeededRandom(7)
        result = generate_path(4, 5, 12, 17, rng)

        for a, b in zip(result.path, result.path[1:]):
            if a[0] != b[0] and a[1] != b[1]:
                block = diagonal_block(a, b)
                assert result.diagonal_commitments[block] == diagonal_direction(a, b)

    def test_same_seed_same_path(self):
        first = generate_path(4, 5, 12, 17, SeededRandom(99))
        second = generate_path(4, 5, 12, 17, SeededRandom(99))
        assert first.path == second.path
        assert first.diagonal_commitments == second.diagonal_commitments

    def test_impossible_length_fails(self):
        # На поле 3×4 нельзя пройти 13 клеток
        with pytest.raises(PathGenerationFailed) as exc_info:
            generate_path(3, 4, 13, 12, SeededRandom(1), max_attempts=5)
        assert isinstance(exc_info.value, StageError)
        assert exc_info.value.stage == "path"
