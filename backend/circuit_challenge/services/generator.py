"""
Circuit Challenge - Puzzle Generator

Оркестратор: путь -> диагонали -> коннекторы -> значения -> ответы ->
выражения -> валидация. Провал любого этапа отбрасывает только текущую
попытку; состояние между попытками не переносится.
"""

import logging
from collections import Counter
from typing import Optional, Tuple

from ..config import settings
from ..schemas import DifficultyProfile, Puzzle, describe_profile
from .cell_assigner import assign_cell_answers
from .connectors import assign_connector_values, build_connector_graph, build_diagonal_grid
from .errors import (
    CellAnswerInvariantViolated,
    EngineError,
    GenerationExhausted,
    StageError,
    ValidationFailed,
)
from .expressions import apply_expressions
from .path_finder import generate_path
from .seeded_random import SeededRandom
from .validator import validate_puzzle


logger = logging.getLogger(__name__)


def attempt_once(profile: DifficultyProfile, rng: SeededRandom) -> Puzzle:
    """
    Одна полная попытка генерации.

    Raises:
        StageError: штатный провал одного из этапов
        CellAnswerInvariantViolated: нарушен инвариант графа (ошибка программы)
    """
    rows, cols = profile.grid_rows, profile.grid_cols

    # 1. Путь решения
    path_result = generate_path(
        rows,
        cols,
        profile.min_path_length,
        profile.max_path_length,
        rng,
        max_attempts=settings.PATH_MAX_ATTEMPTS,
    )

    # 2-4. Диагонали, граф, значения
    diagonal_grid = build_diagonal_grid(rows, cols, path_result.diagonal_commitments, rng)
    unvalued = build_connector_graph(rows, cols, diagonal_grid)
    connectors = assign_connector_values(unvalued, profile.connector_min, profile.connector_max, rng)

    # 5-6. Ответы и выражения
    grid = assign_cell_answers(rows, cols, path_result.path, connectors, rng)
    grid = apply_expressions(grid, profile, rng, max_tries=settings.EXPRESSION_MAX_TRIES)

    puzzle = Puzzle(
        id=rng.uuid4(),
        difficulty_label=profile.name,
        grid=grid,
        connectors=connectors,
        solution=path_result.path,
    )

    # 7. Независимая проверка
    result = validate_puzzle(puzzle)
    if not result.valid:
        raise ValidationFailed(result.errors)

    return puzzle


def generate_puzzle(
    profile: DifficultyProfile,
    max_attempts: Optional[int] = None,
    seed: Optional[int] = None,
    rng: Optional[SeededRandom] = None,
) -> Puzzle:
    """
    Генерирует пазл, повторяя весь конвейер до max_attempts раз.

    Args:
        profile: профиль сложности
        max_attempts: лимит попыток (по умолчанию GENERATION_MAX_ATTEMPTS)
        seed: seed для воспроизводимости (игнорируется, если передан rng)
        rng: готовый источник случайности

    Raises:
        GenerationExhausted: все попытки провалились
    """
    if rng is None:
        rng = SeededRandom(seed)
    puzzle, _ = generate_with_stats(profile, max_attempts, rng)
    return puzzle


def generate_with_stats(
    profile: DifficultyProfile,
    max_attempts: Optional[int],
    rng: SeededRandom,
) -> Tuple[Puzzle, int]:
    """То же, что generate_puzzle, но возвращает (пазл, номер удачной попытки)."""
    if max_attempts is None:
        max_attempts = settings.GENERATION_MAX_ATTEMPTS

    failures: Counter = Counter()
    last_error: Optional[EngineError] = None

    for attempt in range(1, max_attempts + 1):
        try:
            puzzle = attempt_once(profile, rng)
        except CellAnswerInvariantViolated as e:
            logger.error("Attempt %d/%d broke an invariant: %s", attempt, max_attempts, e)
            failures[e.stage] += 1
            last_error = e
            continue
        except StageError as e:
            logger.debug("Attempt %d/%d failed at %s: %s", attempt, max_attempts, e.stage, e)
            failures[e.stage] += 1
            last_error = e
            continue

        logger.info(
            "Generated puzzle %s (%s) in %d attempt(s), seed=%d, path=%d",
            puzzle.id, profile.name, attempt, rng.seed, len(puzzle.solution),
        )
        return puzzle, attempt

    logger.warning(
        "Generation exhausted after %d attempts for %s: %s",
        max_attempts, describe_profile(profile), dict(failures),
    )
    raise GenerationExhausted(max_attempts, last_error, dict(failures))


if __name__ == "__main__":
    import time

    from .difficulty import PRESETS

    print("🔌 Circuit Challenge Generator")
    print("=" * 60)

    for level, profile in enumerate(PRESETS, start=1):
        start = time.time()
        try:
            puzzle = generate_puzzle(profile)
        except GenerationExhausted as e:
            print(f"\nLevel {level:2d} ❌ | {e}")
            continue
        elapsed = (time.time() - start) * 1000

        validation = validate_puzzle(puzzle)
        status = "✅" if validation.valid else "❌"
        print(f"\nLevel {level:2d} {status} | {elapsed:6.1f}ms | {profile.name}")
        print(f"  Grid: {puzzle.rows}×{puzzle.cols}")
        print(f"  Path: {len(puzzle.solution)} cells")
        print(f"  Connectors: {len(puzzle.connectors)}")

        if not validation.valid:
            print("  ❌ ERRORS:")
            for err in validation.errors[:5]:
                print(f"     - {err}")

    print("\n" + "=" * 60)
