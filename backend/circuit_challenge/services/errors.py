"""
Circuit Challenge - Engine Errors

Иерархия ошибок генератора.
StageError - штатный провал одной попытки (оркестратор пробует снова).
Наружу из движка выходит только GenerationExhausted.
"""

from typing import Dict, List, Optional


class EngineError(Exception):
    """Базовая ошибка движка."""


class StageError(EngineError):
    """Штатный провал этапа: текущая попытка отбрасывается."""

    stage = "unknown"


class PathGenerationFailed(StageError):
    """Случайное блуждание не нашло подходящий путь за лимит попыток."""

    stage = "path"


class ValueAssignmentFailed(StageError):
    """Коннектору не хватило свободного значения."""

    stage = "connector"


class ExpressionSynthesisExhausted(StageError):
    """Выражение не подобрано за лимит попыток (перехватывается генератором выражений)."""

    stage = "expression"

    def __init__(self, target: int, tries: int):
        super().__init__(f"No expression found for target {target} after {tries} tries")
        self.target = target
        self.tries = tries


class ValidationFailed(StageError):
    """Собранный пазл не прошёл валидацию."""

    stage = "validation"

    def __init__(self, errors: List[str]):
        preview = "; ".join(errors[:3])
        if len(errors) > 3:
            preview += f" (+{len(errors) - 3} more)"
        super().__init__(f"Puzzle failed validation: {preview}")
        self.errors = list(errors)


class CellAnswerInvariantViolated(EngineError):
    """
    У клетки нет ни одного коннектора (или нет коннектора между клетками пути).
    Это ошибка программы, а не штатный провал генерации.
    """

    stage = "invariant"


class GenerationExhausted(EngineError):
    """Все попытки генерации провалились."""

    def __init__(
        self,
        attempts: int,
        last_stage_error: Optional[EngineError] = None,
        failures: Optional[Dict[str, int]] = None,
    ):
        message = (
            f"Failed to generate puzzle after {attempts} attempts. "
            f"Try adjusting difficulty settings."
        )
        if last_stage_error is not None:
            message += f" Last error: {last_stage_error}"
        super().__init__(message)
        self.attempts = attempts
        self.last_stage_error = last_stage_error
        self.failures = dict(failures or {})
