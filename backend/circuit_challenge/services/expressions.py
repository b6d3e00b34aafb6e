"""
Circuit Challenge - Expression Generator

Для каждой клетки с ответом подбирается выражение "a op b" = ответ.
Операция выбирается по весам профиля; если подобрать не удалось -
запасное сложение.
"""

import logging
import math
import re
from typing import Callable, Dict, NamedTuple, Optional, Tuple

from ..schemas import Cell, DifficultyProfile, Operation
from .errors import ExpressionSynthesisExhausted
from .seeded_random import SeededRandom


logger = logging.getLogger(__name__)


# ============================================
# CONSTANTS
# ============================================

EXPRESSION_MAX_TRIES = 10
MAX_DIVISOR = 12
MAX_DIVIDEND = 1000

# ASCII-синонимы для ввода с клавиатуры
OPERATOR_ALIASES: Dict[str, Operation] = {
    "+": Operation.ADDITION,
    "−": Operation.SUBTRACTION,
    "-": Operation.SUBTRACTION,
    "×": Operation.MULTIPLICATION,
    "*": Operation.MULTIPLICATION,
    "÷": Operation.DIVISION,
    "/": Operation.DIVISION,
}

EXPRESSION_PATTERN = re.compile(r"^\s*(\d+)\s*([+−\-×*÷/])\s*(\d+)\s*$")


class Expression(NamedTuple):
    operation: Operation
    left: int
    right: int

    @property
    def text(self) -> str:
        return f"{self.left} {self.operation.symbol} {self.right}"

    @property
    def result(self) -> int:
        if self.operation == Operation.ADDITION:
            return self.left + self.right
        if self.operation == Operation.SUBTRACTION:
            return self.left - self.right
        if self.operation == Operation.MULTIPLICATION:
            return self.left * self.right
        return self.left // self.right


# ============================================
# OPERATION SELECTION
# ============================================

def select_operation(profile: DifficultyProfile, rng: SeededRandom) -> Operation:
    """Взвешенный выбор среди включённых операций (по умолчанию сложение)."""
    operations = [
        op for op in profile.enabled_operations
        if profile.weights.for_operation(op) > 0
    ]
    if not operations:
        return Operation.ADDITION

    weights = [profile.weights.for_operation(op) for op in operations]
    return rng.weighted_choice(operations, weights) or Operation.ADDITION


# ============================================
# GENERATORS
# ============================================

def generate_addition(target: int, max_operand: int, rng: SeededRandom) -> Optional[Expression]:
    """a + b = target, оба слагаемых в [1, max_operand]."""
    min_a = max(1, target - max_operand)
    max_a = min(max_operand, target - 1)
    if min_a > max_a:
        return None

    a = rng.next_int(min_a, max_a)
    return Expression(Operation.ADDITION, a, target - a)


def generate_subtraction(target: int, max_operand: int, rng: SeededRandom) -> Optional[Expression]:
    """a − b = target, уменьшаемое не больше max_operand."""
    max_b = max_operand - target
    if max_b < 1:
        return None

    b = rng.next_int(1, max_b)
    return Expression(Operation.SUBTRACTION, target + b, b)


def generate_multiplication(target: int, max_factor: int, rng: SeededRandom) -> Optional[Expression]:
    """a × b = target, оба множителя в [2, max_factor]."""
    pairs = []
    upper = min(max_factor, math.isqrt(target))
    for a in range(2, upper + 1):
        if target % a == 0:
            b = target // a
            if b <= max_factor:
                pairs.append((a, b))

    if not pairs:
        return None

    a, b = rng.choice(pairs)
    if rng.chance(0.5):
        a, b = b, a
    return Expression(Operation.MULTIPLICATION, a, b)


def generate_division(target: int, max_divisor: int, rng: SeededRandom) -> Optional[Expression]:
    """a ÷ b = target без остатка, делитель до 12, делимое до 1000."""
    divisors = [
        b for b in range(2, min(max_divisor, MAX_DIVISOR) + 1)
        if target * b <= MAX_DIVIDEND
    ]
    if not divisors:
        return None

    b = rng.choice(divisors)
    return Expression(Operation.DIVISION, target * b, b)


GENERATORS: Dict[Operation, Callable[[int, int, SeededRandom], Optional[Expression]]] = {
    Operation.ADDITION: generate_addition,
    Operation.SUBTRACTION: generate_subtraction,
    Operation.MULTIPLICATION: generate_multiplication,
    Operation.DIVISION: generate_division,
}


def _operand_range(operation: Operation, profile: DifficultyProfile) -> int:
    if operation in (Operation.ADDITION, Operation.SUBTRACTION):
        return profile.add_sub_range
    return profile.mult_div_range


# ============================================
# SYNTHESIS
# ============================================

def synthesize_expression(
    target: int,
    profile: DifficultyProfile,
    rng: SeededRandom,
    max_tries: int = EXPRESSION_MAX_TRIES,
) -> Expression:
    """
    Несколько раз выбирает операцию и пытается подобрать операнды.

    Raises:
        ExpressionSynthesisExhausted: ни одна попытка не удалась
    """
    for _ in range(max_tries):
        operation = select_operation(profile, rng)
        expression = GENERATORS[operation](target, _operand_range(operation, profile), rng)
        if expression is not None:
            return expression

    raise ExpressionSynthesisExhausted(target, max_tries)


def fallback_expression(target: int) -> Expression:
    """Запасное выражение, которое существует для любого target >= 1."""
    if target == 1:
        return Expression(Operation.SUBTRACTION, 2, 1)
    half = target // 2
    return Expression(Operation.ADDITION, half, target - half)


def generate_expression(
    target: int,
    profile: DifficultyProfile,
    rng: SeededRandom,
    max_tries: int = EXPRESSION_MAX_TRIES,
) -> str:
    """Текст выражения для target (никогда не падает)."""
    try:
        return synthesize_expression(target, profile, rng, max_tries).text
    except ExpressionSynthesisExhausted as e:
        logger.debug("%s, using fallback", e)
        return fallback_expression(target).text


def apply_expressions(
    grid: Tuple[Tuple[Cell, ...], ...],
    profile: DifficultyProfile,
    rng: SeededRandom,
    max_tries: int = EXPRESSION_MAX_TRIES,
) -> Tuple[Tuple[Cell, ...], ...]:
    """Новая сетка, где у каждой клетки с ответом есть выражение."""
    result = []
    for line in grid:
        new_line = []
        for cell in line:
            if cell.answer is None:
                new_line.append(cell)
            else:
                expression = generate_expression(cell.answer, profile, rng, max_tries)
                new_line.append(cell.model_copy(update={"expression": expression}))
        result.append(tuple(new_line))
    return tuple(result)


# ============================================
# EVALUATION
# ============================================

def parse_expression(text: str) -> Optional[Expression]:
    """Разбирает "<int> <op> <int>" (None если формат не тот)."""
    if not isinstance(text, str):
        return None
    match = EXPRESSION_PATTERN.match(text)
    if not match:
        return None
    left, op, right = match.groups()
    return Expression(OPERATOR_ALIASES[op], int(left), int(right))


def evaluate_expression(text: str) -> Optional[int]:
    """
    Значение выражения или None.

    None - если текст не разобран, деление на ноль или деление с остатком.
    """
    expression = parse_expression(text)
    if expression is None:
        return None
    if expression.operation == Operation.DIVISION:
        if expression.right == 0 or expression.left % expression.right != 0:
            return None
    return expression.result
