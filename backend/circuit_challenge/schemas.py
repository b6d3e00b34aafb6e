"""
Circuit Challenge - Pydantic Schemas

Все схемы в одном файле: профиль сложности, пазл, ответы API.
Модели движка неизменяемые (frozen) - готовый пазл нельзя поменять.
"""

import math
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


Coordinate = Tuple[int, int]  # (row, col)


# ============================================
# ENUMS
# ============================================

class DiagonalDirection(str, Enum):
    """Ориентация единственной диагонали в блоке 2×2."""
    DOWN_RIGHT = "DR"  # (r, c) -> (r+1, c+1)
    DOWN_LEFT = "DL"   # (r, c+1) -> (r+1, c)


class ConnectorKind(str, Enum):
    """Тип коннектора."""
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    DIAGONAL = "diagonal"


class Operation(str, Enum):
    """Арифметические операции (значение = глиф в тексте выражения)."""
    ADDITION = "+"
    SUBTRACTION = "−"  # U+2212
    MULTIPLICATION = "×"
    DIVISION = "÷"

    @property
    def symbol(self) -> str:
        return self.value


# ============================================
# DIFFICULTY
# ============================================

def calculate_min_path_length(rows: int, cols: int) -> int:
    """Минимальная длина пути: 60% клеток, но не меньше 4."""
    return max(4, math.floor(0.6 * rows * cols))


def calculate_max_path_length(rows: int, cols: int) -> int:
    """Максимальная длина пути: 85% клеток."""
    return math.floor(0.85 * rows * cols)


class OperationWeights(BaseModel):
    """Веса выбора операций."""
    model_config = ConfigDict(frozen=True)

    addition: int = 0
    subtraction: int = 0
    multiplication: int = 0
    division: int = 0

    def for_operation(self, operation: Operation) -> int:
        return getattr(self, operation.name.lower())

    @property
    def total(self) -> int:
        return self.addition + self.subtraction + self.multiplication + self.division


class DifficultyProfile(BaseModel):
    """
    Профиль сложности (неизменяемый).

    min_path_length / max_path_length = 0 означает "вычислить по размеру поля".
    """
    model_config = ConfigDict(frozen=True)

    name: str = "Custom"

    addition_enabled: bool = True
    subtraction_enabled: bool = False
    multiplication_enabled: bool = False
    division_enabled: bool = False

    add_sub_range: int = 10
    mult_div_range: int = 0

    connector_min: int = 5
    connector_max: int = 10

    grid_rows: int = 3
    grid_cols: int = 4

    min_path_length: int = 0
    max_path_length: int = 0

    weights: OperationWeights = OperationWeights(addition=100)

    # Флаг для клиента: ответы показываются только в конце
    hidden_mode: bool = False

    @model_validator(mode="before")
    @classmethod
    def derive_path_lengths(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        try:
            rows = int(data.get("grid_rows", 3))
            cols = int(data.get("grid_cols", 4))
        except (TypeError, ValueError):
            return data
        if not data.get("min_path_length"):
            data["min_path_length"] = calculate_min_path_length(rows, cols)
        if not data.get("max_path_length"):
            data["max_path_length"] = calculate_max_path_length(rows, cols)
        return data

    @model_validator(mode="after")
    def validate_profile(self) -> "DifficultyProfile":
        problems: List[str] = []

        enabled = self.enabled_operations
        if not enabled:
            problems.append("at least one operation must be enabled")
        if self.add_sub_range < 1:
            problems.append(f"add_sub_range must be >= 1, got {self.add_sub_range}")
        if (self.multiplication_enabled or self.division_enabled) and self.mult_div_range < 2:
            problems.append(
                f"mult_div_range must be >= 2 when multiplication or division is enabled, "
                f"got {self.mult_div_range}"
            )
        if self.connector_min < 1:
            problems.append(f"connector_min must be >= 1, got {self.connector_min}")
        if self.connector_max <= self.connector_min:
            problems.append(
                f"connector_max ({self.connector_max}) must be greater than "
                f"connector_min ({self.connector_min})"
            )
        if self.grid_rows < 3:
            problems.append(f"grid_rows must be >= 3, got {self.grid_rows}")
        if self.grid_cols < 4:
            problems.append(f"grid_cols must be >= 4, got {self.grid_cols}")
        if self.min_path_length < 4:
            problems.append(f"min_path_length must be >= 4, got {self.min_path_length}")
        if self.max_path_length < self.min_path_length:
            problems.append(
                f"max_path_length ({self.max_path_length}) must be >= "
                f"min_path_length ({self.min_path_length})"
            )
        if self.max_path_length > self.grid_rows * self.grid_cols:
            problems.append(
                f"max_path_length ({self.max_path_length}) exceeds cell count "
                f"({self.grid_rows * self.grid_cols})"
            )
        for operation in enabled:
            if self.weights.for_operation(operation) <= 0:
                problems.append(f"weight for {operation.name.lower()} must be positive")

        if problems:
            raise ValueError("; ".join(problems))
        return self

    @property
    def enabled_operations(self) -> List[Operation]:
        flags = [
            (Operation.ADDITION, self.addition_enabled),
            (Operation.SUBTRACTION, self.subtraction_enabled),
            (Operation.MULTIPLICATION, self.multiplication_enabled),
            (Operation.DIVISION, self.division_enabled),
        ]
        return [op for op, enabled in flags if enabled]

    @property
    def cell_count(self) -> int:
        return self.grid_rows * self.grid_cols

    def capped(self, max_rows: int, max_cols: int) -> "DifficultyProfile":
        """Урезает поле (маленькие экраны) и пересчитывает длины пути."""
        data = self.model_dump()
        data["grid_rows"] = min(self.grid_rows, max_rows)
        data["grid_cols"] = min(self.grid_cols, max_cols)
        data["min_path_length"] = 0
        data["max_path_length"] = 0
        return DifficultyProfile(**data)


# ============================================
# PUZZLE
# ============================================

class Connector(BaseModel):
    """Коннектор между двумя соседними клетками."""
    model_config = ConfigDict(frozen=True)

    kind: ConnectorKind
    cell_a: Coordinate
    cell_b: Coordinate
    value: int
    direction: Optional[DiagonalDirection] = None

    def touches(self, cell: Coordinate) -> bool:
        return self.cell_a == cell or self.cell_b == cell

    def connects(self, a: Coordinate, b: Coordinate) -> bool:
        return (self.cell_a == a and self.cell_b == b) or (self.cell_a == b and self.cell_b == a)


class Cell(BaseModel):
    """Клетка на поле."""
    model_config = ConfigDict(frozen=True)

    row: int
    col: int
    is_start: bool = False
    is_finish: bool = False
    answer: Optional[int] = None
    expression: Optional[str] = None

    @property
    def coordinate(self) -> Coordinate:
        return (self.row, self.col)


class Puzzle(BaseModel):
    """Готовый пазл (результат генерации)."""
    model_config = ConfigDict(frozen=True)

    id: str
    difficulty_label: str
    grid: Tuple[Tuple[Cell, ...], ...]
    connectors: Tuple[Connector, ...]
    solution: Tuple[Coordinate, ...]

    @property
    def rows(self) -> int:
        return len(self.grid)

    @property
    def cols(self) -> int:
        return len(self.grid[0]) if self.grid else 0

    @property
    def start(self) -> Coordinate:
        return (0, 0)

    @property
    def finish(self) -> Coordinate:
        return (self.rows - 1, self.cols - 1)

    def cell_at(self, coord: Coordinate) -> Optional[Cell]:
        row, col = coord
        if 0 <= row < self.rows and 0 <= col < len(self.grid[row]):
            return self.grid[row][col]
        return None

    def connectors_for(self, cell: Coordinate) -> List[Connector]:
        return [c for c in self.connectors if c.touches(cell)]

    def connector_between(self, a: Coordinate, b: Coordinate) -> Optional[Connector]:
        for connector in self.connectors:
            if connector.connects(a, b):
                return connector
        return None


class ValidationResult(BaseModel):
    """Результат валидации пазла."""
    valid: bool
    errors: List[str] = []

    @classmethod
    def from_errors(cls, errors: List[str]) -> "ValidationResult":
        return cls(valid=not errors, errors=list(errors))


# ============================================
# API
# ============================================

class PresetResponse(BaseModel):
    """Пресет сложности с номером уровня."""
    level: int
    profile: DifficultyProfile


class GenerateRequest(BaseModel):
    """Запрос генерации: ровно один из level / story / profile."""
    level: Optional[int] = Field(None, ge=1, le=10)
    story: Optional[str] = None  # "3-C"
    profile: Optional[DifficultyProfile] = None
    seed: Optional[int] = Field(None, ge=0)
    max_attempts: Optional[int] = Field(None, ge=1)
    compact: bool = False  # урезать поле для маленьких экранов

    @model_validator(mode="after")
    def validate_source(self) -> "GenerateRequest":
        sources = [s for s in (self.level, self.story, self.profile) if s is not None]
        if len(sources) != 1:
            raise ValueError("exactly one of 'level', 'story' or 'profile' must be provided")
        return self


class PuzzleMeta(BaseModel):
    """Метаданные пазла."""
    rows: int
    cols: int
    path_length: int
    connector_count: int
    operations: List[str]
    hidden_mode: bool = False


class GenerateResponse(BaseModel):
    """Ответ генерации."""
    seed: int
    puzzle: Puzzle
    meta: PuzzleMeta


class MoveCheckRequest(BaseModel):
    """Проверка маршрута игрока (START первым)."""
    puzzle: Puzzle
    moves: List[Coordinate]


class MoveCheckResponse(BaseModel):
    """Ответ проверки маршрута."""
    valid: bool
    error: Optional[str] = None


def operation_labels(profile: DifficultyProfile) -> List[str]:
    return [op.name.lower() for op in profile.enabled_operations]


def describe_profile(profile: DifficultyProfile) -> Dict[str, Any]:
    """Короткое описание профиля для логов."""
    return {
        "name": profile.name,
        "grid": f"{profile.grid_rows}x{profile.grid_cols}",
        "connectors": f"{profile.connector_min}-{profile.connector_max}",
        "path": f"{profile.min_path_length}-{profile.max_path_length}",
        "operations": operation_labels(profile),
    }
