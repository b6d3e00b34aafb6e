"""
Circuit Challenge - Difficulty Catalogue

10 пресетов сложности (Quick Play) и профили Story Mode:
10 глав по 5 уровней (A-E), поле растёт от уровня к уровню.
"""

import math
import re
from typing import Dict, FrozenSet, List, NamedTuple, Optional, Tuple

from ..schemas import DifficultyProfile, Operation, OperationWeights


# ============================================
# PRESETS
# ============================================

TINY_TOT = DifficultyProfile(
    name="Tiny Tot",
    add_sub_range=10,
    connector_min=5,
    connector_max=10,
    grid_rows=3,
    grid_cols=4,
    weights=OperationWeights(addition=100),
)

BEGINNER = DifficultyProfile(
    name="Beginner",
    add_sub_range=15,
    connector_min=5,
    connector_max=15,
    grid_rows=4,
    grid_cols=4,
    weights=OperationWeights(addition=100),
)

EASY = DifficultyProfile(
    name="Easy",
    subtraction_enabled=True,
    add_sub_range=15,
    connector_min=5,
    connector_max=15,
    grid_rows=4,
    grid_cols=5,
    weights=OperationWeights(addition=60, subtraction=40),
)

GETTING_THERE = DifficultyProfile(
    name="Getting There",
    subtraction_enabled=True,
    add_sub_range=20,
    connector_min=5,
    connector_max=20,
    grid_rows=4,
    grid_cols=5,
    weights=OperationWeights(addition=55, subtraction=45),
)

TIMES_TABLES = DifficultyProfile(
    name="Times Tables",
    subtraction_enabled=True,
    multiplication_enabled=True,
    add_sub_range=20,
    mult_div_range=5,
    connector_min=5,
    connector_max=25,
    grid_rows=4,
    grid_cols=5,
    weights=OperationWeights(addition=40, subtraction=35, multiplication=25),
)

CONFIDENT = DifficultyProfile(
    name="Confident",
    subtraction_enabled=True,
    multiplication_enabled=True,
    add_sub_range=25,
    mult_div_range=6,
    connector_min=5,
    connector_max=36,
    grid_rows=5,
    grid_cols=5,
    weights=OperationWeights(addition=35, subtraction=30, multiplication=35),
)

ADVENTUROUS = DifficultyProfile(
    name="Adventurous",
    subtraction_enabled=True,
    multiplication_enabled=True,
    add_sub_range=30,
    mult_div_range=8,
    connector_min=5,
    connector_max=64,
    grid_rows=5,
    grid_cols=6,
    weights=OperationWeights(addition=30, subtraction=30, multiplication=40),
)

DIVISION_INTRO = DifficultyProfile(
    name="Division Intro",
    subtraction_enabled=True,
    multiplication_enabled=True,
    division_enabled=True,
    add_sub_range=30,
    mult_div_range=6,
    connector_min=5,
    connector_max=36,
    grid_rows=5,
    grid_cols=6,
    weights=OperationWeights(addition=30, subtraction=25, multiplication=30, division=15),
)

CHALLENGE = DifficultyProfile(
    name="Challenge",
    subtraction_enabled=True,
    multiplication_enabled=True,
    division_enabled=True,
    add_sub_range=50,
    mult_div_range=10,
    connector_min=5,
    connector_max=100,
    grid_rows=6,
    grid_cols=7,
    weights=OperationWeights(addition=25, subtraction=25, multiplication=30, division=20),
)

EXPERT = DifficultyProfile(
    name="Expert",
    subtraction_enabled=True,
    multiplication_enabled=True,
    division_enabled=True,
    add_sub_range=100,
    mult_div_range=12,
    connector_min=5,
    connector_max=144,
    grid_rows=6,
    grid_cols=8,
    weights=OperationWeights(addition=25, subtraction=25, multiplication=30, division=20),
)

PRESETS: Tuple[DifficultyProfile, ...] = (
    TINY_TOT,
    BEGINNER,
    EASY,
    GETTING_THERE,
    TIMES_TABLES,
    CONFIDENT,
    ADVENTUROUS,
    DIVISION_INTRO,
    CHALLENGE,
    EXPERT,
)

LEVEL_BY_NAME: Dict[str, int] = {p.name: i for i, p in enumerate(PRESETS, start=1)}

# Ограничения поля для компактных экранов (rows, cols)
COMPACT_QUICK_PLAY_MAX = (5, 6)
COMPACT_STORY_MAX = (4, 6)


def preset_by_level(level: int) -> DifficultyProfile:
    """Пресет по номеру уровня (номер зажимается в 1-10)."""
    index = max(0, min(len(PRESETS) - 1, level - 1))
    return PRESETS[index]


def preset_by_name(name: str) -> Optional[DifficultyProfile]:
    level = LEVEL_BY_NAME.get(name)
    return PRESETS[level - 1] if level else None


def level_number(profile: DifficultyProfile) -> int:
    """Номер уровня пресета или 0 для пользовательского профиля."""
    return LEVEL_BY_NAME.get(profile.name, 0)


def custom_profile(**fields) -> DifficultyProfile:
    """
    Пользовательский профиль. Длины пути выводятся из размера поля,
    если не заданы явно.

    Raises:
        pydantic.ValidationError: профиль противоречив
    """
    fields.setdefault("name", "Custom")
    return DifficultyProfile(**fields)


# ============================================
# STORY MODE
# ============================================

LEVEL_LETTERS = ("A", "B", "C", "D", "E")
STORY_CODE_PATTERN = re.compile(r"^\s*(\d+)\s*-\s*([A-Ea-e])\s*$")

# Нижняя граница connector_max: шести значений главы 1 не хватает для полей от 4×5
STORY_CONNECTOR_FLOOR = 25


class StoryLevel(NamedTuple):
    """Уровень Story Mode: глава 1-10, уровень 1-5 (A-E)."""
    chapter: int
    level: int

    @property
    def letter(self) -> str:
        return LEVEL_LETTERS[self.level - 1]

    @property
    def display_name(self) -> str:
        return f"{self.chapter}-{self.letter}"

    @classmethod
    def parse(cls, code: str) -> "StoryLevel":
        """Разбирает "3-C" -> StoryLevel(3, 3)."""
        match = STORY_CODE_PATTERN.match(code or "")
        if not match:
            raise ValueError(f"Invalid story level code: {code!r} (expected e.g. '3-C')")
        chapter, letter = match.groups()
        return cls(int(chapter), LEVEL_LETTERS.index(letter.upper()) + 1)


class ChapterConfig(NamedTuple):
    operations: FrozenSet[Operation]
    add_sub_max: int
    mult_div_max: int
    start_grid: Tuple[int, int]
    end_grid: Tuple[int, int]
    all_hidden: bool = False


ADD = frozenset({Operation.ADDITION})
ADD_SUB = frozenset({Operation.ADDITION, Operation.SUBTRACTION})
ADD_SUB_MUL = ADD_SUB | {Operation.MULTIPLICATION}
ALL_OPERATIONS = ADD_SUB_MUL | {Operation.DIVISION}

CHAPTERS: Dict[int, ChapterConfig] = {
    1: ChapterConfig(ADD, 10, 0, (3, 4), (6, 7)),
    2: ChapterConfig(ADD_SUB, 15, 0, (4, 5), (6, 7)),
    3: ChapterConfig(ADD_SUB, 20, 0, (4, 5), (6, 7)),
    4: ChapterConfig(ADD_SUB, 35, 0, (4, 5), (6, 7)),
    5: ChapterConfig(ADD_SUB_MUL, 20, 20, (4, 5), (6, 7)),
    6: ChapterConfig(ADD_SUB_MUL, 30, 50, (4, 5), (6, 7)),
    7: ChapterConfig(ADD_SUB_MUL, 40, 100, (4, 5), (6, 7)),
    8: ChapterConfig(ALL_OPERATIONS, 50, 100, (4, 5), (6, 7)),
    9: ChapterConfig(ALL_OPERATIONS, 100, 144, (6, 7), (6, 7)),
    10: ChapterConfig(ALL_OPERATIONS, 100, 144, (8, 9), (8, 9), all_hidden=True),
}


def story_grid(level: int, start: Tuple[int, int], end: Tuple[int, int]) -> Tuple[int, int]:
    """
    Размер поля для уровня главы.

    Уровень E всегда получает конечный размер, уровни A-D растут
    от начального, по очереди добавляя строку и столбец.
    """
    if level == len(LEVEL_LETTERS):
        return end
    if start == end:
        return start

    growth_per_level = ((end[0] - start[0]) + (end[1] - start[1])) // 4
    rows, cols = start

    for i in range((level - 1) * growth_per_level):
        if i % 2 == 0 and rows < end[0]:
            rows += 1
        elif cols < end[1]:
            cols += 1
        elif rows < end[0]:
            rows += 1

    return rows, cols


def story_weights(operations: FrozenSet[Operation]) -> OperationWeights:
    """Равные веса для всех операций главы."""
    if not operations:
        return OperationWeights(addition=100)
    base = 100 // len(operations)
    return OperationWeights(**{op.name.lower(): base for op in operations})


def story_profile(story_level: StoryLevel) -> DifficultyProfile:
    """Профиль для уровня Story Mode (неизвестная глава -> 1-A)."""
    config = CHAPTERS.get(story_level.chapter)
    if config is None or not 1 <= story_level.level <= len(LEVEL_LETTERS):
        return story_profile(StoryLevel(1, 1))

    rows, cols = story_grid(story_level.level, config.start_grid, config.end_grid)
    mult_div_range = math.isqrt(config.mult_div_max) if config.mult_div_max > 0 else 0

    return DifficultyProfile(
        name=f"Story {story_level.display_name}",
        addition_enabled=Operation.ADDITION in config.operations,
        subtraction_enabled=Operation.SUBTRACTION in config.operations,
        multiplication_enabled=Operation.MULTIPLICATION in config.operations,
        division_enabled=Operation.DIVISION in config.operations,
        add_sub_range=config.add_sub_max,
        mult_div_range=mult_div_range,
        connector_min=5,
        connector_max=max(config.add_sub_max, config.mult_div_max, STORY_CONNECTOR_FLOOR),
        grid_rows=rows,
        grid_cols=cols,
        weights=story_weights(config.operations),
        hidden_mode=config.all_hidden or story_level.level == len(LEVEL_LETTERS),
    )


def all_story_levels() -> List[StoryLevel]:
    return [
        StoryLevel(chapter, level)
        for chapter in sorted(CHAPTERS)
        for level in range(1, len(LEVEL_LETTERS) + 1)
    ]
