"""
Circuit Challenge - Puzzles API

Пресеты, генерация, валидация и проверка маршрута.
Генерация синхронная (CPU), поэтому endpoints - обычные def
и выполняются в threadpool FastAPI.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..config import settings
from ..middleware.security import generate_rate_limit, limiter, validate_json_size
from ..schemas import (
    DifficultyProfile,
    GenerateRequest,
    GenerateResponse,
    MoveCheckRequest,
    MoveCheckResponse,
    PresetResponse,
    Puzzle,
    PuzzleMeta,
    ValidationResult,
    operation_labels,
)
from ..services.difficulty import (
    COMPACT_QUICK_PLAY_MAX,
    COMPACT_STORY_MAX,
    PRESETS,
    StoryLevel,
    preset_by_level,
    story_profile,
)
from ..services.errors import GenerationExhausted
from ..services.generator import generate_puzzle
from ..services.moves import validate_moves
from ..services.seeded_random import SeededRandom
from ..services.validator import validate_puzzle


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/puzzles", tags=["puzzles"])


# ============================================
# HELPERS
# ============================================

def _parse_story(code: str) -> StoryLevel:
    try:
        return StoryLevel.parse(code)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def resolve_profile(payload: GenerateRequest) -> DifficultyProfile:
    """Профиль из запроса (level / story / profile) с учётом compact."""
    if payload.level is not None:
        profile = preset_by_level(payload.level)
        caps = COMPACT_QUICK_PLAY_MAX
    elif payload.story is not None:
        profile = story_profile(_parse_story(payload.story))
        caps = COMPACT_STORY_MAX
    else:
        profile = payload.profile
        caps = COMPACT_QUICK_PLAY_MAX

    if payload.compact:
        profile = profile.capped(*caps)
    return profile


def build_meta(puzzle: Puzzle, profile: DifficultyProfile) -> PuzzleMeta:
    return PuzzleMeta(
        rows=puzzle.rows,
        cols=puzzle.cols,
        path_length=len(puzzle.solution),
        connector_count=len(puzzle.connectors),
        operations=operation_labels(profile),
        hidden_mode=profile.hidden_mode,
    )


# ============================================
# PRESETS
# ============================================

@router.get("/presets", response_model=List[PresetResponse])
def list_presets():
    """Все 10 пресетов сложности."""
    return [
        PresetResponse(level=level, profile=profile)
        for level, profile in enumerate(PRESETS, start=1)
    ]


@router.get("/presets/{level}", response_model=PresetResponse)
def get_preset(level: int):
    """Пресет по номеру уровня."""
    if not 1 <= level <= len(PRESETS):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Preset level must be between 1 and {len(PRESETS)}"
        )
    return PresetResponse(level=level, profile=preset_by_level(level))


@router.get("/story/{code}", response_model=DifficultyProfile)
def get_story_profile(code: str):
    """Профиль Story Mode ("3-C")."""
    return story_profile(_parse_story(code))


# ============================================
# GENERATION
# ============================================

@router.post(
    "/generate",
    response_model=GenerateResponse,
    dependencies=[Depends(validate_json_size)],
)
@limiter.limit(generate_rate_limit)
def generate(request: Request, payload: GenerateRequest):
    """
    Генерирует пазл.

    Ровно один источник профиля: level, story или profile.
    seed делает результат воспроизводимым.
    """
    profile = resolve_profile(payload)

    max_attempts = payload.max_attempts or settings.GENERATION_MAX_ATTEMPTS
    max_attempts = min(max_attempts, settings.GENERATION_MAX_ATTEMPTS_CAP)

    rng = SeededRandom(payload.seed)

    try:
        puzzle = generate_puzzle(profile, max_attempts=max_attempts, rng=rng)
    except GenerationExhausted as e:
        logger.info("Generate request exhausted (seed=%d, profile=%s)", rng.seed, profile.name)
        raise HTTPException(
            status_code=422,
            detail={
                "message": "Could not generate a puzzle. Try different settings.",
                "attempts": e.attempts,
                "failures": e.failures,
            }
        )

    return GenerateResponse(seed=rng.seed, puzzle=puzzle, meta=build_meta(puzzle, profile))


# ============================================
# VALIDATION
# ============================================

@router.post(
    "/validate",
    response_model=ValidationResult,
    dependencies=[Depends(validate_json_size)],
)
def validate(puzzle: Puzzle):
    """Независимая проверка пазла."""
    return validate_puzzle(puzzle)


@router.post(
    "/check-moves",
    response_model=MoveCheckResponse,
    dependencies=[Depends(validate_json_size)],
)
def check_moves(payload: MoveCheckRequest):
    """Проверка маршрута игрока (START первым, FINISH последним)."""
    valid, error = validate_moves(payload.puzzle, payload.moves)
    return MoveCheckResponse(valid=valid, error=error)
