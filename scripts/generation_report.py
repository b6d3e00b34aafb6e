#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
import statistics
import time
from collections import Counter
from typing import Any

from circuit_challenge.config import settings
from circuit_challenge.schemas import DifficultyProfile
from circuit_challenge.services.difficulty import PRESETS, StoryLevel, story_profile
from circuit_challenge.services.errors import GenerationExhausted
from circuit_challenge.services.generator import generate_with_stats
from circuit_challenge.services.seeded_random import SeededRandom
from circuit_challenge.services.validator import validate_puzzle


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate many puzzles per difficulty and report success rate and timings."
    )
    parser.add_argument(
        "--trials",
        type=int,
        default=1000,
        help="Generations per profile.",
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=settings.GENERATION_MAX_ATTEMPTS,
        help="Attempt cap passed to the generator.",
    )
    parser.add_argument(
        "--level",
        type=int,
        action="append",
        help="Only report these preset levels (repeatable).",
    )
    parser.add_argument(
        "--story",
        action="append",
        help="Also report story levels such as 3-C (repeatable).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Base seed; trial i uses seed + i.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON instead of a table.",
    )
    return parser.parse_args()


def percentile(values: list[float], fraction: float) -> float:
    if not values:
        return 0.0
    ordered = sorted(values)
    index = min(len(ordered) - 1, int(round(fraction * (len(ordered) - 1))))
    return ordered[index]


def run_profile(
    profile: DifficultyProfile,
    trials: int,
    max_attempts: int,
    base_seed: int | None,
) -> dict[str, Any]:
    successes = 0
    invalid = 0
    attempts_used: list[int] = []
    timings_ms: list[float] = []
    failures: Counter = Counter()

    for i in range(trials):
        seed = None if base_seed is None else base_seed + i
        start = time.perf_counter()
        try:
            puzzle, attempts = generate_with_stats(profile, max_attempts, SeededRandom(seed))
        except GenerationExhausted as e:
            failures.update(e.failures)
            continue
        finally:
            timings_ms.append((time.perf_counter() - start) * 1000)

        successes += 1
        attempts_used.append(attempts)
        if not validate_puzzle(puzzle).valid:
            invalid += 1

    return {
        "profile": profile.name,
        "grid": f"{profile.grid_rows}x{profile.grid_cols}",
        "trials": trials,
        "success_rate": successes / trials if trials else 0.0,
        "invalid": invalid,
        "mean_attempts": statistics.mean(attempts_used) if attempts_used else 0.0,
        "median_ms": statistics.median(timings_ms) if timings_ms else 0.0,
        "p95_ms": percentile(timings_ms, 0.95),
        "failures": dict(failures),
    }


def print_table(rows: list[dict[str, Any]]) -> None:
    print(f"{'profile':<18} {'grid':>5} {'ok%':>7} {'attempts':>9} {'median':>9} {'p95':>9}")
    print("-" * 62)
    for row in rows:
        print(
            f"{row['profile']:<18} {row['grid']:>5} "
            f"{row['success_rate'] * 100:>6.1f}% {row['mean_attempts']:>9.2f} "
            f"{row['median_ms']:>7.1f}ms {row['p95_ms']:>7.1f}ms"
        )
        if row["invalid"]:
            print(f"  ❌ {row['invalid']} returned puzzle(s) failed validation")
        if row["failures"]:
            print(f"  failures: {row['failures']}")


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=logging.ERROR)

    profiles: list[DifficultyProfile] = []
    levels = args.level or range(1, len(PRESETS) + 1)
    for level in levels:
        if not 1 <= level <= len(PRESETS):
            raise SystemExit(f"Unknown preset level: {level}")
        profiles.append(PRESETS[level - 1])

    for code in args.story or []:
        try:
            profiles.append(story_profile(StoryLevel.parse(code)))
        except ValueError as e:
            raise SystemExit(str(e))

    rows = [
        run_profile(profile, args.trials, args.max_attempts, args.seed)
        for profile in profiles
    ]

    if args.json:
        print(json.dumps(rows, ensure_ascii=False, indent=2))
    else:
        print_table(rows)

    return 0 if all(row["invalid"] == 0 for row in rows) else 1


if __name__ == "__main__":
    raise SystemExit(main())
