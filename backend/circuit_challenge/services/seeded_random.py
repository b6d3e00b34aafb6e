"""
Circuit Challenge - Seeded Random

Источник случайности передаётся в каждый этап явно,
поэтому любой пазл воспроизводится по seed.
"""

import random
import secrets
import uuid
from typing import List, Optional, Sequence, TypeVar


T = TypeVar("T")

MAX_SEED = 2 ** 31 - 1


class SeededRandom:
    """Детерминированный PRNG для воспроизводимости пазлов."""

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = secrets.randbelow(MAX_SEED)
        self.seed = seed
        self._random = random.Random(seed)

    def next(self) -> float:
        """Возвращает число от 0 до 1 (1 не включается)."""
        return self._random.random()

    def next_int(self, min_val: int, max_val: int) -> int:
        """Возвращает целое число в диапазоне [min, max]."""
        if min_val > max_val:
            return min_val
        return self._random.randint(min_val, max_val)

    def uniform(self, low: float, high: float) -> float:
        return self._random.uniform(low, high)

    def chance(self, probability: float) -> bool:
        """True с заданной вероятностью."""
        return self.next() < probability

    def shuffle(self, arr: Sequence[T]) -> List[T]:
        """Fisher-Yates shuffle (возвращает копию)."""
        result = list(arr)
        self._random.shuffle(result)
        return result

    def choice(self, arr: Sequence[T]) -> Optional[T]:
        """Случайный элемент массива."""
        if not arr:
            return None
        return arr[self.next_int(0, len(arr) - 1)]

    def weighted_choice(self, items: Sequence[T], weights: Sequence[int]) -> Optional[T]:
        """Выбор с весами (веса - целые, нулевые пропускаются)."""
        total = sum(w for w in weights if w > 0)
        if total <= 0:
            return None
        roll = self.next_int(0, total - 1)
        for item, weight in zip(items, weights):
            if weight <= 0:
                continue
            roll -= weight
            if roll < 0:
                return item
        return items[0]

    def uuid4(self) -> str:
        """UUID из того же потока (воспроизводится по seed)."""
        return str(uuid.UUID(int=self._random.getrandbits(128), version=4))
