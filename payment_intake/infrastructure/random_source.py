import random
from typing import Optional

from payment_intake.core.interfaces.random_source import RandomSource


class SystemRandomSource(RandomSource):
    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)

    def next(self) -> float:
        return self._random.random()
