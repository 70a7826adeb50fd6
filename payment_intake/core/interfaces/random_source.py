from abc import ABC, abstractmethod


class RandomSource(ABC):
    @abstractmethod
    def next(self) -> float:
        """Returns a uniformly distributed value in [0, 1)."""
