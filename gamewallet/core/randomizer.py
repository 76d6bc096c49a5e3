"""
Outcome generation for every game.

All dice rolls, reel stops, roulette pockets, wheel angles, instant-win rolls
and lottery draws go through a single ``Randomizer`` so fairness can be checked
and tests can pin outcomes.
"""

import hashlib
import hmac
import random
import secrets
from typing import List, Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")


class Randomizer(Protocol):
    def random(self) -> float:
        """Uniform float in [0, 1)."""
        ...

    def randint(self, low: int, high: int) -> int:
        """Uniform integer in [low, high], both inclusive."""
        ...

    def choice(self, items: Sequence[T]) -> T:
        ...

    def sample(self, population: Sequence[T], k: int) -> List[T]:
        ...

    def next_round(self) -> None:
        """Start the draws of a new game round."""
        ...


class SeededRandomizer:
    """Deterministic randomizer backed by ``random.Random``."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = random.Random(seed)

    def random(self) -> float:
        return self._rng.random()

    def randint(self, low: int, high: int) -> int:
        return self._rng.randint(low, high)

    def choice(self, items):
        return self._rng.choice(items)

    def sample(self, population, k):
        return self._rng.sample(list(population), k)

    def next_round(self) -> None:
        pass


class SystemRandomizer(SeededRandomizer):
    """OS entropy; not reproducible."""

    def __init__(self):
        self.seed = None
        self._rng = secrets.SystemRandom()


class HmacRandomizer:
    """
    Provably fair stream: each draw is derived from
    HMAC-SHA256(server_seed, "client_seed:nonce:cursor").

    Publishing sha256(server_seed) before play and the seed afterwards lets a
    player recompute every outcome.
    """

    def __init__(self, server_seed: str, client_seed: str, nonce: int = 0):
        self.server_seed = server_seed
        self.client_seed = client_seed
        self.nonce = nonce
        self._cursor = 0

    @property
    def server_seed_hash(self) -> str:
        return hashlib.sha256(self.server_seed.encode("utf-8")).hexdigest()

    def next_round(self) -> None:
        self.nonce += 1
        self._cursor = 0

    def random(self) -> float:
        message = f"{self.client_seed}:{self.nonce}:{self._cursor}"
        self._cursor += 1
        digest = hmac.new(
            key=self.server_seed.encode("utf-8"),
            msg=message.encode("utf-8"),
            digestmod=hashlib.sha256,
        ).hexdigest()
        # first 52 bits -> float in [0, 1)
        return int(digest[:13], 16) / float(2 ** 52)

    def randint(self, low: int, high: int) -> int:
        return low + int(self.random() * (high - low + 1))

    def choice(self, items):
        return items[self.randint(0, len(items) - 1)]

    def sample(self, population, k):
        pool = list(population)
        picked = []
        for _ in range(k):
            picked.append(pool.pop(self.randint(0, len(pool) - 1)))
        return picked


def default_randomizer(
    seed: Optional[int] = None,
    server_seed: Optional[str] = None,
    client_seed: str = "house",
) -> Randomizer:
    """A server seed selects the provably fair stream; otherwise a fixed seed or OS entropy."""
    if server_seed:
        return HmacRandomizer(server_seed, client_seed)
    if seed is None:
        return SystemRandomizer()
    return SeededRandomizer(seed)
