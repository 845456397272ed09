"""
Swap acceptance heuristics.

A heuristic decides whether a candidate total should replace the incumbent
total: `accept(old_total, new_total, target) -> bool`. The swap optimizer
folds candidates through it, possibly across worker threads, so a heuristic
must not depend on the order it is called in to be deterministic.
"""

import logging
import math
import random
import sys
from typing import Optional

logger = logging.getLogger(__name__)

# Smallest positive normal float; annealing divides by the temperature
MIN_TEMPERATURE = sys.float_info.min


def greedy(old_total: float, new_total: float, target: float) -> bool:
    """
    Greedy distance minimization.

    Accepts only a strict improvement; ties keep the incumbent.
    """
    return abs(target - new_total) < abs(target - old_total)


class SimulatedAnnealing:
    """
    Probabilistic acceptance that sometimes takes a worse total.

    Strict improvements are always accepted. A worse total is accepted with
    probability exp(-delta / temperature), where delta is how much further the
    new total is from the target. `cool()` lowers the temperature between passes.

    Not pure: results under parallel evaluation are nondeterministic.
    """

    def __init__(
        self,
        temperature: float = 30.0,
        cooling_rate: float = 0.9,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            temperature: Starting temperature in seconds of distance
            cooling_rate: Multiplier applied by each cool() call (0, 1]
            rng: Random source for acceptance draws
        """
        if temperature <= 0:
            raise ValueError(f"Temperature must be positive, got {temperature}")
        if not 0 < cooling_rate <= 1:
            raise ValueError(f"Cooling rate must be in (0, 1], got {cooling_rate}")

        self.temperature = temperature
        self.cooling_rate = cooling_rate
        self.rng = rng if rng is not None else random.Random()

    def __call__(self, old_total: float, new_total: float, target: float) -> bool:
        old_distance = abs(target - old_total)
        new_distance = abs(target - new_total)

        if new_distance < old_distance:
            return True
        if new_distance == old_distance:
            return False

        if self.temperature <= 0:
            return False

        delta = new_distance - old_distance
        return self.rng.random() < math.exp(-delta / self.temperature)

    def cool(self) -> None:
        """Lower the temperature by the cooling rate, never reaching zero."""
        self.temperature = max(self.temperature * self.cooling_rate, MIN_TEMPERATURE)
        logger.debug(f"Annealing temperature now {self.temperature:.3f}")

    def __repr__(self) -> str:
        return f"SimulatedAnnealing(temperature={self.temperature:.3f}, cooling_rate={self.cooling_rate})"


def get_heuristic(name: str, config: Optional[dict] = None, rng: Optional[random.Random] = None):
    """
    Look up a heuristic by name.

    Args:
        name: "greedy" or "annealing"
        config: Annealing config dict from config["annealing"]
        rng: Random source for probabilistic heuristics

    Returns:
        Heuristic callable

    Raises:
        ValueError: If name is unknown
    """
    if name == "greedy":
        return greedy

    if name == "annealing":
        config = config or {}
        return SimulatedAnnealing(
            temperature=config.get("initial_temperature", 30.0),
            cooling_rate=config.get("cooling_rate", 0.9),
            rng=rng,
        )

    raise ValueError(f"Unknown heuristic: {name!r} (expected 'greedy' or 'annealing')")
