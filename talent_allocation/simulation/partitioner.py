import math
import random
from typing import List, Sequence, TypeVar

T = TypeVar("T")


def agent_count(pool_size: int, min_agents: int = 4, max_agents: int = 20) -> int:
    """Number of selection agents for a candidate pool: floor(2 * log2(P + 1)), clamped."""
    scaled = math.floor(math.log2(pool_size + 1) * 2) if pool_size > 0 else 0
    return max(min_agents, min(max_agents, scaled))


def partition(candidates: Sequence[T], num_groups: int, rng: random.Random) -> List[List[T]]:
    """
    Shuffle the candidates and deal them round-robin into disjoint groups.

    Group ``i`` receives shuffled items ``i, i + n, i + 2n, ...``; groups can
    be empty when there are fewer candidates than groups.
    """
    if num_groups < 1:
        raise ValueError("num_groups must be at least 1")
    shuffled = list(candidates)
    rng.shuffle(shuffled)
    return [shuffled[i::num_groups] for i in range(num_groups)]
