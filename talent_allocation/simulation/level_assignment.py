"""
Level assignment and rebalancing.

Places scored certificates into ``num_levels`` ordered learning levels of
``max_per_level`` certificates each:

1. Rank filter: candidates below ``min_score`` are dropped.
2. Primary placement, sorted by (target level, score desc).
3. Overflow to the nearest level with room (t-1, t+1, t-2, t+2, ...).
   With every level full the certificate stays at its target.
4. Balance: excess certificates move from over-full levels to the nearest
   level with room, or to the least populated level when that strictly
   reduces imbalance. Nothing is dropped.
5. Progression: one left-to-right pass swapping the easiest certificate of
   a level with the hardest of the previous one when the level is clearly
   easier on average.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

import numpy as np

from ..models.certificates import CertificateRanking, LearningLevel

logger = logging.getLogger(__name__)

PROGRESSION_TOLERANCE = 0.5


@dataclass(frozen=True)
class LevelCandidate:
    """A certificate waiting to be placed."""
    certificate_id: str
    score: float
    target_level: int
    difficulty: float

    @classmethod
    def from_ranking(cls, ranking: CertificateRanking) -> "LevelCandidate":
        return cls(
            certificate_id=ranking.certificate_id,
            score=ranking.score,
            target_level=ranking.suggested_level,
            difficulty=ranking.difficulty,
        )


class LevelAssigner:
    def __init__(self, min_score: float = 0.3):
        self.min_score = min_score

    def assign(
        self,
        candidates: Iterable[LevelCandidate],
        num_levels: int,
        max_per_level: int,
    ) -> List[LearningLevel]:
        """Place candidates into learning levels 1..num_levels."""
        buckets = self.place(candidates, num_levels, max_per_level)
        self.balance(buckets, max_per_level)
        self.enforce_progression(buckets)

        levels = []
        for index, bucket in enumerate(buckets):
            level = LearningLevel.create(index + 1)
            level.certificate_ids = [c.certificate_id for c in bucket]
            levels.append(level)
        return levels

    def place(
        self,
        candidates: Iterable[LevelCandidate],
        num_levels: int,
        max_per_level: int,
    ) -> List[List[LevelCandidate]]:
        """Rank filter, primary placement and overflow."""
        buckets: List[List[LevelCandidate]] = [[] for _ in range(num_levels)]
        eligible = [c for c in candidates if c.score >= self.min_score]
        eligible.sort(key=lambda c: (c.target_level, -c.score))

        for candidate in eligible:
            target = min(max(candidate.target_level, 1), num_levels)
            if len(buckets[target - 1]) < max_per_level:
                buckets[target - 1].append(candidate)
                continue

            alternative = self._nearest_with_room(buckets, target - 1, max_per_level)
            index = alternative if alternative is not None else target - 1
            buckets[index].append(candidate)

        return buckets

    def balance(self, buckets: List[List[LevelCandidate]], max_per_level: int) -> None:
        """Move excess out of over-full levels; terminates even when every level is full."""
        for index, bucket in enumerate(buckets):
            while len(bucket) > max_per_level:
                candidate = bucket.pop()
                destination = self._nearest_with_room(buckets, index, max_per_level)

                if destination is None:
                    destination = int(np.argmin([len(b) for b in buckets]))
                    # only a strictly less populated level reduces imbalance
                    if len(buckets[destination]) >= len(bucket):
                        bucket.append(candidate)
                        break

                buckets[destination].append(candidate)
                logger.debug(
                    f"Moved {candidate.certificate_id} from level {index + 1} to level {destination + 1}"
                )

    def enforce_progression(self, buckets: List[List[LevelCandidate]]) -> None:
        for index in range(1, len(buckets)):
            current, previous = buckets[index], buckets[index - 1]
            if not current or not previous:
                continue

            current_mean = np.mean([c.difficulty for c in current])
            previous_mean = np.mean([c.difficulty for c in previous])
            if current_mean >= previous_mean - PROGRESSION_TOLERANCE:
                continue

            easiest = min(range(len(current)), key=lambda i: current[i].difficulty)
            hardest = max(range(len(previous)), key=lambda i: previous[i].difficulty)
            current[easiest], previous[hardest] = previous[hardest], current[easiest]

    @staticmethod
    def _nearest_with_room(
        buckets: List[List[LevelCandidate]],
        index: int,
        max_per_level: int,
    ) -> Optional[int]:
        """Closest level index with room, lower level first on equal distance."""
        for distance in range(1, len(buckets)):
            for candidate_index in (index - distance, index + distance):
                if 0 <= candidate_index < len(buckets) and len(buckets[candidate_index]) < max_per_level:
                    return candidate_index
        return None
