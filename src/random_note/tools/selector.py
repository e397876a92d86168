"""
Random selection for Advanced Random Note.
"""

import random
import logging
from typing import Optional, Sequence, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar('T')

_system_random = random.SystemRandom()


def get_random_element(candidates: Sequence[T], rng: Optional[random.Random] = None) -> Optional[T]:
    """
    Pick one element uniformly at random.

    Args:
        candidates: Candidate set to choose from
        rng: Random generator to draw from; pass a seeded ``random.Random``
            for reproducible picks

    Returns:
        The chosen element, or None if ``candidates`` is empty
    """
    if not candidates:
        logger.debug("No candidates to choose from")
        return None
    if len(candidates) == 1:
        return candidates[0]

    rng = rng or _system_random
    return candidates[rng.randrange(len(candidates))]
