import random
from typing import NamedTuple, Optional, Sequence, Tuple

# One card per value, ace counted as 1 and 11 as its high value
STANDARD_DECK: Tuple[int, ...] = tuple(range(1, 12))
HAND_SIZE = 2


class Deal(NamedTuple):
    hand1: Tuple[int, int]
    hand2: Tuple[int, int]
    remainder: Tuple[int, ...]


def make_rng(seed: Optional[int] = None) -> random.Random:
    """Seeded generator for reproducible deals, OS entropy otherwise."""
    if seed is None:
        return random.SystemRandom()
    return random.Random(seed)


def deal(deck: Sequence[int] = STANDARD_DECK, rng: Optional[random.Random] = None) -> Deal:
    """Shuffle a copy of ``deck`` and split it into two hands and a draw pile.

    Every permutation is equally likely, so each hand is a uniform draw
    without replacement. The input is left untouched.
    """
    if len(deck) < 2 * HAND_SIZE:
        raise ValueError(f"Need at least {2 * HAND_SIZE} cards to deal, got {len(deck)}")
    cards = list(deck)
    (rng or make_rng()).shuffle(cards)
    return Deal(
        hand1=(cards[0], cards[1]),
        hand2=(cards[2], cards[3]),
        remainder=tuple(cards[4:]),
    )
