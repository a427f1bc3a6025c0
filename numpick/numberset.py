"""Number set generator — the cards shown each round."""

import random

NUMBER_MIN = 1
NUMBER_MAX = 99


def generate_numbers(count: int, rng: random.Random | None = None) -> tuple[int, ...]:
    """Draw `count` independent integers in NUMBER_MIN..NUMBER_MAX.

    Duplicates are allowed. Order is the order cards are laid out.
    """
    if count < 2:
        raise ValueError(f"need at least 2 cards, got {count}")
    rng = rng or random
    return tuple(rng.randint(NUMBER_MIN, NUMBER_MAX) for _ in range(count))
