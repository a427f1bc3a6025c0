"""Condition generator — what the player has to pick this round.

A Condition is a tagged value {kind, target}: kind names the rule, target is
the scalar the rule needs (the extreme value for max/min, the previous correct
answer for memory kinds). Evaluation is the pure function `satisfies`, so a
condition carries no hidden state and can be compared or serialized.
"""

import random
from dataclasses import dataclass

EXTREMAL_KINDS = ("max", "min")
MEMORY_KINDS = ("memory_same", "memory_greater", "memory_less")

# Kinds unlocked per tier; each tier includes everything below it.
TIER_KINDS: dict[str, tuple[str, ...]] = {
    "beginner": ("even", "odd"),
    "intermediate": ("even", "odd", "max", "min"),
    "advanced": ("even", "odd", "max", "min", "memory_same"),
    "master": ("even", "odd", "max", "min",
               "memory_same", "memory_greater", "memory_less"),
}

_TEXT = {
    "even": ("偶数を選べ", "Pick an even number"),
    "odd": ("奇数を選べ", "Pick an odd number"),
    "max": ("一番大きい数を選べ", "Pick the largest number"),
    "min": ("一番小さい数を選べ", "Pick the smallest number"),
    "memory_same": ("前の正解（{v}）と同じ数を選べ",
                    "Pick your last answer ({v})"),
    "memory_greater": ("前の正解（{v}）より大きい数を選べ",
                       "Pick a number larger than your last answer ({v})"),
    "memory_less": ("前の正解（{v}）より小さい数を選べ",
                    "Pick a number smaller than your last answer ({v})"),
}


@dataclass(frozen=True)
class Condition:
    kind: str
    target: int | None = None
    description_ja: str = ""
    description_en: str = ""

    @property
    def description(self) -> str:
        return self.description_ja

    def describe(self, language: str = "ja") -> str:
        """Text for a language tag; unknown tags get the default (ja)."""
        if language == "en":
            return self.description_en
        return self.description_ja

    def check(self, selected: int, numbers) -> bool:
        return satisfies(self, selected, numbers)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "target": self.target,
            "description": self.description,
            "description_ja": self.description_ja,
            "description_en": self.description_en,
        }


def satisfies(condition: Condition, selected: int, numbers) -> bool:
    """Pure predicate: does `selected` meet `condition` for `numbers`?"""
    kind = condition.kind
    target = condition.target
    if kind == "even":
        return selected % 2 == 0
    if kind == "odd":
        return selected % 2 == 1
    if kind in ("max", "min", "memory_same"):
        # value equality, so every copy of a tied extreme is accepted
        return selected == target
    if kind == "memory_greater":
        return target is not None and selected > target
    if kind == "memory_less":
        return target is not None and selected < target
    return False


def make_condition(kind: str, target: int | None = None) -> Condition:
    ja, en = _TEXT[kind]
    return Condition(
        kind=kind,
        target=target,
        description_ja=ja.format(v=target),
        description_en=en.format(v=target),
    )


def _eligible(kind: str, numbers, previous: int | None) -> bool:
    if kind == "even":
        return any(n % 2 == 0 for n in numbers)
    if kind == "odd":
        return any(n % 2 == 1 for n in numbers)
    if kind in EXTREMAL_KINDS:
        return len(numbers) > 0
    if kind in MEMORY_KINDS:
        if previous is None or previous not in numbers:
            return False
        if kind == "memory_greater":
            return any(n > previous for n in numbers)
        if kind == "memory_less":
            return any(n < previous for n in numbers)
        return True
    return False


def eligible_kinds(numbers, difficulty: str, previous: int | None = None) -> list[str]:
    """Kinds available at `difficulty` that some number can satisfy."""
    return [k for k in TIER_KINDS.get(difficulty, ())
            if _eligible(k, numbers, previous)]


def generate_condition(numbers, difficulty: str, previous: int | None = None,
                       rng: random.Random | None = None) -> Condition:
    """Pick a condition kind for this round and bind its target.

    Memory kinds are only offered when `previous` is on the board. If no
    kind is eligible the parity of the first card is used, which is always
    satisfiable.
    """
    rng = rng or random
    numbers = tuple(numbers)
    candidates = eligible_kinds(numbers, difficulty, previous)
    if not candidates:
        return make_condition("even" if numbers[0] % 2 == 0 else "odd")

    kind = rng.choice(candidates)
    if kind == "max":
        return make_condition(kind, max(numbers))
    if kind == "min":
        return make_condition(kind, min(numbers))
    if kind in MEMORY_KINDS:
        return make_condition(kind, previous)
    return make_condition(kind)
