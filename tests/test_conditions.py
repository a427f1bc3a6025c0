"""Tests for condition generation and evaluation."""

import random


def test_max_accepts_every_copy_of_tied_value():
    from numpick.conditions import make_condition
    from numpick.evaluator import evaluate

    numbers = (7, 3, 7, 1)
    cond = make_condition("max", max(numbers))
    assert evaluate(7, numbers, cond)
    assert not evaluate(3, numbers, cond)
    assert not evaluate(1, numbers, cond)


def test_min_by_value():
    from numpick.conditions import make_condition, satisfies

    numbers = (4, 2, 9, 2)
    cond = make_condition("min", min(numbers))
    assert satisfies(cond, 2, numbers)
    assert not satisfies(cond, 4, numbers)


def test_parity():
    from numpick.conditions import make_condition, satisfies

    even = make_condition("even")
    odd = make_condition("odd")
    assert satisfies(even, 12, (12, 5))
    assert not satisfies(even, 5, (12, 5))
    assert satisfies(odd, 5, (12, 5))


def test_beginner_only_parity():
    from numpick.conditions import generate_condition

    rng = random.Random(1)
    for _ in range(200):
        numbers = tuple(rng.randint(1, 99) for _ in range(3))
        cond = generate_condition(numbers, "beginner", previous=numbers[0], rng=rng)
        assert cond.kind in ("even", "odd")


def test_tier_unlocks_are_cumulative():
    from numpick.conditions import TIER_KINDS

    tiers = ["beginner", "intermediate", "advanced", "master"]
    for lower, higher in zip(tiers, tiers[1:]):
        assert set(TIER_KINDS[lower]) < set(TIER_KINDS[higher])


def test_parity_never_unsatisfiable():
    from numpick.conditions import eligible_kinds

    assert eligible_kinds((1, 3, 5), "beginner") == ["odd"]
    assert eligible_kinds((2, 4), "beginner") == ["even"]


def test_generated_conditions_are_satisfiable():
    from numpick.conditions import generate_condition
    from numpick.evaluator import evaluate

    rng = random.Random(7)
    for tier in ("beginner", "intermediate", "advanced", "master"):
        for _ in range(200):
            numbers = tuple(rng.randint(1, 99) for _ in range(5))
            previous = rng.choice(numbers + (None, 100))
            cond = generate_condition(numbers, tier, previous, rng)
            assert any(evaluate(n, numbers, cond) for n in numbers)


def test_memory_requires_previous_on_board():
    from numpick.conditions import MEMORY_KINDS, eligible_kinds

    numbers = (10, 20, 30)
    assert not set(MEMORY_KINDS) & set(eligible_kinds(numbers, "master", None))
    assert not set(MEMORY_KINDS) & set(eligible_kinds(numbers, "master", 42))
    kinds = eligible_kinds(numbers, "master", 20)
    assert {"memory_same", "memory_greater", "memory_less"} <= set(kinds)


def test_memory_greater_needs_a_larger_number():
    from numpick.conditions import eligible_kinds

    kinds = eligible_kinds((10, 30, 30), "master", 30)
    assert "memory_same" in kinds
    assert "memory_less" in kinds
    assert "memory_greater" not in kinds


def test_memory_condition_embeds_previous_value():
    from numpick.conditions import make_condition

    cond = make_condition("memory_same", 42)
    assert cond.target == 42
    assert "42" in cond.description_ja
    assert "42" in cond.description_en
    assert cond.description == cond.description_ja


def test_memory_greater_and_less():
    from numpick.conditions import make_condition, satisfies

    numbers = (10, 20, 30)
    greater = make_condition("memory_greater", 20)
    less = make_condition("memory_less", 20)
    assert satisfies(greater, 30, numbers)
    assert not satisfies(greater, 20, numbers)
    assert satisfies(less, 10, numbers)
    assert not satisfies(less, 30, numbers)


def test_extremal_target_is_bound_at_generation():
    from numpick.conditions import generate_condition

    class PickMax:
        def choice(self, seq):
            return "max"

    cond = generate_condition([5, 80, 12, 80], "intermediate", rng=PickMax())
    assert cond.kind == "max"
    assert cond.target == 80


def test_unknown_tier_falls_back_to_parity_of_first_card():
    from numpick.conditions import generate_condition

    cond = generate_condition((8, 3), "nightmare")
    assert cond.kind == "even"
    cond = generate_condition((9, 4), "nightmare")
    assert cond.kind == "odd"


def test_describe_language():
    from numpick.conditions import make_condition

    cond = make_condition("max", 99)
    assert cond.describe("en") == "Pick the largest number"
    assert cond.describe("ja") == "一番大きい数を選べ"
    assert cond.describe("fr") == cond.description_ja


def test_to_dict_is_plain_data():
    from numpick.conditions import make_condition

    data = make_condition("min", 3).to_dict()
    assert data["kind"] == "min"
    assert data["target"] == 3
    assert data["description_en"] == "Pick the smallest number"
