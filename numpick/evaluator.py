"""Answer evaluator."""

from numpick.conditions import Condition, satisfies


def evaluate(selected, numbers, condition: Condition | None) -> bool:
    """Judge a pick. Values not on the board are wrong, never an error."""
    if condition is None:
        return False
    if isinstance(selected, bool) or not isinstance(selected, int):
        return False
    if selected not in tuple(numbers):
        return False
    return satisfies(condition, selected, numbers)
