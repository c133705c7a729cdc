from bisect import bisect_left
from typing import Iterable


def correct_position(target_severity: int, hand_severities: Iterable[int]) -> int:
    """Return the 0-based index at which ``target_severity`` belongs in the hand.

    The hand is sorted ascending first since storage order is not guaranteed.
    A card that ties with cards already held goes before all of them, so the
    answer is the count of held cards strictly below the target: for a hand
    of ``[10, 10, 40]`` a new 10 belongs at index 0.
    """
    ordered = sorted(hand_severities)
    return bisect_left(ordered, target_severity)
