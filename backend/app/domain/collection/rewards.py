"""Collection reward calculation.

reward = base points for the waste category + a bonus for the quantity,
rounded to two decimals. "Metal Cans", "5 kg" earns 2 + 1 = 3.
"""
import re

from app.domain.common.types import round_points

# First matching keyword group wins; checked against the lower-cased waste type
CATEGORY_POINTS = (
    (("plastic", "bottle"), 1),
    (("paper", "cardboard"), 1),
    (("organic", "food"), 1),
    (("electronic", "e-waste"), 2),
    (("glass",), 1),
    (("metal",), 2),
)
DEFAULT_POINTS = 1

_FIRST_INTEGER = re.compile(r"\d+")


def base_points(waste_type: str) -> float:
    kind = (waste_type or "").lower()
    for keywords, points in CATEGORY_POINTS:
        if any(k in kind for k in keywords):
            return points
    return DEFAULT_POINTS


def quantity_bonus(amount: str) -> float:
    """1 for 5 or more, 0.5 for 3-4, else 0. Only the first integer in the text counts ("2-3 kg" -> 2)."""
    match = _FIRST_INTEGER.search(amount or "")
    if not match:
        return 0
    quantity = int(match.group())
    if quantity >= 5:
        return 1
    if quantity >= 3:
        return 0.5
    return 0


def calculate_reward(waste_type: str, amount: str) -> float:
    return round_points(base_points(waste_type) + quantity_bonus(amount))


def reward_breakdown(waste_type: str, amount: str) -> dict:
    base = base_points(waste_type)
    bonus = quantity_bonus(amount)
    return {"base": base, "bonus": bonus, "total": round_points(base + bonus)}
